"""
Domain models — Pydantic types for gitai.

All models are re-exported here for convenient access:

    from gitai.core.models import GitAIConfig, CommitType, Release, ReleaseArtifact
"""

from gitai.core.models.config import CommitType, GitAIConfig, default_types
from gitai.core.models.release import Release, ReleaseArtifact

__all__ = [
    # config.py
    "CommitType",
    "GitAIConfig",
    "default_types",
    # release.py
    "Release",
    "ReleaseArtifact",
]
