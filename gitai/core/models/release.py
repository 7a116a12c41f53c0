"""
Release models — published versions and their per-platform artifacts.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ReleaseArtifact(BaseModel):
    """One downloadable binary, identified by (os, arch).

    Immutable: a release's artifacts never change once published.
    """

    model_config = ConfigDict(frozen=True)

    os: str
    arch: str
    name: str
    url: str
    sha256: str

    @property
    def platform(self) -> str:
        return f"{self.os}/{self.arch}"


class Release(BaseModel):
    """A GitHub release as returned by the releases API."""

    model_config = ConfigDict(extra="ignore")

    tag_name: str
    name: str = ""
    body: str = ""

    @property
    def version(self) -> str:
        return self.tag_name.removeprefix("v")
