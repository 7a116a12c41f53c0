"""
Configuration model — the contents of ``.gitcommit.yaml``.

Every field has a default so a missing or partial file still yields a
usable configuration. Unknown keys are ignored rather than rejected,
which keeps older binaries working with newer config files.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MODEL = "qwen2.5-coder:7b"
DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_TEMPLATE = "{type}({scope}): {subject}"

SUBJECT_LENGTHS = {"normal": 72, "short": 36}


class CommitType(BaseModel):
    """A Conventional Commits type offered to the user."""

    name: str
    emoji: str = ""
    desc: str = ""


def default_types() -> list[CommitType]:
    """The built-in commit type catalogue."""
    return [
        CommitType(name="feat", emoji="✨", desc="A new feature"),
        CommitType(name="fix", emoji="🐛", desc="A bug fix"),
        CommitType(name="docs", emoji="📝", desc="Documentation only changes"),
        CommitType(name="style", emoji="💄", desc="Formatting, missing semicolons, etc."),
        CommitType(name="refactor", emoji="♻️", desc="Code change that neither fixes a bug nor adds a feature"),
        CommitType(name="perf", emoji="⚡", desc="A code change that improves performance"),
        CommitType(name="test", emoji="✅", desc="Adding or correcting tests"),
        CommitType(name="build", emoji="📦", desc="Build system or external dependency changes"),
        CommitType(name="ci", emoji="👷", desc="CI configuration changes"),
        CommitType(name="chore", emoji="🔧", desc="Other changes that don't modify src or test files"),
        CommitType(name="revert", emoji="⏪", desc="Reverts a previous commit"),
    ]


class GitAIConfig(BaseModel):
    """Effective gitai configuration."""

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    model: str = DEFAULT_MODEL
    language: str = "en"
    template: str = DEFAULT_TEMPLATE
    types: list[CommitType] = Field(default_factory=default_types)
    scopes: list[str] = Field(default_factory=list)

    ollama_url: str = DEFAULT_OLLAMA_URL
    timeout: int = 120
    temperature: float = 0.7

    detailed_commit: bool = False
    subject_length: str = "normal"
    custom_prompt: str = ""

    ticket_pattern: str = ""
    ticket_prefix: str = ""

    max_diff_length: int = 4000
    context_commits: int = 5

    @field_validator("subject_length")
    @classmethod
    def _check_subject_length(cls, v: str) -> str:
        if v not in SUBJECT_LENGTHS:
            raise ValueError(
                f"subject_length must be one of {', '.join(SUBJECT_LENGTHS)}, got {v!r}"
            )
        return v

    @field_validator("types")
    @classmethod
    def _check_types(cls, v: list[CommitType]) -> list[CommitType]:
        if not v:
            raise ValueError("at least one commit type is required")
        return v

    @property
    def max_subject_length(self) -> int:
        return SUBJECT_LENGTHS[self.subject_length]

    def get_type_by_name(self, name: str) -> CommitType | None:
        """Look up a commit type by name."""
        for t in self.types:
            if t.name == name:
                return t
        return None

    def type_names(self) -> list[str]:
        return [t.name for t in self.types]
