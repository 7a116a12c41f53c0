"""
Commit use case — staged changes in, Conventional Commit out.

Split into three steps so the CLI can loop between them:

    draft = prepare_commit(cfg)                  # git + analysis, no network
    message = generate_message(draft, request)   # one model round-trip
    result = apply_commit(draft, message)        # git commit (or dry run)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from gitai.core.models.config import GitAIConfig
from gitai.core.services import git_ops
from gitai.core.services.commit_message import normalize_message, suggest_commit_type
from gitai.core.services.diff_analyzer import DiffAnalysis, analyze_diff
from gitai.core.services.git_ops import FileChange, GitError, ProjectContext
from gitai.core.services.ollama import OllamaClient
from gitai.core.services.prompt import PromptBuilder
from gitai.core.services.ticket import extract_ticket_from_branch, format_ticket_number

logger = logging.getLogger(__name__)


@dataclass
class CommitDraft:
    """Everything known about the staged changes before generation."""

    config: GitAIConfig
    diff: str
    files: list[FileChange] = field(default_factory=list)
    context: ProjectContext = field(default_factory=ProjectContext)
    analysis: DiffAnalysis = field(default_factory=DiffAnalysis)
    ticket: str = ""
    suggested_type: str = ""
    cwd: Path | None = None


@dataclass
class GenerationRequest:
    commit_type: str
    scope: str = ""
    detailed: bool = False
    regenerate_count: int = 0


@dataclass
class CommitResult:
    """Outcome of ``gitai commit``."""

    message: str = ""
    committed: bool = False
    dry_run: bool = False
    commit_hash: str = ""
    files: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "committed": self.committed,
            "dry_run": self.dry_run,
            "commit_hash": self.commit_hash,
            "files": self.files,
        }


def resolve_ticket(cfg: GitAIConfig, branch: str, explicit: str | None = None) -> str:
    """Ticket from ``--ticket``, else from the branch name, prefix applied."""
    raw = explicit if explicit else extract_ticket_from_branch(branch, cfg.ticket_pattern)
    return format_ticket_number(raw, cfg.ticket_prefix) if raw else ""


def prepare_commit(
    cfg: GitAIConfig,
    *,
    cwd: Path | None = None,
    ticket: str | None = None,
) -> CommitDraft:
    """Collect the staged diff and its context.

    Raises:
        GitError: Not a repository, or nothing is staged.
    """
    if not git_ops.is_git_repository(cwd):
        raise GitError("not a git repository (or any of the parent directories)")

    diff = git_ops.get_staged_diff(cwd)
    files = git_ops.get_changed_files_with_stats(cwd)
    context = git_ops.get_project_context(cwd, recent=cfg.context_commits)
    analysis = analyze_diff(diff, cfg.max_diff_length)

    draft = CommitDraft(
        config=cfg,
        diff=diff,
        files=files,
        context=context,
        analysis=analysis,
        ticket=resolve_ticket(cfg, context.branch_name, ticket),
        suggested_type=suggest_commit_type(analysis, cfg.type_names()),
        cwd=cwd,
    )
    logger.info(
        "Prepared commit: %d files, +%d/-%d, %s, suggested type %s",
        len(files), analysis.total_additions, analysis.total_deletions,
        analysis.change_complexity, draft.suggested_type,
    )
    return draft


def build_prompt(draft: CommitDraft, request: GenerationRequest) -> str:
    cfg = draft.config
    builder = PromptBuilder(
        commit_type=request.commit_type,
        scope=request.scope,
        diff=draft.analysis.smart_diff or draft.diff,
        context=draft.context,
        language=cfg.language,
        detailed_commit=request.detailed,
        custom_prompt=cfg.custom_prompt,
        ticket_number=draft.ticket,
        subject_length=cfg.subject_length,
        regenerate_count=request.regenerate_count,
    )
    return builder.build()


def generate_message(
    draft: CommitDraft,
    request: GenerationRequest,
    client: OllamaClient | None = None,
) -> str:
    """Ask the model for a message and normalise it.

    Raises:
        OllamaError: The model call failed.
        ValueError: The model answered with nothing usable.
    """
    cfg = draft.config
    if client is None:
        client = OllamaClient(
            cfg.ollama_url,
            cfg.model,
            timeout=cfg.timeout,
            temperature=cfg.temperature,
        )

    raw = client.generate(build_prompt(draft, request))
    return normalize_message(
        raw,
        commit_type=request.commit_type,
        scope=request.scope,
        ticket=draft.ticket,
        template=cfg.template,
        detailed=request.detailed,
    )


def apply_commit(draft: CommitDraft, message: str, *, dry_run: bool = False) -> CommitResult:
    """Commit the staged changes with ``message`` unless ``dry_run``."""
    result = CommitResult(
        message=message,
        dry_run=dry_run,
        files=[f.file for f in draft.files],
    )
    if dry_run:
        logger.info("Dry run, not committing")
        return result

    result.commit_hash = git_ops.commit_with_message(message, cwd=draft.cwd)
    result.committed = True
    return result
