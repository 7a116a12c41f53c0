"""
Git operations — staged diff, project context, and commit creation.

Everything goes through the ``git`` CLI via ``run_git``. Functions take
the repository directory explicitly (default: cwd) so tests can point
them at a temporary repository.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

README_NAMES = ("README.md", "README.MD", "readme.md", "Readme.md")


class GitError(Exception):
    """Raised when a git command fails or the repository state is unusable."""


@dataclass
class FileChange:
    """Per-file numstat entry. ``-`` counts mean a binary file."""

    file: str
    additions: str
    deletions: str

    @property
    def is_binary(self) -> bool:
        return self.additions == "-" or self.deletions == "-"


@dataclass
class ProjectContext:
    """Repository facts fed into the prompt."""

    project_name: str = ""
    recent_commits: list[str] = field(default_factory=list)
    branch_name: str = ""
    changed_files: list[str] = field(default_factory=list)
    readme_snippet: str = ""
    diff_stats: str = ""


# ═══════════════════════════════════════════════════════════════════
#  Low-level runner
# ═══════════════════════════════════════════════════════════════════


def run_git(
    *args: str,
    cwd: Path | None = None,
    timeout: int = 15,
) -> subprocess.CompletedProcess[str]:
    """Run a git command and return the result."""
    logger.debug("git %s", " ".join(args))
    try:
        return subprocess.run(
            ["git", *args],
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise GitError("git executable not found on PATH") from e
    except subprocess.TimeoutExpired as e:
        raise GitError(f"git {args[0]} timed out after {timeout}s") from e


def _lines(output: str) -> list[str]:
    return [ln for ln in output.strip().splitlines() if ln.strip()]


# ═══════════════════════════════════════════════════════════════════
#  Repository queries
# ═══════════════════════════════════════════════════════════════════


def is_git_repository(cwd: Path | None = None) -> bool:
    """True if ``cwd`` is inside a git work tree."""
    try:
        return run_git("rev-parse", "--git-dir", cwd=cwd).returncode == 0
    except GitError:
        return False


def get_staged_diff(cwd: Path | None = None) -> str:
    """Return the staged diff.

    Raises:
        GitError: If git fails or nothing is staged.
    """
    r = run_git("diff", "--cached", cwd=cwd, timeout=30)
    if r.returncode != 0:
        raise GitError(f"failed to get git diff: {r.stderr.strip()}")

    if not r.stdout.strip():
        raise GitError(
            "no staged changes found\n"
            "Stage your changes first:\n"
            "  $ git add <files>"
        )
    return r.stdout


def get_changed_files(cwd: Path | None = None) -> list[str]:
    """Paths of staged files."""
    r = run_git("diff", "--cached", "--name-only", cwd=cwd)
    if r.returncode != 0:
        raise GitError(f"failed to get changed files: {r.stderr.strip()}")
    return _lines(r.stdout)


def get_diff_stats(cwd: Path | None = None) -> str:
    """``git diff --cached --stat`` output."""
    r = run_git("diff", "--cached", "--stat", cwd=cwd)
    if r.returncode != 0:
        raise GitError(f"failed to get diff stats: {r.stderr.strip()}")
    return r.stdout


def get_changed_files_with_stats(cwd: Path | None = None) -> list[FileChange]:
    """Staged files with their added/deleted line counts."""
    r = run_git("diff", "--cached", "--numstat", cwd=cwd)
    if r.returncode != 0:
        raise GitError(f"failed to get file stats: {r.stderr.strip()}")

    changes = []
    for line in _lines(r.stdout):
        parts = line.split("\t")
        if len(parts) < 3:
            parts = line.split()
        if len(parts) < 3:
            continue
        changes.append(FileChange(file=parts[2], additions=parts[0], deletions=parts[1]))
    return changes


def get_current_branch(cwd: Path | None = None) -> str:
    r = run_git("branch", "--show-current", cwd=cwd)
    if r.returncode != 0:
        raise GitError(f"failed to get current branch: {r.stderr.strip()}")
    return r.stdout.strip()


def get_recent_commits(n: int, cwd: Path | None = None) -> list[str]:
    """Subjects of the last ``n`` commits, newest first."""
    r = run_git("log", f"-{n}", "--pretty=format:%s", cwd=cwd)
    if r.returncode != 0:
        # Fresh repository without commits
        return []
    return _lines(r.stdout)


def get_project_name(cwd: Path | None = None) -> str:
    """Repository name from ``remote.origin.url``, else the directory name."""
    try:
        r = run_git("config", "--get", "remote.origin.url", cwd=cwd)
    except GitError:
        r = None
    if r is not None and r.returncode == 0:
        url = r.stdout.strip().rstrip("/")
        name = url.replace(":", "/").split("/")[-1].removesuffix(".git")
        if name:
            return name

    directory = (cwd or Path.cwd()).resolve()
    return directory.name or "unknown"


def get_readme_snippet(max_chars: int = 500, cwd: Path | None = None) -> str:
    """First non-heading lines of the README, capped at ``max_chars``."""
    base = cwd or Path.cwd()
    for filename in README_NAMES:
        path = base / filename
        if not path.is_file():
            continue
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue

        cleaned: list[str] = []
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            cleaned.append(line)
            if len(" ".join(cleaned)) >= max_chars:
                break

        snippet = " ".join(cleaned)
        if len(snippet) > max_chars:
            snippet = snippet[:max_chars] + "..."
        return snippet

    return ""


def get_project_context(
    cwd: Path | None = None,
    *,
    recent: int = 5,
    readme_chars: int = 500,
) -> ProjectContext:
    """Collect project context. Individual failures leave fields empty."""
    ctx = ProjectContext(project_name=get_project_name(cwd))
    ctx.recent_commits = get_recent_commits(recent, cwd=cwd)

    try:
        ctx.branch_name = get_current_branch(cwd)
    except GitError as e:
        logger.debug("No branch name: %s", e)

    try:
        ctx.changed_files = get_changed_files(cwd)
        ctx.diff_stats = get_diff_stats(cwd)
    except GitError as e:
        logger.debug("No staged file info: %s", e)

    ctx.readme_snippet = get_readme_snippet(readme_chars, cwd=cwd)
    return ctx


# ═══════════════════════════════════════════════════════════════════
#  Commits
# ═══════════════════════════════════════════════════════════════════


def commit_with_message(message: str, cwd: Path | None = None) -> str:
    """Create a commit from the staged changes.

    Returns:
        The short hash of the new commit.

    Raises:
        GitError: If the message is empty or ``git commit`` fails.
    """
    if not message.strip():
        raise GitError("commit message is required")

    r = run_git("commit", "-m", message, cwd=cwd, timeout=60)
    if r.returncode != 0:
        output = (r.stdout + r.stderr).strip()
        raise GitError(f"failed to commit\nOutput: {output}")

    r_hash = run_git("rev-parse", "--short", "HEAD", cwd=cwd)
    return r_hash.stdout.strip() if r_hash.returncode == 0 else "?"


def get_last_commit(cwd: Path | None = None) -> str:
    """``<hash> <subject>`` of HEAD."""
    r = run_git("log", "-1", "--pretty=format:%H %s", cwd=cwd)
    if r.returncode != 0:
        raise GitError(f"failed to get last commit: {r.stderr.strip()}")
    return r.stdout
