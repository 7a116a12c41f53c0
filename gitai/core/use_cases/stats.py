"""
Stats use case — analyse history, derive insights, optionally export.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from gitai.core.persistence.files import write_json
from gitai.core.services.commit_analyzer import (
    CommitPattern,
    CommitStats,
    Insight,
    analyze_commit_history,
    build_insights,
    get_top_patterns,
)
from gitai.core.services.git_ops import GitError, is_git_repository

TOP_PATTERNS = 5


@dataclass
class StatsResult:
    stats: CommitStats
    patterns: list[CommitPattern] = field(default_factory=list)
    insights: list[Insight] = field(default_factory=list)
    export_path: Path | None = None

    @property
    def empty(self) -> bool:
        return self.stats.total_commits == 0

    def to_dict(self) -> dict:
        return {
            "stats": self.stats.to_dict(),
            "top_patterns": [
                {
                    "type": p.type,
                    "scope": p.scope,
                    "frequency": p.frequency,
                    "example": p.example_message,
                }
                for p in self.patterns
            ],
            "insights": [{"message": i.message, "advice": i.advice} for i in self.insights],
        }


def collect_stats(
    limit: int = 100,
    *,
    cwd: Path | None = None,
    export: Path | None = None,
    now: datetime | None = None,
) -> StatsResult:
    """Analyse the last ``limit`` commits; write JSON to ``export`` if given.

    Raises:
        GitError: Not inside a git repository.
        OSError: The export file could not be written.
    """
    if not is_git_repository(cwd):
        raise GitError("not a git repository (or any of the parent directories)")

    stats = analyze_commit_history(limit, cwd=cwd, now=now)
    result = StatsResult(stats=stats)
    if result.empty:
        return result

    result.patterns = get_top_patterns(stats, TOP_PATTERNS)
    result.insights = build_insights(stats)

    if export is not None:
        write_json(export, result.to_dict())
        result.export_path = export

    return result
