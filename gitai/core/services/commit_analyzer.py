"""
Commit history analysis — the engine behind ``gitai stats``.

Reads ``git log`` once and derives type/scope/verb/language/time
distributions, recent activity trends and contributor counts, plus a
plain-text report and a short list of insights.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

from gitai.core.services.git_ops import GitError, run_git

logger = logging.getLogger(__name__)

# Unit/record separators keep multi-line bodies intact
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = "%H%x1f%an%x1f%s%x1f%b%x1f%ad%x1e"
_GIT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"

TYPE_PATTERN = re.compile(r"^(\w+)(?:\(([^)]+)\))?!?:\s*(.+)$")
TICKET_PATTERN = re.compile(r"\[([\w-]+)\]|\b([A-Z]+-\d+)\b")
VERB_PATTERN = re.compile(r"^(\w+)(?:\(([^)]+)\))?!?:\s*(\w+)")

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

LANGUAGE_NAMES = {
    "en": "English",
    "zh": "中文",
    "ja": "日本語",
    "ko": "한국어",
    "de": "Deutsch",
    "fr": "Français",
    "es": "Español",
    "pt": "Português",
    "ru": "Русский",
    "it": "Italiano",
}


@dataclass
class CommitRecord:
    hash: str
    author: str
    subject: str
    body: str = ""
    date: datetime | None = None


@dataclass
class TrendAnalysis:
    last_30_days: int = 0
    last_7_days: int = 0
    most_active_day: str = ""
    average_per_day: float = 0.0

    def to_dict(self) -> dict:
        return {
            "last_30_days": self.last_30_days,
            "last_7_days": self.last_7_days,
            "most_active_day": self.most_active_day,
            "average_per_day": round(self.average_per_day, 2),
        }


@dataclass
class CommitStats:
    total_commits: int = 0
    type_distribution: Counter = field(default_factory=Counter)
    scope_distribution: Counter = field(default_factory=Counter)
    type_scopes: dict[str, Counter] = field(default_factory=dict)
    type_examples: dict[str, str] = field(default_factory=dict)
    author_stats: Counter = field(default_factory=Counter)
    average_length: int = 0
    longest_subject: str = ""
    shortest_subject: str = ""
    with_scope: int = 0
    with_body: int = 0
    with_ticket: int = 0
    common_verbs: Counter = field(default_factory=Counter)
    language_usage: Counter = field(default_factory=Counter)
    time_distribution: Counter = field(default_factory=Counter)
    day_distribution: Counter = field(default_factory=Counter)
    recent_trends: TrendAnalysis | None = None

    def percent(self, count: int) -> float:
        return count / self.total_commits * 100 if self.total_commits else 0.0

    def to_dict(self) -> dict:
        return {
            "total_commits": self.total_commits,
            "average_length": self.average_length,
            "longest_subject": self.longest_subject,
            "shortest_subject": self.shortest_subject,
            "with_scope": self.with_scope,
            "with_body": self.with_body,
            "with_ticket": self.with_ticket,
            "type_distribution": dict(self.type_distribution.most_common()),
            "scope_distribution": dict(self.scope_distribution.most_common()),
            "author_stats": dict(self.author_stats.most_common()),
            "common_verbs": dict(self.common_verbs.most_common()),
            "language_usage": dict(self.language_usage.most_common()),
            "time_distribution": dict(sorted(self.time_distribution.items())),
            "day_distribution": {
                d: self.day_distribution[d] for d in WEEKDAYS if d in self.day_distribution
            },
            "recent_trends": self.recent_trends.to_dict() if self.recent_trends else None,
        }


@dataclass
class CommitPattern:
    type: str
    scope: str = ""
    frequency: int = 0
    example_message: str = ""


@dataclass
class Insight:
    icon: str
    message: str
    advice: str


# ═══════════════════════════════════════════════════════════════════
#  Reading history
# ═══════════════════════════════════════════════════════════════════


def read_commit_log(limit: int, cwd: Path | None = None) -> list[CommitRecord]:
    """Return up to ``limit`` commits from HEAD, newest first.

    An empty repository yields an empty list.
    """
    r = run_git(
        "log", f"-{limit}", f"--pretty=format:{_LOG_FORMAT}", "--date=iso",
        cwd=cwd, timeout=60,
    )
    if r.returncode != 0:
        stderr = r.stderr.strip()
        if "does not have any commits" in stderr or "bad default revision" in stderr:
            return []
        raise GitError(f"failed to read git log: {stderr}")
    return parse_log_records(r.stdout)


def parse_log_records(output: str) -> list[CommitRecord]:
    records = []
    for raw in output.split(_RECORD_SEP):
        raw = raw.strip("\n")
        if not raw.strip():
            continue
        parts = raw.split(_FIELD_SEP)
        if len(parts) < 5:
            logger.debug("Skipping malformed log record: %r", raw[:80])
            continue
        commit_hash, author, subject, body, date_str = parts[:5]
        try:
            when = datetime.strptime(date_str.strip(), _GIT_DATE_FORMAT)
        except ValueError:
            when = None
        records.append(
            CommitRecord(
                hash=commit_hash.strip(),
                author=author,
                subject=subject,
                body=body,
                date=when,
            )
        )
    return records


# ═══════════════════════════════════════════════════════════════════
#  Statistics
# ═══════════════════════════════════════════════════════════════════


def analyze_commit_history(
    limit: int,
    cwd: Path | None = None,
    *,
    now: datetime | None = None,
) -> CommitStats:
    """Analyse the last ``limit`` commits of the repository at ``cwd``."""
    records = read_commit_log(limit, cwd=cwd)
    stats = compute_stats(records, now=now)
    logger.info("Analysed %d commits", stats.total_commits)
    return stats


def compute_stats(records: list[CommitRecord], *, now: datetime | None = None) -> CommitStats:
    stats = CommitStats()
    if not records:
        return stats

    stats.total_commits = len(records)
    total_length = 0
    longest = records[0].subject
    shortest = records[0].subject
    dates: list[datetime] = []

    for rec in records:
        subject = rec.subject
        stats.author_stats[rec.author] += 1

        total_length += len(subject)
        if len(subject) > len(longest):
            longest = subject
        if len(subject) < len(shortest):
            shortest = subject

        if rec.date is not None:
            stats.time_distribution[f"{rec.date.hour:02d}:00"] += 1
            stats.day_distribution[WEEKDAYS[rec.date.weekday()]] += 1
            dates.append(rec.date)

        m = TYPE_PATTERN.match(subject)
        if m:
            commit_type, scope = m.group(1), m.group(2) or ""
            stats.type_distribution[commit_type] += 1
            stats.type_examples.setdefault(commit_type, subject)
            if scope:
                stats.scope_distribution[scope] += 1
                stats.type_scopes.setdefault(commit_type, Counter())[scope] += 1
                stats.with_scope += 1

        if rec.body.strip():
            stats.with_body += 1

        if TICKET_PATTERN.search(subject):
            stats.with_ticket += 1

        vm = VERB_PATTERN.match(subject)
        if vm:
            stats.common_verbs[vm.group(3).lower()] += 1

        stats.language_usage[detect_commit_language(subject)] += 1

    stats.average_length = total_length // stats.total_commits
    stats.longest_subject = longest
    stats.shortest_subject = shortest

    stats.recent_trends = analyze_trends(dates, now or datetime.now().astimezone())
    return stats


def analyze_trends(dates: list[datetime], now: datetime) -> TrendAnalysis:
    """Activity in the 30 and 7 days before ``now``.

    Windows are measured in full timestamps, not calendar days.
    """
    trends = TrendAnalysis()
    cutoff_30 = now - timedelta(days=30)
    cutoff_7 = now - timedelta(days=7)
    day_commits: Counter = Counter()

    for when in dates:
        if when.tzinfo is None and now.tzinfo is not None:
            when = when.replace(tzinfo=now.tzinfo)
        if when > cutoff_30:
            trends.last_30_days += 1
        if when > cutoff_7:
            trends.last_7_days += 1
        day_commits[when.date()] += 1

    if day_commits:
        busiest = max(day_commits.items(), key=lambda kv: (kv[1], kv[0]))
        trends.most_active_day = busiest[0].isoformat()

    if trends.last_30_days:
        trends.average_per_day = trends.last_30_days / 30.0
    return trends


def detect_commit_language(subject: str) -> str:
    """Guess the natural language of a subject from its script."""
    for ch in subject:
        cp = ord(ch)
        if 0x4E00 <= cp <= 0x9FFF:
            return "zh"
        if 0x3040 <= cp <= 0x309F or 0x30A0 <= cp <= 0x30FF:
            return "ja"
        if 0xAC00 <= cp <= 0xD7AF:
            return "ko"
        if 0x0400 <= cp <= 0x04FF:
            return "ru"
    return "en"


def get_top_patterns(stats: CommitStats, top_n: int) -> list[CommitPattern]:
    """Most frequent commit types with their favourite scope."""
    ranked = sorted(stats.type_distribution.items(), key=lambda kv: (-kv[1], kv[0]))
    patterns = []
    for commit_type, count in ranked[:top_n]:
        scopes = stats.type_scopes.get(commit_type)
        scope = scopes.most_common(1)[0][0] if scopes else ""
        patterns.append(
            CommitPattern(
                type=commit_type,
                scope=scope,
                frequency=count,
                example_message=stats.type_examples.get(commit_type, ""),
            )
        )
    return patterns


def find_similar_commits(
    changed_files: list[str],
    limit: int,
    cwd: Path | None = None,
) -> list[str]:
    """Subjects of past commits that touched files like ``changed_files``."""
    if not changed_files:
        return []

    patterns: list[str] = []
    for path in changed_files:
        parts = path.split("/")
        if len(parts) > 1:
            patterns.append(parts[-2])
        patterns.append(parts[-1])

    similar: list[str] = []
    for pattern in dict.fromkeys(patterns):
        try:
            r = run_git(
                "log", f"-{limit}", "--pretty=format:%s", "--", f"*{pattern}*",
                cwd=cwd,
            )
        except GitError as e:
            logger.debug("Similar-commit lookup failed for %s: %s", pattern, e)
            continue
        if r.returncode != 0:
            continue
        for subject in r.stdout.strip().splitlines():
            if subject and subject not in similar:
                similar.append(subject)
        if len(similar) >= limit:
            break

    return similar[:limit]


# ═══════════════════════════════════════════════════════════════════
#  Reporting
# ═══════════════════════════════════════════════════════════════════


def create_bar(percentage: int, max_width: int) -> str:
    percentage = max(0, min(percentage, 100))
    width = percentage * max_width // 100
    return "[" + "█" * width + "░" * (max_width - width) + "]"


def truncate(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    return s[: max_len - 3] + "..."


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code, code)


def format_stats_report(stats: CommitStats) -> str:
    """Human-readable multi-section report."""
    total = stats.total_commits
    out: list[str] = []

    out.append("📊 Commit History Statistics\n")
    out.append("=" * 50 + "\n\n")

    out.append("📈 Overview\n")
    out.append(f"  Total Commits: {total}\n")
    out.append(f"  Average Subject Length: {stats.average_length} characters\n")
    out.append(f"  With Scope: {stats.with_scope} ({stats.percent(stats.with_scope):.1f}%)\n")
    out.append(f"  With Body: {stats.with_body} ({stats.percent(stats.with_body):.1f}%)\n")
    out.append(f"  With Ticket: {stats.with_ticket} ({stats.percent(stats.with_ticket):.1f}%)\n\n")

    out.append("🏷️  Commit Types\n")
    for name, count in stats.type_distribution.most_common(10):
        pct = stats.percent(count)
        out.append(f"  {name:<12} {create_bar(int(pct), 20)} {count:3d} ({pct:.1f}%)\n")
    out.append("\n")

    if stats.scope_distribution:
        out.append("📦 Top Scopes\n")
        for name, count in stats.scope_distribution.most_common(8):
            pct = count / stats.with_scope * 100 if stats.with_scope else 0
            out.append(f"  {name:<15} {create_bar(int(pct), 15)} {count:3d}\n")
        out.append("\n")

    if stats.common_verbs:
        out.append("🔤 Common Action Verbs\n")
        for verb, count in stats.common_verbs.most_common(8):
            out.append(f"  {verb:<12} {count:3d}\n")
        out.append("\n")

    if len(stats.language_usage) > 1:
        out.append("🌍 Language Usage\n")
        for code, count in stats.language_usage.most_common():
            pct = stats.percent(count)
            out.append(f"  {language_name(code):<10} {create_bar(int(pct), 20)} {pct:.1f}%\n")
        out.append("\n")

    if stats.time_distribution:
        out.append("⏰ Commit Time Distribution\n")
        for hour, count in stats.time_distribution.most_common(5):
            out.append(f"  {hour}  {create_bar(count * 2, 15)} {count}\n")
        out.append("\n")

    if stats.day_distribution:
        out.append("📅 Commit Day Distribution\n")
        busiest = max(stats.day_distribution.values())
        for day in WEEKDAYS:
            count = stats.day_distribution.get(day)
            if count:
                pct = count / busiest * 100
                out.append(f"  {day:<10} {create_bar(int(pct), 20)} {count:3d}\n")
        out.append("\n")

    if stats.recent_trends is not None:
        t = stats.recent_trends
        out.append("📊 Recent Activity\n")
        out.append(f"  Last 30 days: {t.last_30_days} commits ({t.average_per_day:.1f}/day avg)\n")
        out.append(f"  Last 7 days:  {t.last_7_days} commits\n")
        if t.most_active_day:
            out.append(f"  Most active:  {t.most_active_day}\n")
        out.append("\n")

    if stats.author_stats:
        out.append("👥 Top Contributors\n")
        for author, count in stats.author_stats.most_common(5):
            pct = stats.percent(count)
            out.append(f"  {author:<25} {create_bar(int(pct), 15)} {pct:.1f}%\n")
        out.append("\n")

    out.append("📏 Extremes\n")
    out.append(f"  Longest:  {truncate(stats.longest_subject, 60)}\n")
    out.append(f"  Shortest: {truncate(stats.shortest_subject, 60)}\n")

    return "".join(out)


def build_insights(stats: CommitStats) -> list[Insight]:
    """Recommendations derived from the statistics."""
    insights: list[Insight] = []
    if not stats.total_commits:
        return insights

    if stats.average_length > 72:
        insights.append(Insight(
            "⚠️ ", "Your average subject line is quite long (>72 chars)",
            "Consider using shorter, more concise subjects",
        ))
    elif stats.average_length < 30:
        insights.append(Insight(
            "ℹ️ ", "Your subject lines are very brief (<30 chars)",
            "Consider adding more context when helpful",
        ))

    if stats.percent(stats.with_scope) < 20:
        insights.append(Insight(
            "💡", "You rarely use scopes in commits (<20%)",
            "Scopes help organize changes by component/module",
        ))

    if stats.percent(stats.with_body) < 10:
        insights.append(Insight(
            "💡", "Most commits have no body (<10%)",
            "Consider adding details for non-trivial changes",
        ))

    if stats.recent_trends is not None:
        avg = stats.recent_trends.average_per_day
        if avg > 10:
            insights.append(Insight(
                "🔥", "Very high commit frequency (>10/day avg)",
                "Great activity! Consider squashing related commits",
            ))
        elif avg < 1:
            insights.append(Insight(
                "📉", "Low commit frequency (<1/day avg)",
                "Consider committing more frequently",
            ))

    if len(stats.type_distribution) < 3:
        insights.append(Insight(
            "ℹ️ ", "Limited commit type variety",
            "Explore other types: docs, test, refactor, perf, etc.",
        ))

    return insights
