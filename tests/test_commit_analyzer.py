"""
Tests for commit history analysis and the stats report.
"""

from collections import Counter
from datetime import datetime, timedelta, timezone
from pathlib import Path

from gitai.core.services.commit_analyzer import (
    CommitRecord,
    CommitStats,
    TrendAnalysis,
    analyze_commit_history,
    analyze_trends,
    build_insights,
    compute_stats,
    create_bar,
    detect_commit_language,
    find_similar_commits,
    format_stats_report,
    get_top_patterns,
    parse_log_records,
    read_commit_log,
    truncate,
)
from tests.conftest import git

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def _rec(subject: str, *, author: str = "alice", body: str = "", days_ago: int = 0, hour: int = 10) -> CommitRecord:
    when = (NOW - timedelta(days=days_ago)).replace(hour=hour)
    return CommitRecord(hash="h", author=author, subject=subject, body=body, date=when)


class TestParseLog:
    def test_records_with_multiline_body(self):
        output = (
            "abc\x1falice\x1ffeat(api): add x\x1fline one\nline two\n\x1f2024-06-14 09:30:00 +0200\x1e\n"
            "def\x1fbob\x1ffix: y\x1f\x1f2024-06-13 18:05:00 +0000\x1e"
        )
        records = parse_log_records(output)
        assert [r.hash for r in records] == ["abc", "def"]
        assert records[0].body == "line one\nline two\n"
        assert records[0].date.hour == 9
        assert records[0].date.utcoffset() == timedelta(hours=2)
        assert records[1].author == "bob"
        assert records[1].body == ""

    def test_malformed_records_skipped(self):
        assert parse_log_records("garbage\x1e\n") == []

    def test_bad_date_kept_without_date(self):
        records = parse_log_records("a\x1fx\x1fchore: z\x1f\x1fyesterday\x1e")
        assert records[0].date is None


class TestComputeStats:
    """Distributions and counters."""

    def _records(self) -> list[CommitRecord]:
        return [
            _rec("feat(api): add users endpoint", body="details", days_ago=1),
            _rec("feat(api): add orders endpoint", days_ago=2, author="bob"),
            _rec("fix(ui): [PROJ-12] correct padding", days_ago=3),
            _rec("docs: update readme", days_ago=40),
            _rec("修复登录问题", days_ago=5, hour=22),
        ]

    def test_basic_counts(self):
        stats = compute_stats(self._records(), now=NOW)
        assert stats.total_commits == 5
        assert stats.type_distribution == Counter({"feat": 2, "fix": 1, "docs": 1})
        assert stats.scope_distribution == Counter({"api": 2, "ui": 1})
        assert stats.with_scope == 3
        assert stats.with_body == 1
        assert stats.with_ticket == 1
        assert stats.author_stats == Counter({"alice": 4, "bob": 1})

    def test_verbs_and_languages(self):
        stats = compute_stats(self._records(), now=NOW)
        assert stats.common_verbs["add"] == 2
        assert stats.common_verbs["update"] == 1
        assert stats.language_usage == Counter({"en": 4, "zh": 1})

    def test_lengths(self):
        stats = compute_stats(self._records(), now=NOW)
        assert stats.shortest_subject == "修复登录问题"
        assert stats.longest_subject == "fix(ui): [PROJ-12] correct padding"

    def test_time_distribution(self):
        stats = compute_stats(self._records(), now=NOW)
        assert stats.time_distribution["10:00"] == 4
        assert stats.time_distribution["22:00"] == 1

    def test_trends(self):
        t = compute_stats(self._records(), now=NOW).recent_trends
        assert t.last_30_days == 4
        assert t.last_7_days == 4
        assert abs(t.average_per_day - 4 / 30) < 1e-9

    def test_empty(self):
        assert compute_stats([], now=NOW) == CommitStats()

    def test_to_dict(self):
        d = compute_stats(self._records(), now=NOW).to_dict()
        assert d["total_commits"] == 5
        assert d["type_distribution"] == {"feat": 2, "fix": 1, "docs": 1}
        assert d["recent_trends"]["last_30_days"] == 4


class TestTrends:
    def test_windows_and_busiest_day(self):
        old = NOW - timedelta(days=30, hours=1)
        dates = [
            NOW - timedelta(hours=1),
            NOW - timedelta(hours=2),
            NOW - timedelta(days=6),
            NOW - timedelta(days=6),
            NOW - timedelta(days=6),
            NOW - timedelta(days=7, hours=1),
            *[old] * 5,
        ]
        t = analyze_trends(dates, NOW)
        assert t.last_7_days == 5
        assert t.last_30_days == 6
        assert t.most_active_day == old.date().isoformat()

    def test_window_uses_timestamps_not_calendar_days(self):
        t = analyze_trends([NOW - timedelta(days=30) + timedelta(hours=5)], NOW)
        assert t.last_30_days == 1
        assert t.last_7_days == 0

        t = analyze_trends([NOW - timedelta(days=7) + timedelta(minutes=1)], NOW)
        assert t.last_7_days == 1

    def test_no_activity(self):
        assert analyze_trends([], NOW) == TrendAnalysis()


class TestLanguageDetection:
    def test_scripts(self):
        assert detect_commit_language("fix: typo") == "en"
        assert detect_commit_language("修复错误") == "zh"
        assert detect_commit_language("バグを修正") == "ja"
        assert detect_commit_language("버그 수정") == "ko"
        assert detect_commit_language("исправить ошибку") == "ru"


class TestPatternsAndInsights:
    def test_top_patterns_use_scope_per_type(self):
        stats = compute_stats(
            [
                _rec("feat(api): a"),
                _rec("feat(api): b"),
                _rec("feat(ui): c"),
                _rec("fix(db): d"),
                _rec("fix(db): e"),
                _rec("chore: f"),
            ],
            now=NOW,
        )
        patterns = get_top_patterns(stats, 2)
        assert [(p.type, p.scope, p.frequency) for p in patterns] == [
            ("feat", "api", 3),
            ("fix", "db", 2),
        ]
        assert patterns[0].example_message == "feat(api): a"

    def test_insights_for_sparse_history(self):
        stats = compute_stats([_rec("wip", days_ago=3)], now=NOW)
        messages = [i.message for i in build_insights(stats)]
        assert "Your subject lines are very brief (<30 chars)" in messages
        assert "You rarely use scopes in commits (<20%)" in messages
        assert "Most commits have no body (<10%)" in messages
        assert "Low commit frequency (<1/day avg)" in messages
        assert "Limited commit type variety" in messages

    def test_no_insights_without_commits(self):
        assert build_insights(CommitStats()) == []


class TestReport:
    def test_create_bar(self):
        assert create_bar(50, 10) == "[█████░░░░░]"
        assert create_bar(150, 4) == "[████]"
        assert create_bar(-5, 4) == "[░░░░]"

    def test_truncate(self):
        assert truncate("abcdefgh", 6) == "abc..."
        assert truncate("abc", 6) == "abc"

    def test_report_sections(self):
        stats = compute_stats(
            [_rec("feat(api): add users endpoint"), _rec("修复登录问题", author="bob")],
            now=NOW,
        )
        report = format_stats_report(stats)
        assert report.startswith("📊 Commit History Statistics\n")
        assert "Total Commits: 2" in report
        assert "🏷️  Commit Types" in report
        assert "📦 Top Scopes" in report
        assert "🌍 Language Usage" in report
        assert "中文" in report
        assert "👥 Top Contributors" in report
        assert "Last 30 days: 2 commits" in report


class TestGitHistory:
    """Reading a real repository."""

    def test_analyze_repository(self, git_repo: Path):
        for name, subject in [("a.py", "feat(core): add a"), ("b.py", "fix(core): fix b")]:
            (git_repo / name).write_text("x = 1\n")
            git(git_repo, "add", name)
            git(git_repo, "commit", "-q", "-m", subject, "-m", "Body line\n\nSecond paragraph")

        records = read_commit_log(10, git_repo)
        assert [r.subject for r in records] == ["fix(core): fix b", "feat(core): add a", "chore: initial commit"]
        assert "Second paragraph" in records[0].body
        assert records[0].author == "Test User"
        assert records[0].date is not None

        stats = analyze_commit_history(10, git_repo)
        assert stats.total_commits == 3
        assert stats.with_body == 2
        assert stats.type_distribution["chore"] == 1

    def test_limit(self, git_repo: Path):
        assert len(read_commit_log(0, git_repo)) <= 1

    def test_empty_repository(self, tmp_path: Path, git_repo: Path):
        empty = tmp_path / "empty"
        empty.mkdir()
        git(empty, "init", "-q")
        assert read_commit_log(10, empty) == []

    def test_similar_commits(self, git_repo: Path):
        (git_repo / "pkg").mkdir()
        (git_repo / "pkg" / "parser.py").write_text("x = 1\n")
        git(git_repo, "add", "pkg/parser.py")
        git(git_repo, "commit", "-q", "-m", "feat(parser): add parser")

        similar = find_similar_commits(["pkg/parser.py"], 5, git_repo)
        assert similar == ["feat(parser): add parser"]
        assert find_similar_commits([], 5, git_repo) == []
