"""
Tests for diff analysis — file summaries, key changes, smart diff.
"""

import textwrap

import pytest

from gitai.core.services.diff_analyzer import (
    DiffAnalysis,
    FileSummary,
    analyze_diff,
    analyze_file_diff,
    analyze_file_type,
    determine_complexity,
    extract_import_changes,
    extract_key_changes,
    extract_important_chunks,
    is_config_file,
    is_test_file,
    split_diff_by_file,
    truncate_string,
    unique_strings,
)

NEW_PY_FILE = textwrap.dedent("""\
    diff --git a/app/auth.py b/app/auth.py
    new file mode 100644
    index 0000000..1111111
    --- /dev/null
    +++ b/app/auth.py
    @@ -0,0 +1,6 @@
    +import hashlib
    +from app.models import User
    +
    +class TokenStore:
    +    def issue(self, user):
    +        return hashlib.sha256(user.name.encode()).hexdigest()
""")

MODIFIED_GO_FILE = textwrap.dedent("""\
    diff --git a/server/main.go b/server/main.go
    index 2222222..3333333 100644
    --- a/server/main.go
    +++ b/server/main.go
    @@ -10,7 +10,9 @@ import (
     func main() {
    -\tlog.Println("start")
    +\tlog.Println("starting")
    +\tserve()
     }
    +func (s *Server) Handle(w http.ResponseWriter) {
    +type Config struct {
""")

DELETED_TEST = textwrap.dedent("""\
    diff --git a/tests/test_old.py b/tests/test_old.py
    deleted file mode 100644
    index 4444444..0000000
    --- a/tests/test_old.py
    +++ /dev/null
    @@ -1,2 +0,0 @@
    -def test_old():
    -    assert True
""")


class TestSplitAndSummarise:
    """Per-file parsing."""

    def test_split(self):
        files = split_diff_by_file(NEW_PY_FILE + MODIFIED_GO_FILE)
        assert len(files) == 2
        assert files[0].startswith("diff --git a/app/auth.py")
        assert files[1].startswith("diff --git a/server/main.go")

    def test_split_empty(self):
        assert split_diff_by_file("") == []

    def test_added_file(self):
        s = analyze_file_diff(NEW_PY_FILE)
        assert s.path == "app/auth.py"
        assert s.status == "added"
        assert (s.additions, s.deletions) == (6, 0)
        assert s.file_type == "python"
        assert not s.is_test_file
        assert s.key_changes == ["class TokenStore", "function issue"]

    def test_modified_file_counts_only_hunk_lines(self):
        s = analyze_file_diff(MODIFIED_GO_FILE)
        assert s.status == "modified"
        assert (s.additions, s.deletions) == (4, 1)
        assert s.key_changes == ["function Handle", "type Config"]

    def test_deleted_test_file(self):
        s = analyze_file_diff(DELETED_TEST)
        assert s.status == "deleted"
        assert s.is_test_file
        assert s.deletions == 2

    def test_renamed_file(self):
        diff = textwrap.dedent("""\
            diff --git a/old.txt b/new.txt
            similarity index 100%
            rename from old.txt
            rename to new.txt
        """)
        s = analyze_file_diff(diff)
        assert s.status == "renamed"
        assert s.path == "new.txt"


class TestClassifiers:
    """File type, test and config detection."""

    @pytest.mark.parametrize("path, expected", [
        ("main.go", "go"),
        ("web/App.TSX", "typescript"),
        ("lib/util.py", "python"),
        ("README.md", "markdown"),
        ("Makefile", "unknown"),
        ("archive.xyz", "unknown"),
    ])
    def test_file_type(self, path, expected):
        assert analyze_file_type(path) == expected

    @pytest.mark.parametrize("path", [
        "pkg/parser_test.go",
        "src/app.test.js",
        "tests/test_cli.py",
        "test_models.py",
        "web/__tests__/App.js",
        "spec/user.spec.ts",
    ])
    def test_is_test_file(self, path):
        assert is_test_file(path)

    def test_is_not_test_file(self):
        assert not is_test_file("src/contest.py")

    @pytest.mark.parametrize("path", ["package.json", "go.mod", "ci/deploy.yml", "Dockerfile", ".env"])
    def test_is_config_file(self, path):
        assert is_config_file(path)

    def test_is_not_config_file(self):
        assert not is_config_file("src/main.go")


class TestKeyChanges:
    """Definitions and imports picked out of added lines."""

    def test_javascript(self):
        diff = "+export async function loadUser(id) {\n+const save = async (x) => x\n+class Store {\n+if (x) {\n"
        assert extract_key_changes(diff, "javascript") == [
            "function loadUser", "function save", "class Store",
        ]

    def test_generic(self):
        diff = "+fn compute(a: i32) -> i32 {\n+let x = 1;\n"
        assert extract_key_changes(diff, "rust") == ["function: fn compute(a: i32) -> i32 {"]

    def test_max_five(self):
        diff = "".join(f"+def f{i}():\n" for i in range(8))
        assert len(extract_key_changes(diff, "python")) == 5

    def test_removed_lines_ignored(self):
        assert extract_key_changes("-def gone():\n", "python") == []

    def test_imports(self):
        diff = (
            "+import os\n"
            "+from pathlib import Path\n"
            "+const fs = require('fs')\n"
            "+use std::io;\n"
            "+import os\n"
            f"+import {'x' * 80}\n"
        )
        imports = extract_import_changes(diff)
        assert imports[:3] == ["import os", "from pathlib import Path", "use std::io;"]
        assert imports[3].endswith("...")
        assert len(imports[3]) == 63


class TestAnalyzeDiff:
    """Whole-diff analysis."""

    def test_empty(self):
        assert analyze_diff("", 4000) == DiffAnalysis()

    def test_totals(self):
        diff = NEW_PY_FILE + MODIFIED_GO_FILE + DELETED_TEST
        a = analyze_diff(diff, 10_000)
        assert a.modified_files == 3
        assert a.total_additions == 10
        assert a.total_deletions == 3
        assert a.change_complexity == "simple"
        assert not a.is_large_change
        assert "import hashlib" in a.import_changes
        assert a.smart_diff == diff

    def test_complexity_thresholds(self):
        assert determine_complexity(DiffAnalysis(total_additions=50, modified_files=2)) == "simple"
        assert determine_complexity(DiffAnalysis(total_additions=101, modified_files=1)) == "moderate"
        assert determine_complexity(DiffAnalysis(total_additions=10, modified_files=4)) == "moderate"
        assert determine_complexity(DiffAnalysis(total_deletions=501, modified_files=1)) == "complex"
        assert determine_complexity(DiffAnalysis(modified_files=11)) == "complex"

    def test_large_change(self):
        body = "".join(f"+line {i}\n" for i in range(501))
        diff = f"diff --git a/big.txt b/big.txt\n--- a/big.txt\n+++ b/big.txt\n@@ -0,0 +1,501 @@\n{body}"
        a = analyze_diff(diff, 100_000)
        assert a.is_large_change
        assert a.change_complexity == "complex"


class TestSmartDiff:
    """Truncation of oversized diffs."""

    def _big_diff(self) -> str:
        source = "".join(f"+    value_{i} = compute({i})\n" for i in range(200))
        tests = "".join(f"+    assert value_{i}\n" for i in range(200))
        return (
            "diff --git a/tests/test_calc.py b/tests/test_calc.py\n"
            "--- a/tests/test_calc.py\n+++ b/tests/test_calc.py\n"
            f"@@ -1,1 +1,200 @@\n{tests}"
            "diff --git a/calc.py b/calc.py\n"
            "--- a/calc.py\n+++ b/calc.py\n"
            f"@@ -1,1 +1,200 @@\n{source}"
        )

    def test_summary_header(self):
        diff = self._big_diff()
        smart = analyze_diff(diff, 3000).smart_diff
        assert smart.startswith("DIFF SUMMARY (2 files, +400/-0 lines)\n")
        assert "📄 calc.py [modified] +200/-0" in smart
        assert "SELECTED DIFF CHUNKS:" in smart
        assert smart.rstrip().endswith(f"/{len(diff)} chars shown)")
        assert len(smart) < len(diff)

    def test_source_before_tests(self):
        smart = analyze_diff(self._big_diff(), 3000).smart_diff
        chunks = smart.split("SELECTED DIFF CHUNKS:")[1]
        assert "diff --git a/calc.py" in chunks
        calc_at = chunks.index("diff --git a/calc.py")
        test_at = chunks.find("diff --git a/tests/test_calc.py")
        assert test_at == -1 or calc_at < test_at

    def test_context_runs_capped(self):
        context = "".join(f" ctx {i}\n" for i in range(10))
        diff = f"diff --git a/a b/a\n--- a/a\n+++ b/a\n@@ -1,10 +1,11 @@\n{context}+new\n"
        chunk = extract_important_chunks(diff, 10_000)
        assert " ctx 2" in chunk
        assert " ctx 3" not in chunk
        assert "+new" in chunk


class TestHelpers:
    def test_unique_strings(self):
        assert unique_strings(["a", "", "b", "a"]) == ["a", "b"]

    def test_truncate_string(self):
        assert truncate_string("abcdef", 3) == "abc..."
        assert truncate_string("abc", 3) == "abc"

    def test_total_changes(self):
        assert FileSummary(additions=3, deletions=2).total_changes == 5
