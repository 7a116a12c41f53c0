"""
Diff analysis — per-file summaries and a size-bounded "smart" diff.

Small models have small context windows. Instead of cutting the raw
diff at an arbitrary byte, ``analyze_diff`` summarises every file and,
when the diff is too long, keeps the hunks that matter most: source
files before tests and config, larger changes before smaller ones.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

LARGE_CHANGE_LINES = 500
MAX_KEY_CHANGES = 5
MAX_CONTEXT_LINES = 3

_FILE_SPLIT = re.compile(r"(?m)^(?=diff --git )")

FILE_TYPES = {
    "go": "go",
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "java": "java",
    "rb": "ruby",
    "rs": "rust",
    "c": "c",
    "cpp": "cpp",
    "h": "c",
    "hpp": "cpp",
    "cs": "csharp",
    "php": "php",
    "swift": "swift",
    "kt": "kotlin",
    "yaml": "yaml",
    "yml": "yaml",
    "json": "json",
    "toml": "toml",
    "md": "markdown",
    "sql": "sql",
}

_TEST_MARKERS = ("_test.", ".test.", "/test/", "/tests/", "__tests__", ".spec.")
_TEST_PREFIXES = ("test/", "tests/", "test_")

_CONFIG_MARKERS = (
    "package.json", "go.mod", "go.sum", "cargo.toml", "pyproject.toml",
    "requirements.txt", "gemfile", "pom.xml", "build.gradle",
    ".yml", ".yaml", ".toml", ".json", ".config", ".env", ".ini", ".cfg",
    "dockerfile", "makefile", ".gitignore", ".dockerignore",
)

# ── Language-specific definition patterns ──────────────────────────

_GO_FUNC = re.compile(r"^func\s+(?:\([^)]*\)\s*)?(\w+)\s*[\[(]")
_GO_TYPE = re.compile(r"^type\s+(\w+)\s+(?:struct|interface)\b")

_JS_FUNCS = (
    re.compile(r"^(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*(\w+)"),
    re.compile(r"^(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?(?:\([^)]*\)|\w+)\s*=>"),
    re.compile(r"^(?:async\s+)?(\w+)\s*\([^)]*\)\s*\{"),
)
_JS_CLASS = re.compile(r"^(?:export\s+)?(?:default\s+)?class\s+(\w+)")
_JS_KEYWORDS = frozenset({"if", "for", "while", "switch", "catch", "return", "function"})

_PY_DEF = re.compile(r"^(?:async\s+)?def\s+(\w+)")
_PY_CLASS = re.compile(r"^class\s+(\w+)")

_GENERIC_CALL = re.compile(r"\w+\s*\([^)]*\)\s*\{?")

_IMPORT_PATTERNS = (
    re.compile(r"^import\s+"),
    re.compile(r"^from\s+\S+\s+import"),
    re.compile(r"^require\("),
    re.compile(r"^use\s+"),
)


@dataclass
class FileSummary:
    """Changes in one file."""

    path: str = ""
    status: str = ""  # added, deleted, renamed, modified
    additions: int = 0
    deletions: int = 0
    file_type: str = "unknown"
    is_test_file: bool = False
    is_config_file: bool = False
    key_changes: list[str] = field(default_factory=list)

    @property
    def total_changes(self) -> int:
        return self.additions + self.deletions


@dataclass
class DiffAnalysis:
    """Whole-diff analysis."""

    file_summaries: list[FileSummary] = field(default_factory=list)
    smart_diff: str = ""
    total_additions: int = 0
    total_deletions: int = 0
    modified_files: int = 0
    key_changes: list[str] = field(default_factory=list)
    import_changes: list[str] = field(default_factory=list)
    is_large_change: bool = False
    change_complexity: str = "simple"  # simple, moderate, complex

    def to_dict(self) -> dict:
        return {
            "files": [
                {
                    "path": s.path,
                    "status": s.status,
                    "additions": s.additions,
                    "deletions": s.deletions,
                    "file_type": s.file_type,
                    "is_test_file": s.is_test_file,
                    "is_config_file": s.is_config_file,
                    "key_changes": s.key_changes,
                }
                for s in self.file_summaries
            ],
            "total_additions": self.total_additions,
            "total_deletions": self.total_deletions,
            "modified_files": self.modified_files,
            "key_changes": self.key_changes,
            "import_changes": self.import_changes,
            "is_large_change": self.is_large_change,
            "change_complexity": self.change_complexity,
        }


# ═══════════════════════════════════════════════════════════════════
#  Public API
# ═══════════════════════════════════════════════════════════════════


def analyze_diff(full_diff: str, max_length: int) -> DiffAnalysis:
    """Analyse a unified diff and build a smart diff of at most ~``max_length`` chars."""
    analysis = DiffAnalysis()
    if not full_diff:
        return analysis

    files = split_diff_by_file(full_diff)
    for file_diff in files:
        summary = analyze_file_diff(file_diff)
        analysis.file_summaries.append(summary)
        analysis.total_additions += summary.additions
        analysis.total_deletions += summary.deletions
        analysis.modified_files += 1
        analysis.key_changes.extend(summary.key_changes)
        analysis.import_changes.extend(extract_import_changes(file_diff))

    analysis.key_changes = unique_strings(analysis.key_changes)
    analysis.import_changes = unique_strings(analysis.import_changes)
    analysis.change_complexity = determine_complexity(analysis)
    analysis.is_large_change = (
        analysis.total_additions + analysis.total_deletions > LARGE_CHANGE_LINES
    )
    analysis.smart_diff = generate_smart_diff(full_diff, files, analysis, max_length)

    logger.debug(
        "Analysed diff: %d files, +%d/-%d, %s",
        analysis.modified_files,
        analysis.total_additions,
        analysis.total_deletions,
        analysis.change_complexity,
    )
    return analysis


def split_diff_by_file(diff: str) -> list[str]:
    """Split a multi-file diff at each ``diff --git`` header."""
    return [part for part in _FILE_SPLIT.split(diff) if part.strip()]


def analyze_file_diff(file_diff: str) -> FileSummary:
    summary = FileSummary()
    in_hunk = False

    for line in file_diff.split("\n"):
        if line.startswith("@@"):
            in_hunk = True
            continue

        if not in_hunk:
            if line.startswith("diff --git"):
                parts = line.split()
                if len(parts) >= 4:
                    summary.path = parts[3].removeprefix("b/")
            elif line.startswith("new file"):
                summary.status = "added"
            elif line.startswith("deleted file"):
                summary.status = "deleted"
            elif line.startswith("rename from"):
                summary.status = "renamed"
            elif line.startswith(("+++", "---")) and not summary.status:
                summary.status = "modified"
            continue

        if line.startswith("+"):
            summary.additions += 1
        elif line.startswith("-"):
            summary.deletions += 1

    if not summary.status:
        summary.status = "modified"

    summary.file_type = analyze_file_type(summary.path)
    summary.is_test_file = is_test_file(summary.path)
    summary.is_config_file = is_config_file(summary.path)
    summary.key_changes = extract_key_changes(file_diff, summary.file_type)
    return summary


def analyze_file_type(path: str) -> str:
    """Language name from the file extension, ``unknown`` otherwise."""
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return "unknown"
    return FILE_TYPES.get(name.rsplit(".", 1)[-1].lower(), "unknown")


def is_test_file(path: str) -> bool:
    lower = path.lower()
    name = lower.rsplit("/", 1)[-1]
    return (
        any(marker in lower for marker in _TEST_MARKERS)
        or lower.startswith(_TEST_PREFIXES)
        or name.startswith("test_")
    )


def is_config_file(path: str) -> bool:
    lower = path.lower()
    return any(marker in lower for marker in _CONFIG_MARKERS)


def extract_key_changes(file_diff: str, file_type: str) -> list[str]:
    """Definitions introduced by added lines (at most five)."""
    changes: list[str] = []
    for line in _added_lines(file_diff):
        if file_type == "go":
            changes.extend(_go_changes(line))
        elif file_type in ("javascript", "typescript"):
            changes.extend(_js_changes(line))
        elif file_type == "python":
            changes.extend(_python_changes(line))
        else:
            changes.extend(_generic_changes(line))
    return unique_strings(changes)[:MAX_KEY_CHANGES]


def extract_import_changes(file_diff: str) -> list[str]:
    """Added import / require / use lines, truncated to 60 chars."""
    changes = []
    for line in _added_lines(file_diff):
        if any(p.match(line) for p in _IMPORT_PATTERNS):
            changes.append(truncate_string(line, 60))
    return unique_strings(changes)


def determine_complexity(analysis: DiffAnalysis) -> str:
    total = analysis.total_additions + analysis.total_deletions
    files = analysis.modified_files
    if total > 500 or files > 10:
        return "complex"
    if total > 100 or files > 3:
        return "moderate"
    return "simple"


# ═══════════════════════════════════════════════════════════════════
#  Smart diff
# ═══════════════════════════════════════════════════════════════════


def generate_smart_diff(
    full_diff: str,
    files: list[str],
    analysis: DiffAnalysis,
    max_length: int,
) -> str:
    """Return ``full_diff`` if it fits, else a summary plus prioritised hunks."""
    if len(full_diff) <= max_length:
        return full_diff

    out: list[str] = []

    out.append(
        f"DIFF SUMMARY ({analysis.modified_files} files, "
        f"+{analysis.total_additions}/-{analysis.total_deletions} lines)\n"
    )
    out.append("=" * 60 + "\n\n")

    for s in analysis.file_summaries:
        out.append(f"📄 {s.path} [{s.status}] +{s.additions}/-{s.deletions}\n")
        if s.key_changes:
            out.append(f"   Key changes: {', '.join(s.key_changes)}\n")
    out.append("\n")

    if analysis.import_changes:
        out.append("📦 Import changes:\n")
        for imp in analysis.import_changes:
            out.append(f"   {imp}\n")
        out.append("\n")

    remaining = max_length - _size(out)
    out.append("SELECTED DIFF CHUNKS:\n")
    out.append("-" * 60 + "\n\n")

    # Summaries and file diffs were produced in the same order
    paired = list(zip(analysis.file_summaries, files))
    paired.sort(
        key=lambda p: (p[0].is_test_file, p[0].is_config_file, -p[0].total_changes)
    )

    for i, (_summary, file_diff) in enumerate(paired):
        budget = remaining // max(len(paired) - i, 1)
        chunk = extract_important_chunks(file_diff, budget)
        if chunk:
            out.append(chunk)
            out.append("\n")
            remaining -= len(chunk)
        if remaining < 500:
            break

    shown = _size(out)
    out.append(f"\n... (diff truncated: {shown}/{len(full_diff)} chars shown)\n")
    return "".join(out)


def extract_important_chunks(file_diff: str, max_chunk_length: int) -> str:
    """File header plus hunks with long context runs trimmed."""
    lines = file_diff.split("\n")
    out: list[str] = []

    for line in lines[:10]:
        if line.startswith(("diff ", "index ", "---", "+++")):
            out.append(line + "\n")

    hunk: list[str] = []
    in_hunk = False
    context_run = 0

    for line in lines:
        if line.startswith("@@"):
            if hunk:
                out.append("\n".join(hunk) + "\n")
            hunk = [line]
            in_hunk = True
            context_run = 0
            continue

        if not in_hunk:
            continue

        if not line.startswith(("+", "-")):
            context_run += 1
            if context_run > MAX_CONTEXT_LINES:
                continue
        else:
            context_run = 0

        hunk.append(line)

        if _size(out) + len("\n".join(hunk)) > max_chunk_length:
            break

    if hunk and _size(out) < max_chunk_length:
        out.append("\n".join(hunk) + "\n")

    return "".join(out)


# ═══════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════


def _size(parts: list[str]) -> int:
    return sum(len(p) for p in parts)


def _added_lines(file_diff: str):
    for line in file_diff.split("\n"):
        if line.startswith("+") and not line.startswith("+++"):
            yield line[1:].strip()


def _go_changes(line: str) -> list[str]:
    m = _GO_FUNC.match(line)
    if m:
        return [f"function {m.group(1)}"]
    m = _GO_TYPE.match(line)
    if m:
        return [f"type {m.group(1)}"]
    return []


def _js_changes(line: str) -> list[str]:
    m = _JS_CLASS.match(line)
    if m:
        return [f"class {m.group(1)}"]
    for pattern in _JS_FUNCS:
        m = pattern.match(line)
        if m and m.group(1) not in _JS_KEYWORDS:
            return [f"function {m.group(1)}"]
    return []


def _python_changes(line: str) -> list[str]:
    m = _PY_DEF.match(line)
    if m:
        return [f"function {m.group(1)}"]
    m = _PY_CLASS.match(line)
    if m:
        return [f"class {m.group(1)}"]
    return []


def _generic_changes(line: str) -> list[str]:
    if len(line) < 100 and _GENERIC_CALL.search(line):
        return [f"function: {truncate_string(line, 50)}"]
    return []


def unique_strings(items: list[str]) -> list[str]:
    """Drop empty strings and duplicates, keeping first-seen order."""
    seen: set[str] = set()
    result = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


def truncate_string(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    return s[:max_len] + "..."
