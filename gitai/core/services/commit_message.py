"""
Commit message shaping — clean model output into a Conventional Commit.

Local models wrap answers in code fences, quotes, ``<think>`` blocks or
chatty labels, and sometimes forget the ``type(scope):`` prefix. This
module turns whatever came back into a usable message.
"""

from __future__ import annotations

import re

from gitai.core.models.config import DEFAULT_TEMPLATE
from gitai.core.services.diff_analyzer import DiffAnalysis

_THINK = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)
_FENCE_BLOCK = re.compile(r"```[\w+-]*\n(.*?)```", re.DOTALL)
_LABEL = re.compile(
    r"^\s*(?:\*\*)?(?:suggested\s+)?(?:commit\s+)?message(?:\*\*)?\s*:(?:\*\*)?\s*",
    re.IGNORECASE,
)
_HEADER = re.compile(
    r"^(?P<type>[a-zA-Z]+)"
    r"(?:\((?P<scope>[^)]*)\))?"
    r"(?P<breaking>!)?"
    r":\s*(?P<subject>.+)$"
)
_LEADING_TICKET = re.compile(r"^\[[^\]]+\]\s*")
_QUOTE_PAIRS = (('"', '"'), ("'", "'"), ("`", "`"), ("“", "”"))

_CI_MARKERS = (".github/workflows/", ".gitlab-ci", ".circleci/", "jenkinsfile", ".travis.yml")


def clean_response(text: str) -> str:
    """Strip reasoning blocks, fences, labels and quotes from model output."""
    text = _THINK.sub("", text).strip()

    m = _FENCE_BLOCK.search(text)
    if m:
        text = m.group(1)
    else:
        text = "\n".join(ln for ln in text.splitlines() if not ln.strip().startswith("```"))

    text = text.strip()
    text = _LABEL.sub("", text, count=1).strip()

    for left, right in _QUOTE_PAIRS:
        if len(text) >= 2 and text.startswith(left) and text.endswith(right):
            text = text[len(left):-len(right)].strip()
            break

    lines = [ln.rstrip() for ln in text.splitlines()]
    return "\n".join(lines).strip()


def parse_header(line: str) -> tuple[str, str, str] | None:
    """Split ``type(scope)!: subject`` into its parts, or None."""
    m = _HEADER.match(line.strip())
    if not m:
        return None
    return m.group("type"), m.group("scope") or "", m.group("subject").strip()


def render_template(
    template: str,
    commit_type: str,
    scope: str,
    subject: str,
    ticket: str = "",
) -> str:
    """Fill a header template such as ``{type}({scope}): {subject}``.

    An empty scope also removes the surrounding parentheses.
    """
    result = template or DEFAULT_TEMPLATE
    if not scope:
        result = result.replace("({scope})", "")
    if not ticket:
        result = result.replace("[{ticket}] ", "").replace("[{ticket}]", "")
    result = (
        result.replace("{type}", commit_type)
        .replace("{scope}", scope)
        .replace("{ticket}", ticket)
        .replace("{subject}", subject)
    )
    return result.strip()


def normalize_message(
    raw: str,
    *,
    commit_type: str,
    scope: str = "",
    ticket: str = "",
    template: str = DEFAULT_TEMPLATE,
    detailed: bool = False,
) -> str:
    """Turn raw model output into the final commit message.

    Raises:
        ValueError: If nothing usable remains after cleaning.
    """
    text = clean_response(raw)
    lines = text.splitlines()
    while lines and not lines[0].strip():
        lines.pop(0)
    if not lines:
        raise ValueError("model returned no commit message")

    header = lines[0].strip()
    body_lines = lines[1:]

    # templates may put "[ticket] " before the type
    if parse_header(_LEADING_TICKET.sub("", header, count=1)) is None:
        header = render_template(template, commit_type, scope, header, ticket)

    if ticket and ticket not in header:
        header = _insert_ticket(header, ticket)

    if not detailed:
        return header

    while body_lines and not body_lines[0].strip():
        body_lines.pop(0)
    body = "\n".join(body_lines).strip()
    return f"{header}\n\n{body}" if body else header


def _insert_ticket(header: str, ticket: str) -> str:
    prefix, sep, subject = header.partition(":")
    if not sep:
        return f"[{ticket}] {header}"
    return f"{prefix}: [{ticket}] {subject.strip()}"


def suggest_commit_type(analysis: DiffAnalysis, available: list[str] | None = None) -> str:
    """Guess a commit type from the shape of the diff.

    Falls back to the first available type if the guess is not offered.
    """
    suggestion = _guess_type(analysis)
    if available and suggestion not in available:
        return available[0]
    return suggestion


def _guess_type(analysis: DiffAnalysis) -> str:
    files = analysis.file_summaries
    if not files:
        return "chore"

    paths = [f.path.lower() for f in files]

    if all(f.file_type == "markdown" or p.startswith("docs/") for f, p in zip(files, paths)):
        return "docs"
    if all(f.is_test_file for f in files):
        return "test"
    if all(any(m in p for m in _CI_MARKERS) for p in paths):
        return "ci"
    if all(f.is_config_file for f in files):
        return "chore"
    if any(f.status == "added" and not f.is_test_file for f in files):
        return "feat"
    if analysis.total_deletions > analysis.total_additions * 2:
        return "refactor"
    return "fix"
