"""
Ticket detection — pull issue keys out of branch names.

Handles the usual conventions:
    feature/PROJ-123-description
    bugfix/JIRA-456-fix-bug
    fix/#42-crash
    GH-7
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS = (
    re.compile(r"[A-Z]+-\d+"),      # PROJ-123
    re.compile(r"[A-Z]{2,}-\d+"),   # ABC-123
    re.compile(r"#\d+"),            # #123
    re.compile(r"GH-\d+"),          # GH-123
    re.compile(r"[A-Z]+_\d+"),      # PROJ_123
)

_DIGITS = re.compile(r"^\d+$")


def extract_ticket_from_branch(branch_name: str, pattern: str = "") -> str:
    """Return the first ticket reference found in ``branch_name``.

    A custom ``pattern`` is tried first; an invalid one is logged and
    skipped. Returns "" when nothing matches.
    """
    if not branch_name:
        return ""

    if pattern:
        try:
            m = re.search(pattern, branch_name)
        except re.error as e:
            logger.warning("Ignoring invalid ticket_pattern %r: %s", pattern, e)
        else:
            if m:
                return m.group(0)

    for regex in DEFAULT_PATTERNS:
        m = regex.search(branch_name)
        if m:
            return m.group(0)

    return ""


def format_ticket_number(ticket: str, prefix: str = "") -> str:
    """Normalise a user-supplied ticket, adding ``prefix`` to bare numbers.

    >>> format_ticket_number("123", "PROJ")
    'PROJ-123'
    >>> format_ticket_number("ABC-9", "PROJ")
    'ABC-9'
    """
    ticket = ticket.strip()
    if not ticket:
        return ""

    if "-" in ticket or "#" in ticket:
        return ticket

    if prefix and _DIGITS.match(ticket):
        return f"{prefix}-{ticket}"

    return ticket
