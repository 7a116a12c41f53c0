"""
Prompt construction for commit message generation.

The prompt is plain text in fixed sections (context, guidelines, task,
files, diff, requirements, output format) so that small local models
get the same shape every time.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from gitai.core.models.config import SUBJECT_LENGTHS
from gitai.core.services.git_ops import ProjectContext

MAX_PROMPT_DIFF = 2000

VARIATION_HINTS = (
    "Try a different perspective or emphasis in the subject line.",
    "Consider alternative wording or focus on different aspects.",
    "Rephrase with a fresh approach while maintaining accuracy.",
    "Use different verbs or structure to convey the same changes.",
    "Focus on a different aspect of the changes for variety.",
)

EXAMPLE_SUBJECT = "add user authentication endpoint"


@dataclass
class PromptBuilder:
    """Inputs for one generation request.

    ``regenerate_count`` > 0 appends a hint asking the model to vary
    its answer.
    """

    commit_type: str = ""
    scope: str = ""
    diff: str = ""
    context: ProjectContext = field(default_factory=ProjectContext)
    language: str = "en"
    detailed_commit: bool = False
    custom_prompt: str = ""
    ticket_number: str = ""
    subject_length: str = "normal"
    regenerate_count: int = 0

    def build(self) -> str:
        language = self.language or "en"
        parts: list[str] = ["You are a Git commit message generator expert.\n\n"]

        parts.append(self._context_section())

        if self.custom_prompt:
            parts.append("COMPANY/TEAM COMMIT GUIDELINES:\n")
            parts.append(self.custom_prompt)
            parts.append("\n\n")
            parts.append(
                "IMPORTANT: Follow the above guidelines strictly when generating "
                "the commit message.\n\n"
            )

        parts.append("TASK:\n")
        parts.append(
            f"Generate a {self.commit_type} commit message for the following changes.\n"
        )
        if self.scope:
            parts.append(f"Scope: {self.scope}\n")
        if self.ticket_number:
            parts.append(f"Ticket/Issue Number: {self.ticket_number}\n")
            parts.append(
                f"IMPORTANT: Include the ticket number [{self.ticket_number}] "
                "in the commit message.\n"
            )
        parts.append(f"Language: {language}\n\n")

        if self.context.changed_files:
            parts.append("CHANGED FILES:\n")
            parts.extend(f"- {f}\n" for f in self.context.changed_files)
            parts.append("\n")

        if self.context.diff_stats:
            parts.append("CHANGES SUMMARY:\n")
            parts.append(self.context.diff_stats)
            parts.append("\n\n")

        parts.append("CHANGES:\n")
        diff = self.diff
        if len(diff) > MAX_PROMPT_DIFF:
            diff = diff[:MAX_PROMPT_DIFF] + "\n... (truncated)"
        parts.append(diff)
        parts.append("\n\n")

        parts.append(self._requirements_section(language))
        parts.append(self._output_section())

        if self.regenerate_count > 0:
            hint = VARIATION_HINTS[self.regenerate_count % len(VARIATION_HINTS)]
            parts.append(
                f"\nNOTE: This is regeneration attempt #{self.regenerate_count}. {hint}\n"
            )

        return "".join(parts)

    # ── Sections ────────────────────────────────────────────────

    def _context_section(self) -> str:
        ctx = self.context
        if not (ctx.project_name or ctx.branch_name or ctx.recent_commits):
            return ""

        lines = ["PROJECT CONTEXT:\n"]
        if ctx.project_name:
            lines.append(f"- Project: {ctx.project_name}\n")
        if ctx.branch_name:
            lines.append(f"- Branch: {ctx.branch_name}\n")
        if ctx.recent_commits:
            lines.append("- Recent commits style:\n")
            lines.extend(f"  * {c}\n" for c in ctx.recent_commits)
        if ctx.readme_snippet:
            lines.append(f"- Project description: {ctx.readme_snippet}\n")
        lines.append("\n")
        return "".join(lines)

    def _requirements_section(self, language: str) -> str:
        max_length = SUBJECT_LENGTHS["short"] if self.subject_length == "short" else SUBJECT_LENGTHS["normal"]
        lines = [
            "REQUIREMENTS:\n",
            "1. Follow Conventional Commits format\n",
            f"2. Subject line: concise summary (max {max_length} characters)\n",
        ]
        if self.detailed_commit:
            lines += [
                "3. Body: explain WHAT changed and WHY (2-4 bullet points)\n",
                "4. Focus on the motivation and impact, not implementation details\n",
                f"5. Use {language} language\n",
                "6. Start subject line with lowercase letter after the type\n",
                "7. Separate subject and body with a blank line\n\n",
            ]
        else:
            lines += [
                "3. Focus on WHAT changed and WHY (concise)\n",
                f"4. Use {language} language\n",
                "5. Start with lowercase letter after the type\n",
                "6. Generate ONLY the subject line, no body or explanation\n\n",
            ]
        return "".join(lines)

    def _header_prefix(self) -> str:
        prefix = f"{self.commit_type}({self.scope})" if self.scope else self.commit_type
        prefix += ":"
        if self.ticket_number:
            prefix += f" [{self.ticket_number}]"
        return prefix

    def _output_section(self) -> str:
        prefix = self._header_prefix()
        format_str = f"{prefix} <subject line>"
        example = f"{prefix} {EXAMPLE_SUBJECT}"

        lines = ["OUTPUT FORMAT:\n"]
        if self.detailed_commit:
            lines += [
                format_str + "\n\n<body with bullet points>\n\n",
                "Example:\n",
                example + "\n\n",
                "- Implement JWT-based authentication\n",
                "- Add login and logout endpoints\n",
                "- Include token validation middleware\n\n",
                "Generate the commit message now (subject + body with details):\n",
            ]
        else:
            lines += [
                format_str + "\n\n",
                "Example:\n",
                example + "\n\n",
                "Generate the commit message now (ONLY the subject line):\n",
            ]
        return "".join(lines)
