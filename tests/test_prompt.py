"""
Tests for prompt construction.
"""

from gitai.core.services.git_ops import ProjectContext
from gitai.core.services.prompt import MAX_PROMPT_DIFF, VARIATION_HINTS, PromptBuilder


def _builder(**kwargs) -> PromptBuilder:
    defaults = dict(commit_type="feat", diff="+print('hi')\n")
    defaults.update(kwargs)
    return PromptBuilder(**defaults)


class TestSections:
    """Sections appear in a fixed order."""

    def test_minimal_prompt(self):
        prompt = _builder().build()
        assert prompt.startswith("You are a Git commit message generator expert.\n\n")
        assert "PROJECT CONTEXT" not in prompt
        assert "Generate a feat commit message for the following changes.\n" in prompt
        assert "Language: en\n" in prompt
        assert "CHANGES:\n+print('hi')\n" in prompt
        assert prompt.rstrip().endswith("Generate the commit message now (ONLY the subject line):")

    def test_section_order(self):
        ctx = ProjectContext(
            project_name="widgets",
            branch_name="feature/PROJ-1-login",
            recent_commits=["fix: typo"],
            changed_files=["app.py"],
            diff_stats=" app.py | 2 +-",
            readme_snippet="Widget factory.",
        )
        prompt = _builder(context=ctx, custom_prompt="Use imperative mood.").build()
        order = [
            "PROJECT CONTEXT:",
            "COMPANY/TEAM COMMIT GUIDELINES:",
            "TASK:",
            "CHANGED FILES:",
            "CHANGES SUMMARY:",
            "CHANGES:\n",
            "REQUIREMENTS:",
            "OUTPUT FORMAT:",
        ]
        positions = [prompt.index(marker) for marker in order]
        assert positions == sorted(positions)

    def test_project_context(self):
        ctx = ProjectContext(
            project_name="widgets",
            branch_name="main",
            recent_commits=["feat: a", "fix: b"],
            readme_snippet="Widget factory.",
        )
        prompt = _builder(context=ctx).build()
        assert "- Project: widgets\n" in prompt
        assert "- Branch: main\n" in prompt
        assert "  * feat: a\n  * fix: b\n" in prompt
        assert "- Project description: Widget factory.\n" in prompt

    def test_custom_guidelines(self):
        prompt = _builder(custom_prompt="Always mention the module.").build()
        assert "COMPANY/TEAM COMMIT GUIDELINES:\nAlways mention the module.\n\n" in prompt
        assert "IMPORTANT: Follow the above guidelines strictly" in prompt


class TestTask:
    """Type, scope, ticket and language."""

    def test_scope_and_ticket(self):
        prompt = _builder(scope="auth", ticket_number="PROJ-42", language="zh").build()
        assert "Scope: auth\n" in prompt
        assert "Ticket/Issue Number: PROJ-42\n" in prompt
        assert "IMPORTANT: Include the ticket number [PROJ-42] in the commit message.\n" in prompt
        assert "Language: zh\n" in prompt
        assert "4. Use zh language\n" in prompt

    def test_output_example_with_scope_and_ticket(self):
        prompt = _builder(scope="auth", ticket_number="PROJ-42").build()
        assert "feat(auth): [PROJ-42] <subject line>\n" in prompt
        assert "feat(auth): [PROJ-42] add user authentication endpoint\n" in prompt

    def test_output_example_plain(self):
        prompt = _builder(commit_type="fix").build()
        assert "fix: <subject line>\n" in prompt
        assert "fix: add user authentication endpoint\n" in prompt


class TestRequirements:
    """Concise vs detailed instructions."""

    def test_concise(self):
        prompt = _builder().build()
        assert "2. Subject line: concise summary (max 72 characters)\n" in prompt
        assert "6. Generate ONLY the subject line, no body or explanation\n" in prompt
        assert "<body with bullet points>" not in prompt

    def test_short_subject(self):
        prompt = _builder(subject_length="short").build()
        assert "(max 36 characters)" in prompt

    def test_detailed(self):
        prompt = _builder(detailed_commit=True).build()
        assert "3. Body: explain WHAT changed and WHY (2-4 bullet points)\n" in prompt
        assert "7. Separate subject and body with a blank line\n" in prompt
        assert "<body with bullet points>" in prompt
        assert "- Implement JWT-based authentication\n" in prompt
        assert prompt.rstrip().endswith("(subject + body with details):")


class TestDiffAndRegeneration:
    def test_long_diff_truncated(self):
        diff = "x" * (MAX_PROMPT_DIFF + 100)
        prompt = _builder(diff=diff).build()
        assert "x" * MAX_PROMPT_DIFF + "\n... (truncated)" in prompt
        assert "x" * (MAX_PROMPT_DIFF + 1) not in prompt

    def test_no_hint_first_time(self):
        assert "regeneration attempt" not in _builder().build()

    def test_variation_hint_cycles(self):
        first = _builder(regenerate_count=1).build()
        sixth = _builder(regenerate_count=6).build()
        assert "regeneration attempt #1. " + VARIATION_HINTS[1] in first
        assert "regeneration attempt #6. " + VARIATION_HINTS[1] in sixth
