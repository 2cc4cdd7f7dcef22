"""Tests for prompt construction."""

from pathlib import Path

from readme_generator.config import MAX_FILE_CONTENT_CHARS, ScannedFile
from readme_generator.models import GitStats, PromptContext, RepositoryInfo
from readme_generator.prompts import build_system_prompt, build_user_prompt, language_instruction


class TestSystemPrompt:
    """Tests for build_system_prompt."""

    def test_describes_json_shape(self, context):
        """Test the reply schema and badge list are included."""
        prompt = build_system_prompt(context)

        assert '"short_description"' in prompt
        assert '"mermaid_diagrams"' in prompt
        assert '{"name": "Python", "color": "3776AB"' in prompt
        assert "Write the README in English." in prompt

    def test_language_instruction(self, context):
        """Test the README language follows the context."""
        context.language = "de"

        assert "Schreiben Sie die README auf Deutsch." in build_system_prompt(context)

    def test_unknown_language_passed_through(self):
        assert "'pt-BR'" in language_instruction("pt-BR")


class TestUserPrompt:
    """Tests for build_user_prompt."""

    def test_project_information(self, context):
        """Test repository facts appear in the prompt."""
        prompt = build_user_prompt(context)

        assert '- Name: "widgets"' in prompt
        assert '- Description: "Widgets for everyone"' in prompt
        assert '- Owner: "acme"' in prompt
        assert '- License: "MIT"' in prompt
        assert '- Homepage: "https://widgets.example.com"' in prompt
        assert "Package information (pyproject.toml):" in prompt
        assert "- Dependencies: requests, typer" in prompt

    def test_git_and_tooling_sections(self, context):
        """Test git history, tooling and languages are summarised."""
        prompt = build_user_prompt(context)

        assert "- Total commits: 12" in prompt
        assert "- Top contributors: Alice (9 commits), Bob (3 commits)" in prompt
        assert "- CI/CD: GitHub Actions" in prompt
        assert "- Python: 100.0% (2 files, 40 lines)" in prompt
        assert "Project structure:" in prompt

    def test_files_grouped_by_extension(self, context):
        """Test file contents are fenced and grouped."""
        prompt = build_user_prompt(context)

        assert "Project files (2 scanned):" in prompt
        assert "## PY files" in prompt
        assert "### File: src/widgets/core.py (2KB)\n```py\ndef spin():" in prompt
        assert "## NO-EXT files" in prompt

    def test_recent_tags_limited(self, context):
        """Test only the five newest tags are listed."""
        context.repository.git_stats = GitStats(commit_count=1, tags=[f"v{i}" for i in range(8, 0, -1)])

        prompt = build_user_prompt(context)

        assert "- Tags/releases: v8, v7, v6, v5, v4 (and 3 more)" in prompt

    def test_long_file_truncated(self, repository):
        """Test oversized content is cut with a marker."""
        big = ScannedFile(
            path=Path("big.txt"),
            relative_path="big.txt",
            size_bytes=MAX_FILE_CONTENT_CHARS + 10,
            extension=".txt",
            content="a" * (MAX_FILE_CONTENT_CHARS + 10),
        )

        prompt = build_user_prompt(PromptContext(repository=repository, files=[big]))

        assert "a" * MAX_FILE_CONTENT_CHARS + "\n... (truncated)" in prompt
        assert "a" * (MAX_FILE_CONTENT_CHARS + 1) not in prompt

    def test_user_context_and_changelog(self, context):
        """Test optional sections are included when present."""
        context.user_context = "Used by the platform team"
        context.changelog = "## 1.0\n- Initial release"
        context.changelog_tasks = ["Initial release"]

        prompt = build_user_prompt(context)

        assert "Additional project context:\nUsed by the platform team" in prompt
        assert "CHANGELOG contents:\n## 1.0" in prompt
        assert "- Initial release" in prompt

    def test_minimal_repository(self):
        """Test a bare repository produces only the header and closing instructions."""
        prompt = build_user_prompt(PromptContext(repository=RepositoryInfo(name="bare")))

        assert '- Name: "bare"' in prompt
        assert "- License:" not in prompt
        assert "Git history:" not in prompt
        assert "Project files" not in prompt
        assert "Detected infrastructure:" not in prompt
