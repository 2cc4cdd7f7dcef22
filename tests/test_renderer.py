"""Tests for README rendering."""

from readme_generator.badges import lookup_badge
from readme_generator.models import Readme, RepositoryInfo
from readme_generator.renderer import (
    CHANGELOG_SECTION,
    DEFAULT_LOGO_URL,
    append_changelog_link,
    build_sections,
    clean_code_block,
    default_logo_url,
    heading_anchor,
    render_readme,
)


def _readme(**overrides):
    fields = {
        "title": "Widgets",
        "short_description": "Spin widgets fast",
        "long_description": "Widgets is a library for spinning.",
        "features": ["Spinning"],
        "installation": "```bash\npip install widgets\n```",
        "usage": "Run `widgets`.",
        "license": "MIT",
    }
    fields.update(overrides)
    return Readme(**fields)


class TestHelpers:
    """Tests for small rendering helpers."""

    def test_heading_anchor(self):
        assert heading_anchor("📖 Description") == "-description"
        assert heading_anchor("🛠 Installation") == "-installation"

    def test_clean_code_block(self):
        """Test fences are removed from embedded code."""
        assert clean_code_block("```bash\npip install x\n```") == "pip install x"
        assert clean_code_block("plain") == "plain"
        assert clean_code_block("") == ""

    def test_default_logo_for_github(self):
        repo = RepositoryInfo(name="widgets", owner="acme", remote_url="https://github.com/acme/widgets")

        assert default_logo_url(repo).startswith("https://socialify.git.ci/acme/widgets/image?")

    def test_default_logo_elsewhere(self):
        assert default_logo_url(RepositoryInfo(name="local")) == DEFAULT_LOGO_URL


class TestRenderReadme:
    """Tests for render_readme."""

    def test_header(self, context):
        """Test the header block."""
        content = render_readme(_readme(logo_url="https://example.com/logo.png"), context)

        assert content.startswith('<a id="top"></a>\n<p align="center">\n')
        assert '<img src="https://example.com/logo.png" width="500" alt="project-logo">' in content
        assert '<h1 align="center">Widgets</h1>' in content
        assert '<p align="center"><em>Spin widgets fast</em></p>' in content

    def test_default_badges_when_none(self, context):
        """Test default badges are used when the model returned none."""
        content = render_readme(_readme(), context)

        assert lookup_badge("pytest").to_html() in content
        assert lookup_badge("GitHub Actions").to_html() in content

    def test_github_badges_optional(self, context):
        """Test GitHub stat badges only appear when enabled."""
        assert "img.shields.io/github/stars" not in render_readme(_readme(), context)

        context.include_github_badges = True

        assert "img.shields.io/github/stars/acme/widgets" in render_readme(_readme(), context)

    def test_sections_in_order(self, context):
        """Test sections appear in document order and empty ones are skipped."""
        headings = [s.heading for s in build_sections(_readme(), context)]

        assert headings == [
            "📖 Description",
            "🚀 Features",
            "🛠 Installation",
            "💡 Usage",
            "📁 Project Structure",
            "🔒 License",
        ]

    def test_table_of_contents(self, context):
        content = render_readme(_readme(), context)

        assert "## 📚 Table of Contents\n- [Description](#-description)\n- [Features](#-features)" in content

    def test_installation_fenced_once(self, context):
        """Test model fences are replaced by a single bash fence."""
        content = render_readme(_readme(), context)

        assert "## 🛠 Installation\n```bash\npip install widgets\n```" in content
        assert "```bash\n```bash" not in content

    def test_features_and_license(self, context):
        content = render_readme(_readme(license="Apache-2.0"), context)

        assert "- ✨ **Spinning**" in content
        assert "This project is licensed under **Apache-2.0**." in content

    def test_highlights_quoted(self, context):
        content = render_readme(_readme(highlights=["Fast", "Tiny"]), context)

        assert "> - Fast\n> - Tiny" in content

    def test_tech_stack_table(self, context):
        """Test known technologies render as badges and unknown ones as code."""
        content = render_readme(_readme(tech_stack={"Language": ["Python", "Brainfunk"]}), context)

        assert "| Category | Technologies |" in content
        assert f"| Language | {lookup_badge('Python').to_html()} `Brainfunk` |" in content

    def test_mermaid_diagrams(self, context):
        content = render_readme(
            _readme(architecture_diagram="```mermaid\nflowchart TD\nA-->B\n```", data_flow_diagram="sequenceDiagram"),
            context,
        )

        assert "### Architecture\n```mermaid\nflowchart TD\nA-->B\n```" in content
        assert "### Data Flow\n```mermaid\nsequenceDiagram\n```" in content

    def test_contributors_section(self, context):
        """Test the contributors table comes from git stats when enabled."""
        assert "👥 Contributors" not in render_readme(_readme(), context)

        context.include_contributors = True
        content = render_readme(_readme(), context)

        assert "## 👥 Contributors\n| Contributor | Commits |" in content
        assert "| Alice | 9 |" in content

    def test_contributing_can_be_disabled(self, context):
        readme = _readme(contributing="Open a pull request.")
        assert "## 🤝 Contributing" in render_readme(readme, context)

        context.include_contributing = False

        assert "🤝 Contributing" not in render_readme(readme, context)

    def test_roadmap_with_changelog_tasks(self, context):
        """Test completed changelog items are appended to the roadmap table."""
        context.changelog_tasks = ["Initial release"]
        roadmap = "| Task / Feature | Status |\n| --- | --- |\n| Plugins | 🚧 In Progress |"

        content = render_readme(_readme(roadmap=roadmap), context)

        assert (
            "| Plugins | 🚧 In Progress |\n| **Completed tasks from CHANGELOG:** |  |\n| Initial release | ✅ Done |"
            in content
        )

    def test_roadmap_from_changelog_only(self, context):
        """Test a roadmap table is created from changelog items alone."""
        context.changelog_tasks = ["Initial release"]

        sections = {s.heading: s.body for s in build_sections(_readme(), context)}

        assert sections["🛣 Roadmap"].startswith("| Task / Feature | Status |")

    def test_footer(self, context):
        content = render_readme(_readme(), context)

        assert content.endswith('---\n<p align="right">(<a href="#top">back to top</a>)</p>\n')


class TestChangelogLink:
    """Tests for append_changelog_link."""

    def test_appends_section(self):
        assert append_changelog_link("# Title\n") == "# Title" + CHANGELOG_SECTION.format(name="CHANGELOG.md")
        assert append_changelog_link("# Title").endswith("See [CHANGELOG.md](CHANGELOG.md) for details.\n")

    def test_links_given_file(self):
        assert append_changelog_link("# Title", "CHANGELOG").endswith("See [CHANGELOG](CHANGELOG) for details.\n")
