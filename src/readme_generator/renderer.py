"""
README markdown rendering.

Assembles the final document from a parsed `Readme`: header block (logo, title, tagline,
badges), table of contents, then one section per non-empty field.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import quote

from .badges import DEFAULT_BADGES, github_badges, lookup_badge
from .config import MAX_TOP_CONTRIBUTORS
from .models import PromptContext, Readme, RepositoryInfo

DEFAULT_LOGO_URL = "https://placehold.co/600x200/444/FFF?text=Project+Logo"

CHANGELOG_SECTION = "\n\n## 📋 Changelog\nSee [{name}]({name}) for details.\n"

_FENCE_OPEN = re.compile(r"^```[\w-]*\s*$", re.MULTILINE)
_ANCHOR_STRIP = re.compile(r"[^\w\s-]", re.UNICODE)


@dataclass
class Section:
    heading: str
    body: str

    @property
    def anchor(self) -> str:
        return heading_anchor(self.heading)


def heading_anchor(heading: str) -> str:
    """Compute the GitHub anchor for a heading (`"📖 Description"` -> `"-description"`)."""
    slug = _ANCHOR_STRIP.sub("", heading.lower())
    return slug.replace(" ", "-")


def default_logo_url(repository: RepositoryInfo) -> str:
    """Socialify card for GitHub repositories, a placeholder image otherwise."""
    if repository.is_github and repository.owner:
        return (
            f"https://socialify.git.ci/{quote(repository.owner)}/{quote(repository.name)}/image"
            "?description=1&font=Inter&language=1&name=1&owner=1&pattern=Plus&theme=Dark"
        )
    return DEFAULT_LOGO_URL


def clean_code_block(text: str) -> str:
    """Remove markdown fences from text that will be wrapped in a fence of its own."""
    if not text:
        return ""
    without_open = _FENCE_OPEN.sub("", text)
    return without_open.replace("```", "").strip()


def _render_header(readme: Readme, context: PromptContext) -> str:
    logo_url = readme.logo_url or default_logo_url(context.repository)
    badges = readme.badges or DEFAULT_BADGES
    badge_html = [badge.to_html() for badge in badges]

    repo = context.repository
    if context.include_github_badges and repo.is_github and repo.owner:
        badge_html.extend(github_badges(repo.owner, repo.name))

    badge_lines = "\n".join(f"  {html}" for html in badge_html)
    return (
        '<a id="top"></a>\n'
        '<p align="center">\n'
        f'  <img src="{logo_url}" width="500" alt="project-logo">\n'
        "</p>\n\n"
        f'<h1 align="center">{readme.title}</h1>\n'
        f'<p align="center"><em>{readme.short_description}</em></p>\n\n'
        '<p align="center">\n'
        f"{badge_lines}\n"
        "</p>"
    )


def _render_highlights(highlights: list[str]) -> str:
    return "\n".join(f"> - {item}" for item in highlights)


def _render_tech_stack(stack: dict[str, list[str]]) -> str:
    rows = ["| Category | Technologies |", "| --- | --- |"]
    for category, items in stack.items():
        cells = []
        for item in items:
            badge = lookup_badge(item)
            cells.append(badge.to_html() if badge else f"`{item}`")
        rows.append(f"| {category} | {' '.join(cells)} |")
    return "\n".join(rows)


def _render_contributors(context: PromptContext) -> str:
    stats = context.repository.git_stats
    if stats is None or not stats.contributors:
        return ""
    rows = ["| Contributor | Commits |", "| --- | ---: |"]
    rows.extend(f"| {c.name} | {c.commits} |" for c in stats.contributors[:MAX_TOP_CONTRIBUTORS])
    return "\n".join(rows)


def _render_roadmap(roadmap: str, changelog_tasks: list[str]) -> str:
    """Append changelog bullet items to the roadmap as completed rows."""
    roadmap = roadmap.strip()
    if not changelog_tasks:
        return roadmap

    rows = ["| **Completed tasks from CHANGELOG:** |  |"]
    rows.extend(f"| {task} | ✅ Done |" for task in changelog_tasks)
    if not roadmap.startswith("|"):
        table = ["| Task / Feature | Status |", "| --- | --- |", *rows]
        return "\n\n".join(part for part in (roadmap, "\n".join(table)) if part)
    return roadmap + "\n" + "\n".join(rows)


def _mermaid(diagram: str) -> str:
    return f"```mermaid\n{clean_code_block(diagram)}\n```"


def build_sections(readme: Readme, context: PromptContext) -> list[Section]:
    """Return the body sections in document order, skipping empty ones."""
    sections: list[Section] = []

    def add(heading: str, body: str) -> None:
        if body.strip():
            sections.append(Section(heading, body.strip()))

    add("📖 Description", readme.long_description)
    add("🚀 Features", "\n".join(f"- ✨ **{f}**" for f in readme.features))
    if readme.tech_stack:
        add("🧰 Tech Stack", _render_tech_stack(readme.tech_stack))
    add("📋 Prerequisites", "\n".join(f"- {p}" for p in readme.prerequisites))

    installation = clean_code_block(readme.installation)
    if installation:
        add("🛠 Installation", f"```bash\n{installation}\n```")

    add("💡 Usage", readme.usage)

    diagrams = []
    if readme.architecture_diagram.strip():
        diagrams.append("### Architecture\n" + _mermaid(readme.architecture_diagram))
    if readme.data_flow_diagram.strip():
        diagrams.append("### Data Flow\n" + _mermaid(readme.data_flow_diagram))
    add("🏗 Architecture", "\n\n".join(diagrams))

    if context.repository.directory_tree:
        add("📁 Project Structure", f"```\n{context.repository.directory_tree}\n```")
    if context.include_contributing:
        add("🤝 Contributing", readme.contributing)
    if context.include_contributors:
        add("👥 Contributors", _render_contributors(context))

    add("🛣 Roadmap", _render_roadmap(readme.roadmap, context.changelog_tasks))
    add("❓ FAQ", readme.faq)
    add("🔒 License", f"This project is licensed under **{readme.license or 'MIT'}**.")
    add("🙏 Acknowledgments", readme.acknowledgments)
    return sections


def render_table_of_contents(sections: list[Section]) -> str:
    lines = ["## 📚 Table of Contents"]
    for section in sections:
        title = section.heading.split(" ", 1)[-1]
        lines.append(f"- [{title}](#{section.anchor})")
    return "\n".join(lines)


def render_readme(readme: Readme, context: PromptContext) -> str:
    """Render the complete README markdown.

    Args:
        readme: Parsed README fields.
        context: Generation context (repository info and section toggles).

    Returns:
        Markdown text ending with a newline.
    """
    sections = build_sections(readme, context)
    parts = [_render_header(readme, context)]

    if readme.highlights:
        parts.append(_render_highlights(readme.highlights))

    parts.append(render_table_of_contents(sections))
    parts.extend(f"## {section.heading}\n{section.body}" for section in sections)
    parts.append('---\n<p align="right">(<a href="#top">back to top</a>)</p>')

    return "\n\n".join(parts) + "\n"


def append_changelog_link(content: str, file_name: str = "CHANGELOG.md") -> str:
    """Append a Changelog section linking to `file_name`."""
    return content.rstrip("\n") + CHANGELOG_SECTION.format(name=file_name)
