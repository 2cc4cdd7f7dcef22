"""
Prompt construction.

The system prompt pins down the JSON shape the model must return; the user prompt
carries everything gathered about the repository.
"""

from __future__ import annotations

from collections import defaultdict

from .badges import known_badge_names, lookup_badge
from .config import MAX_FILE_CONTENT_CHARS, RECENT_TAGS_LIMIT, TOP_ITEMS_LIMIT, ScannedFile
from .models import GitStats, PackageInfo, PromptContext

LANGUAGE_INSTRUCTIONS: dict[str, str] = {
    "en": "Write the README in English.",
    "es": "Escribe el README en español.",
    "fr": "Rédigez le README en français.",
    "de": "Schreiben Sie die README auf Deutsch.",
    "ru": "Напишите README на русском языке.",
}

RESPONSE_SCHEMA = """{
  "title": string,               // project name, may include an emoji
  "short_description": string,   // one-line tagline shown under the title
  "long_description": string,    // overview with real use cases (markdown)
  "logoUrl": string,             // thematic image URL, or "" for the default
  "highlights": string[],        // 3-4 reasons to use this project
  "badges": [{"name": string, "color": string, "logo": string, "logoColor": string}],
  "tech_stack": {"Category": ["Tech", ...]},
  "prerequisites": string[],     // required tools and versions
  "features": string[],
  "installation": string,        // step-by-step shell commands
  "usage": string,               // examples with code blocks (markdown)
  "mermaid_diagrams": {"architecture": string, "data_flow": string},
  "contributing": string,        // markdown
  "roadmap": string,             // markdown table | Task / Feature | Status |
  "faq": string,                 // markdown questions and answers
  "license": string,             // SPDX identifier such as "MIT"
  "acknowledgments": string      // markdown
}"""

FIELD_GUIDELINES = """Field guidelines:
- tech_stack: group only technologies the project actually uses, by category
  (Language, Framework, Database, Testing, CI/CD, Containerization, Build Tool, Linting).
- prerequisites: take versions from the manifest when present (requires-python, engines).
- mermaid_diagrams: keep each diagram to about 8-12 nodes. Use "flowchart TD" or
  "flowchart LR" for architecture and "sequenceDiagram" for data_flow. No styling
  directives, no spaces in node IDs, quote edge labels containing special characters.
  Base them on the real code layout.
- roadmap: a markdown table with the columns | Task / Feature | Status |. Status is
  either "✅ Done" or "🚧 In Progress".
- contributing: cover reporting bugs, proposing features, opening pull requests and
  code style."""


def language_instruction(language: str) -> str:
    """Return the instruction sentence for a README language.

    Unknown codes are passed to the model verbatim.
    """
    return LANGUAGE_INSTRUCTIONS.get(language.lower(), f"Write the README in the language with code '{language}'.")


def _badge_instructions() -> str:
    lines = []
    for name in known_badge_names():
        badge = lookup_badge(name)
        if badge is None:
            continue
        lines.append(
            f'- {{"name": "{badge.name}", "color": "{badge.color}", '
            f'"logo": "{badge.logo}", "logoColor": "{badge.logo_color}"}}'
        )
    return (
        "For badges, choose only entries from this list that match the project's stack "
        "and copy them exactly:\n" + "\n".join(lines)
    )


def build_system_prompt(context: PromptContext) -> str:
    """Build the system prompt describing the expected JSON reply.

    Args:
        context: Generation context; only the language is used.

    Returns:
        The system prompt text.
    """
    return (
        "You are a technical writer producing a README for a software project. "
        "Use the repository details you are given to write accurate, engaging content. "
        f"{language_instruction(context.language)}\n\n"
        "Reply with a single JSON object with this structure:\n"
        f"{RESPONSE_SCHEMA}\n\n"
        f"{_badge_instructions()}\n\n"
        f"{FIELD_GUIDELINES}\n\n"
        "Respond with the JSON object only, without any text before or after it."
    )


def _format_package_info(info: PackageInfo) -> list[str]:
    lines = [f"Package information ({info.manifest}):"]
    if info.name:
        lines.append(f"- Package name: {info.name}")
    if info.version:
        lines.append(f"- Version: {info.version}")
    if info.license:
        lines.append(f"- License: {info.license}")
    if info.engines:
        lines.append("- Requires: " + ", ".join(f"{k} {v}" for k, v in info.engines.items()))
    if info.keywords:
        lines.append(f"- Keywords: {', '.join(info.keywords)}")
    if info.scripts:
        lines.append(f"- Scripts / entry points: {', '.join(info.scripts)}")
    if info.homepage:
        lines.append(f"- Homepage: {info.homepage}")
    if info.dependencies:
        lines.append(f"- Dependencies: {', '.join(info.dependencies)}")
    if info.dev_dependencies:
        lines.append(f"- Dev dependencies: {', '.join(info.dev_dependencies)}")
    return lines


def _format_git_stats(stats: GitStats) -> list[str]:
    lines = [
        "Git history:",
        f"- Total commits: {stats.commit_count}",
        f"- Contributors: {len(stats.contributors)}",
        f"- Branches: {stats.branch_count}",
    ]
    if stats.tags:
        recent = ", ".join(stats.tags[:RECENT_TAGS_LIMIT])
        extra = len(stats.tags) - RECENT_TAGS_LIMIT
        suffix = f" (and {extra} more)" if extra > 0 else ""
        lines.append(f"- Tags/releases: {recent}{suffix}")
    if stats.first_commit_date:
        lines.append(f"- First commit: {stats.first_commit_date}")
    if stats.last_commit_date:
        lines.append(f"- Last commit: {stats.last_commit_date}")
    if stats.contributors:
        top = ", ".join(f"{c.name} ({c.commits} commits)" for c in stats.contributors[:TOP_ITEMS_LIMIT])
        lines.append(f"- Top contributors: {top}")
    return lines


def _group_by_extension(files: list[ScannedFile]) -> dict[str, list[ScannedFile]]:
    groups: dict[str, list[ScannedFile]] = defaultdict(list)
    for scanned in files:
        groups[scanned.extension.lstrip(".") or "no-ext"].append(scanned)
    return dict(groups)


def _format_files(files: list[ScannedFile]) -> list[str]:
    blocks = [f"Project files ({len(files)} scanned):"]
    for extension, group in _group_by_extension(files).items():
        blocks.append(f"## {extension.upper()} files")
        fence = "" if extension == "no-ext" else extension
        for scanned in group:
            content = scanned.content
            if len(content) > MAX_FILE_CONTENT_CHARS:
                content = content[:MAX_FILE_CONTENT_CHARS] + "\n... (truncated)"
            size_kb = round(scanned.size_bytes / 1024)
            blocks.append(f"### File: {scanned.relative_path} ({size_kb}KB)\n```{fence}\n{content}\n```")
    return blocks


def build_user_prompt(context: PromptContext) -> str:
    """Build the user prompt from everything known about the repository.

    Sections without data are left out.

    Args:
        context: Generation context.

    Returns:
        The user prompt text.
    """
    repo = context.repository
    sections: list[str] = []

    header = [
        "Generate a README for this project.",
        "",
        "Project information:",
        f'- Name: "{repo.name}"',
        f'- Description: "{repo.description}"',
    ]
    if repo.code_stats:
        header.append(f'- Code stats: "{repo.code_stats}"')
    if repo.owner:
        header.append(f'- Owner: "{repo.owner}"')
    if repo.default_branch:
        header.append(f'- Default branch: "{repo.default_branch}"')
    if repo.license:
        header.append(f'- License: "{repo.license}"')
    if repo.homepage:
        header.append(f'- Homepage: "{repo.homepage}"')
    sections.append("\n".join(header))

    if repo.package_info:
        sections.append("\n".join(_format_package_info(repo.package_info)))

    if repo.git_stats:
        sections.append("\n".join(_format_git_stats(repo.git_stats)))

    if repo.detected_tools and repo.detected_tools.total:
        tool_lines = [
            f"- {category}: {', '.join(tools)}"
            for category, tools in repo.detected_tools.categories().items()
            if tools
        ]
        sections.append("Detected infrastructure:\n" + "\n".join(tool_lines))

    if repo.language_stats:
        lang_lines = [
            f"- {s.name}: {s.percentage:.1f}% ({s.file_count} files, {s.lines} lines)" for s in repo.language_stats
        ]
        sections.append("Language breakdown:\n" + "\n".join(lang_lines))

    if repo.directory_tree:
        sections.append(f"Project structure:\n```\n{repo.directory_tree}\n```")

    if context.user_context:
        sections.append(f"Additional project context:\n{context.user_context}")

    if context.changelog:
        sections.append(f"CHANGELOG contents:\n{context.changelog}")

    if context.changelog_tasks:
        tasks = "\n".join(f"- {task}" for task in context.changelog_tasks)
        sections.append(
            "Tasks already completed according to the CHANGELOG (they are listed in the roadmap "
            f"automatically, so keep the roadmap to upcoming work):\n{tasks}"
        )

    if context.files:
        sections.append("\n\n".join(_format_files(context.files)))

    sections.append(
        "Infer the project's purpose, audience and typical use cases from the information above. "
        "Ground technical details in the source files and dependencies, and make the diagrams "
        "reflect this project's real structure."
    )

    return "\n\n".join(sections)
