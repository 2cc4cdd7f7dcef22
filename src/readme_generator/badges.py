"""
Badge lookup table and helpers.

Maps well-known language, framework and tool names to shields.io color/logo triples so
that badges stay consistent regardless of what colors the model suggests.
"""

from __future__ import annotations

from urllib.parse import quote

from .models import Badge

# name -> (color, logo, logoColor)
_BADGE_TABLE: dict[str, tuple[str, str, str]] = {
    # Languages
    "Python": ("3776AB", "python", "white"),
    "JavaScript": ("F7DF1E", "javascript", "black"),
    "TypeScript": ("3178C6", "typescript", "white"),
    "Go": ("00ADD8", "go", "white"),
    "Rust": ("000000", "rust", "white"),
    "Java": ("007396", "openjdk", "white"),
    "Kotlin": ("7F52FF", "kotlin", "white"),
    "Ruby": ("CC342D", "ruby", "white"),
    "PHP": ("777BB4", "php", "white"),
    "C#": ("512BD4", "dotnet", "white"),
    "C++": ("00599C", "cplusplus", "white"),
    "Swift": ("F05138", "swift", "white"),
    "Shell": ("4EAA25", "gnubash", "white"),
    # Python ecosystem
    "FastAPI": ("009688", "fastapi", "white"),
    "Django": ("092E20", "django", "white"),
    "Flask": ("000000", "flask", "white"),
    "Pydantic": ("E92063", "pydantic", "white"),
    "NumPy": ("013243", "numpy", "white"),
    "pandas": ("150458", "pandas", "white"),
    "PyTorch": ("EE4C2C", "pytorch", "white"),
    "TensorFlow": ("FF6F00", "tensorflow", "white"),
    "pytest": ("0A9EDC", "pytest", "white"),
    "Poetry": ("60A5FA", "poetry", "white"),
    "uv": ("DE5FE9", "uv", "white"),
    "Ruff": ("D7FF64", "ruff", "black"),
    "Typer": ("000000", "typer", "white"),
    "OpenAI": ("412991", "openai", "white"),
    "Anthropic": ("191919", "anthropic", "white"),
    # JavaScript ecosystem
    "Node.js": ("339933", "node.js", "white"),
    "npm": ("CB3837", "npm", "white"),
    "Yarn": ("2C8EBB", "yarn", "white"),
    "pnpm": ("F69220", "pnpm", "white"),
    "Bun": ("000000", "bun", "white"),
    "React": ("61DAFB", "react", "black"),
    "Vue.js": ("4FC08D", "vuedotjs", "white"),
    "Svelte": ("FF3E00", "svelte", "white"),
    "Next.js": ("000000", "nextdotjs", "white"),
    "Express": ("000000", "express", "white"),
    "Webpack": ("8DD6F9", "webpack", "black"),
    "Vite": ("646CFF", "vite", "white"),
    "Rollup": ("EC4A3F", "rollupdotjs", "white"),
    "Jest": ("C21325", "jest", "white"),
    "Vitest": ("6E9F18", "vitest", "white"),
    "ESLint": ("4B32C3", "eslint", "white"),
    "Prettier": ("F7B93E", "prettier", "black"),
    # Infrastructure
    "Git": ("F05032", "git", "white"),
    "GitHub": ("181717", "github", "white"),
    "GitHub Actions": ("2088FF", "github-actions", "white"),
    "GitLab CI": ("FC6D26", "gitlab", "white"),
    "Docker": ("2496ED", "docker", "white"),
    "Kubernetes": ("326CE5", "kubernetes", "white"),
    "PostgreSQL": ("4169E1", "postgresql", "white"),
    "MySQL": ("4479A1", "mysql", "white"),
    "SQLite": ("003B57", "sqlite", "white"),
    "Redis": ("DC382D", "redis", "white"),
    "MongoDB": ("47A248", "mongodb", "white"),
}

_LOOKUP: dict[str, str] = {name.lower(): name for name in _BADGE_TABLE}

DEFAULT_BADGE_NAMES = ["Python", "pytest", "GitHub Actions"]


def lookup_badge(name: str) -> Badge | None:
    """Return the canonical badge for a technology name, ignoring case.

    Args:
        name: Technology name as written by the user or the model.

    Returns:
        A `Badge` for known names, otherwise None.
    """
    canonical = _LOOKUP.get(name.strip().lower())
    if canonical is None:
        return None
    color, logo, logo_color = _BADGE_TABLE[canonical]
    return Badge(name=canonical, color=color, logo=logo, logo_color=logo_color)


def known_badge_names() -> list[str]:
    return sorted(_BADGE_TABLE, key=str.lower)


def normalize_badges(badges: list[Badge]) -> list[Badge]:
    """Replace colors and logos of known technologies with the table's values.

    Unknown badges pass through untouched. Duplicate names (case-insensitive) are dropped.
    """
    seen: set[str] = set()
    result: list[Badge] = []
    for badge in badges:
        key = badge.name.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(lookup_badge(badge.name) or badge)
    return result


def default_badges() -> list[Badge]:
    return [badge for name in DEFAULT_BADGE_NAMES if (badge := lookup_badge(name)) is not None]


DEFAULT_BADGES: list[Badge] = default_badges()


def github_badges(owner: str, name: str) -> list[str]:
    """Build dynamic GitHub stat badges (stars, forks, issues, license) as HTML tags.

    Args:
        owner: Repository owner login.
        name: Repository name.

    Returns:
        A list of `<img>` tags pointing at shields.io GitHub endpoints.
    """
    slug = f"{quote(owner, safe='')}/{quote(name, safe='')}"
    kinds = [
        ("stars", "Stars"),
        ("forks", "Forks"),
        ("issues", "Issues"),
        ("license", "License"),
    ]
    return [
        f'<img src="https://img.shields.io/github/{kind}/{slug}?style=for-the-badge" alt="{alt}">'
        for kind, alt in kinds
    ]
