"""
Value objects shared across the README generation pipeline.

Everything here is a plain dataclass: repository facts gathered from disk and git,
the LLM configuration chosen by the user, and the README assembled from the model reply.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import quote

from .config import DEFAULT_LANGUAGE, DEFAULT_SCAN_DEPTH, LLMProvider, ScanDepth, ScannedFile


def _encode(value: str) -> str:
    return quote(value, safe="")


@dataclass(frozen=True)
class Badge:
    """A shields.io badge for a technology used by the project."""

    name: str
    color: str
    logo: str
    logo_color: str = "white"

    def to_url(self) -> str:
        return (
            f"https://img.shields.io/badge/{_encode(self.name)}-{_encode(self.color)}.svg"
            f"?style=for-the-badge&logo={_encode(self.logo)}&logoColor={_encode(self.logo_color)}"
        )

    def to_html(self) -> str:
        return f'<img src="{self.to_url()}" alt="{self.name}">'

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Badge:
        """Build a badge from the camelCase shape the model returns.

        Raises:
            ValueError: If `name` is missing or blank.
        """
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValueError("Badge name must not be empty")
        return cls(
            name=name,
            color=str(data.get("color") or "555555").lstrip("#"),
            logo=str(data.get("logo") or name.lower()),
            logo_color=str(data.get("logoColor") or data.get("logo_color") or "white"),
        )


@dataclass(frozen=True)
class ApiKey:
    """A provider credential. Never written to disk."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("API key must not be empty")
        object.__setattr__(self, "value", self.value.strip())

    def redacted(self) -> str:
        if len(self.value) <= 8:
            return "*" * len(self.value)
        return f"{self.value[:4]}...{self.value[-4:]}"

    def __str__(self) -> str:
        return self.redacted()

    def __repr__(self) -> str:
        return f"ApiKey({self.redacted()!r})"


@dataclass(frozen=True)
class LLMConfiguration:
    """Provider, model and credentials for one generation run."""

    provider: LLMProvider
    model: str
    api_key: ApiKey
    base_url: str | None = None

    def with_model(self, model: str) -> LLMConfiguration:
        return replace(self, model=model)

    def with_provider(self, provider: LLMProvider) -> LLMConfiguration:
        return replace(self, provider=provider)

    def with_api_key(self, api_key: ApiKey) -> LLMConfiguration:
        return replace(self, api_key=api_key)


@dataclass
class Contributor:
    name: str
    commits: int


@dataclass
class GitStats:
    """Commit history summary for a repository."""

    commit_count: int = 0
    contributors: list[Contributor] = field(default_factory=list)
    branch_count: int = 0
    tags: list[str] = field(default_factory=list)
    first_commit_date: str | None = None
    last_commit_date: str | None = None


@dataclass
class PackageInfo:
    """Facts read from the project manifest (package.json, pyproject.toml, Cargo.toml)."""

    manifest: str
    name: str | None = None
    version: str | None = None
    description: str | None = None
    license: str | None = None
    author: str | None = None
    homepage: str | None = None
    keywords: list[str] = field(default_factory=list)
    scripts: dict[str, str] = field(default_factory=dict)
    dependencies: list[str] = field(default_factory=list)
    dev_dependencies: list[str] = field(default_factory=list)
    engines: dict[str, str] = field(default_factory=dict)

    @property
    def code_stats(self) -> str:
        return (
            f"{len(self.dependencies)} dependencies, "
            f"{len(self.dev_dependencies)} dev dependencies"
        )


@dataclass
class DetectedTools:
    """Tooling recognised from well-known configuration files."""

    cicd: list[str] = field(default_factory=list)
    containerization: list[str] = field(default_factory=list)
    linting: list[str] = field(default_factory=list)
    testing: list[str] = field(default_factory=list)
    bundlers: list[str] = field(default_factory=list)
    package_managers: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(len(items) for items in self.categories().values())

    def categories(self) -> dict[str, list[str]]:
        return {
            "CI/CD": self.cicd,
            "Containerization": self.containerization,
            "Linting & Formatting": self.linting,
            "Testing": self.testing,
            "Build Tools": self.bundlers,
            "Package Managers": self.package_managers,
        }


@dataclass
class LanguageStat:
    name: str
    extension: str
    file_count: int
    lines: int
    percentage: float


@dataclass
class RepositoryInfo:
    """Everything known about the repository before the model is called."""

    name: str
    description: str = ""
    owner: str | None = None
    code_stats: str = ""
    default_branch: str = "main"
    remote_url: str | None = None
    license: str | None = None
    homepage: str | None = None
    detected_tools: DetectedTools | None = None
    language_stats: list[LanguageStat] = field(default_factory=list)
    git_stats: GitStats | None = None
    package_info: PackageInfo | None = None
    directory_tree: str = ""

    @property
    def is_github(self) -> bool:
        return bool(self.owner) and "github.com" in (self.remote_url or "")


@dataclass
class PromptContext:
    """Inputs shared by the prompt builder, the response parser and the renderer."""

    repository: RepositoryInfo
    files: list[ScannedFile] = field(default_factory=list)
    language: str = DEFAULT_LANGUAGE
    scan_depth: ScanDepth = DEFAULT_SCAN_DEPTH
    user_context: str = ""
    changelog: str = ""
    changelog_tasks: list[str] = field(default_factory=list)
    logo_url: str | None = None
    include_github_badges: bool = False
    include_contributors: bool = False
    include_contributing: bool = True


@dataclass
class Readme:
    """README sections produced by the model, plus the rendered markdown."""

    title: str
    short_description: str
    long_description: str = ""
    logo_url: str = ""
    badges: list[Badge] = field(default_factory=list)
    highlights: list[str] = field(default_factory=list)
    features: list[str] = field(default_factory=list)
    tech_stack: dict[str, list[str]] = field(default_factory=dict)
    prerequisites: list[str] = field(default_factory=list)
    installation: str = ""
    usage: str = ""
    architecture_diagram: str = ""
    data_flow_diagram: str = ""
    contributing: str = ""
    roadmap: str = ""
    faq: str = ""
    license: str = "MIT"
    acknowledgments: str = ""
    content: str = ""
