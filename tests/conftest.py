"""Shared fixtures."""

from pathlib import Path

import pytest

from readme_generator.config import ScannedFile
from readme_generator.models import (
    Contributor,
    DetectedTools,
    GitStats,
    LanguageStat,
    PackageInfo,
    PromptContext,
    RepositoryInfo,
)


@pytest.fixture
def repository():
    """A GitHub repository with every optional fact filled in."""
    return RepositoryInfo(
        name="widgets",
        description="Widgets for everyone",
        owner="acme",
        code_stats="2 dependencies, 1 dev dependencies",
        default_branch="main",
        remote_url="https://github.com/acme/widgets.git",
        license="MIT",
        homepage="https://widgets.example.com",
        detected_tools=DetectedTools(cicd=["GitHub Actions"], testing=["pytest"]),
        language_stats=[LanguageStat(name="Python", extension=".py", file_count=2, lines=40, percentage=100.0)],
        git_stats=GitStats(
            commit_count=12,
            contributors=[Contributor("Alice", 9), Contributor("Bob", 3)],
            branch_count=2,
            tags=["v1.1.0", "v1.0.0"],
            first_commit_date="2024-01-02",
            last_commit_date="2024-06-30",
        ),
        package_info=PackageInfo(
            manifest="pyproject.toml",
            name="widgets",
            version="1.1.0",
            dependencies=["requests", "typer"],
            dev_dependencies=["pytest"],
        ),
        directory_tree="widgets/\n├── src/\n└── pyproject.toml",
    )


@pytest.fixture
def scanned_files():
    return [
        ScannedFile(
            path=Path("/repo/src/widgets/core.py"),
            relative_path="src/widgets/core.py",
            size_bytes=2048,
            extension=".py",
            content="def spin():\n    return 'wheee'\n",
        ),
        ScannedFile(
            path=Path("/repo/Dockerfile"),
            relative_path="Dockerfile",
            size_bytes=30,
            extension="",
            content="FROM python:3.12-slim\n",
        ),
    ]


@pytest.fixture
def context(repository, scanned_files):
    """A prompt context for the sample repository."""
    return PromptContext(repository=repository, files=scanned_files)
