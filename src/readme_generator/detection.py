"""
Project tooling detection.

Recognises CI/CD, container, lint, test, build and package-manager tooling from the
presence of well-known files in the repository root, plus `[tool.*]` tables in
pyproject.toml for Python tools configured there.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from .models import DetectedTools

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectionRule:
    """A tool is detected when any of `paths` exists or pyproject has any `pyproject_tables`."""

    name: str
    paths: tuple[str, ...]
    pyproject_tables: tuple[str, ...] = ()


CICD_RULES = [
    DetectionRule("GitHub Actions", (".github/workflows",)),
    DetectionRule("GitLab CI", (".gitlab-ci.yml",)),
    DetectionRule("Jenkins", ("Jenkinsfile",)),
    DetectionRule("CircleCI", (".circleci",)),
    DetectionRule("Travis CI", (".travis.yml",)),
    DetectionRule("Azure Pipelines", ("azure-pipelines.yml",)),
]

CONTAINER_RULES = [
    DetectionRule("Docker", ("Dockerfile", "dockerfile", ".dockerignore")),
    DetectionRule(
        "Docker Compose",
        ("docker-compose.yml", "docker-compose.yaml", "compose.yml", "compose.yaml"),
    ),
    DetectionRule("Kubernetes", ("k8s", "kubernetes", "helm")),
]

LINTING_RULES = [
    DetectionRule("Ruff", ("ruff.toml", ".ruff.toml"), ("ruff",)),
    DetectionRule("Black", (), ("black",)),
    DetectionRule("Flake8", (".flake8",), ("flake8",)),
    DetectionRule("mypy", ("mypy.ini", ".mypy.ini"), ("mypy",)),
    DetectionRule("pre-commit", (".pre-commit-config.yaml",)),
    DetectionRule(
        "ESLint",
        (
            ".eslintrc", ".eslintrc.js", ".eslintrc.cjs", ".eslintrc.json", ".eslintrc.yml",
            "eslint.config.js", "eslint.config.mjs", "eslint.config.cjs",
        ),
    ),
    DetectionRule(
        "Prettier",
        (
            ".prettierrc", ".prettierrc.js", ".prettierrc.json", ".prettierrc.yml",
            "prettier.config.js", "prettier.config.mjs",
        ),
    ),
    DetectionRule("Biome", ("biome.json", "biome.jsonc")),
    DetectionRule("Stylelint", (".stylelintrc", ".stylelintrc.json", ".stylelintrc.js", "stylelint.config.js")),
    DetectionRule("EditorConfig", (".editorconfig",)),
]

TESTING_RULES = [
    DetectionRule("pytest", ("pytest.ini", "conftest.py", "tests/conftest.py"), ("pytest",)),
    DetectionRule("tox", ("tox.ini",), ("tox",)),
    DetectionRule("nox", ("noxfile.py",)),
    DetectionRule(
        "Jest",
        ("jest.config.js", "jest.config.ts", "jest.config.mjs", "jest.config.cjs", "jest.config.json"),
    ),
    DetectionRule("Vitest", ("vitest.config.js", "vitest.config.ts", "vitest.config.mjs")),
    DetectionRule("Mocha", (".mocharc.yml", ".mocharc.json", ".mocharc.js")),
    DetectionRule("Cypress", ("cypress.config.js", "cypress.config.ts", "cypress.config.mjs", "cypress")),
    DetectionRule("Playwright", ("playwright.config.js", "playwright.config.ts")),
    DetectionRule("Storybook", (".storybook",)),
]

BUNDLER_RULES = [
    DetectionRule("setuptools", ("setup.py", "setup.cfg"), ("setuptools",)),
    DetectionRule("Hatch", ("hatch.toml",), ("hatch",)),
    DetectionRule("Webpack", ("webpack.config.js", "webpack.config.ts", "webpack.config.mjs")),
    DetectionRule("Vite", ("vite.config.js", "vite.config.ts", "vite.config.mjs")),
    DetectionRule("Rollup", ("rollup.config.js", "rollup.config.ts", "rollup.config.mjs")),
    DetectionRule("esbuild", ("esbuild.config.js", "esbuild.mjs")),
    DetectionRule("TypeScript", ("tsconfig.json",)),
    DetectionRule("SWC", (".swcrc",)),
    DetectionRule("Babel", (".babelrc", ".babelrc.json", "babel.config.js", "babel.config.json")),
]

PACKAGE_MANAGER_RULES = [
    DetectionRule("Poetry", ("poetry.lock",), ("poetry",)),
    DetectionRule("uv", ("uv.lock",), ("uv",)),
    DetectionRule("PDM", ("pdm.lock",), ("pdm",)),
    DetectionRule("Pipenv", ("Pipfile", "Pipfile.lock")),
    DetectionRule("pip", ("requirements.txt", "requirements-dev.txt")),
    DetectionRule("pnpm", ("pnpm-lock.yaml", "pnpm-workspace.yaml")),
    DetectionRule("Yarn", ("yarn.lock", ".yarnrc.yml", ".yarnrc")),
    DetectionRule("npm", ("package-lock.json",)),
    DetectionRule("Bun", ("bun.lockb", "bun.lock")),
    DetectionRule("Cargo", ("Cargo.toml",)),
    DetectionRule("Go Modules", ("go.mod",)),
]


def _pyproject_tool_tables(root: Path) -> set[str]:
    pyproject = root / "pyproject.toml"
    if not pyproject.is_file():
        return set()
    try:
        with open(pyproject, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.debug("Could not parse %s: %s", pyproject, e)
        return set()
    tool = data.get("tool")
    return set(tool) if isinstance(tool, dict) else set()


def detect_by_rules(root: Path, rules: list[DetectionRule], tool_tables: set[str] | None = None) -> list[str]:
    """Return the names of rules whose files exist under `root`, in rule order."""
    tool_tables = tool_tables or set()
    detected = []
    for rule in rules:
        if any((root / path).exists() for path in rule.paths) or tool_tables.intersection(rule.pyproject_tables):
            detected.append(rule.name)
    return detected


def detect_tools(root: Path) -> DetectedTools:
    """Detect project tooling for the repository at `root`.

    Args:
        root: Repository root.

    Returns:
        DetectedTools with one list of tool names per category.
    """
    tables = _pyproject_tool_tables(root)
    tools = DetectedTools(
        cicd=detect_by_rules(root, CICD_RULES, tables),
        containerization=detect_by_rules(root, CONTAINER_RULES, tables),
        linting=detect_by_rules(root, LINTING_RULES, tables),
        testing=detect_by_rules(root, TESTING_RULES, tables),
        bundlers=detect_by_rules(root, BUNDLER_RULES, tables),
        package_managers=detect_by_rules(root, PACKAGE_MANAGER_RULES, tables),
    )
    logger.debug("Detected %d tools", tools.total)
    return tools
