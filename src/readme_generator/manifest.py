"""
Package manifest reading.

Extracts name, version, description, license, dependencies and scripts from the
first manifest found: pyproject.toml (PEP 621 or Poetry), package.json, Cargo.toml.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from pathlib import Path
from typing import Any

from .models import PackageInfo

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAMES = ["pyproject.toml", "package.json", "Cargo.toml"]

_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def _requirement_name(requirement: str) -> str:
    match = _REQUIREMENT_NAME.match(requirement)
    return match.group(1) if match else requirement.strip()


def _str_or_none(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _string_dict(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items()}


def _parse_package_json(path: Path) -> PackageInfo:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("package.json is not an object")

    author = data.get("author")
    if isinstance(author, dict):
        author = author.get("name")

    return PackageInfo(
        manifest=path.name,
        name=_str_or_none(data.get("name")),
        version=_str_or_none(data.get("version")),
        description=_str_or_none(data.get("description")),
        license=_str_or_none(data.get("license")),
        author=_str_or_none(author),
        homepage=_str_or_none(data.get("homepage")),
        keywords=[str(k) for k in data.get("keywords") or []],
        scripts=_string_dict(data.get("scripts")),
        dependencies=sorted(data.get("dependencies") or {}),
        dev_dependencies=sorted(data.get("devDependencies") or {}),
        engines=_string_dict(data.get("engines")),
    )


def _pep621_license(value: Any) -> str | None:
    if isinstance(value, dict):
        return _str_or_none(value.get("text")) or _str_or_none(value.get("file"))
    return _str_or_none(value)


def _parse_pyproject(path: Path) -> PackageInfo:
    with open(path, "rb") as f:
        data = tomllib.load(f)

    project = data.get("project")
    if isinstance(project, dict):
        authors = project.get("authors") or []
        author = authors[0].get("name") if authors and isinstance(authors[0], dict) else None
        urls = _string_dict(project.get("urls"))
        dev_deps: list[str] = []
        for extra in (project.get("optional-dependencies") or {}).values():
            dev_deps.extend(_requirement_name(r) for r in extra)
        for group in (data.get("dependency-groups") or {}).values():
            dev_deps.extend(_requirement_name(r) for r in group if isinstance(r, str))
        engines = {"python": project["requires-python"]} if project.get("requires-python") else {}
        return PackageInfo(
            manifest=path.name,
            name=_str_or_none(project.get("name")),
            version=_str_or_none(project.get("version")),
            description=_str_or_none(project.get("description")),
            license=_pep621_license(project.get("license")),
            author=_str_or_none(author),
            homepage=urls.get("Homepage") or urls.get("homepage") or urls.get("Repository"),
            keywords=[str(k) for k in project.get("keywords") or []],
            scripts=_string_dict(project.get("scripts")),
            dependencies=[_requirement_name(r) for r in project.get("dependencies") or []],
            dev_dependencies=sorted(set(dev_deps)),
            engines=engines,
        )

    poetry = data.get("tool", {}).get("poetry")
    if isinstance(poetry, dict):
        deps = dict(poetry.get("dependencies") or {})
        python_req = deps.pop("python", None)
        dev_deps_map: dict[str, Any] = dict(poetry.get("dev-dependencies") or {})
        for group in (poetry.get("group") or {}).values():
            dev_deps_map.update(group.get("dependencies") or {})
        authors = poetry.get("authors") or []
        return PackageInfo(
            manifest=path.name,
            name=_str_or_none(poetry.get("name")),
            version=_str_or_none(poetry.get("version")),
            description=_str_or_none(poetry.get("description")),
            license=_str_or_none(poetry.get("license")),
            author=_str_or_none(authors[0]) if authors else None,
            homepage=_str_or_none(poetry.get("homepage") or poetry.get("repository")),
            keywords=[str(k) for k in poetry.get("keywords") or []],
            scripts=_string_dict(poetry.get("scripts")),
            dependencies=sorted(deps),
            dev_dependencies=sorted(dev_deps_map),
            engines={"python": str(python_req)} if python_req else {},
        )

    raise ValueError("pyproject.toml has no [project] or [tool.poetry] table")


def _parse_cargo(path: Path) -> PackageInfo:
    with open(path, "rb") as f:
        data = tomllib.load(f)
    package = data.get("package")
    if not isinstance(package, dict):
        raise ValueError("Cargo.toml has no [package] table")

    authors = package.get("authors") or []
    return PackageInfo(
        manifest=path.name,
        name=_str_or_none(package.get("name")),
        version=_str_or_none(package.get("version")),
        description=_str_or_none(package.get("description")),
        license=_str_or_none(package.get("license")),
        author=_str_or_none(authors[0]) if authors else None,
        homepage=_str_or_none(package.get("homepage") or package.get("repository")),
        keywords=[str(k) for k in package.get("keywords") or []],
        dependencies=sorted(data.get("dependencies") or {}),
        dev_dependencies=sorted(data.get("dev-dependencies") or {}),
        engines={"rust": str(package["rust-version"])} if package.get("rust-version") else {},
    )


_PARSERS = {
    "pyproject.toml": _parse_pyproject,
    "package.json": _parse_package_json,
    "Cargo.toml": _parse_cargo,
}


def read_package_info(root: Path) -> PackageInfo | None:
    """Read the first usable manifest in `root`.

    Manifests that fail to parse are logged and skipped.

    Args:
        root: Repository root.

    Returns:
        PackageInfo, or None when the repository has no usable manifest.
    """
    for name in MANIFEST_FILE_NAMES:
        path = root / name
        if not path.is_file():
            continue
        try:
            return _PARSERS[name](path)
        except (OSError, ValueError, TypeError, AttributeError, tomllib.TOMLDecodeError) as e:
            logger.debug("Skipping manifest %s: %s", path, e)
    return None
