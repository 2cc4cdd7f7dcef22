"""
Configuration file loader for readme-generator.

Remembers the choices of previous runs. Searched from the working directory upward,
first match wins:
- .readme-generator.yml / .readme-generator.yaml
- .readme-generator.json
- readme-generator.toml / .readme-generator.toml
- pyproject.toml with a [tool.readme-generator] table

CLI flags override config file values. API keys are never stored.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .config import DEFAULT_LANGUAGE, DEFAULT_OUTPUT_FILE, DEFAULT_SCAN_DEPTH, LLMProvider, ScanDepth

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

TOOL_SECTION = "readme-generator"

# Config file search order (first found wins)
CONFIG_FILE_NAMES = [
    ".readme-generator.yml",
    ".readme-generator.yaml",
    ".readme-generator.json",
    "readme-generator.toml",
    ".readme-generator.toml",
    "pyproject.toml",
]

DEFAULT_SAVE_NAME = ".readme-generator.yml"


class ConfigError(Exception):
    """Error reading or writing a configuration file."""

    pass


@dataclass
class SavedConfig:
    """
    Settings remembered between runs.

    All fields are optional - CLI flags and prompts fill in whatever is unset.
    """

    provider: LLMProvider | None = None
    model: str | None = None
    base_url: str | None = None
    language: str | None = None
    scan_depth: ScanDepth | None = None
    output: Path | None = None
    context: str | None = None
    github_badges: bool | None = None
    contributors: bool | None = None
    logo_url: str | None = None

    # Source file path (for saving back to the same place)
    _config_file: Path | None = field(default=None, repr=False)

    @property
    def config_file(self) -> Path | None:
        return self._config_file

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON/YAML-serializable dictionary, omitting unset values.

        Returns:
            A dict with sorted keys.
        """
        result: dict[str, Any] = {}
        if self.provider is not None:
            result["provider"] = self.provider.value
        if self.model is not None:
            result["model"] = self.model
        if self.base_url is not None:
            result["base_url"] = self.base_url
        if self.language is not None:
            result["language"] = self.language
        if self.scan_depth is not None:
            result["scan_depth"] = int(self.scan_depth)
        if self.output is not None:
            result["output"] = str(self.output)
        if self.context is not None:
            result["context"] = self.context
        if self.github_badges is not None:
            result["github_badges"] = self.github_badges
        if self.contributors is not None:
            result["contributors"] = self.contributors
        if self.logo_url is not None:
            result["logo_url"] = self.logo_url
        return dict(sorted(result.items()))


def find_config_file(start: Path) -> Path | None:
    """
    Find a configuration file in `start` or any of its parents.

    A `pyproject.toml` only counts when it has a `[tool.readme-generator]` table.

    Args:
        start: Directory to start searching from

    Returns:
        Path to the config file, or None if not found
    """
    current = start.resolve()
    for directory in (current, *current.parents):
        for name in CONFIG_FILE_NAMES:
            config_path = directory / name
            if not config_path.is_file():
                continue
            if name == "pyproject.toml" and not _has_tool_section(config_path):
                continue
            return config_path
    return None


def _has_tool_section(path: Path) -> bool:
    try:
        data = _load_toml(path)
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return isinstance(data.get("tool", {}).get(TOOL_SECTION), dict)


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _parse_toml(path: Path) -> dict[str, Any]:
    """Parse a TOML config file, unwrapping `[tool.readme-generator]` or `[readme-generator]`."""
    data = _load_toml(path)
    tool = data.get("tool")
    if isinstance(tool, dict) and isinstance(tool.get(TOOL_SECTION), dict):
        return dict(tool[TOOL_SECTION])
    if isinstance(data.get(TOOL_SECTION), dict):
        return dict(data[TOOL_SECTION])
    return data


def _parse_yaml(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f)
    return dict(raw_data) if isinstance(raw_data, dict) else {}


def _parse_json(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        raw_data = json.load(f)
    return dict(raw_data) if isinstance(raw_data, dict) else {}


def _read_config_data(path: Path) -> dict[str, Any]:
    suffix = path.suffix.lower()
    if suffix == ".toml":
        return _parse_toml(path)
    if suffix in (".yml", ".yaml"):
        return _parse_yaml(path)
    if suffix == ".json":
        return _parse_json(path)
    raise ConfigError(f"Unsupported config file type: {path}")


def _parse_provider(value: Any) -> LLMProvider | None:
    try:
        return LLMProvider(str(value).lower())
    except ValueError:
        logger.warning("Ignoring unknown provider in config: %s", value)
        return None


def _parse_scan_depth(value: Any) -> ScanDepth | None:
    try:
        return ScanDepth(int(value))
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid scan_depth in config: %s", value)
        return None


def _parse_bool(key: str, value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    logger.warning("Ignoring non-boolean %s in config: %r", key, value)
    return None


def load_config(start: Path, config_path: Path | None = None) -> SavedConfig:
    """
    Load saved settings.

    Parse errors in a discovered file are logged and ignored so a broken config never
    blocks a run. An explicitly given `config_path` that cannot be read raises.

    Args:
        start: Directory to start the upward search from
        config_path: Explicit path to a config file (optional)

    Returns:
        SavedConfig with loaded values (unset values remain None).

    Raises:
        ConfigError: If an explicit `config_path` is missing or unparseable.
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = find_config_file(start)
    if config_path is None:
        return SavedConfig()

    try:
        data = _read_config_data(config_path)
    except (OSError, ValueError, yaml.YAMLError, tomllib.TOMLDecodeError) as e:
        if explicit:
            raise ConfigError(f"Could not read config file {config_path}: {e}") from e
        logger.warning("Ignoring unreadable config file %s: %s", config_path, e)
        return SavedConfig()

    logger.debug("Loaded config from %s", config_path)
    config = SavedConfig(_config_file=config_path)

    if data.get("provider"):
        config.provider = _parse_provider(data["provider"])
    if data.get("model"):
        config.model = str(data["model"])
    if data.get("base_url"):
        config.base_url = str(data["base_url"])
    if data.get("language"):
        config.language = str(data["language"]).lower()
    if "scan_depth" in data:
        config.scan_depth = _parse_scan_depth(data["scan_depth"])
    if data.get("output"):
        config.output = Path(data["output"])
    if data.get("context"):
        config.context = str(data["context"])
    if "github_badges" in data:
        config.github_badges = _parse_bool("github_badges", data["github_badges"])
    if "contributors" in data:
        config.contributors = _parse_bool("contributors", data["contributors"])
    if data.get("logo_url"):
        config.logo_url = str(data["logo_url"])

    return config


def save_config(config: SavedConfig, directory: Path) -> Path:
    """
    Persist settings for the next run.

    Writes back to the file the settings were loaded from when it is YAML or JSON.
    Otherwise a new `.readme-generator.yml` is created in `directory`. Existing keys
    that this tool does not manage are preserved.

    Args:
        config: Settings to save
        directory: Directory for a newly created config file

    Returns:
        Path of the written file.

    Raises:
        ConfigError: If the file cannot be written.
    """
    target = config.config_file
    if target is None or target.suffix.lower() not in (".yml", ".yaml", ".json"):
        target = directory / DEFAULT_SAVE_NAME

    existing: dict[str, Any] = {}
    if target.is_file():
        try:
            existing = _read_config_data(target)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning("Overwriting unreadable config file %s: %s", target, e)

    existing.update(config.to_dict())

    try:
        if target.suffix.lower() == ".json":
            target.write_text(json.dumps(existing, indent=2) + "\n", encoding="utf-8")
        else:
            target.write_text(yaml.safe_dump(existing, sort_keys=True, allow_unicode=True), encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Could not save config to {target}: {e}") from e

    logger.debug("Saved config to %s", target)
    return target


def merge_cli_with_config(
    config: SavedConfig,
    *,
    # CLI arguments (None means not specified on CLI)
    language: str | None = None,
    scan_depth: int | None = None,
    output: Path | None = None,
    context: str | None = None,
    github_badges: bool | None = None,
    contributors: bool | None = None,
    logo_url: str | None = None,
) -> dict[str, Any]:
    """Merge CLI arguments with config file values (CLI wins).

    Values neither given on the CLI nor saved are returned as None so the caller can
    prompt for them. Output falls back to README.md.

    Args:
        config: Config loaded from file (may have unset values).
        language: README language code from CLI (optional).
        scan_depth: Scan depth from CLI (optional).
        output: Output file from CLI (optional).
        context: Extra user context from CLI (optional).
        github_badges: CLI toggle for GitHub stat badges (optional).
        contributors: CLI toggle for the contributors section (optional).
        logo_url: Logo image URL from CLI (optional).

    Returns:
        Dictionary of merged values.
    """
    result: dict[str, Any] = {}

    result["language"] = (language or config.language or None)
    if result["language"] is not None:
        result["language"] = result["language"].lower()

    if scan_depth is not None:
        result["scan_depth"] = ScanDepth(scan_depth)
    else:
        result["scan_depth"] = config.scan_depth

    result["output"] = output or config.output or Path(DEFAULT_OUTPUT_FILE)
    result["context"] = context if context is not None else config.context
    result["github_badges"] = github_badges if github_badges is not None else config.github_badges
    result["contributors"] = contributors if contributors is not None else config.contributors
    result["logo_url"] = logo_url or config.logo_url

    return result


def non_interactive_defaults(merged: dict[str, Any]) -> dict[str, Any]:
    """Fill values that would otherwise be prompted for with their defaults."""
    filled = dict(merged)
    if filled.get("language") is None:
        filled["language"] = DEFAULT_LANGUAGE
    if filled.get("scan_depth") is None:
        filled["scan_depth"] = DEFAULT_SCAN_DEPTH
    if filled.get("context") is None:
        filled["context"] = ""
    if filled.get("github_badges") is None:
        filled["github_badges"] = False
    if filled.get("contributors") is None:
        filled["contributors"] = False
    return filled
