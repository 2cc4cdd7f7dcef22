"""Tests for the config_loader module."""

import json
from pathlib import Path

import pytest
import yaml

from readme_generator.config import LLMProvider, ScanDepth
from readme_generator.config_loader import (
    ConfigError,
    SavedConfig,
    find_config_file,
    load_config,
    merge_cli_with_config,
    non_interactive_defaults,
    save_config,
)


class TestFindConfigFile:
    """Tests for config file discovery."""

    def test_no_config(self, tmp_path):
        """Test that no config file returns None."""
        assert find_config_file(tmp_path) is None

    def test_yaml_preferred_over_toml(self, tmp_path):
        """Test the search order within one directory."""
        (tmp_path / "readme-generator.toml").write_text('provider = "openai"\n')
        (tmp_path / ".readme-generator.yml").write_text("provider: anthropic\n")

        assert find_config_file(tmp_path) == (tmp_path / ".readme-generator.yml").resolve()

    def test_searches_parent_directories(self, tmp_path):
        """Test that a config in a parent directory is found."""
        (tmp_path / ".readme-generator.json").write_text("{}")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config_file(nested) == (tmp_path / ".readme-generator.json").resolve()

    def test_pyproject_without_tool_section_ignored(self, tmp_path):
        """Test a plain pyproject.toml is not treated as config."""
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n')

        assert find_config_file(tmp_path) is None

    def test_pyproject_with_tool_section(self, tmp_path):
        """Test pyproject.toml with [tool.readme-generator] is found."""
        (tmp_path / "pyproject.toml").write_text('[tool.readme-generator]\nlanguage = "fr"\n')

        assert find_config_file(tmp_path) == (tmp_path / "pyproject.toml").resolve()


class TestLoadConfig:
    """Tests for loading saved settings."""

    def test_empty_when_missing(self, tmp_path):
        """Test loading without a config file."""
        config = load_config(tmp_path)

        assert config.to_dict() == {}
        assert config.config_file is None

    def test_load_yaml(self, tmp_path):
        """Test loading every field from YAML."""
        (tmp_path / ".readme-generator.yml").write_text(
            "provider: anthropic\n"
            "model: claude-sonnet-4-5\n"
            "language: ES\n"
            "scan_depth: 2\n"
            "output: docs/README.md\n"
            "context: Internal tool\n"
            "github_badges: true\n"
            "contributors: false\n"
        )

        config = load_config(tmp_path)

        assert config.provider == LLMProvider.ANTHROPIC
        assert config.model == "claude-sonnet-4-5"
        assert config.language == "es"
        assert config.scan_depth == ScanDepth.MEDIUM
        assert config.output == Path("docs/README.md")
        assert config.context == "Internal tool"
        assert config.github_badges is True
        assert config.contributors is False

    def test_load_pyproject_section(self, tmp_path):
        """Test values are read from [tool.readme-generator]."""
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "demo"\n\n[tool.readme-generator]\nprovider = "ollama"\nscan_depth = 5\n'
        )

        config = load_config(tmp_path)

        assert config.provider == LLMProvider.OLLAMA
        assert config.scan_depth == ScanDepth.VERY_DEEP

    def test_unknown_values_ignored(self, tmp_path):
        """Test invalid provider and depth are dropped."""
        (tmp_path / ".readme-generator.json").write_text(
            json.dumps({"provider": "acme-llm", "scan_depth": 4, "language": "de"})
        )

        config = load_config(tmp_path)

        assert config.provider is None
        assert config.scan_depth is None
        assert config.language == "de"

    def test_non_boolean_flags_ignored(self, tmp_path):
        """Test string flags are dropped instead of coerced to True."""
        (tmp_path / ".readme-generator.json").write_text(
            json.dumps({"github_badges": "false", "contributors": 1, "language": "en"})
        )

        config = load_config(tmp_path)

        assert config.github_badges is None
        assert config.contributors is None
        assert config.language == "en"

    def test_broken_discovered_file_ignored(self, tmp_path):
        """Test a malformed discovered file yields an empty config."""
        (tmp_path / ".readme-generator.yml").write_text("provider: [unclosed\n")

        assert load_config(tmp_path).to_dict() == {}

    def test_broken_explicit_file_raises(self, tmp_path):
        """Test a malformed explicit file raises ConfigError."""
        path = tmp_path / "custom.json"
        path.write_text("{not json")

        with pytest.raises(ConfigError):
            load_config(tmp_path, config_path=path)

    def test_missing_explicit_file_raises(self, tmp_path):
        """Test a missing explicit file raises ConfigError."""
        with pytest.raises(ConfigError):
            load_config(tmp_path, config_path=tmp_path / "missing.yml")


class TestSaveConfig:
    """Tests for persisting settings."""

    def test_creates_yaml_file(self, tmp_path):
        """Test a new .readme-generator.yml is written."""
        config = SavedConfig(provider=LLMProvider.OPENAI, model="gpt-4o", scan_depth=ScanDepth.DEEP)

        path = save_config(config, tmp_path)

        assert path == tmp_path / ".readme-generator.yml"
        data = yaml.safe_load(path.read_text())
        assert data == {"model": "gpt-4o", "provider": "openai", "scan_depth": 3}

    def test_never_writes_api_key(self, tmp_path):
        """Test saved files contain no credential fields."""
        path = save_config(SavedConfig(provider=LLMProvider.OPENAI), tmp_path)

        assert "key" not in path.read_text()

    def test_writes_back_to_json_and_keeps_unknown_keys(self, tmp_path):
        """Test the loaded JSON file is updated in place."""
        json_path = tmp_path / ".readme-generator.json"
        json_path.write_text(json.dumps({"language": "en", "team": "docs"}))
        config = load_config(tmp_path)
        config.language = "fr"

        path = save_config(config, tmp_path)

        assert path == json_path.resolve()
        data = json.loads(json_path.read_text())
        assert data == {"language": "fr", "team": "docs"}

    def test_toml_source_saves_to_yaml(self, tmp_path):
        """Test settings loaded from TOML are saved to a new YAML file."""
        (tmp_path / "readme-generator.toml").write_text('language = "ru"\n')
        config = load_config(tmp_path)

        path = save_config(config, tmp_path)

        assert path.name == ".readme-generator.yml"
        assert yaml.safe_load(path.read_text()) == {"language": "ru"}

    def test_round_trip(self, tmp_path):
        """Test saved settings load back unchanged."""
        original = SavedConfig(
            provider=LLMProvider.GOOGLE,
            model="gemini-2.5-flash",
            base_url="https://gateway.example.com",
            language="de",
            scan_depth=ScanDepth.SHALLOW,
            github_badges=True,
            contributors=True,
            logo_url="https://example.com/logo.png",
        )

        save_config(original, tmp_path)
        loaded = load_config(tmp_path)

        assert loaded.to_dict() == original.to_dict()


class TestMergeCliWithConfig:
    """Tests for merging CLI flags over saved settings."""

    def test_cli_wins(self):
        """Test CLI values override saved ones."""
        config = SavedConfig(language="fr", scan_depth=ScanDepth.SHALLOW, contributors=True)

        merged = merge_cli_with_config(config, language="ES", scan_depth=5, contributors=False)

        assert merged["language"] == "es"
        assert merged["scan_depth"] == ScanDepth.VERY_DEEP
        assert merged["contributors"] is False

    def test_saved_values_used(self):
        """Test saved values fill unset CLI flags."""
        config = SavedConfig(
            language="fr",
            github_badges=True,
            output=Path("docs/README.md"),
            logo_url="https://example.com/saved.png",
        )

        merged = merge_cli_with_config(config)

        assert merged["language"] == "fr"
        assert merged["github_badges"] is True
        assert merged["output"] == Path("docs/README.md")
        assert merged["logo_url"] == "https://example.com/saved.png"
        assert merge_cli_with_config(config, logo_url="https://example.com/cli.png")["logo_url"] == (
            "https://example.com/cli.png"
        )

    def test_unset_values_stay_none(self):
        """Test values that should be prompted for remain None."""
        merged = merge_cli_with_config(SavedConfig())

        assert merged["language"] is None
        assert merged["scan_depth"] is None
        assert merged["context"] is None
        assert merged["output"] == Path("README.md")

    def test_non_interactive_defaults(self):
        """Test defaults replace every unset value."""
        filled = non_interactive_defaults(merge_cli_with_config(SavedConfig()))

        assert filled["language"] == "en"
        assert filled["scan_depth"] == ScanDepth.DEEP
        assert filled["context"] == ""
        assert filled["github_badges"] is False
        assert filled["contributors"] is False
