"""Tests for tooling detection and manifest reading."""

import json

from readme_generator.detection import CICD_RULES, detect_by_rules, detect_tools
from readme_generator.manifest import read_package_info


class TestDetectTools:
    """Tests for detect_tools."""

    def test_empty_repository(self, tmp_path):
        assert detect_tools(tmp_path).total == 0

    def test_detects_files(self, tmp_path):
        """Test tools are recognised from well-known files."""
        (tmp_path / ".github" / "workflows").mkdir(parents=True)
        (tmp_path / "Dockerfile").write_text("FROM python:3.12\n")
        (tmp_path / "docker-compose.yml").write_text("services: {}\n")
        (tmp_path / ".pre-commit-config.yaml").write_text("repos: []\n")
        (tmp_path / "tox.ini").write_text("[tox]\n")
        (tmp_path / "package-lock.json").write_text("{}")

        tools = detect_tools(tmp_path)

        assert tools.cicd == ["GitHub Actions"]
        assert tools.containerization == ["Docker", "Docker Compose"]
        assert tools.linting == ["pre-commit"]
        assert tools.testing == ["tox"]
        assert tools.package_managers == ["npm"]

    def test_detects_pyproject_tool_tables(self, tmp_path):
        """Test Python tools configured in pyproject.toml are recognised."""
        (tmp_path / "pyproject.toml").write_text(
            "[tool.ruff]\nline-length = 100\n\n[tool.pytest.ini_options]\ntestpaths = ['tests']\n\n[tool.uv]\n"
        )

        tools = detect_tools(tmp_path)

        assert "Ruff" in tools.linting
        assert "pytest" in tools.testing
        assert "uv" in tools.package_managers

    def test_broken_pyproject_ignored(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[tool.ruff\n")

        assert detect_tools(tmp_path).linting == []

    def test_rule_order_preserved(self, tmp_path):
        (tmp_path / ".travis.yml").write_text("")
        (tmp_path / ".gitlab-ci.yml").write_text("")

        assert detect_by_rules(tmp_path, CICD_RULES) == ["GitLab CI", "Travis CI"]


class TestReadPackageInfo:
    """Tests for read_package_info."""

    def test_no_manifest(self, tmp_path):
        assert read_package_info(tmp_path) is None

    def test_pep621(self, tmp_path):
        """Test a PEP 621 pyproject.toml."""
        (tmp_path / "pyproject.toml").write_text(
            "[project]\n"
            'name = "widgets"\n'
            'version = "1.2.0"\n'
            'description = "Spin widgets"\n'
            'requires-python = ">=3.10"\n'
            'license = {text = "MIT"}\n'
            'authors = [{name = "Sam Lee"}]\n'
            'dependencies = ["requests>=2.31", "typer[all]>=0.9"]\n'
            "\n"
            "[project.optional-dependencies]\n"
            'test = ["pytest>=7"]\n'
            "\n"
            "[project.scripts]\n"
            'widgets = "widgets.cli:main"\n'
        )

        info = read_package_info(tmp_path)

        assert info.manifest == "pyproject.toml"
        assert info.name == "widgets"
        assert info.version == "1.2.0"
        assert info.description == "Spin widgets"
        assert info.license == "MIT"
        assert info.author == "Sam Lee"
        assert info.dependencies == ["requests", "typer"]
        assert info.dev_dependencies == ["pytest"]
        assert info.scripts == {"widgets": "widgets.cli:main"}
        assert info.engines == {"python": ">=3.10"}

    def test_poetry(self, tmp_path):
        """Test a Poetry pyproject.toml."""
        (tmp_path / "pyproject.toml").write_text(
            "[tool.poetry]\n"
            'name = "widgets"\n'
            'version = "0.3.0"\n'
            'description = "Spin widgets"\n'
            "\n"
            "[tool.poetry.dependencies]\n"
            'python = "^3.11"\n'
            'httpx = "^0.27"\n'
            "\n"
            "[tool.poetry.group.dev.dependencies]\n"
            'pytest = "^8"\n'
        )

        info = read_package_info(tmp_path)

        assert info.dependencies == ["httpx"]
        assert info.dev_dependencies == ["pytest"]
        assert info.engines == {"python": "^3.11"}

    def test_package_json(self, tmp_path):
        (tmp_path / "package.json").write_text(
            json.dumps(
                {
                    "name": "widgets",
                    "version": "2.0.0",
                    "description": "Spin widgets",
                    "author": {"name": "Sam Lee"},
                    "scripts": {"build": "vite build"},
                    "dependencies": {"react": "^18", "axios": "^1"},
                    "devDependencies": {"vitest": "^1"},
                    "engines": {"node": ">=18"},
                }
            )
        )

        info = read_package_info(tmp_path)

        assert info.manifest == "package.json"
        assert info.author == "Sam Lee"
        assert info.dependencies == ["axios", "react"]
        assert info.dev_dependencies == ["vitest"]
        assert info.code_stats == "2 dependencies, 1 dev dependencies"

    def test_cargo(self, tmp_path):
        (tmp_path / "Cargo.toml").write_text(
            '[package]\nname = "spin"\nversion = "0.1.0"\nrust-version = "1.75"\n\n[dependencies]\nserde = "1"\n'
        )

        info = read_package_info(tmp_path)

        assert info.manifest == "Cargo.toml"
        assert info.dependencies == ["serde"]
        assert info.engines == {"rust": "1.75"}

    def test_falls_through_unusable_pyproject(self, tmp_path):
        """Test a pyproject without project metadata defers to package.json."""
        (tmp_path / "pyproject.toml").write_text("[tool.black]\nline-length = 100\n")
        (tmp_path / "package.json").write_text('{"name": "web"}')

        info = read_package_info(tmp_path)

        assert info.manifest == "package.json"
        assert info.name == "web"
