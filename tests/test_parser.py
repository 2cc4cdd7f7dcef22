"""Tests for model reply parsing."""

import json

import pytest

from readme_generator.parser import (
    FALLBACK_LONG_DESCRIPTION,
    ResponseParseError,
    extract_json,
    parse_response,
)


def _reply(**overrides):
    data = {
        "title": "Widgets",
        "short_description": "Spin widgets fast",
        "long_description": "Widgets is a library for spinning.",
        "logoUrl": "https://example.com/logo.png",
        "highlights": ["Fast", "Small"],
        "badges": [{"name": "python", "color": "000000", "logo": "python", "logoColor": "white"}],
        "tech_stack": {"Language": ["Python"], "Empty": []},
        "prerequisites": ["Python 3.10+"],
        "features": ["Spinning", "Stopping"],
        "installation": "pip install widgets",
        "usage": "```python\nimport widgets\n```",
        "mermaid_diagrams": {"architecture": "flowchart TD\nA-->B", "data_flow": ""},
        "roadmap": "| Task / Feature | Status |\n| --- | --- |\n| Docs | 🚧 In Progress |",
        "faq": "**Q?** A.",
        "license": "Apache-2.0",
    }
    data.update(overrides)
    return data


class TestExtractJson:
    """Tests for extract_json."""

    def test_plain_json(self):
        assert extract_json('{"a": 1}') == '{"a": 1}'

    def test_strips_json_fence(self):
        assert extract_json('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strips_bare_fence(self):
        assert extract_json('```\n{"a": 1}\n```\n') == '{"a": 1}'

    def test_drops_surrounding_prose(self):
        """Test text around the object is removed."""
        assert extract_json('Here you go:\n{"a": {"b": 2}}\nEnjoy!') == '{"a": {"b": 2}}'


class TestParseResponse:
    """Tests for parse_response."""

    def test_full_reply(self, context):
        """Test every field is mapped onto the Readme."""
        readme = parse_response(json.dumps(_reply()), context)

        assert readme.title == "Widgets"
        assert readme.short_description == "Spin widgets fast"
        assert readme.logo_url == "https://example.com/logo.png"
        assert readme.highlights == ["Fast", "Small"]
        assert readme.features == ["Spinning", "Stopping"]
        assert readme.tech_stack == {"Language": ["Python"]}
        assert readme.architecture_diagram == "flowchart TD\nA-->B"
        assert readme.data_flow_diagram == ""
        assert readme.license == "Apache-2.0"
        assert readme.content.startswith('<a id="top"></a>')

    def test_badges_use_known_colors(self, context):
        """Test badge colors come from the lookup table."""
        readme = parse_response(json.dumps(_reply()), context)

        assert [(b.name, b.color) for b in readme.badges] == [("Python", "3776AB")]

    def test_fenced_reply(self, context):
        """Test a fenced reply is accepted."""
        readme = parse_response("```json\n" + json.dumps(_reply()) + "\n```", context)

        assert readme.title == "Widgets"

    def test_context_logo_wins(self, context):
        """Test a logo chosen by the user overrides the model's."""
        context.logo_url = "https://example.com/mine.svg"

        readme = parse_response(json.dumps(_reply()), context)

        assert readme.logo_url == "https://example.com/mine.svg"

    def test_license_defaults_to_mit(self, context):
        readme = parse_response(json.dumps(_reply(license="")), context)

        assert readme.license == "MIT"

    def test_list_valued_text_fields_joined(self, context):
        """Test text fields returned as lists are joined by newlines."""
        readme = parse_response(json.dumps(_reply(installation=["pip install widgets", "widgets --help"])), context)

        assert readme.installation == "pip install widgets\nwidgets --help"

    @pytest.mark.parametrize("field", ["title", "short_description"])
    def test_missing_required_field(self, context, field):
        """Test a reply without a required field is rejected."""
        data = _reply()
        del data[field]

        with pytest.raises(ResponseParseError) as exc_info:
            parse_response(json.dumps(data), context)

        assert f"Missing required field in response: {field}" in str(exc_info.value)

    def test_empty_required_field(self, context):
        with pytest.raises(ResponseParseError):
            parse_response(json.dumps(_reply(title="   ")), context)

    def test_non_object_json(self, context):
        """Test a JSON array is rejected."""
        with pytest.raises(ResponseParseError):
            parse_response("[1, 2, 3]", context)

    def test_invalid_json_uses_fallback(self, context):
        """Test prose replies produce a placeholder README."""
        readme = parse_response("I'm sorry, I can't help with that.", context)

        assert readme.title == "widgets"
        assert readme.short_description == "Widgets for everyone"
        assert readme.long_description == FALLBACK_LONG_DESCRIPTION
        assert readme.license == "MIT"
        assert readme.badges == []

    def test_fallback_without_description(self, context):
        """Test the fallback tagline when the repository has no description."""
        context.repository.description = ""

        readme = parse_response("{broken json", context)

        assert readme.short_description == "A software project"
