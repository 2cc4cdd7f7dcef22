"""
Model reply parsing.

Turns the model's text into a `Readme`. Replies that are not JSON at all are replaced
by a placeholder README so the run still produces a file; JSON that lacks the required
fields is rejected.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from .badges import normalize_badges
from .models import Badge, PromptContext, Readme
from .renderer import render_readme

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\n?```\s*$")

FALLBACK_LONG_DESCRIPTION = "No data from model. Provide an overview here."
FALLBACK_SHORT_DESCRIPTION = "A software project"


class ResponseParseError(Exception):
    """The model reply is JSON but does not describe a README."""

    pass


def extract_json(content: str) -> str:
    """Strip markdown fences and surrounding prose, keeping the outermost `{...}`.

    Args:
        content: Raw model reply.

    Returns:
        The candidate JSON text. It is not validated here.
    """
    cleaned = content.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned)
    cleaned = _TRAILING_FENCE.sub("", cleaned)

    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first != -1 and last > first:
        cleaned = cleaned[first : last + 1]

    return cleaned.strip()


def fallback_data(context: PromptContext) -> dict[str, Any]:
    """Placeholder README fields used when the model reply is not valid JSON."""
    repo = context.repository
    return {
        "title": repo.name,
        "short_description": repo.description or FALLBACK_SHORT_DESCRIPTION,
        "long_description": FALLBACK_LONG_DESCRIPTION,
        "logoUrl": "",
        "badges": [],
        "features": [],
        "installation": "",
        "usage": "",
        "roadmap": "",
        "faq": "",
        "license": "MIT",
    }


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "\n".join(str(v) for v in value)
    return str(value)


def _as_str_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    if isinstance(value, str) and value.strip():
        return [value.strip()]
    return []


def _parse_badges(value: Any) -> list[Badge]:
    badges = []
    for item in value if isinstance(value, list) else []:
        if not isinstance(item, dict):
            continue
        try:
            badges.append(Badge.from_dict(item))
        except ValueError:
            logger.debug("Dropping badge without a name: %r", item)
    return normalize_badges(badges)


def _parse_tech_stack(value: Any) -> dict[str, list[str]]:
    if not isinstance(value, dict):
        return {}
    stack = {str(category): _as_str_list(items) for category, items in value.items()}
    return {category: items for category, items in stack.items() if items}


def _required(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ResponseParseError(f"Missing required field in response: {key}")
    return value.strip()


def build_readme(data: dict[str, Any], context: PromptContext) -> Readme:
    """Map the decoded JSON object onto a `Readme` and render it.

    Args:
        data: Decoded JSON object.
        context: Generation context (logo preference, repository info, flags).

    Returns:
        A Readme with `content` filled in.

    Raises:
        ResponseParseError: If `title` or `short_description` is missing or empty.
    """
    title = _required(data, "title")
    short_description = _required(data, "short_description")

    diagrams = data.get("mermaid_diagrams")
    if not isinstance(diagrams, dict):
        diagrams = {}

    readme = Readme(
        title=title,
        short_description=short_description,
        long_description=_as_str(data.get("long_description")),
        logo_url=context.logo_url or _as_str(data.get("logoUrl")).strip(),
        badges=_parse_badges(data.get("badges")),
        highlights=_as_str_list(data.get("highlights")),
        features=_as_str_list(data.get("features")),
        tech_stack=_parse_tech_stack(data.get("tech_stack")),
        prerequisites=_as_str_list(data.get("prerequisites")),
        installation=_as_str(data.get("installation")),
        usage=_as_str(data.get("usage")),
        architecture_diagram=_as_str(diagrams.get("architecture")),
        data_flow_diagram=_as_str(diagrams.get("data_flow")),
        contributing=_as_str(data.get("contributing")),
        roadmap=_as_str(data.get("roadmap")),
        faq=_as_str(data.get("faq")),
        license=_as_str(data.get("license")).strip() or "MIT",
        acknowledgments=_as_str(data.get("acknowledgments")),
    )
    readme.content = render_readme(readme, context)
    return readme


def parse_response(content: str, context: PromptContext) -> Readme:
    """Parse a model reply into a rendered `Readme`.

    Args:
        content: Raw model reply.
        context: Generation context.

    Returns:
        The parsed README.

    Raises:
        ResponseParseError: If the reply is JSON but not an object, or lacks `title` or
            `short_description`.
    """
    try:
        data = json.loads(extract_json(content))
    except json.JSONDecodeError as e:
        logger.warning("Model reply is not valid JSON (%s); using placeholder content", e)
        data = fallback_data(context)

    if not isinstance(data, dict):
        raise ResponseParseError(f"Expected a JSON object, got {type(data).__name__}")

    return build_readme(data, context)
