"""Helpers for turning raw model replies into JSON objects."""

import json
import re
from typing import Any

from .errors import MalformedResponseError

_FENCE_PATTERN = re.compile(r"^\s*```[A-Za-z0-9_-]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapping the whole reply, if present."""
    match = _FENCE_PATTERN.match(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse a JSON object out of a model reply.

    Code fences are stripped first. Replies that carry prose around the
    object are tolerated by taking the outermost braces.

    Args:
        text: Raw model reply

    Returns:
        Parsed JSON object

    Raises:
        MalformedResponseError: If no JSON object can be parsed
    """
    cleaned = strip_code_fences(text)
    json_start = cleaned.find("{")
    json_end = cleaned.rfind("}") + 1
    if json_start < 0 or json_end <= json_start:
        raise MalformedResponseError("Reply contains no JSON object")

    try:
        data = json.loads(cleaned[json_start:json_end])
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Invalid JSON in reply: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponseError("Reply JSON is not an object")
    return data


def normalize_strings(items: Any) -> list[str]:
    """Normalize a JSON array to a list of non-empty strings.

    Models sometimes return objects where strings were asked for; common
    keys are tried before joining the object's string values.
    """
    if not isinstance(items, list):
        return []

    result = []
    for item in items:
        if isinstance(item, str):
            if item.strip():
                result.append(item.strip())
        elif isinstance(item, dict):
            for key in ["text", "description", "task", "name", "value"]:
                if key in item and isinstance(item[key], str):
                    result.append(item[key])
                    break
            else:
                parts = [v for v in item.values() if isinstance(v, str)]
                if parts:
                    result.append(" ".join(parts))
        elif isinstance(item, int | float):
            result.append(str(item))
    return result


def optional_str(value: Any) -> str | None:
    """Coerce a JSON value to a stripped string, mapping blanks to None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def optional_float(value: Any) -> float | None:
    """Coerce a JSON number (or numeric string like "$12.50") to float."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    cleaned = re.sub(r"[^\d.\-]", "", str(value))
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def optional_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


__all__ = [
    "normalize_strings",
    "optional_bool",
    "optional_float",
    "optional_str",
    "parse_json_object",
    "strip_code_fences",
]
