"""Normalization of raw tool arguments before schema validation."""

from __future__ import annotations

import json
from typing import Any, Dict

from ..errors import InvalidArgumentsError


def normalize_params(params: Any, tool_name: str) -> Dict[str, Any]:
    """
    Normalize raw tool arguments to a dictionary.

    Some clients send the arguments object as a JSON string, or omit it
    entirely for tools without required fields.

    Args:
        params: The raw arguments value passed to the tool
        tool_name: Name of the tool for error reporting

    Returns:
        Arguments as a dictionary

    Raises:
        InvalidArgumentsError: If params cannot be normalized to a dictionary
    """
    if params is None:
        return {}

    if isinstance(params, dict):
        return params

    if isinstance(params, str):
        try:
            parsed = json.loads(params)
        except json.JSONDecodeError as e:
            raise InvalidArgumentsError(
                f"Invalid arguments for {tool_name}: invalid JSON ({e}). "
                f"Arguments should be an object, e.g. {{\"url\": \"https://example.com\"}}. "
                f"Received: {_preview(params)}"
            ) from e
        if not isinstance(parsed, dict):
            raise InvalidArgumentsError(
                f"Invalid arguments for {tool_name}: JSON arguments must be an object, "
                f"not {type(parsed).__name__}."
            )
        return parsed

    raise InvalidArgumentsError(
        f"Invalid arguments for {tool_name}: expected an object, not {type(params).__name__}. "
        f"Received: {_preview(str(params))}"
    )


def _preview(text: str, limit: int = 100) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")
