"""Shared helpers for reading Crawl4AI results."""
from __future__ import annotations

from typing import Any

from ..errors import Crawl4AIResponseError


def unwrap(result: dict[str, Any]) -> Any:
    """Return the payload of a ``{"success": true, "data": ...}`` envelope.

    Results without an envelope are returned unchanged.
    """
    if "success" in result and "data" in result:
        return result["data"]
    return result


def first_present(data: Any, *keys: str) -> Any:
    """Value of the first key present with a non-empty value, else None."""
    if not isinstance(data, dict):
        return None
    for key in keys:
        value = data.get(key)
        if value not in (None, "", [], {}):
            return value
    return None


def expect_dict(data: Any, tool: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise Crawl4AIResponseError(
            f"Unexpected result for {tool}: expected an object, got {type(data).__name__}."
        )
    return data


def expect_list(data: Any, tool: str, field: str) -> list[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise Crawl4AIResponseError(
            f"Unexpected result for {tool}: '{field}' should be a list, got {type(data).__name__}."
        )
    return data
