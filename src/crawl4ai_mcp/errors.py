"""Exception types raised by the adapter and the tool registry."""

from __future__ import annotations

from typing import Any


class Crawl4AIError(Exception):
    """Base error for everything raised while talking to Crawl4AI."""


class Crawl4AIConfigError(Crawl4AIError):
    """The adapter has no usable configuration (missing key or endpoint)."""


class Crawl4AINetworkError(Crawl4AIError):
    """The backend could not be reached."""


class Crawl4AIAPIError(Crawl4AIError):
    """The backend answered with a non-success HTTP status."""

    def __init__(self, status_code: int, message: str, payload: Any | None = None) -> None:
        self.status_code = status_code
        self.message = message
        self.payload = payload
        super().__init__(f"Crawl4AI API error ({status_code}): {message}")


class Crawl4AIResponseError(Crawl4AIError):
    """The backend answered, but not with the shape we expect."""


class InvalidArgumentsError(ValueError):
    """Tool arguments could not be read as an object."""


class ToolNotFoundError(LookupError):
    """Requested tool does not exist in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool not found: {name}")


class DuplicateToolError(ValueError):
    """A tool with the same name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool already registered: {name}")
