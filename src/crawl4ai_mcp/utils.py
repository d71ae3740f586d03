"""Common utility helpers for Crawl4AI MCP tools."""
from __future__ import annotations

import functools
import html2text
import json
import logging
from typing import Any, Awaitable, Callable

from markdownify import markdownify as md
from mcp.types import TextContent
from pydantic import BaseModel, Field, ValidationError

from .errors import (
    Crawl4AIAPIError,
    Crawl4AIConfigError,
    Crawl4AINetworkError,
    Crawl4AIResponseError,
    InvalidArgumentsError,
)
from .schemas import format_validation_error

logger = logging.getLogger("crawl4ai_mcp")


# ---------------------------------------------------------------------------
# Response envelope
# ---------------------------------------------------------------------------

class ToolResponse(BaseModel):
    """What every tool call resolves to: at least one text entry."""

    content: list[TextContent] = Field(min_length=1)
    is_error: bool = False

    @property
    def text(self) -> str:
        return "\n\n".join(c.text for c in self.content)


def text_response(*texts: str) -> ToolResponse:
    return ToolResponse(content=[TextContent(type="text", text=t) for t in texts])


def error_response(message: str) -> ToolResponse:
    return ToolResponse(content=[TextContent(type="text", text=f"Error: {message}")], is_error=True)


def to_json_text(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


# ---------------------------------------------------------------------------
# Error classification & the handler wrapper
# ---------------------------------------------------------------------------

def classify_error(exc: BaseException) -> str:
    """Map an exception to a short, machine-friendly kind."""
    if isinstance(exc, (ValidationError, InvalidArgumentsError)):
        return "validation_error"
    if isinstance(exc, Crawl4AIConfigError):
        return "config_error"
    if isinstance(exc, Crawl4AINetworkError):
        return "network_error"
    if isinstance(exc, Crawl4AIAPIError):
        status = exc.status_code
        if status in (401, 403):
            return "unauthorized"
        if status == 404:
            return "not_found"
        if status == 429:
            return "rate_limited"
        if status >= 500:
            return "upstream_error"
        return "api_error"
    if isinstance(exc, Crawl4AIResponseError):
        return "response_error"
    return "unexpected_error"


def describe_error(tool: str, exc: BaseException) -> str:
    if isinstance(exc, ValidationError):
        return format_validation_error(tool, exc)
    message = str(exc).strip()
    return message or exc.__class__.__name__


def report_failure(tool: str, exc: BaseException, *, production: bool = False) -> ToolResponse:
    """Log a failed tool call and turn it into an ``Error: ...`` response."""
    kind = classify_error(exc)
    message = describe_error(tool, exc)
    if kind == "validation_error":
        logger.warning("Tool %s rejected arguments: %s", tool, message)
    elif production:
        # No traceback or payloads in production logs.
        logger.error("Tool %s failed [%s] %s: %s", tool, kind, exc.__class__.__name__, message)
    else:
        logger.error("Tool %s failed [%s]: %s", tool, kind, message, exc_info=exc)
    return error_response(message)


Handler = Callable[..., Awaitable[ToolResponse]]


def handle_tool_errors(tool: str, *, production: bool = False) -> Callable[[Handler], Handler]:
    """Wrap a tool handler so it always returns a ToolResponse instead of raising."""

    def decorator(func: Handler) -> Handler:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> ToolResponse:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                return report_failure(tool, e, production=production)

        return wrapper

    return decorator


# ---------------------------------------------------------------------------
# Helpers for HTML -> Markdown & truncation
# ---------------------------------------------------------------------------

def html_to_markdown_clean(html: str) -> str:
    try:
        text = md(html, heading_style="ATX", strip=["script", "style", "nav", "footer", "iframe"])
        lines = [line.rstrip() for line in text.splitlines()]
        return "\n".join(line for line in lines if line)
    except Exception:
        h = html2text.HTML2Text()
        h.ignore_links = False
        return h.handle(html)


def truncate_content(content: str, max_length: int = 20_000) -> str:
    if len(content) <= max_length:
        return content
    return content[:max_length] + f"\n\n... [Content Truncated, original length: {len(content)} chars]"
