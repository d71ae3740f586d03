from __future__ import annotations

from typing import TYPE_CHECKING

from ..adapter import Crawl4AIAdapter
from ..schemas import ScrapeParams
from ..utils import ToolResponse, html_to_markdown_clean, text_response
from .utils import expect_dict, expect_list, unwrap

if TYPE_CHECKING:
    from ..registry import ToolRegistry

TOOL_NAME = "crawl4ai_scrape"

# Requested format -> key in the backend result
_RESULT_KEYS = {
    "markdown": "markdown",
    "html": "html",
    "rawHtml": "rawHtml",
    "links": "links",
    "screenshot": "screenshot",
    "screenshot@fullPage": "screenshot",
}


async def crawl4ai_scrape(params: ScrapeParams, adapter: Crawl4AIAdapter) -> ToolResponse:
    """Scrape a single page and return each requested format as a text entry."""
    page = expect_dict(unwrap(await adapter.invoke("scrape", params)), TOOL_NAME)

    sections: list[str] = []
    seen: set[str] = set()
    for fmt in params.formats:
        key = _RESULT_KEYS[fmt]
        if key in seen:
            continue
        seen.add(key)

        if key == "markdown":
            markdown = page.get("markdown")
            if not markdown:
                # Fall back to converting whatever HTML came back.
                html = page.get("html") or page.get("rawHtml")
                markdown = html_to_markdown_clean(str(html)) if html else None
            if markdown:
                sections.append(str(markdown))
        elif key == "links":
            links = expect_list(page.get("links"), TOOL_NAME, "links")
            if links:
                sections.append("Links:\n" + "\n".join(str(link) for link in links))
        elif key == "screenshot":
            shot = page.get("screenshot")
            if shot:
                sections.append(f"Screenshot: {shot}")
        else:
            value = page.get(key)
            if value:
                sections.append(f"{key}:\n{value}")

    warning = page.get("warning")
    if warning:
        sections.append(f"Warning: {warning}")

    if not sections:
        return text_response(f"No content returned for {params.url}")
    return text_response(*sections)


def register(registry: "ToolRegistry") -> None:
    registry.tool(
        name=TOOL_NAME,
        description=(
            "Scrape a webpage with options for content extraction including markdown, HTML, and screenshots."
        ),
        schema=ScrapeParams,
    )(crawl4ai_scrape)
