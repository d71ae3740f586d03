from __future__ import annotations

from typing import TYPE_CHECKING

from ..adapter import Crawl4AIAdapter
from ..schemas import SearchParams
from ..utils import ToolResponse, text_response, truncate_content
from .utils import expect_list, first_present, unwrap

if TYPE_CHECKING:
    from ..registry import ToolRegistry

TOOL_NAME = "crawl4ai_search"


async def crawl4ai_search(params: SearchParams, adapter: Crawl4AIAdapter) -> ToolResponse:
    """
    Search the web and format results as a numbered Markdown list.
    Scraped page content is appended when scrapeOptions were given.
    """
    data = unwrap(await adapter.invoke("search", params))
    if isinstance(data, dict):
        data = first_present(data, "results", "data")
    results = expect_list(data, TOOL_NAME, "results")

    if not results:
        return text_response(f"No results found for {params.query!r}.")

    output = []
    for i, item in enumerate(results, 1):
        if not isinstance(item, dict):
            output.append(f"{i}. {item}")
            continue
        title = item.get("title") or "No Title"
        link = item.get("url") or item.get("link") or "#"
        snippet = item.get("description") or item.get("snippet") or "No description available."
        entry = f"{i}. **[{title}]({link})**\n   {snippet}"
        markdown = item.get("markdown")
        if markdown:
            entry += "\n\n" + truncate_content(str(markdown), 5_000)
        output.append(entry)

    return text_response("\n\n".join(output))


def register(registry: "ToolRegistry") -> None:
    registry.tool(
        name=TOOL_NAME,
        description="Search and retrieve content from web pages with optional scraping.",
        schema=SearchParams,
    )(crawl4ai_search)
