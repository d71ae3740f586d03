from __future__ import annotations

from typing import TYPE_CHECKING

from ..adapter import Crawl4AIAdapter
from ..errors import Crawl4AIResponseError
from ..schemas import DeepResearchParams, ExtractParams
from ..utils import ToolResponse, text_response, to_json_text
from .utils import expect_dict, first_present, unwrap

if TYPE_CHECKING:
    from ..registry import ToolRegistry


async def crawl4ai_extract(params: ExtractParams, adapter: Crawl4AIAdapter) -> ToolResponse:
    """Extract structured data from one or more pages.

    ``json`` output is always serialized JSON. For ``markdown`` and ``text``
    a string result (or a same-named string field) is passed through, anything
    else falls back to JSON.
    """
    data = unwrap(await adapter.invoke("extract", params))

    if params.output_format != "json":
        if isinstance(data, str):
            return text_response(data)
        body = first_present(data, params.output_format)
        if isinstance(body, str):
            return text_response(body)

    return text_response(to_json_text(data))


async def crawl4ai_deep_research(params: DeepResearchParams, adapter: Crawl4AIAdapter) -> ToolResponse:
    """Run a deep research job and return its analysis with sources."""
    data = expect_dict(unwrap(await adapter.invoke("deep_research", params)), "crawl4ai_deep_research")
    analysis = first_present(data, "finalAnalysis", "final_analysis", "analysis")
    if not analysis:
        raise Crawl4AIResponseError("Crawl4AI deep research returned no analysis.")

    sections = [str(analysis)]
    sources = data.get("sources")
    if isinstance(sources, list) and sources:
        lines = []
        for source in sources:
            if isinstance(source, dict):
                url = source.get("url", "")
                title = source.get("title") or url
                lines.append(f"- [{title}]({url})")
            else:
                lines.append(f"- {source}")
        sections.append("Sources:\n" + "\n".join(lines))
    return text_response(*sections)


def register(registry: "ToolRegistry") -> None:
    registry.tool(
        name="crawl4ai_extract",
        description="Extract structured information from web pages using LLM.",
        schema=ExtractParams,
    )(crawl4ai_extract)
    registry.tool(
        name="crawl4ai_deep_research",
        description="Conduct deep research on a query using web crawling and AI analysis.",
        schema=DeepResearchParams,
    )(crawl4ai_deep_research)
