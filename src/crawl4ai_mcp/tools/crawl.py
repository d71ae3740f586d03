from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..adapter import Crawl4AIAdapter
from ..errors import Crawl4AIResponseError
from ..schemas import CheckCrawlStatusParams, CrawlParams, MapParams
from ..utils import ToolResponse, text_response, truncate_content
from .utils import expect_dict, expect_list, first_present, unwrap

if TYPE_CHECKING:
    from ..registry import ToolRegistry

# Per-page cap when listing crawl results.
PAGE_PREVIEW_CHARS = 5_000


async def crawl4ai_map(params: MapParams, adapter: Crawl4AIAdapter) -> ToolResponse:
    """Discover URLs reachable from a starting page."""
    data = unwrap(await adapter.invoke("map", params))
    if isinstance(data, list):
        links = data
    else:
        links = expect_list(first_present(expect_dict(data, "crawl4ai_map"), "links", "urls"), "crawl4ai_map", "links")

    if not links:
        return text_response(f"No URLs discovered from {params.url}")
    return text_response("\n".join(str(link) for link in links))


async def crawl4ai_crawl(params: CrawlParams, adapter: Crawl4AIAdapter) -> ToolResponse:
    """Start an asynchronous crawl and return its job ID."""
    data = expect_dict(unwrap(await adapter.invoke("crawl", params)), "crawl4ai_crawl")
    job_id = first_present(data, "id", "job_id", "jobId", "task_id")
    if not job_id:
        raise Crawl4AIResponseError("Crawl4AI did not return a crawl job ID.")

    return text_response(
        f"Started crawl for {params.url} with job ID: {job_id} "
        f"(maxDepth={params.max_depth}, limit={params.limit}). "
        "Use crawl4ai_check_crawl_status to check progress."
    )


def _format_page(index: int, page: Any) -> str:
    if not isinstance(page, dict):
        return f"{index}. {page}"
    metadata = page.get("metadata") if isinstance(page.get("metadata"), dict) else {}
    url = first_present(page, "url") or first_present(metadata, "sourceURL", "url") or "unknown URL"
    title = first_present(metadata, "title") or first_present(page, "title")
    heading = f"{index}. {title} ({url})" if title else f"{index}. {url}"
    body = first_present(page, "markdown", "content", "text")
    if not body:
        return heading
    return f"{heading}\n{truncate_content(str(body), PAGE_PREVIEW_CHARS)}"


async def crawl4ai_check_crawl_status(
    params: CheckCrawlStatusParams, adapter: Crawl4AIAdapter
) -> ToolResponse:
    """Report the progress of a crawl job and any pages finished so far."""
    result = expect_dict(await adapter.invoke("check_crawl_status", params), "crawl4ai_check_crawl_status")

    status = result.get("status") or "unknown"
    lines = [f"Crawl Status: {status}"]
    completed, total = result.get("completed"), result.get("total")
    if completed is not None or total is not None:
        lines.append(f"Progress: {completed if completed is not None else '?'}/{total if total is not None else '?'}")
    credits = first_present(result, "creditsUsed", "credits_used")
    if credits is not None:
        lines.append(f"Credits Used: {credits}")
    expires = first_present(result, "expiresAt", "expires_at")
    if expires:
        lines.append(f"Expires At: {expires}")

    # Status payloads keep pages under "data"; unwrap() would drop the status fields.
    pages = expect_list(result.get("data"), "crawl4ai_check_crawl_status", "data")
    if not pages:
        return text_response("\n".join(lines))

    formatted = "\n\n".join(_format_page(i, page) for i, page in enumerate(pages, 1))
    return text_response("\n".join(lines), f"Results ({len(pages)} pages):\n\n{formatted}")


def register(registry: "ToolRegistry") -> None:
    registry.tool(
        name="crawl4ai_map",
        description="Discover URLs from a starting point using sitemap.xml and HTML link discovery.",
        schema=MapParams,
    )(crawl4ai_map)
    registry.tool(
        name="crawl4ai_crawl",
        description="Start an asynchronous crawl of multiple pages with depth control and filtering.",
        schema=CrawlParams,
    )(crawl4ai_crawl)
    registry.tool(
        name="crawl4ai_check_crawl_status",
        description="Check the status of a crawl job.",
        schema=CheckCrawlStatusParams,
    )(crawl4ai_check_crawl_status)
