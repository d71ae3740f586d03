"""Parameter schemas for the Crawl4AI tools.

Each tool accepts camelCase arguments (the names MCP clients see in the tool
listing) and validates them into a frozen pydantic model with snake_case
attributes. Defaults are filled in, types are coerced, and every violated
constraint is reported at once.

Some constraints only matter in combination with another flag (for example
``maxDepth`` on ``crawl4ai_extract`` only applies when ``allowExternalLinks``
is enabled). Those are documented in the field descriptions and left to the
backend; validation never rejects them.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional
from urllib.parse import urlparse

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel


def _check_url(value: str) -> str:
    parsed = urlparse(value.strip())
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be an absolute URL with an http:// or https:// scheme")
    return value.strip()


Url = Annotated[str, AfterValidator(_check_url)]

ScrapeFormat = Literal["markdown", "html", "rawHtml", "links", "screenshot", "screenshot@fullPage"]


class ToolParams(BaseModel):
    """Base for validated tool parameters: immutable, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    def to_payload(self) -> dict[str, Any]:
        """Request body for the backend (camelCase, unset optionals dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ScrapeOptions(ToolParams):
    formats: list[ScrapeFormat] = Field(
        default_factory=lambda: ["markdown"],
        min_length=1,
        description="Content formats to return for each page.",
    )
    only_main_content: bool = Field(
        True, description="Strip navigation, headers and footers and keep the main content only."
    )
    include_tags: Optional[list[str]] = Field(None, description="HTML tags or CSS selectors to keep.")
    exclude_tags: Optional[list[str]] = Field(None, description="HTML tags or CSS selectors to drop.")
    wait_for: int = Field(0, ge=0, le=60000, description="Milliseconds to wait for dynamic content.")


# ---------------------------------------------------------------------------
# Per-tool schemas
# ---------------------------------------------------------------------------


class ScrapeParams(ScrapeOptions):
    url: Url = Field(description="URL of the page to scrape, including the protocol.")
    timeout: int = Field(30000, ge=1000, le=120000, description="Page load timeout in milliseconds.")
    mobile: bool = Field(False, description="Emulate a mobile device.")
    remove_base64_images: bool = Field(True, description="Drop inline base64 images from the output.")
    use_cache: bool = Field(True, description="Serve cached content when the backend has it.")


class MapParams(ToolParams):
    url: Url = Field(description="Starting URL for URL discovery.")
    search: Optional[str] = Field(None, description="Only return URLs related to this search term.")
    ignore_sitemap: bool = Field(False, description="Skip sitemap.xml and rely on link discovery only.")
    sitemap_only: bool = Field(False, description="Only use sitemap.xml, no HTML link discovery.")
    include_subdomains: bool = Field(False, description="Include URLs on subdomains of the start URL.")
    limit: int = Field(100, ge=1, le=5000, description="Maximum number of URLs to return.")


class CrawlParams(ToolParams):
    url: Url = Field(description="Starting URL for the crawl.")
    include_paths: Optional[list[str]] = Field(None, description="Only crawl paths matching these patterns.")
    exclude_paths: Optional[list[str]] = Field(None, description="Skip paths matching these patterns.")
    max_depth: int = Field(
        2,
        ge=1,
        le=10,
        validate_default=True,
        description="Maximum link depth to follow. The server may cap this to its configured limit.",
    )
    limit: int = Field(
        100,
        ge=1,
        le=1000,
        validate_default=True,
        description="Maximum number of pages to crawl. The server may cap this to its configured limit.",
    )
    ignore_sitemap: bool = Field(False, description="Do not seed the crawl from sitemap.xml.")
    allow_backward_links: bool = Field(False, description="Follow links that point above the start path.")
    allow_external_links: bool = Field(False, description="Follow links to other domains.")
    deduplicate_similar_urls: bool = Field(
        True,
        alias="deduplicateSimilarURLs",
        description="Treat URLs that only differ trivially as the same page.",
    )
    ignore_query_parameters: bool = Field(False, description="Ignore query strings when comparing URLs.")
    webhook: Optional[Url] = Field(None, description="URL notified by the backend as the crawl progresses.")
    scrape_options: Optional[ScrapeOptions] = Field(None, description="Options applied to every crawled page.")

    @field_validator("max_depth")
    @classmethod
    def _cap_depth(cls, value: int, info: ValidationInfo) -> int:
        limit = (info.context or {}).get("max_crawl_depth")
        return min(value, limit) if limit else value

    @field_validator("limit")
    @classmethod
    def _cap_pages(cls, value: int, info: ValidationInfo) -> int:
        limit = (info.context or {}).get("max_crawl_pages")
        return min(value, limit) if limit else value


class CheckCrawlStatusParams(ToolParams):
    id: str = Field(min_length=1, description="Crawl job ID returned by crawl4ai_crawl.")

    def to_payload(self) -> dict[str, Any]:
        # The job id travels in the request path.
        return {}


class ExtractParams(ToolParams):
    urls: list[Url] = Field(
        min_length=1,
        description="URLs to extract information from. At least one URL with protocol is required.",
    )
    extraction_schema: Optional[dict[str, Any]] = Field(
        None,
        alias="schema",
        description="JSON schema describing the fields to extract and their types.",
    )
    prompt: Optional[str] = Field(
        None,
        description='Natural language description of what to extract, e.g. "product name, price and description".',
    )
    system_prompt: Optional[str] = Field(None, description="System prompt guiding the extraction LLM.")
    enable_web_search: bool = Field(False, description="Use web search for additional context.")
    allow_external_links: bool = Field(False, description="Follow external links found in the source pages.")
    include_subdomains: bool = Field(True, description="Also process subdomains when following links.")
    max_depth: int = Field(
        1,
        ge=1,
        le=3,
        description="Maximum depth for following links (1-3). Only applies when allowExternalLinks is true.",
    )
    max_content_length: int = Field(
        50000, gt=0, description="Maximum characters processed per URL; longer content is truncated."
    )
    use_cache: bool = Field(True, description="Serve cached content when the backend has it.")
    output_format: Literal["json", "markdown", "text"] = Field(
        "json", description='Format of the extracted data: "json", "markdown" or "text".'
    )


class DeepResearchParams(ToolParams):
    query: str = Field(min_length=1, description="Research question or topic.")
    max_depth: int = Field(3, ge=1, le=10, description="Maximum research depth.")
    time_limit: int = Field(120, ge=30, le=300, description="Time budget for the research in seconds.")
    max_urls: int = Field(50, ge=1, le=1000, description="Maximum number of URLs to analyze.")


class SearchParams(ToolParams):
    query: str = Field(min_length=1, description="Search query.")
    limit: int = Field(5, ge=1, le=100, description="Maximum number of results.")
    lang: str = Field("en", description="Result language code.")
    country: str = Field("us", description="Country code used for the search.")
    tbs: Optional[str] = Field(None, description="Time-based search filter, e.g. qdr:w for the past week.")
    filter: Optional[str] = Field(None, description="Additional backend search filter.")
    scrape_options: Optional[ScrapeOptions] = Field(None, description="Scrape each result with these options.")


# ---------------------------------------------------------------------------
# Error rendering
# ---------------------------------------------------------------------------


def format_validation_error(tool: str, exc: ValidationError) -> str:
    """Render every violated constraint as one line of text."""
    parts = []
    for err in exc.errors(include_url=False):
        loc = ".".join(str(p) for p in err["loc"]) or "(root)"
        parts.append(f"{loc}: {err['msg']}")
    return f"Invalid parameters for {tool}: " + "; ".join(parts)
