"""Crawl4AI MCP tools.

Each module defines plain async handlers ``(params, adapter) -> ToolResponse``
and a ``register(registry)`` function that binds them to their names,
descriptions and parameter schemas:

- scrape.py: crawl4ai_scrape
- crawl.py: crawl4ai_map, crawl4ai_crawl, crawl4ai_check_crawl_status
- extract.py: crawl4ai_extract, crawl4ai_deep_research
- search.py: crawl4ai_search
"""

from __future__ import annotations

__all__ = [
    "crawl",
    "extract",
    "scrape",
    "search",
]
