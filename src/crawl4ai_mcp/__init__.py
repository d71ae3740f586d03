"""MCP server exposing Crawl4AI web scraping, crawling and extraction tools."""

__version__ = "1.0.0"
