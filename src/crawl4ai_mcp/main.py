from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

import anyio

from crawl4ai_mcp.config import get_settings
from crawl4ai_mcp.server import create_http_app, create_server, run_stdio

logger = logging.getLogger("crawl4ai_mcp")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crawl4ai-mcp",
        description="MCP server exposing Crawl4AI scraping, crawling and extraction tools.",
    )
    parser.add_argument("--transport", choices=["stdio", "http"], default="stdio")
    parser.add_argument("--host", default=None, help="HTTP bind host (default: MCP_HOST)")
    parser.add_argument("--port", type=int, default=None, help="HTTP bind port (default: MCP_PORT)")
    parser.add_argument(
        "--debug-routes",
        action="store_true",
        help="Expose /debug/* HTTP routes for calling tools without an MCP client.",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    # Logs go to stderr; stdout carries the stdio protocol stream.
    logging.basicConfig(
        level=(args.log_level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = create_server(settings)

    if args.transport == "http":
        import uvicorn

        host = args.host or settings.MCP_HOST
        port = args.port or settings.MCP_PORT
        logger.info("Serving MCP over HTTP on http://%s:%d/mcp", host, port)
        uvicorn.run(create_http_app(app, debug_routes=args.debug_routes), host=host, port=port)
    else:
        anyio.run(run_stdio, app)


if __name__ == "__main__":
    main()
