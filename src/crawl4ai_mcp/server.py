"""MCP protocol binding for the tool registry.

``create_server`` builds everything one server instance owns: the adapter
(configured once from settings), the sealed registry and the low-level MCP
``Server`` whose ``tools/list`` and ``tools/call`` handlers delegate to it.
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

import httpx
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route
from starlette.types import Receive, Scope, Send

from .adapter import Crawl4AIAdapter
from .config import Settings, get_settings
from .debug_http import create_debug_routes
from .registry import ToolRegistry, register_all

logger = logging.getLogger("crawl4ai_mcp.server")

SERVER_NAME = "crawl4ai-mcp-server"


@dataclass
class Crawl4AIServer:
    settings: Settings
    adapter: Crawl4AIAdapter
    registry: ToolRegistry
    mcp: Server


def list_mcp_tools(registry: ToolRegistry) -> list[types.Tool]:
    return [
        types.Tool(name=d.name, description=d.description, inputSchema=d.input_schema())
        for d in registry
    ]


def create_server(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Crawl4AIServer:
    """Build a server instance.

    Args:
        settings: Configuration; defaults to the environment.
        transport: Optional httpx transport for the adapter (tests, proxies).
    """
    settings = settings or get_settings()

    adapter = Crawl4AIAdapter(timeout=settings.CRAWL4AI_HTTP_TIMEOUT, transport=transport)
    adapter.configure(settings.CRAWL4AI_API_KEY or "", settings.CRAWL4AI_API_URL)
    if not settings.CRAWL4AI_API_KEY:
        logger.warning("CRAWL4AI_API_KEY is not set; tool calls will fail until it is configured.")

    registry = register_all(
        ToolRegistry(adapter, production=settings.is_production, limits=settings.crawl_limits)
    )
    server: Server = Server(SERVER_NAME)

    @server.list_tools()
    async def _list_tools() -> list[types.Tool]:
        return list_mcp_tools(registry)

    # The registry validates arguments itself so that schema violations come
    # back as "Error: ..." text like every other failure.
    @server.call_tool(validate_input=False)
    async def _call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        response = await registry.dispatch(name, arguments)
        return list(response.content)

    logger.info(
        "Registered %d tools against %s (environment=%s)",
        len(registry),
        settings.CRAWL4AI_API_URL,
        settings.ENVIRONMENT,
    )
    return Crawl4AIServer(settings=settings, adapter=adapter, registry=registry, mcp=server)


async def run_stdio(app: Crawl4AIServer) -> None:
    async with stdio_server() as (read_stream, write_stream):
        await app.mcp.run(read_stream, write_stream, app.mcp.create_initialization_options())


def create_http_app(app: Crawl4AIServer, *, debug_routes: bool = False) -> Starlette:
    """Starlette app serving MCP over streamable HTTP at ``/mcp``."""
    session_manager = StreamableHTTPSessionManager(app=app.mcp, json_response=True, stateless=True)

    async def handle_mcp(scope: Scope, receive: Receive, send: Send) -> None:
        await session_manager.handle_request(scope, receive, send)

    async def health(request: Request) -> Response:
        return JSONResponse({"ok": True, "server": SERVER_NAME, "tools": len(app.registry)})

    @contextlib.asynccontextmanager
    async def lifespan(_: Starlette) -> AsyncIterator[None]:
        async with session_manager.run():
            yield

    routes: list[Any] = [Route("/health", health, methods=["GET"])]
    if debug_routes:
        routes.extend(create_debug_routes(app))
    routes.append(Mount("/mcp", app=handle_mcp))
    return Starlette(routes=routes, lifespan=lifespan)
