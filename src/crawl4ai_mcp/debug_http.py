from __future__ import annotations

from typing import TYPE_CHECKING, Any, List

from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

if TYPE_CHECKING:
    from .server import Crawl4AIServer

__all__ = ["create_debug_routes"]


def _mask(value: str | None) -> dict[str, Any]:
    if not value:
        return {"set": False}
    return {"set": True, "length": len(value), "tail4": value[-4:] if len(value) >= 4 else value}


def create_debug_routes(app: "Crawl4AIServer", base_path: str = "/debug") -> List[Route]:
    """Return Starlette Route objects for the debug API.

    Calls go through ``ToolRegistry.dispatch`` directly, so no MCP session
    is needed.
    """

    async def list_tools(request: Request) -> Response:
        tools = [
            {"name": d.name, "description": d.description, "inputSchema": d.input_schema()}
            for d in app.registry
        ]
        return JSONResponse({"ok": True, "tools": tools})

    async def call_tool(request: Request) -> Response:
        try:
            payload = await request.json()
        except ValueError:
            return JSONResponse({"ok": False, "error": "Body must be JSON"}, status_code=400)
        if not isinstance(payload, dict):
            return JSONResponse({"ok": False, "error": "Body must be a JSON object"}, status_code=400)
        name = payload.get("name")
        tool_input = payload.get("input") or {}
        if not isinstance(name, str):
            return JSONResponse({"ok": False, "error": "Missing tool name"}, status_code=400)
        if not isinstance(tool_input, dict):
            return JSONResponse({"ok": False, "error": "input must be object"}, status_code=400)

        response = await app.registry.dispatch(name, tool_input)
        return JSONResponse(
            {
                "ok": not response.is_error,
                "tool": name,
                "input": tool_input,
                "result": response.model_dump(mode="json", exclude_none=True),
            }
        )

    async def status(request: Request) -> Response:
        settings = app.settings
        return JSONResponse(
            {
                "ok": True,
                "tools": app.registry.names(),
                "settings": {
                    "CRAWL4AI_API_KEY": _mask(settings.CRAWL4AI_API_KEY),
                    "CRAWL4AI_API_URL": settings.CRAWL4AI_API_URL,
                    "ENVIRONMENT": settings.ENVIRONMENT,
                    "MAX_CRAWL_DEPTH": settings.MAX_CRAWL_DEPTH,
                    "MAX_CRAWL_PAGES": settings.MAX_CRAWL_PAGES,
                },
            }
        )

    return [
        Route(f"{base_path}/tools/list", list_tools, methods=["POST"]),
        Route(f"{base_path}/tools/call", call_tool, methods=["POST"]),
        Route(f"{base_path}/status", status, methods=["GET"]),
    ]
