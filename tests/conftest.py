"""Shared fixtures: a scripted Crawl4AI backend behind httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from crawl4ai_mcp.adapter import AdapterConfig, Crawl4AIAdapter
from crawl4ai_mcp.registry import ToolRegistry, register_all

BASE_URL = "https://crawl4ai.test"
API_KEY = "test-key"


class FakeBackend:
    """Answers requests from a (method, path) table and records what it saw."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        json_body: Any = None,
        text: str | None = None,
        error: Exception | None = None,
    ) -> None:
        self.routes[(method, path)] = (status, json_body, text, error)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        try:
            status, json_body, text, error = self.routes[(request.method, request.url.path)]
        except KeyError:
            return httpx.Response(404, json={"error": f"no route for {request.method} {request.url.path}"})
        if error is not None:
            raise error
        if text is not None:
            return httpx.Response(status, text=text)
        return httpx.Response(status, json=json_body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_body(self) -> dict[str, Any]:
        return json.loads(self.last_request.content)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def adapter(backend: FakeBackend) -> Crawl4AIAdapter:
    return Crawl4AIAdapter(AdapterConfig(api_key=API_KEY, base_url=BASE_URL), transport=backend.transport)


@pytest.fixture
def registry(adapter: Crawl4AIAdapter) -> ToolRegistry:
    return register_all(ToolRegistry(adapter, limits={"max_crawl_depth": 3, "max_crawl_pages": 100}))
