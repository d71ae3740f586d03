"""Tests for server construction, configuration and the HTTP binding."""

from __future__ import annotations

import logging

import pytest
from starlette.testclient import TestClient

from crawl4ai_mcp.config import DEFAULT_API_URL, Settings
from crawl4ai_mcp.main import build_parser
from crawl4ai_mcp.server import create_http_app, create_server, list_mcp_tools

from .conftest import BASE_URL, FakeBackend


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, CRAWL4AI_API_KEY="secret-key-1234", CRAWL4AI_API_URL=BASE_URL)


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("CRAWL4AI_API_KEY", "CRAWL4AI_API_URL", "ENVIRONMENT", "NODE_ENV", "MAX_CRAWL_DEPTH"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.CRAWL4AI_API_KEY is None
        assert settings.CRAWL4AI_API_URL == DEFAULT_API_URL
        assert settings.is_production is False
        assert settings.crawl_limits == {"max_crawl_depth": 3, "max_crawl_pages": 100}

    def test_node_env_alias(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.setenv("NODE_ENV", "production")

        assert Settings(_env_file=None).is_production is True

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRAWL4AI_API_URL", "http://localhost:11235")
        monkeypatch.setenv("MAX_CRAWL_PAGES", "10")

        settings = Settings(_env_file=None)

        assert settings.CRAWL4AI_API_URL == "http://localhost:11235"
        assert settings.MAX_CRAWL_PAGES == 10


class TestCreateServer:
    def test_builds_sealed_registry_and_configured_adapter(self, settings: Settings) -> None:
        app = create_server(settings)

        assert app.registry.sealed
        assert len(app.registry) == 7
        assert app.adapter.config.api_key == "secret-key-1234"
        assert app.adapter.config.base_url == BASE_URL
        assert app.registry.adapter is app.adapter

    def test_lists_mcp_tools(self, settings: Settings) -> None:
        app = create_server(settings)

        tools = {tool.name: tool for tool in list_mcp_tools(app.registry)}

        assert set(tools) == set(app.registry.names())
        scrape = tools["crawl4ai_scrape"]
        assert scrape.description.startswith("Scrape a webpage")
        assert scrape.inputSchema["required"] == ["url"]

    async def test_missing_key_fails_per_call(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.WARNING, logger="crawl4ai_mcp")
        app = create_server(Settings(_env_file=None, CRAWL4AI_API_KEY=None, CRAWL4AI_API_URL=BASE_URL))

        response = await app.registry.dispatch("crawl4ai_scrape", {"url": "https://example.com"})

        assert response.content[0].text.startswith("Error: Missing CRAWL4AI_API_KEY")
        assert any("CRAWL4AI_API_KEY is not set" in r.getMessage() for r in caplog.records)

    async def test_limits_come_from_settings(self, backend: FakeBackend) -> None:
        backend.on("POST", "/crawl", json_body={"id": "job-1"})
        app = create_server(
            Settings(_env_file=None, CRAWL4AI_API_KEY="k", CRAWL4AI_API_URL=BASE_URL, MAX_CRAWL_DEPTH=1),
            transport=backend.transport,
        )

        await app.registry.dispatch("crawl4ai_crawl", {"url": "https://example.com", "maxDepth": 5})

        assert backend.last_body()["maxDepth"] == 1


class TestHttpApp:
    def test_health(self, settings: Settings) -> None:
        client = TestClient(create_http_app(create_server(settings)))

        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "server": "crawl4ai-mcp-server", "tools": 7}

    def test_debug_routes_disabled_by_default(self, settings: Settings) -> None:
        client = TestClient(create_http_app(create_server(settings)))

        assert client.get("/debug/status").status_code == 404

    def test_debug_list_and_status(self, settings: Settings) -> None:
        client = TestClient(create_http_app(create_server(settings), debug_routes=True))

        tools = client.post("/debug/tools/list").json()["tools"]
        status = client.get("/debug/status").json()

        assert {t["name"] for t in tools} == set(status["tools"])
        key = status["settings"]["CRAWL4AI_API_KEY"]
        assert key == {"set": True, "length": 15, "tail4": "1234"}
        assert "secret-key-1234" not in str(status)

    def test_debug_call(self, settings: Settings, backend: FakeBackend) -> None:
        backend.on("POST", "/map", json_body={"links": ["https://example.com/a"]})
        app = create_server(settings, transport=backend.transport)
        client = TestClient(create_http_app(app, debug_routes=True))

        ok = client.post("/debug/tools/call", json={"name": "crawl4ai_map", "input": {"url": "https://example.com"}})
        missing = client.post("/debug/tools/call", json={"name": "crawl4ai_unknown"})
        bad = client.post("/debug/tools/call", json={"input": {}})

        assert ok.json()["ok"] is True
        assert ok.json()["result"]["content"][0]["text"] == "https://example.com/a"
        assert missing.json()["ok"] is False
        assert missing.json()["result"]["content"][0]["text"] == "Error: Tool not found: crawl4ai_unknown"
        assert bad.status_code == 400


def test_cli_parser() -> None:
    args = build_parser().parse_args(["--transport", "http", "--port", "9000", "--debug-routes"])

    assert args.transport == "http"
    assert args.port == 9000
    assert args.debug_routes is True
    assert build_parser().parse_args([]).transport == "stdio"
