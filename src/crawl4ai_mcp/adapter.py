"""HTTP adapter for the remote Crawl4AI service.

The adapter is a thin transport layer: it turns an operation name and a
validated parameter model into one HTTP request and hands back the decoded
JSON object. It does not validate, retry or cache.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import DEFAULT_API_URL
from .errors import (
    Crawl4AIAPIError,
    Crawl4AIConfigError,
    Crawl4AINetworkError,
    Crawl4AIResponseError,
)
from .schemas import ToolParams

logger = logging.getLogger("crawl4ai_mcp.adapter")

# operation -> (HTTP method, path template)
OPERATIONS: dict[str, tuple[str, str]] = {
    "scrape": ("POST", "/scrape"),
    "map": ("POST", "/map"),
    "crawl": ("POST", "/crawl"),
    "check_crawl_status": ("GET", "/crawl/{id}"),
    "extract": ("POST", "/extract"),
    "deep_research": ("POST", "/deep-research"),
    "search": ("POST", "/search"),
}


class AdapterConfig(BaseModel):
    """Credential and endpoint for the backend. Never mutated once built."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(repr=False)
    base_url: str = DEFAULT_API_URL

    @field_validator("base_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


class Crawl4AIAdapter:
    """Async client for the Crawl4AI REST API."""

    def __init__(
        self,
        config: Optional[AdapterConfig] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._timeout = timeout
        self._transport = transport

    @property
    def config(self) -> Optional[AdapterConfig]:
        return self._config

    def configure(self, api_key: str, base_url: Optional[str] = None) -> AdapterConfig:
        """Replace the current configuration with a new one."""
        self._config = AdapterConfig(api_key=api_key or "", base_url=base_url or DEFAULT_API_URL)
        logger.debug("Adapter configured for %s", self._config.base_url)
        return self._config

    async def invoke(self, operation: str, params: ToolParams | Mapping[str, Any]) -> dict[str, Any]:
        """Send one operation to the backend and return its JSON object.

        Raises:
            Crawl4AIConfigError: not configured, or no API key.
            Crawl4AINetworkError: the request never got a response.
            Crawl4AIAPIError: the backend answered with a non-2xx status.
            Crawl4AIResponseError: the body is not a JSON object, or reports failure.
        """
        config = self._config
        if config is None:
            raise Crawl4AIConfigError("Crawl4AI adapter is not configured.")
        if not config.api_key:
            raise Crawl4AIConfigError("Missing CRAWL4AI_API_KEY: set it in the environment or .env file.")

        try:
            method, path_template = OPERATIONS[operation]
        except KeyError:
            raise ValueError(f"Unknown Crawl4AI operation: {operation}") from None

        if isinstance(params, ToolParams):
            path = _build_path(path_template, params.model_dump())
            body = params.to_payload()
        else:
            path = _build_path(path_template, params)
            body = dict(params)

        headers = {
            "Authorization": f"Bearer {config.api_key}",
            "Accept": "application/json",
        }

        logger.debug("Crawl4AI %s %s%s", method, config.base_url, path)
        async with httpx.AsyncClient(
            base_url=config.base_url,
            headers=headers,
            timeout=self._timeout,
            transport=self._transport,
        ) as http:
            try:
                if method == "GET":
                    resp = await http.get(path)
                else:
                    resp = await http.request(method, path, json=body)
            except httpx.RequestError as e:
                raise Crawl4AINetworkError(
                    f"Network error: could not reach Crawl4AI at {config.base_url} ({e.__class__.__name__}: {e})"
                ) from e

        return _decode(resp)


def _build_path(template: str, values: Mapping[str, Any]) -> str:
    if "{id}" not in template:
        return template
    return template.format(id=quote(str(values["id"]), safe=""))


def _decode(resp: httpx.Response) -> dict[str, Any]:
    try:
        payload: Any = resp.json()
    except ValueError:
        payload = None

    if resp.is_error:
        raise Crawl4AIAPIError(resp.status_code, _error_message(resp, payload), payload)

    if not isinstance(payload, dict):
        snippet = resp.text[:200]
        raise Crawl4AIResponseError(f"Unexpected response from Crawl4AI (HTTP {resp.status_code}): {snippet!r}")

    if payload.get("success") is False:
        raise Crawl4AIResponseError(_error_message(resp, payload))

    return payload


def _error_message(resp: httpx.Response, payload: Any) -> str:
    if isinstance(payload, dict):
        for key in ("error", "message", "detail", "msg"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
            if value and isinstance(value, (dict, list)):
                return json.dumps(value, ensure_ascii=False, default=str)[:500]
    text = resp.text.strip()
    if text and payload is None:
        return text[:200]
    return resp.reason_phrase or f"HTTP {resp.status_code}"
