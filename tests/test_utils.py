from __future__ import annotations

import pytest
from pydantic import ValidationError

from crawl4ai_mcp.errors import (
    Crawl4AIAPIError,
    Crawl4AIConfigError,
    Crawl4AINetworkError,
    Crawl4AIResponseError,
    InvalidArgumentsError,
)
from crawl4ai_mcp.schemas import ExtractParams
from crawl4ai_mcp.tools.params_utils import normalize_params
from crawl4ai_mcp.utils import (
    ToolResponse,
    classify_error,
    describe_error,
    error_response,
    handle_tool_errors,
    html_to_markdown_clean,
    text_response,
    truncate_content,
)


class TestNormalizeParams:
    def test_passthrough_and_none(self) -> None:
        assert normalize_params({"a": 1}, "t") == {"a": 1}
        assert normalize_params(None, "t") == {}

    def test_json_string(self) -> None:
        assert normalize_params('{"url": "https://example.com"}', "t") == {"url": "https://example.com"}

    @pytest.mark.parametrize("value", ["{broken", "[1]", 3.5, ["url"]])
    def test_rejects_non_objects(self, value) -> None:
        with pytest.raises(InvalidArgumentsError, match="Invalid arguments for t"):
            normalize_params(value, "t")


class TestResponses:
    def test_error_response_shape(self) -> None:
        response = error_response("boom")
        assert response.is_error
        assert response.model_dump(exclude_none=True)["content"] == [{"type": "text", "text": "Error: boom"}]

    def test_text_response_keeps_order(self) -> None:
        assert [c.text for c in text_response("a", "b").content] == ["a", "b"]
        assert text_response("a", "b").text == "a\n\nb"

    def test_content_cannot_be_empty(self) -> None:
        with pytest.raises(ValidationError):
            ToolResponse(content=[])


class TestClassifyError:
    @pytest.mark.parametrize(
        ("exc", "kind"),
        [
            (Crawl4AIConfigError("no key"), "config_error"),
            (Crawl4AINetworkError("down"), "network_error"),
            (Crawl4AIAPIError(401, "nope"), "unauthorized"),
            (Crawl4AIAPIError(404, "gone"), "not_found"),
            (Crawl4AIAPIError(429, "slow down"), "rate_limited"),
            (Crawl4AIAPIError(503, "busy"), "upstream_error"),
            (Crawl4AIAPIError(400, "bad"), "api_error"),
            (Crawl4AIResponseError("weird"), "response_error"),
            (InvalidArgumentsError("Invalid arguments for t: expected an object"), "validation_error"),
            (ValueError("invalid literal for int()"), "unexpected_error"),
            (KeyError("x"), "unexpected_error"),
        ],
    )
    def test_kinds(self, exc: Exception, kind: str) -> None:
        assert classify_error(exc) == kind

    def test_validation_errors_are_described_per_field(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ExtractParams.model_validate({"urls": [], "maxDepth": 0})

        assert classify_error(exc_info.value) == "validation_error"
        message = describe_error("crawl4ai_extract", exc_info.value)
        assert "urls:" in message
        assert "maxDepth:" in message


async def test_wrapper_keeps_function_metadata() -> None:
    @handle_tool_errors("demo")
    async def demo_handler() -> ToolResponse:
        """Demo docstring."""
        raise Crawl4AINetworkError("Network error: could not reach Crawl4AI")

    assert demo_handler.__name__ == "demo_handler"
    assert demo_handler.__doc__ == "Demo docstring."
    response = await demo_handler()
    assert response.content[0].text == "Error: Network error: could not reach Crawl4AI"


def test_html_to_markdown_clean() -> None:
    text = html_to_markdown_clean("<h2>Heading</h2>\n\n<p>First</p>\n<p>Second</p>")
    assert "## Heading" in text
    assert "\n\n" not in text


def test_truncate_content() -> None:
    assert truncate_content("short", 10) == "short"
    truncated = truncate_content("x" * 50, 10)
    assert truncated.startswith("x" * 10)
    assert "original length: 50 chars" in truncated
