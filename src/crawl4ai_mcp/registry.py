"""Tool registry and dispatcher.

The registry owns the tool descriptors of one server instance. Every handler
is wrapped with :func:`handle_tool_errors` when it is registered, and
:meth:`ToolRegistry.dispatch` funnels unknown tools and invalid arguments
through the same ``Error: ...`` response shape, so a dispatch always returns
a well-formed :class:`ToolResponse`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping, Optional

from pydantic import ValidationError

from .adapter import Crawl4AIAdapter
from .errors import DuplicateToolError, InvalidArgumentsError, ToolNotFoundError
from .schemas import ToolParams
from .tools import crawl as crawl_tools
from .tools import extract as extract_tools
from .tools import scrape as scrape_tools
from .tools import search as search_tools
from .tools.params_utils import normalize_params
from .utils import Handler, ToolResponse, error_response, handle_tool_errors, report_failure

logger = logging.getLogger("crawl4ai_mcp.registry")


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    schema: type[ToolParams]
    handler: Handler

    def input_schema(self) -> dict[str, Any]:
        """JSON Schema of the tool's arguments, as advertised to MCP clients."""
        return self.schema.model_json_schema(by_alias=True)


class ToolRegistry:
    """Name -> ToolDescriptor mapping bound to one adapter.

    Args:
        adapter: Backend adapter shared read-only by every handler.
        production: Keep error logs minimal (no tracebacks).
        limits: Validation context passed to every schema, e.g.
            ``{"max_crawl_depth": 3, "max_crawl_pages": 100}``.
    """

    def __init__(
        self,
        adapter: Crawl4AIAdapter,
        *,
        production: bool = False,
        limits: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.adapter = adapter
        self.production = production
        self._limits = dict(limits or {})
        self._tools: dict[str, ToolDescriptor] = {}
        self._sealed = False

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())

    @property
    def sealed(self) -> bool:
        return self._sealed

    def names(self) -> list[str]:
        return list(self._tools)

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    def register(self, descriptor: ToolDescriptor) -> None:
        if self._sealed:
            raise RuntimeError("Tool registry is sealed; no more tools can be registered.")
        if descriptor.name in self._tools:
            raise DuplicateToolError(descriptor.name)
        self._tools[descriptor.name] = descriptor

    def tool(
        self, *, name: str, description: str, schema: type[ToolParams]
    ) -> Callable[[Handler], Handler]:
        """Register a handler under ``name``, wrapped with the error handler.

        The undecorated function is returned so it stays directly callable.
        """

        def decorator(func: Handler) -> Handler:
            wrapped = handle_tool_errors(name, production=self.production)(func)
            self.register(ToolDescriptor(name=name, description=description, schema=schema, handler=wrapped))
            return func

        return decorator

    def seal(self) -> None:
        self._sealed = True

    # ------------------------------------------------------------------
    # Lookup & dispatch
    # ------------------------------------------------------------------

    def get(self, name: str) -> ToolDescriptor:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    def validate(self, name: str, arguments: Any) -> ToolParams:
        """Validate raw arguments for ``name``.

        Raises:
            ToolNotFoundError: unknown tool.
            InvalidArgumentsError: arguments are not an object.
            ValidationError: arguments fail the schema.
        """
        descriptor = self.get(name)
        return descriptor.schema.model_validate(normalize_params(arguments, name), context=self._limits)

    async def dispatch(self, name: str, arguments: Any = None) -> ToolResponse:
        try:
            descriptor = self.get(name)
        except ToolNotFoundError as e:
            logger.warning("%s", e)
            return error_response(str(e))

        try:
            params = descriptor.schema.model_validate(
                normalize_params(arguments, name), context=self._limits
            )
        except (ValidationError, InvalidArgumentsError) as e:
            return report_failure(name, e, production=self.production)

        return await descriptor.handler(params, self.adapter)


def register_all(registry: ToolRegistry) -> ToolRegistry:
    """Register every Crawl4AI tool and seal the registry."""
    scrape_tools.register(registry)
    crawl_tools.register(registry)
    extract_tools.register(registry)
    search_tools.register(registry)
    registry.seal()
    return registry
