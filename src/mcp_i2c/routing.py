"""
Method routing and registration for the I2C MCP Server.

ToolRegistry maps JSON-RPC method names ("tools/list", "tools/call", ...)
to async handler functions and wraps unexpected handler exceptions into
InternalError.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from mcp_i2c.errors import InternalError, NotFoundError, ToolError

if TYPE_CHECKING:
    from mcp_i2c.context import ToolContext

ToolHandler = Callable[["ToolContext", dict[str, Any]], Awaitable[Any]]


class ToolRegistry:
    """
    Registry for mapping method names to handler functions.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register("tools/list", handle_tools_list)
        >>> result = await registry.invoke("tools/list", ctx, {})
    """

    def __init__(self) -> None:
        self._handlers: dict[str, ToolHandler] = {}

    def register(self, name: str, handler: ToolHandler) -> None:
        """
        Register a handler under a method name.

        Raises:
            ValueError: If a handler is already registered for the name.
        """
        if name in self._handlers:
            raise ValueError(f"Method '{name}' is already registered")
        self._handlers[name] = handler

    def get_handler(self, name: str) -> ToolHandler | None:
        return self._handlers.get(name)

    def list_methods(self) -> list[str]:
        """List all registered method names."""
        return list(self._handlers.keys())

    async def invoke(
        self,
        name: str,
        ctx: ToolContext,
        params: dict[str, Any],
    ) -> Any:
        """
        Invoke a handler by method name.

        Args:
            name: Method name to invoke.
            ctx: ToolContext for the request.
            params: Parameters to pass to the handler.

        Returns:
            The handler's return value.

        Raises:
            NotFoundError: If no handler is registered for the name.
            ToolError: If the handler raises one; other exceptions are wrapped
                in InternalError.
        """
        handler = self.get_handler(name)
        if handler is None:
            raise NotFoundError(
                f"Method '{name}' is not registered",
                details={"method": name},
            )

        try:
            return await handler(ctx, params)
        except ToolError:
            raise
        except Exception as e:
            raise InternalError(
                message=f"Internal error in method '{name}': {e!s}",
                details={"method": name, "exception_type": type(e).__name__},
            ) from e

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
