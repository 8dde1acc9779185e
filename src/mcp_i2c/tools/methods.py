"""
JSON-RPC method handlers for the MCP stdio transport.

Methods:
- initialize: protocol handshake with server info and capabilities
- ping: liveness check
- tools/list: list the I2C tools
- tools/call: call an I2C tool; failures come back as isError results
- i2c.execute: run a raw I2CCommand and return the I2CResponse
"""

from __future__ import annotations

import asyncio
import functools
from typing import Any

from pydantic import ValidationError

from mcp_i2c import __version__
from mcp_i2c.context import ToolContext
from mcp_i2c.errors import InvalidArgumentError
from mcp_i2c.executor import I2CExecutor
from mcp_i2c.logging import get_logger
from mcp_i2c.models import I2CCommand, ServerInfo
from mcp_i2c.routing import ToolRegistry
from mcp_i2c.tools.i2c import call_tool, list_tools

logger = get_logger(__name__)

MCP_PROTOCOL_VERSION = "2024-11-05"


def server_info() -> ServerInfo:
    """Return the server identification used for discovery."""
    return ServerInfo(version=__version__)


async def handle_initialize(ctx: ToolContext, params: dict[str, Any]) -> dict[str, Any]:
    """Answer the MCP initialize handshake."""
    info = server_info()
    logger.info(
        "MCP client initialized",
        extra={"client": params.get("clientInfo"), "request_id": ctx.request_id},
    )
    return {
        "protocolVersion": params.get("protocolVersion", MCP_PROTOCOL_VERSION),
        "capabilities": {"tools": {"listChanged": False}},
        "serverInfo": {"name": info.name, "version": info.version},
    }


async def handle_ping(_ctx: ToolContext, _params: dict[str, Any]) -> dict[str, Any]:
    return {}


async def handle_tools_list(
    _ctx: ToolContext, _params: dict[str, Any]
) -> dict[str, Any]:
    """Return the tool descriptors."""
    return {"tools": [tool.to_dict() for tool in list_tools()]}


async def handle_tools_call(
    ctx: ToolContext,
    params: dict[str, Any],
    *,
    executor: I2CExecutor,
) -> dict[str, Any]:
    """
    Handle the tools/call method.

    Args:
        ctx: The ToolContext for this request.
        params: Request parameters:
            - name: Tool name
            - arguments: Tool arguments
        executor: Executor that runs the command.

    Returns:
        The MCP tool result dictionary.

    Raises:
        InvalidArgumentError: If the tool name is missing.
    """
    name = params.get("name")
    if not isinstance(name, str) or not name:
        raise InvalidArgumentError(
            "Parameter 'name' is required",
            details={"parameter": "name"},
        )

    arguments = params.get("arguments") or {}
    if not isinstance(arguments, dict):
        raise InvalidArgumentError(
            "Parameter 'arguments' must be an object",
            details={"parameter": "arguments", "type": type(arguments).__name__},
        )

    # execute() blocks until the child process exits
    result = await asyncio.to_thread(
        call_tool, name, arguments, executor, source=ctx.source
    )
    return result.to_dict()


async def handle_i2c_execute(
    ctx: ToolContext,
    params: dict[str, Any],
    *,
    executor: I2CExecutor,
) -> dict[str, Any]:
    """
    Handle the i2c.execute method.

    Params are the fields of an I2CCommand. The I2CResponse is returned as the
    result whether or not the command succeeded.

    Raises:
        InvalidArgumentError: If params cannot form an I2CCommand.
    """
    try:
        command = I2CCommand.model_validate(params)
    except ValidationError as e:
        raise InvalidArgumentError(
            "Invalid I2C command",
            details={
                "errors": [
                    {"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()
                ]
            },
        ) from e

    response = await asyncio.to_thread(executor.execute, command, source=ctx.source)
    return response.model_dump()


def register_methods(registry: ToolRegistry, executor: I2CExecutor) -> ToolRegistry:
    """
    Register all MCP methods on a registry.

    Args:
        registry: Registry to populate.
        executor: Executor shared by the tool handlers.

    Returns:
        The same registry, for chaining.
    """
    registry.register("initialize", handle_initialize)
    registry.register("ping", handle_ping)
    registry.register("tools/list", handle_tools_list)
    registry.register(
        "tools/call", functools.partial(handle_tools_call, executor=executor)
    )
    registry.register(
        "i2c.execute", functools.partial(handle_i2c_execute, executor=executor)
    )
    return registry
