"""
I2C tools for the I2C MCP Server.

This module defines the two MCP tools and their dispatch onto the executor:
- i2cget: Read from an I2C device register
- i2cset: Write to an I2C device register

Tool failures are reported as results with isError set, never raised, so
every transport can answer a tool call with a normal payload.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from mcp_i2c.errors import InvalidArgumentError
from mcp_i2c.executor import I2CExecutor
from mcp_i2c.logging import get_logger
from mcp_i2c.models import I2CCommand, McpTool, McpToolResult, Operation

logger = get_logger(__name__)

# =============================================================================
# Tool Definitions
# =============================================================================

TOOL_I2CGET = "i2cget"
TOOL_I2CSET = "i2cset"

# ASCII digits only, no underscores or padding
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

_BUS_PROPERTY = {
    "type": "integer",
    "description": "I2C bus number (typically 0 or 1 on Raspberry Pi)",
}
_ADDRESS_PROPERTY = {
    "type": "string",
    "description": "I2C device address in hex format (e.g., 0x48)",
}
_MODE_PROPERTY = {
    "type": "string",
    "description": (
        "Optional data mode: 'b' for byte, 'w' for word, "
        "'i' followed by a length for a block of 1-32 bytes (e.g., 'i 4')"
    ),
}

I2CGET_TOOL = McpTool(
    name=TOOL_I2CGET,
    description="Read a byte from an I2C device register. Returns the value in hex format.",
    input_schema={
        "type": "object",
        "properties": {
            "bus": _BUS_PROPERTY,
            "address": _ADDRESS_PROPERTY,
            "register": {
                "type": "string",
                "description": "Register address to read from in hex format (e.g., 0x00)",
            },
            "mode": _MODE_PROPERTY,
        },
        "required": ["bus", "address", "register"],
    },
)

I2CSET_TOOL = McpTool(
    name=TOOL_I2CSET,
    description="Write a byte to an I2C device register.",
    input_schema={
        "type": "object",
        "properties": {
            "bus": _BUS_PROPERTY,
            "address": _ADDRESS_PROPERTY,
            "register": {
                "type": "string",
                "description": "Register address to write to in hex format (e.g., 0x00)",
            },
            "value": {
                "type": "string",
                "description": "Value to write in hex format (e.g., 0xFF)",
            },
            "mode": _MODE_PROPERTY,
        },
        "required": ["bus", "address", "register", "value"],
    },
)

_TOOLS: dict[str, tuple[McpTool, Operation]] = {
    TOOL_I2CGET: (I2CGET_TOOL, Operation.READ),
    TOOL_I2CSET: (I2CSET_TOOL, Operation.WRITE),
}


def list_tools() -> list[McpTool]:
    """Return the descriptors of all I2C tools."""
    return [tool for tool, _ in _TOOLS.values()]


# =============================================================================
# Argument Coercion
# =============================================================================


def _require(arguments: Mapping[str, Any], name: str) -> Any:
    value = arguments.get(name)
    if value is None:
        raise InvalidArgumentError(
            f"Missing required argument: {name}",
            details={"parameter": name},
        )
    return value


def _int_argument(arguments: Mapping[str, Any], name: str) -> int:
    """
    Read a required integer argument.

    Numbers are taken directly (floats truncated); text must be a plain
    base-10 integer with an optional sign.

    Raises:
        InvalidArgumentError: If the argument is missing or not an integer.
    """
    value = _require(arguments, name)
    try:
        if isinstance(value, bool):
            raise ValueError(value)
        if isinstance(value, (int, float)):
            return int(value)
        text = str(value)
        if INTEGER_PATTERN.fullmatch(text) is None:
            raise ValueError(text)
        return int(text, 10)
    except (ValueError, OverflowError) as e:
        raise InvalidArgumentError(
            f"Invalid integer argument {name}: {value}",
            details={"parameter": name, "value": value},
        ) from e


def _str_argument(arguments: Mapping[str, Any], name: str) -> str:
    return str(_require(arguments, name))


def _optional_str_argument(arguments: Mapping[str, Any], name: str) -> str | None:
    value = arguments.get(name)
    return None if value is None else str(value)


def build_command(tool_name: str, arguments: Mapping[str, Any]) -> I2CCommand:
    """
    Build an I2CCommand from tool arguments.

    Required arguments are checked in declared order (bus, address, register,
    then value for i2cset); the first missing one is reported.

    Raises:
        InvalidArgumentError: If a required argument is missing or malformed.
        KeyError: If tool_name is not an I2C tool.
    """
    _, operation = _TOOLS[tool_name]

    bus = _int_argument(arguments, "bus")
    address = _str_argument(arguments, "address")
    register = _str_argument(arguments, "register")
    value = (
        _str_argument(arguments, "value") if operation is Operation.WRITE else None
    )

    return I2CCommand(
        bus=bus,
        address=address,
        register=register,
        value=value,
        operation=operation.value,
        mode=_optional_str_argument(arguments, "mode"),
    )


# =============================================================================
# Dispatch
# =============================================================================


def call_tool(
    name: str,
    arguments: Mapping[str, Any] | None,
    executor: I2CExecutor,
    *,
    source: str | None = None,
) -> McpToolResult:
    """
    Dispatch a tool call to the executor.

    Args:
        name: Tool name ("i2cget" or "i2cset").
        arguments: Tool arguments.
        executor: Executor that runs the resulting command.
        source: Calling transport, recorded in the audit trail.

    Returns:
        McpToolResult with the read data / write confirmation, or an error
        result carrying the failure text.
    """
    logger.info("Received MCP tool call", extra={"tool": name})

    if name not in _TOOLS:
        return McpToolResult.error(f"Unknown tool: {name}")

    try:
        command = build_command(name, arguments or {})
    except InvalidArgumentError as e:
        logger.warning("Invalid tool call", extra={"tool": name, "error": e.message})
        return McpToolResult.error(e.message)

    response = executor.execute(command, source=source)
    if response.success:
        return McpToolResult.success(response.data)
    return McpToolResult.error(response.error)
