"""
MCP stdio server for the I2C MCP Server.

MCPServer reads one JSON-RPC 2.0 request per line from stdin, dispatches it
through a ToolRegistry and writes the response line to stdout. Logging must
therefore go to stderr while this transport is active.
"""

from __future__ import annotations

import asyncio
import sys
from typing import TextIO

from mcp_i2c.context import ToolContext
from mcp_i2c.errors import ToolError
from mcp_i2c.executor import I2CExecutor
from mcp_i2c.logging import get_logger
from mcp_i2c.protocol import (
    JSONRPCError,
    create_internal_error,
    format_error_response,
    format_success_response,
    parse_request,
    tool_error_to_jsonrpc_error,
)
from mcp_i2c.routing import ToolRegistry
from mcp_i2c.tools.methods import register_methods

logger = get_logger(__name__)


async def process_request(
    request_json: str,
    registry: ToolRegistry,
) -> str | None:
    """
    Process a single JSON-RPC request and return the response.

    Args:
        request_json: Raw JSON string containing the request.
        registry: ToolRegistry with registered handlers.

    Returns:
        JSON string containing the response, or None for notifications.
    """
    request_id: str | int | None = None

    try:
        request = parse_request(request_json)
        request_id = request.id
        ctx = ToolContext.from_request(request)

        if request.is_notification:
            if request.method not in registry:
                logger.debug(
                    "Ignoring notification", extra={"method": request.method}
                )
                return None
            try:
                await registry.invoke(request.method, ctx, request.params)
            except Exception as e:
                logger.warning(
                    "Error processing notification",
                    extra={"method": request.method, "error": str(e)},
                )
            return None

        result = await registry.invoke(request.method, ctx, request.params)
        return format_success_response(request_id, result).to_json()

    except JSONRPCError as e:
        return format_error_response(request_id, e).to_json()

    except ToolError as e:
        jsonrpc_error = tool_error_to_jsonrpc_error(e)
        return format_error_response(request_id, jsonrpc_error).to_json()

    except Exception as e:
        logger.exception(
            "Unexpected error processing request",
            extra={"request_id": request_id, "error": str(e)},
        )
        jsonrpc_error = create_internal_error(
            message=f"Internal server error: {type(e).__name__}",
            details={"exception": str(e)},
        )
        return format_error_response(request_id, jsonrpc_error).to_json()


class MCPServer:
    """
    MCP Server that communicates via JSON-RPC 2.0 over stdio.

    Example:
        >>> server = create_server(I2CExecutor(config.i2c))
        >>> await server.run()

    Attributes:
        registry: ToolRegistry with registered handlers.
        running: Whether the server is currently running.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self.registry = registry
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self.running = False

    async def handle_request(self, request_json: str) -> str | None:
        return await process_request(request_json, self.registry)

    async def run(self) -> None:
        """
        Run the server until stdin is closed or stop() is called.

        Each line from stdin is treated as a JSON-RPC request.
        """
        self.running = True
        logger.info("MCP Server starting", extra={"methods": self.registry.list_methods()})

        try:
            loop = asyncio.get_running_loop()
            reader = asyncio.StreamReader()
            protocol = asyncio.StreamReaderProtocol(reader)

            await loop.connect_read_pipe(lambda: protocol, self._stdin)

            while self.running:
                line = await reader.readline()
                if not line:
                    break
                await self.handle_line(line)

        finally:
            self.running = False
            logger.info("MCP Server stopped")

    async def handle_line(self, line: bytes) -> None:
        """Decode one input line, process it and write any response."""
        try:
            request_json = line.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            logger.warning("Invalid UTF-8 encoding in request", extra={"error": str(e)})
            error = create_internal_error("Invalid request encoding: UTF-8 required")
            self._write_response(format_error_response(None, error).to_json())
            return

        if not request_json:
            return

        try:
            response = await self.handle_request(request_json)
        except Exception as e:
            logger.exception("Error in server loop", extra={"error": str(e)})
            error = create_internal_error(str(e))
            response = format_error_response(None, error).to_json()

        if response:
            self._write_response(response)

    def stop(self) -> None:
        """Stop the server gracefully."""
        self.running = False

    def _write_response(self, response_json: str) -> None:
        self._stdout.write(response_json + "\n")
        self._stdout.flush()


def create_server(
    executor: I2CExecutor,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> MCPServer:
    """
    Create an MCP Server with all I2C methods registered.

    Args:
        executor: Executor used by the tool handlers.
        stdin: Optional input stream.
        stdout: Optional output stream.

    Returns:
        Configured MCPServer instance.
    """
    registry = register_methods(ToolRegistry(), executor)
    return MCPServer(registry=registry, stdin=stdin, stdout=stdout)
