"""
HTTP API for the I2C MCP Server.

Endpoints:
- POST /api/i2c/execute: run an I2CCommand, status code reflects the outcome
- GET  /tools/list: MCP tool descriptors
- POST /tools/call: MCP tool call, always 200 with an isError flag
- GET  /api/scan/tools, POST /api/scan/tools: discovery mirrors of the above
- GET  /api/scan/info: server information for MCP discovery
- GET  /health: liveness and whether execution is enabled
"""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mcp_i2c import __version__
from mcp_i2c.config import AppConfig
from mcp_i2c.executor import I2CExecutor
from mcp_i2c.logging import get_logger
from mcp_i2c.models import I2CCommand, I2CResponse, McpToolCall
from mcp_i2c.tools.i2c import call_tool, list_tools
from mcp_i2c.tools.methods import server_info

logger = get_logger(__name__)

HTTP_SOURCE = "http"

STATUS_BY_ERROR_CODE: dict[str, int] = {
    "invalid_argument": 400,
    "failed_precondition": 503,
}


def status_for(response: I2CResponse) -> int:
    """Map an I2CResponse to the HTTP status of the plain REST endpoint."""
    if response.success:
        return 200
    return STATUS_BY_ERROR_CODE.get(response.error_code or "", 500)


def _executor(request: Request) -> I2CExecutor:
    return request.app.state.executor


async def _call_tool(request: Request, tool_call: McpToolCall) -> JSONResponse:
    result = await asyncio.to_thread(
        call_tool,
        tool_call.name,
        tool_call.arguments,
        _executor(request),
        source=HTTP_SOURCE,
    )
    return JSONResponse(result.to_dict())


def _tool_list() -> list[dict[str, Any]]:
    return [tool.to_dict() for tool in list_tools()]


def create_app(
    config: AppConfig | None = None,
    executor: I2CExecutor | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Application configuration (defaults if None).
        executor: Executor to use; built from config.i2c if None.

    Returns:
        The configured FastAPI app.
    """
    config = config if config is not None else AppConfig()

    app = FastAPI(
        title="mcp-i2c",
        version=__version__,
        description="I2C commands on Raspberry Pi over REST and MCP",
    )
    app.state.config = config
    app.state.executor = executor if executor is not None else I2CExecutor(config.i2c)

    @app.get("/health")
    async def health(request: Request) -> dict[str, Any]:
        return {"status": "ok", "enabled": _executor(request).enabled}

    @app.post("/api/i2c/execute", response_model=I2CResponse)
    async def execute_command(request: Request, command: I2CCommand) -> JSONResponse:
        """Execute an I2C read or write command."""
        logger.info(
            "REST command received",
            extra={"operation": command.operation, "bus": command.bus},
        )
        response = await asyncio.to_thread(
            _executor(request).execute, command, source=HTTP_SOURCE
        )
        return JSONResponse(response.model_dump(), status_code=status_for(response))

    @app.get("/tools/list")
    async def get_tools() -> list[dict[str, Any]]:
        """List available tools with their input schemas."""
        logger.info("Listing available MCP tools")
        return _tool_list()

    @app.post("/tools/call")
    async def post_tool_call(request: Request, tool_call: McpToolCall) -> JSONResponse:
        """Execute an MCP tool with the provided arguments."""
        return await _call_tool(request, tool_call)

    @app.get("/api/scan/tools")
    async def scan_get_tools() -> list[dict[str, Any]]:
        logger.info("Scan API: Listing available MCP tools")
        return _tool_list()

    @app.post("/api/scan/tools")
    async def scan_call_tool(request: Request, tool_call: McpToolCall) -> JSONResponse:
        logger.info("Scan API: Received MCP tool call", extra={"tool": tool_call.name})
        return await _call_tool(request, tool_call)

    @app.get("/api/scan/info")
    async def scan_info() -> dict[str, Any]:
        logger.info("Scan API: Returning server info")
        return server_info().model_dump()

    @app.exception_handler(Exception)
    async def unexpected_error(_request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error in HTTP handler")
        response = I2CResponse.failure(
            f"Error executing command: {exc}", error_code="internal"
        )
        return JSONResponse(response.model_dump(), status_code=500)

    return app
