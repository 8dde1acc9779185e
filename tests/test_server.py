"""
Tests for the MCP stdio server.

This test module validates:
- JSON-RPC request processing through the registered I2C methods
- tools/list and tools/call results
- Error mapping for protocol and tool errors
- Line handling of MCPServer
"""

from __future__ import annotations

import io
import json
from typing import Any

import pytest
from conftest import FakeRunner

from mcp_i2c import __version__
from mcp_i2c.config import I2CConfig
from mcp_i2c.context import ToolContext
from mcp_i2c.executor import I2CExecutor
from mcp_i2c.routing import ToolRegistry
from mcp_i2c.server import create_server, process_request
from mcp_i2c.tools.methods import register_methods


def rpc(method: str, params: dict[str, Any] | None = None, request_id: Any = "req-1") -> str:
    message: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if request_id is not None:
        message["id"] = request_id
    if params is not None:
        message["params"] = params
    return json.dumps(message)


@pytest.fixture
def registry(executor: I2CExecutor) -> ToolRegistry:
    return register_methods(ToolRegistry(), executor)


async def call(registry: ToolRegistry, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    response = await process_request(rpc(method, params), registry)
    assert response is not None
    return json.loads(response)


# =============================================================================
# Tests for process_request
# =============================================================================


class TestProcessRequest:
    """Tests for process_request with the I2C methods."""

    @pytest.mark.asyncio
    async def test_initialize(self, registry: ToolRegistry) -> None:
        parsed = await call(registry, "initialize", {"protocolVersion": "2025-03-26"})

        result = parsed["result"]
        assert result["protocolVersion"] == "2025-03-26"
        assert result["serverInfo"] == {"name": "mcp-i2c", "version": __version__}
        assert "tools" in result["capabilities"]

    @pytest.mark.asyncio
    async def test_ping(self, registry: ToolRegistry) -> None:
        parsed = await call(registry, "ping")

        assert parsed["result"] == {}

    @pytest.mark.asyncio
    async def test_tools_list(self, registry: ToolRegistry) -> None:
        parsed = await call(registry, "tools/list")

        tools = parsed["result"]["tools"]
        assert [tool["name"] for tool in tools] == ["i2cget", "i2cset"]
        assert all("inputSchema" in tool for tool in tools)

    @pytest.mark.asyncio
    async def test_tools_call_success(self, registry: ToolRegistry) -> None:
        parsed = await call(
            registry,
            "tools/call",
            {"name": "i2cget", "arguments": {"bus": 1, "address": "0x48", "register": "0x00"}},
        )

        assert parsed["result"] == {
            "content": [{"type": "text", "text": "0x42"}],
            "isError": False,
        }

    @pytest.mark.asyncio
    async def test_tools_call_missing_argument_is_result(self, registry: ToolRegistry) -> None:
        parsed = await call(
            registry, "tools/call", {"name": "i2cget", "arguments": {"bus": 1}}
        )

        assert "error" not in parsed
        assert parsed["result"]["isError"] is True
        assert parsed["result"]["content"][0]["text"] == "Missing required argument: address"

    @pytest.mark.asyncio
    async def test_tools_call_unknown_tool(self, registry: ToolRegistry) -> None:
        parsed = await call(registry, "tools/call", {"name": "i2cdump", "arguments": {}})

        assert parsed["result"]["isError"] is True
        assert parsed["result"]["content"][0]["text"] == "Unknown tool: i2cdump"

    @pytest.mark.asyncio
    async def test_tools_call_without_name(self, registry: ToolRegistry) -> None:
        parsed = await call(registry, "tools/call", {"arguments": {}})

        assert parsed["error"]["code"] == -32602
        assert parsed["error"]["data"]["error_code"] == "invalid_argument"

    @pytest.mark.asyncio
    async def test_tools_call_arguments_not_object(self, registry: ToolRegistry) -> None:
        parsed = await call(registry, "tools/call", {"name": "i2cget", "arguments": [1]})

        assert parsed["error"]["code"] == -32602

    @pytest.mark.asyncio
    async def test_i2c_execute(self, registry: ToolRegistry) -> None:
        parsed = await call(
            registry,
            "i2c.execute",
            {"bus": 1, "address": "0x48", "register": "0x00", "operation": "read"},
        )

        assert parsed["result"] == {
            "success": True,
            "data": "0x42",
            "error": None,
            "command": "/usr/sbin/i2cget -y 1 0x48 0x00",
        }

    @pytest.mark.asyncio
    async def test_i2c_execute_validation_failure_is_result(self, registry: ToolRegistry) -> None:
        parsed = await call(
            registry,
            "i2c.execute",
            {"bus": -1, "address": "0x48", "register": "0x00", "operation": "read"},
        )

        assert parsed["result"]["success"] is False
        assert "Invalid bus number" in parsed["result"]["error"]
        assert parsed["result"]["command"] == ""

    @pytest.mark.asyncio
    async def test_i2c_execute_bad_types(self, registry: ToolRegistry) -> None:
        parsed = await call(registry, "i2c.execute", {"bus": "not-a-number"})

        assert parsed["error"]["code"] == -32602
        assert parsed["error"]["data"]["details"]["errors"][0]["loc"] == ["bus"]

    @pytest.mark.asyncio
    async def test_unknown_method(self, registry: ToolRegistry) -> None:
        parsed = await call(registry, "resources/list")

        assert parsed["error"]["code"] == -32601
        assert parsed["error"]["data"]["error_code"] == "not_found"

    @pytest.mark.asyncio
    async def test_malformed_json(self, registry: ToolRegistry) -> None:
        parsed = json.loads(await process_request("{invalid json", registry))

        assert parsed["error"]["code"] == -32700
        assert parsed["id"] is None

    @pytest.mark.asyncio
    async def test_notification_has_no_response(self, registry: ToolRegistry) -> None:
        response = await process_request(
            rpc("notifications/initialized", request_id=None), registry
        )

        assert response is None

    @pytest.mark.asyncio
    async def test_handler_exception_is_internal_error(self) -> None:
        async def broken(_ctx: ToolContext, _params: dict[str, Any]) -> Any:
            raise RuntimeError("boom")

        registry = ToolRegistry()
        registry.register("broken", broken)

        parsed = json.loads(await process_request(rpc("broken"), registry))

        assert parsed["error"]["code"] == -32603
        assert "boom" in parsed["error"]["message"]

    @pytest.mark.asyncio
    async def test_disabled_executor(self, read_runner: FakeRunner) -> None:
        executor = I2CExecutor(I2CConfig(enabled=False), runner=read_runner)
        registry = register_methods(ToolRegistry(), executor)

        parsed = await call(
            registry,
            "tools/call",
            {"name": "i2cset", "arguments": {"bus": 1, "address": "0x48", "register": "0x00", "value": "0x01"}},
        )

        assert parsed["result"]["isError"] is True
        assert parsed["result"]["content"][0]["text"] == "I2C commands are disabled"
        assert read_runner.calls == []


# =============================================================================
# Tests for MCPServer
# =============================================================================


class TestMCPServer:
    """Tests for MCPServer line handling."""

    @pytest.mark.asyncio
    async def test_handle_line_writes_response(self, executor: I2CExecutor) -> None:
        stdout = io.StringIO()
        server = create_server(executor, stdout=stdout)

        await server.handle_line((rpc("tools/list") + "\n").encode())

        lines = stdout.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["id"] == "req-1"

    @pytest.mark.asyncio
    async def test_blank_line_ignored(self, executor: I2CExecutor) -> None:
        stdout = io.StringIO()
        server = create_server(executor, stdout=stdout)

        await server.handle_line(b"   \n")

        assert stdout.getvalue() == ""

    @pytest.mark.asyncio
    async def test_invalid_utf8(self, executor: I2CExecutor) -> None:
        stdout = io.StringIO()
        server = create_server(executor, stdout=stdout)

        await server.handle_line(b"\xff\xfe\n")

        parsed = json.loads(stdout.getvalue())
        assert parsed["error"]["code"] == -32603

    def test_stop(self, executor: I2CExecutor) -> None:
        server = create_server(executor, stdout=io.StringIO())
        server.running = True

        server.stop()

        assert server.running is False

    def test_registered_methods(self, executor: I2CExecutor) -> None:
        server = create_server(executor, stdout=io.StringIO())

        assert set(server.registry.list_methods()) == {
            "initialize",
            "ping",
            "tools/list",
            "tools/call",
            "i2c.execute",
        }
