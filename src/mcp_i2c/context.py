"""
Request context for the I2C MCP Server.

ToolContext carries the metadata of a single JSON-RPC call from the server
loop to the method handler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp_i2c.protocol import JSONRPCRequest


@dataclass
class ToolContext:
    """
    Encapsulates the context of a single JSON-RPC method call.

    Attributes:
        method: JSON-RPC method name (e.g., "tools/call").
        request_id: Request identifier from the JSON-RPC request.
        source: Transport the request arrived on ("mcp" or "http").
        timestamp: When the request was received (UTC).
        metadata: Additional context.
    """

    method: str
    request_id: str | int | None
    source: str = "mcp"
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert ToolContext to a dictionary for logging."""
        return {
            "method": self.method,
            "request_id": self.request_id,
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }

    @classmethod
    def from_request(
        cls,
        request: JSONRPCRequest,
        source: str = "mcp",
        metadata: dict[str, Any] | None = None,
    ) -> ToolContext:
        """
        Create a ToolContext from a parsed JSON-RPC request.

        Example:
            >>> from mcp_i2c.protocol import parse_request
            >>> req = parse_request('{"jsonrpc":"2.0","id":"1","method":"tools/list"}')
            >>> ctx = ToolContext.from_request(req)
        """
        return cls(
            method=request.method,
            request_id=request.id,
            source=source,
            timestamp=datetime.now(UTC),
            metadata=metadata or {},
        )
