"""
Request, response and tool models for the I2C MCP Server.

The pydantic models are the wire DTOs shared by the HTTP and stdio
transports. The dataclasses are the internal, already-validated form of a
command that the executor consumes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

WRITE_SUCCESS_MESSAGE = "Write successful"

# =============================================================================
# Wire DTOs
# =============================================================================


class I2CCommand(BaseModel):
    """
    An I2C command as submitted by a caller.

    Field contents are not trusted until validate_command() has accepted them.

    Attributes:
        bus: I2C bus number (typically 0 or 1 on Raspberry Pi).
        address: Device address in hex format (e.g., "0x48").
        register_address: Register address in hex format (e.g., "0x00"),
            "register" on the wire.
        value: Value to write in hex format, unused for reads.
        operation: "read" or "write".
        mode: "b" (byte), "w" (word) or "i N" (block of N bytes, 1-32).
    """

    # "register" would shadow BaseModel.register
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    bus: int = Field(default=0, description="I2C bus number")
    address: str | None = Field(default=None, description="Device address, e.g. 0x48")
    register_address: str | None = Field(
        default=None, alias="register", description="Register, e.g. 0x00"
    )
    value: str | None = Field(default=None, description="Value to write, e.g. 0xFF")
    operation: str | None = Field(default=None, description="'read' or 'write'")
    mode: str | None = Field(
        default=None,
        description="Data mode: 'b', 'w' or 'i' followed by a length (e.g. 'i 4')",
    )


class I2CResponse(BaseModel):
    """
    Outcome of a single I2C command.

    Attributes:
        success: Whether the command ran and exited cleanly.
        data: Output of a read, or the write confirmation.
        error: Failure reason when success is False.
        command: The command line that was (or would have been) run.
        error_code: Error category for transports; never serialized.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    data: str | None = None
    error: str | None = None
    command: str = ""
    error_code: str | None = Field(default=None, exclude=True)

    @classmethod
    def ok(cls, data: str, command: str) -> I2CResponse:
        """Build a success response."""
        return cls(success=True, data=data, command=command)

    @classmethod
    def failure(
        cls,
        error: str,
        command: str = "",
        error_code: str | None = None,
    ) -> I2CResponse:
        """Build a failure response."""
        return cls(success=False, error=error, command=command, error_code=error_code)


class McpContent(BaseModel):
    """A single content item of a tool result."""

    type: str = "text"
    text: str | None = None


class McpToolResult(BaseModel):
    """Result of an MCP tool call: content items plus an error flag."""

    model_config = ConfigDict(populate_by_name=True)

    content: list[McpContent] = Field(default_factory=list)
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def success(cls, text: str | None) -> McpToolResult:
        return cls(content=[McpContent(text=text)], is_error=False)

    @classmethod
    def error(cls, text: str | None) -> McpToolResult:
        return cls(content=[McpContent(text=text)], is_error=True)

    @property
    def text(self) -> str | None:
        """Text of the first content item, if any."""
        return self.content[0].text if self.content else None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with MCP field names."""
        return self.model_dump(by_alias=True)


class McpTool(BaseModel):
    """Descriptor of a tool as returned by tool listing."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    input_schema: dict[str, Any] = Field(alias="inputSchema")

    def to_dict(self) -> dict[str, Any]:
        """Serialize with MCP field names."""
        return self.model_dump(by_alias=True)


class McpToolCall(BaseModel):
    """A tool call request: tool name and its argument mapping."""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ServerInfo(BaseModel):
    """Server identification returned for MCP discovery."""

    name: str = "mcp-i2c"
    version: str
    description: str = "MCP Server for executing I2C commands on Raspberry Pi"
    protocol: str = "mcp"


# =============================================================================
# Validated Command
# =============================================================================


class Operation(str, Enum):
    """I2C operation kind."""

    READ = "read"
    WRITE = "write"


class ModeKind(str, Enum):
    """Transfer mode kind understood by i2cget/i2cset."""

    BYTE = "b"
    WORD = "w"
    BLOCK = "i"


@dataclass(frozen=True)
class Mode:
    """
    Transfer mode of a command.

    Attributes:
        kind: Byte, word or block transfer.
        length: Number of bytes for block transfers, None otherwise.
    """

    kind: ModeKind
    length: int | None = None

    def to_args(self) -> list[str]:
        """Return the trailing i2c-tools arguments for this mode."""
        if self.kind is ModeKind.BLOCK:
            return [self.kind.value, str(self.length)]
        return [self.kind.value]


@dataclass(frozen=True)
class ValidatedCommand:
    """An I2C command whose fields have passed validation."""

    bus: int
    address: str
    register: str
    operation: Operation
    value: str | None = None
    mode: Mode | None = None
