"""
Error types for the I2C MCP Server.

This module defines the ToolError base class and its subclasses. Every failure
the command pipeline can produce is expressed as a ToolError so that the
executor can fold it into an I2CResponse and the transports can map its
error_code to a JSON-RPC code or an HTTP status.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ToolError(Exception):
    """
    Base exception class for I2C tool errors.

    Attributes:
        error_code: Internal error code string (e.g., "invalid_argument",
            "failed_precondition", "unavailable", "command_failed", "internal").
        message: Human-readable error message.
        details: Optional structured details (e.g., parameter values, context).

    Example:
        >>> raise ToolError(
        ...     error_code="invalid_argument",
        ...     message="Invalid bus number: 12",
        ...     details={"bus": 12},
        ... )
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        """Return a detailed string representation."""
        return (
            f"{self.__class__.__name__}("
            f"error_code={self.error_code!r}, "
            f"message={self.message!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the error to a dictionary for serialization.

        Returns:
            Dictionary with error_code, message, and details.
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class InvalidArgumentError(ToolError):
    """Error raised when a tool receives invalid input arguments."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            error_code="invalid_argument", message=message, details=details
        )


class ValidationReason(str, Enum):
    """Which command rule rejected the input."""

    NULL_COMMAND = "null_command"
    INVALID_BUS = "invalid_bus"
    INVALID_ADDRESS = "invalid_address"
    INVALID_REGISTER = "invalid_register"
    INVALID_OPERATION = "invalid_operation"
    MISSING_VALUE = "missing_value"
    INVALID_VALUE = "invalid_value"
    INVALID_MODE = "invalid_mode"


class CommandValidationError(InvalidArgumentError):
    """
    Error raised when an I2C command fails a syntactic or range rule.

    Command fields end up as arguments of a privileged binary, so this error
    is the last stop before anything reaches the bus.

    Attributes:
        reason: The ValidationReason of the first rule that failed.
    """

    def __init__(
        self,
        reason: ValidationReason,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged = {"reason": reason.value}
        merged.update(details or {})
        super().__init__(message=message, details=merged)
        self.reason = reason


class NotFoundError(ToolError):
    """Error raised when a requested method or tool does not exist."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(error_code="not_found", message=message, details=details)


class UnavailableError(ToolError):
    """
    Error raised when a required resource is unavailable.

    This error maps to the "unavailable" error code.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(error_code="unavailable", message=message, details=details)


class CommandLaunchError(UnavailableError):
    """
    Error raised when an external i2c-tools binary cannot be run to completion.

    Covers a missing binary, a permission problem, any other OS error while
    starting the process, and a wait that exceeded the configured timeout.
    """


class FailedPreconditionError(ToolError):
    """
    Error raised when a precondition for the operation is not met.

    This error maps to the "failed_precondition" error code.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            error_code="failed_precondition", message=message, details=details
        )


class ExecutionDisabledError(FailedPreconditionError):
    """Error raised when I2C command execution is switched off in the config."""

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__("I2C commands are disabled", details=details)


class CommandFailedError(ToolError):
    """
    Error raised when an i2c-tools binary exits with a non-zero status.

    The captured output is carried verbatim in the message.
    """

    def __init__(
        self,
        output: str,
        exit_code: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged: dict[str, Any] = {"exit_code": exit_code}
        merged.update(details or {})
        super().__init__(
            error_code="command_failed",
            message=f"Command failed: {output}",
            details=merged,
        )
        self.output = output
        self.exit_code = exit_code


class InternalError(ToolError):
    """
    Error raised for unexpected internal errors.

    This error maps to the "internal" error code and should be used for
    unexpected exceptions that should be logged with full stack traces.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(error_code="internal", message=message, details=details)
