"""
I2C command executor.

I2CExecutor turns an I2CCommand into an i2cget/i2cset invocation and the
process outcome into an I2CResponse. execute() never raises: validation
failures, a disabled service, launch errors, non-zero exits and unexpected
exceptions all come back as a response with success=False.
"""

from __future__ import annotations

import time

from mcp_i2c.audit import AuditLogger, get_audit_logger
from mcp_i2c.config import I2CConfig
from mcp_i2c.errors import (
    CommandFailedError,
    CommandValidationError,
    ExecutionDisabledError,
    InternalError,
    ToolError,
    ValidationReason,
)
from mcp_i2c.logging import get_logger
from mcp_i2c.models import (
    WRITE_SUCCESS_MESSAGE,
    I2CCommand,
    I2CResponse,
    Operation,
    ValidatedCommand,
)
from mcp_i2c.process_utils import ProcessRunner, SubprocessRunner
from mcp_i2c.validation import NULL_COMMAND_MESSAGE, validate_command

logger = get_logger(__name__)


def build_argv(command: ValidatedCommand, binary: str) -> list[str]:
    """
    Build the i2c-tools argument vector for a validated command.

    Args:
        command: The validated command.
        binary: Path to i2cget (reads) or i2cset (writes).

    Returns:
        The argument vector, binary first.

    Example:
        >>> build_argv(cmd, "/usr/sbin/i2cget")
        ['/usr/sbin/i2cget', '-y', '1', '0x48', '0x00', 'i', '4']
    """
    argv = [binary, "-y", str(command.bus), command.address, command.register]
    if command.operation is Operation.WRITE and command.value is not None:
        argv.append(command.value)
    if command.mode is not None:
        argv.extend(command.mode.to_args())
    return argv


class I2CExecutor:
    """
    Validates and runs I2C commands through i2c-tools.

    Attributes:
        config: Binary paths, enable switch and timeout.
        runner: ProcessRunner used to launch the binaries.
    """

    def __init__(
        self,
        config: I2CConfig | None = None,
        runner: ProcessRunner | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self.config = config if config is not None else I2CConfig()
        self.runner = runner if runner is not None else SubprocessRunner()
        self._audit_logger = audit_logger

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def binary_for(self, operation: Operation) -> str:
        """Return the configured binary path for an operation."""
        if operation is Operation.READ:
            return self.config.get_command
        return self.config.set_command

    def execute(self, command: I2CCommand | None, *, source: str | None = None) -> I2CResponse:
        """
        Execute an I2C command.

        Args:
            command: The command to run.
            source: Name of the calling transport, recorded in the audit trail.

        Returns:
            An I2CResponse describing the outcome.
        """
        started = time.monotonic()
        try:
            response = self._execute(command)
        except Exception as e:
            logger.exception("Error executing I2C command")
            error = InternalError(f"Error executing command: {e}")
            response = I2CResponse.failure(error.message, error_code=error.error_code)

        if response.command:
            audit = self._audit_logger or get_audit_logger()
            audit.log_command(
                response,
                operation=command.operation if command is not None else None,
                source=source,
                duration_ms=(time.monotonic() - started) * 1000,
            )
        return response

    def _execute(self, command: I2CCommand | None) -> I2CResponse:
        if command is None:
            logger.error("Received null command")
            error = CommandValidationError(
                ValidationReason.NULL_COMMAND, NULL_COMMAND_MESSAGE
            )
            return I2CResponse.failure(error.message, error_code=error.error_code)

        logger.info(
            "Executing I2C command",
            extra={
                "operation": command.operation,
                "bus": command.bus,
                "address": command.address,
                "register": command.register_address,
                "mode": command.mode,
            },
        )

        if not self.enabled:
            error = ExecutionDisabledError()
            logger.warning(error.message)
            return I2CResponse.failure(error.message, error_code=error.error_code)

        try:
            validated = validate_command(command)
        except ToolError as e:
            logger.error(
                "Invalid command parameters",
                extra={"error": e.message, "details": e.details},
            )
            return I2CResponse.failure(e.message, error_code=e.error_code)

        return self._run(validated)

    def _run(self, command: ValidatedCommand) -> I2CResponse:
        argv = build_argv(command, self.binary_for(command.operation))
        command_line = " ".join(argv)
        logger.info(
            f"Executing {command.operation.value} command: {command_line}",
            extra={"argv": argv},
        )

        try:
            result = self.runner.run(argv, timeout=self.config.timeout_seconds)
        except ToolError as e:
            logger.error(
                "Failed to launch I2C command",
                extra={"command": command_line, "error": e.message},
            )
            return I2CResponse.failure(
                e.message, command=command_line, error_code=e.error_code
            )
        except OSError as e:
            logger.error(
                "Failed to launch I2C command",
                extra={"command": command_line, "error": str(e)},
            )
            return I2CResponse.failure(
                f"Failed to start command: {e}",
                command=command_line,
                error_code="unavailable",
            )

        if result.exit_code != 0:
            failure = CommandFailedError(result.output, result.exit_code)
            logger.error(
                f"{command.operation.value.capitalize()} command failed "
                f"with exit code {result.exit_code}",
                extra={"command": command_line, "output": result.output},
            )
            return I2CResponse.failure(
                failure.message, command=command_line, error_code=failure.error_code
            )

        if command.operation is Operation.READ:
            data = result.output.strip()
            logger.info("Read command successful", extra={"data": data})
            return I2CResponse.ok(data, command_line)

        logger.info("Write command successful", extra={"command": command_line})
        return I2CResponse.ok(WRITE_SUCCESS_MESSAGE, command_line)
