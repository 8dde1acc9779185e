"""
Audit trail for executed I2C commands.

Every command that reaches the executor produces one JSON line:

{
    "timestamp": "2026-01-15T14:30:00+00:00",
    "event_type": "i2c_command",
    "source": "mcp",
    "operation": "read",
    "command": "/usr/sbin/i2cget -y 1 0x48 0x00",
    "success": true,
    "error_code": null,
    "duration_ms": 4.2
}
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp_i2c.config import LoggingConfig
    from mcp_i2c.models import I2CResponse

logger = logging.getLogger("mcp_i2c.audit_logger")

AUDIT_LOGGER_NAME = "mcp_i2c.audit"


class AuditLogger:
    """
    Structured audit logger for I2C command executions.

    Example:
        >>> audit = AuditLogger.from_config(config.logging)
        >>> audit.log_command(response, operation="read", source="http")
    """

    def __init__(
        self,
        audit_log_path: str | None = None,
        log_to_stdout: bool = False,
    ) -> None:
        """
        Initialize the audit logger.

        Args:
            audit_log_path: Path to the audit log file, None or "" for none.
            log_to_stdout: Whether to also emit entries through the app logger.
        """
        self._audit_log_path = audit_log_path or None
        self._log_to_stdout = log_to_stdout
        self._file_logger: logging.Logger | None = None

        if self._audit_log_path:
            self._setup_file_logger(self._audit_log_path)

    @classmethod
    def from_config(cls, config: LoggingConfig) -> AuditLogger:
        return cls(
            audit_log_path=config.audit_log_path,
            log_to_stdout=config.log_to_stdout,
        )

    def _setup_file_logger(self, path: str) -> None:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)

            self._file_logger = logging.getLogger(AUDIT_LOGGER_NAME)
            self._file_logger.setLevel(logging.INFO)
            self._file_logger.propagate = False
            self._file_logger.handlers.clear()

            handler = logging.FileHandler(path, mode="a", encoding="utf-8")
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._file_logger.addHandler(handler)

            logger.info("Audit logging initialized to %s", path)
        except OSError as e:
            logger.error("Failed to setup audit file logging: %s", str(e))
            self._file_logger = None

    def log_command(
        self,
        response: I2CResponse,
        operation: str | None,
        source: str | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """
        Record the outcome of one command.

        Args:
            response: The response handed back to the caller.
            operation: Requested operation as given by the caller.
            source: Transport the request came from ("mcp", "http", ...).
            duration_ms: Wall time spent in the executor.
        """
        entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "event_type": "i2c_command",
            "source": source,
            "operation": operation,
            "command": response.command,
            "success": response.success,
            "error_code": response.error_code,
        }
        if duration_ms is not None:
            entry["duration_ms"] = round(duration_ms, 2)

        self._write_entry(entry)

    def _write_entry(self, entry: dict[str, Any]) -> None:
        line = json.dumps(entry, default=str)

        if self._file_logger is not None:
            self._file_logger.info(line)

        if self._log_to_stdout:
            logger.info("AUDIT: %s", line)


_audit_logger: AuditLogger | None = None


def get_audit_logger() -> AuditLogger:
    """Return the process-wide audit logger, creating a no-file one on demand."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger


def set_audit_logger(audit_logger: AuditLogger | None) -> None:
    """Install (or clear, with None) the process-wide audit logger."""
    global _audit_logger
    _audit_logger = audit_logger
