"""
Process launching for the I2C command executor.

The executor never calls subprocess directly; it goes through a ProcessRunner
so tests can script exit codes and output without real i2c-tools binaries.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from mcp_i2c.errors import CommandLaunchError
from mcp_i2c.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """
    Outcome of a finished process.

    Attributes:
        exit_code: Process return code.
        output: Combined stdout and stderr, newline-terminated lines.
    """

    exit_code: int
    output: str


class ProcessRunner(Protocol):
    """Runs an argument vector and waits for it to finish."""

    def run(
        self, argv: Sequence[str], timeout: float | None = None
    ) -> ProcessResult:
        """
        Run argv without a shell and capture its combined output.

        Raises:
            CommandLaunchError: If the process cannot be started or times out.
        """
        ...


def normalize_output(output: str) -> str:
    """Terminate every output line with a newline."""
    return "".join(f"{line}\n" for line in output.splitlines())


class SubprocessRunner:
    """ProcessRunner backed by subprocess.run."""

    def run(
        self, argv: Sequence[str], timeout: float | None = None
    ) -> ProcessResult:
        args = list(argv)
        logger.debug("Running command", extra={"argv": args, "timeout": timeout})

        try:
            completed = subprocess.run(
                args,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandLaunchError(
                f"Command timed out after {timeout}s",
                details={"argv": args, "timeout": timeout},
            ) from e
        except FileNotFoundError as e:
            raise CommandLaunchError(
                f"Command not found: {args[0]}",
                details={"argv": args},
            ) from e
        except OSError as e:
            raise CommandLaunchError(
                f"Failed to start command: {e}",
                details={"argv": args, "error": str(e)},
            ) from e

        return ProcessResult(
            exit_code=completed.returncode,
            output=normalize_output(completed.stdout or ""),
        )
