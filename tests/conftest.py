"""
Pytest configuration for the I2C MCP Server tests.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

import pytest

from mcp_i2c.audit import set_audit_logger
from mcp_i2c.config import I2CConfig
from mcp_i2c.executor import I2CExecutor
from mcp_i2c.process_utils import ProcessResult

# Configure pytest-asyncio mode
pytest_plugins = ["pytest_asyncio"]


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests that spawn real processes (deselect with '-m \"not integration\"')",
    )


class FakeRunner:
    """ProcessRunner that returns a scripted result and records every call."""

    def __init__(
        self,
        exit_code: int = 0,
        output: str = "",
        error: Exception | None = None,
    ) -> None:
        self.exit_code = exit_code
        self.output = output
        self.error = error
        self.calls: list[tuple[list[str], float | None]] = []

    def run(self, argv: Sequence[str], timeout: float | None = None) -> ProcessResult:
        self.calls.append((list(argv), timeout))
        if self.error is not None:
            raise self.error
        return ProcessResult(exit_code=self.exit_code, output=self.output)

    @property
    def last_argv(self) -> list[str]:
        return self.calls[-1][0]


@pytest.fixture
def i2c_config() -> I2CConfig:
    """I2C config with recognizable binary paths."""
    return I2CConfig(
        enabled=True,
        get_command="/usr/sbin/i2cget",
        set_command="/usr/sbin/i2cset",
        timeout_seconds=5.0,
    )


@pytest.fixture
def read_runner() -> FakeRunner:
    """Runner that behaves like a successful i2cget."""
    return FakeRunner(exit_code=0, output="0x42\n")


@pytest.fixture
def executor(i2c_config: I2CConfig, read_runner: FakeRunner) -> I2CExecutor:
    return I2CExecutor(i2c_config, runner=read_runner)


@pytest.fixture(autouse=True)
def _reset_global_state() -> Iterator[None]:
    """Drop the process-wide audit logger and package log handlers after each test."""
    yield
    set_audit_logger(None)
    logging.getLogger("mcp_i2c").handlers.clear()
    logging.getLogger("mcp_i2c").propagate = True
