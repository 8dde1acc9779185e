"""
Tests for the entry point.
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest import mock

import pytest

from mcp_i2c import main as main_module
from mcp_i2c.audit import get_audit_logger
from mcp_i2c.config import AppConfig, LoggingConfig


@pytest.fixture(autouse=True)
def _no_env_config():
    env = {k: v for k, v in os.environ.items() if not k.startswith("MCP_I2C_")}
    with mock.patch.dict(os.environ, env, clear=True):
        yield


class TestBuildExecutor:
    """Tests for build_executor."""

    def test_installs_audit_logger(self, tmp_path: Path) -> None:
        config = AppConfig(
            logging=LoggingConfig(audit_log_path=str(tmp_path / "audit.log"))
        )

        executor = main_module.build_executor(config)

        assert executor.config is config.i2c
        assert executor._audit_logger is get_audit_logger()


class TestMain:
    """Tests for main transport selection."""

    def test_stdio_by_default(self) -> None:
        with (
            mock.patch.object(main_module, "run_stdio") as run_stdio,
            mock.patch.object(main_module, "run_http") as run_http,
        ):
            assert main_module.main([]) == 0

        run_stdio.assert_called_once()
        run_http.assert_not_called()

    def test_http_transport(self) -> None:
        with (
            mock.patch.object(main_module, "run_stdio") as run_stdio,
            mock.patch.object(main_module, "run_http") as run_http,
        ):
            main_module.main(["--transport", "http", "--listen", "0.0.0.0:9000"])

        config = run_http.call_args.args[0]
        assert config.server.port == 9000
        run_stdio.assert_not_called()

    def test_disable_flag_reaches_config(self) -> None:
        with mock.patch.object(main_module, "run_stdio") as run_stdio:
            main_module.main(["--disable-i2c"])

        assert run_stdio.call_args.args[0].i2c.enabled is False

    def test_run_http_starts_uvicorn(self) -> None:
        config = AppConfig()

        with mock.patch.object(main_module.uvicorn, "run") as uvicorn_run:
            main_module.run_http(config)

        kwargs = uvicorn_run.call_args.kwargs
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 8080
        assert kwargs["log_level"] == "info"
