"""
Entry point for the I2C MCP Server.

Loads configuration, sets up logging and the audit trail, then serves either
the MCP stdio transport or the HTTP API.
"""

from __future__ import annotations

import asyncio
import sys

import uvicorn

from mcp_i2c.api import create_app
from mcp_i2c.audit import AuditLogger, set_audit_logger
from mcp_i2c.config import AppConfig, load_config
from mcp_i2c.executor import I2CExecutor
from mcp_i2c.logging import get_logger, setup_logging
from mcp_i2c.server import create_server

logger = get_logger(__name__)


def build_executor(config: AppConfig) -> I2CExecutor:
    """Create the executor and install the audit logger for a config."""
    audit_logger = AuditLogger.from_config(config.logging)
    set_audit_logger(audit_logger)
    return I2CExecutor(config.i2c, audit_logger=audit_logger)


def run_stdio(config: AppConfig) -> None:
    # stdout carries JSON-RPC traffic
    setup_logging(config.logging, stream=sys.stderr)
    server = create_server(build_executor(config))
    logger.info(
        "Serving MCP over stdio",
        extra={"i2c_enabled": config.i2c.enabled},
    )
    asyncio.run(server.run())


def run_http(config: AppConfig) -> None:
    setup_logging(config.logging)
    app = create_app(config, build_executor(config))
    logger.info(
        "Serving HTTP API",
        extra={"listen": config.server.listen, "i2c_enabled": config.i2c.enabled},
    )
    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.server.log_level,
    )


def main(argv: list[str] | None = None) -> int:
    """Run the server; returns the process exit status."""
    config = load_config(cli_args=argv)

    if config.server.transport == "http":
        run_http(config)
    else:
        run_stdio(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
