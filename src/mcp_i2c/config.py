"""
Configuration management for the I2C MCP Server.

Configuration is loaded from multiple sources with layered precedence:
1. Built-in defaults (Pydantic model defaults)
2. YAML config file (/etc/mcp-i2c/config.yml or --config path)
3. Environment variables (MCP_I2C_* prefix, __ for nesting)
4. Command-line arguments (highest precedence)
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path("/etc/mcp-i2c/config.yml")
DEFAULT_ENV_PREFIX = "MCP_I2C_"

# =============================================================================
# Server Configuration
# =============================================================================


class ServerConfig(BaseModel):
    """Server settings configuration.

    Attributes:
        listen: Listen address and port for the HTTP transport.
        log_level: Initial application log level.
        transport: Which transport to serve: 'stdio' (MCP JSON-RPC) or 'http'.
    """

    listen: str = Field(
        default="127.0.0.1:8080",
        description="Listen address and port (e.g., '127.0.0.1:8080' or '0.0.0.0:8080')",
    )
    log_level: str = Field(
        default="info",
        description="Log level: debug, info, warn, error",
    )
    transport: str = Field(
        default="stdio",
        description="Transport: 'stdio' or 'http'",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"debug", "info", "warn", "warning", "error", "critical"}
        v_lower = v.lower()
        if v_lower not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(sorted(valid_levels))}"
            )
        if v_lower == "warn":
            return "warning"
        return v_lower

    @field_validator("transport")
    @classmethod
    def validate_transport(cls, v: str) -> str:
        """Validate transport name."""
        valid_transports = {"stdio", "http"}
        v_lower = v.lower()
        if v_lower not in valid_transports:
            raise ValueError(
                f"Invalid transport: {v}. Must be one of: {', '.join(sorted(valid_transports))}"
            )
        return v_lower

    @field_validator("listen")
    @classmethod
    def validate_listen(cls, v: str) -> str:
        """Validate the host:port listen address."""
        _, sep, port = v.rpartition(":")
        if not sep or not port.isascii() or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(
                f"Invalid listen address: {v}. Expected host:port with port 1-65535"
            )
        return v

    @property
    def host(self) -> str:
        """Host part of the listen address."""
        host, _, _ = self.listen.rpartition(":")
        return host or "127.0.0.1"

    @property
    def port(self) -> int:
        """Port part of the listen address."""
        _, _, port = self.listen.rpartition(":")
        return int(port)


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging and audit configuration.

    Attributes:
        level: Log level.
        log_to_stdout: Whether to emit application log lines.
        json_format: Whether log lines are JSON objects.
        audit_log_path: Audit log file path ('' disables the file).
        debug_mode: Enable extra diagnostic logging.
    """

    level: str = Field(
        default="info",
        description="Log level",
    )
    log_to_stdout: bool = Field(
        default=True,
        description="Whether to emit application log lines",
    )
    json_format: bool = Field(
        default=True,
        description="Emit JSON log lines instead of plain text",
    )
    audit_log_path: str = Field(
        default="",
        description="Audit log file path for executed commands (empty disables)",
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable extra diagnostic logging",
    )


# =============================================================================
# I2C Configuration
# =============================================================================


class I2CConfig(BaseModel):
    """I2C command execution configuration.

    Attributes:
        enabled: Master switch for running i2c-tools binaries.
        get_command: Path to the i2cget binary.
        set_command: Path to the i2cset binary.
        timeout_seconds: Upper bound on a single command run, None for no bound.
    """

    enabled: bool = Field(
        default=True,
        description="Whether I2C commands are executed at all",
    )
    get_command: str = Field(
        default="/usr/sbin/i2cget",
        description="Path to the i2cget binary",
    )
    set_command: str = Field(
        default="/usr/sbin/i2cset",
        description="Path to the i2cset binary",
    )
    timeout_seconds: float | None = Field(
        default=10.0,
        description="Timeout for a single i2c-tools invocation in seconds",
        gt=0,
    )


# =============================================================================
# Main Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """
    Main application configuration model.

    Attributes:
        server: Server settings.
        logging: Logging configuration.
        i2c: I2C command execution configuration.
    """

    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="Server settings",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )
    i2c: I2CConfig = Field(
        default_factory=I2CConfig,
        description="I2C command execution configuration",
    )


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        base: The base dictionary.
        override: The dictionary with values to override.

    Returns:
        A new dictionary with merged values.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """
    Load configuration from a YAML file.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the YAML is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def _parse_env_value(value: str) -> Any:
    """
    Parse an environment variable value to appropriate Python type.

    Args:
        value: String value from environment variable.

    Returns:
        Parsed value (bool, int, float or string).
    """
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


def _load_env_config(prefix: str = DEFAULT_ENV_PREFIX) -> dict[str, Any]:
    """
    Load configuration from environment variables.

    Nested keys use a double underscore separator, e.g.
    ``MCP_I2C_I2C__GET_COMMAND=/usr/local/sbin/i2cget``.

    Args:
        prefix: Environment variable prefix.

    Returns:
        Dictionary with configuration values.
    """
    result: dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        parts = key[len(prefix) :].lower().split("__")

        current = result
        for part in parts[:-1]:
            current = current.setdefault(part, {})

        current[parts[-1]] = _parse_env_value(value)

    return result


def _parse_cli_args(args: list[str] | None = None) -> dict[str, Any]:
    """
    Parse command-line arguments.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Dictionary with parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog="mcp-i2c",
        description="I2C MCP Server for Raspberry Pi",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        help="Override log level",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode",
    )
    parser.add_argument(
        "--transport",
        type=str,
        choices=["stdio", "http"],
        help="Transport to serve",
    )
    parser.add_argument(
        "--listen",
        type=str,
        help="HTTP listen address (host:port)",
    )
    parser.add_argument(
        "--disable-i2c",
        action="store_true",
        help="Reject all I2C commands without running i2c-tools",
    )

    parsed = parser.parse_args(args)

    result: dict[str, Any] = {}

    if parsed.config:
        result["_config_path"] = parsed.config

    server: dict[str, Any] = {}
    if parsed.log_level:
        server["log_level"] = parsed.log_level
        result["logging"] = {"level": parsed.log_level}
    if parsed.transport:
        server["transport"] = parsed.transport
    if parsed.listen:
        server["listen"] = parsed.listen

    if parsed.debug:
        result.setdefault("logging", {})["debug_mode"] = True
        server["log_level"] = "debug"

    if server:
        result["server"] = server

    if parsed.disable_i2c:
        result["i2c"] = {"enabled": False}

    return result


def load_config(
    config_path: Path | str | None = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    cli_args: list[str] | None = None,
) -> AppConfig:
    """
    Load configuration from all sources with layered precedence.

    Later sources override earlier ones: defaults, YAML file, environment
    variables, command-line arguments.

    Args:
        config_path: Path to YAML configuration file. If None, uses the
            --config argument or the default path when it exists.
        env_prefix: Prefix for environment variables.
        cli_args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Fully configured AppConfig instance.

    Raises:
        FileNotFoundError: If specified config file doesn't exist.
        ValidationError: If configuration is invalid.

    Example:
        >>> config = load_config(cli_args=[])
        >>> print(config.i2c.get_command)
        '/usr/sbin/i2cget'
    """
    config_dict: dict[str, Any] = {}

    cli_config = _parse_cli_args(cli_args)

    cli_config_path = cli_config.pop("_config_path", None)
    if config_path is None:
        if cli_config_path is not None:
            config_path = Path(cli_config_path)
        elif DEFAULT_CONFIG_PATH.exists():
            config_path = DEFAULT_CONFIG_PATH
    elif isinstance(config_path, str):
        config_path = Path(config_path)

    if config_path is not None:
        config_dict = _deep_merge(config_dict, _load_yaml_config(config_path))

    config_dict = _deep_merge(config_dict, _load_env_config(env_prefix))
    config_dict = _deep_merge(config_dict, cli_config)

    return AppConfig(**config_dict)
