"""
Validation of I2C commands.

Every field of an I2CCommand ends up as an argument of a privileged
i2c-tools binary. validate_command() is the gate: it either returns a
ValidatedCommand or raises CommandValidationError for the first rule that
fails. Rules are applied in a fixed order:

1. command present
2. bus within [MIN_BUS_NUMBER, MAX_BUS_NUMBER]
3. address is a hex byte
4. register is a hex byte
5. operation is read or write (any case)
6. write carries a hex byte value
7. mode, when given, is b, w or a block length within [1, 32]
"""

from __future__ import annotations

import re

from mcp_i2c.errors import CommandValidationError, ValidationReason
from mcp_i2c.models import (
    I2CCommand,
    Mode,
    ModeKind,
    Operation,
    ValidatedCommand,
)

# =============================================================================
# Constants
# =============================================================================

# Upper bound is a safety limit, not a hardware constraint
MIN_BUS_NUMBER = 0
MAX_BUS_NUMBER = 10

MIN_BLOCK_LENGTH = 1
MAX_BLOCK_LENGTH = 32

NULL_COMMAND_MESSAGE = "Command cannot be null"

HEX_PATTERN = re.compile(r"^0[xX][0-9A-Fa-f]{1,2}$")

# The count is range-checked after parsing, so the pattern accepts any integer
BLOCK_MODE_PATTERN = re.compile(r"^i ?(-?[0-9]+)$")


# =============================================================================
# Helpers
# =============================================================================


def is_hex_byte(text: str | None) -> bool:
    """Return True if text is a 0x-prefixed hex value of 1-2 digits."""
    return text is not None and HEX_PATTERN.fullmatch(text) is not None


def parse_operation(operation: str | None) -> Operation:
    """
    Parse an operation name case-insensitively.

    Raises:
        CommandValidationError: If operation is not read or write.
    """
    normalized = operation.lower() if operation is not None else None
    for candidate in Operation:
        if candidate.value == normalized:
            return candidate

    raise CommandValidationError(
        ValidationReason.INVALID_OPERATION,
        f"Invalid operation: {operation}",
        details={"parameter": "operation", "value": operation},
    )


def parse_mode(mode: str | None) -> Mode | None:
    """
    Parse a transfer mode string.

    Accepted forms are "b", "w" and "i" followed by an optional single space
    and a block length in [1, 32]. Case and surrounding whitespace are
    ignored. None, "" and all-whitespace strings mean no mode.

    Args:
        mode: Raw mode string.

    Returns:
        The parsed Mode, or None if no mode was given.

    Raises:
        CommandValidationError: If the mode is not one of the accepted forms.

    Example:
        >>> parse_mode("I 4")
        Mode(kind=<ModeKind.BLOCK: 'i'>, length=4)
    """
    if mode is None or not mode.strip():
        return None

    normalized = mode.strip().lower()

    if normalized == ModeKind.BYTE.value:
        return Mode(ModeKind.BYTE)
    if normalized == ModeKind.WORD.value:
        return Mode(ModeKind.WORD)

    match = BLOCK_MODE_PATTERN.fullmatch(normalized)
    if match:
        length = int(match.group(1))
        if MIN_BLOCK_LENGTH <= length <= MAX_BLOCK_LENGTH:
            return Mode(ModeKind.BLOCK, length)

    raise CommandValidationError(
        ValidationReason.INVALID_MODE,
        f"Invalid mode: {mode}",
        details={
            "parameter": "mode",
            "value": mode,
            "min_block_length": MIN_BLOCK_LENGTH,
            "max_block_length": MAX_BLOCK_LENGTH,
        },
    )


def _require_hex(
    text: str | None,
    parameter: str,
    reason: ValidationReason,
) -> str:
    if not is_hex_byte(text):
        raise CommandValidationError(
            reason,
            f"Invalid {parameter} format: {text}",
            details={"parameter": parameter, "value": text},
        )
    return text  # type: ignore[return-value]


# =============================================================================
# Command Validation
# =============================================================================


def validate_command(command: I2CCommand | None) -> ValidatedCommand:
    """
    Validate an I2C command.

    Args:
        command: The command to validate.

    Returns:
        The ValidatedCommand with operation and mode decided.

    Raises:
        CommandValidationError: For the first rule the command breaks.
    """
    if command is None:
        raise CommandValidationError(
            ValidationReason.NULL_COMMAND, NULL_COMMAND_MESSAGE
        )

    if command.bus < MIN_BUS_NUMBER or command.bus > MAX_BUS_NUMBER:
        raise CommandValidationError(
            ValidationReason.INVALID_BUS,
            f"Invalid bus number: {command.bus}",
            details={
                "parameter": "bus",
                "value": command.bus,
                "min": MIN_BUS_NUMBER,
                "max": MAX_BUS_NUMBER,
            },
        )

    address = _require_hex(command.address, "address", ValidationReason.INVALID_ADDRESS)
    register = _require_hex(
        command.register_address, "register", ValidationReason.INVALID_REGISTER
    )
    operation = parse_operation(command.operation)

    value: str | None = None
    if operation is Operation.WRITE:
        if command.value is None:
            raise CommandValidationError(
                ValidationReason.MISSING_VALUE,
                "Invalid value format: value is required for write",
                details={"parameter": "value"},
            )
        value = _require_hex(command.value, "value", ValidationReason.INVALID_VALUE)

    return ValidatedCommand(
        bus=command.bus,
        address=address,
        register=register,
        operation=operation,
        value=value,
        mode=parse_mode(command.mode),
    )
