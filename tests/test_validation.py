"""
Tests for I2C command validation.

This test module validates:
- Bus range checks at both boundaries
- Hex format of address, register and value
- Case-insensitive operation names
- Write value requirements
- Mode parsing (byte, word, block length 1-32)
- Rule order and idempotence
"""

from __future__ import annotations

import pytest

from mcp_i2c.errors import CommandValidationError, ValidationReason
from mcp_i2c.models import I2CCommand, Mode, ModeKind, Operation
from mcp_i2c.validation import (
    is_hex_byte,
    parse_mode,
    parse_operation,
    validate_command,
)


def make_command(**overrides: object) -> I2CCommand:
    fields: dict[str, object] = {
        "bus": 1,
        "address": "0x48",
        "register": "0x00",
        "operation": "read",
    }
    fields.update(overrides)
    return I2CCommand(**fields)


def reason_of(command: I2CCommand | None) -> ValidationReason:
    with pytest.raises(CommandValidationError) as exc_info:
        validate_command(command)
    return exc_info.value.reason


# =============================================================================
# Tests for validate_command
# =============================================================================


class TestValidateCommand:
    """Tests for validate_command."""

    def test_null_command(self) -> None:
        with pytest.raises(CommandValidationError) as exc_info:
            validate_command(None)

        assert exc_info.value.reason is ValidationReason.NULL_COMMAND
        assert exc_info.value.message == "Command cannot be null"

    @pytest.mark.parametrize("bus", [-1, 11, 100])
    def test_bus_out_of_range(self, bus: int) -> None:
        with pytest.raises(CommandValidationError) as exc_info:
            validate_command(make_command(bus=bus))

        assert exc_info.value.reason is ValidationReason.INVALID_BUS
        assert f"Invalid bus number: {bus}" in exc_info.value.message
        assert exc_info.value.error_code == "invalid_argument"

    @pytest.mark.parametrize("bus", [0, 1, 10])
    def test_bus_in_range(self, bus: int) -> None:
        assert validate_command(make_command(bus=bus)).bus == bus

    @pytest.mark.parametrize("address", ["48", "0xGG", "0x123", "0x", "", None, "1x48"])
    def test_invalid_address(self, address: str | None) -> None:
        assert reason_of(make_command(address=address)) is ValidationReason.INVALID_ADDRESS

    @pytest.mark.parametrize("register", ["00", "0xZZ", "0x100", None])
    def test_invalid_register(self, register: str | None) -> None:
        assert (
            reason_of(make_command(register=register))
            is ValidationReason.INVALID_REGISTER
        )

    @pytest.mark.parametrize("operation", ["READ", "read", "ReAd"])
    def test_read_operation_any_case(self, operation: str) -> None:
        assert validate_command(make_command(operation=operation)).operation is Operation.READ

    @pytest.mark.parametrize("operation", ["delete", "", None, "readwrite"])
    def test_invalid_operation(self, operation: str | None) -> None:
        assert (
            reason_of(make_command(operation=operation))
            is ValidationReason.INVALID_OPERATION
        )

    def test_write_with_value(self) -> None:
        validated = validate_command(make_command(operation="WRITE", value="0xFF"))

        assert validated.operation is Operation.WRITE
        assert validated.value == "0xFF"

    def test_write_without_value(self) -> None:
        assert reason_of(make_command(operation="write")) is ValidationReason.MISSING_VALUE

    @pytest.mark.parametrize("value", ["FF", "0x1FF", "0xQ"])
    def test_write_with_malformed_value(self, value: str) -> None:
        assert (
            reason_of(make_command(operation="write", value=value))
            is ValidationReason.INVALID_VALUE
        )

    def test_read_ignores_value(self) -> None:
        validated = validate_command(make_command(value="not-hex"))

        assert validated.value is None

    def test_first_failing_rule_wins(self) -> None:
        command = make_command(bus=99, address="bad", register="bad", operation="bad")

        assert reason_of(command) is ValidationReason.INVALID_BUS

    def test_address_checked_before_register(self) -> None:
        command = make_command(address="bad", register="bad")

        assert reason_of(command) is ValidationReason.INVALID_ADDRESS

    def test_mode_is_parsed(self) -> None:
        validated = validate_command(make_command(mode="i 4"))

        assert validated.mode == Mode(ModeKind.BLOCK, 4)

    def test_invalid_mode(self) -> None:
        assert reason_of(make_command(mode="x")) is ValidationReason.INVALID_MODE

    def test_validation_is_idempotent(self) -> None:
        command = make_command(operation="write", value="0x10", mode="w")

        first = validate_command(command)
        second = validate_command(command)

        assert first == second
        assert command == make_command(operation="write", value="0x10", mode="w")

    def test_register_wire_name(self) -> None:
        command = I2CCommand.model_validate(
            {"bus": 1, "address": "0x48", "register": "0x0A", "operation": "read"}
        )

        assert command.register_address == "0x0A"
        assert "register" not in I2CCommand.model_fields
        assert validate_command(command).register == "0x0A"

    def test_register_by_field_name(self) -> None:
        command = I2CCommand(register_address="0x01")

        assert command.register_address == "0x01"
        assert command.model_dump(by_alias=True)["register"] == "0x01"


# =============================================================================
# Tests for Helpers
# =============================================================================


class TestIsHexByte:
    """Tests for is_hex_byte."""

    @pytest.mark.parametrize("text", ["0x48", "0XFF", "0x0", "0xab", "0XaB"])
    def test_valid(self, text: str) -> None:
        assert is_hex_byte(text)

    @pytest.mark.parametrize("text", ["48", "0xGG", "0x", "0x123", " 0x48", "0x48\n", None])
    def test_invalid(self, text: str | None) -> None:
        assert not is_hex_byte(text)


class TestParseOperation:
    """Tests for parse_operation."""

    def test_write(self) -> None:
        assert parse_operation("Write") is Operation.WRITE

    def test_unknown(self) -> None:
        with pytest.raises(CommandValidationError, match="Invalid operation: erase"):
            parse_operation("erase")


class TestParseMode:
    """Tests for parse_mode."""

    @pytest.mark.parametrize("mode", [None, "", "   "])
    def test_absent(self, mode: str | None) -> None:
        assert parse_mode(mode) is None

    @pytest.mark.parametrize("mode", ["b", "B", " b "])
    def test_byte(self, mode: str) -> None:
        assert parse_mode(mode) == Mode(ModeKind.BYTE)

    @pytest.mark.parametrize("mode", ["w", "W"])
    def test_word(self, mode: str) -> None:
        assert parse_mode(mode) == Mode(ModeKind.WORD)

    @pytest.mark.parametrize(
        ("mode", "length"),
        [("i 1", 1), ("i 4", 4), ("i4", 4), ("I 32", 32), ("i32", 32)],
    )
    def test_block(self, mode: str, length: int) -> None:
        assert parse_mode(mode) == Mode(ModeKind.BLOCK, length)

    @pytest.mark.parametrize(
        "mode",
        [
            "i 0", "i 33", "i -1", "i", "x", "i abc", "i  4", "bw", "i 4 5",
            "i ٤", "i٣٢",
        ],
    )
    def test_invalid(self, mode: str) -> None:
        with pytest.raises(CommandValidationError) as exc_info:
            parse_mode(mode)

        assert exc_info.value.reason is ValidationReason.INVALID_MODE

    def test_block_args(self) -> None:
        assert Mode(ModeKind.BLOCK, 8).to_args() == ["i", "8"]
        assert Mode(ModeKind.WORD).to_args() == ["w"]
