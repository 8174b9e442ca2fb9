"""
Unit tests for core types: command variants and state snapshots.
"""

import pytest
from core.types import (
    Backfocus,
    Corner,
    CornerTilt,
    Direction,
    DirectionalTilt,
    MotorConfig,
    MotorParameter,
    PositionSnapshot,
    QueryEeprom,
    QueryFirmware,
    QueryPositions,
    RawCommand,
    SavePositions,
    SetMotorConfig,
    SetMotorPosition,
    SetOrientation,
    UNKNOWN,
    ZeroAll,
    to_wire,
)


class TestTokens:
    """Tests for token parsing."""

    @pytest.mark.parametrize("value", ["top", "TOP", "tp", Direction.TOP, " Top "])
    def test_direction_parse(self, value):
        """Names, opcodes and members all parse."""
        assert Direction.parse(value) is Direction.TOP

    @pytest.mark.parametrize("value", ["top-left", "top_left", "TOP_LEFT", "tl"])
    def test_corner_parse(self, value):
        assert Corner.parse(value) is Corner.TOP_LEFT

    def test_unknown_token_rejected(self):
        with pytest.raises(ValueError, match="Unknown direction"):
            Direction.parse("sideways")

    def test_motor_parameter_parse(self):
        assert MotorParameter.parse("max_speed") is MotorParameter.MAX_SPEED
        assert MotorParameter.parse("cC") is MotorParameter.ACCELERATION


class TestCommandWire:
    """Each variant serializes to its wire opcode."""

    @pytest.mark.parametrize("command, wire", [
        (CornerTilt(Corner.TOP_RIGHT, 25), "tr,25"),
        (CornerTilt("bottom-left", -10), "bl,-10"),
        (DirectionalTilt(Direction.LEFT, 100), "lt,100"),
        (DirectionalTilt("bottom", -5), "bt,-5"),
        (Backfocus(-25), "bf,-25"),
        (ZeroAll(), "zr"),
        (QueryPositions(), "cp"),
        (QueryEeprom(), "ep"),
        (SavePositions(), "up"),
        (SetMotorConfig(MotorParameter.SPEED, 150), "cA,150"),
        (SetMotorConfig("acceleration", 300), "cC,300"),
        (SetOrientation(3), "or,3"),
        (SetMotorPosition(2, 550), "m2,550"),
        (QueryFirmware(), "fv"),
        (RawCommand("  cp  "), "cp"),
    ])
    def test_to_wire(self, command, wire):
        assert command.to_wire() == wire

    def test_to_wire_accepts_string(self):
        """Plain strings are sent as raw commands."""
        assert to_wire(" zr ") == "zr"

    def test_immutable(self):
        cmd = DirectionalTilt(Direction.TOP, 25)
        with pytest.raises(AttributeError):
            cmd.steps = 50  # type: ignore


class TestCommandValidation:
    """Invalid arguments are rejected at construction."""

    def test_steps_must_be_int(self):
        with pytest.raises(ValueError):
            Backfocus(2.5)  # type: ignore

    def test_bool_is_not_int(self):
        with pytest.raises(ValueError):
            DirectionalTilt(Direction.TOP, True)  # type: ignore

    @pytest.mark.parametrize("orientation", [0, 5, -1])
    def test_orientation_range(self, orientation):
        with pytest.raises(ValueError, match="1-4"):
            SetOrientation(orientation)

    @pytest.mark.parametrize("motor", [0, 5])
    def test_motor_range(self, motor):
        with pytest.raises(ValueError, match="1-4"):
            SetMotorPosition(motor, 10)

    @pytest.mark.parametrize("text", ["", "   ", "cp\nzr"])
    def test_raw_command_rejects_empty_and_multiline(self, text):
        with pytest.raises(ValueError):
            RawCommand(text)

    @pytest.mark.parametrize("text", ["tp,25\u00b0", "caf\u00e9"])
    def test_raw_command_rejects_non_ascii(self, text):
        """Only ASCII reaches the wire."""
        with pytest.raises(ValueError, match="ASCII"):
            RawCommand(text)

    def test_to_wire_rejects_non_ascii_string(self):
        with pytest.raises(ValueError):
            to_wire("tp,25\u00b0")


class TestPositionSnapshot:
    """Tests for PositionSnapshot."""

    def test_defaults_unknown(self):
        snapshot = PositionSnapshot()
        assert snapshot.to_dict() == {"TL": UNKNOWN, "TR": UNKNOWN, "BL": UNKNOWN, "BR": UNKNOWN}
        assert not snapshot.is_known

    def test_from_values_order(self):
        """Block order is TL, TR, BL, BR."""
        snapshot = PositionSnapshot.from_values(("1", "2", "3", "4"))
        assert snapshot.get(Corner.TOP_LEFT) == "1"
        assert snapshot.get(Corner.TOP_RIGHT) == "2"
        assert snapshot.get(Corner.BOTTOM_LEFT) == "3"
        assert snapshot.get(Corner.BOTTOM_RIGHT) == "4"
        assert snapshot.is_known


class TestMotorConfig:
    """Tests for MotorConfig."""

    def test_with_value(self):
        config = MotorConfig().with_value(MotorParameter.MAX_SPEED, 800)
        assert config.max_speed == 800
        assert config.speed is None
