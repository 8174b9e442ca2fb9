"""
Core immutable types for the EAT tilt controller.

All commands are frozen dataclasses: one variant per opcode family, each
carrying its typed argument and producing its own wire text. Nothing else
in the system formats command strings.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Protocol, Tuple, Type, TypeVar, Union


# =============================================================================
# Tokens
# =============================================================================


_T = TypeVar("_T", bound=Enum)


def _parse_token(enum_cls: Type[_T], value: Any) -> _T:
    """Accept an enum member, its wire token or its name ("top-left", "TOP_LEFT")."""
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    for member in enum_cls:
        if text in (str(member.value).lower(), member.name.lower()):
            return member
    raise ValueError(f"Unknown {enum_cls.__name__.lower()}: {value!r}")


class Direction(str, Enum):
    """Directional tilt (moves all 4 motors). Values are wire opcodes."""
    TOP = "tp"
    RIGHT = "rt"
    BOTTOM = "bt"
    LEFT = "lt"

    @classmethod
    def parse(cls, value: Any) -> Direction:
        return _parse_token(cls, value)


class Corner(str, Enum):
    """Corner tilt (moves 2 motors in opposition). Values are wire opcodes."""
    TOP_LEFT = "tl"
    TOP_RIGHT = "tr"
    BOTTOM_RIGHT = "br"
    BOTTOM_LEFT = "bl"

    @classmethod
    def parse(cls, value: Any) -> Corner:
        return _parse_token(cls, value)


class MotorParameter(str, Enum):
    """Motor configuration registers (cA, cB, cC)."""
    SPEED = "cA"
    MAX_SPEED = "cB"
    ACCELERATION = "cC"

    @classmethod
    def parse(cls, value: Any) -> MotorParameter:
        return _parse_token(cls, value)


ORIENTATIONS = (1, 2, 3, 4)
MOTORS = (1, 2, 3, 4)


def _require_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")


def validate_orientation(orientation: Any) -> int:
    """Return orientation if it is 1-4, else raise ValueError."""
    _require_int("orientation", orientation)
    if orientation not in ORIENTATIONS:
        raise ValueError(f"orientation must be 1-4, got {orientation}")
    return orientation


# =============================================================================
# Command Protocol & Types
# =============================================================================


class Command(Protocol):
    """Protocol for all EAT commands."""

    def to_wire(self) -> str:
        """Convert to the line sent on the serial link (without newline)."""
        ...


@dataclass(frozen=True)
class CornerTilt:
    """Paired corner tilt: tl, tr, br, bl with a signed step count."""
    corner: Corner
    steps: int

    def __post_init__(self):
        object.__setattr__(self, "corner", Corner.parse(self.corner))
        _require_int("steps", self.steps)

    def to_wire(self) -> str:
        return f"{self.corner.value},{self.steps}"


@dataclass(frozen=True)
class DirectionalTilt:
    """Directional tilt: tp, rt, bt, lt with a signed step count."""
    direction: Direction
    steps: int

    def __post_init__(self):
        object.__setattr__(self, "direction", Direction.parse(self.direction))
        _require_int("steps", self.steps)

    def to_wire(self) -> str:
        return f"{self.direction.value},{self.steps}"


@dataclass(frozen=True)
class Backfocus:
    """Move all 4 motors the same direction (bf). Negative steps = out."""
    steps: int

    def __post_init__(self):
        _require_int("steps", self.steps)

    def to_wire(self) -> str:
        return f"bf,{self.steps}"


@dataclass(frozen=True)
class ZeroAll:
    """Zero/reset all axes (zr)."""

    def to_wire(self) -> str:
        return "zr"


@dataclass(frozen=True)
class QueryPositions:
    """Request the current positions block (cp)."""

    def to_wire(self) -> str:
        return "cp"


@dataclass(frozen=True)
class QueryEeprom:
    """Request the EEPROM block (ep)."""

    def to_wire(self) -> str:
        return "ep"


@dataclass(frozen=True)
class SavePositions:
    """Persist current positions to device EEPROM (up)."""

    def to_wire(self) -> str:
        return "up"


@dataclass(frozen=True)
class SetMotorConfig:
    """Set speed / max speed / acceleration (cA, cB, cC)."""
    parameter: MotorParameter
    value: int

    def __post_init__(self):
        object.__setattr__(self, "parameter", MotorParameter.parse(self.parameter))
        _require_int("value", self.value)

    def to_wire(self) -> str:
        return f"{self.parameter.value},{self.value}"


@dataclass(frozen=True)
class SetOrientation:
    """Tell the device its mounting orientation (or, 1-4)."""
    orientation: int

    def __post_init__(self):
        validate_orientation(self.orientation)

    def to_wire(self) -> str:
        return f"or,{self.orientation}"


@dataclass(frozen=True)
class SetMotorPosition:
    """Force-set one motor's absolute position (m1..m4)."""
    motor: int
    position: int

    def __post_init__(self):
        _require_int("motor", self.motor)
        if self.motor not in MOTORS:
            raise ValueError(f"motor must be 1-4, got {self.motor}")
        _require_int("position", self.position)

    def to_wire(self) -> str:
        return f"m{self.motor},{self.position}"


@dataclass(frozen=True)
class QueryFirmware:
    """Request firmware version (fv). Reply line is prefixed 'FW:'."""

    def to_wire(self) -> str:
        return "fv"


@dataclass(frozen=True)
class RawCommand:
    """Operator-typed text sent verbatim (trimmed)."""
    text: str

    def __post_init__(self):
        text = (self.text or "").strip()
        if not text:
            raise ValueError("Raw command must not be empty")
        if "\n" in text or "\r" in text:
            raise ValueError("Raw command must be a single line")
        if not text.isascii():
            raise ValueError(f"Raw command must be ASCII, got {text!r}")
        object.__setattr__(self, "text", text)

    def to_wire(self) -> str:
        return self.text


AnyCommand = Union[
    CornerTilt,
    DirectionalTilt,
    Backfocus,
    ZeroAll,
    QueryPositions,
    QueryEeprom,
    SavePositions,
    SetMotorConfig,
    SetOrientation,
    SetMotorPosition,
    QueryFirmware,
    RawCommand,
]

# Commands that make the motors move and end with a completion marker
MOTION_COMMANDS = (CornerTilt, DirectionalTilt, Backfocus, ZeroAll)


def to_wire(command: Union[AnyCommand, str]) -> str:
    """Wire text for a command object, or a raw string validated as RawCommand."""
    if isinstance(command, str):
        return RawCommand(command).to_wire()
    return command.to_wire()


# =============================================================================
# State Types
# =============================================================================


UNKNOWN = "unknown"


@dataclass(frozen=True)
class PositionSnapshot:
    """
    Last-known motor positions as reported by the device.

    Each field is either UNKNOWN or the numeric string the device sent.
    Fields are physical motors, not screen positions.
    """
    tl: str = UNKNOWN
    tr: str = UNKNOWN
    bl: str = UNKNOWN
    br: str = UNKNOWN

    @classmethod
    def from_values(cls, values: Tuple[str, str, str, str]) -> PositionSnapshot:
        """Build from a device block in its fixed TL, TR, BL, BR order."""
        tl, tr, bl, br = values
        return cls(tl=tl, tr=tr, bl=bl, br=br)

    def get(self, corner: Corner) -> str:
        """Reading for a physical corner motor."""
        return getattr(self, Corner.parse(corner).value)

    @property
    def is_known(self) -> bool:
        return UNKNOWN not in (self.tl, self.tr, self.bl, self.br)

    def to_dict(self) -> Dict[str, str]:
        return {"TL": self.tl, "TR": self.tr, "BL": self.bl, "BR": self.br}


@dataclass(frozen=True)
class MotorConfig:
    """Motor speed settings as stored in device EEPROM."""
    speed: Optional[int] = None
    max_speed: Optional[int] = None
    acceleration: Optional[int] = None

    def with_value(self, parameter: MotorParameter, value: int) -> MotorConfig:
        """Create new config with one parameter changed."""
        field_name = {
            MotorParameter.SPEED: "speed",
            MotorParameter.MAX_SPEED: "max_speed",
            MotorParameter.ACCELERATION: "acceleration",
        }[MotorParameter.parse(parameter)]
        return replace(self, **{field_name: value})

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {
            "speed": self.speed,
            "max_speed": self.max_speed,
            "acceleration": self.acceleration,
        }
