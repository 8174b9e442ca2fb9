"""
Response parsing - extracts structured data from a batch of response lines.

The device answers with free-form lines. Structured data arrives as
sentinel blocks:

    ***Get Current Positions***     ***Current EEPROM***
    <TL>                            TL: 550
    <TR>                            Speed: 100
    <BL>                            ...
    <BR>                            ***End Current EEPROM***
    ***End Current Positions***

and a long move reports completion with a standalone
'***finished movement***' line. Each pass below is independent and
ignores every line it does not recognise. None of them raise on
malformed input: a bad block leaves prior state as it was.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .types import MotorConfig, MotorParameter, PositionSnapshot


POSITIONS_START = "***Get Current Positions***"
POSITIONS_END = "***End Current Positions***"
EEPROM_START = "***Current EEPROM***"
EEPROM_END = "***End Current EEPROM***"
FINISHED_MOVEMENT = "***finished movement***"
FIRMWARE_PREFIX = "FW:"

# EEPROM keys that map onto motor configuration
EEPROM_KEYS = {
    "Speed": MotorParameter.SPEED,
    "MaxSpeed": MotorParameter.MAX_SPEED,
    "Acceleration": MotorParameter.ACCELERATION,
}


def _blocks(lines: Iterable[str], start: str, end: str) -> List[List[str]]:
    """Payloads of every complete start/end block, in order."""
    blocks: List[List[str]] = []
    inside = False
    payload: List[str] = []
    for raw in lines:
        line = raw.strip()
        if line == start:
            inside = True
            payload = []
            continue
        if line == end:
            if inside:
                blocks.append(payload)
            inside = False
            payload = []
            continue
        if inside and line:
            payload.append(line)
    return blocks


def movement_finished(lines: Iterable[str]) -> bool:
    """True if the batch carries the completion marker."""
    return any(line.strip() == FINISHED_MOVEMENT for line in lines)


def parse_positions(lines: Iterable[str]) -> Optional[Tuple[str, str, str, str]]:
    """
    (TL, TR, BL, BR) from the last well-formed positions block.

    A block with anything other than exactly four payload lines is ignored.
    """
    result = None
    for payload in _blocks(lines, POSITIONS_START, POSITIONS_END):
        if len(payload) == 4:
            result = (payload[0], payload[1], payload[2], payload[3])
    return result


def update_positions(snapshot: PositionSnapshot, lines: Iterable[str]) -> PositionSnapshot:
    """New snapshot if the batch holds a valid block, else the same snapshot."""
    values = parse_positions(lines)
    if values is None:
        return snapshot
    return PositionSnapshot.from_values(values)


def parse_eeprom(lines: Iterable[str]) -> Dict[str, str]:
    """Key/value pairs of every EEPROM block, split on the first colon."""
    values: Dict[str, str] = {}
    for payload in _blocks(lines, EEPROM_START, EEPROM_END):
        for line in payload:
            if ":" not in line:
                continue
            key, value = line.split(":", 1)
            values[key.strip()] = value.strip()
    return values


def update_motor_config(config: MotorConfig, lines: Iterable[str]) -> MotorConfig:
    """Apply Speed / MaxSpeed / Acceleration from an EEPROM block."""
    for key, value in parse_eeprom(lines).items():
        parameter = EEPROM_KEYS.get(key)
        if parameter is None:
            continue
        try:
            config = config.with_value(parameter, int(value))
        except ValueError:
            continue
    return config


def parse_firmware_version(lines: Iterable[str]) -> Optional[str]:
    """Version text from the first 'FW:' line, if any."""
    for line in lines:
        line = line.strip()
        if line.startswith(FIRMWARE_PREFIX):
            return line[len(FIRMWARE_PREFIX):].strip()
    return None


@dataclass(frozen=True)
class ParsedResponse:
    """Everything structured found in one response batch."""
    finished_movement: bool
    positions: Optional[Tuple[str, str, str, str]]
    eeprom: Dict[str, str]
    firmware_version: Optional[str]


def parse_response(lines: List[str]) -> ParsedResponse:
    """Run every pass over a batch."""
    return ParsedResponse(
        finished_movement=movement_finished(lines),
        positions=parse_positions(lines),
        eeprom=parse_eeprom(lines),
        firmware_version=parse_firmware_version(lines),
    )
