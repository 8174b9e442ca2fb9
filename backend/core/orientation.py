"""
Orientation mapping - logical (screen) tokens to physical motor tokens.

The device can be mounted rotated 0/90/180/270 degrees clockwise
(orientation 1-4). A button labelled "top" on screen must then drive
whichever physical side is currently at the top.

Both rings are listed in clockwise order. Orientation o rotates a token
o - 1 steps clockwise along its ring; the inverse rotates it back.
Orientation is always passed in by the caller and never cached here.
"""

from __future__ import annotations

from typing import Dict, Tuple, Union

from .types import Corner, Direction, PositionSnapshot, validate_orientation


DIRECTION_RING: Tuple[Direction, ...] = (
    Direction.TOP,
    Direction.RIGHT,
    Direction.BOTTOM,
    Direction.LEFT,
)

CORNER_RING: Tuple[Corner, ...] = (
    Corner.TOP_LEFT,
    Corner.TOP_RIGHT,
    Corner.BOTTOM_RIGHT,
    Corner.BOTTOM_LEFT,
)

Token = Union[Direction, Corner]


def _rotate(ring: tuple, token, steps: int):
    return ring[(ring.index(token) + steps) % len(ring)]


def map_direction(direction: Union[Direction, str], orientation: int) -> Direction:
    """Physical direction for a logical one."""
    steps = validate_orientation(orientation) - 1
    return _rotate(DIRECTION_RING, Direction.parse(direction), steps)


def unmap_direction(direction: Union[Direction, str], orientation: int) -> Direction:
    """Logical direction for a physical one (inverse of map_direction)."""
    steps = validate_orientation(orientation) - 1
    return _rotate(DIRECTION_RING, Direction.parse(direction), -steps)


def map_corner(corner: Union[Corner, str], orientation: int) -> Corner:
    """Physical corner for a logical one."""
    steps = validate_orientation(orientation) - 1
    return _rotate(CORNER_RING, Corner.parse(corner), steps)


def unmap_corner(corner: Union[Corner, str], orientation: int) -> Corner:
    """Logical corner for a physical one (inverse of map_corner)."""
    steps = validate_orientation(orientation) - 1
    return _rotate(CORNER_RING, Corner.parse(corner), -steps)


def _parse_any(token: Union[Token, str]) -> Token:
    if isinstance(token, (Direction, Corner)):
        return token
    try:
        return Direction.parse(token)
    except ValueError:
        return Corner.parse(token)


def to_physical(token: Union[Token, str], orientation: int) -> Token:
    """Map any logical direction or corner token."""
    token = _parse_any(token)
    if isinstance(token, Direction):
        return map_direction(token, orientation)
    return map_corner(token, orientation)


def to_logical(token: Union[Token, str], orientation: int) -> Token:
    """Map any physical direction or corner token back to screen space."""
    token = _parse_any(token)
    if isinstance(token, Direction):
        return unmap_direction(token, orientation)
    return unmap_corner(token, orientation)


def display_positions(snapshot: PositionSnapshot, orientation: int) -> Dict[str, str]:
    """
    Relabel physical motor readings by logical screen corner.

    The logical top-left cell shows the motor that currently sits at the
    top-left, i.e. map_corner(TOP_LEFT, orientation).
    """
    labels = {
        Corner.TOP_LEFT: "TL",
        Corner.TOP_RIGHT: "TR",
        Corner.BOTTOM_LEFT: "BL",
        Corner.BOTTOM_RIGHT: "BR",
    }
    return {
        labels[logical]: snapshot.get(map_corner(logical, orientation))
        for logical in (Corner.TOP_LEFT, Corner.TOP_RIGHT, Corner.BOTTOM_LEFT, Corner.BOTTOM_RIGHT)
    }
