"""
Unit tests for orientation mapping.
"""

import pytest
from core.orientation import (
    display_positions,
    map_corner,
    map_direction,
    to_logical,
    to_physical,
    unmap_corner,
    unmap_direction,
)
from core.types import Corner, Direction, PositionSnapshot


class TestDirectionMapping:
    """Directional ring: top -> right -> bottom -> left."""

    @pytest.mark.parametrize("direction", list(Direction))
    def test_orientation_1_is_identity(self, direction):
        assert map_direction(direction, 1) is direction

    def test_orientation_2_top_is_right(self):
        """90 degrees clockwise: the screen top is the device's right side."""
        assert map_direction("top", 2) is Direction.RIGHT

    @pytest.mark.parametrize("logical, physical", [
        (Direction.TOP, Direction.BOTTOM),
        (Direction.RIGHT, Direction.LEFT),
        (Direction.BOTTOM, Direction.TOP),
        (Direction.LEFT, Direction.RIGHT),
    ])
    def test_orientation_3_opposite(self, logical, physical):
        assert map_direction(logical, 3) is physical

    def test_orientation_4_top_is_left(self):
        assert map_direction(Direction.TOP, 4) is Direction.LEFT

    def test_unmap(self):
        assert unmap_direction(Direction.RIGHT, 2) is Direction.TOP


class TestCornerMapping:
    """Corner ring: top-left -> top-right -> bottom-right -> bottom-left."""

    def test_orientation_3_top_left_is_bottom_right(self):
        assert map_corner("top-left", 3) is Corner.BOTTOM_RIGHT

    @pytest.mark.parametrize("logical, physical", [
        (Corner.TOP_LEFT, Corner.TOP_RIGHT),
        (Corner.TOP_RIGHT, Corner.BOTTOM_RIGHT),
        (Corner.BOTTOM_RIGHT, Corner.BOTTOM_LEFT),
        (Corner.BOTTOM_LEFT, Corner.TOP_LEFT),
    ])
    def test_orientation_2(self, logical, physical):
        assert map_corner(logical, 2) is physical

    def test_unmap(self):
        assert unmap_corner(Corner.BOTTOM_RIGHT, 3) is Corner.TOP_LEFT


class TestGenericMapping:
    """to_physical / to_logical dispatch on ring."""

    def test_to_physical_direction(self):
        assert to_physical("tp", 2) is Direction.RIGHT

    def test_to_physical_corner(self):
        assert to_physical("tl", 2) is Corner.TOP_RIGHT

    def test_to_logical(self):
        assert to_logical(Corner.TOP_RIGHT, 2) is Corner.TOP_LEFT

    @pytest.mark.parametrize("orientation", [0, 5, 2.0])
    def test_invalid_orientation(self, orientation):
        with pytest.raises(ValueError):
            map_direction(Direction.TOP, orientation)


class TestDisplayPositions:
    """Physical readings relabelled by screen corner."""

    def test_identity(self):
        snapshot = PositionSnapshot(tl="1", tr="2", bl="3", br="4")
        assert display_positions(snapshot, 1) == {"TL": "1", "TR": "2", "BL": "3", "BR": "4"}

    def test_rotated_180(self):
        """Upside down: the motor at screen top-left is the physical bottom-right."""
        snapshot = PositionSnapshot(tl="1", tr="2", bl="3", br="4")
        assert display_positions(snapshot, 3) == {"TL": "4", "TR": "3", "BL": "2", "BR": "1"}

    def test_rotated_90(self):
        snapshot = PositionSnapshot(tl="1", tr="2", bl="3", br="4")
        assert display_positions(snapshot, 2) == {"TL": "2", "TR": "4", "BL": "1", "BR": "3"}
