"""
Property-Based Tests for orientation and parsing invariants.

These verify the mapping is a cyclic group of order 4 and that parsing
never corrupts state, for any input rather than hand-picked examples.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from core.orientation import (
    map_corner,
    map_direction,
    to_logical,
    to_physical,
    unmap_corner,
    unmap_direction,
)
from core.parser import POSITIONS_END, POSITIONS_START, update_positions
from core.types import Corner, Direction, PositionSnapshot


# =============================================================================
# Hypothesis Strategies
# =============================================================================


orientations = st.sampled_from([1, 2, 3, 4])
directions = st.sampled_from(list(Direction))
corners = st.sampled_from(list(Corner))
tokens = st.one_of(directions, corners)

numeric_text = st.integers(min_value=-100000, max_value=100000).map(str)
snapshots = st.builds(PositionSnapshot, numeric_text, numeric_text, numeric_text, numeric_text)


def _compose(a: int, b: int) -> int:
    """Orientation equal to rotating by a, then by b."""
    return (a - 1 + b - 1) % 4 + 1


# =============================================================================
# Cyclic group of order 4
# =============================================================================


class TestCyclicGroup:
    """Orientation mapping behaves as rotation on a 4-ring."""

    @given(token=tokens)
    def test_unit_rotation_four_times_is_identity(self, token):
        """Rotating 90 degrees four times returns the token."""
        result = token
        for _ in range(4):
            result = to_physical(result, 2)
        assert result is token

    @given(token=tokens, start=orientations)
    def test_full_cycle_of_rotations_is_identity(self, token, start):
        """Stepping through every 90 degree step from any orientation comes back."""
        result = token
        orientation = start
        for _ in range(4):
            result = to_physical(result, 2)
            orientation = orientation % 4 + 1
        assert orientation == start
        assert result is token

    @given(token=tokens, a=orientations, b=orientations)
    def test_composition(self, token, a, b):
        """Mapping with a then b equals mapping with the combined rotation."""
        assert to_physical(to_physical(token, a), b) is to_physical(token, _compose(a, b))

    @given(token=tokens)
    def test_orientation_1_identity(self, token):
        assert to_physical(token, 1) is token


# =============================================================================
# Inverse
# =============================================================================


class TestInverse:
    """Display inverse undoes the forward mapping."""

    @given(direction=directions, orientation=orientations)
    def test_direction_inverse(self, direction, orientation):
        assert unmap_direction(map_direction(direction, orientation), orientation) is direction
        assert map_direction(unmap_direction(direction, orientation), orientation) is direction

    @given(corner=corners, orientation=orientations)
    def test_corner_inverse(self, corner, orientation):
        assert unmap_corner(map_corner(corner, orientation), orientation) is corner
        assert map_corner(unmap_corner(corner, orientation), orientation) is corner

    @given(token=tokens, orientation=orientations)
    def test_generic_inverse(self, token, orientation):
        assert to_logical(to_physical(token, orientation), orientation) is token

    @given(orientation=orientations)
    def test_mapping_is_a_permutation(self, orientation):
        assert {map_corner(c, orientation) for c in Corner} == set(Corner)
        assert {map_direction(d, orientation) for d in Direction} == set(Direction)


# =============================================================================
# Position block parsing
# =============================================================================


class TestPositionBlockInvariants:
    """A snapshot only ever changes on an exactly-4-line block."""

    @given(prior=snapshots, payload=st.lists(numeric_text, max_size=8))
    @settings(max_examples=200)
    def test_only_four_lines_update(self, prior, payload):
        lines = ["echo", POSITIONS_START] + payload + [POSITIONS_END, "done"]
        result = update_positions(prior, lines)
        if len(payload) == 4:
            assert result == PositionSnapshot.from_values(tuple(payload))
        else:
            assert result == prior

    @given(prior=snapshots, noise=st.lists(st.text(max_size=20), max_size=10))
    def test_unrelated_lines_ignored(self, prior, noise):
        noise = [line for line in noise if line.strip() not in (POSITIONS_START, POSITIONS_END)]
        assert update_positions(prior, noise) == prior
