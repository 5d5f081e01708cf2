"""Tests for placement and rotation legality."""

from __future__ import annotations

from hexstrings.games.hex_strings.board import add_lane, create_board, lanes_at, rotation_at, set_rotation
from hexstrings.games.hex_strings.placement import (
    apply_place,
    apply_rotation,
    can_place,
    placement_error,
    rotation_error,
)
from hexstrings.games.hex_strings.rules import OutwardRule, RotatePolicy, Rules


def _rules(**overrides) -> Rules:
    base = {
        "mode": "hex",
        "radius": 2,
        "random_cardinal_directions": False,
        "outward_rule": OutwardRule.DIR_ONLY,
    }
    base.update(overrides)
    return Rules(**base)


def _center_board(radius: int = 2) -> dict:
    return create_board(radius, [(0, 0)])


class TestDirectionalScenario:
    def test_yellow_leaves_origin_north(self) -> None:
        assert can_place(_center_board(), (0, -1), "Y", _rules())

    def test_wrong_edge_color_fails(self) -> None:
        error = placement_error(_center_board(), (0, -1), "G", _rules())
        assert error is not None
        assert "dirOnly" in error

    def test_chain_continues_from_new_tile(self) -> None:
        board = _center_board()
        rules = _rules()
        apply_place(board, (0, -1), "Y")
        assert can_place(board, (0, -2), "Y", rules)

    def test_rotation_changes_facing_color(self) -> None:
        board = _center_board()
        rules = _rules()
        apply_place(board, (0, -1), "Y")
        set_rotation(board, (0, -1), 1)
        assert not can_place(board, (0, -2), "Y", rules)
        assert can_place(board, (0, -2), "O", rules)

    def test_each_origin_edge_fits_one_color(self) -> None:
        board = _center_board()
        rules = _rules()
        assert can_place(board, (1, 0), "B", rules)
        assert can_place(board, (-1, 0), "O", rules)
        assert not can_place(board, (1, 0), "Y", rules)


class TestBasicChecks:
    def test_off_board(self) -> None:
        assert "off the board" in placement_error(_center_board(), (3, 0), "Y", _rules())

    def test_origin(self) -> None:
        assert "origin" in placement_error(_center_board(), (0, 0), "Y", _rules())

    def test_unknown_color(self) -> None:
        assert "Unknown color" in placement_error(_center_board(), (0, -1), "X", _rules())

    def test_capacity(self) -> None:
        board = _center_board()
        rules = _rules(outward_rule=OutwardRule.NONE)
        apply_place(board, (0, -1), "Y")
        apply_place(board, (0, -1), "G")
        assert "full" in placement_error(board, (0, -1), "B", rules)

    def test_outer_ring_holds_one_lane(self) -> None:
        board = create_board(3, [(0, 0)])
        rules = _rules(radius=3, outward_rule=OutwardRule.NONE)
        apply_place(board, (0, -1), "Y")
        apply_place(board, (0, -2), "Y")
        apply_place(board, (0, -3), "Y")
        assert not can_place(board, (0, -3), "G", rules)

    def test_path_mode_capacity(self) -> None:
        board = _center_board()
        rules = _rules(mode="path", max_lanes_per_path=3, outward_rule=OutwardRule.NONE)
        for color in ("Y", "G", "B"):
            apply_place(board, (0, -1), color)
        assert not can_place(board, (0, -1), "V", rules)

    def test_must_touch_tile_or_origin(self) -> None:
        board = _center_board()
        rules = _rules(outward_rule=OutwardRule.NONE)
        apply_place(board, (0, -1), "Y")
        assert "not adjacent" in placement_error(board, (0, 2), "Y", rules)
        assert can_place(board, (0, -2), "Y", rules)

    def test_first_lane_may_go_anywhere(self) -> None:
        rules = _rules(outward_rule=OutwardRule.NONE)
        assert can_place(create_board(2, []), (1, 1), "R", rules)
        assert can_place(_center_board(), (0, 2), "R", rules)

    def test_apply_place_appends(self) -> None:
        board = _center_board()
        apply_place(board, (0, -1), "Y")
        assert lanes_at(board, (0, -1)) == ["Y"]


class TestOutwardRules:
    def _inner_board(self) -> dict:
        board = create_board(2, [])
        add_lane(board, (0, -2), "Y")
        return board

    def test_outward_only_blocks_inward(self) -> None:
        rules = _rules(outward_rule=OutwardRule.OUTWARD_ONLY)
        assert not can_place(self._inner_board(), (0, -1), "R", rules)

    def test_outward_only_allows_same_ring(self) -> None:
        rules = _rules(outward_rule=OutwardRule.OUTWARD_ONLY)
        assert can_place(self._inner_board(), (1, -2), "R", rules)

    def test_outward_only_counts_origins(self) -> None:
        rules = _rules(outward_rule=OutwardRule.OUTWARD_ONLY)
        assert can_place(_center_board(), (1, 0), "R", rules)

    def test_dir_or_outward(self) -> None:
        rules = _rules(outward_rule=OutwardRule.DIR_OR_OUTWARD)
        # Edge 3 of the rim tile faces (0,-1) and shows V
        assert can_place(self._inner_board(), (0, -1), "V", rules)
        assert not can_place(self._inner_board(), (0, -1), "R", rules)


class TestOptionalRules:
    def test_no_build_from_rim(self) -> None:
        board = create_board(2, [])
        add_lane(board, (0, -2), "Y")
        rules = _rules(outward_rule=OutwardRule.NONE, no_build_from_rim=True)
        assert "rim" in placement_error(board, (0, -1), "V", rules)
        assert can_place(board, (0, -1), "Y", rules)

    def test_no_intersect(self) -> None:
        board = _center_board()
        rules = _rules(outward_rule=OutwardRule.NONE, no_intersect=True)
        apply_place(board, (0, -1), "Y")
        assert "intersect" in placement_error(board, (0, -1), "G", rules)
        assert can_place(board, (0, -1), "Y", rules)


class TestRotation:
    def _board(self) -> dict:
        board = _center_board()
        apply_place(board, (0, -1), "Y")
        return board

    def test_legal_rotation(self) -> None:
        assert rotation_error(self._board(), (0, -1), 2, ["R", "O"], _rules()) is None

    def test_disabled(self) -> None:
        rules = _rules(discard_to_rotate=RotatePolicy.DISABLED)
        assert rotation_error(self._board(), (0, -1), 1, ["Y", "G"], rules) == "Rotation is disabled"

    def test_half_turn_not_allowed(self) -> None:
        assert "delta" in rotation_error(self._board(), (0, -1), 3, ["Y", "G"], _rules())
        assert "delta" in rotation_error(self._board(), (0, -1), 0, ["Y", "G"], _rules())

    def test_empty_tile(self) -> None:
        assert "no lanes" in rotation_error(self._board(), (1, 0), 1, ["Y", "G"], _rules())

    def test_origin(self) -> None:
        assert "origin" in rotation_error(self._board(), (0, 0), 1, ["Y", "G"], _rules())

    def test_match_color(self) -> None:
        rules = _rules(discard_to_rotate=RotatePolicy.MATCH_COLOR)
        assert "shares no color" in rotation_error(self._board(), (0, -1), 1, ["R", "O"], rules)
        assert rotation_error(self._board(), (0, -1), 1, ["Y", "B"], rules) is None

    def test_apply_rotation_wraps(self) -> None:
        board = self._board()
        set_rotation(board, (0, -1), 5)
        apply_rotation(board, (0, -1), 2)
        assert rotation_at(board, (0, -1)) == 1
