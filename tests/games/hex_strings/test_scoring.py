"""Tests for the scoring engine."""

from __future__ import annotations

import copy

from hexstrings.games.hex_strings.board import add_lane, create_board
from hexstrings.games.hex_strings.rules import OriginReach, Rules, ScoringRules
from hexstrings.games.hex_strings.scoring import (
    compute_color_counts,
    compute_scores,
    preference_weight,
)


def _rules(radius: int = 2, **scoring) -> Rules:
    return Rules(
        radius=radius,
        random_cardinal_directions=False,
        scoring=ScoringRules(**scoring),
    )


def _board(lanes: dict, origins: list | None = None, radius: int = 2) -> dict:
    board = create_board(radius, origins if origins is not None else [(0, 0)])
    for coord, colors in lanes.items():
        for color in colors:
            add_lane(board, coord, color)
    return board


def _yellow_line() -> dict:
    return _board({(0, -1): "Y", (0, -2): "Y"})


class TestColorCounts:
    def test_empty_board(self) -> None:
        counts = compute_color_counts(_board({}), _rules())
        assert set(counts) == {"R", "O", "Y", "G", "B", "V"}
        assert all(n == 0 for n in counts.values())

    def test_line_to_rim(self) -> None:
        counts = compute_color_counts(_yellow_line(), _rules())
        assert counts["Y"] == 2
        assert sum(counts.values()) == 2

    def test_no_rim_no_points(self) -> None:
        board = _board({(0, -1): "Y"})
        assert compute_color_counts(board, _rules())["Y"] == 0

    def test_without_rim_touch_counts_reachable_tiles(self) -> None:
        board = _board({(0, -1): "Y"})
        assert compute_color_counts(board, _rules(by_rim_touch=False))["Y"] == 1

    def test_shortest_path_drops_detours(self) -> None:
        board = _board({(0, -1): "Y", (0, -2): "Y", (1, -1): "Y"})
        assert compute_color_counts(board, _rules())["Y"] == 2
        assert compute_color_counts(board, _rules(shortest_path=False))["Y"] == 3

    def test_disconnected_rim_color_does_not_score(self) -> None:
        board = _board({(0, -1): "Y", (2, 0): "B"})
        assert compute_color_counts(board, _rules())["B"] == 0


class TestOriginReach:
    def _mixed_board(self) -> dict:
        # Green step off the origin, yellow on the rim beyond it
        return _board({(0, -1): "G", (0, -2): "Y"})

    def test_multi_color_crosses_other_lanes(self) -> None:
        counts = compute_color_counts(self._mixed_board(), _rules())
        assert counts["Y"] == 1
        assert counts["G"] == 0

    def test_same_color_stops_at_other_lanes(self) -> None:
        rules = _rules(origin_reach=OriginReach.SAME_COLOR)
        counts = compute_color_counts(self._mixed_board(), rules)
        assert counts["Y"] == 0

    def test_same_color_line_still_scores(self) -> None:
        rules = _rules(origin_reach=OriginReach.SAME_COLOR)
        assert compute_color_counts(_yellow_line(), rules)["Y"] == 2


class TestOriginToOrigin:
    def _linked(self) -> dict:
        # Two origins joined by blue, with a blue spur off the link
        return _board(
            {(1, 0): "B", (2, 0): "B", (1, 1): "B"},
            origins=[(0, 0), (3, 0)],
            radius=4,
        )

    def test_shortest_link(self) -> None:
        assert compute_color_counts(self._linked(), _rules(radius=4))["B"] == 2

    def test_all_linked_cells(self) -> None:
        rules = _rules(radius=4, shortest_path=False)
        assert compute_color_counts(self._linked(), rules)["B"] == 3

    def test_disabled(self) -> None:
        rules = _rules(radius=4, origin_to_origin=False)
        assert compute_color_counts(self._linked(), rules)["B"] == 0

    def test_single_origin_has_no_bonus(self) -> None:
        board = _board({(1, 0): "B", (2, 0): "B"}, radius=4)
        assert compute_color_counts(board, _rules(radius=4))["B"] == 0


class TestScores:
    PREFS = {
        "alice": {"primary": "Y", "secondary": "G", "tertiary": "B"},
        "bob": {"primary": "R", "secondary": "O", "tertiary": "Y"},
        "carol": {"primary": "R", "secondary": "O", "tertiary": "V"},
    }

    def test_weighted_by_preference(self) -> None:
        scores = compute_scores(_yellow_line(), self.PREFS, _rules())
        assert scores == {"alice": 6, "bob": 2, "carol": 0}

    def test_flat_weights(self) -> None:
        rules = _rules(color_points=(1, 1, 1))
        scores = compute_scores(_yellow_line(), self.PREFS, rules)
        assert scores == {"alice": 2, "bob": 2, "carol": 0}

    def test_preference_weight(self) -> None:
        prefs = self.PREFS["alice"]
        rules = _rules()
        assert preference_weight(prefs, "Y", rules) == 3
        assert preference_weight(prefs, "G", rules) == 2
        assert preference_weight(prefs, "B", rules) == 1
        assert preference_weight(prefs, "R", rules) == 0

    def test_idempotent_and_pure(self) -> None:
        board = _board({(0, -1): "YG", (0, -2): "Y", (1, -1): "G", (2, -2): "G"})
        before = copy.deepcopy(board)
        first = compute_scores(board, self.PREFS, _rules())
        second = compute_scores(board, self.PREFS, _rules())
        assert first == second
        assert board == before
