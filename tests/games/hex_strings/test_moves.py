"""Tests for move payloads and enumeration."""

from __future__ import annotations

from hexstrings.games.hex_strings import moves
from hexstrings.games.hex_strings.board import add_lane, create_board
from hexstrings.games.hex_strings.rules import Rules
from hexstrings.games.hex_strings.state import apply_move_in_place, setup, validate_move


def _rules(**overrides) -> Rules:
    base = {"radius": 2, "random_cardinal_directions": False, "deck_size": 20}
    base.update(overrides)
    return Rules(**base)


def _make_state(rules: Rules, hand: list) -> dict:
    state = setup(["a", "b"], rules, seed=4)
    state["hands"]["a"] = hand
    return state


def test_payload_shapes() -> None:
    assert moves.play_card(1, "Y", 0, -1) == {
        "move": "play_card", "hand_index": 1, "color": "Y", "q": 0, "r": -1,
    }
    assert moves.rotate_tile(0, -1, 2, 0) == {
        "move": "rotate_tile", "q": 0, "r": -1, "delta": 2, "hand_index": 0,
    }
    assert moves.stash(2) == {"move": "stash", "hand_index": 2}
    assert moves.take_treasure(0) == {"move": "take_treasure", "index": 0}
    assert moves.end_turn() == {"move": "end_turn"}


def test_move_key_ignores_insertion_order() -> None:
    a = {"move": "stash", "hand_index": 0}
    b = {"hand_index": 0, "move": "stash"}
    assert moves.move_key(a) == moves.move_key(b)


class TestCandidateCells:
    def test_empty_board_offers_every_free_cell(self) -> None:
        board = create_board(2, [(0, 0)])
        assert len(moves.candidate_cells(board)) == 18

    def test_frontier_only(self) -> None:
        board = create_board(2, [(0, 0)])
        add_lane(board, (0, -1), "Y")
        cells = moves.candidate_cells(board)
        assert (0, -1) in cells
        assert (0, -2) in cells
        assert (0, 2) not in cells
        assert (0, 0) not in cells


class TestEnumerate:
    def test_opening_moves(self) -> None:
        rules = _rules()
        state = _make_state(rules, [["Y", "G"]])
        assert moves.enumerate_moves(state, "a", rules) == [
            moves.play_card(0, "Y", 0, -1),
            moves.play_card(0, "G", 1, -1),
            moves.stash(0),
            moves.end_turn(),
        ]

    def test_not_your_turn(self) -> None:
        rules = _rules()
        state = _make_state(rules, [["Y", "G"]])
        assert moves.enumerate_moves(state, "b", rules) == []

    def test_full_treasure_drops_stash(self) -> None:
        rules = _rules(treasure_max=1)
        state = _make_state(rules, [["Y", "G"]])
        state["treasure"] = [["R", "O"]]
        listed = moves.enumerate_moves(state, "a", rules)
        assert moves.stash(0) not in listed
        assert moves.play_card(0, "Y", 0, -1) in listed

    def test_full_listing_adds_rotations_and_takes(self) -> None:
        rules = _rules()
        state = _make_state(rules, [["Y", "G"], ["R", "O"]])
        apply_move_in_place(state, "a", moves.play_card(0, "Y", 0, -1), rules)
        state["treasure"] = [["B", "V"]]

        short = moves.enumerate_moves(state, "a", rules)
        full = moves.enumerate_moves(state, "a", rules, full=True)
        rotations = [m for m in full if m["move"] == "rotate_tile"]
        assert len(rotations) == 4
        assert moves.take_treasure(0) in full
        assert all(m["move"] != "rotate_tile" for m in short)
        assert full[-1] == moves.end_turn()

    def test_every_listed_move_validates(self) -> None:
        rules = _rules(outward_rule="none")
        state = _make_state(rules, [["Y", "G"], ["B", "V", "R"]])
        state["treasure"] = [["R", "O"]]
        for move in moves.enumerate_moves(state, "a", rules, full=True):
            assert validate_move(state, "a", move, rules) is None

    def test_game_over_lists_nothing(self) -> None:
        rules = _rules(equal_turns=False)
        state = _make_state(rules, [["Y", "G"]])
        state["deck"] = []
        apply_move_in_place(state, "a", moves.end_turn(), rules)
        assert moves.enumerate_moves(state, "b", rules) == []
