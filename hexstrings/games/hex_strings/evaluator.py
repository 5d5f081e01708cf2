"""Hand-crafted move values used by the greedy bot and to seed the search."""

from __future__ import annotations

import copy

from hexstrings.games.hex_strings.board import add_lane
from hexstrings.games.hex_strings.rules import Rules
from hexstrings.games.hex_strings.scoring import compute_scores, preference_weight
from hexstrings.games.hex_strings.types import MoveType, ring_index

# Share of a card's hand value lost when it is spent
CARD_COST = 0.25
IMMEDIATE_GAIN_WEIGHT = 2.0


def card_value(card: list[str], prefs: dict[str, str], rules: Rules) -> int:
    """What a card is worth to a player: the best preference weight on it."""
    return max((preference_weight(prefs, c, rules) for c in card), default=0)


def draw_expected_value(deck: list[list[str]], prefs: dict[str, str], rules: Rules) -> float:
    """Mean card value over the remaining deck (0 when it is empty)."""
    if not deck:
        return 0.0
    return sum(card_value(card, prefs, rules) for card in deck) / len(deck)


def hand_quality(game_data: dict, player_id: str, rules: Rules) -> float:
    prefs = game_data["prefs"][player_id]
    return float(sum(card_value(card, prefs, rules) for card in game_data["hands"][player_id]))


def player_score(board: dict, prefs: dict[str, str], rules: Rules, player_id: str = "_") -> int:
    return compute_scores(board, {player_id: prefs}, rules)[player_id]


def move_value(
    game_data: dict,
    player_id: str,
    move: dict,
    rules: Rules,
    base_score: int | None = None,
) -> float:
    """Heuristic value of a legal *move*. ``end_turn`` is worth 0.

    *base_score* is the player's current score; pass it when valuing many
    moves from the same position.
    """
    kind = move["move"]
    prefs = game_data["prefs"][player_id]
    hand = game_data["hands"][player_id]

    if kind == MoveType.PLAY_CARD:
        board = game_data["board"]
        coord = (move["q"], move["r"])
        if base_score is None:
            base_score = player_score(board, prefs, rules)
        after = copy.deepcopy(board)
        add_lane(after, coord, move["color"])
        gain = player_score(after, prefs, rules) - base_score
        return (
            preference_weight(prefs, move["color"], rules)
            + ring_index(coord) / board["radius"]
            + IMMEDIATE_GAIN_WEIGHT * gain
            - CARD_COST * card_value(hand[move["hand_index"]], prefs, rules)
        )

    if kind == MoveType.STASH:
        return (
            draw_expected_value(game_data["deck"], prefs, rules)
            - card_value(hand[move["hand_index"]], prefs, rules)
        )

    if kind == MoveType.TAKE_TREASURE:
        return CARD_COST * card_value(game_data["treasure"][move["index"]], prefs, rules)

    if kind == MoveType.ROTATE_TILE:
        return -CARD_COST * card_value(hand[move["hand_index"]], prefs, rules)

    return 0.0


def rank_by_heuristic(
    game_data: dict,
    player_id: str,
    moves: list[dict],
    rules: Rules,
) -> list[tuple[dict, float]]:
    """Moves with their heuristic values, best first. Stable for equal values."""
    base = player_score(game_data["board"], game_data["prefs"][player_id], rules)
    scored = [(m, move_value(game_data, player_id, m, rules, base)) for m in moves]
    return sorted(scored, key=lambda item: -item[1])
