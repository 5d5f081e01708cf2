"""Move payloads and legal-move enumeration."""

from __future__ import annotations

from hexstrings.games.hex_strings.board import board_coords, board_is_empty, is_occupied, origin_set
from hexstrings.games.hex_strings.placement import ROTATION_DELTAS, can_place, rotation_error
from hexstrings.games.hex_strings.rules import Rules
from hexstrings.games.hex_strings.state import current_player, game_rules, is_game_over
from hexstrings.games.hex_strings.types import Coord, MoveType, hex_neighbors


def play_card(hand_index: int, color: str, q: int, r: int) -> dict:
    return {"move": MoveType.PLAY_CARD.value, "hand_index": hand_index, "color": color, "q": q, "r": r}


def rotate_tile(q: int, r: int, delta: int, hand_index: int) -> dict:
    return {"move": MoveType.ROTATE_TILE.value, "q": q, "r": r, "delta": delta, "hand_index": hand_index}


def stash(hand_index: int) -> dict:
    return {"move": MoveType.STASH.value, "hand_index": hand_index}


def take_treasure(index: int) -> dict:
    return {"move": MoveType.TAKE_TREASURE.value, "index": index}


def set_prefs(primary: str, secondary: str, tertiary: str) -> dict:
    return {
        "move": MoveType.SET_PREFS.value,
        "primary": primary, "secondary": secondary, "tertiary": tertiary,
    }


def end_turn() -> dict:
    return {"move": MoveType.END_TURN.value}


def move_key(move: dict) -> tuple:
    """Hashable identity of a move payload."""
    return tuple(sorted(move.items()))


def candidate_cells(board: dict) -> list[Coord]:
    """Cells a lane could possibly go to: next to a tile or an origin.

    On an empty board every non-origin cell qualifies.
    """
    origins = origin_set(board)
    cells = [c for c in board_coords(board["radius"]) if c not in origins]
    if board_is_empty(board):
        return cells
    return [
        c for c in cells
        if any(n in origins or is_occupied(board, n) for n in hex_neighbors(c))
    ]


def enumerate_moves(
    game_data: dict,
    player_id: str,
    rules: Rules | None = None,
    *,
    full: bool = False,
) -> list[dict]:
    """Legal moves for *player_id*; empty when it is not their turn.

    By default only placements, stashes and ``end_turn`` are listed. With
    ``full=True`` rotations and treasure takes are included as well.
    Preference changes (``set_prefs``) are never listed.
    """
    rules = game_rules(game_data, rules)
    if is_game_over(game_data, rules) is not None:
        return []
    if player_id != current_player(game_data):
        return []

    board = game_data["board"]
    hand = game_data["hands"][player_id]
    cells = candidate_cells(board)

    moves: list[dict] = []
    placeable: dict[str, list[Coord]] = {}
    for hand_index, card in enumerate(hand):
        for color in card:
            if color not in placeable:
                placeable[color] = [c for c in cells if can_place(board, c, color, rules)]
            for q, r in placeable[color]:
                moves.append(play_card(hand_index, color, q, r))

    if len(game_data["treasure"]) < rules.treasure_max:
        moves.extend(stash(i) for i in range(len(hand)))

    if full:
        moves.extend(_rotation_moves(board, hand, rules))
        moves.extend(take_treasure(i) for i in range(len(game_data["treasure"])))

    moves.append(end_turn())
    return moves


def _rotation_moves(board: dict, hand: list[list[str]], rules: Rules) -> list[dict]:
    origins = origin_set(board)
    tiles = [c for c in board_coords(board["radius"]) if c not in origins and is_occupied(board, c)]
    out = []
    for hand_index, card in enumerate(hand):
        for q, r in tiles:
            for delta in ROTATION_DELTAS:
                if rotation_error(board, (q, r), delta, card, rules) is None:
                    out.append(rotate_tile(q, r, delta, hand_index))
    return out
