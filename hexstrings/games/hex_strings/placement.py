"""Placement legality: where a lane of a given color may go.

Checks run in a fixed order and the first failure wins:

1. the cell is on the board
2. the cell is not an origin
3. the cell has room for another lane (capacity by ring and mode)
4. the cell touches an occupied cell or an origin (or the board is empty)
5. the directional rule (``none`` / ``outwardOnly`` / ``dirOnly`` / ``dirOrOutward``)
6. optional rules: no building from the rim, no intersecting sources,
   fork support (path mode)
"""

from __future__ import annotations

from hexstrings.games.hex_strings.board import (
    add_lane,
    board_is_empty,
    is_occupied,
    lanes_at,
    origin_set,
    rotation_at,
    set_rotation,
)
from hexstrings.games.hex_strings.flow import fork_support_ok
from hexstrings.games.hex_strings.rules import GameMode, OutwardRule, RotatePolicy, Rules
from hexstrings.games.hex_strings.types import (
    Coord,
    edge_color,
    edge_index_for,
    hex_neighbors,
    in_bounds,
    lane_source,
    ring_index,
)

# 180 degree turns (3) and no-op turns (0) are never allowed
ROTATION_DELTAS: tuple[int, ...] = (1, 2, 4, 5)


def placement_error(board: dict, coord: Coord, color: str, rules: Rules) -> str | None:
    """Return why *color* cannot be placed at *coord*, or None if it can."""
    radius = board["radius"]
    if not in_bounds(coord, radius):
        return f"{coord} is off the board"

    origins = origin_set(board)
    if coord in origins:
        return f"{coord} is an origin"

    if color not in rules.colors:
        return f"Unknown color: {color}"

    lanes = lanes_at(board, coord)
    if len(lanes) + 1 > rules.capacity(ring_index(coord)):
        return f"{coord} is full"

    if not _is_connected(board, coord, origins):
        return f"{coord} is not adjacent to an occupied cell or origin"

    if not satisfies_direction_rule(board, coord, color, rules, origins):
        return f"{color} at {coord} breaks the {rules.outward_rule.value} rule"

    source = lane_source(coord, color, rules.edge_colors)
    if rules.no_build_from_rim and ring_index(source) >= radius:
        return f"{color} at {coord} would be built from the rim"

    if rules.no_intersect:
        for existing in lanes:
            if lane_source(coord, existing, rules.edge_colors) != source:
                return f"{color} at {coord} would intersect a lane from another source"

    if (
        rules.fork_support
        and rules.mode == GameMode.PATH
        and not fork_support_ok(board, coord, color, rules)
    ):
        return f"{color} at {coord} would create an unsupported fork"

    return None


def can_place(board: dict, coord: Coord, color: str, rules: Rules) -> bool:
    return placement_error(board, coord, color, rules) is None


def apply_place(board: dict, coord: Coord, color: str) -> None:
    """Add a lane. Assumes can_place() has already returned True."""
    add_lane(board, coord, color)


def _is_connected(board: dict, coord: Coord, origins: set[Coord]) -> bool:
    for n in hex_neighbors(coord):
        if n in origins or is_occupied(board, n):
            return True
    return board_is_empty(board)


def satisfies_direction_rule(
    board: dict,
    coord: Coord,
    color: str,
    rules: Rules,
    origins: set[Coord] | None = None,
) -> bool:
    if rules.outward_rule == OutwardRule.NONE:
        return True
    if origins is None:
        origins = origin_set(board)

    if rules.outward_rule == OutwardRule.OUTWARD_ONLY:
        return _outward_ok(board, coord, origins)
    if rules.outward_rule == OutwardRule.DIR_ONLY:
        return _direction_ok(board, coord, color, rules, origins)
    return _outward_ok(board, coord, origins) or _direction_ok(board, coord, color, rules, origins)


def _outward_ok(board: dict, coord: Coord, origins: set[Coord]) -> bool:
    """Some occupied neighbor (origins included) is no further out than *coord*."""
    target_ring = ring_index(coord)
    return any(
        (n in origins or is_occupied(board, n)) and ring_index(n) <= target_ring
        for n in hex_neighbors(coord)
    )


def _direction_ok(
    board: dict, coord: Coord, color: str, rules: Rules, origins: set[Coord],
) -> bool:
    """Some occupied neighbor shows *color* on the edge facing *coord*."""
    for n in hex_neighbors(coord):
        if n in origins:
            rotation = 0
        elif is_occupied(board, n):
            rotation = rotation_at(board, n)
        else:
            continue
        facing = edge_index_for((coord[0] - n[0], coord[1] - n[1]))
        if edge_color(facing, rotation, rules.edge_colors) == color:
            return True
    return False


# ------------------------------------------------------------------
# Rotation
# ------------------------------------------------------------------


def rotation_error(
    board: dict,
    coord: Coord,
    delta: int,
    card: list[str],
    rules: Rules,
) -> str | None:
    """Return why the tile at *coord* cannot be turned by *delta*, or None."""
    if rules.discard_to_rotate == RotatePolicy.DISABLED:
        return "Rotation is disabled"
    if delta not in ROTATION_DELTAS:
        return f"Invalid rotation delta: {delta}"
    if not in_bounds(coord, board["radius"]):
        return f"{coord} is off the board"
    if coord in origin_set(board):
        return f"{coord} is an origin"

    lanes = lanes_at(board, coord)
    if not lanes:
        return f"{coord} has no lanes to rotate"
    if rules.discard_to_rotate == RotatePolicy.MATCH_COLOR and not set(card) & set(lanes):
        return "Card shares no color with the tile"
    return None


def apply_rotation(board: dict, coord: Coord, delta: int) -> None:
    """Turn a tile clockwise. Assumes rotation_error() returned None."""
    set_rotation(board, coord, rotation_at(board, coord) + delta)
