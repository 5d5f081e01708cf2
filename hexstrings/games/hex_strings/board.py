"""Board state management for Hex Strings.

The board is a plain dict so it can be deep-copied and serialized as is.
Per-cell data lives in flat lists indexed by ``coord_index`` (an arena over
the hexagon of the given radius, ordered by ``q`` then ``r``):

    {"radius": R, "lanes": [[color, ...], ...], "rotations": [int, ...],
     "origins": [[q, r], ...]}

Origins never hold lanes and always keep rotation 0.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterator
from functools import lru_cache

from hexstrings.games.hex_strings.rules import OriginDirection, OriginRule, Rules
from hexstrings.games.hex_strings.types import (
    BASE_DIRECTIONS,
    Coord,
    hex_distance,
    in_bounds,
    ring_index,
)

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Arena indexing
# ------------------------------------------------------------------


@lru_cache(maxsize=16)
def _row_offsets(radius: int) -> tuple[int, ...]:
    """Arena offset of the first cell of each row ``q = -radius..radius``."""
    offsets = []
    total = 0
    for q in range(-radius, radius + 1):
        offsets.append(total)
        total += 2 * radius + 1 - abs(q)
    offsets.append(total)
    return tuple(offsets)


def cell_count(radius: int) -> int:
    return _row_offsets(radius)[-1]


def coord_index(coord: Coord, radius: int) -> int:
    """Arena index of an in-bounds coordinate."""
    q, r = coord
    return _row_offsets(radius)[q + radius] + r - max(-radius, -q - radius)


def index_coord(index: int, radius: int) -> Coord:
    """Inverse of coord_index."""
    return board_coords(radius)[index]


@lru_cache(maxsize=16)
def board_coords(radius: int) -> tuple[Coord, ...]:
    """All in-bounds coordinates, in arena order."""
    return tuple(
        (q, r)
        for q in range(-radius, radius + 1)
        for r in range(max(-radius, -q - radius), min(radius, -q + radius) + 1)
    )


@lru_cache(maxsize=16)
def rim_coords(radius: int) -> tuple[Coord, ...]:
    return tuple(c for c in board_coords(radius) if ring_index(c) == radius)


# ------------------------------------------------------------------
# Construction
# ------------------------------------------------------------------


def create_board(
    radius: int,
    origins: list[Coord],
    center_seed: str | None = None,
) -> dict:
    """Create a board with every in-bounds cell empty."""
    n = cell_count(radius)
    board = {
        "radius": radius,
        "lanes": [[] for _ in range(n)],
        "rotations": [0] * n,
        "origins": [[q, r] for q, r in origins],
    }
    if center_seed is not None and (0, 0) not in origins:
        board["lanes"][coord_index((0, 0), radius)].append(center_seed)
    return board


def choose_origins(rules: Rules, rng: random.Random) -> list[Coord]:
    """Pick origin coordinates according to the origin rule.

    Random origins keep ``min_origin_distance`` empty cells between each
    other and stay at least that far inside the rim. When the board cannot
    fit ``origin_count`` origins, as many as fit are returned.
    """
    if rules.origin_rule == OriginRule.CENTER:
        return [(0, 0)]

    chosen: list[Coord] = []
    if rules.origin_rule == OriginRule.RANDOM_AND_CENTER:
        chosen.append((0, 0))

    min_gap = rules.min_origin_distance + 1
    max_ring = rules.radius - rules.min_origin_distance

    if rules.origin_direction == OriginDirection.ALIGNED:
        candidates = _aligned_candidates(rules, rng, max_ring, rules.origin_count - len(chosen))
    else:
        candidates = [c for c in board_coords(rules.radius) if 1 <= ring_index(c) <= max_ring]
        rng.shuffle(candidates)

    for c in candidates:
        if len(chosen) >= rules.origin_count:
            break
        if all(hex_distance(c, o) >= min_gap for o in chosen):
            chosen.append(c)

    if len(chosen) < rules.origin_count:
        logger.warning(
            "Placed %d of %d origins (radius=%d, min_origin_distance=%d)",
            len(chosen), rules.origin_count, rules.radius, rules.min_origin_distance,
        )
    return chosen


def _aligned_candidates(
    rules: Rules, rng: random.Random, max_ring: int, wanted: int,
) -> list[Coord]:
    """Points evenly spaced around the center along the base directions."""
    ring = min(max_ring, max(1, rules.radius // 2))
    if ring < 1 or wanted <= 0:
        return []
    n = min(wanted, len(BASE_DIRECTIONS))
    start = rng.randrange(len(BASE_DIRECTIONS))
    out = []
    for i in range(n):
        dq, dr = BASE_DIRECTIONS[(start + (i * len(BASE_DIRECTIONS)) // n) % len(BASE_DIRECTIONS)]
        out.append((dq * ring, dr * ring))
    return out


# ------------------------------------------------------------------
# Queries
# ------------------------------------------------------------------


def origin_set(board: dict) -> set[Coord]:
    return {(q, r) for q, r in board["origins"]}


def lanes_at(board: dict, coord: Coord) -> list[str]:
    """Lanes on *coord*; empty for out-of-bounds cells."""
    radius = board["radius"]
    if not in_bounds(coord, radius):
        return []
    return board["lanes"][coord_index(coord, radius)]


def rotation_at(board: dict, coord: Coord) -> int:
    radius = board["radius"]
    if not in_bounds(coord, radius):
        return 0
    return board["rotations"][coord_index(coord, radius)]


def is_occupied(board: dict, coord: Coord) -> bool:
    return len(lanes_at(board, coord)) > 0


def board_is_empty(board: dict) -> bool:
    return not any(board["lanes"])


def iter_tiles(board: dict) -> Iterator[tuple[Coord, list[str]]]:
    """Yield ``(coord, lanes)`` for every occupied cell."""
    for coord, lanes in zip(board_coords(board["radius"]), board["lanes"]):
        if lanes:
            yield coord, lanes


def lane_count(board: dict) -> int:
    return sum(len(lanes) for lanes in board["lanes"])


# ------------------------------------------------------------------
# Mutation (callers check legality first)
# ------------------------------------------------------------------


def add_lane(board: dict, coord: Coord, color: str) -> None:
    board["lanes"][coord_index(coord, board["radius"])].append(color)


def set_rotation(board: dict, coord: Coord, rotation: int) -> None:
    board["rotations"][coord_index(coord, board["radius"])] = rotation % 6
