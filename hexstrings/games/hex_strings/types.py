"""Domain types and hex geometry for Hex Strings.

Coordinates are axial ``(q, r)`` tuples. The six canonical edges of a hex
are numbered clockwise from North; a tile with rotation ``k`` shows on edge
``i`` the color that an unrotated tile shows on edge ``i - k``.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from pydantic import BaseModel, model_validator

Coord = tuple[int, int]


class Color(str, Enum):
    RED = "R"
    ORANGE = "O"
    YELLOW = "Y"
    GREEN = "G"
    BLUE = "B"
    VIOLET = "V"


ALL_COLORS: list[str] = [c.value for c in Color]


class MoveType(str, Enum):
    PLAY_CARD = "play_card"
    ROTATE_TILE = "rotate_tile"
    STASH = "stash"
    TAKE_TREASURE = "take_treasure"
    SET_PREFS = "set_prefs"
    END_TURN = "end_turn"


class PlayerPreferences(BaseModel):
    """Ordered scoring colors of one player."""

    primary: Color
    secondary: Color
    tertiary: Color

    @model_validator(mode="after")
    def _check_distinct(self) -> PlayerPreferences:
        if len({self.primary, self.secondary, self.tertiary}) != 3:
            raise ValueError("Preference colors must be distinct")
        return self

    def to_dict(self) -> dict[str, str]:
        return {
            "primary": self.primary.value,
            "secondary": self.secondary.value,
            "tertiary": self.tertiary.value,
        }


# Canonical hex edge directions going clockwise from North (edges 0-5).
BASE_DIRECTIONS: list[Coord] = [
    (0, -1),   # N  (edge 0)
    (1, -1),   # NE (edge 1)
    (1, 0),    # E  (edge 2)
    (0, 1),    # SE (edge 3)
    (-1, 1),   # SW (edge 4)
    (-1, 0),   # NW (edge 5)
]

# Default edge colors clockwise from North: YGBVRO
BASE_EDGE_COLORS: list[str] = ["Y", "G", "B", "V", "R", "O"]

NUM_EDGES = 6


def ring_index(coord: Coord) -> int:
    """Hex distance from the center."""
    q, r = coord
    return max(abs(q), abs(r), abs(q + r))


def hex_distance(a: Coord, b: Coord) -> int:
    return ring_index((a[0] - b[0], a[1] - b[1]))


def in_bounds(coord: Coord, radius: int) -> bool:
    return ring_index(coord) <= radius


def hex_neighbors(coord: Coord) -> list[Coord]:
    """Return the 6 axial-coordinate neighbors of *coord*, in edge order."""
    q, r = coord
    return [(q + dq, r + dr) for dq, dr in BASE_DIRECTIONS]


def edge_index_for(delta: Coord) -> int:
    """Edge index whose direction is *delta*. Raises ValueError otherwise."""
    try:
        return BASE_DIRECTIONS.index((delta[0], delta[1]))
    except ValueError:
        raise ValueError(f"Not a neighbor offset: {delta}") from None


def edge_color(edge_index: int, rotation: int, edge_colors: Sequence[str]) -> str:
    """Color shown on *edge_index* of a tile rotated clockwise by *rotation*."""
    return edge_colors[(edge_index - rotation) % NUM_EDGES]


def lane_source(coord: Coord, color: str, edge_colors: Sequence[str]) -> Coord:
    """The cell a lane of *color* at *coord* comes from."""
    dq, dr = BASE_DIRECTIONS[edge_colors.index(color)]
    return (coord[0] - dq, coord[1] - dr)
