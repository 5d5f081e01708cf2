"""Rule configuration for Hex Strings.

A single immutable ``Rules`` value is passed explicitly to every engine
function. Two presets mirror the two ways the game is played: ``HEX_RULES``
(lanes on hex cells, narrow capacity) and ``PATH_RULES`` (dot-to-dot lanes
with fork support).
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from hexstrings.config import settings
from hexstrings.engine.errors import ConfigError
from hexstrings.games.hex_strings.types import (
    ALL_COLORS,
    BASE_EDGE_COLORS,
    NUM_EDGES,
)


class GameMode(str, Enum):
    HEX = "hex"
    PATH = "path"


class OutwardRule(str, Enum):
    NONE = "none"
    OUTWARD_ONLY = "outwardOnly"
    DIR_ONLY = "dirOnly"
    DIR_OR_OUTWARD = "dirOrOutward"


class RotatePolicy(str, Enum):
    ANY = "any"
    MATCH_COLOR = "match-color"  # paying card must share a color with the tile
    DISABLED = "disabled"


class ForkFormulation(str, Enum):
    MAX_FLOW = "max_flow"
    LOCAL_DEGREE = "local_degree"


class OriginReach(str, Enum):
    MULTI_COLOR = "multi_color"
    SAME_COLOR = "same_color"


class OriginRule(str, Enum):
    CENTER = "center"
    RANDOM = "random"
    RANDOM_AND_CENTER = "random-and-center"


class OriginDirection(str, Enum):
    ALIGNED = "aligned"
    RANDOM = "random"


class DeckCounts(BaseModel):
    """Relative weights of 2/3/4-color cards, scaled to ``Rules.deck_size``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    two_color: int = Field(36, ge=0)
    three_color: int = Field(18, ge=0)
    four_color: int = Field(6, ge=0)

    @model_validator(mode="after")
    def _check_total(self) -> DeckCounts:
        if self.two_color + self.three_color + self.four_color <= 0:
            raise ValueError("DECK_COUNTS must have a positive total weight")
        return self


class ScoringRules(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    by_rim_touch: bool = True
    origin_to_origin: bool = True
    shortest_path: bool = True
    # Primary / secondary / tertiary weights
    color_points: tuple[int, int, int] = (3, 2, 1)
    origin_reach: OriginReach = OriginReach.MULTI_COLOR


class Rules(BaseModel):
    """Every rule switch of one game.

    Constructing ``Rules`` directly raises pydantic's ``ValidationError`` on a
    bad field. ``load_rules`` is the checked entry point: it reports the same
    failures as ``ConfigError``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: GameMode = GameMode.HEX
    # Maximum distance from center (ring count)
    radius: int = Field(6, ge=1)
    colors: tuple[str, ...] = tuple(ALL_COLORS)
    # Edge colors clockwise from North (edges 0-5)
    edge_colors: tuple[str, ...] = tuple(BASE_EDGE_COLORS)
    # Shuffle edge_colors once per new game
    random_cardinal_directions: bool = True
    hand_size: int = Field(3, ge=1)
    treasure_max: int = Field(4, ge=0)
    deck_size: int = Field(100, ge=1)
    deck_counts: DeckCounts = Field(default_factory=DeckCounts)

    outward_rule: OutwardRule = OutwardRule.DIR_ONLY
    discard_to_rotate: RotatePolicy = RotatePolicy.ANY
    # Rings 1..N hold max_lanes_per_path lanes in hex mode, other rings hold 1
    multi_cap_first_rings: int = Field(2, ge=0)
    max_lanes_per_path: int = Field(2, ge=1)
    fork_support: bool = False
    fork_support_formulation: ForkFormulation = ForkFormulation.MAX_FLOW
    no_build_from_rim: bool = False
    no_intersect: bool = False
    # Color seeded at (0,0); None leaves the center as a wild origin
    center_seed: str | None = None

    end_on_deck_exhaust: bool = True
    equal_turns: bool = True
    scoring: ScoringRules = Field(default_factory=ScoringRules)

    max_players: int = Field(6, ge=1)
    origin_rule: OriginRule = OriginRule.CENTER
    origin_count: int = Field(7, ge=1)
    origin_direction: OriginDirection = OriginDirection.RANDOM
    # Empty cells required between origins, and between an origin and the rim
    min_origin_distance: int = Field(2, ge=0)

    @field_validator("colors")
    @classmethod
    def _check_colors(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        unknown = [c for c in v if c not in ALL_COLORS]
        if unknown:
            raise ValueError(f"Unknown colors: {''.join(unknown)}")
        if len(v) != NUM_EDGES or len(set(v)) != NUM_EDGES:
            raise ValueError(f"COLORS must contain 6 unique colors, got {''.join(v)}")
        return v

    @field_validator("edge_colors")
    @classmethod
    def _check_edge_colors(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if len(v) != NUM_EDGES:
            raise ValueError(f"EDGE_COLORS must be length 6, got {len(v)}")
        if len(set(v)) != NUM_EDGES:
            raise ValueError(f"EDGE_COLORS must contain 6 unique colors, got {''.join(v)}")
        return v

    @model_validator(mode="after")
    def _check_consistency(self) -> Rules:
        if set(self.edge_colors) != set(self.colors):
            raise ValueError("EDGE_COLORS must be a permutation of COLORS")
        if self.center_seed is not None and self.center_seed not in self.colors:
            raise ValueError(f"CENTER_SEED must be one of the colors, got {self.center_seed}")
        if self.center_seed is not None and self.origin_rule != OriginRule.RANDOM:
            raise ValueError("CENTER_SEED needs ORIGIN='random' (the center cannot be an origin)")
        return self

    # -- derived lookups --

    def capacity(self, ring: int) -> int:
        return capacity_table(
            self.mode, self.radius, self.multi_cap_first_rings, self.max_lanes_per_path,
        )[ring]


@lru_cache(maxsize=64)
def capacity_table(
    mode: GameMode, radius: int, multi_cap_first_rings: int, max_lanes: int,
) -> tuple[int, ...]:
    """Lane capacity per ring, index 0 = center."""
    if mode == GameMode.PATH:
        return tuple(max_lanes for _ in range(radius + 1))
    return tuple(
        max_lanes if 0 < ring <= multi_cap_first_rings else 1
        for ring in range(radius + 1)
    )


HEX_RULES = Rules()

PATH_RULES = Rules(
    mode=GameMode.PATH,
    radius=4,
    max_lanes_per_path=3,
    fork_support=True,
    scoring=ScoringRules(color_points=(1, 1, 1)),
)

MODE_RULESETS: dict[str, Rules] = {
    GameMode.HEX.value: HEX_RULES,
    GameMode.PATH.value: PATH_RULES,
}


def load_rules(mode: str | None = None, **overrides: object) -> Rules:
    """Return the preset for *mode* with *overrides* applied and validated.

    Raises ConfigError for an unknown mode or any invalid field.
    """
    mode = mode or settings.default_mode
    base = MODE_RULESETS.get(mode)
    if base is None:
        raise ConfigError(f"Unknown mode: {mode!r}")
    if not overrides:
        return base
    data = base.model_dump()
    data.update(overrides)
    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc']) or 'rules'}: {err['msg']}" for err in e.errors()
        ]
        raise ConfigError(f"Invalid rule configuration: {'; '.join(errors)}", errors) from e
