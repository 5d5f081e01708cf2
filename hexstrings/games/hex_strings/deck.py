"""Deck construction: every 2/3/4-color combination, weighted and shuffled."""

from __future__ import annotations

import math
import random
from itertools import combinations

from hexstrings.games.hex_strings.rules import Rules

Card = list[str]


def color_combinations(colors: tuple[str, ...] | list[str], k: int) -> list[Card]:
    """All k-color cards, in the order of *colors*."""
    return [list(combo) for combo in combinations(colors, k)]


def bucket_targets(rules: Rules) -> tuple[int, int, int]:
    """Number of 2-, 3- and 4-color cards for the configured deck size.

    Weights are scaled to ``deck_size``; the 4-color bucket absorbs rounding
    so the total is exact.
    """
    counts = rules.deck_counts
    total_weight = counts.two_color + counts.three_color + counts.four_color
    target = max(1, rules.deck_size)
    t2 = _round_half_up(counts.two_color / total_weight * target)
    t3 = _round_half_up(counts.three_color / total_weight * target)
    t4 = max(0, target - t2 - t3)
    return t2, t3, t4


def build_deck(rules: Rules, rng: random.Random) -> list[Card]:
    """Build and shuffle the draw pile. Deterministic for a seeded *rng*."""
    t2, t3, t4 = bucket_targets(rules)
    deck = (
        _repeat_to(color_combinations(rules.colors, 2), t2)
        + _repeat_to(color_combinations(rules.colors, 3), t3)
        + _repeat_to(color_combinations(rules.colors, 4), t4)
    )
    rng.shuffle(deck)
    return deck


def _repeat_to(items: list[Card], target_count: int) -> list[Card]:
    """Cycle through *items* until *target_count* cards are produced."""
    return [list(items[i % len(items)]) for i in range(target_count)]


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))
