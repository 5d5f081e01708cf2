"""Flat Monte Carlo move search.

Each candidate move is applied to a deep-cloned snapshot together with a
simulated end of turn, then scored by random playouts of bounded depth. The
search never touches the live state: the caller commits the first ranked
move that still validates against it (``commit_first_valid``).
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from hexstrings.config import settings
from hexstrings.engine.errors import InvalidActionError
from hexstrings.games.hex_strings.evaluator import hand_quality, rank_by_heuristic
from hexstrings.games.hex_strings.moves import end_turn, enumerate_moves, move_key
from hexstrings.games.hex_strings.rules import Rules
from hexstrings.games.hex_strings.scoring import compute_scores
from hexstrings.games.hex_strings.state import (
    apply_move,
    current_player,
    is_game_over,
    validate_move,
)
from hexstrings.games.hex_strings.types import MoveType

logger = logging.getLogger(__name__)


@dataclass
class SearchConfig:
    """Budgets for one search. Defaults come from the process settings."""

    num_playouts: int = field(default_factory=lambda: settings.mc_num_playouts)
    playout_depth: int = field(default_factory=lambda: settings.mc_playout_depth)
    max_candidates: int = field(default_factory=lambda: settings.mc_max_candidates)
    heuristic_weight: float = field(default_factory=lambda: settings.mc_heuristic_weight)
    hand_weight: float = field(default_factory=lambda: settings.mc_hand_weight)


@dataclass
class RankedMove:
    move: dict
    value: float
    heuristic: float
    playout_mean: float = 0.0


def select_candidates(
    game_data: dict,
    player_id: str,
    rules: Rules,
    max_candidates: int,
) -> list[tuple[dict, float]]:
    """The best moves by heuristic, with ``end_turn`` always included."""
    moves = enumerate_moves(game_data, player_id, rules)
    ranked = rank_by_heuristic(game_data, player_id, moves, rules)
    chosen = ranked[:max(1, max_candidates)]
    if not any(m["move"] == MoveType.END_TURN for m, _ in chosen):
        chosen.append((end_turn(), 0.0))
    return chosen


def rank_moves(
    game_data: dict,
    player_id: str,
    rules: Rules,
    config: SearchConfig | None = None,
    rng: random.Random | None = None,
) -> list[RankedMove]:
    """Evaluate candidate moves from *game_data*, best first.

    *game_data* is only read; every branch works on its own clone.
    """
    config = config or SearchConfig()
    rng = rng or random.Random()

    candidates = select_candidates(game_data, player_id, rules, config.max_candidates)
    results: list[tuple[int, RankedMove]] = []
    for rank, (move, heuristic) in enumerate(candidates):
        after = _apply_with_end_turn(game_data, player_id, move, rules)
        if after is None:
            continue
        outcomes = [
            _playout(after, player_id, rules, config.playout_depth, rng)
            for _ in range(config.num_playouts)
        ]
        mean = sum(outcomes) / len(outcomes) if outcomes else 0.0
        value = (
            mean
            + config.heuristic_weight * heuristic
            + config.hand_weight * hand_quality(after, player_id, rules)
        )
        results.append((rank, RankedMove(move, value, heuristic, mean)))

    results.sort(key=lambda item: (-item[1].value, item[0]))
    ranked = [r for _, r in results]
    if ranked:
        best = ranked[0]
        logger.info(
            "Search: player=%s candidates=%d best=%s value=%.2f playout=%.2f",
            player_id, len(ranked), best.move["move"], best.value, best.playout_mean,
        )
    return ranked


def commit_first_valid(
    ranked: list[RankedMove],
    live_state: dict,
    player_id: str,
    rules: Rules,
) -> dict:
    """First ranked move still legal in *live_state*; ``end_turn`` otherwise."""
    for candidate in ranked:
        error = validate_move(live_state, player_id, candidate.move, rules)
        if error is None:
            return candidate.move
        logger.debug("Skipping stale move %s: %s", candidate.move, error)
    return end_turn()


def choose_move(
    game_data: dict,
    player_id: str,
    rules: Rules,
    config: SearchConfig | None = None,
    seed: int | None = None,
) -> dict:
    ranked = rank_moves(game_data, player_id, rules, config, random.Random(seed))
    return commit_first_valid(ranked, game_data, player_id, rules)


def _apply_with_end_turn(
    game_data: dict,
    player_id: str,
    move: dict,
    rules: Rules,
) -> dict | None:
    try:
        state = apply_move(game_data, player_id, move, rules)
        if move["move"] != MoveType.END_TURN and is_game_over(state, rules) is None:
            state = apply_move(state, player_id, end_turn(), rules)
    except InvalidActionError as e:
        logger.debug("Candidate %s rejected on snapshot: %s", move_key(move), e.message)
        return None
    return state


def _playout(
    state: dict,
    player_id: str,
    rules: Rules,
    depth: int,
    rng: random.Random,
) -> float:
    """Play *depth* random plies and return the score margin for *player_id*."""
    for _ in range(depth):
        if is_game_over(state, rules) is not None:
            break
        actor = current_player(state)
        moves = enumerate_moves(state, actor, rules)
        if not moves:
            break
        state = apply_move(state, actor, rng.choice(moves), rules)
    return score_margin(state, player_id, rules)


def score_margin(state: dict, player_id: str, rules: Rules) -> float:
    """Own score minus the best opponent score (own score when alone)."""
    scores = compute_scores(state["board"], state["prefs"], rules)
    mine = scores[player_id]
    others = [s for pid, s in scores.items() if pid != player_id]
    return float(mine - max(others)) if others else float(mine)
