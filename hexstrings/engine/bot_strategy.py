"""Bot strategy abstraction: maps bot_id strings to action-selection callables."""

from __future__ import annotations

import copy
import logging
import random as _random
from typing import Callable, Protocol

from hexstrings.engine.models import Phase, Player, PlayerId
from hexstrings.engine.protocol import GamePlugin

logger = logging.getLogger(__name__)


class BotStrategy(Protocol):
    """A bot strategy selects an action payload given the current game state."""

    def choose_action(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId,
        plugin: GamePlugin,
        players: list[Player] | None = None,
    ) -> dict:
        """Return the chosen action payload (same shape as get_valid_actions items)."""
        ...


class RandomStrategy:
    """Picks a uniformly random valid action."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = _random.Random(seed)

    def choose_action(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId,
        plugin: GamePlugin,
        players: list[Player] | None = None,
    ) -> dict:
        valid = plugin.get_valid_actions(game_data, phase, player_id)
        return self._rng.choice(valid)


class FirstLegalStrategy:
    """Places the first placeable lane, else stashes, else ends the turn.

    Treasure is never taken back, so the deck keeps draining while the
    board has room and a game between first-legal bots reaches its end.
    """

    def choose_action(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId,
        plugin: GamePlugin,
        players: list[Player] | None = None,
    ) -> dict:
        from hexstrings.games.hex_strings.moves import end_turn, enumerate_moves
        from hexstrings.games.hex_strings.state import rules_from_state

        listed = enumerate_moves(game_data, player_id, rules_from_state(game_data))
        for kind in ("play_card", "stash"):
            for move in listed:
                if move["move"] == kind:
                    return move
        return end_turn()


class GreedyStrategy:
    """Takes the best Hex Strings move by heuristic value, without search.

    Passing with a full hand draws nothing, so then the best other move is
    taken instead.
    """

    def choose_action(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId,
        plugin: GamePlugin,
        players: list[Player] | None = None,
    ) -> dict:
        from hexstrings.games.hex_strings.evaluator import rank_by_heuristic
        from hexstrings.games.hex_strings.moves import enumerate_moves
        from hexstrings.games.hex_strings.state import hand_limit, rules_from_state

        rules = rules_from_state(game_data)
        moves = enumerate_moves(game_data, player_id, rules)
        ranked = rank_by_heuristic(game_data, player_id, moves, rules)
        hand_full = len(game_data["hands"][player_id]) >= hand_limit(game_data, player_id, rules)
        if hand_full and len(ranked) > 1:
            ranked = [item for item in ranked if item[0]["move"] != "end_turn"]
        move, value = ranked[0]
        logger.info("Greedy: player=%s move=%s value=%.2f", player_id, move["move"], value)
        return move


class MonteCarloStrategy:
    """Flat Monte Carlo search over a snapshot, re-validated before committing.

    Budgets left as None fall back to the process settings.
    """

    def __init__(
        self,
        seed: int | None = None,
        num_playouts: int | None = None,
        playout_depth: int | None = None,
        max_candidates: int | None = None,
    ) -> None:
        self._rng = _random.Random(seed)
        self.num_playouts = num_playouts
        self.playout_depth = playout_depth
        self.max_candidates = max_candidates

    def choose_action(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId,
        plugin: GamePlugin,
        players: list[Player] | None = None,
    ) -> dict:
        from hexstrings.games.hex_strings.search import (
            SearchConfig,
            commit_first_valid,
            rank_moves,
        )
        from hexstrings.games.hex_strings.state import rules_from_state

        config = SearchConfig()
        if self.num_playouts is not None:
            config.num_playouts = self.num_playouts
        if self.playout_depth is not None:
            config.playout_depth = self.playout_depth
        if self.max_candidates is not None:
            config.max_candidates = self.max_candidates

        rules = rules_from_state(game_data)
        snapshot = copy.deepcopy(game_data)
        ranked = rank_moves(snapshot, player_id, rules, config, self._rng)
        return commit_first_valid(ranked, game_data, player_id, rules)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_STRATEGY_FACTORIES: dict[str, Callable[..., BotStrategy]] = {
    "random": lambda seed=None, **_kwargs: RandomStrategy(seed=seed),
    "first_legal": lambda **_kwargs: FirstLegalStrategy(),
    "greedy": lambda **_kwargs: GreedyStrategy(),
    "monte_carlo": lambda seed=None, **kwargs: MonteCarloStrategy(seed=seed, **kwargs),
}


def get_strategy(bot_id: str, **kwargs: object) -> BotStrategy:
    """Create a BotStrategy instance for the given *bot_id*."""
    factory = _STRATEGY_FACTORIES.get(bot_id)
    if factory is None:
        raise ValueError(f"Unknown bot_id: {bot_id!r}")
    return factory(**kwargs)


def register_strategy(
    bot_id: str, factory: Callable[..., BotStrategy]
) -> None:
    """Register a new strategy factory."""
    _STRATEGY_FACTORIES[bot_id] = factory
