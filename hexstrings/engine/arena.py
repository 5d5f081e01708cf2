"""Bot-vs-bot arena: play seeded games between strategies and tally the results."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable

from hexstrings.config import settings
from hexstrings.engine.bot_strategy import BotStrategy
from hexstrings.engine.game_simulator import acting_player_id, apply_action_and_resolve, start_simulation
from hexstrings.engine.models import Action, GameConfig, GameResult, Player, PlayerId
from hexstrings.engine.protocol import GamePlugin

logger = logging.getLogger(__name__)


@dataclass
class ArenaResult:
    """Aggregated results from an arena run."""

    num_games: int
    wins: dict[str, int]
    draws: int
    total_scores: dict[str, list[float]]
    game_durations_ms: list[float] = field(default_factory=list)
    unfinished: int = 0

    def win_rate(self, name: str) -> float:
        return self.wins.get(name, 0) / max(self.num_games, 1)

    def avg_score(self, name: str) -> float:
        scores = self.total_scores.get(name, [])
        return sum(scores) / max(len(scores), 1)

    def score_stddev(self, name: str) -> float:
        scores = self.total_scores.get(name, [])
        if len(scores) < 2:
            return 0.0
        avg = self.avg_score(name)
        return math.sqrt(sum((s - avg) ** 2 for s in scores) / (len(scores) - 1))

    def summary(self) -> str:
        lines = [f"Arena Results ({self.num_games} games)", "=" * 60]
        for name, wins in self.wins.items():
            lines.append(
                f"  {name:>12s}: {wins:3d} wins ({self.win_rate(name):5.1%})  "
                f"avg={self.avg_score(name):5.1f} +/- {self.score_stddev(name):4.1f}"
            )
        lines.append(f"  {'Draws':>12s}: {self.draws}")
        if self.unfinished:
            lines.append(f"  {'Unfinished':>12s}: {self.unfinished}")
        if self.game_durations_ms:
            avg_ms = sum(self.game_durations_ms) / len(self.game_durations_ms)
            lines.append(f"  Avg game: {avg_ms:.0f}ms")
        return "\n".join(lines)


def run_arena(
    plugin: GamePlugin,
    strategies: dict[str, BotStrategy],
    num_games: int = 10,
    base_seed: int = 0,
    game_options: dict | None = None,
    alternate_seats: bool = True,
    max_moves: int | None = None,
    progress_callback: Callable[[int, int], None] | None = None,
) -> ArenaResult:
    """Play *num_games* with one seat per entry of *strategies*.

    Game *i* uses ``random_seed = base_seed + i``. With *alternate_seats* the
    seating rotates every game so each strategy plays each seat. A game that
    is still running after *max_moves* player actions counts as unfinished.
    """
    names = list(strategies.keys())
    num_players = len(names)
    if num_players < plugin.min_players or num_players > plugin.max_players:
        raise ValueError(
            f"{plugin.game_id} takes {plugin.min_players}-{plugin.max_players} players, "
            f"got {num_players} strategies"
        )
    max_moves = max_moves or settings.arena_max_moves

    result = ArenaResult(
        num_games=num_games,
        wins={n: 0 for n in names},
        draws=0,
        total_scores={n: [] for n in names},
    )

    for game_idx in range(num_games):
        shift = game_idx % num_players if alternate_seats else 0
        seats = names[shift:] + names[:shift]
        players = [
            Player(
                player_id=PlayerId(f"p{i}"),
                display_name=name,
                seat_index=i,
                is_bot=True,
                bot_id=name,
            )
            for i, name in enumerate(seats)
        ]
        pid_to_name = {p.player_id: p.display_name for p in players}
        config = GameConfig(random_seed=base_seed + game_idx, options=game_options or {})

        t0 = time.monotonic()
        game_result = play_game(
            plugin, players, config,
            {p.player_id: strategies[p.display_name] for p in players},
            max_moves,
        )
        result.game_durations_ms.append((time.monotonic() - t0) * 1000)

        if game_result is None:
            result.unfinished += 1
            logger.warning("Game %d hit the %d move limit", game_idx, max_moves)
        else:
            for pid, score in game_result.final_scores.items():
                result.total_scores[pid_to_name[pid]].append(score)
            if len(game_result.winners) == 1:
                result.wins[pid_to_name[game_result.winners[0]]] += 1
            else:
                result.draws += 1

        if progress_callback:
            progress_callback(game_idx + 1, num_games)

    return result


def play_game(
    plugin: GamePlugin,
    players: list[Player],
    config: GameConfig,
    pid_to_strategy: dict[str, BotStrategy],
    max_moves: int,
) -> GameResult | None:
    """Play one game synchronously. None if it did not finish in *max_moves*."""
    state = start_simulation(plugin, players, config)

    for _ in range(max_moves):
        if state.game_over is not None:
            break

        acting_pid = acting_player_id(state.phase)
        if acting_pid is None:
            break

        chosen = pid_to_strategy[acting_pid].choose_action(
            state.game_data, state.phase, acting_pid, plugin, players,
        )
        action = Action(
            action_type=state.phase.expected_actions[0].action_type,
            player_id=acting_pid,
            payload=chosen,
        )
        apply_action_and_resolve(plugin, state, action)

    return state.game_over
