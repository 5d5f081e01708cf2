"""Drive a plugin through whole games without a live host.

A ``SimulationState`` is what a host would keep between requests. Player
actions go through ``apply_action_and_resolve``; the auto-resolve phases
that follow (``score_check`` for Hex Strings) run right after, so a caller
only ever sees a phase waiting on a player, or a finished game.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from hexstrings.engine.errors import PluginError
from hexstrings.engine.models import (
    Action,
    Event,
    GameConfig,
    GameResult,
    Phase,
    Player,
    PlayerId,
    TransitionResult,
)
from hexstrings.engine.protocol import GamePlugin

# Auto-resolve steps allowed between two player actions
MAX_AUTO_STEPS = 50


@dataclass
class SimulationState:
    game_data: dict
    phase: Phase
    players: list[Player]
    scores: dict[str, float] = field(default_factory=dict)
    game_over: GameResult | None = None
    events: list[Event] = field(default_factory=list)


def start_simulation(
    plugin: GamePlugin,
    players: list[Player],
    config: GameConfig,
) -> SimulationState:
    """Set up a game and run it to the first player decision."""
    game_data, phase, events = plugin.create_initial_state(players, config)
    state = SimulationState(
        game_data=game_data,
        phase=phase,
        players=players,
        scores={p.player_id: 0.0 for p in players},
        events=list(events),
    )
    resolve_auto_phases(plugin, state)
    return state


def apply_action_and_resolve(
    plugin: GamePlugin,
    state: SimulationState,
    action: Action,
) -> list[Event]:
    """Apply a player action, then every auto-resolve phase it leads to.

    Mutates *state* and returns the events produced along the way.
    """
    events = _absorb(state, plugin.apply_action(state.game_data, state.phase, action, state.players))
    if state.game_over is None:
        events.extend(resolve_auto_phases(plugin, state))
    return events


def resolve_auto_phases(plugin: GamePlugin, state: SimulationState) -> list[Event]:
    """Run auto-resolve phases until a player must act or the game ends.

    Raises PluginError if the plugin keeps returning auto-resolve phases.
    """
    events: list[Event] = []
    steps = 0
    while state.phase.auto_resolve and state.game_over is None:
        if steps == MAX_AUTO_STEPS:
            raise PluginError(
                f"Phase {state.phase.name} still auto-resolving after {MAX_AUTO_STEPS} steps"
            )
        steps += 1
        synthetic = Action(action_type=state.phase.name, player_id=_phase_player_id(state))
        events.extend(_absorb(
            state, plugin.apply_action(state.game_data, state.phase, synthetic, state.players),
        ))
    return events


def clone_state(state: SimulationState) -> SimulationState:
    """Deep copy for look-ahead. ``players`` is shared, it never changes mid-game."""
    return SimulationState(
        game_data=copy.deepcopy(state.game_data),
        phase=state.phase.model_copy(deep=True),
        players=state.players,
        scores=dict(state.scores),
        game_over=state.game_over,
        events=list(state.events),
    )


def acting_player_id(phase: Phase) -> PlayerId | None:
    """Who is expected to act in *phase* (None for auto-resolve phases)."""
    if phase.expected_actions:
        return phase.expected_actions[0].player_id
    return None


def _absorb(state: SimulationState, result: TransitionResult) -> list[Event]:
    state.game_data = result.game_data
    state.phase = result.next_phase
    state.scores = result.scores or state.scores
    state.game_over = result.game_over
    state.events.extend(result.events)
    return list(result.events)


def _phase_player_id(state: SimulationState) -> PlayerId:
    """Seat named in the phase metadata, else the first player."""
    pid = acting_player_id(state.phase)
    if pid is not None:
        return pid
    index = state.phase.metadata.get("player_index", 0)
    return state.players[index].player_id
