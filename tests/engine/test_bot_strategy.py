"""Tests for the bot strategy abstraction."""

import pytest

from hexstrings.engine.bot_strategy import (
    FirstLegalStrategy,
    GreedyStrategy,
    MonteCarloStrategy,
    RandomStrategy,
    get_strategy,
    register_strategy,
)
from hexstrings.engine.game_simulator import SimulationState, acting_player_id, apply_action_and_resolve
from hexstrings.engine.models import Action, GameConfig, Player, PlayerId
from hexstrings.games.hex_strings import evaluator, moves
from hexstrings.games.hex_strings.plugin import HexStringsPlugin
from hexstrings.games.hex_strings.state import rules_from_state


def _make_turn_state(seed: int = 42):
    """Create a state at the first player's take_turn phase."""
    plugin = HexStringsPlugin()
    players = [
        Player(player_id=PlayerId("p0"), display_name="P0", seat_index=0),
        Player(player_id=PlayerId("p1"), display_name="P1", seat_index=1),
    ]
    config = GameConfig(random_seed=seed, options={"mode": "hex", "radius": 3, "deck_size": 24})
    game_data, phase, _ = plugin.create_initial_state(players, config)
    state = SimulationState(game_data=game_data, phase=phase, players=players)
    return plugin, state


def _action(pid: str, payload: dict) -> Action:
    return Action(action_type="take_turn", player_id=PlayerId(pid), payload=payload)


def test_random_strategy_returns_valid_action():
    plugin, state = _make_turn_state()
    strategy = RandomStrategy(seed=123)
    valid = plugin.get_valid_actions(state.game_data, state.phase, PlayerId("p0"))

    chosen = strategy.choose_action(
        state.game_data, state.phase, PlayerId("p0"), plugin
    )
    assert chosen in valid


def test_random_strategy_deterministic_with_seed():
    plugin, state = _make_turn_state()

    s1 = RandomStrategy(seed=7)
    s2 = RandomStrategy(seed=7)
    c1 = s1.choose_action(state.game_data, state.phase, PlayerId("p0"), plugin)
    c2 = s2.choose_action(state.game_data, state.phase, PlayerId("p0"), plugin)
    assert c1 == c2


def test_first_legal_strategy_places_first_lane():
    plugin, state = _make_turn_state()
    listed = moves.enumerate_moves(state.game_data, "p0", rules_from_state(state.game_data))
    chosen = FirstLegalStrategy().choose_action(state.game_data, state.phase, PlayerId("p0"), plugin)
    assert chosen == next(m for m in listed if m["move"] == "play_card")


@pytest.mark.parametrize("listed, expected", [
    ([moves.take_treasure(0), moves.stash(1), moves.stash(0), moves.end_turn()], moves.stash(1)),
    ([moves.take_treasure(0), moves.end_turn()], moves.end_turn()),
    ([], moves.end_turn()),
])
def test_first_legal_strategy_without_placements(monkeypatch, listed, expected):
    plugin, state = _make_turn_state()
    monkeypatch.setattr(moves, "enumerate_moves", lambda *_args, **_kwargs: listed)
    chosen = FirstLegalStrategy().choose_action(state.game_data, state.phase, PlayerId("p0"), plugin)
    assert chosen == expected


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_first_legal_self_play_finishes(seed):
    plugin, state = _make_turn_state(seed)
    strategy = FirstLegalStrategy()

    for _ in range(1000):
        if state.game_over is not None:
            break
        pid = acting_player_id(state.phase)
        chosen = strategy.choose_action(state.game_data, state.phase, pid, plugin)
        assert chosen["move"] != "take_treasure"
        apply_action_and_resolve(plugin, state, _action(pid, chosen))

    assert state.game_over is not None
    assert state.game_data["deck"] == []


def test_greedy_strategy_returns_valid_action():
    plugin, state = _make_turn_state()
    chosen = GreedyStrategy().choose_action(state.game_data, state.phase, PlayerId("p0"), plugin)
    assert plugin.validate_action(
        state.game_data, state.phase,
        _action("p0", chosen),
    ) is None


def test_greedy_does_not_pass_with_full_hand(monkeypatch):
    plugin, state = _make_turn_state()
    ranked = [(moves.end_turn(), 0.0), (moves.stash(0), -1.5)]
    monkeypatch.setattr(evaluator, "rank_by_heuristic", lambda *_args: list(ranked))

    chosen = GreedyStrategy().choose_action(state.game_data, state.phase, PlayerId("p0"), plugin)
    assert chosen == moves.stash(0)

    state.game_data["hands"]["p0"].pop()
    chosen = GreedyStrategy().choose_action(state.game_data, state.phase, PlayerId("p0"), plugin)
    assert chosen == moves.end_turn()


def test_monte_carlo_strategy_is_legal_and_leaves_state_alone():
    plugin, state = _make_turn_state()
    before = repr(state.game_data)
    strategy = MonteCarloStrategy(seed=5, num_playouts=2, playout_depth=3, max_candidates=3)

    chosen = strategy.choose_action(state.game_data, state.phase, PlayerId("p0"), plugin)

    assert repr(state.game_data) == before
    assert plugin.validate_action(state.game_data, state.phase, _action("p0", chosen)) is None


def test_monte_carlo_strategy_deterministic_with_seed():
    plugin, state = _make_turn_state()
    budgets = {"num_playouts": 2, "playout_depth": 3, "max_candidates": 3}
    c1 = MonteCarloStrategy(seed=9, **budgets).choose_action(
        state.game_data, state.phase, PlayerId("p0"), plugin,
    )
    c2 = MonteCarloStrategy(seed=9, **budgets).choose_action(
        state.game_data, state.phase, PlayerId("p0"), plugin,
    )
    assert c1 == c2


def test_get_strategy_by_name():
    assert isinstance(get_strategy("random"), RandomStrategy)
    assert isinstance(get_strategy("first_legal"), FirstLegalStrategy)
    assert isinstance(get_strategy("greedy"), GreedyStrategy)


def test_get_strategy_monte_carlo_budgets():
    s = get_strategy("monte_carlo", seed=1, num_playouts=4)
    assert isinstance(s, MonteCarloStrategy)
    assert s.num_playouts == 4
    assert s.playout_depth is None


def test_register_strategy():
    register_strategy("always_first", lambda **_kwargs: FirstLegalStrategy())
    assert isinstance(get_strategy("always_first"), FirstLegalStrategy)


def test_get_strategy_unknown_raises():
    with pytest.raises(ValueError, match="Unknown bot_id"):
        get_strategy("does_not_exist")