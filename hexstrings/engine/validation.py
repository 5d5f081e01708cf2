from __future__ import annotations

from hexstrings.engine.errors import GameEngineError
from hexstrings.engine.models import GameConfig, Phase, Player, PlayerId
from hexstrings.engine.protocol import GamePlugin


def validate_plugin(plugin: GamePlugin, options: dict | None = None) -> list[str]:
    """Run sanity checks on a plugin. Returns list of errors (empty = OK)."""
    errors: list[str] = []

    for attr in ("game_id", "display_name", "min_players", "max_players"):
        if not hasattr(plugin, attr):
            errors.append(f"Missing attribute: {attr}")
    if errors:
        return errors

    options = options or {}
    errors.extend(plugin.validate_config(options))
    if errors:
        return errors

    players = [
        Player(
            player_id=PlayerId(f"test-{i}"),
            display_name=f"Test {i}",
            seat_index=i,
        )
        for i in range(max(plugin.min_players, 2))
    ]
    config = GameConfig(random_seed=42, options=options)
    try:
        game_data, phase, _events = plugin.create_initial_state(players, config)
    except GameEngineError as e:
        return [f"create_initial_state failed: {e}"]

    if not isinstance(game_data, dict):
        errors.append("create_initial_state must return dict as game_data")
    if not isinstance(phase, Phase):
        errors.append("create_initial_state must return Phase as second element")
        return errors
    if not phase.auto_resolve and not phase.expected_actions:
        errors.append("First phase is not auto_resolve but has no expected_actions")

    acting = phase.expected_actions[0].player_id if phase.expected_actions else None
    for p in players:
        valid = plugin.get_valid_actions(game_data, phase, p.player_id)
        if p.player_id != acting and valid:
            errors.append(f"{p.player_id} has valid actions out of turn")
        plugin.get_player_view(game_data, phase, p.player_id, players)

    game_data2, _phase2, _events2 = plugin.create_initial_state(players, config)
    if game_data != game_data2:
        errors.append("create_initial_state is not deterministic with same seed")

    return errors
