"""HexStringsPlugin: implements the GamePlugin protocol for Hex Strings."""

from __future__ import annotations

import logging
from typing import ClassVar

from hexstrings.engine.errors import ConfigError, PluginError
from hexstrings.engine.models import (
    Action,
    ConcurrentMode,
    Event,
    ExpectedAction,
    GameConfig,
    GameResult,
    Phase,
    Player,
    PlayerId,
    TransitionResult,
)
from hexstrings.games.hex_strings.board import lane_count
from hexstrings.games.hex_strings.moves import enumerate_moves
from hexstrings.games.hex_strings.rules import Rules, load_rules
from hexstrings.games.hex_strings.scoring import compute_scores
from hexstrings.games.hex_strings.state import (
    apply_move_in_place,
    is_game_over,
    rules_from_state,
    setup,
    validate_move,
)
from hexstrings.games.hex_strings.types import MoveType

logger = logging.getLogger(__name__)

TAKE_TURN = "take_turn"
SCORE_CHECK = "score_check"


def rules_from_options(options: dict) -> Rules:
    """``options["mode"]`` picks the preset, every other key except
    ``preferences`` overrides a rule field."""
    overrides = {k: v for k, v in options.items() if k not in ("mode", "preferences")}
    return load_rules(options.get("mode"), **overrides)


class HexStringsPlugin:
    """Hex Strings: lay colored lanes from the origins out to the rim."""

    game_id: ClassVar[str] = "hex_strings"
    display_name: ClassVar[str] = "Hex Strings"
    min_players: ClassVar[int] = 1
    max_players: ClassVar[int] = 6
    description: ClassVar[str] = (
        "Play color cards as lanes on a hex board. Lanes follow their color's "
        "direction; colors linking an origin to the rim score for the players "
        "who prefer them."
    )
    config_schema: ClassVar[dict] = {
        "type": "object",
        "properties": {
            "mode": {"type": "string", "enum": ["hex", "path"]},
            "radius": {"type": "integer", "minimum": 1},
            "hand_size": {"type": "integer", "minimum": 1},
            "deck_size": {"type": "integer", "minimum": 1},
            "outward_rule": {
                "type": "string",
                "enum": ["none", "outwardOnly", "dirOnly", "dirOrOutward"],
            },
            "random_cardinal_directions": {"type": "boolean"},
            "preferences": {"type": "object"},
        },
    }

    # ── Lifecycle ──

    def create_initial_state(
        self,
        players: list[Player],
        config: GameConfig,
    ) -> tuple[dict, Phase, list[Event]]:
        rules = rules_from_options(config.options)
        game_data = setup(
            [p.player_id for p in players],
            rules,
            seed=config.random_seed,
            preferences=config.options.get("preferences"),
        )

        events = [
            Event(event_type="game_started", payload={
                "players": [p.player_id for p in players],
                "origins": game_data["board"]["origins"],
                "edge_colors": game_data["rules"]["edge_colors"],
            }),
        ]
        return game_data, self._turn_phase(game_data), events

    def validate_config(self, options: dict) -> list[str]:
        try:
            rules_from_options(options)
        except ConfigError as e:
            return e.errors
        return []

    # ── Core game loop ──

    def get_valid_actions(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId,
    ) -> list[dict]:
        if phase.name != TAKE_TURN:
            return []
        return enumerate_moves(game_data, player_id, rules_from_state(game_data), full=True)

    def validate_action(
        self,
        game_data: dict,
        phase: Phase,
        action: Action,
    ) -> str | None:
        if phase.name != TAKE_TURN:
            return f"No player actions in phase {phase.name}"
        return validate_move(
            game_data, action.player_id, action.payload, rules_from_state(game_data),
        )

    def apply_action(
        self,
        game_data: dict,
        phase: Phase,
        action: Action,
        players: list[Player],
    ) -> TransitionResult:
        if phase.name == TAKE_TURN:
            return self._apply_take_turn(game_data, action)

        if phase.name == SCORE_CHECK:
            return self._apply_score_check(game_data, players)

        raise PluginError(f"Unknown phase: {phase.name}")

    # ── View filtering ──

    def get_player_view(
        self,
        game_data: dict,
        phase: Phase,
        player_id: PlayerId | None,
        players: list[Player],
    ) -> dict:
        """Other players' hands and preferences are hidden, as is the deck order."""
        return {
            "board": game_data["board"],
            "players": game_data["players"],
            "current_player_index": game_data["current_player_index"],
            "turn": game_data["turn"],
            "deck_size": len(game_data["deck"]),
            "discard": game_data["discard"],
            "treasure": game_data["treasure"],
            "stash_bonus": game_data["stash_bonus"],
            "deck_exhausted_turn": game_data["deck_exhausted_turn"],
            "hands": {
                pid: hand if pid == player_id else len(hand)
                for pid, hand in game_data["hands"].items()
            },
            "prefs": {
                pid: prefs for pid, prefs in game_data["prefs"].items() if pid == player_id
            },
            "rules": game_data["rules"],
            "scores": game_data["scores"],
        }

    # ── Private handlers ──

    def _apply_take_turn(self, game_data: dict, action: Action) -> TransitionResult:
        rules = rules_from_state(game_data)
        apply_move_in_place(game_data, action.player_id, action.payload, rules)

        events = [
            Event(
                event_type=MoveType(action.payload["move"]).value,
                player_id=action.player_id,
                payload=dict(action.payload),
            ),
        ]

        if action.payload["move"] == MoveType.END_TURN:
            next_phase = Phase(
                name=SCORE_CHECK,
                auto_resolve=True,
                metadata={"player_index": game_data["current_player_index"]},
            )
        else:
            next_phase = self._turn_phase(game_data)

        return TransitionResult(
            game_data=game_data,
            events=events,
            next_phase=next_phase,
            scores=game_data["scores"],
            game_over=None,
        )

    def _apply_score_check(self, game_data: dict, players: list[Player]) -> TransitionResult:
        rules = rules_from_state(game_data)
        final = is_game_over(game_data, rules)
        if final is not None:
            game_data["scores"] = final
            return self._end_game(game_data, players)

        game_data["scores"] = compute_scores(game_data["board"], game_data["prefs"], rules)
        return TransitionResult(
            game_data=game_data,
            events=[],
            next_phase=self._turn_phase(game_data),
            scores=game_data["scores"],
            game_over=None,
        )

    def _turn_phase(self, game_data: dict) -> Phase:
        idx = game_data["current_player_index"]
        return Phase(
            name=TAKE_TURN,
            concurrent_mode=ConcurrentMode.SEQUENTIAL,
            expected_actions=[
                ExpectedAction(
                    player_id=PlayerId(game_data["players"][idx]),
                    action_type=TAKE_TURN,
                ),
            ],
            auto_resolve=False,
            metadata={"player_index": idx},
        )

    def _end_game(self, game_data: dict, players: list[Player]) -> TransitionResult:
        scores = game_data["scores"]
        top_score = max(scores.get(p.player_id, 0) for p in players)
        winners = [p.player_id for p in players if scores.get(p.player_id, 0) == top_score]
        final_scores = {p.player_id: scores.get(p.player_id, 0) for p in players}

        logger.info("Game over after %d turns: scores=%s", game_data["turn"] - 1, final_scores)

        return TransitionResult(
            game_data=game_data,
            events=[Event(
                event_type="game_ended",
                payload={"final_scores": final_scores, "winners": winners},
            )],
            next_phase=Phase(name="game_over", auto_resolve=False),
            scores=scores,
            game_over=GameResult(
                winners=winners,
                final_scores=final_scores,
                reason="deck_exhausted",
                details={
                    "placements": game_data["placements"],
                    "lanes": lane_count(game_data["board"]),
                },
            ),
        )
