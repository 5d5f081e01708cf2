"""Game state lifecycle: setup, move validation and application, game end.

The state is a plain dict (see ``setup``). ``apply_move`` is a pure
transition returning a new dict; ``apply_move_in_place`` mutates and is what
the plugin uses. Legality is always checked before anything is mutated.

Moves are judged by the rules stored in the state at setup (edge order as
shuffled then). The ``rules`` argument of the public functions may be left
out; when given it must equal the stored rules.
"""

from __future__ import annotations

import copy
import logging
import random

from pydantic import ValidationError

from hexstrings.engine.errors import (
    ConfigError,
    GameNotActiveError,
    InvalidActionError,
    NotYourTurnError,
)
from hexstrings.games.hex_strings.board import choose_origins, create_board
from hexstrings.games.hex_strings.deck import Card, build_deck
from hexstrings.games.hex_strings.placement import (
    apply_place,
    apply_rotation,
    placement_error,
    rotation_error,
)
from hexstrings.games.hex_strings.rules import Rules
from hexstrings.games.hex_strings.scoring import compute_scores
from hexstrings.games.hex_strings.types import ALL_COLORS, MoveType, PlayerPreferences

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Setup
# ------------------------------------------------------------------


def setup(
    player_ids: list[str],
    rules: Rules,
    seed: int | None = None,
    preferences: dict[str, dict] | None = None,
) -> dict:
    """Create a new game. Deterministic for a given *seed*.

    Raises ConfigError for an unusable player list or bad preferences.
    """
    if not player_ids:
        raise ConfigError("At least one player is required")
    if len(set(player_ids)) != len(player_ids):
        raise ConfigError(f"Duplicate player ids: {player_ids}")
    if len(player_ids) > rules.max_players:
        raise ConfigError(f"At most {rules.max_players} players, got {len(player_ids)}")

    rng = random.Random(seed)

    if rules.random_cardinal_directions:
        edge_colors = list(rules.edge_colors)
        rng.shuffle(edge_colors)
        rules = rules.model_copy(update={"edge_colors": tuple(edge_colors)})

    origins = choose_origins(rules, rng)
    deck = build_deck(rules, rng)

    prefs: dict[str, dict[str, str]] = {}
    for pid in player_ids:
        if preferences and pid in preferences:
            prefs[pid] = _validated_preferences(pid, preferences[pid])
        else:
            prefs[pid] = random_preferences(rng)

    game_data: dict = {
        "players": list(player_ids),
        "current_player_index": 0,
        "turn": 1,
        "board": create_board(rules.radius, origins, rules.center_seed),
        "deck": deck,
        "discard": [],
        "hands": {pid: [] for pid in player_ids},
        "treasure": [],
        "stash_bonus": {pid: 0 for pid in player_ids},
        "prefs": prefs,
        "deck_exhausted_turn": None,
        "placements": 0,
        "initial_deck_size": len(deck),
        "rules": rules.model_dump(mode="json"),
        "scores": {pid: 0 for pid in player_ids},
    }
    for pid in player_ids:
        refill_hand(game_data, pid, rules)

    logger.info(
        "New game: players=%d mode=%s radius=%d origins=%s edges=%s seed=%s",
        len(player_ids), rules.mode.value, rules.radius, origins,
        "".join(rules.edge_colors), seed,
    )
    return game_data


def random_preferences(rng: random.Random) -> dict[str, str]:
    primary, secondary, tertiary = rng.sample(ALL_COLORS, 3)
    return {"primary": primary, "secondary": secondary, "tertiary": tertiary}


def _validated_preferences(pid: str, raw: dict) -> dict[str, str]:
    try:
        return PlayerPreferences.model_validate(raw).to_dict()
    except ValidationError as e:
        raise ConfigError(f"Invalid preferences for {pid}: {raw}") from e


def rules_from_state(game_data: dict) -> Rules:
    """The effective rules of a game (edge order as shuffled at setup)."""
    return Rules.model_validate(game_data["rules"])


def game_rules(game_data: dict, rules: Rules | None = None) -> Rules:
    """*rules* checked against the game's own, or the stored rules if None.

    Raises ConfigError when *rules* differs from what the game was set up with.
    """
    if rules is None:
        return rules_from_state(game_data)
    if rules.model_dump(mode="json") != game_data["rules"]:
        raise ConfigError(
            "Rules differ from the ones this game was set up with; "
            "use rules_from_state()"
        )
    return rules


def current_player(game_data: dict) -> str:
    return game_data["players"][game_data["current_player_index"]]


# ------------------------------------------------------------------
# Cards
# ------------------------------------------------------------------


def draw_card(game_data: dict) -> Card | None:
    """Pop the top card; None when the deck is empty."""
    deck = game_data["deck"]
    if not deck:
        return None
    return deck.pop()


def hand_limit(game_data: dict, player_id: str, rules: Rules) -> int:
    return rules.hand_size + game_data["stash_bonus"].get(player_id, 0)


def refill_hand(game_data: dict, player_id: str, rules: Rules) -> None:
    hand = game_data["hands"][player_id]
    limit = hand_limit(game_data, player_id, rules)
    while len(hand) < limit:
        card = draw_card(game_data)
        if card is None:
            break
        hand.append(card)


def card_total(game_data: dict) -> int:
    """Cards in play; constant over a game."""
    return (
        len(game_data["deck"])
        + len(game_data["discard"])
        + sum(len(h) for h in game_data["hands"].values())
        + len(game_data["treasure"])
    )


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------


def validate_move(
    game_data: dict,
    player_id: str,
    move: dict,
    rules: Rules | None = None,
) -> str | None:
    """Return why *move* is illegal for *player_id*, or None if it is legal."""
    rules = game_rules(game_data, rules)
    if _final_scores(game_data, rules) is not None:
        return "Game is over"
    if player_id != current_player(game_data):
        return f"Not {player_id}'s turn"
    return _move_error(game_data, player_id, move, rules)


def _move_error(game_data: dict, player_id: str, move: dict, rules: Rules) -> str | None:
    kind = move.get("move")
    hand = game_data["hands"][player_id]

    if kind == MoveType.PLAY_CARD:
        hand_index = move.get("hand_index")
        if not _valid_index(hand_index, len(hand)):
            return f"Invalid hand index: {hand_index}"
        coord = _coord_of(move)
        if coord is None:
            return "Missing q or r in move"
        color = move.get("color")
        if color not in hand[hand_index]:
            return f"Card {''.join(hand[hand_index])} has no {color}"
        return placement_error(game_data["board"], coord, color, rules)

    if kind == MoveType.ROTATE_TILE:
        hand_index = move.get("hand_index")
        if not _valid_index(hand_index, len(hand)):
            return f"Invalid hand index: {hand_index}"
        coord = _coord_of(move)
        if coord is None:
            return "Missing q or r in move"
        delta = move.get("delta")
        if not isinstance(delta, int):
            return "delta must be an integer"
        return rotation_error(game_data["board"], coord, delta, hand[hand_index], rules)

    if kind == MoveType.STASH:
        if len(game_data["treasure"]) >= rules.treasure_max:
            return "Treasure is full"
        hand_index = move.get("hand_index")
        if not _valid_index(hand_index, len(hand)):
            return f"Invalid hand index: {hand_index}"
        return None

    if kind == MoveType.TAKE_TREASURE:
        index = move.get("index")
        if not _valid_index(index, len(game_data["treasure"])):
            return f"Invalid treasure index: {index}"
        return None

    if kind == MoveType.SET_PREFS:
        try:
            PlayerPreferences.model_validate(_prefs_of(move))
        except ValidationError:
            return f"Invalid preferences: {_prefs_of(move)}"
        return None

    if kind == MoveType.END_TURN:
        return None

    return f"Unknown move: {kind!r}"


def _valid_index(value: object, length: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < length


def _prefs_of(move: dict) -> dict:
    return {k: move.get(k) for k in ("primary", "secondary", "tertiary")}


def _coord_of(move: dict) -> tuple[int, int] | None:
    q, r = move.get("q"), move.get("r")
    if not isinstance(q, int) or not isinstance(r, int):
        return None
    return q, r


# ------------------------------------------------------------------
# Application
# ------------------------------------------------------------------


def apply_move(
    game_data: dict, player_id: str, move: dict, rules: Rules | None = None,
) -> dict:
    """Return the state after *move*; *game_data* itself is left untouched.

    Raises InvalidActionError (or a subclass) if the move is rejected.
    """
    rules = game_rules(game_data, rules)
    new_state = copy.deepcopy(game_data)
    _apply(new_state, player_id, move, rules)
    return new_state


def apply_move_in_place(
    game_data: dict, player_id: str, move: dict, rules: Rules | None = None,
) -> None:
    """Validate and apply *move* to *game_data*. Nothing changes on rejection."""
    _apply(game_data, player_id, move, game_rules(game_data, rules))


def _apply(game_data: dict, player_id: str, move: dict, rules: Rules) -> None:
    if _final_scores(game_data, rules) is not None:
        raise GameNotActiveError("Game is over", move)
    if player_id != current_player(game_data):
        raise NotYourTurnError(f"Not {player_id}'s turn", move)
    error = _move_error(game_data, player_id, move, rules)
    if error:
        raise InvalidActionError(error, move)

    kind = move["move"]
    hand = game_data["hands"][player_id]

    if kind == MoveType.PLAY_CARD:
        apply_place(game_data["board"], (move["q"], move["r"]), move["color"])
        game_data["placements"] += 1
        game_data["discard"].append(hand.pop(move["hand_index"]))
    elif kind == MoveType.ROTATE_TILE:
        apply_rotation(game_data["board"], (move["q"], move["r"]), move["delta"])
        game_data["discard"].append(hand.pop(move["hand_index"]))
    elif kind == MoveType.STASH:
        game_data["treasure"].append(hand.pop(move["hand_index"]))
        bonus = game_data["stash_bonus"]
        bonus[player_id] = min(bonus.get(player_id, 0) + 1, rules.treasure_max)
    elif kind == MoveType.TAKE_TREASURE:
        hand.append(game_data["treasure"].pop(move["index"]))
    elif kind == MoveType.SET_PREFS:
        game_data["prefs"][player_id] = PlayerPreferences.model_validate(_prefs_of(move)).to_dict()
    elif kind == MoveType.END_TURN:
        end_turn(game_data, rules)


def end_turn(game_data: dict, rules: Rules) -> None:
    """Refill the current hand, mark deck exhaustion, pass the turn."""
    pid = current_player(game_data)
    refill_hand(game_data, pid, rules)

    if (
        rules.end_on_deck_exhaust
        and not game_data["deck"]
        and game_data["deck_exhausted_turn"] is None
    ):
        game_data["deck_exhausted_turn"] = game_data["turn"]
        logger.info("Deck exhausted on turn %d", game_data["turn"])

    game_data["current_player_index"] = (
        (game_data["current_player_index"] + 1) % len(game_data["players"])
    )
    game_data["turn"] += 1


# ------------------------------------------------------------------
# Game end
# ------------------------------------------------------------------


def is_game_over(game_data: dict, rules: Rules | None = None) -> dict[str, int] | None:
    """Final scores once the game has ended, otherwise None.

    The game ends when the deck ran out, either at once or, with
    ``equal_turns``, after every player has had the same number of turns.
    """
    return _final_scores(game_data, game_rules(game_data, rules))


def _final_scores(game_data: dict, rules: Rules) -> dict[str, int] | None:
    marker = game_data["deck_exhausted_turn"]
    if not rules.end_on_deck_exhaust or marker is None:
        return None
    if rules.equal_turns and game_data["turn"] - marker < len(game_data["players"]):
        return None
    return compute_scores(game_data["board"], game_data["prefs"], rules)
