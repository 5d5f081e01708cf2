from __future__ import annotations

from hexstrings.engine.models import Action


class GameEngineError(Exception):
    """Base class for engine errors."""
    pass


class InvalidActionError(GameEngineError):
    """Action is not valid in current state."""

    def __init__(self, message: str, action: Action | dict | None = None):
        self.message = message
        self.action = action
        super().__init__(message)


class GameNotActiveError(InvalidActionError):
    """Action submitted to a game that is already over."""
    pass


class NotYourTurnError(InvalidActionError):
    """Player tried to act when it's not their turn."""
    pass


class ConfigError(GameEngineError):
    """Rule configuration is malformed, or differs from the rules a game was set up with."""

    def __init__(self, message: str, errors: list[str] | None = None):
        self.message = message
        self.errors = errors or [message]
        super().__init__(message)


class PluginError(GameEngineError):
    """Plugin was driven through a phase it does not know."""
    pass
