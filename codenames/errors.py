"""Structured exceptions raised by the Codenames turn engine.

Every error is scoped to a single tick of a single game. Nothing here is fatal
to the process.
"""

from __future__ import annotations

from typing import Any


class EngineError(Exception):
    """Base class for engine-level exceptions."""

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {"type": self.__class__.__name__, "message": str(self)}


class ValidationError(EngineError):
    """A proposed clue, guess or skip is not legal in the current state."""


class WrongTurnError(ValidationError):
    """Raised when a team or seat acts outside of its own phase."""

    def __init__(self, team: Any, phase: Any, reason: str | None = None):
        self.team = team
        self.phase = phase
        message = f"It is not {getattr(team, 'value', team)}'s turn (phase={getattr(phase, 'value', phase)})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["team"] = getattr(self.team, "value", self.team)
        payload["phase"] = getattr(self.phase, "value", self.phase)
        return payload


class InvalidClueError(ValidationError):
    """Raised when a clue is malformed (count out of range, empty word)."""


class WordOnBoardError(ValidationError):
    """Raised when a clue word overlaps a board word."""

    def __init__(self, clue: str, board_word: str):
        self.clue = clue
        self.board_word = board_word
        super().__init__(f"Clue {clue!r} overlaps board word {board_word!r}.")

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update({"clue": self.clue, "board_word": self.board_word})
        return payload


class IndexOutOfRangeError(ValidationError):
    """Raised when a board index does not address a card."""

    def __init__(self, index: Any, size: int):
        self.index = index
        super().__init__(f"Board index {index!r} is outside 0..{size - 1}.")


class AlreadyRevealedError(ValidationError):
    """Raised when a guess targets a card that is already face up."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Card {index} is already revealed.")


class NoActiveClueError(ValidationError):
    """Raised when guessing without an active clue for the guessing team."""


class NoGuessesRemainingError(ValidationError):
    """Raised when the guess budget is spent; callers should skip instead."""


class GenerationError(EngineError):
    """An AI provider failed to produce a usable move. Retry the tick."""

    def __init__(self, model_id: str, message: str):
        self.model_id = model_id
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["model_id"] = self.model_id
        return payload


class ClueGenerationFailedError(GenerationError):
    """The hint provider errored, timed out or produced an illegal clue."""


class GuessGenerationFailedError(GenerationError):
    """The guess provider errored, timed out or produced an unusable index."""


class StoreConflictError(EngineError):
    """A concurrent tick committed first; reload and retry."""

    def __init__(self, game_id: str, expected_version: int, actual_version: int):
        self.game_id = game_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Game {game_id} was modified concurrently "
            f"(expected version {expected_version}, found {actual_version})."
        )


class GameNotFoundError(EngineError, KeyError):
    """Raised when the store has no game for an id."""

    def __init__(self, game_id: str):
        self.game_id = game_id
        super().__init__(f"Unknown game_id: {game_id}")

    def __str__(self) -> str:
        return str(self.args[0])


class SeatConfigurationError(EngineError, ValueError):
    """Raised when seat assignments cannot be used to start a game."""
