"""Move validation: every action is checked here before the machine applies it."""

from __future__ import annotations

from .actions import Action, GiveClue, GuessCard, Skip
from .board import Team
from .errors import (
    AlreadyRevealedError,
    InvalidClueError,
    NoActiveClueError,
    NoGuessesRemainingError,
    WordOnBoardError,
    WrongTurnError,
)
from .state import Game, Role, clue_phase, guess_phase, team_role_for_seat

MIN_CLUE_COUNT = 1
MAX_CLUE_COUNT = 9


def validate_clue(game: Game, team: Team, word: str, count: int) -> None:
    """Raise unless `team` may give the clue `word`/`count` right now."""
    if game.phase is not clue_phase(team):
        raise WrongTurnError(team, game.phase, "clues are only accepted in the team's clue phase")

    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidClueError(f"Clue count must be an integer, got {count!r}.")
    if not MIN_CLUE_COUNT <= count <= MAX_CLUE_COUNT:
        raise InvalidClueError(f"Clue count must be within {MIN_CLUE_COUNT}..{MAX_CLUE_COUNT}, got {count}.")

    clue = (word or "").strip()
    if not clue:
        raise InvalidClueError("Clue word cannot be empty.")
    if any(char.isspace() for char in clue):
        raise InvalidClueError(f"Clue must be a single word, got {clue!r}.")

    # Both directions: "FISHING" and "FIS" are rejected when "FISH" is on the board.
    lowered = clue.lower()
    for board_word in game.board.words:
        candidate = board_word.lower()
        if lowered in candidate or candidate in lowered:
            raise WordOnBoardError(clue, board_word)


def validate_guess(game: Game, team: Team, board_index: int) -> None:
    """Raise unless `team` may reveal `board_index` right now."""
    if game.phase is not guess_phase(team):
        raise WrongTurnError(team, game.phase, "guesses are only accepted in the team's guess phase")
    if game.active_clue is None or game.active_clue.team is not team:
        raise NoActiveClueError(f"No active clue for {team.value}.")

    card = game.board.card(board_index)
    if card.revealed:
        raise AlreadyRevealedError(board_index)

    if game.remaining_guesses is None or game.remaining_guesses <= 0:
        raise NoGuessesRemainingError(f"{team.value} has no guesses left this turn; skip instead.")


def validate_skip(game: Game, team: Team) -> None:
    if game.phase is not guess_phase(team):
        raise WrongTurnError(team, game.phase, "only the guessing team can end its turn")


def validate_action(game: Game, action: Action, seat_id: str | None = None) -> None:
    """Dispatch on action type; when `seat_id` is given, the seat's role must match too."""
    if seat_id is not None:
        team, role = team_role_for_seat(seat_id)
    else:
        team, role = game.current_team, game.phase.role

    if isinstance(action, GiveClue):
        if role is not Role.SPYMASTER:
            raise WrongTurnError(team, game.phase, "only the spymaster can give clues")
        validate_clue(game, team, action.word, action.count)
        return
    if isinstance(action, GuessCard):
        if role is not Role.OPERATIVE:
            raise WrongTurnError(team, game.phase, "only the operative can guess")
        validate_guess(game, team, action.index)
        return
    if isinstance(action, Skip):
        if role is not Role.OPERATIVE:
            raise WrongTurnError(team, game.phase, "only the operative can skip")
        validate_skip(game, team)
        return
    raise TypeError(f"Unsupported action type: {type(action)!r}")
