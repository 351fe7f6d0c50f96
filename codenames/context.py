"""Role-restricted projections of a game for the player (human or AI) on a seat."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Any, ClassVar

from .board import CardColor, Team
from .serialize import to_serializable
from .state import Clue, Game, Phase, Role


@dataclass(frozen=True)
class CardView:
    index: int
    word: str
    revealed: bool
    color: CardColor | None


@dataclass(frozen=True)
class PreviousGuess:
    """One of the current team's guesses made since its turn timer started."""

    index: int
    word: str
    color: CardColor
    success: bool


@dataclass(frozen=True)
class _ContextBase:
    """Fields both roles may see."""

    role: ClassVar[Role]

    team: Team
    phase: Phase
    current_team: Team
    remaining_red: int
    remaining_blue: int
    active_clue: Clue | None
    cards: tuple[CardView, ...]
    seconds_left: float | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = to_serializable({item.name: getattr(self, item.name) for item in fields(self)})
        payload["role"] = self.role.value
        return payload

    def remaining_for(self, team: Team) -> int:
        return self.remaining_red if team is Team.RED else self.remaining_blue


@dataclass(frozen=True)
class SpymasterContext(_ContextBase):
    """Spymaster view: every card carries its true color."""

    role: ClassVar[Role] = Role.SPYMASTER


@dataclass(frozen=True)
class OperativeContext(_ContextBase):
    """Operative view: unrevealed cards expose only word and index."""

    role: ClassVar[Role] = Role.OPERATIVE

    available_moves: tuple[int, ...] = ()
    remaining_guesses: int | None = None
    previous_guesses: tuple[PreviousGuess, ...] = ()


GameContext = SpymasterContext | OperativeContext


def previous_guesses(game: Game) -> tuple[PreviousGuess, ...]:
    """Current team's guesses this turn, derived from move history every call.

    "This turn" means moves stamped after the turn timer's start, so a timer
    reset can never leave a stale counter behind.
    """
    team = game.current_team
    started_at = game.turn_timer.started_at
    return tuple(
        PreviousGuess(
            index=move.board_index,
            word=game.board.cards[move.board_index].word,
            color=move.resulting_color,
            success=move.resulting_color is team.card_color,
        )
        for move in game.moves
        if move.timestamp > started_at and move.team is team
    )


def build_context(game: Game, team: Team, role: Role, *, now: float | None = None) -> GameContext:
    """Project `game` into the view allowed for `team`'s `role` seat."""
    common = {
        "team": team,
        "phase": game.phase,
        "current_team": game.current_team,
        "remaining_red": game.remaining_count(Team.RED),
        "remaining_blue": game.remaining_count(Team.BLUE),
        "active_clue": game.active_clue,
        "seconds_left": game.turn_timer.seconds_left(now) if now is not None else None,
    }

    if role is Role.SPYMASTER:
        cards = tuple(
            CardView(index=card.index, word=card.word, revealed=card.revealed, color=card.color)
            for card in game.board.cards
        )
        return SpymasterContext(cards=cards, **common)

    cards = tuple(
        CardView(
            index=card.index,
            word=card.word,
            revealed=card.revealed,
            color=card.color if card.revealed else None,
        )
        for card in game.board.cards
    )
    return OperativeContext(
        cards=cards,
        available_moves=tuple(game.board.unrevealed_indices()),
        remaining_guesses=game.remaining_guesses,
        previous_guesses=previous_guesses(game),
        **common,
    )


def render(game: Game, role: Role | None = None) -> str:
    """Plain-text board dump for debugging and logs."""
    show_colors = role is Role.SPYMASTER
    size = len(game.board.cards)
    cols = int(math.sqrt(size))
    lines: list[str] = []
    for card in game.board.cards:
        if card.revealed:
            token = f"{card.word}:{card.color.value}"
        elif show_colors:
            token = f"{card.word}:{card.color.value.lower()}"
        else:
            token = card.word
        lines.append(f"{card.index:02d}:{token}")

    rows = [" | ".join(lines[row : row + cols]) for row in range(0, len(lines), cols)]
    clue = f"{game.active_clue.word}/{game.active_clue.count}" if game.active_clue else None
    header = (
        f"phase={game.phase.value} clue={clue} guesses_remaining={game.remaining_guesses} "
        f"red_left={game.remaining_count(Team.RED)} blue_left={game.remaining_count(Team.BLUE)} "
        f"winner={game.winner.value if game.winner else None}"
    )
    return header + "\n" + "\n".join(rows)
