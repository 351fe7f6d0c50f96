"""Turn state machine: phases, priority-ordered guarded transitions, lazy timers."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from .actions import Action, GiveClue, GuessCard, Skip
from .board import CardColor, Team
from .state import (
    CLUE_PHASES,
    GUESS_PHASES,
    LIVE_PHASES,
    Clue,
    EndReason,
    Game,
    HintRecord,
    MoveRecord,
    Phase,
    TurnTimer,
    clue_phase,
    guess_phase,
    win_phase,
)
from .validator import validate_action

logger = logging.getLogger(__name__)

SYSTEM_PLAYER = "system"

# Evaluated top to bottom; the first transition whose guard holds is applied.
TRANSITION_PRIORITY: tuple[str, ...] = (
    "assassin",
    "all_words_found",
    "timer_expired",
    "clue_given",
    "guess_resolved",
    "skipped",
)


@dataclass
class TickContext:
    """Inputs visible to guards and effects during one tick."""

    game: Game
    action: Action | None
    now: float
    by_player: str
    reasoning: str | None = None
    move: MoveRecord | None = None
    turn_ended: bool = False


@dataclass(frozen=True)
class Transition:
    name: str
    phases: tuple[Phase, ...]
    guard: Callable[[TickContext], bool]
    effect: Callable[[TickContext], None]


@dataclass(frozen=True)
class TickResult:
    """What a tick did. `transition` is None for a no-op tick."""

    transition: str | None
    phase_before: Phase
    phase_after: Phase
    action_dropped: bool = False
    turn_ended: bool = False
    move: MoveRecord | None = None
    hint: HintRecord | None = None

    @property
    def changed(self) -> bool:
        return self.transition is not None

    @property
    def game_over(self) -> bool:
        return self.phase_after.is_terminal


class TurnStateMachine:
    """Applies actions and timer expiry to a Game through an ordered transition list."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self.transitions: tuple[Transition, ...] = self._define_transitions()

    def _define_transitions(self) -> tuple[Transition, ...]:
        by_name = {
            "assassin": Transition("assassin", GUESS_PHASES, self._assassin_picked, self._assassin_win),
            "all_words_found": Transition(
                "all_words_found", GUESS_PHASES, self._words_exhausted, self._words_found_win
            ),
            "timer_expired": Transition("timer_expired", LIVE_PHASES, self._timer_expired, self._end_turn),
            "clue_given": Transition(
                "clue_given", CLUE_PHASES, lambda ctx: isinstance(ctx.action, GiveClue), self._give_clue
            ),
            "guess_resolved": Transition(
                "guess_resolved", GUESS_PHASES, lambda ctx: isinstance(ctx.action, GuessCard), self._resolve_guess
            ),
            "skipped": Transition("skipped", GUESS_PHASES, lambda ctx: isinstance(ctx.action, Skip), self._end_turn),
        }
        return tuple(by_name[name] for name in TRANSITION_PRIORITY)

    def tick(
        self,
        game: Game,
        action: Action | None = None,
        *,
        seat_id: str | None = None,
        by_player: str = SYSTEM_PLAYER,
        reasoning: str | None = None,
        now: float | None = None,
    ) -> TickResult:
        """Evaluate guards for the current phase and apply the first that holds.

        Raises a ValidationError (leaving `game` untouched) when an attached action
        is illegal. An action arriving after the turn timer ran out is dropped and
        the timer transition fires instead.
        """
        phase_before = game.phase
        if game.phase.is_terminal:
            return TickResult(transition=None, phase_before=phase_before, phase_after=phase_before)

        now = self.clock() if now is None else now
        ctx = TickContext(game=game, action=None, now=now, by_player=by_player, reasoning=reasoning)

        action_dropped = False
        if action is not None:
            if game.turn_timer.expired(now):
                action_dropped = True
            else:
                validate_action(game, action, seat_id)
                ctx.action = action
                if isinstance(action, GuessCard):
                    ctx.move = self._admit_guess(ctx, action)

        for transition in self.transitions:
            if game.phase in transition.phases and transition.guard(ctx):
                hints_before = len(game.hints)
                transition.effect(ctx)
                logger.info(
                    "game %s: %s (%s -> %s) by %s",
                    game.game_id,
                    transition.name,
                    phase_before.value,
                    game.phase.value,
                    by_player,
                )
                return TickResult(
                    transition=transition.name,
                    phase_before=phase_before,
                    phase_after=game.phase,
                    action_dropped=action_dropped,
                    turn_ended=ctx.turn_ended,
                    move=ctx.move,
                    hint=game.hints[-1] if len(game.hints) > hints_before else None,
                )

        return TickResult(
            transition=None,
            phase_before=phase_before,
            phase_after=game.phase,
            action_dropped=action_dropped,
        )

    def _admit_guess(self, ctx: TickContext, action: GuessCard) -> MoveRecord:
        game = ctx.game
        card = game.board.reveal(action.index)
        move = MoveRecord(
            team=game.current_team,
            board_index=card.index,
            resulting_color=card.color,
            by_player=ctx.by_player,
            timestamp=ctx.now,
        )
        game.moves.append(move)
        return move

    # Guards

    def _assassin_picked(self, ctx: TickContext) -> bool:
        last = ctx.game.last_move
        return (
            last is not None
            and last.resulting_color is CardColor.ASSASSIN
            and last.team is ctx.game.current_team
        )

    def _words_exhausted(self, ctx: TickContext) -> bool:
        team = ctx.game.current_team
        return ctx.game.remaining_count(team) == 0 or ctx.game.remaining_count(team.other) == 0

    def _timer_expired(self, ctx: TickContext) -> bool:
        return ctx.game.turn_timer.expired(ctx.now)

    # Effects

    def _assassin_win(self, ctx: TickContext) -> None:
        self._declare_winner(ctx, ctx.game.current_team.other, EndReason.ASSASSIN)

    def _words_found_win(self, ctx: TickContext) -> None:
        team = ctx.game.current_team
        winner = team if ctx.game.remaining_count(team) == 0 else team.other
        self._declare_winner(ctx, winner, EndReason.ALL_WORDS_FOUND)

    def _give_clue(self, ctx: TickContext) -> None:
        game = ctx.game
        action = ctx.action
        if not isinstance(action, GiveClue):
            raise TypeError(f"clue_given needs a GiveClue action, got {type(action).__name__}.")
        team = game.current_team
        game.active_clue = Clue(team=team, word=action.word, count=action.count, issued_at=ctx.now)
        # One bonus guess beyond the clue count.
        game.remaining_guesses = action.count + 1
        game.phase = guess_phase(team)
        game.hints.append(
            HintRecord(
                team=team,
                word=action.word,
                count=action.count,
                by_player=ctx.by_player,
                timestamp=ctx.now,
                reasoning=ctx.reasoning,
            )
        )

    def _resolve_guess(self, ctx: TickContext) -> None:
        game = ctx.game
        move = ctx.move
        if move is None:
            raise TypeError("guess_resolved needs an admitted guess.")
        if move.resulting_color is not game.current_team.card_color:
            self._end_turn(ctx)
            return
        game.remaining_guesses = (game.remaining_guesses or 0) - 1
        if game.remaining_guesses <= 0:
            self._end_turn(ctx)

    def _end_turn(self, ctx: TickContext) -> None:
        game = ctx.game
        game.phase = clue_phase(game.current_team.other)
        game.active_clue = None
        game.remaining_guesses = None
        game.turn_timer = TurnTimer(started_at=ctx.now, duration_seconds=game.turn_timer.duration_seconds)
        ctx.turn_ended = True

    def _declare_winner(self, ctx: TickContext, winner: Team, reason: EndReason) -> None:
        game = ctx.game
        game.phase = win_phase(winner)
        game.winner = winner
        game.end_reason = reason
        game.completed_at = ctx.now
        game.active_clue = None
        game.remaining_guesses = None
