"""Drives AI-occupied seats: one clue, or a bounded loop of guesses, per call."""

from __future__ import annotations

import concurrent.futures
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, TypeVar, cast

from providers.base import GuessProvider, HintProvider

from .actions import GiveClue, GuessCard
from .context import OperativeContext, SpymasterContext, build_context
from .errors import ClueGenerationFailedError, GenerationError, GuessGenerationFailedError, ValidationError
from .state import Game, HintRecord, Phase, Role, ai_player_id, clue_phase, guess_phase
from .validator import validate_clue

if TYPE_CHECKING:
    from .service import GameService

logger = logging.getLogger(__name__)

T = TypeVar("T")

# "already_revealed" leaves the seat on turn; the next poll asks the provider again.
TURN_PASSING_STOPS = frozenset({"clue_given", "turn_ended", "game_over", "phase_changed", "action_dropped"})


def _stop_reason(game: Game, phase: Phase) -> str | None:
    """Why a seat acting in `phase` must stop, or None while the game is still there."""
    if game.is_terminal:
        return "game_over"
    if game.phase is not phase:
        return "phase_changed"
    return None


@dataclass(frozen=True)
class AITurnOutcome:
    """What one AI seat did during a single `play` call."""

    seat_id: str
    model_id: str
    moves_applied: int = 0
    hint: HintRecord | None = None
    stopped_reason: str = ""

    @property
    def turn_passed(self) -> bool:
        """True when the seat is no longer on turn, so the next seat may act."""
        return self.stopped_reason in TURN_PASSING_STOPS

    def to_dict(self) -> dict[str, Any]:
        return {
            "seat_id": self.seat_id,
            "model_id": self.model_id,
            "moves_applied": self.moves_applied,
            "hint": self.hint.to_dict() if self.hint is not None else None,
            "stopped_reason": self.stopped_reason,
        }


class AIOrchestrator:
    """Feeds AI seats role-restricted contexts and applies their moves through the service.

    Every move goes through `GameService.apply_action`, so AI moves are validated,
    persisted and logged exactly like human ones.
    """

    def __init__(
        self,
        service: "GameService",
        hint_provider: HintProvider,
        guess_provider: GuessProvider,
        *,
        guess_delay_sec: float = 1.0,
        provider_timeout_sec: float = 60.0,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.service = service
        self.hint_provider = hint_provider
        self.guess_provider = guess_provider
        self.guess_delay_sec = guess_delay_sec
        self.provider_timeout_sec = provider_timeout_sec
        self.clock = clock
        self.sleep = sleep

    def play(self, game_id: str) -> AITurnOutcome | None:
        """Act for the seat on turn if it is AI-controlled; None when there is nothing to do."""
        game = self.service.load_game(game_id)
        seat = game.current_seat
        if game.is_terminal or seat is None or not seat.is_ai:
            return None
        if game.phase.is_clue:
            return self.play_spymaster(game)
        return self.play_operative(game)

    def play_spymaster(self, game: Game) -> AITurnOutcome:
        team = game.current_team
        seat_id = str(game.current_seat_id)
        model_id = str(game.seats[seat_id].model_id)

        context = cast(SpymasterContext, build_context(game, team, Role.SPYMASTER, now=self.clock()))
        proposal = self._call_with_timeout(
            self.hint_provider.generate_hint, model_id, context, ClueGenerationFailedError
        )
        try:
            validate_clue(game, team, proposal.word, proposal.count)
            _, result = self.service.apply_action(
                game.game_id,
                GiveClue(word=proposal.word, count=proposal.count),
                seat_id=seat_id,
                by_player=ai_player_id(model_id),
                reasoning=proposal.reasoning,
            )
        except ValidationError as exc:
            interrupted = _stop_reason(self.service.load_game(game.game_id), clue_phase(team))
            if interrupted is not None:
                logger.info("game %s: clue phase ended while %s was thinking", game.game_id, model_id)
                return AITurnOutcome(seat_id=seat_id, model_id=model_id, stopped_reason=interrupted)
            logger.warning("game %s: %s proposed an illegal clue: %s", game.game_id, model_id, exc)
            raise ClueGenerationFailedError(model_id, f"Proposed clue rejected: {exc}") from exc

        return AITurnOutcome(
            seat_id=seat_id,
            model_id=model_id,
            hint=result.hint,
            stopped_reason="action_dropped" if result.action_dropped else "clue_given",
        )

    def play_operative(self, game: Game) -> AITurnOutcome:
        team = game.current_team
        game_id = game.game_id
        seat_id = str(game.current_seat_id)
        model_id = str(game.seats[seat_id].model_id)
        moves_applied = 0

        while True:
            game = self.service.load_game(game_id)
            interrupted = _stop_reason(game, guess_phase(team))
            if interrupted is not None:
                stopped = interrupted
                break

            context = cast(OperativeContext, build_context(game, team, Role.OPERATIVE, now=self.clock()))
            proposal = self._call_with_timeout(
                self.guess_provider.generate_guess, model_id, context, GuessGenerationFailedError
            )
            index = proposal.card_index
            if not 0 <= index < len(game.board.cards):
                raise GuessGenerationFailedError(model_id, f"Proposed card index {index} is off the board.")
            if game.board.cards[index].revealed:
                logger.warning("game %s: %s picked revealed card %d, stopping", game_id, model_id, index)
                stopped = "already_revealed"
                break

            try:
                _, result = self.service.apply_action(
                    game_id,
                    GuessCard(index=index),
                    seat_id=seat_id,
                    by_player=ai_player_id(model_id),
                    reasoning=proposal.reasoning,
                )
            except ValidationError as exc:
                interrupted = _stop_reason(self.service.load_game(game_id), guess_phase(team))
                if interrupted is None:
                    raise GuessGenerationFailedError(model_id, f"Proposed guess rejected: {exc}") from exc
                logger.info("game %s: guess phase ended while %s was thinking", game_id, model_id)
                stopped = interrupted
                break

            if result.action_dropped:
                stopped = "action_dropped"
                break
            moves_applied += 1
            if result.game_over:
                stopped = "game_over"
                break
            if result.turn_ended:
                stopped = "turn_ended"
                break
            self.sleep(self.guess_delay_sec)

        return AITurnOutcome(
            seat_id=seat_id,
            model_id=model_id,
            moves_applied=moves_applied,
            stopped_reason=stopped,
        )

    def _call_with_timeout(
        self,
        fn: Callable[[str, Any], T],
        model_id: str,
        context: Any,
        error_cls: type[GenerationError],
    ) -> T:
        pool = concurrent.futures.ThreadPoolExecutor(max_workers=1)
        future = pool.submit(fn, model_id, context)
        try:
            return future.result(timeout=self.provider_timeout_sec)
        except concurrent.futures.TimeoutError as exc:
            logger.warning("%s timed out after %.1fs", model_id, self.provider_timeout_sec)
            raise error_cls(model_id, f"Provider timed out after {self.provider_timeout_sec}s.") from exc
        except Exception as exc:
            logger.warning("%s provider call failed: %s", model_id, exc)
            raise error_cls(model_id, f"Provider call failed: {exc}") from exc
        finally:
            # A hung provider thread is abandoned rather than joined.
            pool.shutdown(wait=False, cancel_futures=True)
