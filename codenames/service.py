"""Game service: one atomic load-tick-save per request, plus AI seat routing."""

from __future__ import annotations

import logging
import random
import threading
import time
from typing import Any, Callable, Mapping, Sequence

from providers.base import GuessProvider, HintProvider
from providers.llm_provider import LLMGuessProvider, LLMHintProvider

from .actions import Action
from .board import Board
from .config import EngineConfig
from .context import build_context
from .errors import GenerationError, StoreConflictError, ValidationError
from .events import EventLog, EventType, GameEvent
from .machine import SYSTEM_PLAYER, TickResult, TurnStateMachine
from .orchestrator import AIOrchestrator, AITurnOutcome
from .state import Game, Role, TurnTimer, team_role_for_seat, validate_seats
from .store import GameStore, InMemoryGameStore

logger = logging.getLogger(__name__)


class GameService:
    """Entry point for humans, polling clients and the AI orchestrator."""

    def __init__(
        self,
        store: GameStore | None = None,
        *,
        config: EngineConfig | None = None,
        hint_provider: HintProvider | None = None,
        guess_provider: GuessProvider | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or EngineConfig.from_env()
        self.store: GameStore = store if store is not None else InMemoryGameStore()
        self.clock = clock
        self.machine = TurnStateMachine(clock=clock)
        self.event_log = EventLog(max_games=self.config.event_log_max_games)
        self.orchestrator = AIOrchestrator(
            self,
            hint_provider if hint_provider is not None else LLMHintProvider(),
            guess_provider if guess_provider is not None else LLMGuessProvider(),
            guess_delay_sec=self.config.ai_guess_delay_sec,
            provider_timeout_sec=self.config.provider_timeout_sec,
            clock=clock,
            sleep=sleep,
        )
        self._ai_locks: dict[str, threading.RLock] = {}
        self._ai_locks_guard = threading.Lock()

    # Lifecycle

    def create_game(
        self,
        seats: Mapping[str, Any],
        *,
        seed: int | None = None,
        word_list: Sequence[str] | None = None,
        turn_duration_seconds: int | None = None,
    ) -> Game:
        """Shuffle a fresh board and persist a new game in RED_CLUE."""
        parsed = validate_seats(seats)
        board = Board.create(random.Random(seed), word_list)
        duration = turn_duration_seconds or self.config.turn_duration_seconds
        timer = TurnTimer(started_at=self.clock(), duration_seconds=duration)
        game_id = self.store.create_game(board, parsed, turn_timer=timer)
        game = self.store.load_game(game_id)
        self._record(
            EventType.GAME_CREATED,
            game,
            {
                "seats": {seat_id: seat.player_id for seat_id, seat in parsed.items()},
                "seed": seed,
                "turn_duration_seconds": duration,
            },
        )
        return game

    def load_game(self, game_id: str) -> Game:
        return self.store.load_game(game_id)

    # Ticks

    def apply_action(
        self,
        game_id: str,
        action: Action | None,
        *,
        seat_id: str | None = None,
        by_player: str = SYSTEM_PLAYER,
        reasoning: str | None = None,
    ) -> tuple[Game, TickResult]:
        """Run one tick against fresh state and commit it, retrying on version conflicts.

        Raises ValidationError when the action is illegal; the stored game is
        left untouched in that case.
        """
        conflicts = 0
        while True:
            game = self.store.load_game(game_id)
            try:
                result = self.machine.tick(
                    game, action, seat_id=seat_id, by_player=by_player, reasoning=reasoning
                )
            except ValidationError as exc:
                self._record(
                    EventType.ILLEGAL_ACTION,
                    game,
                    {
                        "by_player": by_player,
                        "seat_id": seat_id,
                        "action": action.to_dict() if action is not None else None,
                        "error": exc.to_dict(),
                    },
                )
                raise
            if not result.changed:
                return game, result
            try:
                self.store.save_game(game)
            except StoreConflictError:
                conflicts += 1
                if conflicts > self.config.store_retry_limit:
                    logger.warning("game %s: giving up after %d version conflicts", game_id, conflicts)
                    raise
                logger.info(
                    "game %s: version conflict, retry %d/%d", game_id, conflicts, self.config.store_retry_limit
                )
                continue
            self._record_tick(game, result, action, by_player, reasoning)
            return game, result

    def submit_action(
        self,
        game_id: str,
        player_id: str,
        action: Action,
        *,
        seat_id: str | None = None,
    ) -> tuple[Game, TickResult]:
        """Apply a human's action on the seat they occupy."""
        game = self.store.load_game(game_id)
        seat_id = self._resolve_human_seat(game, player_id, seat_id)
        return self.apply_action(game_id, action, seat_id=seat_id, by_player=player_id)

    def poll(self, game_id: str) -> tuple[Game, list[AITurnOutcome]]:
        """Parameterless tick: fire an expired timer, then let pending AI seats act."""
        self.apply_action(game_id, None)
        outcomes = self.run_ai_turns(game_id)
        return self.store.load_game(game_id), outcomes

    def run_ai_turns(self, game_id: str) -> list[AITurnOutcome]:
        """Let AI seats act until a human seat is on turn, the game ends, or nothing moves.

        Only one caller drives a given game's AI seats at a time; concurrent
        callers return immediately with no outcomes. GenerationError propagates
        after being logged as an `ai_error` event.
        """
        lock = self._ai_lock(game_id)
        if not lock.acquire(blocking=False):
            logger.info("game %s: AI turn already in progress", game_id)
            return []
        finished = False
        try:
            outcomes: list[AITurnOutcome] = []
            while True:
                game, _ = self.apply_action(game_id, None)
                finished = game.is_terminal
                seat = game.current_seat
                if finished or seat is None or not seat.is_ai:
                    break
                try:
                    outcome = self.orchestrator.play(game_id)
                except GenerationError as exc:
                    self._record(EventType.AI_ERROR, self.store.load_game(game_id), exc.to_dict())
                    raise
                if outcome is None:
                    break
                outcomes.append(outcome)
                if not outcome.turn_passed:
                    break
            return outcomes
        finally:
            lock.release()
            if finished:
                # Finished games never need their AI lock again.
                with self._ai_locks_guard:
                    self._ai_locks.pop(game_id, None)

    # Read side

    def list_games(self, player_id: str) -> list[dict[str, Any]]:
        """Summaries of the games `player_id` holds a human seat in, newest first."""
        summaries: list[tuple[float, dict[str, Any]]] = []
        for game_id in self.store.game_ids():
            game = self.store.load_game(game_id)
            seats = self._human_seats(game, player_id)
            if not seats:
                continue
            summary = {
                "game_id": game.game_id,
                "phase": game.phase.value,
                "current_team": game.current_team.value,
                "winner": game.winner.value if game.winner is not None else None,
                "end_reason": game.end_reason.value if game.end_reason is not None else None,
                "created_at": game.created_at,
                "completed_at": game.completed_at,
                "seat_id": self._viewer_seat(game, player_id, None),
                "seats": seats,
            }
            summaries.append((game.created_at, summary))
        summaries.sort(key=lambda item: item[0], reverse=True)
        return [summary for _, summary in summaries]

    def events(self, game_id: str) -> list[GameEvent]:
        self.store.load_game(game_id)
        return self.event_log.for_game(game_id)

    def view(self, game_id: str, player_id: str | None = None, *, seat_id: str | None = None) -> dict[str, Any]:
        """Role-restricted projection for `player_id`; anonymous viewers get the operative view."""
        game = self.store.load_game(game_id)
        return self.project(game, player_id, seat_id=seat_id)

    def project(self, game: Game, player_id: str | None = None, *, seat_id: str | None = None) -> dict[str, Any]:
        viewer_seat = self._viewer_seat(game, player_id, seat_id)
        if viewer_seat is not None:
            team, role = team_role_for_seat(viewer_seat)
        else:
            team, role = game.current_team, Role.OPERATIVE
        now = self.clock()
        context = build_context(game, team, role, now=now)
        # Spymaster reasoning can leak card colors; operatives only see it once the game is over.
        show_reasoning = role is Role.SPYMASTER or game.is_terminal
        current_seat = game.current_seat
        return {
            "game_id": game.game_id,
            "version": game.version,
            "phase": game.phase.value,
            "current_team": game.current_team.value,
            "current_seat": game.current_seat_id,
            "ai_turn_pending": bool(current_seat is not None and current_seat.is_ai and not game.is_terminal),
            "winner": game.winner.value if game.winner is not None else None,
            "end_reason": game.end_reason.value if game.end_reason is not None else None,
            "created_at": game.created_at,
            "completed_at": game.completed_at,
            "turn_timer": {
                **game.turn_timer.to_dict(),
                "seconds_left": game.turn_timer.seconds_left(now),
            },
            "seats": {key: seat.player_id for key, seat in game.seats.items()},
            "viewer": {
                "player_id": player_id,
                "seat_id": viewer_seat,
                "team": team.value,
                "role": role.value,
            },
            "context": context.to_dict(),
            "moves": [move.to_dict() for move in game.moves],
            "hints": [
                {**hint.to_dict(), "reasoning": hint.reasoning if show_reasoning else None}
                for hint in game.hints
            ],
        }

    # Helpers

    def _ai_lock(self, game_id: str) -> threading.RLock:
        with self._ai_locks_guard:
            return self._ai_locks.setdefault(game_id, threading.RLock())

    def _human_seats(self, game: Game, player_id: str) -> list[str]:
        return [seat_id for seat_id, seat in game.seats.items() if seat.human_id == player_id]

    def _resolve_human_seat(self, game: Game, player_id: str, seat_id: str | None) -> str:
        seats = self._human_seats(game, player_id)
        if not seats:
            raise PermissionError(f"Player {player_id!r} is not seated in game {game.game_id}.")
        if seat_id is not None:
            if seat_id not in seats:
                raise PermissionError(f"Player {player_id!r} does not occupy seat {seat_id}.")
            return seat_id
        if game.current_seat_id in seats:
            return str(game.current_seat_id)
        return seats[0]

    def _viewer_seat(self, game: Game, player_id: str | None, seat_id: str | None) -> str | None:
        if player_id is None:
            return None
        seats = self._human_seats(game, player_id)
        if seat_id is not None:
            return seat_id if seat_id in seats else None
        # A player holding several seats sees the most privileged one.
        spymaster_seats = [seat for seat in seats if seat.endswith("SPYMASTER")]
        if spymaster_seats:
            return spymaster_seats[0]
        return seats[0] if seats else None

    def _record(self, event_type: EventType, game: Game, payload: dict[str, Any]) -> None:
        self.event_log.record(GameEvent.create(event_type, game.game_id, game.version, payload, now=self.clock()))

    def _record_tick(
        self,
        game: Game,
        result: TickResult,
        action: Action | None,
        by_player: str,
        reasoning: str | None,
    ) -> None:
        if result.transition == "timer_expired":
            self._record(
                EventType.TIMER_EXPIRED,
                game,
                {
                    "phase_before": result.phase_before.value,
                    "dropped_action": action.to_dict() if result.action_dropped and action is not None else None,
                },
            )
        if result.hint is not None:
            self._record(EventType.CLUE_GIVEN, game, {"hint": result.hint.to_dict()})
        if result.move is not None:
            self._record(
                EventType.GUESS_MADE,
                game,
                {"move": result.move.to_dict(), "transition": result.transition, "reasoning": reasoning},
            )
        if result.turn_ended:
            self._record(
                EventType.TURN_ENDED,
                game,
                {"by_player": by_player, "next_phase": result.phase_after.value},
            )
        if result.game_over:
            self._record(
                EventType.GAME_OVER,
                game,
                {
                    "winner": game.winner.value if game.winner is not None else None,
                    "end_reason": game.end_reason.value if game.end_reason is not None else None,
                },
            )
