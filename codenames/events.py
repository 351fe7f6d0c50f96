"""Per-game event log and JSONL export."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from time import time
from typing import Any, Iterable, Mapping

from .serialize import json_dumps, to_serializable

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Event types recorded by the game service."""

    GAME_CREATED = "game_created"
    CLUE_GIVEN = "clue_given"
    GUESS_MADE = "guess_made"
    TURN_ENDED = "turn_ended"
    TIMER_EXPIRED = "timer_expired"
    GAME_OVER = "game_over"
    AI_ERROR = "ai_error"
    ILLEGAL_ACTION = "illegal_action"


@dataclass(frozen=True)
class GameEvent:
    """Single replay event recorded while a game is played."""

    event_type: EventType
    game_id: str
    version: int
    timestamp_ms: int
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "game_id": self.game_id,
            "version": self.version,
            "timestamp_ms": self.timestamp_ms,
            "payload": to_serializable(self.payload),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameEvent":
        return cls(
            event_type=EventType(str(data["event_type"])),
            game_id=str(data["game_id"]),
            version=int(data["version"]),
            timestamp_ms=int(data["timestamp_ms"]),
            payload=dict(data.get("payload", {})),
        )

    @classmethod
    def create(
        cls,
        event_type: EventType,
        game_id: str,
        version: int,
        payload: dict[str, Any],
        *,
        now: float | None = None,
    ) -> "GameEvent":
        """Construct an event stamped with `now` (wall clock when omitted)."""
        return cls(
            event_type=event_type,
            game_id=game_id,
            version=version,
            timestamp_ms=int((time() if now is None else now) * 1000),
            payload=payload,
        )


class EventLog:
    """Thread-safe, append-only event lists keyed by game id.

    At most `max_games` histories are kept; recording for a new game beyond
    that evicts the game whose last event is oldest.
    """

    def __init__(self, max_games: int = 1000) -> None:
        if max_games < 1:
            raise ValueError("max_games must be positive.")
        self.max_games = max_games
        self._events: OrderedDict[str, list[GameEvent]] = OrderedDict()
        self._lock = threading.Lock()

    def record(self, event: GameEvent) -> GameEvent:
        with self._lock:
            self._events.setdefault(event.game_id, []).append(event)
            self._events.move_to_end(event.game_id)
            while len(self._events) > self.max_games:
                evicted, _ = self._events.popitem(last=False)
                logger.info("event log full, dropped history of game %s", evicted)
        return event

    def for_game(self, game_id: str) -> list[GameEvent]:
        with self._lock:
            return list(self._events.get(game_id, []))


def write_jsonl(path: str | Path, events: Iterable[GameEvent]) -> None:
    """Persist events as JSONL to disk."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as handle:
        for event in events:
            handle.write(json_dumps(event.to_dict()))
            handle.write("\n")
