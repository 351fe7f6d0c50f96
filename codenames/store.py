"""Game persistence contract and the in-memory implementation."""

from __future__ import annotations

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Any, Mapping, Protocol

from .board import Board
from .errors import GameNotFoundError, StoreConflictError
from .state import Game, HintRecord, MoveRecord, Seat, TurnTimer

logger = logging.getLogger(__name__)


def new_game_id() -> str:
    return f"game-{uuid.uuid4().hex[:10]}"


class GameStore(Protocol):
    """Storage seen by the game service.

    `load_game` returns an independent copy; `save_game` commits only when the
    stored version equals the copy's version and raises StoreConflictError
    otherwise.
    """

    def create_game(self, board: Board, seats: Mapping[str, Seat], *, turn_timer: TurnTimer) -> str:
        ...

    def load_game(self, game_id: str) -> Game:
        ...

    def save_game(self, game: Game) -> None:
        ...

    def append_move(self, game_id: str, move: MoveRecord) -> None:
        ...

    def append_hint(self, game_id: str, hint: HintRecord) -> None:
        ...

    def game_ids(self) -> list[str]:
        ...


class SnapshotGameStore(ABC):
    """Keeps each game as a plain dict snapshot behind one lock.

    Subclasses decide where snapshots live by implementing `_read`/`_write`.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()

    @abstractmethod
    def _read(self, game_id: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    def _write(self, game_id: str, snapshot: dict[str, Any]) -> None:
        ...

    @abstractmethod
    def game_ids(self) -> list[str]:
        ...

    def create_game(self, board: Board, seats: Mapping[str, Seat], *, turn_timer: TurnTimer) -> str:
        game_id = new_game_id()
        game = Game(
            game_id=game_id,
            board=board,
            seats=dict(seats),
            turn_timer=turn_timer,
            created_at=turn_timer.started_at,
        )
        with self._lock:
            self._write(game_id, game.to_dict())
        logger.info("created game %s", game_id)
        return game_id

    def load_game(self, game_id: str) -> Game:
        with self._lock:
            snapshot = self._read(game_id)
        if snapshot is None:
            raise GameNotFoundError(game_id)
        return Game.from_dict(snapshot)

    def save_game(self, game: Game) -> None:
        with self._lock:
            snapshot = self._read(game.game_id)
            if snapshot is None:
                raise GameNotFoundError(game.game_id)
            stored_version = int(snapshot.get("version", 0))
            if stored_version != game.version:
                raise StoreConflictError(game.game_id, game.version, stored_version)
            game.version = stored_version + 1
            self._write(game.game_id, game.to_dict())

    def append_move(self, game_id: str, move: MoveRecord) -> None:
        self._append(game_id, "moves", move.to_dict())

    def append_hint(self, game_id: str, hint: HintRecord) -> None:
        self._append(game_id, "hints", hint.to_dict())

    def _append(self, game_id: str, key: str, record: dict[str, Any]) -> None:
        with self._lock:
            snapshot = self._read(game_id)
            if snapshot is None:
                raise GameNotFoundError(game_id)
            snapshot.setdefault(key, []).append(record)
            snapshot["version"] = int(snapshot.get("version", 0)) + 1
            self._write(game_id, snapshot)


class InMemoryGameStore(SnapshotGameStore):
    def __init__(self) -> None:
        super().__init__()
        self._games: dict[str, dict[str, Any]] = {}

    def _read(self, game_id: str) -> dict[str, Any] | None:
        snapshot = self._games.get(game_id)
        # Snapshots are rebuilt into fresh objects on load, but the nested lists
        # would still be shared with an appending caller.
        return Game.from_dict(snapshot).to_dict() if snapshot is not None else None

    def _write(self, game_id: str, snapshot: dict[str, Any]) -> None:
        self._games[game_id] = snapshot

    def game_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._games)
