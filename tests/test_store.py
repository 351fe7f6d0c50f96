"""In-memory and JSON file stores: copies, version checks and appends."""

from __future__ import annotations

import json

import pytest

from codenames.board import CardColor, Team
from codenames.errors import GameNotFoundError, StoreConflictError
from codenames.state import HintRecord, MoveRecord, Phase, Seat, TurnTimer
from codenames.store import InMemoryGameStore
from conftest import HUMAN_SEATS, layout_board
from server.file_store import JsonFileGameStore


def _seats() -> dict[str, Seat]:
    return {seat_id: Seat(human_id=human) for seat_id, human in HUMAN_SEATS.items()}


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):  # noqa: ANN001, ANN201
    if request.param == "memory":
        return InMemoryGameStore()
    return JsonFileGameStore(tmp_path / "games")


def test_create_and_load_returns_independent_copies(store) -> None:  # noqa: ANN001
    game_id = store.create_game(layout_board(), _seats(), turn_timer=TurnTimer(started_at=5.0))
    first = store.load_game(game_id)
    second = store.load_game(game_id)

    assert game_id.startswith("game-")
    assert first.phase is Phase.RED_CLUE
    assert first.version == 0
    assert first.created_at == 5.0

    first.board.reveal(0)
    assert not second.board.cards[0].revealed
    assert not store.load_game(game_id).board.cards[0].revealed


def test_save_bumps_version_and_rejects_stale_copies(store) -> None:  # noqa: ANN001
    game_id = store.create_game(layout_board(), _seats(), turn_timer=TurnTimer(started_at=0.0))
    winner = store.load_game(game_id)
    loser = store.load_game(game_id)

    winner.phase = Phase.RED_GUESS
    store.save_game(winner)
    assert winner.version == 1

    loser.phase = Phase.BLUE_CLUE
    with pytest.raises(StoreConflictError) as excinfo:
        store.save_game(loser)
    assert excinfo.value.expected_version == 0
    assert excinfo.value.actual_version == 1
    assert store.load_game(game_id).phase is Phase.RED_GUESS


def test_append_records(store) -> None:  # noqa: ANN001
    game_id = store.create_game(layout_board(), _seats(), turn_timer=TurnTimer(started_at=0.0))
    store.append_move(game_id, MoveRecord(Team.RED, 3, CardColor.RED, "bob", 1.0))
    store.append_hint(game_id, HintRecord(Team.RED, "OCEAN", 2, "alice", 0.5, reasoning="sea things"))

    game = store.load_game(game_id)
    assert [move.board_index for move in game.moves] == [3]
    assert game.hints[0].reasoning == "sea things"
    assert game.version == 2


def test_unknown_game(store) -> None:  # noqa: ANN001
    with pytest.raises(GameNotFoundError):
        store.load_game("game-missing")
    with pytest.raises(KeyError):
        store.append_move("game-missing", MoveRecord(Team.RED, 0, CardColor.RED, "bob", 1.0))


def test_file_store_writes_readable_json(tmp_path) -> None:  # noqa: ANN001
    store = JsonFileGameStore(tmp_path)
    game_id = store.create_game(layout_board(), _seats(), turn_timer=TurnTimer(started_at=0.0))

    payload = json.loads((tmp_path / f"{game_id}.json").read_text(encoding="utf-8"))
    assert payload["phase"] == "RED_CLUE"
    assert store.game_ids() == [game_id]
    assert not list(tmp_path.glob("*.tmp"))
    with pytest.raises(GameNotFoundError):
        store.load_game("../escape")
