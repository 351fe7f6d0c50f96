"""FastAPI server exposing the Codenames game API for human and AI seats."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from codenames.actions import action_from_dict
from codenames.config import EngineConfig
from codenames.errors import (
    EngineError,
    GameNotFoundError,
    GenerationError,
    SeatConfigurationError,
    StoreConflictError,
    ValidationError,
)
from codenames.serialize import json_dumps
from codenames.service import GameService
from codenames.store import InMemoryGameStore
from providers.factory import available_models
from server.file_store import JsonFileGameStore
from server.schemas import ActionRequest, CreateGameRequest, SeatAssignment

logger = logging.getLogger(__name__)


def build_service(config: EngineConfig | None = None) -> GameService:
    """Service backed by a JSON file store when CODENAMES_STORE_PATH is set, else in memory."""
    config = config or EngineConfig.from_env()
    store = JsonFileGameStore(config.store_path) if config.store_path else InMemoryGameStore()
    return GameService(store, config=config)


app = FastAPI(title="Codenames Engine API", version="0.1.0")
service = build_service()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _not_found(exc: GameNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=exc.to_dict())


@app.get("/api/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""
    return {"status": "ok"}


@app.get("/api/models")
def list_models() -> dict[str, Any]:
    """Model ids that can be seated, for providers with a configured API key."""
    return {"models": available_models()}


@app.get("/api/games")
def list_games(player_id: str = Query(...)) -> dict[str, Any]:
    """Games the player is seated in, newest first."""
    return {"games": service.list_games(player_id)}


@app.post("/api/games")
def create_game(request: CreateGameRequest) -> dict[str, Any]:
    """Create a game from four seat assignments."""
    seats = {
        seat_id: seat.model_dump() if isinstance(seat, SeatAssignment) else seat
        for seat_id, seat in request.seats.items()
    }
    try:
        game = service.create_game(
            seats,
            seed=request.seed,
            word_list=request.word_list,
            turn_duration_seconds=request.turn_duration_seconds,
        )
    except (SeatConfigurationError, ValueError) as exc:
        detail = exc.to_dict() if isinstance(exc, EngineError) else {"type": "ValueError", "message": str(exc)}
        raise HTTPException(status_code=400, detail=detail) from exc
    return service.project(game, request.viewer_player_id)


@app.get("/api/games/{game_id}")
def get_game(
    game_id: str,
    player_id: str | None = Query(default=None),
    seat_id: str | None = Query(default=None),
) -> dict[str, Any]:
    """Role-restricted projection for one viewer."""
    try:
        return service.view(game_id, player_id, seat_id=seat_id)
    except GameNotFoundError as exc:
        raise _not_found(exc) from exc


@app.post("/api/games/{game_id}/actions")
def submit_action(game_id: str, request: ActionRequest) -> dict[str, Any]:
    """Apply a human's clue, guess or skip, then let any AI seat now on turn respond.

    The human action is committed before AI seats run; an AI failure is reported
    in `ai_error` alongside the refreshed view.
    """
    try:
        action = action_from_dict(request.action)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail={"type": "ValueError", "message": str(exc)}) from exc

    try:
        service.submit_action(game_id, request.player_id, action, seat_id=request.seat_id)
    except GameNotFoundError as exc:
        raise _not_found(exc) from exc
    except PermissionError as exc:
        raise HTTPException(status_code=403, detail={"type": "PermissionError", "message": str(exc)}) from exc
    except ValidationError as exc:
        # Include refreshed state for convenient UI recovery.
        payload = service.view(game_id, request.player_id, seat_id=request.seat_id)
        payload["error"] = exc.to_dict()
        raise HTTPException(status_code=400, detail=payload) from exc
    except StoreConflictError as exc:
        raise HTTPException(status_code=409, detail=exc.to_dict()) from exc

    ai_error: dict[str, Any] | None = None
    try:
        service.run_ai_turns(game_id)
    except GenerationError as exc:
        ai_error = exc.to_dict()
    except StoreConflictError as exc:
        ai_error = exc.to_dict()

    payload = service.view(game_id, request.player_id, seat_id=request.seat_id)
    payload["ai_error"] = ai_error
    return payload


@app.post("/api/games/{game_id}/tick")
def tick(game_id: str, player_id: str | None = Query(default=None)) -> dict[str, Any]:
    """Polling tick: fires an expired timer and runs pending AI seats."""
    try:
        _, outcomes = service.poll(game_id)
    except GameNotFoundError as exc:
        raise _not_found(exc) from exc
    except GenerationError as exc:
        payload = service.view(game_id, player_id)
        payload["error"] = exc.to_dict()
        raise HTTPException(status_code=409, detail=payload) from exc
    except StoreConflictError as exc:
        raise HTTPException(status_code=409, detail=exc.to_dict()) from exc

    payload = service.view(game_id, player_id)
    payload["ai_turns"] = [outcome.to_dict() for outcome in outcomes]
    return payload


@app.get("/api/games/{game_id}/events", response_model=None)
def get_events(game_id: str, format: str = Query(default="array")) -> Any:
    """Return full event history as array (default) or JSONL text."""
    try:
        events = [event.to_dict() for event in service.events(game_id)]
    except GameNotFoundError as exc:
        raise _not_found(exc) from exc

    if format == "jsonl":
        text = "\n".join(json_dumps(event) for event in events)
        return PlainTextResponse(content=text, media_type="application/jsonl")
    return events


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("server.main:app", host="0.0.0.0", port=8000, reload=True)
