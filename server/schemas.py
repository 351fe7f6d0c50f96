"""Pydantic request schemas for the game API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SeatAssignment(BaseModel):
    """Who sits in one seat: a human id, or a model id for an AI seat."""

    human_id: str | None = None
    model_id: str | None = None


class CreateGameRequest(BaseModel):
    """Request body for creating a new game."""

    seats: dict[str, SeatAssignment | str]
    seed: int | None = None
    word_list: list[str] | None = None
    turn_duration_seconds: int | None = Field(default=None, gt=0)
    viewer_player_id: str | None = None


class ActionRequest(BaseModel):
    """Request body for a clue, guess or skip."""

    player_id: str
    seat_id: str | None = None
    action: dict[str, Any]
