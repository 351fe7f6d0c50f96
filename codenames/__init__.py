"""Codenames turn engine exports."""

from .actions import Action, ActionType, GiveClue, GuessCard, Skip, action_from_dict
from .board import BOARD_SIZE, Board, Card, CardColor, Team
from .context import OperativeContext, SpymasterContext, build_context, render
from .errors import (
    EngineError,
    GameNotFoundError,
    GenerationError,
    StoreConflictError,
    ValidationError,
)
from .machine import TRANSITION_PRIORITY, TickResult, TurnStateMachine
from .state import EndReason, Game, Phase, Role, Seat

__all__ = [
    "Action",
    "ActionType",
    "BOARD_SIZE",
    "Board",
    "Card",
    "CardColor",
    "EndReason",
    "EngineError",
    "Game",
    "GameNotFoundError",
    "GenerationError",
    "GiveClue",
    "GuessCard",
    "OperativeContext",
    "Phase",
    "Role",
    "Seat",
    "Skip",
    "SpymasterContext",
    "StoreConflictError",
    "TRANSITION_PRIORITY",
    "Team",
    "TickResult",
    "TurnStateMachine",
    "ValidationError",
    "action_from_dict",
    "build_context",
    "render",
]
