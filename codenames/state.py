"""Game aggregate, phases and the append-only records a game accumulates."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from .board import Board, CardColor, Team
from .errors import SeatConfigurationError
from .serialize import digest

AI_PLAYER_PREFIX = "AI:"
DEFAULT_TURN_SECONDS = 180


class Role(str, Enum):
    """Team roles."""

    SPYMASTER = "SPYMASTER"
    OPERATIVE = "OPERATIVE"


class Phase(str, Enum):
    """State-machine discriminant. The two win phases are terminal."""

    RED_CLUE = "RED_CLUE"
    RED_GUESS = "RED_GUESS"
    BLUE_CLUE = "BLUE_CLUE"
    BLUE_GUESS = "BLUE_GUESS"
    RED_WIN = "RED_WIN"
    BLUE_WIN = "BLUE_WIN"

    @property
    def team(self) -> Team:
        return Team.RED if self.value.startswith("RED") else Team.BLUE

    @property
    def role(self) -> Role | None:
        if self.value.endswith("_CLUE"):
            return Role.SPYMASTER
        if self.value.endswith("_GUESS"):
            return Role.OPERATIVE
        return None

    @property
    def is_terminal(self) -> bool:
        return self.value.endswith("_WIN")

    @property
    def is_clue(self) -> bool:
        return self.role is Role.SPYMASTER

    @property
    def is_guess(self) -> bool:
        return self.role is Role.OPERATIVE


LIVE_PHASES: tuple[Phase, ...] = (Phase.RED_CLUE, Phase.RED_GUESS, Phase.BLUE_CLUE, Phase.BLUE_GUESS)
CLUE_PHASES: tuple[Phase, ...] = (Phase.RED_CLUE, Phase.BLUE_CLUE)
GUESS_PHASES: tuple[Phase, ...] = (Phase.RED_GUESS, Phase.BLUE_GUESS)


def clue_phase(team: Team) -> Phase:
    return Phase.RED_CLUE if team is Team.RED else Phase.BLUE_CLUE


def guess_phase(team: Team) -> Phase:
    return Phase.RED_GUESS if team is Team.RED else Phase.BLUE_GUESS


def win_phase(team: Team) -> Phase:
    return Phase.RED_WIN if team is Team.RED else Phase.BLUE_WIN


class EndReason(str, Enum):
    """Why a game reached a win phase."""

    ASSASSIN = "assassin"
    ALL_WORDS_FOUND = "all_words_found"


TEAM_PLAYER_IDS: dict[tuple[Team, str], str] = {
    (Team.RED, "SPYMASTER"): "RED_SPYMASTER",
    (Team.RED, "OPERATIVE"): "RED_OPERATIVE",
    (Team.BLUE, "SPYMASTER"): "BLUE_SPYMASTER",
    (Team.BLUE, "OPERATIVE"): "BLUE_OPERATIVE",
}

SEAT_TO_TEAM_ROLE: dict[str, tuple[Team, Role]] = {
    seat_id: (team, Role(role))
    for (team, role), seat_id in TEAM_PLAYER_IDS.items()
}


def seat_for(team: Team, role: Role | str) -> str:
    """Return the canonical seat ID for a team/role pair."""
    role_name = role.value if isinstance(role, Role) else role
    return TEAM_PLAYER_IDS[(team, role_name)]


def team_role_for_seat(seat_id: str) -> tuple[Team, Role]:
    """Return team + role for a seat ID."""
    if seat_id not in SEAT_TO_TEAM_ROLE:
        raise ValueError(f"Unknown Codenames seat: {seat_id!r}")
    return SEAT_TO_TEAM_ROLE[seat_id]


def ai_player_id(model_id: str) -> str:
    """Synthetic player identifier stamped on every AI-applied move."""
    return f"{AI_PLAYER_PREFIX}{model_id}"


def is_ai_player_id(player_id: str | None) -> bool:
    return bool(player_id) and str(player_id).startswith(AI_PLAYER_PREFIX)


@dataclass(frozen=True)
class Clue:
    """A spymaster's one-word hint plus its target count."""

    team: Team
    word: str
    count: int
    issued_at: float

    def to_dict(self) -> dict[str, Any]:
        return {"team": self.team.value, "word": self.word, "count": self.count, "issued_at": self.issued_at}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Clue":
        return cls(
            team=Team(str(data["team"])),
            word=str(data["word"]),
            count=int(data["count"]),
            issued_at=float(data["issued_at"]),
        )


@dataclass(frozen=True)
class MoveRecord:
    """Immutable record of one guess. Created once, never changed or deleted."""

    team: Team
    board_index: int
    resulting_color: CardColor
    by_player: str
    timestamp: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "team": self.team.value,
            "board_index": self.board_index,
            "resulting_color": self.resulting_color.value,
            "by_player": self.by_player,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MoveRecord":
        return cls(
            team=Team(str(data["team"])),
            board_index=int(data["board_index"]),
            resulting_color=CardColor(str(data["resulting_color"])),
            by_player=str(data["by_player"]),
            timestamp=float(data["timestamp"]),
        )


@dataclass(frozen=True)
class HintRecord:
    """Immutable record of one accepted clue."""

    team: Team
    word: str
    count: int
    by_player: str
    timestamp: float
    reasoning: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "team": self.team.value,
            "word": self.word,
            "count": self.count,
            "by_player": self.by_player,
            "timestamp": self.timestamp,
            "reasoning": self.reasoning,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HintRecord":
        return cls(
            team=Team(str(data["team"])),
            word=str(data["word"]),
            count=int(data["count"]),
            by_player=str(data["by_player"]),
            timestamp=float(data["timestamp"]),
            reasoning=data.get("reasoning"),
        )


@dataclass(frozen=True)
class TurnTimer:
    started_at: float
    duration_seconds: int = DEFAULT_TURN_SECONDS

    def expired(self, now: float) -> bool:
        return now - self.started_at >= self.duration_seconds

    def seconds_left(self, now: float) -> float:
        return max(0.0, self.started_at + self.duration_seconds - now)

    def to_dict(self) -> dict[str, Any]:
        return {"started_at": self.started_at, "duration_seconds": self.duration_seconds}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TurnTimer":
        return cls(started_at=float(data["started_at"]), duration_seconds=int(data["duration_seconds"]))


@dataclass(frozen=True)
class Seat:
    """Occupant of one team/role seat: a human, or an AI model when no human sits."""

    human_id: str | None = None
    model_id: str | None = None

    def __post_init__(self) -> None:
        if bool(self.human_id) == bool(self.model_id):
            raise SeatConfigurationError("A seat needs exactly one of human_id or model_id.")

    @property
    def is_ai(self) -> bool:
        return not self.human_id

    @property
    def player_id(self) -> str:
        if self.human_id:
            return self.human_id
        return ai_player_id(str(self.model_id))

    @classmethod
    def parse(cls, raw: Any) -> "Seat":
        """Accept a Seat, a mapping, or a bare string (`AI:<model>` or a human id)."""
        if isinstance(raw, Seat):
            return raw
        if isinstance(raw, Mapping):
            return cls(human_id=raw.get("human_id"), model_id=raw.get("model_id"))
        if isinstance(raw, str) and raw.strip():
            value = raw.strip()
            if is_ai_player_id(value):
                return cls(model_id=value[len(AI_PLAYER_PREFIX):])
            return cls(human_id=value)
        raise SeatConfigurationError(f"Cannot parse seat assignment: {raw!r}")

    def to_dict(self) -> dict[str, Any]:
        return {"human_id": self.human_id, "model_id": self.model_id}


@dataclass
class Game:
    """Aggregate game record. Mutated only through state-machine transitions."""

    game_id: str
    board: Board
    seats: dict[str, Seat]
    turn_timer: TurnTimer
    phase: Phase = Phase.RED_CLUE
    active_clue: Clue | None = None
    remaining_guesses: int | None = None
    moves: list[MoveRecord] = field(default_factory=list)
    hints: list[HintRecord] = field(default_factory=list)
    winner: Team | None = None
    end_reason: EndReason | None = None
    version: int = 0
    created_at: float = 0.0
    completed_at: float | None = None

    @property
    def current_team(self) -> Team:
        return self.phase.team

    @property
    def is_terminal(self) -> bool:
        return self.phase.is_terminal

    @property
    def current_seat_id(self) -> str | None:
        if self.phase.role is None:
            return None
        return seat_for(self.phase.team, self.phase.role)

    @property
    def current_seat(self) -> Seat | None:
        seat_id = self.current_seat_id
        return self.seats.get(seat_id) if seat_id is not None else None

    @property
    def last_move(self) -> MoveRecord | None:
        return self.moves[-1] if self.moves else None

    def seat(self, team: Team, role: Role) -> Seat:
        return self.seats[seat_for(team, role)]

    def remaining_count(self, team: Team) -> int:
        return self.board.remaining_count(team)

    def to_dict(self) -> dict[str, Any]:
        return {
            "game_id": self.game_id,
            "phase": self.phase.value,
            "board": self.board.to_dict(),
            "seats": {seat_id: seat.to_dict() for seat_id, seat in self.seats.items()},
            "turn_timer": self.turn_timer.to_dict(),
            "active_clue": self.active_clue.to_dict() if self.active_clue is not None else None,
            "remaining_guesses": self.remaining_guesses,
            "moves": [move.to_dict() for move in self.moves],
            "hints": [hint.to_dict() for hint in self.hints],
            "winner": self.winner.value if self.winner is not None else None,
            "end_reason": self.end_reason.value if self.end_reason is not None else None,
            "version": self.version,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Game":
        clue = data.get("active_clue")
        winner = data.get("winner")
        end_reason = data.get("end_reason")
        remaining = data.get("remaining_guesses")
        completed_at = data.get("completed_at")
        return cls(
            game_id=str(data["game_id"]),
            phase=Phase(str(data["phase"])),
            board=Board.from_dict(data["board"]),
            seats={str(seat_id): Seat.parse(seat) for seat_id, seat in data["seats"].items()},
            turn_timer=TurnTimer.from_dict(data["turn_timer"]),
            active_clue=Clue.from_dict(clue) if clue is not None else None,
            remaining_guesses=int(remaining) if remaining is not None else None,
            moves=[MoveRecord.from_dict(move) for move in data.get("moves", [])],
            hints=[HintRecord.from_dict(hint) for hint in data.get("hints", [])],
            winner=Team(str(winner)) if winner is not None else None,
            end_reason=EndReason(str(end_reason)) if end_reason is not None else None,
            version=int(data.get("version", 0)),
            created_at=float(data.get("created_at", 0.0)),
            completed_at=float(completed_at) if completed_at is not None else None,
        )

    def state_digest(self) -> str:
        return digest(self.to_dict())


def validate_seats(seats: Mapping[str, Any]) -> dict[str, Seat]:
    """Normalize a seat mapping and require all four seats."""
    parsed: dict[str, Seat] = {}
    for seat_id, raw in seats.items():
        if seat_id not in SEAT_TO_TEAM_ROLE:
            raise SeatConfigurationError(f"Unknown seat {seat_id!r}.")
        parsed[seat_id] = Seat.parse(raw)
    missing = sorted(set(SEAT_TO_TEAM_ROLE) - set(parsed))
    if missing:
        raise SeatConfigurationError(f"Missing seat assignments: {missing}")
    return parsed
