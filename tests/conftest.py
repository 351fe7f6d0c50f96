"""Shared fixtures: a fixed board layout, a controllable clock and seated games."""

from __future__ import annotations

import pytest

from codenames.board import Board, CardColor, board_from_layout
from codenames.state import Game, Seat, TurnTimer

WORDS = [
    "FISH", "APPLE", "BERLIN", "CASTLE", "DRAGON",
    "ENGINE", "FOREST", "GHOST", "HONEY", "ISLAND",
    "JUPITER", "KNIGHT", "LEMON", "MOUNTAIN", "NINJA",
    "ORANGE", "PIANO", "QUEEN", "ROBOT", "SATURN",
    "TORCH", "UNICORN", "VIOLIN", "WHALE", "YACHT",
]

# 0-8 red, 9-16 blue, 17-23 neutral, 24 assassin.
COLORS = [CardColor.RED] * 9 + [CardColor.BLUE] * 8 + [CardColor.NEUTRAL] * 7 + [CardColor.ASSASSIN]

RED_INDICES = list(range(0, 9))
BLUE_INDICES = list(range(9, 17))
NEUTRAL_INDICES = list(range(17, 24))
ASSASSIN_INDEX = 24

HUMAN_SEATS = {
    "RED_SPYMASTER": "alice",
    "RED_OPERATIVE": "bob",
    "BLUE_SPYMASTER": "carol",
    "BLUE_OPERATIVE": "dave",
}


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


def layout_board() -> Board:
    return board_from_layout(WORDS, COLORS)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def game(clock: FakeClock) -> Game:
    return Game(
        game_id="game-test",
        board=layout_board(),
        seats={seat_id: Seat(human_id=human) for seat_id, human in HUMAN_SEATS.items()},
        turn_timer=TurnTimer(started_at=clock.now, duration_seconds=180),
        created_at=clock.now,
    )
