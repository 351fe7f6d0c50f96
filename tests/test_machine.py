"""Turn state machine transitions, priorities and timers."""

from __future__ import annotations

import pytest

from codenames.actions import GiveClue, GuessCard, Skip
from codenames.board import Team
from codenames.errors import AlreadyRevealedError, WrongTurnError
from codenames.machine import TRANSITION_PRIORITY, TickContext, TurnStateMachine
from codenames.state import EndReason, Phase
from conftest import ASSASSIN_INDEX, BLUE_INDICES, NEUTRAL_INDICES, RED_INDICES


def _clue(machine, game, word: str = "OCEAN", count: int = 3):  # noqa: ANN001, ANN202
    return machine.tick(game, GiveClue(word=word, count=count), seat_id="RED_SPYMASTER", by_player="alice")


def test_transition_priority_order_is_fixed() -> None:
    assert TRANSITION_PRIORITY == (
        "assassin",
        "all_words_found",
        "timer_expired",
        "clue_given",
        "guess_resolved",
        "skipped",
    )
    machine = TurnStateMachine()
    assert tuple(transition.name for transition in machine.transitions) == TRANSITION_PRIORITY


def test_clue_sets_budget_and_moves_to_guess(game, clock) -> None:  # noqa: ANN001
    machine = TurnStateMachine(clock=clock)
    started = game.turn_timer.started_at
    clock.advance(5)

    result = _clue(machine, game)

    assert result.transition == "clue_given"
    assert game.phase is Phase.RED_GUESS
    assert game.remaining_guesses == 4
    assert game.active_clue is not None and game.active_clue.word == "OCEAN"
    assert game.turn_timer.started_at == started
    assert result.hint is not None and result.hint.by_player == "alice"
    assert [hint.word for hint in game.hints] == ["OCEAN"]


def test_correct_guess_decrements_and_stays(game, clock) -> None:  # noqa: ANN001
    machine = TurnStateMachine(clock=clock)
    _clue(machine, game)

    result = machine.tick(game, GuessCard(index=RED_INDICES[0]), seat_id="RED_OPERATIVE", by_player="bob")

    assert result.transition == "guess_resolved"
    assert not result.turn_ended
    assert game.phase is Phase.RED_GUESS
    assert game.remaining_guesses == 3
    assert game.board.remaining_count(Team.RED) == 8
    assert len(game.moves) == 1 and game.moves[0].by_player == "bob"


@pytest.mark.parametrize("index", [BLUE_INDICES[0], NEUTRAL_INDICES[0]])
def test_wrong_guess_ends_turn_and_resets_timer(game, clock, index) -> None:  # noqa: ANN001
    machine = TurnStateMachine(clock=clock)
    _clue(machine, game)
    clock.advance(30)

    result = machine.tick(game, GuessCard(index=index), seat_id="RED_OPERATIVE", by_player="bob")

    assert result.turn_ended
    assert game.phase is Phase.BLUE_CLUE
    assert game.active_clue is None
    assert game.remaining_guesses is None
    assert game.turn_timer.started_at == clock.now


def test_budget_of_count_plus_one_then_turn_ends(game, clock) -> None:  # noqa: ANN001
    machine = TurnStateMachine(clock=clock)
    _clue(machine, game, count=2)

    results = [
        machine.tick(game, GuessCard(index=index), seat_id="RED_OPERATIVE", by_player="bob")
        for index in RED_INDICES[:3]
    ]

    assert [result.turn_ended for result in results] == [False, False, True]
    assert game.phase is Phase.BLUE_CLUE


def test_assassin_hands_win_to_other_team(game, clock) -> None:  # noqa: ANN001
    machine = TurnStateMachine(clock=clock)
    _clue(machine, game)

    result = machine.tick(game, GuessCard(index=ASSASSIN_INDEX), seat_id="RED_OPERATIVE", by_player="bob")

    assert result.transition == "assassin"
    assert result.game_over
    assert game.phase is Phase.BLUE_WIN
    assert game.winner is Team.BLUE
    assert game.end_reason is EndReason.ASSASSIN
    assert game.completed_at == clock.now


def test_revealing_last_team_card_wins(game, clock) -> None:  # noqa: ANN001
    machine = TurnStateMachine(clock=clock)
    for index in RED_INDICES[:-1]:
        game.board.reveal(index)
    _clue(machine, game, count=1)

    result = machine.tick(game, GuessCard(index=RED_INDICES[-1]), seat_id="RED_OPERATIVE", by_player="bob")

    assert result.transition == "all_words_found"
    assert game.phase is Phase.RED_WIN
    assert game.end_reason is EndReason.ALL_WORDS_FOUND
    assert game.remaining_count(Team.RED) == 0


def test_revealing_opponents_last_card_makes_them_win(game, clock) -> None:  # noqa: ANN001
    machine = TurnStateMachine(clock=clock)
    for index in BLUE_INDICES[:-1]:
        game.board.reveal(index)
    _clue(machine, game, count=1)

    machine.tick(game, GuessCard(index=BLUE_INDICES[-1]), seat_id="RED_OPERATIVE", by_player="bob")

    assert game.phase is Phase.BLUE_WIN
    assert game.winner is Team.BLUE
    assert game.end_reason is EndReason.ALL_WORDS_FOUND


def test_timer_expiry_without_action_switches_team(game, clock) -> None:  # noqa: ANN001
    machine = TurnStateMachine(clock=clock)
    _clue(machine, game)
    clock.advance(180)

    result = machine.tick(game)

    assert result.transition == "timer_expired"
    assert game.phase is Phase.BLUE_CLUE
    assert game.active_clue is None
    assert game.remaining_guesses is None
    assert game.turn_timer.started_at == clock.now


def test_timer_not_expired_is_noop(game, clock) -> None:  # noqa: ANN001
    machine = TurnStateMachine(clock=clock)
    clock.advance(179)
    before = game.to_dict()

    result = machine.tick(game)

    assert not result.changed
    assert game.to_dict() == before


def test_action_after_expiry_is_dropped(game, clock) -> None:  # noqa: ANN001
    machine = TurnStateMachine(clock=clock)
    _clue(machine, game)
    clock.advance(200)

    result = machine.tick(game, GuessCard(index=RED_INDICES[0]), seat_id="RED_OPERATIVE", by_player="bob")

    assert result.action_dropped
    assert result.transition == "timer_expired"
    assert game.moves == []
    assert not game.board.cards[RED_INDICES[0]].revealed


def test_skip_ends_turn(game, clock) -> None:  # noqa: ANN001
    machine = TurnStateMachine(clock=clock)
    _clue(machine, game)

    result = machine.tick(game, Skip(), seat_id="RED_OPERATIVE", by_player="bob")

    assert result.transition == "skipped"
    assert game.phase is Phase.BLUE_CLUE


def test_illegal_action_leaves_game_untouched(game, clock) -> None:  # noqa: ANN001
    machine = TurnStateMachine(clock=clock)
    _clue(machine, game)
    machine.tick(game, GuessCard(index=RED_INDICES[0]), seat_id="RED_OPERATIVE", by_player="bob")
    before = game.state_digest()

    with pytest.raises(AlreadyRevealedError):
        machine.tick(game, GuessCard(index=RED_INDICES[0]), seat_id="RED_OPERATIVE", by_player="bob")
    with pytest.raises(WrongTurnError):
        machine.tick(game, GiveClue(word="SEA", count=1), seat_id="BLUE_SPYMASTER", by_player="carol")

    assert game.state_digest() == before


def test_win_phase_is_absorbing(game, clock) -> None:  # noqa: ANN001
    machine = TurnStateMachine(clock=clock)
    _clue(machine, game)
    machine.tick(game, GuessCard(index=ASSASSIN_INDEX), seat_id="RED_OPERATIVE", by_player="bob")
    before = game.to_dict()
    clock.advance(10_000)

    for action in (None, Skip(), GuessCard(index=0), GiveClue(word="SEA", count=1)):
        result = machine.tick(game, action, by_player="anyone")
        assert not result.changed

    assert game.to_dict() == before


def test_effects_reject_mismatched_inputs(game, clock) -> None:  # noqa: ANN001
    transitions = {transition.name: transition for transition in TurnStateMachine(clock=clock).transitions}

    with pytest.raises(TypeError, match="GiveClue"):
        transitions["clue_given"].effect(TickContext(game=game, action=Skip(), now=clock.now, by_player="alice"))
    with pytest.raises(TypeError, match="admitted guess"):
        transitions["guess_resolved"].effect(
            TickContext(game=game, action=GuessCard(index=0), now=clock.now, by_player="bob")
        )
    assert game.phase is Phase.RED_CLUE
