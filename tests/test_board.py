"""Board dealing, reveal and remaining-count rules."""

from __future__ import annotations

import random

import pytest

from codenames.board import BOARD_SIZE, DEFAULT_WORDS, Board, CardColor, Team
from codenames.errors import AlreadyRevealedError, IndexOutOfRangeError
from conftest import layout_board


def test_created_board_has_fixed_distribution() -> None:
    board = Board.create(random.Random(7))

    assert len(board.cards) == BOARD_SIZE
    assert board.color_counts() == {"RED": 9, "BLUE": 8, "NEUTRAL": 7, "ASSASSIN": 1}
    assert [card.index for card in board.cards] == list(range(BOARD_SIZE))
    assert len(set(board.words)) == BOARD_SIZE
    assert not any(card.revealed for card in board.cards)


def test_same_seed_deals_same_board() -> None:
    first = Board.create(random.Random(11))
    second = Board.create(random.Random(11))
    assert first.to_dict() == second.to_dict()


def test_default_word_list_is_large_and_unique() -> None:
    assert len(DEFAULT_WORDS) == 400
    assert len(set(DEFAULT_WORDS)) == 400
    assert all(word == word.upper() for word in DEFAULT_WORDS)


def test_custom_word_list_is_normalized_and_must_have_enough_words() -> None:
    words = [f"word{i}" for i in range(30)]
    board = Board.create(random.Random(3), words)
    assert set(board.words) <= {word.upper() for word in words}

    with pytest.raises(ValueError):
        Board.create(random.Random(3), ["one", "ONE", "two"] * 20)


def test_reveal_decrements_remaining_count_once() -> None:
    board = layout_board()
    assert board.remaining_count(Team.RED) == 9
    assert board.remaining_count(Team.BLUE) == 8

    card = board.reveal(0)
    assert card.revealed and card.color is CardColor.RED
    assert board.remaining_count(Team.RED) == 8
    assert board.remaining_count(Team.BLUE) == 8

    with pytest.raises(AlreadyRevealedError):
        board.reveal(0)
    assert board.remaining_count(Team.RED) == 8


def test_remaining_count_never_goes_negative() -> None:
    board = layout_board()
    for index in range(BOARD_SIZE):
        board.reveal(index)
    assert board.remaining_count(Team.RED) == 0
    assert board.remaining_count(Team.BLUE) == 0
    assert board.unrevealed_indices() == []


@pytest.mark.parametrize("index", [-1, 25, True])
def test_reveal_rejects_out_of_range_index(index) -> None:  # noqa: ANN001
    board = layout_board()
    with pytest.raises(IndexOutOfRangeError):
        board.reveal(index)


def test_board_rejects_wrong_distribution() -> None:
    data = layout_board().to_dict()
    data["cards"][24]["color"] = "RED"
    with pytest.raises(ValueError):
        Board.from_dict(data)
