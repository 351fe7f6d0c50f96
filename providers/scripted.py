"""Deterministic providers for tests and offline play."""

from __future__ import annotations

from typing import Callable, Iterable

from codenames.board import CardColor
from codenames.context import OperativeContext, SpymasterContext

from .base import GuessProposal, HintProposal


class ScriptedHintProvider:
    """Returns queued proposals in order, or delegates to a policy callable."""

    def __init__(
        self,
        proposals: Iterable[HintProposal] = (),
        policy: Callable[[str, SpymasterContext], HintProposal] | None = None,
    ):
        self.proposals = list(proposals)
        self.policy = policy
        self.calls: list[tuple[str, SpymasterContext]] = []

    def generate_hint(self, model_id: str, context: SpymasterContext) -> HintProposal:
        self.calls.append((model_id, context))
        if self.proposals:
            return self.proposals.pop(0)
        if self.policy is None:
            raise RuntimeError("ScriptedHintProvider ran out of proposals.")
        return self.policy(model_id, context)


class ScriptedGuessProvider:
    """Returns queued proposals in order, or delegates to a policy callable."""

    def __init__(
        self,
        proposals: Iterable[GuessProposal] = (),
        policy: Callable[[str, OperativeContext], GuessProposal] | None = None,
    ):
        self.proposals = list(proposals)
        self.policy = policy
        self.calls: list[tuple[str, OperativeContext]] = []

    def generate_guess(self, model_id: str, context: OperativeContext) -> GuessProposal:
        self.calls.append((model_id, context))
        if self.proposals:
            return self.proposals.pop(0)
        if self.policy is None:
            raise RuntimeError("ScriptedGuessProvider ran out of proposals.")
        return self.policy(model_id, context)


def first_unrevealed_guess(model_id: str, context: OperativeContext) -> GuessProposal:
    """Guess the lowest unrevealed index."""
    if not context.available_moves:
        raise RuntimeError("No unrevealed cards left to guess.")
    return GuessProposal(card_index=context.available_moves[0], confidence=0.0, reasoning="first unrevealed card")


def oracle_guess_policy(colors: list[CardColor]) -> Callable[[str, OperativeContext], GuessProposal]:
    """Build a policy that always picks one of the guessing team's own cards.

    `colors` is the board's true layout, which an operative would never see; it
    exists for tests that need an all-correct operative.
    """

    def policy(model_id: str, context: OperativeContext) -> GuessProposal:
        own = context.current_team.card_color
        for index in context.available_moves:
            if colors[index] is own:
                return GuessProposal(card_index=index, confidence=1.0, reasoning="known team card")
        return first_unrevealed_guess(model_id, context)

    return policy


def fixed_hint_policy(word: str, count: int) -> Callable[[str, SpymasterContext], HintProposal]:
    def policy(model_id: str, context: SpymasterContext) -> HintProposal:
        return HintProposal(word=word, count=count, reasoning="scripted")

    return policy
