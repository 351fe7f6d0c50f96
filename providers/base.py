"""Contracts between the AI orchestrator and whatever produces clues and guesses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from codenames.context import OperativeContext, SpymasterContext


@dataclass(frozen=True)
class HintProposal:
    """A spymaster clue proposed by a provider. Not yet validated."""

    word: str
    count: int
    reasoning: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HintProposal":
        word = data.get("word", data.get("clue"))
        count = data.get("count", data.get("number"))
        if not isinstance(word, str):
            raise ValueError("Hint JSON requires a string 'word'.")
        if isinstance(count, bool) or not isinstance(count, (int, str)):
            raise ValueError("Hint JSON requires an integer 'count' (or 'number').")
        reasoning = data.get("reasoning")
        return cls(word=word.strip(), count=int(count), reasoning=str(reasoning) if reasoning is not None else None)


@dataclass(frozen=True)
class GuessProposal:
    """An operative guess proposed by a provider. Not yet validated."""

    card_index: int
    confidence: float = 0.0
    reasoning: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GuessProposal":
        index = data.get("cardIndex", data.get("card_index", data.get("index")))
        if isinstance(index, bool) or not isinstance(index, (int, str)):
            raise ValueError("Guess JSON requires an integer 'cardIndex' (or 'card_index').")
        reasoning = data.get("reasoning")
        return cls(
            card_index=int(index),
            confidence=float(data.get("confidence", 0.0) or 0.0),
            reasoning=str(reasoning) if reasoning is not None else None,
        )


class HintProvider(Protocol):
    def generate_hint(self, model_id: str, context: SpymasterContext) -> HintProposal:
        """Return a clue proposal for the spymaster seat."""


class GuessProvider(Protocol):
    def generate_guess(self, model_id: str, context: OperativeContext) -> GuessProposal:
        """Return a guess proposal for the operative seat."""
