"""Player actions admitted into the turn state machine."""

from __future__ import annotations

from abc import ABC
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, ClassVar, Mapping


class ActionType(str, Enum):
    """Supported action discriminators."""

    GIVE_CLUE = "GiveClue"
    GUESS_CARD = "GuessCard"
    SKIP = "Skip"


class Action(ABC):
    """Base class for a typed command submitted by a human or an AI seat."""

    action_type: ClassVar[str] = "Action"

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)  # type: ignore[call-overload]
        payload["type"] = self.action_type
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Action":
        kwargs = {key: value for key, value in data.items() if key != "type"}
        return cls(**kwargs)  # type: ignore[call-arg]


@dataclass(frozen=True)
class GiveClue(Action):
    """Spymaster action providing a clue word and target count."""

    word: str
    count: int
    action_type: ClassVar[str] = ActionType.GIVE_CLUE.value

    def __post_init__(self) -> None:
        object.__setattr__(self, "word", str(self.word).strip())


@dataclass(frozen=True)
class GuessCard(Action):
    """Operative action revealing one board card."""

    index: int
    action_type: ClassVar[str] = ActionType.GUESS_CARD.value


@dataclass(frozen=True)
class Skip(Action):
    """Operative action ending the team's guessing early."""

    action_type: ClassVar[str] = ActionType.SKIP.value


_ALIASES: dict[str, ActionType] = {
    "giveclue": ActionType.GIVE_CLUE,
    "clue": ActionType.GIVE_CLUE,
    "guesscard": ActionType.GUESS_CARD,
    "guess": ActionType.GUESS_CARD,
    "skip": ActionType.SKIP,
    "endturn": ActionType.SKIP,
}


def action_from_dict(data: Mapping[str, Any]) -> Action:
    """Parse an action from a JSON payload."""
    raw_type = str(data.get("type", "")).replace("_", "").lower()
    action_type = _ALIASES.get(raw_type)
    if action_type is ActionType.GIVE_CLUE:
        count = data.get("count", data.get("number"))
        if count is None:
            raise ValueError("GiveClue requires a count.")
        return GiveClue(word=str(data.get("word", data.get("clue", ""))), count=int(count))
    if action_type is ActionType.GUESS_CARD:
        index = data.get("index", data.get("cardIndex", data.get("card_index")))
        if index is None:
            raise ValueError("GuessCard requires an index.")
        return GuessCard(index=int(index))
    if action_type is ActionType.SKIP:
        return Skip()
    raise ValueError(f"Unknown Codenames action type: {data.get('type')!r}")
