"""LLM-backed hint and guess providers with strict JSON output and repair prompts."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Protocol, TypeVar

from codenames.board import Team
from codenames.context import OperativeContext, SpymasterContext

from .base import GuessProposal, HintProposal
from .factory import client_for_model

logger = logging.getLogger(__name__)

T = TypeVar("T")

JSON_SYSTEM_PROMPT = "You must respond with a valid JSON object only. No markdown, no backticks, no explanation."


class LLMClient(Protocol):
    """Minimal protocol for LLM API adapters."""

    def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:
        """Return a model response for a prompt."""


ClientFactory = Callable[[str], LLMClient]


def _extract_json_object(raw: str) -> dict[str, Any]:
    raw = raw.strip()
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        parsed = None

    if isinstance(parsed, dict):
        return parsed

    match = re.search(r"\{[\s\S]*\}", raw)
    if not match:
        raise ValueError("No JSON object found in LLM output.")
    parsed = json.loads(match.group(0))
    if not isinstance(parsed, dict):
        raise ValueError("LLM output JSON must be an object.")
    return parsed


def _team_name(team: Team) -> str:
    return team.value.lower()


def build_hint_prompt(context: SpymasterContext) -> str:
    team = context.current_team
    board_lines = "\n".join(
        f"{card.word} ({card.color.value if card.color else '?'}){' [REVEALED]' if card.revealed else ''}"
        for card in context.cards
    )
    forbidden = ", ".join(card.word.lower() for card in context.cards)
    unrevealed = ", ".join(card.word for card in context.cards if not card.revealed)
    return (
        f"You are the {_team_name(team)} team's spymaster in a game of Codenames.\n\n"
        "Your goal is to help your team find all their remaining words while avoiding the other "
        "team's words and the assassin.\n\n"
        "RULES:\n"
        "1. Your clue cannot be any form or part of any word visible on the board.\n"
        "2. Your clue must be a single word (no spaces).\n"
        "3. Your clue should connect to multiple unrevealed words belonging to your team.\n"
        "4. The number must be between 1 and 9.\n\n"
        "Board state:\n"
        f"{board_lines}\n\n"
        f"Words you cannot use as clues (or any form/part of these): {forbidden}\n\n"
        f"Your team's remaining words to find: {context.remaining_for(team)}\n"
        f"Unrevealed words: {unrevealed}\n\n"
        "Respond with only a JSON object in this exact format:\n"
        '{"word": "your_clue", "number": number_of_related_words, "reasoning": "explanation"}\n'
    )


def build_guess_prompt(context: OperativeContext) -> str:
    team = context.current_team
    clue = context.active_clue
    clue_word = clue.word if clue else ""
    clue_count = clue.count if clue else 0
    available = "\n".join(f"{card.index}: {card.word}" for card in context.cards if not card.revealed)
    if context.previous_guesses:
        previous = "\n".join(
            f'- "{guess.word}" was {"CORRECT" if guess.success else "WRONG"}' for guess in context.previous_guesses
        )
    else:
        previous = "(none)"
    return (
        f"You are the {_team_name(team)} team's operative in a game of Codenames.\n\n"
        f'Current clue: "{clue_word}" (Number: {clue_count})\n'
        f"Guesses remaining this turn: {context.remaining_guesses}\n\n"
        "RULES:\n"
        "1. You can only choose from the available unrevealed words listed below.\n"
        "2. Never select a word that has already been revealed.\n"
        "3. Choose the word with the strongest connection to the clue.\n\n"
        "Available unrevealed words:\n"
        f"{available}\n\n"
        "Previous guesses this turn:\n"
        f"{previous}\n\n"
        "Respond with only a JSON object in this exact format:\n"
        '{"cardIndex": chosen_word_index, "confidence": confidence_score, "reasoning": "why"}\n'
    )


def build_repair_prompt(*, raw_response: str, error: str, schema_hint: str) -> str:
    return (
        "Repair the response into one valid JSON object.\n"
        "Return only the JSON object, no markdown.\n"
        f"Expected format: {schema_hint}\n"
        f"Error: {error}\n"
        f"Original response:\n{raw_response}\n"
    )


class _LLMProviderBase:
    """Shared prompt/parse/repair loop for the two LLM providers."""

    schema_hint = ""

    def __init__(
        self,
        client_factory: ClientFactory | None = None,
        *,
        system_prompt: str | None = JSON_SYSTEM_PROMPT,
        max_retries: int = 2,
    ):
        self.client_factory: ClientFactory = client_factory or client_for_model
        self.system_prompt = system_prompt
        self.max_retries = max_retries
        self._last_debug_context: dict[str, Any] | None = None

    def debug_context(self) -> dict[str, Any] | None:
        """Diagnostics for the most recent request."""
        if self._last_debug_context is None:
            return None
        return dict(self._last_debug_context)

    def _ask(self, model_id: str, prompt: str, parser: Callable[[dict[str, Any]], T]) -> T:
        client = self.client_factory(model_id)
        context: dict[str, Any] = {
            "model_id": model_id,
            "initial_prompt": prompt,
            "repair_prompts": [],
            "raw_responses": [],
            "parse_errors": [],
        }
        self._last_debug_context = context

        raw = client.complete(prompt, system_prompt=self.system_prompt)
        context["raw_responses"].append(raw)

        last_error = "no response"
        for attempt in range(self.max_retries + 1):
            try:
                payload = _extract_json_object(raw)
                context["selected_payload"] = payload
                return parser(payload)
            except (ValueError, TypeError) as exc:
                last_error = str(exc)
                context["parse_errors"].append({"attempt": attempt + 1, "error": last_error})
                logger.warning("model %s returned unusable output (attempt %d): %s", model_id, attempt + 1, exc)
                if attempt >= self.max_retries:
                    break
                repair_prompt = build_repair_prompt(
                    raw_response=raw, error=last_error, schema_hint=self.schema_hint
                )
                context["repair_prompts"].append(repair_prompt)
                raw = client.complete(repair_prompt, system_prompt=self.system_prompt)
                context["raw_responses"].append(raw)

        raise ValueError(f"Model {model_id} could not produce valid JSON: {last_error}")


class LLMHintProvider(_LLMProviderBase):
    """HintProvider that prompts an LLM with the spymaster context."""

    schema_hint = '{"word": "clue", "number": 2, "reasoning": "..."}'

    def generate_hint(self, model_id: str, context: SpymasterContext) -> HintProposal:
        return self._ask(model_id, build_hint_prompt(context), HintProposal.from_dict)


class LLMGuessProvider(_LLMProviderBase):
    """GuessProvider that prompts an LLM with the operative context."""

    schema_hint = '{"cardIndex": 7, "confidence": 0.8, "reasoning": "..."}'

    def generate_guess(self, model_id: str, context: OperativeContext) -> GuessProposal:
        return self._ask(model_id, build_guess_prompt(context), GuessProposal.from_dict)
