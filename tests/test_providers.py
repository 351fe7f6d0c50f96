"""LLM providers, HTTP clients and model routing with a faked network."""

from __future__ import annotations

import os
from dataclasses import dataclass

import pytest

from codenames.actions import GiveClue
from codenames.board import Team
from codenames.context import build_context
from codenames.machine import TurnStateMachine
from codenames.state import Role
from providers import env_utils
from providers import factory as factory_module
from providers.base import GuessProposal, HintProposal
from providers.factory import client_for_model, provider_for_model
from providers.llm_provider import LLMGuessProvider, LLMHintProvider, build_guess_prompt, build_hint_prompt
from providers.provider_clients import (
    DEFAULT_ANTHROPIC_MODEL,
    AnthropicMessagesClient,
    OpenAIChatClient,
)


@dataclass
class _StaticResponseClient:
    """LLM client stub that returns predefined responses in order."""

    responses: list[str]

    def __post_init__(self) -> None:
        self.prompts: list[str] = []

    def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:  # noqa: ARG002
        self.prompts.append(prompt)
        index = min(len(self.prompts), len(self.responses)) - 1
        return self.responses[index]


def test_load_dotenv_sets_missing_vars(tmp_path, monkeypatch) -> None:
    dotenv = tmp_path / ".env"
    dotenv.write_text("CODENAMES_TEST_KEY=test-key\n# comment\nexport CODENAMES_TEST_SECONDS='90'\n", encoding="utf-8")
    for name in ("CODENAMES_TEST_KEY", "CODENAMES_TEST_SECONDS"):
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    applied = env_utils.load_dotenv(dotenv)
    assert applied == {"CODENAMES_TEST_KEY": "test-key", "CODENAMES_TEST_SECONDS": "90"}
    assert env_utils.load_dotenv(dotenv) == {}
    assert os.getenv("CODENAMES_TEST_KEY") == "test-key"
    assert env_utils.getenv_int("CODENAMES_TEST_SECONDS", default=180) == 90


def test_model_routing() -> None:
    assert provider_for_model("claude-sonnet-4-20250514") == "anthropic"
    assert provider_for_model("Claude-3-Opus") == "anthropic"
    assert provider_for_model("gpt-4o-mini") == "openai"
    assert isinstance(client_for_model("claude-3-haiku", timeout_sec=5), AnthropicMessagesClient)
    client = client_for_model("gpt-4o", timeout_sec=5)
    assert isinstance(client, OpenAIChatClient) and client.model == "gpt-4o" and client.timeout_sec == 5


def test_openai_client_requests_json_mode_and_extracts_content(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "x")
    captured: dict[str, object] = {}

    def fake_post_json(url, payload, headers, timeout_sec=60.0):  # noqa: ANN001
        captured["url"] = url
        captured["payload"] = payload
        return {"choices": [{"message": {"content": '{"cardIndex": 3}'}}]}

    monkeypatch.setattr("providers.provider_clients.post_json", fake_post_json)
    client = OpenAIChatClient(model="gpt-4o-mini")
    assert client.complete("hello").strip() == '{"cardIndex": 3}'
    assert captured["url"] == "https://api.openai.com/v1/chat/completions"
    assert captured["payload"]["response_format"] == {"type": "json_object"}  # type: ignore[index]


def test_openai_client_retries_without_response_format(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "x")
    calls: list[dict] = []

    def fake_post_json(url, payload, headers, timeout_sec=60.0):  # noqa: ANN001
        calls.append(dict(payload))
        if len(calls) == 1:
            raise RuntimeError("HTTP 400: 'response_format' is not supported with this model")
        return {"choices": [{"message": {"content": "{}"}}]}

    monkeypatch.setattr("providers.provider_clients.post_json", fake_post_json)
    OpenAIChatClient(model="gpt-3.5-turbo").complete("hello")
    assert "response_format" in calls[0]
    assert "response_format" not in calls[1]


def test_anthropic_client_aliases_retired_model_and_uses_messages_path(monkeypatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "x")
    monkeypatch.delenv("ANTHROPIC_BASE_URL", raising=False)
    captured: dict[str, object] = {}

    def fake_post_json(url, payload, headers, timeout_sec=60.0):  # noqa: ANN001
        captured["url"] = url
        captured["payload"] = payload
        return {"content": [{"type": "text", "text": '{"word": "SEA", "number": 2}'}]}

    monkeypatch.setattr("providers.provider_clients.post_json", fake_post_json)
    out = AnthropicMessagesClient(model="claude-2").complete("hello", system_prompt="json only")
    assert out == '{"word": "SEA", "number": 2}'
    assert captured["url"] == "https://api.anthropic.com/v1/messages"
    assert captured["payload"]["model"] == DEFAULT_ANTHROPIC_MODEL  # type: ignore[index]
    assert captured["payload"]["system"] == "json only"  # type: ignore[index]


def test_anthropic_client_falls_back_when_model_missing(monkeypatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "x")
    monkeypatch.delenv("ANTHROPIC_BASE_URL", raising=False)
    models: list[str] = []

    def fake_post_json(url, payload, headers, timeout_sec=60.0):  # noqa: ANN001
        models.append(payload["model"])
        if len(models) == 1:
            raise RuntimeError('HTTP 404: {"type":"error","error":{"type":"not_found_error","message":"model: x"}}')
        return {"content": [{"type": "text", "text": "{}"}]}

    monkeypatch.setattr("providers.provider_clients.post_json", fake_post_json)
    AnthropicMessagesClient(model="claude-custom-model").complete("hello")
    assert models == ["claude-custom-model", DEFAULT_ANTHROPIC_MODEL]


def test_available_models_skips_providers_without_keys(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "x")
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

    def fake_get_json(url, headers, timeout_sec=30.0):  # noqa: ANN001
        return {"data": [{"id": "gpt-4o"}, {"id": "gpt-4o-realtime-preview"}, {"id": "whisper-1"}, {"id": "gpt-4o-mini"}]}

    monkeypatch.setattr("providers.provider_clients.get_json", fake_get_json)
    models = factory_module.available_models()
    assert [model["id"] for model in models] == ["gpt-4o", "gpt-4o-mini"]
    assert {model["provider"] for model in models} == {"openai"}


def test_hint_provider_parses_number_alias(game) -> None:  # noqa: ANN001
    client = _StaticResponseClient(['Sure! {"word": "OCEAN", "number": 2, "reasoning": "water"}'])
    provider = LLMHintProvider(client_factory=lambda model_id: client)
    context = build_context(game, Team.RED, Role.SPYMASTER)

    proposal = provider.generate_hint("gpt-4o", context)

    assert proposal == HintProposal(word="OCEAN", count=2, reasoning="water")
    assert "spymaster" in client.prompts[0]
    assert "fish" in client.prompts[0]


def test_guess_provider_repairs_bad_json(game, clock) -> None:  # noqa: ANN001
    TurnStateMachine(clock=clock).tick(game, GiveClue(word="OCEAN", count=1), seat_id="RED_SPYMASTER", by_player="alice")
    client = _StaticResponseClient(["I think FISH", '{"card_index": 0, "confidence": 0.9}'])
    provider = LLMGuessProvider(client_factory=lambda model_id: client)
    context = build_context(game, Team.RED, Role.OPERATIVE)

    proposal = provider.generate_guess("claude-3-haiku", context)

    assert proposal == GuessProposal(card_index=0, confidence=0.9)
    assert len(client.prompts) == 2
    assert "Repair" in client.prompts[1]
    debug = provider.debug_context()
    assert debug is not None and len(debug["parse_errors"]) == 1


def test_provider_gives_up_after_max_retries(game) -> None:  # noqa: ANN001
    client = _StaticResponseClient(["nope"])
    provider = LLMHintProvider(client_factory=lambda model_id: client, max_retries=1)
    context = build_context(game, Team.RED, Role.SPYMASTER)

    with pytest.raises(ValueError, match="could not produce valid JSON"):
        provider.generate_hint("gpt-4o", context)
    assert len(client.prompts) == 2


def test_prompts_never_leak_colors_to_operatives(game, clock) -> None:  # noqa: ANN001
    TurnStateMachine(clock=clock).tick(game, GiveClue(word="OCEAN", count=1), seat_id="RED_SPYMASTER", by_player="alice")
    guess_prompt = build_guess_prompt(build_context(game, Team.RED, Role.OPERATIVE))
    hint_prompt = build_hint_prompt(build_context(game, Team.RED, Role.SPYMASTER))

    assert "ASSASSIN" in hint_prompt
    assert "ASSASSIN" not in guess_prompt
    assert '"OCEAN" (Number: 1)' in guess_prompt
    assert "24: YACHT" in guess_prompt
