"""Model-id routing to concrete LLM clients."""

from __future__ import annotations

import logging
from typing import Any

from .env_utils import getenv_any, getenv_float
from .provider_clients import (
    DEFAULT_ANTHROPIC_MODEL,
    DEFAULT_OPENAI_MODEL,
    AnthropicMessagesClient,
    OpenAIChatClient,
)

logger = logging.getLogger(__name__)

ANTHROPIC = "anthropic"
OPENAI = "openai"


def provider_for_model(model_id: str) -> str:
    """Any model id mentioning "claude" goes to Anthropic, everything else to OpenAI."""
    return ANTHROPIC if "claude" in model_id.lower() else OPENAI


def client_for_model(model_id: str, *, timeout_sec: float | None = None) -> Any:
    timeout = timeout_sec if timeout_sec is not None else getenv_float("CODENAMES_PROVIDER_TIMEOUT_SEC", default=60.0)
    if provider_for_model(model_id) == ANTHROPIC:
        return AnthropicMessagesClient(model=model_id, timeout_sec=timeout)
    return OpenAIChatClient(model=model_id, timeout_sec=timeout)


def available_models() -> list[dict[str, str]]:
    """Models that can be seated, grouped by provider and sorted by id.

    Providers without an API key are left out. When listing fails the provider's
    default model is offered instead.
    """
    models: list[dict[str, str]] = []
    listings = (
        (OPENAI, ("OPENAI_API_KEY",), OpenAIChatClient(), DEFAULT_OPENAI_MODEL),
        (ANTHROPIC, ("ANTHROPIC_API_KEY",), AnthropicMessagesClient(), DEFAULT_ANTHROPIC_MODEL),
    )
    for provider, key_names, client, fallback in listings:
        if getenv_any(*key_names) is None:
            continue
        try:
            model_ids = client.list_models()
        except (RuntimeError, ValueError) as exc:
            logger.warning("could not list %s models: %s", provider, exc)
            model_ids = [fallback]
        models.extend({"id": model_id, "name": model_id, "provider": provider} for model_id in model_ids)
    return sorted(models, key=lambda model: (model["provider"], model["name"]))
