"""Hint and guess providers backing AI seats."""

from .base import GuessProposal, GuessProvider, HintProposal, HintProvider
from .env_utils import getenv_any, getenv_float, getenv_int, load_dotenv, require_env_any
from .factory import available_models, client_for_model, provider_for_model
from .llm_provider import LLMClient, LLMGuessProvider, LLMHintProvider
from .provider_clients import (
    DEFAULT_ANTHROPIC_MODEL,
    DEFAULT_OPENAI_MODEL,
    AnthropicMessagesClient,
    OpenAIChatClient,
)
from .scripted import ScriptedGuessProvider, ScriptedHintProvider

__all__ = [
    "AnthropicMessagesClient",
    "DEFAULT_ANTHROPIC_MODEL",
    "DEFAULT_OPENAI_MODEL",
    "GuessProposal",
    "GuessProvider",
    "HintProposal",
    "HintProvider",
    "LLMClient",
    "LLMGuessProvider",
    "LLMHintProvider",
    "OpenAIChatClient",
    "ScriptedGuessProvider",
    "ScriptedHintProvider",
    "available_models",
    "client_for_model",
    "getenv_any",
    "getenv_float",
    "getenv_int",
    "load_dotenv",
    "provider_for_model",
    "require_env_any",
]
