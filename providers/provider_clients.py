"""Chat clients for the two hosted model families an AI seat can name."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from .env_utils import getenv_any, require_env_any
from .http_utils import get_json, post_json

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"

# Retired ids still saved in seat configs.
_ANTHROPIC_MODEL_ALIASES = {
    "claude-2": DEFAULT_ANTHROPIC_MODEL,
    "claude-instant-1": DEFAULT_ANTHROPIC_MODEL,
    "claude-3-5-sonnet-latest": DEFAULT_ANTHROPIC_MODEL,
    "claude-3-5-sonnet-20241022": DEFAULT_ANTHROPIC_MODEL,
}


def _normalize_anthropic_model(model: str) -> str:
    model = model.strip()
    return _ANTHROPIC_MODEL_ALIASES.get(model.lower(), model) if model else DEFAULT_ANTHROPIC_MODEL


def _anthropic_api_root(base_url: str) -> str:
    root = (base_url or "https://api.anthropic.com").rstrip("/")
    for suffix in ("/v1/messages", "/v1"):
        root = root.removesuffix(suffix)
    return root


def _post_with_fallback(
    url: str,
    payload: dict[str, Any],
    headers: dict[str, str],
    timeout_sec: float,
    *,
    rejected: Callable[[str], bool],
    fallback: Callable[[dict[str, Any]], dict[str, Any] | None],
) -> dict[str, Any]:
    """POST once; when the error text matches `rejected`, retry with the payload `fallback` returns."""
    try:
        return post_json(url=url, payload=payload, headers=headers, timeout_sec=timeout_sec)
    except RuntimeError as exc:
        retry_payload = fallback(payload) if rejected(str(exc).lower()) else None
        if retry_payload is None:
            raise
        logger.info("retrying %s after rejected request: %s", url, exc)
        return post_json(url=url, payload=retry_payload, headers=headers, timeout_sec=timeout_sec)


def _openai_text(response: dict[str, Any]) -> str:
    choices = response.get("choices") or []
    if not choices:
        raise ValueError("OpenAI response did not include choices.")
    content = (choices[0].get("message") or {}).get("content")
    if isinstance(content, list):
        content = "".join(block.get("text", "") if isinstance(block, dict) else str(block) for block in content)
    if not isinstance(content, str):
        raise ValueError("OpenAI response message content was not a string.")
    return content


def _anthropic_text(response: dict[str, Any]) -> str:
    blocks = response.get("content") or []
    if not blocks:
        raise ValueError("Anthropic response did not include content blocks.")
    text = "".join(
        block.get("text", "") for block in blocks if isinstance(block, dict) and block.get("type") == "text"
    ).strip()
    if not text:
        raise ValueError("Anthropic response contained no text content.")
    return text


def _listed_ids(response: dict[str, Any]) -> list[str]:
    return [str(item["id"]) for item in response.get("data", []) if isinstance(item, dict) and item.get("id")]


@dataclass(frozen=True)
class OpenAIChatClient:
    """Chat Completions client.

    JSON mode is requested by default; a model that rejects `response_format`
    is asked again without it.
    """

    model: str = DEFAULT_OPENAI_MODEL
    base_url: str = "https://api.openai.com/v1"
    timeout_sec: float = 60.0
    temperature: float = 0.0
    max_tokens: int | None = None
    json_mode: bool = True
    api_key_env: tuple[str, ...] = ("OPENAI_API_KEY",)

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path}"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {require_env_any(*self.api_key_env)}"}

    def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:
        messages = [{"role": "system", "content": system_prompt}] if system_prompt else []
        messages.append({"role": "user", "content": prompt})
        payload: dict[str, Any] = {"model": self.model, "messages": messages, "temperature": self.temperature}
        if self.max_tokens is not None:
            payload["max_tokens"] = self.max_tokens
        if self.json_mode:
            payload["response_format"] = {"type": "json_object"}

        def without_json_mode(sent: dict[str, Any]) -> dict[str, Any] | None:
            if "response_format" not in sent:
                return None
            return {key: value for key, value in sent.items() if key != "response_format"}

        response = _post_with_fallback(
            self._url("chat/completions"),
            payload,
            self._headers(),
            self.timeout_sec,
            rejected=lambda error: "response_format" in error,
            fallback=without_json_mode,
        )
        return _openai_text(response)

    def list_models(self) -> list[str]:
        """Chat-capable GPT ids; realtime and audio variants are left out."""
        response = get_json(url=self._url("models"), headers=self._headers(), timeout_sec=self.timeout_sec)
        return sorted(
            model_id
            for model_id in _listed_ids(response)
            if "gpt" in model_id and "realtime" not in model_id and "audio" not in model_id
        )


@dataclass(frozen=True)
class AnthropicMessagesClient:
    """Messages API client. `ANTHROPIC_BASE_URL` and `ANTHROPIC_VERSION` override the defaults."""

    model: str = DEFAULT_ANTHROPIC_MODEL
    base_url: str = "https://api.anthropic.com"
    timeout_sec: float = 60.0
    temperature: float = 0.0
    max_tokens: int = 1024
    anthropic_version: str = "2023-06-01"
    api_key_env: tuple[str, ...] = ("ANTHROPIC_API_KEY",)

    def _url(self, path: str) -> str:
        root = _anthropic_api_root(getenv_any("ANTHROPIC_BASE_URL", default=self.base_url) or self.base_url)
        return f"{root}/v1/{path}"

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": require_env_any(*self.api_key_env),
            "anthropic-version": getenv_any("ANTHROPIC_VERSION", default=self.anthropic_version)
            or self.anthropic_version,
        }

    def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:
        payload: dict[str, Any] = {
            "model": _normalize_anthropic_model(self.model),
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            payload["system"] = system_prompt

        def on_default_model(sent: dict[str, Any]) -> dict[str, Any] | None:
            if sent["model"] == DEFAULT_ANTHROPIC_MODEL:
                return None
            return {**sent, "model": DEFAULT_ANTHROPIC_MODEL}

        response = _post_with_fallback(
            self._url("messages"),
            payload,
            self._headers(),
            self.timeout_sec,
            rejected=lambda error: "not_found_error" in error and "model" in error,
            fallback=on_default_model,
        )
        return _anthropic_text(response)

    def list_models(self) -> list[str]:
        response = get_json(url=self._url("models"), headers=self._headers(), timeout_sec=self.timeout_sec)
        return sorted(_listed_ids(response))
