"""Engine settings read from the environment (and an optional .env file)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from providers.env_utils import getenv_any, getenv_float, getenv_int

from .state import DEFAULT_TURN_SECONDS


@dataclass(frozen=True)
class EngineConfig:
    turn_duration_seconds: int = DEFAULT_TURN_SECONDS
    ai_guess_delay_sec: float = 1.0
    provider_timeout_sec: float = 60.0
    store_retry_limit: int = 3
    store_path: Path | None = None
    event_log_max_games: int = 1000

    def __post_init__(self) -> None:
        if self.turn_duration_seconds <= 0:
            raise ValueError("turn_duration_seconds must be positive.")
        if self.ai_guess_delay_sec < 0:
            raise ValueError("ai_guess_delay_sec cannot be negative.")
        if self.provider_timeout_sec <= 0:
            raise ValueError("provider_timeout_sec must be positive.")
        if self.store_retry_limit < 0:
            raise ValueError("store_retry_limit cannot be negative.")
        if self.event_log_max_games < 1:
            raise ValueError("event_log_max_games must be positive.")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        store_path = getenv_any("CODENAMES_STORE_PATH")
        return cls(
            turn_duration_seconds=getenv_int("CODENAMES_TURN_SECONDS", default=DEFAULT_TURN_SECONDS),
            ai_guess_delay_sec=getenv_float("CODENAMES_AI_GUESS_DELAY_SEC", default=1.0),
            provider_timeout_sec=getenv_float("CODENAMES_PROVIDER_TIMEOUT_SEC", default=60.0),
            store_retry_limit=getenv_int("CODENAMES_STORE_RETRIES", default=3),
            store_path=Path(store_path) if store_path else None,
            event_log_max_games=getenv_int("CODENAMES_EVENT_LOG_GAMES", default=1000),
        )
