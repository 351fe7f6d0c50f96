"""EngineConfig environment loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from codenames.config import EngineConfig

_VARS = (
    "CODENAMES_TURN_SECONDS",
    "CODENAMES_AI_GUESS_DELAY_SEC",
    "CODENAMES_PROVIDER_TIMEOUT_SEC",
    "CODENAMES_STORE_RETRIES",
    "CODENAMES_STORE_PATH",
    "CODENAMES_EVENT_LOG_GAMES",
)


@pytest.fixture
def clean_env(monkeypatch):  # noqa: ANN001, ANN201
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env) -> None:  # noqa: ANN001
    config = EngineConfig.from_env()
    assert config == EngineConfig()
    assert config.turn_duration_seconds == 180
    assert config.store_path is None


def test_overrides(clean_env, tmp_path) -> None:  # noqa: ANN001
    clean_env.setenv("CODENAMES_TURN_SECONDS", "90")
    clean_env.setenv("CODENAMES_AI_GUESS_DELAY_SEC", "0.25")
    clean_env.setenv("CODENAMES_PROVIDER_TIMEOUT_SEC", "12")
    clean_env.setenv("CODENAMES_STORE_RETRIES", "5")
    clean_env.setenv("CODENAMES_STORE_PATH", str(tmp_path))
    clean_env.setenv("CODENAMES_EVENT_LOG_GAMES", "50")

    config = EngineConfig.from_env()

    assert config.turn_duration_seconds == 90
    assert config.ai_guess_delay_sec == 0.25
    assert config.provider_timeout_sec == 12.0
    assert config.store_retry_limit == 5
    assert config.store_path == Path(tmp_path)
    assert config.event_log_max_games == 50


def test_rejects_bad_values(clean_env) -> None:  # noqa: ANN001
    clean_env.setenv("CODENAMES_TURN_SECONDS", "soon")
    with pytest.raises(ValueError):
        EngineConfig.from_env()
    with pytest.raises(ValueError):
        EngineConfig(turn_duration_seconds=0)
