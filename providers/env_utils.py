"""Environment lookups shared by provider clients and `EngineConfig.from_env`."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, TypeVar

T = TypeVar("T")

_loaded_paths: set[Path] = set()


def parse_dotenv(text: str) -> dict[str, str]:
    """Parse KEY=VALUE lines; blank lines, comments and `export` prefixes are tolerated."""
    values: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        line = line.removeprefix("export ").strip()
        key, _, value = line.partition("=")
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        if key.strip():
            values[key.strip()] = value
    return values


def load_dotenv(path: str | Path = ".env", *, override: bool = False) -> dict[str, str]:
    """Apply a .env file once per path; existing variables win unless `override` is set.

    Returns the variables that were actually written to the environment.
    """
    resolved = Path(path).resolve()
    if resolved in _loaded_paths and not override:
        return {}
    _loaded_paths.add(resolved)
    if not resolved.is_file():
        return {}

    applied: dict[str, str] = {}
    for key, value in parse_dotenv(resolved.read_text(encoding="utf-8")).items():
        if override or key not in os.environ:
            os.environ[key] = value
            applied[key] = value
    return applied


def getenv_any(*names: str, default: str | None = None) -> str | None:
    """First non-empty value among `names`."""
    load_dotenv()
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


def require_env_any(*names: str) -> str:
    value = getenv_any(*names)
    if value is None:
        raise ValueError(f"Missing required environment variable. Set one of: {', '.join(names)}")
    return value


def _getenv_typed(names: tuple[str, ...], default: T, cast: Callable[[str], T], kind: str) -> T:
    raw = getenv_any(*names)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {names[0]} must be {kind}, got {raw!r}") from exc


def getenv_int(*names: str, default: int) -> int:
    return _getenv_typed(names, default, int, "an integer")


def getenv_float(*names: str, default: float) -> float:
    return _getenv_typed(names, default, float, "a number")
