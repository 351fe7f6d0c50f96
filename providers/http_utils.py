"""JSON-over-HTTP calls for provider clients, built on urllib."""

from __future__ import annotations

import json
from typing import Any, Mapping
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen


def request_json(
    method: str,
    url: str,
    *,
    headers: Mapping[str, str],
    payload: Mapping[str, Any] | None = None,
    timeout_sec: float,
) -> dict[str, Any]:
    """Send one request and decode the JSON body.

    Transport and HTTP failures surface as RuntimeError carrying the response
    body, which callers inspect for provider error types.
    """
    data = json.dumps(payload).encode("utf-8") if payload is not None else None
    request = Request(url=url, data=data, method=method, headers=dict(headers))
    if data is not None:
        request.add_header("Content-Type", "application/json")
    try:
        with urlopen(request, timeout=timeout_sec) as response:
            body = response.read().decode("utf-8")
    except HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="replace")
        raise RuntimeError(f"HTTP {exc.code} from {url}: {detail}") from exc
    except URLError as exc:
        raise RuntimeError(f"Network error calling {url}: {exc.reason}") from exc
    return json.loads(body) if body else {}


def post_json(url: str, payload: dict[str, Any], headers: dict[str, str], timeout_sec: float = 60.0) -> dict[str, Any]:
    return request_json("POST", url, headers=headers, payload=payload, timeout_sec=timeout_sec)


def get_json(url: str, headers: dict[str, str], timeout_sec: float = 30.0) -> dict[str, Any]:
    return request_json("GET", url, headers=headers, timeout_sec=timeout_sec)
