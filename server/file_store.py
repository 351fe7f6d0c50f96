"""JSON file-backed game store: one document per game under a directory."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from codenames.store import SnapshotGameStore


class JsonFileGameStore(SnapshotGameStore):
    """Stores each game at `<root>/<game_id>.json`, replaced atomically on every write."""

    def __init__(self, root: str | Path):
        super().__init__()
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, game_id: str) -> Path:
        if not game_id or "/" in game_id or "\\" in game_id or game_id.startswith("."):
            raise ValueError(f"Invalid game id: {game_id!r}")
        return self.root / f"{game_id}.json"

    def _read(self, game_id: str) -> dict[str, Any] | None:
        try:
            path = self._path(game_id)
        except ValueError:
            return None
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _write(self, game_id: str, snapshot: dict[str, Any]) -> None:
        path = self._path(game_id)
        temp = path.with_suffix(path.suffix + ".tmp")
        temp.write_text(json.dumps(snapshot, sort_keys=True, indent=2), encoding="utf-8")
        temp.replace(path)

    def game_ids(self) -> list[str]:
        with self._lock:
            return sorted(path.stem for path in self.root.glob("*.json"))
