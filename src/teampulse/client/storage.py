"""Versioned snapshot persistence for client-side stores.

Each key holds ``{"state": ..., "version": n}``. A record written under a
different version, or one that cannot be decoded, is discarded on load.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class SnapshotStorage:
    """Key/value snapshot store backed by a JSON file, or memory when no path is given."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path is not None else None
        self._data: dict[str, str] = {}
        if self.path is not None and self.path.exists():
            try:
                self._data = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                logger.warning("Ignoring unreadable snapshot file %s", self.path)
                self._data = {}

    def _flush(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, ensure_ascii=False), encoding="utf-8")

    # Raw string access, mirroring browser storage

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    # Versioned snapshots

    def save(self, key: str, state: Any, version: int) -> None:
        self.set_item(key, json.dumps({"state": state, "version": version}, default=str))

    def load(self, key: str, version: int) -> Any | None:
        """Return the stored state, or None after discarding a stale record."""
        raw = self.get_item(key)
        if raw is None:
            return None
        try:
            record = json.loads(raw)
            stored_version = record["version"]
            state = record["state"]
        except (ValueError, KeyError, TypeError):
            logger.warning("Discarding unreadable snapshot %s", key)
            self.remove_item(key)
            return None
        if stored_version != version:
            logger.info("Discarding snapshot %s (version %s, expected %s)", key, stored_version, version)
            self.remove_item(key)
            return None
        return state
