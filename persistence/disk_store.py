from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, TypeVar

from json_store import atomic_write_json, read_json

from .errors import StoreError
from .locks import GLOBAL_PATH_LOCKS

T = TypeVar("T")


class DiskJsonDocumentStore:
    """
    Stores a single JSON document on disk at a fixed path.

    - Returns an empty dict for a missing file; a corrupt file raises StoreError.
    - Writes atomically, only through `mutate`.
    - `mutate` runs a whole load/modify/save cycle under the path lock.
    """

    def __init__(self, path: Path):
        self._path = path

    def load(self) -> dict[str, Any]:
        with GLOBAL_PATH_LOCKS.hold(self._path):
            return self._load_unlocked()

    def mutate(self, fn: Callable[[dict[str, Any]], T]) -> T:
        with GLOBAL_PATH_LOCKS.hold(self._path):
            doc = self._load_unlocked()
            result = fn(doc)
            self._save_unlocked(doc)
            return result

    def _load_unlocked(self) -> dict[str, Any]:
        try:
            raw = read_json(self._path)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"cannot read {self._path.name}: {e}") from e
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise StoreError(f"{self._path.name} does not hold a JSON object")
        return raw

    def _save_unlocked(self, doc: dict[str, Any]) -> None:
        try:
            atomic_write_json(self._path, doc)
        except (TypeError, ValueError) as e:
            raise StoreError(f"document is not JSON-serializable: {e}") from e
        except OSError as e:
            raise StoreError(f"cannot write {self._path.name}: {e}") from e
