from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any


def read_json(path: Path) -> Any | None:
    """
    Read JSON from disk.

    Returns None for missing or empty files. Invalid JSON raises
    json.JSONDecodeError; a store must not silently treat a corrupt file as
    empty and overwrite it on the next save.
    """
    if not path.exists():
        return None
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        return None
    return json.loads(raw)


def atomic_write_json(path: Path, payload: Any, *, indent: int | None = 2, sort_keys: bool = False) -> None:
    """
    Atomically write JSON to disk by writing to a temp file, fsyncing, then replacing.

    Raises TypeError/ValueError before touching the target if `payload` is not
    JSON-serializable.
    """
    encoded = json.dumps(payload, indent=indent, sort_keys=sort_keys, allow_nan=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        f.write(encoded)
        f.write("\n")
        f.flush()
        os.fsync(f.fileno())
    tmp_path.replace(path)
