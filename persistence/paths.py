from __future__ import annotations

import re
from pathlib import Path

from settings import get_settings

from .errors import InvalidInputError

# Names map to files one-to-one, so anything that would need rewriting is refused.
_COLLECTION_NAME_RE = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]{0,127}$")


def project_root() -> Path:
    # persistence/paths.py -> persistence -> project root
    return Path(__file__).resolve().parents[1]


def data_dir() -> Path:
    configured = get_settings().data_dir
    return ensure_dir(configured if configured is not None else project_root() / "data")


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def collections_dir(data_dir: Path) -> Path:
    return ensure_dir(data_dir / "collections")


def validate_collection_name(collection: str) -> str:
    if not isinstance(collection, str) or not _COLLECTION_NAME_RE.match(collection):
        raise InvalidInputError(
            f"invalid collection name {collection!r}: use 1-128 of A-Z a-z 0-9 _ . - not starting with '.'"
        )
    return collection


def collection_path(data_dir: Path, collection: str) -> Path:
    return collections_dir(data_dir) / f"{validate_collection_name(collection)}.json"
