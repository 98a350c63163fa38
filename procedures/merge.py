from __future__ import annotations

import copy
import logging
from typing import Any, Mapping, MutableMapping

from .errors import InvalidPatchError, UnsupportedOperatorError
from .operators import DEFAULT_REGISTRY, OperatorRegistry, shape_of

logger = logging.getLogger(__name__)

SIGIL = "$"


def operator_marker(value: Mapping[str, Any]) -> tuple[str, list[Any]] | None:
    """
    Return (operator name, argument list) if `value` is an operator marker.

    A marker is a mapping whose only key starts with the sigil, e.g.
    ``{"$push": 3}`` or ``{"$splice": [0, 1]}``. A list payload is spread into
    positional arguments; any other payload is a single argument.
    """
    if len(value) != 1:
        return None
    key = next(iter(value))
    if not isinstance(key, str) or len(key) <= len(SIGIL) or not key.startswith(SIGIL):
        return None
    payload = value[key]
    args = list(payload) if isinstance(payload, list) else [payload]
    return key[len(SIGIL):], args


def merge(
    target: MutableMapping[str, Any],
    patch: Mapping[str, Any],
    *,
    registry: OperatorRegistry = DEFAULT_REGISTRY,
) -> MutableMapping[str, Any]:
    """
    Apply `patch` to `target` in place and return `target`.

    - list values and scalars replace whatever is stored at their key;
    - operator markers run the named operator on the stored value;
    - other mappings merge recursively into a stored mapping, or replace a
      stored non-mapping;
    - keys missing from `target` are inserted as-is;
    - keys missing from `patch` are left alone.

    The patch is deep-copied first, so `target` never ends up sharing objects
    with the caller's patch.
    """
    if not isinstance(target, MutableMapping):
        raise InvalidPatchError(f"merge target must be a mapping, got {type(target).__name__}")
    if not isinstance(patch, Mapping):
        raise InvalidPatchError(f"patch must be a mapping, got {type(patch).__name__}")
    if patch is target:
        raise InvalidPatchError("patch must not be the target document itself")
    return _merge(target, copy.deepcopy(patch), registry, "")


def _merge(
    target: MutableMapping[str, Any],
    patch: Mapping[str, Any],
    registry: OperatorRegistry,
    prefix: str,
) -> MutableMapping[str, Any]:
    for key, value in patch.items():
        path = f"{prefix}{key}"
        if not isinstance(value, Mapping) or key not in target:
            target[key] = value
            continue

        current = target[key]
        marker = operator_marker(value)
        if marker is not None:
            name, args = marker
            op = registry.resolve(name, current)
            if op is None:
                raise UnsupportedOperatorError(path, name, shape_of(current))
            logger.debug("MERGE: $%s on %s at %r with %d arg(s)", name, op.shape, path, len(args))
            target[key] = op.apply(current, args)
        elif isinstance(current, MutableMapping):
            target[key] = _merge(current, value, registry, f"{path}.")
        else:
            target[key] = value
    return target
