from __future__ import annotations

from persistence.errors import (
    ConflictError,
    DocProcError,
    DocumentNotFoundError,
    InvalidInputError,
    QueryError,
    QuotaExceededError,
    StoreError,
)


class InvalidPatchError(InvalidInputError):
    """A patch is malformed or an operator got arguments it cannot use."""


class UnsupportedOperatorError(InvalidPatchError):
    """An operator marker names an operator the target value does not support."""

    def __init__(self, path: str, operator: str, shape: str | None):
        self.path = path
        self.operator = operator
        self.shape = shape
        target = shape or "a value without operators"
        super().__init__(f"operator ${operator} is not supported on {target} at {path!r}")


__all__ = [
    "DocProcError",
    "QueryError",
    "StoreError",
    "QuotaExceededError",
    "ConflictError",
    "DocumentNotFoundError",
    "InvalidInputError",
    "InvalidPatchError",
    "UnsupportedOperatorError",
]
