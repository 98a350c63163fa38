from __future__ import annotations

from .bulk_insert import BulkInsertJob, bulk_insert, resume_bulk_insert
from .context import Invocation, Response
from .errors import InvalidPatchError, UnsupportedOperatorError
from .find_or_create import find_or_create
from .merge import merge, operator_marker
from .operators import DEFAULT_REGISTRY, Operator, OperatorRegistry, shape_of
from .registry import PROCEDURES, Procedure, execute, get_procedure
from .remove import remove
from .update import update

__all__ = [
    "BulkInsertJob",
    "bulk_insert",
    "resume_bulk_insert",
    "Invocation",
    "Response",
    "InvalidPatchError",
    "UnsupportedOperatorError",
    "find_or_create",
    "merge",
    "operator_marker",
    "DEFAULT_REGISTRY",
    "Operator",
    "OperatorRegistry",
    "shape_of",
    "PROCEDURES",
    "Procedure",
    "execute",
    "get_procedure",
    "remove",
    "update",
]
