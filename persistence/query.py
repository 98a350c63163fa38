"""
JSON filter queries for the disk-backed collection.

A query string is a JSON object of conditions, e.g.
``{"name": "foo", "meta.rank": {"$gte": 3}}``. An empty string or ``{}``
matches every document. Dotted keys reach into nested documents.
"""
from __future__ import annotations

import json
from typing import Any, Mapping

from .errors import QueryError

COMPARATORS = {"$eq", "$ne", "$gt", "$gte", "$lt", "$lte", "$in", "$nin", "$exists", "$size"}
LOGICAL = {"$and", "$or", "$not"}

_MISSING = object()


def parse_query(query: str) -> dict[str, Any]:
    if not isinstance(query, str):
        raise QueryError(f"query must be a string, got {type(query).__name__}")
    if not query.strip():
        return {}
    try:
        parsed = json.loads(query)
    except json.JSONDecodeError as e:
        raise QueryError(f"query is not valid JSON: {e.msg} (pos {e.pos})") from e
    if not isinstance(parsed, dict):
        raise QueryError("query must be a JSON object")
    return parsed


def deep_get(doc: Mapping[str, Any], dotted_key: str, default: Any = None) -> Any:
    cur: Any = doc
    for part in dotted_key.split("."):
        if isinstance(cur, Mapping) and part in cur:
            cur = cur[part]
        else:
            return default
    return cur


def matches(doc: Mapping[str, Any], conditions: Mapping[str, Any]) -> bool:
    for key, cond in conditions.items():
        if key in LOGICAL:
            if not _eval_logical(doc, key, cond):
                return False
        elif not _eval_field(doc, key, cond):
            return False
    return True


def _eval_logical(doc: Mapping[str, Any], op: str, clauses: Any) -> bool:
    if op == "$not":
        if not isinstance(clauses, dict):
            raise QueryError("$not requires a single condition object")
        return not matches(doc, clauses)
    if not isinstance(clauses, list) or not all(isinstance(c, dict) for c in clauses):
        raise QueryError(f"{op} requires a list of condition objects")
    results = (matches(doc, clause) for clause in clauses)
    return all(results) if op == "$and" else any(results)


def _eval_field(doc: Mapping[str, Any], dotted_key: str, cond: Any) -> bool:
    value = deep_get(doc, dotted_key, _MISSING)
    if isinstance(cond, dict) and cond and all(k.startswith("$") for k in cond):
        return all(_eval_op(value, op, arg) for op, arg in cond.items())
    return value is not _MISSING and value == cond


def _eval_op(value: Any, op: str, arg: Any) -> bool:
    if op not in COMPARATORS:
        raise QueryError(f"unsupported query operator: {op}")
    if op == "$exists":
        return (value is not _MISSING) == bool(arg)
    if value is _MISSING:
        # Absent fields only satisfy negative conditions.
        return op in ("$ne", "$nin")
    if op == "$eq":
        return value == arg
    if op == "$ne":
        return value != arg
    if op in ("$in", "$nin"):
        if not isinstance(arg, list):
            raise QueryError(f"{op} requires a list")
        return (value in arg) == (op == "$in")
    if op == "$size":
        return isinstance(value, list) and len(value) == arg
    try:
        if op == "$gt":
            return value > arg
        if op == "$gte":
            return value >= arg
        if op == "$lt":
            return value < arg
        return value <= arg
    except TypeError:
        return False
