"""
Operators that a patch can apply to the value already stored at a path.

Operators are looked up by (name, shape of the current value), so `$concat`
means list concatenation on an array and string concatenation on a string,
and an array operator is never attempted on a number.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Literal, Mapping

from .errors import InvalidPatchError

Shape = Literal["array", "string", "number", "object"]
OperatorFn = Callable[[Any, list[Any]], Any]

_MISSING = object()


def shape_of(value: Any) -> Shape | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, list):
        return "array"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, Mapping):
        return "object"
    return None


def is_container(value: Any) -> bool:
    return shape_of(value) in ("array", "object")


@dataclass(frozen=True)
class Operator:
    name: str
    shape: Shape
    fn: OperatorFn
    # True when `fn` hands back a container meant to replace the target
    # (concat, slice). Mutators that return a count or a removed element leave
    # the mutated container in place.
    returns_container: bool = False

    def apply(self, value: Any, args: list[Any]) -> Any:
        result = self.fn(value, args)
        if is_container(value) and not (self.returns_container and shape_of(result) == self.shape):
            return value
        return result


class OperatorRegistry:
    def __init__(self) -> None:
        self._ops: dict[tuple[str, Shape], Operator] = {}

    def register(self, shape: Shape, name: str, *, returns_container: bool = False) -> Callable[[OperatorFn], OperatorFn]:
        def decorator(fn: OperatorFn) -> OperatorFn:
            key = (name, shape)
            if key in self._ops:
                raise ValueError(f"operator {name!r} already registered for {shape}")
            self._ops[key] = Operator(name=name, shape=shape, fn=fn, returns_container=returns_container)
            return fn

        return decorator

    def resolve(self, name: str, value: Any) -> Operator | None:
        shape = shape_of(value)
        if shape is None:
            return None
        return self._ops.get((name, shape))

    def names(self, shape: Shape | None = None) -> list[str]:
        return sorted({n for (n, s) in self._ops if shape is None or s == shape})


DEFAULT_REGISTRY = OperatorRegistry()
register = DEFAULT_REGISTRY.register


def _arity(name: str, args: list[Any], low: int, high: int | None = None) -> None:
    if len(args) < low or (high is not None and len(args) > high):
        expected = str(low) if high == low else f"{low}..{'' if high is None else high}"
        raise InvalidPatchError(f"${name} takes {expected} argument(s), got {len(args)}")


def _int_arg(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPatchError(f"${name} expects integer arguments, got {value!r}")
    return value


def _number_arg(name: str, value: Any) -> int | float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidPatchError(f"${name} expects a number, got {value!r}")
    return value


def _str_arg(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidPatchError(f"${name} expects string arguments, got {value!r}")
    return value


def _slice_bounds(name: str, args: list[Any]) -> slice:
    _arity(name, args, 0, 2)
    start = _int_arg(name, args[0]) if args and args[0] is not None else None
    end = _int_arg(name, args[1]) if len(args) > 1 and args[1] is not None else None
    return slice(start, end)


# --- array -------------------------------------------------------------------


@register("array", "push")
def _array_push(arr: list[Any], args: list[Any]) -> int:
    arr.extend(args)
    return len(arr)


@register("array", "pop")
def _array_pop(arr: list[Any], args: list[Any]) -> Any:
    return arr.pop() if arr else None


@register("array", "shift")
def _array_shift(arr: list[Any], args: list[Any]) -> Any:
    return arr.pop(0) if arr else None


@register("array", "unshift")
def _array_unshift(arr: list[Any], args: list[Any]) -> int:
    arr[0:0] = args
    return len(arr)


@register("array", "concat", returns_container=True)
def _array_concat(arr: list[Any], args: list[Any]) -> list[Any]:
    out = list(arr)
    for item in args:
        if isinstance(item, list):
            out.extend(item)
        else:
            out.append(item)
    return out


@register("array", "slice", returns_container=True)
def _array_slice(arr: list[Any], args: list[Any]) -> list[Any]:
    return arr[_slice_bounds("slice", args)]


@register("array", "splice")
def _array_splice(arr: list[Any], args: list[Any]) -> list[Any]:
    _arity("splice", args, 1)
    start = _int_arg("splice", args[0])
    if start < 0:
        start = max(len(arr) + start, 0)
    start = min(start, len(arr))
    delete_count = len(arr) - start
    if len(args) > 1:
        delete_count = max(_int_arg("splice", args[1]), 0)
    removed = arr[start:start + delete_count]
    arr[start:start + delete_count] = args[2:]
    return removed


@register("array", "reverse", returns_container=True)
def _array_reverse(arr: list[Any], args: list[Any]) -> list[Any]:
    arr.reverse()
    return arr


@register("array", "sort", returns_container=True)
def _array_sort(arr: list[Any], args: list[Any]) -> list[Any]:
    _arity("sort", args, 0, 0)
    try:
        arr.sort()
    except TypeError as e:
        raise InvalidPatchError(f"$sort cannot order mixed values: {e}") from e
    return arr


@register("array", "addToSet")
def _array_add_to_set(arr: list[Any], args: list[Any]) -> int:
    for item in args:
        if item not in arr:
            arr.append(item)
    return len(arr)


@register("array", "pull")
def _array_pull(arr: list[Any], args: list[Any]) -> int:
    before = len(arr)
    arr[:] = [x for x in arr if x not in args]
    return before - len(arr)


# --- string ------------------------------------------------------------------


@register("string", "concat")
def _string_concat(s: str, args: list[Any]) -> str:
    return s + "".join(_str_arg("concat", a) for a in args)


@register("string", "toUpperCase")
def _string_upper(s: str, args: list[Any]) -> str:
    return s.upper()


@register("string", "toLowerCase")
def _string_lower(s: str, args: list[Any]) -> str:
    return s.lower()


@register("string", "trim")
def _string_trim(s: str, args: list[Any]) -> str:
    return s.strip()


@register("string", "replace")
def _string_replace(s: str, args: list[Any]) -> str:
    _arity("replace", args, 2, 2)
    return s.replace(_str_arg("replace", args[0]), _str_arg("replace", args[1]), 1)


@register("string", "slice")
def _string_slice(s: str, args: list[Any]) -> str:
    return s[_slice_bounds("slice", args)]


# --- number ------------------------------------------------------------------


@register("number", "inc")
def _number_inc(n: int | float, args: list[Any]) -> int | float:
    _arity("inc", args, 0, 1)
    return n + (_number_arg("inc", args[0]) if args else 1)


@register("number", "mul")
def _number_mul(n: int | float, args: list[Any]) -> int | float:
    _arity("mul", args, 1, 1)
    return n * _number_arg("mul", args[0])


# --- object ------------------------------------------------------------------


@register("object", "unset")
def _object_unset(obj: dict[str, Any], args: list[Any]) -> int:
    removed = 0
    for key in args:
        if obj.pop(_str_arg("unset", key), _MISSING) is not _MISSING:
            removed += 1
    return removed

