from __future__ import annotations

import pytest

from procedures.errors import InvalidPatchError
from procedures.merge import merge
from procedures.operators import DEFAULT_REGISTRY, OperatorRegistry, shape_of


def _apply(value, name, *args):
    op = DEFAULT_REGISTRY.resolve(name, value)
    assert op is not None, f"{name} not registered for {shape_of(value)}"
    return op.apply(value, list(args))


def test_shape_of():
    assert shape_of([1]) == "array"
    assert shape_of("s") == "string"
    assert shape_of(1.5) == "number"
    assert shape_of({"a": 1}) == "object"
    assert shape_of(True) is None
    assert shape_of(None) is None


def test_array_mutators_keep_container():
    arr = [1, 2, 3]
    assert _apply(arr, "push", 4, 5) is arr
    assert arr == [1, 2, 3, 4, 5]
    assert _apply(arr, "shift") is arr
    assert _apply(arr, "unshift", 0) is arr
    assert arr == [0, 2, 3, 4, 5]


def test_splice_removes_and_inserts():
    arr = [1, 2, 3, 4]
    assert _apply(arr, "splice", 1, 2, "x") is arr
    assert arr == [1, "x", 4]
    arr = [1, 2, 3]
    _apply(arr, "splice", -1)
    assert arr == [1, 2]


def test_slice_and_concat_return_new_arrays():
    assert _apply([1, 2, 3, 4], "slice", 1, 3) == [2, 3]
    assert _apply([1, 2, 3], "slice", -2) == [2, 3]
    assert _apply([1], "concat", [2, 3], 4, [[5]]) == [1, 2, 3, 4, [5]]


def test_add_to_set_and_pull():
    arr = [1, 2]
    _apply(arr, "addToSet", 2, 3, 3)
    assert arr == [1, 2, 3]
    _apply(arr, "pull", 1, 3)
    assert arr == [2]


def test_sort_mixed_values_rejected():
    with pytest.raises(InvalidPatchError):
        _apply([1, "a"], "sort")


def test_string_operators():
    assert _apply("ab", "concat", "c", "d") == "abcd"
    assert _apply("  hi ", "trim") == "hi"
    assert _apply("a-a", "replace", "a", "b") == "b-a"
    assert _apply("hello", "slice", 1, 3) == "el"
    with pytest.raises(InvalidPatchError):
        _apply("ab", "concat", 1)


def test_number_operators():
    assert _apply(1, "inc") == 2
    assert _apply(1, "inc", 2.5) == 3.5
    assert _apply(3, "mul", 2) == 6
    with pytest.raises(InvalidPatchError):
        _apply(3, "mul", True)
    with pytest.raises(InvalidPatchError):
        _apply(3, "mul")


def test_unset_keeps_object():
    doc = {"meta": {"a": 1, "b": 2}}
    merge(doc, {"meta": {"$unset": ["a", "zz"]}})
    assert doc == {"meta": {"b": 2}}


def test_counter_via_merge():
    doc = {"visits": 4}
    merge(doc, {"visits": {"$inc": 1}})
    assert doc == {"visits": 5}


def test_registry_rejects_duplicates_and_lists_names():
    registry = OperatorRegistry()

    @registry.register("array", "first")
    def _first(arr, args):
        return arr[0]

    with pytest.raises(ValueError):
        registry.register("array", "first")(_first)
    assert registry.names() == ["first"]
    assert registry.resolve("first", "abc") is None
    assert "push" in DEFAULT_REGISTRY.names("array")
    assert "push" not in DEFAULT_REGISTRY.names("string")


def test_custom_registry_used_by_merge():
    registry = OperatorRegistry()

    @registry.register("array", "double", returns_container=True)
    def _double(arr, args):
        return arr + arr

    assert merge({"a": [1]}, {"a": {"$double": []}}, registry=registry) == {"a": [1, 1]}
