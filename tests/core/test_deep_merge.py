import pytest

from poolauto.core import deep_merge

pytestmark = pytest.mark.unit


def test_nested_dicts_merge_recursively():
    base = {"a": 1, "b": {"c": 2, "d": 3}}
    override = {"b": {"d": 4, "e": 5}, "f": 6}

    assert deep_merge(base, override) == {"a": 1, "b": {"c": 2, "d": 4, "e": 5}, "f": 6}


def test_later_overrides_win():
    assert deep_merge({"x": 1}, {"x": 2}, {"x": 3}) == {"x": 3}


def test_lists_are_replaced_not_merged():
    merged = deep_merge({"items": [1, 2, 3]}, {"items": [9]})
    assert merged == {"items": [9]}


def test_inputs_are_not_mutated():
    base = {"a": {"b": [1]}}
    override = {"a": {"c": 2}}

    merged = deep_merge(base, override)
    merged["a"]["b"].append(5)

    assert base == {"a": {"b": [1]}}
    assert override == {"a": {"c": 2}}


def test_dict_replaces_scalar():
    assert deep_merge({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}
