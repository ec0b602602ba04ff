"""Dictionary merging shared by config resolution and drift detection."""

import copy
from typing import Any, Mapping


def deep_merge(base: Mapping[str, Any], *overrides: Mapping[str, Any]) -> dict:
    """Deep merge multiple dictionaries.

    Later dictionaries override earlier ones. Nested dictionaries are
    merged recursively; every other value (lists included) is replaced.
    Inputs are never mutated.

    Parameters
    ----------
    base : dict
        Base dictionary (lowest priority)
    *overrides : dict
        Override dictionaries (higher priority, left to right)

    Returns
    -------
    dict
        Merged dictionary

    Examples
    --------
    >>> base = {"a": 1, "b": {"c": 2, "d": 3}}
    >>> override = {"b": {"d": 4, "e": 5}, "f": 6}
    >>> deep_merge(base, override)
    {'a': 1, 'b': {'c': 2, 'd': 4, 'e': 5}, 'f': 6}
    """
    result = copy.deepcopy(dict(base))

    for override in overrides:
        for key, value in override.items():
            if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
                result[key] = deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)

    return result
