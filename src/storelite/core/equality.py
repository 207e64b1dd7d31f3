"""Pure equality functions used to filter selector subscriptions.

Usage:
    store.subscribe(lambda s: s["items"], on_items, equality_fn=shallow)
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Set
from typing import Any

_VALUE_TYPES = (int, float, complex, str, bytes, bool, type(None))


def is_same(a: Any, b: Any) -> bool:
    """Identity comparison that treats equal immutable scalars as the same value.

    Python only guarantees identity for a handful of interned scalars, so
    numbers and strings are compared by value. NaN is the same as NaN.
    """
    if a is b:
        return True
    if type(a) is not type(b) or not isinstance(a, _VALUE_TYPES):
        return False
    if isinstance(a, float) and math.isnan(a) and math.isnan(b):
        return True
    return bool(a == b)


def shallow(a: Any, b: Any) -> bool:
    """Compare two values one level deep.

    Mappings match when they have the same keys and `is_same` values,
    sequences when they have the same length and `is_same` items in order,
    sets when they contain the same members.
    """
    if is_same(a, b):
        return True

    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if len(a) != len(b):
            return False
        for key, value in a.items():
            if key not in b or not is_same(value, b[key]):
                return False
        return True

    if isinstance(a, Set) and isinstance(b, Set):
        return len(a) == len(b) and all(item in b for item in a)

    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if type(a) is not type(b) or len(a) != len(b):
            return False
        return all(is_same(x, y) for x, y in zip(a, b, strict=True))

    return False
