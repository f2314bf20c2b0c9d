"""
Deep Equality Comparator
========================

Structural comparison of two values, independent of reference identity. Every
cache and stable-reference helper in renderscope is built on deep_equal().

Rules:
- Identical objects are equal.
- Sequences (list, tuple) compare length, then element-wise.
- Mappings compare key sets, then value-wise; key order is ignored.
- Sets compare with set equality.
- numpy arrays compare shape, then contents with numpy.array_equal.
- A sequence never equals a mapping, and a container never equals a scalar.
- Booleans never equal numbers (True != 1), then everything else compares
  with ==.

Cyclic structures are not supported. Recursion follows the data without
tracking visited nodes, so a self-referencing value will exhaust the
interpreter's recursion limit. Passing one is a violation of the caller's
contract.
"""

from collections.abc import Mapping, Set
from typing import Any

import numpy as np

_SEQUENCE_TYPES = (list, tuple)
_BOOL_TYPES = (bool, np.bool_)


def _shape(value: Any) -> str:
    if isinstance(value, np.ndarray):
        return "array"
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, _SEQUENCE_TYPES):
        return "sequence"
    if isinstance(value, (set, frozenset, Set)):
        return "set"
    return "scalar"


def deep_equal(a: Any, b: Any) -> bool:
    """
    Compare two values structurally.

    Args:
        a: First value
        b: Second value

    Returns:
        True if both values have the same shape and the same contents
    """
    if a is b:
        return True

    kind = _shape(a)
    if kind != _shape(b):
        return False

    if kind == "sequence":
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b))

    if kind == "mapping":
        if len(a) != len(b):
            return False
        if a.keys() != b.keys():
            return False
        return all(deep_equal(a[key], b[key]) for key in a)

    if kind == "set":
        return a == b

    if kind == "array":
        return a.shape == b.shape and bool(np.array_equal(a, b))

    if isinstance(a, _BOOL_TYPES) != isinstance(b, _BOOL_TYPES):
        return False

    result = a == b
    # Scalars from numpy compare to numpy bools
    if isinstance(result, np.ndarray):
        return bool(result.all())
    return bool(result)
