"""Value-level equality rules used for plain mutable fields."""

from __future__ import annotations

from typing import Any

from deepdiff import DeepDiff


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def equals_by_null_and_empty(a: str | None, b: str | None) -> bool:
    """Compare strings treating None and "" as the same value."""
    return (_is_blank(a) and _is_blank(b)) or a == b


# Their == defers to the elements, which may lack __eq__ of their own.
_CONTAINERS = (list, tuple, dict, set, frozenset)


def _has_own_eq(value: Any) -> bool:
    return type(value).__eq__ is not object.__eq__


def equals_by_null(a: Any, b: Any) -> bool:
    """Compare two values without raising on None.

    A type with its own `__eq__` decides by it. Objects without one, array-likes
    whose `==` is not a plain bool, and containers that `==` calls different are
    compared structurally with DeepDiff, so copies of them compare equal.
    """
    if a is None or b is None:
        return a is None and b is None
    if _has_own_eq(a):
        try:
            result = a == b
        except (TypeError, ValueError):
            result = NotImplemented
        if result is True or (result is False and not isinstance(a, _CONTAINERS)):
            return result
    return not DeepDiff(a, b, ignore_private_variables=False)
