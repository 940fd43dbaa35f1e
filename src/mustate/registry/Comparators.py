"""Comparator table for one change-trackable class."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

# Receives (value of the registered type, the other side's value)
type Comparator = Callable[[Any, Any], bool]


class Comparators:
    """Maps a value's runtime type to the equality function used for it.

    Lookup is by exact runtime type of the compared value, not by field name
    or declared type. Entries can be overwritten but never removed.
    """

    _table: dict[type, Comparator]

    def __init__(self) -> None:
        self._table = {}

    def register(self, value_type: type, compare: Comparator) -> None:
        """Add or overwrite the comparator for `value_type`."""
        if not isinstance(value_type, type):
            raise TypeError(f"value_type must be a type, got {type(value_type).__name__}")
        if not callable(compare):
            raise TypeError("compare must be callable")
        self._table[value_type] = compare

    def lookup(self, value: Any) -> Comparator | None:
        if value is None:
            return None
        return self._table.get(type(value))

    def resolve(self, live: Any, base: Any) -> bool | None:
        """Run the comparator registered for either side.

        The live side is tried first. The matching side is passed as the first
        argument.

        Returns:
            The comparator's verdict, or None if no comparator applies
        """
        compare = self.lookup(live)
        if compare is not None:
            return bool(compare(live, base))
        compare = self.lookup(base)
        if compare is not None:
            return bool(compare(base, live))
        return None

    def __contains__(self, value_type: object) -> bool:
        return value_type in self._table

    def __len__(self) -> int:
        return len(self._table)
