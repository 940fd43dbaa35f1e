"""Recursive equality between a live instance and its baseline.

Only mutable fields are read. Plain fields go through three rules, the first
that applies decides the field:

1. string rule: None and "" are the same value
2. comparator rule: a user comparator registered for the value's runtime type
3. default rule: `==`, falling back to a structural comparison

Nested fields recurse into their own class's schema and comparators.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Literal

from glom import glom

from mustate.equality.rules import equals_by_null, equals_by_null_and_empty
from mustate.registry.Comparators import Comparators
from mustate.schema.FieldSchema import FieldSchema, classify

logger = logging.getLogger(__name__)

type NestedVerdict = Literal["all", "first"]
"""How nested fields combine.

"all": every nested field must be equal.
"first": the first nested field that yields a verdict decides the pass.
"""

NESTED_VERDICTS: frozenset[str] = frozenset({"all", "first"})


class Equality:
    """Compares change-trackable instances field by field.

    Args:
        comparators_for: Returns the comparator table of a class, or None when
            the class has none.
        nested_verdict: How nested field verdicts combine, see `NestedVerdict`.
    """

    _comparators_for: Callable[[type], Comparators | None]
    nested_verdict: NestedVerdict

    def __init__(
        self,
        comparators_for: Callable[[type], Comparators | None],
        nested_verdict: NestedVerdict = "all",
    ):
        if nested_verdict not in NESTED_VERDICTS:
            raise ValueError(
                f"nested_verdict must be one of {sorted(NESTED_VERDICTS)}, got {nested_verdict!r}"
            )
        self._comparators_for = comparators_for
        self.nested_verdict = nested_verdict

    def equals(self, live: Any, base: Any) -> bool:
        if live is None and base is None:
            return True
        # A nested object on one side only is a change.
        if live is None or base is None:
            return False

        schema = classify(type(live))
        return self._plain_equal(schema, live, base) and self._nested_equal(
            schema, live, base
        )

    def _field_equal(
        self, schema: FieldSchema, name: str, live: Any, base: Any
    ) -> bool:
        if (
            name in schema.string_fields
            or isinstance(live, str)
            or isinstance(base, str)
        ):
            return equals_by_null_and_empty(live, base)

        comparators = self._comparators_for(schema.cls)
        if comparators is not None:
            verdict = comparators.resolve(live, base)
            if verdict is not None:
                return verdict

        return equals_by_null(live, base)

    def _plain_equal(self, schema: FieldSchema, live: Any, base: Any) -> bool:
        for name in schema.plain:
            live_value = glom(live, name, default=None)
            base_value = glom(base, name, default=None)
            if not self._field_equal(schema, name, live_value, base_value):
                logger.debug("%s.%s differs", schema.cls.__qualname__, name)
                return False
        return True

    def _nested_equal(self, schema: FieldSchema, live: Any, base: Any) -> bool:
        for name in schema.nested:
            live_value = glom(live, name, default=None)
            base_value = glom(base, name, default=None)
            if live_value is None and base_value is None:
                continue

            is_equal = self.equals(live_value, base_value)
            if self.nested_verdict == "first":
                return is_equal
            if not is_equal:
                logger.debug("%s.%s differs", schema.cls.__qualname__, name)
                return False
        return True
