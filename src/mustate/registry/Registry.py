"""Registry - owns the baseline snapshot and comparators of each class.

A Registry holds at most one baseline per change-trackable class. The first
`snapshot()` of a class creates the baseline; later calls overwrite its mutable
fields in place. `has_changed()` compares a live instance against it.

The registry does no locking. Hosts sharing one across threads must guard
snapshots, comparator registration and comparisons themselves.

Usage:
    registry = Registry()
    registry.snapshot(doc)
    doc.title = "Draft 2"
    registry.has_changed(doc)  # True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, overload

from mustate.equality.Equality import Equality, NestedVerdict
from mustate.errors import UnregisteredTypeError
from mustate.registry.Comparators import Comparator, Comparators
from mustate.registry.snapshot import copy_into, snapshot
from mustate.schema.FieldSchema import FieldSchema, classify

logger = logging.getLogger(__name__)


@dataclass
class _Slot:
    schema: FieldSchema
    baseline: Any


class Registry:
    """Baseline snapshots and comparator tables, keyed by class.

    Args:
        nested_verdict: How nested field verdicts combine. "all" (default)
            requires every nested field to match; "first" lets the first
            nested field with a verdict decide.
    """

    _slots: dict[type, _Slot]
    _comparators: dict[type, Comparators]
    _equality: Equality

    def __init__(self, nested_verdict: NestedVerdict = "all") -> None:
        self._slots = {}
        self._comparators = {}
        self._equality = Equality(self._comparators.get, nested_verdict)

    @property
    def nested_verdict(self) -> NestedVerdict:
        return self._equality.nested_verdict

    def is_registered(self, cls: type) -> bool:
        """Check if a baseline exists for `cls`."""
        return cls in self._slots

    def snapshot(self, instance: Any) -> None:
        """Record the mutable state of `instance` as its class's baseline.

        Raises:
            TypeError: If `instance` is None
            SchemaError: If the instance's class is not change-trackable
        """
        if instance is None:
            raise TypeError("Cannot snapshot None")
        cls = type(instance)
        slot = self._slots.get(cls)
        if slot is None:
            schema = classify(cls)
            self._slots[cls] = _Slot(schema=schema, baseline=snapshot(instance))
            logger.info(
                "snapshot: registered %s (%d mutable fields)",
                cls.__qualname__,
                len(schema.mutable_fields),
            )
            return

        copy_into(slot.baseline, instance, slot.schema)
        logger.debug("snapshot: updated %s", cls.__qualname__)

    def baseline[T](self, cls: type[T]) -> T:
        """Return the baseline of `cls`.

        The baseline only carries mutable fields; immutable ones hold defaults.

        Raises:
            UnregisteredTypeError: If `cls` was never snapshotted
        """
        slot = self._slots.get(cls)
        if slot is None:
            raise UnregisteredTypeError(cls)
        return slot.baseline

    @overload
    def has_changed(self, instance: Any) -> bool: ...

    @overload
    def has_changed[T](self, instance: T | None, cls: type[T]) -> bool: ...

    def has_changed(self, instance: Any, cls: type | None = None) -> bool:
        """Check if the mutable state of `instance` differs from its baseline.

        Args:
            instance: The live instance, may be None when `cls` is given
            cls: The class whose baseline to compare against. Defaults to
                the class of `instance`.

        Raises:
            UnregisteredTypeError: If the class was never snapshotted
            TypeError: If both `instance` and `cls` are None
        """
        if cls is None:
            if instance is None:
                raise TypeError("has_changed(None) needs an explicit cls")
            cls = type(instance)
        changed = not self._equality.equals(instance, self.baseline(cls))
        logger.debug("has_changed: %s -> %s", cls.__qualname__, changed)
        return changed

    def register_comparator(
        self, cls: type, value_type: type, compare: Comparator
    ) -> None:
        """Use `compare` for values of `value_type` in fields of `cls`.

        `compare` receives the value of `value_type` first and the other side's
        value second. A later registration for the same value type replaces the
        earlier one.

        Raises:
            SchemaError: If `cls` is not change-trackable
            TypeError: If `value_type` is not a type or `compare` is not callable
        """
        classify(cls)
        table = self._comparators.setdefault(cls, Comparators())
        table.register(value_type, compare)
        logger.info(
            "register_comparator: %s value_type=%s",
            cls.__qualname__,
            value_type.__qualname__,
        )

    def comparators(self, cls: type) -> Comparators | None:
        return self._comparators.get(cls)

    def __contains__(self, cls: object) -> bool:
        return cls in self._slots

    def __len__(self) -> int:
        return len(self._slots)

