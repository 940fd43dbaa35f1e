"""Module-level change tracking on a shared, process-wide Registry.

Example:
    from mustate.api import snapshot, has_changed

    snapshot(doc)
    doc.title = "Draft 2"
    assert has_changed(doc)
"""

from __future__ import annotations

from typing import Any

from mustate.errors import SchemaError, UnregisteredTypeError
from mustate.registry.Comparators import Comparator
from mustate.registry.Registry import Registry
from mustate.schema.Mutable import mutable, mutableclass

_default_registry = Registry()


def default_registry() -> Registry:
    """Return the Registry used by the module-level functions."""
    return _default_registry


def snapshot(instance: Any) -> None:
    """Record `instance` as the baseline of its class."""
    _default_registry.snapshot(instance)


def is_registered(cls: type) -> bool:
    return _default_registry.is_registered(cls)


def has_changed(instance: Any, cls: type | None = None) -> bool:
    """Check if `instance` differs from the baseline of its class.

    Raises:
        UnregisteredTypeError: If the class was never snapshotted
    """
    return _default_registry.has_changed(instance, cls)


def register_comparator(cls: type, value_type: type, compare: Comparator) -> None:
    _default_registry.register_comparator(cls, value_type, compare)


def baseline[T](cls: type[T]) -> T:
    return _default_registry.baseline(cls)


__all__ = [
    "Registry",
    "SchemaError",
    "UnregisteredTypeError",
    "baseline",
    "default_registry",
    "has_changed",
    "is_registered",
    "mutable",
    "mutableclass",
    "register_comparator",
    "snapshot",
]
