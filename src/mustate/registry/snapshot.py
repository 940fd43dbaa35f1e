"""Snapshot utility for copying the mutable part of an instance.

Plain mutable values are copied with `copy.deepcopy`, nested change-trackable
values are copied recursively with the same restriction, and immutable fields
are never read from the source. Field access goes through glom so a nested
value is read and written by name.
"""

from __future__ import annotations

import copy
import dataclasses
from typing import Any

from glom import assign, glom

from mustate.schema.FieldSchema import FieldSchema, classify


def _placeholder(f: dataclasses.Field[Any]) -> Any:
    """Value an immutable field holds inside a baseline: its default, else None."""
    if f.default is not dataclasses.MISSING:
        return f.default
    if f.default_factory is not dataclasses.MISSING:
        return f.default_factory()
    return None


def _copy_value(schema: FieldSchema, name: str, value: Any) -> Any:
    if value is None:
        return None
    if name in schema.nested_types:
        return snapshot(value)
    return copy.deepcopy(value)


def snapshot[S](state: S) -> S:
    """Create a copy of `state` holding only its mutable fields.

    Args:
        state: An instance of a `@mutableclass`

    Returns:
        A new instance of the same class. Immutable fields hold their declared
        default (or None) instead of the source's values.
    """
    cls = type(state)
    schema = classify(cls)
    # Bypass __init__ so required immutable fields need no value.
    target = cls.__new__(cls)
    for f in dataclasses.fields(cls):  # type: ignore[arg-type]
        if f.name in schema.immutable:
            object.__setattr__(target, f.name, _placeholder(f))
    copy_into(target, state, schema)
    return target


def copy_into[S](target: S, source: S, schema: FieldSchema) -> S:
    """Overwrite the mutable fields of `target` with copies of those in `source`.

    `target` itself is kept, only its field values change.
    """
    for name in schema.mutable_fields:
        value = glom(source, name, default=None)
        assign(target, name, _copy_value(schema, name, value))
    return target
