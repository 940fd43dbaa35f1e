"""Classification of a change-trackable class's fields.

Every dataclass field lands in exactly one of three sets:

- plain: marked with `mutable()`, compared by value
- nested: marked with `mutable()` and typed as another `@mutableclass`,
  compared recursively
- immutable: everything else, never copied or compared
"""

from __future__ import annotations

import dataclasses
import logging
import types
import typing
from dataclasses import dataclass, field
from typing import Any

from mustate.errors import SchemaError
from mustate.schema.Mutable import is_mutable_field, is_mutable_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldSchema:
    """Field partition for one change-trackable class.

    Attributes:
        cls: The classified class.
        plain: Mutable fields compared by value, in declaration order.
        nested: Mutable fields holding another change-trackable class, in declaration order.
        immutable: Fields excluded from snapshots and comparison.
        nested_types: Declared change-trackable type of each nested field.
        string_fields: Plain fields declared as `str` (or `str | None`).
    """

    cls: type
    plain: tuple[str, ...]
    nested: tuple[str, ...]
    immutable: frozenset[str]
    nested_types: dict[str, type] = field(default_factory=dict)
    string_fields: frozenset[str] = frozenset()

    @property
    def mutable_fields(self) -> tuple[str, ...]:
        return self.plain + self.nested


_schemas: dict[type, FieldSchema] = {}


def _strip_optional(hint: Any) -> Any:
    """Reduce `X | None` / `Optional[X]` to `X`; leave anything else untouched."""
    origin = typing.get_origin(hint)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def _resolve_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError) as e:
        raise SchemaError(
            f"Cannot resolve field annotations of {cls.__qualname__}: {e}"
        ) from e


def _build(cls: type) -> FieldSchema:
    hints = _resolve_hints(cls)
    plain: list[str] = []
    nested: list[str] = []
    immutable: set[str] = set()
    nested_types: dict[str, type] = {}
    string_fields: set[str] = set()

    for f in dataclasses.fields(cls):
        if not is_mutable_field(f):
            immutable.add(f.name)
            continue
        declared = _strip_optional(hints.get(f.name, Any))
        if is_mutable_type(declared):
            nested.append(f.name)
            nested_types[f.name] = declared
        else:
            plain.append(f.name)
            if declared is str:
                string_fields.add(f.name)

    return FieldSchema(
        cls=cls,
        plain=tuple(plain),
        nested=tuple(nested),
        immutable=frozenset(immutable),
        nested_types=nested_types,
        string_fields=frozenset(string_fields),
    )


def classify(cls: type) -> FieldSchema:
    """Partition the fields of a change-trackable class.

    The result is computed once per class. Nested change-trackable types
    reachable from `cls` are classified in the same call, so annotation
    problems anywhere in the graph surface here.

    Raises:
        SchemaError: If `cls` is not a `@mutableclass` or its annotations
            cannot be resolved.
    """
    cached = _schemas.get(cls)
    if cached is not None:
        return cached

    if not is_mutable_type(cls):
        name = getattr(cls, "__qualname__", repr(cls))
        raise SchemaError(f"{name} is not a change-trackable class (use @mutableclass)")

    pending = [cls]
    built: dict[type, FieldSchema] = {}
    while pending:
        current = pending.pop()
        if current in built or current in _schemas:
            continue
        schema = _build(current)
        built[current] = schema
        pending.extend(schema.nested_types.values())

    # Only publish once the whole graph resolved.
    _schemas.update(built)
    for schema in built.values():
        logger.debug(
            "classify: %s plain=%s nested=%s immutable=%s",
            schema.cls.__qualname__,
            list(schema.plain),
            list(schema.nested),
            sorted(schema.immutable),
        )
    return _schemas[cls]
