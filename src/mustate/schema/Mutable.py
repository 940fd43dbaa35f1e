"""Field marking for change-trackable classes.

A class takes part in change detection once it is decorated with
`@mutableclass`. Its dataclass fields declared with `mutable()` are compared
against the snapshot; every other field is immutable and ignored.

Example:
    @mutableclass
    class Document:
        path: str = ""
        title: str | None = mutable(default=None)
        meta: Meta | None = mutable(default=None)  # nested, Meta is a mutableclass
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, dataclass_transform, overload

MUTABLE_FLAG = "mustate.mutable"
"""Key set in `dataclasses.Field.metadata` for mutable-marked fields."""

_PARTICIPATING_ATTR = "__mustate_mutable__"


def mutable(**field_kwargs: Any) -> Any:
    """Declare a dataclass field that takes part in change detection.

    Accepts the same keyword arguments as `dataclasses.field`.
    """
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[MUTABLE_FLAG] = True
    return dataclasses.field(metadata=metadata, **field_kwargs)


def is_mutable_field(f: dataclasses.Field[Any]) -> bool:
    return bool(f.metadata.get(MUTABLE_FLAG, False))


@overload
def mutableclass[C: type](cls: C, /) -> C: ...


@overload
def mutableclass[C: type](cls: None = None, /, **dataclass_kwargs: Any) -> Callable[[C], C]: ...


@dataclass_transform(field_specifiers=(dataclasses.field, mutable))
def mutableclass(cls: Any = None, /, **dataclass_kwargs: Any) -> Any:
    """Mark a class as change-trackable, turning it into a dataclass if needed.

    Usable bare (`@mutableclass`) or with dataclass options
    (`@mutableclass(kw_only=True)`).
    """

    def wrap(target: type) -> type:
        params = target.__dict__.get("__dataclass_params__")
        if dataclass_kwargs.get("frozen") or (params is not None and params.frozen):
            raise TypeError(
                f"{target.__name__} cannot be frozen: snapshots are updated in place"
            )
        # Subclasses of a dataclass inherit __dataclass_fields__ without their own fields.
        if "__dataclass_fields__" not in target.__dict__:
            target = dataclasses.dataclass(**dataclass_kwargs)(target)
        setattr(target, _PARTICIPATING_ATTR, True)
        return target

    if cls is None:
        return wrap
    return wrap(cls)


def is_mutable_type(obj: Any) -> bool:
    """Check if `obj` is a class decorated with `@mutableclass`."""
    return (
        isinstance(obj, type)
        and dataclasses.is_dataclass(obj)
        and getattr(obj, _PARTICIPATING_ATTR, False) is True
    )
