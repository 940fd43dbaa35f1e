from __future__ import annotations


class UnregisteredTypeError(Exception):
    """Raised when a baseline is requested for a type that was never snapshotted."""

    cls: type

    def __init__(self, cls: type):
        self.cls = cls
        super().__init__(
            f"Type {cls.__qualname__} was not registered. Please call snapshot() first."
        )


class SchemaError(TypeError):
    """Raised when a type cannot be classified into mutable and immutable fields.

    This is a configuration error: it surfaces when a type is first registered,
    never while comparing instances.
    """
