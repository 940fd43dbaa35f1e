"""Tests for mutableclass field marking and FieldSchema classification."""

# pyright: reportPrivateUsage=false

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Optional

import pytest

from mustate.errors import SchemaError
from mustate.schema.FieldSchema import _schemas, classify
from mustate.schema.Mutable import is_mutable_type, mutable, mutableclass


@mutableclass
class Address:
    label: str | None = None
    street: str | None = mutable(default=None)


@mutableclass
class Person:
    person_id: str | None = None
    name: str | None = mutable(default=None)
    tags: list[str] = mutable(default_factory=list)
    address: Address | None = mutable(default=None)
    backup: Optional[Address] = mutable(default=None)
    age: int = mutable(default=0)


@mutableclass
class TreeNode:
    value: int = mutable(default=0)
    child: TreeNode | None = mutable(default=None)


@mutableclass
class Broken:
    ref: UndefinedThing | None = mutable(default=None)  # type: ignore[name-defined]  # noqa: F821


@dataclass
class PlainData:
    name: str = field(default="")


class TestMutableClass:
    """Tests for the @mutableclass decorator."""

    def test_turns_class_into_dataclass(self) -> None:
        """Decorated classes get dataclass fields and an __init__."""
        assert dataclasses.is_dataclass(Person)
        p = Person(name="Ada", age=3)
        assert p.name == "Ada"
        assert p.age == 3

    def test_marks_participating(self) -> None:
        """Only decorated classes are change-trackable."""
        assert is_mutable_type(Person)
        assert not is_mutable_type(PlainData)
        assert not is_mutable_type(Person())
        assert not is_mutable_type(str)

    def test_accepts_dataclass_options(self) -> None:
        """Keyword arguments are forwarded to dataclass."""

        @mutableclass(kw_only=True)
        class Options:
            flag: bool = mutable(default=False)

        assert Options(flag=True).flag is True
        with pytest.raises(TypeError):
            Options(True)  # type: ignore[misc]

    def test_rejects_frozen(self) -> None:
        """Frozen dataclasses cannot be updated in place and are refused."""
        with pytest.raises(TypeError, match="cannot be frozen"):

            @mutableclass(frozen=True)
            class Frozen:
                value: int = mutable(default=0)

    def test_keeps_existing_dataclass(self) -> None:
        """An existing dataclass is marked without being rebuilt."""

        @mutableclass
        @dataclass(eq=False)
        class Existing:
            value: int = mutable(default=0)

        assert is_mutable_type(Existing)
        assert Existing(1) != Existing(1)

    def test_mutable_keeps_user_metadata(self) -> None:
        """mutable() merges its flag into caller-supplied metadata."""

        @mutableclass
        class WithMeta:
            value: int = mutable(default=0, metadata={"unit": "ms"})

        (f,) = dataclasses.fields(WithMeta)
        assert f.metadata["unit"] == "ms"
        assert classify(WithMeta).plain == ("value",)


class TestClassify:
    """Tests for classify()."""

    def test_partitions_fields(self) -> None:
        """Each field lands in exactly one of plain, nested or immutable."""
        schema = classify(Person)

        assert schema.plain == ("name", "tags", "age")
        assert schema.nested == ("address", "backup")
        assert schema.immutable == frozenset({"person_id"})

        names = {f.name for f in dataclasses.fields(Person)}
        assert set(schema.plain) | set(schema.nested) | schema.immutable == names
        assert not set(schema.plain) & set(schema.nested)

    def test_nested_types_strip_optional(self) -> None:
        """Optional[X] and X | None both resolve to the nested class."""
        schema = classify(Person)
        assert schema.nested_types == {"address": Address, "backup": Address}

    def test_string_fields(self) -> None:
        """Plain fields declared as str are recorded."""
        assert classify(Person).string_fields == frozenset({"name"})

    def test_nested_class_classified_eagerly(self) -> None:
        """Classifying a class also classifies its nested classes."""
        classify(Person)
        assert Address in _schemas
        assert _schemas[Address].plain == ("street",)
        assert _schemas[Address].immutable == frozenset({"label"})

    def test_self_reference(self) -> None:
        """A class nesting itself is classified without looping."""
        schema = classify(TreeNode)
        assert schema.nested == ("child",)
        assert schema.nested_types["child"] is TreeNode

    def test_is_cached(self) -> None:
        """Repeated calls return the same schema object."""
        assert classify(Person) is classify(Person)

    def test_mutable_fields_order(self) -> None:
        """mutable_fields lists plain fields before nested ones."""
        assert classify(Person).mutable_fields == (
            "name",
            "tags",
            "age",
            "address",
            "backup",
        )

    def test_non_participating_raises(self) -> None:
        """Undecorated classes raise SchemaError."""
        with pytest.raises(SchemaError, match="not a change-trackable class"):
            classify(PlainData)

    def test_unresolvable_annotation_raises(self) -> None:
        """Annotations that cannot be resolved raise SchemaError, which is a TypeError."""
        with pytest.raises(SchemaError, match="Cannot resolve") as exc_info:
            classify(Broken)
        assert isinstance(exc_info.value, TypeError)
        assert isinstance(exc_info.value.__cause__, NameError)
        assert Broken not in _schemas
