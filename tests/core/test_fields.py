"""Tests for field introspection.

Critical Invariants:
- Inherited state is enumerated (whole MRO)
- Class-level and transient fields are flagged as excluded; Final fields are not
- Bare instances are built without running __init__
"""

import threading
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, ClassVar, Final

import pytest
from pydantic import BaseModel, Field

from unproxy import Exclusion, ReflectiveFieldAccessor, Transient, UnsupportedType


@pytest.fixture
def accessor():
    return ReflectiveFieldAccessor()


def _by_name(fields):
    return {f.name: f for f in fields}


@dataclass
class Base:
    id: int
    created_by: str = "system"


@dataclass
class Document(Base):
    title: str = ""
    cache: Annotated[dict, Transient] = field(default_factory=dict)
    audit: list = field(default_factory=list, metadata={"transient": True})
    revision: Final[int] = 1
    registry: ClassVar[dict] = {}


def test_dataclass_fields_include_inherited(accessor):
    doc = Document(id=7, title="draft")

    fields = _by_name(accessor.fields(doc))

    assert list(fields) == ["id", "created_by", "title", "cache", "audit", "revision"]
    assert fields["id"].owner is Base
    assert fields["title"].owner is Document
    assert not fields["id"].excluded


def test_dataclass_exclusions(accessor):
    fields = _by_name(accessor.fields(Document(id=1)))

    assert fields["cache"].exclusion is Exclusion.TRANSIENT
    assert fields["audit"].exclusion is Exclusion.TRANSIENT
    assert not fields["revision"].excluded
    assert "registry" not in fields


def test_reset_restores_declared_default(accessor):
    doc = Document(id=1)
    doc.cache["k"] = "v"
    fields = _by_name(accessor.fields(doc))

    bare = accessor.new_instance(Document, doc)
    accessor.reset(bare, fields["cache"])

    assert bare.cache == {}
    assert bare.cache is not doc.cache


class Plain:
    counter: "ClassVar[int]" = 0
    session: "Annotated[Any, Transient]" = None

    def __init__(self):
        self.name = "plain"
        self.session = object()
        self.counter = 5


class LegacyPlain(Plain):
    __transient__ = ("connection",)

    def __init__(self):
        super().__init__()
        self.connection = object()


def test_plain_object_uses_instance_dict(accessor):
    fields = _by_name(accessor.fields(Plain()))

    assert set(fields) == {"name", "session", "counter"}
    assert not fields["name"].excluded
    assert fields["session"].exclusion is Exclusion.TRANSIENT
    assert fields["counter"].exclusion is Exclusion.CLASS_LEVEL


def test_transient_names_attribute_is_inherited_with_annotations(accessor):
    fields = _by_name(accessor.fields(LegacyPlain()))

    assert fields["connection"].exclusion is Exclusion.TRANSIENT
    assert fields["connection"].owner is LegacyPlain
    assert fields["session"].owner is Plain


class SlotBase:
    __slots__ = ("__secret", "public")

    def __init__(self):
        self.__secret = "s"
        self.public = "p"


class SlotChild(SlotBase):
    __slots__ = ("extra", "unset")

    def __init__(self):
        super().__init__()
        self.extra = "e"


def test_slots_across_mro_with_mangling(accessor):
    child = SlotChild()

    fields = _by_name(accessor.fields(child))

    assert set(fields) == {"extra", "_SlotBase__secret", "public"}
    assert fields["_SlotBase__secret"].owner is SlotBase
    assert accessor.get(child, fields["_SlotBase__secret"]) == "s"


def test_new_instance_skips_init(accessor):
    class Guarded:
        def __init__(self):
            raise AssertionError("constructor must not run")

    instance = object.__new__(Guarded)

    assert type(accessor.new_instance(Guarded, instance)) is Guarded


def test_new_instance_requiring_arguments_is_unsupported(accessor):
    class NeedsArgs:
        def __new__(cls, value):
            return super().__new__(cls)

    with pytest.raises(UnsupportedType, match="cannot instantiate"):
        accessor.new_instance(NeedsArgs, NeedsArgs(1))


def test_opaque_extension_types_are_unsupported(accessor):
    with pytest.raises(UnsupportedType, match="no introspectable state"):
        accessor.fields(threading.Lock())


def test_set_bypasses_frozen_dataclass(accessor):
    @dataclass(frozen=True)
    class Point:
        x: int

    source = Point(1)
    (x_field,) = accessor.fields(source)
    bare = accessor.new_instance(Point, source)

    accessor.set(bare, x_field, 3)

    assert bare == Point(3)


class Address(BaseModel):
    city: str


class Person(BaseModel):
    name: str
    address: Address | None = None
    secret: str = Field(default="hidden", exclude=True)
    note: Annotated[str, Transient] = ""


def test_pydantic_model_fields(accessor):
    person = Person(name="ada", secret="s", note="n")

    fields = _by_name(accessor.fields(person))

    assert list(fields) == ["name", "address", "secret", "note"]
    assert fields["secret"].exclusion is Exclusion.TRANSIENT
    assert fields["note"].exclusion is Exclusion.TRANSIENT
    assert not fields["address"].excluded


def test_pydantic_new_instance_keeps_fields_set(accessor):
    person = Person(name="ada")

    bare = accessor.new_instance(Person, person)

    assert bare.model_fields_set == {"name"}
    assert bare.secret == "hidden"


def test_default_leaf_types(accessor):
    class Color(Enum):
        RED = 1

    for value in (None, True, 3, 2.5, "s", b"b", Decimal("1.5"), Color.RED, len, Plain):
        assert accessor.is_leaf(type(value)), value

    assert not accessor.is_leaf(list)
    assert not accessor.is_leaf(Plain)


def test_register_leaf_type(accessor):
    accessor.register_leaf_type(Plain)

    assert accessor.is_leaf(LegacyPlain)
    assert Plain in accessor.leaf_types
