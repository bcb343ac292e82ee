"""Field introspection: enumerate, read, and write instance state generically.

The copier never touches instances directly; it goes through a FieldAccessor.
ReflectiveFieldAccessor covers dataclasses, Pydantic models, slotted classes,
and plain ``__dict__`` objects, walking the whole MRO so inherited state is
copied too.

Usage:
    accessor = ReflectiveFieldAccessor()
    for f in accessor.fields(order):
        if not f.excluded:
            print(f.name, accessor.get(order, f))

    # Treat a project type as atomic (shared, never copied)
    accessor.register_leaf_type(Money)
"""

from __future__ import annotations

import dataclasses
import datetime
import enum
import fractions
import functools
import inspect
import pathlib
import re
import types
import uuid
import weakref
from collections.abc import Iterable
from decimal import Decimal
from typing import Annotated, Any, ClassVar, Protocol, get_origin, runtime_checkable

from pydantic import BaseModel

from unproxy.core.errors import UnsupportedType
from unproxy.core.fields.models import (
    TRANSIENT_METADATA_KEY,
    TRANSIENT_NAMES_ATTR,
    Exclusion,
    FieldDescriptor,
    Transient,
)

DEFAULT_LEAF_TYPES: tuple[type, ...] = (
    type(None),
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    range,
    slice,
    type(Ellipsis),
    type(NotImplemented),
    Decimal,
    fractions.Fraction,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    datetime.tzinfo,
    uuid.UUID,
    pathlib.PurePath,
    enum.Enum,
    re.Pattern,
    type,
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.ModuleType,
    types.CodeType,
    weakref.ref,
    property,
)
"""Types whose instances are immutable or identity-bound and shared as is."""

_IGNORED_SLOTS = frozenset({"__dict__", "__weakref__"})

_CLASSVAR_RE = re.compile(r"^(typing\.|t\.)?ClassVar\b")
_TRANSIENT_RE = re.compile(r"^(typing\.|t\.)?Annotated\[.*\bTransient\b")


@runtime_checkable
class FieldAccessor(Protocol):
    """Capability interface for generic instance introspection."""

    def fields(self, value: Any) -> list[FieldDescriptor]:
        """Enumerate the instance fields of ``value`` across its MRO."""
        ...

    def get(self, value: Any, field: FieldDescriptor) -> Any:
        """Read one field."""
        ...

    def set(self, target: Any, field: FieldDescriptor, value: Any) -> None:
        """Write one field, bypassing ``__setattr__`` overrides and frozenness."""
        ...

    def reset(self, target: Any, field: FieldDescriptor) -> None:
        """Put an excluded field back to its declared default, if any."""
        ...

    def new_instance(self, cls: type, source: Any) -> Any:
        """Allocate a bare instance of ``cls`` without running ``__init__``."""
        ...

    def is_leaf(self, cls: type) -> bool:
        """Check whether instances of ``cls`` are shared instead of copied."""
        ...


def _annotation_exclusion(annotation: Any) -> Exclusion | None:
    """Classify one annotation, evaluated or left as a string."""
    if isinstance(annotation, str):
        text = annotation.strip()
        if _TRANSIENT_RE.match(text):
            return Exclusion.TRANSIENT
        if _CLASSVAR_RE.match(text):
            return Exclusion.CLASS_LEVEL
        return None

    origin = get_origin(annotation)
    if origin is Annotated:
        if any(meta is Transient for meta in annotation.__metadata__):
            return Exclusion.TRANSIENT
        return _annotation_exclusion(annotation.__origin__)
    if annotation is ClassVar or origin is ClassVar:
        return Exclusion.CLASS_LEVEL
    return None


@functools.cache
def _class_exclusions(cls: type) -> dict[str, tuple[type, Exclusion]]:
    """Collect field exclusions declared anywhere in the MRO.

    Subclass declarations win over base-class ones.

    Returns:
        Mapping of field name to (declaring class, exclusion reason).
    """
    found: dict[str, tuple[type, Exclusion]] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, annotation in inspect.get_annotations(klass).items():
            reason = _annotation_exclusion(annotation)
            if reason is not None:
                found[name] = (klass, reason)
            else:
                found.pop(name, None)
        names = klass.__dict__.get(TRANSIENT_NAMES_ATTR, ())
        if isinstance(names, str):
            names = (names,)
        for name in names:
            found[name] = (klass, Exclusion.TRANSIENT)
    return found


@functools.cache
def _annotation_owner(cls: type, name: str) -> type:
    """Find the class in the MRO that annotates ``name``, defaulting to ``cls``."""
    for klass in cls.__mro__:
        if name in inspect.get_annotations(klass):
            return klass
    return cls


@functools.cache
def _slot_layout(cls: type) -> tuple[tuple[str, type], ...]:
    """List (attribute name, declaring class) for every slot in the MRO.

    Private slot names are mangled the way the interpreter stores them.
    """
    layout: list[tuple[str, type]] = []
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot in _IGNORED_SLOTS:
                continue
            if slot.startswith("__") and not slot.endswith("__"):
                slot = f"_{klass.__name__.lstrip('_')}{slot}"
            layout.append((slot, klass))
    return layout


@functools.cache
def _declares_state(cls: type) -> bool:
    """Check whether any Python-level class in the MRO declares ``__slots__``."""
    return any("__slots__" in klass.__dict__ for klass in cls.__mro__ if klass is not object)


def _instance_dict(value: Any) -> dict[str, Any] | None:
    try:
        return object.__getattribute__(value, "__dict__")
    except AttributeError:
        return None


def _slot_is_set(value: Any, owner: type, name: str) -> bool:
    descriptor = owner.__dict__.get(name)
    if not isinstance(descriptor, types.MemberDescriptorType):
        return False
    try:
        descriptor.__get__(value, owner)
    except AttributeError:
        return False
    return True


class ReflectiveFieldAccessor:
    """FieldAccessor built on Python's own introspection.

    Field sources, in order:
    1. Dataclass fields (``dataclasses.fields``), or Pydantic ``model_fields``.
    2. Slots declared anywhere in the MRO.
    3. Remaining keys of the instance ``__dict__``.

    Class attributes never appear: only instance state is enumerated.

    Args:
        leaf_types: Extra types to treat as atomic, on top of DEFAULT_LEAF_TYPES.
    """

    def __init__(self, leaf_types: Iterable[type] = ()) -> None:
        self._leaf_types: tuple[type, ...] = DEFAULT_LEAF_TYPES + tuple(leaf_types)

    @property
    def leaf_types(self) -> tuple[type, ...]:
        """Types currently treated as atomic."""
        return self._leaf_types

    def register_leaf_type(self, cls: type) -> None:
        """Treat instances of ``cls`` (and its subclasses) as atomic."""
        if not issubclass(cls, self._leaf_types):
            self._leaf_types = self._leaf_types + (cls,)

    def is_leaf(self, cls: type) -> bool:
        return issubclass(cls, self._leaf_types)

    def fields(self, value: Any) -> list[FieldDescriptor]:
        """Enumerate instance fields of ``value``.

        Only fields that currently hold a value are listed, plus every excluded
        field (which is never read, only reset).

        Raises:
            UnsupportedType: If the instance exposes no introspectable state.
        """
        cls = type(value)
        state = _instance_dict(value)
        if state is None and cls is not object and not _declares_state(cls):
            raise UnsupportedType(f"{cls.__qualname__} exposes no introspectable state")

        exclusions = _class_exclusions(cls)
        result: list[FieldDescriptor] = []
        seen: set[str] = set()

        if isinstance(value, BaseModel):
            result.extend(self._model_fields(cls, exclusions))
            # Private attributes and extras live outside model_fields
            return result

        if dataclasses.is_dataclass(cls):
            for descriptor in self._dataclass_fields(cls, exclusions):
                seen.add(descriptor.name)
                if descriptor.excluded or self._is_set(value, cls, state, descriptor.name):
                    result.append(descriptor)

        for name, owner in _slot_layout(cls):
            if name in seen:
                continue
            seen.add(name)
            excluded = exclusions.get(name)
            if excluded is not None:
                result.append(FieldDescriptor(name, excluded[0], excluded[1]))
            elif _slot_is_set(value, owner, name):
                result.append(FieldDescriptor(name, owner))

        for name in state or ():
            if name in seen:
                continue
            seen.add(name)
            excluded = exclusions.get(name)
            if excluded is not None:
                result.append(FieldDescriptor(name, excluded[0], excluded[1]))
            else:
                result.append(FieldDescriptor(name, _annotation_owner(cls, name)))

        return result

    def _dataclass_fields(
        self, cls: type, exclusions: dict[str, tuple[type, Exclusion]]
    ) -> Iterable[FieldDescriptor]:
        for f in dataclasses.fields(cls):
            exclusion = _annotation_exclusion(f.type)
            if f.metadata.get(TRANSIENT_METADATA_KEY):
                exclusion = Exclusion.TRANSIENT
            elif exclusion is None and f.name in exclusions:
                exclusion = exclusions[f.name][1]

            default_factory = None
            if f.default is not dataclasses.MISSING:
                default_factory = functools.partial(_constant, f.default)
            elif f.default_factory is not dataclasses.MISSING:
                default_factory = f.default_factory

            yield FieldDescriptor(
                name=f.name,
                owner=_annotation_owner(cls, f.name),
                exclusion=exclusion,
                default_factory=default_factory,
            )

    def _model_fields(
        self, cls: type[BaseModel], exclusions: dict[str, tuple[type, Exclusion]]
    ) -> Iterable[FieldDescriptor]:
        # model_construct() already fills defaults, so no default_factory here
        for name, info in cls.model_fields.items():
            exclusion = None
            if info.exclude is True or any(meta is Transient for meta in info.metadata):
                exclusion = Exclusion.TRANSIENT
            elif name in exclusions:
                exclusion = exclusions[name][1]
            yield FieldDescriptor(name, _annotation_owner(cls, name), exclusion)

    @staticmethod
    def _is_set(value: Any, cls: type, state: dict[str, Any] | None, name: str) -> bool:
        if state is not None and name in state:
            return True
        return any(_slot_is_set(value, owner, slot) for slot, owner in _slot_layout(cls) if slot == name)

    def get(self, value: Any, field: FieldDescriptor) -> Any:
        try:
            return getattr(value, field.name)
        except AttributeError as e:
            raise UnsupportedType(
                f"cannot read {type(value).__qualname__}.{field.name}: {e}"
            ) from e

    def set(self, target: Any, field: FieldDescriptor, value: Any) -> None:
        try:
            object.__setattr__(target, field.name, value)
        except (AttributeError, TypeError) as e:
            raise UnsupportedType(
                f"cannot write {type(target).__qualname__}.{field.name}: {e}"
            ) from e

    def reset(self, target: Any, field: FieldDescriptor) -> None:
        if field.default_factory is not None:
            self.set(target, field, field.default_factory())

    def new_instance(self, cls: type, source: Any) -> Any:
        """Allocate a bare instance of ``cls``.

        Pydantic models go through ``model_construct()`` so their internal
        bookkeeping exists, and inherit the source's set-fields record.

        Raises:
            UnsupportedType: If the type cannot be instantiated without arguments.
        """
        try:
            if issubclass(cls, BaseModel):
                instance = cls.model_construct()
                object.__setattr__(
                    instance, "__pydantic_fields_set__", set(source.model_fields_set)
                )
                return instance
            return cls.__new__(cls)
        except (TypeError, ValueError, AttributeError) as e:
            raise UnsupportedType(f"cannot instantiate {cls.__qualname__}: {e}") from e


def _constant(value: Any) -> Any:
    return value
