"""Field models: descriptors, exclusion reasons, and the transient marker.

Usage:
    @dataclass
    class Order:
        id: int
        customer: Customer
        cache: Annotated[dict, Transient] = field(default_factory=dict)
        audit: list = field(default_factory=list, metadata={"transient": True})

    class Legacy:
        __transient__ = ("session",)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Final


class _TransientMarker:
    """Marks a field as not part of the copy."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "Transient"


Transient: Final = _TransientMarker()
"""Use as ``Annotated[T, Transient]`` to leave a field out of copies."""

TRANSIENT_METADATA_KEY = "transient"
"""Dataclass ``field(metadata=...)`` key marking a field transient."""

TRANSIENT_NAMES_ATTR = "__transient__"
"""Class attribute listing transient field names on plain classes."""


class Exclusion(Enum):
    """Why a field is left out of a copy."""

    CLASS_LEVEL = auto()  # Annotated ClassVar, shared by every instance
    TRANSIENT = auto()  # Explicitly marked as not part of the copy


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Metadata about one copyable (or excluded) field of an instance."""

    name: str
    owner: type
    """Class in the MRO that declares the field."""

    exclusion: Exclusion | None = None
    default_factory: Callable[[], Any] | None = None
    """Produces the declared default; None when the type declares none."""

    @property
    def excluded(self) -> bool:
        """True when the field is never read from the source."""
        return self.exclusion is not None
