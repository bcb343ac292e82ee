"""Copier models: value classification and the per-call visited map."""

from __future__ import annotations

from collections.abc import Generator, Mapping, MutableSequence, Set
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from unproxy.core.fields import FieldAccessor
from unproxy.core.placeholder import PlaceholderResolver


class ValueKind(Enum):
    """Closed set of node kinds the copier dispatches on."""

    PLACEHOLDER = auto()  # Resolved before anything else
    LEAF = auto()  # Shared as is
    ARRAY = auto()  # tuple and subclasses, built after their elements
    SET = auto()  # collections.abc.Set
    MAP = auto()  # collections.abc.Mapping
    SEQUENCE = auto()  # collections.abc.MutableSequence
    ENTITY = auto()  # Anything with fields


def classify(value: Any, resolver: PlaceholderResolver, accessor: FieldAccessor) -> ValueKind:
    """Tag a runtime value with its ValueKind.

    Placeholder detection comes first so a lazy object is never mistaken for
    the container it stands in for.
    """
    if resolver.is_placeholder(value):
        return ValueKind.PLACEHOLDER
    if accessor.is_leaf(type(value)):
        return ValueKind.LEAF
    if isinstance(value, Mapping):
        return ValueKind.MAP
    if isinstance(value, Set):
        return ValueKind.SET
    if isinstance(value, tuple):
        return ValueKind.ARRAY
    if isinstance(value, MutableSequence):
        return ValueKind.SEQUENCE
    return ValueKind.ENTITY


class VisitedMap:
    """Identity-keyed map from original node to its copy.

    Keys are ``id(original)``; the original is stored alongside its copy so
    its id cannot be recycled while the map is alive. Equality and hashing of
    the nodes themselves are never consulted.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[int, tuple[Any, Any]] = {}

    def __contains__(self, original: object) -> bool:
        return id(original) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, original: Any, default: Any = None) -> Any:
        """Return the copy registered for ``original``, or ``default``."""
        entry = self._entries.get(id(original))
        if entry is None:
            return default
        return entry[1]

    def register(self, original: Any, copy: Any) -> None:
        """Record ``copy`` as the counterpart of ``original``."""
        self._entries[id(original)] = (original, copy)


CopySteps = Generator[tuple[Any, object], Any, Any]
"""Copy of one node in progress.

Yields (child value, path segment) for every child it needs and receives the
child's copy back; returns the finished copy. A path segment is anything
whose ``str()`` is its text, and is only formatted when an error occurs.
"""


@dataclass(slots=True)
class Pending:
    """A node whose copy needs its children copied first."""

    steps: CopySteps
