"""Deep copy of object graphs with placeholder resolution.

The copier walks a graph with an explicit stack of generator frames instead of
recursion, so deep graphs are not bounded by the interpreter recursion limit.
Each frame copies one node: mutable nodes (entities, lists, dicts, sets)
register their empty copy in the visited map before asking for any child, so
a cycle back to them yields the copy in progress. Immutable nodes (tuples,
frozensets) can only be built once their elements exist; they re-check the
visited map afterwards so a cycle through a mutable child still resolves to
a single copy.

Usage:
    copier = GraphCopier()
    detached = copier.deep_copy(order)            # Materialized[Order]
    detached = await copier.deep_copy_async(order)

    # Or with defaults
    from unproxy import deep_copy
    detached = deep_copy(order)
"""

from __future__ import annotations

import array
import logging
from collections import defaultdict, deque
from collections.abc import MutableSet
from typing import Any, TypeVar

from unproxy.config import CopierSettings
from unproxy.core.errors import CopyLimitExceeded, InvalidArgument, UnproxyError, UnsupportedType
from unproxy.core.fields import FieldAccessor, ReflectiveFieldAccessor
from unproxy.core.placeholder import (
    PlaceholderResolver,
    get_default_resolver,
    resolve_placeholder,
    resolve_placeholder_async,
)
from unproxy.core.types import Materialized
from unproxy.copier.models import CopySteps, Pending, ValueKind, VisitedMap, classify

_log = logging.getLogger("unproxy.copier")

T = TypeVar("T")

_PLAIN_KEY_TYPES = (str, int, float, bytes, bool)


class _KeySegment:
    """Path segment of a map value, formatted only when an error path is built.

    Keys of builtin scalar types show their repr; any other key is named by
    its position, so user ``__repr__`` code never runs during a copy.
    """

    __slots__ = ("_key", "_index")

    def __init__(self, key: Any, index: int) -> None:
        self._key = key
        self._index = index

    def __str__(self) -> str:
        if type(self._key) in _PLAIN_KEY_TYPES:
            return f"[{self._key!r}]"
        return f".values()[{self._index}]"


Frames = list[tuple[CopySteps, str | _KeySegment]]


def _path(frames: Frames, tail: str | _KeySegment = "") -> str:
    return "".join(str(segment) for _, segment in frames) + str(tail)


class GraphCopier:
    """Produces detached, placeholder-free deep copies of object graphs.

    A GraphCopier holds configuration only; every call gets its own visited
    map, so one copier can serve concurrent calls on unrelated graphs.

    Args:
        resolver: Placeholder capability. Defaults to the ``__resolve__`` protocol.
        accessor: Field capability. Defaults to ReflectiveFieldAccessor.
        settings: Copier configuration. Defaults to CopierSettings() (environment).
    """

    def __init__(
        self,
        resolver: PlaceholderResolver | None = None,
        accessor: FieldAccessor | None = None,
        settings: CopierSettings | None = None,
    ) -> None:
        self._resolver = resolver or get_default_resolver()
        self._accessor = accessor or ReflectiveFieldAccessor()
        self._settings = settings or CopierSettings()

    @property
    def settings(self) -> CopierSettings:
        return self._settings

    def resolve_one(self, value: T) -> T:
        """Resolve one node's placeholder-ness, without recursing into it.

        Raises:
            InvalidArgument: If ``value`` is None.
            ResolutionFailure: If loading fails.
        """
        if value is None:
            raise InvalidArgument("value passed for resolution is None")
        return resolve_placeholder(value, self._resolver, self._settings.max_resolve_hops)

    async def resolve_one_async(self, value: T) -> T:
        """Async variant of ``resolve_one``."""
        if value is None:
            raise InvalidArgument("value passed for resolution is None")
        return await resolve_placeholder_async(
            value, self._resolver, self._settings.max_resolve_hops
        )

    def deep_copy(self, root: T) -> Materialized[T]:
        """Copy everything reachable from ``root``, resolving placeholders.

        Shared nodes stay shared and cycles stay cycles in the result. Leaf
        values (numbers, strings, enums...) are reused, not copied.

        Raises:
            InvalidArgument: If ``root`` is None.
            UnsupportedType: If a reachable type cannot be introspected or built.
            ResolutionFailure: If a placeholder fails to load.
            CopyLimitExceeded: If ``settings.max_nodes`` is exceeded.
        """
        if root is None:
            raise InvalidArgument("root passed for deep copy is None")
        return _Traversal(self).run(root)

    async def deep_copy_async(self, root: T) -> Materialized[T]:
        """Async variant of ``deep_copy``; awaits each placeholder before descending."""
        if root is None:
            raise InvalidArgument("root passed for deep copy is None")
        return await _Traversal(self).run_async(root)


class _Traversal:
    """State of one top-level copy call."""

    __slots__ = ("_resolver", "_accessor", "_settings", "_visited")

    def __init__(self, copier: GraphCopier) -> None:
        self._resolver = copier._resolver
        self._accessor = copier._accessor
        self._settings = copier._settings
        self._visited = VisitedMap()

    def run(self, root: Any) -> Any:
        frames: Frames = []
        tail = "$"
        try:
            outcome = self._visit(self._resolve(root))
            tail = ""
            if not isinstance(outcome, Pending):
                return outcome
            frames.append((outcome.steps, "$"))
            sent: Any = None
            while frames:
                try:
                    child, tail = frames[-1][0].send(sent)
                except StopIteration as stop:
                    frames.pop()
                    sent = stop.value
                    continue
                outcome = self._visit(self._resolve(child))
                if isinstance(outcome, Pending):
                    frames.append((outcome.steps, tail))
                    sent = None
                else:
                    sent = outcome
                tail = ""
        except UnproxyError as e:
            path = _path(frames, tail)
            _log.debug("deep copy aborted at %s: %s", path, e.message)
            raise e.with_path(path)
        _log.debug("deep copy of %s done, %d nodes", type(root).__qualname__, len(self._visited))
        return sent

    async def run_async(self, root: Any) -> Any:
        frames: Frames = []
        tail = "$"
        try:
            outcome = self._visit(await self._resolve_async(root))
            tail = ""
            if not isinstance(outcome, Pending):
                return outcome
            frames.append((outcome.steps, "$"))
            sent: Any = None
            while frames:
                try:
                    child, tail = frames[-1][0].send(sent)
                except StopIteration as stop:
                    frames.pop()
                    sent = stop.value
                    continue
                outcome = self._visit(await self._resolve_async(child))
                if isinstance(outcome, Pending):
                    frames.append((outcome.steps, tail))
                    sent = None
                else:
                    sent = outcome
                tail = ""
        except UnproxyError as e:
            path = _path(frames, tail)
            _log.debug("async deep copy aborted at %s: %s", path, e.message)
            raise e.with_path(path)
        _log.debug(
            "async deep copy of %s done, %d nodes", type(root).__qualname__, len(self._visited)
        )
        return sent

    def _resolve(self, value: Any) -> Any:
        return resolve_placeholder(value, self._resolver, self._settings.max_resolve_hops)

    async def _resolve_async(self, value: Any) -> Any:
        return await resolve_placeholder_async(
            value, self._resolver, self._settings.max_resolve_hops
        )

    def _visit(self, value: Any) -> Any | Pending:
        """Return the copy of a resolved value, or the steps that will build it."""
        kind = classify(value, self._resolver, self._accessor)
        if kind is ValueKind.LEAF:
            return value
        if value in self._visited:
            return self._visited.get(value)

        if kind is ValueKind.ENTITY:
            return Pending(self._copy_entity(value))
        if kind is ValueKind.SEQUENCE:
            return Pending(self._copy_sequence(value))
        if kind is ValueKind.MAP:
            return Pending(self._copy_map(value))
        if kind is ValueKind.SET:
            return Pending(self._copy_set(value))
        if kind is ValueKind.ARRAY:
            return Pending(self._copy_array(value))
        # Only reachable with a resolver that stops short of the hop limit
        raise UnsupportedType(f"{type(value).__qualname__} is still a placeholder")

    def _register(self, original: Any, copy: Any) -> None:
        self._visited.register(original, copy)
        max_nodes = self._settings.max_nodes
        if max_nodes is not None and len(self._visited) > max_nodes:
            raise CopyLimitExceeded(f"graph has more than {max_nodes} nodes")

    def _construct(self, cls: type, *args: Any, **kwargs: Any) -> Any:
        try:
            return cls(*args, **kwargs)
        except TypeError as e:
            raise UnsupportedType(f"cannot instantiate container {cls.__qualname__}: {e}") from e

    @property
    def _preserve(self) -> bool:
        return self._settings.preserve_container_types

    def _copy_entity(self, value: Any) -> CopySteps:
        accessor = self._accessor
        fields = accessor.fields(value)
        copy = accessor.new_instance(type(value), value)
        self._register(value, copy)
        for field in fields:
            if field.excluded:
                accessor.reset(copy, field)
                continue
            new_value = yield accessor.get(value, field), f".{field.name}"
            accessor.set(copy, field, new_value)
        return copy

    def _copy_sequence(self, value: Any) -> CopySteps:
        cls = type(value)
        if cls is list or not self._preserve:
            copy = []
        elif isinstance(value, deque):
            copy = self._construct(cls, maxlen=value.maxlen)
        elif isinstance(value, array.array):
            copy = self._construct(cls, value.typecode)
        else:
            copy = self._construct(cls)
        self._register(value, copy)
        for index, item in enumerate(value):
            copy.append((yield item, f"[{index}]"))
        return copy

    def _copy_map(self, value: Any) -> CopySteps:
        cls = type(value)
        if cls is dict or not self._preserve:
            copy = {}
        elif isinstance(value, defaultdict):
            copy = self._construct(cls, value.default_factory)
        else:
            copy = self._construct(cls)
        self._register(value, copy)
        for index, (key, item) in enumerate(value.items()):
            new_key = yield key, f".keys()[{index}]"
            copy[new_key] = yield item, _KeySegment(key, index)
        return copy

    def _copy_set(self, value: Any) -> CopySteps:
        cls = type(value)
        if isinstance(value, MutableSet):
            copy = set() if cls is set or not self._preserve else self._construct(cls)
            self._register(value, copy)
            for index, item in enumerate(value):
                copy.add((yield item, f"{{{index}}}"))
            return copy

        items = []
        for index, item in enumerate(value):
            items.append((yield item, f"{{{index}}}"))
        if value in self._visited:
            return self._visited.get(value)
        if cls is frozenset or not self._preserve:
            copy = frozenset(items)
        else:
            copy = self._construct(cls, items)
        self._register(value, copy)
        return copy

    def _copy_array(self, value: tuple[Any, ...]) -> CopySteps:
        items = []
        for index, item in enumerate(value):
            items.append((yield item, f"[{index}]"))
        if value in self._visited:
            return self._visited.get(value)
        cls = type(value)
        if cls is tuple or not self._preserve:
            copy = tuple(items)
        elif hasattr(cls, "_make"):
            copy = cls._make(items)
        else:
            copy = self._construct(cls, items)
        self._register(value, copy)
        return copy


def deep_copy(
    root: T,
    *,
    resolver: PlaceholderResolver | None = None,
    accessor: FieldAccessor | None = None,
    settings: CopierSettings | None = None,
) -> Materialized[T]:
    """Deep copy ``root`` with a one-off GraphCopier. See GraphCopier.deep_copy."""
    return GraphCopier(resolver, accessor, settings).deep_copy(root)


async def deep_copy_async(
    root: T,
    *,
    resolver: PlaceholderResolver | None = None,
    accessor: FieldAccessor | None = None,
    settings: CopierSettings | None = None,
) -> Materialized[T]:
    """Async variant of ``deep_copy``."""
    return await GraphCopier(resolver, accessor, settings).deep_copy_async(root)
