"""Placeholder protocols and built-in lazy placeholders.

A placeholder stands in for a value that has not been loaded yet. Any type
that defines ``__resolve__`` takes part; ``__aresolve__`` is the optional
async counterpart.

Usage:
    user = LazyPlaceholder(lambda: session.load(User, 42))
    user.name               # loads on first access
    user.__resolve__()      # the loaded User instance

    async_user = AsyncLazyPlaceholder(lambda: client.fetch_user(42))
    await async_user.__aresolve__()
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

_UNSET: Any = object()


@runtime_checkable
class Placeholder(Protocol):
    """Stand-in whose real value is produced on demand.

    ``__resolve__`` must be idempotent: resolving twice returns the same object.
    """

    def __resolve__(self) -> Any: ...


@runtime_checkable
class AsyncPlaceholder(Protocol):
    """Placeholder whose loading is a coroutine."""

    async def __aresolve__(self) -> Any: ...


class LazyPlaceholder:
    """Calls ``loader`` once on first use and forwards attribute access.

    Loading is guarded by a lock so concurrent first accesses load once. A
    loader that raises leaves the placeholder unloaded; the next access
    retries.

    Args:
        loader: Zero-argument callable producing the real value.
        label: Optional text shown in ``repr`` before loading.
    """

    __slots__ = ("_loader", "_label", "_value", "_lock")

    def __init__(self, loader: Callable[[], Any], label: str | None = None) -> None:
        object.__setattr__(self, "_loader", loader)
        object.__setattr__(self, "_label", label)
        object.__setattr__(self, "_value", _UNSET)
        object.__setattr__(self, "_lock", threading.Lock())

    @property
    def loaded(self) -> bool:
        """True once the real value has been produced."""
        return self._value is not _UNSET

    def __resolve__(self) -> Any:
        if self._value is _UNSET:
            with self._lock:
                if self._value is _UNSET:
                    object.__setattr__(self, "_value", self._loader())
        return self._value

    def __getattr__(self, name: str) -> Any:
        return getattr(self.__resolve__(), name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self.__resolve__(), name, value)

    def __repr__(self) -> str:
        if self._value is _UNSET:
            return f"<LazyPlaceholder {self._label or 'unloaded'}>"
        return f"<LazyPlaceholder {self._value!r}>"


class AsyncLazyPlaceholder:
    """Awaits ``loader()`` once on first resolution.

    Synchronous ``__resolve__`` only succeeds after an async resolution has
    completed; before that it raises ``RuntimeError``.

    Args:
        loader: Zero-argument callable returning an awaitable of the real value.
        label: Optional text shown in ``repr`` before loading.
    """

    __slots__ = ("_loader", "_label", "_value", "_lock")

    def __init__(self, loader: Callable[[], Awaitable[Any]], label: str | None = None) -> None:
        self._loader = loader
        self._label = label
        self._value: Any = _UNSET
        self._lock: asyncio.Lock | None = None

    @property
    def loaded(self) -> bool:
        """True once the real value has been produced."""
        return self._value is not _UNSET

    async def __aresolve__(self) -> Any:
        if self._value is _UNSET:
            # Created lazily so the lock binds to the running loop
            if self._lock is None:
                self._lock = asyncio.Lock()
            async with self._lock:
                if self._value is _UNSET:
                    self._value = await self._loader()
        return self._value

    def __resolve__(self) -> Any:
        if self._value is _UNSET:
            raise RuntimeError(
                f"{self!r} has not been loaded; resolve it with deep_copy_async or "
                "resolve_one_async"
            )
        return self._value

    def __repr__(self) -> str:
        if self._value is _UNSET:
            return f"<AsyncLazyPlaceholder {self._label or 'unloaded'}>"
        return f"<AsyncLazyPlaceholder {self._value!r}>"
