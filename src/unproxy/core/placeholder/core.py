"""Placeholder detection and shallow resolution.

Usage:
    resolver = ProtocolResolver()
    resolver.is_placeholder(LazyPlaceholder(load))  # True, nothing loaded
    real = shallow_resolve(maybe_placeholder)        # one node, no recursion
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Protocol, runtime_checkable

from unproxy.core.errors import InvalidArgument, ResolutionFailure, UnproxyError

_log = logging.getLogger("unproxy.placeholder")

DEFAULT_MAX_RESOLVE_HOPS = 16


@runtime_checkable
class PlaceholderResolver(Protocol):
    """Capability for recognising and loading placeholders.

    Implement this to plug in an ORM or remote store whose lazy objects do not
    follow the ``__resolve__`` protocol.
    """

    def is_placeholder(self, value: Any) -> bool:
        """Check whether ``value`` is a placeholder. Must not trigger loading."""
        ...

    def resolve(self, value: Any) -> Any:
        """Load and return the real value behind a placeholder. May block."""
        ...

    async def resolve_async(self, value: Any) -> Any:
        """Async variant of ``resolve``."""
        ...


class ProtocolResolver:
    """Default resolver for types defining ``__resolve__`` / ``__aresolve__``.

    Detection looks at the type only, so forwarding proxies are never asked
    for attributes (which would load them).
    """

    def is_placeholder(self, value: Any) -> bool:
        cls = type(value)
        return hasattr(cls, "__resolve__") or hasattr(cls, "__aresolve__")

    def resolve(self, value: Any) -> Any:
        if not hasattr(type(value), "__resolve__"):
            raise ResolutionFailure(
                f"{type(value).__qualname__} can only be resolved asynchronously"
            )
        return value.__resolve__()

    async def resolve_async(self, value: Any) -> Any:
        if hasattr(type(value), "__aresolve__"):
            return await value.__aresolve__()
        result = value.__resolve__()
        if inspect.isawaitable(result):
            return await result
        return result


def _hop_limit_error(value: Any, max_hops: int) -> ResolutionFailure:
    return ResolutionFailure(
        f"{type(value).__qualname__} still a placeholder after {max_hops} resolutions"
    )


def resolve_placeholder(
    value: Any,
    resolver: PlaceholderResolver,
    max_hops: int = DEFAULT_MAX_RESOLVE_HOPS,
) -> Any:
    """Resolve ``value`` until it is no longer a placeholder.

    Args:
        value: Any value; non-placeholders are returned unchanged.
        resolver: Placeholder capability to use.
        max_hops: Maximum chained resolutions (placeholder of a placeholder).

    Returns:
        The real value.

    Raises:
        ResolutionFailure: If the resolver raises or the hop limit is reached.
    """
    hops = 0
    while resolver.is_placeholder(value):
        if hops >= max_hops:
            raise _hop_limit_error(value, max_hops)
        try:
            resolved = resolver.resolve(value)
        except UnproxyError:
            raise
        except Exception as e:
            raise ResolutionFailure(
                f"failed to resolve {type(value).__qualname__}: {e}"
            ) from e
        _log.debug("resolved %s -> %s", type(value).__qualname__, type(resolved).__qualname__)
        value = resolved
        hops += 1
    return value


async def resolve_placeholder_async(
    value: Any,
    resolver: PlaceholderResolver,
    max_hops: int = DEFAULT_MAX_RESOLVE_HOPS,
) -> Any:
    """Async variant of ``resolve_placeholder``; awaits every resolution."""
    hops = 0
    while resolver.is_placeholder(value):
        if hops >= max_hops:
            raise _hop_limit_error(value, max_hops)
        try:
            resolved = await resolver.resolve_async(value)
        except UnproxyError:
            raise
        except Exception as e:
            raise ResolutionFailure(
                f"failed to resolve {type(value).__qualname__}: {e}"
            ) from e
        _log.debug("resolved %s -> %s", type(value).__qualname__, type(resolved).__qualname__)
        value = resolved
        hops += 1
    return value


_default_resolver = ProtocolResolver()


def get_default_resolver() -> ProtocolResolver:
    """Access the process-wide default resolver."""
    return _default_resolver


def shallow_resolve(
    value: Any,
    resolver: PlaceholderResolver | None = None,
    max_hops: int = DEFAULT_MAX_RESOLVE_HOPS,
) -> Any:
    """Resolve a single node without touching its fields or elements.

    Raises:
        InvalidArgument: If ``value`` is None.
        ResolutionFailure: If loading fails.
    """
    if value is None:
        raise InvalidArgument("value passed for resolution is None")
    return resolve_placeholder(value, resolver or _default_resolver, max_hops)
