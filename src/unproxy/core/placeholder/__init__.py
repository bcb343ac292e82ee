"""Placeholder functionality: protocols, lazy placeholders, and resolution."""

from unproxy.core.placeholder.core import (
    DEFAULT_MAX_RESOLVE_HOPS,
    PlaceholderResolver,
    ProtocolResolver,
    get_default_resolver,
    resolve_placeholder,
    resolve_placeholder_async,
    shallow_resolve,
)
from unproxy.core.placeholder.models import (
    AsyncLazyPlaceholder,
    AsyncPlaceholder,
    LazyPlaceholder,
    Placeholder,
)

__all__ = [
    # Models
    "Placeholder",
    "AsyncPlaceholder",
    "LazyPlaceholder",
    "AsyncLazyPlaceholder",
    # Core
    "DEFAULT_MAX_RESOLVE_HOPS",
    "PlaceholderResolver",
    "ProtocolResolver",
    "get_default_resolver",
    "resolve_placeholder",
    "resolve_placeholder_async",
    "shallow_resolve",
]
