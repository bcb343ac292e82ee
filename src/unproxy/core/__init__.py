"""Core functionalities: stateless protocols and primitives.

Architecture Note:
    core/ contains the capability interfaces the copier consumes (placeholder
    resolution, field introspection) and their default implementations.
    The traversal itself, which owns per-call state, lives in copier/.
"""

from unproxy.core.errors import (
    CopyLimitExceeded,
    InvalidArgument,
    ResolutionFailure,
    UnproxyError,
    UnsupportedType,
)
from unproxy.core.fields import (
    DEFAULT_LEAF_TYPES,
    TRANSIENT_METADATA_KEY,
    TRANSIENT_NAMES_ATTR,
    Exclusion,
    FieldAccessor,
    FieldDescriptor,
    ReflectiveFieldAccessor,
    Transient,
)
from unproxy.core.placeholder import (
    DEFAULT_MAX_RESOLVE_HOPS,
    AsyncLazyPlaceholder,
    AsyncPlaceholder,
    LazyPlaceholder,
    Placeholder,
    PlaceholderResolver,
    ProtocolResolver,
    get_default_resolver,
    resolve_placeholder,
    resolve_placeholder_async,
    shallow_resolve,
)
from unproxy.core.types import Materialized

__all__ = [
    # Types
    "Materialized",
    # Errors
    "UnproxyError",
    "InvalidArgument",
    "UnsupportedType",
    "ResolutionFailure",
    "CopyLimitExceeded",
    # Fields
    "DEFAULT_LEAF_TYPES",
    "TRANSIENT_METADATA_KEY",
    "TRANSIENT_NAMES_ATTR",
    "Exclusion",
    "FieldAccessor",
    "FieldDescriptor",
    "ReflectiveFieldAccessor",
    "Transient",
    # Placeholder
    "DEFAULT_MAX_RESOLVE_HOPS",
    "Placeholder",
    "AsyncPlaceholder",
    "LazyPlaceholder",
    "AsyncLazyPlaceholder",
    "PlaceholderResolver",
    "ProtocolResolver",
    "get_default_resolver",
    "resolve_placeholder",
    "resolve_placeholder_async",
    "shallow_resolve",
]
