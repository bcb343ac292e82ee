"""unproxy: detached deep copies of object graphs with lazy placeholders.

Usage:
    from dataclasses import dataclass
    from unproxy import LazyPlaceholder, deep_copy

    @dataclass
    class Node:
        name: str
        next: "Node | None" = None

    a = Node("a")
    a.next = LazyPlaceholder(lambda: a)   # loads on demand

    copy = deep_copy(a)
    assert copy.next is copy              # cycle kept, placeholder gone
"""

__version__ = "0.1.0"

# Core primitives
from unproxy.core import (
    AsyncLazyPlaceholder,
    AsyncPlaceholder,
    CopyLimitExceeded,
    Exclusion,
    FieldAccessor,
    FieldDescriptor,
    InvalidArgument,
    LazyPlaceholder,
    Materialized,
    Placeholder,
    PlaceholderResolver,
    ProtocolResolver,
    ReflectiveFieldAccessor,
    ResolutionFailure,
    Transient,
    UnproxyError,
    UnsupportedType,
    shallow_resolve,
)

# Configuration
from unproxy.config import CopierSettings

# Copier
from unproxy.copier import (
    GraphCopier,
    ValueKind,
    VisitedMap,
    deep_copy,
    deep_copy_async,
)

__all__ = [
    # Version
    "__version__",
    # Types
    "Materialized",
    # Placeholders
    "Placeholder",
    "AsyncPlaceholder",
    "LazyPlaceholder",
    "AsyncLazyPlaceholder",
    "PlaceholderResolver",
    "ProtocolResolver",
    "shallow_resolve",
    # Fields
    "Transient",
    "Exclusion",
    "FieldDescriptor",
    "FieldAccessor",
    "ReflectiveFieldAccessor",
    # Copier
    "GraphCopier",
    "ValueKind",
    "VisitedMap",
    "deep_copy",
    "deep_copy_async",
    # Config
    "CopierSettings",
    # Errors
    "UnproxyError",
    "InvalidArgument",
    "UnsupportedType",
    "ResolutionFailure",
    "CopyLimitExceeded",
]
