"""Graph copier: traversal, per-call visited map, and value classification."""

from unproxy.copier.copier import GraphCopier, deep_copy, deep_copy_async
from unproxy.copier.models import Pending, ValueKind, VisitedMap, classify

__all__ = [
    # Models
    "ValueKind",
    "VisitedMap",
    "Pending",
    "classify",
    # Copier
    "GraphCopier",
    "deep_copy",
    "deep_copy_async",
]
