"""Field functionality: descriptors, exclusion markers, and introspection."""

from unproxy.core.fields.core import (
    DEFAULT_LEAF_TYPES,
    FieldAccessor,
    ReflectiveFieldAccessor,
)
from unproxy.core.fields.models import (
    TRANSIENT_METADATA_KEY,
    TRANSIENT_NAMES_ATTR,
    Exclusion,
    FieldDescriptor,
    Transient,
)

__all__ = [
    # Models
    "Exclusion",
    "FieldDescriptor",
    "Transient",
    "TRANSIENT_METADATA_KEY",
    "TRANSIENT_NAMES_ATTR",
    # Core
    "DEFAULT_LEAF_TYPES",
    "FieldAccessor",
    "ReflectiveFieldAccessor",
]
