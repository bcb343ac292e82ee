"""Configuration settings using Pydantic Settings.

Provides typed copier configuration with environment variable support.

Usage:
    from unproxy.config import CopierSettings

    # Load from environment variables (UNPROXY_*)
    settings = CopierSettings()

    # Or override with explicit values
    settings = CopierSettings(max_nodes=10_000)
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CopierSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for GraphCopier.

    Attributes:
        max_nodes: Abort a copy after this many new nodes (None for no limit).
        max_resolve_hops: Maximum chained resolutions of one placeholder.
        preserve_container_types: Rebuild containers with their own type
            (OrderedDict, deque, named tuples...). When False, copies are plain
            tuple, set, frozenset, dict, or list.

    Environment Variables:
        UNPROXY_MAX_NODES
        UNPROXY_MAX_RESOLVE_HOPS
        UNPROXY_PRESERVE_CONTAINER_TYPES
    """

    model_config = SettingsConfigDict(
        env_prefix="UNPROXY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_nodes: int | None = Field(default=None, ge=1)
    max_resolve_hops: int = Field(default=16, ge=1)
    preserve_container_types: bool = True
