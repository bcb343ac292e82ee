"""Configuration module using Pydantic Settings.

Usage:
    from unproxy.config import CopierSettings

    settings = CopierSettings(max_nodes=50_000)
"""

from unproxy.config.settings import CopierSettings

__all__ = [
    "CopierSettings",
]
