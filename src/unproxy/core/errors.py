"""Error taxonomy for graph copying.

Every error raised while walking a graph carries the path of the node that
failed (``$`` is the root, ``.name`` a field, ``[i]`` an element), so callers
can tell which step of the traversal broke.
"""

from __future__ import annotations


class UnproxyError(Exception):
    """Base exception for unproxy."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def with_path(self, path: str) -> UnproxyError:
        """Attach traversal context unless a deeper frame already did."""
        if self.path is None:
            self.path = path
        return self

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.message} (at {self.path})"


class InvalidArgument(UnproxyError, ValueError):
    """Bad call-time input, e.g. a ``None`` root."""


class UnsupportedType(UnproxyError, TypeError):
    """A type cannot be introspected, instantiated, or written to."""


class ResolutionFailure(UnproxyError, RuntimeError):
    """A placeholder could not produce its real value."""


class CopyLimitExceeded(UnproxyError):
    """More nodes were copied than ``CopierSettings.max_nodes`` allows."""
