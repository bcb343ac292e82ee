"""Core type definitions for unproxy."""

from typing import TypeVar

from typing_extensions import TypeAliasType

T = TypeVar("T")

Materialized = TypeAliasType("Materialized", T, type_params=(T,))
"""Type alias indicating a value is a detached, placeholder-free copy.

When you see `Materialized[T]` in a return type, no placeholder is reachable
from the returned value and no node is shared with the source graph (leaf
values excepted). Mutations to it never reach the source.
"""
