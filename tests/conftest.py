"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from unproxy import CopierSettings, GraphCopier, LazyPlaceholder


@pytest.fixture
def copier():
    """GraphCopier with default collaborators and no environment overrides."""
    return GraphCopier(settings=CopierSettings(_env_file=None))


@dataclass
class LoadCounter:
    """Records every load performed through the placeholders it creates."""

    loads: list[Any] = field(default_factory=list)

    def lazy(self, value: Any) -> LazyPlaceholder:
        def load() -> Any:
            self.loads.append(value)
            return value

        return LazyPlaceholder(load)

    def failing(self, error: Exception) -> LazyPlaceholder:
        def load() -> Any:
            raise error

        return LazyPlaceholder(load)


@pytest.fixture
def counter() -> LoadCounter:
    return LoadCounter()


@pytest.fixture
def lazy(counter: LoadCounter) -> Callable[[Any], LazyPlaceholder]:
    """Wrap a value in a LazyPlaceholder that records its loads."""
    return counter.lazy
