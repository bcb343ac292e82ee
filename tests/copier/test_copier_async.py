"""Tests for GraphCopier.deep_copy_async."""

from dataclasses import dataclass
from typing import Any

import pytest

from unproxy import (
    AsyncLazyPlaceholder,
    CopierSettings,
    GraphCopier,
    InvalidArgument,
    ResolutionFailure,
    deep_copy_async,
)


@dataclass(eq=False)
class Task:
    title: str
    parent: Any = None
    children: Any = None


def _async_lazy(value: Any, calls: list[Any] | None = None) -> AsyncLazyPlaceholder:
    async def load() -> Any:
        if calls is not None:
            calls.append(value)
        return value

    return AsyncLazyPlaceholder(load)


@pytest.mark.asyncio
async def test_async_placeholders_are_awaited(copier):
    """CRITICAL: Every async placeholder is loaded before traversal descends."""
    calls: list[Any] = []
    root = Task("root")
    child = Task("child", parent=_async_lazy(root, calls))
    root.children = [_async_lazy(child, calls)]

    copy = await copier.deep_copy_async(root)

    assert copy.children[0].title == "child"
    assert copy.children[0].parent is copy
    assert calls == [child, root]


@pytest.mark.asyncio
async def test_async_copy_handles_sync_placeholders(copier, lazy):
    root = Task("root")
    root.parent = lazy(root)

    copy = await copier.deep_copy_async(root)

    assert copy.parent is copy


@pytest.mark.asyncio
async def test_async_root_placeholder():
    task = Task("solo")

    copy = await deep_copy_async(_async_lazy(task), settings=CopierSettings(_env_file=None))

    assert isinstance(copy, Task)
    assert copy is not task


@pytest.mark.asyncio
async def test_async_none_root_is_invalid(copier):
    with pytest.raises(InvalidArgument):
        await copier.deep_copy_async(None)


@pytest.mark.asyncio
async def test_async_resolve_one(copier):
    task = Task("solo")

    assert await copier.resolve_one_async(_async_lazy(task)) is task


def test_sync_copy_rejects_unloaded_async_placeholder(copier):
    root = Task("root", parent=_async_lazy(Task("parent")))

    with pytest.raises(ResolutionFailure) as exc_info:
        copier.deep_copy(root)

    assert exc_info.value.path == "$.parent"


@pytest.mark.asyncio
async def test_async_failure_carries_path():
    async def load() -> Any:
        raise TimeoutError("store timed out")

    root = Task("root", children=[Task("a"), AsyncLazyPlaceholder(load)])
    copier = GraphCopier(settings=CopierSettings(_env_file=None))

    with pytest.raises(ResolutionFailure, match="store timed out") as exc_info:
        await copier.deep_copy_async(root)

    assert exc_info.value.path == "$.children[1]"
    assert isinstance(exc_info.value.__cause__, TimeoutError)
