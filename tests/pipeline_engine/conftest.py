"""Shared fixtures and reusable dummy steps for pipeline engine tests.

No learning-layer imports — every step here is a generic dummy that only
uses the pipeline primitives (StepContext, StepProtocol).
"""

from __future__ import annotations

import asyncio
from types import MappingProxyType

import pytest

from pipeline import StepContext


def _with(ctx: StepContext, **values) -> StepContext:
    return ctx.replace(metadata=MappingProxyType({**ctx.metadata, **values}))


# ---------------------------------------------------------------------------
# Reusable dummy step classes
# ---------------------------------------------------------------------------


class Noop:
    """Pass-through step — does not change context."""

    requires = frozenset()
    provides = frozenset()

    def __call__(self, ctx: StepContext) -> StepContext:
        return ctx


class SetA:
    """Writes metadata['a'] = 1.  No requirements."""

    requires = frozenset()
    provides = frozenset({"a"})

    def __call__(self, ctx: StepContext) -> StepContext:
        return _with(ctx, a=1)


class SetB:
    """Reads 'a', writes metadata['b'] = metadata['a'] + 1.  Async."""

    requires = frozenset({"a"})
    provides = frozenset({"b"})

    async def __call__(self, ctx: StepContext) -> StepContext:
        await asyncio.sleep(0)
        return _with(ctx, b=ctx.metadata["a"] + 1)


class SetC:
    """Reads 'b', writes metadata['c'] = metadata['b'] * 2."""

    requires = frozenset({"b"})
    provides = frozenset({"c"})

    def __call__(self, ctx: StepContext) -> StepContext:
        return _with(ctx, c=ctx.metadata["b"] * 2)


class Boom:
    """Always raises RuntimeError."""

    requires = frozenset()
    provides = frozenset()

    async def __call__(self, ctx: StepContext) -> StepContext:
        raise RuntimeError("boom")


class Recorder:
    """Records every ctx it receives via call_log."""

    requires = frozenset()
    provides = frozenset()

    def __init__(self):
        self.call_log: list[StepContext] = []

    async def __call__(self, ctx: StepContext) -> StepContext:
        self.call_log.append(ctx)
        return ctx


class BoundaryStep:
    """Marks the async_boundary handoff; background work takes *delay* seconds."""

    requires = frozenset()
    provides = frozenset({"bg_result"})
    async_boundary = True

    def __init__(self, delay: float = 0.01):
        self.delay = delay

    async def __call__(self, ctx: StepContext) -> StepContext:
        await asyncio.sleep(self.delay)
        return _with(ctx, bg_result=True)


class Gate:
    """Waits on an asyncio.Event so tests control when background work ends."""

    requires = frozenset()
    provides = frozenset({"gated"})

    def __init__(self):
        self.event: asyncio.Event | None = None

    async def __call__(self, ctx: StepContext) -> StepContext:
        await self.event.wait()
        return _with(ctx, gated=True)


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def noop():
    return Noop()


@pytest.fixture
def boom():
    return Boom()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def base_ctx():
    """A minimal StepContext with sample='test'."""
    return StepContext(sample="test")
