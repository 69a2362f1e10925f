"""Error types for the learning layer."""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

T = TypeVar("T")


class LearningError(Exception):
    """Base class for failures of a learning run."""


class StageTimeoutError(LearningError, TimeoutError):
    """A pipeline stage did not finish within its time budget.

    Treated exactly like any other stage failure: the run aborts and
    nothing from it is committed.
    """

    def __init__(self, stage: str, seconds: float) -> None:
        self.stage = stage
        self.seconds = seconds
        super().__init__(f"{stage} timed out after {seconds:g}s")


async def with_timeout(awaitable: Awaitable[T], seconds: float | None, stage: str) -> T:
    """Await *awaitable*, raising ``StageTimeoutError`` if it exceeds *seconds*.

    ``seconds=None`` disables the limit.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as exc:
        raise StageTimeoutError(stage, seconds or 0.0) from exc
