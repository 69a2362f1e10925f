"""Structural protocol and result type for the pipeline engine."""

from __future__ import annotations

from collections.abc import Awaitable
from collections.abc import Set as AbstractSet
from dataclasses import dataclass
from typing import Any, Protocol, Union, runtime_checkable

from .context import StepContext


@runtime_checkable
class StepProtocol(Protocol):
    """Structural protocol that every step (and Pipeline) must satisfy.

    ``__call__`` may be a plain function or a coroutine function.  Sync steps
    are run in a worker thread so they never block the event loop.

    ``AbstractSet[str]`` accepts both ``set`` and ``frozenset``.
    """

    requires: AbstractSet[str]
    provides: AbstractSet[str]

    def __call__(
        self, ctx: StepContext
    ) -> Union[StepContext, Awaitable[StepContext]]: ...


@dataclass
class SampleResult:
    """Outcome for one sample after the pipeline has run.

    Every sample produces exactly one ``SampleResult`` — nothing is dropped
    silently.  Inspect ``error`` / ``failed_at`` to detect failures;
    ``output`` is ``None`` whenever a step raised, and ``partial`` then
    holds the last context produced before the failing step.

    For background steps (after ``async_boundary``), ``output`` / ``error``
    may still be ``None`` when ``run_async()`` returns.  Await
    ``pipeline.wait_for_background()`` before reading them.
    """

    sample: Any
    output: StepContext | None
    error: Exception | None
    failed_at: str | None
    partial: StepContext | None = None
