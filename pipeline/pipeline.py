"""Pipeline — concrete, composable, sequential async step runner."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any

from .context import StepContext
from .errors import PipelineConfigError, PipelineOrderError
from .protocol import SampleResult


async def invoke_step(step: Any, ctx: StepContext) -> StepContext:
    """Run one step, awaiting coroutine steps and off-loading sync ones."""
    if inspect.iscoroutinefunction(step.__call__):
        return await step(ctx)
    return await asyncio.to_thread(step, ctx)


class Pipeline:
    """Ordered sequence of steps.  Satisfies StepProtocol — can be nested.

    Build via the fluent API::

        pipe = (
            Pipeline()
            .then(LoadStep(store))
            .then(ReflectStep(reflector))   # async_boundary = True
            .then(UpdateStep(skill_manager))
            .then(CommitStep(store))
        )

    Run a batch of contexts::

        results = await pipe.run_async(contexts)
        await pipe.wait_for_background()

    ``requires`` and ``provides`` are inferred from the step chain and kept
    up-to-date as steps are added, so a ``Pipeline`` can itself be used as a
    step inside another pipeline without extra annotation.
    """

    def __init__(self, steps: list | None = None) -> None:
        self._steps: list = list(steps or [])
        self._validate_steps(self._steps)
        self.requires, self.provides = self._infer_contracts(self._steps)

        # Background task tracking (per Pipeline instance)
        self._bg_tasks: set[asyncio.Task] = set()
        self._bg_completed = 0
        self._bg_failed = 0

    @property
    def steps(self) -> tuple:
        return tuple(self._steps)

    # ------------------------------------------------------------------
    # Contract inference
    # ------------------------------------------------------------------

    @staticmethod
    def _infer_contracts(steps: list) -> tuple[frozenset, frozenset]:
        """Compute (requires, provides) for the full step chain.

        ``requires`` — fields the pipeline needs from the outside
                       (what its steps need that no earlier inner step
                       provides).
        ``provides`` — union of everything any inner step writes.
        """
        provided_so_far: set[str] = set()
        external_requires: set[str] = set()
        for step in steps:
            step_requires = set(getattr(step, "requires", frozenset()))
            step_provides = set(getattr(step, "provides", frozenset()))
            external_requires |= step_requires - provided_so_far
            provided_so_far |= step_provides
        return frozenset(external_requires), frozenset(provided_so_far)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_steps(steps: list) -> None:
        """Raise PipelineOrderError or PipelineConfigError for invalid wiring.

        Order check:
            If step B requires field X, and field X is produced by some step
            in the pipeline but that step appears *after* B, raise
            ``PipelineOrderError``.  Fields not produced by any step in the
            pipeline are treated as external inputs — no error.

        Config checks:
            - More than one ``async_boundary = True`` step in the same pipeline.
            - An ``async_boundary = True`` step inside a nested Pipeline.
        """
        all_provided_internally: set[str] = set()
        for step in steps:
            all_provided_internally |= set(getattr(step, "provides", frozenset()))

        provided_so_far: set[str] = set()
        boundary_count = 0

        for step in steps:
            step_requires = set(getattr(step, "requires", frozenset()))
            step_provides = set(getattr(step, "provides", frozenset()))

            out_of_order = (step_requires & all_provided_internally) - provided_so_far
            if out_of_order:
                raise PipelineOrderError(
                    f"{type(step).__name__} requires {out_of_order!r} but these "
                    f"are produced by a later step — check step ordering."
                )

            provided_so_far |= step_provides

            if getattr(step, "async_boundary", False):
                boundary_count += 1
                if boundary_count > 1:
                    raise PipelineConfigError(
                        f"Only one async_boundary step is allowed per pipeline; "
                        f"{type(step).__name__} is a duplicate."
                    )

            if isinstance(step, Pipeline):
                for child_step in step._steps:
                    if getattr(child_step, "async_boundary", False):
                        raise PipelineConfigError(
                            f"async_boundary is not allowed inside a nested "
                            f"Pipeline (found on {type(child_step).__name__})."
                        )

    # ------------------------------------------------------------------
    # Fluent builder
    # ------------------------------------------------------------------

    def then(self, step: object) -> "Pipeline":
        """Append *step* and return ``self`` for chaining."""
        new_steps = self._steps + [step]
        # Validate before mutating so errors are raised immediately
        self._validate_steps(new_steps)
        self._steps = new_steps
        self.requires, self.provides = self._infer_contracts(self._steps)
        return self

    # ------------------------------------------------------------------
    # __call__: for use as a nested step
    # ------------------------------------------------------------------

    async def __call__(self, ctx: StepContext) -> StepContext:
        """Run all steps sequentially and return the final context."""
        for step in self._steps:
            ctx = await invoke_step(step, ctx)
        return ctx

    # ------------------------------------------------------------------
    # Background execution
    # ------------------------------------------------------------------

    def _find_boundary_index(self) -> int | None:
        """Return the index of the first async_boundary step, or None."""
        for i, step in enumerate(self._steps):
            if getattr(step, "async_boundary", False):
                return i
        return None

    def _submit_background(
        self,
        ctx: StepContext,
        background_steps: list,
        result: SampleResult,
    ) -> asyncio.Task:
        """Run *background_steps* sequentially in a detached task.

        ``result`` is mutated in-place when the tail completes (or fails).
        """

        async def run_tail() -> None:
            current_ctx = ctx
            for step in background_steps:
                try:
                    current_ctx = await invoke_step(step, current_ctx)
                except Exception as exc:
                    result.error = exc
                    result.failed_at = type(step).__name__
                    result.output = None
                    result.partial = current_ctx
                    self._bg_failed += 1
                    return
            result.output = current_ctx
            self._bg_completed += 1

        task = asyncio.create_task(run_tail(), name="pipeline-bg")
        self._bg_tasks.add(task)
        task.add_done_callback(self._bg_tasks.discard)
        return task

    async def wait_for_background(self, timeout: float | None = None) -> None:
        """Wait until all background tasks submitted by this pipeline finish.

        Raises ``TimeoutError`` if *timeout* seconds elapse before all tasks
        complete.  Unfinished tasks keep running.
        """
        tasks = list(self._bg_tasks)
        if not tasks:
            return
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        if pending:
            raise TimeoutError(
                "Background pipeline steps did not drain within timeout."
            )

    def background_stats(self) -> dict[str, int]:
        """Return counts of pending, completed and failed background tails."""
        return {
            "pending": len(self._bg_tasks),
            "completed": self._bg_completed,
            "failed": self._bg_failed,
        }

    # ------------------------------------------------------------------
    # run_async(): async entry point
    # ------------------------------------------------------------------

    async def run_async(
        self, samples: Any, workers: int = 1, *, background: bool = True
    ) -> list[SampleResult]:
        """Process *samples* through the pipeline.

        Each sample is either a ready-made ``StepContext`` (used as-is) or
        an arbitrary object wrapped as ``StepContext(sample=...)``.

        With ``background=True`` the chain is split at the first
        ``async_boundary`` step: foreground steps are awaited here, the tail
        is detached as a task.  Await ``wait_for_background()`` to drain
        it.  With ``background=False`` every step is awaited in place.

        Every sample produces exactly one ``SampleResult``.
        """
        boundary_idx = self._find_boundary_index() if background else None
        if boundary_idx is None:
            foreground_steps = self._steps
            background_steps: list = []
        else:
            foreground_steps = self._steps[:boundary_idx]
            background_steps = self._steps[boundary_idx:]

        sem = asyncio.Semaphore(workers)

        async def process_one(sample: Any) -> SampleResult:
            async with sem:
                ctx = sample if isinstance(sample, StepContext) else StepContext(sample=sample)
                result = SampleResult(
                    sample=ctx.sample, output=None, error=None, failed_at=None
                )
                last_step_name: str | None = None
                try:
                    for step in foreground_steps:
                        last_step_name = type(step).__name__
                        ctx = await invoke_step(step, ctx)
                except Exception as exc:
                    result.error = exc
                    result.failed_at = last_step_name
                    result.partial = ctx
                    return result

                if background_steps:
                    # Fire and forget; result updated by the background task
                    self._submit_background(ctx, background_steps, result)
                else:
                    result.output = ctx

                return result

        return list(await asyncio.gather(*[process_one(s) for s in samples]))

    # ------------------------------------------------------------------
    # run(): sync entry point
    # ------------------------------------------------------------------

    def run(self, samples: Any, workers: int = 1) -> list[SampleResult]:
        """Sync entry point.

        Runs in a fresh event loop and drains background tails before
        returning, since tasks cannot outlive the loop.
        """

        async def main() -> list[SampleResult]:
            results = await self.run_async(samples, workers=workers)
            await self.wait_for_background()
            return results

        return asyncio.run(main())
