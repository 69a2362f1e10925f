"""Unit tests for Pipeline — construction, validation, and execution."""

from __future__ import annotations

import asyncio
import time

import pytest

from pipeline import (
    Pipeline,
    PipelineConfigError,
    PipelineOrderError,
    SampleResult,
    StepContext,
    StepProtocol,
    invoke_step,
)
from tests.pipeline_engine.conftest import (
    Boom,
    BoundaryStep,
    Gate,
    Noop,
    Recorder,
    SetA,
    SetB,
    SetC,
)


# ---------------------------------------------------------------------------
# Construction & contract inference
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestPipelineConstruction:
    def test_empty_pipeline_has_empty_contracts(self):
        p = Pipeline()
        assert p.requires == frozenset()
        assert p.provides == frozenset()

    def test_then_returns_self(self):
        p = Pipeline()
        assert p.then(Noop()) is p

    def test_then_chain_updates_provides_cumulatively(self):
        p = Pipeline().then(SetA()).then(SetB()).then(SetC())
        assert {"a", "b", "c"} <= p.provides

    def test_external_requires_inferred(self):
        p = Pipeline().then(SetB())
        assert "a" in p.requires

    def test_internally_satisfied_requires_not_in_external(self):
        p = Pipeline().then(SetA()).then(SetB())
        assert "a" not in p.requires

    def test_steps_property_is_a_snapshot(self):
        p = Pipeline([SetA()])
        steps = p.steps
        p.then(Noop())
        assert len(steps) == 1
        assert len(p.steps) == 2

    def test_pipeline_satisfies_step_protocol(self):
        assert isinstance(Pipeline().then(SetA()), StepProtocol)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestPipelineValidation:
    def test_order_error_when_b_before_a(self):
        with pytest.raises(PipelineOrderError, match="a"):
            Pipeline().then(SetB()).then(SetA())

    def test_failed_then_leaves_pipeline_unchanged(self):
        p = Pipeline().then(SetB())
        with pytest.raises(PipelineOrderError):
            p.then(SetA())
        assert len(p.steps) == 1

    def test_config_error_duplicate_async_boundary(self):
        with pytest.raises(PipelineConfigError):
            Pipeline([BoundaryStep(), BoundaryStep()])

    def test_config_error_boundary_inside_nested_pipeline(self):
        inner = Pipeline([BoundaryStep()])
        with pytest.raises(PipelineConfigError, match="nested"):
            Pipeline([SetA(), inner])


# ---------------------------------------------------------------------------
# invoke_step / __call__
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestStepInvocation:
    def test_sync_and_async_steps_both_run(self):
        ctx = asyncio.run(Pipeline([SetA(), SetB(), SetC()])(StepContext(sample="s")))
        assert ctx.metadata["a"] == 1
        assert ctx.metadata["b"] == 2
        assert ctx.metadata["c"] == 4

    def test_sync_step_runs_off_the_event_loop(self):
        class ThreadName:
            requires = frozenset()
            provides = frozenset()
            seen: list = []

            def __call__(self, ctx):
                import threading

                self.seen.append(threading.current_thread() is threading.main_thread())
                return ctx

        step = ThreadName()
        asyncio.run(invoke_step(step, StepContext()))
        assert step.seen == [False]

    def test_call_ignores_async_boundary(self):
        p = Pipeline([SetA(), BoundaryStep(), SetB()])
        ctx = asyncio.run(p(StepContext(sample="s")))
        assert ctx.metadata["bg_result"] is True
        assert ctx.metadata["b"] == 2

    def test_empty_pipeline_call_passthrough(self):
        ctx = StepContext(sample="original")
        assert asyncio.run(Pipeline()(ctx)) == ctx


# ---------------------------------------------------------------------------
# run() / run_async(): foreground
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestPipelineRun:
    def test_one_result_per_sample(self):
        results = Pipeline([SetA()]).run(["x", "y", "z"])
        assert [r.sample for r in results] == ["x", "y", "z"]
        assert all(isinstance(r, SampleResult) for r in results)

    def test_ready_made_context_used_as_is(self):
        ctx = StepContext(sample="s", metadata={"a": 5})
        results = Pipeline([SetB()]).run([ctx])
        assert results[0].output.metadata["b"] == 6

    def test_step_failure_recorded_not_raised(self):
        results = Pipeline([SetA(), Boom(), SetC()]).run(["s"])
        assert isinstance(results[0].error, RuntimeError)
        assert results[0].failed_at == "Boom"
        assert results[0].output is None

    def test_failure_keeps_last_good_context(self):
        results = Pipeline([SetA(), Boom(), SetC()]).run(["s"])
        assert results[0].partial.metadata["a"] == 1
        assert "c" not in results[0].partial.metadata

    def test_other_samples_continue_after_one_failure(self):
        class FailOnX:
            requires = frozenset()
            provides = frozenset()

            async def __call__(self, ctx):
                if ctx.sample == "x":
                    raise ValueError("x")
                return ctx

        results = Pipeline([FailOnX(), SetA()]).run(["x", "y"])
        assert results[0].error is not None
        assert results[1].output.metadata["a"] == 1

    def test_workers_run_samples_concurrently(self):
        class Sleepy:
            requires = frozenset()
            provides = frozenset()

            async def __call__(self, ctx):
                await asyncio.sleep(0.1)
                return ctx

        start = time.monotonic()
        Pipeline([Sleepy()]).run(list(range(5)), workers=5)
        assert time.monotonic() - start < 0.4


# ---------------------------------------------------------------------------
# async_boundary + background
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestPipelineAsyncBoundary:
    def test_run_async_returns_before_background_completes(self):
        class GatedBoundary(Gate):
            async_boundary = True

        step = GatedBoundary()

        async def main():
            step.event = asyncio.Event()
            pipe = Pipeline([SetA(), step])
            results = await pipe.run_async(["s"])
            assert results[0].output is None
            assert pipe.background_stats()["pending"] == 1

            step.event.set()
            await pipe.wait_for_background(timeout=5.0)
            return pipe, results

        pipe, results = asyncio.run(main())
        assert results[0].output.metadata["gated"] is True
        assert pipe.background_stats() == {"pending": 0, "completed": 1, "failed": 0}

    def test_background_failure_captured_in_result(self):
        class BGBoom(Boom):
            async_boundary = True

        pipe = Pipeline([BGBoom()])
        results = pipe.run(["s"])
        assert results[0].failed_at == "BGBoom"
        assert results[0].output is None
        assert pipe.background_stats()["failed"] == 1

    def test_background_failure_keeps_last_good_context(self):
        results = Pipeline([SetA(), BoundaryStep(), Boom()]).run(["s"])
        assert results[0].failed_at == "Boom"
        assert results[0].output is None
        assert results[0].partial.metadata["bg_result"] is True
        assert results[0].partial.metadata["a"] == 1

    def test_failed_foreground_not_sent_to_background(self):
        recorder = Recorder()

        class RecordingBoundary(Recorder):
            async_boundary = True

        tail = RecordingBoundary()
        pipe = Pipeline([Boom(), tail, recorder])
        results = pipe.run(["s"])
        assert results[0].failed_at == "Boom"
        assert tail.call_log == []
        assert recorder.call_log == []

    def test_background_false_runs_everything_in_place(self):
        async def main():
            pipe = Pipeline([SetA(), BoundaryStep()])
            results = await pipe.run_async(["s"], background=False)
            assert pipe.background_stats()["pending"] == 0
            return results

        results = asyncio.run(main())
        assert results[0].output.metadata["bg_result"] is True

    def test_wait_for_background_without_work_is_noop(self):
        async def main():
            pipe = Pipeline([SetA()])
            await pipe.run_async(["s"])
            await pipe.wait_for_background(timeout=0.1)

        asyncio.run(main())

    def test_wait_for_background_timeout_raises(self):
        async def main():
            pipe = Pipeline([BoundaryStep(delay=1.0)])
            await pipe.run_async(["s"])
            with pytest.raises(TimeoutError):
                await pipe.wait_for_background(timeout=0.05)
            await pipe.wait_for_background(timeout=5.0)

        asyncio.run(main())


# ---------------------------------------------------------------------------
# Nesting
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestNestedPipelines:
    def test_inner_pipeline_used_as_step(self):
        inner = Pipeline([SetA(), SetB()])
        results = Pipeline([inner, SetC()]).run(["s"])
        assert results[0].output.metadata["c"] == 4

    def test_nested_pipeline_contracts_inferred(self):
        inner = Pipeline([SetB()])
        outer = Pipeline([SetA(), inner])
        assert outer.requires == frozenset()
        assert {"a", "b"} <= outer.provides
