"""LearningRunner — turns completed interactions into skillbook updates."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pipeline import Pipeline, invoke_step
from pipeline.protocol import SampleResult

from ..config import LearningConfig
from ..core.context import LearningContext
from ..core.feedback import is_learnable
from ..core.interaction import Interaction
from ..core.outputs import CommitResult, ReflectorOutput
from ..core.skillbook import UpdateBatch
from ..protocols import ReflectorLike, SkillManagerLike
from ..storage.base import SkillbookStore
from ..steps import LoadStep, ObservabilityStep, OpikStep, learning_tail

logger = logging.getLogger(__name__)

# Failed step -> retry-queue entry type
_RETRY_STAGES = {
    "LoadStep": "reflection",
    "ReflectStep": "reflection",
    "UpdateStep": "curation",
}


@dataclass
class LearningResult:
    """Outcome of one learning run.

    ``error`` / ``failed_at`` are set when a stage raised; nothing from
    that run was committed, but outputs of the stages that did finish
    (such as ``reflection``) are kept.  ``commit.committed`` is ``False`` when the
    optimistic loop ran out of attempts.
    """

    interaction: Interaction
    reflection: ReflectorOutput | None = None
    update_batch: UpdateBatch | None = None
    commit: CommitResult | None = None
    error: Exception | None = None
    failed_at: str | None = None
    skipped: bool = False

    @property
    def committed(self) -> bool:
        return self.commit is not None and self.commit.committed

    @classmethod
    def from_sample_result(cls, result: SampleResult) -> "LearningResult":
        # A failed run still reports what its earlier stages produced
        ctx = result.output if result.output is not None else result.partial
        return cls(
            interaction=result.sample,
            reflection=getattr(ctx, "reflection", None),
            update_batch=getattr(ctx, "update_batch", None),
            commit=getattr(ctx, "commit", None),
            error=result.error,
            failed_at=result.failed_at,
        )


class LearningRunner:
    """Runs the learning pipeline for completed interactions.

    Composes a ``Pipeline`` (does not extend it)::

        Load -> Reflect -> Update -> Commit -> Observability [-> Opik]

    ``learn()`` awaits the whole chain and never raises for stage
    failures.  ``schedule()`` awaits only the load and detaches the rest
    at ``ReflectStep`` so an interactive caller is never held up; drain it
    with ``wait_for_background()``.

    Args:
        pipeline: The composed learning pipeline.
        store: Skillbook store the pipeline reads and writes.
        learnable_only: Skip outcomes that carry no behavioural signal
            (see :func:`is_learnable`).
    """

    def __init__(
        self,
        pipeline: Pipeline,
        store: SkillbookStore,
        *,
        learnable_only: bool = False,
    ) -> None:
        self.pipeline = pipeline
        self.store = store
        self.learnable_only = learnable_only
        self._scheduled: list[SampleResult] = []

    @classmethod
    def from_roles(
        cls,
        *,
        reflector: ReflectorLike,
        skill_manager: SkillManagerLike,
        store: SkillbookStore,
        config: LearningConfig | None = None,
        extra_steps: list | None = None,
        learnable_only: bool = False,
    ) -> "LearningRunner":
        """Construct from pre-built role instances.

        Args:
            reflector: Reflector role for critiquing interactions.
            skill_manager: SkillManager role for update operations.
            store: Skillbook store.
            config: Timeouts and retry bound.  Defaults to ``LearningConfig()``
                with Opik tracing off.
            extra_steps: Side-effect steps appended after the commit.
            learnable_only: Skip outcomes without a learning signal.
        """
        config = config or LearningConfig(opik_enabled=False)
        steps = [
            LoadStep(store, timeout=config.storage_timeout),
            *learning_tail(
                reflector,
                skill_manager,
                store,
                reflection_timeout=config.reflection_timeout,
                curation_timeout=config.curation_timeout,
                storage_timeout=config.storage_timeout,
                max_commit_attempts=config.max_commit_attempts,
            ),
            ObservabilityStep(),
        ]
        if config.opik_enabled:
            steps.append(OpikStep(project_name=config.opik_project))
        steps.extend(extra_steps or [])
        return cls(Pipeline(steps), store, learnable_only=learnable_only)

    @classmethod
    def from_config(
        cls,
        config: LearningConfig | None = None,
        *,
        store: SkillbookStore | None = None,
        **kwargs: Any,
    ) -> "LearningRunner":
        """Build the production stack: LiteLLM roles over a SQL store.

        ``config.structured_output == "instructor"`` routes both roles
        through ``InstructorClient``.

        The SQL table is not created here; call
        ``await runner.store.create_all()`` on a fresh database.
        """
        from ..implementations import Reflector, SkillManager
        from ..providers import LiteLLMClient, wrap_with_instructor
        from ..storage import SqlSkillbookStore

        config = config or LearningConfig.from_env()
        llm = LiteLLMClient(
            model=config.model,
            api_key=config.api_key,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )
        if config.structured_output == "instructor":
            llm = wrap_with_instructor(llm)
        if store is None:
            store = SqlSkillbookStore.from_url(config.database_url)
        return cls.from_roles(
            reflector=Reflector(llm),
            skill_manager=SkillManager(llm),
            store=store,
            config=config,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def learn(self, interaction: Interaction) -> LearningResult:
        """Run the full learning pipeline for one interaction and wait for it."""
        if self._should_skip(interaction):
            return LearningResult(interaction=interaction, skipped=True)
        results = await self.pipeline.run_async(
            [self._build_context(interaction)], background=False
        )
        return await self._finish(results[0])

    async def schedule(self, interactions: Iterable[Interaction]) -> list[SampleResult]:
        """Start learning runs without waiting for the LLM stages.

        Returns one ``SampleResult`` per scheduled interaction; their
        ``output`` / ``error`` fill in once the background tail finishes.
        Skipped interactions are not scheduled.
        """
        contexts = [
            self._build_context(i) for i in interactions if not self._should_skip(i)
        ]
        results = await self.pipeline.run_async(
            contexts, workers=max(len(contexts), 1)
        )
        self._scheduled.extend(results)
        return results

    async def wait_for_background(
        self, timeout: float | None = None
    ) -> list[LearningResult]:
        """Wait for all scheduled runs and return their outcomes.

        Delegates to ``Pipeline.wait_for_background()``, then logs failures
        the same way ``learn()`` does.  Raises ``TimeoutError`` if runs are
        still pending after *timeout* seconds; they keep running and are
        reported by a later call.
        """
        await self.pipeline.wait_for_background(timeout)
        scheduled, self._scheduled = self._scheduled, []
        return [await self._finish(r) for r in scheduled]

    @property
    def learning_stats(self) -> dict[str, int]:
        return self.pipeline.background_stats()

    async def close(self) -> None:
        await self.store.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _should_skip(self, interaction: Interaction) -> bool:
        if self.learnable_only and not is_learnable(interaction.outcome):
            logger.debug(
                "Skipping interaction %s: outcome %s carries no learning signal",
                interaction.interaction_id,
                interaction.outcome,
            )
            return True
        return False

    @staticmethod
    def _build_context(interaction: Interaction) -> LearningContext:
        return LearningContext(sample=interaction)

    async def _finish(self, sample_result: SampleResult) -> LearningResult:
        result = LearningResult.from_sample_result(sample_result)
        self._report(result)
        if result.error is not None and result.reflection is not None:
            await self._trace_partial(sample_result.partial, result.failed_at)
        return result

    async def _trace_partial(
        self, ctx: LearningContext | None, failed_at: str | None
    ) -> None:
        """Hand a failed run's context to the tracing steps it never reached.

        ``OpikStep`` logs whatever the context holds, so a reflection is
        still traced when curation or the commit failed.
        """
        if ctx is None:
            return
        names = [type(step).__name__ for step in self.pipeline.steps]
        if failed_at not in names:
            return
        for step in self.pipeline.steps[names.index(failed_at) + 1 :]:
            if isinstance(step, OpikStep):
                await invoke_step(step, ctx)

    @staticmethod
    def _report(result: LearningResult) -> None:
        if result.error is None:
            return
        interaction = result.interaction
        logger.warning(
            "Learning failed at %s for interaction %s: %s",
            result.failed_at,
            interaction.interaction_id,
            result.error,
        )
        stage = _RETRY_STAGES.get(result.failed_at or "")
        if stage is not None:
            logger.warning(
                "RETRY_QUEUE: %s",
                json.dumps(
                    {
                        "type": stage,
                        "user_id": interaction.user_id,
                        "interaction_id": interaction.interaction_id,
                        "timestamp": datetime.now(timezone.utc).isoformat(),
                    }
                ),
            )
