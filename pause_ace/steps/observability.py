"""ObservabilityStep — logs learning-run metrics."""

from __future__ import annotations

import logging

from ..core.context import LearningContext

logger = logging.getLogger(__name__)


class ObservabilityStep:
    """Log per-run learning metrics.

    Optional side-effect step — only requires ``skillbook``.  Reads other
    context fields optionally so it can sit anywhere after ``LoadStep``.
    """

    requires = frozenset({"skillbook"})
    provides = frozenset()

    def __call__(self, ctx: LearningContext) -> LearningContext:
        metrics: dict = {"skill_count": len(ctx.skillbook)}

        if ctx.sample is not None:
            metrics["interaction_id"] = ctx.interaction.interaction_id
            metrics["user_id"] = ctx.interaction.user_id
        if ctx.reflection:
            metrics["helpful_count"] = len(ctx.reflection.helpful_skill_ids)
            metrics["harmful_count"] = len(ctx.reflection.harmful_skill_ids)
            metrics["learnings_count"] = len(ctx.reflection.new_learnings)
        if ctx.update_batch:
            metrics["operations_count"] = len(ctx.update_batch.operations)
        if ctx.commit:
            metrics["committed"] = ctx.commit.committed
            metrics["commit_attempts"] = ctx.commit.attempts
            metrics["version"] = ctx.commit.version

        logger.info("ObservabilityStep: %s", metrics)
        return ctx
