"""OpikStep — log learning traces to Opik.

Terminal side-effect step that creates a ``learning:reflection`` trace
and a ``learning:skillbook_update`` trace per interaction.  Gracefully
degrades to a no-op when Opik is not installed or is disabled.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from ..core.context import LearningContext

logger = logging.getLogger(__name__)

# Soft-import Opik; OpikStep is a no-op when the package is absent.
try:
    import opik as _opik

    OPIK_AVAILABLE = True
except ImportError:
    _opik = None  # type: ignore[assignment]
    OPIK_AVAILABLE = False


def _opik_disabled() -> bool:
    """Check environment variables for Opik disable signals."""
    if os.environ.get("OPIK_DISABLED", "").lower() in ("true", "1", "yes"):
        return True
    if os.environ.get("OPIK_ENABLED", "").lower() in ("false", "0", "no"):
        return True
    return False


class OpikStep:
    """Log learning traces to Opik.

    Pure side-effect step — reads context fields and never mutates the
    context.  Every failure is caught and logged at DEBUG; telemetry never
    decides whether a learning run succeeded.

    Args:
        project_name: Opik project name.
        tags: Tags applied to every trace.
        client: Pre-built Opik client (mainly for tests).  When given, the
            availability and environment checks are skipped.
    """

    requires = frozenset({"sample"})
    provides = frozenset()

    def __init__(
        self,
        project_name: str = "pause-learning",
        tags: list[str] | None = None,
        client: Any | None = None,
    ) -> None:
        self.project_name = project_name
        self.tags = tags or ["learning"]
        self._client: Any | None = client
        self.enabled = client is not None or (OPIK_AVAILABLE and not _opik_disabled())

        if self.enabled and self._client is None:
            try:
                self._client = _opik.Opik(project_name=project_name)
            except Exception as exc:
                logger.debug("OpikStep: failed to create Opik client: %s", exc)
                self.enabled = False

    def __call__(self, ctx: LearningContext) -> LearningContext:
        if not self.enabled:
            return ctx

        try:
            if ctx.reflection is not None:
                self._log_reflection(ctx)
            if ctx.update_batch is not None and ctx.commit is not None:
                self._log_skillbook_update(ctx)
            self._client.flush()
        except Exception as exc:
            logger.debug("OpikStep: failed to log trace (non-critical): %s", exc)

        return ctx

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _log_reflection(self, ctx: LearningContext) -> None:
        reflection = ctx.reflection
        trace = self._client.trace(
            name="learning:reflection",
            input={
                "interaction_id": ctx.interaction.interaction_id,
                "reflection_analysis": reflection.analysis,
                "helpful_skill_ids": reflection.helpful_skill_ids,
                "harmful_skill_ids": reflection.harmful_skill_ids,
                "new_learnings_count": len(reflection.new_learnings),
            },
            metadata={"user_id": ctx.interaction.user_id},
            tags=self.tags,
            project_name=self.project_name,
        )
        trace.end()

    def _log_skillbook_update(self, ctx: LearningContext) -> None:
        batch = ctx.update_batch
        commit = ctx.commit
        trace = self._client.trace(
            name="learning:skillbook_update",
            input={
                "interaction_id": ctx.interaction.interaction_id,
                "operation_count": len(batch.operations),
                "skill_count_before": commit.skill_count_before,
                "skill_count_after": commit.skill_count_after,
                "reasoning": batch.reasoning,
                "operations": [
                    {
                        "type": op.type,
                        "section": op.section,
                        "skill_id": getattr(op, "skill_id", None),
                    }
                    for op in batch.operations
                ],
            },
            metadata={
                "user_id": ctx.interaction.user_id,
                "committed": commit.committed,
                "version": commit.version,
                "attempts": commit.attempts,
            },
            tags=self.tags,
            project_name=self.project_name,
        )
        trace.end()
