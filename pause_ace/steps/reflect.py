"""ReflectStep — critiques the interaction to produce a ReflectorOutput."""

from __future__ import annotations

import logging

from ..core.context import LearningContext
from ..errors import with_timeout
from ..protocols import ReflectorLike

logger = logging.getLogger(__name__)


class ReflectStep:
    """Run the Reflector role against the interaction and loaded skillbook.

    Declares ``async_boundary = True`` — everything from this step onward
    runs as a detached background task when the pipeline has background
    execution enabled, so the caller never waits on the LLM.

    Pure — produces a reflection object, no side effects.
    """

    requires = frozenset({"sample", "skillbook"})
    provides = frozenset({"reflection"})

    async_boundary = True

    def __init__(self, reflector: ReflectorLike, timeout: float | None = 10.0) -> None:
        self.reflector = reflector
        self.timeout = timeout

    async def __call__(self, ctx: LearningContext) -> LearningContext:
        interaction = ctx.interaction
        reflection = await with_timeout(
            self.reflector.reflect(
                question=interaction.question,
                generator_answer=interaction.generator_answer,
                feedback=interaction.feedback,
                skillbook=ctx.skillbook,
                ground_truth=interaction.ground_truth,
            ),
            self.timeout,
            "reflection",
        )
        return ctx.replace(reflection=reflection)
