"""UpdateStep — generates skillbook update operations from a reflection."""

from __future__ import annotations

from ..core.context import LearningContext
from ..errors import with_timeout
from ..protocols import SkillManagerLike


class UpdateStep:
    """Run the SkillManager role to produce update operations.

    Pure — generates an ``UpdateBatch`` from the reflection and the loaded
    skillbook.  Does not mutate the skillbook.
    """

    requires = frozenset({"reflection", "skillbook"})
    provides = frozenset({"update_batch"})

    def __init__(
        self, skill_manager: SkillManagerLike, timeout: float | None = 10.0
    ) -> None:
        self.skill_manager = skill_manager
        self.timeout = timeout

    async def __call__(self, ctx: LearningContext) -> LearningContext:
        batch = await with_timeout(
            self.skill_manager.curate(
                reflection_analysis=ctx.reflection.analysis,
                skillbook=ctx.skillbook,
                reflection=ctx.reflection,
            ),
            self.timeout,
            "curation",
        )
        return ctx.replace(update_batch=batch)
