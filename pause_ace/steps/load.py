"""LoadStep — reads the user's skillbook and version from storage."""

from __future__ import annotations

import logging

from ..core.context import LearningContext, SkillbookView
from ..errors import with_timeout
from ..storage.base import SkillbookStore, load_skillbook

logger = logging.getLogger(__name__)


class LoadStep:
    """Load the interaction's user skillbook into the context.

    A missing row yields an empty skillbook at version 0, which the commit
    step turns into an INSERT.
    """

    requires = frozenset({"sample"})
    provides = frozenset({"skillbook", "skillbook_version"})

    def __init__(self, store: SkillbookStore, timeout: float | None = 10.0) -> None:
        self.store = store
        self.timeout = timeout

    async def __call__(self, ctx: LearningContext) -> LearningContext:
        user_id = ctx.interaction.user_id
        skillbook, version = await with_timeout(
            load_skillbook(self.store, user_id), self.timeout, "load"
        )
        logger.debug(
            "Loaded skillbook for %s: %d skills at version %d",
            user_id,
            len(skillbook),
            version,
        )
        return ctx.replace(skillbook=SkillbookView(skillbook), skillbook_version=version)
