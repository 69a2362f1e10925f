"""CommitStep — applies the update batch and persists it optimistically."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from ..core.context import LearningContext
from ..core.outputs import CommitResult
from ..core.skillbook import Skillbook
from ..errors import with_timeout
from ..storage.base import SkillbookStore, load_skillbook

logger = logging.getLogger(__name__)


class CommitStep:
    """Apply ``ctx.update_batch`` and write it back with a version check.

    Each attempt applies the *same* batch to a fresh copy of the current
    skillbook and commits only if the stored version is still the one that
    copy was loaded at.  Attempt 0 reuses the skillbook from ``LoadStep``;
    later attempts re-load from the store.  A brand-new user (version 0) is
    written with an INSERT; if someone else inserted first the loop falls
    through to the UPDATE path.

    Running out of attempts is not an error: it logs a ``RETRY_QUEUE`` line
    for deferred reprocessing and records ``committed=False``.  Storage
    errors and timeouts propagate and fail the run.
    """

    requires = frozenset({"sample", "skillbook", "skillbook_version", "update_batch"})
    provides = frozenset({"commit"})

    def __init__(
        self,
        store: SkillbookStore,
        *,
        max_attempts: int = 3,
        timeout: float | None = 10.0,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.store = store
        self.max_attempts = max_attempts
        self.timeout = timeout

    async def __call__(self, ctx: LearningContext) -> LearningContext:
        interaction = ctx.interaction
        user_id = interaction.user_id
        batch = ctx.update_batch
        skill_count_before = len(ctx.skillbook)

        skillbook: Skillbook = ctx.skillbook.copy()
        version = ctx.skillbook_version or 0

        for attempt in range(self.max_attempts):
            if attempt > 0:
                skillbook, version = await with_timeout(
                    load_skillbook(self.store, user_id), self.timeout, "storage"
                )
            skillbook.apply_update(batch)
            payload = skillbook.to_dict()

            if version == 0:
                committed = await with_timeout(
                    self.store.insert(user_id, payload), self.timeout, "storage"
                )
            else:
                rows = await with_timeout(
                    self.store.update(user_id, payload, expected_version=version),
                    self.timeout,
                    "storage",
                )
                committed = rows > 0

            if committed:
                new_version = version + 1
                logger.info(
                    "Committed skillbook for %s at version %d (%d -> %d skills)",
                    user_id,
                    new_version,
                    skill_count_before,
                    len(skillbook),
                )
                return ctx.replace(
                    commit=CommitResult(
                        committed=True,
                        version=new_version,
                        attempts=attempt + 1,
                        skill_count_before=skill_count_before,
                        skill_count_after=len(skillbook),
                    )
                )

            logger.warning(
                "Version conflict on attempt %d for user %s", attempt + 1, user_id
            )

        logger.warning(
            "RETRY_QUEUE: %s",
            json.dumps(
                {
                    "type": "skillbook_update",
                    "user_id": user_id,
                    "interaction_id": interaction.interaction_id,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                }
            ),
        )
        return ctx.replace(
            commit=CommitResult(
                committed=False,
                version=None,
                attempts=self.max_attempts,
                skill_count_before=skill_count_before,
                skill_count_after=skill_count_before,
            )
        )
