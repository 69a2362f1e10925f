"""SkillManager — transforms a critique into a concrete batch of mutations."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from ..core.outputs import ReflectorOutput
from ..core.skillbook import UpdateBatch
from ..protocols.llm import LLMClientLike
from .prompts import SKILL_MANAGER_PROMPT

logger = logging.getLogger(__name__)


class SkillManager:
    """Transforms reflections into actionable skillbook updates.

    Produces an :class:`UpdateBatch` of ADD/UPDATE/TAG/REMOVE operations.
    An empty batch is a valid answer meaning "no change warranted".  The
    SkillManager does not mutate the skillbook; callers apply the batch
    with ``Skillbook.apply_update``.

    Args:
        llm: An LLM client that satisfies :class:`LLMClientLike`.
        prompt_template: Custom prompt template (defaults to
            :data:`SKILL_MANAGER_PROMPT`).

    Example::

        sm = SkillManager(llm)
        batch = await sm.curate(
            reflection_analysis=reflection.analysis,
            skillbook=skillbook,
        )
        skillbook.apply_update(batch)
    """

    def __init__(
        self,
        llm: LLMClientLike,
        prompt_template: str = SKILL_MANAGER_PROMPT,
    ) -> None:
        self.llm = llm
        self.prompt_template = prompt_template

    async def curate(
        self,
        *,
        reflection_analysis: str,
        skillbook: Any,
        reflection: Optional[ReflectorOutput] = None,
        **kwargs: Any,
    ) -> UpdateBatch:
        """Generate update operations from a reflection.

        Args:
            reflection_analysis: The ``analysis`` text of a reflection.
            skillbook: Current skillbook (duck-typed, needs ``as_prompt``
                and ``stats``).  Read-only.
            reflection: The full reflection, when available, so skill ids
                and proposed learnings reach the prompt verbatim.
            **kwargs: Forwarded to the LLM client.

        Returns:
            The validated :class:`UpdateBatch`.
        """
        if reflection is not None:
            details = json.dumps(
                reflection.model_dump(
                    include={"helpful_skill_ids", "harmful_skill_ids", "new_learnings"}
                ),
                ensure_ascii=False,
                indent=2,
            )
        else:
            details = "(not provided)"

        prompt = self.prompt_template.format(
            reflection_analysis=reflection_analysis,
            reflection_details=details,
            stats=json.dumps(skillbook.stats()),
            skillbook=skillbook.as_prompt() or "(empty skillbook)",
        )

        batch = await self.llm.complete_structured(prompt, UpdateBatch, **kwargs)
        logger.debug(
            "SkillManager produced %d operation(s): %s",
            len(batch.operations),
            batch.reasoning,
        )
        return batch
