"""Reflector — critiques an interaction outcome into structured learnings."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..core.outputs import ReflectorOutput
from ..protocols.llm import LLMClientLike
from .helpers import extract_cited_skill_ids, format_optional, make_skillbook_excerpt
from .prompts import REFLECTOR_PROMPT

logger = logging.getLogger(__name__)


class Reflector:
    """Analyzes an interaction outcome to extract lessons.

    The Reflector reads what was being decided, what the guardian answered
    and how the user responded, and classifies which skillbook skills were
    helpful or harmful.  It proposes new learnings but never touches the
    skillbook itself.

    Exactly one structured completion is issued per call.  A response that
    fails schema validation propagates; retrying is the caller's decision.

    Args:
        llm: An LLM client that satisfies :class:`LLMClientLike`.
        prompt_template: Custom prompt template (defaults to
            :data:`REFLECTOR_PROMPT`).

    Example::

        reflector = Reflector(llm)
        reflection = await reflector.reflect(
            question="Should I buy these shoes on sale for $80?",
            generator_answer="Wait 24 hours before deciding.",
            feedback=feedback_signal("wait"),
            skillbook=skillbook,
        )
        print(reflection.analysis)
    """

    def __init__(
        self,
        llm: LLMClientLike,
        prompt_template: str = REFLECTOR_PROMPT,
    ) -> None:
        self.llm = llm
        self.prompt_template = prompt_template

    async def reflect(
        self,
        *,
        question: str,
        generator_answer: str,
        feedback: str,
        skillbook: Any,
        ground_truth: Optional[str] = None,
        **kwargs: Any,
    ) -> ReflectorOutput:
        """Critique one interaction.

        Args:
            question: What was being decided.
            generator_answer: What the agent said or did.
            feedback: Natural-language outcome signal.
            skillbook: Current skillbook (duck-typed, needs ``as_prompt``
                and ``get_skill``).  Read-only.
            ground_truth: Expected answer, when one exists.
            **kwargs: Forwarded to the LLM client.

        Returns:
            :class:`ReflectorOutput` with analysis and skill classifications.
        """
        cited = make_skillbook_excerpt(
            skillbook, extract_cited_skill_ids(generator_answer)
        )
        prompt = self.prompt_template.format(
            question=question,
            generator_answer=generator_answer,
            feedback=feedback,
            ground_truth=format_optional(ground_truth),
            skillbook=skillbook.as_prompt() or "(empty skillbook)",
            cited_skills=cited or "(No strategies cited - outcome-based learning)",
        )

        return await self.llm.complete_structured(prompt, ReflectorOutput, **kwargs)
