"""Instructor-backed structured outputs over LiteLLM.

Instructor validates the reply against the response model and parses it
using its own mode handling (``MD_JSON`` by default), instead of the
plain JSON extraction in ``LiteLLMClient``.
"""

from __future__ import annotations

import logging
from typing import Any, Type, TypeVar

import instructor
from pydantic import BaseModel

from . import litellm as litellm_provider
from .litellm import LiteLLMClient

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class InstructorClient:
    """``LLMClientLike`` that routes structured calls through Instructor.

    Call parameters (model, sampling, credentials) come from the wrapped
    ``LiteLLMClient``.  ``max_retries`` defaults to ``0``: one role call is
    one completion, and a reply that fails validation raises.  Retrying is
    left to whoever schedules the learning run.

    Args:
        llm: The ``LiteLLMClient`` whose configuration is reused.
        mode: Instructor parsing mode.
        max_retries: Validation re-asks Instructor may perform.

    Example::

        llm = InstructorClient(LiteLLMClient(model="gpt-4o-mini"))
        reflector = Reflector(llm)
    """

    def __init__(
        self,
        llm: LiteLLMClient,
        mode: Any = instructor.Mode.MD_JSON,
        max_retries: int = 0,
    ) -> None:
        self.llm = llm
        self.mode = mode
        self.max_retries = max_retries

    @property
    def model(self) -> str:
        return self.llm.model

    def _client(self) -> Any:
        # Resolved per call so the module-level acompletion can be patched
        return instructor.from_litellm(litellm_provider.acompletion, mode=self.mode)

    async def complete_structured(
        self,
        prompt: str,
        response_model: Type[T],
        **kwargs: Any,
    ) -> T:
        """One Instructor-validated completion."""
        messages = [{"role": "user", "content": prompt}]
        params = self.llm._build_call_params(messages, **kwargs)
        params["response_model"] = response_model
        params["max_retries"] = self.max_retries
        try:
            return await self._client().chat.completions.create(**params)
        except Exception as exc:
            logger.error(
                "Instructor call for %s failed: %s", response_model.__name__, exc
            )
            raise


def wrap_with_instructor(
    llm: LiteLLMClient,
    mode: Any = instructor.Mode.MD_JSON,
    max_retries: int = 0,
) -> InstructorClient:
    """Wrap *llm* so structured calls go through Instructor."""
    return InstructorClient(llm, mode=mode, max_retries=max_retries)
