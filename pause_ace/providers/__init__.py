"""LLM providers — client wrappers satisfying ``LLMClientLike``.

- ``LiteLLMClient`` / ``LiteLLMConfig`` — LiteLLM integration (100+ providers)
- ``InstructorClient`` / ``wrap_with_instructor`` — Instructor structured outputs
- ``DummyLLMClient`` — queued responses for tests
"""

from __future__ import annotations

from .dummy import DummyLLMClient
from .instructor import InstructorClient, wrap_with_instructor
from .litellm import LITELLM_AVAILABLE, LiteLLMClient, LiteLLMConfig, LLMResponse

__all__ = [
    "LiteLLMClient",
    "LiteLLMConfig",
    "LLMResponse",
    "LITELLM_AVAILABLE",
    "InstructorClient",
    "wrap_with_instructor",
    "DummyLLMClient",
]
