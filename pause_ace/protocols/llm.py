"""LLMClientLike — structural protocol for LLM clients."""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


@runtime_checkable
class LLMClientLike(Protocol):
    """The one capability the roles need: a schema-validated completion.

    Concrete implementations include ``LiteLLMClient``,
    ``InstructorClient`` and ``DummyLLMClient``.  Implementations either
    return a valid *response_model* instance or raise.
    """

    async def complete_structured(
        self,
        prompt: str,
        response_model: type[T],
        **kwargs: Any,
    ) -> T:
        """Return a validated Pydantic model instance for *prompt*."""
        ...
