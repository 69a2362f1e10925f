"""Protocol defining what steps need from a Reflector implementation."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from ..core.outputs import ReflectorOutput


@runtime_checkable
class ReflectorLike(Protocol):
    """Structural interface for Reflector-like objects.

    Any object with a matching ``reflect`` coroutine satisfies this —
    :class:`pause_ace.Reflector` does.
    """

    async def reflect(
        self,
        *,
        question: str,
        generator_answer: str,
        feedback: str,
        skillbook: Any,
        ground_truth: Optional[str] = ...,
        **kwargs: Any,
    ) -> ReflectorOutput: ...
