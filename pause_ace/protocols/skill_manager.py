"""Protocol defining what steps need from a SkillManager implementation."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from ..core.outputs import ReflectorOutput
from ..core.skillbook import UpdateBatch


@runtime_checkable
class SkillManagerLike(Protocol):
    """Structural interface for SkillManager-like objects.

    Any object with a matching ``curate`` coroutine satisfies this —
    :class:`pause_ace.SkillManager` does.
    """

    async def curate(
        self,
        *,
        reflection_analysis: str,
        skillbook: Any,
        reflection: Optional[ReflectorOutput] = ...,
        **kwargs: Any,
    ) -> UpdateBatch: ...
