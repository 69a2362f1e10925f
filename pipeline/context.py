"""Immutable step context — the single object that flows through every step."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class StepContext:
    """Frozen context object passed from step to step.

    The engine only knows about ``sample`` and ``metadata``.  Applications
    subclass it (as a frozen dataclass) to add their own named fields.

    Steps never mutate the incoming context — they call ``.replace()`` to
    produce a new one.
    """

    sample: Any = None
    metadata: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        # Coerce plain dict → MappingProxyType so mutation is a hard runtime error
        if not isinstance(self.metadata, MappingProxyType):
            object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def replace(self, **changes: Any) -> "StepContext":
        """Return a new context of the same type with the given fields replaced."""
        return dataclasses.replace(self, **changes)
