"""Core types for the learning pipeline: SkillbookView and LearningContext."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from pipeline import StepContext

from .interaction import Interaction
from .outputs import CommitResult, ReflectorOutput
from .skillbook import Skill, Skillbook, UpdateBatch


# ---------------------------------------------------------------------------
# SkillbookView: read-only projection
# ---------------------------------------------------------------------------


class SkillbookView:
    """Read-only projection of a Skillbook.

    Wraps a ``Skillbook`` and exposes only read methods, so it is safe to
    place on a frozen ``LearningContext``.  Steps that need a mutable
    skillbook take a deep copy via :meth:`copy`.
    """

    __slots__ = ("_sb",)

    def __init__(self, skillbook: Skillbook) -> None:
        self._sb = skillbook

    def as_prompt(self) -> str:
        """Return the TOON-encoded skillbook for LLM consumption."""
        return self._sb.as_prompt()

    def get_skill(self, skill_id: str) -> Skill | None:
        return self._sb.get_skill(skill_id)

    def skills(self) -> list[Skill]:
        return self._sb.skills()

    def stats(self) -> dict[str, object]:
        return self._sb.stats()

    def to_dict(self) -> dict:
        return self._sb.to_dict()

    def copy(self) -> Skillbook:
        """Return an independent, mutable deep copy of the wrapped skillbook."""
        return self._sb.copy()

    def __len__(self) -> int:
        return len(self._sb)

    def __iter__(self) -> Iterator[Skill]:
        return iter(self._sb.skills())

    def __repr__(self) -> str:
        return f"SkillbookView({len(self)} skills)"


# ---------------------------------------------------------------------------
# LearningContext: immutable context for the learning pipeline
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LearningContext(StepContext):
    """Immutable context carrying all step-to-step data for one learning run.

    ``sample`` holds the :class:`Interaction`.  ``skillbook`` and
    ``skillbook_version`` are the state loaded from storage before the
    Reflector ran; the commit step re-loads on conflict and never writes
    back onto this snapshot.
    """

    sample: Interaction | None = None
    skillbook: SkillbookView | None = None
    skillbook_version: int | None = None
    reflection: ReflectorOutput | None = None
    update_batch: UpdateBatch | None = None
    commit: CommitResult | None = None

    @property
    def interaction(self) -> Interaction:
        return self.sample
