"""Learning pipeline steps — one class per file, plus the learning_tail helper."""

from __future__ import annotations

from pipeline.protocol import StepProtocol

from ..protocols import ReflectorLike, SkillManagerLike
from ..storage.base import SkillbookStore
from .commit import CommitStep
from .load import LoadStep
from .observability import ObservabilityStep
from .opik import OPIK_AVAILABLE, OpikStep
from .reflect import ReflectStep
from .update import UpdateStep

__all__ = [
    "CommitStep",
    "LoadStep",
    "ObservabilityStep",
    "OPIK_AVAILABLE",
    "OpikStep",
    "ReflectStep",
    "UpdateStep",
    "learning_tail",
]


def learning_tail(
    reflector: ReflectorLike,
    skill_manager: SkillManagerLike,
    store: SkillbookStore,
    *,
    reflection_timeout: float | None = 10.0,
    curation_timeout: float | None = 10.0,
    storage_timeout: float | None = 10.0,
    max_commit_attempts: int = 3,
) -> list[StepProtocol]:
    """Return the standard learning steps that follow ``LoadStep``.

    Use this when building custom pipelines that want the standard
    reflect/curate/commit sequence::

        steps = [
            LoadStep(store),
            *learning_tail(reflector, skill_manager, store),
            ObservabilityStep(),
        ]

    The returned list is always:
        [ReflectStep, UpdateStep, CommitStep]
    """
    return [
        ReflectStep(reflector, timeout=reflection_timeout),
        UpdateStep(skill_manager, timeout=curation_timeout),
        CommitStep(store, max_attempts=max_commit_attempts, timeout=storage_timeout),
    ]
