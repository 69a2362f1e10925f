"""Core data types for the learning layer."""

from .context import LearningContext, SkillbookView
from .feedback import (
    FEEDBACK_SIGNALS,
    LEARNABLE_OUTCOMES,
    InteractionOutcome,
    feedback_signal,
    is_learnable,
)
from .interaction import Interaction
from .outputs import CommitResult, NewLearning, ReflectionQuality, ReflectorOutput
from .skillbook import (
    AddOperation,
    Operation,
    OperationType,
    RemoveOperation,
    Skill,
    Skillbook,
    TagOperation,
    UpdateBatch,
    UpdateOperation,
)

__all__ = [
    # Skillbook types
    "AddOperation",
    "Operation",
    "OperationType",
    "RemoveOperation",
    "Skill",
    "Skillbook",
    "TagOperation",
    "UpdateBatch",
    "UpdateOperation",
    # Outputs
    "CommitResult",
    "NewLearning",
    "ReflectionQuality",
    "ReflectorOutput",
    # Interactions and feedback
    "FEEDBACK_SIGNALS",
    "LEARNABLE_OUTCOMES",
    "Interaction",
    "InteractionOutcome",
    "feedback_signal",
    "is_learnable",
    # Context
    "LearningContext",
    "SkillbookView",
]
