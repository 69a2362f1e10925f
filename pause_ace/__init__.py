"""pause_ace — per-user skillbook learning for a spending guardian.

Each completed interaction is critiqued by a Reflector, turned into an
update batch by a SkillManager, and committed to the user's skillbook with
an optimistic version check.
"""

from .config import LearningConfig
from .core import (
    AddOperation,
    CommitResult,
    FEEDBACK_SIGNALS,
    Interaction,
    InteractionOutcome,
    LEARNABLE_OUTCOMES,
    LearningContext,
    NewLearning,
    ReflectionQuality,
    ReflectorOutput,
    RemoveOperation,
    Skill,
    Skillbook,
    SkillbookView,
    TagOperation,
    UpdateBatch,
    UpdateOperation,
    feedback_signal,
    is_learnable,
)
from .errors import LearningError, StageTimeoutError, with_timeout
from .implementations import Reflector, SkillManager, wrap_skillbook_context
from .protocols import LLMClientLike, ReflectorLike, SkillManagerLike
from .providers import (
    DummyLLMClient,
    InstructorClient,
    LiteLLMClient,
    LiteLLMConfig,
    wrap_with_instructor,
)
from .runners import LearningResult, LearningRunner
from .steps import (
    OPIK_AVAILABLE,
    CommitStep,
    LoadStep,
    ObservabilityStep,
    OpikStep,
    ReflectStep,
    UpdateStep,
    learning_tail,
)
from .storage import (
    MemorySkillbookStore,
    SkillbookRecord,
    SkillbookStore,
    SqlSkillbookStore,
    load_skillbook,
)

__all__ = [
    # Config and errors
    "LearningConfig",
    "LearningError",
    "StageTimeoutError",
    "with_timeout",
    # Skillbook
    "Skill",
    "Skillbook",
    "SkillbookView",
    "UpdateBatch",
    "AddOperation",
    "UpdateOperation",
    "TagOperation",
    "RemoveOperation",
    # Outputs
    "ReflectorOutput",
    "NewLearning",
    "ReflectionQuality",
    "CommitResult",
    # Interactions
    "Interaction",
    "InteractionOutcome",
    "FEEDBACK_SIGNALS",
    "LEARNABLE_OUTCOMES",
    "feedback_signal",
    "is_learnable",
    "LearningContext",
    # Roles
    "Reflector",
    "SkillManager",
    "wrap_skillbook_context",
    "LLMClientLike",
    "ReflectorLike",
    "SkillManagerLike",
    # Providers
    "LiteLLMClient",
    "LiteLLMConfig",
    "InstructorClient",
    "wrap_with_instructor",
    "DummyLLMClient",
    # Storage
    "SkillbookStore",
    "SkillbookRecord",
    "MemorySkillbookStore",
    "SqlSkillbookStore",
    "load_skillbook",
    # Steps and runners
    "LoadStep",
    "ReflectStep",
    "UpdateStep",
    "CommitStep",
    "ObservabilityStep",
    "OpikStep",
    "OPIK_AVAILABLE",
    "learning_tail",
    "LearningRunner",
    "LearningResult",
]
