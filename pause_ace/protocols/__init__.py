"""Public contracts — protocols that steps depend on, not concrete classes."""

from .llm import LLMClientLike
from .reflector import ReflectorLike
from .skill_manager import SkillManagerLike

__all__ = [
    "LLMClientLike",
    "ReflectorLike",
    "SkillManagerLike",
]
