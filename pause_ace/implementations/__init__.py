"""Concrete role implementations for the learning layer."""

from .helpers import extract_cited_skill_ids, format_optional, make_skillbook_excerpt
from .prompts import (
    REFLECTOR_PROMPT,
    SKILL_MANAGER_PROMPT,
    SKILLBOOK_USAGE_INSTRUCTIONS,
    wrap_skillbook_context,
)
from .reflector import Reflector
from .skill_manager import SkillManager

__all__ = [
    "Reflector",
    "SkillManager",
    "REFLECTOR_PROMPT",
    "SKILL_MANAGER_PROMPT",
    "SKILLBOOK_USAGE_INSTRUCTIONS",
    "wrap_skillbook_context",
    "extract_cited_skill_ids",
    "format_optional",
    "make_skillbook_excerpt",
]
