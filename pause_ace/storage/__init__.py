"""Skillbook persistence: store contract plus memory and SQL backends."""

from .base import SkillbookRecord, SkillbookStore, load_skillbook
from .memory import MemorySkillbookStore
from .sql import SqlSkillbookStore, skillbook_table

__all__ = [
    "SkillbookRecord",
    "SkillbookStore",
    "load_skillbook",
    "MemorySkillbookStore",
    "SqlSkillbookStore",
    "skillbook_table",
]
