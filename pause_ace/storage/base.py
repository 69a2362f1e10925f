"""Abstract skillbook store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..core.skillbook import Skillbook


@dataclass(frozen=True)
class SkillbookRecord:
    """One stored row: a user's serialized skillbook and its version."""

    user_id: str
    skills: Dict[str, Any]
    version: int


class SkillbookStore(ABC):
    """Abstract base class for per-user skillbook storage.

    Versions start at 1 on insert and grow by exactly 1 on each successful
    update.  Writers must go through ``update`` with the version they read;
    a mismatch means someone else committed first.
    """

    @abstractmethod
    async def load(self, user_id: str) -> Optional[SkillbookRecord]:
        """Return the user's record, or None if no row exists."""

    @abstractmethod
    async def insert(self, user_id: str, skills: Dict[str, Any]) -> bool:
        """Create the user's row at version 1. Returns False if it already exists."""

    @abstractmethod
    async def update(
        self, user_id: str, skills: Dict[str, Any], expected_version: int
    ) -> int:
        """Replace the payload only if the stored version equals *expected_version*.

        Returns the number of rows affected (0 on conflict, 1 on success).
        """

    async def close(self) -> None:
        """Release any held resources."""


async def load_skillbook(store: SkillbookStore, user_id: str) -> Tuple[Skillbook, int]:
    """Load and deserialize a user's skillbook; ``(Skillbook(), 0)`` if absent."""
    record = await store.load(user_id)
    if record is None:
        return Skillbook(), 0
    return Skillbook.from_dict(record.skills), record.version
