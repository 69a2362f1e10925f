"""In-memory skillbook store for testing."""

from __future__ import annotations

import copy
from typing import Any, Dict, Optional

from .base import SkillbookRecord, SkillbookStore


class MemorySkillbookStore(SkillbookStore):
    """In-memory store backed by a dict. Useful for testing.

    Payloads are deep-copied on the way in and out so callers never share
    state with the store.  Compare-and-set is atomic because nothing awaits
    between the version check and the write.
    """

    def __init__(self) -> None:
        self._rows: Dict[str, SkillbookRecord] = {}
        self.insert_calls = 0
        self.update_calls = 0

    async def load(self, user_id: str) -> Optional[SkillbookRecord]:
        record = self._rows.get(user_id)
        if record is None:
            return None
        return SkillbookRecord(
            user_id=record.user_id,
            skills=copy.deepcopy(record.skills),
            version=record.version,
        )

    async def insert(self, user_id: str, skills: Dict[str, Any]) -> bool:
        self.insert_calls += 1
        if user_id in self._rows:
            return False
        self._rows[user_id] = SkillbookRecord(
            user_id=user_id, skills=copy.deepcopy(skills), version=1
        )
        return True

    async def update(
        self, user_id: str, skills: Dict[str, Any], expected_version: int
    ) -> int:
        self.update_calls += 1
        record = self._rows.get(user_id)
        if record is None or record.version != expected_version:
            return 0
        self._rows[user_id] = SkillbookRecord(
            user_id=user_id,
            skills=copy.deepcopy(skills),
            version=record.version + 1,
        )
        return 1

    def version_of(self, user_id: str) -> int:
        record = self._rows.get(user_id)
        return record.version if record else 0
