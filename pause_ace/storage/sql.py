"""Relational skillbook store on SQLAlchemy's async Core API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    func,
    insert,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from .base import SkillbookRecord, SkillbookStore

logger = logging.getLogger(__name__)

metadata = MetaData()

skillbook_table = Table(
    "skillbook",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String(255), nullable=False, unique=True),
    Column("skills", JSON, nullable=False),
    Column("version", Integer, nullable=False, default=1),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column(
        "updated_at",
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    ),
)


class SqlSkillbookStore(SkillbookStore):
    """Skillbook rows in a relational table, one per user.

    The version check is a single conditional ``UPDATE ... WHERE user_id = ?
    AND version = ?``; its rowcount tells the caller whether it won.

    Args:
        engine: An async SQLAlchemy engine (e.g. ``sqlite+aiosqlite`` or
            ``postgresql+asyncpg``).

    Example::

        store = SqlSkillbookStore.from_url("sqlite+aiosqlite:///skillbook.db")
        await store.create_all()
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    @classmethod
    def from_url(cls, url: str, **engine_kwargs: Any) -> "SqlSkillbookStore":
        return cls(create_async_engine(url, **engine_kwargs))

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def load(self, user_id: str) -> Optional[SkillbookRecord]:
        stmt = select(skillbook_table.c.skills, skillbook_table.c.version).where(
            skillbook_table.c.user_id == user_id
        )
        async with self.engine.connect() as conn:
            row = (await conn.execute(stmt)).first()
        if row is None:
            return None
        return SkillbookRecord(user_id=user_id, skills=row.skills, version=row.version)

    async def insert(self, user_id: str, skills: Dict[str, Any]) -> bool:
        stmt = insert(skillbook_table).values(user_id=user_id, skills=skills, version=1)
        try:
            async with self.engine.begin() as conn:
                await conn.execute(stmt)
        except IntegrityError:
            logger.info("Skillbook row for %s already exists", user_id)
            return False
        return True

    async def update(
        self, user_id: str, skills: Dict[str, Any], expected_version: int
    ) -> int:
        stmt = (
            update(skillbook_table)
            .where(
                skillbook_table.c.user_id == user_id,
                skillbook_table.c.version == expected_version,
            )
            .values(
                skills=skills,
                version=skillbook_table.c.version + 1,
                updated_at=func.now(),
            )
        )
        async with self.engine.begin() as conn:
            result = await conn.execute(stmt)
        return result.rowcount

    async def close(self) -> None:
        await self.engine.dispose()
