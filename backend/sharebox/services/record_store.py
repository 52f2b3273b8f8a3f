"""Record Store: get/append/replace/delete over the SQL tables.

Every mutation commits immediately and the last writer wins; there is no
optimistic locking across a read-modify-write cycle.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sharebox.errors import NotFound
from sharebox.models.base import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class RecordStore:
    """Thin async repository over one session."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get_all(self, model: type[ModelT]) -> Sequence[ModelT]:
        result = await self._db.execute(select(model))
        return result.scalars().all()

    async def get_by_id(self, model: type[ModelT], record_id: str) -> ModelT:
        record = await self._db.get(model, record_id)
        if record is None:
            raise NotFound(f"{model.__name__} {record_id} not found")
        return record

    async def find(self, model: type[ModelT], *criteria: Any) -> Sequence[ModelT]:
        result = await self._db.execute(select(model).where(*criteria))
        return result.scalars().all()

    async def find_one(self, model: type[ModelT], *criteria: Any) -> ModelT | None:
        result = await self._db.execute(select(model).where(*criteria))
        return result.scalars().first()

    async def append(self, record: ModelT) -> ModelT:
        self._db.add(record)
        await self._db.commit()
        await self._db.refresh(record)
        return record

    async def replace(self, record: ModelT) -> ModelT:
        """Persist changes made to an already-loaded record."""
        merged = await self._db.merge(record)
        await self._db.commit()
        await self._db.refresh(merged)
        return merged

    async def delete(self, model: type[ModelT], record_id: str) -> None:
        record = await self.get_by_id(model, record_id)
        await self._db.delete(record)
        await self._db.commit()
        logger.info("Deleted %s %s", model.__name__, record_id)
