import logging
from datetime import datetime
from typing import Any, Generic, Optional, Sequence, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from penguin_nurse.core.db import Base

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT", bound=Base)


class EntryRepository(Generic[RowT]):
    """Per user CRUD over one of the time stamped entry tables."""

    def __init__(self, model: type[RowT]):
        self.model = model

    async def list_between(
        self, db: AsyncSession, user_id: int, start: datetime, end: datetime
    ) -> Sequence[RowT]:
        model = self.model
        stmt = (
            select(model)
            .where(model.user_id == user_id, model.time >= start, model.time < end)
            .order_by(model.time, model.id)
        )
        result = await db.execute(stmt)
        return result.scalars().all()

    async def get(self, db: AsyncSession, user_id: int, entry_id: int) -> Optional[RowT]:
        model = self.model
        stmt = select(model).where(model.id == entry_id, model.user_id == user_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, values: dict[str, Any]) -> RowT:
        row = self.model(**values)
        db.add(row)
        await db.commit()
        await db.refresh(row)
        logger.info("Created %s %s for user %s", self.model.__tablename__, row.id, row.user_id)
        return row

    async def update(self, db: AsyncSession, row: RowT, values: dict[str, Any]) -> RowT:
        for key, value in values.items():
            setattr(row, key, value)
        await db.commit()
        await db.refresh(row)
        return row

    async def delete(self, db: AsyncSession, user_id: int, entry_id: int) -> bool:
        model = self.model
        result = await db.execute(delete(model).where(model.id == entry_id, model.user_id == user_id))
        await db.commit()
        deleted = result.rowcount > 0
        if deleted:
            logger.info("Deleted %s %s for user %s", model.__tablename__, entry_id, user_id)
        return deleted
