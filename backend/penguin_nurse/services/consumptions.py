import logging
from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from penguin_nurse.models.consumptions import Consumption, ConsumptionConsumable
from penguin_nurse.services.entries import EntryRepository

logger = logging.getLogger(__name__)


def _with_items(stmt):
    return stmt.options(
        selectinload(Consumption.items).selectinload(ConsumptionConsumable.consumable)
    ).execution_options(populate_existing=True)


class ConsumptionRepository(EntryRepository[Consumption]):
    def __init__(self):
        super().__init__(Consumption)

    async def list_between(
        self, db: AsyncSession, user_id: int, start: datetime, end: datetime
    ) -> Sequence[Consumption]:
        stmt = _with_items(
            select(Consumption)
            .where(Consumption.user_id == user_id, Consumption.time >= start, Consumption.time < end)
            .order_by(Consumption.time, Consumption.id)
        )
        result = await db.execute(stmt)
        return result.scalars().all()

    async def get(self, db: AsyncSession, user_id: int, entry_id: int) -> Optional[Consumption]:
        stmt = _with_items(
            select(Consumption).where(Consumption.id == entry_id, Consumption.user_id == user_id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, values: dict[str, Any]) -> Consumption:
        row = await super().create(db, values)
        return await self.get(db, row.user_id, row.id)

    async def update(self, db: AsyncSession, row: Consumption, values: dict[str, Any]) -> Consumption:
        row = await super().update(db, row, values)
        return await self.get(db, row.user_id, row.id)

    async def get_item(
        self, db: AsyncSession, consumption_id: int, consumable_id: int
    ) -> Optional[ConsumptionConsumable]:
        stmt = (
            select(ConsumptionConsumable)
            .where(
                ConsumptionConsumable.parent_id == consumption_id,
                ConsumptionConsumable.consumable_id == consumable_id,
            )
            .options(selectinload(ConsumptionConsumable.consumable))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def add_item(self, db: AsyncSession, consumption: Consumption, values: dict[str, Any]) -> ConsumptionConsumable:
        item = ConsumptionConsumable(parent_id=consumption.id, **values)
        db.add(item)
        await db.commit()
        logger.info("Added consumable %s to consumption %s", item.consumable_id, consumption.id)
        return await self.get_item(db, consumption.id, values["consumable_id"])

    async def update_item(
        self, db: AsyncSession, item: ConsumptionConsumable, values: dict[str, Any]
    ) -> ConsumptionConsumable:
        for key, value in values.items():
            setattr(item, key, value)
        await db.commit()
        return await self.get_item(db, item.parent_id, item.consumable_id)

    async def delete_item(self, db: AsyncSession, consumption_id: int, consumable_id: int) -> bool:
        result = await db.execute(
            delete(ConsumptionConsumable).where(
                ConsumptionConsumable.parent_id == consumption_id,
                ConsumptionConsumable.consumable_id == consumable_id,
            )
        )
        await db.commit()
        return result.rowcount > 0


consumption_repository = ConsumptionRepository()
