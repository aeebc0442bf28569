import logging
from typing import Any, Optional, Sequence

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from penguin_nurse.models.consumables import Consumable, NestedConsumable
from penguin_nurse.models.consumptions import Consumption, ConsumptionConsumable
from penguin_nurse.schemas.consumables import SearchParams

logger = logging.getLogger(__name__)


class NestingError(ValueError):
    pass


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def search_consumables(db: AsyncSession, params: SearchParams) -> Sequence[Consumable]:
    stmt = select(Consumable)

    term = params.query.strip()
    if term:
        pattern = f"%{_escape_like(term.lower())}%"
        stmt = stmt.where(
            or_(
                func.lower(Consumable.name).like(pattern, escape="\\"),
                func.lower(Consumable.brand).like(pattern, escape="\\"),
                Consumable.barcode == term,
            )
        )
    if params.include_only_created:
        stmt = stmt.where(Consumable.created.is_not(None))
    if not params.include_destroyed:
        stmt = stmt.where(Consumable.destroyed.is_(None))

    # undated catalogue items first, then the newest batches
    stmt = stmt.order_by(
        Consumable.created.desc().nulls_first(),
        Consumable.destroyed.desc().nulls_first(),
        Consumable.name.asc(),
    ).limit(params.limit)

    result = await db.execute(stmt)
    return result.scalars().all()


async def get_consumable(db: AsyncSession, consumable_id: int) -> Optional[Consumable]:
    return await db.get(Consumable, consumable_id)


async def create_consumable(db: AsyncSession, values: dict[str, Any]) -> Consumable:
    consumable = Consumable(**values)
    db.add(consumable)
    await db.commit()
    await db.refresh(consumable)
    logger.info("Created consumable %s (%s)", consumable.id, consumable.name)
    return consumable


async def update_consumable(db: AsyncSession, consumable: Consumable, values: dict[str, Any]) -> Consumable:
    for key, value in values.items():
        setattr(consumable, key, value)
    await db.commit()
    await db.refresh(consumable)
    return consumable


async def delete_consumable(db: AsyncSession, consumable_id: int) -> bool:
    result = await db.execute(delete(Consumable).where(Consumable.id == consumable_id))
    await db.commit()
    return result.rowcount > 0


async def get_children(db: AsyncSession, parent_id: int) -> Sequence[NestedConsumable]:
    stmt = (
        select(NestedConsumable)
        .join(Consumable, Consumable.id == NestedConsumable.consumable_id)
        .where(NestedConsumable.parent_id == parent_id)
        .order_by(Consumable.name)
    )
    result = await db.execute(stmt)
    return result.scalars().all()


async def get_parents(db: AsyncSession, consumable_id: int) -> Sequence[NestedConsumable]:
    stmt = (
        select(NestedConsumable)
        .join(Consumable, Consumable.id == NestedConsumable.parent_id)
        .where(NestedConsumable.consumable_id == consumable_id)
        .order_by(Consumable.name)
    )
    result = await db.execute(stmt)
    return result.scalars().all()


async def get_nested(db: AsyncSession, parent_id: int, consumable_id: int) -> Optional[NestedConsumable]:
    stmt = (
        select(NestedConsumable)
        .where(NestedConsumable.parent_id == parent_id, NestedConsumable.consumable_id == consumable_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def _descendant_ids(db: AsyncSession, consumable_id: int) -> set[int]:
    seen: set[int] = set()
    frontier = {consumable_id}
    while frontier:
        result = await db.execute(
            select(NestedConsumable.consumable_id).where(NestedConsumable.parent_id.in_(frontier))
        )
        frontier = set(result.scalars().all()) - seen
        seen |= frontier
    return seen


async def add_child(db: AsyncSession, parent_id: int, values: dict[str, Any]) -> NestedConsumable:
    child_id = values["consumable_id"]
    if child_id == parent_id:
        raise NestingError("A consumable cannot contain itself")
    if parent_id in await _descendant_ids(db, child_id):
        raise NestingError("Nesting would create a cycle")

    nested = NestedConsumable(parent_id=parent_id, **values)
    db.add(nested)
    await db.commit()
    return await get_nested(db, parent_id, child_id)


async def update_nested(db: AsyncSession, nested: NestedConsumable, values: dict[str, Any]) -> NestedConsumable:
    for key, value in values.items():
        setattr(nested, key, value)
    await db.commit()
    return await get_nested(db, nested.parent_id, nested.consumable_id)


async def delete_nested(db: AsyncSession, parent_id: int, consumable_id: int) -> bool:
    result = await db.execute(
        delete(NestedConsumable).where(
            NestedConsumable.parent_id == parent_id, NestedConsumable.consumable_id == consumable_id
        )
    )
    await db.commit()
    return result.rowcount > 0


async def consumptions_using(db: AsyncSession, user_id: int, consumable_id: int) -> Sequence[Consumption]:
    stmt = (
        select(Consumption)
        .join(ConsumptionConsumable, ConsumptionConsumable.parent_id == Consumption.id)
        .where(Consumption.user_id == user_id, ConsumptionConsumable.consumable_id == consumable_id)
        .order_by(Consumption.time.desc())
    )
    result = await db.execute(stmt)
    return result.scalars().unique().all()
