from fastapi import Depends, HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from penguin_nurse.api.common import not_found, raise_conflict, raise_validation
from penguin_nurse.api.entries import EntryKind, build_entry_router
from penguin_nurse.auth import get_current_user
from penguin_nurse.core.db import get_db_session
from penguin_nurse.models.users import User
from penguin_nurse.schemas.common import merge_change
from penguin_nurse.schemas.consumables import NestedChange, NestedCreate, NestedFields, NestedWithConsumable
from penguin_nurse.schemas.consumptions import ConsumptionChange, ConsumptionCreate, ConsumptionWithItems
from penguin_nurse.services import consumables as consumables_service
from penguin_nurse.services.consumptions import consumption_repository

CONSUMPTION_KIND = EntryKind(
    "Consumption",
    ConsumptionCreate,
    ConsumptionChange,
    ConsumptionWithItems,
    consumption_repository,
    present=ConsumptionWithItems.from_row,
)

router = build_entry_router(CONSUMPTION_KIND)


async def _owned_consumption(db: AsyncSession, user: User, consumption_id: int):
    consumption = await consumption_repository.get(db, user.id, consumption_id)
    if consumption is None:
        raise not_found("Consumption")
    return consumption


@router.get("/{consumption_id}/items", response_model=list[NestedWithConsumable])
async def list_items(
    consumption_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    consumption = await _owned_consumption(db, user, consumption_id)
    return [NestedWithConsumable.from_link(item, item.consumable) for item in consumption.items]


@router.post("/{consumption_id}/items", response_model=NestedWithConsumable, status_code=status.HTTP_201_CREATED)
async def add_item(
    consumption_id: int,
    payload: NestedCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    consumption = await _owned_consumption(db, user, consumption_id)
    if await consumables_service.get_consumable(db, payload.consumable_id) is None:
        raise not_found("Consumable")
    if await consumption_repository.get_item(db, consumption_id, payload.consumable_id) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Consumable already in consumption")
    try:
        item = await consumption_repository.add_item(db, consumption, payload.model_dump())
    except IntegrityError as exc:
        await raise_conflict(db, exc, "Consumable already in consumption")
    return NestedWithConsumable.from_link(item, item.consumable)


@router.patch("/{consumption_id}/items/{consumable_id}", response_model=NestedWithConsumable)
async def change_item(
    consumption_id: int,
    consumable_id: int,
    change: NestedChange,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await _owned_consumption(db, user, consumption_id)
    item = await consumption_repository.get_item(db, consumption_id, consumable_id)
    if item is None:
        raise not_found("Consumption item")
    try:
        merged = merge_change(item, change, NestedFields)
    except ValidationError as exc:
        raise_validation(exc)
    item = await consumption_repository.update_item(db, item, merged.model_dump())
    return NestedWithConsumable.from_link(item, item.consumable)


@router.delete("/{consumption_id}/items/{consumable_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    consumption_id: int,
    consumable_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await _owned_consumption(db, user, consumption_id)
    if not await consumption_repository.delete_item(db, consumption_id, consumable_id):
        raise not_found("Consumption item")
    return None
