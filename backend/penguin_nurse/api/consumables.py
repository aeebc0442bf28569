import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from penguin_nurse.api.common import not_found, raise_conflict, raise_validation
from penguin_nurse.auth import get_current_user
from penguin_nurse.core.db import get_db_session
from penguin_nurse.models.users import User
from penguin_nurse.schemas.common import merge_change
from penguin_nurse.schemas.consumables import (
    ConsumableChange,
    ConsumableCreate,
    ConsumableRead,
    NestedChange,
    NestedCreate,
    NestedFields,
    NestedWithConsumable,
    SearchParams,
)
from penguin_nurse.schemas.consumptions import ConsumptionWithItems
from penguin_nurse.services import consumables as service

logger = logging.getLogger(__name__)

router = APIRouter()


async def _existing(db: AsyncSession, consumable_id: int):
    consumable = await service.get_consumable(db, consumable_id)
    if consumable is None:
        raise not_found("Consumable")
    return consumable


@router.get("/search", response_model=list[ConsumableRead], summary="Search consumables")
async def search(
    params: SearchParams = Depends(),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    rows = await service.search_consumables(db, params)
    return [ConsumableRead.model_validate(row) for row in rows]


@router.post("", response_model=ConsumableRead, status_code=status.HTTP_201_CREATED)
async def create_consumable(
    payload: ConsumableCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    consumable = await service.create_consumable(db, payload.model_dump())
    return ConsumableRead.model_validate(consumable)


@router.get("/{consumable_id}", response_model=ConsumableRead)
async def get_consumable(
    consumable_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return ConsumableRead.model_validate(await _existing(db, consumable_id))


@router.patch("/{consumable_id}", response_model=ConsumableRead)
async def change_consumable(
    consumable_id: int,
    change: ConsumableChange,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    consumable = await _existing(db, consumable_id)
    try:
        merged = merge_change(consumable, change, ConsumableCreate)
    except ValidationError as exc:
        raise_validation(exc)
    consumable = await service.update_consumable(db, consumable, merged.model_dump())
    return ConsumableRead.model_validate(consumable)


@router.delete("/{consumable_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_consumable(
    consumable_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    if not await service.delete_consumable(db, consumable_id):
        raise not_found("Consumable")
    logger.info("User %s deleted consumable %s", user.username, consumable_id)
    return None


@router.get("/{consumable_id}/children", response_model=list[NestedWithConsumable])
async def list_children(
    consumable_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await _existing(db, consumable_id)
    links = await service.get_children(db, consumable_id)
    return [NestedWithConsumable.from_link(link, link.consumable) for link in links]


@router.get("/{consumable_id}/parents", response_model=list[NestedWithConsumable])
async def list_parents(
    consumable_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await _existing(db, consumable_id)
    links = await service.get_parents(db, consumable_id)
    return [NestedWithConsumable.from_link(link, link.parent) for link in links]


@router.post(
    "/{consumable_id}/children",
    response_model=NestedWithConsumable,
    status_code=status.HTTP_201_CREATED,
)
async def add_child(
    consumable_id: int,
    payload: NestedCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await _existing(db, consumable_id)
    await _existing(db, payload.consumable_id)
    if await service.get_nested(db, consumable_id, payload.consumable_id) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Consumable already nested")
    try:
        link = await service.add_child(db, consumable_id, payload.model_dump())
    except service.NestingError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except IntegrityError as exc:
        await raise_conflict(db, exc, "Consumable already nested")
    return NestedWithConsumable.from_link(link, link.consumable)


@router.patch("/{consumable_id}/children/{child_id}", response_model=NestedWithConsumable)
async def change_child(
    consumable_id: int,
    child_id: int,
    change: NestedChange,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    link = await service.get_nested(db, consumable_id, child_id)
    if link is None:
        raise not_found("Nested consumable")
    try:
        merged = merge_change(link, change, NestedFields)
    except ValidationError as exc:
        raise_validation(exc)
    link = await service.update_nested(db, link, merged.model_dump())
    return NestedWithConsumable.from_link(link, link.consumable)


@router.delete("/{consumable_id}/children/{child_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_child(
    consumable_id: int,
    child_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    if not await service.delete_nested(db, consumable_id, child_id):
        raise not_found("Nested consumable")
    return None


@router.get("/{consumable_id}/consumptions", response_model=list[ConsumptionWithItems])
async def list_consumptions(
    consumable_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await _existing(db, consumable_id)
    rows = await service.consumptions_using(db, user.id, consumable_id)
    return [ConsumptionWithItems.from_row(row) for row in rows]
