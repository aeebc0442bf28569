import logging

from fastapi import APIRouter, Depends, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from penguin_nurse.api.common import not_found, raise_conflict, raise_validation
from penguin_nurse.auth import require_admin
from penguin_nurse.core.db import get_db_session
from penguin_nurse.models.users import User
from penguin_nurse.schemas.users import ChangeUser, NewUser, UserRead
from penguin_nurse.services import users as service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[UserRead])
async def list_users(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db_session)):
    return [UserRead.model_validate(user) for user in await service.list_users(db)]


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: int, admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db_session)):
    user = await service.get_user(db, user_id)
    if user is None:
        raise not_found("User")
    return UserRead.model_validate(user)


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: NewUser,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        user = await service.create_user(db, payload)
    except IntegrityError as exc:
        await raise_conflict(db, exc, "Username or OIDC id already in use")
    logger.info("Admin %s created user %s", admin.username, user.username)
    return UserRead.model_validate(user)


@router.patch("/{user_id}", response_model=UserRead)
async def change_user(
    user_id: int,
    change: ChangeUser,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    user = await service.get_user(db, user_id)
    if user is None:
        raise not_found("User")
    try:
        user = await service.update_user(db, user, change)
    except ValidationError as exc:
        raise_validation(exc)
    except IntegrityError as exc:
        await raise_conflict(db, exc, "Username or OIDC id already in use")
    return UserRead.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db_session)):
    if not await service.delete_user(db, user_id):
        raise not_found("User")
    logger.info("Admin %s deleted user %s", admin.username, user_id)
    return None
