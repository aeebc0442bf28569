import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from penguin_nurse.core.security import hash_password
from penguin_nurse.models.users import User
from penguin_nurse.schemas.common import changed_values, row_values
from penguin_nurse.schemas.users import ChangeUser, NewUser, PasswordField, UserFields

logger = logging.getLogger(__name__)


@dataclass
class OidcUserInfo:
    sub: str
    name: str
    email: str
    is_admin: bool


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    return await db.get(User, user_id)


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def list_users(db: AsyncSession) -> Sequence[User]:
    result = await db.execute(select(User).order_by(User.username))
    return result.scalars().all()


async def create_user(db: AsyncSession, new_user: NewUser) -> User:
    values = new_user.model_dump()
    values["password"] = await run_in_threadpool(hash_password, new_user.password)
    user = User(**values)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Created user %s (%s)", user.id, user.username)
    return user


async def update_user(db: AsyncSession, user: User, change: ChangeUser) -> User:
    """Apply a partial change; raises pydantic ValidationError on bad merges."""
    changes = changed_values(change)
    password = changes.pop("password", None)
    merged = UserFields.model_validate({**row_values(user, UserFields), **changes})
    for key in changes:
        setattr(user, key, getattr(merged, key))
    if "password" in change.model_fields_set:
        checked = PasswordField.model_validate({"password": password})
        user.password = await run_in_threadpool(hash_password, checked.password)
    await db.commit()
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, user_id: int) -> bool:
    result = await db.execute(delete(User).where(User.id == user_id))
    await db.commit()
    return result.rowcount > 0


async def ensure_initial_admin(db: AsyncSession, username: str, password: Optional[str]) -> Optional[User]:
    """Create the first admin when the users table is empty and a password is configured."""
    if not password:
        return None
    existing = await db.execute(select(User.id).limit(1))
    if existing.first() is not None:
        return None
    user = await create_user(
        db,
        NewUser(
            username=username,
            password=password,
            full_name=username,
            email=f"{username}@localhost",
            is_admin=True,
        ),
    )
    logger.warning("Seeded initial admin user %r; change its password", username)
    return user


async def upsert_oidc_user(db: AsyncSession, info: OidcUserInfo) -> User:
    """Find the account for an OIDC identity, by subject then by email."""
    result = await db.execute(select(User).where(User.oidc_id == info.sub))
    user = result.scalar_one_or_none()
    if user is None:
        result = await db.execute(select(User).where(User.email == info.email).order_by(User.id).limit(1))
        user = result.scalar_one_or_none()

    if user is not None:
        user.oidc_id = info.sub
        user.is_admin = info.is_admin
        await db.commit()
        await db.refresh(user)
        logger.info("OIDC login for existing user %s", user.username)
        return user

    user = User(
        username=info.name,
        password="",
        full_name=info.name,
        oidc_id=info.sub,
        email=info.email,
        is_admin=info.is_admin,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Created user %s from OIDC subject %s", user.username, info.sub)
    return user
