import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from penguin_nurse.core.db import get_db_session, utcnow
from penguin_nurse.core.security import session_auth_hash
from penguin_nurse.core.settings import Settings, get_settings
from penguin_nurse.models.users import User
from penguin_nurse.services.session_store import SessionStore

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"
SESSION_HASH_KEY = "auth_hash"


def session_expiry(settings: Settings) -> datetime:
    return utcnow() + timedelta(days=settings.security.session_days)


def set_session_cookie(response: Response, session_id: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.security.session_cookie_name,
        value=session_id,
        max_age=settings.security.session_days * 24 * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.security.cookie_secure,
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(key=settings.security.session_cookie_name, path="/")


async def start_session(db: AsyncSession, response: Response, user: User, settings: Settings) -> str:
    store = SessionStore(db)
    session_id = await store.create(
        {SESSION_USER_KEY: user.id, SESSION_HASH_KEY: session_auth_hash(user.password)},
        session_expiry(settings),
    )
    set_session_cookie(response, session_id, settings)
    logger.info("Started session for user %s", user.username)
    return session_id


async def end_session(db: AsyncSession, request: Request, response: Response, settings: Settings) -> None:
    session_id = request.cookies.get(settings.security.session_cookie_name)
    if session_id:
        await SessionStore(db).delete(session_id)
    clear_session_cookie(response, settings)


async def get_optional_user(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> Optional[User]:
    session_id = request.cookies.get(settings.security.session_cookie_name)
    if not session_id:
        return None

    store = SessionStore(db)
    data = await store.load(session_id)
    if data is None:
        return None

    user_id = data.get(SESSION_USER_KEY)
    user = await db.get(User, user_id) if user_id is not None else None
    if user is None or data.get(SESSION_HASH_KEY) != session_auth_hash(user.password):
        # user deleted or password changed since login
        await store.delete(session_id)
        clear_session_cookie(response, settings)
        return None

    # expiry is on inactivity
    await store.touch(session_id, session_expiry(settings))
    set_session_cookie(response, session_id, settings)
    return user


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not logged in")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not admin")
    return user


def ensure_same_user(user: User, user_id: Optional[int]) -> None:
    if user_id is not None and user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User ID does not match the logged in user",
        )
