import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from penguin_nurse.api.common import raise_conflict
from penguin_nurse.auth import end_session, get_optional_user, start_session
from penguin_nurse.core.db import get_db_session
from penguin_nurse.core.security import rate_limiter, verify_password
from penguin_nurse.core.settings import Settings, get_settings
from penguin_nurse.models.users import User
from penguin_nurse.schemas.users import LoginRequest, UserRead
from penguin_nurse.services import users as users_service
from penguin_nurse.services.oidc import OidcError, get_oidc_client

logger = logging.getLogger(__name__)

router = APIRouter()
oidc_redirect_router = APIRouter()


class OidcStatus(BaseModel):
    enabled: bool


class OidcLoginUrl(BaseModel):
    url: str


def safe_redirect_target(target: Optional[str]) -> str:
    """Only same site absolute paths; anything else lands on the home page."""
    if not target or not target.startswith("/") or target.startswith("//") or "\\" in target:
        return "/"
    return target


@router.post("/login", response_model=UserRead, summary="Login with username and password")
async def login(
    request: Request,
    response: Response,
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    rate_limiter.guard(request.client.host if request.client else "anonymous")

    user = await users_service.get_user_by_username(db, payload.username)
    password_hash = user.password if user else ""
    if not user or not await run_in_threadpool(verify_password, payload.password, password_hash):
        logger.warning("Failed login for %r", payload.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    await start_session(db, response, user, settings)
    return UserRead.model_validate(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Logout")
async def logout(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    await end_session(db, request, response, settings)
    return response


@router.get("/me", response_model=Optional[UserRead], summary="Logged in user, if any")
async def me(user: Optional[User] = Depends(get_optional_user)):
    return UserRead.model_validate(user) if user else None


@router.get("/oidc", response_model=OidcStatus)
async def oidc_status():
    return OidcStatus(enabled=get_oidc_client() is not None)


@router.get("/oidc/login", response_model=OidcLoginUrl)
async def oidc_login(origin: str = "/"):
    client = get_oidc_client()
    if client is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="OIDC not available")
    return OidcLoginUrl(url=client.auth_url(safe_redirect_target(origin)))


@oidc_redirect_router.get("/openid_connect_redirect_uri", include_in_schema=False)
async def oidc_callback(
    code: str,
    state: Optional[str] = None,
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    client = get_oidc_client()
    if client is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="OIDC not available")

    try:
        info = await client.login(code)
    except OidcError as exc:
        logger.warning("OIDC login failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))

    try:
        user = await users_service.upsert_oidc_user(db, info)
    except IntegrityError as exc:
        await raise_conflict(db, exc, f"Username {info.name!r} already taken")
    response = RedirectResponse(safe_redirect_target(state), status_code=status.HTTP_303_SEE_OTHER)
    await start_session(db, response, user, settings)
    return response
