from datetime import datetime, timezone
from typing import NoReturn

from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession


def as_utc(value: datetime) -> datetime:
    """Query string times without an offset are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def check_range(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    start, end = as_utc(start), as_utc(end)
    if end < start:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end is before start")
    return start, end


def raise_validation(exc: ValidationError) -> NoReturn:
    errors = exc.errors(include_url=False, include_context=False)
    for error in errors:
        error["loc"] = ("body", *error["loc"])
    raise RequestValidationError(errors) from exc


async def raise_conflict(db: AsyncSession, exc: IntegrityError, detail: str) -> NoReturn:
    await db.rollback()
    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail) from exc


def not_found(label: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
