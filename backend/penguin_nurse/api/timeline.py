from datetime import date
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from penguin_nurse.auth import get_current_user
from penguin_nurse.core.db import get_db_session, utcnow
from penguin_nurse.core.settings import Settings, get_settings
from penguin_nurse.models.users import User
from penguin_nurse.schemas.timeline import Timeline
from penguin_nurse.services.timeline import build_timeline
from penguin_nurse.utils.timezone import date_for_time

router = APIRouter()


def _zone(name: Optional[str], settings: Settings) -> ZoneInfo:
    if not name:
        return settings.timeline.zone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown timezone {name!r}")


@router.get("", response_model=Timeline, summary="Everything logged during one day")
async def get_timeline(
    day: Optional[date] = Query(default=None, alias="date"),
    tz: Optional[str] = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    zone = _zone(tz, settings)
    day_start = settings.timeline.day_start
    if day is None:
        day = date_for_time(utcnow(), zone, day_start)
    return await build_timeline(db, user.id, day, zone, day_start)
