import logging
import secrets
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from penguin_nurse.core.db import utcnow
from penguin_nurse.models.sessions import SessionRecord

logger = logging.getLogger(__name__)


class SessionStoreError(Exception):
    pass


def _new_session_id() -> str:
    return secrets.token_urlsafe(32)


class SessionStore:
    """Server side session data keyed by the cookie value."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: dict[str, Any], expiry_date: datetime) -> str:
        session_id = _new_session_id()
        # Regenerate until the id is free
        while await self.db.get(SessionRecord, session_id) is not None:
            session_id = _new_session_id()
        self.db.add(SessionRecord(id=session_id, data=data, expiry_date=expiry_date))
        await self.db.commit()
        return session_id

    async def save(self, session_id: str, data: dict[str, Any], expiry_date: datetime) -> None:
        record = await self.db.get(SessionRecord, session_id)
        if record is None:
            self.db.add(SessionRecord(id=session_id, data=data, expiry_date=expiry_date))
        else:
            record.data = data
            record.expiry_date = expiry_date
        await self.db.commit()

    async def load(self, session_id: str) -> Optional[dict[str, Any]]:
        stmt = select(SessionRecord).where(
            SessionRecord.id == session_id, SessionRecord.expiry_date > utcnow()
        )
        result = await self.db.execute(stmt)
        record = result.scalar_one_or_none()
        return dict(record.data) if record else None

    async def touch(self, session_id: str, expiry_date: datetime) -> None:
        record = await self.db.get(SessionRecord, session_id)
        if record is None:
            raise SessionStoreError(f"Unknown session {session_id[:8]}...")
        record.expiry_date = expiry_date
        await self.db.commit()

    async def delete(self, session_id: str) -> None:
        await self.db.execute(delete(SessionRecord).where(SessionRecord.id == session_id))
        await self.db.commit()

    async def delete_expired(self) -> int:
        result = await self.db.execute(delete(SessionRecord).where(SessionRecord.expiry_date <= utcnow()))
        await self.db.commit()
        return result.rowcount
