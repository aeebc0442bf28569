from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Text
from sqlalchemy.orm import Mapped, mapped_column

from penguin_nurse.core.db import Base, UTCDateTime


class SessionRecord(Base):
    __tablename__ = "session"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    expiry_date: Mapped[datetime] = mapped_column(UTCDateTime, index=True, nullable=False)
