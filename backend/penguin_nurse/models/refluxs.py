from datetime import timedelta
from typing import Optional

from sqlalchemy import CheckConstraint, Integer, Interval, String
from sqlalchemy.orm import Mapped, mapped_column

from penguin_nurse.core.db import Base
from penguin_nurse.models.common import EntryMixin


class Reflux(EntryMixin, Base):
    __tablename__ = "refluxs"

    duration: Mapped[timedelta] = mapped_column(Interval, nullable=False, default=timedelta(0))
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    severity: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (CheckConstraint("severity BETWEEN 0 AND 10", name="ck_refluxs_severity"),)
