from datetime import timedelta

from sqlalchemy import CheckConstraint, Integer, Interval
from sqlalchemy.orm import Mapped, mapped_column

from penguin_nurse.core.db import Base
from penguin_nurse.models.common import ColourMixin, EntryMixin


class Wee(EntryMixin, ColourMixin, Base):
    __tablename__ = "wees"

    duration: Mapped[timedelta] = mapped_column(Interval, nullable=False, default=timedelta(0))
    urgency: Mapped[int] = mapped_column(Integer, nullable=False)
    mls: Mapped[int] = mapped_column(Integer, nullable=False)
    leakage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("urgency BETWEEN 0 AND 5", name="ck_wees_urgency"),
        CheckConstraint("mls BETWEEN 0 AND 5000", name="ck_wees_mls"),
        CheckConstraint("leakage BETWEEN 0 AND 10", name="ck_wees_leakage"),
    )


class WeeUrge(EntryMixin, Base):
    __tablename__ = "wee_urges"

    urgency: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (CheckConstraint("urgency BETWEEN 0 AND 5", name="ck_wee_urges_urgency"),)
