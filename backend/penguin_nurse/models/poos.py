from datetime import timedelta

from sqlalchemy import CheckConstraint, Integer, Interval
from sqlalchemy.orm import Mapped, mapped_column

from penguin_nurse.core.db import Base
from penguin_nurse.models.common import ColourMixin, EntryMixin


class Poo(EntryMixin, ColourMixin, Base):
    __tablename__ = "poos"

    duration: Mapped[timedelta] = mapped_column(Interval, nullable=False, default=timedelta(0))
    urgency: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    bristol: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("urgency BETWEEN 0 AND 5", name="ck_poos_urgency"),
        CheckConstraint("quantity BETWEEN 0 AND 5", name="ck_poos_quantity"),
        CheckConstraint("bristol BETWEEN 0 AND 7", name="ck_poos_bristol"),
    )
