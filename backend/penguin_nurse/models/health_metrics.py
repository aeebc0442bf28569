from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from penguin_nurse.core.db import Base
from penguin_nurse.models.common import EntryMixin


class HealthMetric(EntryMixin, Base):
    __tablename__ = "health_metrics"

    pulse: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    blood_glucose: Mapped[Optional[Decimal]] = mapped_column(Numeric(4, 1), nullable=True)
    systolic_bp: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    diastolic_bp: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    weight: Mapped[Optional[Decimal]] = mapped_column(Numeric(4, 1), nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    waist_circumference: Mapped[Optional[Decimal]] = mapped_column(Numeric(4, 1), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "(systolic_bp IS NULL) = (diastolic_bp IS NULL)",
            name="ck_health_metrics_bp_pair",
        ),
    )
