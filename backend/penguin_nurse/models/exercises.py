from datetime import timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, Enum, Integer, Interval, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from penguin_nurse.core.db import Base
from penguin_nurse.models.common import EntryMixin, sql_enum_values
from penguin_nurse.models.enums import ExerciseType, rpe_title


class Exercise(EntryMixin, Base):
    __tablename__ = "exercises"

    duration: Mapped[timedelta] = mapped_column(Interval, nullable=False, default=timedelta(0))
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    distance: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    calories: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    rpe: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    exercise_type: Mapped[ExerciseType] = mapped_column(
        Enum(ExerciseType, name="exercise_type", native_enum=False, values_callable=sql_enum_values, length=32),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("rpe IS NULL OR rpe BETWEEN 1 AND 10", name="ck_exercises_rpe"),
        CheckConstraint("calories IS NULL OR calories BETWEEN 0 AND 10000", name="ck_exercises_calories"),
    )

    @property
    def rpe_title(self) -> Optional[str]:
        return rpe_title(self.rpe) if self.rpe is not None else None
