from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Enum, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from penguin_nurse.core.db import Base, UTCDateTime
from penguin_nurse.models.common import ID_TYPE, TimestampMixin, sql_enum_values
from penguin_nurse.models.enums import ConsumableUnit


class Consumable(TimestampMixin, Base):
    __tablename__ = "consumables"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    brand: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    barcode: Mapped[Optional[str]] = mapped_column(String(64), index=True, nullable=True)
    is_organic: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    unit: Mapped[ConsumableUnit] = mapped_column(
        Enum(ConsumableUnit, name="consumable_unit", native_enum=False, values_callable=sql_enum_values, length=32),
        nullable=False,
    )
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # when a home made batch was made / finished
    created: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    destroyed: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)


class NestedConsumable(TimestampMixin, Base):
    """Ingredient ``consumable_id`` used to make ``parent_id``."""

    __tablename__ = "nested_consumables"

    parent_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("consumables.id", ondelete="CASCADE"), primary_key=True
    )
    consumable_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("consumables.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    quantity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    liquid_mls: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    consumable: Mapped[Consumable] = relationship(foreign_keys=[consumable_id], lazy="selectin")
    parent: Mapped[Consumable] = relationship(foreign_keys=[parent_id], lazy="selectin")

    __table_args__ = (CheckConstraint("parent_id <> consumable_id", name="ck_nested_not_self"),)
