from datetime import timedelta
from typing import Optional

from sqlalchemy import Enum, Float, ForeignKey, Interval, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from penguin_nurse.core.db import Base
from penguin_nurse.models.common import ID_TYPE, EntryMixin, TimestampMixin, sql_enum_values
from penguin_nurse.models.consumables import Consumable
from penguin_nurse.models.enums import ConsumptionType


class Consumption(EntryMixin, Base):
    __tablename__ = "consumptions"

    duration: Mapped[timedelta] = mapped_column(Interval, nullable=False, default=timedelta(0))
    consumption_type: Mapped[ConsumptionType] = mapped_column(
        Enum(ConsumptionType, name="consumption_type", native_enum=False, values_callable=sql_enum_values, length=32),
        nullable=False,
        default=ConsumptionType.DIGEST,
    )
    liquid_mls: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    items: Mapped[list["ConsumptionConsumable"]] = relationship(
        back_populates="parent",
        passive_deletes=True,
        lazy="selectin",
        order_by="ConsumptionConsumable.created_at",
    )


class ConsumptionConsumable(TimestampMixin, Base):
    __tablename__ = "consumption_consumables"

    parent_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("consumptions.id", ondelete="CASCADE"), primary_key=True
    )
    consumable_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("consumables.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    quantity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    liquid_mls: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    parent: Mapped[Consumption] = relationship(back_populates="items")
    consumable: Mapped[Consumable] = relationship(lazy="selectin")
