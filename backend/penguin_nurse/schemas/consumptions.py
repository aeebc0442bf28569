from datetime import timedelta
from typing import Any, Optional

from pydantic import BaseModel, Field

from penguin_nurse.models.enums import ConsumptionType
from penguin_nurse.schemas.common import DurationMixin, EntryCreate, EntryRead, partial_model
from penguin_nurse.schemas.consumables import NestedWithConsumable


class ConsumptionCreate(DurationMixin, EntryCreate):
    consumption_type: ConsumptionType = ConsumptionType.DIGEST
    liquid_mls: Optional[float] = Field(default=None, ge=0)


ConsumptionChange = partial_model(ConsumptionCreate, "ConsumptionChange")


class ConsumptionRead(EntryRead):
    duration: timedelta
    consumption_type: ConsumptionType
    liquid_mls: Optional[float] = None


class ConsumptionWithItems(BaseModel):
    consumption: ConsumptionRead
    items: list[NestedWithConsumable]

    @classmethod
    def from_row(cls, row: Any) -> "ConsumptionWithItems":
        return cls(
            consumption=ConsumptionRead.model_validate(row),
            items=[NestedWithConsumable.from_link(item, item.consumable) for item in row.items],
        )
