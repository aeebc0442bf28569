from datetime import datetime
from typing import Any, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, computed_field, field_validator

from penguin_nurse.models.enums import ConsumableUnit
from penguin_nurse.schemas.common import blank_to_none, partial_model


class ConsumableCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    brand: Optional[str] = None
    barcode: Optional[str] = None
    is_organic: bool = False
    unit: ConsumableUnit
    comments: Optional[str] = None
    created: Optional[AwareDatetime] = None
    destroyed: Optional[AwareDatetime] = None

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("brand", "barcode", "comments", mode="before")
    @classmethod
    def _blank(cls, v: Any) -> Any:
        return blank_to_none(v)


ConsumableChange = partial_model(ConsumableCreate, "ConsumableChange")


class ConsumableRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    brand: Optional[str] = None
    barcode: Optional[str] = None
    is_organic: bool
    unit: ConsumableUnit
    comments: Optional[str] = None
    created: Optional[datetime] = None
    destroyed: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def unit_postfix(self) -> str:
        return self.unit.postfix


class NestedFields(BaseModel):
    """Amount of an ingredient; shared by recipes and consumptions."""

    quantity: Optional[float] = Field(default=None, ge=0)
    liquid_mls: Optional[float] = Field(default=None, ge=0)
    comments: Optional[str] = None

    @field_validator("comments", mode="before")
    @classmethod
    def _blank(cls, v: Any) -> Any:
        return blank_to_none(v)


class NestedCreate(NestedFields):
    consumable_id: int


NestedChange = partial_model(NestedFields, "NestedChange")


class NestedRead(NestedFields):
    model_config = ConfigDict(from_attributes=True)

    parent_id: int
    consumable_id: int


class NestedWithConsumable(BaseModel):
    nested: NestedRead
    consumable: ConsumableRead

    @classmethod
    def from_link(cls, link: Any, consumable: Any) -> "NestedWithConsumable":
        return cls(nested=NestedRead.model_validate(link), consumable=ConsumableRead.model_validate(consumable))


class SearchParams(BaseModel):
    query: str = ""
    include_only_created: bool = False
    include_destroyed: bool = False
    limit: int = Field(default=10, ge=1, le=100)
