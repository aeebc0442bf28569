from datetime import datetime, timedelta, timezone
from typing import Any, Optional, TypeVar

from pydantic import AliasChoices, AwareDatetime, BaseModel, ConfigDict, Field, create_model, field_validator

ModelT = TypeVar("ModelT", bound=BaseModel)

# schema field -> ORM attribute it is read back from
ROW_ATTRIBUTES: dict[str, str] = {"time": "local_time"}


def blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class Colour(BaseModel):
    hue: float = Field(ge=-180, le=360)
    saturation: float = Field(ge=0, le=1)
    value: float = Field(ge=0, le=1)


class EntryCreate(BaseModel):
    user_id: int
    time: AwareDatetime
    comments: Optional[str] = None

    @field_validator("comments", mode="before")
    @classmethod
    def _strip_comments(cls, v: Any) -> Any:
        return blank_to_none(v)


class DurationMixin(BaseModel):
    duration: timedelta = Field(default=timedelta(0))

    @field_validator("duration")
    @classmethod
    def _non_negative(cls, v: timedelta) -> timedelta:
        if v < timedelta(0):
            raise ValueError("duration must not be negative")
        return v


class EntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    user_id: int
    time: datetime = Field(validation_alias=AliasChoices("local_time", "time"))
    comments: Optional[str] = None
    created_at: datetime
    updated_at: datetime


def partial_model(model: type[ModelT], name: str) -> type[BaseModel]:
    """Every field of ``model`` made optional and defaulting to unset.

    Only ``model_fields_set`` matters on the result: an absent key leaves the
    column alone while an explicit ``null`` clears it. Range and cross field
    rules are enforced when the merged record is validated against ``model``.
    """
    fields: dict[str, Any] = {
        field_name: (Optional[info.annotation], Field(default=None, description=info.description))
        for field_name, info in model.model_fields.items()
    }
    return create_model(name, **fields)


def changed_values(change: BaseModel) -> dict[str, Any]:
    return {key: getattr(change, key) for key in change.model_fields_set}


def row_values(row: Any, model: type[BaseModel]) -> dict[str, Any]:
    """Current values of an ORM row keyed the way ``model`` expects them."""
    return {
        field_name: getattr(row, ROW_ATTRIBUTES.get(field_name, field_name))
        for field_name in model.model_fields
    }


def merge_change(row: Any, change: BaseModel, model: type[ModelT]) -> ModelT:
    merged = {**row_values(row, model), **changed_values(change)}
    return model.model_validate(merged)


def to_columns(payload: BaseModel) -> dict[str, Any]:
    """Flatten a validated create schema into ORM column values."""
    values = payload.model_dump()
    when = values.pop("time", None)
    if when is not None:
        values["time"] = when.astimezone(timezone.utc)
        values["utc_offset"] = int(when.utcoffset().total_seconds())
    colour = values.pop("colour", None)
    if colour is not None:
        values["colour_hue"] = colour["hue"]
        values["colour_saturation"] = colour["saturation"]
        values["colour_value"] = colour["value"]
    return values
