from datetime import timedelta
from decimal import Decimal
from typing import Any, Optional

from pydantic import Field, create_model, field_validator, model_validator

from penguin_nurse.models.enums import ExerciseType
from penguin_nurse.models.symptoms import DESCRIBED_FIELDS, INTENSITY_FIELDS
from penguin_nurse.schemas.common import (
    Colour,
    DurationMixin,
    EntryCreate,
    EntryRead,
    blank_to_none,
    partial_model,
)


# --- Wees ---
class WeeCreate(DurationMixin, EntryCreate):
    urgency: int = Field(ge=0, le=5)
    mls: int = Field(ge=0, le=5000)
    leakage: int = Field(default=0, ge=0, le=10)
    colour: Colour


class WeeRead(EntryRead):
    duration: timedelta
    urgency: int
    mls: int
    leakage: int
    colour: Colour


# --- Wee urges ---
class WeeUrgeCreate(EntryCreate):
    urgency: int = Field(ge=0, le=5)


class WeeUrgeRead(EntryRead):
    urgency: int


# --- Poos ---
class PooCreate(DurationMixin, EntryCreate):
    urgency: int = Field(ge=0, le=5)
    quantity: int = Field(ge=0, le=5)
    bristol: int = Field(ge=0, le=7)
    colour: Colour


class PooRead(EntryRead):
    duration: timedelta
    urgency: int
    quantity: int
    bristol: int
    colour: Colour


# --- Exercises ---
class ExerciseCreate(DurationMixin, EntryCreate):
    location: Optional[str] = None
    distance: Optional[Decimal] = Field(default=None, ge=0, le=1000, decimal_places=2)
    calories: Optional[int] = Field(default=None, ge=0, le=10000)
    rpe: Optional[int] = Field(default=None, ge=1, le=10)
    exercise_type: ExerciseType

    @field_validator("location", mode="before")
    @classmethod
    def _strip_location(cls, v: Any) -> Any:
        return blank_to_none(v)


class ExerciseRead(EntryRead):
    duration: timedelta
    location: Optional[str] = None
    distance: Optional[Decimal] = None
    calories: Optional[int] = None
    rpe: Optional[int] = None
    rpe_title: Optional[str] = None
    exercise_type: ExerciseType


# --- Health metrics ---
class HealthMetricCreate(EntryCreate):
    pulse: Optional[int] = Field(default=None, ge=30, le=220)
    blood_glucose: Optional[Decimal] = Field(default=None, ge=0, le=50, decimal_places=1)
    systolic_bp: Optional[int] = Field(default=None, ge=50, le=300)
    diastolic_bp: Optional[int] = Field(default=None, ge=30, le=200)
    weight: Optional[Decimal] = Field(default=None, ge=0, le=500, decimal_places=1)
    height: Optional[int] = Field(default=None, ge=30, le=300)
    waist_circumference: Optional[Decimal] = Field(default=None, ge=30, le=300, decimal_places=1)

    @model_validator(mode="after")
    def _blood_pressure_pair(self) -> "HealthMetricCreate":
        if (self.systolic_bp is None) != (self.diastolic_bp is None):
            raise ValueError("systolic_bp and diastolic_bp must be given together")
        if self.systolic_bp is not None and self.systolic_bp <= self.diastolic_bp:
            raise ValueError("systolic_bp must be greater than diastolic_bp")
        return self


class HealthMetricRead(EntryRead):
    pulse: Optional[int] = None
    blood_glucose: Optional[Decimal] = None
    systolic_bp: Optional[int] = None
    diastolic_bp: Optional[int] = None
    weight: Optional[Decimal] = None
    height: Optional[int] = None
    waist_circumference: Optional[Decimal] = None


# --- Symptoms ---
class _SymptomRules(EntryCreate):
    nasal_symptom_description: Optional[str] = None
    abdominal_pain_location: Optional[str] = None
    dental_pain_description: Optional[str] = None

    @field_validator(*DESCRIBED_FIELDS, mode="before")
    @classmethod
    def _strip_descriptions(cls, v: Any) -> Any:
        return blank_to_none(v)

    @model_validator(mode="after")
    def _descriptions_follow_intensity(self):
        for description, intensity in DESCRIBED_FIELDS.items():
            level = getattr(self, intensity)
            text = getattr(self, description)
            if level > 0 and text is None:
                raise ValueError(f"{description} is required when {intensity} is above 0")
            if level == 0 and text is not None:
                raise ValueError(f"{description} must be empty when {intensity} is 0")
        return self


SymptomCreate = create_model(
    "SymptomCreate",
    __base__=_SymptomRules,
    **{name: (int, Field(default=0, ge=0, le=10)) for name in INTENSITY_FIELDS},
)

SymptomRead = create_model(
    "SymptomRead",
    __base__=EntryRead,
    nasal_symptom_description=(Optional[str], None),
    abdominal_pain_location=(Optional[str], None),
    dental_pain_description=(Optional[str], None),
    **{name: (int, 0) for name in INTENSITY_FIELDS},
)


# --- Refluxs ---
class RefluxCreate(DurationMixin, EntryCreate):
    location: Optional[str] = None
    severity: int = Field(ge=0, le=10)

    @field_validator("location", mode="before")
    @classmethod
    def _strip_location(cls, v: Any) -> Any:
        return blank_to_none(v)


class RefluxRead(EntryRead):
    duration: timedelta
    location: Optional[str] = None
    severity: int


# --- Notes ---
class NoteCreate(EntryCreate):
    pass


class NoteRead(EntryRead):
    pass


WeeChange = partial_model(WeeCreate, "WeeChange")
WeeUrgeChange = partial_model(WeeUrgeCreate, "WeeUrgeChange")
PooChange = partial_model(PooCreate, "PooChange")
ExerciseChange = partial_model(ExerciseCreate, "ExerciseChange")
HealthMetricChange = partial_model(HealthMetricCreate, "HealthMetricChange")
SymptomChange = partial_model(SymptomCreate, "SymptomChange")
RefluxChange = partial_model(RefluxCreate, "RefluxChange")
NoteChange = partial_model(NoteCreate, "NoteChange")
