import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from penguin_nurse.api.common import check_range, not_found, raise_conflict, raise_validation
from penguin_nurse.auth import ensure_same_user, get_current_user
from penguin_nurse.core.db import get_db_session
from penguin_nurse.models import Exercise, HealthMetric, Note, Poo, Reflux, Symptom, Wee, WeeUrge
from penguin_nurse.models.users import User
from penguin_nurse.schemas import entries as schemas
from penguin_nurse.schemas.common import merge_change, to_columns
from penguin_nurse.services.entries import EntryRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryKind:
    label: str
    create: type[BaseModel]
    change: type[BaseModel]
    read: Any
    repository: EntryRepository
    present: Optional[Callable[[Any], Any]] = field(default=None)

    def to_read(self, row: Any) -> Any:
        if self.present is not None:
            return self.present(row)
        return self.read.model_validate(row)


def build_entry_router(kind: EntryKind) -> APIRouter:
    """List, get, create, change and delete routes for one entry kind."""
    router = APIRouter()
    repo = kind.repository

    @router.get("", response_model=list[kind.read], summary=f"List {kind.label} entries in a time range")
    async def list_entries(
        start: datetime,
        end: datetime,
        user_id: Optional[int] = None,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_session),
    ):
        ensure_same_user(user, user_id)
        start, end = check_range(start, end)
        rows = await repo.list_between(db, user.id, start, end)
        return [kind.to_read(row) for row in rows]

    @router.get("/{entry_id}", response_model=kind.read, summary=f"Get a {kind.label}")
    async def get_entry(
        entry_id: int,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_session),
    ):
        row = await repo.get(db, user.id, entry_id)
        if row is None:
            raise not_found(kind.label)
        return kind.to_read(row)

    @router.post("", response_model=kind.read, status_code=status.HTTP_201_CREATED, summary=f"Create a {kind.label}")
    async def create_entry(
        payload: kind.create,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_session),
    ):
        ensure_same_user(user, payload.user_id)
        try:
            row = await repo.create(db, to_columns(payload))
        except IntegrityError as exc:
            await raise_conflict(db, exc, f"{kind.label} conflicts with existing data")
        return kind.to_read(row)

    @router.patch("/{entry_id}", response_model=kind.read, summary=f"Change a {kind.label}")
    async def change_entry(
        entry_id: int,
        change: kind.change,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_session),
    ):
        if "user_id" in change.model_fields_set:
            ensure_same_user(user, change.user_id)
        row = await repo.get(db, user.id, entry_id)
        if row is None:
            raise not_found(kind.label)
        try:
            merged = merge_change(row, change, kind.create)
        except ValidationError as exc:
            raise_validation(exc)
        try:
            row = await repo.update(db, row, to_columns(merged))
        except IntegrityError as exc:
            await raise_conflict(db, exc, f"{kind.label} conflicts with existing data")
        return kind.to_read(row)

    @router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT, summary=f"Delete a {kind.label}")
    async def delete_entry(
        entry_id: int,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db_session),
    ):
        if not await repo.delete(db, user.id, entry_id):
            raise not_found(kind.label)
        return None

    return router


ENTRY_KINDS: dict[str, EntryKind] = {
    "wees": EntryKind("Wee", schemas.WeeCreate, schemas.WeeChange, schemas.WeeRead, EntryRepository(Wee)),
    "wee_urges": EntryKind(
        "Wee urge", schemas.WeeUrgeCreate, schemas.WeeUrgeChange, schemas.WeeUrgeRead, EntryRepository(WeeUrge)
    ),
    "poos": EntryKind("Poo", schemas.PooCreate, schemas.PooChange, schemas.PooRead, EntryRepository(Poo)),
    "exercises": EntryKind(
        "Exercise", schemas.ExerciseCreate, schemas.ExerciseChange, schemas.ExerciseRead, EntryRepository(Exercise)
    ),
    "health_metrics": EntryKind(
        "Health metric",
        schemas.HealthMetricCreate,
        schemas.HealthMetricChange,
        schemas.HealthMetricRead,
        EntryRepository(HealthMetric),
    ),
    "symptoms": EntryKind(
        "Symptom", schemas.SymptomCreate, schemas.SymptomChange, schemas.SymptomRead, EntryRepository(Symptom)
    ),
    "refluxs": EntryKind(
        "Reflux", schemas.RefluxCreate, schemas.RefluxChange, schemas.RefluxRead, EntryRepository(Reflux)
    ),
    "notes": EntryKind("Note", schemas.NoteCreate, schemas.NoteChange, schemas.NoteRead, EntryRepository(Note)),
}
