"""Daily timeline: every entry a user logged between two day boundaries.

A day runs from ``day_start`` local time to ``day_start`` the next day, so a
wee at 02:00 still belongs to the previous evening.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Callable
from zoneinfo import ZoneInfo

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from penguin_nurse.models import Exercise, HealthMetric, Note, Poo, Reflux, Symptom, Wee, WeeUrge
from penguin_nurse.schemas.consumptions import ConsumptionWithItems
from penguin_nurse.schemas.entries import (
    ExerciseRead,
    HealthMetricRead,
    NoteRead,
    PooRead,
    RefluxRead,
    SymptomRead,
    WeeRead,
    WeeUrgeRead,
)
from penguin_nurse.schemas.timeline import Timeline, TimelineEntry
from penguin_nurse.services.consumptions import consumption_repository
from penguin_nurse.services.entries import EntryRepository
from penguin_nurse.utils.timezone import day_window, display_date


@dataclass(frozen=True)
class TimelineSource:
    kind: str
    key_prefix: str
    repository: Any
    to_data: Callable[[Any], BaseModel]


def _read(schema: type[BaseModel]) -> Callable[[Any], BaseModel]:
    return schema.model_validate


# Order here breaks ties between entries logged at the same instant.
SOURCES: tuple[TimelineSource, ...] = (
    TimelineSource("wee", "wee", EntryRepository(Wee), _read(WeeRead)),
    TimelineSource("wee_urge", "wee-urgency", EntryRepository(WeeUrge), _read(WeeUrgeRead)),
    TimelineSource("poo", "poo", EntryRepository(Poo), _read(PooRead)),
    TimelineSource("consumption", "consumption", consumption_repository, ConsumptionWithItems.from_row),
    TimelineSource("exercise", "exercise", EntryRepository(Exercise), _read(ExerciseRead)),
    TimelineSource("health_metric", "health-metric", EntryRepository(HealthMetric), _read(HealthMetricRead)),
    TimelineSource("symptom", "symptom", EntryRepository(Symptom), _read(SymptomRead)),
    TimelineSource("reflux", "reflux", EntryRepository(Reflux), _read(RefluxRead)),
    TimelineSource("note", "note", EntryRepository(Note), _read(NoteRead)),
)


async def collect_entries(
    db: AsyncSession, user_id: int, start: datetime, end: datetime
) -> list[TimelineEntry]:
    entries: list[TimelineEntry] = []
    for source in SOURCES:
        rows = await source.repository.list_between(db, user_id, start, end)
        for row in rows:
            entries.append(
                TimelineEntry(
                    key=f"{source.key_prefix}-{row.id}",
                    kind=source.kind,
                    time=row.local_time,
                    data=source.to_data(row).model_dump(mode="json"),
                )
            )
    # sort is stable, so equal times keep source order
    entries.sort(key=lambda entry: entry.time)
    return entries


async def build_timeline(
    db: AsyncSession, user_id: int, day: date, zone: ZoneInfo, day_start: time
) -> Timeline:
    start, end = day_window(day, zone, day_start)
    return Timeline(
        date=day,
        title=display_date(day),
        start=start,
        end=end,
        previous=day - timedelta(days=1),
        next=day + timedelta(days=1),
        entries=await collect_entries(db, user_id, start, end),
    )
