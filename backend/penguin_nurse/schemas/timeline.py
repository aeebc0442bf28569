from datetime import date, datetime
from typing import Any

from pydantic import BaseModel


class TimelineEntry(BaseModel):
    key: str
    kind: str
    time: datetime
    data: dict[str, Any]


class Timeline(BaseModel):
    date: date
    title: str
    start: datetime
    end: datetime
    previous: date
    next: date
    entries: list[TimelineEntry]
