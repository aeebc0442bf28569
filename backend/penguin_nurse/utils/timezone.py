from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo


def to_local(dt: datetime, tz: ZoneInfo) -> datetime:
    """
    Converts a datetime to the local timezone.
    Assumes naive datetimes are UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz)


def day_window(day: date, tz: ZoneInfo, day_start: time) -> tuple[datetime, datetime]:
    """
    UTC bounds [start, end) of the local day ``day``.
    Wall clock times skipped or repeated by a DST change resolve with fold=0.
    """
    start = datetime.combine(day, day_start, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), day_start, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def date_for_time(dt: datetime, tz: ZoneInfo, day_start: time) -> date:
    """
    The local day whose window contains ``dt``; before ``day_start`` counts
    as the previous day.
    """
    local_dt = to_local(dt, tz)
    if local_dt.time() < day_start:
        return local_dt.date() - timedelta(days=1)
    return local_dt.date()


def display_date(day: date) -> str:
    """
    Returns e.g. "Monday, 3 February, 2025".
    """
    return f"{day:%A}, {day.day} {day:%B}, {day.year}"
