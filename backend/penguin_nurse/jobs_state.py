import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from penguin_nurse.core.scheduler import get_scheduler

logger = logging.getLogger(__name__)

JOB_IDS = ("session_purge", "oidc_refresh")


@dataclass
class JobStatus:
    last_run_at: Optional[datetime] = None
    last_ok: Optional[bool] = None
    last_error: Optional[str] = None
    next_run_at: Optional[datetime] = None
    run_count: int = 0

    def as_json(self) -> dict[str, object]:
        data = asdict(self)
        for key in ("last_run_at", "next_run_at"):
            if data[key] is not None:
                data[key] = data[key].astimezone(timezone.utc).isoformat()
        return data


_statuses: dict[str, JobStatus] = {job_id: JobStatus() for job_id in JOB_IDS}


def status_for(job_id: str) -> JobStatus:
    return _statuses.setdefault(job_id, JobStatus())


def refresh_next_run(job_id: str) -> None:
    """Copy the scheduler's next fire time; left alone when no scheduler runs."""
    scheduler = get_scheduler()
    if scheduler is None:
        return
    job = scheduler.get_job(job_id)
    status_for(job_id).next_run_at = job.next_run_time if job else None


def get_all_states() -> dict[str, dict[str, object]]:
    for job_id in _statuses:
        refresh_next_run(job_id)
    return {job_id: status.as_json() for job_id, status in _statuses.items()}


async def run_job(job_id: str, func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
    status = status_for(job_id)
    status.last_run_at = datetime.now(timezone.utc)
    status.run_count += 1
    try:
        result = await func(*args, **kwargs)
    except Exception as exc:
        status.last_ok = False
        status.last_error = str(exc)
        logger.exception("Job %s failed", job_id)
        raise
    else:
        status.last_ok = True
        status.last_error = None
        return result
    finally:
        refresh_next_run(job_id)
