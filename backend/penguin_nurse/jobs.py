import logging

from apscheduler.triggers.interval import IntervalTrigger

from penguin_nurse import jobs_state
from penguin_nurse.core.db import get_session_factory
from penguin_nurse.core.scheduler import init_scheduler, schedule_task
from penguin_nurse.core.settings import get_settings
from penguin_nurse.services.oidc import refresh_oidc_client
from penguin_nurse.services.session_store import SessionStore

logger = logging.getLogger(__name__)

SESSION_PURGE_SECONDS = 60


async def _purge_expired_sessions_task() -> int:
    async with get_session_factory()() as db:
        removed = await SessionStore(db).delete_expired()
    if removed:
        logger.info("Removed %s expired sessions", removed)
    return removed


async def purge_expired_sessions() -> int:
    return await jobs_state.run_job("session_purge", _purge_expired_sessions_task)


async def _refresh_oidc_task() -> None:
    await refresh_oidc_client(get_settings().oidc)


async def refresh_oidc() -> None:
    await jobs_state.run_job("oidc_refresh", _refresh_oidc_task)


def setup_periodic_tasks() -> None:
    settings = get_settings()
    init_scheduler()

    schedule_task(purge_expired_sessions, IntervalTrigger(seconds=SESSION_PURGE_SECONDS), "session_purge")
    jobs_state.refresh_next_run("session_purge")

    if settings.oidc.enabled:
        # checks often, rediscovers only when the client is missing or stale
        schedule_task(refresh_oidc, IntervalTrigger(seconds=settings.oidc.retry_seconds), "oidc_refresh")
        jobs_state.refresh_next_run("oidc_refresh")
