from datetime import timedelta

import pytest

from penguin_nurse import jobs, jobs_state
from penguin_nurse.core.db import utcnow
from penguin_nurse.core.scheduler import get_scheduler, shutdown_scheduler
from penguin_nurse.services.session_store import SessionStore


async def test_purge_expired_sessions(db):
    store = SessionStore(db)
    await store.create({"user_id": 1}, utcnow() - timedelta(hours=1))
    live = await store.create({"user_id": 2}, utcnow() + timedelta(hours=1))
    runs_before = jobs_state.get_all_states()["session_purge"]["run_count"]

    assert await jobs.purge_expired_sessions() == 1

    state = jobs_state.get_all_states()["session_purge"]
    assert state["run_count"] == runs_before + 1
    assert state["last_ok"] is True
    assert state["last_error"] is None
    assert state["last_run_at"].endswith("+00:00")
    assert await store.load(live) == {"user_id": 2}


async def test_run_job_records_failure():
    async def broken():
        raise RuntimeError("provider down")

    with pytest.raises(RuntimeError):
        await jobs_state.run_job("oidc_refresh", broken)

    state = jobs_state.get_all_states()["oidc_refresh"]
    assert state["last_ok"] is False
    assert state["last_error"] == "provider down"


async def test_refresh_oidc_job_calls_refresh(mocker):
    refresh = mocker.patch.object(jobs, "refresh_oidc_client", new=mocker.AsyncMock(return_value=None))
    await jobs.refresh_oidc()
    refresh.assert_awaited_once()
    assert jobs_state.get_all_states()["oidc_refresh"]["last_ok"] is True


async def test_setup_periodic_tasks(engine):
    try:
        jobs.setup_periodic_tasks()
        scheduler = get_scheduler()
        assert scheduler.get_job("session_purge") is not None
        assert scheduler.get_job("oidc_refresh") is None
        assert jobs_state.get_all_states()["session_purge"]["next_run_at"] is not None
    finally:
        shutdown_scheduler()


async def test_setup_schedules_oidc_refresh(engine, monkeypatch):
    from penguin_nurse.core.settings import get_settings

    monkeypatch.setenv("OIDC_DISCOVERY_URL", "https://auth.example.com")
    monkeypatch.setenv("OIDC_CLIENT_ID", "nurse")
    monkeypatch.setenv("OIDC_CLIENT_SECRET", "fish")
    monkeypatch.setenv("BASE_URL", "https://nurse.example.com")
    get_settings.cache_clear()
    try:
        jobs.setup_periodic_tasks()
        assert get_scheduler().get_job("oidc_refresh") is not None
    finally:
        shutdown_scheduler()
