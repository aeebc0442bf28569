import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from penguin_nurse.core.db import build_engine, create_tables, dispose_db, get_session_factory, init_db  # noqa: E402
from penguin_nurse.core.security import rate_limiter  # noqa: E402
from penguin_nurse.core.settings import get_settings  # noqa: E402
from penguin_nurse.schemas.users import NewUser  # noqa: E402
from penguin_nurse.services.oidc import set_oidc_client  # noqa: E402
from penguin_nurse.services.users import create_user  # noqa: E402

ADMIN_PASSWORD = "rockhopper-admin"
USER_PASSWORD = "little-blue"

ENV_KEYS = (
    "DATABASE_URL",
    "DATABASE_ECHO",
    "SESSION_COOKIE_NAME",
    "SESSION_DAYS",
    "COOKIE_SECURE",
    "CORS_ORIGINS",
    "INITIAL_ADMIN_USERNAME",
    "INITIAL_ADMIN_PASSWORD",
    "OIDC_DISCOVERY_URL",
    "OIDC_CLIENT_ID",
    "OIDC_CLIENT_SECRET",
    "OIDC_AUTH_SCOPE",
    "BASE_URL",
    "TIMEZONE",
    "DAY_START",
)


@pytest.fixture(autouse=True)
def settings_env(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "missing-config.json"))
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'penguin_nurse.db'}")
    get_settings.cache_clear()
    rate_limiter.reset()
    rate_limiter.max_attempts = 5
    rate_limiter.window_seconds = 60
    set_oidc_client(None)
    yield
    set_oidc_client(None)
    get_settings.cache_clear()


@pytest.fixture
async def engine(settings_env):
    engine = init_db(build_engine(get_settings().database.url, poolclass=NullPool))
    await create_tables()
    yield engine
    await dispose_db()


@pytest.fixture
async def db(engine):
    async with get_session_factory()() as session:
        yield session


@pytest.fixture
async def admin_user(engine):
    async with get_session_factory()() as session:
        return await create_user(
            session,
            NewUser(
                username="admin",
                password=ADMIN_PASSWORD,
                full_name="Emperor Penguin",
                email="admin@example.com",
                is_admin=True,
            ),
        )


@pytest.fixture
async def normal_user(engine):
    async with get_session_factory()() as session:
        return await create_user(
            session,
            NewUser(
                username="penguin",
                password=USER_PASSWORD,
                full_name="Little Penguin",
                email="penguin@example.com",
            ),
        )


@pytest.fixture
async def other_user(engine):
    async with get_session_factory()() as session:
        return await create_user(
            session,
            NewUser(
                username="gentoo",
                password="gentoo-pass",
                full_name="Gentoo Penguin",
                email="gentoo@example.com",
            ),
        )


def _new_client() -> TestClient:
    from penguin_nurse.main import app

    # no context manager: startup would open the configured database and scheduler
    return TestClient(app)


def _login(client: TestClient, username: str, password: str) -> TestClient:
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return client


@pytest.fixture
def client(engine):
    return _new_client()


@pytest.fixture
def user_client(engine, normal_user):
    return _login(_new_client(), "penguin", USER_PASSWORD)


@pytest.fixture
def other_client(engine, other_user):
    return _login(_new_client(), "gentoo", "gentoo-pass")


@pytest.fixture
def admin_client(engine, admin_user):
    return _login(_new_client(), "admin", ADMIN_PASSWORD)
