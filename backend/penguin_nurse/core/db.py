import logging
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from sqlalchemy import DateTime, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from penguin_nurse.core.logging import safe_url
from penguin_nurse.core.settings import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class UTCDateTime(TypeDecorator):
    """Timezone aware datetime that always comes back in UTC.

    SQLite drops the offset on the way in, so values are normalised to UTC
    before binding and naive values read back are tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("naive datetime stored in a timezone aware column")
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Optional[datetime], dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Global engine/session factory
_async_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def build_engine(url: str, echo: bool = False, **engine_kwargs) -> AsyncEngine:
    if "asyncpg" in url:
        u = make_url(url)
        q = dict(u.query)
        connect_args = {}

        if "sslmode" in q:
            mode = q.pop("sslmode")
            if mode in ("require", "verify-full"):
                connect_args["ssl"] = "require"
            elif mode == "disable":
                connect_args["ssl"] = False

        # asyncpg rejects this one as a connect kwarg
        q.pop("channel_binding", None)

        u = u.set(query=q)
        return create_async_engine(u, connect_args=connect_args, echo=echo, pool_pre_ping=True, **engine_kwargs)

    engine = create_async_engine(url, echo=echo, **engine_kwargs)
    if engine.dialect.name == "sqlite":
        _enable_sqlite_foreign_keys(engine)
    return engine


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_db(engine: Optional[AsyncEngine] = None) -> AsyncEngine:
    global _async_engine, _async_session_factory

    if engine is None:
        settings = get_settings()
        logger.info("Connecting to database: %s", safe_url(settings.database.url))
        engine = build_engine(settings.database.url, echo=settings.database.echo)

    _async_engine = engine
    _async_session_factory = async_sessionmaker(_async_engine, expire_on_commit=False)
    return engine


def get_engine() -> Optional[AsyncEngine]:
    return _async_engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _async_session_factory is None:
        raise RuntimeError("Database not initialised")
    return _async_session_factory


async def dispose_db() -> None:
    global _async_engine, _async_session_factory
    if _async_engine is not None:
        await _async_engine.dispose()
    _async_engine = None
    _async_session_factory = None


async def check_db_health() -> dict:
    """Simple health check: SELECT 1"""
    if not _async_engine:
        return {"ok": False, "error": "Database not initialised"}

    try:
        async with _async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
            return {"ok": True, "driver": _async_engine.dialect.driver}
    except Exception as e:
        logger.error("DB Health Check Failed: %s", e)
        return {"ok": False, "error": str(e)}


async def create_tables() -> None:
    if _async_engine:
        # Ensure models are registered on the metadata
        import penguin_nurse.models  # noqa: F401

        async with _async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async with get_session_factory()() as session:
        yield session
