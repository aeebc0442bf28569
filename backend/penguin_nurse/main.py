import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from penguin_nurse import __version__
from penguin_nurse.api import api_router, liveness_router, oidc_redirect_router
from penguin_nurse.core.logging import configure_logging
from penguin_nurse.core.settings import get_settings

configure_logging()
settings = get_settings()
logger = logging.getLogger(__name__)

app = FastAPI(title="Penguin Nurse", version=__version__)

if settings.security.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(api_router, prefix="/api")
app.include_router(liveness_router)
app.include_router(oidc_redirect_router)


@app.on_event("startup")
async def startup_event() -> None:
    from penguin_nurse.core.db import create_tables, get_session_factory, init_db
    from penguin_nurse.core.security import rate_limiter
    from penguin_nurse.jobs import setup_periodic_tasks
    from penguin_nurse.services.oidc import refresh_oidc_client
    from penguin_nurse.services.users import ensure_initial_admin

    init_db()
    await create_tables()

    rate_limiter.max_attempts = settings.security.login_attempts
    rate_limiter.window_seconds = settings.security.login_window_seconds

    async with get_session_factory()() as db:
        await ensure_initial_admin(
            db,
            settings.security.initial_admin_username,
            settings.security.initial_admin_password,
        )

    if settings.oidc.enabled:
        # a failure here is retried by the refresh job
        await refresh_oidc_client(settings.oidc, force=True)
    else:
        logger.info("OIDC_DISCOVERY_URL not set; OIDC login disabled")

    setup_periodic_tasks()


@app.on_event("shutdown")
async def shutdown_event() -> None:
    from penguin_nurse.core.db import dispose_db
    from penguin_nurse.core.scheduler import shutdown_scheduler

    shutdown_scheduler()
    await dispose_db()


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.server.host, port=settings.server.port)
