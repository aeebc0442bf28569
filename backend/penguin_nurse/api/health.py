from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response

from penguin_nurse import __version__, jobs_state
from penguin_nurse.core.db import check_db_health
from penguin_nurse.core.settings import Settings, get_settings
from penguin_nurse.services.oidc import get_oidc_client

router = APIRouter()
liveness_router = APIRouter()

_start_time = datetime.now(timezone.utc)


def _uptime_seconds() -> float:
    return (datetime.now(timezone.utc) - _start_time).total_seconds()


@router.api_route("", methods=["GET", "HEAD"], summary="Liveness probe", response_model=None)
async def health(request: Request):
    if request.method == "HEAD":
        return Response(status_code=200)
    return {"ok": True}


@router.get("/full", summary="Full health check")
async def full_health(settings: Settings = Depends(get_settings)) -> dict:
    db_status = await check_db_health()
    client = get_oidc_client()
    status: dict[str, object] = {
        "ok": bool(db_status.get("ok")),
        "uptime_seconds": _uptime_seconds(),
        "version": __version__,
        "database": db_status,
        "oidc": {
            "configured": settings.oidc.enabled,
            "ready": client is not None,
            "discovered_at": client.discovered_at.isoformat() if client else None,
        },
        "server": {"host": settings.server.host, "port": settings.server.port},
    }
    return status


@router.get("/jobs", summary="Background job state")
async def jobs_health() -> dict:
    return jobs_state.get_all_states()


@liveness_router.get("/_health", include_in_schema=False)
async def liveness() -> Response:
    db_status = await check_db_health()
    if not db_status.get("ok"):
        return Response("Database unavailable", status_code=503, media_type="text/plain")
    return Response("OK", media_type="text/plain")
