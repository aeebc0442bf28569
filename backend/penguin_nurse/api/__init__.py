from fastapi import APIRouter

from .auth import oidc_redirect_router
from .auth import router as auth_router
from .consumables import router as consumables_router
from .consumptions import router as consumptions_router
from .entries import ENTRY_KINDS, build_entry_router
from .health import liveness_router
from .health import router as health_router
from .timeline import router as timeline_router
from .users import router as users_router

api_router = APIRouter()
api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(users_router, prefix="/users", tags=["users"])
for name, kind in ENTRY_KINDS.items():
    api_router.include_router(build_entry_router(kind), prefix=f"/{name}", tags=[name])
api_router.include_router(consumables_router, prefix="/consumables", tags=["consumables"])
api_router.include_router(consumptions_router, prefix="/consumptions", tags=["consumptions"])
api_router.include_router(timeline_router, prefix="/timeline", tags=["timeline"])

__all__ = ["api_router", "liveness_router", "oidc_redirect_router"]
