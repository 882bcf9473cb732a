"""
Folio Service — Health endpoint
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from folio_service.api.deps import get_folio_store
from folio_service.core.config import Settings, get_settings
from folio_service.db.folio_store import FolioStore

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    store: FolioStore = Depends(get_folio_store),
    settings: Settings = Depends(get_settings),
):
    deps: dict[str, str] = {}
    healthy = True
    try:
        await store.find_guest("0", "health")
        deps["store"] = "ok"
    except Exception as e:
        deps["store"] = f"error: {str(e)[:100]}"
        healthy = False

    return JSONResponse(
        content={
            "status": "healthy" if healthy else "degraded",
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "dependencies": deps,
        },
        status_code=200 if healthy else 503,
    )
