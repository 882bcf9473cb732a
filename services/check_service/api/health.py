"""
Check Service — Health endpoint
"""
import asyncio

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from check_service.api.deps import get_check_store, get_folio_client
from check_service.clients.folio_client import FolioClient
from check_service.core.config import Settings, get_settings
from check_service.db.check_store import CheckStore

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    store: CheckStore = Depends(get_check_store),
    folio: FolioClient = Depends(get_folio_client),
    settings: Settings = Depends(get_settings),
):
    deps: dict[str, str] = {}
    healthy = True

    try:
        await asyncio.wait_for(store.backend.ping(), timeout=settings.HEALTH_CHECK_TIMEOUT)
        deps["store"] = "ok"
    except Exception as e:
        deps["store"] = f"error: {str(e)[:100]}"
        healthy = False

    # PMS reachability only matters when settlement posts to it
    if settings.AUTO_POST:
        try:
            code = await asyncio.wait_for(folio.ping(), timeout=settings.HEALTH_CHECK_TIMEOUT)
            deps["folio-service"] = "ok" if code == 200 else f"degraded: {code}"
            if code != 200:
                healthy = False
        except Exception as e:
            deps["folio-service"] = f"error: {str(e)[:100]}"
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
