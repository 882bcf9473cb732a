"""
Check Service — Shared route dependencies

Overridden in tests through `app.dependency_overrides`.
"""
from fastapi import Depends

from check_service.clients.folio_client import FolioClient
from check_service.core.config import Settings, get_settings
from check_service.db.check_store import CheckStore
from check_service.db.snapshot import build_backend

_store: CheckStore | None = None


def get_check_store(settings: Settings = Depends(get_settings)) -> CheckStore:
    global _store
    if _store is None:
        _store = CheckStore(
            build_backend(settings),
            tax_rate=settings.TAX_RATE,
            service_rate=settings.SERVICE_RATE,
            id_attempts=settings.CHECK_ID_MAX_ATTEMPTS,
            number_range=(settings.CHECK_NUMBER_START, settings.CHECK_NUMBER_END),
        )
    return _store


async def close_check_store() -> None:
    global _store
    if _store is not None:
        await _store.backend.close()
        _store = None


def get_folio_client(settings: Settings = Depends(get_settings)) -> FolioClient:
    return FolioClient(
        base_url=settings.FOLIO_SERVICE_URL,
        hotel_id=settings.PMS_HOTEL_ID,
        timeout=settings.PMS_TIMEOUT_SECONDS,
    )
