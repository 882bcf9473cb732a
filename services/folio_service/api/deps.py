"""
Folio Service — Shared route dependencies
"""
from fastapi import Depends

from folio_service.core.config import Settings, get_settings
from folio_service.db.folio_store import FolioStore

_store: FolioStore | None = None


def get_folio_store(settings: Settings = Depends(get_settings)) -> FolioStore:
    global _store
    if _store is None:
        _store = FolioStore(settings.FOLIO_DB_PATH)
    return _store
