"""
Folio Service — Guest seeding (test / demo data)
"""
from fastapi import APIRouter, Depends, HTTPException

from folio_service.api.deps import get_folio_store
from folio_service.core.config import Settings, get_settings
from folio_service.db.folio_store import FolioStore
from folio_service.models.folio import Guest
from folio_service.schemas.folio import SeedGuestRequest

router = APIRouter(tags=["seed"])


@router.post("/__seed/guest")
async def seed_guest(
    payload: SeedGuestRequest,
    store: FolioStore = Depends(get_folio_store),
    settings: Settings = Depends(get_settings),
):
    if not settings.SEED_ENABLED:
        raise HTTPException(status_code=404, detail="endpoint not found")

    guest = Guest(
        reservation_id=payload.reservation_id,
        guest_name=payload.guest_name,
        room_number=str(payload.room),
        in_house=payload.in_house,
    )
    await store.seed_guest(payload.last_name, guest)
    return {"ok": True}
