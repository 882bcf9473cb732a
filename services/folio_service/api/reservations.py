"""
Folio Service — Reservation lookup, charge posting and folio retrieval
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status

from folio_service.api.deps import get_folio_store
from folio_service.core.config import Settings, get_settings
from folio_service.db.folio_store import FolioStore
from folio_service.schemas.folio import (
    ChargeRequest,
    ChargeResponse,
    FolioResponse,
    ReservationResponse,
)

router = APIRouter(tags=["reservations"])

PAYMENT_CODE_PREFIX = "PAY"


@router.get("/rsv/v1/hotels/{hotel_id}/reservations", response_model=ReservationResponse)
async def lookup_reservation(
    hotel_id: str,
    room_id: str | None = Query(None, alias="roomId"),
    surname: str | None = Query(None),
    store: FolioStore = Depends(get_folio_store),
):
    """Find the in-house reservation for a room + surname pair."""
    if not room_id or not surname:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="roomId and surname query parameters required",
        )

    guest = await store.find_guest(room_id, surname)
    if guest is None or not guest.in_house:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Guest not found or not in-house")

    return ReservationResponse(
        reservation_id=guest.reservation_id,
        folio_window=guest.folio_window,
        guest_name=guest.guest_name,
        room_number=guest.room_number,
        in_house=guest.in_house,
        hotel_id=hotel_id,
    )


@router.post(
    "/csh/v1/hotels/{hotel_id}/reservations/{reservation_id}/charges",
    response_model=ChargeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_charge(
    hotel_id: str,
    reservation_id: str,
    payload: ChargeRequest,
    store: FolioStore = Depends(get_folio_store),
    settings: Settings = Depends(get_settings),
):
    """Append one charge line to the reservation's folio."""
    transaction_code = payload.transaction_code or settings.DEFAULT_TRANSACTION_CODE
    line = await store.post_charge(reservation_id, hotel_id, payload.amount, transaction_code)
    if line is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found")

    return ChargeResponse(
        reservation_id=reservation_id,
        posting_id=line.posting_id,
        transaction_code=line.trx_code,
        amount=line.amount,
        hotel_id=hotel_id,
        line=line,
    )


@router.get(
    "/csh/v1/hotels/{hotel_id}/reservations/{reservation_id}/folios",
    response_model=FolioResponse,
    response_model_exclude_none=True,
)
async def get_folio(
    hotel_id: str,
    reservation_id: str,
    folio_window_no: int = Query(1, alias="folioWindowNo"),
    fetch_instructions: list[str] | None = Query(None, alias="fetchInstructions"),
    store: FolioStore = Depends(get_folio_store),
):
    """
    Folio lines for a reservation. `fetchInstructions` (repeated or
    comma-separated) adds: Totalbalance, Payment, Postings, Transactioncodes.
    """
    instructions = {
        part.strip()
        for raw in (fetch_instructions or [])
        for part in raw.split(",")
        if part.strip()
    }
    folio = await store.get_folio(reservation_id)
    lines = folio.lines if folio else []

    response = FolioResponse(
        reservation_id=reservation_id,
        hotel_id=hotel_id,
        folio_window_no=folio_window_no,
        lines=lines,
    )
    if "Totalbalance" in instructions:
        response.total_balance = round(sum(line.amount for line in lines), 2)
    if "Payment" in instructions:
        response.payments = [l for l in lines if l.trx_code.startswith(PAYMENT_CODE_PREFIX)]
    if "Postings" in instructions:
        response.postings = [l for l in lines if not l.trx_code.startswith(PAYMENT_CODE_PREFIX)]
    if "Transactioncodes" in instructions:
        response.transaction_codes = list(dict.fromkeys(l.trx_code for l in lines))
    return response
