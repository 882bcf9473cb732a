"""
Folio Service — Pydantic schemas (PMS wire contract)
"""
from pydantic import Field

from folio_service.models.folio import CamelModel, FolioLine


class ReservationResponse(CamelModel):
    reservation_id: str
    folio_window: int
    guest_name: str
    room_number: str
    in_house: bool
    hotel_id: str


class ChargeRequest(CamelModel):
    amount: float = Field(..., ge=0)
    transaction_code: str | None = Field(None, max_length=64)


class ChargeResponse(CamelModel):
    reservation_id: str
    posting_id: str
    transaction_code: str
    amount: float
    hotel_id: str
    line: FolioLine


class FolioResponse(CamelModel):
    reservation_id: str
    hotel_id: str
    folio_window_no: int
    lines: list[FolioLine]
    total_balance: float = 0
    payments: list[FolioLine] | None = None
    postings: list[FolioLine] | None = None
    transaction_codes: list[str] | None = None


class SeedGuestRequest(CamelModel):
    room: str | int
    last_name: str = Field(..., min_length=1)
    reservation_id: str = "RES-555"
    guest_name: str = "Guest"
    in_house: bool = True
