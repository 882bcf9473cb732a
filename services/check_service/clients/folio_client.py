"""
Check Service — PMS folio client

Two calls against the PMS (folio service), always in this order:
  1. GET  /rsv/v1/hotels/{hotelId}/reservations?roomId=&surname=
  2. POST /csh/v1/hotels/{hotelId}/reservations/{reservationId}/charges

A timeout counts as a rejection of that step. Any other transport error
(`httpx.RequestError`) is left to the caller.
"""
import logging
from decimal import Decimal
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class _PmsModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Reservation(_PmsModel):
    reservation_id: str
    room_number: str | int | None = None
    guest_name: str | None = None
    in_house: bool = True
    folio_window: int = 1


class Posting(_PmsModel):
    posting_id: str
    reservation_id: str
    transaction_code: str | None = None
    amount: float | None = None


class GuestLookupFailed(Exception):
    def __init__(self, status_code: int | None, details: Any = None):
        super().__init__(f"guest lookup failed (status={status_code})")
        self.status_code = status_code
        self.details = details


class ChargePostingFailed(Exception):
    def __init__(self, status_code: int | None, details: Any = None):
        super().__init__(f"charge posting failed (status={status_code})")
        self.status_code = status_code
        self.details = details


class FolioClient:
    def __init__(
        self,
        base_url: str,
        hotel_id: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.hotel_id = hotel_id
        self.timeout = timeout
        self.transport = transport

    def for_hotel(self, hotel_id: str) -> "FolioClient":
        if hotel_id == self.hotel_id:
            return self
        return FolioClient(self.base_url, hotel_id, self.timeout, self.transport)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        )

    async def lookup_guest(self, room_number: str, surname: str) -> Reservation:
        try:
            async with self._client() as client:
                response = await client.get(
                    f"/rsv/v1/hotels/{self.hotel_id}/reservations",
                    params={"roomId": room_number, "surname": surname},
                )
        except httpx.TimeoutException as exc:
            logger.warning("PMS guest lookup timed out for room %s", room_number)
            raise GuestLookupFailed(None, "timeout") from exc

        if not response.is_success:
            logger.warning(
                "PMS guest lookup rejected room %s: %d", room_number, response.status_code
            )
            raise GuestLookupFailed(response.status_code, response.text)

        try:
            reservation = Reservation.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise GuestLookupFailed(response.status_code, response.text) from exc
        if not reservation.in_house:
            raise GuestLookupFailed(response.status_code, "guest is not in-house")
        return reservation

    async def post_charge(
        self, reservation_id: str, amount: Decimal, transaction_code: str
    ) -> Posting:
        try:
            async with self._client() as client:
                response = await client.post(
                    f"/csh/v1/hotels/{self.hotel_id}/reservations/{quote(reservation_id, safe='')}/charges",
                    json={"amount": float(amount), "transactionCode": transaction_code},
                )
        except httpx.TimeoutException as exc:
            logger.warning("PMS charge posting timed out for reservation %s", reservation_id)
            raise ChargePostingFailed(None, "timeout") from exc

        if not response.is_success:
            logger.warning(
                "PMS rejected charge for reservation %s: %d",
                reservation_id, response.status_code,
            )
            raise ChargePostingFailed(response.status_code, response.text)

        try:
            return Posting.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ChargePostingFailed(response.status_code, response.text) from exc

    async def ping(self) -> int:
        async with self._client() as client:
            response = await client.get("/health")
        return response.status_code
