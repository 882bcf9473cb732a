"""
Check Service — Settlement orchestrator

Tendering a check to a guest room:

  1. check exists                      else NotFound       (404)
  2. check is OPEN                     else Conflict       (409)
  3. ROOM_CHARGE + room + last name    else InvalidRequest (400), no PMS calls
  4. auto-post on?  run the PMS saga:
       a. guest lookup                 else Conflict       (409)
       b. charge posting               else BadGateway     (502)
  5. close the check and persist, return the receipt

The close happens strictly after the posting succeeded. Any failure before
it leaves the stored check OPEN. The whole tender runs under the check's
lock, so a concurrent tender or item addition on the same check waits and
then sees the outcome.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from check_service.clients.folio_client import (
    ChargePostingFailed,
    FolioClient,
    GuestLookupFailed,
)
from check_service.core.errors import (
    BadGateway,
    CheckServiceError,
    Conflict,
    Internal,
    InvalidRequest,
)
from check_service.db.check_store import CHECK_ALREADY_CLOSED, CheckStore
from check_service.models.check import CheckStatus, TenderRecord
from check_service.schemas.check import SettlementReceipt, TenderRequest

logger = logging.getLogger(__name__)

ROOM_CHARGE = "ROOM_CHARGE"
FALLBACK_TRANSACTION_CODE = "ROOM_SERVICE"

GUEST_NOT_FOUND = "guest not found or not in-house (OPERA lookup failed)"
POSTING_FAILED = "OPERA folio posting failed"
INVALID_TENDER = "require type=ROOM_CHARGE, roomNumber, lastName"
TENDER_ERROR = "tender processing error"


@dataclass(frozen=True)
class RoomCharge:
    reservation_id: str
    posting_id: str


async def post_room_charge(
    folio: FolioClient,
    room_number: str,
    last_name: str,
    amount: Decimal,
    transaction_code: str,
) -> RoomCharge:
    """
    Look the guest up, then post the charge to their folio.

    The lookup has no side effect, so a failed posting needs no compensation.
    The posting is only attempted with the reservation id the lookup returned.
    """
    try:
        reservation = await folio.lookup_guest(room_number, last_name)
    except GuestLookupFailed as exc:
        raise Conflict(GUEST_NOT_FOUND) from exc

    try:
        posting = await folio.post_charge(reservation.reservation_id, amount, transaction_code)
    except ChargePostingFailed as exc:
        raise BadGateway(POSTING_FAILED, details=exc.details) from exc

    return RoomCharge(reservation_id=reservation.reservation_id, posting_id=posting.posting_id)


class SettlementOrchestrator:
    def __init__(
        self,
        store: CheckStore,
        folio: FolioClient,
        *,
        auto_post: bool = True,
        default_transaction_code: str | None = None,
    ):
        self.store = store
        self.folio = folio
        self.auto_post = auto_post
        self.default_transaction_code = default_transaction_code

    def transaction_code_for(self, request: TenderRequest) -> str:
        return (
            request.transaction_code
            or self.default_transaction_code
            or FALLBACK_TRANSACTION_CODE
        )

    @staticmethod
    def _room_and_name(request: TenderRequest | None) -> tuple[str, str]:
        if request is None or request.type != ROOM_CHARGE:
            raise InvalidRequest(INVALID_TENDER)

        room = request.room_number
        # bool is an int subclass; 0 is not a room
        if isinstance(room, int) and not isinstance(room, bool) and room != 0:
            room_number = str(room)
        elif isinstance(room, str):
            room_number = room.strip()
        else:
            room_number = ""
        last_name = request.last_name.strip() if isinstance(request.last_name, str) else ""
        code = request.transaction_code
        code_ok = code is None or (isinstance(code, str) and code.strip() != "")

        if not room_number or not last_name or not code_ok:
            raise InvalidRequest(INVALID_TENDER)
        return room_number, last_name

    async def tender(self, check_id: str, request: TenderRequest | None) -> SettlementReceipt:
        async with self.store.check_lock(check_id):
            check = await self.store.get(check_id)
            if not check.is_open:
                raise Conflict(CHECK_ALREADY_CLOSED)

            room_number, last_name = self._room_and_name(request)
            transaction_code = self.transaction_code_for(request)
            amount = check.totals.total

            charge: RoomCharge | None = None
            try:
                if self.auto_post:
                    charge = await post_room_charge(
                        self.folio, room_number, last_name, amount, transaction_code
                    )
                await self.store.transition_to_closed(
                    check_id,
                    TenderRecord(
                        type=ROOM_CHARGE,
                        room_number=room_number,
                        last_name=last_name,
                        transaction_code=transaction_code,
                        amount=amount,
                        posted_to_opera=self.auto_post,
                        reservation_id=charge.reservation_id if charge else None,
                        posting_id=charge.posting_id if charge else None,
                    ),
                )
            except CheckServiceError as exc:
                if charge is not None:
                    logger.error(
                        "Check %s stays OPEN although posting %s succeeded: %s",
                        check_id, charge.posting_id, exc.message,
                    )
                raise
            except Exception as exc:
                logger.exception("Tender of check %s failed", check_id)
                raise Internal(TENDER_ERROR, details=str(exc)) from exc

        logger.info(
            "Check %s tendered to room %s (posting=%s)",
            check_id, room_number, charge.posting_id if charge else None,
        )
        return SettlementReceipt(
            check_id=check_id,
            status=CheckStatus.CLOSED,
            posted_to_opera=self.auto_post,
            posting_id=charge.posting_id if charge else None,
            reservation_id=charge.reservation_id if charge else None,
            transaction_code=transaction_code,
            total=amount,
        )
