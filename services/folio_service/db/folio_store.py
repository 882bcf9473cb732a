"""
Folio Service — JSON file store

Whole-document load/save under one asyncio.Lock; postings are only ever
appended to a folio's lines.
"""
import asyncio
import logging
import os
import uuid
from datetime import datetime, timezone

from pydantic import ValidationError

from folio_service.models.folio import Folio, FolioLine, Guest, PmsSnapshot, guest_key

logger = logging.getLogger(__name__)


class FolioStore:
    def __init__(self, path: str):
        self.path = path
        self._lock = asyncio.Lock()

    def _read(self) -> PmsSnapshot:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                raw = fh.read()
        except FileNotFoundError:
            return PmsSnapshot()
        if not raw.strip():
            return PmsSnapshot()
        try:
            return PmsSnapshot.model_validate_json(raw)
        except ValidationError:
            logger.error("PMS data file %s is unreadable", self.path)
            raise

    def _write(self, snapshot: PmsSnapshot) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as fh:
            fh.write(snapshot.model_dump_json(by_alias=True, indent=2))
        os.replace(tmp_path, self.path)

    async def _load(self) -> PmsSnapshot:
        return await asyncio.to_thread(self._read)

    async def _save(self, snapshot: PmsSnapshot) -> None:
        await asyncio.to_thread(self._write, snapshot)

    async def seed_guest(self, last_name: str, guest: Guest) -> None:
        async with self._lock:
            snapshot = await self._load()
            snapshot.guests[guest_key(guest.room_number, last_name)] = guest
            await self._save(snapshot)

    async def find_guest(self, room: str, surname: str) -> Guest | None:
        snapshot = await self._load()
        return snapshot.guests.get(guest_key(room, surname))

    async def post_charge(
        self, reservation_id: str, hotel_id: str, amount: float, transaction_code: str
    ) -> FolioLine | None:
        """Append a posting line; None when no guest holds `reservation_id`."""
        async with self._lock:
            snapshot = await self._load()
            if not any(g.reservation_id == reservation_id for g in snapshot.guests.values()):
                return None
            folio = snapshot.folios.setdefault(reservation_id, Folio(reservation_id=reservation_id))
            line = FolioLine(
                posting_id=f"POST-{uuid.uuid4().hex[:10]}",
                trx_code=transaction_code,
                amount=amount,
                hotel_id=hotel_id,
                posted_at=datetime.now(timezone.utc),
            )
            folio.lines.append(line)
            await self._save(snapshot)
            logger.info("Posted %.2f (%s) to reservation %s", amount, transaction_code, reservation_id)
            return line

    async def get_folio(self, reservation_id: str) -> Folio | None:
        snapshot = await self._load()
        return snapshot.folios.get(reservation_id)
