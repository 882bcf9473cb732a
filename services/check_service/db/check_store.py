"""
Check Service — Check store

Keyed collection of Check aggregates over a snapshot backend.

Concurrency contract:
  - every mutation is one read-modify-write of the whole snapshot, serialised
    in-process by `_snapshot_lock` and guarded across processes by the
    backend's version check (stale save → whole mutation replayed);
  - `check_lock(check_id)` is a per-check lock for multi-step workflows.
    Item additions take it themselves; the settlement orchestrator holds it
    for the whole tender, so items cannot land between the PMS posting and
    the close.
"""
import asyncio
import logging
import uuid
import weakref
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterable, Mapping, TypeVar

from check_service.core.errors import Conflict, Internal, NotFound
from check_service.core.optimistic_lock import with_optimistic_retry
from check_service.db.snapshot import SnapshotBackend, StoreSnapshot
from check_service.models.catalog import PRICE_CATALOG
from check_service.models.check import Check, CheckStatus, TenderRecord
from check_service.ops.totals import (
    DEFAULT_SERVICE_RATE,
    DEFAULT_TAX_RATE,
    price_item,
    recompute,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

CHECK_NOT_FOUND = "check not found"
CHECK_ALREADY_CLOSED = "check is already closed"


class IdentifierExhausted(Internal):
    """No unused check id / check number could be allocated."""


def new_check_id() -> str:
    return f"CHK-{uuid.uuid4().hex[:8].upper()}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CheckStore:
    def __init__(
        self,
        backend: SnapshotBackend,
        *,
        catalog: Mapping[str, Decimal] = PRICE_CATALOG,
        tax_rate: Decimal | float = DEFAULT_TAX_RATE,
        service_rate: Decimal | float = DEFAULT_SERVICE_RATE,
        id_attempts: int = 10,
        number_range: tuple[int, int] = (1000, 9999),
        id_factory: Callable[[], str] = new_check_id,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.backend = backend
        self.catalog = catalog
        self.tax_rate = tax_rate
        self.service_rate = service_rate
        self.id_attempts = id_attempts
        self.number_range = number_range
        self.id_factory = id_factory
        self.clock = clock
        self._snapshot_lock = asyncio.Lock()
        # entries live only while some task holds or awaits the lock
        self._check_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def check_lock(self, check_id: str) -> asyncio.Lock:
        lock = self._check_locks.get(check_id)
        if lock is None:
            lock = asyncio.Lock()
            self._check_locks[check_id] = lock
        return lock

    # ── Snapshot plumbing ─────────────────────────────────────────────────────
    @with_optimistic_retry()
    async def _mutate(self, change: Callable[[StoreSnapshot], T]) -> T:
        async with self._snapshot_lock:
            snapshot = await self.backend.load()
            loaded_version = snapshot.version
            result = change(snapshot)
            await self.backend.save(snapshot, loaded_version)
            return result

    @staticmethod
    def _require(snapshot: StoreSnapshot, check_id: str) -> Check:
        check = snapshot.checks.get(check_id)
        if check is None:
            raise NotFound(CHECK_NOT_FOUND)
        return check

    # ── Identifiers ───────────────────────────────────────────────────────────
    def _allocate_check_id(self, snapshot: StoreSnapshot) -> str:
        for _ in range(self.id_attempts):
            candidate = self.id_factory()
            if candidate not in snapshot.checks:
                return candidate
            logger.warning("Check id %s already taken, regenerating", candidate)
        raise IdentifierExhausted(f"no free check id after {self.id_attempts} attempts")

    def _allocate_check_number(self, snapshot: StoreSnapshot) -> int:
        low, high = self.number_range
        span = high - low + 1
        held = {c.check_number for c in snapshot.checks.values() if c.is_open}
        start = snapshot.next_check_number
        if start is None or not low <= start <= high:
            start = low
        for offset in range(span):
            candidate = low + (start - low + offset) % span
            if candidate not in held:
                snapshot.next_check_number = low + (candidate - low + 1) % span
                return candidate
        raise IdentifierExhausted("every check number is held by an open check")

    # ── Operations ────────────────────────────────────────────────────────────
    async def create(
        self,
        *,
        table_name: str | None = None,
        employee_ref: int = 1,
        order_type_ref: int = 1,
        check_name: str | None = None,
        guest_count: int = 1,
        items: Iterable[tuple[str, int]] = (),
    ) -> Check:
        line_items = [price_item(sku, qty, self.catalog) for sku, qty in items]

        def change(snapshot: StoreSnapshot) -> Check:
            check_number = self._allocate_check_number(snapshot)
            check = Check(
                check_id=self._allocate_check_id(snapshot),
                check_number=check_number,
                check_name=check_name or f"Check {check_number}",
                table_name=table_name,
                employee_ref=employee_ref,
                order_type_ref=order_type_ref,
                guest_count=guest_count,
                created_time=self.clock(),
                items=line_items,
                totals=recompute(line_items, self.tax_rate, self.service_rate),
            )
            snapshot.checks[check.check_id] = check
            return check

        check = await self._mutate(change)
        logger.info("Check %s (#%d) opened", check.check_id, check.check_number)
        return check

    async def get(self, check_id: str) -> Check:
        snapshot = await self.backend.load()
        return self._require(snapshot, check_id)

    async def list(self) -> list[Check]:
        snapshot = await self.backend.load()
        return list(snapshot.checks.values())

    async def append_items(self, check_id: str, items: Iterable[tuple[str, int]]) -> Check:
        """Append priced items to an OPEN check and recompute its totals."""
        line_items = [price_item(sku, qty, self.catalog) for sku, qty in items]

        def change(snapshot: StoreSnapshot) -> Check:
            check = self._require(snapshot, check_id)
            if not check.is_open:
                raise Conflict(CHECK_ALREADY_CLOSED)
            check.items.extend(line_items)
            check.totals = recompute(check.items, self.tax_rate, self.service_rate)
            return check

        async with self.check_lock(check_id):
            return await self._mutate(change)

    async def transition_to_closed(self, check_id: str, tender: TenderRecord) -> Check:
        """
        OPEN → CLOSED. The status is re-read inside the snapshot mutation, so
        a check can never be closed twice even by callers not holding
        `check_lock`.
        """
        def change(snapshot: StoreSnapshot) -> Check:
            check = self._require(snapshot, check_id)
            if not check.is_open:
                raise Conflict(CHECK_ALREADY_CLOSED)
            check.status = CheckStatus.CLOSED
            check.closed_time = self.clock()
            check.tender = tender
            return check

        check = await self._mutate(change)
        logger.info("Check %s closed at %s", check_id, check.totals.total)
        return check
