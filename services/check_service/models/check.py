"""
Check Service — Check aggregate

A check is one tab: header fields, an append-only list of line items priced
at the moment they were added, and derived totals. Status only ever moves
OPEN → CLOSED; a closed check also carries the record of how it was settled.

Money is held as Decimal and written to JSON as numbers.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

ZERO = Decimal("0.00")


class CheckStatus(str, PyEnum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LineItem(CamelModel):
    sku: str
    quantity: int = Field(..., ge=1)
    unit_price: Decimal
    line_total: Decimal

    @field_serializer("unit_price", "line_total", when_used="json")
    def _money(self, value: Decimal) -> float:
        return float(value)


class Totals(CamelModel):
    """Written only by the totals engine."""
    subtotal: Decimal = ZERO
    tax: Decimal = ZERO
    service: Decimal = ZERO
    total: Decimal = ZERO

    @field_serializer("subtotal", "tax", "service", "total", when_used="json")
    def _money(self, value: Decimal) -> float:
        return float(value)


class TenderRecord(CamelModel):
    type: str
    room_number: str
    last_name: str
    transaction_code: str
    amount: Decimal
    posted_to_opera: bool
    reservation_id: str | None = None
    posting_id: str | None = None

    @field_serializer("amount", when_used="json")
    def _money(self, value: Decimal) -> float:
        return float(value)


class Check(CamelModel):
    check_id: str
    check_number: int
    check_name: str
    table_name: str | None = None
    employee_ref: int
    order_type_ref: int
    guest_count: int = 1
    status: CheckStatus = CheckStatus.OPEN
    created_time: datetime
    closed_time: datetime | None = None
    items: list[LineItem] = Field(default_factory=list)
    totals: Totals = Field(default_factory=Totals)
    tender: TenderRecord | None = None

    @property
    def is_open(self) -> bool:
        return self.status == CheckStatus.OPEN
