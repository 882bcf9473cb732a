"""
Check Service — Pydantic request / response schemas
"""
from decimal import Decimal
from typing import Any

from pydantic import Field, field_serializer

from check_service.models.check import CamelModel, CheckStatus


class ItemRequest(CamelModel):
    sku: str = Field(..., min_length=1, examples=["RS-BURGER"])
    qty: int = Field(1, ge=1)


class CreateCheckRequest(CamelModel):
    table_name: str | None = Field(None, max_length=100, examples=["T1"])
    employee_ref: int = 1
    order_type_ref: int = 1
    check_name: str | None = Field(None, max_length=100)
    guest_count: int = Field(1, ge=1)
    items: list[ItemRequest] = Field(default_factory=list)


class AddItemsRequest(CamelModel):
    items: list[ItemRequest] = Field(default_factory=list)


class TenderRequest(CamelModel):
    """
    Fields are left untyped here. The settlement orchestrator validates them
    after the check is known to exist and be OPEN; a bad payload is a 400.
    """
    type: Any = Field(None, examples=["ROOM_CHARGE"])
    room_number: Any = Field(None, examples=[101])
    last_name: Any = Field(None, examples=["Smith"])
    transaction_code: Any = None

    @classmethod
    def from_body(cls, body: Any) -> "TenderRequest | None":
        """None for a body that is not a JSON object; a missing body is an empty tender."""
        if body is None:
            return cls()
        if not isinstance(body, dict):
            return None
        return cls.model_validate(body)


class SettlementReceipt(CamelModel):
    check_id: str
    status: CheckStatus
    posted_to_opera: bool
    posting_id: str | None = None
    reservation_id: str | None = None
    transaction_code: str
    total: Decimal

    @field_serializer("total", when_used="json")
    def _money(self, value: Decimal) -> float:
        return float(value)


class PrintedLines(CamelModel):
    check_id: str
    lines: list[str]
