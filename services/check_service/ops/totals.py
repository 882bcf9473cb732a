"""
Check Service — Totals engine

Pure functions; the only writer of Check.totals.

Catalog lookup happens once, when a line item is priced (`price_item`), so
the unit price is captured at add time. `recompute` works from the captured
prices only.

Rounding policy: subtotal, tax and service are each quantized to cents
(ROUND_HALF_UP) on their own, and total is the exact sum of those three
rounded values, so `total == subtotal + tax + service` always holds.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Mapping

from check_service.models.catalog import PRICE_CATALOG
from check_service.models.check import LineItem, Totals, ZERO

CENT = Decimal("0.01")
DEFAULT_TAX_RATE = Decimal("0.09")
DEFAULT_SERVICE_RATE = Decimal("0.10")


def to_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def price_item(sku: str, quantity: int, catalog: Mapping[str, Decimal] = PRICE_CATALOG) -> LineItem:
    """Resolve the unit price for `sku`. Unknown SKUs are priced at zero rather than rejected."""
    price = to_money(Decimal(catalog.get(sku, ZERO)))
    return LineItem(sku=sku, quantity=quantity, unit_price=price, line_total=to_money(price * quantity))


def recompute(
    items: Iterable[LineItem],
    tax_rate: Decimal | float = DEFAULT_TAX_RATE,
    service_rate: Decimal | float = DEFAULT_SERVICE_RATE,
) -> Totals:
    """Compute totals for a list of line items. No side effects; same items, same totals."""
    tax_rate = Decimal(str(tax_rate))
    service_rate = Decimal(str(service_rate))

    raw_subtotal = sum((item.unit_price * item.quantity for item in items), ZERO)

    subtotal = to_money(raw_subtotal)
    tax = to_money(raw_subtotal * tax_rate)
    service = to_money(raw_subtotal * service_rate)
    return Totals(subtotal=subtotal, tax=tax, service=service, total=subtotal + tax + service)
