"""
Totals engine: catalog pricing, per-component rounding, idempotency.
"""
from decimal import Decimal

import pytest

from check_service.models.check import LineItem
from check_service.ops.totals import price_item, recompute, to_money


def _items(*pairs):
    return [price_item(sku, qty) for sku, qty in pairs]


def test_empty_check_totals_are_zero():
    totals = recompute([])
    assert totals.subtotal == totals.tax == totals.service == totals.total == Decimal("0.00")


def test_two_burgers():
    totals = recompute(_items(("RS-BURGER", 2)))
    assert totals.subtotal == Decimal("28.00")
    assert totals.tax == Decimal("2.52")
    assert totals.service == Decimal("2.80")
    assert totals.total == Decimal("33.32")


def test_unknown_sku_is_priced_at_zero():
    item = price_item("RS-LOBSTER", 3)
    assert item.unit_price == Decimal("0.00")
    assert item.line_total == Decimal("0.00")

    totals = recompute([item, *_items(("RS-FRIES", 1))])
    assert totals.subtotal == Decimal("5.00")


def test_price_is_captured_from_catalog_passed_in():
    item = price_item("RS-BURGER", 1, catalog={"RS-BURGER": Decimal("20")})
    assert item.unit_price == Decimal("20.00")
    # later recomputes use the captured price, not the default catalog
    assert recompute([item]).subtotal == Decimal("20.00")


@pytest.mark.parametrize(
    "pairs",
    [
        [("RS-BURGER", 1)],
        [("RS-BURGER", 1), ("RS-FRIES", 1)],
        [("RS-CHEESE", 3), ("RS-SALAD", 7), ("RS-FRIES", 2)],
        [("RS-SALAD", 1), ("NOPE", 4)],
    ],
)
def test_total_is_exact_sum_of_rounded_components(pairs):
    totals = recompute(_items(*pairs))
    for value in (totals.subtotal, totals.tax, totals.service):
        assert value == to_money(value)
    assert totals.total == totals.subtotal + totals.tax + totals.service


def test_components_are_rounded_independently():
    # subtotal 0.05: tax 0.0045 → 0.00, service 0.005 → 0.01 (half up)
    item = LineItem(sku="MINT", quantity=1, unit_price=Decimal("0.05"), line_total=Decimal("0.05"))
    totals = recompute([item])
    assert totals.tax == Decimal("0.00")
    assert totals.service == Decimal("0.01")
    assert totals.total == Decimal("0.06")


def test_recompute_is_idempotent():
    items = _items(("RS-BURGER", 2), ("RS-SALAD", 1), ("RS-CHEESE", 5))
    assert recompute(items) == recompute(items) == recompute(list(items))


def test_custom_rates():
    totals = recompute(_items(("RS-FRIES", 2)), tax_rate=0.2, service_rate=0)
    assert totals.tax == Decimal("2.00")
    assert totals.service == Decimal("0.00")
    assert totals.total == Decimal("12.00")
