"""
Check Service — Menu price catalog

[CONFIG DATA] Fixed unit prices keyed by SKU. Prices are captured onto the
line item when it is added; later catalog changes never re-price a check.
"""
from decimal import Decimal

PRICE_CATALOG: dict[str, Decimal] = {
    "RS-BURGER": Decimal("14.00"),
    "RS-CHEESE": Decimal("15.00"),
    "RS-FRIES": Decimal("5.00"),
    "RS-SALAD": Decimal("6.00"),
}
