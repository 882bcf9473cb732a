"""
Check Service — Printed guest-check lines

Fixed-width (40 column) rendering of a check as it would come off the
receipt printer: header, one line per item, totals block, open/closed banner.
"""
from check_service.models.check import Check

WIDTH = 40


def _row(left: str, right: str = "") -> str:
    gap = max(1, WIDTH - len(left) - len(right))
    return f"{left}{' ' * gap}{right}"


def _money(value) -> str:
    return f"${value:.2f}"


def render_check(check: Check) -> list[str]:
    table = check.table_name or "-"
    lines = [
        _row(f"{check.check_number} STS", "Page 1"),
        "-" * WIDTH,
        _row(f"CHK {check.check_number}", f"TBL {table}"),
        check.created_time.strftime("%Y-%m-%d").center(WIDTH),
        "-" * WIDTH,
    ]
    for item in check.items:
        lines.append(_row(f" {item.quantity} {item.sku}", _money(item.line_total)))

    if check.items:
        lines += [
            _row("   Subtotal", _money(check.totals.subtotal)),
            _row("   Tax", _money(check.totals.tax)),
            _row("   Service", _money(check.totals.service)),
            _row("   Total", _money(check.totals.total)),
        ]

    if check.is_open:
        lines.append(" Check Open ".center(WIDTH, "-"))
        lines.append(check.created_time.strftime("%Y-%m-%d %H:%M:%S").center(WIDTH))
    else:
        lines.append(" Check Closed ".center(WIDTH, "-"))
        if check.tender is not None:
            lines.append(_row(f"   Room {check.tender.room_number}", check.tender.transaction_code))
        if check.closed_time is not None:
            lines.append(check.closed_time.strftime("%Y-%m-%d %H:%M:%S").center(WIDTH))
    return lines
