from __future__ import annotations

from datetime import date
from decimal import Decimal

from gst_invoice.utils.validators import parse_date


def format_inr(value: Decimal) -> str:
    """Format an amount with Indian digit grouping: 1234567.5 -> 12,34,567.50."""
    d = Decimal(value)
    sign = "-" if d < 0 else ""
    whole, _, frac = f"{abs(d):.2f}".partition(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        pairs = []
        while len(head) > 2:
            pairs.insert(0, head[-2:])
            head = head[:-2]
        whole = ",".join([head, *pairs, tail])
    return f"{sign}{whole}.{frac}"


def format_number(value: Decimal) -> str:
    """Plain form of a quantity or percentage without trailing zeros: 9.00 -> 9, 2.50 -> 2.5."""
    d = Decimal(value)
    if d == d.to_integral_value():
        return str(d.quantize(Decimal("1")))
    return format(d.normalize(), "f")


def format_date(value: str | date) -> str:
    """Format an ISO date (or date) as DD-MM-YYYY."""
    d = value if isinstance(value, date) else parse_date(value)
    return d.strftime("%d-%m-%Y")
