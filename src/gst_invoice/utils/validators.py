from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation

# 2 digit state code, 10 char PAN, entity number, "Z", checksum
_GSTIN_RE = re.compile(r"\d{2}[A-Z]{5}\d{4}[A-Z][1-9A-Z]Z[0-9A-Z]")


def parse_date(value: str) -> date:
    """Parse an ISO date, tolerating a trailing time part (2024-03-05T00:00:00.000Z).

    Raises ValueError for anything else.
    """
    text = str(value).strip()
    try:
        return date.fromisoformat(text.split("T", 1)[0])
    except ValueError:
        raise ValueError(f"Invalid date: '{value}'. Use YYYY-MM-DD.") from None


def validate_percent(value: str) -> str:
    """Validate and normalize a percentage value (0.00-100.00)."""
    try:
        d = Decimal(str(value).strip())
        if not d.is_finite():
            raise InvalidOperation
    except InvalidOperation:
        raise ValueError(f"Invalid percentage: '{value}'") from None
    if d < 0 or d > 100:
        raise ValueError("Percentage must be between 0.00 and 100.00")
    return f"{d:.2f}"


def validate_gstin(value: str) -> str:
    """Validate the shape of a 15-character GSTIN (checksum not verified)."""
    normalized = value.strip().upper()
    if not _GSTIN_RE.fullmatch(normalized):
        raise ValueError(f"Invalid GSTIN: '{value}'")
    return normalized
