"""Spell out currency amounts in Indian English.

Uses the Indian digit grouping (thousand, lakh = 10^5, crore = 10^7) rather
than million/billion, e.g. ``1234567.89`` becomes "Twelve Lakh Thirty Four
Thousand Five Hundred Sixty Seven Rupees and Eighty Nine Paise only".
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext

from gst_invoice.services.exceptions import ValidationError

_UNITS = ("", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine")
_TEENS = (
    "Ten",
    "Eleven",
    "Twelve",
    "Thirteen",
    "Fourteen",
    "Fifteen",
    "Sixteen",
    "Seventeen",
    "Eighteen",
    "Nineteen",
)
_TENS = ("", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety")

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000

# Integer digits beyond this are rejected rather than spelled out
MAX_DIGITS = 40

_GROUPS = ((CRORE, "Crore"), (LAKH, "Lakh"), (THOUSAND, "Thousand"))


def _below_hundred(n: int) -> list[str]:
    if n == 0:
        return []
    if n < 10:
        return [_UNITS[n]]
    if n < 20:
        return [_TEENS[n - 10]]
    tens, units = divmod(n, 10)
    return [_TENS[tens]] + ([_UNITS[units]] if units else [])


def _below_thousand(n: int) -> list[str]:
    hundreds, rest = divmod(n, 100)
    words = [_UNITS[hundreds], "Hundred"] if hundreds else []
    return words + _below_hundred(rest)


def _indian(n: int) -> list[str]:
    """Words for a non-negative integer; empty for zero."""
    words: list[str] = []
    for size, name in _GROUPS:
        if n >= size:
            count, n = divmod(n, size)
            # Counts of 100 crore and more are themselves grouped the Indian way
            words += (_indian(count) if size == CRORE else _below_thousand(count)) + [name]
    return words + _below_thousand(n)


def integer_in_words(n: int) -> str:
    """Spell out a non-negative integer ("Zero" for 0)."""
    if n < 0:
        raise ValidationError("Negative number", {"amount": "must not be negative"})
    return " ".join(_indian(n)) or "Zero"


def _parse_amount(amount: object) -> Decimal:
    if isinstance(amount, bool) or amount is None:
        raise ValidationError("Invalid amount", {"amount": "must be a number"})
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except InvalidOperation:
        raise ValidationError("Invalid amount", {"amount": "must be a number"}) from None
    if not value.is_finite():
        raise ValidationError("Invalid amount", {"amount": "must be a finite number"})
    if value < 0:
        raise ValidationError("Invalid amount", {"amount": "must not be negative"})
    if value.adjusted() >= MAX_DIGITS:
        raise ValidationError("Invalid amount", {"amount": "too large"})
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        cents = value.quantize(Decimal("0.01"))
    if value != cents:
        raise ValidationError("Invalid amount", {"amount": "at most 2 decimal places"})
    return value


def amount_in_words(amount: object, major: str = "Rupees", minor: str = "Paise") -> str:
    """Spell out a non-negative amount with at most two decimal places.

    >>> amount_in_words("2360")
    'Two Thousand Three Hundred Sixty Rupees only'
    >>> amount_in_words("0.50")
    'Zero Rupees and Fifty Paise only'

    Raises ValidationError for negative, non-finite or over-precise amounts.
    """
    value = _parse_amount(amount)
    whole = int(value)
    paise = int((value - whole) * 100)

    parts = [integer_in_words(whole), major]
    if paise:
        parts += ["and", integer_in_words(paise), minor]
    parts.append("only")
    return " ".join(parts)
