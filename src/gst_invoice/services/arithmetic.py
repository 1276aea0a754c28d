"""Money and quantity arithmetic for invoices.

Everything is exact ``Decimal`` arithmetic. Amounts are aggregated first and
rounded once (half-up, two places) when they are displayed or spelled out,
so per-line rounding never compounds into the totals.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext

from gst_invoice.models.invoice import LineItem, TaxRates

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    """Round a monetary amount to 2 decimal places, half-up.

    Precision is widened to fit the integer digits, so large amounts round
    instead of raising InvalidOperation.
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


def line_amount(item: LineItem) -> Decimal:
    return item.quantity * item.rate


def subtotal(items: Iterable[LineItem]) -> Decimal:
    return sum((line_amount(item) for item in items), ZERO)


def component_amount(base: Decimal, percent: Decimal) -> Decimal:
    """Tax for a single GST component at *percent* of *base*."""
    return base * percent / HUNDRED


def tax_amount(base: Decimal, rates: TaxRates | None) -> Decimal:
    if rates is None:
        return ZERO
    return component_amount(base, rates.total_percent)


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal

    def rounded(self) -> InvoiceTotals:
        """Copy with every figure rounded once for display."""
        return InvoiceTotals(
            subtotal=round2(self.subtotal),
            cgst_amount=round2(self.cgst_amount),
            sgst_amount=round2(self.sgst_amount),
            igst_amount=round2(self.igst_amount),
            tax_amount=round2(self.tax_amount),
            total_amount=round2(self.total_amount),
        )


def compute_totals(items: Iterable[LineItem], rates: TaxRates | None) -> InvoiceTotals:
    """Exact subtotal, per-component tax, tax and grand total for *items*.

    Unset rates are treated as zero. An empty item list yields all zeros.
    """
    rates = rates or TaxRates()
    base = subtotal(items)
    tax = tax_amount(base, rates)
    return InvoiceTotals(
        subtotal=base,
        cgst_amount=component_amount(base, rates.cgst_percent),
        sgst_amount=component_amount(base, rates.sgst_percent),
        igst_amount=component_amount(base, rates.igst_percent),
        tax_amount=tax,
        total_amount=base + tax,
    )
