from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from gst_invoice.models.invoice import TaxRates
from gst_invoice.models.party import Customer, SellerProfile


@dataclass(frozen=True)
class DocumentLine:
    """One itemized row, with its amount already computed and rounded."""

    serial_no: int
    description: str
    hsn_sac: str
    quantity: Decimal
    unit: str
    rate: Decimal
    amount: Decimal


@dataclass(frozen=True)
class TaxLine:
    label: str  # CGST, SGST or IGST
    percent: Decimal
    amount: Decimal


@dataclass(frozen=True)
class InvoiceDocumentSnapshot:
    """Read-only, presentation-ready view of one invoice.

    Produced by the document builder, consumed by the renderer, then discarded.
    """

    invoice_no: str
    invoice_date: str  # DD-MM-YYYY
    seller: SellerProfile
    customer: Customer
    lines: tuple[DocumentLine, ...]
    tax_rates: TaxRates
    tax_lines: tuple[TaxLine, ...]
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    amount_in_words: str
    regime: str
    po_no: str | None = None
    po_date: str | None = None
    dc_no: str | None = None
    dc_date: str | None = None


@dataclass(frozen=True)
class DocumentArtifact:
    filename: str
    content: bytes
    media_type: str = "application/pdf"
