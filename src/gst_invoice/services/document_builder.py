from __future__ import annotations

import logging
from typing import cast

from gst_invoice.models.document import DocumentLine, InvoiceDocumentSnapshot, TaxLine
from gst_invoice.models.invoice import CustomerId, Invoice, TaxRates
from gst_invoice.models.party import Customer, SellerProfile
from gst_invoice.services.arithmetic import InvoiceTotals, compute_totals, line_amount, round2
from gst_invoice.services.exceptions import ValidationError
from gst_invoice.utils.formatters import format_date
from gst_invoice.utils.states import normalize_state, state_from_gstin
from gst_invoice.utils.validators import validate_gstin
from gst_invoice.utils.words import amount_in_words

logger = logging.getLogger(__name__)


def _check_items(invoice: Invoice, allow_empty: bool, errors: dict[str, str]) -> None:
    if not invoice.items and not allow_empty:
        errors["items"] = "at least one line item is required"
    for i, item in enumerate(invoice.items):
        if not item.description:
            errors[f"items[{i}].description"] = "required"
        if item.quantity <= 0:
            errors[f"items[{i}].quantity"] = "must be greater than zero"
        if not item.hsn_sac:
            errors[f"items[{i}].hsn_sac"] = "required"
        if item.rate < 0:
            errors[f"items[{i}].rate"] = "must not be negative"


def _check_customer(customer: object, errors: dict[str, str]) -> None:
    if customer is None:
        errors["customer"] = "required"
        return
    if isinstance(customer, CustomerId):
        errors["customer"] = f"customer '{customer.value}' has not been fetched"
        return
    if not isinstance(customer, Customer):
        errors["customer"] = "must be a resolved customer"
        return
    if not customer.customer_name:
        errors["customer.customer_name"] = "required"
    for name in customer.address.missing_fields():
        errors[f"customer.address.{name}"] = "required"


def _check_dates(invoice: Invoice, errors: dict[str, str]) -> dict[str, str | None]:
    formatted: dict[str, str | None] = {}
    for name in ("invoice_date", "po_date", "dc_date"):
        raw = getattr(invoice, name)
        if not raw:
            if name == "invoice_date":
                errors[name] = "required"
            formatted[name] = None
            continue
        try:
            formatted[name] = format_date(raw)
        except ValueError:
            errors[name] = f"invalid date '{raw}'"
            formatted[name] = None
    return formatted


def _check_rates(rates: TaxRates | None, errors: dict[str, str]) -> None:
    if rates is None:
        errors["tax_rates"] = "not set"
        return
    for name in ("cgst_percent", "sgst_percent", "igst_percent"):
        if getattr(rates, name) < 0:
            errors[f"tax_rates.{name}"] = "must not be negative"
    if not rates.is_well_formed():
        errors.setdefault(
            "tax_rates", "use either CGST and SGST together, or IGST alone"
        )


def _warn_on_gstin(customer: Customer) -> None:
    """Log mismatches between the buyer's GSTIN and address; they never block printing."""
    if not customer.gst_number:
        return
    try:
        gstin = validate_gstin(customer.gst_number)
    except ValueError:
        logger.warning("Customer %s has a malformed GSTIN: %s", customer.customer_name, customer.gst_number)
        return
    if state_from_gstin(gstin) != normalize_state(customer.address.state):
        logger.warning(
            "Customer %s: GSTIN %s does not match address state %s",
            customer.customer_name,
            gstin,
            customer.address.state,
        )


def _tax_lines(rates: TaxRates, totals: InvoiceTotals) -> tuple[TaxLine, ...]:
    components = (
        ("CGST", rates.cgst_percent, totals.cgst_amount),
        ("SGST", rates.sgst_percent, totals.sgst_amount),
        ("IGST", rates.igst_percent, totals.igst_amount),
    )
    return tuple(
        TaxLine(label=label, percent=percent, amount=round2(amount))
        for label, percent, amount in components
        if percent > 0
    )


def build_snapshot(
    invoice: Invoice,
    customer: Customer | CustomerId | None,
    seller: SellerProfile,
    *,
    allow_empty: bool = False,
) -> InvoiceDocumentSnapshot:
    """Validate an invoice and its customer and assemble the printable snapshot.

    Totals are always recomputed from the items; totals stored on the
    invoice record are ignored. Every violated field is reported in a single
    ValidationError, and no snapshot is produced in that case.
    """
    errors: dict[str, str] = {}
    if not invoice.invoice_no:
        errors["invoice_no"] = "required"
    _check_items(invoice, allow_empty, errors)
    _check_customer(customer, errors)
    dates = _check_dates(invoice, errors)
    _check_rates(invoice.tax_rates, errors)

    if errors:
        raise ValidationError(f"Invoice {invoice.invoice_no or '?'} cannot be printed", errors)

    customer = cast(Customer, customer)
    rates = cast(TaxRates, invoice.tax_rates)
    _warn_on_gstin(customer)

    totals = compute_totals(invoice.items, rates)
    shown = totals.rounded()
    if invoice.stored_totals.get("totalAmount") not in (None, ""):
        logger.debug(
            "Invoice %s: stored total %s replaced by computed %s",
            invoice.invoice_no,
            invoice.stored_totals["totalAmount"],
            shown.total_amount,
        )

    lines = tuple(
        DocumentLine(
            serial_no=i,
            description=item.description,
            hsn_sac=item.hsn_sac,
            quantity=item.quantity,
            unit=item.unit,
            rate=round2(item.rate),
            amount=round2(line_amount(item)),
        )
        for i, item in enumerate(invoice.items, start=1)
    )

    return InvoiceDocumentSnapshot(
        invoice_no=invoice.invoice_no,
        invoice_date=dates["invoice_date"] or "",
        seller=seller,
        customer=customer,
        lines=lines,
        tax_rates=rates,
        tax_lines=_tax_lines(rates, totals),
        subtotal=shown.subtotal,
        tax_amount=shown.tax_amount,
        total_amount=shown.total_amount,
        amount_in_words=amount_in_words(shown.total_amount),
        regime=rates.regime,
        po_no=invoice.po_no,
        po_date=dates["po_date"],
        dc_no=invoice.dc_no,
        dc_date=dates["dc_date"],
    )
