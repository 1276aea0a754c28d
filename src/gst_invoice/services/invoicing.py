from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

from gst_invoice.config import CUSTOMER_PREFIX, INVOICE_PREFIX, get_documents_dir
from gst_invoice.models.document import DocumentArtifact, InvoiceDocumentSnapshot
from gst_invoice.models.invoice import CustomerId, CustomerRef, Invoice
from gst_invoice.models.party import Customer, SellerProfile
from gst_invoice.services import records_client
from gst_invoice.services.arithmetic import compute_totals
from gst_invoice.services.document_builder import build_snapshot
from gst_invoice.services.exceptions import ValidationError
from gst_invoice.services.renderer import render_pdf
from gst_invoice.services.tax_rules import apply_default_rates
from gst_invoice.utils.formatters import format_inr
from gst_invoice.utils.registry import add_document
from gst_invoice.utils.sequence import next_number

logger = logging.getLogger(__name__)


@dataclass
class PreparedDocument:
    """Everything needed to preview or print one invoice."""

    invoice: Invoice
    customer: Customer
    snapshot: InvoiceDocumentSnapshot


def resolve_customer(
    ref: CustomerRef | None, fetch: Callable[[str], Customer]
) -> Customer:
    """Turn a customer reference into a full Customer, fetching it when only the id is known."""
    if ref is None:
        raise ValidationError("Invoice has no customer", {"customer": "required"})
    if isinstance(ref, CustomerId):
        return fetch(ref.value)
    return ref


def prepare_document(
    invoice: Invoice,
    customer: Customer,
    seller: SellerProfile,
    standard_rate: Decimal,
) -> PreparedDocument:
    """Fill in default tax rates and build the printable snapshot."""
    invoice = apply_default_rates(invoice, seller, customer, standard_rate)
    snapshot = build_snapshot(invoice, customer, seller)
    return PreparedDocument(invoice=invoice, customer=customer, snapshot=snapshot)


def render(prepared: PreparedDocument) -> DocumentArtifact:
    return render_pdf(prepared.snapshot)


def save_artifact(
    artifact: DocumentArtifact,
    prepared: PreparedDocument,
    directory: Path | None = None,
    filename: str | None = None,
) -> str:
    """Write the rendered document and register it; returns its path."""
    out_dir = directory or get_documents_dir()
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / (filename or artifact.filename)
    tmp = out_path.with_suffix(out_path.suffix + ".tmp")
    tmp.write_bytes(artifact.content)
    os.replace(tmp, out_path)

    snapshot = prepared.snapshot
    try:
        add_document(
            snapshot.invoice_no,
            str(out_path),
            customer=snapshot.customer.customer_name,
            total_amount=format_inr(snapshot.total_amount),
            rendered_at=datetime.now(UTC).isoformat(timespec="seconds"),
        )
    except Exception:
        logger.warning("Failed to register document for %s", snapshot.invoice_no, exc_info=True)
    return str(out_path)


# --- Record store ---


def fetch_customer(base_url: str, customer_id: str) -> Customer:
    return Customer.from_dict(records_client.get_customer(base_url, customer_id))


def load_invoice_from_store(base_url: str, invoice_id: str) -> tuple[Invoice, Customer]:
    """Fetch an invoice and fully resolve its customer before anything is computed."""
    invoice = Invoice.from_dict(records_client.get_invoice(base_url, invoice_id))
    ref = invoice.customer
    # List endpoints embed a trimmed customer; refetch it in full
    if isinstance(ref, Customer) and ref.record_id and ref.address.missing_fields():
        ref = CustomerId(ref.record_id)
    customer = resolve_customer(ref, lambda cid: fetch_customer(base_url, cid))
    return invoice.with_customer(customer), customer


def render_from_store(
    base_url: str,
    invoice_id: str,
    seller: SellerProfile,
    standard_rate: Decimal,
) -> tuple[PreparedDocument, DocumentArtifact]:
    invoice, customer = load_invoice_from_store(base_url, invoice_id)
    prepared = prepare_document(invoice, customer, seller, standard_rate)
    return prepared, render(prepared)


def save_invoice(base_url: str, invoice: Invoice) -> dict:
    """Create or replace *invoice* in the store with totals recomputed from its items."""
    if not invoice.customer_key:
        raise ValidationError("Invoice has no stored customer", {"customer": "required"})
    payload = invoice.to_record(compute_totals(invoice.items, invoice.tax_rates))
    if invoice.record_id:
        return records_client.update_invoice(base_url, invoice.record_id, payload)
    return records_client.create_invoice(base_url, payload)


def suggest_invoice_no(base_url: str) -> str:
    return next_number(
        (r.get("invoiceNo") for r in records_client.iter_invoices(base_url)), INVOICE_PREFIX
    )


def suggest_customer_id(base_url: str) -> str:
    return next_number(
        (r.get("customerId") for r in records_client.iter_customers(base_url)), CUSTOMER_PREFIX
    )
