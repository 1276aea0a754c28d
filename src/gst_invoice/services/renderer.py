"""Lay out an invoice snapshot as a printable tax invoice.

The renderer only formats values already present on the snapshot; every
number it prints was computed by the document builder.
"""

from __future__ import annotations

import io
import logging
import textwrap
from dataclasses import dataclass
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from gst_invoice.models.document import DocumentArtifact, InvoiceDocumentSnapshot
from gst_invoice.services.exceptions import RenderError
from gst_invoice.utils.formatters import format_inr, format_number

logger = logging.getLogger(__name__)

TITLE = "TAX INVOICE"
TABLE_HEADER = ("S.L.No", "Description of Goods", "HSN/SAC", "Qty", "Rate", "Amount in INR")


@dataclass(frozen=True)
class DocumentLayout:
    title: str
    seller_lines: tuple[str, ...]
    billing_to: tuple[str, ...]
    invoice_meta: tuple[tuple[str, str], ...]
    table_header: tuple[str, ...]
    item_rows: tuple[tuple[str, ...], ...]
    totals_rows: tuple[tuple[str, str], ...]
    amount_in_words: str
    receiver_signature: tuple[str, ...]
    seller_signature: tuple[str, ...]


def layout_document(snapshot: InvoiceDocumentSnapshot) -> DocumentLayout:
    """Arrange snapshot fields into the sections of the printed invoice."""
    seller = snapshot.seller
    customer = snapshot.customer

    meta = [("Invoice No:", snapshot.invoice_no), ("Invoice Date:", snapshot.invoice_date)]
    for label, value in (
        ("PO No:", snapshot.po_no),
        ("PO Date:", snapshot.po_date),
        ("DC No:", snapshot.dc_no),
        ("DC Date:", snapshot.dc_date),
    ):
        if value:
            meta.append((label, value))

    rows = tuple(
        (
            str(line.serial_no),
            line.description,
            line.hsn_sac,
            f"{format_number(line.quantity)} {line.unit}",
            format_inr(line.rate),
            format_inr(line.amount),
        )
        for line in snapshot.lines
    )

    totals = [("TOTAL", format_inr(snapshot.subtotal))]
    totals += [
        (f"{tax.label} @ {format_number(tax.percent)}%", format_inr(tax.amount))
        for tax in snapshot.tax_lines
    ]
    totals.append(("GRAND TOTAL", format_inr(snapshot.total_amount)))

    return DocumentLayout(
        title=TITLE,
        seller_lines=(
            seller.name,
            seller.address.one_line(),
            f"PAN: {seller.pan_number}    GSTIN: {seller.gst_number}",
            f"Email: {seller.email}    PH: {seller.phone}",
        ),
        billing_to=(
            "Billing To:",
            customer.customer_name,
            customer.address.one_line(),
            f"GSTIN: {customer.gst_number or 'N/A'}",
        ),
        invoice_meta=tuple(meta),
        table_header=TABLE_HEADER,
        item_rows=rows,
        totals_rows=tuple(totals),
        amount_in_words=snapshot.amount_in_words,
        receiver_signature=(
            "Receiver's signature & Seal",
            "Name: ___________________",
            "Date: ___________________",
        ),
        seller_signature=(f"For {seller.name}", "Authorized Signatory"),
    )


# --- Plain text ---

TEXT_WIDTH = 88
_COLUMNS = (6, 30, 10, 10, 12, 14)  # widths of the item table columns
_RIGHT_ALIGNED = {3, 4, 5}


def _table_line(cells: tuple[str, ...]) -> list[str]:
    wrapped = [textwrap.wrap(cell, width) or [""] for cell, width in zip(cells, _COLUMNS)]
    height = max(len(w) for w in wrapped)
    out = []
    for row in range(height):
        parts = []
        for col, (lines, width) in enumerate(zip(wrapped, _COLUMNS)):
            text = lines[row] if row < len(lines) else ""
            parts.append(text.rjust(width) if col in _RIGHT_ALIGNED else text.ljust(width))
        out.append(" ".join(parts).rstrip())
    return out


def render_text(snapshot: InvoiceDocumentSnapshot) -> str:
    """Fixed-width plain-text rendition, identical for identical snapshots."""
    layout = layout_document(snapshot)
    rule = "-" * TEXT_WIDTH
    half = TEXT_WIDTH // 2

    out = [layout.title.center(TEXT_WIDTH).rstrip(), ""]
    out += [line.center(TEXT_WIDTH).rstrip() for line in layout.seller_lines]
    out.append("")

    right = [f"{label} {value}" for label, value in layout.invoice_meta]
    for i in range(max(len(layout.billing_to), len(right))):
        left = layout.billing_to[i] if i < len(layout.billing_to) else ""
        meta = right[i] if i < len(right) else ""
        out.append((left.ljust(half) + meta.rjust(TEXT_WIDTH - half)).rstrip())
    out.append("")

    out.append(rule)
    out += _table_line(layout.table_header)
    out.append(rule)
    for row in layout.item_rows:
        out += _table_line(row)
    out.append(rule)

    for label, value in layout.totals_rows:
        out.append(f"{label:>{TEXT_WIDTH - 16}} {value:>15}")
    out.append("")
    out.append(f"Amount in words: {layout.amount_in_words}")
    out.append("")

    height = max(len(layout.receiver_signature), len(layout.seller_signature))
    for i in range(height):
        left = layout.receiver_signature[i] if i < len(layout.receiver_signature) else ""
        sig = layout.seller_signature[i] if i < len(layout.seller_signature) else ""
        out.append((left.ljust(half) + sig.rjust(TEXT_WIDTH - half)).rstrip())
    return "\n".join(out) + "\n"


# --- PDF ---


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "InvoiceTitle", parent=base["Heading1"], fontSize=16, alignment=1, spaceAfter=6
        ),
        "seller_name": ParagraphStyle(
            "SellerName", parent=base["Normal"], fontName="Helvetica-Bold", fontSize=12, alignment=1
        ),
        "center": ParagraphStyle("Center", parent=base["Normal"], fontSize=9, alignment=1),
        "cell": ParagraphStyle("Cell", parent=base["Normal"], fontSize=9, leading=11),
        "right": ParagraphStyle("Right", parent=base["Normal"], fontSize=9, alignment=2),
        "words": ParagraphStyle(
            "Words", parent=base["Normal"], fontName="Helvetica-Oblique", fontSize=10
        ),
    }


def _para(text: str, style: ParagraphStyle, bold: bool = False) -> Paragraph:
    markup = escape(text)
    return Paragraph(f"<b>{markup}</b>" if bold else markup, style)


_GRID = colors.Color(0.8, 0.8, 0.8)


def _story(layout: DocumentLayout) -> list:
    st = _styles()
    elements: list = [Paragraph(escape(layout.title), st["title"])]

    elements.append(_para(layout.seller_lines[0], st["seller_name"]))
    elements += [_para(line, st["center"]) for line in layout.seller_lines[1:]]
    elements.append(Spacer(1, 10))

    left = [_para(layout.billing_to[0], st["cell"], bold=True)]
    left += [_para(line, st["cell"]) for line in layout.billing_to[1:]]
    right = [
        Paragraph(f"<b>{escape(label)}</b> {escape(value)}", st["right"])
        for label, value in layout.invoice_meta
    ]
    billing = Table([[left, right]], colWidths=[90 * mm, 90 * mm])
    billing.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    elements.append(billing)
    elements.append(Spacer(1, 10))

    data = [list(layout.table_header)]
    for row in layout.item_rows:
        cells: list = list(row)
        cells[1] = _para(row[1], st["cell"])
        data.append(cells)
    items = Table(
        data,
        colWidths=[14 * mm, 64 * mm, 22 * mm, 22 * mm, 26 * mm, 32 * mm],
        repeatRows=1,
    )
    items.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.Color(0.92, 0.92, 0.92)),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("GRID", (0, 0), (-1, -1), 0.5, _GRID),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("ALIGN", (0, 0), (0, -1), "CENTER"),
                ("ALIGN", (2, 0), (3, -1), "CENTER"),
                ("ALIGN", (4, 0), (5, -1), "RIGHT"),
            ]
        )
    )
    elements.append(items)
    elements.append(Spacer(1, 8))

    totals = Table(
        [list(row) for row in layout.totals_rows], colWidths=[50 * mm, 35 * mm], hAlign="RIGHT"
    )
    totals.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (0, 0), "Helvetica-Bold"),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("LINEABOVE", (0, -1), (-1, -1), 0.5, _GRID),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
            ]
        )
    )
    elements.append(totals)
    elements.append(Spacer(1, 10))

    words = Table([[_para(layout.amount_in_words, st["words"])]], colWidths=[180 * mm])
    words.setStyle(TableStyle([("BOX", (0, 0), (-1, -1), 0.5, _GRID)]))
    elements.append(words)
    elements.append(Spacer(1, 30))

    receiver = [_para(layout.receiver_signature[0], st["cell"], bold=True)]
    receiver += [_para(line, st["cell"]) for line in layout.receiver_signature[1:]]
    signatory = [_para(layout.seller_signature[0], st["right"], bold=True)]
    signatory += [_para(line, st["right"]) for line in layout.seller_signature[1:]]
    signatures = Table([[receiver, signatory]], colWidths=[90 * mm, 90 * mm])
    signatures.setStyle(
        TableStyle(
            [
                ("LINEABOVE", (0, 0), (-1, 0), 0.5, _GRID),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    elements.append(signatures)
    return elements


def render_pdf(snapshot: InvoiceDocumentSnapshot) -> DocumentArtifact:
    """Render the snapshot as an A4 PDF invoice."""
    layout = layout_document(snapshot)

    def _footer(canvas, doc) -> None:
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.drawRightString(
            A4[0] - 15 * mm, 10 * mm, f"{snapshot.invoice_no} - Page {doc.page}"
        )
        canvas.restoreState()

    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=f"Tax Invoice {snapshot.invoice_no}",
        author=snapshot.seller.name,
    )
    try:
        doc.build(_story(layout), onFirstPage=_footer, onLaterPages=_footer)
    except Exception as exc:
        logger.error("PDF rendering failed for invoice %s", snapshot.invoice_no, exc_info=True)
        raise RenderError(f"Could not render invoice {snapshot.invoice_no}: {exc}") from exc

    return DocumentArtifact(filename=f"{safe_filename(snapshot.invoice_no)}.pdf", content=buf.getvalue())


def safe_filename(name: str) -> str:
    """Invoice number reduced to characters safe in a file name."""
    cleaned = "".join(c if c.isalnum() or c in "-_." else "_" for c in name).strip("._")
    return cleaned or "invoice"
