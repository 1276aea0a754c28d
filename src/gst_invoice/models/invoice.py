from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Union

from gst_invoice.models.party import Customer
from gst_invoice.services.exceptions import ValidationError

if TYPE_CHECKING:
    from gst_invoice.services.arithmetic import InvoiceTotals

ZERO = Decimal("0")


def to_decimal(value: object, field_path: str) -> Decimal:
    """Convert a record value to Decimal, going through str() so floats keep their printed form."""
    if isinstance(value, bool) or value is None or value == "":
        raise ValidationError("Invalid number", {field_path: "must be a number"})
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError("Invalid number", {field_path: "must be a number"}) from None
    if not d.is_finite():
        raise ValidationError("Invalid number", {field_path: "must be a finite number"})
    return d


def _wire(value: Decimal) -> int | float:
    """JSON-friendly number for the record store."""
    return int(value) if value == value.to_integral_value() else float(value)


def _opt_text(value: object) -> str | None:
    text = "" if value is None else str(value).strip()
    return text or None


@dataclass(frozen=True)
class LineItem:
    description: str
    hsn_sac: str
    quantity: Decimal
    rate: Decimal
    unit: str = "NOS"

    @property
    def amount(self) -> Decimal:
        return self.quantity * self.rate

    @classmethod
    def from_dict(cls, d: dict, path: str = "item") -> LineItem:
        """Create a LineItem from a record dict; raises ValidationError naming bad numeric fields."""
        errors: dict[str, str] = {}
        numbers: dict[str, Decimal] = {}
        for key in ("quantity", "rate"):
            try:
                numbers[key] = to_decimal(d.get(key), f"{path}.{key}")
            except ValidationError as exc:
                errors.update(exc.errors)
        if errors:
            raise ValidationError("Invalid line item", errors)
        return cls(
            description=str(d.get("description") or "").strip(),
            hsn_sac=str(d.get("hsnSac") or "").strip(),
            quantity=numbers["quantity"],
            rate=numbers["rate"],
            unit=str(d.get("unit") or "NOS").strip(),
        )

    def to_record(self) -> dict:
        return {
            "description": self.description,
            "hsnSac": self.hsn_sac,
            "quantity": _wire(self.quantity),
            "rate": _wire(self.rate),
            "amount": _wire(self.amount),
        }


INTRA_STATE = "intra-state"
INTER_STATE = "inter-state"
EXEMPT = "exempt"
INVALID = "invalid"


@dataclass(frozen=True)
class TaxRates:
    cgst_percent: Decimal = ZERO
    sgst_percent: Decimal = ZERO
    igst_percent: Decimal = ZERO

    @property
    def total_percent(self) -> Decimal:
        return self.cgst_percent + self.sgst_percent + self.igst_percent

    @property
    def regime(self) -> str:
        """Which GST regime these rates describe, or INVALID when they mix regimes."""
        split = self.cgst_percent > 0 or self.sgst_percent > 0
        if any(p < 0 for p in (self.cgst_percent, self.sgst_percent, self.igst_percent)):
            return INVALID
        if self.igst_percent > 0:
            return INVALID if split else INTER_STATE
        if split:
            return INTRA_STATE if self.cgst_percent > 0 and self.sgst_percent > 0 else INVALID
        return EXEMPT

    def is_well_formed(self) -> bool:
        return self.regime != INVALID

    @classmethod
    def from_record(cls, d: dict) -> TaxRates | None:
        """Read cgstRate/sgstRate/igstRate; None when no rate was set at all."""
        keys = ("cgstRate", "sgstRate", "igstRate")
        if all(d.get(k) is None for k in keys):
            return None
        values = [ZERO if d.get(k) is None else to_decimal(d.get(k), k) for k in keys]
        return cls(*values)


@dataclass(frozen=True)
class CustomerId:
    """Reference to a customer that still has to be fetched from the record store."""

    value: str


CustomerRef = Union[CustomerId, Customer]


def customer_ref_from_record(value: object) -> CustomerRef | None:
    """Resolve the record store's customer field (id string, {_id} stub, or embedded object)."""
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        if value.get("customerName"):
            return Customer.from_dict(value)
        ref = _opt_text(value.get("_id") or value.get("customerId"))
        return CustomerId(ref) if ref else None
    return CustomerId(str(value).strip())


@dataclass(frozen=True)
class Invoice:
    invoice_no: str
    invoice_date: str  # YYYY-MM-DD (a trailing time part is tolerated)
    customer: CustomerRef | None
    items: tuple[LineItem, ...]
    tax_rates: TaxRates | None = None  # None = not set, resolver supplies defaults
    po_no: str | None = None
    po_date: str | None = None
    dc_no: str | None = None
    dc_date: str | None = None
    record_id: str | None = None
    # Totals as stored by the record store; advisory, never rendered
    stored_totals: dict[str, object] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, d: dict) -> Invoice:
        """Create an Invoice from a record-store (or invoices/*.yaml) dict."""
        errors: dict[str, str] = {}
        raw_items = d.get("items") or []
        if not isinstance(raw_items, list):
            raise ValidationError("Invalid invoice", {"items": "must be a list"})

        items: list[LineItem] = []
        for i, raw in enumerate(raw_items):
            if not isinstance(raw, dict):
                errors[f"items[{i}]"] = "must be a mapping"
                continue
            try:
                items.append(LineItem.from_dict(raw, path=f"items[{i}]"))
            except ValidationError as exc:
                errors.update(exc.errors)

        tax_rates = None
        try:
            tax_rates = TaxRates.from_record(d)
        except ValidationError as exc:
            errors.update(exc.errors)

        if errors:
            raise ValidationError("Invalid invoice", errors)

        return cls(
            invoice_no=str(d.get("invoiceNo") or "").strip(),
            invoice_date=str(d.get("invoiceDate") or "").strip(),
            customer=customer_ref_from_record(d.get("customer")),
            items=tuple(items),
            tax_rates=tax_rates,
            po_no=_opt_text(d.get("poNo")),
            po_date=_opt_text(d.get("poDate")),
            dc_no=_opt_text(d.get("dcNo")),
            dc_date=_opt_text(d.get("dcDate")),
            record_id=_opt_text(d.get("_id")),
            stored_totals={
                k: d[k] for k in ("subtotal", "taxAmount", "totalAmount") if k in d
            },
        )

    @property
    def customer_key(self) -> str | None:
        """Record-store id of the referenced customer, if known."""
        if isinstance(self.customer, CustomerId):
            return self.customer.value
        if isinstance(self.customer, Customer):
            return self.customer.record_id
        return None

    def with_items(self, items: list[LineItem] | tuple[LineItem, ...]) -> Invoice:
        """Replace the full item list."""
        return replace(self, items=tuple(items))

    def with_tax_rates(self, rates: TaxRates) -> Invoice:
        """Replace the full set of tax rates."""
        return replace(self, tax_rates=rates)

    def with_customer(self, customer: Customer) -> Invoice:
        return replace(self, customer=customer)

    def to_record(self, totals: InvoiceTotals) -> dict:
        """Payload for the record store; *totals* must be freshly computed from the items."""
        from gst_invoice.services.arithmetic import round2

        rates = self.tax_rates or TaxRates()
        return {
            "invoiceNo": self.invoice_no,
            "invoiceDate": self.invoice_date,
            "poNo": self.po_no or "",
            "poDate": self.po_date or "",
            "dcNo": self.dc_no or "",
            "dcDate": self.dc_date or "",
            "customer": self.customer_key or "",
            "items": [item.to_record() for item in self.items],
            "cgstRate": _wire(rates.cgst_percent),
            "sgstRate": _wire(rates.sgst_percent),
            "igstRate": _wire(rates.igst_percent),
            "subtotal": _wire(round2(totals.subtotal)),
            "taxAmount": _wire(round2(totals.tax_amount)),
            "totalAmount": _wire(round2(totals.total_amount)),
        }
