from __future__ import annotations

import logging
from decimal import Decimal

from gst_invoice.models.invoice import Invoice, TaxRates
from gst_invoice.models.party import Customer, SellerProfile
from gst_invoice.services.exceptions import RegimeResolutionError, ValidationError
from gst_invoice.utils.states import normalize_state, state_name

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
TWO = Decimal("2")


def _state_code(value: str | None, field_path: str, party: str) -> str:
    if value is None or not str(value).strip():
        raise RegimeResolutionError(
            f"Cannot resolve GST regime: {party} state is missing",
            {field_path: "required"},
        )
    code = normalize_state(value)
    if code is None:
        raise RegimeResolutionError(
            f"Cannot resolve GST regime: unknown {party} state '{value}'",
            {field_path: f"unknown state '{value}'"},
        )
    return code


def resolve_tax_rates(
    seller_state: str | None,
    buyer_state: str | None,
    standard_rate: Decimal,
) -> TaxRates:
    """Pick the GST split for a sale.

    Intra-state (same state) sales carry CGST and SGST at half the slab each;
    inter-state sales carry IGST at the full slab.
    """
    if standard_rate < 0 or standard_rate > 100:
        raise ValidationError(
            "Invalid GST slab", {"standard_rate": "must be between 0 and 100"}
        )
    seller = _state_code(seller_state, "seller.address.state", "seller")
    buyer = _state_code(buyer_state, "customer.address.state", "buyer")

    if buyer == seller:
        half = standard_rate / TWO
        return TaxRates(cgst_percent=half, sgst_percent=half, igst_percent=ZERO)
    return TaxRates(cgst_percent=ZERO, sgst_percent=ZERO, igst_percent=standard_rate)


def apply_default_rates(
    invoice: Invoice,
    seller: SellerProfile,
    customer: Customer,
    standard_rate: Decimal,
) -> Invoice:
    """Fill in tax rates when the operator left them unset.

    Rates already on the invoice (including an explicit all-zero exemption)
    are never touched.
    """
    if invoice.tax_rates is not None:
        return invoice
    rates = resolve_tax_rates(seller.address.state, customer.address.state, standard_rate)
    logger.info(
        "Invoice %s: %s GST at %s%% (seller %s, buyer %s)",
        invoice.invoice_no,
        rates.regime,
        standard_rate,
        state_name(_state_code(seller.address.state, "seller.address.state", "seller")),
        state_name(_state_code(customer.address.state, "customer.address.state", "buyer")),
    )
    return invoice.with_tax_rates(rates)
