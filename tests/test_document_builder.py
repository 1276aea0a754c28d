from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal

import pytest

from gst_invoice.models.invoice import CustomerId, Invoice, LineItem, TaxRates
from gst_invoice.models.party import Address
from gst_invoice.services.document_builder import build_snapshot
from gst_invoice.services.exceptions import ValidationError

IGST = TaxRates(Decimal("0"), Decimal("0"), Decimal("18"))


class TestBuildSnapshot:
    def test_intra_state_totals(self, sample_invoice, customer, seller):
        snap = build_snapshot(sample_invoice, customer, seller)
        assert snap.subtotal == Decimal("2000.00")
        assert snap.tax_amount == Decimal("360.00")
        assert snap.total_amount == Decimal("2360.00")
        assert [(t.label, t.percent, t.amount) for t in snap.tax_lines] == [
            ("CGST", Decimal("9"), Decimal("180.00")),
            ("SGST", Decimal("9"), Decimal("180.00")),
        ]
        assert snap.regime == "intra-state"
        assert snap.amount_in_words == "Two Thousand Three Hundred Sixty Rupees only"

    def test_inter_state_has_single_igst_line(self, sample_invoice, interstate_customer, seller):
        invoice = sample_invoice.with_customer(interstate_customer).with_tax_rates(IGST)
        snap = build_snapshot(invoice, interstate_customer, seller)
        assert [t.label for t in snap.tax_lines] == ["IGST"]
        assert snap.tax_lines[0].amount == Decimal("360.00")
        assert snap.total_amount == Decimal("2360.00")

    def test_exempt_has_no_tax_lines(self, sample_invoice, customer, seller):
        snap = build_snapshot(sample_invoice.with_tax_rates(TaxRates()), customer, seller)
        assert snap.tax_lines == ()
        assert snap.total_amount == snap.subtotal

    def test_lines_are_numbered_in_order(self, sample_invoice, customer, seller):
        snap = build_snapshot(sample_invoice, customer, seller)
        assert [line.serial_no for line in snap.lines] == [1, 2]
        assert [line.description for line in snap.lines] == ["Gear box", "Fitting service"]
        assert snap.lines[0].amount == Decimal("1000.00")

    def test_dates_are_formatted(self, sample_invoice, customer, seller):
        snap = build_snapshot(sample_invoice, customer, seller)
        assert snap.invoice_date == "05-04-2024"
        assert snap.po_date == "01-04-2024"
        assert snap.dc_date is None

    def test_ignores_stored_totals(self, invoice_dict, customer, seller):
        invoice = Invoice.from_dict(invoice_dict).with_customer(customer)
        snap = build_snapshot(invoice, customer, seller)
        assert snap.total_amount == Decimal("2360.00")

    def test_rounds_after_aggregation(self, sample_invoice, customer, seller):
        items = [LineItem("Washer", "7318", Decimal("1"), Decimal("0.333"))] * 3
        snap = build_snapshot(
            sample_invoice.with_items(items).with_tax_rates(TaxRates()), customer, seller
        )
        assert snap.subtotal == Decimal("1.00")

    def test_large_amounts_build(self, sample_invoice, customer, seller):
        items = [LineItem("Turbine", "8406", Decimal("1e20"), Decimal("1e10"))]
        snap = build_snapshot(
            sample_invoice.with_items(items).with_tax_rates(TaxRates()), customer, seller
        )
        assert snap.subtotal == Decimal("1e30")
        assert snap.total_amount == Decimal("1e30")
        assert snap.amount_in_words.endswith("Crore Rupees only")

    def test_large_amounts_with_tax(self, sample_invoice, customer, seller):
        items = [LineItem("Turbine", "8406", Decimal("1e15"), Decimal("1e10"))]
        snap = build_snapshot(sample_invoice.with_items(items), customer, seller)
        assert snap.subtotal == Decimal("1e25")
        assert snap.tax_amount == Decimal("1.8e24")
        assert snap.total_amount == Decimal("1.18e25")

    def test_allow_empty(self, sample_invoice, customer, seller):
        snap = build_snapshot(sample_invoice.with_items([]), customer, seller, allow_empty=True)
        assert snap.lines == ()
        assert snap.total_amount == Decimal("0.00")
        assert snap.amount_in_words == "Zero Rupees only"


class TestBuildSnapshotValidation:
    def _fields(self, invoice, customer, seller) -> set[str]:
        with pytest.raises(ValidationError) as exc_info:
            build_snapshot(invoice, customer, seller)
        return set(exc_info.value.fields)

    def test_empty_items(self, sample_invoice, customer, seller):
        assert self._fields(sample_invoice.with_items([]), customer, seller) == {"items"}

    def test_zero_quantity(self, sample_invoice, customer, seller):
        items = [LineItem("Gear box", "8483", Decimal("0"), Decimal("500"))]
        assert self._fields(sample_invoice.with_items(items), customer, seller) == {
            "items[0].quantity"
        }

    def test_negative_rate(self, sample_invoice, customer, seller):
        items = list(sample_invoice.items) + [LineItem("Credit", "8483", Decimal("1"), Decimal("-5"))]
        assert self._fields(sample_invoice.with_items(items), customer, seller) == {
            "items[2].rate"
        }

    def test_blank_description(self, sample_invoice, customer, seller):
        items = [LineItem("", "8483", Decimal("1"), Decimal("5"))]
        assert "items[0].description" in self._fields(
            sample_invoice.with_items(items), customer, seller
        )

    def test_blank_hsn_sac(self, sample_invoice, customer, seller):
        items = [LineItem("Gear box", "", Decimal("1"), Decimal("5"))]
        assert self._fields(sample_invoice.with_items(items), customer, seller) == {
            "items[0].hsn_sac"
        }

    def test_reports_every_problem_at_once(self, sample_invoice, customer, seller):
        items = [
            LineItem("A", "1", Decimal("0"), Decimal("1")),
            LineItem("B", "1", Decimal("1"), Decimal("-1")),
        ]
        invoice = replace(sample_invoice, invoice_no="", items=tuple(items), invoice_date="05/04/2024")
        incomplete = replace(customer, address=Address("14 MG Road", "", "Karnataka", "560001"))
        assert self._fields(invoice, incomplete, seller) == {
            "invoice_no",
            "items[0].quantity",
            "items[1].rate",
            "invoice_date",
            "customer.address.city",
        }

    def test_missing_customer(self, sample_invoice, seller):
        assert self._fields(sample_invoice, None, seller) == {"customer"}

    def test_unresolved_customer_id(self, sample_invoice, seller):
        assert self._fields(sample_invoice, CustomerId("abc"), seller) == {"customer"}

    def test_unparsed_customer_mapping(self, sample_invoice, customer_dict, seller):
        assert self._fields(sample_invoice, customer_dict, seller) == {"customer"}

    def test_missing_customer_name(self, sample_invoice, customer, seller):
        nameless = replace(customer, customer_name="")
        assert self._fields(sample_invoice, nameless, seller) == {"customer.customer_name"}

    def test_unset_rates(self, sample_invoice, customer, seller):
        assert self._fields(replace(sample_invoice, tax_rates=None), customer, seller) == {
            "tax_rates"
        }

    def test_negative_rate_component(self, sample_invoice, customer, seller):
        rates = TaxRates(Decimal("-9"), Decimal("9"), Decimal("0"))
        assert self._fields(sample_invoice.with_tax_rates(rates), customer, seller) == {
            "tax_rates.cgst_percent",
            "tax_rates",
        }

    def test_mixed_regimes(self, sample_invoice, customer, seller):
        rates = TaxRates(Decimal("9"), Decimal("9"), Decimal("18"))
        assert self._fields(sample_invoice.with_tax_rates(rates), customer, seller) == {
            "tax_rates"
        }

    def test_bad_po_date(self, sample_invoice, customer, seller):
        invoice = replace(sample_invoice, po_date="yesterday")
        assert self._fields(invoice, customer, seller) == {"po_date"}


class TestGstinWarnings:
    def test_mismatched_state_warns(self, sample_invoice, customer, seller, caplog):
        other = replace(customer, gst_number="27AAACA1234B1Z2")
        with caplog.at_level(logging.WARNING, logger="gst_invoice.services.document_builder"):
            build_snapshot(sample_invoice, other, seller)
        assert "does not match" in caplog.text

    def test_malformed_gstin_warns_but_builds(self, sample_invoice, customer, seller, caplog):
        other = replace(customer, gst_number="NOT-A-GSTIN")
        with caplog.at_level(logging.WARNING, logger="gst_invoice.services.document_builder"):
            snap = build_snapshot(sample_invoice, other, seller)
        assert "malformed GSTIN" in caplog.text
        assert snap.total_amount == Decimal("2360.00")

    def test_matching_gstin_is_silent(self, sample_invoice, customer, seller, caplog):
        with caplog.at_level(logging.WARNING, logger="gst_invoice.services.document_builder"):
            build_snapshot(sample_invoice, customer, seller)
        assert caplog.text == ""
