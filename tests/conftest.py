from __future__ import annotations

from decimal import Decimal

import pytest

from gst_invoice.models.invoice import Invoice, LineItem, TaxRates
from gst_invoice.models.party import Customer, SellerProfile

# --- Seller fixtures ---


@pytest.fixture
def seller_dict() -> dict:
    return {
        "name": "Rhombick Technologies",
        "address": {
            "street": "Sy No 1, Kanchanayakanahalli",
            "city": "Bangalore",
            "state": "KA",
            "postal_code": "560105",
            "country": "India",
        },
        "pan_number": "ABCDE1234F",
        "gst_number": "29ABCDE1234F1Z5",
        "email": "accounts@rhombick.example",
        "phone": "9876543210",
    }


@pytest.fixture
def seller(seller_dict: dict) -> SellerProfile:
    return SellerProfile.from_dict(seller_dict)


# --- Customer fixtures ---


@pytest.fixture
def customer_dict() -> dict:
    """Customer in the seller's own state (intra-state sale)."""
    return {
        "_id": "65f0c0ffee",
        "customerId": "CUST-3",
        "customerName": "Bangalore Tools Pvt Ltd",
        "email": "purchase@blrtools.example",
        "phoneNumber": "9000000001",
        "gstNumber": "29AAACB1234C1Z9",
        "address": {
            "street": "14 MG Road",
            "city": "Bangalore",
            "state": "Karnataka",
            "postalCode": "560001",
            "country": "India",
        },
    }


@pytest.fixture
def customer(customer_dict: dict) -> Customer:
    return Customer.from_dict(customer_dict)


@pytest.fixture
def interstate_customer_dict() -> dict:
    return {
        "_id": "65f0decade",
        "customerName": "Acme Traders",
        "email": "billing@acme.example",
        "phoneNumber": "9000000002",
        "address": {
            "street": "12 Marine Drive",
            "city": "Mumbai",
            "state": "MH",
            "postalCode": "400002",
            "country": "India",
        },
    }


@pytest.fixture
def interstate_customer(interstate_customer_dict: dict) -> Customer:
    return Customer.from_dict(interstate_customer_dict)


# --- Invoice fixtures ---


@pytest.fixture
def invoice_dict() -> dict:
    return {
        "_id": "inv-record-1",
        "invoiceNo": "INV-7",
        "invoiceDate": "2024-04-05T00:00:00.000Z",
        "poNo": "PO-11",
        "poDate": "2024-04-01",
        "dcNo": "",
        "dcDate": "",
        "customer": "65f0c0ffee",
        "items": [
            {"description": "Gear box", "hsnSac": "8483", "quantity": 2, "rate": 500},
            {"description": "Fitting service", "hsnSac": "998719", "quantity": 1, "rate": 1000},
        ],
        "cgstRate": 9,
        "sgstRate": 9,
        "igstRate": 0,
        "subtotal": 1,
        "taxAmount": 1,
        "totalAmount": 1,
    }


@pytest.fixture
def sample_invoice(customer: Customer) -> Invoice:
    return Invoice(
        invoice_no="INV-7",
        invoice_date="2024-04-05",
        customer=customer,
        items=(
            LineItem("Gear box", "8483", Decimal("2"), Decimal("500")),
            LineItem("Fitting service", "998719", Decimal("1"), Decimal("1000")),
        ),
        tax_rates=TaxRates(Decimal("9"), Decimal("9"), Decimal("0")),
        po_no="PO-11",
        po_date="2024-04-01",
    )


# --- Config dir fixture ---


@pytest.fixture
def config_dir(tmp_path, seller_dict, customer_dict):
    import yaml

    cfg = tmp_path / "config"
    cfg.mkdir()
    (cfg / "seller.yaml").write_text(yaml.dump(seller_dict))
    customers = cfg / "customers"
    customers.mkdir()
    (customers / "blr-tools.yaml").write_text(yaml.dump(customer_dict))
    return cfg
