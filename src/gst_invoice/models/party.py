from __future__ import annotations

from dataclasses import dataclass


def _text(value: object) -> str:
    return "" if value is None else str(value).strip()


@dataclass(frozen=True)
class Address:
    street: str
    city: str
    state: str
    postal_code: str
    country: str = "India"

    @classmethod
    def from_dict(cls, d: dict | str | None) -> Address:
        """Create an Address from a record-store dict (camelCase postalCode).

        Missing keys become empty strings so validation can report all of
        them at once. A bare string is kept as the street line.
        """
        if d is None:
            d = {}
        if isinstance(d, str):
            return cls(street=d.strip(), city="", state="", postal_code="", country="")
        return cls(
            street=_text(d.get("street")),
            city=_text(d.get("city")),
            state=_text(d.get("state")),
            postal_code=_text(d.get("postalCode", d.get("postal_code"))),
            country=_text(d.get("country")),
        )

    def to_record(self) -> dict:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "postalCode": self.postal_code,
            "country": self.country,
        }

    def missing_fields(self) -> list[str]:
        """Names of the address fields that are blank."""
        return [
            name
            for name in ("street", "city", "state", "postal_code", "country")
            if not getattr(self, name)
        ]

    def one_line(self) -> str:
        """Single-line postal form: street, city, state - postal code."""
        locality = ", ".join(p for p in (self.street, self.city, self.state) if p)
        if self.postal_code:
            return f"{locality} - {self.postal_code}" if locality else self.postal_code
        return locality


@dataclass(frozen=True)
class Customer:
    """Buyer billed on an invoice, in the record store's shape."""

    customer_name: str
    email: str
    phone_number: str
    address: Address
    gst_number: str | None = None
    customer_id: str | None = None
    record_id: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> Customer:
        """Create a Customer from a record-store (or customers/*.yaml) dict."""
        return cls(
            customer_name=_text(d.get("customerName")),
            email=_text(d.get("email")),
            phone_number=_text(d.get("phoneNumber")),
            address=Address.from_dict(d.get("address")),
            gst_number=_text(d.get("gstNumber")) or None,
            customer_id=_text(d.get("customerId")) or None,
            record_id=_text(d.get("_id")) or None,
        )

    def to_record(self) -> dict:
        record = {
            "customerName": self.customer_name,
            "email": self.email,
            "phoneNumber": self.phone_number,
            "gstNumber": self.gst_number or "",
            "address": self.address.to_record(),
        }
        if self.customer_id:
            record["customerId"] = self.customer_id
        return record


@dataclass(frozen=True)
class SellerProfile:
    """Issuing company, printed in the header; its address state is the home state."""

    name: str
    address: Address
    pan_number: str
    gst_number: str
    email: str
    phone: str

    @classmethod
    def from_dict(cls, d: dict) -> SellerProfile:
        """Create a SellerProfile from seller.yaml, where name, GSTIN and address are required."""
        addr = d["address"]
        return cls(
            name=d["name"],
            address=Address(
                street=_text(addr["street"]),
                city=_text(addr["city"]),
                state=_text(addr["state"]),
                postal_code=_text(addr.get("postal_code", "")),
                country=_text(addr.get("country", "India")),
            ),
            pan_number=_text(d.get("pan_number", "")),
            gst_number=_text(d["gst_number"]),
            email=_text(d.get("email", "")),
            phone=_text(d.get("phone", "")),
        )
