from __future__ import annotations


class InvoiceError(Exception):
    """Base class for failures of the invoice computation and rendering core."""


class ValidationError(InvoiceError, ValueError):
    """Malformed or incomplete invoice, customer, or amount input.

    ``errors`` maps each offending field path (e.g. ``items[0].quantity``)
    to a human-readable message, so callers can point at every problem.
    """

    def __init__(self, message: str, errors: dict[str, str] | None = None) -> None:
        self.errors = dict(errors or {})
        if self.errors:
            details = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
            message = f"{message} ({details})"
        super().__init__(message)

    @property
    def fields(self) -> list[str]:
        return list(self.errors)


class RegimeResolutionError(ValidationError):
    """A party's state cannot be used to pick between CGST+SGST and IGST."""


class RenderError(InvoiceError):
    """The document artifact could not be produced."""


class RecordStoreError(RuntimeError):
    """The customer/invoice record store rejected a request or was unreachable."""

    def __init__(
        self, message: str, status_code: int | None = None, response: dict | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response = response or {}


class RecordNotFoundError(RecordStoreError):
    """The requested customer or invoice does not exist in the record store."""
