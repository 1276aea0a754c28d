"""HTTP client for the customer/invoice record store.

The store wraps every payload as ``{"data": ...}``; list endpoints accept
``page``, ``limit`` and ``search`` and report ``{"pagination": {"total": n}}``.
Error bodies carry ``{"error": ["message", ...]}``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import requests

from gst_invoice.config import API_TIMEOUT
from gst_invoice.services.exceptions import RecordNotFoundError, RecordStoreError
from gst_invoice.services.http_retry import (
    RetryableHTTPError,
    RetryPolicy,
    parse_retry_after,
    policy_for,
    retry_call,
)

logger = logging.getLogger(__name__)

CUSTOMERS = "customers"
INVOICES = "invoices"


@dataclass(frozen=True)
class RecordPage:
    items: list[dict[str, Any]]
    total: int
    page: int
    limit: int

    @property
    def has_more(self) -> bool:
        return self.page * self.limit < self.total


def _error_message(resp: Any) -> str:
    """Best-effort extraction of the store's error text."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:500] if resp.text else ""
    if isinstance(body, dict):
        nested = body.get("data") if isinstance(body.get("data"), dict) else {}
        errors = body.get("error") or nested.get("error")
        if isinstance(errors, list) and errors:
            return "; ".join(str(e) for e in errors)
        if errors:
            return str(errors)
        if body.get("message"):
            return str(body["message"])
    return json.dumps(body, ensure_ascii=False)[:200]


def _check_response(resp: Any, action: str, policy: RetryPolicy) -> None:
    if resp.ok:
        return
    message = f"Record store {action} failed ({resp.status_code}): {_error_message(resp)}"
    if resp.status_code == 404:
        raise RecordNotFoundError(message, status_code=404)
    if policy.is_retryable_status(resp.status_code):
        raise RetryableHTTPError(
            message, retry_after=parse_retry_after(resp.headers.get("Retry-After"))
        )
    raise RecordStoreError(message, status_code=resp.status_code)


def _request(
    method: str,
    url: str,
    action: str,
    *,
    params: dict[str, Any] | None = None,
    payload: dict[str, Any] | None = None,
) -> dict[str, Any]:
    policy = policy_for(method)

    def _do_request() -> dict[str, Any]:
        resp = requests.request(method, url, params=params, json=payload, timeout=API_TIMEOUT)
        _check_response(resp, action, policy)
        if resp.status_code == 204 or not resp.content:
            return {}
        return resp.json()

    try:
        return retry_call(_do_request, policy, description=action)
    except RetryableHTTPError as exc:
        raise RecordStoreError(str(exc)) from exc
    except requests.exceptions.RequestException as exc:
        raise RecordStoreError(f"Record store {action} failed: {exc}") from exc


def _unwrap(body: dict[str, Any]) -> Any:
    return body.get("data", body)


# --- Generic operations ---


def list_records(
    base_url: str, kind: str, *, search: str = "", page: int = 1, limit: int = 10
) -> RecordPage:
    """Fetch one page of customers or invoices, optionally filtered by substring."""
    params: dict[str, Any] = {"page": page, "limit": limit}
    if search:
        params["search"] = search
    body = _request("GET", f"{base_url}/{kind}", f"list {kind}", params=params)
    items = _unwrap(body)
    if not isinstance(items, list):
        raise RecordStoreError(f"Unexpected {kind} list payload", response=body)
    pagination = body.get("pagination") or {}
    return RecordPage(
        items=items,
        total=int(pagination.get("total", len(items))),
        page=page,
        limit=limit,
    )


def iter_records(
    base_url: str, kind: str, *, search: str = "", limit: int = 100
) -> Iterator[dict[str, Any]]:
    """Yield every matching record, paginating automatically."""
    page = 1
    while True:
        result = list_records(base_url, kind, search=search, page=page, limit=limit)
        yield from result.items
        if not result.items or not result.has_more:
            return
        page += 1


def get_record(base_url: str, kind: str, record_id: str) -> dict[str, Any]:
    body = _request("GET", f"{base_url}/{kind}/{record_id}", f"get {kind}")
    return _unwrap(body)


def create_record(base_url: str, kind: str, data: dict[str, Any]) -> dict[str, Any]:
    body = _request("POST", f"{base_url}/{kind}", f"create {kind}", payload=data)
    logger.info("Created %s record", kind)
    return _unwrap(body)


def update_record(
    base_url: str, kind: str, record_id: str, data: dict[str, Any]
) -> dict[str, Any]:
    """Replace a record in full (the store has no partial-patch semantics)."""
    body = _request("PUT", f"{base_url}/{kind}/{record_id}", f"update {kind}", payload=data)
    return _unwrap(body)


def delete_record(base_url: str, kind: str, record_id: str) -> None:
    _request("DELETE", f"{base_url}/{kind}/{record_id}", f"delete {kind}")
    logger.info("Deleted %s record %s", kind, record_id)


# --- Customers ---


def list_customers(base_url: str, *, search: str = "", page: int = 1, limit: int = 10) -> RecordPage:
    return list_records(base_url, CUSTOMERS, search=search, page=page, limit=limit)


def iter_customers(base_url: str, *, search: str = "") -> Iterator[dict[str, Any]]:
    return iter_records(base_url, CUSTOMERS, search=search)


def get_customer(base_url: str, customer_id: str) -> dict[str, Any]:
    return get_record(base_url, CUSTOMERS, customer_id)


def create_customer(base_url: str, data: dict[str, Any]) -> dict[str, Any]:
    return create_record(base_url, CUSTOMERS, data)


def update_customer(base_url: str, customer_id: str, data: dict[str, Any]) -> dict[str, Any]:
    return update_record(base_url, CUSTOMERS, customer_id, data)


def delete_customer(base_url: str, customer_id: str) -> None:
    delete_record(base_url, CUSTOMERS, customer_id)


# --- Invoices ---


def list_invoices(base_url: str, *, search: str = "", page: int = 1, limit: int = 10) -> RecordPage:
    return list_records(base_url, INVOICES, search=search, page=page, limit=limit)


def iter_invoices(base_url: str, *, search: str = "") -> Iterator[dict[str, Any]]:
    return iter_records(base_url, INVOICES, search=search)


def get_invoice(base_url: str, invoice_id: str) -> dict[str, Any]:
    return get_record(base_url, INVOICES, invoice_id)


def create_invoice(base_url: str, data: dict[str, Any]) -> dict[str, Any]:
    return create_record(base_url, INVOICES, data)


def update_invoice(base_url: str, invoice_id: str, data: dict[str, Any]) -> dict[str, Any]:
    return update_record(base_url, INVOICES, invoice_id, data)


def delete_invoice(base_url: str, invoice_id: str) -> None:
    delete_record(base_url, INVOICES, invoice_id)
