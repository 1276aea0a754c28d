"""Local registry of rendered invoice documents.

Keeps one entry per invoice number pointing at the last PDF written for it,
so a printed invoice can be found again without re-fetching the records.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from filelock import FileLock

from gst_invoice import config as _config

logger = logging.getLogger(__name__)


def _registry_path() -> Path:
    return _config.get_data_dir() / "documents.json"


def _backup_corrupt(path: Path) -> Path:
    """Rename a corrupt file to a timestamped backup before it gets overwritten."""
    ts = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
    backup = path.with_name(f"{path.name}.corrupt.{ts}")
    path.rename(backup)
    logger.warning("Corrupt file backed up: %s -> %s", path, backup)
    return backup


@contextmanager
def _locked() -> Iterator[None]:
    """Hold an exclusive file lock during registry read-modify-write."""
    rp = _registry_path()
    rp.parent.mkdir(parents=True, exist_ok=True)
    with FileLock(rp.with_suffix(".lock")):
        yield


def _load() -> list[dict[str, Any]]:
    rp = _registry_path()
    if not rp.exists():
        return []
    try:
        return json.loads(rp.read_text())
    except (json.JSONDecodeError, ValueError):
        _backup_corrupt(rp)
        return []


def _save(entries: list[dict[str, Any]]) -> None:
    rp = _registry_path()
    rp.parent.mkdir(parents=True, exist_ok=True)
    tmp = rp.with_suffix(".tmp")
    tmp.write_text(json.dumps(entries, indent=2, ensure_ascii=False) + "\n")
    os.replace(tmp, rp)


def list_documents(customer: str | None = None) -> list[dict[str, Any]]:
    """Return all registered documents, optionally filtered by customer name."""
    with _locked():
        entries = _load()
    if customer:
        entries = [e for e in entries if e.get("customer") == customer]
    return entries


def add_document(
    invoice_no: str,
    path: str,
    *,
    customer: str | None = None,
    total_amount: str | None = None,
    rendered_at: str | None = None,
) -> dict[str, Any]:
    """Register (or re-register) the document rendered for *invoice_no*.

    A later rendering of the same invoice replaces the earlier entry.
    """
    entry: dict[str, Any] = {
        "invoice_no": invoice_no,
        "path": path,
        "rendered_at": rendered_at or datetime.now(UTC).isoformat(timespec="seconds"),
    }
    if customer is not None:
        entry["customer"] = customer
    if total_amount is not None:
        entry["total_amount"] = total_amount

    with _locked():
        entries = [e for e in _load() if e.get("invoice_no") != invoice_no]
        entries.append(entry)
        _save(entries)
    return entry


def find_document(invoice_no: str) -> dict[str, Any] | None:
    """Look up the registered document for an invoice number."""
    with _locked():
        entries = _load()
    return next((e for e in entries if e.get("invoice_no") == invoice_no), None)


def remove_document(invoice_no: str) -> bool:
    """Forget the document registered for *invoice_no*; the file itself is kept."""
    with _locked():
        entries = _load()
        filtered = [e for e in entries if e.get("invoice_no") != invoice_no]
        if len(filtered) == len(entries):
            return False
        _save(filtered)
        return True
