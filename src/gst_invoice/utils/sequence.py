"""Suggest the next operator-facing sequence number (INV-7, CUST-12, ...).

Numbers are derived from the ids already in the record store: the highest
numeric suffix plus one. Gaps are fine, and legacy ids without a numeric
suffix count as 0.
"""

from __future__ import annotations

from collections.abc import Iterable


def numeric_suffix(value: str | None, prefix: str) -> int:
    """Number after *prefix* (case-insensitive) in *value*, or 0 if there is none."""
    raw = (value or "").strip().upper()
    pfx = prefix.upper()
    if pfx and raw.startswith(pfx):
        raw = raw[len(pfx):]
    return int(raw) if raw.isascii() and raw.isdigit() else 0


def next_number(existing: Iterable[str | None], prefix: str) -> str:
    """Return ``<prefix><max suffix + 1>``; ``<prefix>1`` when nothing exists yet."""
    highest = max((numeric_suffix(v, prefix) for v in existing), default=0)
    return f"{prefix}{highest + 1}"
