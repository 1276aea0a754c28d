"""Indian states and union territories with their GST state codes.

Normalizes the spellings seen in customer records (two-letter code, GSTIN
numeric prefix, or full name) to one canonical two-letter code.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class State:
    gst_code: str
    code: str
    name: str


STATES: tuple[State, ...] = (
    State("01", "JK", "Jammu and Kashmir"),
    State("02", "HP", "Himachal Pradesh"),
    State("03", "PB", "Punjab"),
    State("04", "CH", "Chandigarh"),
    State("05", "UK", "Uttarakhand"),
    State("06", "HR", "Haryana"),
    State("07", "DL", "Delhi"),
    State("08", "RJ", "Rajasthan"),
    State("09", "UP", "Uttar Pradesh"),
    State("10", "BR", "Bihar"),
    State("11", "SK", "Sikkim"),
    State("12", "AR", "Arunachal Pradesh"),
    State("13", "NL", "Nagaland"),
    State("14", "MN", "Manipur"),
    State("15", "MZ", "Mizoram"),
    State("16", "TR", "Tripura"),
    State("17", "ML", "Meghalaya"),
    State("18", "AS", "Assam"),
    State("19", "WB", "West Bengal"),
    State("20", "JH", "Jharkhand"),
    State("21", "OD", "Odisha"),
    State("22", "CG", "Chhattisgarh"),
    State("23", "MP", "Madhya Pradesh"),
    State("24", "GJ", "Gujarat"),
    State("26", "DH", "Dadra and Nagar Haveli and Daman and Diu"),
    State("27", "MH", "Maharashtra"),
    State("29", "KA", "Karnataka"),
    State("30", "GA", "Goa"),
    State("31", "LD", "Lakshadweep"),
    State("32", "KL", "Kerala"),
    State("33", "TN", "Tamil Nadu"),
    State("34", "PY", "Puducherry"),
    State("35", "AN", "Andaman and Nicobar Islands"),
    State("36", "TS", "Telangana"),
    State("37", "AP", "Andhra Pradesh"),
    State("38", "LA", "Ladakh"),
    State("97", "OT", "Other Territory"),
)

# Older or alternative spellings still found in address books
_ALIASES = {
    "OR": "OD",
    "ORISSA": "OD",
    "CT": "CG",
    "UT": "UK",
    "UTTARANCHAL": "UK",
    "TG": "TS",
    "PONDICHERRY": "PY",
    "NEW DELHI": "DL",
    "NCT OF DELHI": "DL",
    "DN": "DH",
    "DD": "DH",
    "DAMAN AND DIU": "DH",
    "DADRA AND NAGAR HAVELI": "DH",
    "ANDAMAN AND NICOBAR": "AN",
    "28": "AP",
}


def _key(text: str) -> str:
    text = text.upper().replace("&", " AND ")
    return re.sub(r"[^A-Z0-9]+", " ", text).strip()


_LOOKUP: dict[str, str] = {}
for _s in STATES:
    _LOOKUP[_s.code] = _s.code
    _LOOKUP[_s.gst_code] = _s.code
    _LOOKUP[_key(_s.name)] = _s.code
for _alias, _code in _ALIASES.items():
    _LOOKUP[_key(_alias)] = _code

_BY_CODE = {s.code: s for s in STATES}


def normalize_state(value: str | None) -> str | None:
    """Return the canonical two-letter code for *value*, or None if unknown or blank."""
    if value is None:
        return None
    key = _key(str(value))
    if not key:
        return None
    if key.isdigit():
        key = key.zfill(2)
    return _LOOKUP.get(key)


def state_name(code: str) -> str:
    """Full name for a canonical two-letter code."""
    return _BY_CODE[code].name


def state_from_gstin(gstin: str) -> str | None:
    """Canonical state code from the first two digits of a GSTIN."""
    prefix = gstin.strip()[:2]
    if len(prefix) != 2 or not prefix.isdigit():
        return None
    return _LOOKUP.get(prefix)
