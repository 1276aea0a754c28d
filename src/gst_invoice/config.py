from __future__ import annotations

import os
from decimal import Decimal
from pathlib import Path

import platformdirs
import yaml
from dotenv import load_dotenv

APP_NAME = "gst-invoice"


def _resolve_config_dir_for_dotenv() -> Path | None:
    """Resolve config dir for .env loading without depending on env vars from .env itself.

    Only checks sources available before .env is loaded (env var set in
    the shell, dev layout, an existing platformdirs directory).
    """
    from_env = os.environ.get("GST_INVOICE_CONFIG_DIR")
    if from_env:
        return Path(from_env)
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / "config"
    if candidate.is_dir():
        return candidate
    pd = Path(platformdirs.user_config_dir(APP_NAME))
    if pd.is_dir():
        return pd
    return None


# Load .env: cwd first (highest priority), then config dir (won't override)
load_dotenv()
_cfg_dir = _resolve_config_dir_for_dotenv()
if _cfg_dir is not None:
    load_dotenv(_cfg_dir / ".env")


def _resolve_dir(env_var: str, default_subdir: str, kind: str) -> Path:
    """Resolve a directory from env var, repo layout, or platform default.

    Priority: 1) env var, 2) dev repo layout, 3) platformdirs user directory.
    """
    from_env = os.environ.get(env_var)
    if from_env:
        return Path(from_env)
    # Development layout: src/gst_invoice/config.py -> ../../.. = project root
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / default_subdir
    if candidate.is_dir():
        return candidate
    if kind == "config":
        return Path(platformdirs.user_config_dir(APP_NAME))
    return Path(platformdirs.user_data_dir(APP_NAME))


def get_config_dir() -> Path:
    """Resolve config directory. Re-evaluated on each call to pick up env changes."""
    return _resolve_dir("GST_INVOICE_CONFIG_DIR", "config", kind="config")


def get_data_dir() -> Path:
    """Resolve data directory. Re-evaluated on each call to pick up env changes."""
    return _resolve_dir("GST_INVOICE_DATA_DIR", "data", kind="data")


def get_documents_dir() -> Path:
    """Directory where rendered invoice documents are written."""
    return get_data_dir() / "documents"


DEFAULT_STANDARD_RATE = "18"

API_TIMEOUT = 30

INVOICE_PREFIX = "INV-"
CUSTOMER_PREFIX = "CUST-"


def get_standard_rate() -> Decimal:
    """Return the GST slab used when an invoice carries no explicit rates.

    Read from GST_STANDARD_RATE; defaults to 18 (split 9/9 intra-state).
    Raises ValueError when the configured value is not a percentage.
    """
    from gst_invoice.utils.validators import validate_percent

    raw = os.environ.get("GST_STANDARD_RATE", DEFAULT_STANDARD_RATE)
    return Decimal(validate_percent(raw))


def get_api_base_url() -> str:
    """Return the record-store base URL from INVOICE_API_BASE_URL.

    Raises KeyError if the variable is not set.
    """
    return os.environ["INVOICE_API_BASE_URL"].rstrip("/")


# --- YAML config ---


def load_yaml(path: Path) -> dict:
    """Load and parse a YAML file, returning the top-level dict."""
    return yaml.safe_load(path.read_text()) or {}


def load_seller() -> dict:
    """Load the seller profile from config/seller.yaml."""
    return load_yaml(get_config_dir() / "seller.yaml")


def load_customer(name: str) -> dict:
    """Load a customer record from config/customers/{name}.yaml."""
    return load_yaml(get_config_dir() / "customers" / f"{name}.yaml")


def list_customers() -> list[str]:
    """Return sorted list of customer slugs (YAML file stems) from config/customers/."""
    customers_dir = get_config_dir() / "customers"
    if not customers_dir.exists():
        return []
    return sorted(f.stem for f in customers_dir.glob("*.yaml"))
