from __future__ import annotations

import argparse
import logging
import sys
from importlib.resources import files
from pathlib import Path


def _init_config() -> None:
    """Copy bundled config templates to the user's config/data directories."""
    from gst_invoice.config import get_config_dir, get_data_dir

    config_dir = get_config_dir()
    data_dir = get_data_dir()
    templates = files("gst_invoice") / "templates"

    (config_dir / "customers").mkdir(parents=True, exist_ok=True)
    (config_dir / "invoices").mkdir(parents=True, exist_ok=True)
    data_dir.mkdir(parents=True, exist_ok=True)

    copied = 0
    for rel in [
        "seller.yaml.example",
        "customers/acme-traders.yaml.example",
        "invoices/INV-1.yaml.example",
    ]:
        dest = config_dir / rel
        if dest.exists():
            print(f"  exists: {dest}")
            continue
        src = templates / rel
        with src.open("rb") as f:
            dest.write_bytes(f.read())
        print(f"  created: {dest}")
        copied += 1

    print()
    print(f"Config: {config_dir}")
    print(f"Data:   {data_dir}")
    print()
    if copied:
        print("Next steps:")
        print(f"  1. cp {config_dir / 'seller.yaml.example'} {config_dir / 'seller.yaml'}")
        print("  2. Edit seller.yaml with your company's GSTIN, PAN and address")
        print("  3. Run: gst-invoice render <invoice.yaml>")
    else:
        print("No new files created (all already existed).")


def _preflight() -> bool:
    """Verify the seller profile exists before rendering.

    Auto-creates the data directory. Returns False with a helpful message
    when the config directory or seller.yaml is missing.
    """
    from gst_invoice.config import get_config_dir, get_data_dir

    get_data_dir().mkdir(parents=True, exist_ok=True)

    config_dir = get_config_dir()
    if not config_dir.is_dir():
        print(f"Error: config directory not found: {config_dir}")
        print("Run 'gst-invoice init' to create the example files.")
        return False
    if not (config_dir / "seller.yaml").is_file():
        print(f"Error: seller.yaml not found in {config_dir}")
        print("Run 'gst-invoice init' and fill in the seller profile.")
        return False
    return True


def _load_seller():
    from gst_invoice.config import load_seller
    from gst_invoice.models.party import SellerProfile

    return SellerProfile.from_dict(load_seller())


def _write_output(prepared, artifact, output: str | None) -> str:
    from gst_invoice.services.invoicing import save_artifact

    if output:
        out = Path(output)
        return save_artifact(artifact, prepared, directory=out.parent, filename=out.name)
    return save_artifact(artifact, prepared)


def _cmd_render(args: argparse.Namespace) -> int:
    from gst_invoice.config import get_standard_rate, load_customer, load_yaml
    from gst_invoice.models.invoice import Invoice
    from gst_invoice.models.party import Customer
    from gst_invoice.services.invoicing import prepare_document, render, resolve_customer
    from gst_invoice.services.renderer import render_text

    if not _preflight():
        return 1
    invoice = Invoice.from_dict(load_yaml(Path(args.file)))
    customer = resolve_customer(invoice.customer, lambda slug: Customer.from_dict(load_customer(slug)))
    prepared = prepare_document(invoice, customer, _load_seller(), get_standard_rate())

    if args.text:
        print(render_text(prepared.snapshot), end="")
        return 0
    path = _write_output(prepared, render(prepared), args.output)
    print(f"Invoice {prepared.snapshot.invoice_no} written to {path}")
    return 0


def _cmd_fetch(args: argparse.Namespace) -> int:
    from gst_invoice.config import get_api_base_url, get_standard_rate
    from gst_invoice.services.invoicing import render_from_store

    if not _preflight():
        return 1
    prepared, artifact = render_from_store(
        get_api_base_url(), args.invoice_id, _load_seller(), get_standard_rate()
    )
    path = _write_output(prepared, artifact, args.output)
    print(f"Invoice {prepared.snapshot.invoice_no} written to {path}")
    return 0


def _cmd_next_number(args: argparse.Namespace) -> int:
    from gst_invoice.config import get_api_base_url
    from gst_invoice.services.invoicing import suggest_customer_id, suggest_invoice_no

    base_url = get_api_base_url()
    print(suggest_customer_id(base_url) if args.customer else suggest_invoice_no(base_url))
    return 0


def _cmd_words(args: argparse.Namespace) -> int:
    from gst_invoice.utils.words import amount_in_words

    print(amount_in_words(args.amount))
    return 0


def _cmd_customers(args: argparse.Namespace) -> int:
    from gst_invoice.config import list_customers, load_customer

    slugs = list_customers()
    if not slugs:
        print("No local customers.")
        return 0
    for slug in slugs:
        print(f"{slug:<24} {load_customer(slug).get('customerName', '')}")
    return 0


def _cmd_documents(args: argparse.Namespace) -> int:
    from gst_invoice.utils.registry import list_documents

    entries = list_documents(customer=args.customer)
    if not entries:
        print("No rendered documents.")
        return 0
    for e in entries:
        print(
            f"{e['invoice_no']:<12} {e.get('total_amount', ''):>15}  "
            f"{e.get('customer', ''):<30} {e['path']}"
        )
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gst-invoice", description="Compute and print GST tax invoices."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log progress to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="create example configuration files")

    p = sub.add_parser("render", help="render an invoice YAML file")
    p.add_argument("file")
    p.add_argument("-o", "--output", help="PDF path (default: data dir)")
    p.add_argument("--text", action="store_true", help="print a plain-text preview instead")
    p.set_defaults(func=_cmd_render)

    p = sub.add_parser("fetch", help="render an invoice from the record store")
    p.add_argument("invoice_id")
    p.add_argument("-o", "--output", help="PDF path (default: data dir)")
    p.set_defaults(func=_cmd_fetch)

    p = sub.add_parser("next-number", help="suggest the next invoice number")
    p.add_argument("--customer", action="store_true", help="suggest a customer id instead")
    p.set_defaults(func=_cmd_next_number)

    p = sub.add_parser("words", help="spell out an amount in Indian English")
    p.add_argument("amount")
    p.set_defaults(func=_cmd_words)

    p = sub.add_parser("customers", help="list customers in the config directory")
    p.set_defaults(func=_cmd_customers)

    p = sub.add_parser("documents", help="list rendered documents")
    p.add_argument("--customer", help="only documents for this customer name")
    p.set_defaults(func=_cmd_documents)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the gst-invoice CLI."""
    from gst_invoice.services.exceptions import InvoiceError, RecordStoreError

    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "init":
        _init_config()
        return

    try:
        code = args.func(args)
    except (InvoiceError, RecordStoreError, ValueError, OSError) as e:
        print(f"Error: {e}")
        code = 1
    except KeyError as e:
        print(f"Error: missing setting {e}")
        code = 1
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
