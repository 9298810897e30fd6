"""CLI to issue an invoice from catalogue SKUs."""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from agents.factura import (
    Invoice,
    InvoiceLine,
    InvoicingService,
    PersistenceError,
    ValidationError,
    open_service,
    render_invoice_pdf,
    write_document,
)
from agents.factura.issuer import SUPPLIER_NAMES
from backend.core.config import settings
from backend.core.logging import init_logging


def _iso_datetime(value: str) -> datetime:
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_item(raw: str) -> tuple[str, str, Optional[str]]:
    """Split ``SKU:QTY[:PRICE]``."""

    parts = raw.split(":")
    if len(parts) not in (2, 3) or not parts[0]:
        raise ValidationError(f"invalid item '{raw}', expected SKU:QTY[:PRICE]", field="items")
    price = parts[2] if len(parts) == 3 else None
    return parts[0], parts[1], price


def _resolve_lines(service: InvoicingService, items: Iterable[str]) -> List[InvoiceLine]:
    by_sku = {product.sku: product for product in service.list_products() if product.sku}
    lines: List[InvoiceLine] = []
    for raw in items:
        sku, quantity, price = parse_item(raw)
        product = by_sku.get(sku)
        if product is None:
            raise ValidationError(f"no product with SKU {sku}", field="product_id")
        lines.append(InvoiceLine(product_id=product.id, quantity=quantity, unit_price=price))
    return lines


def issue_invoice(
    *,
    data_dir: Path,
    customer_nit: str,
    items: Iterable[str],
    supplier: Optional[str] = None,
    output_dir: Optional[Path] = None,
    clock: Callable[[], datetime] | None = None,
) -> tuple[Invoice, Optional[Path]]:
    service = open_service(data_dir, clock=clock)
    customer = service.find_customer_by_nit(customer_nit)
    if customer is None:
        raise ValidationError(f"no customer with NIT {customer_nit}", field="customer_id")

    invoice = service.create_invoice(
        customer.id, _resolve_lines(service, items), supplier=supplier
    )
    if output_dir is None:
        return invoice, None

    printed_at = clock() if clock else datetime.now(timezone.utc)
    pdf_bytes = render_invoice_pdf(
        invoice, service.get_issuer_profile(), printed_at=printed_at
    )
    return invoice, write_document(output_dir, invoice, pdf_bytes)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Issue a simulated electronic invoice")
    parser.add_argument("--customer-nit", required=True, help="NIT of an existing customer")
    parser.add_argument(
        "--item",
        action="append",
        required=True,
        metavar="SKU:QTY[:PRICE]",
        help="Invoice line; repeat for more lines",
    )
    parser.add_argument("--supplier", choices=sorted(SUPPLIER_NAMES), help="Brand printed as issuer")
    parser.add_argument("--data-dir", type=Path, default=settings.data_dir)
    parser.add_argument("--render", action="store_true", help="Also write the PDF")
    parser.add_argument("--output-dir", type=Path, default=settings.output_dir)
    parser.add_argument(
        "--now",
        help="ISO-8601 timestamp for reproducible runs (e.g. 2025-01-01T00:00:00+00:00)",
    )
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    init_logging()
    clock = None
    if args.now:
        fixed = _iso_datetime(args.now)

        def clock() -> datetime:
            return fixed

    try:
        invoice, path = issue_invoice(
            data_dir=args.data_dir,
            customer_nit=args.customer_nit,
            items=args.item,
            supplier=args.supplier,
            output_dir=args.output_dir if args.render else None,
            clock=clock,
        )
    except ValidationError as err:
        raise SystemExit(f"Invalid input ({err.field or 'payload'}): {err.message}") from err
    except PersistenceError as err:
        raise SystemExit(f"Storage error: {err}") from err

    print(f"Invoice {invoice.invoice_number} total {invoice.total} CUFE {invoice.cufe}")
    if path is not None:
        print(f"PDF written to {path}")


if __name__ == "__main__":  # pragma: no cover
    main()
