"""CLI to (re)render a stored invoice as PDF."""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from agents.factura import (
    PersistenceError,
    ValidationError,
    open_service,
    render_invoice_pdf,
    write_document,
)
from backend.core.config import settings
from backend.core.logging import init_logging


def render_invoice(
    *,
    data_dir: Path,
    invoice_number: str,
    output_dir: Path,
    printed_at: Optional[datetime] = None,
) -> Path:
    service = open_service(data_dir, seed=False)
    invoice = service.find_invoice_by_number(invoice_number)
    if invoice is None:
        raise ValidationError(f"invoice {invoice_number} not found", field="invoice_number")
    pdf_bytes = render_invoice_pdf(
        invoice,
        service.get_issuer_profile(),
        printed_at=printed_at or datetime.now(timezone.utc),
    )
    return write_document(output_dir, invoice, pdf_bytes)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render an issued invoice to PDF")
    parser.add_argument("invoice_number", help="Six-digit invoice number, e.g. 000001")
    parser.add_argument("--data-dir", type=Path, default=settings.data_dir)
    parser.add_argument("--output-dir", type=Path, default=settings.output_dir)
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    init_logging()
    try:
        path = render_invoice(
            data_dir=args.data_dir,
            invoice_number=args.invoice_number,
            output_dir=args.output_dir,
        )
    except ValidationError as err:
        raise SystemExit(err.message) from err
    except PersistenceError as err:
        raise SystemExit(f"Storage error: {err}") from err
    print(f"PDF written to {path}")


if __name__ == "__main__":  # pragma: no cover
    main()
