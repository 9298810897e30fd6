"""Line and invoice totals.

VAT is computed per line on the already-rounded subtotal and invoice totals
are the rounded sums of the line fields, so stored invoices always reconcile
line by line.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .dto import DEFAULT_VAT_RATE, DecimalLike, InvoiceItem, round2, to_decimal


ZERO = Decimal("0.00")


@dataclass(frozen=True, slots=True)
class LineTotals:
    subtotal: Decimal
    vat: Decimal
    total: Decimal


@dataclass(frozen=True, slots=True)
class InvoiceTotals:
    subtotal: Decimal
    vat_total: Decimal
    total: Decimal


def compute_line(
    quantity: DecimalLike,
    unit_price: DecimalLike,
    vat_rate: DecimalLike = DEFAULT_VAT_RATE,
) -> LineTotals:
    """Pure calculator; callers check ``quantity > 0`` and ``unit_price >= 0``."""

    subtotal = round2(to_decimal(quantity) * to_decimal(unit_price))
    vat = round2(subtotal * to_decimal(vat_rate))
    total = round2(subtotal + vat)
    return LineTotals(subtotal=subtotal, vat=vat, total=total)


def _line_fields(item: LineTotals | InvoiceItem) -> tuple[Decimal, Decimal, Decimal]:
    if isinstance(item, InvoiceItem):
        return item.line_subtotal, item.line_vat, item.line_total
    return item.subtotal, item.vat, item.total


def aggregate(items: Iterable[LineTotals | InvoiceItem]) -> InvoiceTotals:
    subtotal = ZERO
    vat_total = ZERO
    total = ZERO
    for item in items:
        line_subtotal, line_vat, line_total = _line_fields(item)
        subtotal += line_subtotal
        vat_total += line_vat
        total += line_total
    return InvoiceTotals(
        subtotal=round2(subtotal),
        vat_total=round2(vat_total),
        total=round2(total),
    )
