"""Printable A4 invoice rendered with ReportLab.

The layout is drawn top-down with a cursor measured from the top edge. Tables
go through platypus ``Table`` objects drawn onto the canvas, splitting across
pages when the item list is long. Canvases are created in ``invariant`` mode
so the same invoice and print time always yield identical bytes.
"""

from __future__ import annotations

import io
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas
from reportlab.platypus import Table, TableStyle

from backend.core.config import settings

from ..dto import DecimalLike, Invoice, js_number_string, round2
from ..issuer import IssuerProfile, resolve_issuer

PDF_PRODUCER = "Factura Simulada"

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 15 * mm
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
RIGHT_X = PAGE_WIDTH - MARGIN
TOP = 18 * mm
BOTTOM = 15 * mm

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

_GREY = colors.Color(150 / 255, 150 / 255, 150 / 255)


def format_cop(value: DecimalLike) -> str:
    """Colombian peso format: ``$28.000,00``."""

    text = f"{round2(value):,.2f}"
    return "$" + text.replace(",", "_").replace(".", ",").replace("_", ".")


def _meridiem(dt: datetime) -> str:
    return "a. m." if dt.hour < 12 else "p. m."


def _hour12(dt: datetime) -> int:
    return dt.hour % 12 or 12


def format_issue_date(created_at: str, tz: ZoneInfo) -> str:
    local = datetime.fromisoformat(created_at.replace("Z", "+00:00")).astimezone(tz)
    return (
        f"{local.day}/{local.month}/{local.year}   Hora: "
        f"{_hour12(local):02d}:{local.minute:02d}:{local.second:02d} {_meridiem(local)}"
    )


def format_printed_at(printed_at: datetime, tz: ZoneInfo) -> str:
    if printed_at.tzinfo is None:
        printed_at = printed_at.replace(tzinfo=timezone.utc)
    local = printed_at.astimezone(tz)
    return (
        f"{local.day}/{local.month}/{local.year}, "
        f"{_hour12(local)}:{local.minute:02d}:{local.second:02d} {_meridiem(local)}"
    )


class _Sheet:
    """Canvas plus a vertical cursor (points from the top edge)."""

    def __init__(self, pdf: canvas.Canvas) -> None:
        self.pdf = pdf
        self.y = TOP

    def _base(self, offset: float = 0.0) -> float:
        return PAGE_HEIGHT - self.y - offset

    def remaining(self) -> float:
        return PAGE_HEIGHT - BOTTOM - self.y

    def new_page(self) -> None:
        self.pdf.showPage()
        self.y = TOP

    def ensure(self, height: float) -> None:
        if height > self.remaining():
            self.new_page()

    def font(self, size: float, *, bold: bool = False, grey: float = 0.0) -> None:
        self.pdf.setFont(FONT_BOLD if bold else FONT, size)
        self.pdf.setFillGray(grey)

    def center(self, text: str, advance: float, offset: float = 0.0) -> None:
        self.pdf.drawCentredString(PAGE_WIDTH / 2, self._base(offset), text)
        self.y += advance

    def right(self, text: str, x: float = RIGHT_X, offset: float = 0.0) -> None:
        self.pdf.drawRightString(x, self._base(offset), text)

    def left(self, text: str, x: float = MARGIN, offset: float = 0.0) -> None:
        self.pdf.drawString(x, self._base(offset), text)

    def solid_line(self, thick: bool = False) -> None:
        self.ensure(3.5 * mm)
        self.pdf.setLineWidth(0.5 * mm if thick else 0.2 * mm)
        self.pdf.setStrokeColor(colors.black)
        self.pdf.setDash()
        self.pdf.line(MARGIN, self._base(), RIGHT_X, self._base())
        self.y += 3.5 * mm

    def rule(self, x: float, offset: float = 0.0) -> None:
        self.pdf.setLineWidth(0.5 * mm)
        self.pdf.setStrokeColor(colors.black)
        self.pdf.line(x, self._base(offset), RIGHT_X, self._base(offset))

    def dashed_line(self) -> None:
        self.ensure(3.5 * mm)
        self.pdf.setLineWidth(0.2 * mm)
        self.pdf.setStrokeColor(_GREY)
        self.pdf.setDash(1.5 * mm, 1.5 * mm)
        self.pdf.line(MARGIN, self._base(), RIGHT_X, self._base())
        self.pdf.setDash()
        self.pdf.setStrokeColor(colors.black)
        self.y += 3.5 * mm

    def key_value(self, label: str, value: Optional[str], label_width: float = 45 * mm) -> None:
        if not value:
            return
        lines = simpleSplit(value, FONT, 9, CONTENT_WIDTH - label_width - 2 * mm)
        self.ensure(len(lines) * 4.5 * mm)
        self.font(9, bold=True)
        self.left(label)
        self.font(9)
        for index, line in enumerate(lines):
            self.left(line, MARGIN + label_width, offset=index * 4.5 * mm)
        self.y += len(lines) * 4.5 * mm

    def table(self, table: Table) -> None:
        pending: List[Table] = [table]
        while pending:
            part = pending.pop(0)
            _, height = part.wrapOn(self.pdf, CONTENT_WIDTH, self.remaining())
            if height <= self.remaining():
                part.drawOn(self.pdf, MARGIN, self._base(height))
                self.y += height
                continue
            pieces = part.split(CONTENT_WIDTH, self.remaining())
            if pieces:
                pending = list(pieces) + pending
            elif self.y > TOP:
                self.new_page()
                pending.insert(0, part)
            else:
                # Taller than a blank page and unsplittable; draw what fits
                part.drawOn(self.pdf, MARGIN, self._base(height))
                self.y += height


def _items_table(invoice: Invoice) -> Table:
    rows: List[Sequence[str]] = [["Descripción", "Cant", "V/r Unitario", "Total (sin IVA)"]]
    for item in invoice.items:
        description = (
            f"{item.product_name}\n({item.sku})" if item.sku else item.product_name
        )
        rows.append(
            [
                description,
                js_number_string(item.quantity),
                format_cop(item.unit_price),
                format_cop(item.line_subtotal),
            ]
        )
    fixed = [16 * mm, 38 * mm, 42 * mm]
    table = Table(rows, colWidths=[CONTENT_WIDTH - sum(fixed), *fixed], repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.Color(17 / 255, 17 / 255, 17 / 255)),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), FONT_BOLD),
                ("ALIGN", (0, 0), (-1, 0), "CENTER"),
                ("FONTNAME", (0, 1), (-1, -1), FONT),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.Color(248 / 255, 250 / 255, 1)]),
                ("ALIGN", (1, 1), (1, -1), "CENTER"),
                ("ALIGN", (2, 1), (-1, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("TOPPADDING", (0, 0), (-1, -1), 2.8 * mm),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 2.8 * mm),
            ]
        )
    )
    return table


def _tax_table(invoice: Invoice) -> Table:
    rows = [
        ["Descripción", "%", "Vr. Base", "Vr. Impto."],
        ["IVA BIENES", "19.00", format_cop(invoice.subtotal), format_cop(invoice.vat_total)],
    ]
    fixed = [20 * mm, 48 * mm, 48 * mm]
    table = Table(rows, colWidths=[CONTENT_WIDTH - sum(fixed), *fixed])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.Color(230 / 255, 230 / 255, 230 / 255)),
                ("FONTNAME", (0, 0), (-1, 0), FONT_BOLD),
                ("FONTSIZE", (0, 0), (-1, 0), 8),
                ("ALIGN", (0, 0), (-1, 0), "CENTER"),
                ("FONTNAME", (0, 1), (-1, -1), FONT),
                ("FONTSIZE", (0, 1), (-1, -1), 9),
                ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
                ("TOPPADDING", (0, 0), (-1, -1), 2.5 * mm),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 2.5 * mm),
            ]
        )
    )
    return table


def render_invoice_pdf(
    invoice: Invoice,
    issuer: IssuerProfile,
    *,
    printed_at: datetime,
    timezone_name: Optional[str] = None,
) -> bytes:
    """Render ``invoice`` with the live ``issuer`` profile.

    ``printed_at`` is the moment shown in the footer; passing a fixed value
    makes the output byte-for-byte reproducible.
    """

    tz = ZoneInfo(timezone_name or settings.display_timezone)
    profile = resolve_issuer(issuer, invoice.supplier)
    snapshot = invoice.customer_snapshot

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4, invariant=1)
    pdf.setTitle(f"Factura {invoice.invoice_number}")
    pdf.setAuthor(profile.name)
    pdf.setCreator(PDF_PRODUCER)
    pdf.setProducer(PDF_PRODUCER)
    pdf.setSubject("Factura electrónica de venta (simulada)")
    sheet = _Sheet(pdf)

    # Issuer header
    sheet.font(14, bold=True)
    sheet.center(profile.name, 5.5 * mm)
    sheet.font(8.5)
    sheet.center(f"NIT: {profile.nit}  ·  Responsable de IVA", 4 * mm)
    sheet.center(profile.address, 4 * mm)
    sheet.center(f"Tel: {profile.phone}  ·  {profile.email}", 5 * mm)
    sheet.solid_line(thick=True)

    sheet.font(12, bold=True)
    sheet.center("FACTURA ELECTRÓNICA DE VENTA:", 6 * mm)
    sheet.font(22, bold=True)
    sheet.center(invoice.invoice_number, 8 * mm)
    sheet.dashed_line()

    sheet.key_value("Fecha:", format_issue_date(invoice.created_at, tz))
    sheet.key_value("Condición de Pago:", "CONTADO")
    sheet.key_value("Moneda:", "COP (Pesos Colombianos)")
    sheet.y += 1 * mm
    sheet.dashed_line()

    sheet.key_value("Cliente:", snapshot.company_name)
    sheet.key_value("NIT / CC:", snapshot.nit)
    sheet.key_value("Dirección:", snapshot.address)
    sheet.key_value("Teléfono:", snapshot.phone)
    sheet.key_value("Email:", snapshot.email)
    sheet.key_value("Sitio web:", snapshot.website)
    sheet.key_value("Rep. Legal:", snapshot.legal_representative)
    sheet.key_value("Act. Económica:", snapshot.economic_activity)
    sheet.y += 1 * mm
    sheet.solid_line(thick=True)

    sheet.table(_items_table(invoice))
    sheet.y += 2 * mm
    sheet.ensure(5 * mm)
    sheet.font(8, grey=100 / 255)
    sheet.right(f"TOTAL ÍTEMS: {len(invoice.items)}")
    sheet.y += 5 * mm
    sheet.solid_line(thick=True)

    # Value detail
    sheet.ensure(40 * mm)
    sheet.font(9, bold=True)
    sheet.center("--- [ DETALLE DE VALORES ] ---", 5.5 * mm)
    for label, value in (
        ("Vr. Exento (4%):", format_cop(Decimal("0"))),
        ("Base Gravable (sin IVA):", format_cop(invoice.subtotal)),
        ("IVA (19%):", format_cop(invoice.vat_total)),
    ):
        sheet.font(9)
        sheet.left(label, MARGIN + 30 * mm)
        sheet.font(9, bold=True)
        sheet.right(value)
        sheet.y += 4.5 * mm
    sheet.y += 1 * mm
    sheet.rule(MARGIN + 20 * mm, offset=-1 * mm)
    sheet.font(14, bold=True)
    sheet.left("TOTAL ........ .......", MARGIN + 20 * mm, offset=5 * mm)
    sheet.right(format_cop(invoice.total), offset=5 * mm)
    sheet.y += 10 * mm
    sheet.solid_line(thick=True)

    sheet.ensure(25 * mm)
    sheet.font(9, bold=True)
    sheet.center("--- [ INFORMACIÓN TRIBUTARIA ] ---", 3 * mm)
    sheet.table(_tax_table(invoice))
    sheet.y += 4 * mm
    sheet.dashed_line()

    sheet.ensure(30 * mm)
    sheet.font(7.5, grey=110 / 255)
    sheet.center(profile.resolution, 5 * mm)
    sheet.font(7, grey=110 / 255)
    sheet.center(f"CUFE: {invoice.cufe[:48]}", 3.5 * mm)
    sheet.center(invoice.cufe[48:], 5 * mm)
    sheet.dashed_line()

    sheet.font(7.5, grey=140 / 255)
    sheet.center(f"Factura Electrónica (Simulada): {invoice.invoice_number}", 3.5 * mm)
    sheet.center("Generado por Factura Simulada  ·  Uso exclusivamente académico", 3.5 * mm)
    sheet.center(format_printed_at(printed_at, tz), 0)

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()
