"""PDF rendering for issued invoices."""

from .renderer import PDF_PRODUCER, format_cop, render_invoice_pdf

__all__ = [
    "PDF_PRODUCER",
    "format_cop",
    "render_invoice_pdf",
]
