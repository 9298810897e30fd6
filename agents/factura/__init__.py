"""Invoice simulator core: records, totals, numbering, CUFE and rendering."""

from .archive import read_backup, write_backup, write_document
from .cufe import CUFE_LENGTH, derive_code
from .dto import (
    Customer,
    CustomerSnapshot,
    Invoice,
    InvoiceItem,
    Product,
    round2,
)
from .errors import FacturaError, PersistenceError, ValidationError
from .issuer import DEFAULT_ISSUER, IssuerProfile, resolve_issuer
from .numbering import NumberingService, SequenceState, format_invoice_number, next_number
from .pdf import format_cop, render_invoice_pdf
from .repository import ImportResult, Repository, validate_backup
from .service import InvoiceLine, InvoicingService, open_service
from .storage import JsonFileStore, KeyValueStore, MemoryStore
from .totals import InvoiceTotals, LineTotals, aggregate, compute_line

__all__ = [
    "read_backup",
    "write_backup",
    "write_document",
    "CUFE_LENGTH",
    "derive_code",
    "Customer",
    "CustomerSnapshot",
    "Invoice",
    "InvoiceItem",
    "Product",
    "round2",
    "FacturaError",
    "PersistenceError",
    "ValidationError",
    "DEFAULT_ISSUER",
    "IssuerProfile",
    "resolve_issuer",
    "NumberingService",
    "SequenceState",
    "format_invoice_number",
    "next_number",
    "format_cop",
    "render_invoice_pdf",
    "ImportResult",
    "Repository",
    "validate_backup",
    "InvoiceLine",
    "InvoicingService",
    "open_service",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "InvoiceTotals",
    "LineTotals",
    "aggregate",
    "compute_line",
]
