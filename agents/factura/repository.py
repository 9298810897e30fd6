"""Record repository: typed access to the key-value store plus backup import/export."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import InvalidOperation
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, StrictInt
from pydantic import ValidationError as PydanticValidationError

from backend.core.logging import get_logger

from .dto import Customer, Invoice, Product
from .errors import PersistenceError, ValidationError
from .issuer import DEFAULT_ISSUER, IssuerProfile
from .storage import KeyValueStore

logger = get_logger(__name__)


KEYS = {
    "products": "fs_products",
    "customers": "fs_customers",
    "invoices": "fs_invoices",
    "counter": "fs_counter",
    "emisor": "fs_emisor",
    "initialized": "fs_initialized",
}

_ABSENT = object()

# Order in which backup fields are checked and reported
BACKUP_FIELDS = ("products", "customers", "invoices", "counter")


class BackupPayload(BaseModel):
    """Shape of an exported backup; records are kept as raw wire dicts."""

    model_config = ConfigDict(strict=True, extra="ignore")

    products: List[Any]
    customers: List[Any]
    invoices: List[Any]
    counter: StrictInt


@dataclass(frozen=True)
class ImportResult:
    ok: bool
    error: Optional[str] = None
    field: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {"ok": self.ok, "error": self.error, "field": self.field}


# Record parsers per backup field; ``counter`` has none
_RECORD_PARSERS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    "products": Product.from_dict,
    "customers": Customer.from_dict,
    "invoices": Invoice.from_dict,
}

# Errors raised by ``from_dict`` on malformed wire records
_RECORD_ERRORS = (KeyError, TypeError, ValueError, AttributeError, InvalidOperation)


def _check_records(name: str, records: List[Any]) -> None:
    parse = _RECORD_PARSERS[name]
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValidationError(f'Invalid "{name}" record at index {index}', field=name)
        try:
            parse(record)
        except _RECORD_ERRORS as err:
            raise ValidationError(
                f'Invalid "{name}" record at index {index}', field=name
            ) from err


def validate_backup(raw: Any) -> BackupPayload:
    """Check a backup payload, reporting the first bad field in fixed order.

    A field is bad when it is missing or mistyped, or when one of its records
    cannot be read back as a product, customer or invoice.
    """

    if not isinstance(raw, dict):
        raise ValidationError("invalid JSON payload")
    payload: Optional[BackupPayload] = None
    failure: Optional[PydanticValidationError] = None
    failed: set[str] = set()
    try:
        payload = BackupPayload.model_validate(raw)
    except PydanticValidationError as err:
        failure = err
        failed = {str(error["loc"][0]) for error in err.errors() if error["loc"]}

    for name in BACKUP_FIELDS:
        if name in failed:
            raise ValidationError(f'Missing "{name}"', field=name) from failure
        if name in _RECORD_PARSERS:
            _check_records(name, raw[name])
    if payload is None:
        raise ValidationError("invalid JSON payload") from failure
    return payload


class Repository:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def _load_records(self, name: str, parse: Callable[[Dict[str, Any]], Any]) -> List[Any]:
        key = KEYS[name]
        records = self.store.get(key, [])
        try:
            return [parse(raw) for raw in records]
        except _RECORD_ERRORS as err:
            logger.error("Stored %s are unreadable: %r", name, err)
            raise PersistenceError(f"unreadable record in '{key}': {err!r}", key=key) from err

    # Products ---------------------------------------------------------

    def load_products(self) -> List[Product]:
        return self._load_records("products", Product.from_dict)

    def save_products(self, products: List[Product]) -> None:
        self.store.set(KEYS["products"], [product.to_dict() for product in products])

    # Customers --------------------------------------------------------

    def load_customers(self) -> List[Customer]:
        return self._load_records("customers", Customer.from_dict)

    def save_customers(self, customers: List[Customer]) -> None:
        self.store.set(KEYS["customers"], [customer.to_dict() for customer in customers])

    # Invoices ---------------------------------------------------------

    def load_invoices(self) -> List[Invoice]:
        return self._load_records("invoices", Invoice.from_dict)

    def append_invoice(self, invoice: Invoice) -> None:
        raw_invoices = self.store.get(KEYS["invoices"], [])
        raw_invoices.append(invoice.to_dict())
        self.store.set(KEYS["invoices"], raw_invoices)

    # Counter ----------------------------------------------------------

    def load_counter(self) -> int:
        return int(self.store.get(KEYS["counter"], 0))

    def save_counter(self, value: int) -> None:
        self.store.set(KEYS["counter"], value)

    # Issuer -----------------------------------------------------------

    def load_issuer_profile(self) -> IssuerProfile:
        raw = self.store.get(KEYS["emisor"])
        if raw is None:
            return DEFAULT_ISSUER
        return IssuerProfile.from_dict(raw)

    def save_issuer_profile(self, profile: IssuerProfile) -> None:
        self.store.set(KEYS["emisor"], profile.to_dict())

    # First-run flag ---------------------------------------------------

    def is_initialized(self) -> bool:
        return self.store.contains(KEYS["initialized"])

    def mark_initialized(self) -> None:
        self.store.set(KEYS["initialized"], "1")

    # Backup -----------------------------------------------------------

    def bulk_export(self) -> Dict[str, Any]:
        return {
            "products": self.store.get(KEYS["products"], []),
            "customers": self.store.get(KEYS["customers"], []),
            "invoices": self.store.get(KEYS["invoices"], []),
            "counter": self.store.get(KEYS["counter"], 0),
        }

    def bulk_import(self, raw: Any) -> ImportResult:
        """Replace products, customers, invoices and counter with a backup.

        Nothing is written unless the whole payload validates. A storage
        failure half-way restores the previous values before re-raising.
        """

        try:
            payload = validate_backup(raw)
        except ValidationError as err:
            logger.warning("Backup rejected: %s", err.message)
            return ImportResult(ok=False, error=err.message, field=err.field)

        incoming = {
            "products": payload.products,
            "customers": payload.customers,
            "invoices": payload.invoices,
            "counter": payload.counter,
        }
        previous = {name: self.store.get(KEYS[name], _ABSENT) for name in BACKUP_FIELDS}
        written: List[str] = []
        try:
            for name in BACKUP_FIELDS:
                self.store.set(KEYS[name], incoming[name])
                written.append(name)
        except PersistenceError:
            logger.error("Backup import failed after %s; restoring", written or "nothing")
            self._restore(previous, written)
            raise

        logger.info(
            "Backup imported: %d products, %d customers, %d invoices, counter=%d",
            len(payload.products),
            len(payload.customers),
            len(payload.invoices),
            payload.counter,
        )
        return ImportResult(ok=True)

    def _restore(self, previous: Dict[str, Any], written: List[str]) -> None:
        for name in written:
            value = previous[name]
            if value is _ABSENT:
                self.store.delete(KEYS[name])
            else:
                self.store.set(KEYS[name], value)

    # Reset ------------------------------------------------------------

    def reset(self) -> None:
        """Delete every stored key, including the first-run flag."""

        for key in KEYS.values():
            self.store.delete(key)
        logger.warning("All invoicing data deleted")
