"""Records of the invoice simulator and the money helpers they rely on.

Amounts are held as ``Decimal`` and quantized to two places with
``ROUND_HALF_UP``. On disk every record is a plain JSON object whose field
names match the backups written by earlier versions of the application, so
``to_dict``/``from_dict`` must stay byte-compatible with that layout.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional, Tuple


DecimalLike = Decimal | str | int | float

CENT = Decimal("0.01")
DEFAULT_UNIT = "UND"
DEFAULT_VAT_RATE = Decimal("0.19")


def to_decimal(value: DecimalLike) -> Decimal:
    """Convert input to ``Decimal`` deterministically.

    Floats go through ``str`` first so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.
    """

    if isinstance(value, bool):
        raise TypeError("Booleans are not amounts")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, str, float)):
        return Decimal(str(value))
    raise TypeError(f"Unsupported decimal input: {type(value)!r}")


def round2(amount: DecimalLike) -> Decimal:
    """Round to two decimal places, half away from zero."""

    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def json_number(value: Decimal) -> int | float:
    """Render a ``Decimal`` the way the stored JSON expects it."""

    if value == value.to_integral_value():
        return int(value)
    return float(value)


def js_number_string(value: DecimalLike) -> str:
    """Format a number like JavaScript's ``String(n)`` (``44030``, ``44030.5``)."""

    number = to_decimal(value)
    if number == number.to_integral_value():
        return str(int(number))
    return format(number.normalize(), "f")


def isoformat_utc(dt: datetime) -> str:
    """UTC timestamp with millisecond precision and ``Z`` suffix."""

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _put_optional(data: Dict[str, Any], key: str, value: Optional[str]) -> None:
    if value is not None:
        data[key] = value


@dataclass(frozen=True, slots=True)
class Product:
    id: str
    name: str
    price_sale: Decimal
    created_at: str
    unit: str = DEFAULT_UNIT
    sku: Optional[str] = None
    vat_rate: Decimal = DEFAULT_VAT_RATE

    def __post_init__(self) -> None:
        object.__setattr__(self, "price_sale", to_decimal(self.price_sale))
        object.__setattr__(self, "vat_rate", to_decimal(self.vat_rate))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "name": self.name}
        _put_optional(data, "sku", self.sku)
        data.update(
            {
                "unit": self.unit,
                "price_sale": json_number(self.price_sale),
                "vat_rate": json_number(self.vat_rate),
                "created_at": self.created_at,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        return cls(
            id=data["id"],
            name=data["name"],
            sku=data.get("sku"),
            unit=data.get("unit", DEFAULT_UNIT),
            price_sale=data["price_sale"],
            vat_rate=data.get("vat_rate", DEFAULT_VAT_RATE),
            created_at=data["created_at"],
        )


@dataclass(frozen=True, slots=True)
class Customer:
    id: str
    company_name: str
    nit: str
    email: str
    phone: str
    address: str
    created_at: str
    website: Optional[str] = None
    legal_representative: Optional[str] = None
    economic_activity: Optional[str] = None

    def snapshot(self) -> "CustomerSnapshot":
        return CustomerSnapshot(
            company_name=self.company_name,
            nit=self.nit,
            email=self.email,
            phone=self.phone,
            address=self.address,
            website=self.website,
            legal_representative=self.legal_representative,
            economic_activity=self.economic_activity,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "company_name": self.company_name,
            "nit": self.nit,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
        }
        _put_optional(data, "website", self.website)
        _put_optional(data, "legal_representative", self.legal_representative)
        _put_optional(data, "economic_activity", self.economic_activity)
        data["created_at"] = self.created_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Customer":
        return cls(
            id=data["id"],
            company_name=data["company_name"],
            nit=data["nit"],
            email=data.get("email", ""),
            phone=data.get("phone", ""),
            address=data.get("address", ""),
            website=data.get("website"),
            legal_representative=data.get("legal_representative"),
            economic_activity=data.get("economic_activity"),
            created_at=data["created_at"],
        )


@dataclass(frozen=True, slots=True)
class CustomerSnapshot:
    """Customer fields frozen at invoice time, independent of later edits."""

    company_name: str
    nit: str
    email: str
    phone: str
    address: str
    website: Optional[str] = None
    legal_representative: Optional[str] = None
    economic_activity: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "company_name": self.company_name,
            "nit": self.nit,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
        }
        _put_optional(data, "website", self.website)
        _put_optional(data, "legal_representative", self.legal_representative)
        _put_optional(data, "economic_activity", self.economic_activity)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomerSnapshot":
        return cls(
            company_name=data["company_name"],
            nit=data["nit"],
            email=data.get("email", ""),
            phone=data.get("phone", ""),
            address=data.get("address", ""),
            website=data.get("website"),
            legal_representative=data.get("legal_representative"),
            economic_activity=data.get("economic_activity"),
        )


@dataclass(frozen=True, slots=True)
class InvoiceItem:
    id: str
    product_id: str
    product_name: str
    unit: str
    quantity: Decimal
    unit_price: Decimal
    vat_rate: Decimal
    line_subtotal: Decimal
    line_vat: Decimal
    line_total: Decimal
    sku: Optional[str] = None

    def __post_init__(self) -> None:
        for name in (
            "quantity",
            "unit_price",
            "vat_rate",
            "line_subtotal",
            "line_vat",
            "line_total",
        ):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
        }
        _put_optional(data, "sku", self.sku)
        data.update(
            {
                "unit": self.unit,
                "quantity": json_number(self.quantity),
                "unit_price": json_number(self.unit_price),
                "vat_rate": json_number(self.vat_rate),
                "line_subtotal": json_number(self.line_subtotal),
                "line_vat": json_number(self.line_vat),
                "line_total": json_number(self.line_total),
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InvoiceItem":
        return cls(
            id=data["id"],
            product_id=data["product_id"],
            product_name=data["product_name"],
            sku=data.get("sku"),
            unit=data.get("unit", DEFAULT_UNIT),
            quantity=data["quantity"],
            unit_price=data["unit_price"],
            vat_rate=data.get("vat_rate", DEFAULT_VAT_RATE),
            line_subtotal=data["line_subtotal"],
            line_vat=data["line_vat"],
            line_total=data["line_total"],
        )


@dataclass(frozen=True, slots=True)
class Invoice:
    id: str
    invoice_number: str
    customer_id: str
    customer_snapshot: CustomerSnapshot
    subtotal: Decimal
    vat_total: Decimal
    total: Decimal
    cufe: str
    created_at: str
    items: Tuple[InvoiceItem, ...] = ()
    supplier: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "subtotal", to_decimal(self.subtotal))
        object.__setattr__(self, "vat_total", to_decimal(self.vat_total))
        object.__setattr__(self, "total", to_decimal(self.total))
        object.__setattr__(self, "items", tuple(self.items))

    @property
    def document_filename(self) -> str:
        return f"Factura-{self.invoice_number}.pdf"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "invoice_number": self.invoice_number,
        }
        _put_optional(data, "supplier", self.supplier)
        data.update(
            {
                "customer_id": self.customer_id,
                "customer_snapshot": self.customer_snapshot.to_dict(),
                "items": [item.to_dict() for item in self.items],
                "subtotal": json_number(self.subtotal),
                "vat_total": json_number(self.vat_total),
                "total": json_number(self.total),
                "cufe": self.cufe,
                "created_at": self.created_at,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Invoice":
        return cls(
            id=data["id"],
            invoice_number=data["invoice_number"],
            supplier=data.get("supplier"),
            customer_id=data["customer_id"],
            customer_snapshot=CustomerSnapshot.from_dict(data["customer_snapshot"]),
            items=[InvoiceItem.from_dict(item) for item in data.get("items", [])],
            subtotal=data["subtotal"],
            vat_total=data["vat_total"],
            total=data["total"],
            cufe=data["cufe"],
            created_at=data["created_at"],
        )
