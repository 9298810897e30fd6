"""Invoicing workflow: catalogue maintenance, invoice issuing and seeding."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional

from backend.core.config import settings
from backend.core.logging import get_logger

from .cufe import derive_code
from .dto import (
    DEFAULT_UNIT,
    DEFAULT_VAT_RATE,
    Customer,
    DecimalLike,
    Invoice,
    InvoiceItem,
    Product,
    isoformat_utc,
    js_number_string,
    to_decimal,
)
from .errors import ValidationError
from .issuer import SUPPLIER_NAMES, IssuerProfile, migrate_legacy_issuer
from .numbering import NumberingService
from .repository import Repository
from .samples import SAMPLE_CUSTOMER, iter_seed_products
from .storage import JsonFileStore
from .totals import aggregate, compute_line

logger = get_logger(__name__)

_PRODUCT_FIELDS = ("name", "sku", "unit", "price_sale")
_CUSTOMER_FIELDS = (
    "company_name",
    "nit",
    "email",
    "phone",
    "address",
    "website",
    "legal_representative",
    "economic_activity",
)


def _default_clock() -> datetime:
    return datetime.now(timezone.utc)


def _default_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class InvoiceLine:
    """One requested row; ``unit_price`` defaults to the product's sale price."""

    product_id: str
    quantity: DecimalLike
    unit_price: Optional[DecimalLike] = None


def _parse_amount(value: Any, field: str) -> Decimal:
    try:
        amount = to_decimal(value)
    except (TypeError, InvalidOperation) as err:
        raise ValidationError(f"{field} must be a number", field=field) from err
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)
    return amount


def _require_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value.strip()


class InvoicingService:
    def __init__(
        self,
        repository: Repository,
        *,
        numbering: NumberingService | None = None,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.repository = repository
        self._clock = clock or _default_clock
        self._id_factory = id_factory or _default_id
        self.numbering = numbering or NumberingService(repository, clock=self._clock)

    def _now(self) -> str:
        return isoformat_utc(self._clock())

    # Products ---------------------------------------------------------

    def list_products(self) -> List[Product]:
        return self.repository.load_products()

    def get_product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.list_products() if p.id == product_id), None)

    def create_product(
        self,
        *,
        name: str,
        price_sale: DecimalLike,
        unit: str = DEFAULT_UNIT,
        sku: Optional[str] = None,
    ) -> Product:
        price = _parse_amount(price_sale, "price_sale")
        if price < 0:
            raise ValidationError("price_sale must not be negative", field="price_sale")
        product = Product(
            id=self._id_factory(),
            name=_require_text(name, "name"),
            sku=sku or None,
            unit=unit or DEFAULT_UNIT,
            price_sale=price,
            vat_rate=DEFAULT_VAT_RATE,
            created_at=self._now(),
        )
        products = self.list_products()
        products.append(product)
        self.repository.save_products(products)
        return product

    def update_product(self, product_id: str, **changes: Any) -> Product:
        unknown = set(changes) - set(_PRODUCT_FIELDS)
        if unknown:
            raise ValidationError(f"unknown product fields: {sorted(unknown)}")
        if "price_sale" in changes:
            changes["price_sale"] = _parse_amount(changes["price_sale"], "price_sale")
            if changes["price_sale"] < 0:
                raise ValidationError("price_sale must not be negative", field="price_sale")
        if "name" in changes:
            changes["name"] = _require_text(changes["name"], "name")

        products = self.list_products()
        for index, product in enumerate(products):
            if product.id == product_id:
                updated = replace(product, **changes, vat_rate=DEFAULT_VAT_RATE)
                products[index] = updated
                self.repository.save_products(products)
                return updated
        raise ValidationError(f"product {product_id} not found", field="product_id")

    def delete_product(self, product_id: str) -> None:
        products = self.list_products()
        self.repository.save_products([p for p in products if p.id != product_id])

    # Customers --------------------------------------------------------

    def list_customers(self) -> List[Customer]:
        return self.repository.load_customers()

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        return next((c for c in self.list_customers() if c.id == customer_id), None)

    def find_customer_by_nit(self, nit: str) -> Optional[Customer]:
        return next((c for c in self.list_customers() if c.nit == nit), None)

    def create_customer(
        self,
        *,
        company_name: str,
        nit: str,
        email: str = "",
        phone: str = "",
        address: str = "",
        website: Optional[str] = None,
        legal_representative: Optional[str] = None,
        economic_activity: Optional[str] = None,
    ) -> Customer:
        customer = Customer(
            id=self._id_factory(),
            company_name=_require_text(company_name, "company_name"),
            nit=_require_text(nit, "nit"),
            email=email,
            phone=phone,
            address=address,
            website=website,
            legal_representative=legal_representative,
            economic_activity=economic_activity,
            created_at=self._now(),
        )
        customers = self.list_customers()
        customers.append(customer)
        self.repository.save_customers(customers)
        return customer

    def update_customer(self, customer_id: str, **changes: Any) -> Customer:
        unknown = set(changes) - set(_CUSTOMER_FIELDS)
        if unknown:
            raise ValidationError(f"unknown customer fields: {sorted(unknown)}")
        for required in ("company_name", "nit"):
            if required in changes:
                changes[required] = _require_text(changes[required], required)

        customers = self.list_customers()
        for index, customer in enumerate(customers):
            if customer.id == customer_id:
                updated = replace(customer, **changes)
                customers[index] = updated
                self.repository.save_customers(customers)
                return updated
        raise ValidationError(f"customer {customer_id} not found", field="customer_id")

    def delete_customer(self, customer_id: str) -> None:
        customers = self.list_customers()
        self.repository.save_customers([c for c in customers if c.id != customer_id])

    # Issuer -----------------------------------------------------------

    def get_issuer_profile(self) -> IssuerProfile:
        return self.repository.load_issuer_profile()

    def save_issuer_profile(self, profile: IssuerProfile) -> None:
        self.repository.save_issuer_profile(profile)

    # Invoices ---------------------------------------------------------

    def build_item(self, product: Product, line: InvoiceLine) -> InvoiceItem:
        quantity = _parse_amount(line.quantity, "quantity")
        if quantity <= 0:
            raise ValidationError("quantity must be greater than zero", field="quantity")
        unit_price = (
            product.price_sale
            if line.unit_price is None
            else _parse_amount(line.unit_price, "unit_price")
        )
        if unit_price < 0:
            raise ValidationError("unit_price must not be negative", field="unit_price")

        totals = compute_line(quantity, unit_price, DEFAULT_VAT_RATE)
        return InvoiceItem(
            id=self._id_factory(),
            product_id=product.id,
            product_name=product.name,
            sku=product.sku,
            unit=product.unit,
            quantity=quantity,
            unit_price=unit_price,
            vat_rate=DEFAULT_VAT_RATE,
            line_subtotal=totals.subtotal,
            line_vat=totals.vat,
            line_total=totals.total,
        )

    def create_invoice(
        self,
        customer_id: str,
        lines: Iterable[InvoiceLine | tuple],
        *,
        supplier: Optional[str] = None,
    ) -> Invoice:
        """Validate, number, sign and persist a new invoice.

        Every check runs before a number is drawn, so rejected input never
        consumes a sequence value.
        """

        if supplier is not None and supplier not in SUPPLIER_NAMES:
            raise ValidationError(f"unknown supplier '{supplier}'", field="supplier")

        customer = self.get_customer(customer_id)
        if customer is None:
            raise ValidationError("customer not found", field="customer_id")

        try:
            requested = [
                line if isinstance(line, InvoiceLine) else InvoiceLine(*line)
                for line in lines
            ]
        except TypeError as err:
            raise ValidationError(
                "each line needs a product_id and a quantity", field="items"
            ) from err
        if not requested:
            raise ValidationError(
                "at least one product with quantity > 0 is required", field="items"
            )

        products = {product.id: product for product in self.list_products()}
        items: List[InvoiceItem] = []
        for line in requested:
            product = products.get(line.product_id)
            if product is None:
                raise ValidationError(
                    f"product {line.product_id} not found", field="product_id"
                )
            items.append(self.build_item(product, line))

        totals = aggregate(items)
        invoice_number = self.numbering.next_number()
        created_at = self._now()
        cufe = derive_code(
            invoice_number,
            customer.nit,
            js_number_string(totals.total),
            created_at,
        )

        invoice = Invoice(
            id=self._id_factory(),
            invoice_number=invoice_number,
            supplier=supplier,
            customer_id=customer.id,
            customer_snapshot=customer.snapshot(),
            items=tuple(items),
            subtotal=totals.subtotal,
            vat_total=totals.vat_total,
            total=totals.total,
            cufe=cufe,
            created_at=created_at,
        )
        self.repository.append_invoice(invoice)
        logger.info(
            "Invoice %s created with %d items, total %s",
            invoice_number,
            len(items),
            js_number_string(totals.total),
        )
        return invoice

    def list_invoices(self) -> List[Invoice]:
        """All invoices, newest first."""

        return list(reversed(self.repository.load_invoices()))

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        return next(
            (i for i in self.repository.load_invoices() if i.id == invoice_id), None
        )

    def find_invoice_by_number(self, invoice_number: str) -> Optional[Invoice]:
        return next(
            (
                i
                for i in self.repository.load_invoices()
                if i.invoice_number == invoice_number
            ),
            None,
        )

    # Seeding ----------------------------------------------------------

    def init_seed_data(self) -> bool:
        """First-run setup; returns ``True`` when seeding actually ran."""

        stored = self.repository.load_issuer_profile()
        migrated = migrate_legacy_issuer(stored)
        if migrated is not None:
            self.repository.save_issuer_profile(migrated)
            logger.info("Migrated legacy issuer profile")

        if self.repository.is_initialized():
            return False

        if not self.list_products():
            now = self._now()
            self.repository.save_products(
                [
                    Product(
                        id=self._id_factory(),
                        name=seed.name,
                        sku=seed.sku,
                        unit=seed.unit,
                        price_sale=seed.price_sale,
                        created_at=now,
                    )
                    for seed in iter_seed_products()
                ]
            )

        if not self.list_customers():
            self.create_customer(**SAMPLE_CUSTOMER)

        self.repository.mark_initialized()
        logger.info("Seed data initialized")
        return True

    def load_sample_data(self) -> int:
        """Merge sample products (by SKU) and the sample customer (by NIT)."""

        existing = self.list_products()
        existing_skus = {product.sku for product in existing}
        now = self._now()
        to_add = [
            Product(
                id=self._id_factory(),
                name=seed.name,
                sku=seed.sku,
                unit=seed.unit,
                price_sale=seed.price_sale,
                created_at=now,
            )
            for seed in iter_seed_products()
            if not seed.sku or seed.sku not in existing_skus
        ]
        self.repository.save_products(existing + to_add)

        if self.find_customer_by_nit(SAMPLE_CUSTOMER["nit"]) is None:
            self.create_customer(**SAMPLE_CUSTOMER)

        logger.info("Loaded %d sample products", len(to_add))
        return len(to_add)


def open_service(
    data_dir: Path | None = None,
    *,
    clock: Callable[[], datetime] | None = None,
    seed: bool | None = None,
) -> InvoicingService:
    """Service over a ``JsonFileStore``, seeded on first run unless disabled."""

    store = JsonFileStore(data_dir or settings.data_dir)
    service = InvoicingService(Repository(store), clock=clock)
    if settings.seed_on_first_run if seed is None else seed:
        service.init_seed_data()
    return service
