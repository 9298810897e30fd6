"""Tests for record serialisation and issuer resolution."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from agents.factura.dto import (
    Customer,
    Product,
    isoformat_utc,
    js_number_string,
    json_number,
)
from agents.factura.issuer import DEFAULT_ISSUER, IssuerProfile, resolve_issuer


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("44030.00"), "44030"),
        (Decimal("44030.50"), "44030.5"),
        (Decimal("0.10"), "0.1"),
        (Decimal("0"), "0"),
        (Decimal("1E+3"), "1000"),
    ],
)
def test_js_number_string(value: Decimal, expected: str) -> None:
    assert js_number_string(value) == expected


def test_json_number_prefers_integers() -> None:
    assert json_number(Decimal("28000.00")) == 28000
    assert isinstance(json_number(Decimal("28000.00")), int)
    assert json_number(Decimal("0.19")) == 0.19


def test_isoformat_utc_has_millis_and_z() -> None:
    bogota = timezone(timedelta(hours=-5))
    dt = datetime(2025, 3, 14, 10, 30, 0, 123456, tzinfo=bogota)

    assert isoformat_utc(dt) == "2025-03-14T15:30:00.123Z"
    assert isoformat_utc(datetime(2025, 1, 1)) == "2025-01-01T00:00:00.000Z"


def test_product_from_legacy_dict_applies_defaults() -> None:
    product = Product.from_dict(
        {"id": "p1", "name": "X", "price_sale": 14000, "created_at": "2024-01-01T00:00:00.000Z"}
    )

    assert product.unit == "UND"
    assert product.vat_rate == Decimal("0.19")
    assert product.sku is None
    assert "sku" not in product.to_dict()


def test_customer_optional_fields_are_omitted_when_absent() -> None:
    customer = Customer(
        id="c1",
        company_name="ACME",
        nit="1",
        email="",
        phone="",
        address="",
        created_at="2025-01-01T00:00:00.000Z",
    )

    data = customer.to_dict()

    assert list(data) == ["id", "company_name", "nit", "email", "phone", "address", "created_at"]
    assert Customer.from_dict(data) == customer


@pytest.mark.parametrize(
    "supplier, expected",
    [("ruby_rose", "Ruby Rose"), ("trendy", "Trendy"), (None, DEFAULT_ISSUER.name), ("other", DEFAULT_ISSUER.name)],
)
def test_resolve_issuer(supplier, expected: str) -> None:
    resolved = resolve_issuer(DEFAULT_ISSUER, supplier)

    assert resolved.name == expected
    assert resolved.nit == DEFAULT_ISSUER.nit


def test_issuer_from_partial_dict_keeps_defaults() -> None:
    profile = IssuerProfile.from_dict({"name": "Tienda", "unknown": "x"})

    assert profile.name == "Tienda"
    assert profile.resolution == DEFAULT_ISSUER.resolution
