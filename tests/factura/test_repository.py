"""Tests for the record repository and backup import/export."""

from __future__ import annotations

from typing import Any, Dict

import pytest

from agents.factura.errors import PersistenceError, ValidationError
from agents.factura.issuer import DEFAULT_ISSUER, IssuerProfile
from agents.factura.repository import KEYS, Repository, validate_backup
from agents.factura.storage import MemoryStore


PRODUCT = {
    "id": "p1",
    "name": "Polvo compacto",
    "sku": "POL-001",
    "unit": "unidad",
    "price_sale": 25000,
    "vat_rate": 0.19,
    "created_at": "2025-01-10T09:00:00.000Z",
}
CUSTOMER = {
    "id": "c1",
    "company_name": "Belleza Total SAS",
    "nit": "900123456-7",
    "email": "",
    "phone": "",
    "address": "",
    "created_at": "2025-01-10T09:00:00.000Z",
}


def _payload(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "products": [dict(PRODUCT)],
        "customers": [dict(CUSTOMER)],
        "invoices": [],
        "counter": 3,
    }
    payload.update(overrides)
    return payload


class FailingStore(MemoryStore):
    def __init__(self, initial: Dict[str, Any], fail_on: str) -> None:
        super().__init__(initial)
        self.fail_on = fail_on

    def set(self, key: str, value: Any) -> None:
        if key == self.fail_on:
            raise PersistenceError("write refused", key=key)
        super().set(key, value)


def test_import_missing_customers_names_field_and_mutates_nothing() -> None:
    # Arrange
    initial = {KEYS["products"]: [{"id": "old"}], KEYS["counter"]: 9}
    store = MemoryStore(initial)
    payload = _payload()
    del payload["customers"]

    # Act
    result = Repository(store).bulk_import(payload)

    # Assert
    assert result.ok is False
    assert result.field == "customers"
    assert "customers" in (result.error or "")
    assert store.get(KEYS["products"]) == [{"id": "old"}]
    assert store.get(KEYS["counter"]) == 9
    assert not store.contains(KEYS["customers"])


@pytest.mark.parametrize(
    "overrides, missing, expected_field",
    [
        ({"products": "nope"}, None, "products"),
        ({}, "products", "products"),
        ({"customers": {}}, None, "customers"),
        ({"invoices": None}, None, "invoices"),
        ({}, "counter", "counter"),
        ({"counter": "3"}, None, "counter"),
        ({"counter": 3.5}, None, "counter"),
        ({"counter": True}, None, "counter"),
        # Several bad fields: the first in fixed order wins
        ({"invoices": 1, "counter": "x"}, "customers", "customers"),
    ],
)
def test_validation_reports_first_bad_field(
    overrides: Dict[str, Any], missing: str | None, expected_field: str
) -> None:
    payload = _payload(**overrides)
    if missing:
        del payload[missing]

    with pytest.raises(ValidationError) as excinfo:
        validate_backup(payload)

    assert excinfo.value.field == expected_field
    assert excinfo.value.message == f'Missing "{expected_field}"'


@pytest.mark.parametrize("raw", [None, [], "text", 3])
def test_validation_rejects_non_objects(raw: Any) -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_backup(raw)

    assert excinfo.value.field is None


@pytest.mark.parametrize(
    "overrides, expected_field",
    [
        ({"products": [{"name": "x"}]}, "products"),
        ({"products": [{**PRODUCT, "price_sale": "abc"}]}, "products"),
        ({"products": ["p1"]}, "products"),
        ({"customers": [{"id": "c2", "nit": "1"}]}, "customers"),
        ({"invoices": [{"id": "i1"}]}, "invoices"),
        # Bad records in several fields: the first in fixed order wins
        ({"customers": [{}], "invoices": [{}]}, "customers"),
    ],
)
def test_validation_rejects_unreadable_records(
    overrides: Dict[str, Any], expected_field: str
) -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_backup(_payload(**overrides))

    assert excinfo.value.field == expected_field
    assert excinfo.value.message.startswith(f'Invalid "{expected_field}" record')


def test_import_with_unreadable_product_mutates_nothing() -> None:
    # Arrange
    initial = {KEYS["products"]: [PRODUCT], KEYS["counter"]: 9}
    store = MemoryStore(initial)

    # Act
    result = Repository(store).bulk_import(_payload(products=[{"name": "x"}]))

    # Assert
    assert result.ok is False
    assert result.field == "products"
    assert store.get(KEYS["products"]) == [PRODUCT]
    assert store.get(KEYS["counter"]) == 9
    assert not store.contains(KEYS["customers"])
    assert Repository(store).load_products()[0].id == "p1"


@pytest.mark.parametrize(
    "key, stored, load",
    [
        ("products", [{"name": "x"}], Repository.load_products),
        ("products", [{**PRODUCT, "price_sale": "abc"}], Repository.load_products),
        ("customers", [{"id": "c1"}], Repository.load_customers),
        ("invoices", [{"id": "i1", "customer_snapshot": None}], Repository.load_invoices),
    ],
)
def test_unreadable_stored_records_raise_persistence_error(
    key: str, stored: Any, load: Any
) -> None:
    repository = Repository(MemoryStore({KEYS[key]: stored}))

    with pytest.raises(PersistenceError) as excinfo:
        load(repository)

    assert excinfo.value.key == KEYS[key]


def test_import_replaces_all_fields(store: MemoryStore, repository: Repository) -> None:
    store.set(KEYS["products"], [{"id": "old"}])

    result = repository.bulk_import(_payload(extra="ignored"))

    assert result.ok is True
    assert result.to_dict() == {"ok": True, "error": None, "field": None}
    assert store.get(KEYS["products"]) == [PRODUCT]
    assert store.get(KEYS["customers"]) == [CUSTOMER]
    assert store.get(KEYS["invoices"]) == []
    assert store.get(KEYS["counter"]) == 3


def test_import_write_failure_restores_previous_state() -> None:
    # Arrange
    initial = {
        KEYS["products"]: [{"id": "old-p"}],
        KEYS["counter"]: 5,
    }
    store = FailingStore(initial, fail_on=KEYS["invoices"])
    repository = Repository(store)

    # Act
    with pytest.raises(PersistenceError):
        repository.bulk_import(_payload())

    # Assert
    assert store.get(KEYS["products"]) == [{"id": "old-p"}]
    assert not store.contains(KEYS["customers"])
    assert store.get(KEYS["counter"]) == 5


def test_export_shape_and_defaults(repository: Repository) -> None:
    assert repository.bulk_export() == {
        "products": [],
        "customers": [],
        "invoices": [],
        "counter": 0,
    }


def test_export_then_import_into_fresh_store(seeded_service) -> None:
    source = seeded_service.repository
    exported = source.bulk_export()
    target = Repository(MemoryStore())

    assert target.bulk_import(exported).ok
    assert target.load_products() == source.load_products()
    assert target.load_customers() == source.load_customers()


def test_issuer_profile_defaults_and_persists(repository: Repository) -> None:
    assert repository.load_issuer_profile() == DEFAULT_ISSUER

    custom = IssuerProfile(
        name="Mi Tienda",
        nit="1",
        address="Calle 1",
        phone="3000000000",
        email="a@b.co",
        resolution="Res. 1",
    )
    repository.save_issuer_profile(custom)

    assert repository.load_issuer_profile() == custom


def test_initialized_flag(repository: Repository) -> None:
    assert repository.is_initialized() is False

    repository.mark_initialized()

    assert repository.is_initialized() is True


def test_reset_deletes_every_key(store: MemoryStore, repository: Repository) -> None:
    # Arrange
    repository.bulk_import(_payload())
    repository.save_issuer_profile(DEFAULT_ISSUER)
    repository.mark_initialized()

    # Act
    repository.reset()

    # Assert
    assert not any(store.contains(key) for key in KEYS.values())
    assert repository.bulk_export() == {
        "products": [],
        "customers": [],
        "invoices": [],
        "counter": 0,
    }
    assert repository.is_initialized() is False
