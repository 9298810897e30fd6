"""Tests for the key-value store backends."""

from __future__ import annotations

from pathlib import Path

import pytest

from agents.factura.errors import PersistenceError
from agents.factura.storage import JsonFileStore, MemoryStore


def test_json_store_round_trip(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "data")

    store.set("fs_counter", 7)
    store.set("fs_products", [{"id": "p1", "name": "Ñandú"}])

    assert store.get("fs_counter") == 7
    assert store.get("fs_products") == [{"id": "p1", "name": "Ñandú"}]
    assert (tmp_path / "data" / "fs_counter.json").exists()


def test_json_store_missing_key_returns_default(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path)

    assert store.get("fs_invoices", []) == []
    assert not store.contains("fs_invoices")


def test_json_store_leaves_no_temp_files(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path)

    store.set("fs_counter", 1)
    store.set("fs_counter", 2)

    assert sorted(p.name for p in tmp_path.iterdir()) == ["fs_counter.json"]


def test_json_store_corrupt_file_raises(tmp_path: Path) -> None:
    (tmp_path / "fs_counter.json").write_text("{not json", encoding="utf-8")
    store = JsonFileStore(tmp_path)

    with pytest.raises(PersistenceError) as excinfo:
        store.get("fs_counter")

    assert excinfo.value.key == "fs_counter"


def test_json_store_unserialisable_value_raises(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path)

    with pytest.raises(PersistenceError):
        store.set("fs_counter", object())

    assert not store.contains("fs_counter")


def test_json_store_delete(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path)
    store.set("fs_initialized", "1")

    store.delete("fs_initialized")
    store.delete("fs_initialized")

    assert not store.contains("fs_initialized")


def test_memory_store_copies_values() -> None:
    store = MemoryStore()
    value = [{"id": "a"}]

    store.set("k", value)
    value.append({"id": "b"})
    fetched = store.get("k")
    fetched.append({"id": "c"})

    assert store.get("k") == [{"id": "a"}]
