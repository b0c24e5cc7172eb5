"""Tests for RecordStore."""

import json

import pytest

from kirana.errors import (
    DeleteError,
    OpenError,
    ReadError,
    VersionBlockedError,
    WriteError,
)
from kirana.record_store import (
    CUSTOMERS,
    ORDERS,
    PRODUCTS,
    PartitionSchema,
    RecordStore,
)


def _product(key: str, **overrides) -> dict:
    record = {
        "id": key,
        "name": "Tea",
        "category": "Beverages",
        "currentStock": 10,
        "minStock": 2,
        "unit": "kg",
        "costPrice": 40,
        "sellingPrice": 50,
        "lastUpdated": "2026-10-19T10:00:00Z",
    }
    record.update(overrides)
    return record


class TestOpen:
    """Tests for opening, creating and upgrading the database."""

    def test_open_creates_document(self, temp_dir):
        store = RecordStore(data_dir=temp_dir)
        store.open()

        assert store.is_open
        assert store.path == temp_dir / "KiranaStoreDB.json"
        data = json.loads(store.path.read_text())
        assert data["version"] == 1
        assert set(data["partitions"]) == {PRODUCTS, CUSTOMERS, ORDERS}

    def test_open_declares_keys_and_indexes(self, store):
        layout = store.describe()

        assert layout["partitions"][PRODUCTS]["key_path"] == "id"
        assert layout["partitions"][PRODUCTS]["indexes"] == ["category"]
        assert layout["partitions"][CUSTOMERS]["indexes"] == []
        assert layout["partitions"][ORDERS]["indexes"] == ["date"]

    def test_open_is_idempotent(self, store):
        store.put(PRODUCTS, _product("prod_1"))

        assert store.open() is store
        assert len(store.get_all(PRODUCTS)) == 1

    def test_reopen_keeps_records(self, temp_dir):
        store = RecordStore(data_dir=temp_dir)
        store.open()
        store.put(PRODUCTS, _product("prod_1"))
        store.close()

        reopened = RecordStore(data_dir=temp_dir).open()
        assert [r["id"] for r in reopened.get_all(PRODUCTS)] == ["prod_1"]

    def test_open_creates_missing_directory(self, temp_dir):
        store = RecordStore(data_dir=temp_dir / "nested" / "data")
        store.open()
        assert store.exists()

    def test_open_corrupt_document_raises(self, temp_dir):
        (temp_dir / "KiranaStoreDB.json").write_text("{not json")

        with pytest.raises(OpenError):
            RecordStore(data_dir=temp_dir).open()

    def test_open_unusable_directory_raises(self, temp_dir):
        blocker = temp_dir / "file"
        blocker.write_text("")

        with pytest.raises(OpenError):
            RecordStore(data_dir=blocker / "data").open()

    def test_open_unusable_lock_file_raises(self, temp_dir):
        (temp_dir / ".KiranaStoreDB.lock").mkdir()
        store = RecordStore(data_dir=temp_dir)

        with pytest.raises(OpenError) as exc_info:
            store.open()

        assert exc_info.value.path == str(temp_dir / "KiranaStoreDB.json")
        assert not store.is_open

    def test_open_newer_version_is_blocked(self, temp_dir):
        RecordStore(data_dir=temp_dir, version=2).open()

        with pytest.raises(VersionBlockedError) as exc_info:
            RecordStore(data_dir=temp_dir, version=1).open()

        assert exc_info.value.found == 2
        assert exc_info.value.requested == 1
        assert isinstance(exc_info.value, OpenError)

    def test_upgrade_bumps_version_and_adds_partitions(self, temp_dir):
        old = RecordStore(data_dir=temp_dir, partitions=(PartitionSchema(PRODUCTS),))
        old.open()
        old.put(PRODUCTS, _product("prod_1"))
        old.close()

        new = RecordStore(data_dir=temp_dir, version=2)
        new.open()

        layout = new.describe()
        assert layout["version"] == 2
        assert set(layout["partitions"]) == {PRODUCTS, CUSTOMERS, ORDERS}
        # Existing partition keeps its records and original declaration
        assert layout["partitions"][PRODUCTS]["count"] == 1
        assert layout["partitions"][PRODUCTS]["indexes"] == []

    def test_operations_after_close_raise(self, store):
        store.close()

        with pytest.raises(OpenError):
            store.get_all(PRODUCTS)
        with pytest.raises(OpenError):
            store.put(PRODUCTS, _product("prod_1"))


class TestGetAll:
    def test_empty_partition_returns_empty_list(self, store):
        assert store.get_all(CUSTOMERS) == []

    def test_unknown_partition_raises(self, store):
        with pytest.raises(ReadError) as exc_info:
            store.get_all("suppliers")
        assert exc_info.value.partition == "suppliers"

    def test_returns_records_in_insertion_order(self, store):
        for key in ("prod_b", "prod_a", "prod_c"):
            store.put(PRODUCTS, _product(key))

        assert [r["id"] for r in store.get_all(PRODUCTS)] == ["prod_b", "prod_a", "prod_c"]


class TestPut:
    def test_put_then_get_all_has_single_record(self, store):
        store.put(PRODUCTS, _product("prod_1"))
        store.put(PRODUCTS, _product("prod_1", currentStock=3, name="Green Tea"))

        records = store.get_all(PRODUCTS)
        assert len(records) == 1
        assert records[0]["currentStock"] == 3
        assert records[0]["name"] == "Green Tea"

    def test_put_is_full_overwrite(self, store):
        store.put(CUSTOMERS, {"id": "cust_1", "name": "Asha", "email": "a@example.com"})
        store.put(CUSTOMERS, {"id": "cust_1", "name": "Asha"})

        assert store.get(CUSTOMERS, "cust_1") == {"id": "cust_1", "name": "Asha"}

    def test_put_detaches_from_caller(self, store):
        record = _product("prod_1")
        store.put(PRODUCTS, record)
        record["currentStock"] = 0

        assert store.get(PRODUCTS, "prod_1")["currentStock"] == 10

    def test_nested_round_trip_keeps_item_order(self, store):
        order = {
            "id": "ORD1",
            "customerId": "cust_1",
            "customerName": "Asha",
            "items": [
                {"productId": "prod_2", "productName": "Dal", "quantity": 1, "unitPrice": 150},
                {"productId": "prod_1", "productName": "Rice", "quantity": 2, "unitPrice": 100},
            ],
            "total": 350,
            "status": "pending",
            "date": "Mon Oct 19 2026",
            "time": "10:30 AM",
        }
        store.put(ORDERS, order)

        assert store.get_all(ORDERS) == [order]

    def test_unserializable_record_raises(self, store):
        with pytest.raises(WriteError):
            store.put(PRODUCTS, {"id": "prod_1", "tags": {1, 2}})

        assert store.get_all(PRODUCTS) == []

    def test_record_without_key_raises(self, store):
        with pytest.raises(WriteError) as exc_info:
            store.put(PRODUCTS, {"name": "No key"})
        assert "'id'" in str(exc_info.value)

    def test_unknown_partition_raises(self, store):
        with pytest.raises(WriteError):
            store.put("suppliers", {"id": "sup_1"})

    def test_put_persists_to_disk(self, store):
        store.put(PRODUCTS, _product("prod_1"))

        data = json.loads(store.path.read_text())
        assert data["partitions"][PRODUCTS]["records"]["prod_1"]["name"] == "Tea"


class TestDelete:
    def test_delete_removes_record(self, store):
        store.put(PRODUCTS, _product("prod_1"))
        store.put(PRODUCTS, _product("prod_2"))

        store.delete(PRODUCTS, "prod_1")

        assert [r["id"] for r in store.get_all(PRODUCTS)] == ["prod_2"]

    def test_delete_missing_key_is_noop(self, store):
        store.put(PRODUCTS, _product("prod_1"))

        store.delete(PRODUCTS, "prod_missing")

        assert len(store.get_all(PRODUCTS)) == 1

    def test_delete_unknown_partition_raises(self, store):
        with pytest.raises(DeleteError):
            store.delete("suppliers", "sup_1")


class TestGet:
    def test_get_missing_returns_none(self, store):
        assert store.get(PRODUCTS, "prod_missing") is None

    def test_count(self, store):
        store.put(PRODUCTS, _product("prod_1"))
        store.put(PRODUCTS, _product("prod_2"))
        assert store.count(PRODUCTS) == 2
        assert store.count(ORDERS) == 0
