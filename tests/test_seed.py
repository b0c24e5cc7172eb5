"""Tests for first-run seeding."""

from kirana.record_store import CUSTOMERS, ORDERS, PRODUCTS, RecordStore
from kirana.seed import sample_data, seed_store


class TestSampleData:
    def test_sample_sizes(self):
        data = sample_data()
        assert len(data[PRODUCTS]) == 5
        assert len(data[CUSTOMERS]) == 3
        assert len(data[ORDERS]) == 3

    def test_sample_orders_reference_sample_records(self):
        data = sample_data()
        product_ids = {p["id"] for p in data[PRODUCTS]}
        customer_ids = {c["id"] for c in data[CUSTOMERS]}

        for order in data[ORDERS]:
            assert order["customerId"] in customer_ids
            for item in order["items"]:
                assert item["productId"] in product_ids
            assert order["total"] == sum(i["quantity"] * i["unitPrice"] for i in order["items"])


class TestSeedStore:
    def test_fresh_store_is_seeded(self, store):
        written = seed_store(store)

        assert written == {PRODUCTS: 5, CUSTOMERS: 3, ORDERS: 3}
        assert store.count(PRODUCTS) == 5
        assert store.count(CUSTOMERS) == 3
        assert store.count(ORDERS) == 3

    def test_reseeding_never_duplicates(self, temp_dir):
        store = RecordStore(data_dir=temp_dir).open()
        seed_store(store)
        store.close()

        reopened = RecordStore(data_dir=temp_dir).open()
        written = seed_store(reopened)

        assert written == {PRODUCTS: 0, CUSTOMERS: 0, ORDERS: 0}
        assert reopened.count(PRODUCTS) == 5

    def test_partitions_are_checked_independently(self, store):
        store.put(PRODUCTS, {"id": "prod_own", "name": "House Blend"})

        written = seed_store(store)

        assert written[PRODUCTS] == 0
        assert written[CUSTOMERS] == 3
        assert written[ORDERS] == 3
        assert [p["id"] for p in store.get_all(PRODUCTS)] == ["prod_own"]

    def test_emptied_partition_is_reseeded(self, store):
        seed_store(store)
        for order in store.get_all(ORDERS):
            store.delete(ORDERS, order["id"])

        written = seed_store(store)

        assert written == {PRODUCTS: 0, CUSTOMERS: 0, ORDERS: 3}
