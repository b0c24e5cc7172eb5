"""Tests for Shop operations."""

import pytest

from kirana.errors import ValidationError
from kirana.models import LOW_STOCK, OUT_OF_STOCK
from kirana.record_store import CUSTOMERS, ORDERS, PRODUCTS


@pytest.fixture
def shop(empty_ctx, unique_keys):
    return empty_ctx.shop


@pytest.fixture
def tea(shop):
    return shop.add_product(
        name="Tea",
        category="Beverages",
        current_stock=10,
        min_stock=2,
        unit="kg",
        cost_price=40,
        selling_price=50,
    )


@pytest.fixture
def asha(shop):
    return shop.add_customer("Asha Rao", "asha@example.com", "+91 9000000000", "Pune")


class TestProducts:
    def test_add_product_persists(self, shop, tea):
        assert tea.id.startswith("prod_")
        assert tea.last_updated.endswith("Z")
        assert shop.get_product(tea.id) == tea

    def test_add_product_rejects_empty_name(self, shop):
        with pytest.raises(ValidationError):
            shop.add_product("  ", "Grains", 1, 0, "kg", 1, 2)

    def test_add_product_rejects_negative_stock(self, shop):
        with pytest.raises(ValidationError) as exc_info:
            shop.add_product("Rice", "Grains", -1, 0, "kg", 1, 2)
        assert exc_info.value.field == "currentStock"

    def test_get_missing_product_returns_none(self, shop):
        assert shop.get_product("prod_missing") is None

    def test_low_stock_products(self, shop):
        shop.add_product("Rice", "Grains", 50, 10, "kg", 80, 100)
        low = shop.add_product("Turmeric", "Spices", 2, 5, "kg", 200, 250)
        empty = shop.add_product("Ghee", "Dairy", 0, 3, "kg", 400, 500)

        assert {p.id for p in shop.low_stock_products()} == {low.id, empty.id}
        assert [p.id for p in shop.products_by_status(OUT_OF_STOCK)] == [empty.id]
        assert [p.id for p in shop.products_by_status(LOW_STOCK)] == [low.id]


class TestAddOrder:
    def test_order_arithmetic(self, shop, asha):
        rice = shop.add_product("Rice", "Grains", 50, 10, "kg", 80, 100)

        order = shop.add_order(asha.id, rice.id, 2)

        assert order.total == 200
        assert shop.get_product(rice.id).current_stock == 48
        customer = shop.get_customer(asha.id)
        assert customer.total_orders == 1
        assert customer.total_spent == 200
        assert customer.last_order == order.date

    def test_tea_scenario(self, shop, tea, asha):
        order = shop.add_order(asha.id, tea.id, 3)

        assert shop.get_product(tea.id).current_stock == 7
        assert order.total == 150
        assert order.status == "pending"
        assert order.customer_name == "Asha Rao"
        assert order.items[0].product_name == "Tea"
        assert order.items[0].unit_price == 50

    def test_explicit_unit_price(self, shop, tea, asha):
        order = shop.add_order(asha.id, tea.id, 2, unit_price=45)
        assert order.total == 90

    def test_order_is_persisted(self, shop, tea, asha):
        order = shop.add_order(asha.id, tea.id, 1)
        assert shop.get_order(order.id) == order

    def test_stock_may_go_negative(self, shop, tea, asha):
        shop.add_order(asha.id, tea.id, 12)
        assert shop.get_product(tea.id).current_stock == -2

    def test_aggregates_accumulate(self, shop, tea, asha):
        shop.add_order(asha.id, tea.id, 1)
        shop.add_order(asha.id, tea.id, 2)

        customer = shop.get_customer(asha.id)
        assert customer.total_orders == 2
        assert customer.total_spent == 150
        assert len(shop.list_orders()) == 2

    def test_missing_customer_raises_before_writing(self, shop, tea):
        with pytest.raises(ValidationError) as exc_info:
            shop.add_order("cust_missing", tea.id, 1)

        assert exc_info.value.field == "customerId"
        assert shop.get_product(tea.id).current_stock == 10
        assert shop.list_orders() == []

    def test_missing_product_raises(self, shop, asha):
        with pytest.raises(ValidationError) as exc_info:
            shop.add_order(asha.id, "prod_missing", 1)

        assert exc_info.value.field == "productId"
        assert shop.get_customer(asha.id).total_orders == 0

    def test_zero_quantity_raises(self, shop, tea, asha):
        with pytest.raises(ValidationError):
            shop.add_order(asha.id, tea.id, 0)

    def test_customer_rename_does_not_touch_order(self, shop, tea, asha):
        order = shop.add_order(asha.id, tea.id, 1)

        renamed = shop.get_customer(asha.id)
        renamed.name = "Asha R."
        shop.store.put(CUSTOMERS, renamed.to_dict())

        assert shop.get_order(order.id).customer_name == "Asha Rao"


class TestDeletes:
    def test_delete_customer_leaves_orders(self, shop, tea, asha):
        order = shop.add_order(asha.id, tea.id, 1)

        shop.delete_customer(asha.id)

        assert shop.get_customer(asha.id) is None
        kept = shop.get_order(order.id)
        assert kept.customer_id == asha.id

    def test_delete_product_leaves_orders(self, shop, tea, asha):
        order = shop.add_order(asha.id, tea.id, 1)

        shop.delete_product(tea.id)

        assert shop.get_product(order.items[0].product_id) is None
        assert shop.get_order(order.id) is not None

    def test_delete_order_does_not_restore_stock(self, shop, tea, asha):
        order = shop.add_order(asha.id, tea.id, 4)

        shop.delete_order(order.id)

        assert shop.get_order(order.id) is None
        assert shop.get_product(tea.id).current_stock == 6

    def test_delete_missing_is_noop(self, shop):
        shop.delete_order("ORD_missing")
        assert shop.store.get_all(ORDERS) == []


class TestDashboard:
    def test_seeded_dashboard(self, ctx):
        summary = ctx.shop.dashboard()

        assert summary.total_sales == 860
        assert summary.total_orders == 3
        assert summary.total_customers == 3
        assert summary.total_products == 5
        assert [p.name for p in summary.low_stock] == ["Turmeric Powder"]
        assert summary.out_of_stock == []

    def test_empty_dashboard(self, shop):
        summary = shop.dashboard()

        assert summary.total_sales == 0
        assert summary.total_orders == 0
        assert shop.store.get_all(PRODUCTS) == []
