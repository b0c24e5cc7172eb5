"""Product, customer and order operations on top of the record store."""

import logging

from .errors import ValidationError
from .models import (
    IN_STOCK,
    LOW_STOCK,
    OUT_OF_STOCK,
    Customer,
    DashboardSummary,
    Order,
    OrderItem,
    Product,
    _utc_now,
)
from .record_store import CUSTOMERS, ORDERS, PRODUCTS, RecordStore

logger = logging.getLogger(__name__)


def _require_text(field: str, value: str) -> str:
    if not value or not value.strip():
        raise ValidationError(field, "must not be empty")
    return value.strip()


def _require_non_negative(field: str, value: float) -> None:
    if value < 0:
        raise ValidationError(field, "must not be negative")


class Shop:
    """Form-level operations: create, list, look up and delete shop records."""

    def __init__(self, store: RecordStore):
        self.store = store

    # --- Products ---

    def list_products(self) -> list[Product]:
        return [Product.from_dict(r) for r in self.store.get_all(PRODUCTS)]

    def get_product(self, product_id: str) -> Product | None:
        """Look up a product; a missing ID returns None."""
        data = self.store.get(PRODUCTS, product_id)
        return Product.from_dict(data) if data is not None else None

    def add_product(
        self,
        name: str,
        category: str,
        current_stock: int,
        min_stock: int,
        unit: str,
        cost_price: float,
        selling_price: float,
    ) -> Product:
        """
        Create and save a new product.

        Raises:
            ValidationError: If the name is empty or a number is negative.
        """
        name = _require_text("name", name)
        _require_non_negative("currentStock", current_stock)
        _require_non_negative("minStock", min_stock)
        _require_non_negative("costPrice", cost_price)
        _require_non_negative("sellingPrice", selling_price)

        product = Product.create(
            name=name,
            category=category,
            current_stock=current_stock,
            min_stock=min_stock,
            unit=unit,
            cost_price=cost_price,
            selling_price=selling_price,
        )
        self.store.put(PRODUCTS, product.to_dict())
        logger.info("Product added", extra={"product_id": product.id, "product_name": name})
        return product

    def delete_product(self, product_id: str) -> None:
        """Delete a product. Orders that reference it are left as they are."""
        self.store.delete(PRODUCTS, product_id)
        logger.info("Product deleted", extra={"product_id": product_id})

    def products_by_status(self, status: str) -> list[Product]:
        return [p for p in self.list_products() if p.stock_status == status]

    def low_stock_products(self) -> list[Product]:
        """Products at or below their reorder threshold, including empty ones."""
        return [p for p in self.list_products() if p.stock_status != IN_STOCK]

    # --- Customers ---

    def list_customers(self) -> list[Customer]:
        return [Customer.from_dict(r) for r in self.store.get_all(CUSTOMERS)]

    def get_customer(self, customer_id: str) -> Customer | None:
        """Look up a customer; a missing ID returns None."""
        data = self.store.get(CUSTOMERS, customer_id)
        return Customer.from_dict(data) if data is not None else None

    def add_customer(self, name: str, email: str, phone: str, address: str) -> Customer:
        """Create and save a new customer with zeroed order totals."""
        customer = Customer.create(
            name=_require_text("name", name),
            email=email,
            phone=phone,
            address=address,
        )
        self.store.put(CUSTOMERS, customer.to_dict())
        logger.info("Customer added", extra={"customer_id": customer.id})
        return customer

    def delete_customer(self, customer_id: str) -> None:
        """Delete a customer. Their orders keep the dangling customer ID."""
        self.store.delete(CUSTOMERS, customer_id)
        logger.info("Customer deleted", extra={"customer_id": customer_id})

    # --- Orders ---

    def list_orders(self) -> list[Order]:
        return [Order.from_dict(r) for r in self.store.get_all(ORDERS)]

    def get_order(self, order_id: str) -> Order | None:
        """Look up an order; a missing ID returns None."""
        data = self.store.get(ORDERS, order_id)
        return Order.from_dict(data) if data is not None else None

    def add_order(
        self,
        customer_id: str,
        product_id: str,
        quantity: int,
        unit_price: float | None = None,
    ) -> Order:
        """
        Create a single-item pending order and apply its side effects.

        The product's stock drops by the quantity with no floor at zero, and
        the customer's order count, spend and last order date are updated.
        Product, customer and order are written in that order; a failure
        part-way leaves the earlier writes in place.

        Args:
            customer_id: Customer placing the order.
            product_id: Product being ordered.
            quantity: Number of units.
            unit_price: Price per unit (defaults to the product's selling price).

        Returns:
            The saved Order.

        Raises:
            ValidationError: If the customer or product doesn't exist, or the
                quantity is not positive.
        """
        if quantity <= 0:
            raise ValidationError("quantity", "must be at least 1")

        customer = self.get_customer(customer_id)
        if customer is None:
            raise ValidationError("customerId", f"no customer with ID {customer_id}")
        product = self.get_product(product_id)
        if product is None:
            raise ValidationError("productId", f"no product with ID {product_id}")

        price = product.selling_price if unit_price is None else unit_price
        _require_non_negative("unitPrice", price)

        order = Order.create(
            customer_id=customer.id,
            customer_name=customer.name,
            items=[OrderItem(product.id, product.name, quantity, price)],
        )

        product.current_stock -= quantity
        product.last_updated = _utc_now()
        self.store.put(PRODUCTS, product.to_dict())

        customer.total_orders += 1
        customer.total_spent += order.total
        customer.last_order = order.date
        self.store.put(CUSTOMERS, customer.to_dict())

        self.store.put(ORDERS, order.to_dict())

        if product.current_stock < 0:
            logger.warning(
                "Product stock went negative",
                extra={"product_id": product.id, "current_stock": product.current_stock},
            )
        logger.info(
            "Order created",
            extra={
                "order_id": order.id,
                "customer_id": customer.id,
                "total": order.total,
                "item_count": order.item_count,
            },
        )
        return order

    def delete_order(self, order_id: str) -> None:
        """Delete an order. Stock and customer totals are not rolled back."""
        self.store.delete(ORDERS, order_id)
        logger.info("Order deleted", extra={"order_id": order_id})

    # --- Dashboard ---

    def dashboard(self) -> DashboardSummary:
        """Aggregate sales and counts across all partitions."""
        products = self.list_products()
        customers = self.store.get_all(CUSTOMERS)
        orders = self.list_orders()
        return DashboardSummary(
            total_sales=sum(o.total or 0 for o in orders),
            total_orders=len(orders),
            total_customers=len(customers),
            total_products=len(products),
            low_stock=[p for p in products if p.stock_status == LOW_STOCK],
            out_of_stock=[p for p in products if p.stock_status == OUT_OF_STOCK],
        )
