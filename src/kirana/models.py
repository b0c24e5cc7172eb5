"""Data models for kirana."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
import time

# Derived stock states, never persisted
OUT_OF_STOCK = "out-of-stock"
LOW_STOCK = "low-stock"
IN_STOCK = "in-stock"

STOCK_STATUS_LABELS = {
    OUT_OF_STOCK: "Out of Stock",
    LOW_STOCK: "Low Stock",
    IN_STOCK: "In Stock",
}

ORDER_STATUSES = ("pending", "completed")
NEVER = "Never"


def _utc_now() -> str:
    """Return current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _timestamp_ms() -> int:
    """Milliseconds since the epoch, the resolution record keys are built from."""
    return time.time_ns() // 1_000_000


def _generate_key(prefix: str) -> str:
    """Build a record key from a partition prefix and the creation timestamp."""
    return f"{prefix}{_timestamp_ms()}"


def _today() -> str:
    """Return today's date as a display string, e.g. 'Mon Oct 19 2026'."""
    return datetime.now().strftime("%a %b %d %Y")


def _clock_time() -> str:
    """Return the current local time as e.g. '2:15:30 PM'."""
    return datetime.now().strftime("%I:%M:%S %p").lstrip("0")


def stock_status(current_stock: int, min_stock: int) -> str:
    """
    Derive a product's stock status.

    Zero stock is out of stock; anything at or below the reorder threshold
    is low; everything else is in stock.
    """
    if current_stock == 0:
        return OUT_OF_STOCK
    if current_stock <= min_stock:
        return LOW_STOCK
    return IN_STOCK


@dataclass
class Product:
    """A stocked product."""

    id: str
    name: str
    category: str
    current_stock: int
    min_stock: int
    unit: str
    cost_price: float
    selling_price: float
    last_updated: str = field(default_factory=_utc_now)

    KEY_PREFIX = "prod_"

    @property
    def stock_status(self) -> str:
        return stock_status(self.current_stock, self.min_stock)

    @property
    def stock_status_label(self) -> str:
        return STOCK_STATUS_LABELS[self.stock_status]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "currentStock": self.current_stock,
            "minStock": self.min_stock,
            "unit": self.unit,
            "costPrice": self.cost_price,
            "sellingPrice": self.selling_price,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            category=data.get("category", ""),
            current_stock=data.get("currentStock", 0),
            min_stock=data.get("minStock", 0),
            unit=data.get("unit", ""),
            cost_price=data.get("costPrice", 0),
            selling_price=data.get("sellingPrice", 0),
            last_updated=data.get("lastUpdated", ""),
        )

    @classmethod
    def create(
        cls,
        name: str,
        category: str,
        current_stock: int,
        min_stock: int,
        unit: str,
        cost_price: float,
        selling_price: float,
    ) -> "Product":
        """Create a new product with a generated key and timestamp."""
        return cls(
            id=_generate_key(cls.KEY_PREFIX),
            name=name,
            category=category,
            current_stock=current_stock,
            min_stock=min_stock,
            unit=unit,
            cost_price=cost_price,
            selling_price=selling_price,
            last_updated=_utc_now(),
        )


@dataclass
class Customer:
    """A shop customer with running order aggregates."""

    id: str
    name: str
    email: str
    phone: str
    address: str
    total_orders: int = 0
    total_spent: float = 0
    last_order: str = NEVER
    join_date: str = field(default_factory=_today)

    KEY_PREFIX = "cust_"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "totalOrders": self.total_orders,
            "totalSpent": self.total_spent,
            "lastOrder": self.last_order,
            "joinDate": self.join_date,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Customer":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            email=data.get("email", ""),
            phone=data.get("phone", ""),
            address=data.get("address", ""),
            total_orders=data.get("totalOrders", 0),
            total_spent=data.get("totalSpent", 0),
            last_order=data.get("lastOrder", NEVER),
            join_date=data.get("joinDate", ""),
        )

    @classmethod
    def create(cls, name: str, email: str, phone: str, address: str) -> "Customer":
        """Create a new customer with a generated key and zeroed totals."""
        return cls(
            id=_generate_key(cls.KEY_PREFIX),
            name=name,
            email=email,
            phone=phone,
            address=address,
            total_orders=0,
            total_spent=0,
            last_order=NEVER,
            join_date=_today(),
        )


@dataclass
class OrderItem:
    """One line of an order. productId is a soft reference."""

    product_id: str
    product_name: str
    quantity: int
    unit_price: float

    @property
    def subtotal(self) -> float:
        return self.quantity * self.unit_price

    def to_dict(self) -> dict[str, Any]:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrderItem":
        return cls(
            product_id=data["productId"],
            product_name=data.get("productName", ""),
            quantity=data.get("quantity", 0),
            unit_price=data.get("unitPrice", 0),
        )


@dataclass
class Order:
    """
    A customer order.

    customer_name is a snapshot taken at creation time and is not kept in
    sync with later customer edits. Orders are never modified once written.
    """

    id: str
    customer_id: str
    customer_name: str
    items: list[OrderItem]
    total: float
    status: str = "pending"
    date: str = field(default_factory=_today)
    time: str = field(default_factory=_clock_time)

    KEY_PREFIX = "ORD"

    @property
    def item_count(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "status": self.status,
            "date": self.date,
            "time": self.time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Order":
        return cls(
            id=data["id"],
            customer_id=data.get("customerId", ""),
            customer_name=data.get("customerName", ""),
            items=[OrderItem.from_dict(i) for i in data.get("items", [])],
            total=data.get("total", 0),
            status=data.get("status", "pending"),
            date=data.get("date", ""),
            time=data.get("time", ""),
        )

    @classmethod
    def create(cls, customer_id: str, customer_name: str, items: list[OrderItem]) -> "Order":
        """Create a new pending order; the total is the sum of item subtotals."""
        return cls(
            id=_generate_key(cls.KEY_PREFIX),
            customer_id=customer_id,
            customer_name=customer_name,
            items=list(items),
            total=sum(item.subtotal for item in items),
            status="pending",
            date=_today(),
            time=_clock_time(),
        )


@dataclass
class DashboardSummary:
    """Aggregated figures shown on the dashboard."""

    total_sales: float
    total_orders: int
    total_customers: int
    total_products: int
    low_stock: list[Product] = field(default_factory=list)
    out_of_stock: list[Product] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalSales": self.total_sales,
            "totalOrders": self.total_orders,
            "totalCustomers": self.total_customers,
            "totalProducts": self.total_products,
            "lowStock": [p.to_dict() for p in self.low_stock],
            "outOfStock": [p.to_dict() for p in self.out_of_stock],
        }
