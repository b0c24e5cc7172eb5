"""Built-in sample dataset and first-run seeding."""

import logging

from .models import Customer, Order, OrderItem, Product, _today, _utc_now
from .record_store import CUSTOMERS, ORDERS, PRODUCTS, Record, RecordStore

logger = logging.getLogger(__name__)


def sample_products() -> list[Product]:
    now = _utc_now()
    return [
        Product("prod_001", "Basmati Rice Premium", "Grains", 50, 10, "kg", 80, 100, now),
        Product("prod_002", "Organic Moong Dal", "Pulses", 25, 5, "kg", 120, 150, now),
        Product("prod_003", "Sunflower Oil", "Oils", 30, 8, "L", 140, 170, now),
        Product("prod_004", "Turmeric Powder", "Spices", 2, 5, "kg", 200, 250, now),
        Product("prod_005", "Wheat Flour", "Grains", 40, 10, "kg", 35, 45, now),
    ]


def sample_customers() -> list[Customer]:
    return [
        Customer(
            id="cust_001",
            name="Rajesh Kumar",
            email="rajesh.kumar@email.com",
            phone="+91 9876543210",
            address="123 Main Street, Delhi",
            total_orders=15,
            total_spent=2500,
            last_order="2024-01-15",
            join_date="2023-06-15",
        ),
        Customer(
            id="cust_002",
            name="Priya Sharma",
            email="priya.sharma@email.com",
            phone="+91 9876543211",
            address="456 Park Avenue, Mumbai",
            total_orders=12,
            total_spent=1800,
            last_order="2024-01-14",
            join_date="2023-08-20",
        ),
        Customer(
            id="cust_003",
            name="Amit Patel",
            email="amit.patel@email.com",
            phone="+91 9876543212",
            address="789 Garden Road, Pune",
            total_orders=20,
            total_spent=3200,
            last_order="2024-01-13",
            join_date="2023-04-10",
        ),
    ]


def sample_orders() -> list[Order]:
    return [
        Order(
            id="ORD001",
            customer_id="cust_001",
            customer_name="Rajesh Kumar",
            items=[OrderItem("prod_001", "Basmati Rice Premium", 2, 100)],
            total=200,
            status="completed",
            date=_today(),
            time="10:30 AM",
        ),
        Order(
            id="ORD002",
            customer_id="cust_002",
            customer_name="Priya Sharma",
            items=[OrderItem("prod_002", "Organic Moong Dal", 1, 150)],
            total=150,
            status="pending",
            date="2024-01-14",
            time="2:15 PM",
        ),
        Order(
            id="ORD003",
            customer_id="cust_003",
            customer_name="Amit Patel",
            items=[OrderItem("prod_003", "Sunflower Oil", 3, 170)],
            total=510,
            status="completed",
            date="2024-01-13",
            time="4:45 PM",
        ),
    ]


def sample_data() -> dict[str, list[Record]]:
    """Return the sample dataset keyed by partition name."""
    return {
        PRODUCTS: [p.to_dict() for p in sample_products()],
        CUSTOMERS: [c.to_dict() for c in sample_customers()],
        ORDERS: [o.to_dict() for o in sample_orders()],
    }


def seed_store(store: RecordStore) -> dict[str, int]:
    """
    Populate every empty partition with its sample records.

    Partitions are checked independently: one that already holds records is
    left untouched even if the others get seeded.

    Returns:
        Number of records written per partition.
    """
    written: dict[str, int] = {}
    for partition, records in sample_data().items():
        if store.count(partition) > 0:
            written[partition] = 0
            continue
        for record in records:
            store.put(partition, record)
        written[partition] = len(records)
        logger.info(
            "Seeded partition with sample data",
            extra={"partition": partition, "count": len(records)},
        )
    return written
