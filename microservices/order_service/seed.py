"""
Sample data seeding

Loads a few demo orders at startup in development so the search and status
endpoints have something to return.
"""

from decimal import Decimal
from typing import List
import logging

from .models import LineItem, Order, OrderStatus
from .order_service import build_order
from .protocols import OrderRepositoryProtocol

logger = logging.getLogger(__name__)


SAMPLE_ORDERS = [
    {
        "customer_id": "cust-12345",
        "items": [("prod-001", 2, "29.99"), ("prod-002", 1, "15.50")],
        "status": OrderStatus.PENDING,
    },
    {
        "customer_id": "cust-12345",
        "items": [("prod-003", 1, "99.99")],
        "status": OrderStatus.CONFIRMED,
    },
    {
        "customer_id": "cust-67890",
        "items": [("prod-001", 3, "29.99")],
        "status": OrderStatus.SHIPPED,
    },
]


async def seed_sample_orders(repository: OrderRepositoryProtocol) -> List[Order]:
    """Insert the sample orders; statuses are set directly, not via transitions"""
    logger.info("Seeding sample orders...")

    seeded = []
    for sample in SAMPLE_ORDERS:
        items = [
            LineItem(product_id=product_id, quantity=quantity, unit_price=Decimal(price))
            for product_id, quantity, price in sample["items"]
        ]
        order = build_order(sample["customer_id"], items)
        if sample["status"] != order.status:
            order = order.model_copy(update={"status": sample["status"]})
        seeded.append(await repository.insert_order(order))

    logger.info(f"Created {len(seeded)} sample orders")
    return seeded
