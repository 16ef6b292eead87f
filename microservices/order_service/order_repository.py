"""
Order Repository

In-memory Order Store and Idempotency Ledger. One instance of each is built
per process by the factory and injected into OrderService.
"""

from typing import Callable, Dict, List, Optional, Tuple
from datetime import datetime, timedelta
import logging

from .models import Order, utc_now
from .protocols import OrderNotFoundError

logger = logging.getLogger(__name__)


class OrderRepository:
    """
    Repository for order records

    Dict keyed by order ID; insertion order is preserved so full scans are
    deterministic for a process run.
    """

    def __init__(self):
        self._orders: Dict[str, Order] = {}
        logger.info("OrderRepository initialized (in-memory)")

    async def insert_order(self, order: Order) -> Order:
        """Persist a new order"""
        if order.order_id in self._orders:
            raise ValueError(f"Order {order.order_id} already exists")
        self._orders[order.order_id] = order
        return order

    async def get_order(self, order_id: str) -> Optional[Order]:
        """Get order by ID"""
        return self._orders.get(order_id)

    async def list_orders(self) -> List[Order]:
        """All orders in insertion order"""
        return list(self._orders.values())

    async def update_order(self, order: Order) -> Order:
        """Replace the stored record for order.order_id"""
        if order.order_id not in self._orders:
            raise OrderNotFoundError("Order not found")
        self._orders[order.order_id] = order
        return order

    async def delete_order(self, order_id: str) -> bool:
        """Remove an order, returning whether it existed"""
        return self._orders.pop(order_id, None) is not None

    async def count(self) -> int:
        return len(self._orders)


class IdempotencyLedger:
    """
    Idempotency key -> order ID mapping

    Records are written once and never updated. With ttl_seconds > 0 a key
    is forgotten once it is older than the TTL, either on lookup or when
    a newer key is recorded; the default of 0 keeps keys for the life of the
    process.
    """

    def __init__(
        self,
        ttl_seconds: int = 0,
        clock: Callable[[], datetime] = utc_now
    ):
        self._records: Dict[str, Tuple[str, datetime]] = {}
        self._ttl = timedelta(seconds=ttl_seconds) if ttl_seconds > 0 else None
        self._clock = clock

    def _expired(self, recorded_at: datetime) -> bool:
        return self._ttl is not None and self._clock() - recorded_at >= self._ttl

    async def get_order_id(self, idempotency_key: str) -> Optional[str]:
        """Order ID produced by this key, if the key is known and not expired"""
        record = self._records.get(idempotency_key)
        if record is None:
            return None

        order_id, recorded_at = record
        if self._expired(recorded_at):
            del self._records[idempotency_key]
            logger.debug(f"Idempotency key expired: {idempotency_key}")
            return None
        return order_id

    async def record(self, idempotency_key: str, order_id: str) -> None:
        """Remember the order produced by a key; an existing live record wins"""
        existing = await self.get_order_id(idempotency_key)
        if existing is not None:
            logger.warning(
                f"Idempotency key {idempotency_key} already maps to {existing}, not remapping to {order_id}"
            )
            return
        self._sweep_oldest()
        self._records[idempotency_key] = (order_id, self._clock())

    def _sweep_oldest(self) -> int:
        """Drop expired keys from the front; records are kept in recording order"""
        removed = 0
        while self._ttl is not None and self._records:
            oldest = next(iter(self._records))
            if not self._expired(self._records[oldest][1]):
                break
            del self._records[oldest]
            removed += 1
        if removed:
            logger.debug(f"Swept {removed} expired idempotency keys")
        return removed

    async def purge_expired(self) -> int:
        """Drop every expired key, returning how many were removed

        record() already sweeps expired keys from the oldest end, so this full
        scan is only needed for an explicit sweep.
        """
        if self._ttl is None:
            return 0
        expired = [key for key, (_, at) in self._records.items() if self._expired(at)]
        for key in expired:
            del self._records[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._records)
