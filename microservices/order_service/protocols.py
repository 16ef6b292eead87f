"""
Order Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import List, Optional, Protocol, runtime_checkable

# Import only models (no I/O dependencies)
from .models import Order, OrderStatus


# ============================================================================
# Custom Exceptions - defined here to avoid importing repository
# ============================================================================

class OrderServiceError(Exception):
    """Base exception for order service errors"""
    pass


class OrderValidationError(OrderServiceError):
    """Malformed or missing request data"""
    pass


class OrderNotFoundError(OrderServiceError):
    """Order not found error"""
    pass


class InvalidOrderStateError(OrderServiceError):
    """Invalid order state transition"""

    def __init__(self, current_status: OrderStatus, target_status: OrderStatus):
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Cannot transition from {current_status.value} to {target_status.value}"
        )


# ============================================================================
# Repository Protocol
# ============================================================================

@runtime_checkable
class OrderRepositoryProtocol(Protocol):
    """
    Interface for the Order Store.

    Minimal key-value contract: insert, point lookup, full scan, in-place
    replacement and removal of a single order.
    """

    async def insert_order(self, order: Order) -> Order:
        """Persist a new order"""
        ...

    async def get_order(self, order_id: str) -> Optional[Order]:
        """Get order by ID"""
        ...

    async def list_orders(self) -> List[Order]:
        """All orders in insertion order"""
        ...

    async def update_order(self, order: Order) -> Order:
        """Replace a stored order with an updated copy"""
        ...

    async def delete_order(self, order_id: str) -> bool:
        """Remove an order; used to roll back a create that could not be keyed"""
        ...


# ============================================================================
# Idempotency Ledger Protocol
# ============================================================================

@runtime_checkable
class IdempotencyLedgerProtocol(Protocol):
    """Interface for the idempotency key -> order ID mapping"""

    async def get_order_id(self, idempotency_key: str) -> Optional[str]:
        """Order ID produced by this key, if the key has been used"""
        ...

    async def record(self, idempotency_key: str, order_id: str) -> None:
        """Remember the order produced by a key"""
        ...
