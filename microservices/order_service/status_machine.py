"""
Order Status Machine

Directed transition table for the order lifecycle. pending is the only
initial state; delivered and cancelled are terminal.
"""

from datetime import datetime
from typing import Dict, FrozenSet, Optional
import logging

from .models import Order, OrderStatus, utc_now
from .protocols import InvalidOrderStateError

logger = logging.getLogger(__name__)


INITIAL_STATUS = OrderStatus.PENDING

STATUS_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset(
    status for status, targets in STATUS_TRANSITIONS.items() if not targets
)


def allowed_transitions(current: OrderStatus) -> FrozenSet[OrderStatus]:
    """Statuses reachable in one step from current"""
    return STATUS_TRANSITIONS.get(current, frozenset())


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """True if target is a legal next status after current"""
    return target in allowed_transitions(current)


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def apply_transition(
    order: Order,
    target: OrderStatus,
    reason: Optional[str] = None,
    now: Optional[datetime] = None
) -> Order:
    """
    Move an order to a new status

    Args:
        order: Current order record
        target: Requested status
        reason: Optional status-change reason; when omitted the previous
            reason is kept
        now: Update timestamp (defaults to the current instant)

    Returns:
        Updated copy of the order; the input is left untouched

    Raises:
        InvalidOrderStateError: target is not reachable from the current status
    """
    if not can_transition(order.status, target):
        raise InvalidOrderStateError(order.status, target)

    update = {
        "status": target,
        "last_updated": now or utc_now(),
    }
    if reason:
        update["status_reason"] = reason

    logger.debug(f"Order {order.order_id}: {order.status.value} -> {target.value}")
    return order.model_copy(update=update)
