"""
Order Service Business Logic

Idempotent order creation, lookup, customer search and status transitions
over an injected Order Store and Idempotency Ledger.
"""

from typing import Any, List, Optional, Tuple, Union
from datetime import datetime
import logging
import uuid

from core.config import OrderServiceConfig

from .keyed_lock import KeyedLock
from .order_repository import IdempotencyLedger, OrderRepository
from .models import LineItem, Order, OrderFilter, OrderSearchResponse, calculate_total, utc_now
from .protocols import (
    IdempotencyLedgerProtocol,
    OrderNotFoundError,
    OrderRepositoryProtocol,
    OrderServiceError,
    OrderValidationError,
    InvalidOrderStateError,
)
from .status_machine import INITIAL_STATUS, apply_transition
from .validators import (
    normalize_pagination,
    parse_end_date,
    parse_start_date,
    validate_create_order,
    validate_idempotency_key,
    validate_reason,
    validate_status,
)

logger = logging.getLogger(__name__)


def generate_order_id() -> str:
    return f"ord-{uuid.uuid4()}"


def build_order(
    customer_id: str,
    items: List[LineItem],
    order_id: Optional[str] = None,
    now: Optional[datetime] = None
) -> Order:
    """Assemble a new pending order; placement and update timestamps are equal"""
    now = now or utc_now()
    return Order(
        order_id=order_id or generate_order_id(),
        customer_id=customer_id,
        placement_date=now,
        last_updated=now,
        status=INITIAL_STATUS,
        items=list(items),
        total_amount=calculate_total(items),
    )


class OrderService:
    """
    Order management business logic service

    The create path (ledger check, build, persist, record key) runs under a
    per-idempotency-key lock; a status update (read, transition, write) runs
    under a per-order lock.
    """

    def __init__(
        self,
        repository: Optional[OrderRepositoryProtocol] = None,
        ledger: Optional[IdempotencyLedgerProtocol] = None,
        config: Optional[OrderServiceConfig] = None
    ):
        """
        Initialize Order Service

        Args:
            repository: Order Store (defaults to the in-memory repository)
            ledger: Idempotency Ledger (defaults to an in-memory ledger)
            config: Service configuration
        """
        self.config = config or OrderServiceConfig()

        if repository is None:
            repository = OrderRepository()
        if ledger is None:
            ledger = IdempotencyLedger(ttl_seconds=self.config.idempotency_ttl_seconds)

        self.repository = repository
        self.ledger = ledger

        self._idempotency_locks = KeyedLock()
        self._order_locks = KeyedLock()

        logger.info("OrderService initialized")

    # Order Lifecycle Operations

    async def create_order(
        self,
        customer_id: Any,
        items: Any,
        idempotency_key: Optional[str]
    ) -> Tuple[Order, bool]:
        """
        Create an order, or replay the one already created for this key

        A known idempotency key returns the stored order verbatim without
        re-validating the payload.

        Args:
            customer_id: Customer placing the order
            items: Raw line items (productId, quantity, unitPrice)
            idempotency_key: Client-supplied retry token

        Returns:
            (order, is_new); is_new is False for a replay

        Raises:
            OrderValidationError: missing key or invalid payload
            OrderServiceError: the order could not be persisted
        """
        idempotency_key = validate_idempotency_key(idempotency_key)

        async with self._idempotency_locks.acquire(idempotency_key):
            existing_id = await self.ledger.get_order_id(idempotency_key)
            if existing_id is not None:
                existing = await self.repository.get_order(existing_id)
                if existing is None:
                    logger.error(f"Idempotency key {idempotency_key} references missing order {existing_id}")
                    raise OrderServiceError("Failed to create order")
                logger.info(f"Idempotent replay: key {idempotency_key} -> order {existing_id}")
                return existing, False

            line_items = validate_create_order(customer_id, items)
            order = build_order(customer_id, line_items)

            try:
                await self.repository.insert_order(order)
            except Exception as e:
                logger.error(f"Failed to create order for customer {customer_id}: {e}", exc_info=True)
                raise OrderServiceError("Failed to create order") from e

            try:
                await self.ledger.record(idempotency_key, order.order_id)
            except Exception as e:
                logger.error(
                    f"Failed to record idempotency key {idempotency_key}, rolling back {order.order_id}: {e}",
                    exc_info=True
                )
                await self._rollback_insert(order.order_id)
                raise OrderServiceError("Failed to create order") from e

        logger.info(f"Order created: {order.order_id} for customer {customer_id} (total {order.total_amount})")
        return order, True

    async def _rollback_insert(self, order_id: str) -> None:
        try:
            await self.repository.delete_order(order_id)
        except Exception as e:
            # The original failure is what the caller sees
            logger.error(f"Rollback of order {order_id} failed: {e}", exc_info=True)

    async def get_order(self, order_id: str) -> Order:
        """Get order by ID"""
        order = await self.repository.get_order(order_id)
        if order is None:
            raise OrderNotFoundError("Order not found")
        return order

    async def update_order_status(
        self,
        order_id: str,
        status: Any,
        reason: Any = None
    ) -> Order:
        """
        Transition an order to a new status

        Existence is checked before the requested status is validated. The
        stored reason is only overwritten when a non-empty reason is given.

        Raises:
            OrderNotFoundError: unknown order
            OrderValidationError: status missing or not a known status, or a non-string reason
            InvalidOrderStateError: transition not allowed from the current status
        """
        async with self._order_locks.acquire(order_id):
            order = await self.repository.get_order(order_id)
            if order is None:
                raise OrderNotFoundError("Order not found")

            target = validate_status(status)
            reason = validate_reason(reason)

            try:
                updated = apply_transition(order, target, reason)
            except InvalidOrderStateError as e:
                logger.warning(f"Rejected status change for {order_id}: {e}")
                raise

            try:
                await self.repository.update_order(updated)
            except OrderServiceError:
                raise
            except Exception as e:
                logger.error(f"Failed to update order status {order_id}: {e}", exc_info=True)
                raise OrderServiceError("Failed to update order status") from e

        logger.info(f"Order {order_id} status: {order.status.value} -> {target.value}")
        return updated

    # Order Query Operations

    def build_filter(
        self,
        customer_id: Optional[str],
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: Union[int, str, None] = None,
        offset: Union[int, str, None] = None
    ) -> OrderFilter:
        """Validate raw search parameters in request order"""
        if not customer_id:
            raise OrderValidationError("Customer ID is required")

        start = parse_start_date(start_date)
        end = parse_end_date(end_date)
        limit_value, offset_value = normalize_pagination(
            limit,
            offset,
            default_limit=self.config.default_page_limit,
            max_limit=self.config.max_page_limit,
        )
        return OrderFilter(
            customer_id=customer_id,
            start_date=start,
            end_date=end,
            limit=limit_value,
            offset=offset_value,
        )

    async def search_orders(
        self,
        customer_id: Optional[str],
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: Union[int, str, None] = None,
        offset: Union[int, str, None] = None
    ) -> OrderSearchResponse:
        """
        Search a customer's orders, newest first

        Args:
            customer_id: Required exact-match customer filter
            start_date: Inclusive lower bound on placement date
            end_date: Inclusive upper bound (end of that day, UTC)
            limit: Page size, clamped to [1, max_page_limit]
            offset: Items to skip after filtering and sorting

        Returns:
            Page of orders plus the filtered total
        """
        params = self.build_filter(customer_id, start_date, end_date, limit, offset)

        try:
            orders = await self.repository.list_orders()
        except Exception as e:
            logger.error(f"Failed to search orders for {customer_id}: {e}", exc_info=True)
            raise OrderServiceError("Failed to search orders") from e

        matches = [o for o in orders if o.customer_id == params.customer_id]
        if params.start_date is not None:
            matches = [o for o in matches if o.placement_date >= params.start_date]
        if params.end_date is not None:
            matches = [o for o in matches if o.placement_date <= params.end_date]

        # sorted() is stable, so equal timestamps keep insertion order
        matches = sorted(matches, key=lambda o: o.placement_date, reverse=True)

        page = matches[params.offset:params.offset + params.limit]
        return OrderSearchResponse(
            orders=page,
            total_count=len(matches),
            limit=params.limit,
            offset=params.offset,
        )
