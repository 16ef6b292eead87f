"""
Order Status Machine - Unit Tests (Golden)

Tests for:
- Transition table shape (initial, terminal, no self-transitions)
- can_transition for every status pair
- apply_transition: status, timestamp and reason handling
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from microservices.order_service.models import LineItem, Order, OrderStatus
from microservices.order_service.protocols import InvalidOrderStateError
from microservices.order_service.status_machine import (
    INITIAL_STATUS,
    STATUS_TRANSITIONS,
    TERMINAL_STATUSES,
    allowed_transitions,
    apply_transition,
    can_transition,
    is_terminal,
)

pytestmark = [pytest.mark.unit, pytest.mark.golden]


PLACED_AT = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def make_order(status: OrderStatus = OrderStatus.PENDING, **overrides) -> Order:
    fields = dict(
        order_id="ord-test-1",
        customer_id="cust-1",
        placement_date=PLACED_AT,
        last_updated=PLACED_AT,
        status=status,
        items=[LineItem(product_id="prod-001", quantity=1, unit_price=Decimal("10.00"))],
        total_amount=Decimal("10.00"),
    )
    fields.update(overrides)
    return Order(**fields)


# ============================================================================
# Transition Table
# ============================================================================

class TestTransitionTable:
    """The lifecycle graph itself"""

    def test_every_status_has_an_entry(self):
        assert set(STATUS_TRANSITIONS) == set(OrderStatus)

    def test_pending_is_initial(self):
        assert INITIAL_STATUS == OrderStatus.PENDING

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
        assert is_terminal(OrderStatus.DELIVERED)
        assert not is_terminal(OrderStatus.SHIPPED)

    def test_no_self_transitions(self):
        for status in OrderStatus:
            assert not can_transition(status, status)

    def test_nothing_transitions_back_to_pending(self):
        for status in OrderStatus:
            assert OrderStatus.PENDING not in allowed_transitions(status)

    @pytest.mark.parametrize("current,expected", [
        (OrderStatus.PENDING, {OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
        (OrderStatus.CONFIRMED, {OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
        (OrderStatus.PROCESSING, {OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
        (OrderStatus.SHIPPED, {OrderStatus.DELIVERED}),
        (OrderStatus.DELIVERED, set()),
        (OrderStatus.CANCELLED, set()),
    ])
    def test_allowed_transitions(self, current, expected):
        assert allowed_transitions(current) == expected


class TestCancellation:
    """Which statuses can still be cancelled"""

    @pytest.mark.parametrize("status", [
        OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING
    ])
    def test_cancellable(self, status):
        assert can_transition(status, OrderStatus.CANCELLED)

    @pytest.mark.parametrize("status", [OrderStatus.SHIPPED, OrderStatus.DELIVERED])
    def test_not_cancellable(self, status):
        assert not can_transition(status, OrderStatus.CANCELLED)


# ============================================================================
# apply_transition
# ============================================================================

class TestApplyTransition:
    """Applying a transition to an order record"""

    def test_sets_status_and_timestamp(self):
        order = make_order()
        later = PLACED_AT + timedelta(minutes=5)

        updated = apply_transition(order, OrderStatus.CONFIRMED, now=later)

        assert updated.status == OrderStatus.CONFIRMED
        assert updated.last_updated == later
        assert updated.placement_date == PLACED_AT

    def test_does_not_touch_input(self):
        order = make_order()
        apply_transition(order, OrderStatus.CONFIRMED)
        assert order.status == OrderStatus.PENDING
        assert order.last_updated == PLACED_AT

    def test_items_and_total_unchanged(self):
        order = make_order()
        updated = apply_transition(order, OrderStatus.CANCELLED, reason="changed mind")
        assert updated.items == order.items
        assert updated.total_amount == order.total_amount

    def test_full_happy_path(self):
        order = make_order()
        for target in (
            OrderStatus.CONFIRMED,
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
        ):
            order = apply_transition(order, target)
        assert order.status == OrderStatus.DELIVERED

    def test_skip_ahead_rejected(self):
        order = make_order()
        with pytest.raises(InvalidOrderStateError) as exc_info:
            apply_transition(order, OrderStatus.DELIVERED)

        assert exc_info.value.current_status == OrderStatus.PENDING
        assert exc_info.value.target_status == OrderStatus.DELIVERED
        assert str(exc_info.value) == "Cannot transition from pending to delivered"

    def test_terminal_rejects_everything(self):
        order = make_order(OrderStatus.CANCELLED)
        for target in OrderStatus:
            with pytest.raises(InvalidOrderStateError):
                apply_transition(order, target)


class TestStatusReason:
    """statusReason is kept until a later transition supplies a new one"""

    def test_reason_set(self):
        updated = apply_transition(make_order(), OrderStatus.CONFIRMED, reason="payment received")
        assert updated.status_reason == "payment received"

    def test_reason_sticky_when_omitted(self):
        order = apply_transition(make_order(), OrderStatus.CONFIRMED, reason="payment received")
        order = apply_transition(order, OrderStatus.PROCESSING)
        assert order.status_reason == "payment received"

    def test_reason_overwritten(self):
        order = apply_transition(make_order(), OrderStatus.CONFIRMED, reason="payment received")
        order = apply_transition(order, OrderStatus.CANCELLED, reason="out of stock")
        assert order.status_reason == "out of stock"

    def test_empty_reason_treated_as_omitted(self):
        order = apply_transition(make_order(), OrderStatus.CONFIRMED, reason="first")
        order = apply_transition(order, OrderStatus.PROCESSING, reason="")
        assert order.status_reason == "first"

    def test_no_reason_by_default(self):
        updated = apply_transition(make_order(), OrderStatus.CONFIRMED)
        assert updated.status_reason is None
