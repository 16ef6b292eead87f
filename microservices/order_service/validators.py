"""
Order Request Validation

Input-shape and business-rule checks run before the service touches any
state. Every failure raises OrderValidationError; the first failing rule wins.
"""

import math
import re
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, List, Optional, Tuple, Union

from .models import LineItem, OrderStatus, calculate_total
from .protocols import OrderValidationError


_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

END_OF_DAY = time(23, 59, 59, 999000, tzinfo=timezone.utc)

# Largest order total representable as a JSON number to the cent
MAX_ORDER_TOTAL = Decimal("1000000000000")


def validate_idempotency_key(idempotency_key: Optional[str]) -> str:
    if not idempotency_key:
        raise OrderValidationError("Idempotency-Key header is required")
    return idempotency_key


def validate_line_item(item: Any) -> LineItem:
    """
    Check a single raw line item and convert it to a LineItem

    Presence is a truthiness check, so a quantity or unitPrice of 0 is
    reported as missing rather than out of range.
    """
    if not isinstance(item, dict):
        raise OrderValidationError("Each item must have productId, quantity, and unitPrice")

    product_id = item.get("productId")
    quantity = item.get("quantity")
    unit_price = item.get("unitPrice")

    if not product_id or not quantity or not unit_price:
        raise OrderValidationError("Each item must have productId, quantity, and unitPrice")

    if (
        not isinstance(product_id, str)
        or isinstance(quantity, bool) or not isinstance(quantity, int)
        or isinstance(unit_price, bool) or not isinstance(unit_price, (int, float))
        or (isinstance(unit_price, float) and not math.isfinite(unit_price))
    ):
        raise OrderValidationError("Each item must have productId, quantity, and unitPrice")

    if quantity <= 0 or unit_price < 0:
        raise OrderValidationError("Quantity must be positive and unitPrice must be non-negative")

    return LineItem(
        product_id=product_id,
        quantity=quantity,
        unit_price=Decimal(str(unit_price)),
    )


def validate_create_order(customer_id: Any, items: Any) -> List[LineItem]:
    """
    Validate the body of a create-order request

    The idempotency key is checked separately by the caller, ahead of the
    ledger lookup.

    Returns:
        Parsed line items in request order
    """
    if not customer_id or not isinstance(customer_id, str):
        raise OrderValidationError("Customer ID is required")

    if not items or not isinstance(items, list):
        raise OrderValidationError("At least one item is required")

    line_items = [validate_line_item(item) for item in items]

    if calculate_total(line_items) > MAX_ORDER_TOTAL:
        raise OrderValidationError(f"Order total must not exceed {MAX_ORDER_TOTAL}")

    return line_items


def validate_status(status: Any) -> OrderStatus:
    """Parse the target status of a status-update request"""
    if not status:
        raise OrderValidationError("Status is required")
    valid = [s.value for s in OrderStatus]
    if not isinstance(status, str) or status not in valid:
        raise OrderValidationError(f"Invalid status. Must be one of: {', '.join(valid)}")
    return OrderStatus(status)


def validate_reason(reason: Any) -> Optional[str]:
    if reason is not None and not isinstance(reason, str):
        raise OrderValidationError("Reason must be a string")
    return reason


def parse_start_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse the startDate search filter

    Accepts a YYYY-MM-DD date (start of that day, UTC) or an ISO-8601
    datetime; naive datetimes are taken as UTC.
    """
    if not value:
        return None
    try:
        if _DATE_ONLY.match(value):
            return datetime.combine(date.fromisoformat(value), time(0, 0, tzinfo=timezone.utc))
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise OrderValidationError("Invalid start date format")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_end_date(value: Optional[str]) -> Optional[datetime]:
    """Parse the endDate search filter: a YYYY-MM-DD date, inclusive to 23:59:59.999 UTC"""
    if not value:
        return None
    if not _DATE_ONLY.match(value):
        raise OrderValidationError("Invalid end date format")
    try:
        return datetime.combine(date.fromisoformat(value), END_OF_DAY)
    except ValueError:
        raise OrderValidationError("Invalid end date format")


def _parse_int(value: Union[int, str, None], name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise OrderValidationError(f"{name} must be an integer")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise OrderValidationError(f"{name} must be an integer")


def normalize_pagination(
    limit: Union[int, str, None],
    offset: Union[int, str, None],
    default_limit: int = 20,
    max_limit: int = 100
) -> Tuple[int, int]:
    """
    Resolve limit/offset for a search

    Non-integers are rejected. limit is clamped to [1, max_limit] and a
    negative offset is clamped to 0.
    """
    limit_value = _parse_int(limit, "limit")
    offset_value = _parse_int(offset, "offset")

    if limit_value is None:
        limit_value = default_limit
    limit_value = max(1, min(limit_value, max_limit))

    if offset_value is None or offset_value < 0:
        offset_value = 0

    return limit_value, offset_value
