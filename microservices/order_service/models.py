"""
Order Service Data Models

Pydantic models for orders, line items, and the request/response shapes of
the order management API. Field names are snake_case in Python and camelCase
on the wire.
"""

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from decimal import Decimal, MAX_PREC, ROUND_HALF_UP, localcontext
from enum import Enum


CENTS = Decimal("0.01")


def utc_now() -> datetime:
    """Current UTC instant truncated to millisecond precision"""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with milliseconds, e.g. 2024-01-15T10:30:00.000Z"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class OrderStatus(str, Enum):
    """Order status enumeration"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Core Order Models

class LineItem(CamelModel):
    """Order line item, immutable once attached to an order"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    product_id: str
    quantity: int
    unit_price: Decimal

    @field_serializer("unit_price", when_used="json")
    def serialize_unit_price(self, value: Decimal) -> float:
        return float(value)


def calculate_total(items: List[LineItem]) -> Decimal:
    """Sum of quantity * unit price, rounded half-up to two decimal places

    Computed exactly regardless of magnitude; callers bound the result.
    """
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        total = sum((item.unit_price * item.quantity for item in items), Decimal("0"))
        return total.quantize(CENTS, rounding=ROUND_HALF_UP)


class Order(CamelModel):
    """Core order model

    Records are frozen: status changes produce a new copy which the
    repository stores in place of the old one.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    order_id: str
    customer_id: str
    placement_date: datetime
    last_updated: datetime
    status: OrderStatus = OrderStatus.PENDING
    items: List[LineItem]
    total_amount: Decimal
    status_reason: Optional[str] = None

    @field_serializer("placement_date", "last_updated", when_used="json")
    def serialize_timestamp(self, value: datetime) -> str:
        return format_timestamp(value)

    @field_serializer("total_amount", when_used="json")
    def serialize_total(self, value: Decimal) -> float:
        return float(value)

    def to_response(self) -> Dict[str, Any]:
        """JSON body for this order; statusReason is omitted until set"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# Request Models
#
# Fields are untyped and optional here; type, presence and range rules live
# in validators.py

class OrderCreateRequest(CamelModel):
    """Create order request body"""
    customer_id: Optional[Any] = Field(None, description="Customer placing the order")
    items: Optional[Any] = Field(None, description="Line items")


class OrderStatusUpdateRequest(CamelModel):
    """Status update request body"""
    status: Optional[Any] = Field(None, description="Target status")
    reason: Optional[Any] = Field(None, description="Reason for the status change")


# Filter and Query Models

class OrderFilter(BaseModel):
    """Parsed search parameters"""
    customer_id: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    limit: int = 20
    offset: int = 0


# Response Models

class OrderSearchResponse(CamelModel):
    """Order search response"""
    orders: List[Order]
    total_count: int
    limit: int
    offset: int

    def to_response(self) -> Dict[str, Any]:
        return {
            "orders": [order.to_response() for order in self.orders],
            "totalCount": self.total_count,
            "limit": self.limit,
            "offset": self.offset,
        }


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = "healthy"
    timestamp: str


class ErrorResponse(BaseModel):
    """Uniform error body"""
    error: str
    message: str
