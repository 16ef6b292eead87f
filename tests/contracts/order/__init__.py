"""
Order Service Contracts

Data contracts for order API testing.
"""

from .data_contract import (
    # Enums
    OrderStatusContract,
    ErrorCodeContract,
    # Response Contracts
    LineItemContract,
    OrderContract,
    OrderSearchResponseContract,
    ErrorResponseContract,
    HealthResponseContract,
    # Factory
    OrderTestDataFactory,
    # Builders
    OrderCreateRequestBuilder,
)

__all__ = [
    "OrderStatusContract",
    "ErrorCodeContract",
    "LineItemContract",
    "OrderContract",
    "OrderSearchResponseContract",
    "ErrorResponseContract",
    "HealthResponseContract",
    "OrderTestDataFactory",
    "OrderCreateRequestBuilder",
]
