"""
Order Service Factory

Factory functions for creating service instances with their stores.

Usage:
    from .factory import create_order_service
    service = create_order_service(config)
"""
from typing import Optional

from core.config import OrderServiceConfig, get_settings

from .order_repository import IdempotencyLedger, OrderRepository
from .order_service import OrderService


def create_order_service(config: Optional[OrderServiceConfig] = None) -> OrderService:
    """
    Create OrderService with a fresh Order Store and Idempotency Ledger

    Args:
        config: Service configuration (defaults to global settings)

    Returns:
        Configured OrderService instance
    """
    config = config or get_settings()

    return OrderService(
        repository=OrderRepository(),
        ledger=IdempotencyLedger(ttl_seconds=config.idempotency_ttl_seconds),
        config=config,
    )
