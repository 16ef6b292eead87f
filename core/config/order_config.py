#!/usr/bin/env python3
"""Order service configuration

HTTP binding, pagination bounds, idempotency retention and startup behaviour
for the order management API.
"""
import os
from dataclasses import dataclass, field
from typing import List

def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


@dataclass
class OrderServiceConfig:
    """Order service settings"""

    # ===========================================
    # Service Binding
    # ===========================================
    service_name: str = "order_service"
    service_host: str = "0.0.0.0"
    service_port: int = 3000
    api_prefix: str = "/api/v1"
    version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # ===========================================
    # Search Pagination
    # ===========================================
    default_page_limit: int = 20
    max_page_limit: int = 100

    # ===========================================
    # Idempotency
    # ===========================================
    # 0 keeps keys for the lifetime of the process
    idempotency_ttl_seconds: int = 0

    # ===========================================
    # Startup / HTTP
    # ===========================================
    seed_sample_data: bool = False
    cors_enabled: bool = True
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> 'OrderServiceConfig':
        """Load order service configuration from environment variables"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        port = os.getenv("ORDER_SERVICE_PORT") or os.getenv("PORT", "3000")
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            service_name=os.getenv("SERVICE_NAME", "order_service"),
            service_host=os.getenv("ORDER_SERVICE_HOST", "0.0.0.0"),
            service_port=_int(port, 3000),
            api_prefix=os.getenv("API_PREFIX", "/api/v1").rstrip("/"),
            debug=_bool(os.getenv("DEBUG", "false")),
            environment=env,

            default_page_limit=_int(os.getenv("DEFAULT_PAGE_LIMIT", "20"), 20),
            max_page_limit=_int(os.getenv("MAX_PAGE_LIMIT", "100"), 100),

            idempotency_ttl_seconds=_int(os.getenv("IDEMPOTENCY_TTL_SECONDS", "0"), 0),

            seed_sample_data=_bool(os.getenv(
                "SEED_SAMPLE_DATA", "true" if env in ("development", "dev") else "false"
            )),
            cors_enabled=_bool(os.getenv("CORS_ENABLED", "true")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )
