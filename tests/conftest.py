"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - api/        : HTTP contract tests (FastAPI TestClient, in-process)
    - component/  : OrderService tests with in-memory / mocked stores
    - unit/       : Pure functions (status machine, validators, models)
"""
import os
import sys

import pytest

# Set testing environment BEFORE any project imports
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("SEED_SAMPLE_DATA", "false")

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from core.config import OrderServiceConfig


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def order_config() -> OrderServiceConfig:
    """Default configuration, independent of the environment"""
    return OrderServiceConfig(seed_sample_data=False, cors_enabled=False)


@pytest.fixture
def order_service(order_config):
    """Fresh OrderService with its own in-memory store and ledger"""
    from microservices.order_service.factory import create_order_service
    return create_order_service(order_config)


# =============================================================================
# Markers
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line("markers", "api: API contract tests")
    config.addinivalue_line("markers", "component: Component tests")
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "golden: characterization tests of current behavior")
