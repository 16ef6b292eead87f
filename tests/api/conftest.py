"""
API Test Layer Configuration

HTTP contract tests against the FastAPI app in-process via TestClient.
Each test gets its own OrderService (empty store, empty ledger).

Usage:
    pytest tests/api -v
    pytest tests/api -v -k "status"
"""

import os
import sys
import uuid
from typing import Any, Dict, Generator, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

# Set testing environment BEFORE any imports
os.environ.setdefault("ENV", "testing")

# Add project root
sys.path.insert(
    0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
)


# =============================================================================
# Configuration
# =============================================================================


class APITestConfig:
    """API test configuration"""

    API_PREFIX = "/api/v1"
    ORDERS_PATH = f"{API_PREFIX}/orders"
    HEALTH_PATH = f"{API_PREFIX}/health"
    TOKEN = "mock-token-12345"


# =============================================================================
# Client Fixtures
# =============================================================================


class OrderAPIClient:
    """Thin wrapper adding auth and idempotency headers to TestClient calls"""

    def __init__(self, client: TestClient, token: Optional[str] = APITestConfig.TOKEN):
        self.client = client
        self.token = token

    def headers(self, idempotency_key: Optional[str] = None, **extra: str) -> Dict[str, str]:
        headers = {}
        if self.token is not None:
            headers["Authorization"] = f"Bearer {self.token}"
        if idempotency_key is not None:
            headers["Idempotency-Key"] = idempotency_key
        headers.update(extra)
        return headers

    def create(
        self,
        body: Optional[Dict[str, Any]] = None,
        idempotency_key: Optional[str] = "auto",
    ) -> httpx.Response:
        if idempotency_key == "auto":
            idempotency_key = str(uuid.uuid4())
        return self.client.post(
            APITestConfig.ORDERS_PATH, json=body, headers=self.headers(idempotency_key)
        )

    def get(self, order_id: str) -> httpx.Response:
        return self.client.get(f"{APITestConfig.ORDERS_PATH}/{order_id}", headers=self.headers())

    def search(self, **params: Any) -> httpx.Response:
        return self.client.get(APITestConfig.ORDERS_PATH, params=params, headers=self.headers())

    def update_status(self, order_id: str, body: Optional[Dict[str, Any]]) -> httpx.Response:
        return self.client.patch(
            f"{APITestConfig.ORDERS_PATH}/{order_id}/status", json=body, headers=self.headers()
        )


@pytest.fixture
def test_client(order_service) -> Generator[TestClient, None, None]:
    """TestClient bound to an isolated OrderService"""
    from microservices.order_service.main import app, get_order_service

    app.dependency_overrides[get_order_service] = lambda: order_service
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def order_api(test_client: TestClient) -> OrderAPIClient:
    """Authenticated order API client"""
    return OrderAPIClient(test_client)


# =============================================================================
# Assertion Helpers
# =============================================================================


class APIAssertions:
    """API-specific assertion helpers"""

    @staticmethod
    def assert_success(response: httpx.Response, expected_status: int = 200):
        """Assert response is successful"""
        assert response.status_code == expected_status, (
            f"Expected {expected_status}, got {response.status_code}: {response.text}"
        )

    @staticmethod
    def assert_error(response: httpx.Response, expected_status: int, expected_code: str):
        """Assert response carries the uniform error body"""
        assert response.status_code == expected_status, (
            f"Expected {expected_status}, got {response.status_code}: {response.text}"
        )
        data = response.json()
        assert set(data.keys()) == {"error", "message"}
        assert data["error"] == expected_code
        assert isinstance(data["message"], str) and data["message"]


@pytest.fixture
def api_assert() -> APIAssertions:
    """Provide API assertion helpers"""
    return APIAssertions()
