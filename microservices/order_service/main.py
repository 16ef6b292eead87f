"""
Order Microservice

Responsibilities:
- Idempotent order creation
- Order lookup and customer order search
- Order status lifecycle
"""

from fastapi import FastAPI, APIRouter, HTTPException, Depends, status, Query, Path, Body, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn
import logging
from contextlib import asynccontextmanager
from typing import Optional

from core.auth_dependencies import extract_bearer_token, require_bearer_token
from core.config import get_settings
from core.logger import setup_service_logger
from .factory import create_order_service
from .models import (
    ErrorResponse, HealthResponse, OrderCreateRequest, OrderStatusUpdateRequest,
    format_timestamp, utc_now
)
from .order_service import OrderService
from .protocols import (
    InvalidOrderStateError, OrderNotFoundError, OrderServiceError, OrderValidationError
)
from .seed import seed_sample_orders

# Initialize configuration
config = get_settings()

# Setup loggers (use actual service name)
app_logger = setup_service_logger(config.service_name)
logger = app_logger  # for backward compatibility


HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "VALIDATION_ERROR",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "NOT_FOUND",
    status.HTTP_409_CONFLICT: "INVALID_STATUS_TRANSITION",
}


class OrderMicroservice:
    """Order microservice core class"""

    def __init__(self):
        self.order_service = None

    async def initialize(self):
        """Initialize the microservice"""
        try:
            self.order_service = create_order_service(config)
            if config.seed_sample_data:
                await seed_sample_orders(self.order_service.repository)
            logger.info("Order microservice initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize order microservice: {e}")
            raise

    async def shutdown(self):
        """Shutdown the microservice"""
        self.order_service = None
        logger.info("Order microservice shutdown completed")


# Global microservice instance
order_microservice = OrderMicroservice()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    await order_microservice.initialize()
    logger.info(f"{config.service_name} listening on {config.service_host}:{config.service_port}{config.api_prefix}")

    yield

    await order_microservice.shutdown()


# Create FastAPI application
app = FastAPI(
    title="Order Management API",
    description="Order creation, search and status lifecycle",
    version=config.version,
    lifespan=lifespan
)

if config.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Dependency injection
def get_order_service() -> OrderService:
    """Get order service instance"""
    if not order_microservice.order_service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Order service not initialized"
        )
    return order_microservice.order_service


def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, message=message).model_dump()
    )


router = APIRouter(prefix=config.api_prefix)


# Health check endpoints
@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Service health check (no authentication)"""
    return HealthResponse(status="healthy", timestamp=format_timestamp(utc_now()))


# Core order management endpoints

@router.post("/orders", status_code=status.HTTP_201_CREATED)
async def create_order(
    request: Optional[OrderCreateRequest] = Body(None),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    token: str = Depends(require_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    """Create a new order (201), or replay the order for a known Idempotency-Key (200)"""
    request = request or OrderCreateRequest()
    order, is_new = await order_service.create_order(
        customer_id=request.customer_id,
        items=request.items,
        idempotency_key=idempotency_key
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED if is_new else status.HTTP_200_OK,
        content=order.to_response()
    )


@router.get("/orders/{order_id}")
async def get_order(
    order_id: str = Path(..., description="Order ID"),
    token: str = Depends(require_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    """Get order details"""
    order = await order_service.get_order(order_id)
    return JSONResponse(content=order.to_response())


@router.get("/orders")
async def search_orders(
    customer_id: Optional[str] = Query(None, alias="customerId", description="Customer ID (required)"),
    start_date: Optional[str] = Query(None, alias="startDate", description="Earliest placement date"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Latest placement date (YYYY-MM-DD)"),
    limit: Optional[str] = Query(None, description="Page size, capped at 100"),
    offset: Optional[str] = Query(None, description="Results to skip"),
    token: str = Depends(require_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    """Search a customer's orders, newest first"""
    result = await order_service.search_orders(
        customer_id=customer_id,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset
    )
    return JSONResponse(content=result.to_response())


@router.patch("/orders/{order_id}/status")
async def update_order_status(
    order_id: str = Path(..., description="Order ID"),
    request: Optional[OrderStatusUpdateRequest] = Body(None),
    token: str = Depends(require_bearer_token),
    order_service: OrderService = Depends(get_order_service)
):
    """Move an order to its next status"""
    request = request or OrderStatusUpdateRequest()
    order = await order_service.update_order_status(order_id, request.status, request.reason)
    return JSONResponse(content=order.to_response())


app.include_router(router)


# Error handlers
@app.exception_handler(OrderValidationError)
async def validation_error_handler(request: Request, exc: OrderValidationError):
    return error_response(status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", str(exc))


@app.exception_handler(OrderNotFoundError)
async def not_found_error_handler(request: Request, exc: OrderNotFoundError):
    return error_response(status.HTTP_404_NOT_FOUND, "NOT_FOUND", str(exc))


@app.exception_handler(InvalidOrderStateError)
async def invalid_transition_handler(request: Request, exc: InvalidOrderStateError):
    return error_response(status.HTTP_409_CONFLICT, "INVALID_STATUS_TRANSITION", str(exc))


@app.exception_handler(OrderServiceError)
async def service_error_handler(request: Request, exc: OrderServiceError):
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Body parsing runs before dependencies, so re-check credentials here
    if not extract_bearer_token(request.headers.get("authorization")):
        return error_response(
            status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED", "Authentication token is required"
        )
    logger.debug(f"Request validation failed on {request.url.path}: {exc.errors()}")
    return error_response(status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", "Invalid request body")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    code = HTTP_ERROR_CODES.get(exc.status_code, "INTERNAL_ERROR")
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return error_response(status.HTTP_404_NOT_FOUND, code, "Endpoint not found")
    return error_response(exc.status_code, code, str(exc.detail))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "An unexpected error occurred"
    )


if __name__ == "__main__":
    uvicorn.run(
        "microservices.order_service.main:app",
        host=config.service_host,
        port=config.service_port,
        reload=config.debug,
        log_level=logging.getLevelName(app_logger.getEffectiveLevel()).lower()
    )
