"""
FastAPI Authentication Dependencies

Bearer token check shared by every non-health endpoint. The token is opaque:
any non-empty value is accepted.
"""

from fastapi import Header, HTTPException, status, Request
from typing import Optional
import logging

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Pull the token out of an Authorization header value

    The token is whatever follows the first single space; "Bearer" with an
    empty or missing token yields None.

    Args:
        authorization: Raw Authorization header value

    Returns:
        Token string, or None if absent/empty or the scheme is not Bearer
    """
    if not authorization:
        return None

    parts = authorization.split(" ")
    if len(parts) < 2 or parts[0].lower() != "bearer":
        return None

    token = parts[1]
    return token or None


async def require_bearer_token(
    request: Request,
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> str:
    """
    认证依赖：要求 Authorization: Bearer <token>

    Returns:
        token: the opaque bearer token

    Raises:
        HTTPException 401: header missing, wrong scheme or empty token

    使用示例：
        @app.get("/api/v1/orders")
        async def search_orders(token: str = Depends(require_bearer_token)):
            ...
    """
    token = extract_bearer_token(authorization)
    if token:
        return token

    logger.debug(f"Rejected unauthenticated request to {request.url.path}")
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication token is required"
    )


__all__ = [
    "extract_bearer_token",
    "require_bearer_token",
]
