"""
Shared helpers for planner routes: caller identity and error translation.
"""

from typing import NoReturn

from fastapi import HTTPException, Request, status

from wsp.db.helpers import DatabaseError
from wsp.infrastructure.observability.logging import get_logger
from wsp.services.errors import WSPServiceError

logger = get_logger(__name__)


def require_user_id(claims: dict) -> str:
    user_id = claims.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return user_id


def request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def raise_http_error(e: Exception, user_id: str, operation: str) -> NoReturn:
    """Translate a service or data-layer failure into an HTTPException."""
    if isinstance(e, WSPServiceError):
        logger.warning(
            "Planner request rejected",
            operation=operation,
            user_id=user_id,
            status_code=e.status_code,
            error=str(e),
        )
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e

    if isinstance(e, DatabaseError):
        logger.error(
            "Database error during request",
            operation=operation,
            user_id=user_id,
            db_operation=e.operation,
            recoverable=e.recoverable,
            error=str(e),
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE if e.recoverable else status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {operation.replace('_', ' ')}",
        ) from e

    raise e
