"""API error types and the middleware that renders them as JSON.

Services raise these; the middleware maps them to the `ErrorResponse`
body. 4xx means the cart or request is wrong, 5xx means the store could
not complete it.
"""

import logging
import traceback
from typing import Any, Callable

from fastapi import HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from postgrest.exceptions import APIError as PostgrestAPIError

from src.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base for errors that reach the client with a status, type and message.

    `details` is a list of ErrorDetail-shaped dicts, e.g. the cart line
    that could not be fulfilled.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_type: str = "api_error",
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        super().__init__(message)


class NotFoundError(APIError):
    """A product, coupon or customer the request refers to does not exist."""

    def __init__(self, message: str = "Resource not found", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_type="not_found",
            details=details,
        )


class ValidationError(APIError):
    """The request is well-formed but cannot be fulfilled as sent.

    Covers invalid coupons, missing customer details and stock shortfalls.
    """

    def __init__(
        self,
        message: str = "Validation error",
        details: list[dict[str, Any]] | None = None,
        error_type: str = "validation_error",
    ) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_type=error_type,
            details=details,
        )


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds the product's available stock."""

    def __init__(
        self,
        product_id: str,
        product_name: str | None = None,
        available: int | None = None,
        requested: int | None = None,
    ) -> None:
        label = product_name or product_id
        message = f"Insufficient stock for {label}"
        if available is not None and requested is not None:
            message = f"{message}. Available: {available}, Requested: {requested}"
        super().__init__(
            message=message,
            error_type="insufficient_stock",
            details=[
                {
                    "loc": ["items", product_id],
                    "msg": message,
                    "type": "insufficient_stock",
                }
            ],
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class ConflictError(APIError):
    """Write rejected by a uniqueness constraint."""

    def __init__(self, message: str = "Resource already exists", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_type="conflict",
            details=details,
        )


class OrderCommitError(APIError):
    """The atomic order commit failed for an unclassified reason."""

    def __init__(self, message: str = "Order could not be completed", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_type="order_commit_failed",
            details=details,
        )


def create_error_response(
    error_type: str,
    message: str,
    status_code: int,
    details: list[dict[str, Any]] | None = None,
    request_id: str | None = None,
) -> JSONResponse:
    """Create a standardized JSON error response.

    The request ID, when the caller sent one, is echoed back in the
    X-Request-ID header as well as in the body.

    Args:
        error_type: Error category for client handling.
        message: Human-readable error description.
        status_code: HTTP status code.
        details: Optional error details.
        request_id: Optional request ID for tracing.

    Returns:
        JSONResponse: Formatted error response.
    """
    error_response = ErrorResponse.from_exception(
        error_type=error_type,
        message=message,
        details=details,
        request_id=request_id,
    )
    headers = {"X-Request-ID": request_id} if request_id else None
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


async def error_handler_middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
    """Turn exceptions raised while handling a request into error responses.

    - ``APIError``: its own status and type. 4xx are the caller's fault and
      logged at warning; 5xx at error.
    - ``HTTPException``: FastAPI/Starlette errors such as unknown routes.
    - PostgREST errors nobody translated (a failing catalog read, say):
      503 ``database_error``. The database message is logged, not returned.
    - Anything else: 500 ``internal_error`` with the traceback logged.

    Args:
        request: The incoming request.
        call_next: Next middleware or route handler.

    Returns:
        Response: Either the successful response or formatted error response.
    """
    request_id = request.headers.get("X-Request-ID")

    try:
        return await call_next(request)

    except APIError as e:
        level = logging.ERROR if e.status_code >= 500 else logging.WARNING
        logger.log(
            level,
            "%s %s failed: %s - %s",
            request.method,
            request.url.path,
            e.error_type,
            e.message,
            extra={"request_id": request_id, "status_code": e.status_code},
        )
        return create_error_response(
            error_type=e.error_type,
            message=e.message,
            status_code=e.status_code,
            details=e.details,
            request_id=request_id,
        )

    except HTTPException as e:
        logger.warning(
            "HTTP exception: %s - %s",
            e.status_code,
            e.detail,
            extra={"request_id": request_id},
        )
        return create_error_response(
            error_type="http_error",
            message=str(e.detail),
            status_code=e.status_code,
            request_id=request_id,
        )

    except PostgrestAPIError as e:
        logger.error(
            "Database error on %s %s: %s (code=%s)",
            request.method,
            request.url.path,
            e.message,
            e.code,
            extra={"request_id": request_id},
        )
        return create_error_response(
            error_type="database_error",
            message="The database could not complete the request",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            request_id=request_id,
        )

    except Exception as e:
        logger.error(
            "Unhandled exception: %s\n%s",
            str(e),
            traceback.format_exc(),
            extra={"request_id": request_id},
        )
        return create_error_response(
            error_type="internal_error",
            message="An unexpected error occurred",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            request_id=request_id,
        )
