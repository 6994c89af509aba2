"""Unit tests for the error handling middleware."""

import json
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException
from postgrest.exceptions import APIError as PostgrestAPIError
from starlette.requests import Request

from src.api.middleware.error_handler import (
    InsufficientStockError,
    OrderCommitError,
    error_handler_middleware,
)


def make_request(request_id: str | None = None) -> Request:
    headers = [(b"x-request-id", request_id.encode())] if request_id else []
    return Request({"type": "http", "method": "POST", "path": "/api/v1/orders", "headers": headers})


def body(response) -> dict:
    return json.loads(response.body)


class TestErrorHandlerMiddleware:
    """Tests for error_handler_middleware."""

    @pytest.mark.asyncio
    async def test_passes_successful_response_through(self) -> None:
        sentinel = object()

        result = await error_handler_middleware(make_request(), AsyncMock(return_value=sentinel))

        assert result is sentinel

    @pytest.mark.asyncio
    async def test_renders_stock_error_with_details(self) -> None:
        error = InsufficientStockError("prod-1", "Canvas Tote", available=1, requested=3)

        response = await error_handler_middleware(make_request("req-42"), AsyncMock(side_effect=error))

        assert response.status_code == 422
        data = body(response)
        assert data["error"] == "insufficient_stock"
        assert data["message"] == "Insufficient stock for Canvas Tote. Available: 1, Requested: 3"
        assert data["details"] == [
            {"loc": ["items", "prod-1"], "msg": data["message"], "type": "insufficient_stock"}
        ]
        assert data["request_id"] == "req-42"
        assert response.headers["X-Request-ID"] == "req-42"

    @pytest.mark.asyncio
    async def test_commit_failure_is_500(self) -> None:
        response = await error_handler_middleware(make_request(), AsyncMock(side_effect=OrderCommitError()))

        assert response.status_code == 500
        assert body(response)["error"] == "order_commit_failed"
        assert "X-Request-ID" not in response.headers

    @pytest.mark.asyncio
    async def test_http_exception(self) -> None:
        error = HTTPException(status_code=405, detail="Method Not Allowed")

        response = await error_handler_middleware(make_request(), AsyncMock(side_effect=error))

        assert response.status_code == 405
        assert body(response)["error"] == "http_error"

    @pytest.mark.asyncio
    async def test_untranslated_database_error_hides_message(self) -> None:
        error = PostgrestAPIError({"message": "relation \"products\" does not exist", "code": "42P01"})

        response = await error_handler_middleware(make_request(), AsyncMock(side_effect=error))

        assert response.status_code == 503
        data = body(response)
        assert data["error"] == "database_error"
        assert "relation" not in data["message"]

    @pytest.mark.asyncio
    async def test_unexpected_exception(self) -> None:
        response = await error_handler_middleware(make_request(), AsyncMock(side_effect=RuntimeError("boom")))

        assert response.status_code == 500
        data = body(response)
        assert data["error"] == "internal_error"
        assert "timestamp" in data
