"""Tests for global exception handlers.

Every error type must come back in the same envelope with the right status
code, and unexpected exceptions must not leak details.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import (
    AppError,
    InvalidConfigurationError,
    LLMAppError,
    RateLimitExceededError,
    UpstreamServiceError,
    ValidationAppError,
)
from app.core.exception_handlers import general_exception_handler, setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


def _raise_on(app: FastAPI, path: str, exc: Exception) -> None:
    @app.get(path)
    async def endpoint():
        raise exc


class TestAppErrorHandler:
    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        _raise_on(app_with_handlers, "/v", ValidationAppError(code="bad_input", message="Bad input"))

        response = client.get("/v")

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "bad_input"
        assert error["message"] == "Bad input"
        assert "request_id" in error

    def test_invalid_configuration_is_a_server_error(self, client: TestClient, app_with_handlers: FastAPI):
        exc = InvalidConfigurationError(code="llm_missing_api_key", message="LLM_API_KEY is not set")
        _raise_on(app_with_handlers, "/cfg", exc)

        response = client.get("/cfg")

        assert not isinstance(exc, ValidationAppError)
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "llm_missing_api_key"

    def test_rate_limit_error_returns_429_with_headers(self, client: TestClient, app_with_handlers: FastAPI):
        exc = RateLimitExceededError(
            code="rate_limit_exceeded",
            message="Too many requests. Please try again later.",
            details={"limit": 3, "remaining": 0, "reset_at": 1060, "retry_after": 45, "http_status": 429},
        )
        _raise_on(app_with_handlers, "/rl", exc)

        response = client.get("/rl")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "45"
        assert response.headers["X-RateLimit-Limit"] == "3"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert response.headers["X-RateLimit-Reset"] == "1060"
        details = response.json()["error"]["details"]
        assert details["retry_after"] == 45
        assert "http_status" not in details

    def test_llm_error_returns_502(self, client: TestClient, app_with_handlers: FastAPI):
        _raise_on(app_with_handlers, "/llm", LLMAppError(code="llm_provider_error", message="AI failed"))

        response = client.get("/llm")

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "llm_provider_error"

    def test_upstream_error_honours_http_status(self, client: TestClient, app_with_handlers: FastAPI):
        exc = UpstreamServiceError(
            code="video_search_timeout",
            message="Video search timed out",
            details={"http_status": 504},
        )
        _raise_on(app_with_handlers, "/timeout", exc)

        assert client.get("/timeout").status_code == 504

    def test_malformed_query_returns_400_envelope(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/needs-int")
        async def endpoint(n: int):
            return {"n": n}

        response = client.get("/needs-int", params={"n": "abc"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "invalid_request"
        assert error["details"]["fields"] == ["query.n"]


class TestGeneralExceptionHandler:
    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI):
        assert Exception in app_with_handlers.exception_handlers

    def test_general_exception_handler_hides_details(self):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = RuntimeError("database connection failed")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["error"]["code"] == "internal_server_error"
        assert "database connection" not in data["error"]["message"]
        assert "RuntimeError" not in bytes(response.body).decode()


def test_setup_registers_handlers_and_is_repeatable():
    app = FastAPI()
    setup_exception_handlers(app)
    setup_exception_handlers(app)

    assert AppError in app.exception_handlers
    assert Exception in app.exception_handlers
