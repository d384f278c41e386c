"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before anything imports app.core.config, so
the module-level settings object is built from these values.
"""

import os

os.environ["APP_ENV"] = "testing"

os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("LLM_MODEL", "gpt-4o-mini")
os.environ.setdefault("LLM_API_KEY", "test-key-123")
os.environ.setdefault("VIDEO_API_KEY", "test-video-key")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("APP_RATE_LIMIT_WINDOW_SECONDS", "60")
os.environ.setdefault("APP_RATE_LIMIT_MAX_TRACKED_CLIENTS", "500")
os.environ.setdefault("APP_RATE_LIMIT_GENERATION_REQUESTS", "3")
os.environ.setdefault("APP_RATE_LIMIT_LOOKUP_REQUESTS", "5")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.app_factory import create_app


@pytest.fixture
def app() -> FastAPI:
    """A fresh application (and therefore a fresh limiter) per test."""
    return create_app()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
