"""
Unit Test Fixtures.

Fixtures for unit tests - external dependencies are mocked.
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """
    Mock database session for unit tests.

    Usage:
        def test_middleware(mock_db_session: AsyncMock):
            middleware = DatabaseMiddleware(lambda: session_cm(mock_db_session))
    """
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.execute = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def mock_http_client() -> AsyncMock:
    """Mock httpx.AsyncClient for provider calls."""
    client = AsyncMock()
    client.post = AsyncMock()
    return client


class MockResponse:
    """Mock HTTP response for testing."""

    def __init__(self, status_code: int, json_data: dict[str, Any] | None = None) -> None:
        self.status_code = status_code
        self._json_data = json_data or {}

    def json(self) -> dict[str, Any]:
        return self._json_data

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise Exception(f"HTTP {self.status_code}")


@pytest.fixture
def mock_response() -> type[MockResponse]:
    """Provide MockResponse class for creating mock HTTP responses."""
    return MockResponse
