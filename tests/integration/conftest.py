"""
Integration Test Fixtures.

Fixtures for integration tests - real database, real services, the
FastAPI app driven through httpx. AI providers are replaced with
PydanticAI test agents.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from pydantic_ai import Agent
from pydantic_ai.models.test import TestModel
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.backend.core.database import get_db_session
from messenger.backend.core.dependencies import get_ai_service
from messenger.backend.models.account import Account
from messenger.backend.repositories.account import AccountRepository
from messenger.backend.services import ai as ai_module
from messenger.backend.services.ai import AIService, DraftDeps
from tests.conftest import TEST_PASSWORD

DRAFT_TEXT = "Hi Maya! June 3 works perfectly."


@pytest.fixture(autouse=True)
def fresh_breakers(monkeypatch):
    monkeypatch.setattr(ai_module, "_breakers", {})


@pytest.fixture
def ai_service() -> AIService:
    """AI service whose drafting agent answers with ``DRAFT_TEXT``."""
    agent = Agent(TestModel(custom_output_text=DRAFT_TEXT), deps_type=DraftDeps, output_type=str)
    return AIService(agent=agent)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
async def client(
    db_session: AsyncSession,
    ai_service: AIService,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with database session and AI overrides.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    from messenger.backend.main import create_app

    app = create_app()
    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_ai_service] = lambda: ai_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


async def signup(
    client: AsyncClient,
    email: str = "ana@example.com",
    password: str = TEST_PASSWORD,
    name: str = "Ana",
) -> dict[str, Any]:
    """Sign up through the API; the client keeps the session cookie."""
    response = await client.post(
        "/api/v1/auth/signup",
        json={"email": email, "password": password, "name": name},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
async def auth_client(client: AsyncClient) -> AsyncClient:
    """Test client with a signed-in free-plan account (ana@example.com)."""
    await signup(client)
    return client


@pytest.fixture
async def current_account(auth_client: AsyncClient, db_session: AsyncSession) -> Account:
    """The account behind ``auth_client``."""
    return await AccountRepository(db_session).get_by_email("ana@example.com")


@pytest.fixture
def set_plan(db_session: AsyncSession):
    """Change an account's plan tier."""

    async def _set(account: Account, plan: str) -> None:
        account.plan = plan
        await db_session.commit()

    return _set


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("error") is not None, f"Missing error details: {data}"

        if expected_code:
            actual_code = data["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )

        return data

    @staticmethod
    def assert_validation_error(response: Any, field: str | None = None) -> dict[str, Any]:
        data = ApiAssertions.assert_error(response, 422, "VAL_REQUEST_INVALID")

        if field:
            errors = data["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()
