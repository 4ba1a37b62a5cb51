"""
Integration tests for the auth endpoints.
"""

from httpx import AsyncClient

from tests.conftest import TEST_PASSWORD
from tests.integration.conftest import signup


class TestSignupAndLogin:
    async def test_signup_starts_session(self, client: AsyncClient, api):
        data = await signup(client, email="Ana@Example.com")

        assert data["email"] == "ana@example.com"
        assert data["plan"] == "free"
        assert data["telegram_connected"] is False
        assert "password_hash" not in data
        assert "session" in client.cookies

        me = api.assert_success(await client.get("/api/v1/auth/me"))
        assert me["data"]["id"] == data["id"]

    async def test_signup_duplicate_email(self, client: AsyncClient, api):
        await signup(client)

        response = await client.post(
            "/api/v1/auth/signup",
            json={"email": "ANA@example.com", "password": TEST_PASSWORD},
        )

        api.assert_error(response, 409, "RES_CONFLICT")

    async def test_signup_short_password(self, client: AsyncClient, api):
        response = await client.post(
            "/api/v1/auth/signup",
            json={"email": "ana@example.com", "password": "short"},
        )

        api.assert_validation_error(response, "password")

    async def test_login(self, client: AsyncClient, api):
        await signup(client)
        client.cookies.clear()

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "ana@example.com", "password": TEST_PASSWORD},
        )

        api.assert_success(response)
        assert "session" in client.cookies

    async def test_login_bad_credentials(self, client: AsyncClient, api):
        await signup(client)
        client.cookies.clear()

        wrong = await client.post(
            "/api/v1/auth/login",
            json={"email": "ana@example.com", "password": "not-the-password"},
        )
        unknown = await client.post(
            "/api/v1/auth/login",
            json={"email": "who@example.com", "password": "not-the-password"},
        )

        api.assert_error(wrong, 401, "AUTH_UNAUTHORIZED")
        api.assert_error(unknown, 401, "AUTH_UNAUTHORIZED")
        assert wrong.json()["error"]["message"] == unknown.json()["error"]["message"]


class TestSession:
    async def test_me_requires_session(self, client: AsyncClient, api):
        api.assert_error(await client.get("/api/v1/auth/me"), 401, "AUTH_UNAUTHORIZED")

    async def test_tampered_cookie(self, client: AsyncClient, api):
        client.cookies.set("session", "not-a-jwt")

        api.assert_error(await client.get("/api/v1/auth/me"), 401)

    async def test_logout_clears_cookie(self, auth_client: AsyncClient, api):
        api.assert_success(await auth_client.post("/api/v1/auth/logout"))

        api.assert_error(await auth_client.get("/api/v1/auth/me"), 401)


class TestAccountManagement:
    async def test_change_password(self, auth_client: AsyncClient, api):
        wrong = await auth_client.post(
            "/api/v1/auth/change-password",
            json={"current_password": "nope", "new_password": "new-password-1"},
        )
        api.assert_error(wrong, 401)

        ok = await auth_client.post(
            "/api/v1/auth/change-password",
            json={"current_password": TEST_PASSWORD, "new_password": "new-password-1"},
        )
        api.assert_success(ok)

        auth_client.cookies.clear()
        login = await auth_client.post(
            "/api/v1/auth/login",
            json={"email": "ana@example.com", "password": "new-password-1"},
        )
        api.assert_success(login)

    async def test_delete_account(self, auth_client: AsyncClient, api):
        api.assert_success(await auth_client.post("/api/v1/clients", json={"name": "Maya"}), 201)

        api.assert_success(await auth_client.delete("/api/v1/auth/account"))

        api.assert_error(await auth_client.get("/api/v1/auth/me"), 401)
        login = await auth_client.post(
            "/api/v1/auth/login",
            json={"email": "ana@example.com", "password": TEST_PASSWORD},
        )
        api.assert_error(login, 401)


class TestPasswordReset:
    async def test_forgot_password_does_not_reveal_accounts(self, client: AsyncClient, api):
        await signup(client)

        known = await client.post("/api/v1/auth/forgot-password", json={"email": "ana@example.com"})
        unknown = await client.post("/api/v1/auth/forgot-password", json={"email": "who@example.com"})

        assert api.assert_success(known)["data"] == api.assert_success(unknown)["data"]

    async def test_reset_with_bad_token(self, client: AsyncClient, api):
        response = await client.post(
            "/api/v1/auth/reset-password",
            json={"token": "bogus", "new_password": "new-password-1"},
        )

        api.assert_error(response, 400, "VAL_VALIDATION_ERROR")
