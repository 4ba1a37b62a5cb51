"""
Integration tests for client and message endpoints.
"""

from httpx import AsyncClient

from tests.integration.conftest import signup


async def _create(client: AsyncClient, name: str = "Maya", notes: str = "") -> dict:
    response = await client.post("/api/v1/clients", json={"name": name, "notes": notes})
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestClientEndpoints:
    async def test_crud(self, auth_client: AsyncClient, api):
        created = await _create(auth_client, "Maya Chen", "June wedding")

        listed = api.assert_success(await auth_client.get("/api/v1/clients"))
        assert [c["id"] for c in listed["data"]] == [created["id"]]

        updated = api.assert_success(
            await auth_client.put(f"/api/v1/clients/{created['id']}", json={"notes": "Moved to July"})
        )
        assert updated["data"]["name"] == "Maya Chen"
        assert updated["data"]["notes"] == "Moved to July"

        api.assert_success(await auth_client.delete(f"/api/v1/clients/{created['id']}"))
        assert api.assert_success(await auth_client.get("/api/v1/clients"))["data"] == []

    async def test_requires_session(self, client: AsyncClient, api):
        api.assert_error(await client.get("/api/v1/clients"), 401)

    async def test_blank_name_rejected(self, auth_client: AsyncClient, api):
        api.assert_validation_error(await auth_client.post("/api/v1/clients", json={"name": "   "}))

    async def test_client_ceiling(self, auth_client: AsyncClient, api, monkeypatch):
        from messenger.backend.core.config import get_app_config

        monkeypatch.setattr(get_app_config().plans.free, "clients", 2)
        await _create(auth_client, "Maya")
        await _create(auth_client, "Leo")

        response = await auth_client.post("/api/v1/clients", json={"name": "Zoe"})

        data = api.assert_error(response, 429, "LIMIT_EXCEEDED")
        details = data["error"]["details"]
        assert details["limit_type"] == "clients"
        assert details["current"] == 2
        assert details["limit"] == 2
        assert len(api.assert_success(await auth_client.get("/api/v1/clients"))["data"]) == 2

    async def test_unlimited_plan(self, auth_client: AsyncClient, current_account, set_plan, monkeypatch):
        from messenger.backend.core.config import get_app_config

        monkeypatch.setattr(get_app_config().plans.free, "clients", 1)
        await set_plan(current_account, "power")

        for name in ("Maya", "Leo", "Zoe"):
            await _create(auth_client, name)

    async def test_other_accounts_client_is_hidden(self, client: AsyncClient, api):
        await signup(client, email="owner@example.com")
        owned = await _create(client, "Maya")

        client.cookies.clear()
        await signup(client, email="other@example.com")

        api.assert_error(await client.put(f"/api/v1/clients/{owned['id']}", json={"notes": "x"}), 404)
        api.assert_error(await client.delete(f"/api/v1/clients/{owned['id']}"), 404)
        api.assert_error(await client.get(f"/api/v1/messages/{owned['id']}"), 404)
        assert api.assert_success(await client.get("/api/v1/clients"))["data"] == []


class TestMessageEndpoints:
    async def test_thread_in_order(self, auth_client: AsyncClient, api):
        maya = await _create(auth_client, "Maya")
        for direction, text in (("inbound", "Is June 3 open?"), ("outbound", "It is!")):
            api.assert_success(
                await auth_client.post(
                    "/api/v1/messages",
                    json={"client_id": maya["id"], "direction": direction, "text": text},
                ),
                201,
            )

        thread = api.assert_success(await auth_client.get(f"/api/v1/messages/{maya['id']}"))["data"]

        assert [(m["direction"], m["text"]) for m in thread] == [
            ("inbound", "Is June 3 open?"),
            ("outbound", "It is!"),
        ]

    async def test_bad_direction(self, auth_client: AsyncClient, api):
        maya = await _create(auth_client, "Maya")

        response = await auth_client.post(
            "/api/v1/messages",
            json={"client_id": maya["id"], "direction": "sideways", "text": "hi"},
        )

        api.assert_validation_error(response, "direction")

    async def test_message_ceiling(self, auth_client: AsyncClient, api, monkeypatch):
        from messenger.backend.core.config import get_app_config

        monkeypatch.setattr(get_app_config().plans.free, "messages_per_client", 1)
        maya = await _create(auth_client, "Maya")
        body = {"client_id": maya["id"], "direction": "inbound", "text": "hi"}
        api.assert_success(await auth_client.post("/api/v1/messages", json=body), 201)

        data = api.assert_error(await auth_client.post("/api/v1/messages", json=body), 429, "LIMIT_EXCEEDED")

        assert data["error"]["details"]["limit_type"] == "messages_per_client"

    async def test_unknown_client(self, auth_client: AsyncClient, api):
        response = await auth_client.post(
            "/api/v1/messages",
            json={"client_id": "missing", "direction": "inbound", "text": "hi"},
        )

        api.assert_error(response, 404, "RES_NOT_FOUND")
