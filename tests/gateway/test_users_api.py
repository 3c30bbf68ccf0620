"""用户 API 测试"""

from httpx import AsyncClient


class TestUsers:
    async def test_register_and_me(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/users", json={"name": "鈴木一郎", "email": "ichiro@example.com"}
        )
        assert resp.status_code == 201
        created = resp.json()

        me = await client.get("/api/v1/users/me", headers={"X-User-Id": created["id"]})
        assert me.status_code == 200
        assert me.json()["email"] == "ichiro@example.com"

    async def test_duplicate_email_rejected(self, client: AsyncClient, user):
        resp = await client.post(
            "/api/v1/users", json={"name": "別人", "email": user.email.upper()}
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["details"]["validation_errors"] == {
            "email": ["はすでに存在します"]
        }

    async def test_invalid_fields(self, client: AsyncClient):
        resp = await client.post("/api/v1/users", json={"name": "a", "email": "not-an-email"})
        assert resp.status_code == 422
        errors = resp.json()["error"]["details"]["validation_errors"]
        assert set(errors) == {"name", "email"}

    async def test_me_requires_header(self, client: AsyncClient):
        resp = await client.get("/api/v1/users/me")
        assert resp.status_code == 401
