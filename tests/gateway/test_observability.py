"""可观测性与健康检查测试

测试内容：
1. 响应包含 ULID 格式的 X-Request-ID
2. 错误响应体带 request_id（含未预期异常的 500）
3. /health 与 /ready
"""

from httpx import AsyncClient


class TestObservability:
    async def test_request_id_in_response_header(self, client: AsyncClient, headers):
        resp = await client.get("/api/v1/todos", headers=headers)
        assert resp.status_code == 200
        assert "x-request-id" in resp.headers
        # ULID 格式：26 字符
        assert len(resp.headers["x-request-id"]) == 26

    async def test_request_ids_are_unique(self, client: AsyncClient):
        ids = {(await client.get("/health")).headers["x-request-id"] for _ in range(3)}
        assert len(ids) == 3

    async def test_error_body_carries_request_id(self, client: AsyncClient):
        resp = await client.get("/api/v1/users/me")
        assert resp.status_code == 401
        assert resp.json()["error"]["request_id"] == resp.headers["x-request-id"]


class TestHealth:
    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_ready(self, client: AsyncClient):
        resp = await client.get("/ready")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ready"
        assert data["checks"] == {"sqlite": "ok", "wal_mode": "ok"}

    async def test_not_ready_after_connection_closed(self, client: AsyncClient, store_group):
        await store_group.conn.close()
        resp = await client.get("/ready")
        assert resp.status_code == 503
        assert resp.json()["status"] == "not_ready"


class TestUnexpectedError:
    async def test_unhandled_exception_returns_envelope_with_request_id(
        self, test_app, client: AsyncClient
    ):
        @test_app.get("/api/v1/boom")
        async def boom():
            raise RuntimeError("database exploded")

        resp = await client.get("/api/v1/boom")
        assert resp.status_code == 500
        error = resp.json()["error"]
        assert error["code"] == "INTERNAL_ERROR"
        assert "exploded" not in error["message"]
        assert error["request_id"] == resp.headers["x-request-id"]
