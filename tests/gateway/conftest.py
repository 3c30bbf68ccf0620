"""gateway 测试配置 -- httpx AsyncClient + 手动初始化的 app.state"""

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


@pytest_asyncio.fixture
async def test_app(store_group, tmp_db_path):
    os.environ["TODOAPP_DB_PATH"] = str(tmp_db_path)
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from todoapp.gateway.main import create_app

    app = create_app()
    # 手动初始化（绕过 lifespan）
    app.state.store_group = store_group

    yield app

    os.environ.pop("TODOAPP_DB_PATH", None)
    os.environ.pop("LOGFIRE_SEND_TO_LOGFIRE", None)


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def headers(user) -> dict[str, str]:
    return {"X-User-Id": user.user_id}


@pytest.fixture
def other_headers(other_user) -> dict[str, str]:
    return {"X-User-Id": other_user.user_id}


@pytest_asyncio.fixture
async def todo(client, headers) -> dict:
    """通过 API 创建的任务"""
    resp = await client.post("/api/v1/todos", json={"title": "買い物"}, headers=headers)
    assert resp.status_code == 201
    return resp.json()
