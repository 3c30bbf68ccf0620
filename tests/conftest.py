"""全局 pytest 配置 -- 临时 SQLite 数据库与基础数据 fixture"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import pytest_asyncio
from todoapp.core.models import Task, User
from todoapp.core.store import StoreGroup, create_store_group
from ulid import ULID


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"


@pytest_asyncio.fixture
async def store_group(tmp_db_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """提供已初始化的 StoreGroup"""
    group = await create_store_group(str(tmp_db_path))
    yield group
    await group.conn.close()


@pytest_asyncio.fixture
async def make_user(store_group: StoreGroup):
    """直接写库创建用户的工厂"""

    async def _make(name: str, email: str) -> User:
        new_user = User(
            user_id=str(ULID()),
            name=name,
            email=email,
            created_at=datetime.now(UTC),
        )
        await store_group.user_store.create_user(new_user)
        await store_group.conn.commit()
        return new_user

    return _make


@pytest_asyncio.fixture
async def user(make_user) -> User:
    return await make_user("山田太郎", "taro@example.com")


@pytest_asyncio.fixture
async def other_user(make_user) -> User:
    return await make_user("佐藤花子", "hanako@example.com")


@pytest_asyncio.fixture
async def saved_task(store_group: StoreGroup, user: User) -> Task:
    """已落库的任务（不含历史记录）"""
    now = datetime.now(UTC)
    task = Task(
        task_id=str(ULID()),
        user_id=user.user_id,
        created_at=now,
        updated_at=now,
        title="買い物",
    )
    await store_group.task_store.create_task(task)
    await store_group.conn.commit()
    return task
