"""数据库初始化与外键行为测试"""

from datetime import UTC, datetime

from todoapp.core.models import Category
from todoapp.core.store.sqlite_init import verify_wal_mode
from ulid import ULID


class TestSqliteInit:
    async def test_wal_mode_enabled(self, store_group):
        assert await verify_wal_mode(store_group.conn) is True

    async def test_foreign_keys_enabled(self, store_group):
        cursor = await store_group.conn.execute("PRAGMA foreign_keys;")
        row = await cursor.fetchone()
        assert row[0] == 1

    async def test_category_delete_nullifies_task(self, store_group, saved_task, user):
        now = datetime.now(UTC)
        category = Category(
            category_id=str(ULID()),
            user_id=user.user_id,
            name="仕事",
            color="#6B7280",
            created_at=now,
            updated_at=now,
        )
        await store_group.category_store.create_category(category)
        await store_group.task_store.update_task(
            saved_task.model_copy(update={"category_id": category.category_id})
        )
        await store_group.conn.commit()

        await store_group.category_store.delete_category(category.category_id)
        await store_group.conn.commit()

        task = await store_group.task_store.get_task(saved_task.task_id)
        assert task.category_id is None
        assert await store_group.history_store.count_for_task(saved_task.task_id) == 0

    async def test_email_lookup_case_insensitive(self, store_group, user):
        found = await store_group.user_store.get_user_by_email("TARO@example.com")
        assert found is not None
        assert found.user_id == user.user_id
