"""ChangeTracker + 事务封装测试

测试内容：
1. 创建只产生一条 created 记录
2. 一次更新按字段写入多条记录，task_seq 连续
3. 分类以名称记录
4. 历史写入失败时任务变更一并回滚
"""

from datetime import UTC, date, datetime, timedelta

import aiosqlite
import pytest
from todoapp.core.history import ChangeTracker
from todoapp.core.models import Category, HistoryAction, Task, TaskPriority, TaskStatus
from todoapp.core.store.transaction import create_task_with_history, update_task_with_history
from ulid import ULID


@pytest.fixture
def tracker(store_group) -> ChangeTracker:
    return ChangeTracker(store_group.history_store, store_group.category_store)


def _new_task(user, **overrides) -> Task:
    now = datetime.now(UTC)
    data = {
        "task_id": str(ULID()),
        "user_id": user.user_id,
        "created_at": now,
        "updated_at": now,
        "title": "レポート作成",
    }
    data.update(overrides)
    return Task(**data)


async def _category(store_group, user, name: str) -> Category:
    now = datetime.now(UTC)
    category = Category(
        category_id=str(ULID()),
        user_id=user.user_id,
        name=name,
        color="#6B7280",
        created_at=now,
        updated_at=now,
    )
    await store_group.category_store.create_category(category)
    await store_group.conn.commit()
    return category


class TestRecordCreation:
    async def test_single_created_entry(self, store_group, tracker, user):
        task = _new_task(user, priority=TaskPriority.HIGH, due_date=date(2099, 1, 1))
        await create_task_with_history(
            store_group.conn, store_group.task_store, tracker, task, user
        )

        entries = await store_group.history_store.list_for_task(task.task_id)
        assert len(entries) == 1
        created = entries[0]
        assert created.action == HistoryAction.CREATED
        assert created.field_name == "created"
        assert created.old_value is None
        assert created.new_value == "レポート作成"
        assert created.user_id == user.user_id
        assert created.task_seq == 1


class TestRecordUpdate:
    async def test_multi_field_update(self, store_group, tracker, user):
        before = _new_task(user)
        await create_task_with_history(
            store_group.conn, store_group.task_store, tracker, before, user
        )
        after = before.model_copy(
            update={
                "title": "レポート提出",
                "status": TaskStatus.IN_PROGRESS,
                "position": 9,
                "updated_at": before.updated_at + timedelta(seconds=1),
            }
        )

        entries = await update_task_with_history(
            store_group.conn, store_group.task_store, tracker, before, after, user
        )

        assert [(e.field_name, e.task_seq) for e in entries] == [("title", 2), ("status", 3)]
        assert entries[1].action == HistoryAction.STATUS_CHANGED
        assert all(e.created_at == after.updated_at for e in entries)
        stored = await store_group.task_store.get_task(before.task_id)
        assert stored.title == "レポート提出"
        assert stored.position == 9

    async def test_untracked_only_update_writes_no_history(self, store_group, tracker, user):
        before = _new_task(user)
        await create_task_with_history(
            store_group.conn, store_group.task_store, tracker, before, user
        )
        after = before.model_copy(update={"position": 3})

        entries = await update_task_with_history(
            store_group.conn, store_group.task_store, tracker, before, after, user
        )
        assert entries == []
        assert await store_group.history_store.count_for_task(before.task_id) == 1

    async def test_category_recorded_by_name(self, store_group, tracker, user):
        work = await _category(store_group, user, "仕事")
        home = await _category(store_group, user, "家事")
        before = _new_task(user, category_id=work.category_id)
        await create_task_with_history(
            store_group.conn, store_group.task_store, tracker, before, user
        )

        to_home = before.model_copy(update={"category_id": home.category_id})
        entries = await update_task_with_history(
            store_group.conn, store_group.task_store, tracker, before, to_home, user
        )
        assert (entries[0].old_value, entries[0].new_value) == ("仕事", "家事")

        cleared = to_home.model_copy(update={"category_id": None})
        entries = await update_task_with_history(
            store_group.conn, store_group.task_store, tracker, to_home, cleared, user
        )
        assert (entries[0].old_value, entries[0].new_value) == ("家事", None)

    async def test_history_failure_rolls_back_task(
        self, store_group, tracker, user, monkeypatch
    ):
        before = _new_task(user)
        await create_task_with_history(
            store_group.conn, store_group.task_store, tracker, before, user
        )
        after = before.model_copy(update={"title": "書き換え"})

        async def broken_append(entry):
            raise aiosqlite.OperationalError("disk I/O error")

        monkeypatch.setattr(store_group.history_store, "append_entry", broken_append)

        with pytest.raises(aiosqlite.OperationalError):
            await update_task_with_history(
                store_group.conn, store_group.task_store, tracker, before, after, user
            )

        stored = await store_group.task_store.get_task(before.task_id)
        assert stored.title == "レポート作成"
        monkeypatch.undo()
        assert await store_group.history_store.count_for_task(before.task_id) == 1

    async def test_creation_failure_leaves_no_task(
        self, store_group, tracker, user, monkeypatch
    ):
        task = _new_task(user)

        async def broken_append(entry):
            raise aiosqlite.OperationalError("database is locked")

        monkeypatch.setattr(store_group.history_store, "append_entry", broken_append)

        with pytest.raises(aiosqlite.OperationalError):
            await create_task_with_history(
                store_group.conn, store_group.task_store, tracker, task, user
            )
        assert await store_group.task_store.get_task(task.task_id) is None
