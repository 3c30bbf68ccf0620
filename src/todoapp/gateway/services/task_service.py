"""TaskService -- 任务创建/更新/删除/查询业务逻辑

任务写入流程：
1. 在 store 写锁内读取当前快照
2. 合并调用方的变更并校验（校验失败不写入任何历史）
3. 通过 transaction 封装在同一事务内写入任务与历史记录
"""

from datetime import UTC, date, datetime
from typing import Any

import aiosqlite
import structlog
from todoapp.core.exceptions import NotFoundError, StorageError, ValidationError
from todoapp.core.history import ChangeTracker
from todoapp.core.models import (
    EDITABLE_FIELDS,
    HistoryEntry,
    Task,
    User,
    validate_task,
)
from todoapp.core.store import StoreGroup
from todoapp.core.store.transaction import (
    create_task_with_history,
    delete_task_cascade,
    reorder_tasks,
    update_task_with_history,
)
from ulid import ULID

log = structlog.get_logger()

# 不允许显式置空的字段
_NON_NULLABLE_FIELDS = frozenset({"title", "status", "priority", "completed", "position"})


def _normalize(fields: dict[str, Any]) -> dict[str, Any]:
    """空字符串的分类 ID 视为未分类"""
    normalized = dict(fields)
    if normalized.get("category_id") == "":
        normalized["category_id"] = None
    return normalized


class TaskService:
    """任务业务服务"""

    def __init__(self, store_group: StoreGroup) -> None:
        self._stores = store_group
        self._tracker = ChangeTracker(
            store_group.history_store,
            store_group.category_store,
        )

    async def create_task(self, actor: User, fields: dict[str, Any]) -> Task:
        """创建任务并记录 created 历史

        Args:
            actor: 执行创建的用户
            fields: 任务字段（title 必填）

        Returns:
            新建的 Task

        Raises:
            ValidationError: 字段校验失败
            StorageError: 写入失败（已回滚）
        """
        fields = _normalize(fields)
        async with self._stores.write_lock:
            now = datetime.now(UTC)
            position = await self._stores.task_store.get_next_position(actor.user_id)
            extra = {
                k: v
                for k, v in fields.items()
                if k in EDITABLE_FIELDS and k not in ("title", "position") and v is not None
            }
            task = Task(
                task_id=str(ULID()),
                user_id=actor.user_id,
                created_at=now,
                updated_at=now,
                title=fields.get("title") or "",
                position=position,
                **extra,
            )
            await self._validate(actor, task, today=now.date(), check_due_date=True)

            try:
                await create_task_with_history(
                    self._stores.conn,
                    self._stores.task_store,
                    self._tracker,
                    task,
                    actor,
                )
            except aiosqlite.Error as e:
                log.error(
                    "task_create_failed",
                    task_id=task.task_id,
                    error_type=type(e).__name__,
                )
                raise StorageError() from e

        await log.ainfo("task_created", task_id=task.task_id, user_id=actor.user_id)
        return task

    async def update_task(
        self,
        actor: User,
        task_id: str,
        changes: dict[str, Any],
    ) -> tuple[Task, list[HistoryEntry]]:
        """部分更新任务，逐字段记录历史

        Returns:
            (更新后的 Task, 本次写入的历史记录)

        Raises:
            NotFoundError: 任务不存在或不属于 actor
            ValidationError: 字段校验失败（不写入任何历史）
            StorageError: 写入失败（任务变更与历史一并回滚）
        """
        async with self._stores.write_lock:
            before = await self._get_owned(actor, task_id)
            updates = {k: v for k, v in _normalize(changes).items() if k in EDITABLE_FIELDS}

            if all(getattr(before, k) == v for k, v in updates.items()):
                return before, []

            now = datetime.now(UTC)
            after = before.model_copy(update={**updates, "updated_at": now})
            await self._validate(
                actor,
                after,
                today=now.date(),
                check_due_date="due_date" in updates and updates["due_date"] != before.due_date,
                nulls=[k for k, v in updates.items() if v is None],
            )

            try:
                entries = await update_task_with_history(
                    self._stores.conn,
                    self._stores.task_store,
                    self._tracker,
                    before,
                    after,
                    actor,
                )
            except aiosqlite.Error as e:
                log.error(
                    "task_update_failed",
                    task_id=task_id,
                    error_type=type(e).__name__,
                )
                raise StorageError() from e

        await log.ainfo(
            "task_updated",
            task_id=task_id,
            user_id=actor.user_id,
            history_count=len(entries),
        )
        return after, entries

    async def delete_task(self, actor: User, task_id: str) -> None:
        """删除任务（历史与评论级联删除）"""
        async with self._stores.write_lock:
            await self._get_owned(actor, task_id)
            try:
                await delete_task_cascade(
                    self._stores.conn,
                    self._stores.task_store,
                    task_id,
                )
            except aiosqlite.Error as e:
                log.error("task_delete_failed", task_id=task_id, error_type=type(e).__name__)
                raise StorageError() from e

        await log.ainfo("task_deleted", task_id=task_id, user_id=actor.user_id)

    async def reorder(self, actor: User, positions: list[tuple[str, int]]) -> None:
        """批量调整排序（position 不追踪历史）

        Raises:
            NotFoundError: 存在不属于 actor 的任务 ID
        """
        async with self._stores.write_lock:
            owned = {
                t.task_id
                for t in await self._stores.task_store.list_tasks(actor.user_id)
            }
            missing = [task_id for task_id, _ in positions if task_id not in owned]
            if missing:
                raise NotFoundError(
                    resource="Todo",
                    message="Some todos not found",
                    details={"missing_todos": missing},
                )
            try:
                await reorder_tasks(
                    self._stores.conn,
                    self._stores.task_store,
                    actor.user_id,
                    positions,
                )
            except aiosqlite.Error as e:
                log.error("task_reorder_failed", error_type=type(e).__name__)
                raise StorageError() from e

    async def get_task(self, actor: User, task_id: str) -> Task:
        return await self._get_owned(actor, task_id)

    async def get_task_detail(self, actor: User, task_id: str) -> tuple[Task, int, int]:
        """查询任务详情

        Returns:
            (Task, 历史记录数, 未删除评论数)
        """
        task = await self._get_owned(actor, task_id)
        history_count = await self._stores.history_store.count_for_task(task_id)
        comments_count = await self._stores.comment_store.count_for_task(task_id)
        return task, history_count, comments_count

    async def list_tasks(
        self,
        actor: User,
        status: str | None = None,
        priority: str | None = None,
        category_id: str | None = None,
        query: str | None = None,
    ) -> list[Task]:
        """查询任务列表"""
        return await self._stores.task_store.list_tasks(
            actor.user_id,
            status=status,
            priority=priority,
            category_id=category_id,
            query=query,
        )

    async def _get_owned(self, actor: User, task_id: str) -> Task:
        task = await self._stores.task_store.get_task_for_user(task_id, actor.user_id)
        if task is None:
            raise NotFoundError(resource="Todo", resource_id=task_id)
        return task

    async def _validate(
        self,
        actor: User,
        task: Task,
        today: date,
        check_due_date: bool,
        nulls: list[str] | None = None,
    ) -> None:
        errors = {
            field: ["を入力してください"]
            for field in (nulls or [])
            if field in _NON_NULLABLE_FIELDS and field != "title"
        }
        errors.update(validate_task(task, today, check_due_date=check_due_date))

        if task.category_id:
            category = await self._stores.category_store.get_category(task.category_id)
            if category is None or category.user_id != actor.user_id:
                errors.setdefault("category_id", []).append("は存在しないカテゴリです")

        if errors:
            raise ValidationError(errors=errors)
