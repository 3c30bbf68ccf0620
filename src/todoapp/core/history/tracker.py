"""ChangeTracker -- 任务保存拦截 + 历史写入

由执行更新的代码路径显式调用，执行者通过参数传入。
本模块只写入、不提交：提交与回滚由 store.transaction 负责，
保证历史记录与任务变更同属一个事务。
"""

from datetime import UTC, datetime

import structlog
from ulid import ULID

from ..models.enums import HistoryAction
from ..models.history import FieldDiff, HistoryEntry
from ..models.task import Task
from ..models.user import User
from ..store.category_store import SqliteCategoryStore
from ..store.protocols import HistoryStore
from .tracking import Serializer, extract_diffs

log = structlog.get_logger()

# 创建记录使用的伪字段名
CREATED_FIELD_NAME = "created"


class ChangeTracker:
    """任务变更拦截器"""

    def __init__(
        self,
        history_store: HistoryStore,
        category_store: SqliteCategoryStore,
    ) -> None:
        self._history_store = history_store
        self._category_store = category_store

    async def record_creation(
        self,
        task: Task,
        actor: User,
        now: datetime | None = None,
    ) -> HistoryEntry:
        """写入唯一一条 created 记录（old_value 为空，new_value 为初始标题）"""
        seq = await self._history_store.get_next_task_seq(task.task_id)
        entry = HistoryEntry(
            history_id=str(ULID()),
            task_id=task.task_id,
            user_id=actor.user_id,
            task_seq=seq,
            field_name=CREATED_FIELD_NAME,
            old_value=None,
            new_value=task.title,
            action=HistoryAction.CREATED,
            created_at=now or datetime.now(UTC),
        )
        await self._history_store.append_entry(entry)
        return entry

    async def record_update(
        self,
        before: Task,
        after: Task,
        actor: User,
        now: datetime | None = None,
    ) -> list[HistoryEntry]:
        """按字段差异逐条写入历史记录

        Returns:
            本次写入的记录（按字段声明顺序）；无受追踪变更时为空列表
        """
        diffs = await self.capture(before, after)
        if not diffs:
            return []

        ts = now or datetime.now(UTC)
        first_seq = await self._history_store.get_next_task_seq(after.task_id)
        entries = [
            self._build_entry(after.task_id, actor, diff, first_seq + offset, ts)
            for offset, diff in enumerate(diffs)
        ]
        for entry in entries:
            await self._history_store.append_entry(entry)

        await log.adebug(
            "task_history_recorded",
            task_id=after.task_id,
            fields=[e.field_name for e in entries],
        )
        return entries

    async def capture(self, before: Task, after: Task) -> list[FieldDiff]:
        """计算差异（分类以名称记录）"""
        serializers = await self._category_serializers(before, after)
        return extract_diffs(before, after, serializers)

    async def _category_serializers(
        self,
        before: Task,
        after: Task,
    ) -> dict[str, Serializer]:
        if before.category_id == after.category_id:
            return {}

        names: dict[str, str] = {}
        for category_id in (before.category_id, after.category_id):
            if not category_id:
                continue
            category = await self._category_store.get_category(category_id)
            if category is not None:
                names[category_id] = category.name

        def serialize_category(value) -> str | None:
            if not value:
                return None
            return names.get(value)

        return {"category_id": serialize_category}

    @staticmethod
    def _build_entry(
        task_id: str,
        actor: User,
        diff: FieldDiff,
        seq: int,
        ts: datetime,
    ) -> HistoryEntry:
        return HistoryEntry(
            history_id=str(ULID()),
            task_id=task_id,
            user_id=actor.user_id,
            task_seq=seq,
            field_name=diff.field_name,
            old_value=diff.old_value,
            new_value=diff.new_value,
            action=diff.action,
            created_at=ts,
        )
