"""任务变更 + 历史记录原子事务封装

在同一 SQLite 事务内原子提交任务写入和对应的历史记录：
历史写入失败时任务变更一并回滚，不会出现有变更而无审计记录的状态。
"""

from typing import TYPE_CHECKING

import aiosqlite
import structlog

from ..models.history import HistoryEntry
from ..models.task import Task
from ..models.user import User
from .protocols import TaskStore

if TYPE_CHECKING:
    from ..history.tracker import ChangeTracker

log = structlog.get_logger()


async def create_task_with_history(
    conn: aiosqlite.Connection,
    task_store: TaskStore,
    tracker: "ChangeTracker",
    task: Task,
    actor: User,
) -> HistoryEntry:
    """在同一事务内写入新任务与 created 历史记录

    Args:
        conn: 数据库连接（需在同一连接上操作以保证事务性）
        task_store: TaskStore 实例
        tracker: 变更拦截器
        task: 新任务
        actor: 执行创建的用户

    Returns:
        写入的 created 记录

    Raises:
        Exception: 任一写入失败时回滚并原样抛出
    """
    try:
        await task_store.create_task(task)
        entry = await tracker.record_creation(task, actor, now=task.created_at)
        await conn.commit()
    except Exception:
        await conn.rollback()
        log.warning("task_create_rolled_back", task_id=task.task_id)
        raise
    return entry


async def update_task_with_history(
    conn: aiosqlite.Connection,
    task_store: TaskStore,
    tracker: "ChangeTracker",
    before: Task,
    after: Task,
    actor: User,
) -> list[HistoryEntry]:
    """在同一事务内写入任务快照与逐字段历史记录

    Args:
        before: 数据库中的当前快照
        after: 即将写入的快照

    Returns:
        本次写入的历史记录（仅修改未追踪字段时为空）
    """
    try:
        await task_store.update_task(after)
        entries = await tracker.record_update(before, after, actor, now=after.updated_at)
        await conn.commit()
    except Exception:
        await conn.rollback()
        log.warning("task_update_rolled_back", task_id=after.task_id)
        raise
    return entries


async def delete_task_cascade(
    conn: aiosqlite.Connection,
    task_store: TaskStore,
    task_id: str,
) -> None:
    """删除任务，历史记录与评论随外键级联删除"""
    try:
        await task_store.delete_task(task_id)
        await conn.commit()
    except Exception:
        await conn.rollback()
        raise


async def reorder_tasks(
    conn: aiosqlite.Connection,
    task_store: TaskStore,
    user_id: str,
    positions: list[tuple[str, int]],
) -> None:
    """批量更新排序位置（不产生历史记录）"""
    try:
        await task_store.update_positions(user_id, positions)
        await conn.commit()
    except Exception:
        await conn.rollback()
        raise
