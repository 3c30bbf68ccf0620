"""Store Protocol 接口定义

定义 TaskStore、HistoryStore 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from typing import Protocol

from ..models.history import HistoryEntry
from ..models.task import Task


class TaskStore(Protocol):
    """Task 存储接口"""

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        ...

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        ...

    async def get_task_for_user(self, task_id: str, user_id: str) -> Task | None:
        """查询属于指定用户的任务"""
        ...

    async def update_task(self, task: Task) -> None:
        """以完整快照覆盖任务可变字段"""
        ...

    async def delete_task(self, task_id: str) -> None:
        """删除任务"""
        ...

    async def update_positions(
        self,
        user_id: str,
        positions: list[tuple[str, int]],
    ) -> None:
        """批量更新排序位置"""
        ...


class HistoryStore(Protocol):
    """History 存储接口

    task_history 表 append-only：只允许插入，不允许更新或单独删除。
    """

    async def append_entry(self, entry: HistoryEntry) -> None:
        """追加历史记录"""
        ...

    async def get_next_task_seq(self, task_id: str) -> int:
        """获取指定任务的下一个 task_seq（MAX+1）"""
        ...

    async def list_for_task(
        self,
        task_id: str,
        limit: int | None = None,
        field_name: str | None = None,
    ) -> list[HistoryEntry]:
        """查询指定任务的历史记录，created_at 倒序"""
        ...
