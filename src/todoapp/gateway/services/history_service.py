"""HistoryService -- 任务变更历史查询

读取结果按 created_at 倒序（同一时刻按 task_seq 倒序），
并附带执行者信息与可读化描述。
"""

from dataclasses import dataclass

from todoapp.core.config import HISTORY_DEFAULT_LIMIT, HISTORY_MAX_LIMIT
from todoapp.core.exceptions import NotFoundError
from todoapp.core.history import human_readable_change
from todoapp.core.models import HistoryEntry, User
from todoapp.core.store import StoreGroup


@dataclass(frozen=True)
class HistoryView:
    """单条历史记录的展示视图"""

    entry: HistoryEntry
    user: User | None
    human_readable_change: str


def clamp_limit(limit: int | None) -> int:
    """将 limit 限制在 [1, HISTORY_MAX_LIMIT]，缺省取默认值"""
    if limit is None:
        return HISTORY_DEFAULT_LIMIT
    return max(1, min(limit, HISTORY_MAX_LIMIT))


class HistoryService:
    """历史记录查询服务"""

    def __init__(self, store_group: StoreGroup) -> None:
        self._stores = store_group

    async def list_history(
        self,
        actor: User,
        task_id: str,
        limit: int | None = None,
    ) -> list[HistoryView]:
        """查询调用方自己任务的历史记录

        Raises:
            NotFoundError: 任务不存在或不属于 actor
        """
        task = await self._stores.task_store.get_task_for_user(task_id, actor.user_id)
        if task is None:
            raise NotFoundError(resource="Todo", resource_id=task_id)

        entries = await self._stores.history_store.list_for_task(
            task_id, limit=clamp_limit(limit)
        )
        users = await self._stores.user_store.get_users({e.user_id for e in entries})
        return [
            HistoryView(
                entry=e,
                user=users.get(e.user_id),
                human_readable_change=human_readable_change(e),
            )
            for e in entries
        ]
