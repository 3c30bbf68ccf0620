"""todoapp Core Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

import asyncio
from pathlib import Path

import aiosqlite

from .category_store import SqliteCategoryStore
from .comment_store import SqliteCommentStore
from .history_store import SqliteHistoryStore
from .sqlite_init import init_db
from .task_store import SqliteTaskStore
from .transaction import (
    create_task_with_history,
    delete_task_cascade,
    reorder_tasks,
    update_task_with_history,
)
from .user_store import SqliteUserStore


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接

    同一连接上的事务是连接级的，write_lock 用于串行化各请求的写事务，
    避免一个请求的 commit/rollback 波及另一个请求尚未完成的写入。
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.write_lock = asyncio.Lock()
        self.user_store = SqliteUserStore(conn)
        self.category_store = SqliteCategoryStore(conn)
        self.task_store = SqliteTaskStore(conn)
        self.history_store = SqliteHistoryStore(conn)
        self.comment_store = SqliteCommentStore(conn)


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return StoreGroup(conn=conn)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "SqliteUserStore",
    "SqliteCategoryStore",
    "SqliteTaskStore",
    "SqliteHistoryStore",
    "SqliteCommentStore",
    "init_db",
    "create_task_with_history",
    "update_task_with_history",
    "delete_task_cascade",
    "reorder_tasks",
]
