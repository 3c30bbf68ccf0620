"""TaskStore SQLite 实现

此处仅提供数据库操作，不自动提交事务；
涉及历史记录的写入必须经由 store.transaction 中的原子封装。
"""

import aiosqlite

from ..models.task import Task
from .serialization import from_db_date, from_db_ts, to_db_date, to_db_ts

_TASK_COLUMNS = (
    "task_id, user_id, created_at, updated_at, title, description, status, "
    "priority, due_date, completed, category_id, position"
)


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        await self._conn.execute(
            f"""
            INSERT INTO tasks ({_TASK_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.task_id,
                task.user_id,
                to_db_ts(task.created_at),
                to_db_ts(task.updated_at),
                task.title,
                task.description,
                task.status.value,
                task.priority.value,
                to_db_date(task.due_date),
                int(task.completed),
                task.category_id,
                task.position,
            ),
        )

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        cursor = await self._conn.execute(
            f"SELECT {_TASK_COLUMNS} FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def get_task_for_user(self, task_id: str, user_id: str) -> Task | None:
        """查询属于指定用户的任务，不属于该用户时返回 None"""
        cursor = await self._conn.execute(
            f"SELECT {_TASK_COLUMNS} FROM tasks WHERE task_id = ? AND user_id = ?",
            (task_id, user_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def list_tasks(
        self,
        user_id: str,
        status: str | None = None,
        priority: str | None = None,
        category_id: str | None = None,
        query: str | None = None,
    ) -> list[Task]:
        """查询用户任务列表，按 position 正序

        query 对标题和描述做大小写不敏感的子串匹配。
        """
        clauses = ["user_id = ?"]
        params: list = [user_id]
        if status:
            clauses.append("status = ?")
            params.append(status)
        if priority:
            clauses.append("priority = ?")
            params.append(priority)
        if category_id:
            clauses.append("category_id = ?")
            params.append(category_id)
        if query:
            pattern = f"%{_escape_like(query.strip())}%"
            clauses.append(
                "(title LIKE ? ESCAPE '\\' OR COALESCE(description, '') LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern])

        cursor = await self._conn.execute(
            f"""
            SELECT {_TASK_COLUMNS} FROM tasks
            WHERE {" AND ".join(clauses)}
            ORDER BY position ASC, created_at ASC
            """,
            params,
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def update_task(self, task: Task) -> None:
        """以完整快照覆盖任务可变字段"""
        await self._conn.execute(
            """
            UPDATE tasks
            SET updated_at = ?, title = ?, description = ?, status = ?,
                priority = ?, due_date = ?, completed = ?, category_id = ?,
                position = ?
            WHERE task_id = ?
            """,
            (
                to_db_ts(task.updated_at),
                task.title,
                task.description,
                task.status.value,
                task.priority.value,
                to_db_date(task.due_date),
                int(task.completed),
                task.category_id,
                task.position,
                task.task_id,
            ),
        )

    async def delete_task(self, task_id: str) -> None:
        """删除任务（历史记录与评论由外键级联删除）"""
        await self._conn.execute("DELETE FROM tasks WHERE task_id = ?", (task_id,))

    async def get_next_position(self, user_id: str) -> int:
        """获取用户任务的下一个 position（MAX+1）"""
        cursor = await self._conn.execute(
            "SELECT COALESCE(MAX(position), 0) FROM tasks WHERE user_id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        return (row[0] if row else 0) + 1

    async def update_positions(
        self,
        user_id: str,
        positions: list[tuple[str, int]],
    ) -> None:
        """批量更新排序位置（position 不追踪历史）"""
        await self._conn.executemany(
            "UPDATE tasks SET position = ? WHERE task_id = ? AND user_id = ?",
            [(position, task_id, user_id) for task_id, position in positions],
        )

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            task_id=row[0],
            user_id=row[1],
            created_at=from_db_ts(row[2]),
            updated_at=from_db_ts(row[3]),
            title=row[4],
            description=row[5],
            status=row[6],
            priority=row[7],
            due_date=from_db_date(row[8]),
            completed=bool(row[9]),
            category_id=row[10],
            position=row[11],
        )
