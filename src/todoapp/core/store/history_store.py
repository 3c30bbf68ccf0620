"""HistoryStore SQLite 实现

task_history 表 append-only：只允许插入，不允许更新或单独删除。
task_seq 同一任务内严格单调递增。
"""

import aiosqlite

from ..models.enums import HistoryAction
from ..models.history import HistoryEntry
from .serialization import from_db_ts, to_db_ts

_HISTORY_COLUMNS = (
    "history_id, task_id, user_id, task_seq, field_name, old_value, new_value, "
    "action, created_at"
)


class SqliteHistoryStore:
    """HistoryStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def append_entry(self, entry: HistoryEntry) -> None:
        """追加历史记录（append-only）

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            f"""
            INSERT INTO task_history ({_HISTORY_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.history_id,
                entry.task_id,
                entry.user_id,
                entry.task_seq,
                entry.field_name,
                entry.old_value,
                entry.new_value,
                entry.action.value,
                to_db_ts(entry.created_at),
            ),
        )

    async def get_next_task_seq(self, task_id: str) -> int:
        """获取指定任务的下一个 task_seq（MAX+1）

        在事务内调用以确保原子性。
        """
        cursor = await self._conn.execute(
            "SELECT COALESCE(MAX(task_seq), 0) FROM task_history WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        return (row[0] if row else 0) + 1

    async def list_for_task(
        self,
        task_id: str,
        limit: int | None = None,
        field_name: str | None = None,
    ) -> list[HistoryEntry]:
        """查询指定任务的历史记录

        读取时总是按 created_at 倒序重新排序（同一时刻按 task_seq 倒序），
        不依赖插入顺序。
        """
        sql = f"SELECT {_HISTORY_COLUMNS} FROM task_history WHERE task_id = ?"
        params: list = [task_id]
        if field_name:
            sql += " AND field_name = ?"
            params.append(field_name)
        sql += " ORDER BY created_at DESC, task_seq DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        cursor = await self._conn.execute(sql, params)
        rows = await cursor.fetchall()
        return [self._row_to_entry(row) for row in rows]

    async def count_for_task(self, task_id: str) -> int:
        cursor = await self._conn.execute(
            "SELECT COUNT(*) FROM task_history WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    @staticmethod
    def _row_to_entry(row: aiosqlite.Row) -> HistoryEntry:
        """将数据库行转换为 HistoryEntry 模型"""
        return HistoryEntry(
            history_id=row[0],
            task_id=row[1],
            user_id=row[2],
            task_seq=row[3],
            field_name=row[4],
            old_value=row[5],
            new_value=row[6],
            action=HistoryAction(row[7]),
            created_at=from_db_ts(row[8]),
        )
