"""CommentStore SQLite 实现

评论采用软删除：deleted_at 非空即视为删除。
"""

from datetime import datetime

import aiosqlite

from ..models.user import Comment
from .serialization import from_db_ts, to_db_ts


class SqliteCommentStore:
    """CommentStore 的 SQLite 实现（软删除）"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_comment(self, comment: Comment) -> None:
        await self._conn.execute(
            """
            INSERT INTO comments (comment_id, task_id, user_id, content, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                comment.comment_id,
                comment.task_id,
                comment.user_id,
                comment.content,
                to_db_ts(comment.created_at),
                to_db_ts(comment.updated_at),
            ),
        )

    async def get_active_comment(self, task_id: str, comment_id: str) -> Comment | None:
        cursor = await self._conn.execute(
            """
            SELECT comment_id, task_id, user_id, content, created_at, updated_at, deleted_at
            FROM comments
            WHERE comment_id = ? AND task_id = ? AND deleted_at IS NULL
            """,
            (comment_id, task_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_comment(row)

    async def list_active_for_task(self, task_id: str) -> list[Comment]:
        """查询任务的有效评论，按创建时间正序"""
        cursor = await self._conn.execute(
            """
            SELECT comment_id, task_id, user_id, content, created_at, updated_at, deleted_at
            FROM comments
            WHERE task_id = ? AND deleted_at IS NULL
            ORDER BY created_at ASC
            """,
            (task_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_comment(row) for row in rows]

    async def count_for_task(self, task_id: str) -> int:
        """统计任务的未删除评论"""
        cursor = await self._conn.execute(
            "SELECT COUNT(*) FROM comments WHERE task_id = ? AND deleted_at IS NULL",
            (task_id,),
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def update_content(self, comment_id: str, content: str, updated_at: datetime) -> None:
        await self._conn.execute(
            "UPDATE comments SET content = ?, updated_at = ? WHERE comment_id = ?",
            (content, to_db_ts(updated_at), comment_id),
        )

    async def soft_delete(self, comment_id: str, deleted_at: datetime) -> None:
        await self._conn.execute(
            "UPDATE comments SET deleted_at = ?, updated_at = ? WHERE comment_id = ?",
            (to_db_ts(deleted_at), to_db_ts(deleted_at), comment_id),
        )

    @staticmethod
    def _row_to_comment(row: aiosqlite.Row) -> Comment:
        return Comment(
            comment_id=row[0],
            task_id=row[1],
            user_id=row[2],
            content=row[3],
            created_at=from_db_ts(row[4]),
            updated_at=from_db_ts(row[5]),
            deleted_at=from_db_ts(row[6]) if row[6] else None,
        )
