"""UserStore SQLite 实现

不自动提交事务，由调用方管理。
"""

import aiosqlite

from ..models.user import User
from .serialization import from_db_ts, to_db_ts


class SqliteUserStore:
    """UserStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_user(self, user: User) -> None:
        await self._conn.execute(
            "INSERT INTO users (user_id, name, email, created_at) VALUES (?, ?, ?, ?)",
            (user.user_id, user.name, user.email, to_db_ts(user.created_at)),
        )

    async def get_user(self, user_id: str) -> User | None:
        cursor = await self._conn.execute(
            "SELECT user_id, name, email, created_at FROM users WHERE user_id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    async def get_user_by_email(self, email: str) -> User | None:
        """按邮箱查询（大小写不敏感）"""
        cursor = await self._conn.execute(
            "SELECT user_id, name, email, created_at FROM users WHERE email = ? COLLATE NOCASE",
            (email,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    async def get_users(self, user_ids: set[str]) -> dict[str, User]:
        """批量查询用户，返回 user_id -> User 映射"""
        if not user_ids:
            return {}
        ids = sorted(user_ids)
        placeholders = ", ".join("?" for _ in ids)
        cursor = await self._conn.execute(
            f"SELECT user_id, name, email, created_at FROM users WHERE user_id IN ({placeholders})",
            ids,
        )
        rows = await cursor.fetchall()
        return {row[0]: self._row_to_user(row) for row in rows}

    @staticmethod
    def _row_to_user(row: aiosqlite.Row) -> User:
        return User(
            user_id=row[0],
            name=row[1],
            email=row[2],
            created_at=from_db_ts(row[3]),
        )
