"""CategoryStore SQLite 实现

不自动提交事务，由调用方管理。
"""

import aiosqlite

from ..models.user import Category
from .serialization import from_db_ts, to_db_ts


class SqliteCategoryStore:
    """CategoryStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_category(self, category: Category) -> None:
        await self._conn.execute(
            """
            INSERT INTO categories (category_id, user_id, name, color, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                category.category_id,
                category.user_id,
                category.name,
                category.color,
                to_db_ts(category.created_at),
                to_db_ts(category.updated_at),
            ),
        )

    async def get_category(self, category_id: str) -> Category | None:
        cursor = await self._conn.execute(
            """
            SELECT category_id, user_id, name, color, created_at, updated_at
            FROM categories WHERE category_id = ?
            """,
            (category_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_category(row)

    async def get_category_by_name(self, user_id: str, name: str) -> Category | None:
        """按名称查询（同一用户内大小写不敏感）"""
        cursor = await self._conn.execute(
            """
            SELECT category_id, user_id, name, color, created_at, updated_at
            FROM categories WHERE user_id = ? AND name = ? COLLATE NOCASE
            """,
            (user_id, name),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_category(row)

    async def list_categories(self, user_id: str) -> list[Category]:
        """查询用户分类，按名称排序"""
        cursor = await self._conn.execute(
            """
            SELECT category_id, user_id, name, color, created_at, updated_at
            FROM categories WHERE user_id = ? ORDER BY name COLLATE NOCASE ASC
            """,
            (user_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_category(row) for row in rows]

    async def update_category(self, category: Category) -> None:
        """更新名称与颜色（任务历史中已记录的分类名不随之改变）"""
        await self._conn.execute(
            """
            UPDATE categories SET name = ?, color = ?, updated_at = ?
            WHERE category_id = ?
            """,
            (
                category.name,
                category.color,
                to_db_ts(category.updated_at),
                category.category_id,
            ),
        )

    async def delete_category(self, category_id: str) -> None:
        """删除分类（关联任务的 category_id 由外键置空，不产生历史记录）"""
        await self._conn.execute(
            "DELETE FROM categories WHERE category_id = ?",
            (category_id,),
        )

    @staticmethod
    def _row_to_category(row: aiosqlite.Row) -> Category:
        return Category(
            category_id=row[0],
            user_id=row[1],
            name=row[2],
            color=row[3],
            created_at=from_db_ts(row[4]),
            updated_at=from_db_ts(row[5]),
        )
