"""CategoryService -- 分类创建/查询/更新/删除

删除分类时关联任务的 category_id 由外键批量置空，
属于批量操作，不经过变更拦截，因此不产生历史记录。
"""

import re
from datetime import UTC, datetime

import aiosqlite
import structlog
from todoapp.core.config import CATEGORY_NAME_MAX_LENGTH, DEFAULT_CATEGORY_COLOR
from todoapp.core.exceptions import NotFoundError, StorageError, ValidationError
from todoapp.core.models import Category, User
from todoapp.core.store import StoreGroup
from ulid import ULID

log = structlog.get_logger()

_COLOR_RE = re.compile(r"^#(?:[0-9A-F]{3}|[0-9A-F]{6})$")


def _validate_fields(name: str, color: str) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    if not name:
        errors["name"] = ["を入力してください"]
    elif len(name) > CATEGORY_NAME_MAX_LENGTH:
        errors["name"] = [f"は{CATEGORY_NAME_MAX_LENGTH}文字以内で入力してください"]
    if not _COLOR_RE.match(color):
        errors["color"] = ["は不正な値です"]
    return errors


class CategoryService:
    """分类业务服务"""

    def __init__(self, store_group: StoreGroup) -> None:
        self._stores = store_group

    async def list_categories(self, actor: User) -> list[Category]:
        return await self._stores.category_store.list_categories(actor.user_id)

    async def get_category(self, actor: User, category_id: str) -> Category:
        """查询分类，不属于 actor 时视为不存在"""
        category = await self._stores.category_store.get_category(category_id)
        if category is None or category.user_id != actor.user_id:
            raise NotFoundError(resource="Category", resource_id=category_id)
        return category

    async def create_category(
        self,
        actor: User,
        name: str,
        color: str | None = None,
    ) -> Category:
        """创建分类

        color 统一转为大写存储，缺省为默认灰色。

        Raises:
            ValidationError: 名称为空/过长/重复，或颜色格式错误
        """
        name = name.strip()
        color = (color or DEFAULT_CATEGORY_COLOR).strip().upper()
        errors = _validate_fields(name, color)

        async with self._stores.write_lock:
            await self._check_name_unique(actor, name, errors)
            if errors:
                raise ValidationError(errors=errors)

            now = datetime.now(UTC)
            category = Category(
                category_id=str(ULID()),
                user_id=actor.user_id,
                name=name,
                color=color,
                created_at=now,
                updated_at=now,
            )
            try:
                await self._stores.category_store.create_category(category)
                await self._stores.conn.commit()
            except aiosqlite.Error as e:
                await self._stores.conn.rollback()
                log.error("category_create_failed", error_type=type(e).__name__)
                raise StorageError() from e

        await log.ainfo("category_created", category_id=category.category_id)
        return category

    async def update_category(
        self,
        actor: User,
        category_id: str,
        name: str | None = None,
        color: str | None = None,
    ) -> Category:
        """更新分类名称/颜色

        已写入任务历史的分类名不会被改写。
        """
        async with self._stores.write_lock:
            current = await self.get_category(actor, category_id)
            new_name = current.name if name is None else name.strip()
            new_color = current.color if color is None else color.strip().upper()
            errors = _validate_fields(new_name, new_color)
            if new_name.lower() != current.name.lower():
                await self._check_name_unique(actor, new_name, errors)
            if errors:
                raise ValidationError(errors=errors)

            updated = current.model_copy(
                update={"name": new_name, "color": new_color, "updated_at": datetime.now(UTC)}
            )
            try:
                await self._stores.category_store.update_category(updated)
                await self._stores.conn.commit()
            except aiosqlite.Error as e:
                await self._stores.conn.rollback()
                log.error("category_update_failed", error_type=type(e).__name__)
                raise StorageError() from e

        await log.ainfo("category_updated", category_id=category_id)
        return updated

    async def delete_category(self, actor: User, category_id: str) -> None:
        """删除分类，关联任务变为未分类"""
        async with self._stores.write_lock:
            await self.get_category(actor, category_id)
            try:
                await self._stores.category_store.delete_category(category_id)
                await self._stores.conn.commit()
            except aiosqlite.Error as e:
                await self._stores.conn.rollback()
                log.error("category_delete_failed", error_type=type(e).__name__)
                raise StorageError() from e

        await log.ainfo("category_deleted", category_id=category_id)

    async def _check_name_unique(
        self,
        actor: User,
        name: str,
        errors: dict[str, list[str]],
    ) -> None:
        if "name" in errors:
            return
        existing = await self._stores.category_store.get_category_by_name(actor.user_id, name)
        if existing is not None:
            errors["name"] = ["はすでに存在します"]
