"""UserService -- 用户注册与查询"""

from datetime import UTC, datetime

import aiosqlite
import structlog
from todoapp.core.exceptions import NotFoundError, StorageError, ValidationError
from todoapp.core.models import User, validate_registration
from todoapp.core.store import StoreGroup
from ulid import ULID

log = structlog.get_logger()


class UserService:
    """用户业务服务"""

    def __init__(self, store_group: StoreGroup) -> None:
        self._stores = store_group

    async def register(self, name: str, email: str) -> User:
        """注册用户

        Raises:
            ValidationError: 名称/邮箱格式错误或邮箱已被使用
        """
        name = name.strip()
        email = email.strip()
        errors = validate_registration(name, email)

        async with self._stores.write_lock:
            if "email" not in errors and await self._stores.user_store.get_user_by_email(email):
                errors["email"] = ["はすでに存在します"]
            if errors:
                raise ValidationError(errors=errors)

            user = User(
                user_id=str(ULID()),
                name=name,
                email=email,
                created_at=datetime.now(UTC),
            )
            try:
                await self._stores.user_store.create_user(user)
                await self._stores.conn.commit()
            except aiosqlite.Error as e:
                await self._stores.conn.rollback()
                log.error("user_create_failed", error_type=type(e).__name__)
                raise StorageError() from e

        await log.ainfo("user_registered", user_id=user.user_id)
        return user

    async def get_user(self, user_id: str) -> User:
        user = await self._stores.user_store.get_user(user_id)
        if user is None:
            raise NotFoundError(resource="User", resource_id=user_id)
        return user
