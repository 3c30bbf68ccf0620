"""CommentService -- 任务评论（软删除）"""

from datetime import UTC, datetime

import aiosqlite
import structlog
from todoapp.core.config import COMMENT_MAX_LENGTH
from todoapp.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from todoapp.core.models import Comment, Task, User
from todoapp.core.store import StoreGroup
from ulid import ULID

log = structlog.get_logger()


def _check_content(content: str) -> str:
    content = content.strip()
    if not content:
        raise ValidationError(errors={"content": ["を入力してください"]})
    if len(content) > COMMENT_MAX_LENGTH:
        raise ValidationError(
            errors={"content": [f"は{COMMENT_MAX_LENGTH}文字以内で入力してください"]}
        )
    return content


class CommentService:
    """评论业务服务

    评论只能挂在调用方自己的任务上；编辑与删除仅限评论作者。
    """

    def __init__(self, store_group: StoreGroup) -> None:
        self._stores = store_group

    async def list_comments(self, actor: User, task_id: str) -> list[Comment]:
        """按时间正序返回未删除的评论"""
        await self._get_owned_task(actor, task_id)
        return await self._stores.comment_store.list_active_for_task(task_id)

    async def create_comment(self, actor: User, task_id: str, content: str) -> Comment:
        content = _check_content(content)

        async with self._stores.write_lock:
            await self._get_owned_task(actor, task_id)
            now = datetime.now(UTC)
            comment = Comment(
                comment_id=str(ULID()),
                task_id=task_id,
                user_id=actor.user_id,
                content=content,
                created_at=now,
                updated_at=now,
            )
            try:
                await self._stores.comment_store.create_comment(comment)
                await self._stores.conn.commit()
            except aiosqlite.Error as e:
                await self._stores.conn.rollback()
                log.error("comment_create_failed", task_id=task_id, error_type=type(e).__name__)
                raise StorageError() from e

        await log.ainfo("comment_created", task_id=task_id, comment_id=comment.comment_id)
        return comment

    async def update_comment(
        self,
        actor: User,
        task_id: str,
        comment_id: str,
        content: str,
    ) -> Comment:
        """编辑评论内容

        仅作者可编辑，且只能在创建后的编辑时间窗口内进行。

        Raises:
            NotFoundError: 任务或评论不存在（含已删除）
            AuthorizationError: 调用方不是评论作者
            ValidationError: 内容不合法，或已超过编辑时间窗口
        """
        content = _check_content(content)

        async with self._stores.write_lock:
            await self._get_owned_task(actor, task_id)
            comment = await self._stores.comment_store.get_active_comment(task_id, comment_id)
            if comment is None:
                raise NotFoundError(resource="Comment", resource_id=comment_id)
            if comment.user_id != actor.user_id:
                raise AuthorizationError("コメントの編集権限がありません")
            now = datetime.now(UTC)
            if not comment.is_editable(now):
                raise ValidationError("コメントの編集可能時間が過ぎています")
            try:
                await self._stores.comment_store.update_content(comment_id, content, now)
                await self._stores.conn.commit()
            except aiosqlite.Error as e:
                await self._stores.conn.rollback()
                log.error("comment_update_failed", comment_id=comment_id, error_type=type(e).__name__)
                raise StorageError() from e

        await log.ainfo("comment_updated", task_id=task_id, comment_id=comment_id)
        return comment.model_copy(update={"content": content, "updated_at": now})

    async def delete_comment(self, actor: User, task_id: str, comment_id: str) -> None:
        """软删除评论

        Raises:
            NotFoundError: 任务或评论不存在（含已删除）
            AuthorizationError: 调用方不是评论作者
        """
        async with self._stores.write_lock:
            await self._get_owned_task(actor, task_id)
            comment = await self._stores.comment_store.get_active_comment(task_id, comment_id)
            if comment is None:
                raise NotFoundError(resource="Comment", resource_id=comment_id)
            if comment.user_id != actor.user_id:
                raise AuthorizationError()
            try:
                await self._stores.comment_store.soft_delete(comment_id, datetime.now(UTC))
                await self._stores.conn.commit()
            except aiosqlite.Error as e:
                await self._stores.conn.rollback()
                log.error("comment_delete_failed", comment_id=comment_id, error_type=type(e).__name__)
                raise StorageError() from e

        await log.ainfo("comment_deleted", task_id=task_id, comment_id=comment_id)

    async def _get_owned_task(self, actor: User, task_id: str) -> Task:
        task = await self._stores.task_store.get_task_for_user(task_id, actor.user_id)
        if task is None:
            raise NotFoundError(resource="Todo", resource_id=task_id)
        return task
