"""User / Category / Comment Domain Models"""

import re
from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from ..config import COMMENT_EDIT_WINDOW_MINUTES

USER_NAME_MIN_LENGTH = 2
USER_NAME_MAX_LENGTH = 50
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class User(BaseModel):
    """用户（变更的执行者）"""

    user_id: str = Field(description="唯一标识，ULID 格式")
    name: str = Field(description="显示名称")
    email: str = Field(description="邮箱，大小写不敏感唯一")
    created_at: datetime = Field(description="注册时间")


class Category(BaseModel):
    """任务分类"""

    category_id: str = Field(description="唯一标识，ULID 格式")
    user_id: str = Field(description="所属用户 ID")
    name: str = Field(description="分类名称")
    color: str = Field(description="十六进制颜色，大写存储")
    created_at: datetime
    updated_at: datetime


class Comment(BaseModel):
    """任务评论（软删除）"""

    comment_id: str = Field(description="唯一标识，ULID 格式")
    task_id: str = Field(description="关联的 Task ID")
    user_id: str = Field(description="作者 ID")
    content: str
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = Field(default=None, description="软删除时间")

    def is_editable(self, now: datetime) -> bool:
        """未删除且仍在创建后的编辑窗口内"""
        window = timedelta(minutes=COMMENT_EDIT_WINDOW_MINUTES)
        return self.deleted_at is None and now - self.created_at < window


def validate_registration(name: str, email: str) -> dict[str, list[str]]:
    """校验注册字段（名称 2..50 字符，邮箱格式）

    Returns:
        字段名 -> 错误消息列表；为空表示校验通过
    """
    errors: dict[str, list[str]] = {}

    if not name:
        errors["name"] = ["を入力してください"]
    elif not USER_NAME_MIN_LENGTH <= len(name) <= USER_NAME_MAX_LENGTH:
        errors["name"] = [
            f"は{USER_NAME_MIN_LENGTH}文字以上{USER_NAME_MAX_LENGTH}文字以内で入力してください"
        ]

    if not email:
        errors["email"] = ["を入力してください"]
    elif not _EMAIL_RE.match(email):
        errors["email"] = ["は不正な値です"]

    return errors
