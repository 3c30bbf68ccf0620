"""Task Domain Model -- 待办事项实体

tasks 表保存任务当前状态；所有受追踪字段的变更通过
history.tracker 在同一事务内写入 task_history。
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from ..config import TITLE_MAX_LENGTH
from .enums import TaskPriority, TaskStatus


class Task(BaseModel):
    """Task 数据模型"""

    task_id: str = Field(description="唯一标识，ULID 格式")
    user_id: str = Field(description="所属用户 ID")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
    title: str = Field(description="任务标题")
    description: str | None = Field(default=None, description="任务描述")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="当前状态")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="优先级")
    due_date: date | None = Field(default=None, description="截止日期")
    completed: bool = Field(default=False, description="是否已完成")
    category_id: str | None = Field(default=None, description="关联分类 ID")
    position: int = Field(default=0, description="排序位置（不追踪历史）")


# 可由调用方修改的字段
EDITABLE_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "status",
    "priority",
    "due_date",
    "completed",
    "category_id",
    "position",
)


def validate_task(
    task: Task,
    today: date,
    check_due_date: bool = True,
) -> dict[str, list[str]]:
    """校验任务字段

    Args:
        task: 待校验的任务
        today: 当前日期（用于截止日期校验）
        check_due_date: 是否校验截止日期不早于今天（仅在新建或修改截止日期时校验）

    Returns:
        字段名 -> 错误消息列表；为空表示校验通过
    """
    errors: dict[str, list[str]] = {}

    if not task.title or not task.title.strip():
        errors.setdefault("title", []).append("を入力してください")
    elif len(task.title) > TITLE_MAX_LENGTH:
        errors.setdefault("title", []).append(
            f"は{TITLE_MAX_LENGTH}文字以内で入力してください"
        )

    if check_due_date and task.due_date is not None and task.due_date < today:
        errors.setdefault("due_date", []).append("は過去の日付にできません")

    return errors
