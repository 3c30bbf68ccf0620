"""枚举定义 -- 任务状态、优先级与历史动作类型

存储与 API 中均使用枚举值的字符串名（如 "in_progress"）。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """任务状态"""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(StrEnum):
    """任务优先级"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class HistoryAction(StrEnum):
    """历史记录动作类型

    CREATED 仅由创建拦截写入；DELETED 保留兼容，删除任务时历史随任务级联删除，不会写入。
    """

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    STATUS_CHANGED = "status_changed"
    PRIORITY_CHANGED = "priority_changed"
