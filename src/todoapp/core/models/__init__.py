"""todoapp Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import HistoryAction, TaskPriority, TaskStatus
from .history import FieldDiff, HistoryEntry
from .task import EDITABLE_FIELDS, Task, validate_task
from .user import Category, Comment, User, validate_registration

__all__ = [
    # 枚举
    "TaskStatus",
    "TaskPriority",
    "HistoryAction",
    # Task
    "Task",
    "EDITABLE_FIELDS",
    "validate_task",
    # History
    "HistoryEntry",
    "FieldDiff",
    # 其他实体
    "User",
    "Category",
    "Comment",
    "validate_registration",
]
