"""任务变更审计子系统

- tracking: 受追踪字段声明表与差异提取
- tracker: 保存拦截与历史写入
- formatter: 历史记录可读化
- timeline: 排序与分组
"""

from .formatter import human_readable_change
from .timeline import group_by_second, sort_newest_first
from .tracker import CREATED_FIELD_NAME, ChangeTracker
from .tracking import TRACKED_FIELD_NAMES, TRACKED_FIELDS, TrackedField, extract_diffs

__all__ = [
    "TRACKED_FIELDS",
    "TRACKED_FIELD_NAMES",
    "TrackedField",
    "extract_diffs",
    "ChangeTracker",
    "CREATED_FIELD_NAME",
    "human_readable_change",
    "sort_newest_first",
    "group_by_second",
]
