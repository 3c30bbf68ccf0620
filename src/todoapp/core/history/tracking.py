"""受追踪字段声明表 + 差异提取

TRACKED_FIELDS 是唯一的事实来源：字段白名单、声明顺序、动作类型与序列化函数。
extract_diffs 为纯函数，输出顺序总是表中的声明顺序。
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from ..models.enums import HistoryAction
from ..models.history import FieldDiff
from ..models.task import Task

Serializer = Callable[[Any], str | None]


def serialize_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def serialize_optional_text(value: Any) -> str | None:
    """空字符串与 None 视为同一值"""
    if value is None or value == "":
        return None
    return str(value)


def serialize_enum(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def serialize_date(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def serialize_bool(value: Any) -> str | None:
    if value is None:
        return None
    return "true" if value else "false"


@dataclass(frozen=True)
class TrackedField:
    """单个受追踪字段的声明"""

    name: str
    action: HistoryAction
    serialize: Serializer


# 字段白名单（顺序即差异输出顺序）
TRACKED_FIELDS: tuple[TrackedField, ...] = (
    TrackedField("title", HistoryAction.UPDATED, serialize_text),
    TrackedField("description", HistoryAction.UPDATED, serialize_optional_text),
    TrackedField("status", HistoryAction.STATUS_CHANGED, serialize_enum),
    TrackedField("priority", HistoryAction.PRIORITY_CHANGED, serialize_enum),
    TrackedField("due_date", HistoryAction.UPDATED, serialize_date),
    TrackedField("completed", HistoryAction.UPDATED, serialize_bool),
    # 默认序列化为原始 ID；ChangeTracker 会覆盖为分类名称
    TrackedField("category_id", HistoryAction.UPDATED, serialize_optional_text),
)

TRACKED_FIELD_NAMES: frozenset[str] = frozenset(f.name for f in TRACKED_FIELDS)


def extract_diffs(
    before: Task,
    after: Task,
    serializers: Mapping[str, Serializer] | None = None,
) -> list[FieldDiff]:
    """计算两个任务快照之间值得记录的字段差异

    Args:
        before: 持久化前的快照
        after: 即将持久化的快照
        serializers: 按字段名覆盖默认序列化函数（如分类 ID -> 名称）

    Returns:
        按 TRACKED_FIELDS 声明顺序排列的差异列表；
        未声明字段（如 position）与序列化后相等的字段不会出现
    """
    overrides = serializers or {}
    diffs: list[FieldDiff] = []
    for tracked in TRACKED_FIELDS:
        serialize = overrides.get(tracked.name, tracked.serialize)
        old_value = serialize(getattr(before, tracked.name))
        new_value = serialize(getattr(after, tracked.name))
        if old_value == new_value:
            continue
        diffs.append(
            FieldDiff(
                field_name=tracked.name,
                old_value=old_value,
                new_value=new_value,
                action=tracked.action,
            )
        )
    return diffs
