"""历史记录可读化

human_readable_change 是全函数：任何语法上合法的 HistoryEntry 都返回一句日文描述，
存储值异常（如无法解析的日期）在此降级为通用描述，不向外抛出。
"""

from collections.abc import Callable
from datetime import date, datetime

from ..models.history import HistoryEntry

STATUS_LABELS: dict[str, str] = {
    "pending": "未着手",
    "in_progress": "進行中",
    "completed": "完了",
}

PRIORITY_LABELS: dict[str, str] = {
    "low": "低",
    "medium": "中",
    "high": "高",
}

UNSET_LABEL = "未設定"
NO_DATE_LABEL = "なし"
DUE_DATE_FALLBACK = "期限日を変更"

# ISO-8601 之外可接受的日期写法
_LENIENT_DATE_FORMATS: tuple[str, ...] = ("%Y/%m/%d", "%Y.%m.%d", "%Y年%m月%d日")


def _translate(value: str | None, labels: dict[str, str]) -> str:
    if not value:
        return UNSET_LABEL
    return labels.get(value, value)


def _parse_date(value: str) -> date:
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    for fmt in _LENIENT_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"unrecognised date: {value!r}")


def _format_date(value: str | None) -> str:
    if not value:
        return NO_DATE_LABEL
    return _parse_date(value).strftime("%Y年%m月%d日")


def _due_date_change(entry: HistoryEntry) -> str:
    try:
        old_date = _format_date(entry.old_value)
        new_date = _format_date(entry.new_value)
    except ValueError:
        return DUE_DATE_FALLBACK
    return f"期限日を「{old_date}」から「{new_date}」に変更"


def _created(entry: HistoryEntry) -> str:
    return f"タスク「{entry.new_value or ''}」を作成"


def _title_change(entry: HistoryEntry) -> str:
    return f"タイトルを「{entry.old_value or ''}」から「{entry.new_value or ''}」に変更"


def _status_change(entry: HistoryEntry) -> str:
    old_label = _translate(entry.old_value, STATUS_LABELS)
    new_label = _translate(entry.new_value, STATUS_LABELS)
    return f"ステータスを「{old_label}」から「{new_label}」に変更"


def _priority_change(entry: HistoryEntry) -> str:
    old_label = _translate(entry.old_value, PRIORITY_LABELS)
    new_label = _translate(entry.new_value, PRIORITY_LABELS)
    return f"優先度を「{old_label}」から「{new_label}」に変更"


def _completed_change(entry: HistoryEntry) -> str:
    if entry.new_value == "true":
        return "タスクを完了にマーク"
    return "タスクを未完了にマーク"


def _category_change(entry: HistoryEntry) -> str:
    return "カテゴリを変更"


def _description_change(entry: HistoryEntry) -> str:
    return "説明を更新" if entry.old_value else "説明を追加"


_FORMATTERS: dict[str, Callable[[HistoryEntry], str]] = {
    "created": _created,
    "title": _title_change,
    "status": _status_change,
    "priority": _priority_change,
    "due_date": _due_date_change,
    "completed": _completed_change,
    "category_id": _category_change,
    "description": _description_change,
}


def human_readable_change(entry: HistoryEntry) -> str:
    """将一条历史记录渲染为可读的日文句子

    未知字段回退为「<field>を変更」。
    """
    formatter = _FORMATTERS.get(entry.field_name)
    if formatter is None:
        return f"{entry.field_name}を変更"
    return formatter(entry)
