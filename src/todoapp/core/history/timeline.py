"""历史记录的展示辅助

按整秒时间戳把同一次保存产生的多条记录归为一组。
"""

from ..models.history import HistoryEntry


def sort_newest_first(entries: list[HistoryEntry]) -> list[HistoryEntry]:
    """按 created_at 倒序排列，同一时刻按 task_seq 倒序"""
    return sorted(entries, key=lambda e: (e.created_at, e.task_seq), reverse=True)


def group_by_second(entries: list[HistoryEntry]) -> list[tuple[int, list[HistoryEntry]]]:
    """按整秒 Unix 时间戳分组

    Returns:
        [(timestamp, entries)]，组按时间倒序；组内按 task_seq 正序（即字段声明顺序）
    """
    buckets: dict[int, list[HistoryEntry]] = {}
    for entry in entries:
        buckets.setdefault(int(entry.created_at.timestamp()), []).append(entry)

    return [
        (ts, sorted(buckets[ts], key=lambda e: e.task_seq))
        for ts in sorted(buckets, reverse=True)
    ]
