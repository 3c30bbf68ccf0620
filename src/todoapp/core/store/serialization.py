"""数据库列值编解码

时间戳统一以微秒精度 ISO-8601 文本存储，保证同一时区下的字典序即时间序。
"""

from datetime import date, datetime


def to_db_ts(value: datetime) -> str:
    """datetime -> 定长 ISO-8601 文本"""
    return value.isoformat(timespec="microseconds")


def from_db_ts(value: str) -> datetime:
    return datetime.fromisoformat(value)


def to_db_date(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def from_db_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None
