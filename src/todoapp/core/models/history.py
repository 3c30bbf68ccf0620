"""HistoryEntry Domain Model -- 字段级变更审计记录

task_history 表只允许插入，不提供更新或单独删除；
随所属任务级联删除。task_seq 同一任务内严格单调递增。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import HistoryAction


class FieldDiff(BaseModel):
    """单个受追踪字段的序列化差异"""

    field_name: str
    old_value: str | None = None
    new_value: str | None = None
    action: HistoryAction


class HistoryEntry(BaseModel):
    """HistoryEntry 数据模型

    一条记录对应一次保存中的一个字段变更。
    """

    history_id: str = Field(description="唯一标识，ULID 格式")
    task_id: str = Field(description="关联的 Task ID")
    user_id: str = Field(description="执行变更的用户 ID")
    task_seq: int = Field(description="任务内序号，严格单调递增")
    field_name: str = Field(description="变更字段名")
    old_value: str | None = Field(default=None, description="变更前序列化值")
    new_value: str | None = Field(default=None, description="变更后序列化值")
    action: HistoryAction = Field(description="动作类型")
    created_at: datetime = Field(description="记录时间")
