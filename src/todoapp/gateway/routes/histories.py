"""任务变更历史路由

GET /api/v1/todos/{task_id}/histories: created_at 倒序返回历史记录，
附带执行者与可读化描述。
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from todoapp.core.config import HISTORY_DEFAULT_LIMIT
from todoapp.core.models import User

from ..deps import get_current_user, get_store_group
from ..services.history_service import HistoryService, HistoryView

router = APIRouter(prefix="/api/v1/todos")


class HistoryUser(BaseModel):
    id: str
    name: str
    email: str


class HistoryResponse(BaseModel):
    """历史记录响应项"""

    id: str
    field_name: str
    old_value: str | None
    new_value: str | None
    action: str
    created_at: str
    human_readable_change: str
    user: HistoryUser | None


def to_response(view: HistoryView) -> HistoryResponse:
    entry = view.entry
    return HistoryResponse(
        id=entry.history_id,
        field_name=entry.field_name,
        old_value=entry.old_value,
        new_value=entry.new_value,
        action=entry.action.value,
        created_at=entry.created_at.isoformat(),
        human_readable_change=view.human_readable_change,
        user=(
            HistoryUser(id=view.user.user_id, name=view.user.name, email=view.user.email)
            if view.user
            else None
        ),
    )


@router.get("/{task_id}/histories", response_model=list[HistoryResponse])
async def list_histories(
    task_id: str,
    limit: int = Query(default=HISTORY_DEFAULT_LIMIT, description="返回条数，超出上限时截断"),
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    """查询任务历史，任务不属于当前用户时返回 404"""
    service = HistoryService(store_group)
    views = await service.list_history(user, task_id, limit=limit)
    return [to_response(v) for v in views]
