"""任务路由

GET    /api/v1/todos: 任务列表，支持 status/priority/category_id/q 筛选
POST   /api/v1/todos: 创建任务（写入 created 历史）
PATCH  /api/v1/todos/order: 批量调整排序（不产生历史）
GET    /api/v1/todos/{task_id}: 任务详情
PATCH  /api/v1/todos/{task_id}: 部分更新（逐字段写入历史）
DELETE /api/v1/todos/{task_id}: 删除任务（历史与评论级联删除）
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from starlette.responses import Response
from todoapp.core.models import Task, TaskPriority, TaskStatus, User

from ..deps import get_current_user, get_store_group
from ..services.task_service import TaskService

router = APIRouter(prefix="/api/v1/todos")


class TodoCreateRequest(BaseModel):
    """任务创建请求体"""

    title: str = Field(description="标题（必填）")
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: date | None = None
    completed: bool | None = None
    category_id: str | None = None


class TodoUpdateRequest(BaseModel):
    """任务更新请求体 -- 只有显式传入的字段参与更新"""

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: date | None = None
    completed: bool | None = None
    category_id: str | None = None
    position: int | None = None


class TodoPosition(BaseModel):
    id: str
    position: int


class TodoOrderRequest(BaseModel):
    todos: list[TodoPosition] = Field(min_length=1)


class TodoResponse(BaseModel):
    """任务响应"""

    id: str
    user_id: str
    title: str
    description: str | None
    status: str
    priority: str
    due_date: str | None
    completed: bool
    category_id: str | None
    position: int
    created_at: str
    updated_at: str


class TodoDetailResponse(TodoResponse):
    """任务详情响应（附带历史与评论计数）"""

    history_count: int
    comments_count: int


def to_response(task: Task) -> TodoResponse:
    return TodoResponse(
        id=task.task_id,
        user_id=task.user_id,
        title=task.title,
        description=task.description,
        status=task.status.value,
        priority=task.priority.value,
        due_date=task.due_date.isoformat() if task.due_date else None,
        completed=task.completed,
        category_id=task.category_id,
        position=task.position,
        created_at=task.created_at.isoformat(),
        updated_at=task.updated_at.isoformat(),
    )


@router.get("", response_model=list[TodoResponse])
async def list_todos(
    status: TaskStatus | None = Query(default=None, description="按状态筛选"),
    priority: TaskPriority | None = Query(default=None, description="按优先级筛选"),
    category_id: str | None = Query(default=None, description="按分类筛选"),
    q: str | None = Query(default=None, description="标题/说明模糊搜索"),
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    """查询当前用户的任务，按 position 排序"""
    service = TaskService(store_group)
    tasks = await service.list_tasks(
        user,
        status=status.value if status else None,
        priority=priority.value if priority else None,
        category_id=category_id,
        query=q,
    )
    return [to_response(t) for t in tasks]


@router.post("", response_model=TodoResponse, status_code=201)
async def create_todo(
    body: TodoCreateRequest,
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    service = TaskService(store_group)
    task = await service.create_task(user, body.model_dump())
    return to_response(task)


@router.patch("/order")
async def update_order(
    body: TodoOrderRequest,
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    """批量更新排序，包含不属于当前用户的 ID 时整体 404"""
    service = TaskService(store_group)
    await service.reorder(user, [(t.id, t.position) for t in body.todos])
    return {"message": "Todo order updated successfully"}


@router.get("/{task_id}", response_model=TodoDetailResponse)
async def get_todo(
    task_id: str,
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    service = TaskService(store_group)
    task, history_count, comments_count = await service.get_task_detail(user, task_id)
    return TodoDetailResponse(
        **to_response(task).model_dump(),
        history_count=history_count,
        comments_count=comments_count,
    )


@router.patch("/{task_id}", response_model=TodoResponse)
async def update_todo(
    task_id: str,
    body: TodoUpdateRequest,
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    """部分更新任务

    - 校验失败返回 422，不写入任何历史
    - 历史写入失败时任务变更一并回滚，返回 500
    """
    service = TaskService(store_group)
    task, _ = await service.update_task(user, task_id, body.model_dump(exclude_unset=True))
    return to_response(task)


@router.delete("/{task_id}", status_code=204)
async def delete_todo(
    task_id: str,
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    service = TaskService(store_group)
    await service.delete_task(user, task_id)
    return Response(status_code=204)
