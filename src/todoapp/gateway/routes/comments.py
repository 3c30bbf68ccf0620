"""任务评论路由

GET    /api/v1/todos/{task_id}/comments: 未删除评论，按时间正序
POST   /api/v1/todos/{task_id}/comments: 新增评论
PATCH  /api/v1/todos/{task_id}/comments/{comment_id}: 编辑内容（仅作者，创建后 15 分钟内）
DELETE /api/v1/todos/{task_id}/comments/{comment_id}: 软删除（仅作者）
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from starlette.responses import Response
from todoapp.core.models import Comment, User

from ..deps import get_current_user, get_store_group
from ..services.comment_service import CommentService

router = APIRouter(prefix="/api/v1/todos")


class CommentCreateRequest(BaseModel):
    content: str


class CommentUpdateRequest(BaseModel):
    content: str


class CommentResponse(BaseModel):
    id: str
    content: str
    user_id: str
    editable: bool
    created_at: str
    updated_at: str


def to_response(comment: Comment, viewer: User) -> CommentResponse:
    # 仅作者且仍在编辑窗口内
    editable = comment.user_id == viewer.user_id and comment.is_editable(datetime.now(UTC))
    return CommentResponse(
        id=comment.comment_id,
        content=comment.content,
        user_id=comment.user_id,
        editable=editable,
        created_at=comment.created_at.isoformat(),
        updated_at=comment.updated_at.isoformat(),
    )


@router.get("/{task_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    task_id: str,
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    service = CommentService(store_group)
    comments = await service.list_comments(user, task_id)
    return [to_response(c, user) for c in comments]


@router.post("/{task_id}/comments", response_model=CommentResponse, status_code=201)
async def create_comment(
    task_id: str,
    body: CommentCreateRequest,
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    service = CommentService(store_group)
    comment = await service.create_comment(user, task_id, body.content)
    return to_response(comment, user)


@router.patch("/{task_id}/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    task_id: str,
    comment_id: str,
    body: CommentUpdateRequest,
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    service = CommentService(store_group)
    comment = await service.update_comment(user, task_id, comment_id, body.content)
    return to_response(comment, user)


@router.delete("/{task_id}/comments/{comment_id}", status_code=204)
async def delete_comment(
    task_id: str,
    comment_id: str,
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    service = CommentService(store_group)
    await service.delete_comment(user, task_id, comment_id)
    return Response(status_code=204)
