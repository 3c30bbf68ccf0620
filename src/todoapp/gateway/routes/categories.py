"""分类路由

GET    /api/v1/categories: 当前用户的分类（按名称排序）
POST   /api/v1/categories: 新建分类
GET    /api/v1/categories/{category_id}: 分类详情
PATCH  /api/v1/categories/{category_id}: 修改名称/颜色
DELETE /api/v1/categories/{category_id}: 删除分类，关联任务变为未分类
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from starlette.responses import Response
from todoapp.core.models import Category, User

from ..deps import get_current_user, get_store_group
from ..services.category_service import CategoryService

router = APIRouter(prefix="/api/v1/categories")


class CategoryCreateRequest(BaseModel):
    name: str
    color: str | None = None


class CategoryUpdateRequest(BaseModel):
    name: str | None = None
    color: str | None = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    color: str
    created_at: str
    updated_at: str


def to_response(category: Category) -> CategoryResponse:
    return CategoryResponse(
        id=category.category_id,
        name=category.name,
        color=category.color,
        created_at=category.created_at.isoformat(),
        updated_at=category.updated_at.isoformat(),
    )


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    service = CategoryService(store_group)
    return [to_response(c) for c in await service.list_categories(user)]


@router.post("", response_model=CategoryResponse, status_code=201)
async def create_category(
    body: CategoryCreateRequest,
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    service = CategoryService(store_group)
    category = await service.create_category(user, body.name, body.color)
    return to_response(category)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: str,
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    service = CategoryService(store_group)
    return to_response(await service.get_category(user, category_id))


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    body: CategoryUpdateRequest,
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    service = CategoryService(store_group)
    category = await service.update_category(user, category_id, body.name, body.color)
    return to_response(category)


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: str,
    user: User = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    service = CategoryService(store_group)
    await service.delete_category(user, category_id)
    return Response(status_code=204)
