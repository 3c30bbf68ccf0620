"""用户路由

POST /api/v1/users: 注册用户（无需 X-User-Id）
GET  /api/v1/users/me: 当前用户
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from todoapp.core.models import User

from ..deps import get_current_user, get_store_group
from ..services.user_service import UserService

router = APIRouter(prefix="/api/v1/users")


class UserCreateRequest(BaseModel):
    name: str
    email: str


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    created_at: str


def to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.user_id,
        name=user.name,
        email=user.email,
        created_at=user.created_at.isoformat(),
    )


@router.post("", response_model=UserResponse, status_code=201)
async def register_user(
    body: UserCreateRequest,
    store_group=Depends(get_store_group),
):
    service = UserService(store_group)
    return to_response(await service.register(body.name, body.email))


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)):
    return to_response(user)
