"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store 实例与当前用户

Store 实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

import structlog
from fastapi import Depends, Header, Request
from todoapp.core.exceptions import AuthenticationError
from todoapp.core.models import User
from todoapp.core.store import StoreGroup


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


async def get_current_user(
    x_user_id: str | None = Header(default=None),
    store_group: StoreGroup = Depends(get_store_group),
) -> User:
    """根据 X-User-Id 请求头解析当前用户

    认证本身不在本服务范围内，请求头缺失或用户不存在时返回 401。
    """
    if not x_user_id:
        raise AuthenticationError()
    user = await store_group.user_store.get_user(x_user_id)
    if user is None:
        raise AuthenticationError()
    structlog.contextvars.bind_contextvars(user_id=user.user_id)
    return user
