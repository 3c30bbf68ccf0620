"""TraceMiddleware -- 为单个任务的操作绑定 trace_id

路径形如 /api/v1/todos/{task_id}[/...] 时绑定 trace_id=trace-{task_id}，
同一任务的创建后更新、历史查询、评论日志可据此串联。
"""

import re

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ULID：26 位 Crockford Base32
_TODO_PATH_RE = re.compile(r"/todos/([0-9A-HJKMNP-TV-Z]{26})(?:/|$)")


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        match = _TODO_PATH_RE.search(request.url.path)
        if match:
            structlog.contextvars.bind_contextvars(trace_id=f"trace-{match.group(1)}")

        return await call_next(request)
