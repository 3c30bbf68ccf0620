"""异常处理器 -- 统一渲染 {"error": {...}} 响应体"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse
from todoapp.core.exceptions import StorageError, TodoAppError, ValidationError

log = structlog.get_logger()


def _error_response(exc: TodoAppError) -> JSONResponse:
    body = exc.to_dict()
    request_id = structlog.contextvars.get_contextvars().get("request_id")
    if request_id:
        body["error"]["request_id"] = request_id
    return JSONResponse(status_code=exc.status_code, content=body)


async def handle_todoapp_error(request: Request, exc: TodoAppError) -> JSONResponse:
    if exc.status_code >= 500:
        await log.aerror(
            "request_failed",
            code=exc.code,
            cause=type(exc.__cause__).__name__ if exc.__cause__ else None,
        )
    else:
        await log.ainfo("request_rejected", code=exc.code, status_code=exc.status_code)
    return _error_response(exc)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """FastAPI 请求体/参数校验失败，按字段汇总为 validation_errors"""
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "request"
        errors.setdefault(field, []).append(err.get("msg", "invalid"))
    return _error_response(ValidationError(errors=errors))


def unexpected_error_response(exc: Exception) -> JSONResponse:
    """未预期异常统一渲染为 500，由 LoggingMiddleware 在请求上下文内调用"""
    log.exception("unhandled_exception", error_type=type(exc).__name__)
    return _error_response(StorageError())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TodoAppError, handle_todoapp_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
