"""todoapp 异常体系

每个异常携带机器可读 code、HTTP 状态码与 details，
由 gateway 的异常处理器统一渲染为 {"error": {...}} 响应体。
"""

from typing import Any


class TodoAppError(Exception):
    """todoapp 基础异常"""

    default_message = "An error occurred"
    default_code = "API_ERROR"
    status_code = 400

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Args:
            message: 错误描述
            code: 机器可读错误码
            details: 附加信息
        """
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(TodoAppError):
    """输入或实体校验失败

    校验失败时不会写入任何历史记录。
    """

    default_message = "Validation failed. Please check your input."
    default_code = "VALIDATION_FAILED"
    status_code = 422

    def __init__(
        self,
        message: str | None = None,
        errors: dict[str, list[str]] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if errors:
            details["validation_errors"] = {
                field: list(dict.fromkeys(msgs)) for field, msgs in errors.items()
            }
        super().__init__(message, details=details)
        self.errors = errors or {}


class NotFoundError(TodoAppError):
    """资源不存在（或不属于当前用户）"""

    default_message = "The requested resource was not found."
    default_code = "RESOURCE_NOT_FOUND"
    status_code = 404

    def __init__(
        self,
        resource: str | None = None,
        resource_id: str | None = None,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["id"] = resource_id

        if message is None and resource and resource_id:
            message = f"{resource} with ID '{resource_id}' not found"
        elif message is None and resource:
            message = f"{resource} not found"

        super().__init__(message, details=details)


class AuthenticationError(TodoAppError):
    """调用方身份缺失或无效"""

    default_message = "Authentication required"
    default_code = "AUTHENTICATION_REQUIRED"
    status_code = 401


class AuthorizationError(TodoAppError):
    """调用方无权操作该资源"""

    default_message = "You are not authorized to perform this action"
    default_code = "FORBIDDEN"
    status_code = 403


class StorageError(TodoAppError):
    """持久化失败（事务已回滚）

    对外只暴露通用服务端错误，不泄露底层数据库信息。
    """

    default_message = "An unexpected error occurred"
    default_code = "INTERNAL_ERROR"
    status_code = 500
