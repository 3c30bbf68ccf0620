"""structlog 配置模块

TODOAPP_LOG_FORMAT=json 输出结构化 JSON，其余取值使用可读的 console 输出。
uvicorn / aiosqlite 等第三方 logger 经 ProcessorFormatter 统一渲染，
并共享 request_id / trace_id 等 contextvars。
"""

import logging
import os

import structlog
from fastapi import FastAPI

# 第三方 logger 的默认级别，避免 DEBUG 时刷屏
_QUIET_LOGGERS: dict[str, int] = {
    "aiosqlite": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}


def _build_renderers(log_format: str) -> list[structlog.types.Processor]:
    if log_format == "json":
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    # ConsoleRenderer 自行渲染异常堆栈
    return [structlog.dev.ConsoleRenderer()]


def setup_logging() -> None:
    """初始化 structlog 与标准库 logging

    环境变量：
    - TODOAPP_LOG_FORMAT: "dev"（默认）或 "json"
    - TODOAPP_LOG_LEVEL: 根 logger 级别，默认 INFO
    """
    log_format = os.environ.get("TODOAPP_LOG_FORMAT", "dev").lower()
    log_level = os.environ.get("TODOAPP_LOG_LEVEL", "INFO").upper()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_build_renderers(log_format),
            ],
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    for name, level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def setup_logfire(app: FastAPI) -> None:
    """Logfire 可选初始化

    LOGFIRE_SEND_TO_LOGFIRE=true 时启用（需要 LOGFIRE_TOKEN），
    未安装 logfire 或初始化失败时保留本地日志继续运行。
    """
    if os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower() != "true":
        return
    try:
        import logfire

        logfire.configure(service_name="todoapp")
        logfire.instrument_fastapi(app)
    except Exception:
        structlog.get_logger().warning(
            "logfire_init_failed",
            message="Logfire 初始化失败，仅输出本地日志",
        )
