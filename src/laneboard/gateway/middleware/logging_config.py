"""structlog 配置模块

dev 模式：ConsoleRenderer 可读输出
json 模式：JSONRenderer 结构化输出，便于日志采集
Logfire APM：LOGFIRE_SEND_TO_LOGFIRE=true 时启用，否则仅本地日志。
"""

import logging
import os
from typing import TYPE_CHECKING

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from fastapi import FastAPI

SERVICE_NAME = "laneboard"


def _add_service_name(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """每条日志带上服务名，多服务汇聚时可区分来源"""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog 配置

    Args:
        log_format: "json" 或 "dev"，缺省读取 LANEBOARD_LOG_FORMAT
        log_level: 日志级别，缺省读取 LANEBOARD_LOG_LEVEL
    """
    log_format = log_format or os.environ.get("LANEBOARD_LOG_FORMAT", "dev")
    log_level = log_level or os.environ.get("LANEBOARD_LOG_LEVEL", "INFO")

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        _add_service_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: Processor
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # uvicorn 等标准库 logger 走同一个 formatter
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(_resolve_level(log_level))


def setup_logfire(app: "FastAPI | None" = None) -> None:
    """Logfire 可选初始化

    需安装 observability extra 并设置 LOGFIRE_SEND_TO_LOGFIRE=true（以及 LOGFIRE_TOKEN）。
    """
    if os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower() != "true":
        return
    try:
        import logfire

        logfire.configure(service_name=SERVICE_NAME)
        if app is not None:
            logfire.instrument_fastapi(app)
    except Exception as e:
        # APM 不可用时只保留本地日志，服务照常启动
        structlog.get_logger().warning(
            "logfire_init_failed",
            error_type=type(e).__name__,
        )
