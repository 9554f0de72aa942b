"""异常处理器 -- 将 BoardError 与请求校验错误渲染为统一错误响应体

{"error": {"code": ..., "message": ..., "retryable": ...}}
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from laneboard.core.exceptions import BoardError
from starlette.responses import JSONResponse

log = structlog.get_logger()


def error_body(code: str, message: str, retryable: bool = False) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "retryable": retryable,
        }
    }


async def board_error_handler(request: Request, exc: BoardError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("request_failed", code=exc.code, error=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, exc.retryable),
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # 只取第一条，字段路径用点号连接
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content=error_body(
            "VALIDATION_ERROR",
            f"{location}: {message}" if location else message,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BoardError, board_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
