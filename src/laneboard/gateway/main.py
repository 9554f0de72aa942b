"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + RealtimeHub 初始化 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from laneboard import __version__
from laneboard.core.config import get_db_path
from laneboard.core.store import create_store_group

from .errors import register_error_handlers
from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import health, spaces, stream, tasks
from .services.realtime_hub import RealtimeHub

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB 与广播器，关闭时清理连接"""
    db_path = get_db_path()
    store_group = await create_store_group(db_path)
    app.state.store_group = store_group
    app.state.realtime_hub = RealtimeHub()
    log.info("laneboard_started", db_path=db_path)

    yield

    if getattr(app.state, "store_group", None):
        await app.state.store_group.conn.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="LaneBoard Gateway",
        version=__version__,
        description="看板任务排序、移动与实时同步 API",
        lifespan=lifespan,
    )

    # 注册中间件（后添加的在外层：Logging 先清理上下文，Trace 再绑定）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()
    setup_logfire(app)

    register_error_handlers(app)

    app.include_router(spaces.router, tags=["spaces"])
    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(stream.router, tags=["stream"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
