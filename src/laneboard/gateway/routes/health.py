"""健康检查路由

GET /health: 存活检查，进程在即返回 200。
GET /ready: 就绪检查，数据库可写路径（连通 + WAL）与磁盘空间均正常才返回 200。
"""

import shutil

import aiosqlite
import structlog
from fastapi import APIRouter, Depends
from laneboard.core.config import get_db_path
from laneboard.core.store.sqlite_init import verify_wal_mode
from starlette.responses import JSONResponse

from ..deps import get_realtime_hub, get_store_group

log = structlog.get_logger()

router = APIRouter()

# 低于该剩余空间视为未就绪
MIN_FREE_DISK_MB = 64


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/ready")
async def ready(
    store_group=Depends(get_store_group),
    realtime_hub=Depends(get_realtime_hub),
):
    """就绪检查

    sqlite 与 disk_space_mb 决定整体状态；realtime_topics 仅作展示。
    """
    checks: dict[str, object] = {}

    try:
        cursor = await store_group.conn.execute("SELECT 1")
        await cursor.fetchone()
        checks["sqlite"] = "ok" if await verify_wal_mode(store_group.conn) else "error: not in WAL mode"
    except aiosqlite.Error as e:
        log.warning("readiness_sqlite_failed", error=str(e))
        checks["sqlite"] = f"error: {e}"

    try:
        free_mb = shutil.disk_usage(get_db_path()).free // (1024 * 1024)
    except OSError:
        free_mb = 0
    checks["disk_space_mb"] = free_mb

    checks["realtime_topics"] = realtime_hub.topic_count()

    is_ready = checks["sqlite"] == "ok" and free_mb >= MIN_FREE_DISK_MB
    return JSONResponse(
        status_code=200 if is_ready else 503,
        content={"status": "ready" if is_ready else "not_ready", "checks": checks},
    )
