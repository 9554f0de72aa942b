"""全局 pytest 配置 -- 临时 SQLite 数据库、测试 app 与看板 fixture"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from ulid import ULID


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"


@pytest_asyncio.fixture
async def store_group(tmp_db_path: Path):
    """提供已初始化的 StoreGroup"""
    from laneboard.core.store import create_store_group

    group = await create_store_group(str(tmp_db_path))
    yield group
    await group.conn.close()


@pytest_asyncio.fixture
async def app(tmp_db_path: Path, store_group, monkeypatch: pytest.MonkeyPatch):
    """创建测试用 FastAPI app 实例

    ASGITransport 不触发 lifespan，这里直接装配 app.state。
    """
    monkeypatch.setenv("LANEBOARD_DB_PATH", str(tmp_db_path))
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")

    from laneboard.gateway.main import create_app
    from laneboard.gateway.services.realtime_hub import RealtimeHub

    application = create_app()
    application.state.store_group = store_group
    application.state.realtime_hub = RealtimeHub()
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def board(store_group):
    """SCRUM space 及默认五列（Backlog / To Do / In Progress / In Review / Done）"""
    from laneboard.gateway.services.space_service import SpaceService

    return await SpaceService(store_group).create_space("Scrum", "scrum")


@pytest.fixture
def columns(board) -> dict[str, str]:
    """列名 -> status_id"""
    return {c.name: c.status_id for c in board.columns}


@pytest.fixture
def insert_task(store_group, board):
    """直接写入一条指定 position 的任务（不产生 activity）"""
    from laneboard.core.models import Task
    from laneboard.core.store import immediate_transaction

    counter = {"number": 0}

    async def _insert(status_id: str, position: float, title: str | None = None):
        counter["number"] += 1
        number = counter["number"]
        now = datetime.now(UTC)
        task = Task(
            task_id=str(ULID()),
            space_id=board.space.space_id,
            status_id=status_id,
            position=position,
            key=f"{board.space.key}-{number}",
            number=number,
            title=title or f"task {number}",
            created_at=now,
            updated_at=now,
        )
        async with store_group.tx_lock:
            async with immediate_transaction(store_group.conn):
                await store_group.task_store.create_task(task)
        return await store_group.task_store.get_task(task.task_id)

    return _insert
