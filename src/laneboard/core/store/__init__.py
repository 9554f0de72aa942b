"""LaneBoard Core Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

import asyncio
from pathlib import Path

import aiosqlite

from .activity_store import SqliteActivityStore
from .space_store import SqliteSpaceStore
from .sqlite_init import init_db
from .task_store import SqliteTaskStore
from .transaction import TaskMoveConflictError, immediate_transaction, run_to_completion


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接

    一个连接同一时刻只能承载一个事务，所有写事务需持有 tx_lock；
    同一连接能看到自身未提交的写，读操作同样需持有 tx_lock。
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.tx_lock = asyncio.Lock()
        self.space_store = SqliteSpaceStore(conn)
        self.task_store = SqliteTaskStore(conn)
        self.activity_store = SqliteActivityStore(conn)


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return StoreGroup(conn=conn)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "SqliteSpaceStore",
    "SqliteTaskStore",
    "SqliteActivityStore",
    "TaskMoveConflictError",
    "immediate_transaction",
    "run_to_completion",
    "init_db",
]
