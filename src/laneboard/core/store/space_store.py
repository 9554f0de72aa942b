"""SpaceStore SQLite 实现 -- spaces 与 statuses（看板列）

注意：写方法不自动提交事务，需由调用方管理事务。
"""

from datetime import datetime

import aiosqlite

from ..models.enums import StatusCategory
from ..models.space import Space, WorkflowStatus

_STATUS_COLUMNS = "status_id, space_id, name, slug, color, position, category"


class SqliteSpaceStore:
    """SpaceStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_space(self, space: Space) -> None:
        """创建 space 记录"""
        await self._conn.execute(
            "INSERT INTO spaces (space_id, key, name, created_at) VALUES (?, ?, ?, ?)",
            (space.space_id, space.key, space.name, space.created_at.isoformat()),
        )

    async def get_space(self, space_id: str) -> Space | None:
        cursor = await self._conn.execute(
            "SELECT space_id, key, name, created_at FROM spaces WHERE space_id = ?",
            (space_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_space(row)

    async def get_space_by_key(self, key: str) -> Space | None:
        cursor = await self._conn.execute(
            "SELECT space_id, key, name, created_at FROM spaces WHERE key = ?",
            (key,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_space(row)

    async def create_status(self, status: WorkflowStatus) -> None:
        """创建看板列"""
        await self._conn.execute(
            f"INSERT INTO statuses ({_STATUS_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                status.status_id,
                status.space_id,
                status.name,
                status.slug,
                status.color,
                status.position,
                status.category.value,
            ),
        )

    async def get_status(self, status_id: str) -> WorkflowStatus | None:
        cursor = await self._conn.execute(
            f"SELECT {_STATUS_COLUMNS} FROM statuses WHERE status_id = ?",
            (status_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_status(row)

    async def list_statuses(self, space_id: str) -> list[WorkflowStatus]:
        """查询 space 的所有列，按列顺序"""
        cursor = await self._conn.execute(
            f"SELECT {_STATUS_COLUMNS} FROM statuses WHERE space_id = ? "
            "ORDER BY position ASC",
            (space_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_status(row) for row in rows]

    @staticmethod
    def _row_to_space(row) -> Space:
        return Space(
            space_id=row[0],
            key=row[1],
            name=row[2],
            created_at=datetime.fromisoformat(row[3]),
        )

    @staticmethod
    def _row_to_status(row) -> WorkflowStatus:
        return WorkflowStatus(
            status_id=row[0],
            space_id=row[1],
            name=row[2],
            slug=row[3],
            color=row[4],
            position=row[5],
            category=StatusCategory(row[6]),
        )
