"""TaskStore SQLite 实现

提供按 id 点查、按 (space_id, status_id) 的 position 有序范围查询，
以及对 (status_id, position) 的 compare-and-set 更新。
注意：写方法不自动提交事务，需由调用方管理事务。
"""

from datetime import datetime

import aiosqlite

from ..models.enums import StatusCategory
from ..models.space import WorkflowStatus
from ..models.task import Task

# 查询时总是 JOIN statuses，返回的 Task 带有解析后的列信息
_SELECT_TASK = """
SELECT t.task_id, t.space_id, t.status_id, t.position, t.key, t.number,
       t.title, t.description, t.created_at, t.updated_at,
       s.name, s.slug, s.color, s.position, s.category
FROM tasks t
JOIN statuses s ON s.status_id = t.status_id
"""


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        await self._conn.execute(
            """
            INSERT INTO tasks (task_id, space_id, status_id, position, key, number,
                               title, description, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.task_id,
                task.space_id,
                task.status_id,
                task.position,
                task.key,
                task.number,
                task.title,
                task.description,
                task.created_at.isoformat(),
                task.updated_at.isoformat(),
            ),
        )

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        cursor = await self._conn.execute(
            _SELECT_TASK + " WHERE t.task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def list_column_tasks(self, space_id: str, status_id: str) -> list[Task]:
        """查询某列的任务，按 position 升序"""
        cursor = await self._conn.execute(
            _SELECT_TASK
            + " WHERE t.space_id = ? AND t.status_id = ?"
            " ORDER BY t.position ASC, t.task_id ASC",
            (space_id, status_id),
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def list_space_tasks(self, space_id: str) -> list[Task]:
        """查询 space 下所有任务，按 position 升序"""
        cursor = await self._conn.execute(
            _SELECT_TASK + " WHERE t.space_id = ? ORDER BY t.position ASC, t.task_id ASC",
            (space_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def list_column_positions(
        self,
        space_id: str,
        status_id: str,
        exclude_task_id: str | None = None,
    ) -> list[tuple[str, float]]:
        """查询某列的 (task_id, position)，按 position 升序

        Args:
            exclude_task_id: 排除的任务（通常是正在移动的任务）
        """
        cursor = await self._conn.execute(
            """
            SELECT task_id, position FROM tasks
            WHERE space_id = ? AND status_id = ? AND task_id != ?
            ORDER BY position ASC, task_id ASC
            """,
            (space_id, status_id, exclude_task_id or ""),
        )
        rows = await cursor.fetchall()
        return [(row[0], row[1]) for row in rows]

    async def get_last_position(self, space_id: str, status_id: str) -> float | None:
        """列中最大的 position，空列返回 None"""
        cursor = await self._conn.execute(
            "SELECT MAX(position) FROM tasks WHERE space_id = ? AND status_id = ?",
            (space_id, status_id),
        )
        row = await cursor.fetchone()
        return row[0] if row else None

    async def get_next_number(self, space_id: str) -> int:
        """获取 space 内下一个任务序号（MAX+1），在事务内调用"""
        cursor = await self._conn.execute(
            "SELECT COALESCE(MAX(number), 0) FROM tasks WHERE space_id = ?",
            (space_id,),
        )
        row = await cursor.fetchone()
        return (row[0] if row else 0) + 1

    async def update_task_position(
        self,
        task_id: str,
        expected_status_id: str,
        expected_position: float,
        status_id: str,
        position: float,
        updated_at: str,
    ) -> bool:
        """compare-and-set 更新任务的列和 position

        仅当任务仍处于读取时的 (status_id, position) 才写入。

        Returns:
            True 如果写入成功，False 表示任务已被并发修改或删除
        """
        cursor = await self._conn.execute(
            """
            UPDATE tasks
            SET status_id = ?, position = ?, updated_at = ?
            WHERE task_id = ? AND status_id = ? AND position = ?
            """,
            (status_id, position, updated_at, task_id, expected_status_id, expected_position),
        )
        return cursor.rowcount == 1

    async def update_task_fields(
        self,
        task_id: str,
        title: str,
        description: str,
        updated_at: str,
    ) -> None:
        """更新标题与描述（与排序无关）"""
        await self._conn.execute(
            "UPDATE tasks SET title = ?, description = ?, updated_at = ? WHERE task_id = ?",
            (title, description, updated_at, task_id),
        )

    async def delete_task(self, task_id: str) -> None:
        await self._conn.execute("DELETE FROM tasks WHERE task_id = ?", (task_id,))

    @staticmethod
    def _row_to_task(row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            task_id=row[0],
            space_id=row[1],
            status_id=row[2],
            position=row[3],
            key=row[4],
            number=row[5],
            title=row[6],
            description=row[7],
            created_at=datetime.fromisoformat(row[8]),
            updated_at=datetime.fromisoformat(row[9]),
            status=WorkflowStatus(
                status_id=row[2],
                space_id=row[1],
                name=row[10],
                slug=row[11],
                color=row[12],
                position=row[13],
                category=StatusCategory(row[14]),
            ),
        )
