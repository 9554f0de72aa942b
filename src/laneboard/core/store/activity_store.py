"""ActivityStore SQLite 实现

activities 表 append-only：只允许插入，不允许更新或删除。
"""

from datetime import datetime

import aiosqlite

from ..models.activity import Activity
from ..models.enums import ActivityAction


class SqliteActivityStore:
    """ActivityStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def append_activity(self, activity: Activity) -> None:
        """追加 activity

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            """
            INSERT INTO activities (activity_id, task_id, actor_id, action,
                                    field, old_value, new_value, ts)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                activity.activity_id,
                activity.task_id,
                activity.actor_id,
                activity.action.value,
                activity.field,
                activity.old_value,
                activity.new_value,
                activity.ts.isoformat(),
            ),
        )

    async def list_for_task(self, task_id: str, limit: int = 20) -> list[Activity]:
        """查询任务的 activity，最新的在前"""
        cursor = await self._conn.execute(
            """
            SELECT activity_id, task_id, actor_id, action, field, old_value, new_value, ts
            FROM activities WHERE task_id = ?
            ORDER BY ts DESC, activity_id DESC
            LIMIT ?
            """,
            (task_id, limit),
        )
        rows = await cursor.fetchall()
        return [self._row_to_activity(row) for row in rows]

    @staticmethod
    def _row_to_activity(row) -> Activity:
        return Activity(
            activity_id=row[0],
            task_id=row[1],
            actor_id=row[2],
            action=ActivityAction(row[3]),
            field=row[4],
            old_value=row[5],
            new_value=row[6],
            ts=datetime.fromisoformat(row[7]),
        )
