"""TaskService -- 任务创建/更新/删除/查询

创建时任务被追加到初始列的列尾；标题与描述的修改与排序无关。
每个写操作在单个事务内完成，提交后再广播对应的实时事件。
"""

from datetime import UTC, datetime

import structlog
from laneboard.core.exceptions import (
    SpaceNotFoundError,
    StatusNotFoundError,
    StatusSpaceMismatchError,
    TaskNotFoundError,
)
from laneboard.core.models import (
    Activity,
    ActivityAction,
    RealtimeEventType,
    Task,
    TaskDeletedPayload,
    space_topic,
)
from laneboard.core.ordering import append_position
from laneboard.core.store import StoreGroup, immediate_transaction
from ulid import ULID

from .realtime_hub import RealtimeHub

log = structlog.get_logger()


class TaskService:
    """任务业务服务"""

    def __init__(self, store_group: StoreGroup, realtime_hub: RealtimeHub | None = None) -> None:
        self._stores = store_group
        self._hub = realtime_hub

    async def create_task(
        self,
        space_id: str,
        status_id: str,
        title: str,
        actor_id: str,
        description: str = "",
    ) -> Task:
        """创建任务并追加到初始列的列尾

        Raises:
            SpaceNotFoundError / StatusNotFoundError: 引用不存在
            StatusSpaceMismatchError: 列不属于该 space
        """
        async with self._stores.tx_lock:
            async with immediate_transaction(self._stores.conn):
                space = await self._stores.space_store.get_space(space_id)
                if space is None:
                    raise SpaceNotFoundError(space_id)
                status = await self._stores.space_store.get_status(status_id)
                if status is None:
                    raise StatusNotFoundError(status_id)
                if status.space_id != space_id:
                    raise StatusSpaceMismatchError(status_id, space_id)

                number = await self._stores.task_store.get_next_number(space_id)
                last_position = await self._stores.task_store.get_last_position(
                    space_id, status_id
                )
                now = datetime.now(UTC)
                task_id = str(ULID())
                await self._stores.task_store.create_task(
                    Task(
                        task_id=task_id,
                        space_id=space_id,
                        status_id=status_id,
                        position=append_position(last_position),
                        key=f"{space.key}-{number}",
                        number=number,
                        title=title,
                        description=description,
                        created_at=now,
                        updated_at=now,
                    )
                )
                await self._stores.activity_store.append_activity(
                    Activity(
                        activity_id=str(ULID()),
                        task_id=task_id,
                        actor_id=actor_id,
                        action=ActivityAction.CREATED,
                        ts=now,
                    )
                )
                task = await self._stores.task_store.get_task(task_id)

            await self._publish(task.space_id, RealtimeEventType.TASK_CREATED, task.to_wire())

        log.info("task_created", task_id=task.task_id, key=task.key, position=task.position)
        return task

    async def update_task(
        self,
        task_id: str,
        actor_id: str,
        title: str | None = None,
        description: str | None = None,
    ) -> Task:
        """更新标题/描述，不改变 position"""
        async with self._stores.tx_lock:
            async with immediate_transaction(self._stores.conn):
                existing = await self._stores.task_store.get_task(task_id)
                if existing is None:
                    raise TaskNotFoundError(task_id)

                now = datetime.now(UTC)
                await self._stores.task_store.update_task_fields(
                    task_id=task_id,
                    title=title if title is not None else existing.title,
                    description=(
                        description if description is not None else existing.description
                    ),
                    updated_at=now.isoformat(),
                )
                await self._stores.activity_store.append_activity(
                    Activity(
                        activity_id=str(ULID()),
                        task_id=task_id,
                        actor_id=actor_id,
                        action=ActivityAction.UPDATED,
                        field="general",
                        ts=now,
                    )
                )
                task = await self._stores.task_store.get_task(task_id)

            await self._publish(task.space_id, RealtimeEventType.TASK_UPDATED, task.to_wire())

        return task

    async def delete_task(self, task_id: str) -> None:
        """删除任务；其 activity 保留"""
        async with self._stores.tx_lock:
            async with immediate_transaction(self._stores.conn):
                existing = await self._stores.task_store.get_task(task_id)
                if existing is None:
                    raise TaskNotFoundError(task_id)
                await self._stores.task_store.delete_task(task_id)

            await self._publish(
                existing.space_id,
                RealtimeEventType.TASK_DELETED,
                TaskDeletedPayload(task_id=task_id).to_wire(),
            )

        log.info("task_deleted", task_id=task_id)

    # 读操作同样持有 tx_lock：共享连接上未提交的写对同一连接可见
    async def get_task(self, task_id: str) -> Task:
        async with self._stores.tx_lock:
            task = await self._stores.task_store.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def list_column_tasks(self, space_id: str, status_id: str) -> list[Task]:
        """查询某列任务，按 position 升序"""
        async with self._stores.tx_lock:
            return await self._stores.task_store.list_column_tasks(space_id, status_id)

    async def list_activities(self, task_id: str, limit: int = 20) -> list[Activity]:
        """查询任务的 activity，最新的在前"""
        async with self._stores.tx_lock:
            return await self._stores.activity_store.list_for_task(task_id, limit)

    async def _publish(self, space_id: str, event: RealtimeEventType, data: dict) -> None:
        if self._hub:
            await self._hub.publish(space_topic(space_id), event, data)
