"""SpaceService -- space 创建与看板视图

新建 space 时一并创建默认工作流的五个列。
"""

from datetime import UTC, datetime

import aiosqlite
import structlog
from laneboard.core.exceptions import SpaceKeyConflictError, SpaceNotFoundError
from laneboard.core.models import (
    DEFAULT_STATUSES,
    BoardColumn,
    BoardView,
    Space,
    WorkflowStatus,
)
from laneboard.core.store import StoreGroup, immediate_transaction
from ulid import ULID

log = structlog.get_logger()


class SpaceService:
    """Space 业务服务"""

    def __init__(self, store_group: StoreGroup) -> None:
        self._stores = store_group

    async def create_space(self, name: str, key: str) -> BoardView:
        """创建 space 及默认列

        Returns:
            新 space 的看板视图（所有列为空）

        Raises:
            SpaceKeyConflictError: key 已被占用
        """
        key = key.upper()
        space = Space(
            space_id=str(ULID()),
            key=key,
            name=name,
            created_at=datetime.now(UTC),
        )
        statuses = [
            WorkflowStatus(
                status_id=str(ULID()),
                space_id=space.space_id,
                name=status_name,
                slug=slug,
                color=color,
                position=index,
                category=category,
            )
            for index, (status_name, slug, color, category) in enumerate(DEFAULT_STATUSES)
        ]

        async with self._stores.tx_lock:
            try:
                async with immediate_transaction(self._stores.conn):
                    if await self._stores.space_store.get_space_by_key(key) is not None:
                        raise SpaceKeyConflictError(key)
                    await self._stores.space_store.create_space(space)
                    for status in statuses:
                        await self._stores.space_store.create_status(status)
            except aiosqlite.IntegrityError as e:
                # 其他进程并发创建了相同 key
                raise SpaceKeyConflictError(key) from e

        log.info("space_created", space_id=space.space_id, key=key)
        return BoardView(
            space=space,
            columns=[BoardColumn(**s.model_dump()) for s in statuses],
        )

    async def get_space(self, space_id: str) -> Space:
        async with self._stores.tx_lock:
            space = await self._stores.space_store.get_space(space_id)
        if space is None:
            raise SpaceNotFoundError(space_id)
        return space

    async def get_board(self, space_id: str) -> BoardView:
        """看板视图：列按列顺序，列内任务按 position 升序

        共享连接上的读同样持有 tx_lock，只能看到已提交的数据。
        """
        async with self._stores.tx_lock:
            space = await self._stores.space_store.get_space(space_id)
            if space is None:
                raise SpaceNotFoundError(space_id)
            statuses = await self._stores.space_store.list_statuses(space_id)
            tasks = await self._stores.task_store.list_space_tasks(space_id)

        columns = [
            BoardColumn(
                **status.model_dump(),
                tasks=[t for t in tasks if t.status_id == status.status_id],
            )
            for status in statuses
        ]
        return BoardView(space=space, columns=columns)
