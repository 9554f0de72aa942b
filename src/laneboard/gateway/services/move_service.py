"""MoveService -- 任务跨列移动 / 列内重排

一次移动在单个写事务内完成：
1. 读取任务（不存在则 TaskNotFoundError）
2. 校验目标列存在且属于同一 space
3. 读取目标列其他任务的 position
4. 由排序引擎计算新 position
5. compare-and-set 写入 (status_id, position)
6. 追加一条 activity（STATUS_CHANGED 或 MOVED）
提交之后再向 space topic 发布 task:moved；失败时既无写入也无事件。
"""

import asyncio
import sqlite3
from datetime import UTC, datetime

import aiosqlite
import structlog
from laneboard.core.config import MOVE_MAX_RETRIES, MOVE_TX_TIMEOUT_S
from laneboard.core.exceptions import (
    ConcurrentMoveError,
    CrossSpaceMoveError,
    MoveTimeoutError,
    PersistenceError,
    StatusNotFoundError,
    TaskNotFoundError,
    TransientWriteError,
)
from laneboard.core.models import (
    Activity,
    ActivityAction,
    MoveTaskRequest,
    RealtimeEventType,
    Task,
    TaskMovedPayload,
    space_topic,
)
from laneboard.core.ordering import compute_position
from laneboard.core.store import (
    StoreGroup,
    TaskMoveConflictError,
    immediate_transaction,
    run_to_completion,
)
from ulid import ULID

from .realtime_hub import RealtimeHub

log = structlog.get_logger()


# 扩展错误码的低 8 位为主错误码
_LOCK_CONTENTION_CODES = {sqlite3.SQLITE_BUSY, sqlite3.SQLITE_LOCKED}


def _is_lock_contention(error: aiosqlite.OperationalError) -> bool:
    code = getattr(error, "sqlite_errorcode", None)
    return code is not None and code & 0xFF in _LOCK_CONTENTION_CODES


class MoveService:
    """任务移动协调器"""

    def __init__(
        self,
        store_group: StoreGroup,
        realtime_hub: RealtimeHub | None = None,
        tx_timeout_s: float = MOVE_TX_TIMEOUT_S,
        max_retries: int = MOVE_MAX_RETRIES,
    ) -> None:
        self._stores = store_group
        self._hub = realtime_hub
        self._tx_timeout_s = tx_timeout_s
        self._max_retries = max(1, max_retries)

    async def move_task(self, request: MoveTaskRequest, actor_id: str) -> Task:
        """移动任务到目标列的目标下标

        Args:
            request: 移动请求；target_position 为 None 时追加到列尾
            actor_id: 操作者标识，仅用于 activity 归属

        Returns:
            移动后的任务（含解析后的列信息与新 position）

        Raises:
            TaskNotFoundError / StatusNotFoundError: 引用不存在
            CrossSpaceMoveError: 目标列属于其他 space
            PositionExhaustedError: 目标位置已无可用间隙
            ConcurrentMoveError: 并发修改且重试耗尽（可重试）
            TransientWriteError / MoveTimeoutError: 锁等待超限（可重试）
            PersistenceError: 存储不可用

        已受理的移动运行至结束：调用方被取消（如客户端断开）时移动仍会完成并发布事件。
        """
        return await run_to_completion(self._move_with_retries(request, actor_id))

    async def _move_with_retries(self, request: MoveTaskRequest, actor_id: str) -> Task:
        log.info(
            "task_move_started",
            task_id=request.task_id,
            target_status_id=request.target_status_id,
            target_position=request.target_position,
        )
        for attempt in range(1, self._max_retries + 1):
            try:
                moved = await self._move_once(request, actor_id)
            except TaskMoveConflictError:
                log.warning(
                    "task_move_conflict_retry",
                    task_id=request.task_id,
                    attempt=attempt,
                )
                continue
            except Exception as e:
                log.warning(
                    "task_move_failed",
                    task_id=request.task_id,
                    error_type=type(e).__name__,
                )
                raise
            return moved

        raise ConcurrentMoveError(request.task_id, self._max_retries)

    async def _move_once(self, request: MoveTaskRequest, actor_id: str) -> Task:
        """执行一次移动事务，提交成功后发布事件"""
        try:
            async with asyncio.timeout(self._tx_timeout_s) as deadline:
                async with self._stores.tx_lock:
                    async with immediate_transaction(self._stores.conn):
                        moved, from_status_id = await self._apply_move(
                            request, actor_id
                        )
                        # 只剩提交：提交不受超时约束，避免已落盘却报告失败
                        deadline.reschedule(None)
                    # 在锁内、提交之后发布：同一 space 的事件顺序与提交顺序一致
                    await self._publish_moved(moved, from_status_id)
        except TimeoutError as e:
            raise MoveTimeoutError(request.task_id, self._tx_timeout_s) from e
        except aiosqlite.OperationalError as e:
            if _is_lock_contention(e):
                raise TransientWriteError(
                    f"Store is busy, move of task {request.task_id} can be retried"
                ) from e
            raise PersistenceError(f"Store unavailable: {e}") from e
        except aiosqlite.Error as e:
            raise PersistenceError(f"Store unavailable: {e}") from e

        log.info(
            "task_moved",
            task_id=moved.task_id,
            from_status_id=from_status_id,
            to_status_id=moved.status_id,
            position=moved.position,
        )
        return moved

    async def _apply_move(
        self, request: MoveTaskRequest, actor_id: str
    ) -> tuple[Task, str]:
        """事务内的读-算-写，返回 (移动后的任务, 原列 id)"""
        task_store = self._stores.task_store

        task = await task_store.get_task(request.task_id)
        if task is None:
            raise TaskNotFoundError(request.task_id)

        target = await self._stores.space_store.get_status(request.target_status_id)
        if target is None:
            raise StatusNotFoundError(request.target_status_id)
        if target.space_id != task.space_id:
            raise CrossSpaceMoveError(target.status_id, task.space_id)

        old_status_id = task.status_id
        siblings = await task_store.list_column_positions(
            task.space_id, target.status_id, exclude_task_id=task.task_id
        )
        new_position = compute_position(siblings, request.target_position)

        now = datetime.now(UTC)
        written = await task_store.update_task_position(
            task_id=task.task_id,
            expected_status_id=old_status_id,
            expected_position=task.position,
            status_id=target.status_id,
            position=new_position,
            updated_at=now.isoformat(),
        )
        if not written:
            raise TaskMoveConflictError(task.task_id)

        await self._stores.activity_store.append_activity(
            self._build_activity(task.task_id, actor_id, old_status_id, target.status_id, now)
        )

        moved = await task_store.get_task(task.task_id)
        if moved is None:
            raise TaskMoveConflictError(task.task_id)
        return moved, old_status_id

    @staticmethod
    def _build_activity(
        task_id: str,
        actor_id: str,
        old_status_id: str,
        new_status_id: str,
        ts: datetime,
    ) -> Activity:
        if old_status_id != new_status_id:
            return Activity(
                activity_id=str(ULID()),
                task_id=task_id,
                actor_id=actor_id,
                action=ActivityAction.STATUS_CHANGED,
                field="statusId",
                old_value=old_status_id,
                new_value=new_status_id,
                ts=ts,
            )
        return Activity(
            activity_id=str(ULID()),
            task_id=task_id,
            actor_id=actor_id,
            action=ActivityAction.MOVED,
            field="position",
            ts=ts,
        )

    async def _publish_moved(self, task: Task, from_status_id: str) -> None:
        if self._hub is None:
            return
        payload = TaskMovedPayload(
            task_id=task.task_id,
            from_status_id=from_status_id,
            to_status_id=task.status_id,
            position=task.position,
            task=task,
        )
        await self._hub.publish(
            space_topic(task.space_id),
            RealtimeEventType.TASK_MOVED,
            payload.to_wire(),
        )
