"""写事务封装

使用 BEGIN IMMEDIATE 在事务开始时即取得 SQLite 写锁，
保证事务内"读列 -> 计算 position -> 写入"基于一致的快照。

aiosqlite 的语句在工作线程上按提交顺序执行，协程被取消时已提交的语句仍会执行：
BEGIN 被取消后仍需回滚，COMMIT 被取消后仍会落盘。
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from typing import TypeVar

import aiosqlite
import structlog

log = structlog.get_logger()

T = TypeVar("T")


class TaskMoveConflictError(Exception):
    """compare-and-set 失败：任务在读取后被并发修改"""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} changed during move")
        self.task_id = task_id


async def _finish(coro: Awaitable[None]) -> None:
    """等待 commit/rollback 在工作线程上完成，期间的取消推迟到完成之后再抛出"""
    future = asyncio.ensure_future(coro)
    try:
        await asyncio.shield(future)
    except asyncio.CancelledError:
        await future
        raise


@asynccontextmanager
async def immediate_transaction(
    conn: aiosqlite.Connection,
) -> AsyncIterator[aiosqlite.Connection]:
    """写事务：正常退出时提交，任何异常（含取消）时回滚

    回滚排在 BEGIN 之后执行；没有打开的事务时 sqlite 的 rollback 不做任何事，
    因此 BEGIN 尚未执行完就被取消时同样安全。

    Args:
        conn: 数据库连接（事务内所有读写需在同一连接上）
    """
    try:
        await conn.execute("BEGIN IMMEDIATE")
        yield conn
    except BaseException:
        await _finish(conn.rollback())
        raise
    await _finish(conn.commit())


async def run_to_completion(coro: Awaitable[T]) -> T:
    """在独立 task 中运行写操作，调用方被取消不会中断它

    已受理的写操作要么完整提交（并发布事件），要么整体失败。
    调用方取消后，操作的失败只记录日志。
    """
    task = asyncio.ensure_future(coro)
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        task.add_done_callback(_log_detached_failure)
        raise


def _log_detached_failure(task: asyncio.Future) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        log.warning("detached_write_failed", error_type=type(error).__name__, error=str(error))
