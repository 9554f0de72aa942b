"""BoardSession -- 一个看板的客户端会话

move(): 本地乐观移动 -> 持久化 -> 确认或回滚。
handle_event(): 应用实时事件；自己发起的移动的回声无需特殊处理。
"""

from typing import Any

import structlog
from laneboard.core.models import RealtimeEventType, Task

from .api import BoardApiClient, BoardApiError
from .board_state import BoardState

log = structlog.get_logger()

# 实时事件 -> BoardState 方法名
_EVENT_HANDLERS = {
    RealtimeEventType.TASK_MOVED: "apply_task_moved",
    RealtimeEventType.TASK_CREATED: "apply_task_created",
    RealtimeEventType.TASK_UPDATED: "apply_task_updated",
    RealtimeEventType.TASK_DELETED: "apply_task_deleted",
}


class BoardSession:
    """看板会话"""

    def __init__(self, api: BoardApiClient, space_id: str) -> None:
        self._api = api
        self.space_id = space_id
        self.state = BoardState()

    async def load(self) -> BoardState:
        """拉取看板视图并重建本地状态"""
        board = await self._api.get_board(self.space_id)
        self.state = BoardState.from_board(board)
        return self.state

    async def move(self, task_id: str, to_column_id: str, new_index: int) -> Task:
        """移动任务

        Raises:
            LookupError: 任务或目标列不在本地看板上
            BoardApiError: 持久化失败（本地已回滚）

        请求以任何方式失败（含响应无法解析、被取消）时都会回滚本地乐观移动。
        """
        found = self.state.find_task(task_id)
        if found is None:
            raise LookupError(f"Task {task_id} is not on the board")
        source, _ = found

        pending = self.state.move_task_optimistic(
            task_id, source.status_id, to_column_id, new_index
        )
        if pending is None:
            raise LookupError(f"Column {to_column_id} is not on the board")

        try:
            task = await self._api.move_task(task_id, to_column_id, new_index)
        except BaseException as e:
            self.state.rollback(pending)
            if isinstance(e, BoardApiError):
                log.warning(
                    "task_move_rolled_back",
                    task_id=task_id,
                    code=e.code,
                    retryable=e.retryable,
                )
            else:
                log.warning(
                    "task_move_rolled_back",
                    task_id=task_id,
                    error_type=type(e).__name__,
                )
            raise

        self.state.confirm(pending, task)
        return task

    def handle_event(self, event: str, data: dict[str, Any]) -> None:
        """应用一条实时消息，未关注的事件直接忽略"""
        try:
            event_type = RealtimeEventType(event)
        except ValueError:
            log.debug("realtime_event_ignored", realtime_event=event)
            return
        method_name = _EVENT_HANDLERS.get(event_type)
        if method_name is not None:
            getattr(self.state, method_name)(data)

    async def listen(self) -> None:
        """持续消费实时事件，直到连接关闭"""
        async for event, data in self._api.stream_events(self.space_id):
            self.handle_event(event, data)
