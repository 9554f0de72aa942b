"""请求与事件 payload

字段对外使用 camelCase，例如 MoveTaskRequest 的 JSON 为
{"taskId": ..., "targetStatusId": ..., "targetPosition": ...}。
"""

from pydantic import Field

from .base import WireModel
from .task import Task


class MoveTaskRequest(WireModel):
    """移动请求"""

    task_id: str = Field(min_length=1)
    target_status_id: str = Field(min_length=1)
    target_position: int | None = Field(
        default=None,
        ge=0,
        description="目标列内从 0 开始的下标，省略表示追加到列尾",
    )


class TaskMovedPayload(WireModel):
    """task:moved 事件 payload"""

    task_id: str
    from_status_id: str
    to_status_id: str
    position: float
    task: Task


class TaskDeletedPayload(WireModel):
    """task:deleted 事件 payload"""

    task_id: str
