"""LaneBoard Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .activity import Activity
from .base import WireModel
from .enums import (
    DEFAULT_STATUSES,
    ActivityAction,
    RealtimeEventType,
    StatusCategory,
)
from .event import RealtimeMessage, space_topic
from .payloads import MoveTaskRequest, TaskDeletedPayload, TaskMovedPayload
from .space import Space, WorkflowStatus
from .task import BoardColumn, BoardView, Task

__all__ = [
    # 枚举
    "ActivityAction",
    "StatusCategory",
    "RealtimeEventType",
    "DEFAULT_STATUSES",
    # 基类
    "WireModel",
    # Space
    "Space",
    "WorkflowStatus",
    # Task
    "Task",
    "BoardColumn",
    "BoardView",
    # Activity
    "Activity",
    # 实时消息
    "RealtimeMessage",
    "space_topic",
    # Payloads
    "MoveTaskRequest",
    "TaskMovedPayload",
    "TaskDeletedPayload",
]
