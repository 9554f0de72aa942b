"""LaneBoard Client -- 看板本地状态与乐观更新

BoardState 维护已拉取的看板列，BoardSession 串联乐观移动、持久化与实时事件。
"""

from .api import BoardApiClient, BoardApiError
from .board_state import (
    VALID_MOVE_TRANSITIONS,
    BoardState,
    InvalidMoveTransitionError,
    MoveState,
    PendingMove,
)
from .session import BoardSession

__all__ = [
    "BoardApiClient",
    "BoardApiError",
    "BoardSession",
    "BoardState",
    "InvalidMoveTransitionError",
    "MoveState",
    "PendingMove",
    "VALID_MOVE_TRANSITIONS",
]
