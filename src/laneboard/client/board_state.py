"""BoardState -- 客户端看板状态与乐观移动状态机

每次本地拖拽产生一个 PendingMove：
  APPLIED_LOCALLY -> CONFIRMED    用服务端返回的任务按 task_id 替换
  APPLIED_LOCALLY -> ROLLED_BACK  恢复移动前源列与目标列的快照
实时事件（含自己发起的移动的回声）以服务端任务为准，重复应用结果不变。
"""

import bisect
from enum import StrEnum
from typing import Any

from laneboard.core.models import (
    BoardColumn,
    BoardView,
    Task,
    TaskDeletedPayload,
    TaskMovedPayload,
    WorkflowStatus,
)
from pydantic import BaseModel, Field
from ulid import ULID


class MoveState(StrEnum):
    """乐观移动状态"""

    APPLIED_LOCALLY = "APPLIED_LOCALLY"
    CONFIRMED = "CONFIRMED"
    ROLLED_BACK = "ROLLED_BACK"


VALID_MOVE_TRANSITIONS: dict[MoveState, set[MoveState]] = {
    MoveState.APPLIED_LOCALLY: {MoveState.CONFIRMED, MoveState.ROLLED_BACK},
    # 终态不可再流转
    MoveState.CONFIRMED: set(),
    MoveState.ROLLED_BACK: set(),
}


class InvalidMoveTransitionError(Exception):
    """非法的乐观移动状态流转"""

    def __init__(self, from_state: MoveState, to_state: MoveState) -> None:
        super().__init__(f"Cannot transition move from {from_state} to {to_state}")
        self.from_state = from_state
        self.to_state = to_state


class PendingMove(BaseModel):
    """一次已在本地生效、等待服务端结果的移动"""

    move_id: str = Field(default_factory=lambda: str(ULID()))
    task_id: str
    from_column_id: str
    to_column_id: str
    new_index: int
    # 移动前源列与目标列的任务列表
    snapshot: dict[str, list[Task]]
    state: MoveState = MoveState.APPLIED_LOCALLY

    def transition(self, to_state: MoveState) -> None:
        if to_state not in VALID_MOVE_TRANSITIONS[self.state]:
            raise InvalidMoveTransitionError(self.state, to_state)
        self.state = to_state


class BoardState:
    """客户端内存中的看板

    列顺序固定；列内任务列表即界面显示顺序。
    """

    def __init__(self, columns: list[BoardColumn] | None = None) -> None:
        self.columns: list[BoardColumn] = [c.model_copy(deep=True) for c in columns or []]

    @classmethod
    def from_board(cls, board: BoardView) -> "BoardState":
        return cls(board.columns)

    def column(self, column_id: str) -> BoardColumn | None:
        for col in self.columns:
            if col.status_id == column_id:
                return col
        return None

    def column_task_ids(self, column_id: str) -> list[str]:
        col = self.column(column_id)
        if col is None:
            return []
        return [t.task_id for t in col.tasks]

    def find_task(self, task_id: str) -> tuple[BoardColumn, int] | None:
        """返回 (所在列, 列内下标)"""
        for col in self.columns:
            for index, task in enumerate(col.tasks):
                if task.task_id == task_id:
                    return col, index
        return None

    # ============================================================
    # 乐观移动
    # ============================================================

    def move_task_optimistic(
        self,
        task_id: str,
        from_column_id: str,
        to_column_id: str,
        new_index: int,
    ) -> PendingMove | None:
        """立即在本地把任务移到目标列的 new_index 处

        new_index 按移除该任务之后的目标列计算，与服务端 targetPosition 语义一致。

        Returns:
            PendingMove；任务或列不存在时返回 None，状态不变
        """
        if new_index < 0:
            raise ValueError(f"new_index must be non-negative, got {new_index}")

        source = self.column(from_column_id)
        target = self.column(to_column_id)
        if source is None or target is None:
            return None
        task_index = next(
            (i for i, t in enumerate(source.tasks) if t.task_id == task_id), None
        )
        if task_index is None:
            return None

        snapshot = {
            source.status_id: list(source.tasks),
            target.status_id: list(target.tasks),
        }

        task = source.tasks.pop(task_index)
        moved = task.model_copy(
            update={
                "status_id": target.status_id,
                "status": WorkflowStatus(**target.model_dump(exclude={"tasks"})),
            }
        )
        target.tasks.insert(min(new_index, len(target.tasks)), moved)

        return PendingMove(
            task_id=task_id,
            from_column_id=source.status_id,
            to_column_id=target.status_id,
            new_index=new_index,
            snapshot=snapshot,
        )

    def confirm(self, pending: PendingMove, task: Task) -> None:
        """服务端确认：按 task_id 用权威任务替换本地副本"""
        pending.transition(MoveState.CONFIRMED)
        if not self._replace_in_place(task):
            self._place_authoritative(task)

    def rollback(self, pending: PendingMove) -> None:
        """持久化失败：恢复移动前的列快照"""
        pending.transition(MoveState.ROLLED_BACK)
        for column_id, tasks in pending.snapshot.items():
            col = self.column(column_id)
            if col is not None:
                col.tasks = list(tasks)

    # ============================================================
    # 实时事件
    # ============================================================

    def apply_task_moved(self, data: dict[str, Any]) -> None:
        payload = TaskMovedPayload.model_validate(data)
        self._place_authoritative(payload.task)

    def apply_task_created(self, data: dict[str, Any]) -> None:
        self._place_authoritative(Task.model_validate(data))

    def apply_task_updated(self, data: dict[str, Any]) -> None:
        task = Task.model_validate(data)
        if not self._replace_in_place(task):
            self._place_authoritative(task)

    def apply_task_deleted(self, data: dict[str, Any]) -> None:
        payload = TaskDeletedPayload.model_validate(data)
        self._remove(payload.task_id)

    # ============================================================
    # 内部
    # ============================================================

    def _remove(self, task_id: str) -> None:
        for col in self.columns:
            col.tasks = [t for t in col.tasks if t.task_id != task_id]

    def _replace_in_place(self, task: Task) -> bool:
        """任务已在其权威列中时原位替换，返回是否替换"""
        found = self.find_task(task.task_id)
        if found is None:
            return False
        col, index = found
        if col.status_id != task.status_id:
            return False
        col.tasks[index] = task
        return True

    def _place_authoritative(self, task: Task) -> None:
        """从所有列移除后按 position 插入其所在列；重复调用结果相同"""
        self._remove(task.task_id)
        col = self.column(task.status_id)
        if col is None:
            return
        index = bisect.bisect_right(col.tasks, task.position, key=lambda t: t.position)
        col.tasks.insert(index, task)
