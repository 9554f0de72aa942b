"""Task 领域模型

position 决定任务在 (space_id, status_id) 分区内的顺序，越小越靠前。
position 只由排序引擎计算，其他字段由普通 CRUD 修改。
"""

from datetime import datetime

from pydantic import Field

from .base import WireModel
from .space import Space, WorkflowStatus


class Task(WireModel):
    """Task 数据模型"""

    task_id: str = Field(description="唯一标识，ULID 格式，不可变")
    space_id: str = Field(description="所属 space")
    status_id: str = Field(description="当前所在列")
    position: float = Field(description="列内排序键")
    key: str = Field(description="任务键，如 SCRUM-3")
    number: int = Field(description="space 内递增序号")
    title: str
    description: str = Field(default="")
    created_at: datetime
    updated_at: datetime
    status: WorkflowStatus | None = Field(default=None, description="解析后的列信息")


class BoardColumn(WorkflowStatus):
    """看板视图中的一列及其任务（按 position 升序）"""

    tasks: list[Task] = Field(default_factory=list)


class BoardView(WireModel):
    """看板视图"""

    space: Space
    columns: list[BoardColumn] = Field(default_factory=list)
