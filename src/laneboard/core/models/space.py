"""Space / WorkflowStatus 领域模型

每个 space 拥有一组有序的 status，每个 status 即看板上的一列。
"""

from datetime import datetime

from pydantic import Field

from .base import WireModel
from .enums import StatusCategory


class Space(WireModel):
    """Space 数据模型"""

    space_id: str = Field(description="唯一标识，ULID 格式")
    key: str = Field(description="space 短键，大写，如 SCRUM")
    name: str = Field(description="名称")
    created_at: datetime = Field(description="创建时间")


class WorkflowStatus(WireModel):
    """看板列"""

    status_id: str = Field(description="唯一标识，ULID 格式")
    space_id: str = Field(description="所属 space")
    name: str
    slug: str
    color: str = Field(default="#6B7280")
    position: int = Field(description="列在看板上的顺序")
    category: StatusCategory = Field(default=StatusCategory.TODO)
