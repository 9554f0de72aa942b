"""Activity 领域模型

只追加的审计日志，创建后不修改、不删除。
任务删除后其 activity 仍保留。
"""

from datetime import datetime

from pydantic import Field

from .base import WireModel
from .enums import ActivityAction


class Activity(WireModel):
    """Activity 数据模型"""

    activity_id: str = Field(description="唯一标识，ULID 格式")
    task_id: str
    actor_id: str = Field(description="操作者标识，不关心其认证方式")
    action: ActivityAction
    field: str | None = Field(default=None, description="变化的字段")
    old_value: str | None = None
    new_value: str | None = None
    ts: datetime
