"""枚举定义

包含 Activity 动作类型、列分类、实时事件名，以及新建 space 的默认工作流。
"""

from enum import StrEnum


class ActivityAction(StrEnum):
    """Activity 动作类型"""

    CREATED = "CREATED"
    UPDATED = "UPDATED"
    # 列发生变化
    STATUS_CHANGED = "STATUS_CHANGED"
    # 同列内仅排序变化
    MOVED = "MOVED"


class StatusCategory(StrEnum):
    """列分类"""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class RealtimeEventType(StrEnum):
    """实时事件名，与前端 socket 事件名一致"""

    TASK_MOVED = "task:moved"
    TASK_CREATED = "task:created"
    TASK_UPDATED = "task:updated"
    TASK_DELETED = "task:deleted"
    # 评论由外部模块产生，此处仅声明事件名
    COMMENT_ADDED = "comment:added"


# 新建 space 时的默认列：(name, slug, color, category)
DEFAULT_STATUSES: list[tuple[str, str, str, StatusCategory]] = [
    ("Backlog", "backlog", "#6B7280", StatusCategory.TODO),
    ("To Do", "to-do", "#3B82F6", StatusCategory.TODO),
    ("In Progress", "in-progress", "#F59E0B", StatusCategory.IN_PROGRESS),
    ("In Review", "in-review", "#8B5CF6", StatusCategory.IN_PROGRESS),
    ("Done", "done", "#10B981", StatusCategory.DONE),
]
