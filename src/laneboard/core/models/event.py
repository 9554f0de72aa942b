"""实时消息模型

消息不落盘，按 topic（space:{space_id}）广播给当前订阅者。
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field
from ulid import ULID

from .enums import RealtimeEventType


def space_topic(space_id: str) -> str:
    """space 级 topic 名"""
    return f"space:{space_id}"


class RealtimeMessage(BaseModel):
    """一次广播的消息"""

    message_id: str = Field(default_factory=lambda: str(ULID()))
    topic: str
    event: RealtimeEventType
    data: dict[str, Any] = Field(default_factory=dict)
    ts: datetime = Field(default_factory=lambda: datetime.now(UTC))
