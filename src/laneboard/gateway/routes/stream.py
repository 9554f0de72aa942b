"""SSE 事件流路由

GET /api/stream/space/{space_id}: 订阅 space:{space_id}，实时推送看板变更。
消息不落盘，只推送连接之后发布的消息；空闲时定期发送心跳注释。
"""

import asyncio
import json
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends
from laneboard.core.config import SSE_HEARTBEAT_INTERVAL
from laneboard.core.models import RealtimeMessage, space_topic
from sse_starlette.sse import EventSourceResponse

from ..deps import get_realtime_hub, get_store_group
from ..services.realtime_hub import RealtimeHub
from ..services.space_service import SpaceService

router = APIRouter()


def message_to_sse(message: RealtimeMessage) -> dict:
    """将 RealtimeMessage 转换为 SSE 帧"""
    return {
        "id": message.message_id,
        "event": message.event.value,
        "data": json.dumps(message.data, ensure_ascii=False),
    }


async def stream_messages(
    hub: RealtimeHub,
    topic: str,
    queue: asyncio.Queue,
    heartbeat_interval: float = SSE_HEARTBEAT_INTERVAL,
) -> AsyncIterator[dict]:
    """从已加入的队列持续产出 SSE 帧，退出时离开 topic"""
    try:
        while True:
            try:
                message = await asyncio.wait_for(queue.get(), timeout=heartbeat_interval)
                yield message_to_sse(message)
            except TimeoutError:
                yield {"comment": "heartbeat"}
    finally:
        await hub.leave(topic, queue)


@router.get("/api/stream/space/{space_id}")
async def stream_space_events(
    space_id: str,
    store_group=Depends(get_store_group),
    realtime_hub=Depends(get_realtime_hub),
):
    """SSE 事件流端点

    先加入 topic 再返回响应，建立连接后发布的消息不会丢失。
    """
    await SpaceService(store_group).get_space(space_id)

    topic = space_topic(space_id)
    queue = await realtime_hub.join(topic)
    return EventSourceResponse(stream_messages(realtime_hub, topic, queue))
