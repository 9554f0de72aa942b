"""RealtimeHub -- 内存中的 topic 广播器

每个订阅者持有一个 asyncio.Queue，支持 join/leave/publish。
topic 形如 space:{space_id}；同一 topic 内按 publish 调用顺序投递。
"""

import asyncio
from collections import defaultdict
from typing import Any

import structlog
from laneboard.core.config import REALTIME_QUEUE_MAXSIZE
from laneboard.core.models import RealtimeEventType, RealtimeMessage

log = structlog.get_logger()


class RealtimeHub:
    """实时事件广播器 -- 基于 asyncio.Queue 的发布/订阅模式"""

    def __init__(self, queue_maxsize: int = REALTIME_QUEUE_MAXSIZE) -> None:
        # topic -> set of asyncio.Queue
        self._subscribers: dict[str, set[asyncio.Queue]] = defaultdict(set)
        self._queue_maxsize = queue_maxsize

    async def join(self, topic: str) -> asyncio.Queue:
        """订阅 topic

        Returns:
            asyncio.Queue 实例，新消息会被推送到此队列
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_maxsize)
        self._subscribers[topic].add(queue)
        return queue

    async def leave(self, topic: str, queue: asyncio.Queue) -> None:
        """取消订阅"""
        subscribers = self._subscribers.get(topic)
        if subscribers is None:
            return
        subscribers.discard(queue)
        if not subscribers:
            del self._subscribers[topic]

    async def publish(
        self,
        topic: str,
        event: RealtimeEventType,
        data: dict[str, Any],
    ) -> RealtimeMessage:
        """向 topic 的所有订阅者广播一条消息

        Returns:
            已广播的消息
        """
        message = RealtimeMessage(topic=topic, event=event, data=data)

        dead_queues = []
        for queue in self._subscribers.get(topic, set()):
            try:
                queue.put_nowait(message)
            except asyncio.QueueFull:
                dead_queues.append(queue)

        # 清理已满的队列
        for q in dead_queues:
            self._subscribers[topic].discard(q)
            log.warning("realtime_subscriber_dropped", topic=topic)
        if topic in self._subscribers and not self._subscribers[topic]:
            del self._subscribers[topic]

        return message

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))

    def topic_count(self) -> int:
        """当前有订阅者的 topic 数"""
        return len(self._subscribers)
