"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store 与 RealtimeHub

实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Header, Request
from laneboard.core.config import get_default_actor
from laneboard.core.store import StoreGroup

from .services.realtime_hub import RealtimeHub


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_realtime_hub(request: Request) -> RealtimeHub:
    """从 app.state 获取 RealtimeHub 实例"""
    return request.app.state.realtime_hub


def get_actor_id(x_actor_id: str | None = Header(default=None)) -> str:
    """当前操作者；认证不在本服务范围内，未携带时使用默认演示身份"""
    return x_actor_id or get_default_actor()
