"""TraceMiddleware -- 从路径中提取 task_id / space_id 绑定到日志上下文

/api/tasks/{task_id}...           -> task_id
/api/spaces/{space_id}...         -> space_id
/api/stream/space/{space_id}      -> space_id
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ULID 长度
_ID_LENGTH = 26

_PATH_KEYS = {
    "tasks": "task_id",
    "spaces": "space_id",
    "space": "space_id",
}


def extract_path_ids(path: str) -> dict[str, str]:
    """从路径中提取资源 id，跳过 /api/tasks/move 这类子路由"""
    ids: dict[str, str] = {}
    parts = [p for p in path.split("/") if p]
    for i, part in enumerate(parts[:-1]):
        key = _PATH_KEYS.get(part)
        candidate = parts[i + 1]
        if key and len(candidate) == _ID_LENGTH:
            ids[key] = candidate
    return ids


class TraceMiddleware(BaseHTTPMiddleware):
    """资源级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        ids = extract_path_ids(request.url.path)
        if ids:
            structlog.contextvars.bind_contextvars(**ids)
        return await call_next(request)
