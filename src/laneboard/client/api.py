"""BoardApiClient -- 看板 HTTP API 客户端

基于 httpx.AsyncClient；错误响应体 {"error": {...}} 统一转换为 BoardApiError，
连接类错误转换为可重试的 NETWORK_ERROR。
"""

import json
from collections.abc import AsyncIterator
from typing import Any

import httpx
import structlog
from laneboard.core.models import BoardView, MoveTaskRequest, Task

log = structlog.get_logger()

DEFAULT_TIMEOUT_S = 10


class BoardApiError(Exception):
    """看板 API 调用失败

    Attributes:
        code: 服务端错误码，连接失败时为 NETWORK_ERROR
        status_code: HTTP 状态码，连接失败时为 None
        retryable: 是否可安全地整体重试
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.retryable = retryable

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


def _error_from_response(response: httpx.Response) -> BoardApiError:
    try:
        error = response.json()["error"]
        return BoardApiError(
            code=error["code"],
            message=error.get("message", ""),
            status_code=response.status_code,
            retryable=bool(error.get("retryable", False)),
        )
    except (ValueError, KeyError, TypeError):
        return BoardApiError(
            code=f"HTTP_{response.status_code}",
            message=response.text,
            status_code=response.status_code,
            retryable=response.status_code >= 500,
        )


async def parse_sse(lines: AsyncIterator[str]) -> AsyncIterator[tuple[str, dict[str, Any]]]:
    """把 SSE 文本行解析为 (event, data)，注释行（心跳）被忽略"""
    event = "message"
    data_lines: list[str] = []
    async for line in lines:
        if not line:
            if data_lines:
                yield event, json.loads("\n".join(data_lines))
            event = "message"
            data_lines = []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        value = value.removeprefix(" ")
        if field == "event":
            event = value
        elif field == "data":
            data_lines.append(value)


class BoardApiClient:
    """看板 API 客户端"""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        actor_id: str | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初始化客户端

        Args:
            base_url: 服务地址
            actor_id: 通过 X-Actor-Id 传递的操作者标识
            timeout_s: 请求超时（秒）
            transport: 自定义传输层（测试时可传入 ASGITransport）
        """
        headers = {"X-Actor-Id": actor_id} if actor_id else {}
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout_s,
            transport=transport,
        )

    async def __aenter__(self) -> "BoardApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            log.warning("board_api_unreachable", url=url, error_type=type(e).__name__)
            raise BoardApiError(
                code="NETWORK_ERROR",
                message=str(e) or type(e).__name__,
                retryable=True,
            ) from e
        if response.is_error:
            raise _error_from_response(response)
        return response

    async def get_board(self, space_id: str) -> BoardView:
        response = await self._request("GET", f"/api/spaces/{space_id}/board")
        return BoardView.model_validate(response.json())

    async def create_task(
        self,
        space_id: str,
        status_id: str,
        title: str,
        description: str = "",
    ) -> Task:
        response = await self._request(
            "POST",
            "/api/tasks",
            json={
                "spaceId": space_id,
                "statusId": status_id,
                "title": title,
                "description": description,
            },
        )
        return Task.model_validate(response.json())

    async def move_task(
        self,
        task_id: str,
        target_status_id: str,
        target_position: int | None = None,
    ) -> Task:
        """PATCH /api/tasks/move，返回服务端权威任务"""
        body = MoveTaskRequest(
            task_id=task_id,
            target_status_id=target_status_id,
            target_position=target_position,
        )
        response = await self._request(
            "PATCH",
            "/api/tasks/move",
            json=body.model_dump(by_alias=True, exclude_none=True),
        )
        return Task.model_validate(response.json())

    async def stream_events(self, space_id: str) -> AsyncIterator[tuple[str, dict[str, Any]]]:
        """订阅 space 的实时事件流，逐条产出 (event, data)"""
        url = f"/api/stream/space/{space_id}"
        try:
            async with self._http.stream("GET", url, timeout=None) as response:
                if response.is_error:
                    await response.aread()
                    raise _error_from_response(response)
                async for item in parse_sse(response.aiter_lines()):
                    yield item
        except httpx.HTTPError as e:
            raise BoardApiError(
                code="NETWORK_ERROR",
                message=str(e) or type(e).__name__,
                retryable=True,
            ) from e
