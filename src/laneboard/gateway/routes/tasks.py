"""任务路由

POST   /api/tasks                       创建任务（追加到初始列列尾）
GET    /api/tasks?spaceId=&statusId=    列内任务，按 position 升序
PATCH  /api/tasks/move                  移动 / 重排任务
GET    /api/tasks/{task_id}             任务详情
PATCH  /api/tasks/{task_id}             修改标题 / 描述
DELETE /api/tasks/{task_id}             删除任务
GET    /api/tasks/{task_id}/activities  activity 列表，最新的在前
"""

from fastapi import APIRouter, Depends, Query
from laneboard.core.config import TASK_TITLE_MAX_LENGTH
from laneboard.core.models import MoveTaskRequest, WireModel
from pydantic import Field
from starlette.responses import JSONResponse, Response

from ..deps import get_actor_id, get_realtime_hub, get_store_group
from ..services.move_service import MoveService
from ..services.task_service import TaskService

router = APIRouter()


class CreateTaskRequest(WireModel):
    """创建任务请求体"""

    space_id: str = Field(min_length=1)
    status_id: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=TASK_TITLE_MAX_LENGTH)
    description: str = Field(default="")


class UpdateTaskRequest(WireModel):
    """修改任务请求体，省略的字段保持不变"""

    title: str | None = Field(default=None, min_length=1, max_length=TASK_TITLE_MAX_LENGTH)
    description: str | None = None


@router.post("/api/tasks")
async def create_task(
    body: CreateTaskRequest,
    actor_id: str = Depends(get_actor_id),
    store_group=Depends(get_store_group),
    realtime_hub=Depends(get_realtime_hub),
):
    service = TaskService(store_group, realtime_hub)
    task = await service.create_task(
        space_id=body.space_id,
        status_id=body.status_id,
        title=body.title,
        actor_id=actor_id,
        description=body.description,
    )
    return JSONResponse(status_code=201, content=task.to_wire())


@router.get("/api/tasks")
async def list_column_tasks(
    space_id: str = Query(alias="spaceId"),
    status_id: str = Query(alias="statusId"),
    store_group=Depends(get_store_group),
):
    """查询某列任务，按 position 升序"""
    service = TaskService(store_group)
    tasks = await service.list_column_tasks(space_id, status_id)
    return {"tasks": [t.to_wire() for t in tasks]}


# 注册在 /api/tasks/{task_id} 之前，避免 "move" 被当作 task_id
@router.patch("/api/tasks/move")
async def move_task(
    body: MoveTaskRequest,
    actor_id: str = Depends(get_actor_id),
    store_group=Depends(get_store_group),
    realtime_hub=Depends(get_realtime_hub),
):
    """跨列移动或列内重排，返回移动后的完整任务"""
    service = MoveService(store_group, realtime_hub)
    task = await service.move_task(body, actor_id)
    return task.to_wire()


@router.get("/api/tasks/{task_id}")
async def get_task(task_id: str, store_group=Depends(get_store_group)):
    service = TaskService(store_group)
    task = await service.get_task(task_id)
    return task.to_wire()


@router.patch("/api/tasks/{task_id}")
async def update_task(
    task_id: str,
    body: UpdateTaskRequest,
    actor_id: str = Depends(get_actor_id),
    store_group=Depends(get_store_group),
    realtime_hub=Depends(get_realtime_hub),
):
    service = TaskService(store_group, realtime_hub)
    task = await service.update_task(
        task_id,
        actor_id,
        title=body.title,
        description=body.description,
    )
    return task.to_wire()


@router.delete("/api/tasks/{task_id}")
async def delete_task(
    task_id: str,
    store_group=Depends(get_store_group),
    realtime_hub=Depends(get_realtime_hub),
):
    service = TaskService(store_group, realtime_hub)
    await service.delete_task(task_id)
    return Response(status_code=204)


@router.get("/api/tasks/{task_id}/activities")
async def list_activities(
    task_id: str,
    limit: int = Query(default=20, ge=1, le=100),
    store_group=Depends(get_store_group),
):
    service = TaskService(store_group)
    activities = await service.list_activities(task_id, limit)
    return {"activities": [a.to_wire() for a in activities]}
