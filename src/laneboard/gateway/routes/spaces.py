"""Space 路由

POST /api/spaces                   创建 space（含默认五列）
GET  /api/spaces/{space_id}/board  看板视图
"""

from fastapi import APIRouter, Depends
from laneboard.core.models import WireModel
from pydantic import Field
from starlette.responses import JSONResponse

from ..deps import get_store_group
from ..services.space_service import SpaceService

router = APIRouter()


class CreateSpaceRequest(WireModel):
    """创建 space 请求体"""

    name: str = Field(min_length=1, max_length=100)
    key: str = Field(min_length=2, max_length=10, pattern=r"^[A-Za-z][A-Za-z0-9]*$")


@router.post("/api/spaces")
async def create_space(body: CreateSpaceRequest, store_group=Depends(get_store_group)):
    service = SpaceService(store_group)
    board = await service.create_space(body.name, body.key)
    return JSONResponse(status_code=201, content=board.to_wire())


@router.get("/api/spaces/{space_id}/board")
async def get_board(space_id: str, store_group=Depends(get_store_group)):
    """看板视图：列按顺序，列内任务按 position 升序"""
    service = SpaceService(store_group)
    board = await service.get_board(space_id)
    return board.to_wire()
