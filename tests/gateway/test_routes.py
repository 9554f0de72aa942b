"""HTTP API 测试 -- space、任务 CRUD、移动与错误响应体"""

import pytest_asyncio
from httpx import AsyncClient


@pytest_asyncio.fixture
async def space(client: AsyncClient) -> dict:
    resp = await client.post("/api/spaces", json={"name": "Scrum", "key": "scrum"})
    assert resp.status_code == 201
    return resp.json()


def _column(space: dict, name: str) -> str:
    return next(c["statusId"] for c in space["columns"] if c["name"] == name)


async def _create(client: AsyncClient, space: dict, column: str, title: str) -> dict:
    resp = await client.post(
        "/api/tasks",
        json={
            "spaceId": space["space"]["spaceId"],
            "statusId": _column(space, column),
            "title": title,
        },
    )
    assert resp.status_code == 201
    return resp.json()


class TestSpaces:
    async def test_create_space_with_default_columns(self, space: dict):
        assert space["space"]["key"] == "SCRUM"
        assert [c["name"] for c in space["columns"]] == [
            "Backlog",
            "To Do",
            "In Progress",
            "In Review",
            "Done",
        ]
        assert [c["position"] for c in space["columns"]] == [0, 1, 2, 3, 4]
        assert all(c["tasks"] == [] for c in space["columns"])

    async def test_duplicate_key(self, client: AsyncClient, space: dict):
        resp = await client.post("/api/spaces", json={"name": "Again", "key": "SCRUM"})
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "SPACE_KEY_CONFLICT"

    async def test_invalid_key(self, client: AsyncClient):
        resp = await client.post("/api/spaces", json={"name": "Bad", "key": "1-x"})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_board_not_found(self, client: AsyncClient):
        resp = await client.get("/api/spaces/01JNONEXISTENT000000000000/board")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"]["code"] == "SPACE_NOT_FOUND"
        assert body["error"]["retryable"] is False

    async def test_board_lists_tasks_by_position(self, client: AsyncClient, space: dict):
        first = await _create(client, space, "To Do", "first")
        second = await _create(client, space, "To Do", "second")

        resp = await client.get(f"/api/spaces/{space['space']['spaceId']}/board")
        assert resp.status_code == 200
        todo = next(c for c in resp.json()["columns"] if c["name"] == "To Do")
        assert [t["taskId"] for t in todo["tasks"]] == [first["taskId"], second["taskId"]]


class TestTaskCrud:
    async def test_create_appends_to_column(self, client: AsyncClient, space: dict):
        first = await _create(client, space, "To Do", "first")
        second = await _create(client, space, "To Do", "second")

        assert first["key"] == "SCRUM-1"
        assert second["key"] == "SCRUM-2"
        assert first["position"] == 65536
        assert second["position"] == 131072
        assert first["status"]["name"] == "To Do"

    async def test_create_with_foreign_status(self, client: AsyncClient, space: dict):
        other = await client.post("/api/spaces", json={"name": "Other", "key": "OTH"})
        resp = await client.post(
            "/api/tasks",
            json={
                "spaceId": space["space"]["spaceId"],
                "statusId": _column(other.json(), "To Do"),
                "title": "x",
            },
        )
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "STATUS_SPACE_MISMATCH"

    async def test_list_column(self, client: AsyncClient, space: dict):
        a = await _create(client, space, "To Do", "a")
        b = await _create(client, space, "To Do", "b")
        await _create(client, space, "Done", "elsewhere")

        resp = await client.get(
            "/api/tasks",
            params={"spaceId": space["space"]["spaceId"], "statusId": _column(space, "To Do")},
        )
        assert resp.status_code == 200
        assert [t["taskId"] for t in resp.json()["tasks"]] == [a["taskId"], b["taskId"]]

    async def test_update_keeps_position(self, client: AsyncClient, space: dict):
        task = await _create(client, space, "To Do", "old")

        resp = await client.patch(f"/api/tasks/{task['taskId']}", json={"title": "new"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["title"] == "new"
        assert body["position"] == task["position"]

        acts = await client.get(f"/api/tasks/{task['taskId']}/activities")
        assert [a["action"] for a in acts.json()["activities"]] == ["UPDATED", "CREATED"]

    async def test_delete_keeps_activities(self, client: AsyncClient, space: dict):
        task = await _create(client, space, "To Do", "gone")

        resp = await client.delete(f"/api/tasks/{task['taskId']}")
        assert resp.status_code == 204

        resp = await client.get(f"/api/tasks/{task['taskId']}")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "TASK_NOT_FOUND"

        acts = await client.get(f"/api/tasks/{task['taskId']}/activities")
        assert [a["action"] for a in acts.json()["activities"]] == ["CREATED"]

    async def test_delete_unknown(self, client: AsyncClient):
        resp = await client.delete("/api/tasks/01JNONEXISTENT000000000000")
        assert resp.status_code == 404


class TestMoveEndpoint:
    async def test_move_returns_full_task(self, client: AsyncClient, space: dict):
        task = await _create(client, space, "To Do", "drag me")
        done = _column(space, "Done")

        resp = await client.patch(
            "/api/tasks/move",
            json={"taskId": task["taskId"], "targetStatusId": done, "targetPosition": 0},
            headers={"X-Actor-Id": "alice"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["statusId"] == done
        assert body["status"]["name"] == "Done"
        assert body["position"] == 65536

        acts = await client.get(f"/api/tasks/{task['taskId']}/activities")
        latest = acts.json()["activities"][0]
        assert latest["action"] == "STATUS_CHANGED"
        assert latest["actorId"] == "alice"
        assert latest["oldValue"] == _column(space, "To Do")
        assert latest["newValue"] == done

    async def test_default_actor(self, client: AsyncClient, space: dict):
        task = await _create(client, space, "To Do", "t")
        resp = await client.patch(
            "/api/tasks/move",
            json={"taskId": task["taskId"], "targetStatusId": _column(space, "To Do")},
        )
        assert resp.status_code == 200
        acts = await client.get(f"/api/tasks/{task['taskId']}/activities")
        latest = acts.json()["activities"][0]
        assert latest["action"] == "MOVED"
        assert latest["actorId"] == "demo-user"

    async def test_negative_position(self, client: AsyncClient, space: dict):
        task = await _create(client, space, "To Do", "t")
        resp = await client.patch(
            "/api/tasks/move",
            json={
                "taskId": task["taskId"],
                "targetStatusId": _column(space, "Done"),
                "targetPosition": -1,
            },
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_unknown_task(self, client: AsyncClient, space: dict):
        resp = await client.patch(
            "/api/tasks/move",
            json={"taskId": "01JNONEXISTENT000000000000", "targetStatusId": _column(space, "Done")},
        )
        assert resp.status_code == 404
        error = resp.json()["error"]
        assert error["code"] == "TASK_NOT_FOUND"
        assert error["retryable"] is False

    async def test_cross_space(self, client: AsyncClient, space: dict):
        task = await _create(client, space, "To Do", "t")
        other = await client.post("/api/spaces", json={"name": "Other", "key": "OTH"})

        resp = await client.patch(
            "/api/tasks/move",
            json={"taskId": task["taskId"], "targetStatusId": _column(other.json(), "Done")},
        )
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "CROSS_SPACE_MOVE"
