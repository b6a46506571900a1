"""Tests for the viewer registry and the live stats channel."""

import asyncio

import pytest
from starlette.websockets import WebSocketState

from core.state import ViewerRegistry
from core.store import list_tasks


class FakeViewer:

    def __init__(self, ready=True, broken=False):
        state = WebSocketState.CONNECTED if ready else WebSocketState.DISCONNECTED
        self.client_state = state
        self.application_state = state
        self.broken = broken
        self.messages = []

    async def send_json(self, message):
        if self.broken:
            raise RuntimeError("connection reset")
        self.messages.append(message)


class TestViewerRegistry:

    def test_register_and_unregister(self):
        registry = ViewerRegistry()
        viewer = FakeViewer()

        registry.register(viewer)
        assert viewer in registry
        assert len(registry) == 1

        registry.unregister(viewer)
        registry.unregister(viewer)
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_broadcast_reaches_every_ready_viewer(self):
        registry = ViewerRegistry()
        viewers = [FakeViewer(), FakeViewer()]
        idle = FakeViewer(ready=False)
        for viewer in viewers + [idle]:
            registry.register(viewer)

        delivered = await registry.broadcast({"type": "stats", "data": {}})

        assert delivered == 2
        assert all(v.messages == [{"type": "stats", "data": {}}] for v in viewers)
        assert idle.messages == []
        assert idle in registry

    @pytest.mark.asyncio
    async def test_failed_send_is_swallowed_and_dropped(self):
        registry = ViewerRegistry()
        healthy, broken = FakeViewer(), FakeViewer(broken=True)
        registry.register(healthy)
        registry.register(broken)

        delivered = await registry.broadcast({"type": "stats", "data": {}})

        assert delivered == 1
        assert broken not in registry
        assert healthy in registry


def test_connect_receives_info_then_stats(client):
    with client.websocket_connect("/ws") as ws:
        assert ws.receive_json() == {"type": "info", "message": "Connected to live updates"}
        snapshot = ws.receive_json()

    assert snapshot["type"] == "stats"
    assert snapshot["data"]["totalProjects"] == 0
    assert snapshot["data"]["overallCompletion"] == 0


def test_mutations_are_pushed_to_open_viewers(auth_client, app, db):
    with auth_client.websocket_connect("/ws") as first, auth_client.websocket_connect("/ws") as second:
        for ws in (first, second):
            ws.receive_json()
            ws.receive_json()
        assert len(app.state.viewers) == 2

        auth_client.post("/projects", data={"title": "Alpha"}, follow_redirects=False)
        pushed = [first.receive_json(), second.receive_json()]

        assert pushed[0] == pushed[1]
        assert pushed[0]["type"] == "stats"
        assert pushed[0]["data"]["totalProjects"] == 1
        project_id = pushed[0]["data"]["projects"][0]["id"]

        auth_client.post(f"/projects/{project_id}/tasks", data={"title": "Write"}, follow_redirects=False)
        assert first.receive_json()["data"]["totalTasks"] == 1
        assert second.receive_json()["data"]["totalTasks"] == 1

        task_id = list_tasks(db, project_id)[0].id
        auth_client.post(f"/tasks/{task_id}/toggle", follow_redirects=False)
        assert first.receive_json()["data"]["overallCompletion"] == 100
        assert second.receive_json()["data"]["overallCompletion"] == 100

        with auth_client.websocket_connect("/ws") as late:
            late.receive_json()
            late_snapshot = late.receive_json()

    assert late_snapshot["data"]["totalProjects"] == 1
    assert late_snapshot["data"]["totalTasks"] == 1


def test_binary_frames_are_ignored(auth_client):
    with auth_client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.receive_json()

        ws.send_bytes(b"\x00")
        ws.send_text("hello")
        auth_client.post("/projects", data={"title": "Alpha"}, follow_redirects=False)

        pushed = ws.receive_json()

    assert pushed["type"] == "stats"
    assert pushed["data"]["totalProjects"] == 1


class EagerRegistry(ViewerRegistry):
    """Fires a broadcast the moment a viewer joins."""

    def register(self, connection):
        super().register(connection)
        self.pending = asyncio.get_running_loop().create_task(self.broadcast({"type": "stats", "data": "early"}))


def test_info_comes_before_any_broadcast(client, app):
    app.state.viewers = EagerRegistry()

    with client.websocket_connect("/ws") as ws:
        first = ws.receive_json()
        following = [ws.receive_json(), ws.receive_json()]

    assert first == {"type": "info", "message": "Connected to live updates"}
    assert all(message["type"] == "stats" for message in following)
    assert "early" in [message["data"] for message in following]
