import pytest
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from apps.board.client import BoardSession, TaskRecord
from apps.board.routing import websocket_urlpatterns
from apps.board.task_service import task_service

pytestmark = [pytest.mark.anyio, pytest.mark.django_db(transaction=True)]


@pytest.fixture
def application():
    return URLRouter(websocket_urlpatterns)


@pytest.fixture(autouse=True)
def channel_layer():
    layer = get_channel_layer()
    async_to_sync(layer.flush)()
    return layer


async def open_socket(application):
    communicator = WebsocketCommunicator(application, "/ws/board/")
    connected, _ = await communicator.connect()
    assert connected
    return communicator


async def sync_point(communicator):
    """O consumer processa em ordem: o pong confirma tudo que veio antes"""
    await communicator.send_json_to({"type": "ping"})
    return await communicator.receive_json_from(timeout=2)


class ListOnlyApi:
    def __init__(self, tasks):
        self.tasks = tasks

    async def list_tasks(self, project_id):
        return [task for task in self.tasks if task.project_id == project_id]


async def test_ping_answers_pong_with_heartbeat(application):
    communicator = await open_socket(application)

    reply = await sync_point(communicator)

    assert reply["type"] == "pong"
    assert reply["heartbeat_interval"] == 30
    assert "timestamp" in reply
    await communicator.disconnect()


async def test_joined_client_receives_project_events(application, channel_layer, project):
    communicator = await open_socket(application)
    await communicator.send_json_to({"type": "join_project", "project_id": project.pk})
    assert (await sync_point(communicator))["type"] == "pong"

    task = {"id": 1, "title": "t", "status": "done", "project_id": project.pk}
    await channel_layer.group_send(f"project_{project.pk}", {"type": "task_updated", "task": task})

    assert await communicator.receive_json_from(timeout=2) == {"type": "task_updated", "task": task}
    await communicator.disconnect()


async def test_events_of_other_projects_are_not_delivered(application, channel_layer, project, other_project):
    communicator = await open_socket(application)
    await communicator.send_json_to({"type": "join_project", "project_id": project.pk})
    await sync_point(communicator)

    await channel_layer.group_send(
        f"project_{other_project.pk}",
        {"type": "task_created", "task": {"id": 3, "project_id": other_project.pk}},
    )

    assert await communicator.receive_nothing(timeout=0.2)
    await communicator.disconnect()


async def test_leave_project_stops_delivery(application, channel_layer, project):
    communicator = await open_socket(application)
    await communicator.send_json_to({"type": "join_project", "project_id": project.pk})
    await communicator.send_json_to({"type": "leave_project", "project_id": project.pk})
    await sync_point(communicator)

    await channel_layer.group_send(
        f"project_{project.pk}",
        {"type": "task_deleted", "task": {"id": 1, "project_id": project.pk}},
    )

    assert await communicator.receive_nothing(timeout=0.2)
    await communicator.disconnect()


async def test_join_unknown_project_is_rejected(application, db):
    communicator = await open_socket(application)

    await communicator.send_json_to({"type": "join_project", "project_id": 999})

    reply = await communicator.receive_json_from(timeout=2)
    assert reply["type"] == "error"
    assert "999" in reply["message"]
    await communicator.disconnect()


@pytest.mark.parametrize("project_id", ["7", None, True])
async def test_join_requires_integer_project_id(application, project_id):
    communicator = await open_socket(application)

    await communicator.send_json_to({"type": "join_project", "project_id": project_id})

    assert await communicator.receive_json_from(timeout=2) == {"type": "error", "message": "project_id inválido"}
    await communicator.disconnect()


async def test_invalid_frames_get_error_replies(application):
    communicator = await open_socket(application)

    await communicator.send_to(text_data="{quebrado")
    assert (await communicator.receive_json_from(timeout=2))["message"] == "JSON inválido"

    await communicator.send_json_to(["join_project"])
    assert (await communicator.receive_json_from(timeout=2))["type"] == "error"

    await communicator.send_json_to({"type": "subscribe"})
    reply = await communicator.receive_json_from(timeout=2)
    assert reply == {"type": "error", "message": "Tipo de mensagem desconhecido: subscribe"}
    await communicator.disconnect()


async def test_delete_reaches_every_subscribed_client(application, project, make_task):
    kept = await database_sync_to_async(make_task)(title="Fica")
    doomed = await database_sync_to_async(make_task)(title="Sai")
    records = [TaskRecord.from_dict(kept.to_dict()), TaskRecord.from_dict(doomed.to_dict())]

    socket_a = await open_socket(application)
    socket_b = await open_socket(application)
    session_b = BoardSession(ListOnlyApi(records), socket_b.send_json_to)

    await socket_a.send_json_to({"type": "join_project", "project_id": project.pk})
    await sync_point(socket_a)
    await session_b.select_project(project.pk)
    await sync_point(socket_b)
    assert session_b.projection.column_of(doomed.pk) is not None

    await database_sync_to_async(task_service.delete_task)(doomed.pk)

    frame = await socket_b.receive_json_from(timeout=2)
    assert frame == {"type": "task_deleted", "task": {"id": doomed.pk, "project_id": project.pk}}
    session_b.handle_message(frame)

    assert doomed.pk not in session_b.projection.tasks
    assert session_b.projection.column_of(doomed.pk) is None
    assert session_b.projection.column_of(kept.pk) is not None

    # O próprio autor também recebe o eco
    assert (await socket_a.receive_json_from(timeout=2))["type"] == "task_deleted"

    await socket_a.disconnect()
    await socket_b.disconnect()
