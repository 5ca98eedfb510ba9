import json

import anyio
import pytest

from apps.board.client import BoardSession, TaskApiError, TaskRecord
from apps.board.client.projection import Seed
from apps.core.choices import TaskStatus

pytestmark = pytest.mark.anyio


def record(task_id, status="todo", project_id=7):
    return TaskRecord(id=task_id, title=f"Tarefa {task_id}", status=status, project_id=project_id)


class FakeApi:
    def __init__(self, tasks=()):
        self.tasks = list(tasks)
        self.created = []
        self.updated = []
        self.deleted = []

    async def list_tasks(self, project_id):
        return [task for task in self.tasks if task.project_id == project_id]

    async def create_task(self, fields):
        self.created.append(fields)
        return record(100, fields["status"], fields["project_id"])

    async def update_task(self, task):
        self.updated.append(task)
        return task

    async def delete_task(self, task_id):
        self.deleted.append(task_id)


class Outbox:
    def __init__(self):
        self.frames = []

    async def __call__(self, frame):
        self.frames.append(frame)


@pytest.fixture
def outbox():
    return Outbox()


@pytest.fixture
def api():
    return FakeApi([record(1), record(2, "done"), record(3, project_id=8)])


@pytest.fixture
def session(api, outbox):
    return BoardSession(api, outbox)


async def test_select_project_joins_before_seeding(session, outbox):
    projection = await session.select_project(7)

    assert outbox.frames == [{"type": "join_project", "project_id": 7}]
    assert projection.columns[TaskStatus.TODO] == (1,)
    assert projection.columns[TaskStatus.DONE] == (2,)
    assert 3 not in projection.tasks


async def test_switching_project_leaves_previous_channel(session, outbox):
    await session.select_project(7)
    projection = await session.select_project(8)

    assert outbox.frames[1:] == [
        {"type": "leave_project", "project_id": 7},
        {"type": "join_project", "project_id": 8},
    ]
    assert list(projection.tasks) == [3]


async def test_stale_fetch_is_discarded(outbox):
    release_first = anyio.Event()

    class SlowApi(FakeApi):
        async def list_tasks(self, project_id):
            if project_id == 7:
                await release_first.wait()
            return await super().list_tasks(project_id)

    session = BoardSession(SlowApi([record(1), record(3, project_id=8)]), outbox)

    async with anyio.create_task_group() as tg:
        tg.start_soon(session.select_project, 7)
        await anyio.wait_all_tasks_blocked()
        await session.select_project(8)
        release_first.set()

    assert session.project_id == 8
    assert list(session.projection.tasks) == [3]


async def test_remote_events_update_projection(session):
    await session.select_project(7)

    session.handle_message({"type": "task_created", "task": record(5, "review").to_dict()})
    session.handle_message({"type": "task_updated", "task": record(1, "in progress").to_dict()})
    session.handle_message({"type": "task_deleted", "task": {"id": 2, "project_id": 7}})

    projection = session.projection
    assert projection.columns[TaskStatus.REVIEW] == (5,)
    assert projection.columns[TaskStatus.IN_PROGRESS] == (1,)
    assert projection.columns[TaskStatus.TODO] == ()
    assert 2 not in projection.tasks


async def test_malformed_and_unknown_frames_are_ignored(session, caplog):
    projection = await session.select_project(7)

    assert session.handle_message({"type": "task_updated", "task": {"id": 1, "status": "blocked", "project_id": 7}}) is projection
    assert session.handle_message({"type": "task_deleted", "task": None}) is projection
    assert session.handle_message({"type": "pong"}) is projection
    assert session.handle_message({"type": "error", "message": "Projeto 9 não encontrado"}) is projection
    assert "Projeto 9 não encontrado" in caplog.text


async def test_create_waits_for_broadcast(session, api):
    await session.select_project(7)

    created = await session.create_task({"title": "Nova", "status": "todo"})

    assert api.created == [{"title": "Nova", "status": "todo", "project_id": 7}]
    assert created.id not in session.projection.tasks

    session.handle_message({"type": "task_created", "task": created.to_dict()})
    session.handle_message({"type": "task_created", "task": created.to_dict()})
    assert session.projection.columns[TaskStatus.TODO] == (1, created.id)


async def test_drag_goes_through_session_update(session, api):
    await session.select_project(7)

    session.drag.start(1)
    await session.drag.drop("review")

    assert [task.status for task in api.updated] == [TaskStatus.REVIEW]


async def test_delete_and_close(session, api, outbox):
    await session.select_project(7)

    await session.delete_task(2)
    await session.close()

    assert api.deleted == [2]
    assert outbox.frames[-1] == {"type": "leave_project", "project_id": 7}
    assert session.project_id is None


async def test_events_during_initial_fetch_are_replayed_after_seed(outbox):
    class RacingApi(FakeApi):
        async def list_tasks(self, project_id):
            # Commit que aconteceu depois da leitura, entregue antes da resposta
            session.handle_message({"type": "task_created", "task": record(5, "review").to_dict()})
            session.handle_message({"type": "task_updated", "task": record(1, "done").to_dict()})
            return await super().list_tasks(project_id)

    session = BoardSession(RacingApi([record(1)]), outbox)

    projection = await session.select_project(7)

    assert sorted(projection.tasks) == [1, 5]
    assert projection.columns[TaskStatus.REVIEW] == (5,)
    assert projection.columns[TaskStatus.DONE] == (1,)
    assert projection.columns[TaskStatus.TODO] == ()


async def test_failed_fetch_stops_buffering(outbox):
    class BrokenApi(FakeApi):
        async def list_tasks(self, project_id):
            raise TaskApiError(0, "recusado")

    session = BoardSession(BrokenApi(), outbox)
    session.store.dispatch(Seed(7, (record(1),)))

    with pytest.raises(TaskApiError):
        await session.select_project(7)

    session.handle_message({"type": "task_deleted", "task": {"id": 1, "project_id": 7}})
    assert 1 not in session.projection.tasks


async def test_consume_applies_text_frames(session):
    await session.select_project(7)

    async def frames():
        yield json.dumps({"type": "task_created", "task": record(6, "review").to_dict()})
        yield "não é json"
        yield {"type": "task_deleted", "task": {"id": 2, "project_id": 7}}

    await session.consume(frames())

    assert session.projection.columns[TaskStatus.REVIEW] == (6,)
    assert 2 not in session.projection.tasks
