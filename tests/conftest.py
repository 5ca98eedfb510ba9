import pytest

from apps.core.choices import TaskStatus
from apps.core.models import Project, Task, User


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def owner(db):
    return User.objects.create_user(username="ana", first_name="Ana", last_name="Souza", password="x")


@pytest.fixture
def collaborator(db):
    return User.objects.create_user(username="bruno", password="x")


@pytest.fixture
def outsider(db):
    return User.objects.create_user(username="carla", password="x")


@pytest.fixture
def project(owner, collaborator):
    project = Project.objects.create(name="Board", owner=owner)
    project.collaborators.add(owner, collaborator)
    return project


@pytest.fixture
def other_project(owner):
    return Project.objects.create(name="Outro", owner=owner)


@pytest.fixture
def make_task(project):
    def _make(title="Tarefa", status=TaskStatus.TODO, **kwargs):
        kwargs.setdefault("project", project)
        return Task.objects.create(title=title, status=status, **kwargs)

    return _make


@pytest.fixture
def broadcasts(monkeypatch):
    """Captura os eventos que iriam para o Broadcast Channel"""
    sent = []

    def fake_notify(project_id, event, payload):
        sent.append((project_id, event, payload))

    monkeypatch.setattr("apps.board.broadcast.notify_project", fake_notify)
    return sent
