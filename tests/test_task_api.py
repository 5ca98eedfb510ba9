import json

import pytest
from django.db import DatabaseError

from apps.board.task_service import task_service
from apps.core.choices import TaskStatus
from apps.core.models import Task

pytestmark = pytest.mark.django_db


def post_json(client, url, data):
    return client.post(url, data=json.dumps(data), content_type="application/json")


def put_json(client, url, data):
    return client.put(url, data=json.dumps(data), content_type="application/json")


def test_create_task_returns_canonical_task_and_broadcasts_once(
    client, project, collaborator, owner, broadcasts, django_capture_on_commit_callbacks
):
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        response = post_json(client, "/tasks", {
            "title": "Escrever testes",
            "description": "cobrir a API",
            "status": "todo",
            "project_id": project.pk,
            "user_id": owner.pk,
            "assigned_to": collaborator.pk,
        })

    assert response.status_code == 201
    body = response.json()
    assert body["title"] == "Escrever testes"
    assert body["status"] == "todo"
    assert body["project_id"] == project.pk
    assert body["user_id"] == owner.pk
    assert body["assigned_to"] == collaborator.pk
    assert body["assigned_user_name"] == "bruno"

    assert len(callbacks) == 1
    assert broadcasts == [(project.pk, "task_created", body)]


def test_create_then_list_round_trip(client, project, owner, broadcasts, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        created = post_json(client, "/tasks", {
            "title": "Revisar PR",
            "status": "review",
            "project_id": project.pk,
            "assigned_to": owner.pk,
        }).json()

    response = client.get(f"/tasks/{project.pk}")

    assert response.status_code == 200
    assert response.json() == [created]
    assert created["assigned_user_name"] == "Ana Souza"
    assert created["description"] == ""


@pytest.mark.parametrize("payload, message", [
    ({"status": "todo"}, "title"),
    ({"title": "   ", "status": "todo"}, "title"),
    ({"title": "Sem status"}, "status"),
    ({"title": "Status errado", "status": "blocked"}, "Status"),
    ({"title": "Sem projeto", "status": "todo", "project_id": None}, "project_id"),
])
def test_create_task_validation_errors(client, project, broadcasts, django_capture_on_commit_callbacks, payload, message):
    payload.setdefault("project_id", project.pk)

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        response = post_json(client, "/tasks", payload)

    assert response.status_code == 400
    assert message in response.json()["error"]
    assert callbacks == []
    assert broadcasts == []
    assert Task.objects.count() == 0


def test_create_task_rejects_assignee_outside_project(client, project, outsider, broadcasts):
    response = post_json(client, "/tasks", {
        "title": "Intruso",
        "status": "todo",
        "project_id": project.pk,
        "assigned_to": outsider.pk,
    })

    assert response.status_code == 400
    assert Task.objects.count() == 0
    assert broadcasts == []


def test_create_task_unknown_project_is_404(client, db, broadcasts):
    response = post_json(client, "/tasks", {"title": "Perdida", "status": "todo", "project_id": 999})

    assert response.status_code == 404
    assert "error" in response.json()


def test_create_task_invalid_json_is_400(client, db):
    response = client.post("/tasks", data="{nope", content_type="application/json")

    assert response.status_code == 400
    assert response.json() == {"error": "JSON inválido"}


def test_update_task_replaces_fields_and_broadcasts(
    client, project, make_task, collaborator, broadcasts, django_capture_on_commit_callbacks
):
    task = make_task(title="Antiga", description="velha")

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        response = put_json(client, f"/tasks/{task.pk}", {
            "title": "Nova",
            "status": "in progress",
            "project_id": project.pk,
            "assigned_to": collaborator.pk,
        })

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Nova"
    assert body["description"] == ""
    assert body["status"] == "in progress"
    assert body["assigned_user_name"] == "bruno"

    assert len(callbacks) == 1
    assert broadcasts == [(project.pk, "task_updated", body)]

    task.refresh_from_db()
    assert task.status == TaskStatus.IN_PROGRESS


def test_update_unknown_task_is_404_without_broadcast(client, project, broadcasts, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        response = put_json(client, "/tasks/4242", {"title": "x", "status": "done", "project_id": project.pk})

    assert response.status_code == 404
    assert callbacks == []
    assert broadcasts == []


def test_update_cannot_move_task_between_projects(client, make_task, other_project, broadcasts):
    task = make_task()

    response = put_json(client, f"/tasks/{task.pk}", {
        "title": task.title,
        "status": "done",
        "project_id": other_project.pk,
    })

    assert response.status_code == 400
    task.refresh_from_db()
    assert task.status == TaskStatus.TODO
    assert broadcasts == []


def test_update_rejects_unknown_status(client, make_task, broadcasts):
    task = make_task()

    response = put_json(client, f"/tasks/{task.pk}", {"title": task.title, "status": "archived"})

    assert response.status_code == 400
    assert broadcasts == []


def test_delete_task_broadcasts_id_and_project(
    client, project, make_task, broadcasts, django_capture_on_commit_callbacks
):
    task = make_task()
    task_id = task.pk

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        response = client.delete(f"/tasks/{task_id}")

    assert response.status_code == 204
    assert response.content == b""
    assert len(callbacks) == 1
    assert broadcasts == [(project.pk, "task_deleted", {"id": task_id, "project_id": project.pk})]
    assert not Task.objects.filter(pk=task_id).exists()


def test_delete_unknown_task_is_404(client, db, broadcasts):
    response = client.delete("/tasks/31337")

    assert response.status_code == 404
    assert broadcasts == []


def test_list_tasks_only_returns_the_project(client, project, other_project, make_task):
    mine = make_task(title="Minha")
    make_task(title="Alheia", project=other_project)

    response = client.get(f"/tasks/{project.pk}")

    assert [task["id"] for task in response.json()] == [mine.pk]


def test_list_tasks_store_failure_is_500(client, project, monkeypatch):
    def broken_queryset():
        raise DatabaseError("conexão perdida")

    monkeypatch.setattr(task_service, "_queryset", broken_queryset)

    response = client.get(f"/tasks/{project.pk}")

    assert response.status_code == 500
    assert response.json() == {"error": "Erro ao acessar o banco de dados"}


def test_method_not_allowed(client, db):
    assert client.get("/tasks").status_code == 405
    assert client.post("/tasks/1").status_code == 405
