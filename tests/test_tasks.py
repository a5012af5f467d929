"""
Tests des endpoints /tasks (les deux stockages via la fixture `client`)
"""

from unittest.mock import MagicMock

from app.main import app
from app.repositories.base import TaskRepository
from app.routers.tasks import get_task_service
from app.services.task_service import TaskService


def create(client, **body):
    response = client.post("/tasks", json=body)
    assert response.status_code == 201
    return response.json()


# ========== TEST CREATE TASK ==========
def test_create_task_success(client):
    """Création complète"""
    response = client.post(
        "/tasks",
        json={
            "title": "  Ma première tâche ",
            "priority": 2,
            "tags": ["travail", "", "urgent"],
            "due_date": "2024-03-01T09:00:00Z",
            "notes": "avant midi"
        }
    )
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Ma première tâche"
    assert data["priority"] == 2
    assert data["tags"] == ["travail", "urgent"]
    assert data["due_date"] == "2024-03-01T09:00:00"
    assert data["notes"] == "avant midi"
    assert data["completed"] == False
    assert data["created_at"] == data["updated_at"]
    assert data["id"]


def test_create_task_blank_title(client):
    response = client.post("/tasks", json={"title": "   "})
    assert response.status_code == 400
    assert response.json() == {"error": "title is required"}


def test_create_task_without_body(client):
    response = client.post("/tasks")
    assert response.status_code == 400
    assert response.json() == {"error": "title is required"}


def test_create_task_invalid_json(client):
    response = client.post("/tasks", content="{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400


def test_create_task_invalid_priority_defaults(client):
    data = create(client, title="Prio", priority="abc")
    assert data["priority"] == 1


def test_create_task_invalid_due_date(client):
    response = client.post("/tasks", json={"title": "Due", "due_date": "someday"})
    assert response.status_code == 400
    assert response.json() == {"error": "due_date is not a valid timestamp"}


def test_create_task_duplicate_id(client):
    create(client, id="fixed", title="One")
    response = client.post("/tasks", json={"id": "fixed", "title": "Two"})
    assert response.status_code == 400


# ========== TEST LIST TASKS ==========
def test_list_tasks_empty(client):
    response = client.get("/tasks")
    assert response.status_code == 200
    assert response.json() == []


def test_list_tasks_newest_first(client):
    create(client, title="Tâche 1")
    create(client, title="Tâche 2")
    create(client, title="Tâche 3")

    response = client.get("/tasks")
    assert response.status_code == 200
    assert [t["title"] for t in response.json()] == ["Tâche 3", "Tâche 2", "Tâche 1"]


def test_filter_tasks_by_status(client):
    create(client, title="Todo")
    create(client, title="Done 1", completed=True)
    create(client, title="Done 2", completed=True)

    data = client.get("/tasks?status=completed").json()
    assert len(data) == 2
    assert all(t["completed"] for t in data)

    data = client.get("/tasks", params={"status": "active"}).json()
    assert [t["title"] for t in data] == ["Todo"]

    assert len(client.get("/tasks?status=whatever").json()) == 3


def test_search_tasks(client):
    create(client, title="Acheter du lait")
    create(client, title="Banque", notes="Appeler pour le LAIT")
    create(client, title="Sport")

    data = client.get("/tasks", params={"q": "lait"}).json()
    assert [t["title"] for t in data] == ["Banque", "Acheter du lait"]


def test_sort_tasks_by_due(client):
    create(client, title="2024", due_date="2024-01-01")
    create(client, title="none")
    create(client, title="2023", due_date="2023-06-01")

    data = client.get("/tasks?sort=due").json()
    assert [t["title"] for t in data] == ["2023", "2024", "none"]


def test_sort_tasks_by_priority(client):
    create(client, title="high", priority=3)
    create(client, title="low", priority=1)

    data = client.get("/tasks?sort=priority").json()
    assert [t["title"] for t in data] == ["low", "high"]


# ========== TEST GET TASK ==========
def test_get_task(client):
    task = create(client, title="Lire")
    response = client.get(f"/tasks/{task['id']}")
    assert response.status_code == 200
    assert response.json() == task


def test_get_task_not_found(client):
    response = client.get("/tasks/missing")
    assert response.status_code == 404
    assert response.json() == {"error": "not found"}


# ========== TEST UPDATE TASK ==========
def test_update_task_success(client):
    task = create(client, title="Tâche originale", priority=1, notes="garder")

    response = client.put(f"/tasks/{task['id']}", json={"title": "Tâche modifiée", "priority": 3})
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Tâche modifiée"
    assert data["priority"] == 3
    assert data["notes"] == "garder"
    assert data["created_at"] == task["created_at"]
    assert data["updated_at"] > task["updated_at"]


def test_update_task_toggle_completed(client):
    task = create(client, title="Cocher")
    data = client.put(f"/tasks/{task['id']}", json={"completed": True}).json()
    assert data["completed"] == True
    assert data["title"] == "Cocher"


def test_update_task_clear_due_date(client):
    task = create(client, title="Échéance", due_date="2024-01-01")
    data = client.put(f"/tasks/{task['id']}", json={"due_date": None}).json()
    assert data["due_date"] is None


def test_update_task_no_fields(client):
    task = create(client, title="Rien")
    response = client.put(f"/tasks/{task['id']}", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "no fields to update"}

    response = client.put(f"/tasks/{task['id']}")
    assert response.status_code == 400


def test_update_task_not_found(client):
    response = client.put("/tasks/missing", json={"completed": True})
    assert response.status_code == 404


def test_update_task_without_id(client):
    response = client.put("/tasks", json={"completed": True})
    assert response.status_code == 400
    assert response.json() == {"error": "id required"}


# ========== TEST DELETE TASK ==========
def test_delete_task_success(client):
    task = create(client, title="À supprimer")

    response = client.delete(f"/tasks/{task['id']}")
    assert response.status_code == 204
    assert response.content == b""

    assert client.get(f"/tasks/{task['id']}").status_code == 404
    assert client.get("/tasks").json() == []


def test_delete_task_twice(client):
    task = create(client, title="Deux fois")
    assert client.delete(f"/tasks/{task['id']}").status_code == 204
    assert client.delete(f"/tasks/{task['id']}").status_code == 204


def test_delete_task_without_id(client):
    response = client.delete("/tasks")
    assert response.status_code == 400
    assert response.json() == {"error": "id required"}


def test_task_id_is_url_decoded(client):
    create(client, id="a b", title="Espace")
    assert client.get("/tasks/a%20b").json()["title"] == "Espace"


# ========== TEST HTTP ==========
def test_preflight_returns_no_content(client):
    response = client.options("/tasks")
    assert response.status_code == 204
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert "PUT" in response.headers["access-control-allow-methods"]


def test_cors_headers_on_responses(client):
    response = client.get("/tasks")
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-headers"] == "Content-Type"


def test_method_not_allowed(client):
    response = client.patch("/tasks/abc", json={"completed": True})
    assert response.status_code == 405
    assert response.json() == {"error": "method not allowed"}


def test_netlify_function_path(client):
    task = client.post("/.netlify/functions/tasks", json={"title": "Compat"}).json()
    response = client.get(f"/.netlify/functions/tasks/{task['id']}")
    assert response.status_code == 200
    assert client.get("/tasks").json()[0]["id"] == task["id"]


def test_health(client, service):
    response = client.get("/health/z")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "backend": service.backend}


def test_internal_error_hides_details():
    from fastapi.testclient import TestClient

    broken = MagicMock(spec=TaskRepository)
    broken.backend = "relational"
    broken.list.side_effect = RuntimeError("password authentication failed for user neon")
    app.dependency_overrides[get_task_service] = lambda: TaskService(broken)
    try:
        response = TestClient(app).get("/tasks")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "internal error"}


def test_task_id_with_slash(client):
    create(client, id="a/b", title="Slash")

    response = client.get("/tasks/a%2Fb")
    assert response.status_code == 200
    assert response.json()["title"] == "Slash"

    response = client.put("/tasks/a%2Fb", json={"completed": True})
    assert response.status_code == 200
    assert response.json()["completed"] == True

    assert client.delete("/tasks/a%2Fb").status_code == 204
    assert client.get("/tasks/a%2Fb").status_code == 404
    assert client.get("/tasks").json() == []


def test_blank_id_is_replaced(client):
    task = create(client, id="  ", title="Blank id")
    assert task["id"].strip()

    assert client.get(f"/tasks/{task['id']}").status_code == 200
    assert client.delete(f"/tasks/{task['id']}").status_code == 204
    assert client.get("/tasks").json() == []


def test_unexpected_error_keeps_cors_headers():
    from fastapi.testclient import TestClient

    def broken_service():
        raise RuntimeError("boom")

    app.dependency_overrides[get_task_service] = broken_service
    try:
        response = TestClient(app, raise_server_exceptions=False).get("/tasks")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "internal error"}
    assert response.headers["access-control-allow-origin"] == "*"
