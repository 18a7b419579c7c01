from datetime import datetime, timedelta

import pytest
import pytz
from fastapi.testclient import TestClient

from app import create_app


@pytest.fixture
def client(memory_context):
    with TestClient(create_app(memory_context)) as client:
        yield client


def login(client, name, password):
    return client.post("/api/auth/login", json={"name": name, "password": password})


def due_in(days):
    return (datetime.now(pytz.utc) + timedelta(days=days)).isoformat()


def test_health_reports_hydration(client):
    assert client.get("/api/health").json() == {"status": "ok", "hydrated": True}


def test_login_hides_password(client):
    response = login(client, "jane doe", "secret")

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["name"] == "Jane Doe"
    assert "password" not in user


def test_wrong_credentials(client):
    response = login(client, "Jane Doe", "nope")

    assert response.status_code == 401
    assert response.json()["detail"] == "sorry, wrong credentials"
    assert client.get("/api/auth/session").json() == {"user": None, "loginError": True}


def test_session_and_logout(client):
    login(client, "Tom Teacher", "chalk")
    assert client.get("/api/auth/session").json()["user"]["role"] == "TEACHER"

    client.post("/api/auth/logout")

    assert client.get("/api/auth/session").json()["user"] is None


def test_role_gating(client):
    assert client.get("/api/stats").status_code == 401

    login(client, "Jane Doe", "secret")

    assert client.get("/api/stats").status_code == 403
    assert client.get("/api/assignments").status_code == 403


def test_teacher_to_student_to_admin_flow(client, memory_context, pdf_file):
    login(client, "Tom Teacher", "chalk")
    created = client.post(
        "/api/assignments",
        json={"title": "Lab report", "dueDate": due_in(7), "description": "Pendulum"},
    )
    assert created.status_code == 201
    assignment = created.json()
    assert assignment["section"] == "EINSTEIN_G11"
    assert assignment["subject"] == "Physics"

    login(client, "Jane Doe", "secret")
    pending = client.get("/api/student/assignments").json()
    assert [a["id"] for a in pending["pending"]] == [assignment["id"]]

    submitted = client.post(
        "/api/submissions",
        json={"assignmentId": assignment["id"], "files": [pdf_file.to_state()], "textResponse": "g = 9.8"},
    )
    assert submitted.status_code == 201
    assert submitted.json()["status"] == "ON_TIME"

    mine = client.get("/api/student/assignments").json()
    assert mine["pending"] == []
    assert mine["completed"][0]["submission"]["textResponse"] == "g = 9.8"

    login(client, "Ada Admin", "root")
    stats = client.get("/api/stats/EINSTEIN_G11").json()
    assert stats["expected"] == 2
    assert stats["onTime"] == 1
    assert stats["rate"] == 50


def test_empty_submission_is_rejected(client, memory_context):
    login(client, "Tom Teacher", "chalk")
    assignment = client.post("/api/assignments", json={"title": "Quiz", "dueDate": due_in(1)}).json()
    login(client, "Jane Doe", "secret")

    response = client.post("/api/submissions", json={"assignmentId": assignment["id"], "files": []})

    assert response.status_code == 400
    assert memory_context.store.submissions == []


def test_student_cannot_submit_to_other_section(client, pdf_file):
    login(client, "Tom Teacher", "chalk")
    assignment = client.post("/api/assignments", json={"title": "Quiz", "dueDate": due_in(1)}).json()
    login(client, "Gina Galilei", "stars")

    response = client.post(
        "/api/submissions", json={"assignmentId": assignment["id"], "files": [pdf_file.to_state()]}
    )

    assert response.status_code == 404


def test_teacher_manages_own_assignments(client, memory_context, pdf_file):
    login(client, "Tom Teacher", "chalk")
    assignment = client.post("/api/assignments", json={"title": "Essay", "dueDate": due_in(-1)}).json()

    listed = client.get("/api/assignments").json()
    assert listed[0]["overdue"] is True
    assert listed[0]["submissionCount"] == 0

    later = due_in(3)
    extended = client.patch(f"/api/assignments/{assignment['id']}/due-date", json={"dueDate": later})
    assert extended.json()["dueDate"] == later
    bad = client.patch(f"/api/assignments/{assignment['id']}/due-date", json={"dueDate": "never"})
    assert bad.status_code == 400

    assert client.get(f"/api/assignments/{assignment['id']}/submissions").json() == []
    assert client.delete(f"/api/assignments/{assignment['id']}").status_code == 200
    assert memory_context.store.assignments == []
    assert client.delete(f"/api/assignments/{assignment['id']}").status_code == 404


def test_invalid_assignment_form(client):
    login(client, "Tom Teacher", "chalk")

    assert client.post("/api/assignments", json={"title": "", "dueDate": due_in(1)}).status_code == 400


def test_admin_user_management(client, memory_context):
    login(client, "Ada Admin", "root")

    created = client.post(
        "/api/users", json={"name": "New Kid", "password": "pw", "role": "STUDENT", "section": "GALILEI_G12"}
    )
    assert created.status_code == 201
    user = created.json()
    assert user["username"] == "new_kid"

    galilei = client.get("/api/users", params={"section": "GALILEI_G12"}).json()
    assert [u["name"] for u in galilei] == ["Gina Galilei", "New Kid"]

    client.patch(f"/api/users/{user['id']}", json={"password": "pw2", "name": "Older Kid"})
    updated = memory_context.store.get_user(user["id"])
    assert updated.password == "pw2"
    assert updated.name == "Older Kid"

    assert client.post("/api/users", json={"name": "", "password": "pw"}).status_code == 400

    client.delete(f"/api/users/{user['id']}")
    assert memory_context.store.get_user(user["id"]) is None


def test_changes_are_written_back(memory_context):
    with TestClient(create_app(memory_context)) as client:
        login(client, "Ada Admin", "root")
        client.post("/api/users", json={"name": "Persisted", "password": "pw"})
        client.post("/api/auth/logout")

    # Shutdown flushes pending writes
    saved = memory_context.durable.values
    assert "Persisted" in [u["name"] for u in saved["users"]]
    assert saved["session_user"] is None
