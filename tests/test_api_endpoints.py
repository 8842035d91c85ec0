import pytest
from fastapi.testclient import TestClient

from app.core.auth import verify_password
from app.db.mongodb import get_db
from tests.conftest import RecordingMailer
from app.main import app
from app.services.mail_service import get_mailer


def register(client, path, **body):
    return client.post(f"/api/{path}/register", json=body)


def test_student_end_to_end(client):
    response = register(client, "students", email="a@x.com", password="pw1", name="Asha", cgpa=8.5)
    assert response.status_code == 200
    payload = response.json()
    assert payload["message"] == "Registration successful"
    assert "password" not in payload["student"]
    assert payload["student"]["role"] == "student"
    assert payload["student"]["cgpa"] == "8.5"

    response = register(client, "admin", email="a@x.com", password="pw2")
    assert response.status_code == 400
    assert response.json()["message"] == "Email already in use"

    response = client.post("/api/students/login", json={"email": "a@x.com", "password": "wrong"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"

    response = client.post("/api/students/login", json={"email": "a@x.com", "password": "pw1"})
    assert response.status_code == 200
    assert response.json()["student"]["role"] == "student"
    assert "password" not in response.json()["student"]

    response = client.post("/api/students/forgot", json={"email": "nobody@x.com"})
    assert response.status_code == 404


@pytest.mark.parametrize("path,key", [
    ("students", "student"),
    ("faculty", "faculty"),
    ("tpo", "tpo"),
    ("admin", "admin"),
])
def test_each_role_uses_its_own_collection(client, db, path, key):
    response = register(client, path, email=f"{key}@x.com", password="pw")

    assert response.status_code == 200
    assert response.json()[key]["role"] == key
    collection = {"student": "students", "faculty": "faculties", "tpo": "tpos", "admin": "admins"}[key]
    assert db[collection].count_documents({"email": f"{key}@x.com"}) == 1


def test_update_via_api(client, db):
    register(client, "admin", email="ad@x.com", password="pw")

    response = client.post(
        "/api/admin/update",
        json={"email": "ad@x.com", "role": "student", "accessLevel": "Read", "employeeId": "E-7"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Changes Saved"
    assert body["admin"]["role"] == "admin"
    assert body["admin"]["accessLevel"] == "Full"
    assert body["admin"]["employeeId"] == "E-7"


def test_update_errors(client):
    assert client.post("/api/faculty/update", json={"name": "x"}).status_code == 400
    response = client.post("/api/faculty/update", json={"email": "ghost@x.com", "name": "x"})
    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


def test_password_reset_flow(client, db, mailer):
    register(client, "tpo", email="t@x.com", password="old")

    response = client.post("/api/tpo/forgot", json={"email": "t@x.com"})
    assert response.status_code == 200
    token = response.json()["resetToken"]
    assert len(mailer.sent) == 1

    response = client.post(f"/api/tpo/reset/{token}", json={"password": "new"})
    assert response.status_code == 200
    assert response.json() == {"message": "Password reset successful"}

    stored = db["tpos"].find_one({"email": "t@x.com"})
    assert verify_password("new", stored["password"])
    assert "resetPasswordToken" not in stored

    response = client.post(f"/api/tpo/reset/{token}", json={"password": "again"})
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid or expired token"


def test_forgot_returns_500_when_mail_fails(client, db):
    app.dependency_overrides[get_mailer] = lambda: RecordingMailer(fail=True)
    register(client, "students", email="a@x.com", password="pw")

    response = client.post("/api/students/forgot", json={"email": "a@x.com"})

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to send reset email", "error": "SMTP unavailable"}
    assert "resetPasswordToken" not in db["students"].find_one({"email": "a@x.com"})


def test_reset_requires_password(client):
    response = client.post("/api/students/reset/sometoken", json={})
    assert response.status_code == 400
    assert response.json()["message"] == "New password is required"


def test_role_agnostic_login(client):
    register(client, "faculty", email="f@x.com", password="pw")

    response = client.post("/api/login", json={"email": "f@x.com", "password": "pw"})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["role"] == "faculty"
    assert body["user"]["email"] == "f@x.com"
    assert "password" not in body["user"]

    response = client.post("/api/login", json={"email": "f@x.com", "password": "bad"})
    assert response.status_code == 401

    response = client.post("/api/login", json={"email": "f@x.com"})
    assert response.status_code == 400
    assert response.json()["message"] == "Email and password are required"


def test_malformed_body_is_400(client):
    response = client.post("/api/students/login", json={"email": {"nested": True}, "password": "pw"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request body"


def test_root_banner(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_malformed_register_and_update_bodies_use_operation_message(client):
    response = register(client, "students", email="a@x.com", password="pw", name={"first": "A"})
    assert response.status_code == 400
    assert response.json()["message"] == "Registration failed"
    assert "name" in response.json()["error"]

    response = client.post("/api/students/update", json={"email": "a@x.com", "skills": ["py"]})
    assert response.status_code == 400
    assert response.json()["message"] == "Update failed"


def test_unexpected_error_returns_json_message(db):
    class UnreachableDatabase:
        def __getitem__(self, name):
            raise RuntimeError("driver crashed")

    app.dependency_overrides[get_db] = lambda: UnreachableDatabase()
    try:
        client = TestClient(app, raise_server_exceptions=False)
        response = client.post("/api/students/login", json={"email": "a@x.com", "password": "pw"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error", "error": "driver crashed"}
