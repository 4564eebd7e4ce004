import os
import tempfile

# must be set before timetable_backend.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="timetable-logs-")

import pytest
from fastapi.testclient import TestClient

from timetable_backend.database import Base, SessionLocal, engine
from timetable_backend.main import app


def slot(**overrides):
    fields = {
        "subject": "Math",
        "teacher": "Smith",
        "day": "Mon",
        "section": "B",
        "start_time": "09:00",
        "end_time": "10:00",
        "time_slot_label": "Period 1",
    }
    fields.update(overrides)
    return fields


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def session_factory():
    return SessionLocal


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def register(client, username="alice", email=None, password="secret123"):
    resp = client.post(
        "/auth/register",
        json={"username": username, "email": email or f"{username}@example.com", "password": password},
    )
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def auth_headers(client):
    return register(client)
