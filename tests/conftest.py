import mongomock
import pytest
from fastapi.testclient import TestClient

from database import ensure_indexes, get_store
from main import app
from notifications import get_notifier


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def notify_inquiry(self, inquiry):
        self.sent.append(dict(inquiry))


@pytest.fixture(autouse=True)
def settings(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    # Cheap hashes keep the suite fast.
    monkeypatch.setenv("PASSWORD_HASH_METHOD", "pbkdf2:sha256:1000")
    monkeypatch.setenv("ADMIN_REGISTRATION", "open")


@pytest.fixture()
def store():
    db = mongomock.MongoClient()["smma_test"]
    ensure_indexes(db)
    return db


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def client(store, notifier):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def token(client):
    r = client.post("/api/admin/register", json={"username": "admin", "password": "s3cret"})
    assert r.status_code == 201
    r = client.post("/api/admin/login", json={"username": "admin", "password": "s3cret"})
    assert r.status_code == 200
    return r.json()["token"]


@pytest.fixture()
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
