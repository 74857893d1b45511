from uuid import uuid4

import mongomock
import pytest
from fastapi.testclient import TestClient

from activities import ActivityRecorder
from config import Settings
from main import create_app
from tasks import TaskStore


@pytest.fixture()
def db():
    """A fresh in-memory database per test."""
    client = mongomock.MongoClient()
    yield client[f"kanban_{uuid4().hex}"]
    client.close()


@pytest.fixture()
def task_store(db) -> TaskStore:
    return TaskStore(db)


@pytest.fixture()
def recorder(db) -> ActivityRecorder:
    return ActivityRecorder(db)


@pytest.fixture()
def client(db):
    """TestClient with the lifespan run, so indexes exist and users are seeded."""
    app = create_app(settings=Settings(), db=db)
    with TestClient(app) as c:
        yield c
