import logging

import mongomock
import pytest
from fastapi.testclient import TestClient

import main
from config import Settings
from logging_setup import setup_logging


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    pymongo_level = logging.getLogger("pymongo").level
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.getLogger("pymongo").setLevel(pymongo_level)


def test_setup_logging_installs_single_handler(restore_root_logger):
    setup_logging("DEBUG")
    setup_logging("DEBUG")

    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert logging.getLogger("pymongo").level == logging.WARNING


def test_app_configures_logging_when_it_owns_the_connection(monkeypatch):
    calls = []
    client = mongomock.MongoClient()
    monkeypatch.setattr(main, "setup_logging", calls.append)
    monkeypatch.setattr(main, "connect", lambda settings: client)

    app = main.create_app(settings=Settings(log_level="DEBUG", database_name="kanban_logging"))
    with TestClient(app) as c:
        assert c.get("/api/users").status_code == 200

    assert calls == ["DEBUG"]


def test_injected_database_leaves_logging_alone(monkeypatch, db):
    calls = []
    monkeypatch.setattr(main, "setup_logging", calls.append)

    with TestClient(main.create_app(settings=Settings(), db=db)):
        pass

    assert calls == []
