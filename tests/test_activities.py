import pytest

from activities import (
    ActivityRecorder,
    commented_message,
    created_message,
    deleted_message,
    moved_message,
)
from errors import ValidationError


def test_message_formats():
    assert created_message("Write spec") == "created task 'Write spec'"
    assert deleted_message("Write spec") == "deleted task 'Write spec'"
    assert commented_message("Write spec") == "commented on task 'Write spec'"
    assert moved_message("Write spec", "todo") == "moved task 'Write spec' to To Do"
    assert moved_message("Write spec", "inProgress") == "moved task 'Write spec' to In Progress"
    assert moved_message("Write spec", "done") == "moved task 'Write spec' to Done"


def test_record_persists_activity(recorder: ActivityRecorder, db):
    activity = recorder.record("1", "created task 'x'", task_id="t1")

    assert activity.id
    assert activity.project_id == "p1"
    doc = db["activities"].find_one({"id": activity.id})
    assert doc["userId"] == "1"
    assert doc["taskId"] == "t1"
    assert doc["action"] == "created task 'x'"


def test_record_without_task(recorder: ActivityRecorder):
    activity = recorder.record(None, "something happened")
    assert activity.task_id is None
    assert activity.user_id is None


def test_list_is_newest_first_and_limited(recorder: ActivityRecorder):
    for i in range(5):
        recorder.record("1", f"a{i}")

    latest = recorder.list(limit=3)

    assert [a.action for a in latest] == ["a4", "a3", "a2"]
    stamps = [a.created_at for a in latest]
    assert stamps == sorted(stamps, reverse=True)


def test_list_default_limit(recorder: ActivityRecorder):
    for i in range(25):
        recorder.record("1", f"a{i}")
    assert len(recorder.list()) == 20


def test_list_limit_larger_than_feed(recorder: ActivityRecorder):
    recorder.record("1", "only")
    assert [a.action for a in recorder.list(limit=10)] == ["only"]


@pytest.mark.parametrize("limit", [0, -1])
def test_list_rejects_non_positive_limit(recorder: ActivityRecorder, limit):
    with pytest.raises(ValidationError):
        recorder.list(limit=limit)
