"""
Activity recorder: the append-only ``activities`` collection.

Activities are never updated or deleted. The ``action`` text is formatted
once, at write time, by the ``*_message`` helpers below.
"""
from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.database import Database

from database import ACTIVITIES
from errors import ValidationError, storage_errors
from schemas import DEFAULT_PROJECT_ID, Activity, TaskStatus

DEFAULT_LIMIT = 20

STATUS_LABELS = {
    TaskStatus.TODO.value: "To Do",
    TaskStatus.IN_PROGRESS.value: "In Progress",
    TaskStatus.DONE.value: "Done",
}

# Newest first; _id breaks ties between activities written in the same millisecond.
FEED_ORDER = [("createdAt", DESCENDING), ("_id", DESCENDING)]


def created_message(title: str) -> str:
    return f"created task '{title}'"


def moved_message(title: str, status: str) -> str:
    return f"moved task '{title}' to {STATUS_LABELS[status]}"


def deleted_message(title: str) -> str:
    return f"deleted task '{title}'"


def commented_message(title: str) -> str:
    return f"commented on task '{title}'"


class ActivityRecorder:
    def __init__(self, db: Database):
        self.collection = db[ACTIVITIES]

    def record(
        self,
        user_id: Optional[str],
        action: str,
        task_id: Optional[str] = None,
        project_id: str = DEFAULT_PROJECT_ID,
    ) -> Activity:
        activity = Activity(
            id=str(ObjectId()),
            user_id=user_id,
            action=action,
            task_id=task_id,
            project_id=project_id,
            created_at=datetime.now(timezone.utc),
        )
        with storage_errors("Error recording activity"):
            self.collection.insert_one(activity.model_dump(by_alias=True))
        return activity

    def list(self, limit: int = DEFAULT_LIMIT) -> List[Activity]:
        """Return at most ``limit`` activities, newest first."""
        if limit < 1:
            raise ValidationError("limit must be a positive integer")
        with storage_errors("Error fetching activities"):
            docs = list(self.collection.find().sort(FEED_ORDER).limit(limit))
        return [Activity.model_validate(d) for d in docs]
