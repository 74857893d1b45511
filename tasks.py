"""
Task store: the ``kanban`` collection.

Status is a flat enum. Any of the three values may replace any other; there
is no transition table. Activity logging is not done here; callers record
activities after a store call has succeeded (see main.py).
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.database import Database

from database import TASKS
from errors import NotFound, ValidationError, storage_errors
from schemas import Comment, Task, TaskCreate, TaskStatus, TaskUpdate

logger = logging.getLogger(__name__)

# Keys a PUT may not set to null.
NON_NULLABLE = ("title", "description", "status", "priority", "labels")

# Insertion order breaks ties between tasks created in the same millisecond.
LIST_ORDER = [("createdAt", ASCENDING), ("_id", ASCENDING)]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _clean_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    return title


class TaskStore:
    def __init__(self, db: Database):
        self.collection = db[TASKS]

    def create(self, payload: TaskCreate) -> Task:
        data = payload.model_dump(by_alias=True)
        data["title"] = _clean_title(data.get("title"))
        task = Task.model_validate(
            {**data, "id": str(ObjectId()), "createdAt": _now(), "comments": []}
        )
        with storage_errors("Error creating task"):
            self.collection.insert_one(task.model_dump(by_alias=True))
        logger.debug("Created task %s", task.id)
        return task

    def get(self, task_id: str) -> Task:
        with storage_errors("Error fetching task"):
            doc = self.collection.find_one({"id": task_id})
        if doc is None:
            raise NotFound("Task not found")
        return Task.model_validate(doc)

    def update(self, task_id: str, patch: TaskUpdate) -> Tuple[Task, Task]:
        """Overwrite the fields present in ``patch``.

        Returns ``(before, after)`` so the caller can tell whether the status
        moved. Raises NotFound before writing anything if the task is absent.
        """
        changes = patch.model_dump(by_alias=True, exclude_unset=True)
        for key in NON_NULLABLE:
            if key in changes and changes[key] is None:
                raise ValidationError(f"{key} cannot be null")
        if "title" in changes:
            changes["title"] = _clean_title(changes["title"])

        with storage_errors("Error updating task"):
            if changes:
                # Pre-image of this exact write, not of an earlier read.
                before = self.collection.find_one_and_update(
                    {"id": task_id},
                    {"$set": changes},
                    return_document=ReturnDocument.BEFORE,
                )
            else:
                before = self.collection.find_one({"id": task_id})
        if before is None:
            raise NotFound("Task not found")
        after = {**before, **changes}
        return Task.model_validate(before), Task.model_validate(after)

    def delete(self, task_id: str) -> Task:
        """Remove a task and return it as it was. Not idempotent."""
        with storage_errors("Error deleting task"):
            doc = self.collection.find_one_and_delete({"id": task_id})
        if doc is None:
            raise NotFound("Task not found")
        return Task.model_validate(doc)

    def add_comment(self, task_id: str, user_id: str, content: str) -> Comment:
        content = (content or "").strip()
        if not content:
            raise ValidationError("Comment content is required")
        comment = Comment(id=str(ObjectId()), user_id=user_id, content=content, created_at=_now())
        with storage_errors("Error adding comment"):
            result = self.collection.update_one(
                {"id": task_id}, {"$push": {"comments": comment.model_dump(by_alias=True)}}
            )
        if result.matched_count == 0:
            raise NotFound("Task not found")
        return comment

    def list(self, status: Optional[str] = None, assignee_id: Optional[str] = None) -> List[Task]:
        query = {}
        if status:
            query["status"] = status
        if assignee_id:
            query["assigneeId"] = assignee_id
        with storage_errors("Error fetching tasks"):
            docs = list(self.collection.find(query).sort(LIST_ORDER))
        return [Task.model_validate(d) for d in docs]

    def board(self) -> Dict[str, List[Task]]:
        """All tasks grouped into one column per status."""
        columns = {status.value: [] for status in TaskStatus}
        for task in self.list():
            columns[task.status].append(task)
        return columns
