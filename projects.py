"""The singleton project ``p1``, created lazily on first fetch."""
from datetime import datetime, timezone

from pymongo.database import Database

from database import PROJECTS
from errors import NotFound, storage_errors
from schemas import DEFAULT_PROJECT_ID, Project
from tasks import TaskStore
from users import UserStore


class ProjectStore:
    def __init__(self, db: Database):
        self.collection = db[PROJECTS]
        self.tasks = TaskStore(db)
        self.users = UserStore(db)

    def get(self, project_id: str) -> Project:
        """Return the project with every task embedded and every user as a member."""
        if project_id != DEFAULT_PROJECT_ID:
            raise NotFound("Project not found")
        defaults = {
            "name": "Kanban Task Management",
            "description": "Kanban-style task management application",
            "createdBy": "1",
            "createdAt": datetime.now(timezone.utc),
        }
        with storage_errors("Error fetching project"):
            # Upsert so two first fetches cannot create two copies.
            self.collection.update_one(
                {"id": DEFAULT_PROJECT_ID}, {"$setOnInsert": defaults}, upsert=True
            )
            doc = self.collection.find_one({"id": DEFAULT_PROJECT_ID})
        return Project.model_validate(
            {**doc, "tasks": self.tasks.list(), "members": self.users.list()}
        )
