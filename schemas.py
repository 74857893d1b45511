"""
Database Schemas for the Kanban Task API

Each document model below maps to a MongoDB collection (see the collection
names in database.py). Documents are stored and served with camelCase keys,
so every model uses a camelCase alias generator while the Python side keeps
snake_case attribute names.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_PROJECT_ID = "p1"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "inProgress"
    DONE = "done"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Label(str, Enum):
    BUG = "bug"
    FEATURE = "feature"
    ENHANCEMENT = "enhancement"
    DOCUMENTATION = "documentation"


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"


class CamelModel(BaseModel):
    # Enum fields are kept as their plain string values so documents can be
    # written to MongoDB straight from model_dump().
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
    )


def _unique_labels(labels):
    if labels is None:
        return labels
    seen = []
    for label in labels:
        if label not in seen:
            seen.append(label)
    return seen


# Users
class User(CamelModel):
    id: str
    name: str
    email: str = Field(..., description="Unique email address")
    avatar: Optional[str] = Field(None, description="Profile image URL")
    role: Role = Role.MEMBER


# Tasks
class Comment(CamelModel):
    id: str
    user_id: str = Field(..., description="User id, not checked against the users collection")
    content: str
    created_at: datetime


class Task(CamelModel):
    id: str
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    labels: List[Label] = Field(default_factory=list)
    assignee_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    due_date: Optional[datetime] = None
    comments: List[Comment] = Field(default_factory=list)

    @field_validator("labels")
    @classmethod
    def dedupe_labels(cls, labels):
        return _unique_labels(labels)


# Activity feed
class Activity(CamelModel):
    id: str
    user_id: Optional[str] = None
    action: str = Field(..., description="Human readable message, formatted at write time")
    task_id: Optional[str] = None
    project_id: Optional[str] = DEFAULT_PROJECT_ID
    created_at: datetime


# Project (singleton)
class Project(CamelModel):
    id: str
    name: str
    description: str = ""
    created_by: Optional[str] = None
    created_at: datetime
    tasks: List[Task] = Field(default_factory=list)
    members: List[User] = Field(default_factory=list)


# Request models
class LoginRequest(BaseModel):
    email: EmailStr
    # Accepted and ignored: login is an identity lookup, not authentication.
    password: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    user: User


class TaskCreate(CamelModel):
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    labels: List[Label] = Field(default_factory=list)
    assignee_id: Optional[str] = None
    created_by: Optional[str] = None
    due_date: Optional[datetime] = None

    @field_validator("labels")
    @classmethod
    def dedupe_labels(cls, labels):
        return _unique_labels(labels)


class TaskUpdate(CamelModel):
    """Fields a PUT may overwrite. Anything else in the body (id, createdBy,
    createdAt, comments) is ignored."""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    labels: Optional[List[Label]] = None
    assignee_id: Optional[str] = None
    due_date: Optional[datetime] = None

    @field_validator("labels")
    @classmethod
    def dedupe_labels(cls, labels):
        return _unique_labels(labels)


class CommentCreate(CamelModel):
    user_id: str
    content: str


class MessageResponse(BaseModel):
    message: str
