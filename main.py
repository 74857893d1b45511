import logging
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError

from activities import (
    DEFAULT_LIMIT,
    ActivityRecorder,
    commented_message,
    created_message,
    deleted_message,
    moved_message,
)
from config import Settings, load_settings
from database import connect, ensure_indexes
from errors import KanbanError, StorageError, ValidationError
from logging_setup import setup_logging
from projects import ProjectStore
from schemas import (
    Activity, Comment, Project, Task, User,
    CommentCreate, LoginRequest, LoginResponse, MessageResponse,
    TaskCreate, TaskStatus, TaskUpdate,
)
from tasks import TaskStore
from users import UserStore

logger = logging.getLogger(__name__)


# Dependencies

def get_db(request: Request) -> Database:
    return request.app.state.db


def get_task_store(db: Database = Depends(get_db)) -> TaskStore:
    return TaskStore(db)


def get_activity_recorder(db: Database = Depends(get_db)) -> ActivityRecorder:
    return ActivityRecorder(db)


def get_user_store(db: Database = Depends(get_db)) -> UserStore:
    return UserStore(db)


def get_project_store(db: Database = Depends(get_db)) -> ProjectStore:
    return ProjectStore(db)


router = APIRouter(prefix="/api")


# Users
@router.get("/users", response_model=List[User])
def list_users(users: UserStore = Depends(get_user_store)):
    return users.list()


@router.post("/users/login", response_model=LoginResponse)
def login(data: LoginRequest, users: UserStore = Depends(get_user_store)):
    return LoginResponse(user=users.login(str(data.email)))


@router.get("/users/{user_id}", response_model=User)
def get_user(user_id: str, users: UserStore = Depends(get_user_store)):
    return users.get(user_id)


# Task routes
#
# Each mutating route writes the task first and then, as a second independent
# write, records the activity. The two are not transactional: if the task
# write fails nothing is recorded; if the activity write fails the task change
# stays in place and the client gets a 500.

@router.get("/tasks", response_model=List[Task])
def list_tasks(
    status: Optional[str] = None,
    assignee_id: Optional[str] = Query(None, alias="assigneeId"),
    tasks: TaskStore = Depends(get_task_store),
):
    # Empty values (`?status=&assigneeId=`) mean no filter.
    if status:
        try:
            status = TaskStatus(status).value
        except ValueError:
            raise ValidationError(f"Invalid status: {status}")
    return tasks.list(status=status or None, assignee_id=assignee_id or None)


@router.get("/tasks/board", response_model=Dict[str, List[Task]])
def task_board(tasks: TaskStore = Depends(get_task_store)):
    return tasks.board()


@router.get("/tasks/{task_id}", response_model=Task)
def get_task(task_id: str, tasks: TaskStore = Depends(get_task_store)):
    return tasks.get(task_id)


@router.post("/tasks", response_model=Task, status_code=201)
def create_task(
    payload: TaskCreate,
    tasks: TaskStore = Depends(get_task_store),
    activities: ActivityRecorder = Depends(get_activity_recorder),
):
    task = tasks.create(payload)
    activities.record(task.created_by, created_message(task.title), task_id=task.id)
    return task


@router.put("/tasks/{task_id}", response_model=Task)
def update_task(
    task_id: str,
    payload: TaskUpdate,
    tasks: TaskStore = Depends(get_task_store),
    activities: ActivityRecorder = Depends(get_activity_recorder),
):
    before, task = tasks.update(task_id, payload)
    if task.status != before.status:
        activities.record(
            task.created_by, moved_message(task.title, task.status), task_id=task.id
        )
    return task


@router.delete("/tasks/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: str,
    tasks: TaskStore = Depends(get_task_store),
    activities: ActivityRecorder = Depends(get_activity_recorder),
):
    task = tasks.delete(task_id)
    activities.record(task.created_by, deleted_message(task.title), task_id=task.id)
    return MessageResponse(message="Task deleted successfully")


# Comments
@router.post("/tasks/{task_id}/comments", response_model=Comment, status_code=201)
def add_comment(
    task_id: str,
    payload: CommentCreate,
    tasks: TaskStore = Depends(get_task_store),
    activities: ActivityRecorder = Depends(get_activity_recorder),
):
    comment = tasks.add_comment(task_id, payload.user_id, payload.content)
    # Separate read for the title used in the activity message.
    task = tasks.get(task_id)
    activities.record(comment.user_id, commented_message(task.title), task_id=task_id)
    return comment


# Activities
@router.get("/activities", response_model=List[Activity])
def list_activities(
    limit: Optional[str] = None,
    activities: ActivityRecorder = Depends(get_activity_recorder),
):
    if not limit:
        return activities.list(DEFAULT_LIMIT)
    try:
        count = int(limit)
    except ValueError:
        raise ValidationError("limit must be a positive integer")
    return activities.list(count)


# Project
@router.get("/projects/{project_id}", response_model=Project)
def get_project(project_id: str, projects: ProjectStore = Depends(get_project_store)):
    return projects.get(project_id)


# Error responses

async def kanban_error_handler(request: Request, exc: KanbanError):
    if isinstance(exc, StorageError):
        logger.error(
            "%s %s failed: %s", request.method, request.url.path, exc.message,
            exc_info=exc,
        )
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": [str(part) for part in e.get("loc", ())], "msg": e.get("msg", "")}
        for e in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"message": "Invalid request", "errors": errors})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(settings: Optional[Settings] = None, db: Optional[Database] = None) -> FastAPI:
    """Build the application.

    Without ``db`` the lifespan configures logging, connects to MongoDB using
    ``settings`` and closes the client on shutdown. Passing ``db`` skips all
    three and uses that database as is.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = None
        if app.state.db is None:
            setup_logging(settings.log_level)
            client = connect(settings)
            app.state.db = client[settings.database_name]
        ensure_indexes(app.state.db)
        UserStore(app.state.db).seed()
        logger.info("Kanban API started")
        try:
            yield
        finally:
            if client is not None:
                logger.info("Closing MongoDB connection")
                client.close()

    app = FastAPI(title="Kanban Task API", lifespan=lifespan)
    app.state.db = db

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(KanbanError, kanban_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/")
    def read_root():
        return {"message": "Kanban Task API"}

    @app.get("/test")
    def test_database(request: Request):
        response = {
            "backend": "Running",
            "database": "Not Available",
            "connection_status": "Not Connected",
            "collections": [],
        }
        db = request.app.state.db
        if db is None:
            return response
        response["connection_status"] = "Connected"
        try:
            response["collections"] = db.list_collection_names()[:10]
            response["database"] = "Connected & Working"
        except PyMongoError as e:
            logger.warning("Database health check failed: %s", e)
            response["database"] = f"Connected but Error: {str(e)[:80]}"
        return response

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=load_settings().port)
