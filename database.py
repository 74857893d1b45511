"""
MongoDB connection handling.

The client is created once at startup (see ``lifespan`` in main.py) and handed
to the stores explicitly; nothing here keeps a module-level connection.
"""
import logging
import time

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from config import Settings
from errors import StorageError, storage_errors

logger = logging.getLogger(__name__)

# Collection names
TASKS = "kanban"
USERS = "users"
ACTIVITIES = "activities"
PROJECTS = "projects"


def connect(settings: Settings) -> MongoClient:
    """Open a client and ping the server, retrying with a fixed delay.

    Raises StorageError once ``settings.db_connect_retries`` attempts have
    failed.
    """
    attempts = settings.db_connect_retries
    last_error = None
    for attempt in range(1, attempts + 1):
        client = MongoClient(settings.mongodb_uri, tz_aware=True, serverSelectionTimeoutMS=5000)
        try:
            client.admin.command("ping")
        except PyMongoError as exc:
            client.close()
            last_error = exc
            remaining = attempts - attempt
            logger.warning("MongoDB connection failed: %s (%d attempts left)", exc, remaining)
            if remaining:
                time.sleep(settings.db_connect_delay)
            continue
        logger.info("Connected to MongoDB at %s", settings.mongodb_uri)
        return client
    raise StorageError("Failed to connect to MongoDB after multiple attempts") from last_error


def ensure_indexes(db: Database) -> None:
    """Create the secondary indexes the filtered and sorted queries rely on."""
    with storage_errors("Error creating indexes"):
        db[TASKS].create_index([("status", ASCENDING)])
        db[TASKS].create_index([("assigneeId", ASCENDING)])
        db[USERS].create_index([("email", ASCENDING)], unique=True)
        db[ACTIVITIES].create_index([("createdAt", DESCENDING)])
