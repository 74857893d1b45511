"""
Error taxonomy for the kanban API.

Every error carries the HTTP status it maps to; the request boundary in
main.py turns them into ``{"message": ...}`` responses.
"""
from contextlib import contextmanager

from pymongo.errors import PyMongoError


class KanbanError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(KanbanError):
    """Missing or malformed input, e.g. an empty task title."""

    status_code = 400


class NotFound(KanbanError):
    """The operation targets an id that does not exist."""

    status_code = 404


class StorageError(KanbanError):
    """The database is unreachable or rejected the operation.

    The message is returned to clients as-is, so it must stay generic; the
    underlying driver error is chained as ``__cause__`` for the server log.
    """

    status_code = 500


@contextmanager
def storage_errors(message: str):
    """Re-raise driver failures inside the block as StorageError(message)."""
    try:
        yield
    except PyMongoError as exc:
        raise StorageError(message) from exc
