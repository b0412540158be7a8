# checktable/core/errors.py
"""
Error types raised by the table service.

Every error carries the HTTP status it maps to and a message that is safe to
show to the user. The handlers in ``checktable.main`` turn them into responses.
"""
from fastapi import status


class TableError(Exception):
    """Base class for errors surfaced to API callers"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(TableError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not Found"


class InvalidOperation(TableError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Operation is not allowed"


class MalformedRequest(TableError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Malformed request"


class PayloadTooLarge(TableError):
    status_code = 413
    default_message = "Request body too large"


class StorageError(TableError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Table storage is unavailable"


class Forbidden(TableError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"
