"""
Domain exceptions raised by repositories, storage and auth.
Each carries the HTTP status it is surfaced as.
"""


class TodoError(Exception):
    """Base class for service errors."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TodoError):
    """Malformed or missing required input."""
    status_code = 400


class NotFoundError(TodoError):
    """Entity is absent or not owned by the caller."""
    status_code = 404


class AuthError(TodoError):
    """Missing or bad credentials."""
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class InternalError(TodoError):
    """Unexpected failure; the message is never sent to the client."""
    status_code = 500


class StorageError(InternalError):
    """Backing store could not be read or written."""
