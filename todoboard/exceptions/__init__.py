"""
Error taxonomy and HTTP exception handlers.
"""
from .errors import (
    TodoError,
    ValidationError,
    NotFoundError,
    AuthError,
    InternalError,
    StorageError,
)

__all__ = [
    "TodoError",
    "ValidationError",
    "NotFoundError",
    "AuthError",
    "InternalError",
    "StorageError",
]
