"""
Storage abstraction layer.
Provides a clean interface for data persistence that can be swapped out.
"""
import logging

from .interface import StorageInterface
from .sqlite_storage import SQLiteStorage, sqlite_supports_foreign_keys
from .json_storage import JSONStorage
from .repositories import GroupRepository, TaskRepository

logger = logging.getLogger(__name__)

BACKENDS = ("sqlite", "json", "auto")


def create_storage(settings) -> StorageInterface:
    """
    Build the storage backend named by settings.storage_backend.

    ``auto`` uses SQLite when the linked library enforces foreign keys and
    falls back to the JSON file otherwise.
    """
    backend = settings.storage_backend
    if backend not in BACKENDS:
        raise ValueError(f"Unknown storage backend '{backend}'. Must be one of: {', '.join(BACKENDS)}")

    if backend == "auto":
        if sqlite_supports_foreign_keys():
            backend = "sqlite"
        else:
            logger.warning("SQLite library lacks foreign key support, using JSON storage fallback")
            backend = "json"

    if backend == "sqlite":
        storage = SQLiteStorage(settings.db_path, slow_query_threshold=settings.slow_query_threshold)
    else:
        storage = JSONStorage(settings.json_db_path)
    logger.info(f"Using {storage.backend} storage backend")
    return storage


__all__ = [
    'StorageInterface',
    'SQLiteStorage',
    'JSONStorage',
    'GroupRepository',
    'TaskRepository',
    'create_storage',
]
