"""
Service container for dependency injection.
Holds the storage handle, credential store and repositories built once at
startup. The container lives on ``app.state.services``; routes reach it
through the FastAPI dependencies below instead of a module-level global.
"""
import logging

from todoboard.adapters.http_framework import HTTPFrameworkAdapter
from todoboard.auth.credentials import CredentialStore
from todoboard.config import Settings
from todoboard.storage import create_storage, GroupRepository, TaskRepository
from todoboard.storage.interface import StorageInterface

http_adapter = HTTPFrameworkAdapter()
Request = http_adapter.Request

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Container for all application services."""

    def __init__(self, settings: Settings, storage: StorageInterface = None):
        self.settings = settings
        self.storage = storage if storage is not None else create_storage(settings)
        self.storage.initialize()

        self.credentials = CredentialStore(self.storage, rounds=settings.bcrypt_rounds)
        if settings.default_username:
            self.credentials.ensure_default_user(settings.default_username, settings.default_password)

        self.groups = GroupRepository(self.storage)
        self.tasks = TaskRepository(self.storage)
        logger.info(f"Services initialized ({self.storage.backend} storage)")

    def close(self) -> None:
        self.storage.close()


def get_services(request: Request) -> ServiceContainer:
    """Get the service container attached to the running app."""
    return request.app.state.services


def get_group_repository(request: Request) -> GroupRepository:
    return get_services(request).groups


def get_task_repository(request: Request) -> TaskRepository:
    return get_services(request).tasks


def get_credential_store(request: Request) -> CredentialStore:
    return get_services(request).credentials
