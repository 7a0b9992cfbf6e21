"""
Storage interface - defines the contract for all storage backends.

Backends implement storage mechanics only: scoping filters arrive as
parameters, and validation or ownership rules live in the repositories.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

# Columns a caller may change through update_group / update_task.
GROUP_MUTABLE_FIELDS = ("name", "color")
TASK_MUTABLE_FIELDS = ("title", "description", "deadline", "group_id", "completed")


def utc_now() -> str:
    """Current time as an ISO-8601 UTC string with microseconds."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class StorageInterface(ABC):
    """Abstract interface for storage operations."""

    backend = "abstract"

    # Lifecycle
    @abstractmethod
    def initialize(self) -> None:
        """Create the schema or backing file if needed."""
        pass

    @abstractmethod
    def ping(self) -> bool:
        """Return True if the backing store is reachable."""
        pass

    def close(self) -> None:
        """Release resources held by the backend."""
        pass

    # User operations
    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        """Get a user (including password_hash) by username."""
        pass

    @abstractmethod
    def get_user_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        """Get a user by ID."""
        pass

    @abstractmethod
    def create_user(self, username: str, password_hash: str) -> int:
        """Create a user and return its ID."""
        pass

    @abstractmethod
    def delete_user(self, user_id: int) -> bool:
        """Delete a user together with its groups and tasks."""
        pass

    # Group operations
    @abstractmethod
    def list_groups(self, user_id: int) -> List[Dict[str, Any]]:
        """List a user's groups with task_count, newest first."""
        pass

    @abstractmethod
    def get_group(self, group_id: int, user_id: int) -> Optional[Dict[str, Any]]:
        """Get one of a user's groups with task_count."""
        pass

    @abstractmethod
    def group_exists(self, group_id: int, user_id: int) -> bool:
        """Return True if the group exists and belongs to the user."""
        pass

    @abstractmethod
    def create_group(self, user_id: int, name: str, color: Optional[str] = None) -> int:
        """Create a group and return its ID."""
        pass

    @abstractmethod
    def update_group(self, group_id: int, user_id: int, fields: Dict[str, Any]) -> bool:
        """Apply fields to a user's group. Returns False if no row matched."""
        pass

    @abstractmethod
    def delete_group(self, group_id: int, user_id: int) -> bool:
        """Delete a user's group, clearing group_id on its tasks."""
        pass

    # Task operations
    @abstractmethod
    def list_tasks(
        self,
        user_id: int,
        group_id: Optional[int] = None,
        completed: Optional[bool] = None,
    ) -> List[Dict[str, Any]]:
        """List a user's tasks with group_name/group_color, newest first."""
        pass

    @abstractmethod
    def get_task(self, task_id: int, user_id: int) -> Optional[Dict[str, Any]]:
        """Get one of a user's tasks with group_name/group_color."""
        pass

    @abstractmethod
    def create_task(self, user_id: int, fields: Dict[str, Any]) -> int:
        """Create a task and return its ID."""
        pass

    @abstractmethod
    def update_task(self, task_id: int, user_id: int, fields: Dict[str, Any]) -> bool:
        """Apply fields to a user's task and refresh updated_at."""
        pass

    @abstractmethod
    def delete_task(self, task_id: int, user_id: int) -> bool:
        """Delete a user's task."""
        pass
