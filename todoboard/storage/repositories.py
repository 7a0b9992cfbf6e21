"""
Repository layer for groups and tasks.

Repositories hold the business rules (required fields, group ownership,
scoping by the caller's user id) and talk to a StorageInterface through
its named operations. Every method takes the caller's ``user_id``
explicitly; rows owned by anyone else are reported as not found.
"""
import logging
from typing import Any, Dict, List, Optional

from todoboard.exceptions import ValidationError, NotFoundError, InternalError
from todoboard.storage.interface import StorageInterface, GROUP_MUTABLE_FIELDS, TASK_MUTABLE_FIELDS

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


class GroupRepository:
    """Repository for group operations."""

    def __init__(self, storage: StorageInterface):
        """Initialize repository with a storage backend.

        Args:
            storage: Backend used for all reads and writes
        """
        self.storage = storage

    def list(self, user_id: int) -> List[Dict[str, Any]]:
        """List the user's groups, newest first, each with task_count."""
        return self.storage.list_groups(user_id)

    def get(self, user_id: int, group_id: int) -> Dict[str, Any]:
        """Get a group with task_count and its tasks.

        Args:
            user_id: Caller's user ID
            group_id: Group ID

        Returns:
            Group dictionary with a ``tasks`` list, newest first

        Raises:
            NotFoundError: If the caller owns no group with this ID
        """
        group = self.storage.get_group(group_id, user_id)
        if not group:
            raise NotFoundError("Group not found")
        group["tasks"] = self.storage.list_tasks(user_id, group_id=group_id)
        return group

    def create(self, user_id: int, name: Any, color: Optional[str] = None) -> Dict[str, Any]:
        """Create a group.

        Args:
            user_id: Owner's user ID
            name: Group name, must not be blank
            color: Optional display color

        Returns:
            Created group dictionary (task_count is 0)

        Raises:
            ValidationError: If name is missing or blank
        """
        if _is_blank(name):
            raise ValidationError("Name is required")

        group_id = self.storage.create_group(user_id, name, color or None)
        logger.info(f"Created group {group_id} for user {user_id}")

        group = self.storage.get_group(group_id, user_id)
        if not group:
            logger.error(f"Group {group_id} was created but could not be retrieved")
            raise InternalError("Group was created but could not be retrieved")
        return group

    def update(self, user_id: int, group_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Update name and/or color of a group.

        Fields absent from ``changes`` are left unchanged; an empty
        ``changes`` returns the group as it is.

        Raises:
            NotFoundError: If the caller owns no group with this ID
            ValidationError: If a provided name is blank
        """
        if not self.storage.group_exists(group_id, user_id):
            raise NotFoundError("Group not found")

        if "name" in changes and _is_blank(changes["name"]):
            raise ValidationError("Name cannot be empty")

        fields = {k: v for k, v in changes.items() if k in GROUP_MUTABLE_FIELDS}
        if fields and not self.storage.update_group(group_id, user_id, fields):
            raise NotFoundError("Group not found")

        group = self.storage.get_group(group_id, user_id)
        if not group:
            raise NotFoundError("Group not found")
        return group

    def delete(self, user_id: int, group_id: int) -> None:
        """Delete a group. Its tasks are kept with group_id cleared.

        Raises:
            NotFoundError: If the caller owns no group with this ID
        """
        if not self.storage.delete_group(group_id, user_id):
            raise NotFoundError("Group not found")
        logger.info(f"Deleted group {group_id} for user {user_id}")


class TaskRepository:
    """Repository for task operations."""

    def __init__(self, storage: StorageInterface):
        """Initialize repository with a storage backend.

        Args:
            storage: Backend used for all reads and writes
        """
        self.storage = storage

    def _check_group(self, user_id: int, group_id: Any) -> None:
        if isinstance(group_id, bool) or not isinstance(group_id, int):
            raise ValidationError("Invalid group")
        if not self.storage.group_exists(group_id, user_id):
            raise ValidationError("Invalid group")

    def list(
        self,
        user_id: int,
        group_id: Optional[int] = None,
        completed: Optional[bool] = None,
    ) -> List[Dict[str, Any]]:
        """List the user's tasks, newest first.

        Args:
            user_id: Caller's user ID
            group_id: Optional group filter
            completed: Optional completion filter

        Returns:
            Task dictionaries with group_name and group_color
        """
        return self.storage.list_tasks(user_id, group_id=group_id, completed=completed)

    def get(self, user_id: int, task_id: int) -> Dict[str, Any]:
        """Get a task.

        Raises:
            NotFoundError: If the caller owns no task with this ID
        """
        task = self.storage.get_task(task_id, user_id)
        if not task:
            raise NotFoundError("Task not found")
        return task

    def create(
        self,
        user_id: int,
        title: Any,
        description: Optional[str] = None,
        deadline: Optional[str] = None,
        group_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Create a task. New tasks are not completed.

        Args:
            user_id: Owner's user ID
            title: Task title, must not be blank
            description: Optional description
            deadline: Optional ISO-8601 deadline
            group_id: Optional group, must be owned by the same user

        Returns:
            Created task dictionary with group_name and group_color

        Raises:
            ValidationError: If title is blank or the group is not the caller's
        """
        if _is_blank(title):
            raise ValidationError("Title is required")
        if group_id is not None:
            self._check_group(user_id, group_id)

        task_id = self.storage.create_task(user_id, {
            "title": title,
            "description": description or None,
            "deadline": deadline or None,
            "group_id": group_id,
            "completed": False,
        })
        logger.info(f"Created task {task_id} for user {user_id}")

        task = self.storage.get_task(task_id, user_id)
        if not task:
            logger.error(f"Task {task_id} was created but could not be retrieved")
            raise InternalError("Task was created but could not be retrieved")
        return task

    def update(self, user_id: int, task_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Apply the provided fields to a task.

        A ``group_id`` of None clears the group; any other value must be a
        group owned by the caller. ``updated_at`` is refreshed even when
        ``changes`` is empty.

        Raises:
            NotFoundError: If the caller owns no task with this ID
            ValidationError: If the group is invalid or a provided title is blank
        """
        if not self.storage.get_task(task_id, user_id):
            raise NotFoundError("Task not found")

        if changes.get("group_id") is not None:
            self._check_group(user_id, changes["group_id"])

        if "title" in changes and _is_blank(changes["title"]):
            raise ValidationError("Title cannot be empty")

        fields = {
            k: v for k, v in changes.items()
            if k in TASK_MUTABLE_FIELDS
        }
        if "completed" in fields:
            fields["completed"] = bool(fields["completed"])

        if not self.storage.update_task(task_id, user_id, fields):
            raise NotFoundError("Task not found")
        return self.get(user_id, task_id)

    def delete(self, user_id: int, task_id: int) -> None:
        """Delete a task.

        Raises:
            NotFoundError: If the caller owns no task with this ID
        """
        if not self.storage.delete_task(task_id, user_id):
            raise NotFoundError("Task not found")
        logger.info(f"Deleted task {task_id} for user {user_id}")

    def set_completed(self, user_id: int, task_id: int, completed: Any) -> Dict[str, Any]:
        """Mark a task completed or not completed.

        Raises:
            ValidationError: If completed is not a boolean
            NotFoundError: If the caller owns no task with this ID
        """
        if not isinstance(completed, bool):
            raise ValidationError("completed must be a boolean")
        if not self.storage.update_task(task_id, user_id, {"completed": completed}):
            raise NotFoundError("Task not found")
        return self.get(user_id, task_id)
