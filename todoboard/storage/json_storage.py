"""
JSON-file implementation of the storage interface.

The whole store is one document holding ``users``, ``groups`` and ``tasks``
collections. Every mutation rewrites the file before returning.
"""
import os
import copy
import json
import logging
import tempfile
import threading
from typing import Optional, List, Dict, Any

from todoboard.exceptions import StorageError
from todoboard.storage.interface import (
    StorageInterface,
    GROUP_MUTABLE_FIELDS,
    TASK_MUTABLE_FIELDS,
    utc_now,
)

logger = logging.getLogger(__name__)

COLLECTIONS = ("users", "groups", "tasks")


def _next_id(rows: List[Dict[str, Any]]) -> int:
    return max((row["id"] for row in rows), default=0) + 1


def _newest_first(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(rows, key=lambda row: (row["created_at"], row["id"]), reverse=True)


class JSONStorage(StorageInterface):
    """Storage backed by a single JSON file."""

    backend = "json"

    def __init__(self, path: str):
        self.path = path
        self._data: Dict[str, List[Dict[str, Any]]] = {name: [] for name in COLLECTIONS}
        self._lock = threading.RLock()

    # File handling

    def _load(self) -> None:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to load JSON store {self.path}: {e}") from e

        data = {name: list(raw.get(name, [])) for name in COLLECTIONS}
        for task in data["tasks"]:
            task.setdefault("group_id", None)
            task.setdefault("description", None)
            task.setdefault("deadline", None)
            task["completed"] = bool(task.get("completed", False))
        for group in data["groups"]:
            group.setdefault("color", None)
        self._data = data

    def _save(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".db-", suffix=".json", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(self._data, f, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write JSON store {self.path}: {e}") from e

    def _commit(self, snapshot: Dict[str, List[Dict[str, Any]]]) -> None:
        """Persist the in-memory document, restoring the snapshot on failure."""
        try:
            self._save()
        except StorageError:
            self._data = snapshot
            raise

    # Lifecycle

    def initialize(self) -> None:
        with self._lock:
            if os.path.exists(self.path):
                self._load()
                logger.info(f"Loaded JSON store from {self.path}")
            else:
                self._save()
                logger.info(f"Created JSON store at {self.path}")

    def ping(self) -> bool:
        return os.path.exists(self.path)

    # Lookups shared by the joins

    def _find(self, collection: str, row_id: int, user_id: Optional[int] = None):
        for row in self._data[collection]:
            if row["id"] == row_id and (user_id is None or row["user_id"] == user_id):
                return row
        return None

    def _with_task_count(self, group: Dict[str, Any]) -> Dict[str, Any]:
        result = dict(group)
        result["task_count"] = sum(
            1 for task in self._data["tasks"] if task.get("group_id") == group["id"]
        )
        return result

    def _with_group_fields(self, task: Dict[str, Any]) -> Dict[str, Any]:
        result = dict(task)
        group = self._find("groups", task["group_id"]) if task.get("group_id") is not None else None
        result["group_name"] = group["name"] if group else None
        result["group_color"] = group.get("color") if group else None
        return result

    # User operations

    def get_user_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            for user in self._data["users"]:
                if user["username"] == username:
                    return dict(user)
            return None

    def get_user_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            user = self._find("users", user_id)
            return dict(user) if user else None

    def create_user(self, username: str, password_hash: str) -> int:
        with self._lock:
            if any(user["username"] == username for user in self._data["users"]):
                raise StorageError(f"Duplicate username '{username}'")
            snapshot = copy.deepcopy(self._data)
            user_id = _next_id(self._data["users"])
            self._data["users"].append({
                "id": user_id,
                "username": username,
                "password_hash": password_hash,
                "created_at": utc_now(),
            })
            self._commit(snapshot)
            return user_id

    def delete_user(self, user_id: int) -> bool:
        with self._lock:
            if self._find("users", user_id) is None:
                return False
            snapshot = copy.deepcopy(self._data)
            self._data["users"] = [u for u in self._data["users"] if u["id"] != user_id]
            self._data["groups"] = [g for g in self._data["groups"] if g["user_id"] != user_id]
            self._data["tasks"] = [t for t in self._data["tasks"] if t["user_id"] != user_id]
            self._commit(snapshot)
            return True

    # Group operations

    def list_groups(self, user_id: int) -> List[Dict[str, Any]]:
        with self._lock:
            groups = [g for g in self._data["groups"] if g["user_id"] == user_id]
            return [self._with_task_count(g) for g in _newest_first(groups)]

    def get_group(self, group_id: int, user_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            group = self._find("groups", group_id, user_id)
            return self._with_task_count(group) if group else None

    def group_exists(self, group_id: int, user_id: int) -> bool:
        with self._lock:
            return self._find("groups", group_id, user_id) is not None

    def create_group(self, user_id: int, name: str, color: Optional[str] = None) -> int:
        with self._lock:
            snapshot = copy.deepcopy(self._data)
            group_id = _next_id(self._data["groups"])
            self._data["groups"].append({
                "id": group_id,
                "user_id": user_id,
                "name": name,
                "color": color,
                "created_at": utc_now(),
            })
            self._commit(snapshot)
            return group_id

    def update_group(self, group_id: int, user_id: int, fields: Dict[str, Any]) -> bool:
        with self._lock:
            group = self._find("groups", group_id, user_id)
            if group is None:
                return False
            updates = {k: fields[k] for k in GROUP_MUTABLE_FIELDS if k in fields}
            if not updates:
                return True
            snapshot = copy.deepcopy(self._data)
            group.update(updates)
            self._commit(snapshot)
            return True

    def delete_group(self, group_id: int, user_id: int) -> bool:
        with self._lock:
            if self._find("groups", group_id, user_id) is None:
                return False
            snapshot = copy.deepcopy(self._data)
            self._data["groups"] = [g for g in self._data["groups"] if g["id"] != group_id]
            for task in self._data["tasks"]:
                if task.get("group_id") == group_id:
                    task["group_id"] = None
            self._commit(snapshot)
            return True

    # Task operations

    def list_tasks(
        self,
        user_id: int,
        group_id: Optional[int] = None,
        completed: Optional[bool] = None,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            tasks = [t for t in self._data["tasks"] if t["user_id"] == user_id]
            if group_id is not None:
                tasks = [t for t in tasks if t.get("group_id") == group_id]
            if completed is not None:
                tasks = [t for t in tasks if t["completed"] == bool(completed)]
            return [self._with_group_fields(t) for t in _newest_first(tasks)]

    def get_task(self, task_id: int, user_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            task = self._find("tasks", task_id, user_id)
            return self._with_group_fields(task) if task else None

    def create_task(self, user_id: int, fields: Dict[str, Any]) -> int:
        with self._lock:
            snapshot = copy.deepcopy(self._data)
            task_id = _next_id(self._data["tasks"])
            now = utc_now()
            self._data["tasks"].append({
                "id": task_id,
                "user_id": user_id,
                "group_id": fields.get("group_id"),
                "title": fields["title"],
                "description": fields.get("description"),
                "deadline": fields.get("deadline"),
                "completed": bool(fields.get("completed", False)),
                "created_at": now,
                "updated_at": now,
            })
            self._commit(snapshot)
            return task_id

    def update_task(self, task_id: int, user_id: int, fields: Dict[str, Any]) -> bool:
        with self._lock:
            task = self._find("tasks", task_id, user_id)
            if task is None:
                return False
            snapshot = copy.deepcopy(self._data)
            for column in TASK_MUTABLE_FIELDS:
                if column in fields:
                    task[column] = bool(fields[column]) if column == "completed" else fields[column]
            task["updated_at"] = utc_now()
            self._commit(snapshot)
            return True

    def delete_task(self, task_id: int, user_id: int) -> bool:
        with self._lock:
            if self._find("tasks", task_id, user_id) is None:
                return False
            snapshot = copy.deepcopy(self._data)
            self._data["tasks"] = [t for t in self._data["tasks"] if t["id"] != task_id]
            self._commit(snapshot)
            return True
