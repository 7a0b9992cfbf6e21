"""
SQLite implementation of the storage interface.
"""
import os
import time
import sqlite3
import logging
from typing import Optional, List, Dict, Any, Tuple

from opentelemetry import trace

from todoboard.storage.interface import (
    StorageInterface,
    GROUP_MUTABLE_FIELDS,
    TASK_MUTABLE_FIELDS,
    utc_now,
)
from todoboard.tracing import trace_span, add_span_attribute

logger = logging.getLogger(__name__)

# Foreign key enforcement landed in SQLite 3.6.19.
MIN_FOREIGN_KEY_VERSION = (3, 6, 19)

# SQLite INTEGER is a signed 64-bit value; no stored id can lie outside it.
SQLITE_MIN_INTEGER = -2 ** 63
SQLITE_MAX_INTEGER = 2 ** 63 - 1

TASK_SELECT = """
    SELECT t.*, g.name AS group_name, g.color AS group_color
    FROM tasks t
    LEFT JOIN "groups" g ON t.group_id = g.id
"""

GROUP_SELECT = """
    SELECT g.*, (SELECT COUNT(*) FROM tasks t WHERE t.group_id = g.id) AS task_count
    FROM "groups" g
"""


def sqlite_supports_foreign_keys() -> bool:
    """Return True if the linked SQLite library enforces foreign keys."""
    return sqlite3.sqlite_version_info >= MIN_FOREIGN_KEY_VERSION


def _within_integer_range(params: Tuple) -> bool:
    return all(
        SQLITE_MIN_INTEGER <= p <= SQLITE_MAX_INTEGER
        for p in params
        if isinstance(p, int)
    )


def _task_from_row(row: sqlite3.Row) -> Dict[str, Any]:
    task = dict(row)
    task["completed"] = bool(task["completed"])
    return task


class SQLiteStorage(StorageInterface):
    """SQLite-based storage implementation."""

    backend = "sqlite"

    def __init__(self, db_path: str, slow_query_threshold: float = 0.1):
        """
        Args:
            db_path: Path of the SQLite database file.
            slow_query_threshold: Statements slower than this (seconds) are logged.
        """
        self.db_path = db_path
        self.slow_query_threshold = slow_query_threshold

    def _ensure_db_directory(self):
        db_dir = os.path.dirname(os.path.abspath(self.db_path))
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _execute_with_logging(self, cursor, query: str, params: Tuple = ()):
        """
        Execute a statement inside a trace span, logging slow statements.

        Returns:
            Cursor after execution
        """
        statement = query.strip()
        query_type = statement.split(None, 1)[0].lower() if statement else "unknown"

        start_time = time.time()
        with trace_span(
            f"db.{query_type}",
            attributes={
                "db.system": "sqlite",
                "db.operation": query_type,
            },
            kind=trace.SpanKind.CLIENT
        ):
            try:
                result = cursor.execute(query, params)
            except Exception:
                duration = time.time() - start_time
                logger.error(
                    f"Query failed after {duration:.4f}s: {statement[:200]}",
                    exc_info=True
                )
                raise
            duration = time.time() - start_time
            add_span_attribute("db.duration_ms", duration * 1000)
            if duration >= self.slow_query_threshold:
                logger.warning(
                    f"Slow query: {duration:.4f}s - {statement[:200]}",
                    extra={"duration": duration, "params_count": len(params)}
                )
                add_span_attribute("db.slow_query", True)
            return result

    def _execute_insert(self, cursor, query: str, params: Tuple = ()) -> int:
        self._execute_with_logging(cursor, query, params)
        return cursor.lastrowid

    def _fetch_one(self, query: str, params: Tuple) -> Optional[sqlite3.Row]:
        if not _within_integer_range(params):
            return None
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, query, params)
            return cursor.fetchone()
        finally:
            conn.close()

    def _fetch_all(self, query: str, params: Tuple) -> List[sqlite3.Row]:
        if not _within_integer_range(params):
            return []
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, query, params)
            return cursor.fetchall()
        finally:
            conn.close()

    def _mutate(self, query: str, params: Tuple) -> int:
        """Run one committed statement and return the affected row count."""
        if not _within_integer_range(params):
            return 0
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, query, params)
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    def _insert(self, query: str, params: Tuple) -> int:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            row_id = self._execute_insert(cursor, query, params)
            conn.commit()
            return row_id
        finally:
            conn.close()

    # Lifecycle

    def initialize(self) -> None:
        """Create tables and indexes."""
        self._ensure_db_directory()
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            # INTEGER PRIMARY KEY without AUTOINCREMENT assigns max(id) + 1.
            self._execute_with_logging(cursor, """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY,
                    username TEXT UNIQUE NOT NULL,
                    password_hash TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            self._execute_with_logging(cursor, """
                CREATE TABLE IF NOT EXISTS "groups" (
                    id INTEGER PRIMARY KEY,
                    user_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    color TEXT,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
                )
            """)
            self._execute_with_logging(cursor, """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY,
                    user_id INTEGER NOT NULL,
                    group_id INTEGER,
                    title TEXT NOT NULL,
                    description TEXT,
                    deadline TEXT,
                    completed INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
                    FOREIGN KEY (group_id) REFERENCES "groups"(id) ON DELETE SET NULL
                )
            """)
            for statement in (
                "CREATE INDEX IF NOT EXISTS idx_tasks_user_id ON tasks(user_id)",
                "CREATE INDEX IF NOT EXISTS idx_tasks_group_id ON tasks(group_id)",
                "CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(completed)",
                'CREATE INDEX IF NOT EXISTS idx_groups_user_id ON "groups"(user_id)',
            ):
                self._execute_with_logging(cursor, statement)
            conn.commit()
            logger.info(f"SQLite schema ready at {self.db_path}")
        finally:
            conn.close()

    def ping(self) -> bool:
        row = self._fetch_one("SELECT 1", ())
        return row is not None

    # User operations

    def get_user_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        row = self._fetch_one("SELECT * FROM users WHERE username = ?", (username,))
        return dict(row) if row else None

    def get_user_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        row = self._fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))
        return dict(row) if row else None

    def create_user(self, username: str, password_hash: str) -> int:
        return self._insert(
            "INSERT INTO users (username, password_hash, created_at) VALUES (?, ?, ?)",
            (username, password_hash, utc_now())
        )

    def delete_user(self, user_id: int) -> bool:
        return self._mutate("DELETE FROM users WHERE id = ?", (user_id,)) > 0

    # Group operations

    def list_groups(self, user_id: int) -> List[Dict[str, Any]]:
        rows = self._fetch_all(
            GROUP_SELECT + " WHERE g.user_id = ? ORDER BY g.created_at DESC, g.id DESC",
            (user_id,)
        )
        return [dict(row) for row in rows]

    def get_group(self, group_id: int, user_id: int) -> Optional[Dict[str, Any]]:
        row = self._fetch_one(
            GROUP_SELECT + " WHERE g.id = ? AND g.user_id = ?",
            (group_id, user_id)
        )
        return dict(row) if row else None

    def group_exists(self, group_id: int, user_id: int) -> bool:
        row = self._fetch_one(
            'SELECT id FROM "groups" WHERE id = ? AND user_id = ?',
            (group_id, user_id)
        )
        return row is not None

    def create_group(self, user_id: int, name: str, color: Optional[str] = None) -> int:
        return self._insert(
            'INSERT INTO "groups" (user_id, name, color, created_at) VALUES (?, ?, ?, ?)',
            (user_id, name, color, utc_now())
        )

    def update_group(self, group_id: int, user_id: int, fields: Dict[str, Any]) -> bool:
        updates = [(column, fields[column]) for column in GROUP_MUTABLE_FIELDS if column in fields]
        if not updates:
            return self.group_exists(group_id, user_id)
        assignments = ", ".join(f"{column} = ?" for column, _ in updates)
        params = tuple(value for _, value in updates) + (group_id, user_id)
        return self._mutate(
            f'UPDATE "groups" SET {assignments} WHERE id = ? AND user_id = ?',
            params
        ) > 0

    def delete_group(self, group_id: int, user_id: int) -> bool:
        # ON DELETE SET NULL clears tasks.group_id.
        return self._mutate(
            'DELETE FROM "groups" WHERE id = ? AND user_id = ?',
            (group_id, user_id)
        ) > 0

    # Task operations

    def list_tasks(
        self,
        user_id: int,
        group_id: Optional[int] = None,
        completed: Optional[bool] = None,
    ) -> List[Dict[str, Any]]:
        query = TASK_SELECT + " WHERE t.user_id = ?"
        params: List[Any] = [user_id]
        if group_id is not None:
            query += " AND t.group_id = ?"
            params.append(group_id)
        if completed is not None:
            query += " AND t.completed = ?"
            params.append(1 if completed else 0)
        query += " ORDER BY t.created_at DESC, t.id DESC"
        return [_task_from_row(row) for row in self._fetch_all(query, tuple(params))]

    def get_task(self, task_id: int, user_id: int) -> Optional[Dict[str, Any]]:
        row = self._fetch_one(
            TASK_SELECT + " WHERE t.id = ? AND t.user_id = ?",
            (task_id, user_id)
        )
        return _task_from_row(row) if row else None

    def create_task(self, user_id: int, fields: Dict[str, Any]) -> int:
        now = utc_now()
        return self._insert(
            """
            INSERT INTO tasks (user_id, group_id, title, description, deadline,
                               completed, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                fields.get("group_id"),
                fields["title"],
                fields.get("description"),
                fields.get("deadline"),
                1 if fields.get("completed") else 0,
                now,
                now,
            )
        )

    def update_task(self, task_id: int, user_id: int, fields: Dict[str, Any]) -> bool:
        assignments = []
        params: List[Any] = []
        for column in TASK_MUTABLE_FIELDS:
            if column in fields:
                value = fields[column]
                if column == "completed":
                    value = 1 if value else 0
                assignments.append(f"{column} = ?")
                params.append(value)
        assignments.append("updated_at = ?")
        params.extend([utc_now(), task_id, user_id])
        return self._mutate(
            f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ? AND user_id = ?",
            tuple(params)
        ) > 0

    def delete_task(self, task_id: int, user_id: int) -> bool:
        return self._mutate(
            "DELETE FROM tasks WHERE id = ? AND user_id = ?",
            (task_id, user_id)
        ) > 0
