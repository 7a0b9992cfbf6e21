"""
Behavioral contract shared by every storage backend.
Each test runs against both SQLite and the JSON file store.
"""
import json
import sqlite3

import pytest

from todoboard.exceptions import StorageError
from todoboard.storage import SQLiteStorage



class TestIdAssignment:
    """Generated ids are max existing id + 1 per collection."""

    def test_first_id_is_one(self, storage, user_id):
        assert user_id == 1
        assert storage.create_group(user_id, "Work") == 1
        assert storage.create_task(user_id, {"title": "First"}) == 1

    def test_ids_follow_max_existing(self, storage, user_id):
        ids = [storage.create_group(user_id, f"Group {i}") for i in range(3)]
        assert ids == [1, 2, 3]

        storage.delete_group(2, user_id)
        assert storage.create_group(user_id, "After middle delete") == 4

        storage.delete_group(4, user_id)
        assert storage.create_group(user_id, "After last delete") == 4

    def test_collections_are_numbered_independently(self, storage, user_id):
        storage.create_group(user_id, "Work")
        storage.create_group(user_id, "Home")
        assert storage.create_task(user_id, {"title": "Task"}) == 1


class TestGroups:
    """Group reads, task_count and scoping."""

    def test_task_count_is_live(self, storage, user_id):
        group_id = storage.create_group(user_id, "Work", "#3498db")
        assert storage.get_group(group_id, user_id)["task_count"] == 0

        task_id = storage.create_task(user_id, {"title": "A", "group_id": group_id})
        storage.create_task(user_id, {"title": "B", "group_id": group_id})
        storage.create_task(user_id, {"title": "Ungrouped"})
        assert storage.get_group(group_id, user_id)["task_count"] == 2

        storage.update_task(task_id, user_id, {"group_id": None})
        assert storage.get_group(group_id, user_id)["task_count"] == 1
        assert storage.list_groups(user_id)[0]["task_count"] == 1

    def test_get_group_is_scoped_to_owner(self, storage, user_id, other_user_id):
        group_id = storage.create_group(user_id, "Mine")
        assert storage.get_group(group_id, other_user_id) is None
        assert storage.group_exists(group_id, user_id) is True
        assert storage.group_exists(group_id, other_user_id) is False

    def test_list_groups_newest_first(self, storage, user_id, other_user_id):
        storage.create_group(user_id, "Old")
        storage.create_group(other_user_id, "Not mine")
        storage.create_group(user_id, "New")
        names = [g["name"] for g in storage.list_groups(user_id)]
        assert names == ["New", "Old"]

    def test_update_group_fields(self, storage, user_id, other_user_id):
        group_id = storage.create_group(user_id, "Work", "#000000")

        assert storage.update_group(group_id, user_id, {"color": "#ffffff"}) is True
        group = storage.get_group(group_id, user_id)
        assert group["name"] == "Work"
        assert group["color"] == "#ffffff"

        assert storage.update_group(group_id, other_user_id, {"name": "Stolen"}) is False
        assert storage.get_group(group_id, user_id)["name"] == "Work"

    def test_update_group_without_fields_reports_existence(self, storage, user_id):
        group_id = storage.create_group(user_id, "Work")
        assert storage.update_group(group_id, user_id, {}) is True
        assert storage.update_group(999, user_id, {}) is False

    def test_delete_group_clears_task_references(self, storage, user_id):
        group_id = storage.create_group(user_id, "Work")
        task_id = storage.create_task(user_id, {"title": "Report", "group_id": group_id})
        before = storage.get_task(task_id, user_id)

        assert storage.delete_group(group_id, user_id) is True

        after = storage.get_task(task_id, user_id)
        assert storage.get_group(group_id, user_id) is None
        assert after["group_id"] is None
        assert after["group_name"] is None
        assert after["title"] == before["title"]
        assert after["updated_at"] == before["updated_at"]

    def test_delete_group_of_other_user_fails(self, storage, user_id, other_user_id):
        group_id = storage.create_group(user_id, "Work")
        assert storage.delete_group(group_id, other_user_id) is False
        assert storage.get_group(group_id, user_id) is not None


class TestTasks:
    """Task reads, joins, filters and updates."""

    def test_create_task_defaults(self, storage, user_id):
        task_id = storage.create_task(user_id, {"title": "Write report"})
        task = storage.get_task(task_id, user_id)
        assert task["title"] == "Write report"
        assert task["completed"] is False
        assert task["group_id"] is None
        assert task["description"] is None
        assert task["deadline"] is None
        assert task["created_at"] == task["updated_at"]

    def test_group_fields_reflect_current_group(self, storage, user_id):
        group_id = storage.create_group(user_id, "Work", "#3498db")
        task_id = storage.create_task(user_id, {"title": "Report", "group_id": group_id})
        task = storage.get_task(task_id, user_id)
        assert task["group_name"] == "Work"
        assert task["group_color"] == "#3498db"

        storage.update_group(group_id, user_id, {"name": "Office", "color": "#e74c3c"})
        task = storage.list_tasks(user_id)[0]
        assert task["group_name"] == "Office"
        assert task["group_color"] == "#e74c3c"

    def test_filters_combine(self, storage, user_id, other_user_id):
        work = storage.create_group(user_id, "Work")
        home = storage.create_group(user_id, "Home")
        done_work = storage.create_task(user_id, {"title": "Done work", "group_id": work})
        storage.update_task(done_work, user_id, {"completed": True})
        storage.create_task(user_id, {"title": "Open work", "group_id": work})
        storage.create_task(user_id, {"title": "Open home", "group_id": home})
        storage.create_task(other_user_id, {"title": "Someone else"})

        assert len(storage.list_tasks(user_id)) == 3

        open_tasks = storage.list_tasks(user_id, completed=False)
        assert {t["title"] for t in open_tasks} == {"Open work", "Open home"}
        assert all(t["completed"] is False for t in open_tasks)

        open_work = storage.list_tasks(user_id, group_id=work, completed=False)
        assert [t["title"] for t in open_work] == ["Open work"]

        done = storage.list_tasks(user_id, completed=True)
        assert [t["title"] for t in done] == ["Done work"]

    def test_list_tasks_newest_first(self, storage, user_id):
        for title in ("first", "second", "third"):
            storage.create_task(user_id, {"title": title})
        assert [t["title"] for t in storage.list_tasks(user_id)] == ["third", "second", "first"]

    def test_update_task_refreshes_updated_at(self, storage, user_id):
        task_id = storage.create_task(user_id, {"title": "Task"})
        before = storage.get_task(task_id, user_id)

        assert storage.update_task(task_id, user_id, {}) is True
        after = storage.get_task(task_id, user_id)
        assert after["updated_at"] >= before["updated_at"]
        assert after["title"] == "Task"

        storage.update_task(task_id, user_id, {"title": "Renamed", "description": "Details"})
        renamed = storage.get_task(task_id, user_id)
        assert renamed["title"] == "Renamed"
        assert renamed["description"] == "Details"
        assert renamed["updated_at"] >= after["updated_at"]
        assert renamed["created_at"] == before["created_at"]

    def test_task_scoping(self, storage, user_id, other_user_id):
        task_id = storage.create_task(user_id, {"title": "Private"})
        assert storage.get_task(task_id, other_user_id) is None
        assert storage.update_task(task_id, other_user_id, {"title": "x"}) is False
        assert storage.delete_task(task_id, other_user_id) is False
        assert storage.delete_task(task_id, user_id) is True
        assert storage.get_task(task_id, user_id) is None


class TestUsers:
    """User lookups and cascade delete."""

    def test_lookup_by_username_and_id(self, storage, user_id):
        user = storage.get_user_by_username("alice")
        assert user["id"] == user_id
        assert user["password_hash"] == "hash-a"
        assert storage.get_user_by_id(user_id)["username"] == "alice"
        assert storage.get_user_by_username("nobody") is None

    def test_delete_user_cascades(self, storage, user_id, other_user_id):
        group_id = storage.create_group(user_id, "Work")
        storage.create_task(user_id, {"title": "Grouped", "group_id": group_id})
        storage.create_task(user_id, {"title": "Loose"})
        kept = storage.create_task(other_user_id, {"title": "Other"})

        assert storage.delete_user(user_id) is True

        assert storage.get_user_by_id(user_id) is None
        assert storage.list_groups(user_id) == []
        assert storage.list_tasks(user_id) == []
        assert storage.get_task(kept, other_user_id) is not None
        assert storage.delete_user(user_id) is False


class TestDurability:
    """Mutations are visible to a fresh instance on the same path."""

    def test_reopen_sees_committed_state(self, backend, storage_factory):
        first = storage_factory(backend)
        user_id = first.create_user("alice", "hash")
        group_id = first.create_group(user_id, "Work")
        task_id = first.create_task(user_id, {"title": "Persisted", "group_id": group_id})
        first.update_task(task_id, user_id, {"completed": True})

        second = storage_factory(backend)
        task = second.get_task(task_id, user_id)
        assert task["title"] == "Persisted"
        assert task["completed"] is True
        assert task["group_name"] == "Work"
        assert second.ping() is True


class TestBackingFiles:
    """On-disk layout of each backend."""

    def test_json_file_holds_three_collections(self, storage_factory, tmp_path):
        storage = storage_factory("json")
        user_id = storage.create_user("alice", "hash")
        storage.create_task(user_id, {"title": "Task"})

        with open(tmp_path / "db.json", encoding="utf-8") as f:
            document = json.load(f)
        assert set(document) == {"users", "groups", "tasks"}
        assert document["tasks"][0]["title"] == "Task"

    def test_json_store_loads_integer_completed_flags(self, storage_factory, tmp_path):
        (tmp_path / "db.json").write_text(json.dumps({
            "users": [{"id": 1, "username": "admin", "password_hash": "h", "created_at": "2024-01-01T00:00:00"}],
            "groups": [],
            "tasks": [{
                "id": 1, "user_id": 1, "title": "Legacy", "completed": 1,
                "created_at": "2024-01-01T00:00:00", "updated_at": "2024-01-01T00:00:00",
            }],
        }), encoding="utf-8")
        storage = storage_factory("json")
        task = storage.get_task(1, 1)
        assert task["completed"] is True
        assert task["group_id"] is None

    def test_sqlite_schema_has_expected_tables(self, storage_factory, tmp_path):
        storage_factory("sqlite")
        conn = sqlite3.connect(str(tmp_path / "todo.db"))
        try:
            rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
        finally:
            conn.close()
        assert {"users", "groups", "tasks"} <= {row[0] for row in rows}

    def test_json_failed_write_keeps_previous_state(self, storage_factory, tmp_path, monkeypatch):
        storage = storage_factory("json")
        user_id = storage.create_user("alice", "hash")
        before = (tmp_path / "db.json").read_text(encoding="utf-8")

        def failing_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("todoboard.storage.json_storage.os.replace", failing_replace)
        with pytest.raises(StorageError):
            storage.create_group(user_id, "Work")
        with pytest.raises(StorageError):
            storage.delete_user(user_id)
        monkeypatch.undo()

        assert storage.list_groups(user_id) == []
        assert storage.get_user_by_id(user_id) is not None
        assert (tmp_path / "db.json").read_text(encoding="utf-8") == before
        assert sorted(p.name for p in tmp_path.iterdir()) == ["db.json"]

    def test_sqlite_logs_slow_statements(self, tmp_path, caplog):
        storage = SQLiteStorage(str(tmp_path / "todo.db"), slow_query_threshold=0)
        with caplog.at_level("WARNING", logger="todoboard.storage.sqlite_storage"):
            storage.initialize()
            storage.ping()
        messages = [r.getMessage() for r in caplog.records if r.levelname == "WARNING"]
        assert any(m.startswith("Slow query") and "SELECT 1" in m for m in messages)

    def test_sqlite_fast_statements_are_not_logged(self, tmp_path, caplog):
        storage = SQLiteStorage(str(tmp_path / "todo.db"), slow_query_threshold=60)
        with caplog.at_level("WARNING", logger="todoboard.storage.sqlite_storage"):
            storage.initialize()
            storage.ping()
        assert not any("Slow query" in r.getMessage() for r in caplog.records)


class TestOversizedIds:
    """Ids beyond the 64-bit range behave like any other missing id."""

    HUGE = 2 ** 70

    def test_lookups_find_nothing(self, storage, user_id):
        assert storage.get_task(self.HUGE, user_id) is None
        assert storage.get_group(self.HUGE, user_id) is None
        assert storage.group_exists(self.HUGE, user_id) is False
        assert storage.get_user_by_id(self.HUGE) is None
        assert storage.list_tasks(user_id, group_id=self.HUGE) == []

    def test_mutations_affect_nothing(self, storage, user_id):
        task_id = storage.create_task(user_id, {"title": "Task"})
        assert storage.update_task(self.HUGE, user_id, {"title": "X"}) is False
        assert storage.delete_task(self.HUGE, user_id) is False
        assert storage.update_group(self.HUGE, user_id, {"name": "X"}) is False
        assert storage.delete_group(self.HUGE, user_id) is False
        assert storage.delete_user(self.HUGE) is False
        assert storage.get_task(task_id, user_id)["title"] == "Task"
