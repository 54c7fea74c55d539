"""Task store CRUD and persistence tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from planner.dependency_graph import DependencyGraph
from tasks.schemas import ProjectRecord, TaskRecord
from tasks.stores.sql_store import SQLStore
from tasks.task_store import TaskStore
from tasks.types import TaskPriority, TaskStatus


def build_store(tmp_path: Path) -> TaskStore:
    return TaskStore(SQLStore(db_path=tmp_path / "tasks.db"))


def test_store_starts_with_default_projects(tmp_path: Path) -> None:
    store = build_store(tmp_path)

    assert [project.id for project in store.list_projects()] == ["inbox", "personal"]
    assert store.list_tasks() == []


def test_task_crud_round_trip(tmp_path: Path) -> None:
    store = build_store(tmp_path)
    first = store.add_task(text="First")
    second = store.add_task(text="Second", priority="high", tags=["work"])

    assert store.list_tasks() == [second, first]
    assert second.priority == TaskPriority.HIGH
    assert first.status == TaskStatus.TODO

    updated = store.update_task(first.id, text="First (edited)", completed=True)
    assert updated is first
    assert first.text == "First (edited)"
    assert first.completed is True
    assert first.status == TaskStatus.DONE
    assert first.completed_at is not None
    assert store.update_task("missing", text="x") is None
    with pytest.raises(ValueError):
        store.update_task(first.id, colour="red")

    assert store.delete_task(second.id) is True
    assert store.delete_task(second.id) is False

    reloaded = build_store(tmp_path)
    assert [task.text for task in reloaded.list_tasks()] == ["First (edited)"]


def test_status_defaults_from_completion(tmp_path: Path) -> None:
    store = build_store(tmp_path)

    assert store.add_task(text="Done", completed=True).status == TaskStatus.DONE
    assert store.add_task(text="Explicit", status="in-progress").status == TaskStatus.IN_PROGRESS


def test_subtasks_are_persisted(tmp_path: Path) -> None:
    store = build_store(tmp_path)
    task = store.add_task(text="Parent")
    subtask = store.add_subtask(task.id, "Child")

    assert subtask is not None
    assert store.get_subtask_by_id(task.id, subtask.id) is subtask
    assert store.get_subtask_by_id(task.id, "missing") is None
    assert store.get_subtask_by_id("missing", subtask.id) is None
    assert store.add_subtask("missing", "Orphan") is None

    reloaded = build_store(tmp_path)
    assert reloaded.get_subtask_by_id(task.id, subtask.id) is not None


def test_filters_and_tags(tmp_path: Path) -> None:
    store = build_store(tmp_path)
    store.add_task(text="A", tags=["home", "urgent"])
    store.add_task(text="B", tags=["urgent"], project_id="personal")
    store.add_task(text="C", completed=True)

    assert [task.text for task in store.get_tasks_by_tag("urgent")] == ["B", "A"]
    assert [task.text for task in store.get_tasks_by_project("personal")] == ["B"]
    assert [task.text for task in store.get_tasks_by_status(TaskStatus.DONE)] == ["C"]
    assert store.get_all_tags() == [("urgent", 2), ("home", 1)]


def test_project_deletion_keeps_dependencies(tmp_path: Path) -> None:
    store = build_store(tmp_path)
    graph = DependencyGraph(store)
    project = store.add_project(name="Work")
    a = store.add_task(text="A", project_id=project.id)
    b = store.add_task(text="B", project_id=project.id)
    graph.add_dependency(b.id, a.id)

    assert store.delete_project(project.id) is True
    assert store.delete_project("inbox") is False
    assert store.delete_project(project.id) is False

    reloaded = build_store(tmp_path)
    moved = reloaded.get_task_by_id(b.id)
    assert moved is not None
    assert moved.project_id == "inbox"
    assert moved.blocked_by == [a.id]
    assert moved.status == TaskStatus.BLOCKED
    assert reloaded.get_project_by_id(project.id) is None


def test_reopening_through_update_clears_completion(tmp_path: Path) -> None:
    store = build_store(tmp_path)
    task = store.add_task(text="Done", completed=True, completed_at=datetime(2026, 1, 1, tzinfo=UTC))

    store.update_task(task.id, completed=False)

    assert task.status == TaskStatus.TODO
    assert task.completed_at is None

    store.update_task(task.id, completed=True, status="in-progress")
    assert task.status == TaskStatus.IN_PROGRESS


def test_timestamps_stay_timezone_aware_after_reload(tmp_path: Path) -> None:
    store = build_store(tmp_path)
    due = datetime(2026, 3, 1, 23, 30, tzinfo=UTC)
    task = store.add_task(text="Pay rent", due_date=due)
    assert task.created_at.tzinfo is not None

    reloaded = build_store(tmp_path).get_task_by_id(task.id)

    assert reloaded is not None
    assert reloaded.created_at.tzinfo is not None
    assert reloaded.created_at == task.created_at
    assert reloaded.due_date == due
    project = build_store(tmp_path).get_project_by_id("inbox")
    assert project is not None
    assert project.created_at.tzinfo is not None


def test_smart_views(tmp_path: Path) -> None:
    store = build_store(tmp_path)
    now = datetime(2026, 5, 10, 12, 0, tzinfo=UTC)
    overdue = store.add_task(text="Overdue", due_date=now - timedelta(days=2))
    today = store.add_task(text="Today", due_date=now + timedelta(hours=3))
    flagged = store.add_task(text="Flagged", is_my_day=True)
    soon = store.add_task(text="Soon", due_date=now + timedelta(days=5), priority="high")
    later = store.add_task(text="Later", due_date=now + timedelta(days=30), priority="high")
    store.add_task(text="Done today", due_date=now, completed=True, priority="high")

    assert {t.id for t in store.get_my_day_tasks(now)} == {overdue.id, today.id, flagged.id}
    assert {t.id for t in store.get_upcoming_tasks(now)} == {today.id, soon.id}
    assert {t.id for t in store.get_important_tasks()} == {soon.id, later.id}

    reloaded = build_store(tmp_path)
    assert {t.id for t in reloaded.get_my_day_tasks(now)} == {overdue.id, today.id, flagged.id}


def test_completed_view_is_newest_first(tmp_path: Path) -> None:
    store = build_store(tmp_path)
    older = store.add_task(text="Older", completed=True, completed_at=datetime(2026, 1, 1, tzinfo=UTC))
    newer = store.add_task(text="Newer", completed=True, completed_at=datetime(2026, 2, 1, tzinfo=UTC))
    store.add_task(text="Open")

    assert store.get_completed_tasks() == [newer, older]


def test_update_project(tmp_path: Path) -> None:
    store = build_store(tmp_path)
    project = store.add_project(name="Work")

    assert store.update_project(project.id, name="Office", archived=True) is project
    assert store.update_project("missing", name="x") is None
    with pytest.raises(ValueError):
        store.update_project(project.id, owner="me")

    reloaded = build_store(tmp_path)
    assert reloaded.get_project_by_id(project.id).name == "Office"
    assert project.id not in [p.id for p in reloaded.list_projects()]


def test_sql_snapshot_replaces_table_contents(tmp_path: Path) -> None:
    sql_store = SQLStore(db_path=tmp_path / "snap.db")
    sql_store.create_all()

    def record(task_id: str, index: int) -> TaskRecord:
        return TaskRecord(id=task_id, sort_index=index, text=task_id, status="todo", priority="medium")

    sql_store.replace_all({TaskRecord: [record("a", 0), record("b", 1)], ProjectRecord: []})
    sql_store.replace_all({TaskRecord: [record("c", 0), record("a", 1)]})

    rows = sql_store.fetch_all(TaskRecord, TaskRecord.sort_index)
    assert [row.id for row in rows] == ["c", "a"]
    assert rows[1].created_at.tzinfo is not None
    assert sql_store.fetch_all(ProjectRecord, ProjectRecord.position) == []
