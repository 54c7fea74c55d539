"""Typer command handlers."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from enum import StrEnum
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError

from core.orchestrator import Orchestrator, RuntimeBundle
from planner.cycle_detector import find_cycle
from tasks.task_store import TaskStore
from tasks.types import Task


def _runtime(root: Path | None = None) -> RuntimeBundle:
    bundle = Orchestrator(root=root).build()
    level = str(bundle.config.get("logging", {}).get("level", "WARNING"))
    logging.basicConfig(level=level.upper(), format="%(levelname)s %(name)s: %(message)s")
    return bundle


def _fail(message: str) -> None:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


def _task_line(task: Task) -> str:
    mark = "x" if task.completed else " "
    line = f"[{mark}] {task.id}  {task.text}  ({task.status.value})"
    if task.blocked_by:
        line += f"  blocked by: {', '.join(task.blocked_by)}"
    return line


class TaskView(StrEnum):
    """Smart lists offered by ``tasks list --view``."""

    MY_DAY = "my-day"
    IMPORTANT = "important"
    UPCOMING = "upcoming"
    COMPLETED = "completed"


def _view_tasks(store: TaskStore, view: TaskView | None) -> list[Task]:
    if view == TaskView.MY_DAY:
        return store.get_my_day_tasks()
    if view == TaskView.IMPORTANT:
        return store.get_important_tasks()
    if view == TaskView.UPCOMING:
        return store.get_upcoming_tasks()
    if view == TaskView.COMPLETED:
        return store.get_completed_tasks()
    return store.list_tasks()


# ── tasks ────────────────────────────────────────────────────────────


def tasks_add(
    root: Path | None,
    text: str,
    project: str,
    priority: str,
    tags: list[str],
    due: datetime | None = None,
    my_day: bool = False,
) -> None:
    bundle = _runtime(root)
    try:
        task = bundle.store.add_task(
            text=text,
            project_id=project,
            priority=priority,
            tags=tags,
            due_date=due,
            is_my_day=my_day,
        )
    except ValidationError as exc:
        _fail(f"Invalid task: {exc.errors()[0]['msg']}")
        return
    typer.echo(f"Added task {task.id}: {task.text}")


def tasks_list(
    root: Path | None,
    project: str | None,
    status: str | None,
    tag: str | None,
    view: TaskView | None = None,
) -> None:
    bundle = _runtime(root)
    store = bundle.store
    tasks = _view_tasks(store, view)
    for selected in (
        store.get_tasks_by_project(project) if project else None,
        store.get_tasks_by_status(status) if status else None,
        store.get_tasks_by_tag(tag) if tag else None,
    ):
        if selected is not None:
            ids = {task.id for task in selected}
            tasks = [task for task in tasks if task.id in ids]
    if not tasks:
        typer.echo("No tasks.")
        return
    for task in tasks:
        typer.echo(_task_line(task))


def tasks_tags(root: Path | None) -> None:
    bundle = _runtime(root)
    tags = bundle.store.get_all_tags()
    if not tags:
        typer.echo("No tags.")
        return
    for tag, count in tags:
        typer.echo(f"{tag}  ({count})")


def tasks_show(root: Path | None, task_id: str) -> None:
    bundle = _runtime(root)
    task = bundle.store.get_task_by_id(task_id)
    if task is None:
        _fail(f"Task not found: {task_id}")
        return
    payload = task.model_dump(mode="json")
    payload["blocking"] = [
        {"blocker_id": info.blocker_id, "name": info.display_name, "completed": info.completed}
        for info in bundle.graph.get_blocking_tasks(task_id)
    ]
    payload["blocks"] = [t.id for t in bundle.graph.get_blocked_tasks(task_id)]
    typer.echo(json.dumps(payload, indent=2))


def tasks_complete(root: Path | None, task_id: str) -> None:
    bundle = _runtime(root)
    outcome = bundle.workflow.complete_task(task_id)
    changed = [task.id for task in outcome.unblocked]
    bundle.activity.log("complete_task", task_id, outcome.success, outcome.message, changed=changed)
    if not outcome.success:
        _fail(outcome.message)
    typer.echo(outcome.message)
    for task in outcome.unblocked:
        typer.echo(f"Unblocked: {task.id} {task.text}")


def tasks_reopen(root: Path | None, task_id: str) -> None:
    bundle = _runtime(root)
    outcome = bundle.workflow.reopen_task(task_id)
    changed = [task.id for task in outcome.re_blocked]
    bundle.activity.log("reopen_task", task_id, outcome.success, outcome.message, changed=changed)
    if not outcome.success:
        _fail(outcome.message)
    typer.echo(outcome.message)
    for task in outcome.re_blocked:
        typer.echo(f"Blocked again: {task.id} {task.text}")


def tasks_delete(root: Path | None, task_id: str) -> None:
    bundle = _runtime(root)
    if not bundle.store.delete_task(task_id):
        _fail(f"Task not found: {task_id}")
    typer.echo(f"Deleted task {task_id}")


# ── subtasks ─────────────────────────────────────────────────────────


def subtasks_add(root: Path | None, task_id: str, text: str) -> None:
    bundle = _runtime(root)
    subtask = bundle.store.add_subtask(task_id, text)
    if subtask is None:
        _fail(f"Task not found: {task_id}")
        return
    typer.echo(f"Added subtask {task_id}:{subtask.id}: {subtask.text}")


def subtasks_set(root: Path | None, task_id: str, subtask_id: str, completed: bool) -> None:
    bundle = _runtime(root)
    outcome = bundle.workflow.set_subtask_completed(task_id, subtask_id, completed)
    changed = [task.id for task in outcome.unblocked + outcome.re_blocked]
    action = "complete_subtask" if completed else "reopen_subtask"
    bundle.activity.log(
        action, task_id, outcome.success, outcome.message, blocker_ref=outcome.blocker_ref, changed=changed
    )
    if not outcome.success:
        _fail(outcome.message)
    typer.echo(outcome.message)
    for task in outcome.unblocked:
        typer.echo(f"Unblocked: {task.id} {task.text}")
    for task in outcome.re_blocked:
        typer.echo(f"Blocked again: {task.id} {task.text}")


# ── dependencies ─────────────────────────────────────────────────────


def deps_add(root: Path | None, task_id: str, blocker_ref: str) -> None:
    bundle = _runtime(root)
    result = bundle.graph.add_dependency(task_id, blocker_ref)
    bundle.activity.log(
        "add_dependency", task_id, result.success, result.message, blocker_ref=blocker_ref
    )
    if not result.success:
        _fail(result.message)
    suffix = " (task is now blocked)" if result.auto_blocked else ""
    typer.echo(f"{result.message}{suffix}")


def deps_remove(root: Path | None, task_id: str, blocker_ref: str) -> None:
    bundle = _runtime(root)
    removed = bundle.graph.remove_dependency(task_id, blocker_ref)
    outcome = "Dependency removed" if removed else "Dependency not present"
    bundle.activity.log("remove_dependency", task_id, removed, outcome, blocker_ref=blocker_ref)
    typer.echo(outcome)


def deps_show(root: Path | None, task_id: str) -> None:
    bundle = _runtime(root)
    if bundle.store.get_task_by_id(task_id) is None:
        _fail(f"Task not found: {task_id}")
    blocking = bundle.graph.get_blocking_tasks(task_id)
    blocked = bundle.graph.get_blocked_tasks(task_id)
    typer.echo("Blocked by:")
    for info in blocking:
        mark = "x" if info.completed else " "
        typer.echo(f"  [{mark}] {info.blocker_id}  {info.display_name}")
    typer.echo("Blocks:")
    for task in blocked:
        typer.echo(f"  {_task_line(task)}")


def deps_check(root: Path | None) -> None:
    bundle = _runtime(root)
    cycle = find_cycle(bundle.store)
    if cycle:
        _fail(f"Circular dependency: {' -> '.join(cycle)}")
    typer.echo("No circular dependencies.")


# ── projects / config ────────────────────────────────────────────────


def projects_add(root: Path | None, name: str, description: str) -> None:
    bundle = _runtime(root)
    project = bundle.store.add_project(name=name, description=description)
    typer.echo(f"Added project {project.id}: {project.name}")


def projects_list(root: Path | None) -> None:
    bundle = _runtime(root)
    for project in bundle.store.list_projects():
        count = len(bundle.store.get_tasks_by_project(project.id))
        typer.echo(f"{project.id}  {project.name}  ({count} tasks)")


def projects_update(
    root: Path | None,
    project_id: str,
    name: str | None,
    description: str | None,
    archived: bool | None,
) -> None:
    bundle = _runtime(root)
    updates = {
        key: value
        for key, value in {"name": name, "description": description, "archived": archived}.items()
        if value is not None
    }
    if not updates:
        _fail("Nothing to update")
    project = bundle.store.update_project(project_id, **updates)
    if project is None:
        _fail(f"Project not found: {project_id}")
        return
    typer.echo(f"Updated project {project.id}: {project.name}")


def projects_delete(root: Path | None, project_id: str) -> None:
    bundle = _runtime(root)
    if not bundle.store.delete_project(project_id):
        _fail(f"Project cannot be deleted: {project_id}")
    typer.echo(f"Deleted project {project_id}; its tasks moved to the inbox")


def config_show(root: Path | None) -> None:
    """Show effective runtime config."""
    bundle = _runtime(root)
    typer.echo(json.dumps(_json_safe(bundle.config), indent=2))


def _json_safe(payload: object) -> Any:
    """Convert paths and datetimes to strings for JSON output."""
    if isinstance(payload, dict):
        return {k: _json_safe(v) for k, v in payload.items()}
    if isinstance(payload, list):
        return [_json_safe(v) for v in payload]
    if isinstance(payload, Path):
        return str(payload)
    if hasattr(payload, "isoformat"):
        return payload.isoformat()
    return payload
