"""CLI entrypoint for task-dependency-manager."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import typer

from tasks.types import TaskPriority
from ui.cli import commands

app = typer.Typer(help="Task manager with blocking dependencies")
tasks_app = typer.Typer(help="Task commands")
subtasks_app = typer.Typer(help="Subtask commands")
deps_app = typer.Typer(help="Dependency commands")
projects_app = typer.Typer(help="Project commands")
config_app = typer.Typer(help="Configuration commands")


@app.callback()
def main_callback(
    ctx: typer.Context,
    root: Path | None = typer.Option(None, "--root", help="Data root holding config/ and data/"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Task manager with blocking dependencies."""
    ctx.obj = {"root": root}
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _root(ctx: typer.Context) -> Path | None:
    return (ctx.obj or {}).get("root")


@tasks_app.command("add")
def tasks_add_cmd(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Task text"),
    project: str = typer.Option("inbox", help="Project id"),
    priority: TaskPriority = typer.Option(TaskPriority.MEDIUM, help="Task priority"),
    tag: list[str] = typer.Option([], "--tag", help="Tag (repeatable)"),
    due: datetime | None = typer.Option(None, "--due", formats=["%Y-%m-%d"], help="Due date"),
    my_day: bool = typer.Option(False, "--my-day", help="Add to My Day"),
) -> None:
    """Add a task."""
    commands.tasks_add(
        _root(ctx),
        text=text,
        project=project,
        priority=priority,
        tags=tag,
        due=due,
        my_day=my_day,
    )


@tasks_app.command("list")
def tasks_list_cmd(
    ctx: typer.Context,
    project: str | None = typer.Option(None, help="Only tasks in this project"),
    status: str | None = typer.Option(None, help="Only tasks with this status"),
    tag: str | None = typer.Option(None, help="Only tasks with this tag"),
    view: commands.TaskView | None = typer.Option(None, help="Smart list to start from"),
) -> None:
    """List tasks."""
    commands.tasks_list(_root(ctx), project=project, status=status, tag=tag, view=view)


@tasks_app.command("tags")
def tasks_tags_cmd(ctx: typer.Context) -> None:
    """List tags by how many tasks use them."""
    commands.tasks_tags(_root(ctx))


@tasks_app.command("show")
def tasks_show_cmd(ctx: typer.Context, task_id: str) -> None:
    """Show one task with its dependencies."""
    commands.tasks_show(_root(ctx), task_id=task_id)


@tasks_app.command("complete")
def tasks_complete_cmd(ctx: typer.Context, task_id: str) -> None:
    """Complete a task and unblock its dependents."""
    commands.tasks_complete(_root(ctx), task_id=task_id)


@tasks_app.command("reopen")
def tasks_reopen_cmd(ctx: typer.Context, task_id: str) -> None:
    """Reopen a task and block its dependents again."""
    commands.tasks_reopen(_root(ctx), task_id=task_id)


@tasks_app.command("delete")
def tasks_delete_cmd(ctx: typer.Context, task_id: str) -> None:
    """Delete a task."""
    commands.tasks_delete(_root(ctx), task_id=task_id)


@subtasks_app.command("add")
def subtasks_add_cmd(ctx: typer.Context, task_id: str, text: str) -> None:
    """Add a subtask to a task."""
    commands.subtasks_add(_root(ctx), task_id=task_id, text=text)


@subtasks_app.command("complete")
def subtasks_complete_cmd(ctx: typer.Context, task_id: str, subtask_id: str) -> None:
    """Complete a subtask."""
    commands.subtasks_set(_root(ctx), task_id=task_id, subtask_id=subtask_id, completed=True)


@subtasks_app.command("reopen")
def subtasks_reopen_cmd(ctx: typer.Context, task_id: str, subtask_id: str) -> None:
    """Reopen a subtask."""
    commands.subtasks_set(_root(ctx), task_id=task_id, subtask_id=subtask_id, completed=False)


@deps_app.command("add")
def deps_add_cmd(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task that will be blocked"),
    blocker: str = typer.Argument(..., help="Blocking task id, or task_id:subtask_id"),
) -> None:
    """Block a task on another task or subtask."""
    commands.deps_add(_root(ctx), task_id=task_id, blocker_ref=blocker)


@deps_app.command("remove")
def deps_remove_cmd(ctx: typer.Context, task_id: str, blocker: str) -> None:
    """Remove a dependency."""
    commands.deps_remove(_root(ctx), task_id=task_id, blocker_ref=blocker)


@deps_app.command("show")
def deps_show_cmd(ctx: typer.Context, task_id: str) -> None:
    """Show what blocks a task and what it blocks."""
    commands.deps_show(_root(ctx), task_id=task_id)


@deps_app.command("check")
def deps_check_cmd(ctx: typer.Context) -> None:
    """Check stored data for circular dependencies."""
    commands.deps_check(_root(ctx))


@projects_app.command("add")
def projects_add_cmd(
    ctx: typer.Context,
    name: str,
    description: str = typer.Option("", help="Project description"),
) -> None:
    """Add a project."""
    commands.projects_add(_root(ctx), name=name, description=description)


@projects_app.command("list")
def projects_list_cmd(ctx: typer.Context) -> None:
    """List projects."""
    commands.projects_list(_root(ctx))


@projects_app.command("update")
def projects_update_cmd(
    ctx: typer.Context,
    project_id: str,
    name: str | None = typer.Option(None, help="New name"),
    description: str | None = typer.Option(None, help="New description"),
    archived: bool | None = typer.Option(None, "--archived/--active", help="Archive or restore"),
) -> None:
    """Rename, describe or archive a project."""
    commands.projects_update(
        _root(ctx), project_id=project_id, name=name, description=description, archived=archived
    )


@projects_app.command("delete")
def projects_delete_cmd(ctx: typer.Context, project_id: str) -> None:
    """Delete a project; its tasks move to the inbox."""
    commands.projects_delete(_root(ctx), project_id=project_id)


@config_app.command("show")
def config_show_cmd(ctx: typer.Context) -> None:
    """Show effective configuration."""
    commands.config_show(_root(ctx))


app.add_typer(tasks_app, name="tasks")
app.add_typer(subtasks_app, name="subtasks")
app.add_typer(deps_app, name="deps")
app.add_typer(projects_app, name="projects")
app.add_typer(config_app, name="config")


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
