"""Task store: live task/project lists persisted to SQLite."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from tasks.schemas import ProjectRecord, TaskRecord
from tasks.stores.sql_store import SQLStore
from tasks.types import (
    INBOX_PROJECT_ID,
    Project,
    Subtask,
    Task,
    TaskPriority,
    TaskStatus,
    default_projects,
    utc_now,
)

logger = logging.getLogger("tdm.store")


class TaskStore:
    """Authoritative in-memory task list, written back to SQLite on ``save``.

    Lookups hand out the live ``Task`` objects; callers mutate them and then
    call ``save`` to persist.
    """

    def __init__(self, sql_store: SQLStore) -> None:
        self.sql_store = sql_store
        self.sql_store.create_all()
        self.tasks: list[Task] = []
        self.projects: list[Project] = []
        self.load()
        self.ensure_default_projects()
        self.save()
        logger.debug(
            "Task store ready with %d tasks and %d projects",
            len(self.tasks),
            len(self.projects),
        )

    # ── persistence ──────────────────────────────────────────────────

    def load(self) -> None:
        """Replace in-memory state with the persisted rows."""
        task_rows = self.sql_store.fetch_all(TaskRecord, TaskRecord.sort_index)
        project_rows = self.sql_store.fetch_all(ProjectRecord, ProjectRecord.position)
        self.tasks = [self._record_to_task(row) for row in task_rows]
        self.projects = [self._record_to_project(row) for row in project_rows]

    def save(self) -> None:
        """Write every task and project back to storage.

        Storage failures are logged rather than raised so a failed write
        never interrupts the operation that triggered it.
        """
        try:
            self.sql_store.replace_all(
                {
                    TaskRecord: [
                        self._task_to_record(task, index) for index, task in enumerate(self.tasks)
                    ],
                    ProjectRecord: [self._project_to_record(project) for project in self.projects],
                }
            )
        except SQLAlchemyError as exc:
            logger.error("Saving tasks failed: %s", exc)
            return
        logger.debug("Saved %d tasks", len(self.tasks))

    # ── task lookups ─────────────────────────────────────────────────

    def list_tasks(self) -> list[Task]:
        return self.tasks

    def get_task_by_id(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def get_subtask_by_id(self, task_id: str, subtask_id: str) -> Subtask | None:
        task = self.get_task_by_id(task_id)
        if task is None:
            return None
        return task.get_subtask(subtask_id)

    def get_tasks_by_project(self, project_id: str) -> list[Task]:
        return [task for task in self.tasks if task.project_id == project_id]

    def get_tasks_by_status(self, status: TaskStatus | str) -> list[Task]:
        return [task for task in self.tasks if task.status == status]

    def get_tasks_by_tag(self, tag: str) -> list[Task]:
        return [task for task in self.tasks if tag in task.tags]

    def get_all_tags(self) -> list[tuple[str, int]]:
        """Return unique tags with usage counts, most used first."""
        counts = Counter(tag for task in self.tasks for tag in task.tags)
        return counts.most_common()

    def get_important_tasks(self) -> list[Task]:
        """Open high-priority tasks."""
        return [
            task for task in self.tasks if not task.completed and task.priority == TaskPriority.HIGH
        ]

    def get_my_day_tasks(self, now: datetime | None = None) -> list[Task]:
        """Open tasks flagged for today, overdue, or due today (UTC dates)."""
        today = (now or utc_now()).astimezone(UTC).date()
        return [
            task
            for task in self.tasks
            if not task.completed
            and (
                task.is_my_day
                or (task.due_date is not None and task.due_date.astimezone(UTC).date() <= today)
            )
        ]

    def get_upcoming_tasks(self, now: datetime | None = None, days: int = 7) -> list[Task]:
        """Open tasks due between today and ``days`` days from now, inclusive."""
        today = (now or utc_now()).astimezone(UTC).date()
        horizon = today + timedelta(days=days)
        return [
            task
            for task in self.tasks
            if not task.completed
            and task.due_date is not None
            and today <= task.due_date.astimezone(UTC).date() <= horizon
        ]

    def get_completed_tasks(self) -> list[Task]:
        """Completed tasks, most recently completed first."""
        return sorted(
            (task for task in self.tasks if task.completed),
            key=lambda task: task.completed_at or task.modified_at,
            reverse=True,
        )

    # ── task mutations ───────────────────────────────────────────────

    def add_task(self, **fields: Any) -> Task:
        """Create a task and put it at the top of the list."""
        task = Task(**fields)
        self.tasks.insert(0, task)
        self.save()
        logger.debug("Added task %s", task.id)
        return task

    def update_task(self, task_id: str, **updates: Any) -> Task | None:
        """Apply validated field updates to the live task.

        Flipping ``completed`` also sets ``status`` and ``completed_at``
        unless they are part of the update. This does not touch tasks that
        depend on this one; ``TaskWorkflow`` runs that cascade.
        """
        task = self.get_task_by_id(task_id)
        if task is None:
            return None
        unknown = set(updates) - set(Task.model_fields)
        if unknown:
            raise ValueError(f"Unknown task fields: {', '.join(sorted(unknown))}")

        if "completed" in updates and bool(updates["completed"]) != task.completed:
            if updates["completed"]:
                updates.setdefault("status", TaskStatus.DONE)
                updates.setdefault("completed_at", utc_now())
            else:
                updates.setdefault("status", TaskStatus.TODO)
                updates.setdefault("completed_at", None)

        merged = {**task.model_dump(), **updates, "modified_at": utc_now()}
        validated = Task.model_validate(merged)
        for name in [*updates, "modified_at"]:
            setattr(task, name, getattr(validated, name))
        self.save()
        logger.debug("Updated task %s", task_id)
        return task

    def delete_task(self, task_id: str) -> bool:
        """Delete a task. References to it elsewhere are left dangling."""
        remaining = [task for task in self.tasks if task.id != task_id]
        if len(remaining) == len(self.tasks):
            return False
        self.tasks = remaining
        self.save()
        logger.debug("Deleted task %s", task_id)
        return True

    def add_subtask(self, task_id: str, text: str) -> Subtask | None:
        task = self.get_task_by_id(task_id)
        if task is None:
            return None
        subtask = Subtask(text=text, position=len(task.subtasks))
        task.subtasks.append(subtask)
        task.modified_at = utc_now()
        self.save()
        return subtask

    # ── projects ─────────────────────────────────────────────────────

    def ensure_default_projects(self) -> None:
        """Guarantee the inbox (and, for a fresh store, the defaults) exist."""
        if not self.projects:
            self.projects = default_projects()
            return
        if self.get_project_by_id(INBOX_PROJECT_ID) is None:
            self.projects.insert(0, default_projects()[0])

    def list_projects(self) -> list[Project]:
        """Non-archived projects in display order."""
        return sorted(
            (project for project in self.projects if not project.archived),
            key=lambda project: project.position,
        )

    def get_project_by_id(self, project_id: str) -> Project | None:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    def add_project(self, **fields: Any) -> Project:
        fields.setdefault("position", len(self.projects))
        project = Project(**fields)
        self.projects.append(project)
        self.save()
        logger.debug("Added project %s", project.id)
        return project

    def update_project(self, project_id: str, **updates: Any) -> Project | None:
        """Apply validated field updates to a project."""
        project = self.get_project_by_id(project_id)
        if project is None:
            return None
        unknown = set(updates) - set(Project.model_fields)
        if unknown:
            raise ValueError(f"Unknown project fields: {', '.join(sorted(unknown))}")

        validated = Project.model_validate({**project.model_dump(), **updates})
        for name in updates:
            setattr(project, name, getattr(validated, name))
        self.save()
        logger.debug("Updated project %s", project_id)
        return project

    def delete_project(self, project_id: str) -> bool:
        """Delete a project, moving its tasks (and their dependencies) to the inbox."""
        if project_id == INBOX_PROJECT_ID:
            logger.warning("Cannot delete the inbox project")
            return False
        remaining = [project for project in self.projects if project.id != project_id]
        if len(remaining) == len(self.projects):
            return False
        for task in self.tasks:
            if task.project_id == project_id:
                task.project_id = INBOX_PROJECT_ID
        self.projects = remaining
        self.save()
        logger.debug("Deleted project %s", project_id)
        return True

    # ── row conversion ───────────────────────────────────────────────

    @staticmethod
    def _task_to_record(task: Task, sort_index: int) -> TaskRecord:
        return TaskRecord(
            id=task.id,
            sort_index=sort_index,
            text=task.text,
            description=task.description,
            completed=task.completed,
            priority=task.priority.value,
            due_date=task.due_date,
            created_at=task.created_at,
            completed_at=task.completed_at,
            modified_at=task.modified_at,
            project_id=task.project_id,
            tags=list(task.tags),
            status=task.status.value,
            position=task.position,
            is_my_day=task.is_my_day,
            subtasks=[subtask.model_dump() for subtask in task.subtasks],
            blocked_by=list(task.blocked_by),
        )

    @staticmethod
    def _record_to_task(row: TaskRecord) -> Task:
        return Task.model_validate(
            {
                "id": row.id,
                "text": row.text,
                "description": row.description,
                "completed": row.completed,
                "priority": row.priority,
                "due_date": row.due_date,
                "created_at": row.created_at,
                "completed_at": row.completed_at,
                "modified_at": row.modified_at,
                "project_id": row.project_id,
                "tags": row.tags or [],
                "status": row.status,
                "position": row.position,
                "is_my_day": bool(row.is_my_day),
                "subtasks": row.subtasks or [],
                "blocked_by": row.blocked_by or [],
            }
        )

    @staticmethod
    def _project_to_record(project: Project) -> ProjectRecord:
        return ProjectRecord(
            id=project.id,
            name=project.name,
            description=project.description,
            color=project.color,
            archived=project.archived,
            created_at=project.created_at,
            position=project.position,
        )

    @staticmethod
    def _record_to_project(row: ProjectRecord) -> Project:
        return Project.model_validate(
            {
                "id": row.id,
                "name": row.name,
                "description": row.description,
                "color": row.color,
                "archived": row.archived,
                "created_at": row.created_at,
                "position": row.position,
            }
        )
