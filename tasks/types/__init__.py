"""Typed task payload models."""

from tasks.types.project import INBOX_PROJECT_ID, PERSONAL_PROJECT_ID, Project, default_projects
from tasks.types.task import Subtask, Task, TaskPriority, TaskStatus, utc_now

__all__ = [
    "INBOX_PROJECT_ID",
    "PERSONAL_PROJECT_ID",
    "Project",
    "Subtask",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "default_projects",
    "utc_now",
]
