"""Task and subtask models."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


def utc_now() -> datetime:
    """Return UTC datetime for default timestamps."""
    return datetime.now(UTC)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class TaskStatus(StrEnum):
    """Workflow status of a task."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    BLOCKED = "blocked"


class TaskPriority(StrEnum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Subtask(BaseModel):
    """Checklist item owned by exactly one task."""

    id: str = Field(default_factory=lambda: _new_id("subtask"))
    text: str = ""
    completed: bool = False
    position: int = 0


class Task(BaseModel):
    """Task record.

    ``blocked_by`` holds blocker references in their stored string form,
    either ``"<task_id>"`` or ``"<task_id>:<subtask_id>"``.
    """

    id: str = Field(default_factory=lambda: _new_id("task"))
    text: str = ""
    description: str = ""
    completed: bool = False
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = None
    modified_at: datetime = Field(default_factory=utc_now)
    project_id: str = "inbox"
    tags: list[str] = Field(default_factory=list)
    status: TaskStatus = TaskStatus.TODO
    position: int = 0
    is_my_day: bool = False
    subtasks: list[Subtask] = Field(default_factory=list)
    blocked_by: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _derive_status(cls, data: Any) -> Any:
        # Status follows the completion flag unless given explicitly.
        if isinstance(data, dict) and not data.get("status"):
            data = dict(data)
            data["status"] = TaskStatus.DONE if data.get("completed") else TaskStatus.TODO
        return data

    @field_validator("due_date", "created_at", "completed_at", "modified_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def get_subtask(self, subtask_id: str) -> Subtask | None:
        """Return the subtask with ``subtask_id`` if present."""
        for subtask in self.subtasks:
            if subtask.id == subtask_id:
                return subtask
        return None
