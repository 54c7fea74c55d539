"""Blocker references: the ids a task can be blocked by.

A reference names either a whole task (``"<task_id>"``) or one subtask of a
task (``"<task_id>:<subtask_id>"``). The string form is what gets stored in
``Task.blocked_by``; ``BlockerRef`` is the parsed form used by the planner.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

SEPARATOR = ":"


class TaskBlocker(BaseModel):
    """Reference to a whole task."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["task"] = "task"
    task_id: str
    subtask_id: None = None

    def __str__(self) -> str:
        return self.task_id


class SubtaskBlocker(BaseModel):
    """Reference to a single subtask within a task."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["subtask"] = "subtask"
    task_id: str
    subtask_id: str

    def __str__(self) -> str:
        return f"{self.task_id}{SEPARATOR}{self.subtask_id}"


BlockerRef = Annotated[TaskBlocker | SubtaskBlocker, Field(discriminator="kind")]
BlockerLike = str | TaskBlocker | SubtaskBlocker


def is_subtask_reference(ref: BlockerLike) -> bool:
    if isinstance(ref, (TaskBlocker, SubtaskBlocker)):
        return ref.kind == "subtask"
    return SEPARATOR in ref


def parse_blocker_reference(ref: BlockerLike) -> BlockerRef:
    """Parse a stored reference, splitting on the first separator only."""
    if isinstance(ref, (TaskBlocker, SubtaskBlocker)):
        return ref
    task_id, sep, subtask_id = ref.partition(SEPARATOR)
    if not sep:
        return TaskBlocker(task_id=task_id)
    return SubtaskBlocker(task_id=task_id, subtask_id=subtask_id)


def format_blocker_reference(task_id: str, subtask_id: str | None = None) -> str:
    """Build the stored string form of a reference."""
    if subtask_id is None:
        return task_id
    return f"{task_id}{SEPARATOR}{subtask_id}"


def blocker_task_id(ref: BlockerLike) -> str:
    """Owning task id of a reference; subtasks collapse onto their task."""
    return parse_blocker_reference(ref).task_id
