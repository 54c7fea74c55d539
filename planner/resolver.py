"""Resolve blocker references against live task data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from planner.blocker_refs import BlockerLike, parse_blocker_reference
from tasks.types import Subtask, Task


class TaskAccessor(Protocol):
    """Read/write access the planner needs from a task store."""

    def get_task_by_id(self, task_id: str) -> Task | None: ...

    def get_subtask_by_id(self, task_id: str, subtask_id: str) -> Subtask | None: ...

    def list_tasks(self) -> list[Task]: ...

    def save(self) -> None: ...


@dataclass
class ResolvedBlocker:
    """A blocker reference resolved to its task and optional subtask."""

    task: Task
    subtask: Subtask | None
    display_name: str

    @property
    def completed(self) -> bool:
        if self.subtask is not None:
            return self.subtask.completed
        return self.task.completed


def resolve_blocker(accessor: TaskAccessor, ref: BlockerLike) -> ResolvedBlocker | None:
    """Look up the referenced task/subtask; ``None`` when either is gone."""
    parsed = parse_blocker_reference(ref)
    task = accessor.get_task_by_id(parsed.task_id)
    if task is None:
        return None
    if parsed.subtask_id is None:
        return ResolvedBlocker(task=task, subtask=None, display_name=task.text)
    subtask = accessor.get_subtask_by_id(parsed.task_id, parsed.subtask_id)
    if subtask is None:
        return None
    return ResolvedBlocker(
        task=task,
        subtask=subtask,
        display_name=f"{task.text} → {subtask.text}",
    )


def is_blocker_completed(accessor: TaskAccessor, ref: BlockerLike) -> bool:
    """Completion state of a blocker.

    A reference that no longer resolves counts as incomplete, so a task
    stays blocked rather than silently unblocking after a deletion.
    """
    resolved = resolve_blocker(accessor, ref)
    if resolved is None:
        return False
    return resolved.completed
