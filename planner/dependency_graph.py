"""Task dependency graph manager.

Edges are not stored separately: task X blocked by Y is the presence of
``"Y"`` (or ``"Y:<subtask>"``) in ``X.blocked_by``. The manager validates new
edges, keeps ``status`` consistent with them and cascades status changes when
a blocker is completed or reopened. Every call reads live tasks through the
injected accessor.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from planner.blocker_refs import BlockerLike, parse_blocker_reference
from planner.cycle_detector import validate_no_cycles
from planner.resolver import TaskAccessor, is_blocker_completed, resolve_blocker
from tasks.types import Subtask, Task, TaskStatus


class DependencyError(StrEnum):
    """Reasons an edge can be rejected."""

    TASK_NOT_FOUND = "task_not_found"
    BLOCKER_NOT_FOUND = "blocker_not_found"
    DUPLICATE_DEPENDENCY = "duplicate_dependency"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    SELF_BLOCK = "self_block"


@dataclass
class DependencyResult:
    """Outcome of ``add_dependency``."""

    success: bool
    message: str
    error: DependencyError | None = None
    auto_blocked: bool = False


@dataclass
class BlockingInfo:
    """One resolved entry of a task's ``blocked_by`` list."""

    blocker_id: str
    task: Task
    subtask: Subtask | None
    display_name: str
    completed: bool
    status: TaskStatus


class DependencyGraph:
    """Adds, removes and cascades dependencies between tasks."""

    def __init__(self, accessor: TaskAccessor) -> None:
        self.accessor = accessor

    def validate_no_cycles(self, task_id: str, blocker_ref: BlockerLike) -> bool:
        return validate_no_cycles(self.accessor, task_id, blocker_ref)

    def add_dependency(self, task_id: str, blocker_ref: BlockerLike) -> DependencyResult:
        """Make ``task_id`` blocked by ``blocker_ref``."""
        task = self.accessor.get_task_by_id(task_id)
        if task is None:
            return DependencyResult(False, "Task not found", DependencyError.TASK_NOT_FOUND)

        parsed = parse_blocker_reference(blocker_ref)
        ref = str(parsed)
        if resolve_blocker(self.accessor, parsed) is None:
            owner = self.accessor.get_task_by_id(parsed.task_id)
            if parsed.subtask_id is not None and owner is not None:
                message = "Subtask not found"
            else:
                message = "Blocking task not found"
            return DependencyResult(False, message, DependencyError.BLOCKER_NOT_FOUND)

        if ref in task.blocked_by:
            return DependencyResult(
                False, "Dependency already exists", DependencyError.DUPLICATE_DEPENDENCY
            )

        if parsed.task_id == task_id:
            return DependencyResult(
                False,
                "A task cannot be blocked by itself or its own subtasks (circular dependency)",
                DependencyError.SELF_BLOCK,
            )
        if not self.validate_no_cycles(task_id, parsed):
            return DependencyResult(
                False,
                "Cannot add dependency: it would create a circular dependency",
                DependencyError.CIRCULAR_DEPENDENCY,
            )

        task.blocked_by.append(ref)
        auto_blocked = False
        if (
            not is_blocker_completed(self.accessor, parsed)
            and not task.completed
            and task.status not in (TaskStatus.DONE, TaskStatus.BLOCKED)
        ):
            task.status = TaskStatus.BLOCKED
            auto_blocked = True
        self.accessor.save()
        return DependencyResult(True, "Dependency added", auto_blocked=auto_blocked)

    def remove_dependency(self, task_id: str, blocker_ref: BlockerLike) -> bool:
        """Drop an edge. Only removing the last edge unblocks the task."""
        task = self.accessor.get_task_by_id(task_id)
        if task is None:
            return False
        ref = str(parse_blocker_reference(blocker_ref))
        if ref not in task.blocked_by:
            return False

        task.blocked_by.remove(ref)
        if not task.blocked_by and task.status == TaskStatus.BLOCKED:
            task.status = TaskStatus.TODO
        self.accessor.save()
        return True

    def get_blocking_tasks(self, task_id: str) -> list[BlockingInfo]:
        """Resolved blockers of a task, in edge order; dangling refs are skipped."""
        task = self.accessor.get_task_by_id(task_id)
        if task is None:
            return []
        blocking: list[BlockingInfo] = []
        for ref in task.blocked_by:
            resolved = resolve_blocker(self.accessor, ref)
            if resolved is None:
                continue
            blocking.append(
                BlockingInfo(
                    blocker_id=ref,
                    task=resolved.task,
                    subtask=resolved.subtask,
                    display_name=resolved.display_name,
                    completed=resolved.completed,
                    status=resolved.task.status,
                )
            )
        return blocking

    def get_blocked_tasks(self, blocker_task_id: str) -> list[Task]:
        """Tasks that list ``blocker_task_id`` itself as a blocker."""
        return [task for task in self.accessor.list_tasks() if blocker_task_id in task.blocked_by]

    def get_dependents(self, blocker_ref: BlockerLike) -> list[Task]:
        """Tasks whose ``blocked_by`` holds exactly this reference."""
        ref = str(parse_blocker_reference(blocker_ref))
        return [task for task in self.accessor.list_tasks() if ref in task.blocked_by]

    def update_dependent_statuses(self, completed_ref: BlockerLike) -> list[Task]:
        """Unblock dependents of a just-completed blocker whose blockers are all done."""
        unblocked: list[Task] = []
        for task in self.get_dependents(completed_ref):
            if task.status != TaskStatus.BLOCKED:
                continue
            if all(is_blocker_completed(self.accessor, ref) for ref in task.blocked_by):
                task.status = TaskStatus.TODO
                unblocked.append(task)
        if unblocked:
            self.accessor.save()
        return unblocked

    def re_block_dependent_tasks(self, incompleted_ref: BlockerLike) -> list[Task]:
        """Block dependents again after their blocker was reopened.

        Completed dependents keep their state.
        """
        re_blocked: list[Task] = []
        for task in self.get_dependents(incompleted_ref):
            if task.completed or task.status == TaskStatus.BLOCKED:
                continue
            task.status = TaskStatus.BLOCKED
            re_blocked.append(task)
        if re_blocked:
            self.accessor.save()
        return re_blocked

    def has_incomplete_blockers(self, task_id: str) -> bool:
        task = self.accessor.get_task_by_id(task_id)
        if task is None:
            return False
        return any(not is_blocker_completed(self.accessor, ref) for ref in task.blocked_by)
