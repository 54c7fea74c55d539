"""Completion toggles that keep dependent task statuses in step.

The dependency graph only cascades when told to. This workflow is the caller
that flips ``completed`` on tasks and subtasks and then triggers the right
cascade for the reference that changed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from planner.blocker_refs import format_blocker_reference
from planner.dependency_graph import DependencyGraph
from tasks.task_store import TaskStore
from tasks.types import Task, TaskStatus, utc_now

logger = logging.getLogger("tdm.workflow")


@dataclass
class WorkflowOutcome:
    """Result of a completion toggle."""

    success: bool
    message: str
    blocker_ref: str | None = None
    unblocked: list[Task] = field(default_factory=list)
    re_blocked: list[Task] = field(default_factory=list)


class TaskWorkflow:
    """Flips completion state and runs the matching dependency cascade."""

    def __init__(self, store: TaskStore, graph: DependencyGraph) -> None:
        self.store = store
        self.graph = graph

    def complete_task(self, task_id: str) -> WorkflowOutcome:
        task = self.store.get_task_by_id(task_id)
        if task is None:
            return WorkflowOutcome(False, "Task not found")
        if task.completed:
            return WorkflowOutcome(True, "Task already completed", blocker_ref=task_id)

        task.completed = True
        task.completed_at = utc_now()
        task.modified_at = task.completed_at
        task.status = TaskStatus.DONE
        self.store.save()

        unblocked = self.graph.update_dependent_statuses(task_id)
        logger.info("Completed task %s; unblocked %d dependents", task_id, len(unblocked))
        return WorkflowOutcome(True, "Task completed", blocker_ref=task_id, unblocked=unblocked)

    def reopen_task(self, task_id: str) -> WorkflowOutcome:
        task = self.store.get_task_by_id(task_id)
        if task is None:
            return WorkflowOutcome(False, "Task not found")
        if not task.completed:
            return WorkflowOutcome(True, "Task already open", blocker_ref=task_id)

        task.completed = False
        task.completed_at = None
        task.modified_at = utc_now()
        # A reopened task picks up its own blockers again.
        if self.graph.has_incomplete_blockers(task_id):
            task.status = TaskStatus.BLOCKED
        else:
            task.status = TaskStatus.TODO
        self.store.save()

        re_blocked = self.graph.re_block_dependent_tasks(task_id)
        logger.info("Reopened task %s; re-blocked %d dependents", task_id, len(re_blocked))
        return WorkflowOutcome(True, "Task reopened", blocker_ref=task_id, re_blocked=re_blocked)

    def set_subtask_completed(self, task_id: str, subtask_id: str, completed: bool) -> WorkflowOutcome:
        subtask = self.store.get_subtask_by_id(task_id, subtask_id)
        if subtask is None:
            return WorkflowOutcome(False, "Subtask not found")

        ref = format_blocker_reference(task_id, subtask_id)
        if subtask.completed == completed:
            return WorkflowOutcome(True, "Subtask unchanged", blocker_ref=ref)

        subtask.completed = completed
        self.store.save()

        if completed:
            unblocked = self.graph.update_dependent_statuses(ref)
            logger.info("Completed subtask %s; unblocked %d dependents", ref, len(unblocked))
            return WorkflowOutcome(True, "Subtask completed", blocker_ref=ref, unblocked=unblocked)
        re_blocked = self.graph.re_block_dependent_tasks(ref)
        logger.info("Reopened subtask %s; re-blocked %d dependents", ref, len(re_blocked))
        return WorkflowOutcome(True, "Subtask reopened", blocker_ref=ref, re_blocked=re_blocked)
