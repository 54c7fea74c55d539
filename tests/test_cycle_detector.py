"""Cycle detection tests over an in-memory accessor."""

from __future__ import annotations

from planner.cycle_detector import build_task_graph, find_cycle, validate_no_cycles
from tasks.types import Subtask, Task


class InMemoryTasks:
    """Minimal accessor backed by a dict."""

    def __init__(self, *tasks: Task) -> None:
        self.tasks = {task.id: task for task in tasks}
        self.saves = 0

    def get_task_by_id(self, task_id: str) -> Task | None:
        return self.tasks.get(task_id)

    def get_subtask_by_id(self, task_id: str, subtask_id: str) -> Subtask | None:
        task = self.tasks.get(task_id)
        return task.get_subtask(subtask_id) if task else None

    def list_tasks(self) -> list[Task]:
        return list(self.tasks.values())

    def save(self) -> None:
        self.saves += 1


def test_self_and_own_subtask_are_rejected() -> None:
    tasks = InMemoryTasks(Task(id="a", subtasks=[Subtask(id="s1")]))
    assert validate_no_cycles(tasks, "a", "a") is False
    assert validate_no_cycles(tasks, "a", "a:s1") is False


def test_direct_cycle_is_rejected() -> None:
    tasks = InMemoryTasks(Task(id="a", blocked_by=["b"]), Task(id="b"))
    assert validate_no_cycles(tasks, "b", "a") is False
    assert validate_no_cycles(tasks, "a", "b") is True


def test_transitive_cycle_through_subtask_reference_is_rejected() -> None:
    tasks = InMemoryTasks(
        Task(id="a", blocked_by=["b:s1"]),
        Task(id="b", blocked_by=["c"], subtasks=[Subtask(id="s1")]),
        Task(id="c"),
    )
    assert validate_no_cycles(tasks, "c", "a") is False
    assert validate_no_cycles(tasks, "c", "a:whatever") is False


def test_diamond_and_dangling_edges_are_allowed() -> None:
    tasks = InMemoryTasks(
        Task(id="a", blocked_by=["b", "c"]),
        Task(id="b", blocked_by=["d", "gone"]),
        Task(id="c", blocked_by=["d"]),
        Task(id="d"),
        Task(id="e"),
    )
    assert validate_no_cycles(tasks, "e", "a") is True
    assert validate_no_cycles(tasks, "d", "e") is True


def test_walk_terminates_on_preexisting_cycle() -> None:
    tasks = InMemoryTasks(
        Task(id="a", blocked_by=["b"]),
        Task(id="b", blocked_by=["a"]),
        Task(id="c"),
    )
    assert validate_no_cycles(tasks, "c", "a") is True


def test_find_cycle_reports_stored_cycle() -> None:
    acyclic = InMemoryTasks(Task(id="a", blocked_by=["b"]), Task(id="b"))
    assert find_cycle(acyclic) is None

    cyclic = InMemoryTasks(
        Task(id="a", blocked_by=["b"]),
        Task(id="b", blocked_by=["c:s1"]),
        Task(id="c", blocked_by=["a"]),
    )
    cycle = find_cycle(cyclic)
    assert cycle is not None
    assert cycle[0] == cycle[-1]
    assert set(cycle) == {"a", "b", "c"}


def test_task_graph_collapses_subtasks_and_skips_missing_tasks() -> None:
    tasks = InMemoryTasks(
        Task(id="a", blocked_by=["b:s1", "b", "ghost"]),
        Task(id="b"),
        Task(id="c", blocked_by=["ghost:s2"]),
    )
    graph = build_task_graph(tasks)

    assert set(graph.nodes) == {"a", "b", "c"}
    assert list(graph.edges) == [("a", "b")]
