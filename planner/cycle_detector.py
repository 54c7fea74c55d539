"""Task-level cycle detection over embedded ``blocked_by`` edges."""

from __future__ import annotations

import networkx as nx

from planner.blocker_refs import BlockerLike, blocker_task_id
from planner.resolver import TaskAccessor


def _blocker_task_ids(accessor: TaskAccessor, task_id: str) -> list[str]:
    task = accessor.get_task_by_id(task_id)
    if task is None:
        return []
    return [blocker_task_id(ref) for ref in task.blocked_by]


def validate_no_cycles(accessor: TaskAccessor, blocked_task_id: str, blocker_ref: BlockerLike) -> bool:
    """Return True when ``blocked_task_id`` may be blocked by ``blocker_ref``.

    Walks everything the proposed blocker already (transitively) waits on.
    If that reaches the blocked task, the new edge would close a cycle.
    """
    start = blocker_task_id(blocker_ref)
    if start == blocked_task_id:
        return False

    visited: set[str] = set()
    stack = [start]
    while stack:
        current = stack.pop()
        if current == blocked_task_id:
            return False
        if current in visited:
            continue
        visited.add(current)
        stack.extend(
            next_id for next_id in _blocker_task_ids(accessor, current) if next_id not in visited
        )
    return True


def build_task_graph(accessor: TaskAccessor) -> nx.DiGraph:
    """Directed graph of task ids, edges pointing from blocked task to blocker.

    Subtask references collapse onto their owning task; references to
    missing tasks are left out.
    """
    graph = nx.DiGraph()
    tasks = accessor.list_tasks()
    for task in tasks:
        graph.add_node(task.id)
    for task in tasks:
        for next_id in _blocker_task_ids(accessor, task.id):
            if graph.has_node(next_id):
                graph.add_edge(task.id, next_id)
    return graph


def find_cycle(accessor: TaskAccessor) -> list[str] | None:
    """Return one existing task-level cycle as a closed path of ids, if any.

    Edges accepted through ``validate_no_cycles`` never form a cycle; this
    audits stored data that may have been written some other way.
    """
    graph = build_task_graph(accessor)
    try:
        edges = nx.find_cycle(graph)
    except nx.NetworkXNoCycle:
        return None
    return [source for source, _ in edges] + [edges[-1][1]]
