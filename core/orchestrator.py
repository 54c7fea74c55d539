"""Top-level application wiring."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from core.runtime_config import ensure_runtime_dirs, load_effective_config
from core.task_workflow import TaskWorkflow
from governance.activity_log import ActivityLog
from planner.dependency_graph import DependencyGraph
from tasks.stores.sql_store import SQLStore
from tasks.task_store import TaskStore


@dataclass
class RuntimeBundle:
    """Holds initialized runtime components."""

    config: dict[str, Any]
    store: TaskStore
    graph: DependencyGraph
    workflow: TaskWorkflow
    activity: ActivityLog


class Orchestrator:
    """Creates and wires runtime components for CLI use."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or Path.cwd()).resolve()

    def build(self) -> RuntimeBundle:
        config = load_effective_config(self.root)
        paths = ensure_runtime_dirs(self.root, config)

        store = TaskStore(SQLStore(paths["db_path"]))
        graph = DependencyGraph(store)
        return RuntimeBundle(
            config=config,
            store=store,
            graph=graph,
            workflow=TaskWorkflow(store=store, graph=graph),
            activity=ActivityLog(paths["activity_log_path"]),
        )
