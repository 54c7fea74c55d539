"""Structured JSONL activity log for dependency and completion changes."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any


class ActivityLog:
    """Writes task activity records as JSON lines."""

    def __init__(self, log_path: Path) -> None:
        self.log_path = log_path
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger("tdm.activity")

    def log(
        self,
        action: str,
        task_id: str,
        success: bool,
        outcome: str = "",
        blocker_ref: str | None = None,
        changed: list[str] | None = None,
    ) -> dict[str, Any]:
        """Append one JSONL activity event and return it."""
        event: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "action": action,
            "task_id": task_id,
            "blocker_ref": blocker_ref,
            "success": success,
            "outcome": outcome,
            "changed": changed or [],
        }
        with self.log_path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(event, ensure_ascii=True) + "\n")
        self.logger.info(json.dumps(event, ensure_ascii=True))
        return event
