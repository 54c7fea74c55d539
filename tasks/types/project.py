"""Project models."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator

from tasks.types.task import utc_now

INBOX_PROJECT_ID = "inbox"
PERSONAL_PROJECT_ID = "personal"


class Project(BaseModel):
    """Named grouping of tasks."""

    id: str = Field(default_factory=lambda: f"project_{uuid.uuid4().hex[:12]}")
    name: str = ""
    description: str = ""
    color: str = "#3b82f6"
    archived: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    position: int = 0

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def default_projects() -> list[Project]:
    """Projects every store starts with."""
    return [
        Project(
            id=INBOX_PROJECT_ID,
            name="Inbox",
            description="Uncategorized tasks",
            color="#6b7280",
            position=0,
        ),
        Project(
            id=PERSONAL_PROJECT_ID,
            name="Personal",
            description="Personal tasks",
            color="#10b981",
            position=1,
        ),
    ]
