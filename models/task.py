# focusflow/models/task.py
from __future__ import annotations

import json
from typing import List, Optional, Union

from sqlmodel import Field, SQLModel


TASK_STATUSES = ("todo", "in_progress", "completed")
REPEAT_POLICIES = ("none", "daily", "weekly", "monthly")


class Task(SQLModel):
    """A task row exactly as the server returns it.

    Field names follow the wire format, including the two camelCase columns.
    ``is_completed`` travels as a 0/1 integer.
    """

    id: int
    user_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    status: str = "todo"          # todo / in_progress / completed
    priority: int = 0
    estimated_minutes: Optional[int] = None
    actual_minutes: int = 0
    is_completed: int = 0
    completed_at: Optional[str] = None
    project: Optional[str] = None
    due_date: Optional[str] = None
    tags: Optional[str] = None
    repeat: Optional[str] = "none"
    repeatDetail: Optional[Union[str, List[str]]] = None
    goalPoints: Optional[int] = 1
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def done(self) -> bool:
        return bool(self.is_completed)

    def tag_list(self) -> List[str]:
        """Decode the serialized ``tags`` column (JSON array or comma separated)."""
        raw = (self.tags or "").strip()
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            return [part.strip() for part in raw.split(",") if part.strip()]
        if isinstance(parsed, list):
            return [str(item) for item in parsed]
        return [str(parsed)]


class TaskCreate(SQLModel):
    """Request body for ``POST /api/tasks``."""

    title: str
    description: Optional[str] = None
    priority: Optional[int] = None
    estimated_minutes: Optional[int] = None
    project: Optional[str] = None
    due_date: Optional[str] = None
    tags: Optional[List[str]] = Field(default=None)


__all__ = ["Task", "TaskCreate", "TASK_STATUSES", "REPEAT_POLICIES"]
