"""Focus session rows and the timer vocabulary shared with the server."""

from __future__ import annotations

from typing import Optional

from sqlmodel import SQLModel


FOCUS = "focus"
SHORT_BREAK = "short_break"
LONG_BREAK = "long_break"
TIMER_MODES = (FOCUS, SHORT_BREAK, LONG_BREAK)

CLASSIC = "classic"
POMODORO = "pomodoro"
CUSTOM = "custom"
TIMER_STRATEGIES = (CLASSIC, POMODORO, CUSTOM)


class FocusSession(SQLModel):
    id: int
    user_id: Optional[str] = None
    task_id: Optional[int] = None
    start_time: str
    end_time: Optional[str] = None
    duration_minutes: Optional[int] = None
    session_type: str = FOCUS
    timer_mode: str = POMODORO
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None


__all__ = [
    "FocusSession",
    "FOCUS",
    "SHORT_BREAK",
    "LONG_BREAK",
    "TIMER_MODES",
    "CLASSIC",
    "POMODORO",
    "CUSTOM",
    "TIMER_STRATEGIES",
]
