# focusflow/models/calendar_event.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class CalendarEvent:
    id: str
    title: str
    start_time: str
    end_time: str
    is_all_day: bool = False
    location: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    attendees: List[str] = field(default_factory=list)


__all__ = ["CalendarEvent"]
