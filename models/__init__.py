"""Data models exposed by the FocusFlow client."""
from .task import Task, TaskCreate
from .focus_session import FocusSession
from .user_settings import UserSettings
from .calendar_event import CalendarEvent
from .cache_entry import CacheEntry

__all__ = ["Task", "TaskCreate", "FocusSession", "UserSettings", "CalendarEvent", "CacheEntry"]
