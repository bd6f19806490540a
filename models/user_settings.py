from __future__ import annotations

from typing import Optional

from sqlmodel import SQLModel

from core.settings import TIMER


class UserSettings(SQLModel):
    id: Optional[int] = None
    user_id: Optional[str] = None
    focus_duration_minutes: int = TIMER.focus_minutes
    short_break_minutes: int = TIMER.short_break_minutes
    long_break_minutes: int = TIMER.long_break_minutes
    cycles_before_long_break: int = TIMER.cycles_before_long_break
    auto_start_breaks: int = 0
    auto_start_focus: int = 0
    minimal_mode_enabled: int = 0
    blocked_websites: Optional[str] = None
    show_motivational_prompts: int = 1
    notion_sync_enabled: int = 0
    notion_database_id: Optional[str] = None
    soundOn: int = 1
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


DEFAULT_SETTINGS = UserSettings()


__all__ = ["UserSettings", "DEFAULT_SETTINGS"]
