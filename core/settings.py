"""Centralized application configuration."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
import os
import sys


def get_default_data_dir(
    app_name: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Return an OS-specific user data directory for ``app_name``."""

    platform_id = (platform or sys.platform).lower()
    environ = dict(env if env is not None else os.environ)
    home_dir = Path(home or Path.home())
    sanitized = app_name.strip() or "app"
    sanitized = sanitized.replace("/", "-").replace("\\", "-")

    override = environ.get("FOCUSFLOW_DATA_DIR")
    if override:
        return Path(override).expanduser()

    if platform_id.startswith("win"):
        base = Path(environ.get("APPDATA") or home_dir / "AppData" / "Roaming")
    elif platform_id == "darwin":
        base = Path(environ.get("APPDATA") or home_dir / "Library" / "Application Support")
    else:
        base = Path(environ.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

    return (base.expanduser() / sanitized)


APP_NAME = "FocusFlow"


DATA_DIR = get_default_data_dir(APP_NAME)
STORAGE_DIR = DATA_DIR / "storage"
SECRETS_DIR = DATA_DIR / "secrets"
LOG_DIR = DATA_DIR / "logs"

for _dir in (DATA_DIR, STORAGE_DIR, SECRETS_DIR, LOG_DIR):
    _dir.mkdir(parents=True, exist_ok=True)


DB_PATH = STORAGE_DIR / "cache.db"
CONFIG_PATH = DATA_DIR / "config.json"
TOKEN_PATH = DATA_DIR / "token.json"
CLIENT_SECRET_PATH = SECRETS_DIR / "client_secret.json"
LOG_PATH = LOG_DIR / "focusflow.log"


@dataclass(frozen=True)
class ApiSettings:
    base_url: str = os.environ.get("FOCUSFLOW_API_URL", "http://localhost:3000")
    timeout_sec: float = 10.0
    token: Optional[str] = os.environ.get("FOCUSFLOW_API_TOKEN") or None


API = ApiSettings()


@dataclass(frozen=True)
class TimerSettings:
    focus_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    cycles_before_long_break: int = 4
    tick_interval_sec: float = 1.0
    default_strategy: str = "pomodoro"
    custom_presets: Mapping[str, tuple[int, int]] = field(
        default_factory=lambda: {
            "52/17": (52, 17),
            "90/20": (90, 20),
            "45/15": (45, 15),
        }
    )
    default_custom_preset: str = "52/17"


TIMER = TimerSettings()


@dataclass(frozen=True)
class GuardSettings:
    focus_title: str = "🎯 Focus Mode Active - Stay on Task!"
    alert_title: str = "⚠️ Come Back to Focus!"
    blink_interval_sec: float = 1.0
    leave_prompt: str = "You have an active focus session. Are you sure you want to leave?"
    welcome_back_after_sec: int = 5


GUARD = GuardSettings()


@dataclass(frozen=True)
class CacheSettings:
    tasks_key: str = "focusflow_tasks"


CACHE = CacheSettings()


@dataclass(frozen=True)
class LogSettings:
    path: Path = LOG_PATH
    max_bytes: int = 1_000_000
    backup_count: int = 3
    level: str = os.environ.get("FOCUSFLOW_LOG_LEVEL", "INFO")


LOGGING = LogSettings()


@dataclass(frozen=True)
class CalendarSettings:
    enabled: bool = True
    calendar_id: str = "primary"
    upcoming_window_minutes: int = 120
    scopes: tuple[str, ...] = (
        "https://www.googleapis.com/auth/calendar.readonly",
    )


CALENDAR = CalendarSettings()


@dataclass(frozen=True)
class UISettings:
    app_title: str = APP_NAME
    theme_mode: str = "system"
    color_scheme_seed: str = "#4F46E5"
    window_min_width: int = 900
    window_min_height: int = 600
    nav_width: int = 88
    surface_bg: str = "#F1F5F9"
    text_subtle: str = "#6B7280"


UI = UISettings()


__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "STORAGE_DIR",
    "SECRETS_DIR",
    "LOG_DIR",
    "DB_PATH",
    "CONFIG_PATH",
    "TOKEN_PATH",
    "CLIENT_SECRET_PATH",
    "LOG_PATH",
    "API",
    "TIMER",
    "GUARD",
    "CACHE",
    "LOGGING",
    "CALENDAR",
    "UI",
    "get_default_data_dir",
]
