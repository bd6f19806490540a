from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from typing import Any, Dict, List, Optional

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from core.logs import get_logger
from core.settings import CALENDAR
from datetime_utils import parse_iso, to_iso, utc_now
from models.calendar_event import CalendarEvent


logger = get_logger("google.calendar")


class CalendarError(RuntimeError):
    pass


# ---------- time helpers ----------
def _local_midnight(now: datetime) -> datetime:
    local = now.astimezone()
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


def _clock_label(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{hour}:{dt.minute:02d} {suffix}"


def format_event_time(
    start_time: str,
    end_time: str,
    is_all_day: bool,
    tz: Optional[tzinfo] = None,
) -> str:
    """``"All day"`` or ``"9:30 AM - 10:15 AM"`` in local time (or ``tz``)."""
    if is_all_day:
        return "All day"
    start = parse_iso(start_time)
    end = parse_iso(end_time)
    if start is None or end is None:
        return ""
    return f"{_clock_label(start.astimezone(tz))} - {_clock_label(end.astimezone(tz))}"


def is_event_active(start_time: str, end_time: str, now: Optional[datetime] = None) -> bool:
    start = parse_iso(start_time)
    end = parse_iso(end_time)
    if start is None or end is None:
        return False
    current = now or utc_now()
    return start <= current <= end


def is_event_upcoming(
    start_time: str,
    now: Optional[datetime] = None,
    window_minutes: int = CALENDAR.upcoming_window_minutes,
) -> bool:
    """True when the event starts later than now but within the window."""
    start = parse_iso(start_time)
    if start is None:
        return False
    current = now or utc_now()
    return current < start <= current + timedelta(minutes=window_minutes)


def event_from_item(item: Dict[str, Any]) -> CalendarEvent:
    start = item.get("start") or {}
    end = item.get("end") or {}
    is_all_day = "date" in start and "dateTime" not in start
    if is_all_day:
        start_time = start.get("date", "")
        end_time = end.get("date", start_time)
    else:
        start_time = start.get("dateTime", "")
        end_time = end.get("dateTime", start_time)
    attendees = [
        a.get("email") or a.get("displayName")
        for a in item.get("attendees") or []
        if a.get("email") or a.get("displayName")
    ]
    return CalendarEvent(
        id=item.get("id", ""),
        title=item.get("summary") or "(No title)",
        start_time=start_time,
        end_time=end_time,
        is_all_day=is_all_day,
        location=item.get("location"),
        description=item.get("description"),
        color=item.get("colorId"),
        attendees=attendees,
    )


class GoogleCalendar:
    """Read-only view of one Google calendar."""

    def __init__(self, auth, calendar_id: str = CALENDAR.calendar_id, service: Any = None):
        self.auth = auth
        self.calendar_id = calendar_id
        self.service = service

    @property
    def connected(self) -> bool:
        return self._maybe_build_service()

    def connect(self) -> bool:
        """Run the consent flow if needed; blocking, call from a worker thread."""
        self.auth.ensure_credentials()
        return self._maybe_build_service()

    def disconnect(self) -> None:
        self.auth.reset_credentials()
        self.service = None

    def _maybe_build_service(self) -> bool:
        if self.service is not None:
            return True
        creds = self.auth.load_cached()
        if creds is None:
            return False
        self.service = build("calendar", "v3", credentials=creds, cache_discovery=False)
        return True

    # ----- reads -----
    def list_range(self, start_dt: datetime, end_dt: datetime) -> List[CalendarEvent]:
        if not self._maybe_build_service():
            return []
        params = dict(
            calendarId=self.calendar_id,
            timeMin=to_iso(start_dt),
            timeMax=to_iso(end_dt),
            singleEvents=True,
            orderBy="startTime",
            maxResults=250,
        )
        try:
            res = self.service.events().list(**params).execute()
        except HttpError as exc:
            status = getattr(getattr(exc, "resp", None), "status", None)
            if status == 401:
                logger.info("Calendar access revoked; treating as disconnected")
                self.disconnect()
                return []
            logger.warning("Failed to fetch calendar events: %s", exc)
            raise CalendarError("Failed to fetch calendar events") from exc
        return [event_from_item(item) for item in res.get("items", [])]

    def todays_events(self, now: Optional[datetime] = None) -> List[CalendarEvent]:
        start = _local_midnight(now or utc_now())
        return self.list_range(start, start + timedelta(days=1))


__all__ = [
    "CalendarError",
    "GoogleCalendar",
    "event_from_item",
    "format_event_time",
    "is_event_active",
    "is_event_upcoming",
]
