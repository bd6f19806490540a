from __future__ import annotations

from typing import Any, Callable, List, Optional

from core.logs import get_logger
from models.user_settings import UserSettings
from services.api_client import ApiError, FocusFlowApi


logger = get_logger("settings")


class SettingsService:
    """Fetches and patches ``/api/settings``; listeners receive every new value."""

    def __init__(self, api: FocusFlowApi):
        self.api = api
        self.settings: Optional[UserSettings] = None
        self.loading = False
        self.error: Optional[str] = None
        self._listeners: List[Callable[[UserSettings], None]] = []

    def subscribe(self, callback: Callable[[UserSettings], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, settings: UserSettings) -> None:
        for listener in list(self._listeners):
            try:
                listener(settings)
            except Exception:
                logger.exception("Settings listener %r failed", listener)

    async def fetch(self) -> Optional[UserSettings]:
        self.loading = True
        try:
            self.settings = await self.api.get_settings()
            self.error = None
        except ApiError as exc:
            self.error = str(exc)
            logger.warning("Settings fetch failed: %s", exc)
            return self.settings
        finally:
            self.loading = False
        self._emit(self.settings)
        return self.settings

    refetch = fetch

    async def update(self, **changes: Any) -> UserSettings:
        try:
            updated = await self.api.update_settings(changes)
        except ApiError as exc:
            self.error = str(exc)
            raise
        self.settings = updated
        self.error = None
        self._emit(updated)
        return updated


__all__ = ["SettingsService"]
