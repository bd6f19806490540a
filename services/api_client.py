"""HTTP client for the FocusFlow REST backend."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Type, TypeVar

import requests
from pydantic import ValidationError
from sqlmodel import SQLModel

from core.logs import get_logger
from core.settings import API
from models.focus_session import FocusSession
from models.task import Task
from models.user_settings import UserSettings


ModelT = TypeVar("ModelT", bound=SQLModel)

logger = get_logger("api")


class ApiError(RuntimeError):
    """A request to the backend failed; ``status`` is ``None`` for transport errors."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class FocusFlowApi:
    """Thin wrapper around ``requests``.

    Every public call is a coroutine: the blocking request runs in a worker
    thread so the event loop keeps ticking while it is in flight.
    """

    def __init__(
        self,
        base_url: str = API.base_url,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = API.timeout_sec,
        token: Optional[str] = API.token,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    # ----- transport -----
    def _request(self, method: str, path: str, error: str, body: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(error) from exc
        if not response.ok:
            logger.warning("%s %s returned %s", method, path, response.status_code)
            raise ApiError(error, response.status_code)
        if method == "DELETE" or response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(error, response.status_code) from exc

    async def _call(self, method: str, path: str, error: str, body: Optional[Dict[str, Any]] = None) -> Any:
        return await asyncio.to_thread(self._request, method, path, error, body)

    @staticmethod
    def _parse(model: Type[ModelT], payload: Any, error: str) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Malformed %s payload: %s", model.__name__, exc)
            raise ApiError(error) from exc

    # ----- tasks -----
    async def list_tasks(self) -> List[Task]:
        error = "Failed to fetch tasks"
        payload = await self._call("GET", "/api/tasks", error)
        if not isinstance(payload, list):
            raise ApiError(error)
        return [self._parse(Task, row, error) for row in payload]

    async def create_task(self, body: Dict[str, Any]) -> Task:
        error = "Failed to create task"
        payload = await self._call("POST", "/api/tasks", error, body)
        return self._parse(Task, payload, error)

    async def update_task(self, task_id: int, updates: Dict[str, Any]) -> Task:
        error = "Failed to update task"
        payload = await self._call("PATCH", f"/api/tasks/{task_id}", error, updates)
        return self._parse(Task, payload, error)

    async def delete_task(self, task_id: int) -> None:
        await self._call("DELETE", f"/api/tasks/{task_id}", "Failed to delete task")

    # ----- focus sessions -----
    async def start_session(self, body: Dict[str, Any]) -> FocusSession:
        error = "Failed to start session"
        payload = await self._call("POST", "/api/focus-sessions", error, body)
        return self._parse(FocusSession, payload, error)

    async def end_session(self, session_id: int, body: Dict[str, Any]) -> FocusSession:
        error = "Failed to end session"
        payload = await self._call("PATCH", f"/api/focus-sessions/{session_id}", error, body)
        return self._parse(FocusSession, payload, error)

    async def record_distraction(self, distraction_type: str, duration_seconds: int) -> None:
        await self._call(
            "POST",
            "/api/focus-distractions",
            "Failed to record distraction",
            {"distraction_type": distraction_type, "duration_seconds": duration_seconds},
        )

    # ----- settings -----
    async def get_settings(self) -> UserSettings:
        error = "Failed to fetch settings"
        payload = await self._call("GET", "/api/settings", error)
        return self._parse(UserSettings, payload, error)

    async def update_settings(self, updates: Dict[str, Any]) -> UserSettings:
        error = "Failed to update settings"
        payload = await self._call("PATCH", "/api/settings", error, updates)
        return self._parse(UserSettings, payload, error)

    def close(self) -> None:
        self.session.close()


__all__ = ["ApiError", "FocusFlowApi"]
