# focusflow/services/tasks.py
from __future__ import annotations

from typing import Any, Callable, List, Optional

from core.logs import get_logger
from datetime_utils import now_iso
from models.task import Task, TaskCreate
from services.api_client import ApiError, FocusFlowApi
from services.task_state import Listener, TaskStateManager


logger = get_logger("tasks")


class TaskService:
    """Keeps the task store in step with the server.

    Writes are confirm-then-apply: the store only ever receives rows the
    server has returned. A failed fetch falls back to the cached list; a
    failed write leaves the store untouched and re-raises.
    """

    def __init__(self, api: FocusFlowApi, state: TaskStateManager):
        self.api = api
        self.state = state
        self.loading = False
        self.error: Optional[str] = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.state.subscribe(listener)

    @property
    def tasks(self) -> List[Task]:
        return self.state.get_tasks()

    async def fetch_tasks(self) -> List[Task]:
        self.loading = True
        try:
            self.state.load_tasks()
            ticket = self.state.next_ticket()
            try:
                remote = await self.api.list_tasks()
            except ApiError as exc:
                self.error = str(exc)
                logger.warning("Task sync failed, showing cached tasks: %s", exc)
                return self.state.load_tasks()
            self.state.set_tasks(remote, ticket=ticket)
            self.error = None
            return self.state.get_tasks()
        finally:
            self.loading = False

    refetch = fetch_tasks

    async def create_task(
        self,
        title: str,
        *,
        description: Optional[str] = None,
        priority: Optional[int] = None,
        estimated_minutes: Optional[int] = None,
        project: Optional[str] = None,
        due_date: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Task:
        body = TaskCreate(
            title=title.strip(),
            description=description or None,
            priority=priority,
            estimated_minutes=estimated_minutes,
            project=project or None,
            due_date=due_date or None,
            tags=tags or None,
        ).model_dump(exclude_none=True)
        ticket = self.state.next_ticket()
        try:
            created = await self.api.create_task(body)
        except ApiError as exc:
            self.error = str(exc)
            raise
        self.state.add_task(created, ticket=ticket)
        self.error = None
        logger.info("Created task %s", created.id)
        return created

    async def update_task(self, task_id: int, **updates: Any) -> Task:
        ticket = self.state.next_ticket()
        try:
            updated = await self.api.update_task(task_id, updates)
        except ApiError as exc:
            self.error = str(exc)
            raise
        self.state.update_task(task_id, updated, ticket=ticket)
        self.error = None
        return updated

    async def delete_task(self, task_id: int) -> None:
        ticket = self.state.next_ticket()
        try:
            await self.api.delete_task(task_id)
        except ApiError as exc:
            self.error = str(exc)
            raise
        self.state.remove_task(task_id, ticket=ticket)
        self.error = None
        logger.info("Deleted task %s", task_id)

    async def toggle_task_done(self, task_id: int) -> bool:
        task = self.state.find(task_id)
        if task is None:
            return False
        if task.done:
            updates = {"is_completed": 0, "completed_at": None}
        else:
            updates = {"is_completed": 1, "completed_at": now_iso()}
        return await self._apply_quietly(task_id, updates, "toggle task completion")

    async def complete_task(self, task_id: int) -> bool:
        task = self.state.find(task_id)
        if task is None:
            return False
        if task.done:
            return True
        updates = {"is_completed": 1, "completed_at": now_iso()}
        return await self._apply_quietly(task_id, updates, "complete task")

    async def _apply_quietly(self, task_id: int, updates: dict, action: str) -> bool:
        try:
            await self.update_task(task_id, **updates)
        except ApiError as exc:
            logger.warning("Failed to %s %s: %s", action, task_id, exc)
            return False
        return True


__all__ = ["TaskService"]
