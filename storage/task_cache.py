"""Local task cache: the last known task list, persisted under one key."""
from __future__ import annotations

import json
from typing import Any, Callable, List, Optional

from pydantic import ValidationError
from sqlmodel import Session

from core.logs import get_logger
from core.settings import CACHE
from datetime_utils import utc_now
from models.cache_entry import CacheEntry
from models.task import Task
from storage.db import get_session


logger = get_logger("cache")


def _serialise_tasks(tasks: List[Task]) -> str:
    return json.dumps([task.model_dump() for task in tasks], ensure_ascii=False)


def _deserialise_tasks(payload: Optional[str]) -> List[Task]:
    if not payload:
        return []
    try:
        data: Any = json.loads(payload)
    except json.JSONDecodeError:
        logger.warning("Task cache payload is not valid JSON; ignoring it")
        return []
    if not isinstance(data, list):
        return []
    tasks: List[Task] = []
    for row in data:
        try:
            tasks.append(Task.model_validate(row))
        except ValidationError:
            logger.warning("Dropping malformed cached task row: %r", row)
    return tasks


class LocalTaskCache:
    """Synchronous read/write access to the cached task list."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = get_session,
        key: str = CACHE.tasks_key,
    ):
        self._session_factory = session_factory
        self.key = key

    def read(self) -> List[Task]:
        with self._session_factory() as session:
            row = session.get(CacheEntry, self.key)
            return _deserialise_tasks(row.payload if row else None)

    def write(self, tasks: List[Task]) -> None:
        payload = _serialise_tasks(tasks)
        with self._session_factory() as session:
            row = session.get(CacheEntry, self.key)
            if row is None:
                row = CacheEntry(key=self.key, payload=payload)
            else:
                row.payload = payload
                row.updated_at = utc_now()
            session.add(row)
            session.commit()

    def clear(self) -> None:
        with self._session_factory() as session:
            row = session.get(CacheEntry, self.key)
            if row is not None:
                session.delete(row)
                session.commit()


__all__ = ["LocalTaskCache"]
