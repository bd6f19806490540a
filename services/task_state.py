"""In-process task store shared by every consumer of the task list.

The store owns the local cache and a subscriber list. It never talks to the
network: callers hand it rows the server has already confirmed.

Ordering: rows are applied in the order their requests *complete*. A full
refresh that was issued before a confirmed single-task write but resolves
after it will overwrite that write. The store does not prevent this; it
detects it through request tickets, logs it and records the affected ids in
``stale_overwrites`` (the most recent ones only).
"""
from __future__ import annotations

from collections import deque
from typing import Callable, Deque, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from core.logs import get_logger
from models.task import Task
from storage.task_cache import LocalTaskCache


Listener = Callable[[List[Task]], None]

logger = get_logger("tasks.state")

STALE_HISTORY = 50


class TaskStateManager:
    def __init__(self, cache: Optional[LocalTaskCache] = None):
        self._cache = cache or LocalTaskCache()
        self._tasks: List[Task] = []
        self._listeners: List[Listener] = []
        self._ticket = 0
        self._confirmed: Dict[int, int] = {}
        self._removed: Dict[int, int] = {}
        self._pending: Deque[List[Task]] = deque()
        self._notifying = False
        self.stale_overwrites: Deque[int] = deque(maxlen=STALE_HISTORY)

    # ----- subscribers -----
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    def _snapshot(self) -> List[Task]:
        return [task.model_copy() for task in self._tasks]

    def _notify(self) -> None:
        # Changes made by a listener are delivered after the current state
        # reached every listener, so all of them see the same sequence.
        self._pending.append(self._snapshot())
        if self._notifying:
            return
        self._notifying = True
        try:
            while self._pending:
                snapshot = self._pending.popleft()
                for listener in list(self._listeners):
                    try:
                        listener(list(snapshot))
                    except Exception:
                        logger.exception("Task listener %r failed", listener)
        finally:
            self._notifying = False

    # ----- persistence -----
    def _persist(self) -> None:
        try:
            self._cache.write(self._tasks)
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("Failed to save tasks to the local cache: %s", exc)

    # ----- reads -----
    def get_tasks(self) -> List[Task]:
        return self._snapshot()

    def find(self, task_id: int) -> Optional[Task]:
        for task in self._tasks:
            if task.id == task_id:
                return task.model_copy()
        return None

    def load_tasks(self) -> List[Task]:
        """Return the cached list without touching the network. Never raises."""
        try:
            stored = self._cache.read()
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("Failed to load tasks from the local cache: %s", exc)
            return self._snapshot()
        if not stored and self._tasks:
            return self._snapshot()
        self._tasks = stored
        self._notify()
        return self._snapshot()

    # ----- request ordering -----
    def next_ticket(self) -> int:
        """Issue a ticket; take one right before sending a request."""
        self._ticket += 1
        return self._ticket

    # ----- writes (confirmed by the server) -----
    def set_tasks(self, tasks: List[Task], *, ticket: Optional[int] = None) -> None:
        """Replace the whole list with the result of a full fetch."""
        incoming = list(tasks)
        if ticket is not None:
            stale = sorted(tid for tid, seq in self._confirmed.items() if seq > ticket)
            stale += [t.id for t in incoming if self._removed.get(t.id, 0) > ticket]
            if stale:
                logger.warning(
                    "Full refresh (ticket %s) overwrote newer confirmed writes for tasks %s",
                    ticket,
                    stale,
                )
                self.stale_overwrites.extend(stale)
            self._confirmed = {tid: seq for tid, seq in self._confirmed.items() if seq > ticket}
            self._removed = {tid: seq for tid, seq in self._removed.items() if seq > ticket}
        else:
            self._confirmed.clear()
            self._removed.clear()
        self._tasks = incoming
        self._persist()
        self._notify()

    def update_task(self, task_id: int, task: Task, *, ticket: Optional[int] = None) -> bool:
        """Store the server's row for ``task_id`` verbatim. No-op if the id is unknown."""
        for index, current in enumerate(self._tasks):
            if current.id == task_id:
                self._tasks[index] = task
                self._confirmed[task_id] = ticket if ticket is not None else self.next_ticket()
                self._persist()
                self._notify()
                return True
        return False

    def add_task(self, task: Task, *, ticket: Optional[int] = None) -> None:
        for index, current in enumerate(self._tasks):
            if current.id == task.id:
                self._tasks[index] = task
                break
        else:
            self._tasks.insert(0, task)
        self._confirmed[task.id] = ticket if ticket is not None else self.next_ticket()
        self._removed.pop(task.id, None)
        self._persist()
        self._notify()

    def remove_task(self, task_id: int, *, ticket: Optional[int] = None) -> bool:
        remaining = [t for t in self._tasks if t.id != task_id]
        if len(remaining) == len(self._tasks):
            return False
        self._tasks = remaining
        self._confirmed.pop(task_id, None)
        self._removed[task_id] = ticket if ticket is not None else self.next_ticket()
        self._persist()
        self._notify()
        return True


__all__ = ["TaskStateManager", "Listener"]
