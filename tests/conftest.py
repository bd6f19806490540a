from datetime import datetime, timedelta, timezone
from pathlib import Path
import json
import os
import sys
import tempfile

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep the data dir (cache db, logs, config) out of the real home directory.
os.environ.setdefault("FOCUSFLOW_DATA_DIR", tempfile.mkdtemp(prefix="focusflow-tests-"))

import models.cache_entry  # noqa: E402,F401
from models.focus_session import FocusSession  # noqa: E402
from models.task import Task  # noqa: E402
from models.user_settings import UserSettings  # noqa: E402
from services.api_client import ApiError  # noqa: E402
from storage.task_cache import LocalTaskCache  # noqa: E402


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    def factory():
        return Session(engine)

    return factory


@pytest.fixture
def cache(session_factory):
    return LocalTaskCache(session_factory=session_factory)


def make_task(task_id, title=None, **fields):
    return Task(id=task_id, title=title or f"Task {task_id}", **fields)


class FakeApi:
    """In-memory stand-in for FocusFlowApi; ``fail`` names methods that raise."""

    def __init__(self, tasks=None):
        self.tasks = {t.id: t for t in (tasks or [])}
        self.calls = []
        self.fail = set()
        self.next_task_id = 100
        self.next_session_id = 1
        self.settings = UserSettings()
        # list_tasks waits on this when set; lets tests interleave requests
        self.list_gate = None

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail:
            raise ApiError(f"{name} failed", 500)

    def call_names(self):
        return [c[0] for c in self.calls]

    async def list_tasks(self):
        snapshot = [t.model_copy() for t in self.tasks.values()]
        if self.list_gate is not None:
            await self.list_gate.wait()
        self._record("list_tasks")
        return snapshot

    async def create_task(self, body):
        self._record("create_task", body)
        row = dict(body)
        if "tags" in row:
            row["tags"] = json.dumps(row["tags"])
        task = Task(id=self.next_task_id, **row)
        self.next_task_id += 1
        self.tasks[task.id] = task
        return task.model_copy()

    async def update_task(self, task_id, updates):
        self._record("update_task", task_id, updates)
        current = self.tasks.get(task_id)
        if current is None:
            raise ApiError("Failed to update task", 404)
        updated = current.model_copy(update=updates)
        self.tasks[task_id] = updated
        return updated.model_copy()

    async def delete_task(self, task_id):
        self._record("delete_task", task_id)
        self.tasks.pop(task_id, None)

    async def start_session(self, body):
        self._record("start_session", body)
        session = FocusSession(id=self.next_session_id, **body)
        self.next_session_id += 1
        return session

    async def end_session(self, session_id, body):
        self._record("end_session", session_id, body)
        return FocusSession(id=session_id, start_time="2024-01-01T00:00:00.000Z", **body)

    async def record_distraction(self, distraction_type, duration_seconds):
        self._record("record_distraction", distraction_type, duration_seconds)

    async def get_settings(self):
        self._record("get_settings")
        return self.settings

    async def update_settings(self, updates):
        self._record("update_settings", updates)
        self.settings = self.settings.model_copy(update=updates)
        return self.settings


@pytest.fixture
def fake_api():
    return FakeApi()


class ManualTicker:
    def __init__(self, callback, interval):
        self.callback = callback
        self.interval = interval
        self.started = False
        self.cancelled = False

    @property
    def active(self):
        return self.started and not self.cancelled

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self, times=1):
        for _ in range(times):
            if not self.active:
                break
            self.callback()


class ManualTickers:
    """Ticker factory that remembers every ticker it hands out."""

    def __init__(self):
        self.created = []

    def __call__(self, callback, interval):
        ticker = ManualTicker(callback, interval)
        self.created.append(ticker)
        return ticker

    @property
    def active(self):
        return [t for t in self.created if t.active]

    def fire(self, times=1):
        for _ in range(times):
            for ticker in self.active:
                ticker.fire()


@pytest.fixture
def tickers():
    return ManualTickers()


class FakeClock:
    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock(1000.0)


class FakeWallClock:
    def __init__(self):
        self.now = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def wall_clock():
    return FakeWallClock()
