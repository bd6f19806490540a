"""Server-side bookkeeping for focus sessions.

The recorder listens to :class:`FocusTimer` events and turns them into
``/api/focus-sessions`` calls. Events go through one queue and one worker,
so requests leave in the order the timer produced them and a close never
overtakes the start it belongs to. Failures are logged and dropped: the
countdown never waits for the server.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional, Tuple

from core.logs import get_logger
from datetime_utils import round_half_up, to_iso
from services.api_client import ApiError, FocusFlowApi
from services.focus_timer import EXPIRED, RESET, STARTED, FocusTimer, TimerEvent


logger = get_logger("sessions")

_SESSION = "session"
_DISTRACTION = "distraction"


class SessionRecorder:
    def __init__(self, api: FocusFlowApi, timer: FocusTimer):
        self.api = api
        self.timer = timer
        self.session_id: Optional[int] = None
        self.notes = ""
        # Set by STARTED, cleared by the RESET or EXPIRED that ends the interval.
        self._interval_open = False
        self._notes_listeners: List[Callable[[str], None]] = []
        self.last_error: Optional[str] = None
        self._queue: Optional[asyncio.Queue[Tuple[str, Any]]] = None
        self._worker: Optional[asyncio.Task] = None
        self._unsubscribe = None

    @property
    def recording(self) -> bool:
        return self.session_id is not None

    # ----- lifecycle -----
    def start(self) -> None:
        """Attach to the timer. Must be called from inside the running loop."""
        if self._worker is not None:
            return
        self._queue = queue = asyncio.Queue()
        self._unsubscribe = self.timer.subscribe(self._on_timer_event)
        self._worker = asyncio.get_running_loop().create_task(self._run(queue))

    async def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        worker, self._worker = self._worker, None
        if worker is not None:
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass
        self._queue = None

    async def drain(self) -> None:
        """Wait until every queued request has been handled."""
        if self._queue is not None:
            await self._queue.join()

    # ----- inputs -----
    def set_notes(self, text: str) -> None:
        self.notes = text or ""

    def subscribe_notes(self, listener: Callable[[str], None]) -> Callable[[], None]:
        """Call ``listener`` with the new text whenever the recorder clears the notes."""
        self._notes_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._notes_listeners:
                self._notes_listeners.remove(listener)

        return unsubscribe

    def report_distraction(self, kind: str, duration_seconds: int) -> None:
        self._enqueue(_DISTRACTION, (kind, duration_seconds))

    def _on_timer_event(self, event: TimerEvent) -> None:
        if event.kind == STARTED:
            self._interval_open = True
            self._enqueue(_SESSION, (event, None))
        elif event.kind in (RESET, EXPIRED) and self._interval_open:
            # Notes belong to the interval that just ended.
            self._interval_open = False
            notes, self.notes = self.notes, ""
            self._enqueue(_SESSION, (event, notes))
            self._notes_cleared()

    def _notes_cleared(self) -> None:
        for listener in list(self._notes_listeners):
            try:
                listener(self.notes)
            except Exception:
                logger.exception("Notes listener %r failed", listener)

    def _enqueue(self, kind: str, payload: Any) -> None:
        if self._queue is None:
            logger.debug("Recorder is not running; dropping %s", kind)
            return
        self._queue.put_nowait((kind, payload))

    # ----- worker -----
    async def _run(self, queue: asyncio.Queue) -> None:
        while True:
            kind, payload = await queue.get()
            try:
                if kind == _DISTRACTION:
                    await self._send_distraction(*payload)
                else:
                    event, notes = payload
                    if event.kind == STARTED:
                        await self._open(event)
                    else:
                        await self._close(event, notes)
            except Exception:
                logger.exception("Recorder failed on %s", kind)
            finally:
                queue.task_done()

    async def _open(self, event: TimerEvent) -> None:
        if self.session_id is not None:
            # resumed after a pause; the session is still open
            return
        body = {
            "task_id": event.task_id,
            "start_time": to_iso(event.at),
            "session_type": event.mode,
            "timer_mode": event.strategy,
        }
        try:
            session = await self.api.start_session(body)
        except ApiError as exc:
            self.last_error = str(exc)
            logger.warning("Failed to start session (timer keeps running unrecorded): %s", exc)
            return
        self.session_id = session.id
        self.last_error = None
        logger.info("Session %s started (%s)", session.id, event.mode)

    async def _close(self, event: TimerEvent, notes: Optional[str] = None) -> None:
        if self.session_id is None:
            return
        session_id = self.session_id
        body = {
            "end_time": to_iso(event.at),
            "duration_minutes": round_half_up(event.elapsed_seconds / 60),
            "notes": notes or None,
        }
        # The timer has already moved on; a failed close loses this record.
        self.session_id = None
        try:
            await self.api.end_session(session_id, body)
        except ApiError as exc:
            self.last_error = str(exc)
            logger.warning("Failed to end session %s: %s", session_id, exc)
            return
        self.last_error = None
        logger.info("Session %s closed after %s min", session_id, body["duration_minutes"])

    async def _send_distraction(self, kind: str, duration_seconds: int) -> None:
        try:
            await self.api.record_distraction(kind, duration_seconds)
        except ApiError as exc:
            logger.warning("Failed to record distraction: %s", exc)


__all__ = ["SessionRecorder"]
