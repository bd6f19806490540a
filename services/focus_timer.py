"""Countdown state machine for focus and break intervals.

The timer knows nothing about the network. Everything it does is reported
to subscribers as :class:`TimerEvent` objects; ``SessionRecorder`` turns those
into focus-session records on the server.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from core.logs import get_logger
from core.settings import TIMER
from datetime_utils import utc_now
from models.focus_session import (
    CLASSIC,
    CUSTOM,
    FOCUS,
    LONG_BREAK,
    SHORT_BREAK,
    TIMER_MODES,
    TIMER_STRATEGIES,
)
from models.user_settings import DEFAULT_SETTINGS, UserSettings
from services.ticker import Ticker, TickerFactory, asyncio_ticker


logger = get_logger("timer")

STARTED = "started"
PAUSED = "paused"
TICK = "tick"
RESET = "reset"
EXPIRED = "expired"
MODE_CHANGED = "mode_changed"
CONFIGURED = "configured"


@dataclass(frozen=True)
class TimerEvent:
    kind: str
    mode: str
    seconds_left: int
    full_seconds: int
    elapsed_seconds: int
    cycle_count: int
    strategy: str
    task_id: Optional[int]
    at: datetime


def format_time(seconds: int) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class FocusTimer:
    def __init__(
        self,
        settings: Optional[UserSettings] = None,
        *,
        strategy: str = TIMER.default_strategy,
        custom_preset: str = TIMER.default_custom_preset,
        ticker_factory: TickerFactory = asyncio_ticker,
        tick_interval: float = TIMER.tick_interval_sec,
        clock: Callable[[], datetime] = utc_now,
    ):
        if strategy not in TIMER_STRATEGIES:
            raise ValueError(f"Unsupported timer strategy: {strategy}")
        self.settings = settings
        self.strategy = strategy
        self.custom_preset = custom_preset
        self._ticker_factory = ticker_factory
        self._tick_interval = tick_interval
        self._clock = clock
        self._ticker: Optional[Ticker] = None
        self._listeners: List[Callable[[TimerEvent], None]] = []

        self.mode = FOCUS
        self.is_running = False
        self.cycle_count = 0
        self.task_id: Optional[int] = None
        self.seconds_left = self.duration(FOCUS)
        # Length of the interval in progress, fixed at its first start.
        self._interval_seconds: Optional[int] = None

    # ----- durations -----
    def _user_settings(self) -> UserSettings:
        return self.settings or DEFAULT_SETTINGS

    def duration(self, mode: str) -> int:
        """Full length of ``mode`` in seconds under the current strategy."""
        settings = self._user_settings()
        if self.strategy == CLASSIC:
            return settings.focus_duration_minutes * 60 if mode == FOCUS else 0
        if self.strategy == CUSTOM and self.custom_preset in TIMER.custom_presets:
            work, rest = TIMER.custom_presets[self.custom_preset]
            return work * 60 if mode == FOCUS else rest * 60
        if mode == FOCUS:
            return settings.focus_duration_minutes * 60
        if mode == SHORT_BREAK:
            return settings.short_break_minutes * 60
        return settings.long_break_minutes * 60

    @property
    def cycles_before_long_break(self) -> int:
        return self._user_settings().cycles_before_long_break

    @property
    def full_seconds(self) -> int:
        return self.duration(self.mode)

    @property
    def in_progress(self) -> bool:
        """True from the first start of an interval until it is reset or expires."""
        return self._interval_seconds is not None

    @property
    def _total_seconds(self) -> int:
        return self.full_seconds if self._interval_seconds is None else self._interval_seconds

    @property
    def elapsed_seconds(self) -> int:
        return max(0, self._total_seconds - self.seconds_left)

    def progress(self) -> float:
        total = self._total_seconds
        return (total - self.seconds_left) / total * 100 if total > 0 else 0.0

    def format_time(self) -> str:
        return format_time(self.seconds_left)

    # ----- subscribers -----
    def subscribe(self, listener: Callable[[TimerEvent], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: str, *, elapsed: Optional[int] = None, full: Optional[int] = None) -> None:
        event = TimerEvent(
            kind=kind,
            mode=self.mode,
            seconds_left=self.seconds_left,
            full_seconds=self._total_seconds if full is None else full,
            elapsed_seconds=self.elapsed_seconds if elapsed is None else elapsed,
            cycle_count=self.cycle_count,
            strategy=self.strategy,
            task_id=self.task_id,
            at=self._clock(),
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Timer listener %r failed on %s", listener, kind)

    # ----- ticker -----
    def _release_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    # ----- transitions -----
    def start(self, task_id: Optional[int] = None) -> bool:
        if self.is_running or self.seconds_left <= 0:
            return False
        if task_id is not None:
            self.task_id = task_id
        if self._interval_seconds is None:
            self._interval_seconds = self.full_seconds
        self.is_running = True
        self._ticker = self._ticker_factory(self.tick, self._tick_interval)
        self._ticker.start()
        logger.debug("Timer started in %s with %ss left", self.mode, self.seconds_left)
        self._emit(STARTED)
        return True

    def pause(self) -> bool:
        if not self.is_running:
            return False
        self.is_running = False
        self._release_ticker()
        self._emit(PAUSED)
        return True

    def reset(self) -> None:
        self.is_running = False
        self._release_ticker()
        self._emit(RESET)
        self.task_id = None
        self._interval_seconds = None
        self.seconds_left = self.full_seconds

    def switch_mode(self, new_mode: str) -> None:
        if new_mode not in TIMER_MODES:
            raise ValueError(f"Unsupported timer mode: {new_mode}")
        self.reset()
        self.mode = new_mode
        self.seconds_left = self.full_seconds
        self._emit(MODE_CHANGED)

    def skip_to_next(self) -> None:
        self.reset()
        if self.strategy == CLASSIC:
            return
        self._advance()
        self.seconds_left = self.full_seconds
        self._emit(MODE_CHANGED)

    def tick(self) -> None:
        if not self.is_running:
            return
        self.seconds_left -= 1
        if self.seconds_left > 0:
            self._emit(TICK)
            return

        # The ticker goes first so nothing can fire twice during the transition.
        self._release_ticker()
        self.seconds_left = 0
        self.is_running = False
        full = self._total_seconds
        self._emit(EXPIRED, elapsed=full, full=full)
        self.task_id = None
        self._interval_seconds = None
        previous = self.mode
        if self.strategy != CLASSIC:
            self._advance()
        self.seconds_left = self.full_seconds
        logger.info("%s interval finished, next: %s (cycle %s)", previous, self.mode, self.cycle_count)
        self._emit(MODE_CHANGED)

    def _advance(self) -> None:
        if self.mode == FOCUS:
            self.cycle_count += 1
            if self.cycle_count >= self.cycles_before_long_break:
                self.mode = LONG_BREAK
                self.cycle_count = 0
            else:
                self.mode = SHORT_BREAK
        else:
            self.mode = FOCUS

    # ----- configuration -----
    def apply_settings(self, settings: Optional[UserSettings]) -> None:
        """Use new durations.

        Only an idle countdown is reloaded. An interval that was started and is
        running or paused keeps its length until it is reset or expires.
        """
        self.settings = settings
        if not self.in_progress:
            self.seconds_left = self.full_seconds
        self._emit(CONFIGURED)

    def set_strategy(self, strategy: str, custom_preset: Optional[str] = None) -> None:
        if strategy not in TIMER_STRATEGIES:
            raise ValueError(f"Unsupported timer strategy: {strategy}")
        self.reset()
        self.strategy = strategy
        if custom_preset is not None:
            self.custom_preset = custom_preset
        if strategy == CLASSIC:
            self.mode = FOCUS
        self.seconds_left = self.full_seconds
        self._emit(CONFIGURED)

    def dispose(self) -> None:
        """Stop ticking without closing anything; used when the view goes away."""
        self.is_running = False
        self._release_ticker()
        self._listeners.clear()


__all__ = [
    "FocusTimer",
    "TimerEvent",
    "format_time",
    "STARTED",
    "PAUSED",
    "TICK",
    "RESET",
    "EXPIRED",
    "MODE_CHANGED",
    "CONFIGURED",
]
