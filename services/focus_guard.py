"""Distraction tracking while a focus interval is running.

The guard is fed window events by the UI (visibility, blur, focus) and keeps
its bookkeeping in one immutable :class:`GuardState`; every transition
produces a new state object. An episode starts when attention leaves while
the guard is active and ends when it comes back. Hiding the page during an
episode turns it into a ``tab_switch`` even if it began as a ``window_blur``.

Counters are kept for the lifetime of the guard object, not per session.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from core.logs import get_logger
from core.settings import GUARD, GuardSettings
from datetime_utils import round_half_up
from services.ticker import Ticker, TickerFactory, asyncio_ticker


logger = get_logger("guard")

TAB_SWITCH = "tab_switch"
WINDOW_BLUR = "window_blur"


@dataclass(frozen=True)
class GuardState:
    is_active: bool = False
    is_page_visible: bool = True
    is_window_focused: bool = True
    is_tab_switched: bool = False
    distraction_started_at: Optional[float] = None
    distraction_kind: Optional[str] = None
    total_distractions: int = 0
    total_distraction_seconds: int = 0

    @property
    def is_distracted(self) -> bool:
        return self.distraction_started_at is not None


class FocusGuard:
    def __init__(
        self,
        *,
        on_distraction: Optional[Callable[[str, int], None]] = None,
        on_return: Optional[Callable[[], None]] = None,
        title_sink: Optional[Callable[[str], None]] = None,
        original_title: str = "",
        clock: Callable[[], float] = time.monotonic,
        ticker_factory: TickerFactory = asyncio_ticker,
        settings: GuardSettings = GUARD,
    ):
        self.on_distraction = on_distraction
        self.on_return = on_return
        self._title_sink = title_sink
        self.original_title = original_title
        self._clock = clock
        self._ticker_factory = ticker_factory
        self._settings = settings
        self._blinker: Optional[Ticker] = None
        self._listeners: List[Callable[[GuardState], None]] = []
        self.state = GuardState()
        self.title = original_title

    # ----- subscribers -----
    def subscribe(self, listener: Callable[[GuardState], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, state: GuardState) -> None:
        if state == self.state:
            return
        self.state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Guard listener %r failed", listener)

    # ----- inputs -----
    def set_active(self, active: bool) -> None:
        if active == self.state.is_active:
            return
        if not active and self.state.is_distracted:
            self._end_episode(returned=False)
        self._transition(replace(self.state, is_active=active))
        self._sync_title()

    def on_visibility_change(self, hidden: bool) -> None:
        state = replace(self.state, is_page_visible=not hidden)
        if hidden:
            if state.is_active:
                if state.is_distracted:
                    state = replace(state, distraction_kind=TAB_SWITCH, is_tab_switched=True)
                else:
                    state = self._open_episode(state, TAB_SWITCH)
                    state = replace(state, is_tab_switched=True)
            self._transition(state)
        else:
            self._transition(state)
            if state.is_active and state.is_distracted:
                self._end_episode(returned=True)
        self._sync_title()

    def on_window_blur(self) -> None:
        state = replace(self.state, is_window_focused=False)
        if state.is_active and state.is_page_visible and not state.is_distracted:
            state = self._open_episode(state, WINDOW_BLUR)
        self._transition(state)
        self._sync_title()

    def on_window_focus(self) -> None:
        state = replace(self.state, is_window_focused=True)
        self._transition(state)
        if state.is_active and state.is_distracted and state.is_page_visible:
            self._end_episode(returned=True)
        self._sync_title()

    def before_unload(self) -> Optional[str]:
        """Return the confirmation prompt to show when leaving, if any."""
        return self._settings.leave_prompt if self.state.is_active else None

    # ----- episodes -----
    def _open_episode(self, state: GuardState, kind: str) -> GuardState:
        logger.debug("Distraction started (%s)", kind)
        return replace(
            state,
            distraction_started_at=self._clock(),
            distraction_kind=kind,
            total_distractions=state.total_distractions + 1,
        )

    def _end_episode(self, *, returned: bool) -> None:
        state = self.state
        started = state.distraction_started_at
        if started is None:
            return
        duration = round_half_up(max(0.0, self._clock() - started))
        kind = state.distraction_kind or WINDOW_BLUR
        self._transition(
            replace(
                state,
                distraction_started_at=None,
                distraction_kind=None,
                is_tab_switched=False,
                total_distraction_seconds=state.total_distraction_seconds + duration,
            )
        )
        logger.info("Distraction ended: %s, %ss", kind, duration)
        if self.on_distraction is not None:
            try:
                self.on_distraction(kind, duration)
            except Exception:
                logger.exception("Distraction callback failed")
        if returned and self.on_return is not None:
            try:
                self.on_return()
            except Exception:
                logger.exception("Return callback failed")

    # ----- window title -----
    def _set_title(self, title: str) -> None:
        self.title = title
        if self._title_sink is not None:
            self._title_sink(title)

    def _stop_blinking(self) -> None:
        if self._blinker is not None:
            self._blinker.cancel()
            self._blinker = None

    def _blink(self) -> None:
        focus_title = self._settings.focus_title
        self._set_title(self._settings.alert_title if self.title == focus_title else focus_title)

    def _sync_title(self) -> None:
        state = self.state
        if not state.is_active:
            self._stop_blinking()
            self._set_title(self.original_title)
        elif state.is_distracted:
            if self._blinker is None:
                self._set_title(self._settings.focus_title)
                self._blinker = self._ticker_factory(self._blink, self._settings.blink_interval_sec)
                self._blinker.start()
        else:
            self._stop_blinking()
            self._set_title(self._settings.focus_title)

    def dispose(self) -> None:
        """Release the blink ticker and put the original title back."""
        self._stop_blinking()
        self._set_title(self.original_title)
        self._listeners.clear()


__all__ = ["FocusGuard", "GuardState", "TAB_SWITCH", "WINDOW_BLUR"]
