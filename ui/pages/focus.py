# focusflow/ui/pages/focus.py
from __future__ import annotations

import asyncio

import flet as ft

from core.settings import TIMER, UI
from models.focus_session import (
    CLASSIC,
    CUSTOM,
    FOCUS,
    LONG_BREAK,
    SHORT_BREAK,
    TIMER_STRATEGIES,
)
from services.focus_guard import GuardState
from services.focus_timer import EXPIRED, TimerEvent
from services.google_calendar import (
    CalendarError,
    format_event_time,
    is_event_active,
    is_event_upcoming,
)
from storage.config import update_config
from ui.dialogs import toast


MODE_LABELS = {
    FOCUS: "Focus",
    SHORT_BREAK: "Short break",
    LONG_BREAK: "Long break",
}

STRATEGY_LABELS = {
    "classic": "Classic",
    "pomodoro": "Pomodoro",
    "custom": "Custom",
}


class FocusPage:
    def __init__(self, app):
        self.app = app
        self.timer = app.timer
        self.recorder = app.recorder

        # ---------- timer ----------
        self.mode_tabs = ft.SegmentedButton(
            selected={FOCUS},
            allow_empty_selection=False,
            on_change=self.on_mode_change,
            segments=[
                ft.Segment(value=mode, label=ft.Text(label))
                for mode, label in MODE_LABELS.items()
            ],
        )
        self.time_text = ft.Text(self.timer.format_time(), size=72, weight=ft.FontWeight.BOLD)
        self.progress = ft.ProgressBar(value=0, width=420)
        self.cycle_text = ft.Text("", color=UI.text_subtle)

        self.start_btn = ft.FilledButton("Start", icon=ft.Icons.PLAY_ARROW, on_click=self.on_start_pause)
        self.reset_btn = ft.OutlinedButton("Reset", icon=ft.Icons.REPLAY, on_click=self.on_reset)
        self.skip_btn = ft.TextButton("Skip", icon=ft.Icons.SKIP_NEXT, on_click=self.on_skip)

        self.strategy_dd = ft.Dropdown(
            label="Timer",
            width=160,
            value=self.timer.strategy,
            options=[ft.dropdown.Option(key, STRATEGY_LABELS[key]) for key in TIMER_STRATEGIES],
            on_change=self.on_strategy_change,
        )
        self.preset_dd = ft.Dropdown(
            label="Preset",
            width=120,
            value=self.timer.custom_preset,
            options=[ft.dropdown.Option(key) for key in TIMER.custom_presets],
            on_change=self.on_strategy_change,
            visible=self.timer.strategy == CUSTOM,
        )
        self.task_dd = ft.Dropdown(label="Working on", width=320, options=[])
        self.notes_tf = ft.TextField(
            label="Session notes",
            multiline=True,
            min_lines=2,
            max_lines=4,
            on_change=lambda e: self.recorder.set_notes(e.control.value),
        )

        timer_card = ft.Card(
            content=ft.Container(
                padding=24,
                content=ft.Column(
                    [
                        self.mode_tabs,
                        self.time_text,
                        self.progress,
                        self.cycle_text,
                        ft.Row([self.start_btn, self.reset_btn, self.skip_btn], spacing=12),
                        ft.Row([self.strategy_dd, self.preset_dd, self.task_dd], spacing=12, wrap=True),
                        self.notes_tf,
                    ],
                    spacing=16,
                    horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                ),
            )
        )

        # ---------- distractions ----------
        self.guard_status = ft.Text("Guard idle", color=UI.text_subtle)
        self.distraction_count = ft.Text("0", size=24, weight=ft.FontWeight.BOLD)
        self.distraction_time = ft.Text("0s", size=24, weight=ft.FontWeight.BOLD)
        guard_card = ft.Card(
            content=ft.Container(
                padding=16,
                content=ft.Column(
                    [
                        ft.Text("Distractions", size=18, weight=ft.FontWeight.W_600),
                        self.guard_status,
                        ft.Row(
                            [
                                ft.Column([ft.Text("Count", color=UI.text_subtle), self.distraction_count]),
                                ft.Column([ft.Text("Time away", color=UI.text_subtle), self.distraction_time]),
                            ],
                            spacing=32,
                        ),
                    ],
                    spacing=10,
                ),
            )
        )

        # ---------- calendar ----------
        self.events_list = ft.Column(spacing=8)
        self.calendar_btn = ft.TextButton(
            "Connect Google Calendar", icon=ft.Icons.LINK, on_click=self.on_connect_calendar
        )
        calendar_card = ft.Card(
            content=ft.Container(
                padding=16,
                content=ft.Column(
                    [
                        ft.Text("Today", size=18, weight=ft.FontWeight.W_600),
                        self.events_list,
                        self.calendar_btn,
                    ],
                    spacing=10,
                ),
            )
        )

        self.view = ft.Container(
            content=ft.Row(
                [
                    ft.Container(timer_card, expand=2),
                    ft.Column([guard_card, calendar_card], expand=1, spacing=16),
                ],
                spacing=16,
                vertical_alignment=ft.CrossAxisAlignment.START,
            ),
            expand=True,
            padding=20,
        )

        self.timer.subscribe(self.on_timer_event)
        self.recorder.subscribe_notes(self.on_notes_cleared)
        self.app.guard.subscribe(self.on_guard_state)
        self.app.tasks.subscribe(lambda tasks: self.refresh_task_options(tasks))
        self.refresh_timer()

    # --- called from the menu ---
    def activate_from_menu(self):
        self.refresh_task_options(self.app.tasks.tasks)
        self.app.page.run_task(self.load_events)

    # ---------- timer ----------
    def on_timer_event(self, event: TimerEvent):
        if event.kind == EXPIRED:
            finished = MODE_LABELS.get(event.mode, event.mode)
            toast(self.app.page, f"{finished} finished")
        self.refresh_timer()

    def on_notes_cleared(self, text: str):
        self.notes_tf.value = text
        self.app.page.update()

    def refresh_timer(self):
        timer = self.timer
        self.time_text.value = timer.format_time()
        self.progress.value = timer.progress() / 100
        self.mode_tabs.selected = {timer.mode}
        self.mode_tabs.disabled = timer.strategy == CLASSIC
        self.start_btn.text = "Pause" if timer.is_running else "Start"
        self.start_btn.icon = ft.Icons.PAUSE if timer.is_running else ft.Icons.PLAY_ARROW
        self.cycle_text.value = (
            f"Cycle {timer.cycle_count + 1} of {timer.cycles_before_long_break}"
            if timer.strategy != CLASSIC
            else "Single focus block"
        )
        self.strategy_dd.value = timer.strategy
        self.preset_dd.visible = timer.strategy == CUSTOM
        self.app.page.update()

    async def on_start_pause(self, _):
        if self.timer.is_running:
            self.timer.pause()
            return
        task_id = int(self.task_dd.value) if self.task_dd.value else None
        if self.timer.start(task_id):
            self.app.config = update_config(last_task_id=task_id)

    async def on_reset(self, _):
        self.timer.reset()
        self.refresh_timer()

    async def on_skip(self, _):
        self.timer.skip_to_next()
        self.refresh_timer()

    async def on_mode_change(self, e: ft.ControlEvent):
        selected = next(iter(e.control.selected or []), None)
        if selected and selected != self.timer.mode:
            self.timer.switch_mode(selected)

    async def on_strategy_change(self, _):
        strategy = self.strategy_dd.value or TIMER.default_strategy
        preset = self.preset_dd.value or TIMER.default_custom_preset
        self.timer.set_strategy(strategy, preset)
        self.app.config = update_config(timer_strategy=strategy, custom_preset=preset)

    def refresh_task_options(self, tasks):
        current = self.task_dd.value
        open_tasks = [t for t in tasks if not t.done]
        self.task_dd.options = [ft.dropdown.Option(str(t.id), t.title) for t in open_tasks]
        known = {str(t.id) for t in open_tasks}
        if current not in known:
            last = self.app.config.last_task_id
            self.task_dd.value = str(last) if last is not None and str(last) in known else None
        self.app.page.update()

    # ---------- guard ----------
    def on_guard_state(self, state: GuardState):
        if not state.is_active:
            self.guard_status.value = "Guard idle"
        elif state.is_distracted:
            self.guard_status.value = "Away from focus"
        else:
            self.guard_status.value = "Guarding your focus"
        self.distraction_count.value = str(state.total_distractions)
        self.distraction_time.value = f"{state.total_distraction_seconds}s"
        self.app.page.update()

    # ---------- calendar ----------
    async def load_events(self):
        gcal = self.app.gcal
        self.events_list.controls.clear()
        try:
            events = await asyncio.to_thread(gcal.todays_events)
        except CalendarError as exc:
            self.events_list.controls.append(ft.Text(str(exc), color=ft.Colors.RED_400))
            self.app.page.update()
            return
        self.calendar_btn.visible = not gcal.connected and self.app.auth.has_client_secret
        if not events:
            self.events_list.controls.append(ft.Text("No events today", color=UI.text_subtle))
        for ev in events:
            badge = None
            if is_event_active(ev.start_time, ev.end_time):
                badge = ft.Text("Now", size=12, color=ft.Colors.GREEN_600)
            elif is_event_upcoming(ev.start_time):
                badge = ft.Text("Soon", size=12, color=ft.Colors.AMBER_700)
            self.events_list.controls.append(
                ft.Row(
                    [
                        ft.Text(
                            format_event_time(ev.start_time, ev.end_time, ev.is_all_day),
                            width=150,
                            color=UI.text_subtle,
                            size=12,
                        ),
                        ft.Text(ev.title, expand=True, max_lines=1, overflow=ft.TextOverflow.ELLIPSIS),
                    ]
                    + ([badge] if badge else []),
                    spacing=8,
                )
            )
        self.app.page.update()

    async def on_connect_calendar(self, _):
        try:
            await asyncio.to_thread(self.app.gcal.connect)
        except (FileNotFoundError, RuntimeError) as exc:
            toast(self.app.page, f"Calendar: {exc}")
            return
        await self.load_events()
