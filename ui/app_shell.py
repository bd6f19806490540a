# ui/app_shell.py
from __future__ import annotations

import flet as ft

from core.logs import get_logger
from core.settings import CALENDAR, GUARD, UI
from models.focus_session import FOCUS
from services.api_client import FocusFlowApi
from services.focus_guard import FocusGuard
from services.focus_timer import FocusTimer, TimerEvent
from services.google_auth import GoogleAuth
from services.google_calendar import GoogleCalendar
from services.session_recorder import SessionRecorder
from services.settings_service import SettingsService
from services.task_state import TaskStateManager
from services.tasks import TaskService
from storage.config import load_config
from storage.task_cache import LocalTaskCache
from ui.dialogs import confirm, toast

from .pages.focus import FocusPage
from .pages.tasks import TasksPage


logger = get_logger("ui")


class AppShell:
    def __init__(self, page: ft.Page):
        self.page = page

        self.page.title = UI.app_title
        self.page.horizontal_alignment = ft.CrossAxisAlignment.STRETCH
        self.page.vertical_alignment = ft.MainAxisAlignment.START
        self._last_away = 0

        # --- services (before the pages) ---
        self.config = load_config()
        self.api = FocusFlowApi(self.config.api_base_url)
        self.state = TaskStateManager(LocalTaskCache())
        self.tasks = TaskService(self.api, self.state)
        self.settings = SettingsService(self.api)
        self.timer = FocusTimer(
            strategy=self.config.timer_strategy,
            custom_preset=self.config.custom_preset,
        )
        self.recorder = SessionRecorder(self.api, self.timer)
        self.guard = FocusGuard(
            on_distraction=self._on_distraction,
            on_return=self._on_return,
            title_sink=self._set_title,
            original_title=UI.app_title,
        )
        self.auth = GoogleAuth(scopes=CALENDAR.scopes)
        self.gcal = GoogleCalendar(self.auth, calendar_id=CALENDAR.calendar_id)

        self.timer.subscribe(self._sync_guard)
        self.settings.subscribe(self.timer.apply_settings)

        # --- pages ---
        self._focus = FocusPage(self)
        self._tasks = TasksPage(self)

        self.content = ft.Container(expand=True)

        self.nav = ft.NavigationRail(
            selected_index=0,
            label_type=ft.NavigationRailLabelType.ALL,
            min_width=90,
            group_alignment=-0.9,
            on_change=self.on_nav_change,
            destinations=[
                ft.NavigationRailDestination(
                    icon=ft.Icons.TIMER_OUTLINED,
                    selected_icon=ft.Icons.TIMER,
                    label="Focus",
                ),
                ft.NavigationRailDestination(
                    icon=ft.Icons.CHECK_CIRCLE_OUTLINE,
                    selected_icon=ft.Icons.CHECK_CIRCLE,
                    label="Tasks",
                ),
            ],
        )

        self.root = ft.Row(
            controls=[
                ft.Container(self.nav, width=UI.nav_width, bgcolor=UI.surface_bg),
                ft.VerticalDivider(width=1),
                self.content,
            ],
            expand=True,
            spacing=0,
        )

    # ---------- guard wiring ----------
    def _sync_guard(self, _event: TimerEvent):
        self.guard.set_active(self.timer.is_running and self.timer.mode == FOCUS)

    def _set_title(self, title: str):
        self.page.title = title
        self.page.update()

    def _on_distraction(self, kind: str, seconds: int):
        self._last_away = seconds
        self.recorder.report_distraction(kind, seconds)

    def _on_return(self):
        if self._last_away >= GUARD.welcome_back_after_sec:
            toast(self.page, "Welcome back! Let's get back to it.")

    async def on_lifecycle_change(self, e: ft.AppLifecycleStateChangeEvent):
        if e.state == ft.AppLifecycleState.HIDE:
            self.guard.on_visibility_change(True)
        elif e.state == ft.AppLifecycleState.SHOW:
            self.guard.on_visibility_change(False)

    async def on_window_event(self, e: ft.WindowEvent):
        if e.type == ft.WindowEventType.BLUR:
            self.guard.on_window_blur()
        elif e.type == ft.WindowEventType.FOCUS:
            self.guard.on_window_focus()
        elif e.type == ft.WindowEventType.MINIMIZE:
            self.guard.on_visibility_change(True)
        elif e.type == ft.WindowEventType.RESTORE:
            self.guard.on_visibility_change(False)
        elif e.type == ft.WindowEventType.CLOSE:
            await self.request_close()

    async def request_close(self):
        prompt = self.guard.before_unload()
        if prompt is None:
            await self.shutdown()
            return
        confirm(
            self.page,
            title="Leave focus mode?",
            message=prompt,
            confirm_label="Leave",
            on_confirm=self.shutdown,
        )

    async def shutdown(self):
        # Closing the window ends the interval, so the open session is closed too.
        if self.timer.is_running or self.recorder.recording:
            self.timer.reset()
        await self.recorder.drain()
        await self.recorder.stop()
        self.guard.dispose()
        self.timer.dispose()
        self.api.close()
        logger.info("Shutting down")
        self.page.window.prevent_close = False
        self.page.window.destroy()

    # ---------- mount ----------
    async def mount(self):
        self.page.controls.clear()
        self.page.add(self.root)

        self.page.window.prevent_close = True
        self.page.window.on_event = self.on_window_event
        self.page.on_app_lifecycle_state_change = self.on_lifecycle_change

        self.recorder.start()

        self.content.content = self._focus.view
        self.page.update()

        await self.settings.fetch()
        await self.tasks.fetch_tasks()
        self._focus.activate_from_menu()

    # ---------- navigation ----------
    async def on_nav_change(self, e: ft.ControlEvent):
        idx = int(e.control.selected_index)
        if idx == 0:
            self.content.content = self._focus.view
            self._focus.activate_from_menu()
        else:
            self.content.content = self._tasks.view
            self._tasks.activate_from_menu()
        self.page.update()
