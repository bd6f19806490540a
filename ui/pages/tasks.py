# focusflow/ui/pages/tasks.py
from __future__ import annotations

import flet as ft

from core.priorities import normalize_priority, priority_color, priority_label, priority_options
from core.settings import UI
from services.api_client import ApiError
from ui.dialogs import confirm, toast


class TasksPage:
    def __init__(self, app):
        self.app = app
        self.svc = app.tasks

        # ---------- quick add ----------
        self.title_tf = ft.TextField(
            label="Task title",
            hint_text="e.g. Draft the quarterly report",
            expand=True,
            prefix=ft.Icon(ft.Icons.TASK_ALT),
            on_submit=self.on_add,
        )
        self.estimate_tf = ft.TextField(
            label="Estimate, min",
            width=140,
            prefix=ft.Icon(ft.Icons.TIMER),
        )
        self.project_tf = ft.TextField(label="Project", width=180)
        self.priority_dd = ft.Dropdown(
            label="Priority",
            width=180,
            value="0",
            options=[ft.dropdown.Option(key, label) for key, label in priority_options().items()],
        )
        self.add_btn = ft.FilledButton("Add", icon=ft.Icons.ADD, on_click=self.on_add)

        quick_add = ft.Card(
            content=ft.Container(
                content=ft.Column(
                    [
                        ft.Text("Quick add", size=18, weight=ft.FontWeight.W_600),
                        ft.Row(
                            [self.title_tf, self.estimate_tf, self.project_tf, self.priority_dd, self.add_btn],
                            vertical_alignment=ft.CrossAxisAlignment.END,
                        ),
                    ],
                    spacing=12,
                ),
                padding=16,
            )
        )

        self.status_text = ft.Text("", color=UI.text_subtle)
        self.refresh_btn = ft.IconButton(icon=ft.Icons.REFRESH, tooltip="Refresh", on_click=self.on_refresh)
        self.open_list = ft.ListView(expand=True, spacing=12)
        self.done_list = ft.ListView(expand=True, spacing=8)

        lists = ft.Row(
            [
                self._section("Open", self.open_list),
                self._section("Completed", self.done_list),
            ],
            spacing=16,
            expand=True,
            vertical_alignment=ft.CrossAxisAlignment.START,
        )

        self.view = ft.Container(
            content=ft.Column(
                [
                    ft.Row(
                        [ft.Text("Tasks", size=24, weight=ft.FontWeight.BOLD), self.refresh_btn, self.status_text],
                        vertical_alignment=ft.CrossAxisAlignment.CENTER,
                    ),
                    quick_add,
                    lists,
                ],
                spacing=14,
                expand=True,
            ),
            expand=True,
            padding=20,
        )

        self.svc.subscribe(self.render)

    @staticmethod
    def _section(title: str, body: ft.Control) -> ft.Control:
        return ft.Container(
            expand=True,
            content=ft.Card(
                content=ft.Container(
                    padding=12,
                    content=ft.Column(
                        [ft.Text(title, size=18, weight=ft.FontWeight.W_600), ft.Container(body, height=420)],
                        spacing=10,
                    ),
                )
            ),
        )

    # --- called from the menu ---
    def activate_from_menu(self):
        self.render(self.svc.tasks)
        self.app.page.run_task(self.load)

    async def load(self):
        self.status_text.value = "Syncing..."
        self.app.page.update()
        await self.svc.fetch_tasks()
        self.status_text.value = f"Offline: {self.svc.error}" if self.svc.error else ""
        self.app.page.update()

    # ---------- actions ----------
    async def on_refresh(self, _):
        await self.load()

    async def on_add(self, _):
        title = (self.title_tf.value or "").strip()
        if not title:
            return toast(self.app.page, "Enter a task title")
        estimate = None
        if self.estimate_tf.value:
            try:
                estimate = int(self.estimate_tf.value)
            except ValueError:
                return toast(self.app.page, "Estimate must be a number of minutes")
        try:
            await self.svc.create_task(
                title,
                priority=normalize_priority(self.priority_dd.value),
                estimated_minutes=estimate,
                project=self.project_tf.value,
            )
        except ApiError as exc:
            return toast(self.app.page, str(exc))
        self.title_tf.value = ""
        self.estimate_tf.value = ""
        toast(self.app.page, "Task added")

    async def on_toggle_done(self, task_id: int):
        if not await self.svc.toggle_task_done(task_id):
            toast(self.app.page, self.svc.error or "Task not found")

    def on_delete_click(self, task_id: int, title: str):
        async def _delete():
            try:
                await self.svc.delete_task(task_id)
            except ApiError as exc:
                return toast(self.app.page, str(exc))
            toast(self.app.page, "Task deleted")

        confirm(
            self.app.page,
            title="Delete task?",
            message=f"\"{title}\" will be removed.",
            confirm_label="Delete",
            on_confirm=_delete,
        )

    # ---------- rendering ----------
    def render(self, tasks):
        self.open_list.controls.clear()
        self.done_list.controls.clear()
        for t in tasks:
            target = self.done_list if t.done else self.open_list
            target.controls.append(self._row_for_task(t))
        self.app.page.update()

    def _row_for_task(self, t):
        async def _toggle(e, tid=t.id):
            await self.on_toggle_done(tid)

        checkbox = ft.Checkbox(value=t.done, on_change=_toggle)

        meta_items = [
            ft.Container(
                content=ft.Text(
                    priority_label(t.priority, short=True),
                    size=12,
                    weight=ft.FontWeight.W_500,
                    color=ft.Colors.WHITE,
                ),
                bgcolor=priority_color(t.priority),
                padding=ft.padding.symmetric(horizontal=10, vertical=4),
                border_radius=999,
            )
        ]
        if t.estimated_minutes:
            meta_items.append(ft.Text(f"{t.estimated_minutes} min", size=12, color=ft.Colors.BLUE_GREY_400))
        if t.project:
            meta_items.append(ft.Text(t.project, size=12, color=ft.Colors.BLUE_GREY_400))
        for tag in t.tag_list():
            meta_items.append(ft.Text(f"#{tag}", size=12, color=ft.Colors.BLUE_GREY_400))

        info_column = ft.Column(
            controls=[
                ft.Text(
                    t.title,
                    weight=ft.FontWeight.W_600,
                    size=15,
                    max_lines=2,
                    overflow=ft.TextOverflow.ELLIPSIS,
                    style=ft.TextStyle(decoration=ft.TextDecoration.LINE_THROUGH if t.done else None),
                ),
                ft.Row(meta_items, spacing=12, wrap=True),
            ],
            spacing=6,
            expand=True,
        )

        delete_btn = ft.IconButton(
            icon=ft.Icons.DELETE_OUTLINE,
            tooltip="Delete",
            on_click=lambda e, tid=t.id, title=t.title: self.on_delete_click(tid, title),
        )

        return ft.Container(
            content=ft.Row(
                controls=[checkbox, info_column, delete_btn],
                vertical_alignment=ft.CrossAxisAlignment.CENTER,
            ),
            padding=ft.padding.symmetric(horizontal=16, vertical=12),
            border_radius=12,
            bgcolor=ft.Colors.SURFACE,
            border=ft.border.all(1, ft.Colors.with_opacity(0.08, ft.Colors.ON_SURFACE)),
        )
