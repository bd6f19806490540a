from typing import Awaitable, Callable

import flet as ft


def open_alert_dialog(page: ft.Page, *, title: str, content: ft.Control, actions: list[ft.Control]):
    dlg = ft.AlertDialog(
        modal=True,
        title=ft.Text(title),
        content=content,
        actions=actions,
        actions_alignment=ft.MainAxisAlignment.END,
    )
    page.open(dlg)
    return dlg


def close_alert_dialog(page: ft.Page, dlg: ft.AlertDialog | None):
    if dlg is not None:
        page.close(dlg)


def confirm(
    page: ft.Page,
    *,
    title: str,
    message: str,
    confirm_label: str,
    on_confirm: Callable[[], Awaitable[None]],
):
    """Modal yes/no dialog; ``on_confirm`` runs on the page loop after closing."""
    dlg: ft.AlertDialog | None = None

    async def _yes(_):
        close_alert_dialog(page, dlg)
        await on_confirm()

    def _no(_):
        close_alert_dialog(page, dlg)

    dlg = open_alert_dialog(
        page,
        title=title,
        content=ft.Text(message),
        actions=[
            ft.TextButton("Stay", on_click=_no),
            ft.FilledButton(confirm_label, on_click=_yes),
        ],
    )
    return dlg


def toast(page: ft.Page, message: str):
    page.open(ft.SnackBar(ft.Text(message)))
