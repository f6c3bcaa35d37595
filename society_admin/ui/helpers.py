"""
helpers.py - UI helper functions
Single responsibility: small formatting helpers and toast/dialog plumbing used across UI.
"""
from datetime import datetime

import flet as ft

from society_admin.config import (
    COLOR_DANGER,
    COLOR_INFO,
    COLOR_NEUTRAL,
    COLOR_SUCCESS,
    COLOR_TEXT_MUTED,
    PRIORITY_COLORS,
    STATUS_COLORS,
)
from society_admin.utils.time import parse_iso


def format_datetime(iso_str: str | None) -> str:
    """ISO 8601 string to local "YYYY-MM-DD HH:MM"; fallback to raw on error."""
    dt = parse_iso(iso_str)
    if dt is None:
        return iso_str or ""
    return dt.astimezone().strftime("%Y-%m-%d %H:%M")


def format_date(iso_str: str | None) -> str:
    dt = parse_iso(iso_str)
    if dt is None:
        return (iso_str or "").split("T")[0]
    return dt.astimezone().strftime("%Y-%m-%d")


def format_amount(amount: float | int | None) -> str:
    value = float(amount or 0)
    if value.is_integer():
        return f"Rs. {int(value):,}"
    return f"Rs. {value:,.2f}"


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status, COLOR_NEUTRAL)


def priority_color(priority: str) -> str:
    return PRIORITY_COLORS.get(priority, COLOR_NEUTRAL)


def badge(text: str, color: str) -> ft.Container:
    return ft.Container(
        content=ft.Text(text, size=11, color="white", weight=ft.FontWeight.BOLD),
        bgcolor=color,
        border_radius=12,
        padding=ft.Padding.symmetric(horizontal=10, vertical=2),
    )


def empty_state(text: str) -> ft.Container:
    return ft.Container(
        content=ft.Column(
            [
                ft.Icon(ft.Icons.INBOX, size=64, color="#d0d7de"),
                ft.Text(text, color=COLOR_TEXT_MUTED, size=16),
            ],
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
        ),
        alignment=ft.Alignment.CENTER,
        padding=60,
        expand=True,
    )


def loading_state() -> ft.Container:
    return ft.Container(
        content=ft.Column(
            [
                ft.ProgressRing(),
                ft.Text("Loading...", color=COLOR_TEXT_MUTED, size=14),
            ],
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
        ),
        alignment=ft.Alignment.CENTER,
        padding=60,
        expand=True,
    )


_TOAST_COLORS = {"success": COLOR_SUCCESS, "error": COLOR_DANGER, "info": COLOR_INFO}


def show_toast(page: ft.Page, message: str, kind: str = "info") -> None:
    snack = ft.SnackBar(
        ft.Text(message, color="white"),
        bgcolor=_TOAST_COLORS.get(kind, COLOR_INFO),
    )
    page.overlay.append(snack)
    snack.open = True
    page.update()


def open_dialog(page: ft.Page, dialog: ft.AlertDialog) -> None:
    page.overlay.append(dialog)
    dialog.open = True
    page.update()


def close_dialog(page: ft.Page, dialog: ft.AlertDialog) -> None:
    dialog.open = False
    page.update()


def current_year() -> int:
    return datetime.now().year
