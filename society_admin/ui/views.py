"""
views.py - UI view builders (resource lists, dashboard, login)
Single responsibility: build flet Views using provided callbacks/state.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable

import flet as ft

from society_admin.api.client import ApiClient
from society_admin.api.errors import ApiError, AuthenticationError, ValidationError
from society_admin.config import (
    APP_TITLE,
    BORDER_RADIUS_BTN,
    BORDER_RADIUS_CARD,
    COLOR_APPBAR_BG,
    COLOR_APPBAR_FG,
    COLOR_BG,
    COLOR_CARD,
    COLOR_DANGER,
    COLOR_INFO,
    COLOR_PRIMARY,
    COLOR_SUCCESS,
    COLOR_TEXT_MAIN,
    COLOR_TEXT_MUTED,
    COLOR_WARNING,
    SHADOW_ELEVATION,
)
from society_admin.domain.statuses import ALL
from society_admin.services import auth_service
from society_admin.services import resource_service as api
from society_admin.services.credentials import CredentialProvider
from society_admin.services.fetch_controller import ListController
from society_admin.services.filter_service import FilterStore
from society_admin.services.mutation_service import MutationDispatcher
from society_admin.services.registry import ActionSpec, ResourceSpec
from society_admin.services.stats_service import dashboard_stats
from society_admin.ui import actions
from society_admin.ui.components.record_card import RecordCard
from society_admin.ui.components.sidebar import Sidebar
from society_admin.ui.helpers import (
    current_year,
    empty_state,
    format_amount,
    loading_state,
    show_toast,
)
from society_admin.utils.time import now_utc

logger = logging.getLogger(__name__)

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]  # fmt: skip

# Detail endpoints that return more than the list rows
DETAIL_LOADERS = {
    "residents": api.get_resident,
    "complaints": api.get_complaint,
    "payments": api.get_payment,
    "digital_cards": api.get_digital_card,
    "guest_requests": api.get_guest_request,
    "deals": api.get_deal,
    "deal_categories": api.get_deal_category,
}


def build_appbar(title: str, admin_name: str = "") -> ft.AppBar:
    return ft.AppBar(
        title=ft.Text(
            title,
            color=COLOR_APPBAR_FG,
            weight=ft.FontWeight.BOLD,
            size=20,
        ),
        bgcolor=COLOR_APPBAR_BG,
        center_title=False,
        elevation=SHADOW_ELEVATION,
        shadow_color=ft.Colors.BLACK12,
        automatically_imply_leading=False,
        actions=[
            ft.Container(
                content=ft.Text(
                    f"👤  {admin_name}" if admin_name else "",
                    color=COLOR_TEXT_MUTED,
                    size=14,
                    weight=ft.FontWeight.W_500,
                ),
                padding=ft.Padding.only(right=24),
                alignment=ft.Alignment.CENTER_LEFT,
            ),
        ],
    )


def build_shell(route: str, sidebar: ft.Control, body: list[ft.Control], admin_name: str = "") -> ft.View:
    """Sidebar on the left, page body on the right."""
    return ft.View(
        route=route,
        appbar=build_appbar(APP_TITLE, admin_name),
        bgcolor=COLOR_BG,
        padding=0,
        controls=[
            ft.Row(
                controls=[
                    sidebar,
                    ft.Container(
                        content=ft.Column(controls=body, expand=True, spacing=0),
                        padding=ft.Padding.symmetric(horizontal=24, vertical=16),
                        expand=True,
                    ),
                ],
                expand=True,
                spacing=0,
                vertical_alignment=ft.CrossAxisAlignment.STRETCH,
            )
        ],
    )


def _page_header(title: str, subtitle: str, buttons: list[ft.Control]) -> ft.Control:
    return ft.ResponsiveRow(
        controls=[
            ft.Container(
                content=ft.Column(
                    [
                        ft.Text(title, size=22, weight=ft.FontWeight.BOLD, color=COLOR_TEXT_MAIN),
                        ft.Text(subtitle, size=13, color=COLOR_TEXT_MUTED),
                    ],
                    spacing=2,
                ),
                col={"xs": 12, "md": 7},
            ),
            ft.Container(
                content=ft.Row(controls=buttons, spacing=8, wrap=True, alignment=ft.MainAxisAlignment.END),
                col={"xs": 12, "md": 5},
                alignment=ft.alignment.Alignment(1, 0),
            ),
        ],
        spacing=12,
        vertical_alignment=ft.CrossAxisAlignment.CENTER,
    )


def _stat_summary(data) -> str:
    """{"totalDeals": 12, "activeDeals": 9} -> "Total deals: 12  |  Active deals: 9"."""
    if not isinstance(data, dict):
        return ""
    parts = []
    for key, value in data.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        label = re.sub(r"(?<!^)(?=[A-Z])", " ", key).capitalize()
        parts.append(f"{label}: {value:g}")
    return "  |  ".join(parts)


def _filter_field(**kwargs) -> dict:
    return dict(
        border_radius=BORDER_RADIUS_BTN,
        border_color="transparent",
        bgcolor=COLOR_CARD,
        content_padding=ft.Padding.symmetric(horizontal=12, vertical=12),
        text_size=14,
        **kwargs,
    )


# ==========================================================================
# Resource list
# ==========================================================================


@dataclass
class ListPage:
    view: ft.View
    store: FilterStore
    controller: ListController
    sync_route: Callable[[str], None]

    def close(self) -> None:
        self.controller.close()


def follow_tab_route(page: ft.Page, sidebar: Sidebar) -> Callable[[str], None]:
    """Route callback for tab clicks: moves the page route and the sidebar highlight together."""

    def follow(new_route: str):
        page.route = new_route
        sidebar.set_route(new_route)
        page.update()

    return follow


def build_resource_list_view(
    page: ft.Page,
    resource: ResourceSpec,
    route: str,
    client: ApiClient,
    dispatcher: MutationDispatcher,
    sidebar: Sidebar,
    admin_name: str = "",
) -> ListPage:
    """
    One page per resource: header, tabs, search and extra filters, then the card list.

    Every filter change goes through the FilterStore and the ListController so
    that only the newest filter state ends up on screen. The tab is mirrored to
    the route so navigation and reloads keep it.
    """
    store = FilterStore(resource, route, on_route_change=follow_tab_route(page, sidebar))
    list_column = ft.Column(controls=[loading_state()], scroll=ft.ScrollMode.AUTO, expand=True, spacing=0)
    count_text = ft.Text("", size=12, color=COLOR_TEXT_MUTED)
    tabs_row = ft.Row(spacing=0, alignment=ft.MainAxisAlignment.START, wrap=True)

    def render(ctrl: ListController):
        if ctrl.loading and not ctrl.records:
            list_column.controls = [loading_state()]
        elif not ctrl.records:
            list_column.controls = [empty_state(resource.empty_text)]
        else:
            now = now_utc()
            list_column.controls = [RecordCard(r, resource, handle_action, now=now) for r in ctrl.records]
        count_text.value = "Loading..." if ctrl.loading else f"{len(ctrl.records)} records"
        page.update()

    controller = ListController(
        resource,
        client,
        store,
        notify=lambda message, kind: show_toast(page, message, kind),
        on_change=render,
    )

    # --- actions -----------------------------------------------------------

    async def load_fresh(record):
        """Re-read one record before showing or editing it; None when that failed."""
        loader = DETAIL_LOADERS.get(resource.key)
        if loader is None:
            return record
        try:
            return await loader(client, record.id)
        except AuthenticationError:
            return None
        except ApiError as e:
            logger.warning(f"Failed to load details: {e.message}")
            show_toast(page, "Failed to load details", "error")
            return None

    async def open_dialog_action(action: ActionSpec, record):
        key = action.key
        if key == "print":
            actions.show_card_summary(page, record)
            return
        record = await load_fresh(record)
        if record is None:
            return
        if key == "view":
            actions.show_record_detail(page, record, title=resource.title)
        elif key == "update_status":
            actions.show_complaint_status_dialog(page, client, dispatcher, record, controller.refresh)
        elif key == "edit" and resource.key == "deals":
            await actions.show_deal_dialog(page, client, dispatcher, controller.refresh, record)
        elif key == "edit" and resource.key == "deal_categories":
            actions.show_category_dialog(page, client, dispatcher, controller.refresh, record)
        elif key == "coupons":
            await actions.show_coupons_dialog(page, client, dispatcher, record, controller.refresh)
        else:
            logger.warning(f"No dialog for {resource.key}.{key}")

    async def handle_action(action: ActionSpec, record):
        try:
            if action.run is None:
                await open_dialog_action(action, record)
                return
            reason = None
            if action.requires_reason:
                reason = await actions.ask_reason(page, action)
                if reason is None:
                    return
            await dispatcher.run(action, client, record, reason=reason, refresh=controller.refresh)
        except AuthenticationError:
            logger.info(f"{resource.key}.{action.key} stopped: session expired")

    # --- filters -------------------------------------------------------------

    def on_tab_click(tab_key: str):
        async def handler(_e):
            if store.set_tab(tab_key):
                render_tabs()
                controller.notify_filter_changed()

        return handler

    def build_tab_btn(label: str, tab_key: str):
        selected = store.state.active_tab == tab_key
        color = COLOR_PRIMARY if selected else COLOR_TEXT_MUTED
        return ft.Container(
            content=ft.Text(
                label,
                color=color,
                weight=ft.FontWeight.BOLD if selected else ft.FontWeight.NORMAL,
            ),
            padding=ft.Padding.symmetric(vertical=12, horizontal=20),
            border=ft.border.only(
                bottom=ft.BorderSide(2, COLOR_PRIMARY if selected else "transparent")
            ),
            on_click=on_tab_click(tab_key),
            ink=True,
            animate=ft.Animation(200, "easeOut"),
            border_radius=ft.border_radius.only(top_left=6, top_right=6),
        )

    def render_tabs():
        tabs_row.controls = [build_tab_btn(label, value) for value, label in resource.tabs]
        page.update()

    async def on_search(e):
        if not store.set_search(e.control.value or ""):
            return
        if resource.search == "client":
            controller.reapply()
        else:
            controller.notify_filter_changed()

    def on_extra(name: str):
        async def handler(e):
            if not store.set_extra(name, e.control.value):
                return
            if name == "sort":
                controller.reapply()
            else:
                controller.notify_filter_changed()

        return handler

    def sync_route(new_route: str):
        """Back/forward or sidebar navigation within the same page."""
        if store.sync_from_route(new_route):
            render_tabs()
            controller.notify_filter_changed()

    filter_controls: list[ft.Control] = []
    if resource.search:
        filter_controls.append(
            ft.TextField(
                prefix_icon=ft.Icons.SEARCH,
                hint_text=resource.search_hint,
                value=store.state.search_text,
                on_change=on_search,
                **_filter_field(),
            )
        )
    if "month" in resource.extras:
        filter_controls.append(
            ft.Dropdown(
                label="Month",
                options=[ft.dropdown.Option(key=ALL, text="All months")]
                + [ft.dropdown.Option(key=str(i), text=m) for i, m in enumerate(MONTHS, start=1)],
                value=ALL,
                on_select=on_extra("month"),
                **_filter_field(),
            )
        )
    if "year" in resource.extras:
        this_year = current_year()
        filter_controls.append(
            ft.Dropdown(
                label="Year",
                options=[ft.dropdown.Option(key=ALL, text="All years")]
                + [ft.dropdown.Option(key=str(y), text=str(y)) for y in range(this_year, this_year - 5, -1)],
                value=ALL,
                on_select=on_extra("year"),
                **_filter_field(),
            )
        )
    if resource.sort_options:
        filter_controls.append(
            ft.Dropdown(
                label="Sort",
                options=[ft.dropdown.Option(key=o.value, text=o.label) for o in resource.sort_options],
                value=store.state.extra.get("sort"),
                on_select=on_extra("sort"),
                **_filter_field(),
            )
        )
    category_dropdown = None
    if "category" in resource.extras:
        category_dropdown = ft.Dropdown(
            label="Category",
            options=[ft.dropdown.Option(key=ALL, text="All categories")],
            value=ALL,
            on_select=on_extra("category"),
            **_filter_field(),
        )
        filter_controls.append(category_dropdown)

    async def load_categories():
        try:
            categories = await api.list_deal_categories(client)
        except ApiError as e:
            logger.warning(f"Failed to load categories: {e.message}")
            return
        category_dropdown.options = [ft.dropdown.Option(key=ALL, text="All categories")] + [
            ft.dropdown.Option(key=c.id, text=c.name) for c in categories
        ]
        page.update()

    stats_text = ft.Text("", size=12, color=COLOR_TEXT_MUTED)

    async def load_deal_stats():
        try:
            data = await api.deal_stats(client)
        except ApiError as e:
            logger.warning(f"Failed to load deal stats: {e.message}")
            return
        stats_text.value = _stat_summary(data)
        page.update()

    # --- header buttons --------------------------------------------------------

    async def on_refresh(_e):
        await controller.refresh()

    async def on_new(_e):
        if resource.key == "announcements":
            actions.show_announcement_dialog(page, client, dispatcher, controller.refresh)
        elif resource.key == "deals":
            await actions.show_deal_dialog(page, client, dispatcher, controller.refresh)
        elif resource.key == "deal_categories":
            actions.show_category_dialog(page, client, dispatcher, controller.refresh)

    new_labels = {
        "announcements": "New Announcement",
        "deals": "New Deal",
        "deal_categories": "New Category",
    }
    buttons: list[ft.Control] = []
    if resource.key in new_labels:
        buttons.append(
            ft.FilledButton(
                new_labels[resource.key],
                icon=ft.Icons.ADD,
                style=ft.ButtonStyle(
                    bgcolor=COLOR_PRIMARY,
                    color="white",
                    shape=ft.RoundedRectangleBorder(radius=BORDER_RADIUS_BTN),
                ),
                on_click=on_new,
            )
        )
    buttons.append(ft.OutlinedButton("Refresh", icon=ft.Icons.REFRESH, on_click=on_refresh))

    tabs_row.controls = [build_tab_btn(label, value) for value, label in resource.tabs]

    body: list[ft.Control] = [
        _page_header(resource.title, resource.subtitle, buttons),
        ft.Container(height=12),
    ]
    if resource.key == "deals":
        body += [stats_text, ft.Container(height=8)]
    if len(resource.tabs) > 1:
        body.append(tabs_row)
        body.append(ft.Container(height=12))
    if filter_controls:
        width = 12 // len(filter_controls) if len(filter_controls) <= 4 else 3
        body.append(
            ft.ResponsiveRow(
                controls=[ft.Container(content=c, col={"xs": 12, "md": max(width, 3)}) for c in filter_controls],
                spacing=12,
                run_spacing=12,
            )
        )
        body.append(ft.Container(height=12))
    body += [count_text, ft.Container(height=8), list_column]

    view = build_shell(route, sidebar, body, admin_name)

    # initial load
    page.run_task(controller.refresh)
    if category_dropdown is not None:
        page.run_task(load_categories)
    if resource.key == "deals":
        page.run_task(load_deal_stats)

    return ListPage(view=view, store=store, controller=controller, sync_route=sync_route)


# ==========================================================================
# Dashboard
# ==========================================================================


def _stat_card(label: str, value: str, icon, color: str) -> ft.Container:
    return ft.Container(
        content=ft.Column(
            [
                ft.Container(
                    content=ft.Icon(icon, color="white", size=26),
                    bgcolor=color,
                    width=52,
                    height=52,
                    border_radius=26,
                    alignment=ft.Alignment.CENTER,
                ),
                ft.Text(label, size=13, color=COLOR_TEXT_MUTED, weight=ft.FontWeight.W_500),
                ft.Text(value, size=28, weight=ft.FontWeight.BOLD, color=COLOR_TEXT_MAIN),
            ],
            spacing=8,
        ),
        padding=ft.Padding.all(20),
        bgcolor=COLOR_CARD,
        border_radius=BORDER_RADIUS_CARD,
        shadow=ft.BoxShadow(blur_radius=2, color=ft.Colors.BLACK12, offset=ft.Offset(0, 1)),
        col={"xs": 12, "md": 6, "lg": 3},
    )


def _breakdown(title: str, rows: list[tuple[str, str, str]]) -> ft.Container:
    return ft.Container(
        content=ft.Column(
            [
                ft.Text(title, size=16, weight=ft.FontWeight.W_600, color=COLOR_TEXT_MAIN),
                ft.Divider(),
                *[
                    ft.Row(
                        [
                            ft.Text(label, color=COLOR_TEXT_MUTED, expand=True),
                            ft.Text(value, weight=ft.FontWeight.BOLD, color=color),
                        ]
                    )
                    for label, value, color in rows
                ],
            ],
            spacing=8,
        ),
        padding=ft.Padding.all(20),
        bgcolor=COLOR_CARD,
        border_radius=BORDER_RADIUS_CARD,
        shadow=ft.BoxShadow(blur_radius=2, color=ft.Colors.BLACK12, offset=ft.Offset(0, 1)),
        col={"xs": 12, "lg": 4},
    )


def build_dashboard_view(
    page: ft.Page, client: ApiClient, sidebar: ft.Control, admin_name: str = ""
) -> ft.View:
    content = ft.Column(controls=[loading_state()], expand=True, scroll=ft.ScrollMode.AUTO)

    async def load():
        try:
            stats = await dashboard_stats(client)
        except AuthenticationError:
            return
        except ApiError as e:
            logger.warning(f"Failed to fetch dashboard stats: {e.message}")
            show_toast(page, "Failed to fetch stats", "error")
            content.controls = [empty_state("Statistics are not available right now")]
            page.update()
            return

        icons = [ft.Icons.PEOPLE, ft.Icons.HOURGLASS_TOP, ft.Icons.CAMPAIGN, ft.Icons.PAYMENTS]
        colors = [COLOR_INFO, COLOR_WARNING, COLOR_DANGER, COLOR_SUCCESS]
        u, c, p = stats.users, stats.complaints, stats.payments
        content.controls = [
            ft.ResponsiveRow(
                controls=[
                    _stat_card(label, str(value), icon, color)
                    for (label, value), icon, color in zip(stats.cards, icons, colors)
                ],
                spacing=16,
                run_spacing=16,
            ),
            ft.Container(height=16),
            ft.ResponsiveRow(
                controls=[
                    _breakdown(
                        "User Statistics",
                        [
                            ("Total Users", str(u["totalUsers"]), COLOR_TEXT_MAIN),
                            ("Approved", str(u["approvedUsers"]), COLOR_SUCCESS),
                            ("Pending", str(u["pendingUsers"]), COLOR_WARNING),
                            ("Suspended", str(u["suspendedUsers"]), COLOR_DANGER),
                            ("Total Vehicles", str(u["totalVehicles"]), COLOR_TEXT_MAIN),
                        ],
                    ),
                    _breakdown(
                        "Complaint Statistics",
                        [
                            ("Total Complaints", str(c["total"]), COLOR_TEXT_MAIN),
                            ("Pending", str(c["pending"]), COLOR_WARNING),
                            ("In Progress", str(c["inProgress"]), COLOR_INFO),
                            ("Resolved", str(c["resolved"]), COLOR_SUCCESS),
                            ("Rejected", str(c["rejected"]), COLOR_DANGER),
                        ],
                    ),
                    _breakdown(
                        "Payment Statistics",
                        [
                            ("Total Payments", str(p["total"]), COLOR_TEXT_MAIN),
                            ("Pending", str(p["pending"]), COLOR_WARNING),
                            ("Submitted", str(p["submitted"]), COLOR_INFO),
                            ("Approved", str(p["approved"]), COLOR_SUCCESS),
                            ("Rejected", str(p["rejected"]), COLOR_DANGER),
                            ("Total Collected", format_amount(stats.total_collected), COLOR_SUCCESS),
                        ],
                    ),
                ],
                spacing=16,
                run_spacing=16,
            ),
        ]
        page.update()

    page.run_task(load)
    return build_shell(
        "/",
        sidebar,
        [
            _page_header("Dashboard", "Overview of your society management", []),
            ft.Container(height=16),
            content,
        ],
        admin_name,
    )


# ==========================================================================
# Login
# ==========================================================================


def build_login_view(
    page: ft.Page, client: ApiClient, credentials: CredentialProvider, on_logged_in
) -> ft.View:
    cnic_field = ft.TextField(
        label="CNIC Number",
        hint_text="42201-1234567-1",
        prefix_icon=ft.Icons.BADGE,
        border_radius=BORDER_RADIUS_BTN,
        autofocus=True,
    )
    password_field = ft.TextField(
        label="Password",
        prefix_icon=ft.Icons.LOCK,
        password=True,
        can_reveal_password=True,
        border_radius=BORDER_RADIUS_BTN,
    )
    error_text = ft.Text("", color=COLOR_DANGER, size=12)
    submit = ft.FilledButton(
        "Login",
        style=ft.ButtonStyle(
            bgcolor=COLOR_PRIMARY,
            color="white",
            shape=ft.RoundedRectangleBorder(radius=BORDER_RADIUS_BTN),
        ),
        width=320,
    )

    async def on_submit(_e=None):
        submit.disabled = True
        error_text.value = ""
        page.update()
        try:
            admin = await auth_service.login(
                client, credentials, cnic_field.value or "", password_field.value or ""
            )
        except ValidationError as e:
            error_text.value = f"⚠  {e}"
        except ApiError as e:
            logger.warning(f"Login failed: {e.message}")
            error_text.value = f"⚠  {e.server_message or 'Login failed'}"
        else:
            show_toast(page, "Login successful", "success")
            on_logged_in(admin)
            return
        finally:
            submit.disabled = False
            page.update()

    submit.on_click = on_submit
    password_field.on_submit = on_submit

    return ft.View(
        route="/login",
        bgcolor=COLOR_BG,
        vertical_alignment=ft.MainAxisAlignment.CENTER,
        horizontal_alignment=ft.CrossAxisAlignment.CENTER,
        controls=[
            ft.Container(
                content=ft.Column(
                    [
                        ft.Text(APP_TITLE, size=20, weight=ft.FontWeight.BOLD, color=COLOR_TEXT_MAIN),
                        ft.Text("Sign in to continue", size=13, color=COLOR_TEXT_MUTED),
                        ft.Container(height=8),
                        cnic_field,
                        password_field,
                        error_text,
                        submit,
                    ],
                    spacing=12,
                    horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                    tight=True,
                ),
                padding=ft.Padding.all(32),
                width=400,
                bgcolor=COLOR_CARD,
                border_radius=BORDER_RADIUS_CARD,
                shadow=ft.BoxShadow(blur_radius=8, color=ft.Colors.BLACK12, offset=ft.Offset(0, 2)),
            )
        ],
    )
