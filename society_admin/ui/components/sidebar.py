import flet as ft

from society_admin.config import (
    APP_TITLE,
    COLOR_CARD,
    COLOR_DANGER,
    COLOR_PRIMARY,
    COLOR_SIDEBAR_HEADER,
    COLOR_TEXT_MAIN,
    SIDEBAR_WIDTH,
)
from society_admin.services.filter_service import parse_route
from society_admin.services.stats_service import SidebarCounts

# (id, label, icon, path or None, [(label, route, counts group, status)])
MENU = [
    ("dashboard", "Dashboard", ft.Icons.DASHBOARD, "/", []),
    (
        "residents",
        "Residents",
        ft.Icons.PEOPLE,
        None,
        [
            ("All Residents", "/residents?tab=all", None, None),
            ("Pending Approvals", "/residents?tab=pending", "users", "pending"),
            ("Approved Residents", "/residents?tab=approved", "users", "approved"),
            ("Suspended Users", "/residents?tab=suspended", "users", "suspended"),
        ],
    ),
    (
        "complaints",
        "Complaints",
        ft.Icons.REPORT_PROBLEM,
        None,
        [
            ("All Complaints", "/complaints?tab=all", None, None),
            ("Pending", "/complaints?tab=pending", "complaints", "pending"),
            ("In Progress", "/complaints?tab=in_progress", "complaints", "in_progress"),
            ("Resolved", "/complaints?tab=resolved", "complaints", "resolved"),
            ("Rejected", "/complaints?tab=rejected", "complaints", "rejected"),
        ],
    ),
    (
        "payments",
        "Payments",
        ft.Icons.PAYMENTS,
        None,
        [
            ("All Payments", "/payments?tab=all", None, None),
            ("Pending", "/payments?tab=pending", "payments", "pending"),
            ("Submitted", "/payments?tab=submitted", "payments", "submitted"),
            ("Approved", "/payments?tab=approved", "payments", "approved"),
            ("Rejected", "/payments?tab=rejected", "payments", "rejected"),
        ],
    ),
    (
        "digital-cards",
        "Digital Cards",
        ft.Icons.BADGE,
        None,
        [
            ("All Cards", "/digital-cards?tab=all", None, None),
            ("Pending", "/digital-cards?tab=pending", "digital_cards", "pending"),
            ("Approved", "/digital-cards?tab=approved", "digital_cards", "approved"),
            ("Rejected", "/digital-cards?tab=rejected", None, None),
            ("Suspended", "/digital-cards?tab=suspended", "digital_cards", "suspended"),
        ],
    ),
    (
        "guest-requests",
        "Guest Requests",
        ft.Icons.DOOR_FRONT_DOOR,
        None,
        [
            ("All Requests", "/guest-requests?tab=all", None, None),
            ("Pending", "/guest-requests?tab=pending", "guest_requests", "pending"),
            ("Approved", "/guest-requests?tab=approved", "guest_requests", "approved"),
            ("Rejected", "/guest-requests?tab=rejected", "guest_requests", "rejected"),
            ("Expired", "/guest-requests?tab=expired", "guest_requests", "expired"),
        ],
    ),
    ("announcements", "Announcements", ft.Icons.CAMPAIGN, "/announcements", []),
    (
        "deals",
        "Deals & Discounts",
        ft.Icons.LOCAL_OFFER,
        None,
        [
            ("Manage Deals", "/deals?tab=all", None, None),
            ("Categories", "/deal-categories", None, None),
        ],
    ),
    ("vehicles", "Vehicles", ft.Icons.DIRECTIONS_CAR, "/vehicles", []),
    (
        "vehicle-requests",
        "Vehicle Requests",
        ft.Icons.CAR_REPAIR,
        None,
        [
            ("Pending Requests", "/vehicle-requests?tab=pending", "vehicle_requests", "pending"),
            ("Approved", "/vehicle-requests?tab=approved", None, None),
            ("Rejected", "/vehicle-requests?tab=rejected", None, None),
        ],
    ),
]


def _group_for(path: str) -> str | None:
    """Which dropdown contains the current route."""
    for menu_id, _label, _icon, _path, items in MENU:
        for _item_label, route, _group, _status in items:
            if parse_route(route)[0] == path:
                return menu_id
    return None


class Sidebar(ft.Container):
    """Navigation menu with badge counts, grouped like the web console."""

    def __init__(self, on_navigate, on_logout, route: str = "/"):
        super().__init__()
        self.on_navigate = on_navigate
        self.on_logout = on_logout
        self.route = route
        self.counts = SidebarCounts()
        self._mounted = False
        self.open_group = _group_for(parse_route(route)[0])

        self.width = SIDEBAR_WIDTH
        self.bgcolor = COLOR_CARD
        self.padding = ft.Padding.symmetric(vertical=12)
        self.shadow = ft.BoxShadow(blur_radius=2, color=ft.Colors.BLACK12, offset=ft.Offset(1, 0))

        self._menu = ft.Column(spacing=2, scroll=ft.ScrollMode.AUTO, expand=True)
        self.content = ft.Column(
            controls=[
                ft.Container(
                    content=ft.Text(APP_TITLE, weight=ft.FontWeight.BOLD, size=15, color=COLOR_TEXT_MAIN),
                    bgcolor=COLOR_SIDEBAR_HEADER,
                    padding=ft.Padding.symmetric(horizontal=16, vertical=14),
                ),
                self._menu,
                ft.Container(
                    content=ft.TextButton(
                        "Logout",
                        icon=ft.Icons.LOGOUT,
                        style=ft.ButtonStyle(color=COLOR_DANGER),
                        on_click=self._handle_logout,
                    ),
                    padding=ft.Padding.symmetric(horizontal=8),
                ),
            ],
            spacing=8,
            expand=True,
        )
        self._render()

    # ------------------------------------------------------------------

    def set_route(self, route: str) -> None:
        self.route = route
        group = _group_for(parse_route(route)[0])
        if group:
            self.open_group = group
        self._refresh()

    def update_counts(self, counts: SidebarCounts) -> None:
        self.counts = counts
        self._refresh()

    async def _handle_logout(self, _e):
        self.on_logout()

    def did_mount(self):
        self._mounted = True

    def will_unmount(self):
        self._mounted = False

    def _refresh(self) -> None:
        self._render()
        if self._mounted:
            self.update()

    def _toggle(self, menu_id: str) -> None:
        self.open_group = None if self.open_group == menu_id else menu_id
        self._refresh()

    # ------------------------------------------------------------------

    def _item(self, label, icon, count, indent, selected, on_click):
        async def handle(_e):
            on_click()

        color = COLOR_PRIMARY if selected else COLOR_TEXT_MAIN
        trailing = []
        if count:
            trailing.append(
                ft.Container(
                    content=ft.Text(str(count), size=11, color="white", weight=ft.FontWeight.BOLD),
                    bgcolor=COLOR_DANGER,
                    border_radius=10,
                    padding=ft.Padding.symmetric(horizontal=8, vertical=1),
                )
            )
        return ft.Container(
            content=ft.Row(
                [
                    *([ft.Icon(icon, size=18, color=color)] if icon else []),
                    ft.Text(
                        label,
                        color=color,
                        size=13 if indent else 14,
                        weight=ft.FontWeight.BOLD if selected else ft.FontWeight.NORMAL,
                        expand=True,
                    ),
                    *trailing,
                ],
                spacing=10,
            ),
            padding=ft.Padding.only(left=16 + indent, right=12, top=8, bottom=8),
            bgcolor="#E8F5E9" if selected else None,
            on_click=handle,
            ink=True,
        )

    def _render(self) -> None:
        current_path, current_query = parse_route(self.route)
        controls: list[ft.Control] = []
        for menu_id, label, icon, path, items in MENU:
            if path is not None:
                controls.append(
                    self._item(
                        label,
                        icon,
                        0,
                        0,
                        current_path == path,
                        lambda r=path: self.on_navigate(r),
                    )
                )
                continue

            expanded = self.open_group == menu_id
            controls.append(
                self._item(
                    label,
                    icon,
                    0,
                    0,
                    False,
                    lambda m=menu_id: self._toggle(m),
                )
            )
            if not expanded:
                continue
            for item_label, route, group, status in items:
                item_path, item_query = parse_route(route)
                selected = item_path == current_path and item_query.get("tab") in (
                    None,
                    current_query.get("tab"),
                )
                count = self.counts.count(group, status) if group else 0
                controls.append(
                    self._item(
                        item_label,
                        None,
                        count,
                        24,
                        selected,
                        lambda r=route: self.on_navigate(r),
                    )
                )
        self._menu.controls = controls
