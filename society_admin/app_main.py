"""
app_main.py - Society Admin メインアプリケーション
Society Admin Console
"""

import logging
import sys
from pathlib import Path

import flet as ft

from society_admin.api.client import ApiClient
from society_admin.config import APP_TITLE, APP_VERSION, COLOR_BG, COLOR_PRIMARY
from society_admin.services import auth_service
from society_admin.services.credentials import FileCredentialProvider
from society_admin.services.filter_service import parse_route
from society_admin.services.mutation_service import MutationDispatcher
from society_admin.services.registry import RESOURCES_BY_PATH
from society_admin.services.stats_service import AggregateCounter
from society_admin.ui import actions, views
from society_admin.ui.components.sidebar import Sidebar
from society_admin.ui.helpers import show_toast
from society_admin.ui.state import AppState

logger = logging.getLogger(__name__)


def resource_path(relative_path: str) -> str:
    """Get absolute path to resource, works for dev and for PyInstaller"""
    if hasattr(sys, "_MEIPASS"):
        return str(Path(sys._MEIPASS) / relative_path)
    return str(Path.cwd() / relative_path)


# ==========================================================================
# メインアプリ
# ==========================================================================


async def main(page: ft.Page):
    logger.info("Starting %s v%s", APP_TITLE, APP_VERSION)
    page.title = APP_TITLE
    page.window.icon = resource_path("app.ico")
    page.window.maximized = True
    page.theme_mode = ft.ThemeMode.LIGHT
    page.bgcolor = COLOR_BG
    page.padding = 0
    page.theme = ft.Theme(color_scheme_seed=COLOR_PRIMARY, font_family="Roboto")

    state = AppState()
    credentials = FileCredentialProvider()
    client = ApiClient(credentials)
    dispatcher = MutationDispatcher(
        notify=lambda message, kind: show_toast(page, message, kind),
        confirm=lambda message: actions.confirm(page, message),
    )

    def handle_logout():
        teardown_session()
        auth_service.logout(credentials)
        show_toast(page, "Logged out successfully", "success")
        go("/login")

    sidebar = Sidebar(on_navigate=go, on_logout=handle_logout, route=page.route or "/")

    def on_counts(counts):
        state.sidebar_counts = counts
        sidebar.update_counts(counts)

    counter = AggregateCounter(client, on_update=on_counts)

    # ------------------------------------------------------------------
    # セッション
    # ------------------------------------------------------------------

    def close_list_page():
        if state.list_page is not None:
            state.list_page.close()
            state.list_page = None

    def teardown_session():
        counter.stop()
        close_list_page()
        state.admin = {}

    def on_session_invalidated():
        # 401 を受けた時点でトークンは破棄済み。画面はログインへ戻す。
        logger.warning("Session expired; returning to login")
        teardown_session()
        show_toast(page, "Session expired. Please log in again.", "error")
        go("/login")

    credentials.subscribe_invalidated(on_session_invalidated)

    def on_logged_in(admin: dict):
        state.admin = admin or {}
        go("/")

    async def load_profile():
        try:
            state.admin = await auth_service.profile(client)
        except Exception:
            logger.warning("Failed to load admin profile", exc_info=True)

    # ------------------------------------------------------------------
    # ルーティング
    # ------------------------------------------------------------------

    def show_view(view: ft.View):
        page.views.clear()
        page.views.append(view)
        page.update()

    def render(route: str):
        path, _query = parse_route(route)
        state.route = route

        if not credentials.get():
            teardown_session()
            if path != "/login":
                go("/login")
                return
            show_view(views.build_login_view(page, client, credentials, on_logged_in))
            return

        if path == "/login":
            go("/")
            return

        counter.start()
        sidebar.set_route(route)
        admin_name = state.admin.get("fullName", "") if state.admin else ""

        # 同じ画面内のタブ変更はビューを作り直さない
        current = state.list_page
        if current is not None and current.store.resource.path == path:
            current.sync_route(route)
            return

        close_list_page()
        resource = RESOURCES_BY_PATH.get(path)
        if resource is not None:
            list_page = views.build_resource_list_view(
                page, resource, route, client, dispatcher, sidebar, admin_name
            )
            state.list_page = list_page
            show_view(list_page.view)
            return

        if path != "/":
            logger.info("Unknown route %s; showing dashboard", route)
        show_view(views.build_dashboard_view(page, client, sidebar, admin_name))

    def safe_render(route: str):
        try:
            render(route)
        except Exception as exc:
            logger.exception("Error while rendering %s", route)
            page.overlay.append(
                ft.AlertDialog(
                    title=ft.Text("Something went wrong"),
                    content=ft.Text(f"Details: {exc}"),
                    open=True,
                )
            )
            page.update()

    def go(route: str):
        page.route = route
        safe_render(route)

    async def route_change(_e: ft.RouteChangeEvent):
        safe_render(page.route)

    async def view_pop(_e: ft.ViewPopEvent = None):
        if len(page.views) > 1:
            page.views.pop()
        page.update()

    page.on_route_change = route_change
    page.on_view_pop = view_pop

    # ------------------------------------------------------------------
    # 終了処理
    # ------------------------------------------------------------------

    async def on_window_event(e: ft.WindowEvent):
        if e.type == ft.WindowEventType.CLOSE:
            logger.debug("Window close event")
            try:
                teardown_session()
                await client.close()
            except Exception:
                logger.warning("Failed to cleanup on window close", exc_info=True)
            page.window.prevent_close = False
            await page.window.close()

    page.window.prevent_close = True
    page.window.on_event = on_window_event

    if credentials.get():
        await load_profile()
    go(page.route or "/")
