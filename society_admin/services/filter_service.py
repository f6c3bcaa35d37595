"""
filter_service.py - Filter state and URL sync
Single responsibility: derive the active tab from the route, keep it in sync
with tab selection, and turn a FilterState into list query parameters.
"""
import logging
from typing import Callable
from urllib.parse import parse_qs, urlencode, urlsplit

from society_admin.domain.filters import FilterState
from society_admin.domain.models import Record
from society_admin.domain.statuses import ALL
from society_admin.services.registry import ResourceSpec

logger = logging.getLogger(__name__)


def parse_route(route: str) -> tuple[str, dict[str, str]]:
    """"/residents?tab=pending" -> ("/residents", {"tab": "pending"})."""
    parts = urlsplit(route or "/")
    query = {k: v[-1] for k, v in parse_qs(parts.query).items() if v}
    return parts.path or "/", query


def build_route(path: str, tab: str | None = None) -> str:
    if not tab:
        return path
    return f"{path}?{urlencode({'tab': tab})}"


def matches_search(record: Record, text: str) -> bool:
    """Case-insensitive substring match over the record's searchable fields."""
    needle = (text or "").strip().lower()
    if not needle:
        return True
    return needle in record.search_text().lower()


def filter_records(records: list, text: str) -> list:
    return [r for r in records if matches_search(r, text)]


class FilterStore:
    """
    Filter state of one resource page.

    The tab is read from the ``tab`` query parameter on creation and every tab
    change is written back through ``on_route_change`` so the route always
    reflects the selected tab. Search text and extras stay local.
    """

    def __init__(
        self,
        resource: ResourceSpec,
        route: str = "",
        on_route_change: Callable[[str], None] | None = None,
    ):
        self.resource = resource
        self.on_route_change = on_route_change
        self.state = FilterState(active_tab=resource.default_tab)
        if resource.sort_options:
            self.state.extra["sort"] = resource.sort_options[0].value
        if "category" in resource.extras:
            self.state.extra["category"] = ALL
        self._apply_route(route)

    def _valid_tab(self, tab: str | None) -> str | None:
        if tab and tab in self.resource.tab_values:
            return tab
        if tab:
            logger.debug("Ignoring unknown tab %r for %s", tab, self.resource.key)
        return None

    def _apply_route(self, route: str) -> bool:
        _path, query = parse_route(route)
        tab = self._valid_tab(query.get("tab"))
        if tab is None or tab == self.state.active_tab:
            return False
        self.state.active_tab = tab
        return True

    # --- mutations ---------------------------------------------------------

    def sync_from_route(self, route: str) -> bool:
        """Apply a navigation; returns True when the active tab changed."""
        return self._apply_route(route)

    def set_tab(self, tab: str) -> bool:
        tab = self._valid_tab(tab)
        if tab is None or tab == self.state.active_tab:
            return False
        self.state.active_tab = tab
        if self.on_route_change:
            self.on_route_change(self.route)
        return True

    def set_search(self, text: str) -> bool:
        text = text or ""
        if text == self.state.search_text:
            return False
        self.state.search_text = text
        return True

    def set_extra(self, name: str, value: str | None) -> bool:
        value = value or ""
        if self.state.extra.get(name, "") == value:
            return False
        self.state.extra[name] = value
        return True

    # --- derived -----------------------------------------------------------

    @property
    def route(self) -> str:
        return build_route(self.resource.path, self.state.active_tab)

    def query_params(self) -> dict[str, str]:
        state = self.state
        params: dict[str, str] = {}
        if state.active_tab != ALL or self.resource.send_all_status:
            params["status"] = state.active_tab
        if self.resource.search == "server" and state.search_text.strip():
            params["search"] = state.search_text.strip()
        for name in self.resource.extras:
            value = state.extra.get(name, "")
            if value and value != ALL:
                params[name] = value
        return params

    def sort_option(self):
        selected = self.state.extra.get("sort")
        for option in self.resource.sort_options:
            if option.value == selected:
                return option
        return None
