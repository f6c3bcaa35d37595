"""
fetch_controller.py - Debounced list fetching
Single responsibility: turn bursts of filter/search changes into one request,
and make sure only the newest response ever reaches the screen.
"""

import asyncio
import logging
from typing import Callable

from society_admin.api.client import ApiClient, CancelToken
from society_admin.api.errors import ApiError, AuthenticationError, RequestCancelled
from society_admin.services.filter_service import FilterStore, filter_records
from society_admin.services.registry import ResourceSpec

logger = logging.getLogger(__name__)

# (message, kind) where kind is "success" | "error"
Notifier = Callable[[str, str], None]


class ListController:
    """
    Owns the displayed records of one resource page.

    ``notify_filter_changed`` restarts a quiet-period timer; when it fires a
    single fetch runs with the filter as it is at that moment. Every fetch
    gets its own CancelToken and a newer fetch cancels the older one, so a
    late response is dropped instead of overwriting newer data.
    """

    def __init__(
        self,
        resource: ResourceSpec,
        client: ApiClient | None,
        store: FilterStore,
        notify: Notifier | None = None,
        on_change: Callable[["ListController"], None] | None = None,
        delay: float | None = None,
    ):
        self.resource = resource
        self.client = client
        self.store = store
        self.notify = notify
        self.on_change = on_change
        self.delay = resource.debounce if delay is None else delay

        self.records: list = []
        self.loading = False
        self.error: str | None = None
        self.fetch_count = 0

        self._raw: list = []
        self._timer: asyncio.Task | None = None
        self._inflight: asyncio.Task | None = None
        self._token: CancelToken | None = None
        self._closed = False

    # ------------------------------------------------------------------
    # scheduling
    # ------------------------------------------------------------------

    def notify_filter_changed(self) -> None:
        if self._closed:
            return
        self._cancel_timer()
        self._cancel_inflight()
        self._timer = asyncio.get_running_loop().create_task(self._debounced())

    async def _debounced(self) -> None:
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            return
        try:
            await self.refresh()
        except asyncio.CancelledError:
            return

    async def refresh(self) -> None:
        """Fetch now, superseding whatever is in flight."""
        if self._closed:
            return
        self._cancel_inflight()
        token = CancelToken()
        self._token = token
        task = asyncio.get_running_loop().create_task(self._fetch(token))
        self._inflight = task
        await task

    def reapply(self) -> None:
        """Re-run client-side search and sorting on the last response without a request."""
        self.records = self._post_process(self._raw)
        self._emit()

    def close(self) -> None:
        self._closed = True
        self._cancel_timer()
        self._cancel_inflight()

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def _cancel_inflight(self) -> None:
        if self._token is not None:
            self._token.cancel()
        if self._inflight and not self._inflight.done():
            self._inflight.cancel()
        self._inflight = None

    def _is_current(self, token: CancelToken) -> bool:
        return token is self._token and not token.cancelled

    async def _fetch(self, token: CancelToken) -> None:
        self.fetch_count += 1
        params = self.store.query_params()
        self.loading = True
        self._emit()
        try:
            records = await self.resource.fetch(self.client, params, token)
            token.raise_if_cancelled()
        except (asyncio.CancelledError, RequestCancelled):
            logger.debug("%s fetch superseded (%s)", self.resource.key, params)
            return
        except AuthenticationError:
            # The session handler takes over; nothing to show here.
            if self._is_current(token):
                self.loading = False
            return
        except ApiError as exc:
            if not self._is_current(token):
                return
            logger.warning("%s fetch failed: %s", self.resource.key, exc.message)
            self.error = exc.message
            self.loading = False
            if self.notify:
                self.notify(self.resource.failure_message, "error")
            self._emit()
            return

        if not self._is_current(token):
            return
        self._raw = list(records)
        self.records = self._post_process(self._raw)
        self.error = None
        self.loading = False
        self._emit()

    def _post_process(self, records: list) -> list:
        if self.resource.search == "client":
            records = filter_records(records, self.store.state.search_text)
        option = self.store.sort_option()
        if option is not None:
            records = sorted(records, key=option.key, reverse=True)
        return list(records)

    def _emit(self) -> None:
        if self.on_change:
            self.on_change(self)
