"""
Tests for debounced list fetching
"""
import asyncio
import contextlib
from dataclasses import replace

import pytest

from society_admin.api.errors import ApiError, AuthenticationError
from society_admin.domain.models import Payment, Resident, Vehicle
from society_admin.services.fetch_controller import ListController
from society_admin.services.filter_service import FilterStore
from society_admin.services.registry import PAYMENTS, RESIDENTS, VEHICLES

DELAY = 0.01


class FakeFetch:
    """Stands in for a list endpoint; answers from a queue of results."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls: list[dict] = []

    async def __call__(self, client, params, token):
        self.calls.append(dict(params))
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, asyncio.Event):
            await result.wait()
            return [Resident(id="late")]
        if isinstance(result, Exception):
            raise result
        return result


class LateFailure:
    """First call ignores cancellation and fails once released; later calls succeed."""

    def __init__(self, gate, fresh):
        self.gate = gate
        self.fresh = fresh
        self.calls: list[dict] = []

    async def __call__(self, client, params, token):
        self.calls.append(dict(params))
        if len(self.calls) > 1:
            return self.fresh
        try:
            await self.gate.wait()
        except asyncio.CancelledError:
            await self.gate.wait()
        raise ApiError("late failure", status=500)


async def started(fetch) -> None:
    while not fetch.calls:
        await asyncio.sleep(0)


def make_controller(resource, fetch, route=None, notify=None):
    resource = replace(resource, fetch=fetch)
    store = FilterStore(resource, route or resource.path)
    return ListController(resource, None, store, notify=notify, delay=DELAY)


class TestDebounce:
    """Bursts of filter changes produce one request"""

    @pytest.mark.asyncio
    async def test_single_request_with_last_filter(self):
        fetch = FakeFetch([])
        controller = make_controller(RESIDENTS, fetch)

        for text in ("a", "al", "ali"):
            controller.store.set_search(text)
            controller.notify_filter_changed()
        await asyncio.sleep(DELAY * 5)

        assert fetch.calls == [{"search": "ali"}]
        assert controller.fetch_count == 1

    @pytest.mark.asyncio
    async def test_separate_quiet_periods(self):
        fetch = FakeFetch([])
        controller = make_controller(RESIDENTS, fetch)

        controller.store.set_tab("pending")
        controller.notify_filter_changed()
        await asyncio.sleep(DELAY * 5)
        controller.store.set_tab("approved")
        controller.notify_filter_changed()
        await asyncio.sleep(DELAY * 5)

        assert fetch.calls == [{"status": "pending"}, {"status": "approved"}]

    @pytest.mark.asyncio
    async def test_closed_controller_does_not_fetch(self):
        fetch = FakeFetch([])
        controller = make_controller(RESIDENTS, fetch)

        controller.notify_filter_changed()
        controller.close()
        await asyncio.sleep(DELAY * 5)
        await controller.refresh()

        assert fetch.calls == []


class TestSupersede:
    """Only the newest response reaches the list"""

    @pytest.mark.asyncio
    async def test_older_response_ignored(self):
        gate = asyncio.Event()
        fresh = [Resident(id="fresh")]
        fetch = FakeFetch(gate, fresh)
        controller = make_controller(RESIDENTS, fetch)

        first = asyncio.create_task(controller.refresh())
        await started(fetch)
        await controller.refresh()
        gate.set()
        with contextlib.suppress(asyncio.CancelledError):
            await first

        assert [r.id for r in controller.records] == ["fresh"]
        assert not controller.loading
        assert controller.fetch_count == 2

    @pytest.mark.asyncio
    async def test_filter_change_cancels_inflight(self):
        gate = asyncio.Event()
        fetch = FakeFetch(gate, [Resident(id="pending-1")])
        controller = make_controller(RESIDENTS, fetch)

        first = asyncio.create_task(controller.refresh())
        await started(fetch)
        controller.store.set_tab("pending")
        controller.notify_filter_changed()
        await asyncio.sleep(DELAY * 5)
        gate.set()
        with contextlib.suppress(asyncio.CancelledError):
            await first

        assert [r.id for r in controller.records] == ["pending-1"]
        assert fetch.calls[-1] == {"status": "pending"}

    @pytest.mark.asyncio
    async def test_older_failure_ignored(self):
        """A superseded request that fails later leaves the newer result alone"""
        toasts = []
        gate = asyncio.Event()
        fetch = LateFailure(gate, [Resident(id="fresh")])
        controller = make_controller(RESIDENTS, fetch, notify=lambda m, k: toasts.append(m))

        first = asyncio.create_task(controller.refresh())
        await started(fetch)
        await controller.refresh()
        gate.set()
        with contextlib.suppress(asyncio.CancelledError):
            await first

        assert [r.id for r in controller.records] == ["fresh"]
        assert controller.error is None
        assert not controller.loading
        assert toasts == []


class TestFailures:
    """Errors keep what is on screen"""

    @pytest.mark.asyncio
    async def test_failure_keeps_records_and_toasts(self):
        toasts = []
        fetch = FakeFetch([Resident(id="r1")], ApiError("boom", status=500))
        controller = make_controller(RESIDENTS, fetch, notify=lambda m, k: toasts.append((m, k)))

        await controller.refresh()
        await controller.refresh()

        assert [r.id for r in controller.records] == ["r1"]
        assert controller.error == "boom"
        assert not controller.loading
        assert toasts == [("Failed to fetch users", "error")]

    @pytest.mark.asyncio
    async def test_success_clears_error(self):
        fetch = FakeFetch(ApiError("boom"), [Resident(id="r1")])
        controller = make_controller(RESIDENTS, fetch, notify=lambda m, k: None)

        await controller.refresh()
        await controller.refresh()

        assert controller.error is None

    @pytest.mark.asyncio
    async def test_auth_failure_is_silent(self):
        toasts = []
        fetch = FakeFetch(AuthenticationError("Session expired", status=401))
        controller = make_controller(RESIDENTS, fetch, notify=lambda m, k: toasts.append(m))

        await controller.refresh()

        assert toasts == []
        assert controller.error is None
        assert not controller.loading


class TestPostProcess:
    """Client-side search and sort"""

    @pytest.mark.asyncio
    async def test_client_search_without_refetch(self):
        vehicles = [Vehicle(id="1", plate_number="LEA-123"), Vehicle(id="2", plate_number="KHI-999")]
        fetch = FakeFetch(vehicles)
        controller = make_controller(VEHICLES, fetch)
        await controller.refresh()

        controller.store.set_search("lea")
        controller.reapply()

        assert [v.id for v in controller.records] == ["1"]
        assert fetch.calls == [{}]

    @pytest.mark.asyncio
    async def test_payments_sorted_descending(self):
        payments = [
            Payment(id="a", amount=1000, month_number=1, created_at="2024-03-01T00:00:00Z"),
            Payment(id="b", amount=3000, month_number=2, created_at="2024-01-01T00:00:00Z"),
            Payment(id="c", amount=2000, month_number=3, created_at="2024-02-01T00:00:00Z"),
        ]
        controller = make_controller(PAYMENTS, FakeFetch(payments))
        await controller.refresh()

        assert [p.id for p in controller.records] == ["a", "c", "b"]

        controller.store.set_extra("sort", "amount")
        controller.reapply()
        assert [p.id for p in controller.records] == ["b", "c", "a"]

        controller.store.set_extra("sort", "month")
        controller.reapply()
        assert [p.id for p in controller.records] == ["c", "b", "a"]

    @pytest.mark.asyncio
    async def test_on_change_sees_loading_then_result(self):
        seen = []
        resource = replace(RESIDENTS, fetch=FakeFetch([Resident(id="r1")]))
        store = FilterStore(resource, "/residents")
        controller = ListController(
            resource, None, store, on_change=lambda c: seen.append((c.loading, len(c.records)))
        )

        await controller.refresh()

        assert seen == [(True, 0), (False, 1)]
