"""
Tests for sidebar counts and dashboard figures
"""
import asyncio

import pytest

from society_admin.services import resource_service as api
from society_admin.services.stats_service import AggregateCounter, SidebarCounts, dashboard_stats
from tests.helpers import json_response


def listing(*statuses, key="status"):
    return json_response(200, {"success": True, "data": [{"_id": str(i), key: s} for i, s in enumerate(statuses)]})


def sidebar_routes(**overrides):
    table = {
        "GET /api/admin/users": listing("pending", "pending", "approved", key="accountStatus"),
        "GET /api/admin/complaints": listing("pending", "resolved"),
        "GET /api/admin/payments": listing("submitted", "submitted", "approved"),
        "GET /api/admin/vehicles/change-requests/all": listing("pending"),
        "GET /api/admin/digital-cards/stats/overview": json_response(
            200, {"success": True, "data": {"pending": 4, "approved": "7", "suspended": None}}
        ),
        "GET /api/admin/guest-requests/stats": json_response(
            200, {"success": True, "data": {"pending": 1, "expired": 2}}
        ),
    }
    table.update(overrides)
    return table


class TestAggregateCounter:
    """Independent sources, tolerant of partial failure"""

    @pytest.mark.asyncio
    async def test_counts(self, make_client, routes):
        counter = AggregateCounter(make_client(routes(sidebar_routes())))

        counts = await counter.refresh()

        assert counts.users == {"pending": 2, "approved": 1}
        assert counts.payments == {"submitted": 2, "approved": 1}
        assert counts.vehicle_requests == {"pending": 1}
        assert counts.digital_cards == {"pending": 4, "approved": 7, "suspended": 0}
        assert counts.count("guest_requests", "expired") == 2
        assert counts.count("guest_requests", "rejected") == 0

    @pytest.mark.asyncio
    async def test_lists_request_all_statuses(self, make_client, recorded, routes):
        await AggregateCounter(make_client(routes(sidebar_routes()))).refresh()

        users = next(r for r in recorded if r.url.path == "/api/admin/users")
        assert users.url.params["status"] == "all"

    @pytest.mark.asyncio
    async def test_failed_source_counts_zero(self, make_client, routes):
        """Complaints failing does not hide the user counts"""
        table = sidebar_routes(**{"GET /api/admin/complaints": json_response(500, {"message": "down"})})
        updates = []
        counter = AggregateCounter(make_client(routes(table)), on_update=updates.append)

        counts = await counter.refresh()

        assert counts.complaints == {}
        assert counts.count("complaints", "pending") == 0
        assert counts.users == {"pending": 2, "approved": 1}
        assert updates == [counts]

    @pytest.mark.asyncio
    async def test_start_and_stop(self, make_client, routes):
        updates = []
        counter = AggregateCounter(make_client(routes(sidebar_routes())), interval=60, on_update=updates.append)

        counter.start()
        counter.start()
        for _ in range(50):
            if updates:
                break
            await asyncio.sleep(0.01)
        counter.stop()

        assert len(updates) == 1
        assert counter._task is None

    @pytest.mark.asyncio
    async def test_loop_survives_failing_update(self, make_client, routes):
        """A broken badge update does not end polling"""
        calls = []

        def on_update(counts):
            calls.append(counts)
            if len(calls) == 1:
                raise RuntimeError("sidebar not mounted")

        counter = AggregateCounter(make_client(routes(sidebar_routes())), interval=0.01, on_update=on_update)

        counter.start()
        for _ in range(100):
            if len(calls) >= 2:
                break
            await asyncio.sleep(0.01)
        counter.stop()

        assert len(calls) >= 2

    @pytest.mark.asyncio
    async def test_unreadable_source_counts_zero(self, make_client, routes, monkeypatch):
        async def broken(client, params=None, token=None):
            raise ValueError("unexpected payment shape")

        monkeypatch.setattr(api, "list_payments", broken)
        counter = AggregateCounter(make_client(routes(sidebar_routes())))

        counts = await counter.refresh()

        assert counts.payments == {}
        assert counts.users == {"pending": 2, "approved": 1}

    def test_unknown_group(self):
        assert SidebarCounts().count("nothing", "pending") == 0


class TestDashboardStats:
    @pytest.mark.asyncio
    async def test_figures(self, make_client, routes):
        client = make_client(
            routes(
                {
                    "GET /api/admin/users/stats": json_response(
                        200, {"success": True, "data": {"totalUsers": 120, "pendingUsers": 5}}
                    ),
                    "GET /api/admin/complaints/stats": json_response(
                        200, {"success": True, "data": {"total": 9, "pending": 3}}
                    ),
                    "GET /api/admin/payments/stats/overview": json_response(
                        200,
                        {
                            "success": True,
                            "data": {
                                "overview": {"total": 40, "pending": 6, "submitted": 2},
                                "amounts": {"totalCollected": 125000},
                            },
                        },
                    ),
                }
            )
        )

        stats = await dashboard_stats(client)

        assert stats.cards == [
            ("Total Users", 120),
            ("Pending Approvals", 5),
            ("Pending Complaints", 3),
            ("Pending Payments", 6),
        ]
        assert stats.users["suspendedUsers"] == 0
        assert stats.total_collected == 125000.0
