"""
stats_service.py - Sidebar badge counts and dashboard figures
Single responsibility: gather counts from several endpoints in parallel,
tolerating partial failure.
"""
import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from society_admin.api.client import ApiClient
from society_admin.api.errors import ApiError
from society_admin.config import STATS_POLL_SECONDS
from society_admin.domain.statuses import ALL
from society_admin.services import resource_service as api

logger = logging.getLogger(__name__)


def _count_by_status(records: list) -> dict[str, int]:
    return dict(Counter(getattr(r, "status", "") for r in records))


def _int_counts(data: Any, keys: tuple[str, ...]) -> dict[str, int]:
    data = data if isinstance(data, dict) else {}
    counts = {}
    for key in keys:
        try:
            counts[key] = int(data.get(key) or 0)
        except (TypeError, ValueError):
            counts[key] = 0
    return counts


@dataclass
class SidebarCounts:
    users: dict[str, int] = field(default_factory=dict)
    complaints: dict[str, int] = field(default_factory=dict)
    payments: dict[str, int] = field(default_factory=dict)
    vehicle_requests: dict[str, int] = field(default_factory=dict)
    digital_cards: dict[str, int] = field(default_factory=dict)
    guest_requests: dict[str, int] = field(default_factory=dict)

    def count(self, group: str, status: str) -> int:
        return getattr(self, group, {}).get(status, 0)


async def _guarded(name: str, call: Awaitable, fallback: Any) -> Any:
    try:
        return await call
    except ApiError as e:
        logger.warning(f"Sidebar count '{name}' failed: {e.message}")
        return fallback
    except Exception:
        logger.exception(f"Sidebar count '{name}' could not be read")
        return fallback


class AggregateCounter:
    """
    Polls the badge counts shown in the sidebar.

    Each source is fetched independently; a failing source contributes zero
    counts and never prevents the others from being shown.
    """

    def __init__(
        self,
        client: ApiClient,
        interval: float = STATS_POLL_SECONDS,
        on_update: Callable[[SidebarCounts], None] | None = None,
    ):
        self.client = client
        self.interval = interval
        self.on_update = on_update
        self.counts = SidebarCounts()
        self._task: asyncio.Task | None = None

    async def refresh(self) -> SidebarCounts:
        params = {"status": ALL}
        users, complaints, payments, vehicles, cards, guests = await asyncio.gather(
            _guarded("users", api.list_residents(self.client, params), []),
            _guarded("complaints", api.list_complaints(self.client, params), []),
            _guarded("payments", api.list_payments(self.client, params), []),
            _guarded("vehicle_requests", api.list_vehicle_requests(self.client, params), []),
            _guarded("digital_cards", api.digital_card_stats(self.client), {}),
            _guarded("guest_requests", api.guest_request_stats(self.client), {}),
        )
        self.counts = SidebarCounts(
            users=_count_by_status(users),
            complaints=_count_by_status(complaints),
            payments=_count_by_status(payments),
            vehicle_requests=_count_by_status(vehicles),
            digital_cards=_int_counts(cards, ("pending", "approved", "suspended")),
            guest_requests=_int_counts(guests, ("pending", "approved", "rejected", "expired")),
        )
        if self.on_update:
            self.on_update(self.counts)
        return self.counts

    async def _loop(self) -> None:
        while True:
            try:
                await self.refresh()
            except Exception:
                logger.exception("Sidebar count refresh failed")
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self._task and not self._task.done():
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())

    def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


@dataclass
class DashboardStats:
    users: dict[str, int]
    complaints: dict[str, int]
    payments: dict[str, int]
    total_collected: float = 0

    @property
    def cards(self) -> list[tuple[str, int]]:
        """The four headline figures."""
        return [
            ("Total Users", self.users["totalUsers"]),
            ("Pending Approvals", self.users["pendingUsers"]),
            ("Pending Complaints", self.complaints["pending"]),
            ("Pending Payments", self.payments["pending"]),
        ]


async def dashboard_stats(client: ApiClient) -> DashboardStats:
    users, complaints, payments = await asyncio.gather(
        api.resident_stats(client),
        api.complaint_stats(client),
        api.payment_stats(client),
    )
    payments = payments if isinstance(payments, dict) else {}
    amounts = payments.get("amounts") if isinstance(payments.get("amounts"), dict) else {}
    try:
        collected = float(amounts.get("totalCollected") or 0)
    except (TypeError, ValueError):
        collected = 0.0
    return DashboardStats(
        users=_int_counts(
            users,
            ("totalUsers", "approvedUsers", "pendingUsers", "suspendedUsers", "totalVehicles"),
        ),
        complaints=_int_counts(
            complaints, ("total", "pending", "inProgress", "resolved", "rejected")
        ),
        payments=_int_counts(
            payments.get("overview"), ("total", "pending", "submitted", "approved", "rejected")
        ),
        total_collected=collected,
    )
