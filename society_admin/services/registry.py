"""
registry.py - Resource page definitions
Single responsibility: describe, per resource, its tabs, list endpoint,
debounce interval and the actions offered for each status.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable

from society_admin.api.client import ApiClient, CancelToken
from society_admin.config import FILTER_DEBOUNCE_SECONDS, SEARCH_DEBOUNCE_SECONDS
from society_admin.domain import statuses
from society_admin.domain.models import Record
from society_admin.domain.statuses import ALL, effective_status
from society_admin.services import resource_service as api
from society_admin.utils.time import parse_iso

Fetch = Callable[[ApiClient, dict, CancelToken | None], Awaitable[list]]
Run = Callable[[ApiClient, Record, str | None], Awaitable[Any]]


@dataclass(frozen=True)
class ActionSpec:
    key: str
    label: str
    style: str = "info"  # success | danger | warning | info | neutral
    run: Run | None = None  # None: handled by a dialog in the UI
    statuses: frozenset[str] | None = None  # None: every status
    requires_reason: bool = False
    reason_label: str = "Reason"
    destructive: bool = False
    confirm_message: str | None = None
    success_message: str = "Done"
    failure_message: str = "Action failed"
    use_server_message: bool = True

    def visible_for(self, record: Record, now: datetime | None = None) -> bool:
        if self.statuses is None:
            return True
        return effective_status(record, now) in self.statuses

    @property
    def needs_confirmation(self) -> bool:
        return self.destructive or self.confirm_message is not None


@dataclass(frozen=True)
class SortOption:
    value: str
    label: str
    key: Callable[[Any], Any]


@dataclass(frozen=True)
class ResourceSpec:
    key: str
    title: str
    subtitle: str
    path: str
    fetch: Fetch
    tabs: tuple[tuple[str, str], ...] = ((ALL, "All"),)
    default_tab: str = ALL
    debounce: float = SEARCH_DEBOUNCE_SECONDS
    search: str | None = "server"  # server | client | None
    search_hint: str = "Search..."
    send_all_status: bool = False
    actions: tuple[ActionSpec, ...] = ()
    sort_options: tuple[SortOption, ...] = ()
    empty_text: str = "No records found"
    failure_message: str = "Failed to fetch records"
    extras: tuple[str, ...] = ()

    @property
    def tab_values(self) -> tuple[str, ...]:
        return tuple(value for value, _ in self.tabs)

    def action(self, key: str) -> ActionSpec:
        for spec in self.actions:
            if spec.key == key:
                return spec
        raise KeyError(f"{self.key} has no action {key!r}")

    def actions_for(self, record: Record, now: datetime | None = None) -> list[ActionSpec]:
        return [a for a in self.actions if a.visible_for(record, now)]


def _tabs(values, all_first: bool = True) -> tuple[tuple[str, str], ...]:
    tabs = [(v, v.replace("_", " ").title()) for v in values]
    return tuple([(ALL, "All")] + tabs) if all_first else tuple(tabs + [(ALL, "All")])


def _by_date(record) -> float:
    dt = parse_iso(getattr(record, "created_at", None))
    return dt.timestamp() if dt else 0.0


VIEW = ActionSpec("view", "View", style="info")

# ---------------------------------------------------------------------------
# Residents
# ---------------------------------------------------------------------------

RESIDENTS = ResourceSpec(
    key="residents",
    title="Residents Management",
    subtitle="Manage all residents and approvals",
    path="/residents",
    fetch=api.list_residents,
    tabs=((ALL, "All"), ("pending", "Pending"), ("approved", "Approved"), ("suspended", "Suspended")),
    search_hint="Search by name, CNIC, house number, phone...",
    empty_text="No users found",
    failure_message="Failed to fetch users",
    actions=(
        VIEW,
        ActionSpec(
            "approve",
            "Approve",
            style="success",
            run=lambda c, r, _: api.approve_resident(c, r.id),
            statuses=frozenset({"pending"}),
            success_message="User approved successfully",
        ),
        ActionSpec(
            "reject",
            "Reject",
            style="danger",
            run=lambda c, r, reason: api.reject_resident(c, r.id, reason),
            statuses=frozenset({"pending"}),
            requires_reason=True,
            reason_label="Rejection reason",
            success_message="User rejected successfully",
        ),
        ActionSpec(
            "suspend",
            "Suspend",
            style="warning",
            run=lambda c, r, reason: api.suspend_resident(c, r.id, reason),
            statuses=frozenset({"approved"}),
            requires_reason=True,
            reason_label="Suspension reason",
            success_message="User suspended successfully",
        ),
        ActionSpec(
            "activate",
            "Activate",
            style="success",
            run=lambda c, r, _: api.activate_resident(c, r.id),
            statuses=frozenset({"suspended"}),
            success_message="User activated successfully",
        ),
        ActionSpec(
            "delete",
            "Delete",
            style="neutral",
            run=lambda c, r, _: api.delete_resident(c, r.id),
            destructive=True,
            confirm_message="Delete this user permanently?",
            success_message="User deleted successfully",
        ),
    ),
)

# ---------------------------------------------------------------------------
# Complaints
# ---------------------------------------------------------------------------

COMPLAINTS = ResourceSpec(
    key="complaints",
    title="Complaints Management",
    subtitle="Manage all resident complaints",
    path="/complaints",
    fetch=api.list_complaints,
    tabs=_tabs(statuses.COMPLAINT_STATUSES),
    search_hint="Search by complaint number, type, resident name, CNIC...",
    empty_text="No complaints found",
    failure_message="Failed to fetch complaints",
    actions=(
        ActionSpec("update_status", "View / Update", style="info"),
        ActionSpec(
            "delete",
            "Delete",
            style="danger",
            run=lambda c, r, _: api.delete_complaint(c, r.id),
            destructive=True,
            confirm_message="Are you sure you want to delete this complaint?",
            success_message="Complaint deleted",
            failure_message="Delete failed",
            use_server_message=False,
        ),
    ),
)

# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------

PAYMENTS = ResourceSpec(
    key="payments",
    title="Payments Management",
    subtitle="Review and approve resident payments",
    path="/payments",
    fetch=api.list_payments,
    tabs=_tabs(statuses.PAYMENT_STATUSES),
    search_hint="Search by resident, CNIC, house, transaction ID...",
    empty_text="No payments found",
    failure_message="Failed to fetch payments",
    extras=("month", "year"),
    sort_options=(
        SortOption("date", "Sort by Date", _by_date),
        SortOption("amount", "Sort by Amount", lambda p: p.amount),
        SortOption("month", "Sort by Month", lambda p: p.month_number or 0),
    ),
    actions=(
        VIEW,
        ActionSpec(
            "approve",
            "Approve",
            style="success",
            run=lambda c, r, _: api.approve_payment(c, r.id),
            statuses=frozenset({"submitted"}),
            success_message="Payment approved",
            failure_message="Approval failed",
        ),
        ActionSpec(
            "reject",
            "Reject",
            style="danger",
            run=lambda c, r, reason: api.reject_payment(c, r.id, reason),
            statuses=frozenset({"submitted"}),
            requires_reason=True,
            reason_label="Rejection reason",
            success_message="Payment rejected",
            failure_message="Rejection failed",
            use_server_message=False,
        ),
    ),
)

# ---------------------------------------------------------------------------
# Vehicles / vehicle change requests
# ---------------------------------------------------------------------------

VEHICLES = ResourceSpec(
    key="vehicles",
    title="All Vehicles",
    subtitle="View all registered vehicles and their owners",
    path="/vehicles",
    fetch=api.list_vehicles,
    search="client",
    search_hint="Search by plate, make, model, owner, CNIC, house...",
    empty_text="No vehicles found",
    failure_message="Failed to fetch vehicles",
)

VEHICLE_REQUESTS = ResourceSpec(
    key="vehicle_requests",
    title="Vehicle Change Requests",
    subtitle="Manage vehicle registration requests",
    path="/vehicle-requests",
    fetch=api.list_vehicle_requests,
    tabs=_tabs(statuses.VEHICLE_REQUEST_STATUSES, all_first=False),
    default_tab="pending",
    debounce=FILTER_DEBOUNCE_SECONDS,
    search=None,
    empty_text="No requests found",
    failure_message="Failed to fetch requests",
    actions=(
        ActionSpec(
            "approve",
            "Approve",
            style="success",
            run=lambda c, r, _: api.approve_vehicle_request(c, r.id),
            statuses=frozenset({"pending"}),
            confirm_message="Are you sure you want to approve this request?",
            success_message="Request approved successfully",
            failure_message="Approval failed",
        ),
        ActionSpec(
            "reject",
            "Reject",
            style="danger",
            run=lambda c, r, reason: api.reject_vehicle_request(c, r.id, reason),
            statuses=frozenset({"pending"}),
            requires_reason=True,
            reason_label="Rejection reason",
            success_message="Request rejected",
            failure_message="Rejection failed",
        ),
    ),
)

# ---------------------------------------------------------------------------
# Digital cards
# ---------------------------------------------------------------------------

DIGITAL_CARDS = ResourceSpec(
    key="digital_cards",
    title="Digital Cards Management",
    subtitle="Approve, suspend and print resident cards",
    path="/digital-cards",
    fetch=api.list_digital_cards,
    tabs=_tabs(statuses.DIGITAL_CARD_STATUSES),
    search_hint="Search by card number, name, CNIC, house...",
    empty_text="No digital cards found",
    failure_message="Failed to fetch digital cards",
    actions=(
        VIEW,
        ActionSpec("print", "Print", style="info", statuses=frozenset({"approved"})),
        ActionSpec(
            "approve",
            "Approve",
            style="success",
            run=lambda c, r, _: api.approve_digital_card(c, r.id),
            statuses=frozenset({"pending"}),
            success_message="Digital card approved",
            failure_message="Approval failed",
        ),
        ActionSpec(
            "reject",
            "Reject",
            style="danger",
            run=lambda c, r, reason: api.reject_digital_card(c, r.id, reason),
            statuses=frozenset({"pending"}),
            requires_reason=True,
            reason_label="Rejection reason",
            success_message="Digital card rejected",
            failure_message="Rejection failed",
            use_server_message=False,
        ),
        ActionSpec(
            "suspend",
            "Suspend",
            style="warning",
            run=lambda c, r, reason: api.suspend_digital_card(c, r.id, reason),
            statuses=frozenset({"approved"}),
            requires_reason=True,
            reason_label="Suspension reason",
            success_message="Digital card suspended",
            failure_message="Suspension failed",
            use_server_message=False,
        ),
        ActionSpec(
            "reactivate",
            "Reactivate",
            style="success",
            run=lambda c, r, _: api.reactivate_digital_card(c, r.id),
            statuses=frozenset({"suspended"}),
            success_message="Digital card reactivated",
            failure_message="Reactivation failed",
            use_server_message=False,
        ),
        ActionSpec(
            "delete",
            "Delete",
            style="neutral",
            run=lambda c, r, _: api.delete_digital_card(c, r.id),
            destructive=True,
            confirm_message="Delete this digital card permanently?",
            success_message="Digital card deleted",
            failure_message="Deletion failed",
            use_server_message=False,
        ),
    ),
)

# ---------------------------------------------------------------------------
# Guest requests
# ---------------------------------------------------------------------------

GUEST_REQUESTS = ResourceSpec(
    key="guest_requests",
    title="Guest Requests Management",
    subtitle="Manage all resident guest requests",
    path="/guest-requests",
    fetch=api.list_guest_requests,
    tabs=_tabs(statuses.GUEST_REQUEST_STATUSES),
    search_hint="Search by resident name, CNIC, house, guest name, mobile...",
    empty_text="No guest requests found",
    failure_message="Failed to fetch guest requests",
    actions=(
        VIEW,
        ActionSpec(
            "approve",
            "Approve",
            style="success",
            run=lambda c, r, _: api.approve_guest_request(c, r.id),
            statuses=frozenset({"pending"}),
            confirm_message="Are you sure you want to approve this guest request?",
            success_message="Guest request approved successfully",
            failure_message="Approval failed",
        ),
        ActionSpec(
            "reject",
            "Reject",
            style="danger",
            run=lambda c, r, reason: api.reject_guest_request(c, r.id, reason),
            statuses=frozenset({"pending"}),
            requires_reason=True,
            reason_label="Admin response",
            success_message="Guest request rejected",
            failure_message="Rejection failed",
            use_server_message=False,
        ),
        ActionSpec(
            "delete",
            "Delete",
            style="neutral",
            run=lambda c, r, _: api.delete_guest_request(c, r.id),
            destructive=True,
            confirm_message="Are you sure you want to delete this guest request?",
            success_message="Guest request deleted",
            failure_message="Delete failed",
            use_server_message=False,
        ),
    ),
)

# ---------------------------------------------------------------------------
# Announcements
# ---------------------------------------------------------------------------

ANNOUNCEMENTS = ResourceSpec(
    key="announcements",
    title="Announcements",
    subtitle="Create and manage announcements for residents",
    path="/announcements",
    fetch=api.list_announcements,
    search=None,
    empty_text="No announcements yet",
    failure_message="Failed to fetch announcements",
    actions=(
        ActionSpec(
            "delete",
            "Delete",
            style="danger",
            run=lambda c, r, _: api.delete_announcement(c, r.id),
            destructive=True,
            confirm_message="Delete this announcement for all users?",
            success_message="Announcement deleted successfully",
            failure_message="Failed to delete announcement",
        ),
    ),
)

# ---------------------------------------------------------------------------
# Deals / categories
# ---------------------------------------------------------------------------

DEALS = ResourceSpec(
    key="deals",
    title="Deals & Discounts",
    subtitle="Manage partner deals and their coupons",
    path="/deals",
    fetch=api.list_deals,
    tabs=_tabs(statuses.DEAL_TABS),
    debounce=FILTER_DEBOUNCE_SECONDS,
    search="client",
    search_hint="Search deals by name or description...",
    send_all_status=True,
    extras=("category",),
    empty_text="No deals found",
    failure_message="Failed to load deals",
    actions=(
        ActionSpec("edit", "Edit", style="info"),
        ActionSpec("coupons", "Coupons", style="info"),
        ActionSpec(
            "toggle_featured",
            "Feature / Unfeature",
            style="warning",
            run=lambda c, r, _: api.toggle_deal_featured(c, r.id),
            success_message="Deal updated",
            failure_message="Failed to update deal",
            use_server_message=False,
        ),
        ActionSpec(
            "toggle_active",
            "Activate / Deactivate",
            style="neutral",
            run=lambda c, r, _: api.toggle_deal_active(c, r.id),
            success_message="Deal updated",
            failure_message="Failed to update deal",
            use_server_message=False,
        ),
        ActionSpec(
            "delete",
            "Delete",
            style="danger",
            run=lambda c, r, _: api.delete_deal(c, r.id),
            destructive=True,
            confirm_message="Delete this deal and all of its coupons?",
            success_message="Deal deleted successfully",
            failure_message="Failed to delete deal",
            use_server_message=False,
        ),
    ),
)

DEAL_CATEGORIES = ResourceSpec(
    key="deal_categories",
    title="Deal Categories",
    subtitle="Organise deals into categories",
    path="/deal-categories",
    fetch=api.list_deal_categories,
    search=None,
    empty_text="No categories found",
    failure_message="Failed to load categories",
    actions=(
        ActionSpec("edit", "Edit", style="info"),
        ActionSpec(
            "toggle_active",
            "Activate / Deactivate",
            style="neutral",
            run=lambda c, r, _: api.toggle_category_active(c, r.id),
            success_message="Category updated",
            failure_message="Failed to update category",
            use_server_message=False,
        ),
        ActionSpec(
            "delete",
            "Delete",
            style="danger",
            run=lambda c, r, _: api.delete_deal_category(c, r.id),
            destructive=True,
            confirm_message="Delete this category?",
            success_message="Category deleted successfully",
            failure_message="Failed to delete category",
        ),
    ),
)

RESOURCES: dict[str, ResourceSpec] = {
    spec.key: spec
    for spec in (
        RESIDENTS,
        VEHICLES,
        VEHICLE_REQUESTS,
        COMPLAINTS,
        PAYMENTS,
        DIGITAL_CARDS,
        GUEST_REQUESTS,
        ANNOUNCEMENTS,
        DEALS,
        DEAL_CATEGORIES,
    )
}

RESOURCES_BY_PATH: dict[str, ResourceSpec] = {spec.path: spec for spec in RESOURCES.values()}
