"""
statuses.py - Status vocabularies per resource
Single responsibility: flat status sets and derived statuses.

The client does not enforce transitions; it only decides which actions to
offer for the current status and lets the server reject illegal ones.
"""
from datetime import datetime

from society_admin.domain.models import GuestRequest, Record
from society_admin.utils.time import now_utc, parse_iso

ALL = "all"

RESIDENT_STATUSES = ("pending", "approved", "rejected", "suspended")
COMPLAINT_STATUSES = ("pending", "in_progress", "resolved", "rejected")
PAYMENT_STATUSES = ("pending", "submitted", "approved", "rejected")
DIGITAL_CARD_STATUSES = ("pending", "approved", "rejected", "suspended")
GUEST_REQUEST_STATUSES = ("pending", "approved", "rejected", "expired")
VEHICLE_REQUEST_STATUSES = ("pending", "approved", "rejected")
DEAL_TABS = ("active", "inactive", "featured")

COMPLAINT_PRIORITIES = ("low", "medium", "high", "urgent")
ANNOUNCEMENT_TYPES = ("announcement", "alert", "event", "maintenance")
ANNOUNCEMENT_PRIORITIES = ("low", "medium", "high")

# Statuses after which a guest pass can still lapse
_GUEST_EXPIRABLE = {"pending", "approved"}


def is_guest_request_expired(record: GuestRequest, now: datetime | None = None) -> bool:
    """Derived on every render from the record and the current time; never cached."""
    if record.is_expired:
        return True
    if record.status not in _GUEST_EXPIRABLE:
        return False
    expires_at = parse_iso(record.expires_at)
    if expires_at is None:
        return False
    return expires_at <= (now or now_utc())


def effective_status(record: Record, now: datetime | None = None) -> str:
    if isinstance(record, GuestRequest) and is_guest_request_expired(record, now):
        return "expired"
    return getattr(record, "status", "") or ""


def status_label(status: str) -> str:
    return status.replace("_", " ").upper()
