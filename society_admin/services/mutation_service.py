"""
mutation_service.py - Mutation dispatch and form validation
Single responsibility: run one admin action (approve, reject, delete, save...)
with confirmation, reason check, toast feedback and a single list refresh.
"""
import inspect
import logging
from datetime import date
from typing import Any, Awaitable, Callable

from society_admin.api.client import ApiClient
from society_admin.api.errors import ApiError, AuthenticationError, ValidationError
from society_admin.domain import statuses
from society_admin.domain.models import Record
from society_admin.services.fetch_controller import Notifier
from society_admin.services.registry import ActionSpec
from society_admin.utils.images import ImageUpload, check_image

logger = logging.getLogger(__name__)

Confirm = Callable[[str], Awaitable[bool]]


class MutationDispatcher:
    """
    Runs mutations the same way everywhere.

    A failed mutation leaves the displayed list untouched and is not retried;
    a successful one closes the open modal and triggers exactly one refresh.
    """

    def __init__(self, notify: Notifier, confirm: Confirm | None = None):
        self.notify = notify
        self.confirm = confirm

    async def dispatch(
        self,
        action: ActionSpec,
        call: Callable[[], Awaitable[Any]],
        *,
        reason: str | None = None,
        refresh: Callable[[], Any] | None = None,
        close_modal: Callable[[], None] | None = None,
    ) -> bool:
        if action.requires_reason and not (reason or "").strip():
            self.notify(f"Please provide a {action.reason_label.lower()}", "error")
            return False

        if action.needs_confirmation:
            message = action.confirm_message or f"{action.label}?"
            if self.confirm is None or not await self.confirm(message):
                logger.debug(f"{action.key} cancelled by user")
                return False

        try:
            await call()
        except AuthenticationError:
            raise
        except ApiError as e:
            logger.warning(f"{action.key} failed: {e.message} (status={e.status})")
            message = action.failure_message
            if action.use_server_message and e.server_message:
                message = e.server_message
            self.notify(message, "error")
            return False

        self.notify(action.success_message, "success")
        if close_modal:
            close_modal()
        if refresh:
            result = refresh()
            if inspect.isawaitable(result):
                await result
        return True

    async def run(
        self,
        action: ActionSpec,
        client: ApiClient,
        record: Record,
        *,
        reason: str | None = None,
        refresh: Callable[[], Any] | None = None,
        close_modal: Callable[[], None] | None = None,
    ) -> bool:
        """Dispatch a registry action against one record."""
        if action.run is None:
            raise ValueError(f"{action.key} is handled by a dialog")
        cleaned = reason.strip() if reason else reason
        return await self.dispatch(
            action,
            lambda: action.run(client, record, cleaned),
            reason=reason,
            refresh=refresh,
            close_modal=close_modal,
        )


# ---------------------------------------------------------------------------
# Form validation
# ---------------------------------------------------------------------------


def _required(fields: dict, key: str, label: str) -> str:
    value = str(fields.get(key) or "").strip()
    if not value:
        raise ValidationError(f"{label} is required")
    return value


def validate_announcement(fields: dict) -> dict:
    title = str(fields.get("title") or "").strip()
    message = str(fields.get("message") or "").strip()
    if not title or not message:
        raise ValidationError("Please fill all fields")
    kind = fields.get("type") or "announcement"
    priority = fields.get("priority") or "medium"
    if kind not in statuses.ANNOUNCEMENT_TYPES:
        raise ValidationError(f"Unknown announcement type: {kind}")
    if priority not in statuses.ANNOUNCEMENT_PRIORITIES:
        raise ValidationError(f"Unknown priority: {priority}")
    return {"title": title, "message": message, "type": kind, "priority": priority}


def validate_deal(
    fields: dict, image: ImageUpload | None, *, creating: bool
) -> tuple[dict, ImageUpload | None]:
    """Required: name, category, description; an image when creating."""
    cleaned = dict(fields)
    cleaned["name"] = _required(fields, "name", "Deal name")
    cleaned["category"] = _required(fields, "category", "Category")
    cleaned["description"] = _required(fields, "description", "Description")
    if image is None:
        if creating:
            raise ValidationError("Please select an image for the deal")
        return cleaned, None
    filename, content, _mime = image
    return cleaned, check_image(filename, content)


def validate_category(fields: dict) -> dict:
    name = _required(fields, "name", "Category name")
    order = str(fields.get("order") or "0").strip()
    if not order.lstrip("-").isdigit():
        raise ValidationError("Order must be a whole number")
    return {"name": name, "icon": (fields.get("icon") or "").strip(), "order": int(order)}


def _parse_date(value: str, label: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"{label} must be a date (YYYY-MM-DD)") from e


def validate_coupon(fields: dict) -> dict:
    cleaned = dict(fields)
    cleaned["code"] = _required(fields, "code", "Coupon code").upper()
    cleaned["discount"] = _required(fields, "discount", "Discount")
    valid_from = _parse_date(_required(fields, "valid_from", "Valid from"), "Valid from")
    valid_till = _parse_date(_required(fields, "valid_till", "Valid till"), "Valid till")
    if valid_from > valid_till:
        raise ValidationError("Valid till must be on or after valid from")
    cleaned["valid_from"] = valid_from.isoformat()
    cleaned["valid_till"] = valid_till.isoformat()

    for key, label in (("max_usage_per_user", "Max usage per user"), ("total_usage_limit", "Total usage limit")):
        value = str(fields.get(key) or "").strip()
        if value and (not value.isdigit() or int(value) < 1):
            raise ValidationError(f"{label} must be a positive number")
        cleaned[key] = value
    min_purchase = str(fields.get("min_purchase") or "").strip()
    if min_purchase:
        try:
            float(min_purchase)
        except ValueError as e:
            raise ValidationError("Minimum purchase must be a number") from e
    cleaned["min_purchase"] = min_purchase
    return cleaned
