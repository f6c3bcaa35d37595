"""
resource_service.py - Admin API endpoints
Single responsibility: one function per endpoint, returning domain models.
"""
from typing import Any, Callable, TypeVar

from society_admin.api.client import ApiClient, CancelToken
from society_admin.domain.models import (
    Announcement,
    Complaint,
    Coupon,
    Deal,
    DealCategory,
    DigitalCard,
    GuestRequest,
    Payment,
    Resident,
    Vehicle,
    VehicleRequest,
)

T = TypeVar("T")


def unwrap(payload: Any) -> Any:
    """Strip the {"success", "data", "message"} envelope."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def _records(payload: Any, factory: Callable[[dict], T]) -> list[T]:
    data = unwrap(payload)
    if not isinstance(data, list):
        return []
    return [factory(item) for item in data if isinstance(item, dict)]


def _record(payload: Any, factory: Callable[[dict], T]) -> T:
    data = unwrap(payload)
    return factory(data if isinstance(data, dict) else {})


async def list_records(
    client: ApiClient,
    path: str,
    factory: Callable[[dict], T],
    params: dict | None = None,
    token: CancelToken | None = None,
) -> list[T]:
    return _records(await client.get(path, params=params, token=token), factory)


# ---------------------------------------------------------------------------
# Residents (users)
# ---------------------------------------------------------------------------

USERS_PATH = "/admin/users"


async def list_residents(client: ApiClient, params=None, token=None) -> list[Resident]:
    return await list_records(client, USERS_PATH, Resident.from_api, params, token)


async def get_resident(client: ApiClient, user_id: str) -> Resident:
    data = unwrap(await client.get(f"{USERS_PATH}/{user_id}"))
    # Detail responds with {"user": {...}, "vehicles": [...]}
    if isinstance(data, dict) and isinstance(data.get("user"), dict):
        merged = dict(data["user"])
        merged.setdefault("vehicles", data.get("vehicles") or [])
        data = merged
    return Resident.from_api(data if isinstance(data, dict) else {})


async def approve_resident(client: ApiClient, user_id: str):
    return await client.put(f"{USERS_PATH}/{user_id}/approve")


async def reject_resident(client: ApiClient, user_id: str, reason: str):
    return await client.put(f"{USERS_PATH}/{user_id}/reject", json={"reason": reason})


async def suspend_resident(client: ApiClient, user_id: str, reason: str):
    return await client.put(f"{USERS_PATH}/{user_id}/suspend", json={"reason": reason})


async def activate_resident(client: ApiClient, user_id: str):
    return await client.put(f"{USERS_PATH}/{user_id}/activate")


async def delete_resident(client: ApiClient, user_id: str):
    return await client.delete(f"{USERS_PATH}/{user_id}")


async def resident_stats(client: ApiClient) -> dict:
    return unwrap(await client.get(f"{USERS_PATH}/stats")) or {}


# ---------------------------------------------------------------------------
# Complaints
# ---------------------------------------------------------------------------

COMPLAINTS_PATH = "/admin/complaints"


async def list_complaints(client: ApiClient, params=None, token=None) -> list[Complaint]:
    return await list_records(client, COMPLAINTS_PATH, Complaint.from_api, params, token)


async def get_complaint(client: ApiClient, complaint_id: str) -> Complaint:
    return _record(await client.get(f"{COMPLAINTS_PATH}/{complaint_id}"), Complaint.from_api)


async def update_complaint_status(
    client: ApiClient, complaint_id: str, status: str, admin_response: str = ""
):
    return await client.put(
        f"{COMPLAINTS_PATH}/{complaint_id}/status",
        json={"status": status, "adminResponse": admin_response},
    )


async def delete_complaint(client: ApiClient, complaint_id: str):
    return await client.delete(f"{COMPLAINTS_PATH}/{complaint_id}")


async def complaint_stats(client: ApiClient) -> dict:
    return unwrap(await client.get(f"{COMPLAINTS_PATH}/stats")) or {}


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------

PAYMENTS_PATH = "/admin/payments"


async def list_payments(client: ApiClient, params=None, token=None) -> list[Payment]:
    return await list_records(client, PAYMENTS_PATH, Payment.from_api, params, token)


async def get_payment(client: ApiClient, payment_id: str) -> Payment:
    return _record(await client.get(f"{PAYMENTS_PATH}/{payment_id}"), Payment.from_api)


async def approve_payment(client: ApiClient, payment_id: str):
    return await client.put(f"{PAYMENTS_PATH}/{payment_id}/approve", json={})


async def reject_payment(client: ApiClient, payment_id: str, reason: str):
    return await client.put(
        f"{PAYMENTS_PATH}/{payment_id}/reject", json={"rejectionReason": reason}
    )


async def payment_stats(client: ApiClient) -> dict:
    return unwrap(await client.get(f"{PAYMENTS_PATH}/stats/overview")) or {}


# ---------------------------------------------------------------------------
# Vehicles
# ---------------------------------------------------------------------------

VEHICLES_PATH = "/admin/vehicles"


async def list_vehicles(client: ApiClient, params=None, token=None) -> list[Vehicle]:
    # The endpoint takes no filters; search happens on the client.
    return await list_records(client, f"{VEHICLES_PATH}/all", Vehicle.from_api, None, token)


async def list_vehicle_requests(
    client: ApiClient, params=None, token=None
) -> list[VehicleRequest]:
    return await list_records(
        client,
        f"{VEHICLES_PATH}/change-requests/all",
        VehicleRequest.from_api,
        params,
        token,
    )


async def approve_vehicle_request(client: ApiClient, request_id: str):
    return await client.put(f"{VEHICLES_PATH}/change-requests/{request_id}/approve")


async def reject_vehicle_request(client: ApiClient, request_id: str, reason: str):
    return await client.put(
        f"{VEHICLES_PATH}/change-requests/{request_id}/reject", json={"reason": reason}
    )


# ---------------------------------------------------------------------------
# Announcements
# ---------------------------------------------------------------------------

ANNOUNCEMENTS_PATH = "/admin/announcements"


async def list_announcements(client: ApiClient, params=None, token=None) -> list[Announcement]:
    return await list_records(client, ANNOUNCEMENTS_PATH, Announcement.from_api, params, token)


async def create_announcement(
    client: ApiClient, title: str, message: str, type: str, priority: str
):
    return await client.post(
        ANNOUNCEMENTS_PATH,
        json={"title": title, "message": message, "type": type, "priority": priority},
    )


async def delete_announcement(client: ApiClient, announcement_id: str):
    return await client.delete(f"{ANNOUNCEMENTS_PATH}/{announcement_id}")


# ---------------------------------------------------------------------------
# Digital cards
# ---------------------------------------------------------------------------

CARDS_PATH = "/admin/digital-cards"


async def list_digital_cards(client: ApiClient, params=None, token=None) -> list[DigitalCard]:
    return await list_records(client, CARDS_PATH, DigitalCard.from_api, params, token)


async def get_digital_card(client: ApiClient, card_id: str) -> DigitalCard:
    return _record(await client.get(f"{CARDS_PATH}/{card_id}"), DigitalCard.from_api)


async def approve_digital_card(client: ApiClient, card_id: str):
    return await client.put(f"{CARDS_PATH}/{card_id}/approve", json={})


async def reject_digital_card(client: ApiClient, card_id: str, reason: str):
    return await client.put(f"{CARDS_PATH}/{card_id}/reject", json={"rejectionReason": reason})


async def suspend_digital_card(client: ApiClient, card_id: str, reason: str):
    return await client.put(
        f"{CARDS_PATH}/{card_id}/suspend", json={"suspensionReason": reason}
    )


async def reactivate_digital_card(client: ApiClient, card_id: str):
    return await client.put(f"{CARDS_PATH}/{card_id}/reactivate", json={})


async def delete_digital_card(client: ApiClient, card_id: str):
    return await client.delete(f"{CARDS_PATH}/{card_id}")


async def digital_card_stats(client: ApiClient) -> dict:
    return unwrap(await client.get(f"{CARDS_PATH}/stats/overview")) or {}


# ---------------------------------------------------------------------------
# Guest requests
# ---------------------------------------------------------------------------

GUESTS_PATH = "/admin/guest-requests"


async def list_guest_requests(client: ApiClient, params=None, token=None) -> list[GuestRequest]:
    return await list_records(client, GUESTS_PATH, GuestRequest.from_api, params, token)


async def get_guest_request(client: ApiClient, request_id: str) -> GuestRequest:
    return _record(await client.get(f"{GUESTS_PATH}/{request_id}"), GuestRequest.from_api)


async def approve_guest_request(client: ApiClient, request_id: str):
    return await client.put(f"{GUESTS_PATH}/{request_id}/approve")


async def reject_guest_request(client: ApiClient, request_id: str, reason: str):
    return await client.put(
        f"{GUESTS_PATH}/{request_id}/reject", json={"adminResponse": reason}
    )


async def delete_guest_request(client: ApiClient, request_id: str):
    return await client.delete(f"{GUESTS_PATH}/{request_id}")


async def guest_request_stats(client: ApiClient) -> dict:
    return unwrap(await client.get(f"{GUESTS_PATH}/stats")) or {}


# ---------------------------------------------------------------------------
# Deals
# ---------------------------------------------------------------------------

DEALS_PATH = "/admin/deals"


async def list_deals(client: ApiClient, params=None, token=None) -> list[Deal]:
    return await list_records(client, DEALS_PATH, Deal.from_api, params, token)


async def get_deal(client: ApiClient, deal_id: str) -> Deal:
    return _record(await client.get(f"{DEALS_PATH}/{deal_id}"), Deal.from_api)


def _deal_form(fields: dict) -> dict[str, str]:
    form = {
        "name": fields["name"].strip(),
        "category": fields["category"],
        "description": fields["description"].strip(),
        "isFeatured": "true" if fields.get("is_featured") else "false",
    }
    for key in ("discount", "phone", "address"):
        value = (fields.get(key) or "").strip()
        if value:
            form[key] = value
    return form


def _image_files(image: tuple[str, bytes, str] | None) -> dict | None:
    return {"image": image} if image else None


async def create_deal(client: ApiClient, fields: dict, image: tuple[str, bytes, str]):
    """``image`` is (filename, content, mime type)."""
    return await client.post(DEALS_PATH, data=_deal_form(fields), files=_image_files(image))


async def update_deal(
    client: ApiClient, deal_id: str, fields: dict, image: tuple[str, bytes, str] | None = None
):
    form = _deal_form(fields)
    files = _image_files(image)
    if files is None:
        # JSON carries the flag as a real boolean; multipart only has strings.
        form["isFeatured"] = bool(fields.get("is_featured"))
        return await client.put(f"{DEALS_PATH}/{deal_id}", json=form)
    return await client.put(f"{DEALS_PATH}/{deal_id}", data=form, files=files)


async def delete_deal(client: ApiClient, deal_id: str):
    return await client.delete(f"{DEALS_PATH}/{deal_id}")


async def toggle_deal_featured(client: ApiClient, deal_id: str):
    return await client.patch(f"{DEALS_PATH}/{deal_id}/toggle-featured")


async def toggle_deal_active(client: ApiClient, deal_id: str):
    return await client.patch(f"{DEALS_PATH}/{deal_id}/toggle-active")


async def deal_stats(client: ApiClient) -> dict:
    return unwrap(await client.get(f"{DEALS_PATH}/stats")) or {}


# ---------------------------------------------------------------------------
# Deal categories
# ---------------------------------------------------------------------------

CATEGORIES_PATH = "/admin/deal-categories"


async def list_deal_categories(client: ApiClient, params=None, token=None) -> list[DealCategory]:
    return await list_records(client, CATEGORIES_PATH, DealCategory.from_api, params, token)


async def get_deal_category(client: ApiClient, category_id: str) -> DealCategory:
    return _record(
        await client.get(f"{CATEGORIES_PATH}/{category_id}"), DealCategory.from_api
    )


def _category_body(fields: dict) -> dict:
    return {
        "name": fields["name"].strip(),
        "icon": fields.get("icon") or "pricetag-outline",
        "order": int(fields.get("order") or 0),
    }


async def create_deal_category(client: ApiClient, fields: dict):
    return await client.post(CATEGORIES_PATH, json=_category_body(fields))


async def update_deal_category(client: ApiClient, category_id: str, fields: dict):
    return await client.put(f"{CATEGORIES_PATH}/{category_id}", json=_category_body(fields))


async def delete_deal_category(client: ApiClient, category_id: str):
    return await client.delete(f"{CATEGORIES_PATH}/{category_id}")


async def toggle_category_active(client: ApiClient, category_id: str):
    return await client.patch(f"{CATEGORIES_PATH}/{category_id}/toggle-active")


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------


def _coupon_body(fields: dict) -> dict:
    body = {
        "code": fields["code"].strip().upper(),
        "description": (fields.get("description") or "").strip(),
        "discount": str(fields["discount"]).strip(),
        "validFrom": fields["valid_from"],
        "validTill": fields["valid_till"],
        "usageType": fields.get("usage_type") or "one-time",
        "maxUsagePerUser": int(fields.get("max_usage_per_user") or 1),
    }
    if fields.get("total_usage_limit") not in (None, ""):
        body["totalUsageLimit"] = int(fields["total_usage_limit"])
    if fields.get("min_purchase") not in (None, ""):
        body["minPurchase"] = float(fields["min_purchase"])
    return body


async def list_coupons(client: ApiClient, deal_id: str, token=None) -> list[Coupon]:
    return await list_records(client, f"{DEALS_PATH}/{deal_id}/coupons", Coupon.from_api, None, token)


async def get_coupon(client: ApiClient, coupon_id: str) -> Coupon:
    return _record(await client.get(f"{DEALS_PATH}/coupons/{coupon_id}"), Coupon.from_api)


async def create_coupon(client: ApiClient, deal_id: str, fields: dict):
    return await client.post(f"{DEALS_PATH}/{deal_id}/coupons", json=_coupon_body(fields))


async def update_coupon(client: ApiClient, coupon_id: str, fields: dict):
    return await client.put(f"{DEALS_PATH}/coupons/{coupon_id}", json=_coupon_body(fields))


async def delete_coupon(client: ApiClient, coupon_id: str):
    return await client.delete(f"{DEALS_PATH}/coupons/{coupon_id}")


async def toggle_coupon_active(client: ApiClient, coupon_id: str):
    return await client.patch(f"{DEALS_PATH}/coupons/{coupon_id}/toggle-active")
