"""
Tests for domain models, derived statuses and per-status actions
"""
from datetime import datetime, timezone

from society_admin.domain.models import (
    Coupon,
    Deal,
    DigitalCard,
    GuestRequest,
    Payment,
    Resident,
    Vehicle,
    VehicleRequest,
)
from society_admin.domain.statuses import effective_status, is_guest_request_expired, status_label
from society_admin.services.registry import DIGITAL_CARDS, GUEST_REQUESTS, RESIDENTS

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestFromApi:
    """Payloads mapped to records"""

    def test_resident(self):
        resident = Resident.from_api(
            {
                "_id": "u1",
                "fullName": "Ali Khan",
                "cnicNumber": "42201-1111111-1",
                "houseNumber": "B-13",
                "accountStatus": "approved",
                "profilePicture": {"url": "https://img/p.jpg"},
                "vehicles": [{"_id": "v1", "plateNumber": "LEA-123"}],
            }
        )

        assert resident.id == "u1"
        assert resident.status == "approved"
        assert resident.profile_picture_url == "https://img/p.jpg"
        assert resident.vehicles[0].plate_number == "LEA-123"

    def test_populated_owner(self):
        """userId may be an embedded object or a bare id"""
        populated = Vehicle.from_api({"plateNumber": "X", "userId": {"_id": "u1", "fullName": "Sara"}})
        bare = Vehicle.from_api({"plateNumber": "X", "userId": "u2"})

        assert populated.owner.full_name == "Sara"
        assert bare.owner.id == "u2"
        assert bare.owner.full_name == ""

    def test_vehicle_request_prefers_vehicle_data(self):
        request = VehicleRequest.from_api(
            {"_id": "r1", "requestType": "add", "plateNumber": "OLD", "vehicleData": {"plateNumber": "NEW"}}
        )

        assert request.plate_number == "NEW"
        assert request.status == "pending"

    def test_payment_numbers(self):
        payment = Payment.from_api({"amount": "2500", "monthNumber": "3", "year": 2024})

        assert payment.amount == 2500.0
        assert payment.month_number == 3
        assert payment.year == 2024

    def test_wrapped_digital_card(self):
        """The detail endpoint wraps the card next to its recent payments"""
        card = DigitalCard.from_api(
            {
                "card": {"_id": "c1", "cardNumber": "FB-0001", "status": "approved", "printCount": 2},
                "recentPayments": [{"amount": 1000, "status": "approved"}],
            }
        )

        assert card.id == "c1"
        assert card.print_count == 2
        assert card.recent_payments[0].amount == 1000

    def test_deal_category_as_id(self):
        deal = Deal.from_api({"_id": "d1", "name": "Pizza", "category": "cat1", "isActive": False})

        assert deal.category.id == "cat1"
        assert deal.status == "inactive"

    def test_coupon_dates_trimmed(self):
        coupon = Coupon.from_api(
            {"code": "SAVE10", "validFrom": "2024-05-01T00:00:00.000Z", "validTill": "2024-06-01T00:00:00.000Z"}
        )

        assert coupon.valid_from == "2024-05-01"
        assert coupon.valid_till == "2024-06-01"
        assert coupon.max_usage_per_user == 1
        assert coupon.min_purchase is None

    def test_search_text_covers_nested_owner(self):
        vehicle = Vehicle.from_api(
            {"plateNumber": "LEA-123", "userId": {"fullName": "Ali", "cnicNumber": "42201-1111111-1"}}
        )

        assert "42201-1111111-1" in vehicle.search_text()
        assert "LEA-123" in vehicle.search_text()


class TestGuestExpiry:
    """Expired is derived from the record and the current time"""

    def test_server_flag(self):
        request = GuestRequest(status="approved", is_expired=True)

        assert is_guest_request_expired(request, NOW)
        assert effective_status(request, NOW) == "expired"

    def test_expiry_time_passed(self):
        request = GuestRequest(status="pending", expires_at="2024-05-01T11:59:59.000Z")

        assert is_guest_request_expired(request, NOW)

    def test_expiry_time_exactly_now(self):
        request = GuestRequest(status="approved", expires_at="2024-05-01T12:00:00Z")

        assert is_guest_request_expired(request, NOW)

    def test_not_yet_expired(self):
        request = GuestRequest(status="pending", expires_at="2024-05-01T12:00:01Z")

        assert not is_guest_request_expired(request, NOW)
        assert effective_status(request, NOW) == "pending"

    def test_rejected_never_expires(self):
        request = GuestRequest(status="rejected", expires_at="2024-04-01T00:00:00Z")

        assert not is_guest_request_expired(request, NOW)
        assert effective_status(request, NOW) == "rejected"

    def test_missing_expiry(self):
        assert not is_guest_request_expired(GuestRequest(status="approved"), NOW)


class TestActionsForStatus:
    """Which buttons a record offers"""

    def keys(self, resource, record):
        return [a.key for a in resource.actions_for(record, NOW)]

    def test_pending_resident(self):
        assert self.keys(RESIDENTS, Resident(status="pending")) == ["view", "approve", "reject", "delete"]

    def test_suspended_resident(self):
        assert self.keys(RESIDENTS, Resident(status="suspended")) == ["view", "activate", "delete"]

    def test_approved_card_can_print(self):
        assert "print" in self.keys(DIGITAL_CARDS, DigitalCard(status="approved"))
        assert "print" not in self.keys(DIGITAL_CARDS, DigitalCard(status="pending"))

    def test_expired_guest_request_cannot_be_approved(self):
        """A pending request past its expiry only offers view and delete"""
        request = GuestRequest(status="pending", expires_at="2024-04-30T00:00:00Z")

        assert self.keys(GUEST_REQUESTS, request) == ["view", "delete"]

    def test_reason_required_for_reject_and_suspend(self):
        assert RESIDENTS.action("reject").requires_reason
        assert RESIDENTS.action("suspend").requires_reason
        assert DIGITAL_CARDS.action("suspend").requires_reason

    def test_status_label(self):
        assert status_label("in_progress") == "IN PROGRESS"
