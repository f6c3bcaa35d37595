"""
models.py - Domain models
Single responsibility: typed containers for the records returned by the API.

Each record is rebuilt from the server payload on every fetch; nothing here is
patched in place.
"""
from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _url(value: Any) -> str | None:
    """Image fields come as {"url": ...} objects or plain strings."""
    if isinstance(value, dict):
        return value.get("url") or None
    if isinstance(value, str) and value:
        return value
    return None


def _number(value: Any, default: float = 0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _int_or_none(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _record_id(data: dict) -> str:
    return _text(data.get("_id") or data.get("id"))


class Record:
    """Shared behaviour of every resource record."""

    kind: ClassVar[str] = ""
    search_fields: ClassVar[tuple[str, ...]] = ()

    def __getitem__(self, key):
        return getattr(self, key)

    def search_text(self) -> str:
        parts: list[str] = []
        for name in self.search_fields:
            value: Any = self
            for attr in name.split("."):
                value = getattr(value, attr, None) if value is not None else None
            if value:
                parts.append(str(value))
        return " ".join(parts)


@dataclass
class Owner(Record):
    kind: ClassVar[str] = "owner"

    id: str = ""
    full_name: str = ""
    cnic_number: str = ""
    house_number: str = ""
    phone_number: str = ""
    email: str = ""
    profile_picture_url: str | None = None

    @classmethod
    def from_api(cls, data: Any) -> Optional["Owner"]:
        if isinstance(data, str):
            return cls(id=data)
        if not isinstance(data, dict):
            return None
        return cls(
            id=_record_id(data),
            full_name=_text(data.get("fullName")),
            cnic_number=_text(data.get("cnicNumber")),
            house_number=_text(data.get("houseNumber")),
            phone_number=_text(data.get("phoneNumber")),
            email=_text(data.get("email")),
            profile_picture_url=_url(data.get("profilePicture")),
        )


@dataclass
class Vehicle(Record):
    kind: ClassVar[str] = "vehicle"
    search_fields: ClassVar[tuple[str, ...]] = (
        "plate_number",
        "make",
        "model",
        "owner.full_name",
        "owner.cnic_number",
        "owner.house_number",
    )

    id: str = ""
    plate_number: str = ""
    make: str = ""
    model: str = ""
    color: str = ""
    type: str = ""
    status: str = "approved"
    owner: Owner | None = None
    vehicle_image_url: str | None = None
    registration_image_url: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Vehicle":
        return cls(
            id=_record_id(data),
            plate_number=_text(data.get("plateNumber")),
            make=_text(data.get("make")),
            model=_text(data.get("model")),
            color=_text(data.get("color")),
            type=_text(data.get("type")),
            status=_text(data.get("status") or "approved"),
            owner=Owner.from_api(data.get("userId")),
            vehicle_image_url=_url(data.get("vehicleImage")),
            registration_image_url=_url(data.get("registrationImage")),
        )


@dataclass
class Resident(Record):
    kind: ClassVar[str] = "resident"
    search_fields: ClassVar[tuple[str, ...]] = (
        "full_name",
        "cnic_number",
        "house_number",
        "phone_number",
        "email",
    )

    id: str = ""
    full_name: str = ""
    cnic_number: str = ""
    house_number: str = ""
    phone_number: str = ""
    email: str = ""
    status: str = "pending"
    ownership_status: str = ""
    profile_picture_url: str | None = None
    cnic_front_url: str | None = None
    cnic_back_url: str | None = None
    vehicles: list[Vehicle] = field(default_factory=list)
    created_at: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Resident":
        return cls(
            id=_record_id(data),
            full_name=_text(data.get("fullName")),
            cnic_number=_text(data.get("cnicNumber")),
            house_number=_text(data.get("houseNumber")),
            phone_number=_text(data.get("phoneNumber")),
            email=_text(data.get("email")),
            status=_text(data.get("accountStatus") or "pending"),
            ownership_status=_text(data.get("ownershipStatus")),
            profile_picture_url=_url(data.get("profilePicture")),
            cnic_front_url=_url(data.get("cnicFront")),
            cnic_back_url=_url(data.get("cnicBack")),
            vehicles=[
                Vehicle.from_api(v) for v in data.get("vehicles") or [] if isinstance(v, dict)
            ],
            created_at=data.get("createdAt"),
        )


@dataclass
class VehicleRequest(Record):
    kind: ClassVar[str] = "vehicle_request"
    search_fields: ClassVar[tuple[str, ...]] = (
        "plate_number",
        "make",
        "model",
        "owner.full_name",
        "owner.cnic_number",
        "owner.house_number",
    )

    id: str = ""
    request_type: str = ""
    status: str = "pending"
    plate_number: str = ""
    make: str = ""
    model: str = ""
    color: str = ""
    type: str = ""
    owner: Owner | None = None
    reason: str = ""
    rejection_reason: str = ""
    vehicle_image_url: str | None = None
    registration_image_url: str | None = None
    created_at: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "VehicleRequest":
        vehicle = data.get("vehicleData") or data.get("vehicle") or {}
        if not isinstance(vehicle, dict):
            vehicle = {}

        def pick(key: str):
            return vehicle.get(key) if vehicle.get(key) is not None else data.get(key)

        return cls(
            id=_record_id(data),
            request_type=_text(data.get("requestType") or data.get("type")),
            status=_text(data.get("status") or "pending"),
            plate_number=_text(pick("plateNumber")),
            make=_text(pick("make")),
            model=_text(pick("model")),
            color=_text(pick("color")),
            type=_text(vehicle.get("type")),
            owner=Owner.from_api(data.get("userId")),
            reason=_text(data.get("reason")),
            rejection_reason=_text(data.get("rejectionReason")),
            vehicle_image_url=_url(pick("vehicleImage")),
            registration_image_url=_url(pick("registrationImage")),
            created_at=data.get("createdAt"),
        )


@dataclass
class Complaint(Record):
    kind: ClassVar[str] = "complaint"
    search_fields: ClassVar[tuple[str, ...]] = (
        "complaint_number",
        "complaint_type",
        "description",
        "user_name",
        "user_cnic",
    )

    id: str = ""
    complaint_number: str = ""
    complaint_type: str = ""
    description: str = ""
    priority: str = "low"
    status: str = "pending"
    admin_response: str = ""
    user_name: str = ""
    user_cnic: str = ""
    owner: Owner | None = None
    created_at: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Complaint":
        owner = Owner.from_api(data.get("userId"))
        return cls(
            id=_record_id(data),
            complaint_number=_text(data.get("complaintNumber")),
            complaint_type=_text(data.get("complaintType")),
            description=_text(data.get("description")),
            priority=_text(data.get("priority") or "low"),
            status=_text(data.get("status") or "pending"),
            admin_response=_text(data.get("adminResponse")),
            user_name=_text(data.get("userName") or (owner.full_name if owner else "")),
            user_cnic=_text(data.get("userCnic") or (owner.cnic_number if owner else "")),
            owner=owner,
            created_at=data.get("createdAt"),
        )


@dataclass
class Payment(Record):
    kind: ClassVar[str] = "payment"
    search_fields: ClassVar[tuple[str, ...]] = (
        "transaction_id",
        "month_display",
        "owner.full_name",
        "owner.cnic_number",
        "owner.house_number",
    )

    id: str = ""
    amount: float = 0
    month_display: str = ""
    month_number: int | None = None
    year: int | None = None
    status: str = "pending"
    transaction_id: str = ""
    remarks: str = ""
    rejection_reason: str = ""
    proof_url: str | None = None
    submitted_at: str | None = None
    due_date: str | None = None
    paid_date: str | None = None
    created_at: str | None = None
    owner: Owner | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Payment":
        return cls(
            id=_record_id(data),
            amount=_number(data.get("amount")),
            month_display=_text(data.get("monthDisplay")),
            month_number=_int_or_none(data.get("monthNumber") or data.get("month")),
            year=_int_or_none(data.get("year")),
            status=_text(data.get("status") or "pending"),
            transaction_id=_text(data.get("transactionId")),
            remarks=_text(data.get("remarks")),
            rejection_reason=_text(data.get("rejectionReason")),
            proof_url=_url(data.get("paymentProof")),
            submitted_at=data.get("submittedAt"),
            due_date=data.get("dueDate"),
            paid_date=data.get("paidDate"),
            created_at=data.get("createdAt"),
            owner=Owner.from_api(data.get("userId")),
        )


@dataclass
class DigitalCard(Record):
    kind: ClassVar[str] = "digital_card"
    search_fields: ClassVar[tuple[str, ...]] = (
        "card_number",
        "owner.full_name",
        "owner.cnic_number",
        "owner.house_number",
    )

    id: str = ""
    card_number: str = ""
    status: str = "pending"
    issued_date: str | None = None
    expiry_date: str | None = None
    print_count: int = 0
    last_printed_at: str | None = None
    rejection_reason: str = ""
    suspension_reason: str = ""
    owner: Owner | None = None
    recent_payments: list[Payment] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> "DigitalCard":
        # GET /digital-cards/{id} wraps the card: {"card": {...}, "recentPayments": [...]}
        card = data.get("card") if isinstance(data.get("card"), dict) else data
        return cls(
            id=_record_id(card),
            card_number=_text(card.get("cardNumber")),
            status=_text(card.get("status") or "pending"),
            issued_date=card.get("issuedDate"),
            expiry_date=card.get("expiryDate"),
            print_count=_int_or_none(card.get("printCount")) or 0,
            last_printed_at=card.get("lastPrintedAt"),
            rejection_reason=_text(card.get("rejectionReason")),
            suspension_reason=_text(card.get("suspensionReason")),
            owner=Owner.from_api(card.get("userId")),
            recent_payments=[
                Payment.from_api(p)
                for p in data.get("recentPayments") or []
                if isinstance(p, dict)
            ],
        )


@dataclass
class GuestRequest(Record):
    kind: ClassVar[str] = "guest_request"
    search_fields: ClassVar[tuple[str, ...]] = (
        "guest_name",
        "guest_mobile",
        "user_name",
        "user_cnic",
        "user_house_number",
    )

    id: str = ""
    guest_name: str = ""
    guest_mobile: str = ""
    visit_type: str = "guest"
    custom_visit_type: str = ""
    visit_date: str = ""
    expected_time: str = ""
    status: str = "pending"
    is_expired: bool = False
    expires_at: str | None = None
    admin_response: str = ""
    user_name: str = ""
    user_house_number: str = ""
    user_cnic: str = ""
    created_at: str | None = None
    updated_at: str | None = None
    approved_at: str | None = None
    rejected_at: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "GuestRequest":
        return cls(
            id=_record_id(data),
            guest_name=_text(data.get("guestName")),
            guest_mobile=_text(data.get("guestMobile")),
            visit_type=_text(data.get("visitType") or "guest"),
            custom_visit_type=_text(data.get("customVisitType")),
            visit_date=_text(data.get("visitDate")),
            expected_time=_text(data.get("expectedTime")),
            status=_text(data.get("status") or "pending"),
            is_expired=bool(data.get("isExpired")),
            expires_at=data.get("expiresAt"),
            admin_response=_text(data.get("adminResponse")),
            user_name=_text(data.get("userName")),
            user_house_number=_text(data.get("userHouseNumber")),
            user_cnic=_text(data.get("userCnic")),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            approved_at=data.get("approvedAt"),
            rejected_at=data.get("rejectedAt"),
        )

    @property
    def visit_type_label(self) -> str:
        if self.visit_type == "other" and self.custom_visit_type:
            return self.custom_visit_type
        labels = {
            "guest": "Guest Visitor",
            "delivery": "Delivery",
            "cab": "Cab/Taxi",
            "other": "Other",
        }
        return labels.get(self.visit_type, self.visit_type)


@dataclass
class DealCategory(Record):
    kind: ClassVar[str] = "deal_category"
    search_fields: ClassVar[tuple[str, ...]] = ("name",)

    id: str = ""
    name: str = ""
    icon: str = "pricetag-outline"
    order: int = 0
    is_active: bool = True

    @property
    def status(self) -> str:
        return "active" if self.is_active else "inactive"

    @classmethod
    def from_api(cls, data: Any) -> Optional["DealCategory"]:
        if isinstance(data, str):
            return cls(id=data)
        if not isinstance(data, dict):
            return None
        return cls(
            id=_record_id(data),
            name=_text(data.get("name")),
            icon=_text(data.get("icon") or "pricetag-outline"),
            order=_int_or_none(data.get("order")) or 0,
            is_active=bool(data.get("isActive", True)),
        )


@dataclass
class Deal(Record):
    kind: ClassVar[str] = "deal"
    search_fields: ClassVar[tuple[str, ...]] = ("name", "description")

    id: str = ""
    name: str = ""
    category: DealCategory | None = None
    description: str = ""
    discount: str = ""
    phone: str = ""
    address: str = ""
    image_url: str | None = None
    is_featured: bool = False
    is_active: bool = True
    coupon_count: int = 0

    @property
    def status(self) -> str:
        return "active" if self.is_active else "inactive"

    @classmethod
    def from_api(cls, data: dict) -> "Deal":
        return cls(
            id=_record_id(data),
            name=_text(data.get("name")),
            category=DealCategory.from_api(data.get("category")),
            description=_text(data.get("description")),
            discount=_text(data.get("discount")),
            phone=_text(data.get("phone")),
            address=_text(data.get("address")),
            image_url=_url(data.get("image")),
            is_featured=bool(data.get("isFeatured")),
            is_active=bool(data.get("isActive", True)),
            coupon_count=_int_or_none(data.get("couponCount")) or 0,
        )


@dataclass
class Coupon(Record):
    kind: ClassVar[str] = "coupon"
    search_fields: ClassVar[tuple[str, ...]] = ("code", "description")

    id: str = ""
    code: str = ""
    description: str = ""
    discount: str = ""
    valid_from: str = ""
    valid_till: str = ""
    usage_type: str = "one-time"
    max_usage_per_user: int = 1
    total_usage_limit: int | None = None
    min_purchase: float | None = None
    is_active: bool = True

    @property
    def status(self) -> str:
        return "active" if self.is_active else "inactive"

    @classmethod
    def from_api(cls, data: dict) -> "Coupon":
        min_purchase = data.get("minPurchase")
        return cls(
            id=_record_id(data),
            code=_text(data.get("code")),
            description=_text(data.get("description")),
            discount=_text(data.get("discount")),
            valid_from=_text(data.get("validFrom")).split("T")[0],
            valid_till=_text(data.get("validTill")).split("T")[0],
            usage_type=_text(data.get("usageType") or "one-time"),
            max_usage_per_user=_int_or_none(data.get("maxUsagePerUser")) or 1,
            total_usage_limit=_int_or_none(data.get("totalUsageLimit")),
            min_purchase=_number(min_purchase) if min_purchase not in (None, "") else None,
            is_active=bool(data.get("isActive", True)),
        )


@dataclass
class Announcement(Record):
    kind: ClassVar[str] = "announcement"
    search_fields: ClassVar[tuple[str, ...]] = ("title", "message")

    id: str = ""
    title: str = ""
    message: str = ""
    type: str = "announcement"
    priority: str = "medium"
    created_at: str | None = None

    @property
    def status(self) -> str:
        return self.priority

    @classmethod
    def from_api(cls, data: dict) -> "Announcement":
        return cls(
            id=_record_id(data),
            title=_text(data.get("title")),
            message=_text(data.get("message")),
            type=_text(data.get("type") or "announcement"),
            priority=_text(data.get("priority") or "medium"),
            created_at=data.get("createdAt"),
        )
