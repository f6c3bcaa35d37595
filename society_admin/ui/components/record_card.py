import flet as ft

from society_admin.config import (
    BORDER_RADIUS_BTN,
    BORDER_RADIUS_CARD,
    COLOR_CARD,
    COLOR_DANGER,
    COLOR_INFO,
    COLOR_NEUTRAL,
    COLOR_SUCCESS,
    COLOR_TEXT_MAIN,
    COLOR_TEXT_MUTED,
    COLOR_WARNING,
)
from society_admin.domain.models import Record
from society_admin.domain.statuses import effective_status, status_label
from society_admin.services.registry import ActionSpec, ResourceSpec
from society_admin.ui.helpers import (
    badge,
    format_amount,
    format_date,
    format_datetime,
    priority_color,
    status_color,
)

_BUTTON_COLORS = {
    "success": COLOR_SUCCESS,
    "danger": COLOR_DANGER,
    "warning": COLOR_WARNING,
    "info": COLOR_INFO,
    "neutral": COLOR_NEUTRAL,
}

_ICONS = {
    "resident": ft.Icons.PERSON,
    "vehicle": ft.Icons.DIRECTIONS_CAR,
    "vehicle_request": ft.Icons.CAR_REPAIR,
    "complaint": ft.Icons.REPORT_PROBLEM,
    "payment": ft.Icons.PAYMENTS,
    "digital_card": ft.Icons.BADGE,
    "guest_request": ft.Icons.PEOPLE,
    "announcement": ft.Icons.CAMPAIGN,
    "deal": ft.Icons.LOCAL_OFFER,
    "deal_category": ft.Icons.CATEGORY,
}


def _owner_line(owner) -> str:
    if owner is None or not owner.full_name:
        return ""
    house = f" (House {owner.house_number})" if owner.house_number else ""
    return f"{owner.full_name}{house}"


def describe(record: Record) -> tuple[str, list[str], str, list[tuple[str, str]]]:
    """(title, meta parts, body text, extra chips) shown on a list card."""
    kind = record.kind
    chips: list[tuple[str, str]] = []
    body = ""

    if kind == "resident":
        title = record.full_name or "(no name)"
        meta = [
            f"CNIC: {record.cnic_number}",
            f"House: {record.house_number}",
            record.phone_number,
            record.email,
        ]
        if record.ownership_status:
            chips.append((record.ownership_status.title(), COLOR_INFO))
    elif kind == "vehicle":
        title = record.plate_number
        meta = [f"{record.make} {record.model}".strip(), record.color, _owner_line(record.owner)]
        if record.type:
            chips.append((record.type.title(), COLOR_INFO))
    elif kind == "vehicle_request":
        title = f"{record.plate_number}  ({record.request_type or 'request'})"
        meta = [
            f"{record.make} {record.model}".strip(),
            _owner_line(record.owner),
            format_datetime(record.created_at),
        ]
        body = record.reason
    elif kind == "complaint":
        title = f"#{record.complaint_number}  {record.complaint_type}".strip()
        meta = [record.user_name, record.user_cnic, format_datetime(record.created_at)]
        body = record.description
        chips.append((record.priority.upper(), priority_color(record.priority)))
    elif kind == "payment":
        title = f"{format_amount(record.amount)}  -  {record.month_display}"
        meta = [
            _owner_line(record.owner),
            f"Txn: {record.transaction_id}" if record.transaction_id else "",
            f"Submitted: {format_datetime(record.submitted_at)}" if record.submitted_at else "",
        ]
    elif kind == "digital_card":
        title = record.card_number or "(card number pending)"
        meta = [
            _owner_line(record.owner),
            f"Issued: {format_date(record.issued_date)}" if record.issued_date else "",
            f"Expires: {format_date(record.expiry_date)}" if record.expiry_date else "",
            f"Printed {record.print_count}x" if record.print_count else "",
        ]
    elif kind == "guest_request":
        title = f"{record.guest_name}  ({record.guest_mobile})"
        meta = [
            record.visit_type_label,
            f"{record.visit_date} {record.expected_time}".strip(),
            f"{record.user_name} (House {record.user_house_number})",
        ]
        body = record.admin_response
    elif kind == "announcement":
        title = record.title
        meta = [record.type.title(), format_datetime(record.created_at)]
        body = record.message
    elif kind == "deal":
        title = record.name
        meta = [
            record.category.name if record.category else "",
            record.discount,
            f"{record.coupon_count} coupons",
        ]
        body = record.description
        if record.is_featured:
            chips.append(("FEATURED", COLOR_INFO))
    elif kind == "deal_category":
        title = record.name
        meta = [f"Icon: {record.icon}", f"Order: {record.order}"]
    else:
        title, meta = str(getattr(record, "id", "")), []

    return title, [m for m in meta if m], body, chips


class RecordCard(ft.Container):
    def __init__(
        self,
        record: Record,
        resource: ResourceSpec,
        on_action,
        now=None,
    ):
        super().__init__()
        self.record = record
        self.resource = resource
        self.on_action = on_action
        self.now = now

        self.padding = ft.Padding.all(16)
        self.bgcolor = COLOR_CARD
        self.border_radius = BORDER_RADIUS_CARD
        self.border = ft.border.all(1, "transparent")
        self.shadow = ft.BoxShadow(
            blur_radius=2,
            color=ft.Colors.BLACK12,
            offset=ft.Offset(0, 1),
        )
        self.margin = ft.margin.only(bottom=12)

        self.content = self._build_content()

    def _action_button(self, action: ActionSpec) -> ft.Control:
        color = _BUTTON_COLORS.get(action.style, COLOR_INFO)

        async def handle(_e, spec=action):
            await self.on_action(spec, self.record)

        return ft.FilledButton(
            action.label,
            style=ft.ButtonStyle(
                bgcolor=color,
                color="white",
                shape=ft.RoundedRectangleBorder(radius=BORDER_RADIUS_BTN),
                padding=ft.Padding.symmetric(horizontal=12, vertical=6),
            ),
            on_click=handle,
        )

    def _build_content(self):
        record = self.record
        title, meta, body, chips = describe(record)
        status = effective_status(record, self.now)
        accent_color = status_color(status)

        chip_row = [badge(text, color) for text, color in chips]
        buttons = [
            self._action_button(a) for a in self.resource.actions_for(record, self.now)
        ]

        return ft.Column(
            controls=[
                ft.Row(
                    controls=[
                        ft.Icon(_ICONS.get(record.kind, ft.Icons.LIST), size=24, color=accent_color),
                        ft.Column(
                            controls=[
                                ft.Text(
                                    title,
                                    weight=ft.FontWeight.BOLD,
                                    size=16,
                                    color=COLOR_TEXT_MAIN,
                                    max_lines=1,
                                    overflow=ft.TextOverflow.ELLIPSIS,
                                ),
                                ft.Text("  ·  ".join(meta), size=12, color=COLOR_TEXT_MUTED),
                                *(
                                    [
                                        ft.Text(
                                            body,
                                            size=13,
                                            color=COLOR_TEXT_MAIN,
                                            max_lines=2,
                                            overflow=ft.TextOverflow.ELLIPSIS,
                                        )
                                    ]
                                    if body
                                    else []
                                ),
                            ],
                            spacing=4,
                            expand=True,
                        ),
                        ft.Row(
                            controls=[*chip_row, badge(status_label(status), accent_color)],
                            spacing=6,
                        ),
                    ],
                    spacing=16,
                    alignment=ft.MainAxisAlignment.START,
                    vertical_alignment=ft.CrossAxisAlignment.START,
                ),
                *(
                    [ft.Row(controls=buttons, spacing=8, wrap=True, run_spacing=8)]
                    if buttons
                    else []
                ),
            ],
            spacing=12,
        )
