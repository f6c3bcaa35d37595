"""
record_detail.py - Detail dialog content
Single responsibility: lay out every field of one record, with image links.
"""
import flet as ft

from society_admin.config import COLOR_BORDER, COLOR_INFO, COLOR_TEXT_MAIN, COLOR_TEXT_MUTED
from society_admin.domain.models import Record
from society_admin.domain.statuses import effective_status, status_label
from society_admin.ui.helpers import format_amount, format_date, format_datetime


def _owner_rows(owner) -> list[tuple[str, str]]:
    if owner is None:
        return []
    return [
        ("Resident", owner.full_name),
        ("CNIC", owner.cnic_number),
        ("House", owner.house_number),
        ("Phone", owner.phone_number),
    ]


def detail_rows(record: Record, now=None) -> list[tuple[str, str]]:
    kind = record.kind
    rows: list[tuple[str, str]] = [("Status", status_label(effective_status(record, now)))]

    if kind == "resident":
        rows += [
            ("Full name", record.full_name),
            ("CNIC", record.cnic_number),
            ("House", record.house_number),
            ("Phone", record.phone_number),
            ("Email", record.email),
            ("Ownership", record.ownership_status),
            ("Registered", format_datetime(record.created_at)),
        ]
        for v in record.vehicles:
            rows.append(("Vehicle", f"{v.plate_number}  {v.make} {v.model} ({v.color})"))
    elif kind == "vehicle":
        rows += [
            ("Plate", record.plate_number),
            ("Make / model", f"{record.make} {record.model}"),
            ("Color", record.color),
            ("Type", record.type),
        ] + _owner_rows(record.owner)
    elif kind == "vehicle_request":
        rows += [
            ("Request type", record.request_type),
            ("Plate", record.plate_number),
            ("Make / model", f"{record.make} {record.model}"),
            ("Color", record.color),
            ("Reason", record.reason),
            ("Rejection reason", record.rejection_reason),
        ] + _owner_rows(record.owner)
    elif kind == "complaint":
        rows += [
            ("Complaint #", record.complaint_number),
            ("Type", record.complaint_type),
            ("Priority", record.priority.upper()),
            ("Resident", record.user_name),
            ("CNIC", record.user_cnic),
            ("Filed", format_datetime(record.created_at)),
            ("Description", record.description),
            ("Admin response", record.admin_response),
        ]
    elif kind == "payment":
        rows += [
            ("Amount", format_amount(record.amount)),
            ("Month", record.month_display),
            ("Transaction ID", record.transaction_id),
            ("Due date", format_date(record.due_date)),
            ("Submitted", format_datetime(record.submitted_at)),
            ("Paid", format_date(record.paid_date)),
            ("Remarks", record.remarks),
            ("Rejection reason", record.rejection_reason),
        ] + _owner_rows(record.owner)
    elif kind == "digital_card":
        rows += [
            ("Card number", record.card_number),
            ("Issued", format_date(record.issued_date)),
            ("Expires", format_date(record.expiry_date)),
            ("Print count", str(record.print_count)),
            ("Last printed", format_datetime(record.last_printed_at)),
            ("Rejection reason", record.rejection_reason),
            ("Suspension reason", record.suspension_reason),
        ] + _owner_rows(record.owner)
        for p in record.recent_payments:
            rows.append(("Payment", f"{p.month_display}  {format_amount(p.amount)}  {p.status}"))
    elif kind == "guest_request":
        rows += [
            ("Guest", record.guest_name),
            ("Mobile", record.guest_mobile),
            ("Visit type", record.visit_type_label),
            ("Visit date", record.visit_date),
            ("Expected time", record.expected_time),
            ("Expires", format_datetime(record.expires_at)),
            ("Resident", record.user_name),
            ("House", record.user_house_number),
            ("CNIC", record.user_cnic),
            ("Requested", format_datetime(record.created_at)),
            ("Approved", format_datetime(record.approved_at)),
            ("Rejected", format_datetime(record.rejected_at)),
            ("Admin response", record.admin_response),
        ]
    return [(label, value) for label, value in rows if value and value.strip()]


def image_links(record: Record) -> list[tuple[str, str]]:
    candidates = [
        ("Profile picture", getattr(record, "profile_picture_url", None)),
        ("CNIC front", getattr(record, "cnic_front_url", None)),
        ("CNIC back", getattr(record, "cnic_back_url", None)),
        ("Vehicle image", getattr(record, "vehicle_image_url", None)),
        ("Registration", getattr(record, "registration_image_url", None)),
        ("Payment proof", getattr(record, "proof_url", None)),
        ("Image", getattr(record, "image_url", None)),
    ]
    return [(label, url) for label, url in candidates if url]


def build_detail_content(record: Record, now=None) -> ft.Control:
    rows = [
        ft.Row(
            controls=[
                ft.Text(label, size=12, color=COLOR_TEXT_MUTED, width=130),
                ft.Text(value, size=13, color=COLOR_TEXT_MAIN, selectable=True, expand=True),
            ],
            vertical_alignment=ft.CrossAxisAlignment.START,
        )
        for label, value in detail_rows(record, now)
    ]
    links = [
        ft.TextButton(label, icon=ft.Icons.IMAGE, url=url, style=ft.ButtonStyle(color=COLOR_INFO))
        for label, url in image_links(record)
    ]
    if links:
        rows.append(ft.Divider(color=COLOR_BORDER))
        rows.append(ft.Row(controls=links, wrap=True, spacing=4))
    return ft.Container(
        content=ft.Column(controls=rows, spacing=8, scroll=ft.ScrollMode.AUTO, tight=True),
        width=520,
    )
