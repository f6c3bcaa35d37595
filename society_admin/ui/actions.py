"""
actions.py - UI-side actions and dialogs
Single responsibility: handle modal flows that mutate records.
"""

import asyncio
import logging

import flet as ft

from society_admin.api.client import ApiClient
from society_admin.api.errors import ApiError, AuthenticationError, ValidationError
from society_admin.config import (
    BORDER_RADIUS_BTN,
    BORDER_RADIUS_CARD,
    COLOR_BORDER,
    COLOR_CARD,
    COLOR_DANGER,
    COLOR_PRIMARY,
    COLOR_TEXT_MAIN,
    COLOR_TEXT_MUTED,
)
from society_admin.domain import statuses
from society_admin.domain.models import Complaint, Coupon, Deal, DealCategory, DigitalCard, Record
from society_admin.services import resource_service as api
from society_admin.services.mutation_service import (
    MutationDispatcher,
    validate_announcement,
    validate_category,
    validate_coupon,
    validate_deal,
)
from society_admin.services.registry import ActionSpec
from society_admin.ui.components.record_detail import build_detail_content
from society_admin.ui.helpers import (
    badge,
    close_dialog,
    format_date,
    open_dialog,
    show_toast,
    status_color,
)
from society_admin.utils.images import clipboard_image, read_image

logger = logging.getLogger(__name__)


def _text_field(label: str, value: str = "", **kwargs) -> ft.TextField:
    return ft.TextField(
        label=label,
        value=value,
        border_color=COLOR_BORDER,
        focused_border_color=COLOR_PRIMARY,
        border_radius=BORDER_RADIUS_BTN,
        **kwargs,
    )


def _dropdown(label: str, options: list[tuple[str, str]], value: str) -> ft.Dropdown:
    return ft.Dropdown(
        label=label,
        options=[ft.dropdown.Option(key=k, text=t) for k, t in options],
        value=value,
        border_color=COLOR_BORDER,
        focused_border_color=COLOR_PRIMARY,
        border_radius=BORDER_RADIUS_BTN,
    )


def _primary_button(label: str, on_click, color: str = COLOR_PRIMARY) -> ft.FilledButton:
    return ft.FilledButton(
        label,
        style=ft.ButtonStyle(
            bgcolor=color,
            color="white",
            shape=ft.RoundedRectangleBorder(radius=BORDER_RADIUS_BTN),
        ),
        on_click=on_click,
    )


def _form_dialog(title: str, controls: list[ft.Control], on_save, on_cancel, save_label="Save"):
    return ft.AlertDialog(
        modal=True,
        title=ft.Text(title, weight=ft.FontWeight.BOLD),
        content=ft.Container(
            content=ft.Column(controls=controls, spacing=12, tight=True, scroll=ft.ScrollMode.AUTO),
            width=520,
        ),
        actions=[
            ft.TextButton("Cancel", on_click=on_cancel),
            _primary_button(save_label, on_save),
        ],
        actions_alignment=ft.MainAxisAlignment.END,
    )


async def submit_form(
    page: ft.Page, dialog: ft.AlertDialog, dispatcher: MutationDispatcher, action: ActionSpec, call, refresh
) -> None:
    """Dispatch a form mutation; an expired session closes the form."""
    try:
        await dispatcher.dispatch(
            action, call, refresh=refresh, close_modal=lambda: close_dialog(page, dialog)
        )
    except AuthenticationError:
        # The session handler takes the user back to login.
        logger.info(f"{action.key} stopped: session expired")
        close_dialog(page, dialog)


def file_picker(page: ft.Page) -> ft.FilePicker:
    """The page's FilePicker, registered on first use."""
    for service in page.services:
        if isinstance(service, ft.FilePicker):
            return service
    picker = ft.FilePicker()
    page.services.append(picker)
    return picker


# ---------------------------------------------------------------------------
# Confirmation / reason prompts
# ---------------------------------------------------------------------------


async def confirm(page: ft.Page, message: str, title: str = "Please confirm") -> bool:
    """Open a yes/no dialog and wait for the answer."""
    future: asyncio.Future = asyncio.get_running_loop().create_future()

    def answer(result: bool):
        async def handler(_e):
            close_dialog(page, dialog)
            if not future.done():
                future.set_result(result)

        return handler

    dialog = ft.AlertDialog(
        modal=True,
        title=ft.Text(title, weight=ft.FontWeight.BOLD),
        content=ft.Text(message),
        actions=[
            ft.TextButton("Cancel", on_click=answer(False)),
            _primary_button("Confirm", answer(True), color=COLOR_DANGER),
        ],
        actions_alignment=ft.MainAxisAlignment.END,
    )
    open_dialog(page, dialog)
    return await future


async def ask_reason(page: ft.Page, action: ActionSpec) -> str | None:
    """Reason prompt for reject/suspend. None when cancelled."""
    future: asyncio.Future = asyncio.get_running_loop().create_future()

    reason_field = _text_field(
        f"{action.reason_label} *",
        multiline=True,
        min_lines=3,
        max_lines=6,
        autofocus=True,
    )
    submit = _primary_button(action.label, None, color=COLOR_DANGER)
    submit.disabled = True

    def on_change(_e):
        submit.disabled = not (reason_field.value or "").strip()
        page.update()

    async def on_submit(_e):
        close_dialog(page, dialog)
        if not future.done():
            future.set_result(reason_field.value or "")

    async def on_cancel(_e):
        close_dialog(page, dialog)
        if not future.done():
            future.set_result(None)

    reason_field.on_change = on_change
    submit.on_click = on_submit

    dialog = ft.AlertDialog(
        modal=True,
        title=ft.Text(action.label, weight=ft.FontWeight.BOLD),
        content=ft.Container(content=reason_field, width=460),
        actions=[ft.TextButton("Cancel", on_click=on_cancel), submit],
        actions_alignment=ft.MainAxisAlignment.END,
    )
    open_dialog(page, dialog)
    return await future


# ---------------------------------------------------------------------------
# Detail / print
# ---------------------------------------------------------------------------


def show_record_detail(page: ft.Page, record: Record, title: str = "Details") -> None:
    def on_close(_e=None):
        close_dialog(page, dialog)

    dialog = ft.AlertDialog(
        modal=False,
        title=ft.Text(title, weight=ft.FontWeight.BOLD),
        content=build_detail_content(record),
        actions=[ft.TextButton("Close", on_click=on_close)],
        actions_alignment=ft.MainAxisAlignment.END,
    )
    open_dialog(page, dialog)


def show_card_summary(page: ft.Page, card: DigitalCard) -> None:
    """Printable summary of an approved card."""
    owner = card.owner
    lines = [
        ("Card No.", card.card_number),
        ("Name", owner.full_name if owner else ""),
        ("CNIC", owner.cnic_number if owner else ""),
        ("House", owner.house_number if owner else ""),
        ("Issued", format_date(card.issued_date)),
        ("Valid till", format_date(card.expiry_date)),
    ]

    def on_close(_e=None):
        close_dialog(page, dialog)

    dialog = ft.AlertDialog(
        modal=False,
        title=ft.Text("Digital Card", weight=ft.FontWeight.BOLD),
        content=ft.Container(
            content=ft.Column(
                controls=[
                    ft.Text("FB Area Block 13", size=18, weight=ft.FontWeight.BOLD, color=COLOR_PRIMARY),
                    ft.Divider(color=COLOR_BORDER),
                    *[
                        ft.Row(
                            [
                                ft.Text(label, size=12, color=COLOR_TEXT_MUTED, width=90),
                                ft.Text(value or "-", size=14, color=COLOR_TEXT_MAIN, selectable=True),
                            ]
                        )
                        for label, value in lines
                    ],
                ],
                spacing=6,
                tight=True,
            ),
            padding=ft.Padding.all(20),
            width=380,
            bgcolor=COLOR_CARD,
            border=ft.border.all(2, COLOR_PRIMARY),
            border_radius=BORDER_RADIUS_CARD,
        ),
        actions=[ft.TextButton("Close", on_click=on_close)],
        actions_alignment=ft.MainAxisAlignment.END,
    )
    open_dialog(page, dialog)


# ---------------------------------------------------------------------------
# Complaints
# ---------------------------------------------------------------------------

_UPDATE_COMPLAINT = ActionSpec(
    "update_status",
    "Update",
    success_message="Complaint updated",
    failure_message="Update failed",
    use_server_message=False,
)


def show_complaint_status_dialog(
    page: ft.Page, client: ApiClient, dispatcher: MutationDispatcher, complaint: Complaint, refresh
) -> None:
    status_field = _dropdown(
        "Status",
        [(s, s.replace("_", " ").title()) for s in statuses.COMPLAINT_STATUSES],
        complaint.status,
    )
    response_field = _text_field(
        "Admin response", complaint.admin_response, multiline=True, min_lines=3, max_lines=6
    )

    async def on_save(_e=None):
        await submit_form(
            page,
            dialog,
            dispatcher,
            _UPDATE_COMPLAINT,
            lambda: api.update_complaint_status(
                client, complaint.id, status_field.value, (response_field.value or "").strip()
            ),
            refresh,
        )

    def on_cancel(_e=None):
        close_dialog(page, dialog)

    dialog = _form_dialog(
        f"Complaint #{complaint.complaint_number}",
        [build_detail_content(complaint), ft.Divider(color=COLOR_BORDER), status_field, response_field],
        on_save,
        on_cancel,
        save_label="Update",
    )
    open_dialog(page, dialog)


# ---------------------------------------------------------------------------
# Announcements
# ---------------------------------------------------------------------------

_CREATE_ANNOUNCEMENT = ActionSpec(
    "create_announcement",
    "Create",
    success_message="Announcement created successfully",
    failure_message="Failed to create announcement",
)


def show_announcement_dialog(
    page: ft.Page, client: ApiClient, dispatcher: MutationDispatcher, refresh
) -> None:
    title_field = _text_field("Title *")
    message_field = _text_field("Message *", multiline=True, min_lines=4, max_lines=10)
    type_field = _dropdown("Type", [(t, t.title()) for t in statuses.ANNOUNCEMENT_TYPES], "announcement")
    priority_field = _dropdown(
        "Priority", [(p, p.title()) for p in statuses.ANNOUNCEMENT_PRIORITIES], "medium"
    )
    error_text = ft.Text("", color=COLOR_DANGER, size=12)

    async def on_save(_e=None):
        try:
            fields = validate_announcement(
                {
                    "title": title_field.value,
                    "message": message_field.value,
                    "type": type_field.value,
                    "priority": priority_field.value,
                }
            )
        except ValidationError as e:
            error_text.value = f"⚠  {e}"
            page.update()
            return
        await submit_form(
            page, dialog, dispatcher, _CREATE_ANNOUNCEMENT, lambda: api.create_announcement(client, **fields), refresh
        )

    def on_cancel(_e=None):
        close_dialog(page, dialog)

    dialog = _form_dialog(
        "New Announcement",
        [title_field, message_field, ft.Row([type_field, priority_field], spacing=12), error_text],
        on_save,
        on_cancel,
        save_label="Create",
    )
    open_dialog(page, dialog)


# ---------------------------------------------------------------------------
# Deals
# ---------------------------------------------------------------------------


def _deal_action(creating: bool) -> ActionSpec:
    if creating:
        return ActionSpec(
            "create_deal",
            "Create",
            success_message="Deal created successfully",
            failure_message="Failed to create deal",
        )
    return ActionSpec(
        "update_deal",
        "Update",
        success_message="Deal updated successfully",
        failure_message="Failed to update deal",
    )


async def show_deal_dialog(
    page: ft.Page,
    client: ApiClient,
    dispatcher: MutationDispatcher,
    refresh,
    deal: Deal | None = None,
) -> None:
    creating = deal is None
    try:
        categories = await api.list_deal_categories(client)
    except AuthenticationError:
        return
    except ApiError as e:
        logger.warning(f"Failed to load categories: {e.message}")
        show_toast(page, "Failed to load categories", "error")
        return
    if not categories:
        show_toast(page, "Create a deal category first", "error")
        return

    image = None
    current_category = deal.category.id if deal and deal.category else categories[0].id

    name_field = _text_field("Deal name *", deal.name if deal else "")
    category_field = _dropdown("Category *", [(c.id, c.name) for c in categories], current_category)
    description_field = _text_field(
        "Description *", deal.description if deal else "", multiline=True, min_lines=3, max_lines=6
    )
    discount_field = _text_field("Discount (e.g. 20% OFF)", deal.discount if deal else "")
    phone_field = _text_field("Phone", deal.phone if deal else "")
    address_field = _text_field("Address", deal.address if deal else "")
    featured_field = ft.Checkbox(label="Featured", value=deal.is_featured if deal else False)
    image_text = ft.Text(
        "No image selected" if creating else "Keep current image",
        size=12,
        color=COLOR_TEXT_MUTED,
    )
    error_text = ft.Text("", color=COLOR_DANGER, size=12)

    picker = file_picker(page)

    def set_image(upload):
        nonlocal image
        image = upload
        filename, content, _mime = upload
        image_text.value = f"{filename} ({len(content) // 1024} KB)"
        error_text.value = ""
        page.update()

    async def on_pick(_e=None):
        files = await picker.pick_files(
            allow_multiple=False, file_type=ft.FilePickerFileType.IMAGE
        )
        if not files or not files[0].path:
            return
        try:
            set_image(read_image(files[0].path))
        except ValidationError as e:
            error_text.value = f"⚠  {e}"
            page.update()

    def on_paste(_e=None):
        try:
            upload = clipboard_image()
        except ValidationError as e:
            error_text.value = f"⚠  {e}"
            page.update()
            return
        if upload is None:
            show_toast(page, "No image on the clipboard", "error")
            return
        set_image(upload)

    async def on_save(_e=None):
        raw = {
            "name": name_field.value,
            "category": category_field.value,
            "description": description_field.value,
            "discount": discount_field.value,
            "phone": phone_field.value,
            "address": address_field.value,
            "is_featured": bool(featured_field.value),
        }
        try:
            fields, upload = validate_deal(raw, image, creating=creating)
        except ValidationError as e:
            error_text.value = f"⚠  {e}"
            page.update()
            return

        if creating:
            call = lambda: api.create_deal(client, fields, upload)  # noqa: E731
        else:
            call = lambda: api.update_deal(client, deal.id, fields, upload)  # noqa: E731
        await submit_form(page, dialog, dispatcher, _deal_action(creating), call, refresh)

    def on_cancel(_e=None):
        close_dialog(page, dialog)

    image_row = ft.Row(
        controls=[
            ft.OutlinedButton("Choose image", icon=ft.Icons.IMAGE, on_click=on_pick),
            ft.IconButton(
                icon=ft.Icons.CONTENT_PASTE,
                icon_color=COLOR_PRIMARY,
                tooltip="Paste image from clipboard",
                on_click=on_paste,
            ),
            image_text,
        ],
        spacing=8,
    )

    dialog = _form_dialog(
        "New Deal" if creating else "Edit Deal",
        [
            name_field,
            category_field,
            description_field,
            discount_field,
            ft.Row([phone_field, address_field], spacing=12),
            featured_field,
            image_row,
            error_text,
        ],
        on_save,
        on_cancel,
        save_label="Create" if creating else "Update",
    )
    open_dialog(page, dialog)


# ---------------------------------------------------------------------------
# Deal categories
# ---------------------------------------------------------------------------


def show_category_dialog(
    page: ft.Page,
    client: ApiClient,
    dispatcher: MutationDispatcher,
    refresh,
    category: DealCategory | None = None,
) -> None:
    creating = category is None
    name_field = _text_field("Category name *", category.name if category else "")
    icon_field = _text_field("Icon", category.icon if category else "pricetag-outline")
    order_field = _text_field(
        "Order", str(category.order) if category else "0", keyboard_type=ft.KeyboardType.NUMBER
    )
    error_text = ft.Text("", color=COLOR_DANGER, size=12)

    action = ActionSpec(
        "save_category",
        "Save",
        success_message="Category created successfully" if creating else "Category updated successfully",
        failure_message="Failed to save category",
    )

    async def on_save(_e=None):
        try:
            fields = validate_category(
                {"name": name_field.value, "icon": icon_field.value, "order": order_field.value}
            )
        except ValidationError as e:
            error_text.value = f"⚠  {e}"
            page.update()
            return
        if creating:
            call = lambda: api.create_deal_category(client, fields)  # noqa: E731
        else:
            call = lambda: api.update_deal_category(client, category.id, fields)  # noqa: E731
        await submit_form(page, dialog, dispatcher, action, call, refresh)

    def on_cancel(_e=None):
        close_dialog(page, dialog)

    dialog = _form_dialog(
        "New Category" if creating else "Edit Category",
        [name_field, icon_field, order_field, error_text],
        on_save,
        on_cancel,
        save_label="Create" if creating else "Update",
    )
    open_dialog(page, dialog)


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------

_TOGGLE_COUPON = ActionSpec(
    "toggle_coupon",
    "Activate / Deactivate",
    success_message="Coupon updated",
    failure_message="Failed to update coupon",
    use_server_message=False,
)
_DELETE_COUPON = ActionSpec(
    "delete_coupon",
    "Delete",
    destructive=True,
    confirm_message="Delete this coupon?",
    success_message="Coupon deleted successfully",
    failure_message="Failed to delete coupon",
)


def show_coupon_form(
    page: ft.Page,
    client: ApiClient,
    dispatcher: MutationDispatcher,
    deal_id: str,
    on_saved,
    coupon: Coupon | None = None,
) -> None:
    creating = coupon is None
    code_field = _text_field("Code *", coupon.code if coupon else "", capitalization=ft.TextCapitalization.CHARACTERS)
    description_field = _text_field("Description", coupon.description if coupon else "")
    discount_field = _text_field("Discount *", coupon.discount if coupon else "")
    from_field = _text_field("Valid from * (YYYY-MM-DD)", coupon.valid_from if coupon else "")
    till_field = _text_field("Valid till * (YYYY-MM-DD)", coupon.valid_till if coupon else "")
    usage_field = _dropdown(
        "Usage",
        [("one-time", "One time"), ("multiple", "Multiple")],
        coupon.usage_type if coupon else "one-time",
    )
    max_use_field = _text_field(
        "Max usage per user", str(coupon.max_usage_per_user) if coupon else "1"
    )
    total_field = _text_field(
        "Total usage limit",
        str(coupon.total_usage_limit) if coupon and coupon.total_usage_limit else "",
    )
    min_purchase_field = _text_field(
        "Minimum purchase",
        f"{coupon.min_purchase:g}" if coupon and coupon.min_purchase is not None else "",
    )
    error_text = ft.Text("", color=COLOR_DANGER, size=12)

    action = ActionSpec(
        "save_coupon",
        "Save",
        success_message="Coupon created successfully" if creating else "Coupon updated successfully",
        failure_message="Failed to save coupon",
    )

    async def on_save(_e=None):
        try:
            fields = validate_coupon(
                {
                    "code": code_field.value,
                    "description": description_field.value,
                    "discount": discount_field.value,
                    "valid_from": (from_field.value or "").strip(),
                    "valid_till": (till_field.value or "").strip(),
                    "usage_type": usage_field.value,
                    "max_usage_per_user": max_use_field.value,
                    "total_usage_limit": total_field.value,
                    "min_purchase": min_purchase_field.value,
                }
            )
        except ValidationError as e:
            error_text.value = f"⚠  {e}"
            page.update()
            return
        if creating:
            call = lambda: api.create_coupon(client, deal_id, fields)  # noqa: E731
        else:
            call = lambda: api.update_coupon(client, coupon.id, fields)  # noqa: E731
        await submit_form(page, dialog, dispatcher, action, call, on_saved)

    def on_cancel(_e=None):
        close_dialog(page, dialog)

    dialog = _form_dialog(
        "New Coupon" if creating else "Edit Coupon",
        [
            code_field,
            description_field,
            discount_field,
            ft.Row([from_field, till_field], spacing=12),
            usage_field,
            ft.Row([max_use_field, total_field, min_purchase_field], spacing=12),
            error_text,
        ],
        on_save,
        on_cancel,
        save_label="Create" if creating else "Update",
    )
    open_dialog(page, dialog)


async def show_coupons_dialog(
    page: ft.Page, client: ApiClient, dispatcher: MutationDispatcher, deal: Deal, refresh_deals
) -> None:
    """Coupon list of one deal; the deal list is refreshed once on close if anything changed."""
    changed = False
    list_column = ft.Column(spacing=8, scroll=ft.ScrollMode.AUTO, tight=True)

    async def reload():
        try:
            coupons = await api.list_coupons(client, deal.id)
        except AuthenticationError:
            return
        except ApiError as e:
            logger.warning(f"Failed to load coupons: {e.message}")
            show_toast(page, "Failed to load coupons", "error")
            return
        list_column.controls = [_coupon_row(c) for c in coupons] or [
            ft.Text("No coupons yet", color=COLOR_TEXT_MUTED)
        ]
        page.update()

    async def mark_changed_and_reload():
        nonlocal changed
        changed = True
        await reload()

    def _coupon_row(coupon: Coupon) -> ft.Control:
        async def on_edit(_e):
            try:
                latest = await api.get_coupon(client, coupon.id)
            except AuthenticationError:
                close_dialog(page, dialog)
                return
            except ApiError as e:
                logger.warning(f"Failed to load coupon: {e.message}")
                show_toast(page, "Failed to load coupon", "error")
                return
            show_coupon_form(page, client, dispatcher, deal.id, mark_changed_and_reload, latest)

        async def on_toggle(_e):
            try:
                await dispatcher.dispatch(
                    _TOGGLE_COUPON,
                    lambda: api.toggle_coupon_active(client, coupon.id),
                    refresh=mark_changed_and_reload,
                )
            except AuthenticationError:
                close_dialog(page, dialog)

        async def on_delete(_e):
            try:
                await dispatcher.dispatch(
                    _DELETE_COUPON,
                    lambda: api.delete_coupon(client, coupon.id),
                    refresh=mark_changed_and_reload,
                )
            except AuthenticationError:
                close_dialog(page, dialog)

        meta = f"{coupon.discount}  ·  {coupon.valid_from} → {coupon.valid_till}  ·  {coupon.usage_type}"
        return ft.Container(
            content=ft.Row(
                controls=[
                    ft.Column(
                        [
                            ft.Text(coupon.code, weight=ft.FontWeight.BOLD, color=COLOR_TEXT_MAIN),
                            ft.Text(meta, size=12, color=COLOR_TEXT_MUTED),
                        ],
                        spacing=2,
                        expand=True,
                    ),
                    badge(coupon.status.upper(), status_color(coupon.status)),
                    ft.IconButton(icon=ft.Icons.EDIT, tooltip="Edit", on_click=on_edit),
                    ft.IconButton(icon=ft.Icons.TOGGLE_ON, tooltip="Activate / Deactivate", on_click=on_toggle),
                    ft.IconButton(icon=ft.Icons.DELETE, icon_color=COLOR_DANGER, tooltip="Delete", on_click=on_delete),
                ],
                vertical_alignment=ft.CrossAxisAlignment.CENTER,
            ),
            padding=ft.Padding.symmetric(horizontal=12, vertical=8),
            border=ft.border.all(1, COLOR_BORDER),
            border_radius=BORDER_RADIUS_BTN,
        )

    async def on_add(_e=None):
        show_coupon_form(page, client, dispatcher, deal.id, mark_changed_and_reload)

    async def on_close(_e=None):
        close_dialog(page, dialog)
        if changed:
            await refresh_deals()

    dialog = ft.AlertDialog(
        modal=True,
        title=ft.Text(f"Coupons - {deal.name}", weight=ft.FontWeight.BOLD),
        content=ft.Container(content=list_column, width=620, height=420),
        actions=[
            ft.OutlinedButton("Add coupon", icon=ft.Icons.ADD, on_click=on_add),
            ft.TextButton("Close", on_click=on_close),
        ],
        actions_alignment=ft.MainAxisAlignment.END,
    )
    open_dialog(page, dialog)
    await reload()
