import flet as ft

from models.category import DEFAULT_COLOR
from services.validation import validate_category_name, validate_color
from core.errors import ValidationError


def open_alert_dialog(page: ft.Page, *, title: str, content: ft.Control, actions: list[ft.Control]):
    dlg = ft.AlertDialog(
        modal=True,
        title=ft.Text(title),
        content=content,
        actions=actions,
        actions_alignment=ft.MainAxisAlignment.END,
    )
    page.open(dlg)
    return dlg


def close_alert_dialog(page: ft.Page, dlg: ft.AlertDialog | None):
    if dlg is None:
        return
    page.close(dlg)


def make_confirm_handler(page: ft.Page):
    """Adapter for ConfirmationService: shows a Yes/No dialog."""

    def _handler(title: str, message: str, on_result):
        dlg: ft.AlertDialog | None = None

        def _answer(value: bool):
            close_alert_dialog(page, dlg)
            on_result(value)

        dlg = open_alert_dialog(
            page,
            title=title,
            content=ft.Text(message),
            actions=[
                ft.TextButton("No", on_click=lambda e: _answer(False)),
                ft.FilledButton("Yes", on_click=lambda e: _answer(True)),
            ],
        )

    return _handler


def open_category_dialog(page: ft.Page, *, title: str, name: str = "", color: str = DEFAULT_COLOR, on_save):
    name_tf = ft.TextField(label="Name", value=name, autofocus=True, max_length=50)
    color_tf = ft.TextField(label="Color (#RRGGBB)", value=color, width=160)
    swatch = ft.Container(width=24, height=24, border_radius=12, bgcolor=color)
    dlg: ft.AlertDialog | None = None

    def _on_color_change(e):
        try:
            validate_color(color_tf.value or "")
        except ValidationError:
            return
        swatch.bgcolor = color_tf.value
        swatch.update()

    def _save(e):
        try:
            validate_category_name(name_tf.value or "")
        except ValidationError as exc:
            name_tf.error_text = exc.message
            page.update()
            return
        try:
            validate_color(color_tf.value or "")
        except ValidationError as exc:
            color_tf.error_text = exc.message
            page.update()
            return
        close_alert_dialog(page, dlg)
        on_save(name_tf.value or "", color_tf.value or "")

    color_tf.on_change = _on_color_change
    dlg = open_alert_dialog(
        page,
        title=title,
        content=ft.Column(
            [name_tf, ft.Row([color_tf, swatch], vertical_alignment=ft.CrossAxisAlignment.CENTER)],
            tight=True,
            spacing=12,
        ),
        actions=[
            ft.TextButton("Cancel", on_click=lambda e: close_alert_dialog(page, dlg)),
            ft.FilledButton("Save", on_click=_save),
        ],
    )
    return dlg
