# ui/app_shell.py
from __future__ import annotations

from typing import Callable

import flet as ft

from core.log import get_logger
from core.priorities import normalize_priority, priority_color, priority_label, priority_options
from core.settings import UI, EXPORT_DIR
from models.task import Task
from services.board import TaskBoard, TaskForm
from services.categories import CategoryService
from services.confirmation import ConfirmationService
from services.exporter import CSV_FILE_NAME, JSON_FILE_NAME, suggested_backup_name
from services.notifications import Notification, NotificationCenter, NotificationType
from services.task_view import FilterStatus, SortOption
from services.tasks import TaskService
from ui.compat import strike_text
from ui.dialogs import make_confirm_handler, open_category_dialog

logger = get_logger("ui")

_NOTE_COLORS = {
    NotificationType.SUCCESS: UI.theme.success,
    NotificationType.ERROR: UI.theme.error,
    NotificationType.WARNING: UI.theme.warning,
    NotificationType.INFO: UI.theme.info,
}

_ALL_CATEGORIES = "all"
_NO_CATEGORY = "none"


class AppShell:
    def __init__(self, page: ft.Page, board: TaskBoard | None = None):
        self.page = page
        self.page.title = UI.app_title
        self.page.horizontal_alignment = ft.CrossAxisAlignment.STRETCH
        self.page.vertical_alignment = ft.MainAxisAlignment.START

        if board is None:
            tasks = TaskService()
            board = TaskBoard(
                tasks,
                CategoryService(),
                notifications=NotificationCenter(),
                confirmation=ConfirmationService(make_confirm_handler(page)),
            )
        self.board = board
        self.board.notifications.subscribe(self._toast)
        self.board.subscribe(self.render)

        # file pickers; the pending callback receives the chosen path
        self._save_cb: Callable[[str], None] | None = None
        self._open_cb: Callable[[str], None] | None = None
        self.save_picker = ft.FilePicker(on_result=self._on_save_result)
        self.open_picker = ft.FilePicker(on_result=self._on_open_result)
        self.page.overlay.extend([self.save_picker, self.open_picker])

        # --- toolbar ---
        self.search_tf = ft.TextField(
            hint_text="Search tasks...",
            prefix_icon=ft.Icons.SEARCH,
            expand=True,
            dense=True,
            on_change=lambda e: self.board.set_search_text(e.control.value),
        )
        self.status_dd = ft.Dropdown(
            label="Status",
            width=150,
            dense=True,
            value=FilterStatus.ALL.label,
            options=[ft.dropdown.Option(s.label) for s in FilterStatus],
            on_change=lambda e: self.board.set_status_filter(e.control.value),
        )
        self.sort_dd = ft.Dropdown(
            label="Sort",
            width=220,
            dense=True,
            value=SortOption.DATE_DESCENDING.label,
            options=[ft.dropdown.Option(o.label) for o in SortOption],
            on_change=lambda e: self.board.set_sort_option(e.control.value),
        )
        self.category_filter_dd = ft.Dropdown(
            label="Category",
            width=170,
            dense=True,
            value=_ALL_CATEGORIES,
            on_change=self._on_category_filter,
        )
        self.count_text = ft.Text(size=12, color=UI.theme.text_subtle)
        self.task_list = ft.ListView(expand=True, spacing=8, padding=ft.padding.only(right=8))

        # --- side panel ---
        self.form_title = ft.Text(weight=ft.FontWeight.W_600, size=16)
        self.title_tf = ft.TextField(label="Title", max_length=200, on_change=self._on_title_change)
        self.description_tf = ft.TextField(
            label="Description",
            multiline=True,
            min_lines=3,
            max_lines=6,
            max_length=1000,
            on_change=self._on_description_change,
        )
        self.priority_dd = ft.Dropdown(
            label="Priority",
            options=[ft.dropdown.Option(key, label) for key, label in priority_options().items()],
            on_change=self._on_priority_change,
        )
        self.category_dd = ft.Dropdown(label="Category", on_change=self._on_form_category_change)
        self.completed_cb = ft.Checkbox(label="Completed", on_change=self._on_completed_change)
        self.primary_btn = ft.FilledButton(on_click=self._on_primary_click)
        self.cancel_btn = ft.TextButton("Cancel", on_click=lambda e: self.board.cancel_edit())
        self.categories_col = ft.Column(spacing=4)

        form_card = ft.Card(
            content=ft.Container(
                padding=16,
                content=ft.Column(
                    [
                        self.form_title,
                        self.title_tf,
                        self.description_tf,
                        self.priority_dd,
                        self.category_dd,
                        self.completed_cb,
                        ft.Row([self.cancel_btn, self.primary_btn], alignment=ft.MainAxisAlignment.END),
                    ],
                    spacing=10,
                ),
            )
        )
        categories_card = ft.Card(
            content=ft.Container(
                padding=16,
                content=ft.Column(
                    [
                        ft.Row(
                            [
                                ft.Text("Categories", weight=ft.FontWeight.W_600, size=16),
                                ft.IconButton(
                                    icon=ft.Icons.ADD,
                                    tooltip="Add category",
                                    on_click=lambda e: self._open_category_editor(None),
                                ),
                            ],
                            alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
                        ),
                        self.categories_col,
                    ],
                    spacing=8,
                ),
            )
        )
        data_card = ft.Card(
            content=ft.Container(
                padding=16,
                content=ft.Column(
                    [
                        ft.Text("Import / Export", weight=ft.FontWeight.W_600, size=16),
                        ft.Row(
                            [
                                ft.OutlinedButton("Export JSON", icon=ft.Icons.DATA_OBJECT, on_click=self._on_export_json),
                                ft.OutlinedButton("Export CSV", icon=ft.Icons.TABLE_VIEW, on_click=self._on_export_csv),
                            ],
                            wrap=True,
                        ),
                        ft.Row(
                            [
                                ft.OutlinedButton("Import JSON", icon=ft.Icons.UPLOAD_FILE, on_click=self._on_import_json),
                                ft.OutlinedButton("Import CSV", icon=ft.Icons.UPLOAD_FILE, on_click=self._on_import_csv),
                            ],
                            wrap=True,
                        ),
                        ft.Row(
                            [
                                ft.OutlinedButton("Backup", icon=ft.Icons.SAVE_ALT, on_click=self._on_backup),
                                ft.OutlinedButton("Restore", icon=ft.Icons.RESTORE, on_click=self._on_restore),
                            ],
                            wrap=True,
                        ),
                    ],
                    spacing=8,
                ),
            )
        )

        side_panel = ft.Container(
            width=UI.side_panel_width,
            padding=12,
            bgcolor=UI.theme.surface_bg,
            content=ft.Column([form_card, categories_card, data_card], scroll=ft.ScrollMode.AUTO, spacing=8),
        )
        main_column = ft.Container(
            expand=True,
            padding=16,
            content=ft.Column(
                [
                    ft.Row([self.search_tf, self.status_dd, self.sort_dd, self.category_filter_dd], spacing=8),
                    self.count_text,
                    self.task_list,
                ],
                expand=True,
                spacing=8,
            ),
        )
        self.root = ft.Row([main_column, ft.VerticalDivider(width=1), side_panel], expand=True, spacing=0)

    # ---------- mount ----------
    def mount(self):
        self.page.controls.clear()
        self.page.add(self.root)
        self.board.load()

    # ---------- render ----------
    def render(self):
        board = self.board
        self.task_list.controls = [self._row_for_task(t) for t in board.displayed]
        total = len(board.view.all_tasks)
        self.count_text.value = f"{len(board.displayed)} of {total} tasks"

        category_options = [ft.dropdown.Option(str(c.id), c.name) for c in board.categories]
        self.category_filter_dd.options = [ft.dropdown.Option(_ALL_CATEGORIES, "All categories")] + category_options
        self.category_filter_dd.value = (
            str(board.view.category_id) if board.view.category_id is not None else _ALL_CATEGORIES
        )
        self.category_dd.options = [ft.dropdown.Option(_NO_CATEGORY, "No category")] + category_options

        self._render_form()
        self._render_categories()
        self.page.update()

    def _current_form(self) -> TaskForm:
        if self.board.is_editing and self.board.edit_form is not None:
            return self.board.edit_form
        return self.board.new_task

    def _render_form(self):
        editing = self.board.is_editing and self.board.edit_form is not None
        form = self._current_form()
        self.form_title.value = "Edit Task" if editing else "New Task"
        self.title_tf.value = form.title
        self.title_tf.error_text = form.title_error or None
        self.description_tf.value = form.description
        self.description_tf.error_text = form.description_error or None
        self.priority_dd.value = str(int(form.priority))
        self.category_dd.value = str(form.category_id) if form.category_id is not None else _NO_CATEGORY
        self.completed_cb.value = form.is_completed
        self.completed_cb.visible = editing
        self.cancel_btn.visible = editing
        self.primary_btn.text = "Save" if editing else "Add Task"
        self.primary_btn.icon = ft.Icons.SAVE if editing else ft.Icons.ADD

    def _render_categories(self):
        rows = []
        for c in self.board.categories:
            rows.append(
                ft.Row(
                    [
                        ft.Container(width=12, height=12, border_radius=6, bgcolor=c.color),
                        ft.Text(c.name, expand=True),
                        ft.IconButton(
                            icon=ft.Icons.EDIT_OUTLINED,
                            tooltip="Edit",
                            on_click=lambda e, cid=c.id: self._open_category_editor(cid),
                        ),
                        ft.IconButton(
                            icon=ft.Icons.DELETE_OUTLINE,
                            tooltip="Delete",
                            on_click=lambda e, cid=c.id: self.board.delete_category(cid),
                        ),
                    ],
                    spacing=8,
                    vertical_alignment=ft.CrossAxisAlignment.CENTER,
                )
            )
        if not rows:
            rows.append(ft.Text("No categories", color=UI.theme.text_subtle))
        self.categories_col.controls = rows

    def _row_for_task(self, t: Task) -> ft.Control:
        selected = t.id == self.board.view.selected_id
        checkbox = ft.Checkbox(
            value=t.is_completed,
            on_change=lambda e, tid=t.id: self.board.toggle_complete(tid),
        )
        title_text = strike_text(t.title, strike=t.is_completed)
        title_text.weight = ft.FontWeight.W_600
        title_text.size = 15
        title_text.max_lines = 2
        title_text.overflow = ft.TextOverflow.ELLIPSIS
        if t.is_completed:
            title_text.color = UI.theme.completed_text

        meta_items: list[ft.Control] = [
            ft.Container(
                content=ft.Text(
                    priority_label(t.priority, short=True),
                    size=12,
                    weight=ft.FontWeight.W_500,
                    color=ft.Colors.WHITE,
                ),
                bgcolor=priority_color(t.priority),
                padding=ft.padding.symmetric(horizontal=10, vertical=4),
                border_radius=999,
            )
        ]
        category = self.board.category_for(t)
        if category is not None:
            meta_items.append(
                ft.Container(
                    content=ft.Text(category.name, size=12, color=ft.Colors.WHITE),
                    bgcolor=category.color,
                    padding=ft.padding.symmetric(horizontal=10, vertical=4),
                    border_radius=999,
                )
            )
        meta_items.append(ft.Text(t.created_at_text, color=ft.Colors.BLUE_GREY_400, size=12))
        if t.completed_at_text:
            meta_items.append(
                ft.Text(f"Done {t.completed_at_text}", color=ft.Colors.BLUE_GREY_400, size=12)
            )

        info = [title_text]
        if t.description:
            info.append(
                ft.Text(t.description, size=13, max_lines=2, overflow=ft.TextOverflow.ELLIPSIS)
            )
        info.append(ft.Row(meta_items, spacing=8, wrap=True))

        actions = ft.Row(
            controls=[
                ft.IconButton(
                    icon=ft.Icons.EDIT_OUTLINED,
                    tooltip="Edit",
                    on_click=lambda e, tid=t.id: self.board.edit_task(tid),
                ),
                ft.IconButton(
                    icon=ft.Icons.DELETE_OUTLINE,
                    tooltip="Delete",
                    on_click=lambda e, tid=t.id: self.board.delete_task(tid),
                ),
            ],
            spacing=4,
        )
        return ft.Container(
            content=ft.Row(
                [checkbox, ft.Column(info, spacing=4, expand=True), actions],
                vertical_alignment=ft.CrossAxisAlignment.CENTER,
            ),
            padding=ft.padding.symmetric(horizontal=12, vertical=10),
            border_radius=12,
            bgcolor=ft.Colors.SURFACE,
            border=ft.border.all(
                2 if selected else 1,
                ft.Colors.PRIMARY if selected else ft.Colors.with_opacity(0.08, ft.Colors.ON_SURFACE),
            ),
            on_click=lambda e, tid=t.id: self.board.select_task(tid),
        )

    # ---------- form events ----------
    def _on_title_change(self, e: ft.ControlEvent):
        form = self._current_form()
        form.set_title(e.control.value)
        self.title_tf.error_text = form.title_error or None
        self.title_tf.update()

    def _on_description_change(self, e: ft.ControlEvent):
        form = self._current_form()
        form.set_description(e.control.value)
        self.description_tf.error_text = form.description_error or None
        self.description_tf.update()

    def _on_priority_change(self, e: ft.ControlEvent):
        if self.board.is_editing and self.board.edit_form is not None:
            self.board.edit_form.priority = normalize_priority(e.control.value)
        else:
            self.board.set_new_priority(e.control.value)

    def _on_form_category_change(self, e: ft.ControlEvent):
        value = e.control.value
        category_id = None if value in (None, _NO_CATEGORY) else int(value)
        if self.board.is_editing and self.board.edit_form is not None:
            self.board.edit_form.category_id = category_id
        else:
            self.board.set_new_category(category_id)

    def _on_completed_change(self, e: ft.ControlEvent):
        if self.board.edit_form is not None:
            self.board.edit_form.is_completed = bool(e.control.value)

    def _on_primary_click(self, e):
        if self.board.is_editing:
            self.board.save_task()
        else:
            self.board.add_task()

    def _on_category_filter(self, e: ft.ControlEvent):
        value = e.control.value
        self.board.set_category_filter(None if value in (None, _ALL_CATEGORIES) else int(value))

    def _open_category_editor(self, category_id: int | None):
        if category_id is None:
            open_category_dialog(self.page, title="New Category", on_save=self.board.add_category)
            return
        category = next((c for c in self.board.categories if c.id == category_id), None)
        if category is None:
            return
        open_category_dialog(
            self.page,
            title="Edit Category",
            name=category.name,
            color=category.color,
            on_save=lambda name, color: self.board.update_category(category_id, name, color),
        )

    # ---------- import / export ----------
    def _ask_save_path(self, file_name: str, extension: str, callback: Callable[[str], None]):
        self._save_cb = callback
        self.save_picker.save_file(
            dialog_title="Save as",
            file_name=file_name,
            initial_directory=str(EXPORT_DIR),
            allowed_extensions=[extension],
        )

    def _ask_open_path(self, extension: str, callback: Callable[[str], None]):
        self._open_cb = callback
        self.open_picker.pick_files(
            dialog_title="Open",
            allow_multiple=False,
            allowed_extensions=[extension],
        )

    def _on_save_result(self, e: ft.FilePickerResultEvent):
        callback, self._save_cb = self._save_cb, None
        if not e.path:
            logger.info("Save dialog cancelled")
            return
        if callback:
            callback(e.path)

    def _on_open_result(self, e: ft.FilePickerResultEvent):
        callback, self._open_cb = self._open_cb, None
        if not e.files:
            logger.info("Open dialog cancelled")
            return
        if callback:
            callback(e.files[0].path)

    def _on_export_json(self, e):
        if not self.board.can_export():
            self.board.notifications.error("No tasks to export.")
            return
        self._ask_save_path(JSON_FILE_NAME, "json", self.board.export_json)

    def _on_export_csv(self, e):
        self._ask_save_path(CSV_FILE_NAME, "csv", self.board.export_csv)

    def _on_backup(self, e):
        self._ask_save_path(suggested_backup_name(), "json", self.board.export_backup)

    def _on_import_json(self, e):
        self._ask_open_path("json", self.board.import_json)

    def _on_import_csv(self, e):
        self._ask_open_path("csv", self.board.import_csv)

    def _on_restore(self, e):
        self._ask_open_path("json", self.board.restore_backup)

    # ---------- notifications ----------
    def _toast(self, note: Notification):
        self.page.open(
            ft.SnackBar(
                ft.Text(note.message, color=ft.Colors.WHITE),
                bgcolor=_NOTE_COLORS.get(note.type, UI.theme.info),
                duration=int(self.board.notifications.ttl_sec * 1000),
            )
        )
