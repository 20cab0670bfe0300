import flet as ft

TEXT_ACCEPTS_DECORATION = "decoration" in ft.Text.__init__.__code__.co_varnames


def strike_text(text: str, *, strike: bool = False, tooltip: str | None = None):
    """Text that is struck through when ``strike`` is set (completed tasks)."""
    decoration = ft.TextDecoration.LINE_THROUGH if strike else None
    if TEXT_ACCEPTS_DECORATION:
        t = ft.Text(text, tooltip=tooltip)
        if decoration is not None:
            t.decoration = decoration
        return t
    return ft.Text(text, tooltip=tooltip, style=ft.TextStyle(decoration=decoration))
