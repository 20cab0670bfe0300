# taskdesk/services/confirmation.py
from __future__ import annotations

from typing import Callable, Optional

# handler(title, message, on_result)
ConfirmHandler = Callable[[str, str, Callable[[bool], None]], None]


class ConfirmationService:
    """Routes yes/no questions to whatever UI installed a handler.

    Without a handler every question is answered "no", so nothing
    destructive happens in headless use.
    """

    def __init__(self, handler: Optional[ConfirmHandler] = None):
        self.handler = handler

    def ask(self, title: str, message: str, on_result: Callable[[bool], None]) -> None:
        if self.handler is None:
            on_result(False)
            return
        self.handler(title, message, on_result)


def always(answer: bool) -> ConfirmHandler:
    def _handler(title: str, message: str, on_result: Callable[[bool], None]) -> None:
        on_result(answer)

    return _handler


__all__ = ["ConfirmHandler", "ConfirmationService", "always"]
