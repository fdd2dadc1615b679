"""
User-facing notifications raised by workbook operations.

Operations report to a Notifier instead of drawing any UI themselves; the HTTP
layer hands the collected notifications back to the admin front end.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from markupsafe import Markup, escape

from core.logger import logger


@dataclass
class Notification:
    kind: str
    message: str
    title: Optional[str] = None
    timeout_seconds: Optional[int] = None
    url: Optional[str] = None
    html: Optional[str] = None


class Notifier:
    """Receives toasts, alerts and link dialogs. The base class only logs them."""

    def toast(self, message: str, title: str = '', timeout_seconds: int = 10) -> None:
        logger.info(f"[toast] {title}: {message}")

    def alert(self, message: str) -> None:
        logger.warning(f"[alert] {message}")

    def show_link_dialog(self, title: str, message: str, url: str) -> None:
        logger.info(f"[dialog] {title}: {message} ({url})")


class CollectingNotifier(Notifier):
    """Notifier that keeps every notification for the API response."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def toast(self, message: str, title: str = '', timeout_seconds: int = 10) -> None:
        super().toast(message, title, timeout_seconds)
        self.notifications.append(
            Notification(kind='toast', message=message, title=title, timeout_seconds=timeout_seconds)
        )

    def alert(self, message: str) -> None:
        super().alert(message)
        self.notifications.append(Notification(kind='alert', message=message))

    def show_link_dialog(self, title: str, message: str, url: str) -> None:
        super().show_link_dialog(title, message, url)
        self.notifications.append(
            Notification(kind='dialog', message=message, title=title, url=url, html=link_dialog_html(message, url))
        )

    def as_dicts(self) -> List[Dict[str, Any]]:
        return [
            {key: value for key, value in asdict(n).items() if value is not None}
            for n in self.notifications
        ]


def link_dialog_html(message: str, url: str) -> str:
    """HTML body of the dialog pointing the user at a newly created file."""
    return str(Markup(
        '<p>{}</p>\n<p><a href="{}" target="_blank">Click here to open the spreadsheet</a></p>'
    ).format(message, escape(url)))
