"""Notification port: the transient messages a user sees after an action.

The cart core only decides *what* to tell the user; how it is shown
(toast, console line) belongs to infrastructure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from bs4 import BeautifulSoup

UNKNOWN_ERROR = "Unknown error occurred"


def clean_error_message(message: str | None) -> str:
    """Decode HTML entities and strip tags from a backend error message.

    Commerce backends return messages like
    ``Coupon &quot;X&quot; does not exist!`` or wrap amounts in ``<span>``.
    """
    if not message:
        return UNKNOWN_ERROR
    text = BeautifulSoup(message, "html.parser").get_text()
    return text.strip() or UNKNOWN_ERROR


class NotificationKind(Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    title: str
    message: str = ""


class Notifier(ABC):

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Show a transient notification."""

    def success(self, title: str, message: str = "") -> None:
        self.notify(Notification(NotificationKind.SUCCESS, title, message))

    def error(self, title: str, message: str = "") -> None:
        """Gateway messages arrive already cleaned; they are shown as is."""
        self.notify(Notification(NotificationKind.ERROR, title, message or UNKNOWN_ERROR))

    def info(self, title: str, message: str = "") -> None:
        self.notify(Notification(NotificationKind.INFO, title, message))
