"""Notifier that prints notifications to the terminal."""

from __future__ import annotations

import click

from storefront.application.notifier import Notification, NotificationKind, Notifier

_COLORS = {
    NotificationKind.SUCCESS: "green",
    NotificationKind.ERROR: "red",
    NotificationKind.INFO: "blue",
}


class ConsoleNotifier(Notifier):

    def notify(self, notification: Notification) -> None:
        text = notification.title
        if notification.message:
            text = f"{text}: {notification.message}"
        click.secho(
            text,
            fg=_COLORS[notification.kind],
            err=notification.kind is NotificationKind.ERROR,
        )
