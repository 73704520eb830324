"""
Toast notifications.

Notifications are queued in the session and shown with ``st.toast`` when
the queue is flushed, so a message raised right before ``st.rerun()`` is
still displayed on the next run.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import streamlit as st

from ...logging_config import get_logger

logger = get_logger(__name__)

QUEUE_KEY = "pending_notifications"


class NotificationVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


VARIANT_ICONS = {
    NotificationVariant.DEFAULT: "✅",
    NotificationVariant.DESTRUCTIVE: "🚨",
}


@dataclass(frozen=True)
class Notification:
    title: str
    description: str = ""
    variant: NotificationVariant = NotificationVariant.DEFAULT

    @property
    def is_destructive(self) -> bool:
        return self.variant == NotificationVariant.DESTRUCTIVE

    def as_markdown(self) -> str:
        if not self.description:
            return f"**{self.title}**"
        return f"**{self.title}**\n\n{self.description}"


def success(title: str, description: str = "") -> Notification:
    return Notification(title, description)


def failure(title: str, description: str = "") -> Notification:
    return Notification(title, description, NotificationVariant.DESTRUCTIVE)


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


class StreamlitNotifier:
    """Fire-and-forget notification sink backed by ``st.toast``."""

    def notify(self, notification: Notification) -> None:
        logger.info(
            "notification_queued",
            title=notification.title,
            variant=notification.variant.value,
        )
        st.session_state.setdefault(QUEUE_KEY, []).append(notification)

    def pending(self) -> list[Notification]:
        return list(st.session_state.get(QUEUE_KEY, []))

    def flush(self) -> int:
        """
        Show and drop every queued notification.

        Returns:
            int: Number of notifications shown
        """
        queued: list[Notification] = st.session_state.pop(QUEUE_KEY, [])
        for notification in queued:
            st.toast(notification.as_markdown(), icon=VARIANT_ICONS[notification.variant])
        return len(queued)


def get_notifier() -> StreamlitNotifier:
    return StreamlitNotifier()
