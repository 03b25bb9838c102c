"""User-facing notifications emitted by the core.

The core never renders anything itself. It hands ``Notification`` objects
to a caller-supplied notifier (a toast layer, the CLI, a test spy).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from levelist.core.logging import get_logger

logger = get_logger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A transient, non-blocking message for the user.

    Attributes:
        level: Severity used by the presentation layer.
        title: Short headline.
        message: One human-readable sentence.
        retryable: Whether the failed action will be retried or can be retried.
    """

    level: NotificationLevel
    title: str
    message: str
    retryable: bool = False


Notifier = Callable[[Notification], None]


def log_notifier(notification: Notification) -> None:
    """Default notifier: writes the notification to the log."""
    log = logger.error if notification.level is NotificationLevel.ERROR else logger.info
    log(
        "Notification",
        severity=notification.level.value,
        title=notification.title,
        detail=notification.message,
        retryable=notification.retryable,
    )


def deliver(notifier: Notifier | None, notification: Notification) -> None:
    """Send a notification, isolating the caller from notifier failures."""
    try:
        (notifier or log_notifier)(notification)
    except Exception:
        logger.exception("Notifier failed", title=notification.title)
