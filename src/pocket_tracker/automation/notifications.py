import logging
from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console

logger = logging.getLogger(__name__)


class NotificationSink(ABC):
    """
    Surfaces an alert to the user.

    The automation engine only decides whether and what to notify.
    Delivery is fire-and-forget: the engine never awaits or retries it.
    """

    @abstractmethod
    def notify(self, kind: str, subject: str, message: str) -> None:
        """
        Deliver one notification.

        Args:
            kind: Alert family, e.g. "budget" or "reminder"
            subject: Short title
            message: Body text
        """
        pass


class ConsoleNotificationSink(NotificationSink):
    """Prints notifications to the terminal with rich."""

    STYLES = {
        "budget": "bold yellow",
        "reminder": "bold magenta",
    }

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)

    def notify(self, kind: str, subject: str, message: str) -> None:
        style = self.STYLES.get(kind, "bold cyan")
        self.console.print(f"[{style}]🔔 {subject}[/{style}] {message}")


def deliver(sink: Optional[NotificationSink], kind: str, subject: str, message: str) -> bool:
    """
    Send a notification without letting a sink failure escape.

    The state change being reported on is already committed when this
    runs, so a failing sink is logged and otherwise ignored.

    Returns:
        True if the sink accepted the notification
    """
    if sink is None:
        return False

    try:
        sink.notify(kind, subject, message)
    except Exception:
        logger.exception("Notification sink failed for %s: %s", kind, subject)
        return False

    return True
