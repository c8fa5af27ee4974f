"""
User-facing notifications.

Routes report outcomes through a Notifier passed in as a dependency, so
tests can swap in a recording fake.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict

logger = logging.getLogger(__name__)


@dataclass
class NotificationEvent:
    title: str
    description: str = ""
    variant: str = "default"  # default, success, destructive
    context: Dict[str, Any] = field(default_factory=dict)


class Notifier:
    """Interface: deliver a notification event to the user."""

    def notify(self, event: NotificationEvent) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Writes events to the application log."""

    def notify(self, event: NotificationEvent) -> None:
        level = logging.ERROR if event.variant == "destructive" else logging.INFO
        logger.log(level, "%s: %s %s", event.title, event.description, event.context or "")
