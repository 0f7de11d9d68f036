# medintake/services/notification_service.py
"""
Notification sink for user-visible messages.

Fire-and-forget: the workflow core never waits on a sink and never fails
because one did.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, List, Optional

from medintake.models.flow_models import NotificationSeverity

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    title: str
    description: str
    severity: NotificationSeverity = NotificationSeverity.INFO
    session_id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationSink(ABC):

    @abstractmethod
    def notify(
        self,
        title: str,
        description: str,
        severity: NotificationSeverity = NotificationSeverity.INFO,
        session_id: Optional[str] = None
    ) -> None:
        pass


class LoggingNotificationSink(NotificationSink):
    """Logs every notification and keeps a bounded history for the API"""

    def __init__(self, history_size: int = 100):
        self._history: Deque[Notification] = deque(maxlen=history_size)

    def notify(
        self,
        title: str,
        description: str,
        severity: NotificationSeverity = NotificationSeverity.INFO,
        session_id: Optional[str] = None
    ) -> None:
        notification = Notification(
            title=title,
            description=description,
            severity=NotificationSeverity(severity),
            session_id=session_id
        )
        self._history.append(notification)

        level = logging.WARNING if notification.severity == NotificationSeverity.DESTRUCTIVE else logging.INFO
        logger.log(level, f"[{notification.severity.value}] {title}: {description}")

    def history(self, session_id: Optional[str] = None) -> List[Notification]:
        if session_id is None:
            return list(self._history)
        return [n for n in self._history if n.session_id == session_id]

    def clear(self) -> None:
        self._history.clear()


def send_notification(
    sink: Optional[NotificationSink],
    title: str,
    description: str,
    severity: NotificationSeverity = NotificationSeverity.INFO,
    session_id: Optional[str] = None
) -> None:
    """Deliver to a sink without letting a sink failure reach the caller"""
    if sink is None:
        return
    try:
        sink.notify(title, description, severity, session_id)
    except Exception as e:
        logger.warning(f"Notification sink failed for '{title}': {e}")
