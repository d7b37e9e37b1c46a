"""Operator notifications ("toasts") emitted by lifecycle operations.

Notifications are logged, persisted to the notifications collection and handed
to any registered listeners (e.g. a UI push channel).
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Literal

from pms.core import db_client
from pms.core.config import settings
from pms.core.logging import span
from pms.models.service_models import NotificationResult


logger = logging.getLogger(__name__)


NotificationLevel = Literal["success", "info", "warning", "error"]
NotificationListener = Callable[[NotificationResult], Awaitable[None] | None]

_LOG_LEVELS: dict[str, int] = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_listeners: list[NotificationListener] = []


def add_listener(listener: NotificationListener) -> Callable[[], None]:
    """Register a listener called for every notification; returns a remover."""
    _listeners.append(listener)

    def remove() -> None:
        if listener in _listeners:
            _listeners.remove(listener)

    return remove


async def notify(
    *,
    level: NotificationLevel,
    message: str,
    employee_id: str | None = None,
    link: str | None = None,
) -> NotificationResult:
    """Emit a notification to the operator.

    Storage failures are logged and reported through `stored=False`; they never
    fail the operation that asked for the notification.
    """
    with span("notification_service.notify"):
        logger.log(_LOG_LEVELS[level], "Notification: %s", message, extra={"employee_id": employee_id})

        result = NotificationResult(level=level, message=message, employee_id=employee_id, link=link)
        if not settings.enable_notifications:
            return result

        try:
            await db_client.create_record(
                collection="notifications",
                data={"level": level, "message": message, "employee_id": employee_id, "link": link, "read": False},
            )
            result.stored = True
        except db_client.DatabaseError as e:
            logger.warning("Failed to store notification: %s", e)

        for listener in list(_listeners):
            try:
                outcome = listener(result)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception("Notification listener failed")

        return result


async def list_notifications(*, employee_id: str | None = None) -> list[dict]:
    """Return stored notifications, newest first."""
    filter_query = f'employee_id = "{db_client.sanitize_param(employee_id)}"' if employee_id else ""
    return await db_client.list_records(
        collection="notifications",
        filter_query=filter_query,
        sort="-id",
    )
