"""In-process publish/subscribe bus for lifecycle changes.

Components that need to react to a record changing (the client-side store, the
notification fan-out) subscribe explicitly; publishers never reach for a global
broadcast channel.
"""

import inspect
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


class LifecycleEventType(StrEnum):
    """Events published by the lifecycle services."""

    ONBOARDING_UPDATED = "onboarding.updated"
    ONBOARDING_COMPLETED = "onboarding.completed"
    OFFBOARDING_INITIATED = "offboarding.initiated"
    OFFBOARDING_UPDATED = "offboarding.updated"
    OFFBOARDING_COMPLETED = "offboarding.completed"
    OFFBOARDING_FINALIZED = "offboarding.finalized"
    OFFBOARDING_CANCELLED = "offboarding.cancelled"


class LifecycleEvent(BaseModel):
    """A change to one employee's lifecycle record."""

    type: LifecycleEventType
    employee_id: str
    record: dict[str, Any] | None = Field(default=None, description="Record state after the change")
    occurred_at: datetime = Field(default_factory=datetime.now)


EventHandler = Callable[[LifecycleEvent], Awaitable[None] | None]


class EventBus:
    """Dispatches lifecycle events to handlers subscribed by event type."""

    def __init__(self) -> None:
        self._handlers: dict[LifecycleEventType | None, list[EventHandler]] = defaultdict(list)

    def subscribe(self, handler: EventHandler, event_type: LifecycleEventType | None = None) -> Callable[[], None]:
        """Register a handler for one event type, or for every event when event_type is None.

        Returns:
            A callable that removes the subscription
        """
        self._handlers[event_type].append(handler)
        logger.debug("Handler subscribed", extra={"event_type": event_type or "*"})

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return unsubscribe

    async def publish(self, event: LifecycleEvent) -> None:
        """Deliver an event to its type's handlers, then to catch-all handlers.

        A failing handler is logged and does not prevent delivery to the others.
        """
        handlers = [*self._handlers[event.type], *self._handlers[None]]
        if not handlers:
            logger.debug("Event published with no handlers", extra={"event_type": event.type})
            return

        for handler in handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "Event handler failed",
                    extra={"event_type": event.type, "employee_id": event.employee_id},
                )

    def clear(self) -> None:
        """Drop every subscription."""
        self._handlers.clear()


# Global bus instance shared by the services
event_bus = EventBus()
