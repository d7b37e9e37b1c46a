"""Client-side lifecycle store with optimistic updates.

A mutation is applied to the cached record right away so views update
immediately, then sent to the backend. On success the store refetches the
authoritative record; on failure it reverts to the last known-good record and
emits an error notification. Mutations report a MutationResult instead of
raising, so the revert path is a single branch.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pms.client.backend import LifecycleBackend, LifecycleKind
from pms.core.errors import InvalidTransitionError, LifecycleError, classify_error_with_response
from pms.core.events import EventBus, LifecycleEvent
from pms.domain import checklist as checklist_ops
from pms.domain.offboarding import OffboardingRecord
from pms.domain.onboarding import OnboardingRecord
from pms.models.service_models import MutationResult
from pms.modules.offboarding import evaluator
from pms.modules.onboarding import state_machine


logger = logging.getLogger(__name__)


Subscriber = Callable[[str, dict[str, Any] | None], None]
Notifier = Callable[..., Awaitable[Any]]


class LifecycleStore:
    """Cache of lifecycle records of one kind, keyed by employee id.

    Args:
        backend: Where records are read from and written to
        kind: Onboarding or offboarding
        bus: Event bus to follow for changes made elsewhere
        notify: Async callable receiving level/message/employee_id for failed mutations
    """

    def __init__(
        self,
        backend: LifecycleBackend,
        kind: LifecycleKind,
        *,
        bus: EventBus | None = None,
        notify: Notifier | None = None,
    ) -> None:
        self._backend = backend
        self._kind = kind
        self._notify = notify
        self._records: dict[str, dict[str, Any] | None] = {}
        self._subscribers: list[Subscriber] = []
        self._unsubscribe_bus = bus.subscribe(self._on_event) if bus else None

    def get(self, employee_id: str) -> dict[str, Any] | None:
        """Return the cached record, or None if not loaded."""
        return self._records.get(employee_id)

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Call `subscriber(employee_id, record)` after every change to a cached record."""
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def close(self) -> None:
        """Stop following the event bus."""
        if self._unsubscribe_bus:
            self._unsubscribe_bus()
            self._unsubscribe_bus = None

    def _set(self, employee_id: str, record: dict[str, Any] | None) -> None:
        if employee_id in self._records and self._records[employee_id] == record:
            return
        self._records[employee_id] = record
        for subscriber in list(self._subscribers):
            subscriber(employee_id, record)

    def _on_event(self, event: LifecycleEvent) -> None:
        if not event.type.startswith(f"{self._kind}.") or event.employee_id not in self._records:
            return
        self._set(event.employee_id, event.record)

    async def load(self, employee_id: str) -> MutationResult:
        """Fetch a record from the backend into the cache."""
        try:
            record = await self._backend.get_lifecycle(employee_id, self._kind)
        except Exception as e:
            return self._failure(e, self.get(employee_id))
        self._set(employee_id, record)
        return MutationResult(success=True, record=record)

    async def toggle_task(
        self, employee_id: str, task_name: str, completed: bool, notes: str | None = None
    ) -> MutationResult:
        """Optimistically mark a task complete or incomplete, then persist it."""
        previous = self.get(employee_id)
        if previous is None:
            loaded = await self.load(employee_id)
            if not loaded.success:
                return loaded
            previous = loaded.record

        try:
            optimistic = self._apply_toggle(previous, task_name, completed, notes)
        except LifecycleError as e:
            return self._failure(e, previous)

        self._set(employee_id, optimistic)
        try:
            saved = await self._backend.save_task_completion(employee_id, self._kind, task_name, completed, notes)
        except Exception as e:
            return await self._revert(employee_id, previous, e)

        return await self._refetch(employee_id, saved)

    async def advance_stage(self, employee_id: str) -> MutationResult:
        """Optimistically move an onboarding record to its next stage, then persist it."""
        previous = self.get(employee_id)
        if previous is None:
            loaded = await self.load(employee_id)
            if not loaded.success:
                return loaded
            previous = loaded.record

        try:
            if self._kind != LifecycleKind.ONBOARDING:
                msg = "Only onboarding records move through stages"
                raise InvalidTransitionError(msg)
            stage = state_machine.next_stage(previous["stage"])
        except LifecycleError as e:
            return self._failure(e, previous)

        self._set(employee_id, {**previous, "stage": stage.value, "progress": state_machine.progress_for_stage(stage)})
        try:
            saved = await self._backend.advance_stage(employee_id, previous["stage"])
        except Exception as e:
            return await self._revert(employee_id, previous, e)

        return await self._refetch(employee_id, saved)

    def _apply_toggle(
        self, record: dict[str, Any], task_name: str, completed: bool, notes: str | None
    ) -> dict[str, Any]:
        """Compute the record as it will look after the toggle, without I/O."""
        if self._kind == LifecycleKind.ONBOARDING:
            onboarding = OnboardingRecord.model_validate(record)
            checklist = checklist_ops.set_task_completed(onboarding.checklist, task_name, completed, notes=notes)
            updated = onboarding.model_copy(update={"checklist": checklist, "task_progress": checklist.progress})
            return updated.model_dump(mode="json")

        offboarding = OffboardingRecord.model_validate(record)
        if offboarding.is_completed:
            msg = "Offboarding is already completed"
            raise InvalidTransitionError(msg)
        checklist = checklist_ops.set_task_completed(offboarding.checklist, task_name, completed, notes=notes)
        evaluation = evaluator.evaluate_transition(offboarding.status, checklist)
        updated = offboarding.model_copy(
            update={"checklist": checklist, "status": evaluation.status, "progress": evaluation.progress}
        )
        return updated.model_dump(mode="json")

    async def _refetch(self, employee_id: str, saved: dict[str, Any]) -> MutationResult:
        try:
            record = await self._backend.get_lifecycle(employee_id, self._kind)
        except Exception as e:
            logger.warning("Refetch after save failed for %s: %s", employee_id, e)
            record = saved
        self._set(employee_id, record)
        return MutationResult(success=True, record=record)

    async def _revert(self, employee_id: str, previous: dict[str, Any], error: Exception) -> MutationResult:
        self._set(employee_id, previous)
        result = self._failure(error, previous)
        if self._notify is not None:
            await self._notify(level="error", message=result.error, employee_id=employee_id)
        return result

    def _failure(self, error: Exception, record: dict[str, Any] | None) -> MutationResult:
        response = classify_error_with_response(error)
        if isinstance(error, LifecycleError):
            logger.info("Lifecycle mutation rejected: %s", error)
        else:
            logger.error("Lifecycle mutation failed: %s", error, exc_info=error)
        return MutationResult(success=False, record=record, error=response.message, error_code=response.code)
