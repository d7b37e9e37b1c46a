"""Persistence interface the lifecycle store reads and writes through.

Records cross this boundary as JSON-shaped dicts (the REST payload shape), so
the store behaves the same against the in-process services and the HTTP API.
"""

from enum import StrEnum
from typing import Any, Protocol

from pms.modules.offboarding import service as offboarding_service
from pms.modules.onboarding import service as onboarding_service
from pms.services import document_service, employee_service


class LifecycleKind(StrEnum):
    """Which lifecycle process a record belongs to."""

    ONBOARDING = "onboarding"
    OFFBOARDING = "offboarding"


class LifecycleBackend(Protocol):
    """Operations the lifecycle store needs from the backing service.

    Every method may raise NotFoundError, PermissionDeniedError,
    InvalidInputError or InvalidTransitionError; storage and transport errors
    propagate unchanged.
    """

    async def get_lifecycle(self, employee_id: str, kind: LifecycleKind) -> dict[str, Any]: ...

    async def save_task_completion(
        self,
        employee_id: str,
        kind: LifecycleKind,
        task_name: str,
        completed: bool,
        notes: str | None = None,
    ) -> dict[str, Any]: ...

    async def advance_stage(self, employee_id: str, expected_stage: str | None = None) -> dict[str, Any]: ...

    async def archive_employee(self, employee_id: str) -> dict[str, Any]: ...

    async def remove_from_payroll(self, employee_id: str) -> dict[str, Any]: ...

    async def generate_final_documents(self, employee_id: str) -> list[dict[str, Any]]: ...


class LocalBackend:
    """Backend that calls the lifecycle services in-process."""

    async def get_lifecycle(self, employee_id: str, kind: LifecycleKind) -> dict[str, Any]:
        if kind == LifecycleKind.ONBOARDING:
            record = await onboarding_service.get_onboarding(employee_id=employee_id)
        else:
            record = await offboarding_service.get_offboarding(employee_id=employee_id)
        return record.model_dump(mode="json")

    async def save_task_completion(
        self,
        employee_id: str,
        kind: LifecycleKind,
        task_name: str,
        completed: bool,
        notes: str | None = None,
    ) -> dict[str, Any]:
        if kind == LifecycleKind.ONBOARDING:
            record = await onboarding_service.set_task_completion(
                employee_id=employee_id, task_name=task_name, completed=completed, notes=notes
            )
        else:
            update = await offboarding_service.complete_task(
                employee_id=employee_id, task_name=task_name, completed=completed, notes=notes
            )
            record = update.record
        return record.model_dump(mode="json")

    async def advance_stage(self, employee_id: str, expected_stage: str | None = None) -> dict[str, Any]:
        record = await onboarding_service.advance_stage(employee_id=employee_id, expected_stage=expected_stage)
        return record.model_dump(mode="json")

    async def archive_employee(self, employee_id: str) -> dict[str, Any]:
        employee = await employee_service.archive_employee(employee_id=employee_id)
        return employee.model_dump(mode="json")

    async def remove_from_payroll(self, employee_id: str) -> dict[str, Any]:
        employee = await employee_service.remove_from_payroll(employee_id=employee_id)
        return employee.model_dump(mode="json")

    async def generate_final_documents(self, employee_id: str) -> list[dict[str, Any]]:
        documents = await document_service.generate_final_documents(employee_id=employee_id)
        return [document.model_dump(mode="json") for document in documents]
