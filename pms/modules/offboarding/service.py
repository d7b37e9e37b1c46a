"""Offboarding service: initiation, checklist updates, final offboarding and reporting.

Offboarding is checklist-driven: status and progress are re-derived from the
whole checklist on every change, and the final offboarding steps run once, on
the change that completes the checklist.
"""

import logging
from datetime import date, datetime

from pms.core import db_client
from pms.core.config import Constants
from pms.core.errors import InvalidInputError, InvalidTransitionError, LifecycleNotFoundError
from pms.core.events import LifecycleEvent, LifecycleEventType, event_bus
from pms.core.logging import log_with_employee_context, span
from pms.domain import checklist as checklist_ops
from pms.domain.create_models import OffboardingCreate, TaskCreate
from pms.domain.employee import EmployeeStatus
from pms.domain.offboarding import OffboardingRecord, OffboardingStatus
from pms.domain.onboarding import OnboardingStage
from pms.domain.task import Task
from pms.models.service_models import LifecycleStats, LifecycleSummary, OffboardingUpdate, OrchestrationResult
from pms.modules.offboarding import evaluator, export, orchestrator
from pms.modules.offboarding.templates import build_offboarding_checklist
from pms.services import employee_service, listing_service


logger = logging.getLogger(__name__)


async def _find_record(employee_id: str) -> OffboardingRecord | None:
    record = await db_client.get_first_record(
        collection="offboarding",
        filter_query=f'employee_id = "{db_client.sanitize_param(employee_id)}"',
    )
    return OffboardingRecord.from_record(record) if record else None


async def _save(record: OffboardingRecord) -> OffboardingRecord:
    if record.id is None:
        stored = await db_client.create_record(collection="offboarding", data=record.to_record())
    else:
        stored = await db_client.update_record(collection="offboarding", record_id=record.id, data=record.to_record())
    return OffboardingRecord.from_record(stored)


async def _publish(event_type: LifecycleEventType, employee_id: str, record: OffboardingRecord | None) -> None:
    await event_bus.publish(
        LifecycleEvent(
            type=event_type,
            employee_id=employee_id,
            record=record.model_dump(mode="json") if record else None,
        )
    )


def _reject_if_terminal(record: OffboardingRecord, action: str) -> None:
    if record.is_completed:
        msg = f"Cannot {action}: offboarding is already completed"
        raise InvalidTransitionError(msg)


async def initiate_offboarding(*, employee_id: str, params: OffboardingCreate) -> OffboardingRecord:
    """Start offboarding an employee with the template checklist.

    Raises:
        EmployeeNotFoundError: If the employee does not exist
        InvalidTransitionError: If the employee is archived, still onboarding,
            or already has an offboarding record
    """
    with span("offboarding_service.initiate_offboarding"):
        employee = await employee_service.get_employee(employee_id=employee_id)

        if employee.status == EmployeeStatus.ARCHIVED:
            msg = f"Employee {employee_id} is archived"
            raise InvalidTransitionError(msg)

        onboarding = await db_client.get_first_record(
            collection="onboarding",
            filter_query=f'employee_id = "{db_client.sanitize_param(employee_id)}"',
        )
        if onboarding and onboarding["stage"] != OnboardingStage.COMPLETED:
            msg = f"Employee {employee_id} is still onboarding ({onboarding['stage']})"
            raise InvalidTransitionError(msg)

        if await _find_record(employee_id) is not None:
            msg = f"Employee {employee_id} already has an offboarding record"
            raise InvalidTransitionError(msg)

        if params.target_exit_date < date.today():
            msg = "Target exit date cannot be in the past"
            raise InvalidInputError(msg)

        checklist = build_offboarding_checklist(due_date=params.target_exit_date)
        evaluation = evaluator.evaluate_transition(None, checklist)
        record = await _save(
            OffboardingRecord(
                employee_id=employee_id,
                status=evaluation.status,
                progress=evaluation.progress,
                checklist=checklist,
                type=params.type,
                reason=params.reason,
                notes=params.notes,
                initiated_by=params.initiated_by,
                target_exit_date=params.target_exit_date,
            )
        )
        await employee_service.set_status(employee_id=employee_id, status=EmployeeStatus.OFFBOARDING)

        log_with_employee_context(logger, "info", "Offboarding initiated", employee_id=employee_id, type=params.type)
        await _publish(LifecycleEventType.OFFBOARDING_INITIATED, employee_id, record)
        return record


async def get_offboarding(*, employee_id: str) -> OffboardingRecord:
    """Fetch the offboarding record of an employee.

    Raises:
        LifecycleNotFoundError: If the employee has no offboarding record
    """
    with span("offboarding_service.get_offboarding"):
        record = await _find_record(employee_id)
        if record is None:
            msg = f"No offboarding record for employee {employee_id}"
            raise LifecycleNotFoundError(msg)
        return record


async def complete_task(
    *,
    employee_id: str,
    task_name: str,
    completed: bool = True,
    notes: str | None = None,
    completed_by: str | None = None,
) -> OffboardingUpdate:
    """Mark an offboarding task complete or incomplete.

    The record is persisted with its re-derived status first. If this change
    moved the status into completed, final offboarding runs; a record that was
    already completed never triggers it again.

    Raises:
        LifecycleNotFoundError: If the employee has no offboarding record
        TaskNotFoundError: If the checklist has no such task
        InvalidTransitionError: If offboarding is already completed
    """
    with span("offboarding_service.complete_task"):
        record = await get_offboarding(employee_id=employee_id)
        _reject_if_terminal(record, "update tasks")

        checklist = checklist_ops.set_task_completed(
            record.checklist, task_name, completed, completed_by=completed_by, notes=notes
        )
        if checklist == record.checklist:
            return OffboardingUpdate(record=record)

        evaluation = evaluator.evaluate_transition(record.status, checklist)
        record = await _save(
            record.model_copy(
                update={"checklist": checklist, "status": evaluation.status, "progress": evaluation.progress}
            )
        )

        log_with_employee_context(
            logger,
            "info",
            "Offboarding task updated",
            employee_id=employee_id,
            task=task_name,
            completed=completed,
            progress=evaluation.progress,
        )
        await _publish(LifecycleEventType.OFFBOARDING_UPDATED, employee_id, record)

        if not evaluation.completion_triggered:
            return OffboardingUpdate(record=record)

        await _publish(LifecycleEventType.OFFBOARDING_COMPLETED, employee_id, record)
        record, result = await _run_final_offboarding(record)
        return OffboardingUpdate(record=record, orchestration=result)


async def _run_final_offboarding(record: OffboardingRecord) -> tuple[OffboardingRecord, OrchestrationResult]:
    record, result = await orchestrator.run_final_offboarding(record=record)
    if result.success:
        await _publish(LifecycleEventType.OFFBOARDING_FINALIZED, record.employee_id, record)
    else:
        await _publish(LifecycleEventType.OFFBOARDING_UPDATED, record.employee_id, record)
    return record, result


async def finalize_offboarding(*, employee_id: str) -> OffboardingUpdate:
    """Run final offboarding again for a completed checklist (retry after a failed step).

    Raises:
        LifecycleNotFoundError: If the employee has no offboarding record
        InvalidTransitionError: If the checklist is not complete yet
    """
    with span("offboarding_service.finalize_offboarding"):
        record = await get_offboarding(employee_id=employee_id)
        if not record.is_completed:
            msg = f"Offboarding checklist is not complete ({record.progress}%)"
            raise InvalidTransitionError(msg)

        record, result = await _run_final_offboarding(record)
        return OffboardingUpdate(record=record, orchestration=result)


async def add_task(*, employee_id: str, params: TaskCreate) -> OffboardingRecord:
    """Append a custom task to an offboarding checklist.

    Adding an open task re-derives status and progress (an in-progress record
    can drop back from 100% only while not yet completed).

    Raises:
        LifecycleNotFoundError: If the employee has no offboarding record
        InvalidTransitionError: If offboarding is already completed
        InvalidInputError: If the task name is already on the checklist
    """
    with span("offboarding_service.add_task"):
        record = await get_offboarding(employee_id=employee_id)
        _reject_if_terminal(record, "add tasks")

        task = Task(**params.model_dump(exclude={"due_date"}), due_date=params.due_date or record.target_exit_date)
        checklist = checklist_ops.add_task(record.checklist, task)
        evaluation = evaluator.evaluate_transition(record.status, checklist)
        record = await _save(
            record.model_copy(
                update={"checklist": checklist, "status": evaluation.status, "progress": evaluation.progress}
            )
        )

        await _publish(LifecycleEventType.OFFBOARDING_UPDATED, employee_id, record)
        return record


async def cancel_offboarding(*, employee_id: str) -> None:
    """Cancel an in-flight offboarding; the employee returns to active.

    Raises:
        LifecycleNotFoundError: If the employee has no offboarding record
        InvalidTransitionError: If offboarding is already completed
    """
    with span("offboarding_service.cancel_offboarding"):
        record = await get_offboarding(employee_id=employee_id)
        _reject_if_terminal(record, "cancel")

        await db_client.delete_record(collection="offboarding", record_id=record.id)
        await employee_service.set_status(employee_id=employee_id, status=EmployeeStatus.ACTIVE)

        log_with_employee_context(logger, "info", "Offboarding cancelled", employee_id=employee_id)
        await _publish(LifecycleEventType.OFFBOARDING_CANCELLED, employee_id, None)


async def list_offboarding(
    *,
    status: str | None = None,
    department: str | None = None,
    sort: str | None = None,
) -> list[LifecycleSummary]:
    """List offboarding records joined with their employees.

    Raises:
        InvalidInputError: If the status or sort key is unknown
    """
    with span("offboarding_service.list_offboarding"):
        filter_query = ""
        if status:
            if status not in {s.value for s in OffboardingStatus}:
                msg = f"Unknown offboarding status: {status}"
                raise InvalidInputError(msg)
            filter_query = f'status = "{status}"'

        records = await db_client.list_records(
            collection="offboarding", filter_query=filter_query, per_page=Constants.DEFAULT_PER_PAGE_LIMIT
        )
        employees = {e.id: e for e in await employee_service.list_employees(department=department)}

        summaries = []
        for raw in records:
            record = OffboardingRecord.from_record(raw)
            employee = employees.get(record.employee_id)
            if employee is None:
                continue
            summaries.append(
                LifecycleSummary(
                    employee_id=employee.id,
                    employee_code=employee.employee_code,
                    employee_name=employee.full_name,
                    department=employee.department,
                    status=record.status,
                    progress=record.progress,
                    started_at=record.initiated_at,
                    target_exit_date=record.target_exit_date,
                )
            )

        return listing_service.sort_summaries(summaries, sort)


async def get_offboarding_stats(*, department: str | None = None) -> LifecycleStats:
    """Count offboarding records per status."""
    with span("offboarding_service.get_offboarding_stats"):
        summaries = await list_offboarding(department=department)
        return listing_service.build_stats(summaries, [status.value for status in OffboardingStatus])


async def get_export_snapshot(*, employee_id: str) -> dict:
    """Build the report snapshot of an employee's offboarding.

    Raises:
        EmployeeNotFoundError: If the employee does not exist
        LifecycleNotFoundError: If the employee has no offboarding record
    """
    with span("offboarding_service.get_export_snapshot"):
        employee = await employee_service.get_employee(employee_id=employee_id)
        record = await get_offboarding(employee_id=employee_id)
        snapshot = export.build_export_snapshot(employee, record)
        snapshot["generatedAt"] = datetime.now().isoformat()
        return snapshot
