"""Onboarding service: seeding, explicit stage advancement and checklist updates."""

import logging
from datetime import datetime

from pms.core import db_client
from pms.core.config import Constants
from pms.core.errors import InvalidInputError, InvalidTransitionError, LifecycleNotFoundError
from pms.core.events import LifecycleEvent, LifecycleEventType, event_bus
from pms.core.logging import log_with_employee_context, span
from pms.domain import checklist as checklist_ops
from pms.domain.create_models import EmployeeCreate, TaskCreate
from pms.domain.employee import Employee, EmployeeStatus
from pms.domain.onboarding import OnboardingRecord, OnboardingStage
from pms.domain.task import Task
from pms.models.service_models import LifecycleStats, LifecycleSummary
from pms.modules.onboarding import state_machine
from pms.modules.onboarding.templates import build_onboarding_checklist
from pms.services import employee_service, listing_service


logger = logging.getLogger(__name__)


async def _find_record(employee_id: str) -> OnboardingRecord | None:
    record = await db_client.get_first_record(
        collection="onboarding",
        filter_query=f'employee_id = "{db_client.sanitize_param(employee_id)}"',
    )
    return OnboardingRecord.from_record(record) if record else None


async def _save(record: OnboardingRecord) -> OnboardingRecord:
    if record.id is None:
        stored = await db_client.create_record(collection="onboarding", data=record.to_record())
    else:
        stored = await db_client.update_record(collection="onboarding", record_id=record.id, data=record.to_record())
    return OnboardingRecord.from_record(stored)


async def _publish(event_type: LifecycleEventType, record: OnboardingRecord) -> None:
    await event_bus.publish(
        LifecycleEvent(type=event_type, employee_id=record.employee_id, record=record.model_dump(mode="json"))
    )


async def start_onboarding(*, employee_id: str) -> OnboardingRecord:
    """Seed an onboarding record with the template checklist.

    Raises:
        EmployeeNotFoundError: If the employee does not exist
        InvalidTransitionError: If the employee already has an onboarding record
    """
    with span("onboarding_service.start_onboarding"):
        await employee_service.get_employee(employee_id=employee_id)

        if await _find_record(employee_id) is not None:
            msg = f"Employee {employee_id} already has an onboarding record"
            raise InvalidTransitionError(msg)

        record = await _save(
            OnboardingRecord(
                employee_id=employee_id,
                stage=OnboardingStage.NOT_STARTED,
                progress=state_machine.progress_for_stage(OnboardingStage.NOT_STARTED),
                checklist=build_onboarding_checklist(),
            )
        )

        log_with_employee_context(logger, "info", "Onboarding started", employee_id=employee_id)
        await _publish(LifecycleEventType.ONBOARDING_UPDATED, record)
        return record


async def onboard_employee(*, params: EmployeeCreate) -> tuple[Employee, OnboardingRecord]:
    """Create an employee and seed their onboarding checklist."""
    with span("onboarding_service.onboard_employee"):
        employee = await employee_service.create_employee(params=params)
        record = await start_onboarding(employee_id=employee.id)
        return employee, record


async def get_onboarding(*, employee_id: str) -> OnboardingRecord:
    """Fetch the onboarding record of an employee.

    Raises:
        LifecycleNotFoundError: If the employee has no onboarding record
    """
    with span("onboarding_service.get_onboarding"):
        record = await _find_record(employee_id)
        if record is None:
            msg = f"No onboarding record for employee {employee_id}"
            raise LifecycleNotFoundError(msg)
        return record


async def advance_stage(*, employee_id: str, expected_stage: str | None = None) -> OnboardingRecord:
    """Move onboarding to the next stage.

    This is the only way onboarding progresses; task completion never moves the
    stage. Reaching `completed` activates the employee.

    Args:
        employee_id: Employee record id
        expected_stage: Stage the caller believes the record is in; a mismatch
            means the caller's view is stale and the call is rejected

    Raises:
        LifecycleNotFoundError: If the employee has no onboarding record
        InvalidTransitionError: If the stage is terminal or differs from expected_stage
    """
    with span("onboarding_service.advance_stage"):
        record = await get_onboarding(employee_id=employee_id)

        if expected_stage is not None and expected_stage != record.stage:
            msg = f"Onboarding is in stage '{record.stage}', not '{expected_stage}'"
            raise InvalidTransitionError(msg)

        stage = state_machine.next_stage(record.stage)
        update = {"stage": stage, "progress": state_machine.progress_for_stage(stage)}
        if state_machine.is_terminal(stage):
            update["completed_at"] = datetime.now()

        record = await _save(record.model_copy(update=update))

        log_with_employee_context(logger, "info", "Onboarding stage advanced", employee_id=employee_id, stage=stage)

        if record.is_completed:
            await employee_service.set_status(employee_id=employee_id, status=EmployeeStatus.ACTIVE)
            await _publish(LifecycleEventType.ONBOARDING_COMPLETED, record)
        else:
            await _publish(LifecycleEventType.ONBOARDING_UPDATED, record)
        return record


async def set_task_completion(
    *,
    employee_id: str,
    task_name: str,
    completed: bool,
    notes: str | None = None,
    completed_by: str | None = None,
) -> OnboardingRecord:
    """Mark an onboarding task complete or incomplete.

    Only `task_progress` changes; the stage and its progress stay put.

    Raises:
        LifecycleNotFoundError: If the employee has no onboarding record
        TaskNotFoundError: If the checklist has no such task
    """
    with span("onboarding_service.set_task_completion"):
        record = await get_onboarding(employee_id=employee_id)
        checklist = checklist_ops.set_task_completed(
            record.checklist, task_name, completed, completed_by=completed_by, notes=notes
        )
        if checklist == record.checklist:
            return record

        record = await _save(record.model_copy(update={"checklist": checklist, "task_progress": checklist.progress}))

        log_with_employee_context(
            logger, "info", "Onboarding task updated", employee_id=employee_id, task=task_name, completed=completed
        )
        await _publish(LifecycleEventType.ONBOARDING_UPDATED, record)
        return record


async def add_task(*, employee_id: str, params: TaskCreate) -> OnboardingRecord:
    """Append a custom task to an onboarding checklist.

    Raises:
        LifecycleNotFoundError: If the employee has no onboarding record
        InvalidTransitionError: If onboarding is already completed
        InvalidInputError: If the task name is already on the checklist
    """
    with span("onboarding_service.add_task"):
        record = await get_onboarding(employee_id=employee_id)
        if record.is_completed:
            msg = "Cannot add tasks to a completed onboarding"
            raise InvalidTransitionError(msg)

        checklist = checklist_ops.add_task(record.checklist, Task(**params.model_dump()))
        record = await _save(record.model_copy(update={"checklist": checklist, "task_progress": checklist.progress}))

        await _publish(LifecycleEventType.ONBOARDING_UPDATED, record)
        return record


async def list_onboarding(
    *,
    stage: str | None = None,
    department: str | None = None,
    sort: str | None = None,
) -> list[LifecycleSummary]:
    """List onboarding records joined with their employees.

    Raises:
        InvalidInputError: If the stage or sort key is unknown
    """
    with span("onboarding_service.list_onboarding"):
        filter_query = ""
        if stage:
            if stage not in {s.value for s in OnboardingStage}:
                msg = f"Unknown onboarding stage: {stage}"
                raise InvalidInputError(msg)
            filter_query = f'stage = "{stage}"'

        records = await db_client.list_records(
            collection="onboarding", filter_query=filter_query, per_page=Constants.DEFAULT_PER_PAGE_LIMIT
        )
        employees = {e.id: e for e in await employee_service.list_employees(department=department)}

        summaries = []
        for raw in records:
            record = OnboardingRecord.from_record(raw)
            employee = employees.get(record.employee_id)
            if employee is None:
                continue
            summaries.append(
                LifecycleSummary(
                    employee_id=employee.id,
                    employee_code=employee.employee_code,
                    employee_name=employee.full_name,
                    department=employee.department,
                    status=record.stage,
                    progress=record.progress,
                    started_at=record.started_at,
                )
            )

        return listing_service.sort_summaries(summaries, sort)


async def get_onboarding_stats(*, department: str | None = None) -> LifecycleStats:
    """Count onboarding records per stage."""
    with span("onboarding_service.get_onboarding_stats"):
        summaries = await list_onboarding(department=department)
        return listing_service.build_stats(summaries, [stage.value for stage in OnboardingStage])
