"""Unit tests for the offboarding service."""

from datetime import date, timedelta

import pytest

from pms.core.errors import (
    InvalidInputError,
    InvalidTransitionError,
    LifecycleNotFoundError,
    TaskNotFoundError,
)
from pms.core.events import LifecycleEventType, event_bus
from pms.domain.create_models import TaskCreate
from pms.domain.employee import EmployeeStatus
from pms.domain.offboarding import OffboardingStatus
from pms.modules.offboarding import service as offboarding_service
from pms.modules.offboarding.templates import OFFBOARDING_TASKS
from pms.modules.onboarding import service as onboarding_service
from pms.services import employee_service


ALL_TASKS = [name for entries in OFFBOARDING_TASKS.values() for name, _ in entries]


class TestInitiateOffboarding:
    async def test_seeds_template_checklist(self, onboarded_employee, offboarding_params):
        record = await offboarding_service.initiate_offboarding(
            employee_id=onboarded_employee.id, params=offboarding_params
        )

        assert record.status == OffboardingStatus.PENDING_EXIT
        assert record.progress == 0
        assert [task.name for task in record.checklist.tasks] == ALL_TASKS
        assert all(task.due_date == offboarding_params.target_exit_date for task in record.checklist.tasks)
        assert record.reason == "Relocating abroad"
        assert record.initiated_by == "hr.admin"
        employee = await employee_service.get_employee(employee_id=onboarded_employee.id)
        assert employee.status == EmployeeStatus.OFFBOARDING

    async def test_initiating_twice_fails(self, offboarding_employee, offboarding_params):
        with pytest.raises(InvalidTransitionError, match="already has an offboarding record"):
            await offboarding_service.initiate_offboarding(employee_id=offboarding_employee.id, params=offboarding_params)

    async def test_cannot_offboard_during_onboarding(self, patched_db, employee_params, offboarding_params):
        employee, _ = await onboarding_service.onboard_employee(params=employee_params)
        await onboarding_service.advance_stage(employee_id=employee.id)

        with pytest.raises(InvalidTransitionError, match="still onboarding"):
            await offboarding_service.initiate_offboarding(employee_id=employee.id, params=offboarding_params)
        assert patched_db.records("offboarding") == []

    async def test_past_exit_date_is_rejected(self, onboarded_employee, offboarding_params):
        params = offboarding_params.model_copy(update={"target_exit_date": date.today() - timedelta(days=1)})

        with pytest.raises(InvalidInputError, match="past"):
            await offboarding_service.initiate_offboarding(employee_id=onboarded_employee.id, params=params)

    async def test_publishes_initiated_event(self, onboarded_employee, offboarding_params):
        events = []
        event_bus.subscribe(events.append, LifecycleEventType.OFFBOARDING_INITIATED)

        await offboarding_service.initiate_offboarding(employee_id=onboarded_employee.id, params=offboarding_params)

        assert [e.employee_id for e in events] == [onboarded_employee.id]
        assert events[0].record["status"] == "pending_exit"


class TestCompleteTask:
    async def test_partial_completion_is_in_progress(self, offboarding_employee):
        update = await offboarding_service.complete_task(employee_id=offboarding_employee.id, task_name="exit_interview")

        assert update.record.status == OffboardingStatus.IN_PROGRESS
        assert update.record.progress == 17
        assert update.orchestration is None
        stored = await offboarding_service.get_offboarding(employee_id=offboarding_employee.id)
        assert stored.checklist.get_task("exit_interview").completed is True

    async def test_undo_returns_to_pending(self, offboarding_employee):
        await offboarding_service.complete_task(employee_id=offboarding_employee.id, task_name="exit_interview")

        update = await offboarding_service.complete_task(
            employee_id=offboarding_employee.id, task_name="exit_interview", completed=False
        )

        assert update.record.status == OffboardingStatus.PENDING_EXIT
        assert update.record.checklist.get_task("exit_interview").completed_at is None

    async def test_unknown_task(self, offboarding_employee):
        with pytest.raises(TaskNotFoundError):
            await offboarding_service.complete_task(employee_id=offboarding_employee.id, task_name="farewell_party")

    async def test_no_record(self, onboarded_employee):
        with pytest.raises(LifecycleNotFoundError):
            await offboarding_service.complete_task(employee_id=onboarded_employee.id, task_name="exit_interview")

    async def test_last_task_runs_final_offboarding(self, offboarding_employee):
        for task in ALL_TASKS[:-1]:
            update = await offboarding_service.complete_task(employee_id=offboarding_employee.id, task_name=task)
            assert update.orchestration is None

        update = await offboarding_service.complete_task(employee_id=offboarding_employee.id, task_name=ALL_TASKS[-1])

        assert update.record.status == OffboardingStatus.COMPLETED
        assert update.orchestration is not None
        assert update.orchestration.success is True
        assert update.record.actual_exit_date == date.today()
        employee = await employee_service.get_employee(employee_id=offboarding_employee.id)
        assert employee.status == EmployeeStatus.ARCHIVED
        assert employee.on_payroll is False

    async def test_completed_record_rejects_task_changes(self, offboarding_employee):
        for task in ALL_TASKS:
            await offboarding_service.complete_task(employee_id=offboarding_employee.id, task_name=task)

        with pytest.raises(InvalidTransitionError, match="already completed"):
            await offboarding_service.complete_task(
                employee_id=offboarding_employee.id, task_name=ALL_TASKS[0], completed=False
            )


class TestAddTask:
    async def test_custom_task_defaults_due_date_to_exit_date(self, offboarding_employee, offboarding_params):
        record = await offboarding_service.add_task(
            employee_id=offboarding_employee.id,
            params=TaskCreate(name="return_parking_permit", category="equipment_return"),
        )

        task = record.checklist.get_task("return_parking_permit")
        assert task.due_date == offboarding_params.target_exit_date
        assert record.checklist.total_count == len(ALL_TASKS) + 1

    async def test_rejected_once_completed(self, offboarding_employee):
        for task in ALL_TASKS:
            await offboarding_service.complete_task(employee_id=offboarding_employee.id, task_name=task)

        with pytest.raises(InvalidTransitionError):
            await offboarding_service.add_task(employee_id=offboarding_employee.id, params=TaskCreate(name="extra"))


class TestCancelOffboarding:
    async def test_cancel_restores_active_employee(self, offboarding_employee, offboarding_params):
        await offboarding_service.cancel_offboarding(employee_id=offboarding_employee.id)

        employee = await employee_service.get_employee(employee_id=offboarding_employee.id)
        assert employee.status == EmployeeStatus.ACTIVE
        with pytest.raises(LifecycleNotFoundError):
            await offboarding_service.get_offboarding(employee_id=offboarding_employee.id)

        # A cancelled offboarding can be started again
        record = await offboarding_service.initiate_offboarding(
            employee_id=offboarding_employee.id, params=offboarding_params
        )
        assert record.status == OffboardingStatus.PENDING_EXIT

    async def test_cannot_cancel_completed(self, offboarding_employee):
        for task in ALL_TASKS:
            await offboarding_service.complete_task(employee_id=offboarding_employee.id, task_name=task)

        with pytest.raises(InvalidTransitionError):
            await offboarding_service.cancel_offboarding(employee_id=offboarding_employee.id)


class TestFinalizeOffboarding:
    async def test_requires_complete_checklist(self, offboarding_employee):
        with pytest.raises(InvalidTransitionError, match="not complete"):
            await offboarding_service.finalize_offboarding(employee_id=offboarding_employee.id)


class TestListing:
    async def test_list_and_stats(self, offboarding_employee):
        await offboarding_service.complete_task(employee_id=offboarding_employee.id, task_name="exit_interview")

        in_progress = await offboarding_service.list_offboarding(status="in_progress")
        pending = await offboarding_service.list_offboarding(status="pending_exit")
        stats = await offboarding_service.get_offboarding_stats()

        assert [s.employee_id for s in in_progress] == [offboarding_employee.id]
        assert in_progress[0].employee_name == "Amina Okafor"
        assert pending == []
        assert {row.status: row.count for row in stats.by_status} == {
            "pending_exit": 0,
            "in_progress": 1,
            "completed": 0,
        }
        assert stats.average_progress == 17.0

    async def test_department_filter(self, offboarding_employee):
        assert await offboarding_service.list_offboarding(department="Sales") == []
        assert len(await offboarding_service.list_offboarding(department="Finance")) == 1

    async def test_unknown_status(self, patched_db):
        with pytest.raises(InvalidInputError):
            await offboarding_service.list_offboarding(status="done")


async def test_export_snapshot(offboarding_employee):
    snapshot = await offboarding_service.get_export_snapshot(employee_id=offboarding_employee.id)

    assert snapshot["employee"]["name"] == "Amina Okafor"
    assert snapshot["offboarding"]["status"] == "pending_exit"
    assert len(snapshot["offboarding"]["tasks"]) == len(ALL_TASKS)
    assert "generatedAt" in snapshot
