"""Unit tests for the offboarding export snapshot."""

from datetime import date, datetime

import pytest

from pms.domain.checklist import Checklist
from pms.domain.employee import Employee
from pms.domain.offboarding import OffboardingRecord, OffboardingStatus, OffboardingType
from pms.domain.task import Task
from pms.modules.offboarding.export import build_export_snapshot, snapshot_to_csv


@pytest.fixture
def employee():
    return Employee(
        id="1000",
        employee_code=" EMP-0042 ",
        first_name="Amina",
        last_name="Okafor",
        email="amina.okafor@example.com",
        department="   ",
        position="Accountant",
    )


@pytest.fixture
def record():
    tasks = (
        Task(
            name="exit_interview",
            category="hr_tasks",
            completed=True,
            completed_at=datetime(2024, 3, 1, 10, 0),
            due_date=date(2024, 3, 15),
        ),
        Task(name="return_laptop", category="equipment_return"),
    )
    return OffboardingRecord(
        id="2000",
        employee_id="1000",
        status=OffboardingStatus.IN_PROGRESS,
        progress=50,
        checklist=Checklist(tasks=tasks),
        type=OffboardingType.RETIREMENT,
        reason="  Retiring after 30 years  ",
        initiated_at=datetime(2024, 2, 20, 9, 30),
        target_exit_date=date(2024, 3, 15),
    )


class TestBuildExportSnapshot:
    def test_sanitizes_employee_fields(self, employee, record):
        snapshot = build_export_snapshot(employee, record)

        assert snapshot["employee"] == {
            "id": "1000",
            "employeeCode": "EMP-0042",
            "name": "Amina Okafor",
            "email": "amina.okafor@example.com",
            "department": None,
            "position": "Accountant",
        }

    def test_offboarding_section(self, employee, record):
        offboarding = build_export_snapshot(employee, record)["offboarding"]

        assert offboarding["initiatedDate"] == "2024-02-20"
        assert offboarding["targetExitDate"] == "2024-03-15"
        assert offboarding["actualExitDate"] is None
        assert offboarding["type"] == "retirement"
        assert offboarding["reason"] == "Retiring after 30 years"
        assert offboarding["status"] == "in_progress"
        assert offboarding["progress"] == 50

    def test_tasks_keep_checklist_order(self, employee, record):
        tasks = build_export_snapshot(employee, record)["offboarding"]["tasks"]

        assert tasks == [
            {"category": "hr_tasks", "name": "exit_interview", "completed": True, "dueDate": "2024-03-15"},
            {"category": "equipment_return", "name": "return_laptop", "completed": False, "dueDate": None},
        ]


def test_snapshot_to_csv(employee, record):
    csv_text = snapshot_to_csv(build_export_snapshot(employee, record))

    assert csv_text.splitlines() == [
        "category,name,completed,dueDate",
        "hr_tasks,exit_interview,True,2024-03-15",
        "equipment_return,return_laptop,False,",
    ]
