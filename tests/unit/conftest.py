"""Pytest configuration and fixtures for unit tests."""

from datetime import date, timedelta

import pytest

from pms.core.events import event_bus
from pms.domain.create_models import EmployeeCreate, OffboardingCreate
from pms.domain.offboarding import OffboardingType
from pms.modules.offboarding import service as offboarding_service
from pms.modules.onboarding import service as onboarding_service
from pms.modules.onboarding.state_machine import STAGE_ORDER
from pms.services import notification_service
from tests.unit.mocks import InMemoryDBClient


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def patched_db(monkeypatch, in_memory_db):
    """Patches pms.core.db_client functions to use InMemoryDBClient."""
    monkeypatch.setattr("pms.core.db_client.create_record", in_memory_db.create_record)
    monkeypatch.setattr("pms.core.db_client.get_record", in_memory_db.get_record)
    monkeypatch.setattr("pms.core.db_client.update_record", in_memory_db.update_record)
    monkeypatch.setattr("pms.core.db_client.delete_record", in_memory_db.delete_record)
    monkeypatch.setattr("pms.core.db_client.list_records", in_memory_db.list_records)
    monkeypatch.setattr("pms.core.db_client.get_first_record", in_memory_db.get_first_record)
    return in_memory_db


@pytest.fixture(autouse=True)
def clean_subscribers(monkeypatch):
    """Isolate event bus subscriptions and notification listeners per test."""
    event_bus.clear()
    monkeypatch.setattr(notification_service, "_listeners", [])
    yield
    event_bus.clear()


@pytest.fixture
def employee_params():
    """Returns a complete employee payload."""
    return EmployeeCreate(
        employee_code="EMP-0042",
        first_name="Amina",
        last_name="Okafor",
        email="amina.okafor@example.com",
        department="Finance",
        position="Accountant",
        date_joined=date(2019, 3, 1),
        basic_salary=3000.0,
        monthly_allowances=500.0,
        monthly_deductions=200.0,
        unused_leave_days=11,
    )


@pytest.fixture
def offboarding_params():
    """Returns an offboarding request exiting in two weeks."""
    return OffboardingCreate(
        type=OffboardingType.VOLUNTARY_RESIGNATION,
        reason="Relocating abroad",
        target_exit_date=date.today() + timedelta(days=14),
        notes="Handover to Ben",
        initiated_by="hr.admin",
    )


@pytest.fixture
async def onboarded_employee(patched_db, employee_params):
    """An employee whose onboarding has reached the completed stage."""
    employee, _ = await onboarding_service.onboard_employee(params=employee_params)
    for _ in STAGE_ORDER[1:]:
        await onboarding_service.advance_stage(employee_id=employee.id)
    return employee


@pytest.fixture
async def offboarding_employee(onboarded_employee, offboarding_params):
    """An active employee with a freshly initiated offboarding."""
    await offboarding_service.initiate_offboarding(employee_id=onboarded_employee.id, params=offboarding_params)
    return onboarded_employee
