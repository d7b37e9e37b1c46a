"""Employee service: record lookup plus the archive and payroll-removal operations."""

import logging
from datetime import datetime
from typing import Any

from pms.core import db_client
from pms.core.config import Constants
from pms.core.errors import EmployeeNotFoundError, InvalidInputError
from pms.core.logging import span
from pms.domain.create_models import EmployeeCreate
from pms.domain.employee import Employee, EmployeeStatus


logger = logging.getLogger(__name__)


def _to_employee(record: dict[str, Any]) -> Employee:
    return Employee.model_validate(record)


async def create_employee(*, params: EmployeeCreate) -> Employee:
    """Create an employee in the onboarding status, enrolled on payroll.

    Raises:
        InvalidInputError: If the employee code is already taken
    """
    with span("employee_service.create_employee"):
        existing = await db_client.get_first_record(
            collection="employees",
            filter_query=f'employee_code = "{db_client.sanitize_param(params.employee_code)}"',
        )
        if existing:
            msg = f"Employee code already in use: {params.employee_code}"
            raise InvalidInputError(msg)

        data = params.model_dump(mode="json")
        data.update({"status": EmployeeStatus.ONBOARDING.value, "on_payroll": True})
        record = await db_client.create_record(collection="employees", data=data)

        logger.info("Created employee %s (%s)", record["id"], params.employee_code)
        return _to_employee(record)


async def get_employee(*, employee_id: str) -> Employee:
    """Fetch an employee by record id.

    Raises:
        EmployeeNotFoundError: If the employee does not exist
    """
    with span("employee_service.get_employee"):
        try:
            record = await db_client.get_record(collection="employees", record_id=employee_id)
        except KeyError as e:
            msg = f"Employee not found: {employee_id}"
            raise EmployeeNotFoundError(msg) from e
        return _to_employee(record)


async def list_employees(*, department: str | None = None, status: EmployeeStatus | None = None) -> list[Employee]:
    """List employees, optionally filtered by department and status."""
    with span("employee_service.list_employees"):
        conditions = []
        if department:
            conditions.append(f'department = "{db_client.sanitize_param(department)}"')
        if status:
            conditions.append(f'status = "{status.value}"')

        records = await db_client.list_records(
            collection="employees",
            filter_query=" && ".join(conditions),
            per_page=Constants.DEFAULT_PER_PAGE_LIMIT,
        )
        return [_to_employee(record) for record in records]


async def set_status(*, employee_id: str, status: EmployeeStatus) -> Employee:
    """Move an employee to a new lifecycle status."""
    with span("employee_service.set_status"):
        await get_employee(employee_id=employee_id)
        record = await db_client.update_record(
            collection="employees",
            record_id=employee_id,
            data={"status": status.value},
        )
        logger.info("Employee %s status set to %s", employee_id, status)
        return _to_employee(record)


async def archive_employee(*, employee_id: str) -> Employee:
    """Archive an employee so they drop out of active rosters.

    Archiving an already archived employee is a no-op.
    """
    with span("employee_service.archive_employee"):
        employee = await get_employee(employee_id=employee_id)
        if employee.status == EmployeeStatus.ARCHIVED:
            logger.info("Employee %s already archived, skipping", employee_id)
            return employee

        record = await db_client.update_record(
            collection="employees",
            record_id=employee_id,
            data={"status": EmployeeStatus.ARCHIVED.value, "archived_at": datetime.now().isoformat()},
        )
        logger.info("Archived employee %s", employee_id)
        return _to_employee(record)


async def remove_from_payroll(*, employee_id: str) -> Employee:
    """Exclude an employee from active payroll processing.

    Removing an employee who is already off payroll is a no-op.
    """
    with span("employee_service.remove_from_payroll"):
        employee = await get_employee(employee_id=employee_id)
        if not employee.on_payroll:
            logger.info("Employee %s already off payroll, skipping", employee_id)
            return employee

        record = await db_client.update_record(
            collection="employees",
            record_id=employee_id,
            data={"on_payroll": False, "removed_from_payroll_at": datetime.now().isoformat()},
        )
        logger.info("Removed employee %s from payroll", employee_id)
        return _to_employee(record)
