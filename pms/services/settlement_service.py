"""Final settlement calculation for exiting employees.

A read-only computation over the employee record: it can be called any number
of times (for viewing, downloading or document generation) without side effects.
"""

import logging
from datetime import date

from pms.core.config import Constants, settings
from pms.core.errors import InsufficientDataError
from pms.core.logging import span
from pms.models.service_models import SettlementBreakdown
from pms.services import employee_service


logger = logging.getLogger(__name__)


def completed_years_of_service(*, date_joined: date, exit_date: date) -> int:
    """Whole years between joining and exit (0 if exit precedes joining)."""
    if exit_date <= date_joined:
        return 0
    years = exit_date.year - date_joined.year
    if (exit_date.month, exit_date.day) < (date_joined.month, date_joined.day):
        years -= 1
    return years


async def calculate_final_settlement(*, employee_id: str, exit_date: date | None = None) -> SettlementBreakdown:
    """Compute the final settlement breakdown for an employee.

    Args:
        employee_id: Employee record id
        exit_date: Last working day (defaults to today)

    Returns:
        SettlementBreakdown with every component rounded to 2 decimal places

    Raises:
        EmployeeNotFoundError: If the employee does not exist
        InsufficientDataError: If basic salary or join date is missing
    """
    with span("settlement_service.calculate_final_settlement"):
        employee = await employee_service.get_employee(employee_id=employee_id)

        missing = []
        if employee.basic_salary is None:
            missing.append("basic salary")
        if employee.date_joined is None:
            missing.append("date joined")
        if missing:
            msg = f"Cannot calculate final settlement for {employee_id}: missing {', '.join(missing)}"
            raise InsufficientDataError(msg)

        basic_salary = employee.basic_salary
        years = completed_years_of_service(date_joined=employee.date_joined, exit_date=exit_date or date.today())

        daily_rate = basic_salary / Constants.DAYS_PER_SALARY_MONTH
        gratuity = daily_rate * settings.gratuity_days_per_year * years
        unused_leave_payment = basic_salary / settings.working_days_per_month * employee.unused_leave_days
        total = (
            basic_salary
            + gratuity
            + unused_leave_payment
            + employee.monthly_allowances
            - employee.monthly_deductions
        )

        breakdown = SettlementBreakdown(
            employee_id=employee_id,
            basic_salary=round(basic_salary, 2),
            gratuity=round(gratuity, 2),
            unused_leave_payment=round(unused_leave_payment, 2),
            allowances=round(employee.monthly_allowances, 2),
            deductions=round(employee.monthly_deductions, 2),
            total=round(total, 2),
            years_of_service=years,
        )

        logger.info("Calculated final settlement for %s: total=%.2f", employee_id, breakdown.total)
        return breakdown
