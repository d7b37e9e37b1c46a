"""Employee endpoints: creation (with onboarding) and the final offboarding operations."""

from typing import Any

from fastapi import APIRouter

from pms.core.config import constants
from pms.domain.create_models import EmployeeCreate
from pms.interface.responses import success
from pms.modules.onboarding import service as onboarding_service
from pms.services import document_service, employee_service, notification_service


router = APIRouter(prefix=f"{constants.API_PREFIX}/employees", tags=["employees"])


@router.post("", status_code=201)
async def create_employee(params: EmployeeCreate) -> dict[str, Any]:
    """Create an employee and seed their onboarding checklist."""
    employee, onboarding = await onboarding_service.onboard_employee(params=params)
    return success({"employee": employee, "onboarding": onboarding})


@router.get("/{employee_id}")
async def get_employee(employee_id: str) -> dict[str, Any]:
    return success(await employee_service.get_employee(employee_id=employee_id))


@router.get("/{employee_id}/notifications")
async def list_employee_notifications(employee_id: str) -> dict[str, Any]:
    """Notifications emitted for this employee, newest first."""
    return success(await notification_service.list_notifications(employee_id=employee_id))


@router.post("/{employee_id}/archive")
async def archive_employee(employee_id: str) -> dict[str, Any]:
    return success(await employee_service.archive_employee(employee_id=employee_id))


@router.post("/{employee_id}/remove-payroll")
async def remove_from_payroll(employee_id: str) -> dict[str, Any]:
    return success(await employee_service.remove_from_payroll(employee_id=employee_id))


@router.post("/{employee_id}/generate-documents")
async def generate_final_documents(employee_id: str) -> dict[str, Any]:
    return success(await document_service.generate_final_documents(employee_id=employee_id))
