"""Onboarding endpoints."""

from typing import Any

from fastapi import APIRouter

from pms.core.config import constants
from pms.domain.create_models import StageAdvance, TaskCompletionUpdate, TaskCreate
from pms.interface.responses import success
from pms.modules.onboarding import service as onboarding_service


router = APIRouter(prefix=f"{constants.API_PREFIX}/onboarding", tags=["onboarding"])


@router.get("")
async def list_onboarding(
    status: str | None = None,
    department: str | None = None,
    sort: str | None = None,
) -> dict[str, Any]:
    """List onboarding records; `status` filters by stage, `sort` is name/date/progress (`-` for descending)."""
    return success(await onboarding_service.list_onboarding(stage=status, department=department, sort=sort))


@router.get("/stats")
async def get_onboarding_stats(department: str | None = None) -> dict[str, Any]:
    return success(await onboarding_service.get_onboarding_stats(department=department))


@router.get("/{employee_id}")
async def get_onboarding(employee_id: str) -> dict[str, Any]:
    return success(await onboarding_service.get_onboarding(employee_id=employee_id))


@router.put("/{employee_id}/stage")
async def advance_stage(employee_id: str, params: StageAdvance | None = None) -> dict[str, Any]:
    """Move onboarding to its next stage."""
    expected_stage = params.expected_stage if params else None
    record = await onboarding_service.advance_stage(employee_id=employee_id, expected_stage=expected_stage)
    return success(record)


@router.post("/{employee_id}/tasks/{task_name}")
async def set_task_completion(
    employee_id: str, task_name: str, update: TaskCompletionUpdate | None = None
) -> dict[str, Any]:
    update = update or TaskCompletionUpdate()
    record = await onboarding_service.set_task_completion(
        employee_id=employee_id,
        task_name=task_name,
        completed=update.completed,
        notes=update.notes,
        completed_by=update.completed_by,
    )
    return success(record)


@router.post("/{employee_id}/tasks", status_code=201)
async def add_task(employee_id: str, params: TaskCreate) -> dict[str, Any]:
    return success(await onboarding_service.add_task(employee_id=employee_id, params=params))
