"""Offboarding endpoints, including final settlement, documents and exports."""

import logging
from typing import Any, Literal

from fastapi import APIRouter, Query
from fastapi.responses import PlainTextResponse

from pms.core.config import constants
from pms.domain.create_models import OffboardingCreate, TaskCompletionUpdate, TaskCreate
from pms.interface.responses import success
from pms.modules.offboarding import export
from pms.modules.offboarding import service as offboarding_service
from pms.services import document_service, settlement_service


logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{constants.API_PREFIX}/offboarding", tags=["offboarding"])


@router.get("")
async def list_offboarding(
    status: str | None = None,
    department: str | None = None,
    sort: str | None = None,
) -> dict[str, Any]:
    """List offboarding records; `sort` is name/date/progress/exit_date (`-` for descending)."""
    return success(await offboarding_service.list_offboarding(status=status, department=department, sort=sort))


@router.get("/stats")
async def get_offboarding_stats(department: str | None = None) -> dict[str, Any]:
    return success(await offboarding_service.get_offboarding_stats(department=department))


@router.post("/initiate/{employee_id}", status_code=201)
async def initiate_offboarding(employee_id: str, params: OffboardingCreate) -> dict[str, Any]:
    return success(await offboarding_service.initiate_offboarding(employee_id=employee_id, params=params))


@router.get("/details/{employee_id}")
async def get_offboarding(employee_id: str) -> dict[str, Any]:
    return success(await offboarding_service.get_offboarding(employee_id=employee_id))


@router.post("/complete-task/{employee_id}/{task_name}")
async def complete_task(employee_id: str, task_name: str, update: TaskCompletionUpdate | None = None) -> dict[str, Any]:
    """Set a task's completion; the response includes the final offboarding run if this completed the checklist."""
    update = update or TaskCompletionUpdate()
    result = await offboarding_service.complete_task(
        employee_id=employee_id,
        task_name=task_name,
        completed=update.completed,
        notes=update.notes,
        completed_by=update.completed_by,
    )
    return success(result)


@router.post("/tasks/{employee_id}", status_code=201)
async def add_task(employee_id: str, params: TaskCreate) -> dict[str, Any]:
    return success(await offboarding_service.add_task(employee_id=employee_id, params=params))


@router.post("/complete/{employee_id}")
async def finalize_offboarding(employee_id: str) -> dict[str, Any]:
    """Re-run final offboarding (archive, payroll removal, documents, notification)."""
    return success(await offboarding_service.finalize_offboarding(employee_id=employee_id))


@router.post("/cancel/{employee_id}")
async def cancel_offboarding(employee_id: str) -> dict[str, Any]:
    await offboarding_service.cancel_offboarding(employee_id=employee_id)
    return success({"employee_id": employee_id, "cancelled": True})


@router.get("/final-settlement-details/{employee_id}")
async def get_final_settlement(employee_id: str) -> dict[str, Any]:
    return success(await settlement_service.calculate_final_settlement(employee_id=employee_id))


@router.get("/documents/{employee_id}/{document_type}")
async def get_document(employee_id: str, document_type: str) -> dict[str, Any]:
    return success(await document_service.get_document(employee_id=employee_id, document_type=document_type))


@router.get("/export/{employee_id}", response_model=None)
async def export_offboarding(
    employee_id: str, fmt: Literal["json", "csv"] = Query(default="json", alias="format")
) -> dict[str, Any] | PlainTextResponse:
    """Export the offboarding snapshot as JSON, or its task table as CSV."""
    snapshot = await offboarding_service.get_export_snapshot(employee_id=employee_id)
    if fmt == "json":
        return success(snapshot)

    logger.info("Exporting offboarding tasks as CSV", extra={"employee_id": employee_id})
    return PlainTextResponse(
        export.snapshot_to_csv(snapshot),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="offboarding_{employee_id}.csv"'},
    )
