"""Final offboarding: the side effects fired when an offboarding checklist completes.

Steps run in order and each depends on the previous one succeeding:

    archive -> payroll_removal -> document_generation -> notification

A failing step stops the run. Earlier steps are not rolled back; the record
keeps the steps that succeeded plus the error, and a retry starts again from
the top. Every step is safe to repeat (archiving an archived employee,
removing an off-payroll employee and regenerating existing documents are
no-ops), so a retry never duplicates work.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import date
from enum import StrEnum
from typing import Any

from pms.core import db_client
from pms.core.errors import DependencyFailureError, classify_error_with_response
from pms.core.logging import log_with_employee_context, span
from pms.domain.offboarding import FinalDocument, OffboardingRecord, StepError
from pms.models.service_models import OrchestrationResult
from pms.services import document_service, employee_service, notification_service


logger = logging.getLogger(__name__)


class OrchestratorStep(StrEnum):
    """Final offboarding steps in execution order."""

    ARCHIVE = "archive"
    PAYROLL_REMOVAL = "payroll_removal"
    DOCUMENT_GENERATION = "document_generation"
    NOTIFICATION = "notification"


# Operator-facing step names used in error reports
STEP_LABELS: dict[OrchestratorStep, str] = {
    OrchestratorStep.ARCHIVE: "archive employee",
    OrchestratorStep.PAYROLL_REMOVAL: "payroll removal",
    OrchestratorStep.DOCUMENT_GENERATION: "document generation",
    OrchestratorStep.NOTIFICATION: "notification",
}


async def _persist(record: OffboardingRecord, **changes: Any) -> OffboardingRecord:
    """Write the given fields of the offboarding record and return the stored version."""
    updated = record.model_copy(update=changes)
    data = updated.model_dump(mode="json", include=set(changes))
    stored = await db_client.update_record(collection="offboarding", record_id=record.id, data=data)
    return OffboardingRecord.from_record(stored)


def _mark_done(record: OffboardingRecord, step: OrchestratorStep) -> list[str]:
    if step in record.completed_steps:
        return record.completed_steps
    return [*record.completed_steps, step.value]


async def run_final_offboarding(*, record: OffboardingRecord) -> tuple[OffboardingRecord, OrchestrationResult]:
    """Run the final offboarding steps for a completed offboarding record.

    Each step's record write belongs to that step: if the write fails, the
    run stops at the step as if the step itself had failed.

    Args:
        record: Stored offboarding record whose checklist is complete

    Returns:
        The record as last persisted, and an OrchestrationResult naming the
        failed step when the run stopped early
    """
    with span("offboarding_orchestrator.run_final_offboarding"):
        employee_id = record.employee_id
        exit_date = record.actual_exit_date or date.today()
        documents: list[FinalDocument] = []

        async def archive() -> None:
            await employee_service.archive_employee(employee_id=employee_id)

        async def remove_payroll() -> None:
            await employee_service.remove_from_payroll(employee_id=employee_id)

        async def generate_documents() -> None:
            documents[:] = await document_service.generate_final_documents(
                employee_id=employee_id, exit_date=exit_date
            )

        async def notify_operator() -> None:
            await notification_service.notify(
                level="success",
                message="Final offboarding completed. Settlement document is ready for download.",
                employee_id=employee_id,
                link=documents[0].url if documents else None,
            )

        steps: list[tuple[OrchestratorStep, Callable[[], Awaitable[None]]]] = [
            (OrchestratorStep.ARCHIVE, archive),
            (OrchestratorStep.PAYROLL_REMOVAL, remove_payroll),
            (OrchestratorStep.DOCUMENT_GENERATION, generate_documents),
            (OrchestratorStep.NOTIFICATION, notify_operator),
        ]

        # A retry starts clean: the previous error no longer describes the record.
        # Nothing has run yet, so a failed reset stops the run at the first step.
        try:
            record = await _persist(record, completed_steps=[], last_error=None)
        except Exception as e:
            logger.exception("Final offboarding could not start", extra={"employee_id": employee_id})
            return await _fail(record, DependencyFailureError(STEP_LABELS[steps[0][0]], str(e)))

        for step, action in steps:
            label = STEP_LABELS[step]
            try:
                await action()

                changes: dict[str, Any] = {"completed_steps": _mark_done(record, step)}
                if step == OrchestratorStep.ARCHIVE:
                    changes["actual_exit_date"] = exit_date
                if step == OrchestratorStep.DOCUMENT_GENERATION:
                    changes["documents"] = list(documents)
                record = await _persist(record, **changes)
            except Exception as e:
                failure = DependencyFailureError(label, str(e))
                logger.exception("Final offboarding step failed", extra={"employee_id": employee_id, "step": step})
                return await _fail(record, failure)

            log_with_employee_context(logger, "info", "Final offboarding step done", employee_id=employee_id, step=step)

        result = OrchestrationResult(
            employee_id=employee_id,
            success=True,
            completed_steps=list(record.completed_steps),
            documents=documents,
        )
        logger.info("Final offboarding completed for %s", employee_id)
        return record, result


async def _fail(
    record: OffboardingRecord, failure: DependencyFailureError
) -> tuple[OffboardingRecord, OrchestrationResult]:
    """Record the failed step on the offboarding record and tell the operator which step failed.

    The operator is told even when the error cannot be written; the returned
    record then carries the error without it being stored.
    """
    last_error = StepError(step=failure.step, message=failure.message)
    try:
        record = await _persist(record, last_error=last_error)
    except Exception:
        logger.exception("Could not store final offboarding error", extra={"employee_id": record.employee_id})
        record = record.model_copy(update={"last_error": last_error})

    response = classify_error_with_response(failure)
    await notification_service.notify(
        level="error",
        message=f"{response.message} {response.suggestion}",
        employee_id=record.employee_id,
    )

    result = OrchestrationResult(
        employee_id=record.employee_id,
        success=False,
        completed_steps=list(record.completed_steps),
        failed_step=failure.step,
        error=str(failure),
    )
    return record, result
