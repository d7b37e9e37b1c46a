"""Pydantic models for service layer return types.

These models give the service boundaries typed results instead of raw
database dictionaries.
"""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from pms.domain.offboarding import FinalDocument, OffboardingRecord


class SettlementBreakdown(BaseModel):
    """Final settlement figures for an exiting employee."""

    employee_id: str
    basic_salary: float
    gratuity: float
    unused_leave_payment: float
    allowances: float
    deductions: float
    total: float
    years_of_service: int
    calculated_at: datetime = Field(default_factory=datetime.now)


class OrchestrationResult(BaseModel):
    """Outcome of one run of the final offboarding sequence."""

    employee_id: str
    success: bool
    completed_steps: list[str] = Field(default_factory=list)
    failed_step: str | None = None
    error: str | None = None
    documents: list[FinalDocument] = Field(default_factory=list)


class NotificationResult(BaseModel):
    """An operator notification that was emitted."""

    level: Literal["success", "info", "warning", "error"]
    message: str
    employee_id: str | None = None
    link: str | None = None
    stored: bool = False


class MutationResult(BaseModel):
    """Result of an optimistic client-side mutation.

    On failure `record` holds the last known-good record the view reverted to.
    """

    success: bool
    record: dict[str, Any] | None = None
    error: str | None = None
    error_code: str | None = None


class StatusCount(BaseModel):
    """Number of lifecycle records in one status or stage."""

    status: str
    count: int


class LifecycleStats(BaseModel):
    """Per-status totals for a lifecycle listing."""

    total: int
    by_status: list[StatusCount]
    average_progress: float


class LifecycleSummary(BaseModel):
    """One row of an onboarding or offboarding listing."""

    employee_id: str
    employee_code: str
    employee_name: str
    department: str = ""
    status: str = Field(..., description="Onboarding stage or offboarding status")
    progress: int
    started_at: datetime
    target_exit_date: date | None = None


class OffboardingUpdate(BaseModel):
    """An offboarding record after a change, with the orchestration run it triggered (if any)."""

    record: OffboardingRecord
    orchestration: OrchestrationResult | None = None
