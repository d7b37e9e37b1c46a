"""Offboarding lifecycle record, status and exit type enums."""

from datetime import date, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from pms.domain.checklist import Checklist
from pms.domain.task import Task


class OffboardingStatus(StrEnum):
    """Checklist-derived offboarding status."""

    PENDING_EXIT = "pending_exit"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class OffboardingType(StrEnum):
    """Why the employee is leaving."""

    VOLUNTARY_RESIGNATION = "voluntary_resignation"
    INVOLUNTARY_TERMINATION = "involuntary_termination"
    RETIREMENT = "retirement"
    CONTRACT_END = "contract_end"


class StepError(BaseModel):
    """The orchestrator step that failed on the most recent run."""

    step: str
    message: str
    occurred_at: datetime = Field(default_factory=datetime.now)


class FinalDocument(BaseModel):
    """A generated exit document the operator can download."""

    type: str = Field(..., description="Document kind, e.g. final_settlement")
    url: str = Field(..., description="Download location")
    generated_at: datetime = Field(..., description="When the document was generated")


class OffboardingRecord(BaseModel):
    """Offboarding state for one employee."""

    id: str | None = Field(default=None, description="Storage id")
    employee_id: str = Field(..., description="Employee this record belongs to")
    status: OffboardingStatus = Field(default=OffboardingStatus.PENDING_EXIT, description="Derived status")
    progress: int = Field(default=0, ge=0, le=100, description="Checklist-derived progress percentage")
    checklist: Checklist = Field(default_factory=Checklist, description="Offboarding tasks")
    type: OffboardingType = Field(..., description="Exit type")
    reason: str = Field(..., description="Reason given when offboarding was initiated")
    notes: str = Field(default="", description="Initiation notes")
    initiated_at: datetime = Field(default_factory=datetime.now, description="When offboarding began")
    initiated_by: str | None = Field(default=None, description="Operator who initiated offboarding")
    target_exit_date: date = Field(..., description="Planned last working day")
    actual_exit_date: date | None = Field(default=None, description="Set when final offboarding completes")
    completed_steps: list[str] = Field(default_factory=list, description="Orchestrator steps that succeeded")
    last_error: StepError | None = Field(default=None, description="Failure of the latest orchestrator run")
    documents: list[FinalDocument] = Field(default_factory=list, description="Generated exit documents")

    @property
    def is_completed(self) -> bool:
        return self.status == OffboardingStatus.COMPLETED

    def to_record(self) -> dict[str, Any]:
        """Flatten into the column layout of the offboarding collection."""
        data = self.model_dump(mode="json", exclude={"id", "checklist"})
        data["tasks"] = [task.model_dump(mode="json") for task in self.checklist.tasks]
        return data

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "OffboardingRecord":
        """Build from a stored offboarding row."""
        tasks = tuple(Task.model_validate(task) for task in record.get("tasks") or [])
        fields = {key: value for key, value in record.items() if key in cls.model_fields and value is not None}
        fields.pop("checklist", None)
        return cls(**fields, checklist=Checklist(tasks=tasks))
