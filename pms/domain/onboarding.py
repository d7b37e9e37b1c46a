"""Onboarding lifecycle record and stage enum."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from pms.domain.checklist import Checklist
from pms.domain.task import Task


class OnboardingStage(StrEnum):
    """Onboarding stages in progression order."""

    NOT_STARTED = "not_started"
    CONTRACT_STAGE = "contract_stage"
    DOCUMENTATION_STAGE = "documentation_stage"
    IT_SETUP_STAGE = "it_setup_stage"
    TRAINING_STAGE = "training_stage"
    COMPLETED = "completed"


class OnboardingRecord(BaseModel):
    """Onboarding state for one employee.

    `progress` comes from the stage table and is authoritative; `task_progress`
    is the checklist completion ratio, kept alongside for display only.
    """

    id: str | None = Field(default=None, description="Storage id")
    employee_id: str = Field(..., description="Employee this record belongs to")
    stage: OnboardingStage = Field(default=OnboardingStage.NOT_STARTED, description="Current stage")
    progress: int = Field(default=0, ge=0, le=100, description="Stage-derived progress percentage")
    task_progress: int = Field(default=0, ge=0, le=100, description="Checklist-derived progress percentage")
    checklist: Checklist = Field(default_factory=Checklist, description="Onboarding tasks")
    started_at: datetime = Field(default_factory=datetime.now, description="When onboarding began")
    completed_at: datetime | None = Field(default=None, description="When the completed stage was reached")

    @property
    def is_completed(self) -> bool:
        return self.stage == OnboardingStage.COMPLETED

    def to_record(self) -> dict[str, Any]:
        """Flatten into the column layout of the onboarding collection."""
        data = self.model_dump(mode="json", exclude={"id", "checklist"})
        data["tasks"] = [task.model_dump(mode="json") for task in self.checklist.tasks]
        return data

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "OnboardingRecord":
        """Build from a stored onboarding row."""
        tasks = tuple(Task.model_validate(task) for task in record.get("tasks") or [])
        return cls(
            id=record.get("id"),
            employee_id=record["employee_id"],
            stage=record["stage"],
            progress=record.get("progress", 0),
            task_progress=record.get("task_progress", 0),
            checklist=Checklist(tasks=tasks),
            started_at=record["started_at"],
            completed_at=record.get("completed_at"),
        )
