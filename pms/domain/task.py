"""Task domain model: one checklist item of an onboarding or offboarding process."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Task(BaseModel):
    """A named unit of work on a lifecycle checklist."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Task name, unique within its checklist")
    id: str | None = Field(default=None, description="Optional external id")
    description: str = Field(default="", description="What the task involves")
    category: str | None = Field(default=None, description="Grouping used by offboarding checklists")
    completed: bool = Field(default=False, description="Whether the task is done")
    completed_at: datetime | None = Field(default=None, description="When the task was completed")
    completed_by: str | None = Field(default=None, description="Who completed the task")
    due_date: date | None = Field(default=None, description="Deadline for the task")
    notes: str | None = Field(default=None, description="Free-text notes recorded on completion")

    @model_validator(mode="after")
    def check_completion_timestamp(self) -> "Task":
        """A completed task carries its completion time; an open task carries none."""
        if self.completed and self.completed_at is None:
            raise ValueError(f"Completed task '{self.name}' must have completed_at set")
        if not self.completed and self.completed_at is not None:
            raise ValueError(f"Open task '{self.name}' must not have completed_at set")
        return self
