"""Create models for database operations."""

from datetime import date

from pydantic import BaseModel, EmailStr, Field, field_validator

from pms.domain.offboarding import OffboardingType


class EmployeeCreate(BaseModel):
    """DTO for creating an employee (onboarding is seeded alongside)."""

    employee_code: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    department: str = ""
    position: str = ""
    date_joined: date | None = None
    basic_salary: float | None = Field(default=None, ge=0)
    monthly_allowances: float = Field(default=0.0, ge=0)
    monthly_deductions: float = Field(default=0.0, ge=0)
    unused_leave_days: float = Field(default=0.0, ge=0)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        """Trim surrounding whitespace and reject blank names."""
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v


class OffboardingCreate(BaseModel):
    """DTO for initiating offboarding."""

    type: OffboardingType
    reason: str = Field(..., min_length=1)
    target_exit_date: date
    notes: str = ""
    initiated_by: str | None = None


class TaskCreate(BaseModel):
    """DTO for adding a custom checklist task."""

    name: str = Field(..., min_length=1, pattern=r"^[a-z0-9_]+$")
    description: str = ""
    category: str | None = None
    due_date: date | None = None


class TaskCompletionUpdate(BaseModel):
    """DTO for toggling a task's completion."""

    completed: bool = True
    notes: str | None = None
    completed_by: str | None = None


class StageAdvance(BaseModel):
    """DTO for the "move to next stage" command."""

    expected_stage: str | None = None
