"""Employee domain models and enums."""

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, Field


class EmployeeStatus(StrEnum):
    """Where the employee is in their employment lifecycle."""

    ONBOARDING = "onboarding"
    ACTIVE = "active"
    OFFBOARDING = "offboarding"
    ARCHIVED = "archived"


class Employee(BaseModel):
    """Employee data transfer object."""

    id: str = Field(..., description="Unique employee record ID")
    employee_code: str = Field(..., description="HR employee code (e.g. EMP-0042)")
    first_name: str = Field(..., description="Given name")
    last_name: str = Field(..., description="Family name")
    email: str = Field(..., description="Work email")
    department: str = Field(default="", description="Department name")
    position: str = Field(default="", description="Job title")
    status: EmployeeStatus = Field(default=EmployeeStatus.ONBOARDING, description="Lifecycle status")
    on_payroll: bool = Field(default=True, description="Included in active payroll runs")
    date_joined: date | None = Field(default=None, description="Employment start date")
    basic_salary: float | None = Field(default=None, description="Monthly basic salary")
    monthly_allowances: float = Field(default=0.0, description="Monthly allowances total")
    monthly_deductions: float = Field(default=0.0, description="Monthly deductions total")
    unused_leave_days: float = Field(default=0.0, description="Leave days accrued but not taken")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
