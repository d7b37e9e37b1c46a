"""Domain models and DTOs."""

from pms.domain.checklist import Checklist
from pms.domain.create_models import EmployeeCreate, OffboardingCreate, StageAdvance, TaskCompletionUpdate, TaskCreate
from pms.domain.employee import Employee, EmployeeStatus
from pms.domain.offboarding import FinalDocument, OffboardingRecord, OffboardingStatus, OffboardingType, StepError
from pms.domain.onboarding import OnboardingRecord, OnboardingStage
from pms.domain.task import Task


__all__ = [
    "Checklist",
    "Employee",
    "EmployeeCreate",
    "EmployeeStatus",
    "FinalDocument",
    "OffboardingCreate",
    "OffboardingRecord",
    "OffboardingStatus",
    "OffboardingType",
    "OnboardingRecord",
    "OnboardingStage",
    "StageAdvance",
    "StepError",
    "Task",
    "TaskCompletionUpdate",
    "TaskCreate",
]
