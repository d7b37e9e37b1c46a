"""Lifecycle error types and their classification into user-facing responses."""

from enum import Enum

from pydantic import BaseModel

from pms.core.config import constants


class LifecycleError(Exception):
    """Base class for errors raised by the lifecycle core and services."""


class NotFoundError(LifecycleError, KeyError):
    """An employee, lifecycle record or task does not exist.

    Subclasses KeyError so callers that treat missing records the way the
    db_client does (``except KeyError``) keep working.
    """

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead.
        return str(self.args[0]) if self.args else ""


class EmployeeNotFoundError(NotFoundError):
    """No employee with the requested id."""


class LifecycleNotFoundError(NotFoundError):
    """The employee has no onboarding/offboarding record of the requested kind."""


class TaskNotFoundError(NotFoundError):
    """No task with the requested name in the checklist."""

    def __init__(self, task_name: str) -> None:
        super().__init__(f"Task not found in checklist: {task_name}")
        self.task_name = task_name


class InvalidTransitionError(LifecycleError):
    """A stage has no successor, or the record is in a state that forbids the action."""


class PermissionDeniedError(LifecycleError):
    """Surfaced from the auth layer of the backing API; never generated by the core."""


class InvalidInputError(LifecycleError):
    """Request data failed validation (duplicate task name, bad dates, ...)."""


class InsufficientDataError(LifecycleError):
    """The employee record lacks data needed for a computation (e.g. final settlement)."""


class DependencyFailureError(LifecycleError):
    """An external call made by an orchestrator step failed."""

    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"{step} failed: {message}")
        self.step = step
        self.message = message


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_NOT_FOUND = "ERR_NOT_FOUND"
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"
    ERR_INVALID_TRANSITION = "ERR_INVALID_TRANSITION"
    ERR_PERMISSION_DENIED = "ERR_PERMISSION_DENIED"
    ERR_VALIDATION = "ERR_VALIDATION"
    ERR_INSUFFICIENT_DATA = "ERR_INSUFFICIENT_DATA"
    ERR_DEPENDENCY_FAILURE = "ERR_DEPENDENCY_FAILURE"
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


def classify_error_with_response(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised by a service or orchestrator step

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    if isinstance(exception, TaskNotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_TASK_NOT_FOUND,
            message=f"Task '{exception.task_name}' is not on this checklist.",
            suggestion="Refresh the checklist and pick one of the listed tasks.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, NotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_NOT_FOUND,
            message=str(exception) or "The requested record was not found.",
            suggestion="Check the employee id and refresh the list.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, InvalidTransitionError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_TRANSITION,
            message=str(exception) or "This action cannot be performed in the current state.",
            suggestion="Refresh the record to see its current stage or status.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, PermissionDeniedError):
        return ErrorResponse(
            code=ErrorCode.ERR_PERMISSION_DENIED,
            message="You don't have permission for this action.",
            suggestion="Ask an HR administrator to perform it.",
            severity=ErrorSeverity.MEDIUM,
        )

    if isinstance(exception, InvalidInputError):
        return ErrorResponse(
            code=ErrorCode.ERR_VALIDATION,
            message=str(exception),
            suggestion="Correct the highlighted fields and try again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, InsufficientDataError):
        return ErrorResponse(
            code=ErrorCode.ERR_INSUFFICIENT_DATA,
            message=str(exception),
            suggestion="Complete the employee's salary and employment details first.",
            severity=ErrorSeverity.MEDIUM,
        )

    if isinstance(exception, DependencyFailureError):
        return ErrorResponse(
            code=ErrorCode.ERR_DEPENDENCY_FAILURE,
            message=f"Final offboarding stopped at step: {exception.step}.",
            suggestion="Retry final offboarding; completed steps will not be repeated.",
            severity=ErrorSeverity.HIGH,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
    )


def http_status_for(exception: Exception) -> int:
    """Map a lifecycle error to the HTTP status the REST layer responds with."""
    if isinstance(exception, NotFoundError):
        return constants.HTTP_NOT_FOUND
    if isinstance(exception, PermissionDeniedError):
        return constants.HTTP_FORBIDDEN
    if isinstance(exception, InvalidTransitionError):
        return constants.HTTP_CONFLICT
    if isinstance(exception, InvalidInputError | InsufficientDataError):
        return constants.HTTP_UNPROCESSABLE
    if isinstance(exception, DependencyFailureError):
        return constants.HTTP_BAD_GATEWAY
    return constants.HTTP_SERVER_ERROR
