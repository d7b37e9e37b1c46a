"""Unit tests for lifecycle errors and their classification."""

import pytest

from pms.core.errors import (
    DependencyFailureError,
    EmployeeNotFoundError,
    ErrorCode,
    ErrorSeverity,
    InsufficientDataError,
    InvalidInputError,
    InvalidTransitionError,
    LifecycleError,
    LifecycleNotFoundError,
    NotFoundError,
    PermissionDeniedError,
    TaskNotFoundError,
    classify_error_with_response,
    http_status_for,
)


@pytest.mark.unit
class TestErrorHierarchy:
    def test_not_found_errors_are_key_errors(self):
        for error in (EmployeeNotFoundError("x"), LifecycleNotFoundError("x"), TaskNotFoundError("x")):
            assert isinstance(error, NotFoundError)
            assert isinstance(error, KeyError)
            assert isinstance(error, LifecycleError)

    def test_not_found_message_is_not_quoted(self):
        assert str(EmployeeNotFoundError("Employee not found: 7")) == "Employee not found: 7"

    def test_dependency_failure_names_step(self):
        error = DependencyFailureError("payroll removal", "payroll API timed out")

        assert error.step == "payroll removal"
        assert error.message == "payroll API timed out"
        assert str(error) == "payroll removal failed: payroll API timed out"


@pytest.mark.unit
class TestClassifyErrorWithResponse:
    def test_task_not_found(self):
        response = classify_error_with_response(TaskNotFoundError("equipment_return"))

        assert response.code == ErrorCode.ERR_TASK_NOT_FOUND
        assert "equipment_return" in response.message
        assert response.severity == ErrorSeverity.LOW

    def test_not_found(self):
        response = classify_error_with_response(LifecycleNotFoundError("No offboarding record for employee 9"))

        assert response.code == ErrorCode.ERR_NOT_FOUND
        assert response.message == "No offboarding record for employee 9"

    def test_invalid_transition(self):
        response = classify_error_with_response(InvalidTransitionError("Onboarding stage 'completed' has no successor"))

        assert response.code == ErrorCode.ERR_INVALID_TRANSITION
        assert "no successor" in response.message

    def test_permission_denied(self):
        response = classify_error_with_response(PermissionDeniedError("forbidden"))

        assert response.code == ErrorCode.ERR_PERMISSION_DENIED
        assert "permission" in response.message.lower()

    def test_dependency_failure_names_failed_step(self):
        response = classify_error_with_response(DependencyFailureError("payroll removal", "boom"))

        assert response.code == ErrorCode.ERR_DEPENDENCY_FAILURE
        assert response.message == "Final offboarding stopped at step: payroll removal."
        assert "retry" in response.suggestion.lower()
        assert response.severity == ErrorSeverity.HIGH

    def test_insufficient_data(self):
        response = classify_error_with_response(InsufficientDataError("missing basic salary"))

        assert response.code == ErrorCode.ERR_INSUFFICIENT_DATA
        assert response.message == "missing basic salary"

    def test_unknown_error(self):
        response = classify_error_with_response(RuntimeError("kaboom"))

        assert response.code == ErrorCode.ERR_UNKNOWN
        assert "kaboom" not in response.message


@pytest.mark.unit
@pytest.mark.parametrize(
    ("error", "status"),
    [
        (EmployeeNotFoundError("x"), 404),
        (TaskNotFoundError("x"), 404),
        (PermissionDeniedError("x"), 403),
        (InvalidTransitionError("x"), 409),
        (InvalidInputError("x"), 422),
        (InsufficientDataError("x"), 422),
        (DependencyFailureError("archive employee", "x"), 502),
        (LifecycleError("x"), 500),
    ],
)
def test_http_status_for(error, status):
    assert http_status_for(error) == status
