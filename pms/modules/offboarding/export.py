"""Export snapshot of an offboarding record for PDF/CSV report generation."""

import csv
import io
from datetime import date, datetime
from typing import Any

from pms.domain.employee import Employee
from pms.domain.offboarding import OffboardingRecord


CSV_COLUMNS = ("category", "name", "completed", "dueDate")


def _clean(value: Any) -> Any:
    """Trim strings, turn blanks into None and dates into ISO strings."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, datetime | date):
        return value.isoformat()
    return value


def build_export_snapshot(employee: Employee, record: OffboardingRecord) -> dict[str, Any]:
    """Build the sanitized snapshot report renderers consume.

    Shape: ``{"employee": {...}, "offboarding": {"initiatedDate", "targetExitDate",
    "status", "progress", "tasks": [{"category", "name", "completed", "dueDate"}]}}``
    """
    return {
        "employee": {
            "id": _clean(employee.id),
            "employeeCode": _clean(employee.employee_code),
            "name": _clean(employee.full_name),
            "email": _clean(employee.email),
            "department": _clean(employee.department),
            "position": _clean(employee.position),
        },
        "offboarding": {
            "initiatedDate": _clean(record.initiated_at.date()),
            "targetExitDate": _clean(record.target_exit_date),
            "actualExitDate": _clean(record.actual_exit_date),
            "type": _clean(record.type),
            "reason": _clean(record.reason),
            "status": _clean(record.status),
            "progress": record.progress,
            "tasks": [
                {
                    "category": _clean(task.category),
                    "name": _clean(task.name),
                    "completed": task.completed,
                    "dueDate": _clean(task.due_date),
                }
                for task in record.checklist.tasks
            ],
        },
    }


def snapshot_to_csv(snapshot: dict[str, Any]) -> str:
    """Render the task table of a snapshot as CSV with a header row."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for task in snapshot["offboarding"]["tasks"]:
        writer.writerow({column: "" if task.get(column) is None else task[column] for column in CSV_COLUMNS})
    return buffer.getvalue()
