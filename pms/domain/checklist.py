"""Checklist model and the pure operations that mutate it.

Every operation returns a new Checklist; nothing here performs I/O or decides
what happens when a checklist reaches 100%.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from pms.core.errors import InvalidInputError, TaskNotFoundError
from pms.domain.task import Task


class Checklist(BaseModel):
    """Ordered tasks owned by one lifecycle record."""

    model_config = ConfigDict(frozen=True)

    tasks: tuple[Task, ...] = Field(default=(), description="Tasks in display order")

    @property
    def total_count(self) -> int:
        return len(self.tasks)

    @property
    def completed_count(self) -> int:
        return sum(1 for task in self.tasks if task.completed)

    @property
    def progress(self) -> int:
        return compute_progress(self)

    def get_task(self, task_name: str) -> Task:
        """Return the task with the given name.

        Raises:
            TaskNotFoundError: If no task has that name
        """
        for task in self.tasks:
            if task.name == task_name:
                return task
        raise TaskNotFoundError(task_name)


def compute_progress(checklist: Checklist) -> int:
    """Percentage of completed tasks, rounded half-up to the nearest integer.

    An empty checklist has progress 0. Integer arithmetic keeps the result
    identical wherever it is computed (no float or banker's rounding drift).
    """
    total = checklist.total_count
    if total == 0:
        return 0
    return (200 * checklist.completed_count + total) // (2 * total)


def set_task_completed(
    checklist: Checklist,
    task_name: str,
    completed: bool,
    *,
    completed_by: str | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> Checklist:
    """Mark one task complete or incomplete and return the updated checklist.

    Completing an already completed task keeps its original completion time, so
    applying the same change twice yields the same checklist. Undoing a task
    clears completed_at and completed_by.

    Raises:
        TaskNotFoundError: If the checklist has no task with that name
    """
    task = checklist.get_task(task_name)

    if task.completed == completed:
        if notes is None or notes == task.notes:
            return checklist
        updated = task.model_copy(update={"notes": notes})
    elif completed:
        updated = task.model_copy(
            update={
                "completed": True,
                "completed_at": now or datetime.now(),
                "completed_by": completed_by,
                "notes": notes if notes is not None else task.notes,
            }
        )
    else:
        updated = task.model_copy(
            update={
                "completed": False,
                "completed_at": None,
                "completed_by": None,
                "notes": notes if notes is not None else task.notes,
            }
        )

    return Checklist(tasks=tuple(updated if t.name == task_name else t for t in checklist.tasks))


def add_task(checklist: Checklist, task: Task) -> Checklist:
    """Append a task, rejecting duplicate names.

    Raises:
        InvalidInputError: If a task with the same name already exists
    """
    if any(existing.name == task.name for existing in checklist.tasks):
        msg = f"Task '{task.name}' already exists on this checklist"
        raise InvalidInputError(msg)
    return Checklist(tasks=(*checklist.tasks, task))
