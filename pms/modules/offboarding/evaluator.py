"""Progress and completion evaluation for offboarding checklists.

Status is re-derived from the whole checklist on every change rather than
tracked incrementally. Completion side effects are edge-triggered: only a
change from a non-completed status into `completed` asks for them.
"""

from pydantic import BaseModel

from pms.domain.checklist import Checklist, compute_progress
from pms.domain.offboarding import OffboardingStatus


class Evaluation(BaseModel):
    """Derived state of an offboarding checklist after a change."""

    progress: int
    status: OffboardingStatus
    completion_triggered: bool


def derive_status(checklist: Checklist) -> OffboardingStatus:
    """Derive the offboarding status from checklist completion.

    An empty checklist is pending, never completed.
    """
    completed = checklist.completed_count
    if completed == 0:
        return OffboardingStatus.PENDING_EXIT
    if completed == checklist.total_count:
        return OffboardingStatus.COMPLETED
    return OffboardingStatus.IN_PROGRESS


def evaluate_transition(previous_status: OffboardingStatus | str | None, checklist: Checklist) -> Evaluation:
    """Recompute progress and status, flagging a fresh transition into completed.

    Args:
        previous_status: Status stored before the change (None for a new record)
        checklist: Checklist after the change

    Returns:
        Evaluation whose completion_triggered is True only on the edge into completed
    """
    status = derive_status(checklist)
    was_completed = previous_status is not None and OffboardingStatus(previous_status) == OffboardingStatus.COMPLETED
    return Evaluation(
        progress=compute_progress(checklist),
        status=status,
        completion_triggered=status == OffboardingStatus.COMPLETED and not was_completed,
    )
