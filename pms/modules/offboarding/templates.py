"""Task templates seeded into a new offboarding checklist, grouped by category."""

from datetime import date

from pms.domain.checklist import Checklist
from pms.domain.task import Task


OFFBOARDING_TASKS: dict[str, tuple[tuple[str, str], ...]] = {
    "documentation": (
        ("exit_interview", "Hold the exit interview"),
        ("documentation_handover", "Hand over working documents"),
    ),
    "equipment_return": (("equipment_return", "Return laptop, badge and other company property"),),
    "access_revocation": (("access_revocation", "Revoke system, building and email access"),),
    "knowledge_transfer": (("knowledge_transfer", "Transfer responsibilities to the successor"),),
    "financial": (("final_settlement", "Review and approve the final settlement"),),
}


def build_offboarding_checklist(*, due_date: date) -> Checklist:
    """Return a fresh offboarding checklist with every task due on `due_date`."""
    tasks = [
        Task(name=name, description=description, category=category, due_date=due_date)
        for category, entries in OFFBOARDING_TASKS.items()
        for name, description in entries
    ]
    return Checklist(tasks=tuple(tasks))
