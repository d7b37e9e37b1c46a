"""Task templates seeded into a new onboarding checklist."""

from pms.domain.checklist import Checklist
from pms.domain.task import Task


ONBOARDING_TASKS: tuple[tuple[str, str], ...] = (
    ("contract_signing", "Sign the employment contract"),
    ("it_setup", "Provision laptop, email and system accounts"),
    ("documentation", "Collect identity and employment documents"),
    ("training", "Complete induction training"),
    ("bank_setup", "Record salary bank details"),
    ("pension_setup", "Enrol in the pension scheme"),
)


def build_onboarding_checklist() -> Checklist:
    """Return a fresh checklist with every onboarding task open."""
    return Checklist(tasks=tuple(Task(name=name, description=description) for name, description in ONBOARDING_TASKS))
