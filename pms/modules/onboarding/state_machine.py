"""Pure stage transition functions for onboarding.

Onboarding moves only on an explicit "move to next stage" command; checklist
completion never advances a stage.
"""

from pms.core.errors import InvalidTransitionError
from pms.domain.onboarding import OnboardingStage


STAGE_ORDER: tuple[OnboardingStage, ...] = (
    OnboardingStage.NOT_STARTED,
    OnboardingStage.CONTRACT_STAGE,
    OnboardingStage.DOCUMENTATION_STAGE,
    OnboardingStage.IT_SETUP_STAGE,
    OnboardingStage.TRAINING_STAGE,
    OnboardingStage.COMPLETED,
)

STAGE_PROGRESS: dict[OnboardingStage, int] = {
    OnboardingStage.NOT_STARTED: 0,
    OnboardingStage.CONTRACT_STAGE: 20,
    OnboardingStage.DOCUMENTATION_STAGE: 40,
    OnboardingStage.IT_SETUP_STAGE: 60,
    OnboardingStage.TRAINING_STAGE: 80,
    OnboardingStage.COMPLETED: 100,
}


def is_terminal(stage: OnboardingStage) -> bool:
    """Return True for the stage that has no successor."""
    return stage == OnboardingStage.COMPLETED


def _parse_stage(stage: OnboardingStage | str) -> OnboardingStage:
    try:
        return OnboardingStage(stage)
    except ValueError as e:
        msg = f"Unknown onboarding stage: {stage}"
        raise InvalidTransitionError(msg) from e


def next_stage(stage: OnboardingStage | str) -> OnboardingStage:
    """Return the stage that follows `stage`.

    Raises:
        InvalidTransitionError: If `stage` is completed or not a known stage
    """
    current = _parse_stage(stage)
    if is_terminal(current):
        msg = f"Onboarding stage '{current}' has no successor"
        raise InvalidTransitionError(msg)

    return STAGE_ORDER[STAGE_ORDER.index(current) + 1]


def progress_for_stage(stage: OnboardingStage | str) -> int:
    """Return the fixed progress percentage for a stage.

    Raises:
        InvalidTransitionError: If `stage` is not a known stage
    """
    return STAGE_PROGRESS[_parse_stage(stage)]
