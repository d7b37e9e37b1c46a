"""Unit tests for the onboarding stage machine and templates."""

import pytest

from pms.core.errors import InvalidTransitionError
from pms.domain.onboarding import OnboardingStage
from pms.modules.onboarding import state_machine
from pms.modules.onboarding.templates import ONBOARDING_TASKS, build_onboarding_checklist


@pytest.mark.unit
class TestNextStage:
    @pytest.mark.parametrize(
        ("current", "expected"),
        [
            (OnboardingStage.NOT_STARTED, OnboardingStage.CONTRACT_STAGE),
            (OnboardingStage.CONTRACT_STAGE, OnboardingStage.DOCUMENTATION_STAGE),
            (OnboardingStage.DOCUMENTATION_STAGE, OnboardingStage.IT_SETUP_STAGE),
            (OnboardingStage.IT_SETUP_STAGE, OnboardingStage.TRAINING_STAGE),
            (OnboardingStage.TRAINING_STAGE, OnboardingStage.COMPLETED),
        ],
    )
    def test_advances_one_stage(self, current, expected):
        assert state_machine.next_stage(current) == expected

    def test_accepts_plain_strings(self):
        assert state_machine.next_stage("not_started") == OnboardingStage.CONTRACT_STAGE

    def test_completed_has_no_successor(self):
        with pytest.raises(InvalidTransitionError, match="no successor"):
            state_machine.next_stage("completed")

    def test_unknown_stage_is_rejected(self):
        with pytest.raises(InvalidTransitionError, match="Unknown onboarding stage"):
            state_machine.next_stage("probation")


@pytest.mark.unit
class TestProgressForStage:
    def test_not_started_then_next(self):
        stage = state_machine.next_stage(OnboardingStage.NOT_STARTED)

        assert stage == OnboardingStage.CONTRACT_STAGE
        assert state_machine.progress_for_stage(stage) == 20

    def test_table_is_monotonic_from_0_to_100(self):
        values = [state_machine.progress_for_stage(stage) for stage in state_machine.STAGE_ORDER]

        assert values == [0, 20, 40, 60, 80, 100]

    def test_accepts_stored_stage_value(self):
        assert state_machine.progress_for_stage("documentation_stage") == 40

    def test_unknown_stage_rejected(self):
        with pytest.raises(InvalidTransitionError, match="Unknown onboarding stage: probation"):
            state_machine.progress_for_stage("probation")

    def test_only_completed_is_terminal(self):
        terminal = [stage for stage in state_machine.STAGE_ORDER if state_machine.is_terminal(stage)]

        assert terminal == [OnboardingStage.COMPLETED]


@pytest.mark.unit
def test_onboarding_template_seeds_open_uncategorised_tasks():
    checklist = build_onboarding_checklist()

    assert [task.name for task in checklist.tasks] == [name for name, _ in ONBOARDING_TASKS]
    assert checklist.completed_count == 0
    assert all(task.category is None for task in checklist.tasks)
