"""
Unit tests for WizardStateManager

Tests configuration-driven step transitions and back navigation
"""

import pytest

from storefront.models.negotiation import InvalidTransitionError, WizardStep
from storefront.services.state.wizard_state_manager import WizardStateManager


@pytest.fixture
def manager(config_service):
    return WizardStateManager(config_service)


@pytest.mark.unit
class TestTransitions:
    @pytest.mark.parametrize("current,target", [(1, 2), (1, 3), (2, 1), (2, 3), (3, 1), (3, 2), (3, 4), (4, 5)])
    def test_allowed_transitions(self, manager, current, target):
        assert manager.validate_transition(current, target) == WizardStep(target)

    @pytest.mark.parametrize("current,target", [(1, 4), (2, 5), (4, 2), (4, 3), (5, 1), (5, 4)])
    def test_rejected_transitions(self, manager, current, target):
        assert not manager.can_transition(current, target)
        with pytest.raises(InvalidTransitionError):
            manager.validate_transition(current, target)

    def test_initial_step_is_voice_input(self, manager):
        assert manager.initial_step == WizardStep.VOICE_INPUT


@pytest.mark.unit
class TestBackNavigation:
    def test_review_goes_back_to_voice_when_transcript_exists(self, manager):
        assert manager.get_back_target(3, has_voice_transcript=True) == WizardStep.VOICE_INPUT

    def test_review_goes_back_to_text_without_transcript(self, manager):
        assert manager.get_back_target(3, has_voice_transcript=False) == WizardStep.TEXT_INPUT

    def test_text_goes_back_to_voice(self, manager):
        assert manager.get_back_target(2, has_voice_transcript=False) == WizardStep.VOICE_INPUT

    @pytest.mark.parametrize("step", [1, 4, 5])
    def test_no_way_back(self, manager, step):
        with pytest.raises(InvalidTransitionError):
            manager.get_back_target(step, has_voice_transcript=True)


@pytest.mark.unit
class TestStepInfo:
    def test_step_info(self, manager):
        info = manager.get_step_info(4)

        assert info["title"] == "AI Negotiation"

    def test_all_steps_flags(self, manager):
        steps = manager.get_all_steps(3)

        assert [s["id"] for s in steps] == [1, 2, 3, 4, 5]
        assert [s["is_complete"] for s in steps] == [True, True, False, False, False]
        assert [s["is_active"] for s in steps] == [False, False, True, False, False]
