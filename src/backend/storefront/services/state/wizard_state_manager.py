"""
Centralized Wizard Step Management

Single source of truth for step transitions of the negotiation wizard.

Architecture:
- Configuration-driven: Uses wizard_config.json steps and transitions
- Deterministic: Given current step + target step → allowed or not
- No side effects: The wizard controller owns the state, this class only rules on it

Usage:
    from storefront.services.state import WizardStateManager

    manager = WizardStateManager()
    manager.validate_transition(current_step=3, target_step=4)
"""

import logging
from typing import Any, Dict, List, Optional

from ..config.configuration_service import ConfigurationService, get_config_service
from ...models.negotiation import InvalidTransitionError, WizardStep

logger = logging.getLogger(__name__)


class WizardStateManager:
    """
    Step transition rules for the negotiation wizard.

    Responsibilities:
    - Validate forward and backward moves between steps
    - Provide step metadata (title, description) for the front end
    - Answer where "back" leads from a given step
    """

    def __init__(self, config_service: Optional[ConfigurationService] = None):
        self.config_service = config_service or get_config_service()

        self._transitions: Dict[int, List[int]] = self.config_service.get_wizard_transitions()
        self._steps: Dict[int, Dict[str, Any]] = {
            int(step["id"]): step for step in self.config_service.get_wizard_steps()
        }
        self._initial_step = WizardStep(
            int(self.config_service.get_wizard_config().get("initial_step", WizardStep.VOICE_INPUT))
        )

        logger.info(f"WizardStateManager initialized with {len(self._steps)} steps")

    @property
    def initial_step(self) -> WizardStep:
        return self._initial_step

    def can_transition(self, current_step: int, target_step: int) -> bool:
        """Check whether the wizard may move from current_step to target_step."""
        return int(target_step) in self._transitions.get(int(current_step), [])

    def validate_transition(self, current_step: int, target_step: int) -> WizardStep:
        """
        Validate a step transition.

        Returns:
            The target step as WizardStep

        Raises:
            InvalidTransitionError: If the transition is not allowed
        """
        if not self.can_transition(current_step, target_step):
            logger.warning(f"Rejected wizard transition: {current_step} → {target_step}")
            raise InvalidTransitionError(int(current_step), int(target_step))

        logger.info(f"Wizard transition: {current_step} → {target_step}")
        return WizardStep(int(target_step))

    def get_back_target(self, current_step: int, has_voice_transcript: bool) -> WizardStep:
        """
        Resolve where "back" leads.

        Review goes back to voice input when a transcript was captured,
        otherwise to text input. Text input goes back to voice input.

        Raises:
            InvalidTransitionError: If there is no way back from current_step
        """
        if current_step == WizardStep.REVIEW_REQUIREMENTS:
            target = WizardStep.VOICE_INPUT if has_voice_transcript else WizardStep.TEXT_INPUT
        elif current_step == WizardStep.TEXT_INPUT:
            target = WizardStep.VOICE_INPUT
        else:
            raise InvalidTransitionError(int(current_step), action="back")

        return self.validate_transition(current_step, target)

    def get_step_info(self, step: int) -> Dict[str, Any]:
        """Return title/description metadata for a step (empty dict if unknown)."""
        return dict(self._steps.get(int(step), {}))

    def get_all_steps(self, current_step: int) -> List[Dict[str, Any]]:
        """
        Return every step with completion flags for progress rendering.
        """
        return [
            {
                **info,
                "is_active": step_id == int(current_step),
                "is_complete": step_id < int(current_step),
            }
            for step_id, info in sorted(self._steps.items())
        ]
