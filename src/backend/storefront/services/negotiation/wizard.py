"""
Negotiation Wizard Controller

Drives one buyer through the five-step AI negotiation flow:

1. Voice input     → record audio, transcribe (remote with retries, local fallback)
2. Text input      → typed requirements with the standard playbook attached
3. Review          → edit or delete contract positions
4. AI negotiation  → progress animation and the negotiation request run together
5. Deal result     → approve or decline the negotiated terms

Concurrency:
- Every public action holds the wizard lock, so state updates never interleave
- Long calls (transcription, negotiation) run outside the lock; their results
  are applied only if the wizard was not reset or moved on in the meantime
- Step 4 joins the animation and the request with asyncio.gather; the result
  is published once both have finished
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..config.configuration_service import ConfigurationService, get_config_service
from ..state.wizard_state_manager import WizardStateManager
from .negotiation_service import NegotiationService
from .progress_simulator import ProgressSimulator
from .transcription_service import TranscriptionService
from ...models.negotiation import (
    ContractPosition,
    DealDecision,
    EmptyRequirementError,
    InvalidTransitionError,
    NegotiationData,
    NegotiationOutcome,
    NegotiationProgress,
    TranscriptionUnavailableError,
    VoiceRecordingState,
    WizardStep,
)
from ...utils.logging_context import log_context, log_performance

logger = logging.getLogger(__name__)

MICROPHONE_DENIED_MESSAGE = "Microphone access denied. Please use text input."


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class NegotiationWizard:
    """Per-session controller for the negotiation wizard"""

    def __init__(
        self,
        wizard_id: str,
        transcription_service: TranscriptionService,
        negotiation_service: NegotiationService,
        config_service: Optional[ConfigurationService] = None,
        state_manager: Optional[WizardStateManager] = None,
        progress_simulator: Optional[ProgressSimulator] = None,
    ):
        self.wizard_id = wizard_id
        self.transcription_service = transcription_service
        self.negotiation_service = negotiation_service
        self.config_service = config_service or get_config_service()
        self.state_manager = state_manager or WizardStateManager(self.config_service)
        self.progress_simulator = progress_simulator or ProgressSimulator(self.config_service)

        self.data = NegotiationData(step=self.state_manager.initial_step)
        self.voice = VoiceRecordingState()
        self.progress: NegotiationProgress = self.progress_simulator.initial_progress()
        self.is_negotiating = False

        self.created_at = _utc_now()
        self.last_activity = self.created_at

        self._lock = asyncio.Lock()
        self._epoch = 0
        self._negotiation_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def step(self) -> WizardStep:
        return self.data.step

    def _touch(self):
        self.last_activity = _utc_now()

    def _require_step(self, action: str, *steps: WizardStep):
        if self.data.step not in steps:
            logger.warning(f"Wizard {self.wizard_id}: '{action}' rejected at step {int(self.data.step)}")
            raise InvalidTransitionError(int(self.data.step), action=action)

    def _move_to(self, target: WizardStep):
        self.data.step = self.state_manager.validate_transition(self.data.step, target)

    def _seed_requirements(self):
        self.data.requirements = [
            ContractPosition(**position) for position in self.config_service.get_contract_positions()
        ]

    def _find_requirement(self, requirement_id: str) -> ContractPosition:
        for position in self.data.requirements:
            if position.id == requirement_id:
                return position
        raise KeyError(requirement_id)

    def _requirement_text(self) -> str:
        return (self.data.voice_input or self.data.text_input or "").strip()

    # ------------------------------------------------------------------
    # Step 1: voice input
    # ------------------------------------------------------------------

    async def start_recording(self, microphone_granted: bool = True) -> Dict[str, Any]:
        """Begin a voice capture; a denied microphone leaves an inline error pointing to text input."""
        async with self._lock:
            self._require_step("start_recording", WizardStep.VOICE_INPUT)
            if self.voice.is_processing:
                raise InvalidTransitionError(int(self.data.step), action="start_recording")
            self._touch()

            if not microphone_granted:
                self.voice.is_recording = False
                self.voice.error = MICROPHONE_DENIED_MESSAGE
                logger.info(f"Wizard {self.wizard_id}: microphone access denied")
                return self.snapshot()

            self.voice.is_recording = True
            self.voice.error = None
            return self.snapshot()

    async def stop_recording(
        self,
        audio: bytes,
        filename: str = "recording.wav",
        content_type: str = "audio/wav",
        offline: bool = False,
    ) -> Dict[str, Any]:
        """
        Finish the capture and transcribe it.

        On success the wizard moves straight to review (step 3). When no
        transcript can be produced the wizard stays on step 1 with an error.
        """
        async with self._lock:
            self._require_step("stop_recording", WizardStep.VOICE_INPUT)
            if not self.voice.is_recording or self.voice.is_processing:
                raise InvalidTransitionError(int(self.data.step), action="stop_recording")

            self.voice.is_recording = False
            self.voice.is_processing = True
            self.voice.error = None
            self.voice.audio_size = len(audio)
            self.voice.audio_filename = filename
            self._touch()
            epoch = self._epoch

        result = None
        error_message = None
        with log_context(wizard_id=self.wizard_id):
            try:
                result = await self.transcription_service.transcribe(
                    audio, filename=filename, content_type=content_type, offline=offline
                )
            except TranscriptionUnavailableError as e:
                error_message = str(e)
            except Exception as e:
                logger.error(f"Wizard {self.wizard_id}: transcription failed unexpectedly: {e}", exc_info=True)
                error_message = "Voice processing failed. Please try again or use text input."

        async with self._lock:
            if epoch != self._epoch or self.data.step != WizardStep.VOICE_INPUT:
                logger.info(f"Wizard {self.wizard_id}: discarding transcription, wizard left voice input")
                return self.snapshot()

            self.voice.is_processing = False
            self._touch()

            if result is None:
                self.voice.error = error_message
                return self.snapshot()

            self.voice.transcript = result.transcript
            self.voice.confidence = result.confidence
            self.voice.source = result.source
            self.data.voice_input = result.transcript
            self.data.text_input = None
            self.data.playbook_data = result.playbook_data

            self._move_to(WizardStep.REVIEW_REQUIREMENTS)
            self._seed_requirements()
            logger.info(f"Wizard {self.wizard_id}: transcript captured ({result.source}), moved to review")
            return self.snapshot()

    async def continue_without_voice(self) -> Dict[str, Any]:
        """Leave voice input for typed requirements; a pending transcription blocks the switch."""
        async with self._lock:
            self._require_step("continue_without_voice", WizardStep.VOICE_INPUT)
            if self.voice.is_processing:
                raise InvalidTransitionError(int(self.data.step), action="continue_without_voice")

            self._touch()
            self._move_to(WizardStep.TEXT_INPUT)
            # Typed text replaces any earlier transcript as the requirement
            self.voice = VoiceRecordingState()
            self.data.voice_input = None
            return self.snapshot()

    # ------------------------------------------------------------------
    # Step 2: text input
    # ------------------------------------------------------------------

    async def submit_text(self, text: str) -> Dict[str, Any]:
        """
        Accept typed requirements and move to review.

        The typed path does not call the analysis service; the standard
        playbook is attached instead.
        """
        async with self._lock:
            self._require_step("submit_text", WizardStep.TEXT_INPUT)
            cleaned = (text or "").strip()
            if not cleaned:
                raise EmptyRequirementError("Please describe your requirements")

            self._touch()
            self.data.text_input = cleaned
            self.data.voice_input = None
            self.data.playbook_data = self.config_service.get_fallback_playbook()
            self._move_to(WizardStep.REVIEW_REQUIREMENTS)
            self._seed_requirements()
            return self.snapshot()

    async def set_apply_standard_terms(self, apply_standard_terms: bool) -> Dict[str, Any]:
        async with self._lock:
            self._require_step("set_apply_standard_terms", WizardStep.VOICE_INPUT, WizardStep.TEXT_INPUT)
            self._touch()
            self.data.apply_standard_terms = apply_standard_terms
            return self.snapshot()

    async def back(self) -> Dict[str, Any]:
        async with self._lock:
            self._touch()
            self.data.step = self.state_manager.get_back_target(self.data.step, bool(self.voice.transcript))
            return self.snapshot()

    # ------------------------------------------------------------------
    # Step 3: review
    # ------------------------------------------------------------------

    async def update_requirement(self, requirement_id: str, value: str) -> Dict[str, Any]:
        """
        Raises:
            KeyError: If no contract position has that id
            ValueError: If the position is not editable
        """
        async with self._lock:
            self._require_step("update_requirement", WizardStep.REVIEW_REQUIREMENTS)
            position = self._find_requirement(requirement_id)
            if not position.is_editable:
                raise ValueError(f"Requirement '{requirement_id}' is not editable")

            self._touch()
            self.data.requirements = [
                p.model_copy(update={"value": value}) if p.id == requirement_id else p
                for p in self.data.requirements
            ]
            return self.snapshot()

    async def delete_requirement(self, requirement_id: str) -> Dict[str, Any]:
        async with self._lock:
            self._require_step("delete_requirement", WizardStep.REVIEW_REQUIREMENTS)
            self._find_requirement(requirement_id)
            self._touch()
            self.data.requirements = [p for p in self.data.requirements if p.id != requirement_id]
            return self.snapshot()

    async def start_negotiation(self) -> Dict[str, Any]:
        """
        Move to step 4 and launch the negotiation in the background.

        Raises:
            EmptyRequirementError: If neither a transcript nor typed text exists
            InvalidTransitionError: If the wizard is not on the review step
        """
        async with self._lock:
            self._require_step("start_negotiation", WizardStep.REVIEW_REQUIREMENTS)
            text = self._requirement_text()
            if not text:
                raise EmptyRequirementError("Requirement text must not be empty")

            self._move_to(WizardStep.AI_NEGOTIATION)
            if not self.data.requirements:
                self._seed_requirements()

            self._touch()
            self.is_negotiating = True
            self.progress = self.progress_simulator.initial_progress()
            self._negotiation_task = asyncio.create_task(self._run_negotiation(self._epoch, text))
            logger.info(f"Wizard {self.wizard_id}: negotiation started")
            return self.snapshot()

    # ------------------------------------------------------------------
    # Step 4: negotiation join
    # ------------------------------------------------------------------

    def _apply_progress(self, epoch: int, progress: NegotiationProgress):
        if epoch == self._epoch:
            self.progress = progress

    async def _negotiate_or_fallback(self, text: str) -> NegotiationOutcome:
        try:
            return await self.negotiation_service.negotiate(text)
        except Exception as e:
            # Step 4 must always end with an outcome
            logger.error(f"Wizard {self.wizard_id}: negotiation failed unexpectedly: {e}", exc_info=True)
            return self.negotiation_service.mock_service.generate(text)

    async def _run_negotiation(self, epoch: int, text: str):
        with log_context(wizard_id=self.wizard_id), log_performance("negotiation_join"):
            outcome, progress_result = await asyncio.gather(
                self._negotiate_or_fallback(text),
                self.progress_simulator.run(lambda p: self._apply_progress(epoch, p)),
                return_exceptions=True,
            )

        if isinstance(outcome, BaseException):
            logger.error(f"Wizard {self.wizard_id}: negotiation task error: {outcome}")
            outcome = self.negotiation_service.mock_service.generate(text)
        if isinstance(progress_result, BaseException):
            logger.error(f"Wizard {self.wizard_id}: progress animation error: {progress_result}")

        async with self._lock:
            if epoch != self._epoch:
                logger.info(f"Wizard {self.wizard_id}: discarding negotiation result after reset")
                return

            self.data.negotiation_result = outcome
            self.data.deal_decision = DealDecision.PENDING
            self.is_negotiating = False
            self._move_to(WizardStep.DEAL_RESULT)
            self._touch()
            logger.info(f"Wizard {self.wizard_id}: negotiation finished with {outcome.status}")

    async def wait_until_settled(self) -> Dict[str, Any]:
        """Wait for a running negotiation to publish its result."""
        task = self._negotiation_task
        if task is not None and not task.done():
            await asyncio.wait({task})
        return self.snapshot()

    # ------------------------------------------------------------------
    # Step 5: decision
    # ------------------------------------------------------------------

    async def approve_deal(self) -> Dict[str, Any]:
        async with self._lock:
            self._require_step("approve_deal", WizardStep.DEAL_RESULT)
            result = self.data.negotiation_result
            if result is None or not result.deal_reached:
                raise InvalidTransitionError(int(self.data.step), action="approve_deal")

            self._touch()
            self.data.deal_decision = DealDecision.APPROVED
            logger.info(f"Wizard {self.wizard_id}: deal approved")
            return self.snapshot()

    async def decline_deal(self) -> Dict[str, Any]:
        async with self._lock:
            self._require_step("decline_deal", WizardStep.DEAL_RESULT)
            self._touch()
            self.data.deal_decision = DealDecision.DECLINED
            logger.info(f"Wizard {self.wizard_id}: deal declined")
            return self.snapshot()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _cancel_negotiation(self):
        if self._negotiation_task is not None and not self._negotiation_task.done():
            self._negotiation_task.cancel()
        self._negotiation_task = None

    async def reset(self) -> Dict[str, Any]:
        """Clear all wizard state and return to voice input; in-flight results are dropped."""
        async with self._lock:
            self._epoch += 1
            self._cancel_negotiation()
            self.data = NegotiationData(step=self.state_manager.initial_step)
            self.voice = VoiceRecordingState()
            self.progress = self.progress_simulator.initial_progress()
            self.is_negotiating = False
            self._touch()
            logger.info(f"Wizard {self.wizard_id}: reset")
            return self.snapshot()

    async def close(self):
        async with self._lock:
            self._epoch += 1
            self._cancel_negotiation()

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready view of the wizard for the front end."""
        steps: List[Dict[str, Any]] = self.state_manager.get_all_steps(self.data.step)
        return {
            "wizard_id": self.wizard_id,
            "step": int(self.data.step),
            "step_info": self.state_manager.get_step_info(self.data.step),
            "steps": steps,
            "data": self.data.model_dump(mode="json"),
            "voice": self.voice.model_dump(mode="json"),
            "progress": self.progress.model_dump(mode="json"),
            "is_negotiating": self.is_negotiating,
            "last_activity": self.last_activity.isoformat(),
        }
