"""
Negotiation Wizard Models
Wizard steps, voice capture state, progress snapshot, negotiation outcome
and the errors raised by the negotiation flow.
"""

from enum import Enum, IntEnum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


# ============================================================================
# Errors
# ============================================================================

class EmptyRequirementError(ValueError):
    """Raised when a negotiation is requested without any requirement text"""


class NegotiationResponseError(ValueError):
    """Raised when the negotiation service answers with an unusable payload"""


class TranscriptionUnavailableError(RuntimeError):
    """Raised when neither the transcription service nor the local fallback produced a transcript"""


class InvalidTransitionError(ValueError):
    """Raised when a wizard action is not allowed from the current step"""

    def __init__(self, current_step: int, target_step: Optional[int] = None, action: Optional[str] = None):
        self.current_step = current_step
        self.target_step = target_step
        self.action = action
        if target_step is not None:
            message = f"Cannot move from step {current_step} to step {target_step}"
        else:
            message = f"Action '{action}' is not allowed at step {current_step}"
        super().__init__(message)


# ============================================================================
# Wizard state
# ============================================================================

class WizardStep(IntEnum):
    VOICE_INPUT = 1
    TEXT_INPUT = 2
    REVIEW_REQUIREMENTS = 3
    AI_NEGOTIATION = 4
    DEAL_RESULT = 5


class DealDecision(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


class ContractPosition(BaseModel):
    """One reviewable line of the buyer's requirements"""

    id: str
    category: str
    title: str
    value: str
    is_editable: bool = True


class TranscriptionResult(BaseModel):
    """Transcript plus the playbook the analysis service derived from it"""

    transcript: str
    confidence: int = 0
    playbook_data: Dict[str, Any] = Field(default_factory=dict)
    source: Literal["remote", "mock"] = "remote"


class VoiceRecordingState(BaseModel):
    is_recording: bool = False
    is_processing: bool = False
    transcript: str = ""
    confidence: int = 0
    error: Optional[str] = None
    audio_size: Optional[int] = None
    audio_filename: Optional[str] = None
    source: Optional[Literal["remote", "mock"]] = None


class NegotiationProgress(BaseModel):
    """Snapshot of the negotiation animation shown during step 4"""

    current_step: str = ""
    progress: int = 0
    suppliers_contacted: int = 0
    responses_received: int = 0
    active_negotiations: int = 0
    completed_deals: int = 0
    estimated_time_remaining: str = ""
    status_messages: List[str] = Field(default_factory=list)
    stage_index: int = -1


class NegotiationOutcome(BaseModel):
    """
    Normalised result of a negotiation.

    A reached deal always carries price, payment terms, warranty and delivery.
    Anything else is reported as NO_DEAL_REACHED with a reason.
    """

    status: Literal["DEAL_REACHED", "NO_DEAL_REACHED"]
    price: Optional[str] = None
    payment_terms: Optional[str] = None
    warranty: Optional[str] = None
    delivery: Optional[str] = None
    maintenance_services: Optional[str] = None
    additional_terms: Optional[str] = None
    reason: Optional[str] = None

    @property
    def deal_reached(self) -> bool:
        return self.status == "DEAL_REACHED"


class NegotiationData(BaseModel):
    """Everything the wizard has collected so far"""

    step: WizardStep = WizardStep.VOICE_INPUT
    voice_input: Optional[str] = None
    text_input: Optional[str] = None
    apply_standard_terms: bool = True
    requirements: List[ContractPosition] = Field(default_factory=list)
    playbook_data: Optional[Dict[str, Any]] = None
    negotiation_result: Optional[NegotiationOutcome] = None
    deal_decision: DealDecision = DealDecision.PENDING

    @field_validator("step", mode="before")
    @classmethod
    def _coerce_step(cls, value):
        return WizardStep(int(value))


# ============================================================================
# Response normalisation
# ============================================================================

DEAL_REQUIRED_FIELDS = ("price", "payment_terms", "warranty", "delivery")
DEAL_OPTIONAL_FIELDS = ("maintenance_services", "additional_terms")


def normalize_negotiation_response(payload: Any) -> NegotiationOutcome:
    """
    Turn a raw negotiation service payload into a NegotiationOutcome.

    Raises:
        NegotiationResponseError: If the payload is not an object, or a
            DEAL_REACHED payload misses one of the required deal fields
    """
    if not isinstance(payload, dict):
        raise NegotiationResponseError(
            f"Negotiation response must be an object, got {type(payload).__name__}"
        )

    status = payload.get("status")

    if status == "DEAL_REACHED":
        missing = [
            name for name in DEAL_REQUIRED_FIELDS
            if not isinstance(payload.get(name), str) or not payload.get(name).strip()
        ]
        if missing:
            raise NegotiationResponseError(
                f"DEAL_REACHED response missing required fields: {', '.join(missing)}"
            )

        deal = {name: payload[name] for name in DEAL_REQUIRED_FIELDS}
        for name in DEAL_OPTIONAL_FIELDS:
            if payload.get(name):
                deal[name] = str(payload[name])
        return NegotiationOutcome(status="DEAL_REACHED", **deal)

    reason = payload.get("reason") or payload.get("message") or payload.get("detail")
    if not isinstance(reason, str) or not reason.strip():
        reason = f"Negotiation ended without a deal (status: {status or 'unknown'})"

    return NegotiationOutcome(status="NO_DEAL_REACHED", reason=reason)
