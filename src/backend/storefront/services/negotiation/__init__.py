"""Negotiation services - transcription, negotiation call, progress animation and the wizard controller"""

from .mock_transcription import MockTranscriptionService
from .mock_negotiation import MockNegotiationService
from .transcription_service import TranscriptionService, parse_transcription_payload
from .negotiation_service import NegotiationService
from .progress_simulator import ProgressSimulator
from .wizard import NegotiationWizard, MICROPHONE_DENIED_MESSAGE
from .registry import WizardRegistry

__all__ = [
    "MockTranscriptionService",
    "MockNegotiationService",
    "TranscriptionService",
    "parse_transcription_payload",
    "NegotiationService",
    "ProgressSimulator",
    "NegotiationWizard",
    "MICROPHONE_DENIED_MESSAGE",
    "WizardRegistry",
]
