"""
Local transcription fallback used when the transcription service cannot be reached
"""

import asyncio
import logging
import zlib
from typing import Any, Dict, List, Optional

from ..config.configuration_service import ConfigurationService, get_config_service
from ...models.negotiation import TranscriptionResult

logger = logging.getLogger(__name__)


class MockTranscriptionService:
    """
    Serves canned transcripts with their buyer playbooks.

    Selection is derived from the audio bytes, so the same recording always
    produces the same transcript.
    """

    def __init__(
        self,
        config_service: Optional[ConfigurationService] = None,
        delay_seconds: Optional[float] = None,
    ):
        self.config_service = config_service or get_config_service()
        self._responses: List[Dict[str, Any]] = self.config_service.get_mock_transcriptions()
        if delay_seconds is None:
            delay_seconds = float(self.config_service.get_transcription_config().get("mock_delay_seconds", 1.0))
        self.delay_seconds = delay_seconds

    def _to_result(self, response: Dict[str, Any]) -> TranscriptionResult:
        return TranscriptionResult(
            transcript=response["transcript"],
            confidence=int(response.get("confidence", 0)),
            playbook_data=response.get("playbook_data", {}),
            source="mock",
        )

    def get_specific_response(self, index: int) -> TranscriptionResult:
        """Return the response at index (wrapping around)."""
        if not self._responses:
            raise ValueError("No mock transcriptions configured")
        return self._to_result(self._responses[index % len(self._responses)])

    async def transcribe(self, audio: bytes) -> TranscriptionResult:
        """
        Produce a transcript for the given audio.

        Raises:
            ValueError: If the audio is empty or no responses are configured
        """
        if not audio:
            raise ValueError("Cannot transcribe empty audio")
        if not self._responses:
            raise ValueError("No mock transcriptions configured")

        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

        index = zlib.crc32(audio) % len(self._responses)
        result = self.get_specific_response(index)
        logger.info(
            f"Mock transcription #{index} served "
            f"(product_type={result.playbook_data.get('product_type', 'unknown')}, confidence={result.confidence})"
        )
        return result
