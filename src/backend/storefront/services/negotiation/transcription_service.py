"""
Transcription Service

Sends recorded audio to the transcription/analysis service and returns the
transcript together with the buyer playbook derived from it.

Call policy (wizard_config.json → transcription):
- 60 s timeout per attempt
- Up to 2 retries with linear backoff (backoff_seconds × attempt number)
- Falls back to the local mock transcription after the last failed attempt
- Offline clients skip the remote call entirely
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from ..config.configuration_service import ConfigurationService, get_config_service
from .mock_transcription import MockTranscriptionService
from ...models.negotiation import TranscriptionResult, TranscriptionUnavailableError

logger = logging.getLogger(__name__)


def parse_transcription_payload(payload: Any) -> TranscriptionResult:
    """
    Parse the service response `[transcript, {"result": playbook}]`.

    Raises:
        ValueError: If the payload does not have that shape or the transcript is empty
    """
    if not isinstance(payload, (list, tuple)) or len(payload) < 2:
        raise ValueError("Transcription response must be a [transcript, analysis] pair")

    transcript, analysis = payload[0], payload[1]
    if not isinstance(transcript, str) or not transcript.strip():
        raise ValueError("Transcription response contains no transcript")
    if not isinstance(analysis, dict):
        raise ValueError("Transcription analysis must be an object")

    playbook = analysis.get("result") or {}
    if not isinstance(playbook, dict):
        raise ValueError("Transcription playbook must be an object")

    return TranscriptionResult(
        transcript=transcript.strip(),
        confidence=int(analysis.get("confidence", 100)),
        playbook_data=playbook,
        source="remote",
    )


class TranscriptionService:
    """Remote transcription with bounded retries and a local fallback"""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        config_service: Optional[ConfigurationService] = None,
        mock_service: Optional[MockTranscriptionService] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.http_client = http_client
        self.config_service = config_service or get_config_service()
        self.mock_service = mock_service or MockTranscriptionService(self.config_service)
        self._sleep = sleep

        policy = self.config_service.get_transcription_config()
        self.url = self.config_service.get_negotiation_api_base_url() + policy.get("path", "/api/transcribe")
        self.timeout = float(policy.get("timeout_seconds", 60))
        self.max_retries = int(policy.get("max_retries", 2))
        self.backoff_seconds = float(policy.get("backoff_seconds", 1))
        self.buyer_id = self.config_service.get_buyer_id()

    async def _request(self, audio: bytes, filename: str, content_type: str) -> TranscriptionResult:
        response = await self.http_client.post(
            self.url,
            files={"file": (filename, audio, content_type)},
            data={"buyer_id": str(self.buyer_id)},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return parse_transcription_payload(response.json())

    async def transcribe(
        self,
        audio: bytes,
        filename: str = "recording.wav",
        content_type: str = "audio/wav",
        offline: bool = False,
    ) -> TranscriptionResult:
        """
        Transcribe audio, falling back to the local mock when the service fails.

        Raises:
            TranscriptionUnavailableError: If the fallback cannot produce a transcript either
        """
        if offline:
            logger.info("Client offline, using local transcription")
        else:
            attempts = self.max_retries + 1
            for attempt in range(attempts):
                try:
                    result = await self._request(audio, filename, content_type)
                    logger.info(f"Transcription succeeded on attempt {attempt + 1}/{attempts}")
                    return result
                except (httpx.HTTPError, ValueError) as e:
                    logger.warning(f"Transcription attempt {attempt + 1}/{attempts} failed: {e}")
                    if attempt < self.max_retries:
                        await self._sleep(self.backoff_seconds * (attempt + 1))

            logger.warning("Transcription service unavailable, using local transcription")

        try:
            return await self.mock_service.transcribe(audio)
        except ValueError as e:
            logger.error(f"Local transcription failed: {e}")
            raise TranscriptionUnavailableError(
                "Voice processing failed. Please try again or use text input."
            ) from e
